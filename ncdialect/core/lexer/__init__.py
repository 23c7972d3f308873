"""
G-Code line classifier module.
"""

from .tokens import (
    ClassifiedLine,
    LineCategory,
    MotionType,
    CATEGORY_ADDRESSES,
    get_addresses,
)
from .lexer import (
    LexerPatterns,
    carried_motion,
    classify,
    classify_line,
    extract_words,
    parse_number,
    split_words,
    strip_comments,
)

__all__ = [
    # Line types
    "ClassifiedLine",
    "LineCategory",
    "MotionType",
    "CATEGORY_ADDRESSES",
    "get_addresses",
    # Classifier
    "LexerPatterns",
    "carried_motion",
    "classify",
    "classify_line",
    "extract_words",
    "parse_number",
    "split_words",
    "strip_comments",
]
