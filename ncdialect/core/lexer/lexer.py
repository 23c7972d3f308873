"""
G-Code line classifier and numeric extractor.

Each line is categorised on its own: the dominant command decides the
category (motion first), and only the addresses relevant to that category
are extracted. Nothing here raises on malformed program text; problems are
attached to the ClassifiedLine as warning strings.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from .tokens import (
    CATEGORY_TO_MOTION,
    ClassifiedLine,
    G_CODE_CATEGORIES,
    LineCategory,
    M_CODE_CATEGORIES,
    MOTION_TO_CATEGORY,
    MotionType,
    TOOL_CHANGE_M_CODE,
    get_addresses,
)

logger = logging.getLogger(__name__)


# Regex patterns for line recognition
class LexerPatterns:
    """Regular expression patterns for word recognition."""

    # Parenthesized comment; an unclosed paren runs to end of line
    PAREN_COMMENT = re.compile(r"\([^)]*\)?")

    # Semicolon comment runs to end of line
    SEMI_COMMENT = re.compile(r";.*$")

    # Word: address letter + raw value (validated separately)
    WORD = re.compile(r"([A-Za-z])\s*([^A-Za-z\s(;]*)")

    # Numbers: signed integer or decimal
    NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)")

    # Known address letters
    ADDRESSES = frozenset("GMXYZABCUVWIJKRFSTHDLPQNOE")

    AXES = ("X", "Y", "Z")


def strip_comments(text: str) -> str:
    """Remove parenthesized and semicolon comments from a line."""
    code = LexerPatterns.PAREN_COMMENT.sub(" ", text)
    return LexerPatterns.SEMI_COMMENT.sub("", code)


def split_words(code: str) -> tuple[list[tuple[str, str]], bool]:
    """
    Split comment-free code into (letter, raw value) pairs.
    Returns the pairs and whether every character belonged to a word.
    """
    words: list[tuple[str, str]] = []
    clean = True
    pos = 0
    while pos < len(code):
        if code[pos].isspace():
            pos += 1
            continue
        match = LexerPatterns.WORD.match(code, pos)
        if match is None:
            clean = False
            pos += 1
            continue
        words.append((match.group(1).upper(), match.group(2)))
        pos = match.end()
    return words, clean


def parse_number(raw: str) -> Optional[float]:
    """Parse a raw word value; None when it is not a plain number."""
    if LexerPatterns.NUMBER.fullmatch(raw) is None:
        return None
    return float(raw)


def _code_numbers(words: list[tuple[str, str]], letter: str) -> list[float]:
    values = []
    for address, raw in words:
        if address == letter:
            value = parse_number(raw)
            if value is not None:
                values.append(value)
    return values


def _as_int(value: float) -> Optional[int]:
    return int(value) if float(value).is_integer() else None


def extract_words(
    words: list[tuple[str, str]],
    category: LineCategory,
) -> tuple[dict[str, float], list[str]]:
    """
    Extract the addresses relevant to a category.
    Absent addresses stay absent; malformed values are dropped with a warning.
    """
    values: dict[str, float] = {}
    warnings: list[str] = []
    for address in get_addresses(category):
        for letter, raw in words:
            if letter != address:
                continue
            value = parse_number(raw)
            if value is None:
                warnings.append(f"Malformed {address} value '{raw}' ignored")
            else:
                values[address] = value
            break
    return values, warnings


def _is_well_formed(words: list[tuple[str, str]], clean: bool) -> bool:
    if not clean or not words:
        return False
    return all(
        letter in LexerPatterns.ADDRESSES and parse_number(raw) is not None
        for letter, raw in words
    )


def _dominant_category(
    words: list[tuple[str, str]],
    modal_motion: Optional[MotionType],
) -> tuple[LineCategory, Optional[LineCategory], bool]:
    """
    Decide the dominant category of a line.
    Returns (category, compensation riding on a motion line, motion inferred).
    """
    g_codes = [g for g in map(_as_int, _code_numbers(words, "G")) if g is not None]
    m_codes = [m for m in map(_as_int, _code_numbers(words, "M")) if m is not None]

    found = [G_CODE_CATEGORIES[g] for g in g_codes if g in G_CODE_CATEGORIES]
    motions = [c for c in found if c.is_motion]
    compensation = next((c for c in found if not c.is_motion), None)

    if motions:
        # Last motion word wins when a block carries several
        return motions[-1], compensation, False

    has_axis = any(letter in LexerPatterns.AXES for letter, _ in words)
    if modal_motion is not None and has_axis and not g_codes and not m_codes:
        return MOTION_TO_CATEGORY[modal_motion], None, True

    letters = {letter for letter, _ in words}
    if "T" in letters and TOOL_CHANGE_M_CODE in m_codes:
        return LineCategory.TOOL_CHANGE, None, False

    m_found = [M_CODE_CATEGORIES[m] for m in m_codes if m in M_CODE_CATEGORIES]
    for category in (LineCategory.SPINDLE_CW, LineCategory.SPINDLE_CCW):
        if category in m_found:
            return category, None, False

    for category in (LineCategory.COMP_LEFT, LineCategory.COMP_RIGHT, LineCategory.COMP_CANCEL):
        if category in found:
            return category, None, False

    if LineCategory.PROGRAM_END in m_found:
        return LineCategory.PROGRAM_END, None, False

    return LineCategory.UNRECOGNIZED, None, False


def classify_line(
    text: str,
    line_number: int = 1,
    modal_motion: Optional[MotionType] = None,
) -> ClassifiedLine:
    """
    Classify one raw source line.

    modal_motion is the motion command in force from earlier lines; it is
    only used to infer the motion of axis-only lines when modal tracking
    is enabled by the caller.
    """
    stripped = text.strip()
    if not stripped:
        return ClassifiedLine(text, line_number, LineCategory.BLANK)
    if stripped.startswith("%"):
        return ClassifiedLine(text, line_number, LineCategory.PROGRAM_DELIMITER)

    code = strip_comments(stripped).strip()
    if not code:
        return ClassifiedLine(text, line_number, LineCategory.COMMENT)

    # Block delete character
    if code.startswith("/"):
        code = code[1:]

    words, clean = split_words(code)
    well_formed = _is_well_formed(words, clean)

    block_number = None
    if words and words[0][0] == "N":
        value = parse_number(words[0][1])
        if value is not None and value >= 0:
            block_number = _as_int(value)
        words = words[1:]

    if words and words[0][0] == "O" and parse_number(words[0][1]) is not None:
        return ClassifiedLine(
            text, line_number, LineCategory.PROGRAM_NUMBER,
            block_number=block_number, well_formed=well_formed,
        )

    category, compensation, inferred = _dominant_category(words, modal_motion)
    values, warnings = extract_words(words, category)
    if inferred:
        logger.debug("L%d: motion %s inferred from modal state", line_number, category.name)

    return ClassifiedLine(
        text=text,
        line_number=line_number,
        category=category,
        words=values,
        motion=CATEGORY_TO_MOTION.get(category),
        block_number=block_number,
        compensation=compensation,
        warnings=tuple(warnings),
        well_formed=well_formed,
    )


def carried_motion(previous: Optional[MotionType], line: ClassifiedLine) -> Optional[MotionType]:
    """Motion command in force after line."""
    return line.motion if line.motion is not None else previous


def classify(text: str, modal_tracking: bool = False) -> list[ClassifiedLine]:
    """
    Convenience function to classify every line of G-code text.
    With modal_tracking the motion command is carried from line to line.
    """
    lines = []
    modal_motion: Optional[MotionType] = None
    for line_number, raw in enumerate(text.splitlines(), 1):
        line = classify_line(raw, line_number, modal_motion if modal_tracking else None)
        modal_motion = carried_motion(modal_motion, line)
        lines.append(line)
    return lines
