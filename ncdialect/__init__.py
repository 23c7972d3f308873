"""
ncdialect - G-code dialect translation and validation.
"""

from ncdialect.core.config import ConfigError, Dialect, MachineParameters
from ncdialect.core.lexer import LineCategory, classify_line
from ncdialect.core.program import (
    Diagnostic,
    DiagnosticKind,
    SourceProgram,
    TranslatedProgram,
)
from ncdialect.core.validator import MachiningStatistics, ValidationReport
from ncdialect.engine import get_emitter, process, translate, validate

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "Diagnostic",
    "DiagnosticKind",
    "Dialect",
    "LineCategory",
    "MachineParameters",
    "MachiningStatistics",
    "SourceProgram",
    "TranslatedProgram",
    "ValidationReport",
    "classify_line",
    "get_emitter",
    "process",
    "translate",
    "validate",
]
