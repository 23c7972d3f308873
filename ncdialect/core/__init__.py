from ncdialect.core.config import ConfigError, Dialect, MachineParameters
from ncdialect.core.program import SourceProgram, TranslatedProgram
from ncdialect.core.validator import ValidationReport, validate

__all__ = [
    "ConfigError",
    "Dialect",
    "MachineParameters",
    "SourceProgram",
    "TranslatedProgram",
    "ValidationReport",
    "validate",
]
