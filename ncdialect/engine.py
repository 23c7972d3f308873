"""
Translation entry points.

Picks the emitter for the configured dialect, translates a source program
and validates the result.
"""

from __future__ import annotations

from typing import Optional, Sequence

from .core.config import Dialect, MachineParameters
from .core.program import SourceProgram, TranslatedProgram
from .core.validator import ValidationReport, Validator
from .dialects import ConversationalEmitter, DialectEmitter, NumericBlockEmitter

EMITTERS: dict[Dialect, type[DialectEmitter]] = {
    Dialect.NUMERIC_BLOCK: NumericBlockEmitter,
    Dialect.CONVERSATIONAL: ConversationalEmitter,
}


def get_emitter(params: MachineParameters) -> DialectEmitter:
    """Create the emitter for params.dialect."""
    return EMITTERS[params.dialect](params)


def translate(
    source: SourceProgram | str, params: Optional[MachineParameters] = None
) -> TranslatedProgram:
    """Translate a source program. Defaults to numeric-block parameters."""
    params = params or MachineParameters.numeric_block()
    return get_emitter(params).translate(source)


def validate(
    program: TranslatedProgram,
    params: MachineParameters,
    feed_rates: Optional[Sequence[float]] = None,
    distances: Optional[Sequence[float]] = None,
) -> ValidationReport:
    """Validate an already translated program."""
    return Validator(params).validate(program, feed_rates, distances)


def process(
    source: SourceProgram | str,
    params: Optional[MachineParameters] = None,
    feed_rates: Optional[Sequence[float]] = None,
    distances: Optional[Sequence[float]] = None,
) -> tuple[TranslatedProgram, ValidationReport]:
    """Translate then validate. Returns (program, report)."""
    params = params or MachineParameters.numeric_block()
    program = translate(source, params)
    return program, validate(program, params, feed_rates, distances)
