"""
Defines the abstract base class for a target dialect emitter.

An emitter maps each classified source line to one EmittedInstruction and
wraps the body with the dialect's header and footer. All running counters
live in a TranslationState that is passed in and returned by every step.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from ..core.config import Dialect, MachineParameters
from ..core.lexer import ClassifiedLine, LineCategory, carried_motion, classify_line
from ..core.program import (
    Diagnostic,
    DiagnosticKind,
    EmittedInstruction,
    ModalState,
    SourceProgram,
    TranslatedProgram,
    TranslationState,
)
from ..core.sequencer import BlockSequencer

logger = logging.getLogger(__name__)


class DialectEmitter(ABC):
    """Base class for dialect emitters."""

    dialect: Dialect

    def __init__(self, params: MachineParameters):
        if params.dialect is not self.dialect:
            raise ValueError(
                f"{type(self).__name__} needs {self.dialect.value} parameters, "
                f"got {params.dialect.value}"
            )
        self.params = params
        self.sequencer = BlockSequencer(params)

    # ------------------------------------------------------------------
    # Dialect hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def header(
        self, source: SourceProgram, state: TranslationState
    ) -> tuple[list[str], TranslationState]:
        """Lines placed before the body."""

    @abstractmethod
    def emit(
        self, line: ClassifiedLine, state: TranslationState
    ) -> tuple[EmittedInstruction, TranslationState]:
        """Map one classified line to output lines."""

    @abstractmethod
    def footer(
        self, state: TranslationState, body: list[EmittedInstruction]
    ) -> tuple[list[str], TranslationState]:
        """
        Lines placed after the body.
        May replace a trailing instruction of body in place when the
        closing lines belong before it (a source's own closing marker).
        """

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    def numbered(
        self, line: ClassifiedLine, content: str, state: TranslationState
    ) -> tuple[EmittedInstruction, TranslationState]:
        """Emit content under the next block identifier."""
        number, state = self.sequencer.assign(state)
        instruction = EmittedInstruction(
            line.line_number, line.category, (self.sequencer.label(number, content),), number
        )
        return instruction, state

    @staticmethod
    def unnumbered(line: ClassifiedLine, content: str) -> EmittedInstruction:
        return EmittedInstruction(line.line_number, line.category, (content,))

    # ------------------------------------------------------------------
    # Translation
    # ------------------------------------------------------------------

    def classify(self, text: str, line_number: int, state: TranslationState) -> ClassifiedLine:
        modal_motion = state.modal.motion if self.params.modal_tracking else None
        return classify_line(text, line_number, modal_motion)

    def translate(self, source: SourceProgram | str) -> TranslatedProgram:
        """Translate a whole source program."""
        source = SourceProgram.coerce(source)
        state = self.sequencer.initial_state()
        diagnostics: list[Diagnostic] = []

        header, state = self.header(source, state)

        body: list[EmittedInstruction] = []
        for line_number, text in enumerate(source.lines, 1):
            line = self.classify(text, line_number, state)
            for warning in line.warnings:
                diagnostics.append(
                    Diagnostic(line_number, warning, DiagnosticKind.MALFORMED_NUMERIC, "source")
                )

            wrapped = state.wrapped
            instruction, state = self.emit(line, state)
            if state.wrapped > wrapped:
                diagnostics.append(Diagnostic(
                    line_number,
                    f"Block numbers exceeded {self.params.max_block_number} and restarted "
                    f"at {self.params.block_start}",
                    DiagnosticKind.SEQUENCE,
                    "source",
                ))
            if self.params.modal_tracking:
                state = state.evolve(modal=ModalState(carried_motion(state.modal.motion, line)))
            if line.category is LineCategory.UNRECOGNIZED:
                logger.debug("L%d: unrecognized line preserved: %r", line_number, text)
            body.append(instruction)

        footer, state = self.footer(state, body)

        logger.info(
            "Translated %d source lines to %s (%d instructions, %d tool calls, %d diagnostics)",
            len(source), self.dialect.value, len(body), state.tool_calls, len(diagnostics),
        )
        return TranslatedProgram(
            dialect=self.dialect,
            header=tuple(header),
            body=tuple(body),
            footer=tuple(footer),
            diagnostics=tuple(diagnostics),
        )
