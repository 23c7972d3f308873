"""
Numeric-block (ISO / Fanuc style) dialect emitter.

The G/M-code structure of every line is kept. The emitter only adds what
the controller needs around it: the % tape markers and the O program number,
N block numbers, and an M30 end block when the source has none.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Optional

from ..core.config import Dialect
from ..core.lexer import ClassifiedLine, LineCategory, classify_line
from ..core.program import EmittedInstruction, SourceProgram, TranslationState
from ..core.sequencer import format_value
from .base import DialectEmitter

PROGRAM_END_BLOCK = "M30 (PROGRAM END)"
TAPE_MARKER = "%"

# Axis-valued words rewritten when the controller uses implied decimals
_AXIS_WORD = re.compile(r"(?<![A-Za-z])([XYZIJKR])\s*([+-]?(?:\d+\.?\d*|\.\d+))", re.IGNORECASE)
_COMMENT_START = re.compile(r"[(;]")


def _first_code_line(source: SourceProgram) -> str:
    return next((line.strip() for line in source.lines if line.strip()), "")


def _closing_marker(body: list[EmittedInstruction]) -> Optional[int]:
    """Index of a trailing % that closes a %-opened body, else None."""
    delimiters = [
        i for i, instruction in enumerate(body)
        if instruction.category is LineCategory.PROGRAM_DELIMITER
    ]
    if len(delimiters) < 2:
        return None
    last = delimiters[-1]
    if any(instruction.category is not LineCategory.BLANK for instruction in body[last + 1:]):
        return None
    return last


class NumericBlockEmitter(DialectEmitter):
    """Numeric-block emitter."""

    dialect = Dialect.NUMERIC_BLOCK

    # ------------------------------------------------------------------
    # Header / footer
    # ------------------------------------------------------------------

    def setup_block(self) -> list[str]:
        """Modal setup written after the program number."""
        params = self.params
        blocks = [
            "G21 (MM)" if params.use_mm else "G20 (INCH)",
            "G90 G17 (ABSOLUTE XY PLANE)",
            f"{params.work_offset} (WORK OFFSET)",
        ]
        if params.high_speed_mode:
            blocks.append("G05.1 Q1 (HIGH SPEED MODE ON)")
        if params.coolant == "flood":
            blocks.append("M8 (COOLANT FLOOD)")
        elif params.coolant == "mist":
            blocks.append("M7 (COOLANT MIST)")
        return blocks

    def header(
        self, source: SourceProgram, state: TranslationState
    ) -> tuple[list[str], TranslationState]:
        lines: list[str] = []
        has_program_number = any(
            classify_line(text).category is LineCategory.PROGRAM_NUMBER for text in source.lines
        )
        if not has_program_number:
            lines.append(self.params.program_number)
        if self.params.include_setup_block:
            for content in self.setup_block():
                number, state = self.sequencer.assign(state)
                lines.append(self.sequencer.label(number, content))

        if _first_code_line(source).startswith(TAPE_MARKER):
            # Program number and setup go after the source's own start marker
            return [], state.evolve(after_delimiter=tuple(lines))
        return [TAPE_MARKER, *lines], state

    def mode_off_blocks(self, state: TranslationState) -> tuple[list[str], TranslationState]:
        """Blocks undoing setup modes, written before the program end."""
        if not (self.params.include_setup_block and self.params.high_speed_mode):
            return [], state
        number, state = self.sequencer.assign(state)
        return [self.sequencer.label(number, "G05.1 Q0 (HIGH SPEED MODE OFF)")], state

    def footer(
        self, state: TranslationState, body: list[EmittedInstruction]
    ) -> tuple[list[str], TranslationState]:
        lines: list[str] = []
        if not state.end_emitted:
            lines, state = self.mode_off_blocks(state)
            number, state = self.sequencer.assign(state)
            lines.append(self.sequencer.label(number, PROGRAM_END_BLOCK))

            closing = _closing_marker(body)
            if closing is not None:
                # End blocks go inside the source's own closing marker
                marker = body[closing]
                body[closing] = EmittedInstruction(
                    marker.source_line, marker.category, (*lines, *marker.lines), number
                )
                return [], state

        emitted = [line for instruction in body for line in instruction.lines] + lines
        last = next((line.strip() for line in reversed(emitted) if line.strip()), "")
        if last != TAPE_MARKER:
            lines.append(TAPE_MARKER)
        return lines, state

    # ------------------------------------------------------------------
    # Body
    # ------------------------------------------------------------------

    def format_code(self, text: str) -> str:
        """Apply number formatting to the code part of a line."""
        text = text.strip()
        if self.params.use_decimal_point:
            return text
        match = _COMMENT_START.search(text)
        split = match.start() if match else len(text)
        code = _AXIS_WORD.sub(
            lambda m: f"{m.group(1).upper()}{format_value(float(m.group(2)), False)}",
            text[:split],
        )
        return code + text[split:]

    @staticmethod
    def annotate(text: str) -> str:
        """Wrap an unrecognized line in a comment block."""
        inner = text.strip().replace("(", "[").replace(")", "]")
        return f"(UNRECOGNIZED: {inner})"

    def emit(
        self, line: ClassifiedLine, state: TranslationState
    ) -> tuple[EmittedInstruction, TranslationState]:
        category = line.category

        if category is LineCategory.PROGRAM_DELIMITER:
            lines = (line.text, *state.after_delimiter)
            instruction = EmittedInstruction(line.line_number, category, lines)
            return instruction, state.evolve(after_delimiter=())

        if category in (LineCategory.BLANK, LineCategory.COMMENT, LineCategory.PROGRAM_NUMBER):
            return self.unnumbered(line, line.text), state

        mode_off: list[str] = []
        if category is LineCategory.PROGRAM_END:
            mode_off, state = self.mode_off_blocks(state)
            state = state.evolve(end_emitted=True)
        elif category is LineCategory.TOOL_CHANGE:
            state = state.evolve(tool_calls=state.tool_calls + 1)

        if line.block_number is not None:
            # Already numbered: pass through and keep later numbers above it
            state = self.sequencer.observe(line.block_number, state)
            instruction = EmittedInstruction(
                line.line_number, category, (line.text,), line.block_number
            )
        elif category is LineCategory.UNRECOGNIZED and not line.well_formed:
            return self.unnumbered(line, self.annotate(line.text)), state
        else:
            instruction, state = self.numbered(line, self.format_code(line.text), state)

        if mode_off:
            instruction = replace(instruction, lines=(*mode_off, *instruction.lines))
        return instruction, state
