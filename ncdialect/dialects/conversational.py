"""
Conversational (Heidenhain TNC style) dialect emitter.

Every motion and auxiliary line is rewritten into conversational blocks:

    G0 X10 Y20        ->  10 L X+10 Y+20 FMAX
    G1 X10 Y20 F500   ->  15 L X+10 Y+20 F500
    G2 X5 Y5 I3 J4    ->  20 CR X+5 Y+5 R+5.000
    T3 M6             ->  25 TOOL CALL 3 Z
    M3 S1200          ->  30 M3 S1200
    G41 / G42 / G40   ->  RL / RR / R0
    M30               ->  40 END PGM EXAMPLE MM

Lines without a conversational equivalent are kept as numbered comments.
Conversational blocks always carry decimal millimetre or inch values; the
implied-decimal setting only applies to numeric-block output.
"""

from __future__ import annotations

import math
from typing import Optional

from ..core.config import Dialect
from ..core.lexer import ClassifiedLine, LineCategory
from ..core.program import EmittedInstruction, SourceProgram, TranslationState
from ..core.sequencer import format_signed, format_value
from .base import DialectEmitter

COMPENSATION_CODES = {
    LineCategory.COMP_LEFT: "RL",
    LineCategory.COMP_RIGHT: "RR",
    LineCategory.COMP_CANCEL: "R0",
}

ARC_COMMANDS = {
    LineCategory.ARC_CW: "CR",
    LineCategory.ARC_CCW: "CT",
}


def arc_radius(i: float, j: float) -> float:
    """Arc radius from the centre offsets of the start point."""
    return math.sqrt(i * i + j * j)


class ConversationalEmitter(DialectEmitter):
    """Conversational emitter."""

    dialect = Dialect.CONVERSATIONAL

    # ------------------------------------------------------------------
    # Header / footer
    # ------------------------------------------------------------------

    @property
    def end_block(self) -> str:
        return f"END PGM {self.params.program_name} {self.params.units}"

    def _blank_form(self) -> list[str]:
        p = self.params
        x0, y0, z0 = (format_signed(v) for v in p.blank_min)
        x1, y1, z1 = (format_signed(v) for v in p.blank_max)
        return [
            f"BLK FORM 0.1 Z X{x0} Y{y0} Z{z0}",
            f"BLK FORM 0.2 X{x1} Y{y1} Z{z1}",
        ]

    def header(
        self, source: SourceProgram, state: TranslationState
    ) -> tuple[list[str], TranslationState]:
        p = self.params
        lines = [
            f"BEGIN PGM {p.program_name} {p.units}",
            f"UNIT {p.units}",
            *self._blank_form(),
        ]
        if p.working_plane_monitoring:
            lines.append("FUNCTION TCPM F TCP AXIS POS PATHCTRL AXIS")
        if p.tool_monitoring:
            speed = format_value(p.max_spindle_speed)
            feed = format_value(p.max_feed_rate)
            lines.append(f"TOOL CALL 1 Z S{speed} F{feed}")
        return lines, state

    def footer(
        self, state: TranslationState, body: list[EmittedInstruction]
    ) -> tuple[list[str], TranslationState]:
        if state.end_emitted:
            return [], state
        number, state = self.sequencer.assign(state)
        return [self.sequencer.label(number, self.end_block)], state

    # ------------------------------------------------------------------
    # Field formatting
    # ------------------------------------------------------------------

    def _coord(self, line: ClassifiedLine, address: str) -> Optional[str]:
        value = line.get(address)
        if value is None:
            return None
        return f"{address}{format_signed(value)}"

    def _plain(self, line: ClassifiedLine, address: str) -> Optional[str]:
        value = line.get(address)
        if value is None:
            return None
        return f"{address}{format_value(value)}"

    def _coordinates(self, line: ClassifiedLine) -> list[str]:
        return [f for f in (self._coord(line, a) for a in ("X", "Y", "Z")) if f]

    @staticmethod
    def _join(*fields: Optional[str]) -> str:
        return " ".join(f for f in fields if f)

    # ------------------------------------------------------------------
    # Block builders
    # ------------------------------------------------------------------

    def straight_block(self, line: ClassifiedLine) -> str:
        comp = COMPENSATION_CODES.get(line.compensation) if line.compensation else None
        if line.category is LineCategory.RAPID:
            feed = "FMAX"
        else:
            feed = self._plain(line, "F")
        return self._join("L", *self._coordinates(line), comp, feed)

    def arc_block(self, line: ClassifiedLine) -> str:
        radius = None
        if line.has("I") and line.has("J"):
            radius = arc_radius(line.get("I"), line.get("J"))
        elif line.has("R"):
            radius = abs(line.get("R"))
        radius_field = f"R+{radius:.3f}" if radius is not None else None
        comp = COMPENSATION_CODES.get(line.compensation) if line.compensation else None
        return self._join(
            ARC_COMMANDS[line.category],
            self._coord(line, "X"),
            self._coord(line, "Y"),
            self._coord(line, "Z"),
            radius_field,
            comp,
            self._plain(line, "F"),
        )

    def tool_call_block(self, line: ClassifiedLine) -> str:
        return self._join("TOOL CALL", format_value(line.get("T")), "Z", self._plain(line, "S"))

    def spindle_block(self, line: ClassifiedLine) -> str:
        code = "M3" if line.category is LineCategory.SPINDLE_CW else "M4"
        return self._join(code, self._plain(line, "S"))

    @staticmethod
    def original_comment(text: str) -> str:
        return f"; Original: {text.strip()}"

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def emit(
        self, line: ClassifiedLine, state: TranslationState
    ) -> tuple[EmittedInstruction, TranslationState]:
        category = line.category

        if category in (LineCategory.BLANK, LineCategory.PROGRAM_DELIMITER):
            return self.unnumbered(line, line.text), state

        if category is LineCategory.COMMENT:
            return self.comment(line, state)

        if category in (LineCategory.RAPID, LineCategory.LINEAR):
            return self.numbered(line, self.straight_block(line), state)

        if category in ARC_COMMANDS:
            return self.numbered(line, self.arc_block(line), state)

        if category is LineCategory.TOOL_CHANGE and line.has("T"):
            state = state.evolve(tool_calls=state.tool_calls + 1)
            return self.numbered(line, self.tool_call_block(line), state)

        if category in (LineCategory.SPINDLE_CW, LineCategory.SPINDLE_CCW):
            return self.numbered(line, self.spindle_block(line), state)

        if category in COMPENSATION_CODES:
            return self.numbered(line, COMPENSATION_CODES[category], state)

        if category is LineCategory.PROGRAM_END:
            return self.numbered(line, self.end_block, state.evolve(end_emitted=True))

        # Unrecognized, program number and tool changes without a valid T
        return self.numbered(line, self.original_comment(line.text), state)

    def comment(
        self, line: ClassifiedLine, state: TranslationState
    ) -> tuple[EmittedInstruction, TranslationState]:
        """Comments always consume a block identifier, printed or not."""
        text = line.stripped
        if text.startswith("(") and text.endswith(")"):
            text = text[1:-1]
        elif text.startswith("(") or text.startswith(";"):
            text = text[1:]
        content = f"; {text.strip()}"

        number, state = self.sequencer.assign(state)
        if self.params.end_of_line_comments:
            return EmittedInstruction(line.line_number, line.category, (content,)), state
        labelled = self.sequencer.label(number, content)
        return EmittedInstruction(line.line_number, line.category, (labelled,), number), state
