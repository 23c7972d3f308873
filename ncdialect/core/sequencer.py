"""
Block numbering and value formatting shared by the dialect emitters.
"""

from __future__ import annotations

import logging

from .config import Dialect, MachineParameters
from .program import TranslationState

logger = logging.getLogger(__name__)


def format_value(value: float, use_decimal_point: bool = True) -> str:
    """
    Format a numeric word value.
    Without decimal point the value is written in implied-decimal form
    (thousandths), e.g. 12.345 -> 12345.
    """
    if not use_decimal_point:
        return str(int(round(value * 1000)))
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.6f}".rstrip("0").rstrip(".")


def format_signed(value: float, use_decimal_point: bool = True) -> str:
    """Format a value with an explicit sign: +10, -5."""
    text = format_value(value, use_decimal_point)
    if text.startswith("-"):
        return text
    return f"+{text}"


class BlockSequencer:
    """
    Assigns strictly increasing block identifiers.
    Identifiers start at block_start and step by block_increment; once the
    next one would exceed max_block_number the sequence restarts at block_start.
    """

    def __init__(self, params: MachineParameters):
        self.params = params
        self.increment = params.block_increment
        self.start = params.block_start
        self.maximum = params.max_block_number
        if params.dialect is Dialect.NUMERIC_BLOCK:
            self.prefix = "N"
            self.width = len(str(self.maximum))
        else:
            self.prefix = ""
            self.width = 0

    def initial_state(self) -> TranslationState:
        return TranslationState(next_block=self.start)

    def assign(self, state: TranslationState) -> tuple[int, TranslationState]:
        """Take the next identifier. Returns (identifier, new state)."""
        number = state.next_block
        wrapped = state.wrapped
        if number > self.maximum:
            logger.debug("Block number %d exceeds %d, wrapping to %d", number, self.maximum, self.start)
            number = self.start
            wrapped += 1
        return number, state.evolve(next_block=number + self.increment, wrapped=wrapped)

    def observe(self, existing: int, state: TranslationState) -> TranslationState:
        """Account for an identifier already present in the source."""
        if existing + self.increment > state.next_block:
            return state.evolve(next_block=existing + self.increment)
        return state

    def format(self, number: int) -> str:
        return f"{self.prefix}{number:0{self.width}d}" if self.width else f"{self.prefix}{number}"

    def label(self, number: int, content: str) -> str:
        """Prefix content with a formatted block identifier."""
        separator = " " if self.params.space_after_address else ""
        return f"{self.format(number)}{separator}{content}"
