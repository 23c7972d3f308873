"""
Line categories and address tables for G-code line classification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional


class LineCategory(Enum):
    """Category of a single source line."""

    # Layout
    BLANK = auto()
    COMMENT = auto()             # (comment) or ; comment
    PROGRAM_DELIMITER = auto()   # %
    PROGRAM_NUMBER = auto()      # O1000

    # Motion (Group 01)
    RAPID = auto()               # G00
    LINEAR = auto()              # G01
    ARC_CW = auto()              # G02
    ARC_CCW = auto()             # G03

    # Auxiliary
    TOOL_CHANGE = auto()         # T.. M06
    SPINDLE_CW = auto()          # M03
    SPINDLE_CCW = auto()         # M04

    # Cutter radius compensation (Group 07)
    COMP_LEFT = auto()           # G41
    COMP_RIGHT = auto()          # G42
    COMP_CANCEL = auto()         # G40

    PROGRAM_END = auto()         # M02 / M30
    UNRECOGNIZED = auto()

    @property
    def is_motion(self) -> bool:
        return self in MOTION_CATEGORIES


class MotionType(Enum):
    """Motion subtype of a motion line."""
    RAPID = "rapid"
    LINEAR = "linear"
    ARC_CW = "arc_cw"
    ARC_CCW = "arc_ccw"


MOTION_CATEGORIES = frozenset({
    LineCategory.RAPID,
    LineCategory.LINEAR,
    LineCategory.ARC_CW,
    LineCategory.ARC_CCW,
})


# G-code to category mapping (motion and cutter compensation)
G_CODE_CATEGORIES: dict[int, LineCategory] = {
    0: LineCategory.RAPID,
    1: LineCategory.LINEAR,
    2: LineCategory.ARC_CW,
    3: LineCategory.ARC_CCW,
    40: LineCategory.COMP_CANCEL,
    41: LineCategory.COMP_LEFT,
    42: LineCategory.COMP_RIGHT,
}

# M-code to category mapping
M_CODE_CATEGORIES: dict[int, LineCategory] = {
    2: LineCategory.PROGRAM_END,
    3: LineCategory.SPINDLE_CW,
    4: LineCategory.SPINDLE_CCW,
    30: LineCategory.PROGRAM_END,
}

TOOL_CHANGE_M_CODE = 6

CATEGORY_TO_MOTION: dict[LineCategory, MotionType] = {
    LineCategory.RAPID: MotionType.RAPID,
    LineCategory.LINEAR: MotionType.LINEAR,
    LineCategory.ARC_CW: MotionType.ARC_CW,
    LineCategory.ARC_CCW: MotionType.ARC_CCW,
}

MOTION_TO_CATEGORY: dict[MotionType, LineCategory] = {
    motion: category for category, motion in CATEGORY_TO_MOTION.items()
}


# Addresses extracted for each category; everything else on the line is ignored
_LINEAR_ADDRESSES = ("X", "Y", "Z", "F")
_ARC_ADDRESSES = ("X", "Y", "Z", "I", "J", "R", "F")

CATEGORY_ADDRESSES: dict[LineCategory, tuple[str, ...]] = {
    LineCategory.RAPID: _LINEAR_ADDRESSES,
    LineCategory.LINEAR: _LINEAR_ADDRESSES,
    LineCategory.ARC_CW: _ARC_ADDRESSES,
    LineCategory.ARC_CCW: _ARC_ADDRESSES,
    LineCategory.TOOL_CHANGE: ("T", "S"),
    LineCategory.SPINDLE_CW: ("S",),
    LineCategory.SPINDLE_CCW: ("S",),
}


def get_addresses(category: LineCategory) -> tuple[str, ...]:
    """Get the addresses relevant to a line category."""
    return CATEGORY_ADDRESSES.get(category, ())


@dataclass(frozen=True)
class ClassifiedLine:
    """A source line with its category and extracted address values."""
    text: str
    line_number: int
    category: LineCategory
    words: dict[str, float] = field(default_factory=dict)
    motion: Optional[MotionType] = None
    block_number: Optional[int] = None  # Existing N word
    compensation: Optional[LineCategory] = None  # G40/G41/G42 riding on a motion line
    warnings: tuple[str, ...] = ()
    well_formed: bool = True  # Every word is address letter + number

    @property
    def stripped(self) -> str:
        return self.text.strip()

    def has(self, address: str) -> bool:
        return address in self.words

    def get(self, address: str) -> Optional[float]:
        return self.words.get(address)

    def __repr__(self) -> str:
        return f"ClassifiedLine({self.category.name}, {self.words!r}, L{self.line_number})"
