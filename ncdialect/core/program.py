"""
Program containers: source text, emitted instructions, translation state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from .config import Dialect
from .lexer import LineCategory, MotionType


@dataclass(frozen=True)
class SourceProgram:
    """Ordered, immutable sequence of raw source lines."""
    lines: tuple[str, ...] = ()

    @classmethod
    def from_text(cls, text: str) -> "SourceProgram":
        """Split text on CR, LF or CRLF."""
        return cls(tuple(text.splitlines()))

    @classmethod
    def coerce(cls, source: "SourceProgram | str") -> "SourceProgram":
        if isinstance(source, cls):
            return source
        if isinstance(source, str):
            return cls.from_text(source)
        raise TypeError(f"Expected SourceProgram or str, got {type(source).__name__}")

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def non_empty_count(self) -> int:
        return sum(1 for line in self.lines if line.strip())


class DiagnosticKind(Enum):
    """Diagnostic classification."""
    MALFORMED_NUMERIC = "malformed_numeric"
    LIMIT_VIOLATION = "limit_violation"
    STRUCTURE = "structure"
    SEQUENCE = "sequence"


@dataclass(frozen=True)
class Diagnostic:
    """
    A line-indexed warning or error.
    origin is "source" when line refers to the source program and
    "output" when it refers to the translated program text.
    """
    line: int
    message: str
    kind: DiagnosticKind
    origin: str = "output"

    def __str__(self) -> str:
        where = "Source line" if self.origin == "source" else "Line"
        return f"{where} {self.line}: {self.message}"


@dataclass(frozen=True)
class ModalState:
    """Motion command carried between lines when modal tracking is on."""
    motion: Optional[MotionType] = None


@dataclass(frozen=True)
class TranslationState:
    """
    Running per-translation counters.
    Every step takes a state and returns a new one; nothing is mutated.
    """
    next_block: int
    tool_calls: int = 0
    end_emitted: bool = False
    wrapped: int = 0
    modal: ModalState = field(default_factory=ModalState)
    # Header lines deferred until after the source's own leading %
    after_delimiter: tuple[str, ...] = ()

    def evolve(self, **changes) -> "TranslationState":
        return replace(self, **changes)


@dataclass(frozen=True)
class EmittedInstruction:
    """Output lines produced for one source line."""
    source_line: Optional[int]
    category: LineCategory
    lines: tuple[str, ...]
    block_number: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.lines:
            raise ValueError("An emitted instruction needs at least one output line")


@dataclass(frozen=True)
class TranslatedProgram:
    """Header, emitted body and footer of a translated program."""
    dialect: Dialect
    header: tuple[str, ...] = ()
    body: tuple[EmittedInstruction, ...] = ()
    footer: tuple[str, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def body_lines(self) -> list[str]:
        return [line for instruction in self.body for line in instruction.lines]

    @property
    def lines(self) -> list[str]:
        return [*self.header, *self.body_lines, *self.footer]

    @property
    def body_range(self) -> range:
        """0-based indexes of body lines within lines."""
        start = len(self.header)
        return range(start, start + len(self.body_lines))

    @property
    def text(self) -> str:
        lines = self.lines
        return "\n".join(lines) + "\n" if lines else ""

    @property
    def block_numbers(self) -> list[int]:
        return [i.block_number for i in self.body if i.block_number is not None]

    def __str__(self) -> str:
        return self.text
