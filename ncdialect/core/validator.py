"""
Validation of translated programs.

Rescans the emitted text line by line, tracking tool position to collect
machining statistics, and reports limit violations (warnings) and
structural violations (errors). Header and footer lines are only checked
for structure; statistics cover the translated body.

Features:
- Numeric-block and conversational block syntax
- Rapid / cutting distance split, deepest Z
- Feed-based machining time when segment data is supplied, otherwise a
  per-move-type estimate flagged as approximate
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import numpy as np

from .config import Dialect, MachineParameters
from .geometry import arc_length, arc_length_from_radius, linear_length, machining_time
from .lexer import MotionType, parse_number, split_words, strip_comments
from .program import Diagnostic, DiagnosticKind, TranslatedProgram

logger = logging.getLogger(__name__)

# Fallback time per move type, in seconds
LINEAR_MOVE_SECONDS = 2.0
ARC_MOVE_SECONDS = 3.0
TOOL_CHANGE_SECONDS = 10.0

# A rapid ending below this Z after starting above zero is flagged
RAPID_PLUNGE_LIMIT = -10.0

AXES = ("X", "Y", "Z")


@dataclass
class MachiningStatistics:
    """Counts, distances and time collected over the program body."""
    total_blocks: int = 0
    linear_moves: int = 0
    arc_moves: int = 0
    tool_changes: int = 0
    total_rapid_distance: float = 0.0
    total_cutting_distance: float = 0.0
    max_depth: float = 0.0
    estimated_machining_time_seconds: float = 0.0
    time_is_approximate: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalBlocks": self.total_blocks,
            "linearMoves": self.linear_moves,
            "arcMoves": self.arc_moves,
            "toolChanges": self.tool_changes,
            "totalRapidDistance": self.total_rapid_distance,
            "totalCuttingDistance": self.total_cutting_distance,
            "maxDepth": self.max_depth,
            "estimatedMachiningTimeSeconds": self.estimated_machining_time_seconds,
            "timeIsApproximate": self.time_is_approximate,
        }


@dataclass
class ValidationReport:
    """Diagnostics and statistics for one translated program."""
    errors: list[Diagnostic] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)
    statistics: MachiningStatistics = field(default_factory=MachiningStatistics)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        def entry(d: Diagnostic) -> dict[str, Any]:
            return {"line": d.line, "message": d.message, "kind": d.kind.value, "origin": d.origin}

        return {
            "isValid": self.is_valid,
            "errors": [entry(d) for d in self.errors],
            "warnings": [entry(d) for d in self.warnings],
            "statistics": self.statistics.to_dict(),
        }


@dataclass
class ScannedBlock:
    """What the validator needs to know about one emitted line."""
    is_block: bool = False
    motion: Optional[MotionType] = None
    axes: dict[str, float] = field(default_factory=dict)
    center: Optional[tuple[float, float]] = None  # I, J
    radius: Optional[float] = None
    feed: Optional[float] = None
    spindle: Optional[float] = None
    tool_change: bool = False
    is_end: bool = False
    end_misplaced: bool = False


# ============================================================================
# Dialect scanners
# ============================================================================

class BlockScanner(ABC):
    """Recognises the block syntax of one dialect."""

    end_marker_name: str

    def __init__(self, params: MachineParameters):
        self.params = params

    @abstractmethod
    def scan(self, text: str) -> ScannedBlock:
        """Scan one output line."""


class NumericBlockScanner(BlockScanner):
    """G/M-code block syntax: N0010 G1 X10 Y20 F500."""

    end_marker_name = "M30/M2"

    MOTIONS = {0: MotionType.RAPID, 1: MotionType.LINEAR, 2: MotionType.ARC_CW, 3: MotionType.ARC_CCW}
    END_CODES = (2, 30)
    LENGTH_WORDS = frozenset("XYZIJKR")

    def __init__(self, params: MachineParameters):
        super().__init__(params)
        self.implied_decimal = not params.use_decimal_point

    def scan(self, text: str) -> ScannedBlock:
        stripped = text.strip()
        if not stripped or stripped.startswith("%"):
            return ScannedBlock()
        code = strip_comments(stripped).strip().lstrip("/")
        words, _ = split_words(code)
        if words and words[0][0] == "N":
            words = words[1:]
        if not words or words[0][0] == "O":
            return ScannedBlock()

        block = ScannedBlock(is_block=True)
        values: dict[str, float] = {}
        g_codes: list[float] = []
        m_codes: list[float] = []
        for letter, raw in words:
            value = parse_number(raw)
            if value is None:
                continue
            if letter == "G":
                g_codes.append(value)
            elif letter == "M":
                m_codes.append(value)
            elif letter not in values:
                if letter in self.LENGTH_WORDS and self.implied_decimal and "." not in raw:
                    # Implied-decimal words carry thousandths
                    value *= 0.001
                values[letter] = value

        for g in g_codes:
            if g in self.MOTIONS:
                block.motion = self.MOTIONS[int(g)]

        block.axes = {a: values[a] for a in AXES if a in values}
        if "I" in values or "J" in values:
            block.center = (values.get("I", 0.0), values.get("J", 0.0))
        if "R" in values:
            block.radius = values["R"]
        block.feed = values.get("F")
        block.spindle = values.get("S")
        block.tool_change = 6 in m_codes

        ends = [m for m in m_codes if m in self.END_CODES]
        if ends:
            first_letter, first_raw = words[0]
            leading = first_letter == "M" and parse_number(first_raw) in self.END_CODES
            block.is_end = leading
            block.end_misplaced = not leading
        return block


class ConversationalScanner(BlockScanner):
    """Conversational block syntax: 15 L X+10 Y+20 F500."""

    end_marker_name = "END PGM"

    BLOCK_NUMBER = re.compile(r"^\d+\s*")
    FIELD = re.compile(r"^([XYZRFS])([+-]?(?:\d+\.?\d*|\.\d+))$")

    def _fields(self, tokens: list[str]) -> dict[str, float]:
        values: dict[str, float] = {}
        for token in tokens:
            match = self.FIELD.match(token)
            if match and match.group(1) not in values:
                values[match.group(1)] = float(match.group(2))
        return values

    def scan(self, text: str) -> ScannedBlock:
        stripped = text.strip()
        if not stripped or stripped.startswith("%"):
            return ScannedBlock()
        content = self.BLOCK_NUMBER.sub("", stripped, count=1)
        code = content.split(";", 1)[0].strip()
        if not code:
            return ScannedBlock()

        block = ScannedBlock(is_block=True)
        tokens = code.split()
        values = self._fields(tokens[1:])
        block.feed = values.get("F")
        block.spindle = values.get("S")
        head = tokens[0]

        if head == "L":
            block.axes = {a: values[a] for a in AXES if a in values}
            block.motion = MotionType.RAPID if "FMAX" in tokens else MotionType.LINEAR
        elif head in ("CR", "CT"):
            block.axes = {a: values[a] for a in AXES if a in values}
            block.motion = MotionType.ARC_CW if head == "CR" else MotionType.ARC_CCW
            if "R" in values:
                block.radius = values["R"]
        elif code.startswith("TOOL CALL"):
            block.tool_change = True

        if "END PGM" in code:
            block.is_end = code.startswith("END PGM")
            block.end_misplaced = not block.is_end
        return block


SCANNERS: dict[Dialect, type[BlockScanner]] = {
    Dialect.NUMERIC_BLOCK: NumericBlockScanner,
    Dialect.CONVERSATIONAL: ConversationalScanner,
}


# ============================================================================
# Validator
# ============================================================================

class Validator:
    """Validates a translated program against machine parameters."""

    def __init__(self, params: MachineParameters):
        self.params = params

    def validate(
        self,
        program: TranslatedProgram,
        feed_rates: Optional[Sequence[float]] = None,
        distances: Optional[Sequence[float]] = None,
    ) -> ValidationReport:
        """
        Validate a translated program.

        feed_rates and distances are per-segment arrays from an upstream
        toolpath source (mm/min and mm). When both are given the machining
        time is computed from them; otherwise a per-move estimate is used.
        """
        if (feed_rates is None) != (distances is None):
            raise ValueError("feed_rates and distances must be supplied together")

        scanner = SCANNERS[program.dialect](self.params)
        report = ValidationReport(warnings=list(program.diagnostics))
        stats = report.statistics
        body = program.body_range

        position = np.zeros(3)
        modal: Optional[MotionType] = None
        end_seen = False

        for index, text in enumerate(program.lines):
            n = index + 1
            block = scanner.scan(text)
            if block.end_misplaced:
                report.errors.append(Diagnostic(
                    n,
                    f"{scanner.end_marker_name} must be at the beginning of a block",
                    DiagnosticKind.STRUCTURE,
                ))
            if index not in body or not block.is_block:
                continue

            stats.total_blocks += 1
            if end_seen:
                report.warnings.append(Diagnostic(
                    n, "Block follows the program end", DiagnosticKind.STRUCTURE
                ))
            self._check_limits(n, block, report)
            if block.tool_change:
                stats.tool_changes += 1

            motion = block.motion
            if motion is None and block.axes and program.dialect is Dialect.NUMERIC_BLOCK:
                motion = modal
            if motion is not None:
                modal = motion
                is_arc = motion in (MotionType.ARC_CW, MotionType.ARC_CCW)
                if block.axes or (is_arc and block.center is not None):
                    position = self._move(n, motion, position, block, report)

            if block.is_end:
                end_seen = True

        self._estimate_time(stats, feed_rates, distances)
        logger.info(
            "Validated %d lines: %d errors, %d warnings, %d blocks",
            len(program.lines), len(report.errors), len(report.warnings), stats.total_blocks,
        )
        return report

    def _check_limits(self, n: int, block: ScannedBlock, report: ValidationReport) -> None:
        p = self.params
        if block.feed is not None and block.feed > p.max_feed_rate:
            report.warnings.append(Diagnostic(
                n,
                f"Feedrate {block.feed:g} exceeds maximum {p.max_feed_rate:g}",
                DiagnosticKind.LIMIT_VIOLATION,
            ))
        if block.spindle is not None and block.spindle > p.max_spindle_speed:
            report.warnings.append(Diagnostic(
                n,
                f"Spindle speed {block.spindle:g} exceeds maximum {p.max_spindle_speed:g}",
                DiagnosticKind.LIMIT_VIOLATION,
            ))

    def _move(
        self,
        n: int,
        motion: MotionType,
        position: np.ndarray,
        block: ScannedBlock,
        report: ValidationReport,
    ) -> np.ndarray:
        stats = report.statistics
        end = position.copy()
        for i, axis in enumerate(AXES):
            if axis in block.axes:
                end[i] = block.axes[axis]

        if motion is MotionType.RAPID:
            if position[2] > 0 and end[2] < position[2] and end[2] < RAPID_PLUNGE_LIMIT:
                report.warnings.append(Diagnostic(
                    n,
                    f"Large rapid Z plunge detected ({position[2]:g} to {end[2]:g})",
                    DiagnosticKind.LIMIT_VIOLATION,
                ))
            stats.linear_moves += 1
            stats.total_rapid_distance += linear_length(position, end)
        elif motion is MotionType.LINEAR:
            stats.linear_moves += 1
            stats.total_cutting_distance += linear_length(position, end)
        else:
            stats.arc_moves += 1
            clockwise = motion is MotionType.ARC_CW
            if block.center is not None:
                center = position + np.array([block.center[0], block.center[1], 0.0])
                length = arc_length(position, end, center, clockwise)
            elif block.radius is not None:
                length = arc_length_from_radius(position, end, block.radius)
            else:
                length = linear_length(position, end)
            stats.total_cutting_distance += length

        stats.max_depth = min(stats.max_depth, float(end[2]))
        return end

    @staticmethod
    def _estimate_time(
        stats: MachiningStatistics,
        feed_rates: Optional[Sequence[float]],
        distances: Optional[Sequence[float]],
    ) -> None:
        if feed_rates is not None and distances is not None:
            stats.estimated_machining_time_seconds = machining_time(distances, feed_rates)
            stats.time_is_approximate = False
            return
        stats.estimated_machining_time_seconds = (
            stats.linear_moves * LINEAR_MOVE_SECONDS
            + stats.arc_moves * ARC_MOVE_SECONDS
            + stats.tool_changes * TOOL_CHANGE_SECONDS
        )
        stats.time_is_approximate = True


def validate(
    program: TranslatedProgram,
    params: MachineParameters,
    feed_rates: Optional[Sequence[float]] = None,
    distances: Optional[Sequence[float]] = None,
) -> ValidationReport:
    """Convenience function to validate a translated program."""
    return Validator(params).validate(program, feed_rates, distances)
