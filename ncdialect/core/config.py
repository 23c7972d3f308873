"""
Machine parameters for dialect translation and validation.

Features:
- Numeric-block (ISO/Fanuc style) and conversational (TNC style) presets
- Formatting, numbering and safety flags
- JSON based load/save
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when machine parameters violate an invariant."""
    pass


class Dialect(Enum):
    """Target controller dialect."""
    NUMERIC_BLOCK = "numeric"
    CONVERSATIONAL = "conversational"

    @classmethod
    def parse(cls, value: "Dialect | str") -> "Dialect":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigError(f"Unknown dialect: {value!r}") from None


COOLANT_MODES = ("flood", "mist", "off")


@dataclass(frozen=True)
class MachineParameters:
    """Read-only machine parameter set shared by every translation step."""
    dialect: Dialect = Dialect.NUMERIC_BLOCK
    controller: str = "Fanuc 30i"

    # Program identity
    program_number: str = "O1000"
    program_name: str = "EXAMPLE"

    # Number formatting
    use_decimal_point: bool = True
    space_after_address: bool = True
    use_mm: bool = True

    # Safety / feature flags
    tool_monitoring: bool = False
    working_plane_monitoring: bool = False
    high_speed_mode: bool = False
    end_of_line_comments: bool = True
    include_setup_block: bool = False
    modal_tracking: bool = False

    # Kinematic limits
    max_feed_rate: float = 10000.0
    max_spindle_speed: float = 12000.0

    # Block numbering
    block_increment: int = 10
    block_start: int = 10
    max_block_number: int = 9999

    # Work offset / coolant
    work_offset: str = "G54"
    coolant: str = "flood"

    # Stock blank for the conversational BLK FORM preamble (min and max corners)
    blank_min: tuple[float, float, float] = (0.0, 0.0, -50.0)
    blank_max: tuple[float, float, float] = (100.0, 100.0, 0.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "dialect", Dialect.parse(self.dialect))
        try:
            object.__setattr__(self, "blank_min", tuple(float(v) for v in self.blank_min))
            object.__setattr__(self, "blank_max", tuple(float(v) for v in self.blank_max))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"blank_min and blank_max need numeric coordinates ({e})") from e
        self.validate()

    def validate(self) -> None:
        """Check invariants; raise ConfigError on the first violation."""
        if self.block_increment <= 0:
            raise ConfigError(f"block_increment must be positive, got {self.block_increment}")
        if self.block_start < 0:
            raise ConfigError(f"block_start must not be negative, got {self.block_start}")
        if self.max_block_number < self.block_start:
            raise ConfigError(
                f"max_block_number {self.max_block_number} is below block_start {self.block_start}"
            )
        if self.max_feed_rate <= 0:
            raise ConfigError(f"max_feed_rate must be positive, got {self.max_feed_rate}")
        if self.max_spindle_speed <= 0:
            raise ConfigError(f"max_spindle_speed must be positive, got {self.max_spindle_speed}")
        if self.coolant not in COOLANT_MODES:
            raise ConfigError(f"coolant must be one of {COOLANT_MODES}, got {self.coolant!r}")
        if len(self.blank_min) != 3 or len(self.blank_max) != 3:
            raise ConfigError("blank_min and blank_max need three coordinates")
        if not self.program_name.strip():
            raise ConfigError("program_name must not be empty")

    @property
    def units(self) -> str:
        return "MM" if self.use_mm else "INCH"

    @classmethod
    def numeric_block(cls, **overrides: Any) -> "MachineParameters":
        """ISO / Fanuc style defaults."""
        return cls(dialect=Dialect.NUMERIC_BLOCK, **overrides)

    @classmethod
    def conversational(cls, **overrides: Any) -> "MachineParameters":
        """TNC conversational defaults."""
        defaults: dict[str, Any] = {
            "controller": "TNC 640",
            "block_increment": 5,
            "max_feed_rate": 30000.0,
            "max_spindle_speed": 24000.0,
            "tool_monitoring": True,
            "working_plane_monitoring": True,
        }
        defaults.update(overrides)
        return cls(dialect=Dialect.CONVERSATIONAL, **defaults)

    @classmethod
    def for_dialect(cls, dialect: Dialect | str, **overrides: Any) -> "MachineParameters":
        """Get the preset for a dialect."""
        if Dialect.parse(dialect) is Dialect.CONVERSATIONAL:
            return cls.conversational(**overrides)
        return cls.numeric_block(**overrides)

    def with_changes(self, **changes: Any) -> "MachineParameters":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MachineParameters":
        """Build parameters from a mapping; missing keys take the dialect preset."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown machine parameter(s): {', '.join(unknown)}")
        overrides = dict(data)
        dialect = overrides.pop("dialect", Dialect.NUMERIC_BLOCK)
        try:
            return cls.for_dialect(dialect, **overrides)
        except (TypeError, ValueError) as e:
            raise ConfigError(str(e)) from e

    def to_dict(self) -> dict[str, Any]:
        """Export parameters to a JSON-compatible dictionary."""
        data = asdict(self)
        data["dialect"] = self.dialect.value
        data["blank_min"] = list(self.blank_min)
        data["blank_max"] = list(self.blank_max)
        return data

    @classmethod
    def from_json(cls, path: str | Path) -> "MachineParameters":
        """Load parameters from a JSON file."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise ConfigError(f"{path}: invalid JSON ({e})") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a JSON object")
        logger.debug("Loaded machine parameters from %s", path)
        return cls.from_dict(data)

    def to_json(self, path: str | Path) -> None:
        """Save parameters to a JSON file."""
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
