"""
Mode, snapshot and verdict types shared by the throttle engine.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from shared.errors import InvalidArgumentError


MIN_INTENSITY = 0
MAX_INTENSITY = 100


class OperatingMode(str, Enum):
    """Operating modes of the mock endpoint."""
    ACCEPTING = "OK"
    THROTTLED = "Throttled"


class Verdict(str, Enum):
    """Admission outcome for a single request."""
    ACCEPT = "accept"
    REJECT = "reject"


@dataclass(frozen=True)
class ModeSnapshot:
    """Mode and intensity as they were at one instant.

    Snapshots are immutable; the store swaps in a new one on every
    transition, so a reader can never see a mode from one update paired with
    an intensity from another.
    """
    mode: OperatingMode
    intensity: int = 0

    @property
    def throttled(self) -> bool:
        return self.mode is OperatingMode.THROTTLED

    def to_dict(self) -> dict:
        return {"status": self.mode.value, "intensity": self.intensity}


ACCEPTING = ModeSnapshot(OperatingMode.ACCEPTING, 0)


def validate_intensity(value: Any) -> int:
    """Return ``value`` as a throttle intensity or raise InvalidArgumentError."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(
            "rate is not a number",
            details={"rate": repr(value)}
        )
    if value < MIN_INTENSITY or value > MAX_INTENSITY:
        raise InvalidArgumentError(
            "rate out of range",
            details={"rate": value, "min": MIN_INTENSITY, "max": MAX_INTENSITY}
        )
    return value


def validate_load(value: Any) -> int:
    """Return ``value`` as a request load (segment count) or raise InvalidArgumentError."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError("load is not a number", details={"load": repr(value)})
    if value < 0:
        raise InvalidArgumentError("load must not be negative", details={"load": value})
    return value
