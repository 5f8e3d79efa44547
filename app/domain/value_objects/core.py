"""Domain value objects for the Guildhall application.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import re
from dataclasses import dataclass
from datetime import timedelta

# "3 days", "24 hours", "90 min", "45s", "2.5 h"
_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-z]*)\s*$")

_UNIT_SECONDS: dict[str, int] = {
    "": 1,
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
    "w": 604800,
    "week": 604800,
    "weeks": 604800,
}


@dataclass(frozen=True)
class Duration:
    """Value object for a non-negative span of time in seconds.

    Used for action delays, wait steps, task due offsets and schedule
    intervals. Accepts numbers (seconds) or strings such as "3 days",
    "24 hours" or "90 minutes".
    """

    seconds: float

    def __post_init__(self) -> None:
        if self.seconds < 0:
            raise ValueError("Duration must not be negative")

    @classmethod
    def parse(cls, value: "Duration | int | float | str") -> "Duration":
        """Parse seconds or a '<number> <unit>' string.

        Raises:
            ValueError: If the value is not a recognised duration.
        """
        if isinstance(value, Duration):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid duration: {value!r}")
        if isinstance(value, int | float):
            return cls(float(value))
        if isinstance(value, str):
            match = _DURATION_RE.match(value.lower())
            if match:
                amount, unit = match.groups()
                multiplier = _UNIT_SECONDS.get(unit)
                if multiplier is not None:
                    return cls(float(amount) * multiplier)
        raise ValueError(f"Invalid duration: {value!r}")

    @classmethod
    def parse_optional(
        cls, value: "Duration | int | float | str | None"
    ) -> "Duration | None":
        """Like parse() but passes None through."""
        return None if value is None else cls.parse(value)

    @property
    def is_zero(self) -> bool:
        return self.seconds == 0

    def as_timedelta(self) -> timedelta:
        return timedelta(seconds=self.seconds)
