from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Union

from .errors import InvalidConfiguration

# Largest duration a caller can be asked to wait (signed 64-bit milliseconds).
MAX_DURATION_MS = 2**63 - 1

DEFAULT_BASE_MS = 100
DEFAULT_FACTOR = 2
DEFAULT_JITTER = 0.0
DEFAULT_CAP_MS = MAX_DURATION_MS

Duration = Union[int, timedelta]


def to_millis(value: Duration) -> int:
    """Normalise an int (milliseconds) or a timedelta to whole milliseconds, truncating toward zero."""
    if isinstance(value, timedelta):
        micros = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
        millis = abs(micros) // 1000
        return millis if micros >= 0 else -millis
    return int(value)


@dataclass(frozen=True)
class BackoffConfig:
    """Immutable settings for a Backoff calculator.

    base and cap are milliseconds (a timedelta is accepted and normalised).
    cap must not be smaller than base; the check runs on every construction,
    including dataclasses.replace().
    """

    base: int = DEFAULT_BASE_MS
    factor: int = DEFAULT_FACTOR
    jitter: float = DEFAULT_JITTER
    cap: int = DEFAULT_CAP_MS

    def __post_init__(self) -> None:
        object.__setattr__(self, "base", to_millis(self.base))
        object.__setattr__(self, "cap", to_millis(self.cap))
        if self.cap < self.base:
            raise InvalidConfiguration(
                f"Initial backoff cannot be more than maximum. (base={self.base}ms, cap={self.cap}ms)"
            )
