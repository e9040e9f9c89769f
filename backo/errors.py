from __future__ import annotations


class InvalidConfiguration(ValueError):
    """Raised when a BackoffConfig is built with cap < base."""


class BackoffCancelled(Exception):
    """Raised when a blocking wait is interrupted through its cancel event."""

    def __init__(self, attempt: int, delay_ms: int) -> None:
        super().__init__(f"backoff wait cancelled (attempt={attempt}, delay_ms={delay_ms})")
        self.attempt = attempt
        self.delay_ms = delay_ms
