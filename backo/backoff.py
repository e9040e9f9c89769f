from __future__ import annotations

import asyncio
import dataclasses
import logging
import math
import random
import threading
import time
from typing import Any, Optional

from .errors import BackoffCancelled
from .models import (
    DEFAULT_BASE_MS,
    DEFAULT_CAP_MS,
    DEFAULT_FACTOR,
    DEFAULT_JITTER,
    MAX_DURATION_MS,
    BackoffConfig,
    Duration,
)

logger = logging.getLogger(__name__)

# With factor >= 2 and base >= 1, any exponent from here on exceeds MAX_DURATION_MS.
_SATURATING_EXPONENT = 63

# Longest single sleep/Event.wait; time.sleep and lock timeouts reject larger values.
_MAX_WAIT_SECS = min(threading.TIMEOUT_MAX, 86_400.0)


class Backoff:
    """Exponential backoff with "full jitter" for retry delays.

    Computes the wait before retry number ``attempt`` (zero-based) as
    base * factor^attempt, optionally jittered, then clamped into
    [base, cap]. Instances are immutable and can be shared across threads.

    The random source is injectable; anything with a ``random()`` method
    returning a float in [0, 1) works, e.g. a seeded ``random.Random``.
    """

    def __init__(self, config: Optional[BackoffConfig] = None, rng: Optional[Any] = None) -> None:
        self._config = config if config is not None else BackoffConfig()
        self._rng = rng if rng is not None else random.Random()

    @classmethod
    def create(
        cls,
        base: Duration = DEFAULT_BASE_MS,
        factor: int = DEFAULT_FACTOR,
        jitter: float = DEFAULT_JITTER,
        cap: Duration = DEFAULT_CAP_MS,
        rng: Optional[Any] = None,
    ) -> "Backoff":
        """Build a calculator from named options; raises InvalidConfiguration if cap < base."""
        return cls(BackoffConfig(base=base, factor=factor, jitter=jitter, cap=cap), rng=rng)

    def with_options(self, **changes: Any) -> "Backoff":
        """Return a new calculator with some options replaced, sharing this random source."""
        return Backoff(dataclasses.replace(self._config, **changes), rng=self._rng)

    @property
    def config(self) -> BackoffConfig:
        return self._config

    def compute(self, attempt: int) -> int:
        """Return the duration in milliseconds to back off before retry ``attempt``.

        Negative attempts are treated as 0. The result is always within
        [base, cap]; with jitter == 0 it is exactly min(base * factor^attempt, cap).
        """
        cfg = self._config
        duration = self._raw_duration(max(attempt, 0))

        if cfg.jitter != 0:
            r = self._rng.random()
            spread = r * cfg.jitter * duration
            if not math.isfinite(spread):
                # inf/nan jitter: no usable deviation, treat as unbounded.
                duration = MAX_DURATION_MS
            else:
                deviation = math.floor(spread)
                # TODO: replace the floor(r * 10) parity sign pick with a symmetric draw
                # once callers no longer depend on this distribution.
                if math.floor(r * 10) % 2 == 0:
                    duration -= deviation
                else:
                    duration += deviation

        # Negative or oversized results count as "unbounded".
        if duration < 0 or duration > MAX_DURATION_MS:
            duration = MAX_DURATION_MS

        return min(max(duration, cfg.base), cfg.cap)

    def wait_for(self, attempt: int, cancel_event: Optional[threading.Event] = None) -> int:
        """Block the current thread for compute(attempt) milliseconds and return that delay.

        Long delays are slept in chunks no longer than the platform timeout limit.
        If ``cancel_event`` is set before the delay elapses, BackoffCancelled is raised.
        """
        delay_ms = self.compute(attempt)
        logger.debug("Backing off for %d ms (attempt %d)", delay_ms, attempt)
        remaining = delay_ms / 1000.0
        while remaining > 0:
            chunk = min(remaining, _MAX_WAIT_SECS)
            if cancel_event is None:
                time.sleep(chunk)
            elif cancel_event.wait(timeout=chunk):
                logger.info("Backoff wait cancelled (attempt %d, delay %d ms)", attempt, delay_ms)
                raise BackoffCancelled(attempt, delay_ms)
            remaining -= chunk
        return delay_ms

    async def wait_async(self, attempt: int) -> int:
        """Asynchronously sleep for compute(attempt) milliseconds and return that delay.

        Task cancellation propagates as asyncio.CancelledError.
        """
        delay_ms = self.compute(attempt)
        logger.debug("Backing off for %d ms (attempt %d)", delay_ms, attempt)
        try:
            await asyncio.sleep(delay_ms / 1000.0)
        except asyncio.CancelledError:
            logger.info("Backoff wait cancelled (attempt %d, delay %d ms)", attempt, delay_ms)
            raise
        return delay_ms

    def _raw_duration(self, attempt: int) -> int:
        base, factor = self._config.base, self._config.factor
        if base > 0 and factor >= 2 and attempt >= _SATURATING_EXPONENT:
            return MAX_DURATION_MS
        try:
            raw = base * factor**attempt
        except OverflowError:
            return MAX_DURATION_MS
        return int(min(raw, MAX_DURATION_MS))

    def __repr__(self) -> str:
        return f"Backoff({self._config!r})"
