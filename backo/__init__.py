"""Exponential backoff with "full jitter" for retry delays.

Computes how long a caller should wait before retrying a failed
operation. Stateless: callers own their retry loop.

Key modules:
    backoff -- Backoff calculator (compute, wait_for, wait_async)
    models  -- BackoffConfig and duration helpers
    errors  -- InvalidConfiguration, BackoffCancelled
"""

from .backoff import Backoff
from .errors import BackoffCancelled, InvalidConfiguration
from .models import MAX_DURATION_MS, BackoffConfig, to_millis

__all__ = [
    "Backoff",
    "BackoffCancelled",
    "BackoffConfig",
    "InvalidConfiguration",
    "MAX_DURATION_MS",
    "to_millis",
]
