"""
with-retries
============
Retry executor: wraps a sync or async operation in an async function that
re-invokes it on failure with capped exponential backoff and jitter.
"""

__version__ = "1.0.0"

# Errors
from .exceptions import RetryError, InvalidRetryPolicy, ConditionFailed

# Policy
from .models import (
    RetryPolicy,
    Attempt,
    AttemptOutcome,
    DEFAULT_POLICY,
    PROFILES,
    get_profile,
)

# Backoff
from .backoff import base_delay, compute_delay

# Executor
from .executor import with_retries, retry, run_with_retries

# Config
from .config import policy_from_env

# Logging
from .log import setup_logging, get_logger

__all__ = [
    # Errors
    "RetryError",
    "InvalidRetryPolicy",
    "ConditionFailed",
    # Policy
    "RetryPolicy",
    "Attempt",
    "AttemptOutcome",
    "DEFAULT_POLICY",
    "PROFILES",
    "get_profile",
    # Backoff
    "base_delay",
    "compute_delay",
    # Executor
    "with_retries",
    "retry",
    "run_with_retries",
    # Config
    "policy_from_env",
    # Logging
    "setup_logging",
    "get_logger",
]
