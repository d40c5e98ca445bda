"""
Retry Configuration
===================
Environment-driven defaults for retry policies.
"""

import os
from typing import Any, Dict, Mapping, Optional

from .exceptions import InvalidRetryPolicy
from .models import RetryPolicy, get_profile

ENV_PREFIX = "WITH_RETRIES_"

PROFILE_ENV = f"{ENV_PREFIX}PROFILE"
MAX_ATTEMPTS_ENV = f"{ENV_PREFIX}MAX_ATTEMPTS"
INITIAL_DELAY_ENV = f"{ENV_PREFIX}INITIAL_DELAY_MS"
MAX_DELAY_ENV = f"{ENV_PREFIX}MAX_DELAY_MS"
EXPONENTIAL_BACKOFF_ENV = f"{ENV_PREFIX}EXPONENTIAL_BACKOFF"
JITTER_ENV = f"{ENV_PREFIX}JITTER"

DEFAULT_PROFILE = "default"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise InvalidRetryPolicy(f"{name} must be an integer, got {raw!r}") from None


def _parse_optional_int(name: str, raw: str) -> Optional[int]:
    if raw.strip() == "":
        return None
    return _parse_int(name, raw)


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise InvalidRetryPolicy(f"{name} must be a boolean, got {raw!r}")


_FIELDS: Dict[str, tuple] = {
    MAX_ATTEMPTS_ENV: ("max_attempts", _parse_int),
    INITIAL_DELAY_ENV: ("initial_delay", _parse_int),
    MAX_DELAY_ENV: ("max_delay", _parse_optional_int),
    EXPONENTIAL_BACKOFF_ENV: ("exponential_backoff", _parse_bool),
    JITTER_ENV: ("jitter", _parse_bool),
}


def policy_from_env(
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> RetryPolicy:
    """
    Build a retry policy from environment variables.

    Starts from the profile named by WITH_RETRIES_PROFILE, applies any
    per-field variables that are set, then keyword overrides.

    Args:
        environ: Mapping to read instead of os.environ
        **overrides: RetryPolicy fields applied last

    Returns:
        Validated RetryPolicy

    Raises:
        InvalidRetryPolicy: If a variable is malformed
    """
    env = os.environ if environ is None else environ
    policy = get_profile(env.get(PROFILE_ENV) or DEFAULT_PROFILE)

    changes: Dict[str, Any] = {}
    for var, (field_name, parse) in _FIELDS.items():
        raw = env.get(var)
        if raw is None:
            continue
        changes[field_name] = parse(var, raw)

    changes.update(overrides)
    if not changes:
        return policy
    return policy.replace(**changes)
