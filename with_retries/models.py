"""
Retry Models
============
Policy, attempt records and named profiles for the retry executor.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Type

from .exceptions import InvalidRetryPolicy


class _Unset:
    """Marker for "no call scope", so that ``None`` stays a valid receiver."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()

# Legacy option names, accepted as aliases.
OPTION_ALIASES: Dict[str, str] = {
    "scope": "call_scope",
    "delay": "initial_delay",
    "when": "retry_when",
    "max_retries": "max_attempts",
}


class AttemptOutcome(str, Enum):
    """How a single attempt ended."""
    SUCCESS = "success"
    ERROR = "error"
    CONDITION_FAILED = "condition_failed"


@dataclass(frozen=True)
class RetryPolicy:
    """
    Immutable retry configuration, resolved once per wrapped operation.

    Delays are integer milliseconds.
    """
    max_attempts: int = 3                  # Invocations per call, including the first
    initial_delay: int = 500               # Delay before the second attempt
    max_delay: Optional[int] = None        # Cap on the scheduled delay (None = unbounded)
    exponential_backoff: bool = True       # Double the delay on every attempt
    jitter: bool = True                    # Wait a uniform random time in [0, delay]
    retry_when: Optional[Callable[[Any], bool]] = None
    on_exhausted: Optional[Callable[[BaseException], Any]] = None
    call_scope: Any = UNSET
    retry_on: Tuple[Type[Exception], ...] = (Exception,)

    def __post_init__(self):
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int):
            raise InvalidRetryPolicy(
                f"max_attempts must be an integer, got {self.max_attempts!r}"
            )
        if self.max_attempts < 1:
            raise InvalidRetryPolicy(
                f"max_attempts must be >= 1, got {self.max_attempts}"
            )

        _check_delay("initial_delay", self.initial_delay)
        if self.max_delay is not None:
            _check_delay("max_delay", self.max_delay)

        if self.retry_when is not None and not callable(self.retry_when):
            raise InvalidRetryPolicy("retry_when must be callable")
        if self.on_exhausted is not None and not callable(self.on_exhausted):
            raise InvalidRetryPolicy("on_exhausted must be callable")

        retry_on = self.retry_on
        if isinstance(retry_on, type):
            retry_on = (retry_on,)
        retry_on = tuple(retry_on)
        if not retry_on or not all(
            isinstance(exc, type) and issubclass(exc, Exception) for exc in retry_on
        ):
            raise InvalidRetryPolicy("retry_on must name one or more exception types")
        object.__setattr__(self, "retry_on", retry_on)

    @property
    def has_call_scope(self) -> bool:
        return self.call_scope is not UNSET

    def replace(self, **changes) -> "RetryPolicy":
        """Return a validated copy with the given fields changed."""
        return dataclasses.replace(self, **_normalize_options(changes))

    @classmethod
    def from_options(cls, base: Optional["RetryPolicy"] = None, **options) -> "RetryPolicy":
        """
        Build a policy from keyword options.

        Accepts the legacy option names (``scope``, ``delay``, ``when``,
        ``max_retries``) as aliases. Options override ``base`` when given.
        """
        return (base or cls()).replace(**options)


@dataclass(frozen=True)
class Attempt:
    """One invocation of the wrapped operation within a call."""
    index: int
    outcome: AttemptOutcome
    error: Optional[BaseException] = None
    delay: Optional[int] = None            # ms waited before the next attempt

    @property
    def number(self) -> int:
        return self.index + 1

    def log_context(self) -> Dict[str, Any]:
        context: Dict[str, Any] = {
            "attempt": self.number,
            "outcome": self.outcome.value,
        }
        if self.error is not None:
            context["error"] = str(self.error)
            context["error_type"] = type(self.error).__name__
        if self.delay is not None:
            context["delay_ms"] = self.delay
        return context


def _check_delay(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRetryPolicy(f"{name} must be an integer number of ms, got {value!r}")
    if value < 0:
        raise InvalidRetryPolicy(f"{name} must be >= 0, got {value}")


def _normalize_options(options: Dict[str, Any]) -> Dict[str, Any]:
    fields = {f.name for f in dataclasses.fields(RetryPolicy)}
    normalized: Dict[str, Any] = {}
    for key, value in options.items():
        name = OPTION_ALIASES.get(key, key)
        if name not in fields:
            raise InvalidRetryPolicy(f"Unknown retry option: {key!r}")
        if name in normalized:
            raise InvalidRetryPolicy(f"Retry option given twice: {name!r}")
        normalized[name] = value
    return normalized


DEFAULT_POLICY = RetryPolicy()

PROFILES: Dict[str, RetryPolicy] = {
    "default": DEFAULT_POLICY,
    "patient": RetryPolicy(max_attempts=5, initial_delay=100, max_delay=10_000),
    "none": RetryPolicy(max_attempts=1),
}


def get_profile(name: str) -> RetryPolicy:
    """Look up a named policy profile."""
    try:
        return PROFILES[name.strip().lower()]
    except KeyError:
        raise InvalidRetryPolicy(
            f"Unknown retry profile {name!r}; expected one of {sorted(PROFILES)}"
        ) from None
