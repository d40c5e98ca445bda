"""
Retry Executor
==============
Wraps an operation so that each call re-invokes it on failure according to a
RetryPolicy.

Usage:
    from with_retries import with_retries, retry

    fetch = with_retries(client.fetch, max_attempts=5, initial_delay=200)
    data = await fetch("/v1/items")

    @retry(retry_when=lambda status: status == "pending")
    async def poll_job(job_id: str):
        return await jobs.status(job_id)
"""

import inspect
from asyncio import CancelledError, sleep
from functools import wraps
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar, Union

import structlog
from typing_extensions import ParamSpec

from .backoff import compute_delay
from .exceptions import ConditionFailed, InvalidRetryPolicy
from .models import DEFAULT_POLICY, Attempt, AttemptOutcome, RetryPolicy

logger = structlog.get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


async def _resolve(value: Union[T, Awaitable[T]]) -> T:
    if inspect.isawaitable(value):
        return await value
    return value


def _describe(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", None) or repr(func)


def resolve_policy(policy: Optional[RetryPolicy] = None, **options) -> RetryPolicy:
    """Combine an optional base policy with keyword overrides."""
    if policy is not None and not isinstance(policy, RetryPolicy):
        raise InvalidRetryPolicy(
            f"policy must be a RetryPolicy, got {type(policy).__name__}; "
            "use @retry() rather than @retry"
        )
    if not options:
        return policy or DEFAULT_POLICY
    return RetryPolicy.from_options(base=policy, **options)


async def run_with_retries(
    func: Callable[..., Union[T, Awaitable[T]]],
    policy: RetryPolicy,
    args: Tuple[Any, ...] = (),
    kwargs: Optional[Dict[str, Any]] = None,
) -> T:
    """
    Run one call of ``func`` under ``policy``.

    Args:
        func: Sync or async operation
        policy: Retry policy (read-only)
        args: Positional arguments for func
        kwargs: Keyword arguments for func

    Returns:
        The first accepted result, or the return value of ``on_exhausted``

    Raises:
        The terminal error when attempts run out and no ``on_exhausted`` is
        set, or whatever ``on_exhausted`` raises. Errors raised by
        ``retry_when`` propagate at once.
    """
    kwargs = kwargs or {}
    if policy.has_call_scope:
        args = (policy.call_scope,) + tuple(args)

    name = _describe(func)
    attempts: List[Attempt] = []
    index = 0

    while True:
        try:
            result = await _resolve(func(*args, **kwargs))
        except CancelledError:
            logger.debug("retry_cancelled", func=name, attempt=index + 1)
            raise
        except Exception as e:
            error: Exception = e
            outcome = AttemptOutcome.ERROR
        else:
            if policy.retry_when is None or not policy.retry_when(result):
                attempts.append(Attempt(index=index, outcome=AttemptOutcome.SUCCESS))
                if index > 0:
                    logger.info("retry_succeeded", func=name, attempts=len(attempts))
                return result
            error = ConditionFailed(result, index)
            outcome = AttemptOutcome.CONDITION_FAILED
            logger.debug("retry_condition_failed", func=name, attempt=index + 1)

        retryable = outcome is AttemptOutcome.CONDITION_FAILED or isinstance(
            error, policy.retry_on
        )
        if not retryable or index >= policy.max_attempts - 1:
            attempts.append(Attempt(index=index, outcome=outcome, error=error))
            return await _exhausted(name, policy, error, attempts, retryable)

        delay = compute_delay(index, policy)
        attempt = Attempt(index=index, outcome=outcome, error=error, delay=delay)
        attempts.append(attempt)
        logger.warning("retry_attempt_failed", func=name, **attempt.log_context())

        try:
            await sleep(delay / 1000)
        except CancelledError:
            logger.debug("retry_cancelled", func=name, attempt=index + 1, waiting=True)
            raise
        index += 1


async def _exhausted(
    name: str,
    policy: RetryPolicy,
    error: Exception,
    attempts: List[Attempt],
    retryable: bool,
) -> Any:
    last = attempts[-1]
    logger.error(
        "retry_exhausted",
        func=name,
        attempts=len(attempts),
        retryable=retryable,
        **{k: v for k, v in last.log_context().items() if k != "attempt"},
    )

    if policy.on_exhausted is None:
        raise error

    # The delegate's error replaces the terminal error, with its own chaining.
    try:
        value = await _resolve(policy.on_exhausted(error))
    except Exception as delegate_error:
        logger.error(
            "retry_delegate_failed",
            func=name,
            error=str(delegate_error),
            error_type=type(delegate_error).__name__,
        )
        raise
    logger.info("retry_delegated", func=name, attempts=len(attempts))
    return value


def with_retries(
    func: Callable[P, Union[T, Awaitable[T]]],
    policy: Optional[RetryPolicy] = None,
    **options,
) -> Callable[P, Awaitable[T]]:
    """
    Create an async function that invokes ``func`` and retries it on failure.

    Args:
        func: The operation to wrap, sync or async
        policy: Base policy (defaults to DEFAULT_POLICY)
        **options: RetryPolicy fields (or their aliases) overriding the base

    Returns:
        Async function with the same arguments as ``func``. The resolved
        policy is available as ``wrapper.retry_policy``.

    Raises:
        InvalidRetryPolicy: If the policy or options are invalid
    """
    resolved = resolve_policy(policy, **options)

    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        return await run_with_retries(func, resolved, args, kwargs)

    wrapper.retry_policy = resolved
    return wrapper


def retry(
    policy: Optional[RetryPolicy] = None,
    **options,
) -> Callable[[Callable[P, Union[T, Awaitable[T]]]], Callable[P, Awaitable[T]]]:
    """
    Decorator form of with_retries.

    Usage:
        @retry(max_attempts=5, initial_delay=100)
        async def fetch_data():
            ...
    """
    resolved = resolve_policy(policy, **options)

    def decorator(func: Callable[P, Union[T, Awaitable[T]]]) -> Callable[P, Awaitable[T]]:
        return with_retries(func, resolved)

    return decorator
