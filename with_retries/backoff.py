"""
Retry Backoff
=============
Delay schedule for the retry executor: capped exponential growth with
optional full jitter.
"""

import random
from typing import Optional

from .models import RetryPolicy

# 2**30 ms is already ~12 days; larger exponents only add noise.
MAX_EXPONENT = 30


def base_delay(attempt_index: int, policy: RetryPolicy) -> int:
    """
    Deterministic delay (ms) scheduled after the given 0-based attempt.

    Exponential policies double ``initial_delay`` per attempt, constant
    policies always use it. The result is capped at ``max_delay`` when set.
    """
    if attempt_index < 0:
        raise ValueError(f"attempt_index must be >= 0, got {attempt_index}")

    if policy.exponential_backoff:
        delay = policy.initial_delay * (2 ** min(attempt_index, MAX_EXPONENT))
    else:
        delay = policy.initial_delay

    if policy.max_delay is not None:
        delay = min(delay, policy.max_delay)
    return delay


def compute_delay(
    attempt_index: int,
    policy: RetryPolicy,
    rng: Optional[random.Random] = None,
) -> int:
    """
    Actual wait (ms) after the given attempt.

    With jitter the wait is drawn uniformly from ``[0, base_delay]`` so that
    concurrent callers do not retry in lockstep.

    Args:
        attempt_index: 0-based index of the attempt that just failed
        policy: Retry policy
        rng: Random source (defaults to the ``random`` module)

    Returns:
        Non-negative integer number of milliseconds
    """
    delay = base_delay(attempt_index, policy)
    if policy.jitter and delay > 0:
        delay = (rng or random).randint(0, delay)
    return delay
