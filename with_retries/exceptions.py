"""
Retry Exceptions
================
Exception classes for retry operations.
"""

from typing import Any


class RetryError(Exception):
    """Base class for errors raised by the retry executor itself."""


class InvalidRetryPolicy(RetryError, ValueError):
    """Raised when a retry policy, option or profile is invalid."""


class ConditionFailed(RetryError):
    """
    Raised internally when ``retry_when`` rejects a successful result.

    Counts as a failed attempt. Only surfaces to the caller (or to
    ``on_exhausted``) when the attempt budget runs out.
    """

    def __init__(self, result: Any, attempt: int):
        super().__init__(f"Failed given condition on attempt {attempt + 1}")
        self.result = result
        self.attempt = attempt
