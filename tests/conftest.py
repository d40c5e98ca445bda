import asyncio

import pytest

_real_sleep = asyncio.sleep


@pytest.fixture
def sleeps(monkeypatch):
    """Record requested waits (in ms) instead of actually sleeping."""
    recorded = []

    async def fake_sleep(seconds, *args, **kwargs):
        recorded.append(round(seconds * 1000))
        await _real_sleep(0)

    monkeypatch.setattr("with_retries.executor.sleep", fake_sleep)
    return recorded


@pytest.fixture
def flaky():
    """Factory for operations that fail a given number of times, then succeed."""

    def make(failures, result="success", error=ValueError):
        calls = []

        async def op(*args, **kwargs):
            calls.append((args, kwargs))
            if len(calls) <= failures:
                raise error(f"failure {len(calls)}")
            return result

        op.calls = calls
        return op

    return make
