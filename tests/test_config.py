"""
Tests for environment-driven retry configuration.
"""

import pytest

from with_retries import InvalidRetryPolicy, PROFILES, policy_from_env
from with_retries.config import (
    EXPONENTIAL_BACKOFF_ENV,
    INITIAL_DELAY_ENV,
    JITTER_ENV,
    MAX_ATTEMPTS_ENV,
    MAX_DELAY_ENV,
    PROFILE_ENV,
)


class TestPolicyFromEnv:
    """Tests for policy_from_env."""

    def test_empty_environment_uses_default_profile(self):
        assert policy_from_env({}) is PROFILES["default"]

    def test_profile_selection(self):
        policy = policy_from_env({PROFILE_ENV: "patient"})

        assert policy == PROFILES["patient"]

    def test_field_variables(self):
        """Should read every policy field from its variable."""
        policy = policy_from_env({
            MAX_ATTEMPTS_ENV: "7",
            INITIAL_DELAY_ENV: "250",
            MAX_DELAY_ENV: "4000",
            EXPONENTIAL_BACKOFF_ENV: "false",
            JITTER_ENV: "off",
        })

        assert policy.max_attempts == 7
        assert policy.initial_delay == 250
        assert policy.max_delay == 4000
        assert policy.exponential_backoff is False
        assert policy.jitter is False

    def test_empty_max_delay_means_unbounded(self):
        policy = policy_from_env({PROFILE_ENV: "patient", MAX_DELAY_ENV: ""})

        assert policy.max_delay is None

    def test_variables_override_profile(self):
        policy = policy_from_env({PROFILE_ENV: "patient", MAX_ATTEMPTS_ENV: "2"})

        assert policy.max_attempts == 2
        assert policy.initial_delay == 100

    def test_keyword_overrides_win(self):
        scope = object()

        policy = policy_from_env({MAX_ATTEMPTS_ENV: "2"}, max_attempts=9, scope=scope)

        assert policy.max_attempts == 9
        assert policy.call_scope is scope

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv(MAX_ATTEMPTS_ENV, "4")
        monkeypatch.setenv(JITTER_ENV, "YES")

        policy = policy_from_env()

        assert policy.max_attempts == 4
        assert policy.jitter is True

    @pytest.mark.parametrize("env", [
        {MAX_ATTEMPTS_ENV: "three"},
        {INITIAL_DELAY_ENV: "1.5"},
        {JITTER_ENV: "maybe"},
        {MAX_ATTEMPTS_ENV: "0"},
        {PROFILE_ENV: "unknown"},
    ])
    def test_malformed_values(self, env):
        """Should reject malformed variables."""
        with pytest.raises(InvalidRetryPolicy):
            policy_from_env(env)

    def test_error_names_variable(self):
        with pytest.raises(InvalidRetryPolicy, match=MAX_ATTEMPTS_ENV):
            policy_from_env({MAX_ATTEMPTS_ENV: "many"})
