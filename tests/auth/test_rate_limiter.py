"""Tests for RateLimiter - sign-in throttling."""

from unittest.mock import Mock

import pytest

from auth.config import AuthConfig
from auth.exceptions import RateLimitedError
from auth.rate_limiter import RateLimiter
from clients.valkey_client import ValkeyClient


@pytest.fixture
def config():
    """Test config with low attempts for faster tests."""
    return AuthConfig(
        rate_limit_attempts=3,
        rate_limit_window_minutes=5,
    )


@pytest.fixture
def valkey():
    """ValkeyClient stand-in that keeps counters in a dict."""
    counters = {}
    mock = Mock(spec=ValkeyClient)

    def incr(key):
        counters[key] = counters.get(key, 0) + 1
        return counters[key]

    mock.incr.side_effect = incr
    mock.delete.side_effect = lambda key: counters.pop(key, None) is not None
    mock.ttl.return_value = 300
    mock.expire.return_value = True
    return mock


@pytest.fixture
def rate_limiter(valkey, config):
    return RateLimiter(valkey, config)


class TestRecordAttempt:
    """Test rate limit checking and incrementing."""

    def test_first_attempt_passes(self, rate_limiter):
        rate_limiter.record_attempt("user@example.com")

    def test_within_limit_passes(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.record_attempt("allowed@example.com")

    def test_exceeds_limit_raises(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.record_attempt("blocked@example.com")

        with pytest.raises(RateLimitedError):
            rate_limiter.record_attempt("blocked@example.com")

    def test_error_includes_retry_after(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.record_attempt("retry@example.com")

        with pytest.raises(RateLimitedError) as exc_info:
            rate_limiter.record_attempt("retry@example.com")

        assert exc_info.value.retry_after_seconds == 300

    def test_retry_after_never_below_one(self, rate_limiter, valkey, config):
        valkey.ttl.return_value = -1
        for _ in range(config.rate_limit_attempts):
            rate_limiter.record_attempt("nottl@example.com")

        with pytest.raises(RateLimitedError) as exc_info:
            rate_limiter.record_attempt("nottl@example.com")

        assert exc_info.value.retry_after_seconds == 1

    def test_every_attempt_extends_window(self, rate_limiter, valkey):
        rate_limiter.record_attempt("slide@example.com")
        rate_limiter.record_attempt("slide@example.com")

        assert valkey.expire.call_count == 2
        valkey.expire.assert_called_with("ratelimit:signin:slide@example.com", 300)

    def test_different_emails_tracked_separately(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.record_attempt("first@example.com")

        rate_limiter.record_attempt("second@example.com")

    def test_email_case_insensitive(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.record_attempt("Case@Example.com")

        with pytest.raises(RateLimitedError):
            rate_limiter.record_attempt("case@example.com")


class TestClear:
    def test_reset_clears_counter(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.record_attempt("reset@example.com")

        rate_limiter.clear("reset@example.com")

        rate_limiter.record_attempt("reset@example.com")

