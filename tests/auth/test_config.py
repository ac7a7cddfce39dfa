"""Tests for auth/config.py - Auth configuration with validation."""

import pytest
from pydantic import ValidationError

from auth.config import AuthConfig


class TestAuthConfigDefaults:
    """Tests that AuthConfig has sensible defaults."""

    def test_session_expiry_default(self):
        assert AuthConfig().session_expiry_days == 7

    def test_single_session_by_default(self):
        assert AuthConfig().single_session is True

    def test_bcrypt_cost_default(self):
        assert AuthConfig().bcrypt_rounds == 12

    def test_cookie_defaults(self):
        config = AuthConfig()
        assert config.cookie_name == "auth_token"
        assert config.cookie_secure is False
        assert config.cookie_samesite == "lax"

    def test_rate_limit_defaults(self):
        config = AuthConfig()
        assert config.rate_limit_attempts == 5
        assert config.rate_limit_window_minutes == 15

    def test_role_defaults(self):
        config = AuthConfig()
        assert config.admin_emails == []
        assert config.legacy_admin_email_match is True


class TestAuthConfigValidation:
    """Tests that AuthConfig enforces validation bounds."""

    def test_session_expiry_min_bound(self):
        with pytest.raises(ValidationError):
            AuthConfig(session_expiry_days=0)

    def test_session_expiry_max_bound(self):
        with pytest.raises(ValidationError):
            AuthConfig(session_expiry_days=91)

    def test_bcrypt_rounds_bounds(self):
        with pytest.raises(ValidationError):
            AuthConfig(bcrypt_rounds=3)
        with pytest.raises(ValidationError):
            AuthConfig(bcrypt_rounds=17)

    def test_rate_limit_attempts_min_bound(self):
        with pytest.raises(ValidationError):
            AuthConfig(rate_limit_attempts=0)

    def test_rate_limit_window_max_bound(self):
        with pytest.raises(ValidationError):
            AuthConfig(rate_limit_window_minutes=61)

    def test_valid_custom_values(self):
        config = AuthConfig(session_expiry_days=30, bcrypt_rounds=4, admin_emails=["boss@x.com"])
        assert config.session_expiry_days == 30
        assert config.admin_emails == ["boss@x.com"]
