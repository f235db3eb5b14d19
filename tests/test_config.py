"""Tests for settings and the fail-closed startup check."""

import logging

import pytest

from food_ordering.core.config import (
    RateLimitBackend,
    RegistrationMode,
    is_placeholder_secret,
    setup_logging,
)
from food_ordering.core.errors import ConfigurationError
from food_ordering.main import create_app

from tests.conftest import make_settings


class TestSettings:
    def test_defaults(self):
        settings = make_settings()
        assert settings.token_lifetime_minutes == 120
        assert settings.rate_limit_window_seconds == 900
        assert settings.rate_limit_max_requests == 100
        assert settings.auth_rate_limit_max_requests == 5
        assert settings.registration_mode == RegistrationMode.STRICT
        assert settings.rate_limit_backend == RateLimitBackend.MEMORY
        assert not settings.trust_proxy_headers

    def test_choices_are_case_insensitive(self):
        settings = make_settings(registration_mode="Lenient", rate_limit_backend="REDIS")
        assert settings.registration_mode == RegistrationMode.LENIENT
        assert settings.rate_limit_backend == RateLimitBackend.REDIS

    def test_cors_origins_list(self):
        settings = make_settings(cors_allowed_origins="http://a.test, http://b.test,")
        assert settings.cors_allowed_origins_list == ["http://a.test", "http://b.test"]

    def test_secrets_are_not_printed(self):
        assert "test-signing-key" not in repr(make_settings())


class TestSecurityConfiguration:
    def test_secure_configuration_passes(self):
        settings = make_settings()
        assert settings.validate_security_config() == []
        settings.ensure_secure_configuration()

    def test_missing_secrets_are_all_reported(self):
        settings = make_settings(jwt_secret=None, admin_password=None)
        assert settings.validate_security_config() == [
            "JWT_SECRET is not set",
            "ADMIN_PASSWORD is not set",
        ]

    @pytest.mark.parametrize("overrides", [
        {"jwt_secret": "your-secret-key"},
        {"jwt_secret": "  "},
        {"admin_password": "admin123"},
    ])
    def test_startup_aborts_on_insecure_secrets(self, overrides):
        with pytest.raises(ConfigurationError):
            create_app(make_settings(**overrides))

    @pytest.mark.parametrize("value,expected", [
        ("secret", True),
        (" ChangeMe ", True),
        ("admin123", True),
        ("k3y-only-this-deployment-knows", False),
    ])
    def test_placeholder_detection(self, value, expected):
        assert is_placeholder_secret(value) is expected


class TestLogging:
    def test_returns_package_logger(self):
        logger = setup_logging(make_settings())
        assert logger.name == "food_ordering"

    def test_quiets_sql_engine(self):
        setup_logging(make_settings(debug=True))
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
