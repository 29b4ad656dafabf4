"""Tests for environment-driven configuration."""

import pytest

from notifyhub.core.config import (
    DeliveryConfig,
    EnvironmentLoader,
    MailtrapConfig,
    RateLimiterConfig,
    Settings,
    WahaConfig,
)
from notifyhub.core.enums import Environment, LogLevel
from notifyhub.core.errors import ConfigurationError

MANAGED_KEYS = [
    "NOTIFYHUB_ENVIRONMENT",
    "NOTIFYHUB_LOG_LEVEL",
    "RATE_LIMITER_MAX_REQUESTS",
    "RATE_LIMITER_WINDOW_MS",
    "WHATSAPP_CHUNK_SIZE",
    "WHATSAPP_CHUNK_DELAY_SECONDS",
    "WAHA_BASE_URL",
    "WAHA_API_KEY",
    "MAILTRAP_API_TOKEN",
    "SMTP_PASSWORD",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in MANAGED_KEYS:
        # setenv first so teardown also removes values an env file loads
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


class TestEnvironmentLoader:
    def test_integer(self, clean_env):
        clean_env.setenv("SOME_INT", " 42 ")
        loader = EnvironmentLoader(env_file="")

        assert loader.get_integer("SOME_INT") == 42
        assert loader.get_integer("MISSING_INT", 7) == 7

    def test_integer_below_minimum(self, clean_env):
        clean_env.setenv("SOME_INT", "0")

        with pytest.raises(ConfigurationError):
            EnvironmentLoader(env_file="").get_integer("SOME_INT", min_value=1)

    def test_not_a_number(self, clean_env):
        clean_env.setenv("SOME_FLOAT", "fast")

        with pytest.raises(ConfigurationError):
            EnvironmentLoader(env_file="").get_float("SOME_FLOAT")

    @pytest.mark.parametrize(("raw", "expected"), [("yes", True), ("0", False), ("ON", True)])
    def test_boolean(self, clean_env, raw, expected):
        clean_env.setenv("SOME_FLAG", raw)

        assert EnvironmentLoader(env_file="").get_boolean("SOME_FLAG") is expected

    def test_enum_by_value_or_name(self, clean_env):
        loader = EnvironmentLoader(env_file="")

        clean_env.setenv("SOME_ENV", "prod")
        assert loader.get_enum("SOME_ENV", Environment) is Environment.PRODUCTION
        clean_env.setenv("SOME_ENV", "testing")
        assert loader.get_enum("SOME_ENV", Environment) is Environment.TESTING
        clean_env.setenv("SOME_ENV", "debug")
        assert loader.get_enum("SOME_ENV", LogLevel) is LogLevel.DEBUG

    def test_env_file_does_not_override_environment(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            '# comment\nWAHA_BASE_URL="http://from-file:3000"\nWAHA_API_KEY=from-file\n'
        )
        clean_env.setenv("WAHA_API_KEY", "from-env")

        settings = Settings(env_file=str(env_file))

        assert settings.waha.base_url == "http://from-file:3000"
        assert settings.waha.api_key == "from-env"


class TestSettings:
    def test_defaults(self, clean_env):
        settings = Settings(env_file="")

        assert settings.rate_limiter.max_requests == 10
        assert settings.rate_limiter.window_ms == 60_000
        assert settings.delivery.chunk_size == 3
        assert settings.delivery.chunk_delay_seconds == 60.0
        assert settings.waha.default_session == "default"
        assert not settings.mailtrap.is_configured

    def test_smtp_password_is_token_fallback(self, clean_env):
        clean_env.setenv("SMTP_PASSWORD", "legacy-token")

        assert Settings(env_file="").mailtrap.api_token == "legacy-token"

    def test_invalid_rate_limit(self, clean_env):
        clean_env.setenv("RATE_LIMITER_MAX_REQUESTS", "0")

        with pytest.raises(ConfigurationError):
            Settings(env_file="")

    def test_to_dict_hides_secrets(self, clean_env):
        clean_env.setenv("MAILTRAP_API_TOKEN", "mt-secret")
        clean_env.setenv("WAHA_API_KEY", "waha-secret")

        data = Settings(env_file="").to_dict()

        assert data["mailtrap"]["configured"] is True
        assert "mt-secret" not in str(data)
        assert "waha-secret" not in str(data)


class TestSections:
    def test_rate_limiter_config(self):
        with pytest.raises(ConfigurationError):
            RateLimiterConfig(window_ms=0)

    def test_delivery_config(self):
        with pytest.raises(ConfigurationError):
            DeliveryConfig(chunk_size=0)
        with pytest.raises(ConfigurationError):
            DeliveryConfig(chunk_delay_seconds=-1)

    def test_waha_config_strips_trailing_slash(self):
        assert WahaConfig(base_url="http://waha:3000/").base_url == "http://waha:3000"

    def test_waha_config_requires_http_url(self):
        with pytest.raises(ConfigurationError):
            WahaConfig(base_url="waha:3000")

    def test_mailtrap_sender_must_be_email(self):
        with pytest.raises(ConfigurationError):
            MailtrapConfig(sender_email="incluir")
