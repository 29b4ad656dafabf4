"""Application configuration management.

Settings are read from environment variables (optionally seeded from a
``.env`` file), converted to typed values and grouped into validated
dataclass sections.

Architecture:
- EnvironmentLoader: Environment variable loading with type conversion
- RateLimiterConfig: Sliding-window limits for outbound vendor calls
- DeliveryConfig: Chunking and pacing of throttled batch delivery
- WahaConfig: WhatsApp HTTP API (WAHA) gateway connection
- MailtrapConfig: Mailtrap email API connection and sender identity
- LoggingSettings: Log level and output format
- Settings: Main configuration object holding every section
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any

from notifyhub.core.enums import Environment, LogFormat, LogLevel
from notifyhub.core.errors import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class EnvironmentLoader:
    """
    Environment variable loader with type conversion and validation.

    Values already present in ``os.environ`` win over values from the
    environment file.
    """

    def __init__(self, env_file: str = ".env"):
        """
        Initialize environment loader.

        Args:
            env_file: Optional environment file to load
        """
        self.env_file = env_file
        self._load_env_file()

    def _load_env_file(self) -> None:
        """Load environment variables from file if it exists."""
        if not self.env_file or not os.path.exists(self.env_file):
            return

        try:
            with open(self.env_file, encoding="utf-8") as f:
                for raw_line in f:
                    line = raw_line.strip()

                    if not line or line.startswith("#") or "=" not in line:
                        continue

                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()

                    if (value.startswith('"') and value.endswith('"')) or (
                        value.startswith("'") and value.endswith("'")
                    ):
                        value = value[1:-1]

                    if key not in os.environ:
                        os.environ[key] = value

        except OSError as e:
            raise ConfigurationError(
                f"Failed to load environment file {self.env_file}: {e}"
            ) from e

    def get_string(
        self, key: str, default: str | None = None, required: bool = False
    ) -> str | None:
        """Get string value from environment."""
        value = os.environ.get(key, default)
        if required and not value:
            raise ConfigurationError(f"{key} is required", config_key=key)
        return value

    def get_integer(
        self,
        key: str,
        default: int | None = None,
        required: bool = False,
        min_value: int | None = None,
    ) -> int | None:
        """Get integer value from environment."""
        raw = os.environ.get(key)
        if raw is None or raw.strip() == "":
            if required and default is None:
                raise ConfigurationError(f"{key} is required", config_key=key)
            return default

        try:
            value = int(raw.strip())
        except ValueError as e:
            raise ConfigurationError(
                f"{key} must be an integer, got {raw!r}", config_key=key
            ) from e

        if min_value is not None and value < min_value:
            raise ConfigurationError(
                f"{key} must be at least {min_value}, got {value}", config_key=key
            )
        return value

    def get_float(
        self,
        key: str,
        default: float | None = None,
        min_value: float | None = None,
    ) -> float | None:
        """Get float value from environment."""
        raw = os.environ.get(key)
        if raw is None or raw.strip() == "":
            return default

        try:
            value = float(raw.strip())
        except ValueError as e:
            raise ConfigurationError(
                f"{key} must be a number, got {raw!r}", config_key=key
            ) from e

        if min_value is not None and value < min_value:
            raise ConfigurationError(
                f"{key} must be at least {min_value}, got {value}", config_key=key
            )
        return value

    def get_boolean(self, key: str, default: bool = False) -> bool:
        """Get boolean value from environment."""
        raw = os.environ.get(key)
        if raw is None:
            return default

        normalized = raw.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        raise ConfigurationError(
            f"{key} must be a boolean, got {raw!r}", config_key=key
        )

    def get_enum(
        self, key: str, enum_class: type[Enum], default: Enum | None = None
    ) -> Enum | None:
        """Get enum value from environment, matching by value or by name."""
        raw = os.environ.get(key)
        if raw is None:
            return default

        normalized = raw.strip()
        for member in enum_class:
            member_value = getattr(member, "level_name", member.value)
            if str(member_value).lower() == normalized.lower():
                return member
            if member.name.lower() == normalized.lower():
                return member

        allowed = ", ".join(member.name.lower() for member in enum_class)
        raise ConfigurationError(
            f"{key} must be one of: {allowed}; got {raw!r}", config_key=key
        )


# =====================================================================================
# CONFIGURATION SECTIONS
# =====================================================================================


@dataclass
class RateLimiterConfig:
    """Sliding-window limits shared by all callers of one service key."""

    max_requests: int = field(default=10)
    window_ms: int = field(default=60_000)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.max_requests <= 0:
            raise ConfigurationError(
                "Rate limiter max_requests must be positive",
                config_key="RATE_LIMITER_MAX_REQUESTS",
            )
        if self.window_ms <= 0:
            raise ConfigurationError(
                "Rate limiter window_ms must be positive",
                config_key="RATE_LIMITER_WINDOW_MS",
            )


@dataclass
class DeliveryConfig:
    """Chunking and pacing for throttled batch delivery."""

    chunk_size: int = field(default=3)
    chunk_delay_seconds: float = field(default=60.0)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.chunk_size < 1:
            raise ConfigurationError(
                "Chunk size must be at least 1", config_key="WHATSAPP_CHUNK_SIZE"
            )
        if self.chunk_delay_seconds < 0:
            raise ConfigurationError(
                "Chunk delay cannot be negative",
                config_key="WHATSAPP_CHUNK_DELAY_SECONDS",
            )


@dataclass
class WahaConfig:
    """Connection to the WAHA WhatsApp HTTP gateway."""

    base_url: str = field(default="http://localhost:3002")
    default_session: str = field(default="default")
    timeout_seconds: float = field(default=30.0)
    api_key: str | None = field(default=None)

    def __post_init__(self):
        self.base_url = self.base_url.rstrip("/")
        self.validate()

    def validate(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"WAHA base URL must be an http(s) URL, got {self.base_url!r}",
                config_key="WAHA_BASE_URL",
            )
        if not self.default_session:
            raise ConfigurationError(
                "WAHA default session cannot be empty",
                config_key="WAHA_DEFAULT_SESSION",
            )
        if self.timeout_seconds <= 0:
            raise ConfigurationError(
                "WAHA timeout must be positive", config_key="WAHA_TIMEOUT_SECONDS"
            )


@dataclass
class MailtrapConfig:
    """Mailtrap sending API credentials and sender identity."""

    api_token: str | None = field(default=None)
    base_url: str = field(default="https://send.api.mailtrap.io")
    sender_email: str = field(default="coordenacao@programaincluir.org")
    sender_name: str = field(default="Programa Incluir")
    category: str = field(default="Notification")
    timeout_seconds: float = field(default=30.0)

    def __post_init__(self):
        self.base_url = self.base_url.rstrip("/")
        self.validate()

    def validate(self) -> None:
        if "@" not in self.sender_email:
            raise ConfigurationError(
                f"Sender email is invalid: {self.sender_email!r}",
                config_key="MAILTRAP_SENDER_EMAIL",
            )
        if self.timeout_seconds <= 0:
            raise ConfigurationError(
                "Mailtrap timeout must be positive",
                config_key="MAILTRAP_TIMEOUT_SECONDS",
            )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_token)


@dataclass
class LoggingSettings:
    level: LogLevel = field(default=LogLevel.INFO)
    format: LogFormat = field(default=LogFormat.JSON)


class Settings:
    """
    Main application settings.

    Usage Example:
        settings = get_settings()
        limiter = SlidingWindowRateLimiter(
            max_requests=settings.rate_limiter.max_requests,
            window_ms=settings.rate_limiter.window_ms,
        )
    """

    def __init__(self, env_file: str = ".env"):
        """
        Initialize settings with environment variable loading.

        Args:
            env_file: Environment file to load variables from
        """
        self.env_loader = EnvironmentLoader(env_file)

        self._load_application_config()
        self._load_rate_limiter_config()
        self._load_delivery_config()
        self._load_vendor_config()

    def _load_application_config(self) -> None:
        self.app_name = self.env_loader.get_string("NOTIFYHUB_APP_NAME", "notifyhub")
        self.environment = self.env_loader.get_enum(
            "NOTIFYHUB_ENVIRONMENT", Environment, Environment.DEVELOPMENT
        )
        self.logging = LoggingSettings(
            level=self.env_loader.get_enum(
                "NOTIFYHUB_LOG_LEVEL", LogLevel, LogLevel.INFO
            ),
            format=self.env_loader.get_enum(
                "NOTIFYHUB_LOG_FORMAT", LogFormat, LogFormat.JSON
            ),
        )

    def _load_rate_limiter_config(self) -> None:
        self.rate_limiter = RateLimiterConfig(
            max_requests=self.env_loader.get_integer(
                "RATE_LIMITER_MAX_REQUESTS", 10, min_value=1
            ),
            window_ms=self.env_loader.get_integer(
                "RATE_LIMITER_WINDOW_MS", 60_000, min_value=1
            ),
        )

    def _load_delivery_config(self) -> None:
        self.delivery = DeliveryConfig(
            chunk_size=self.env_loader.get_integer(
                "WHATSAPP_CHUNK_SIZE", 3, min_value=1
            ),
            chunk_delay_seconds=self.env_loader.get_float(
                "WHATSAPP_CHUNK_DELAY_SECONDS", 60.0, min_value=0
            ),
        )

    def _load_vendor_config(self) -> None:
        self.waha = WahaConfig(
            base_url=self.env_loader.get_string(
                "WAHA_BASE_URL", "http://localhost:3002"
            ),
            default_session=self.env_loader.get_string(
                "WAHA_DEFAULT_SESSION", "default"
            ),
            timeout_seconds=self.env_loader.get_float("WAHA_TIMEOUT_SECONDS", 30.0),
            api_key=self.env_loader.get_string("WAHA_API_KEY"),
        )

        # SMTP_PASSWORD is the historical name of the Mailtrap token
        api_token = self.env_loader.get_string(
            "MAILTRAP_API_TOKEN"
        ) or self.env_loader.get_string("SMTP_PASSWORD")

        self.mailtrap = MailtrapConfig(
            api_token=api_token,
            base_url=self.env_loader.get_string(
                "MAILTRAP_BASE_URL", "https://send.api.mailtrap.io"
            ),
            sender_email=self.env_loader.get_string(
                "MAILTRAP_SENDER_EMAIL", "coordenacao@programaincluir.org"
            ),
            sender_name=self.env_loader.get_string(
                "MAILTRAP_SENDER_NAME", "Programa Incluir"
            ),
            timeout_seconds=self.env_loader.get_float(
                "MAILTRAP_TIMEOUT_SECONDS", 30.0
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Non-secret view of the configuration, for diagnostics."""
        return {
            "app_name": self.app_name,
            "environment": self.environment.value,
            "log_level": self.logging.level.level_name,
            "rate_limiter": {
                "max_requests": self.rate_limiter.max_requests,
                "window_ms": self.rate_limiter.window_ms,
            },
            "delivery": {
                "chunk_size": self.delivery.chunk_size,
                "chunk_delay_seconds": self.delivery.chunk_delay_seconds,
            },
            "waha": {
                "base_url": self.waha.base_url,
                "default_session": self.waha.default_session,
            },
            "mailtrap": {
                "base_url": self.mailtrap.base_url,
                "sender_email": self.mailtrap.sender_email,
                "configured": self.mailtrap.is_configured,
            },
        }


@lru_cache
def get_settings(env_file: str = ".env") -> Settings:
    """
    Get cached settings instance.

    Args:
        env_file: Environment file to load

    Returns:
        Settings: Application settings
    """
    return Settings(env_file)
