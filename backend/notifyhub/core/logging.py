# ruff: noqa: A005
"""structlog setup for notifyhub.

Modules log through ``get_logger(__name__)`` with keyword fields:

    logger = get_logger(__name__)
    logger.info("Batch delivered", batch_id=str(batch.id), sent=3)

Each record is run through ``SensitiveDataFilter`` (provider tokens never
reach a sink in clear text) and ``MessageLengthFilter`` before structlog
renders it. ``log_context`` binds fields such as ``batch_id`` to every
record emitted inside a block.
"""

import logging
import re
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars

from notifyhub.core.enums import Environment, LogFormat, LogLevel
from notifyhub.core.errors import ConfigurationError


@dataclass
class LogConfig:
    """
    Logging settings, adjusted for the environment on creation.

    Development logs to a colored console with call sites, tests only log
    warnings in plain key=value form, and staging and production emit JSON.
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    environment: Environment = Environment.DEVELOPMENT
    enable_caller_info: bool = False
    max_message_length: int = 10000

    def __post_init__(self):
        if self.max_message_length < 1000:
            raise ConfigurationError(
                "Maximum message length must be at least 1000 characters",
                config_key="max_message_length",
            )

        if self.environment == Environment.DEVELOPMENT:
            self.format = LogFormat.CONSOLE
            self.enable_caller_info = True
        elif self.environment == Environment.TESTING:
            self.level = LogLevel.WARNING
            self.format = LogFormat.PLAIN
        else:
            self.format = LogFormat.JSON
            self.enable_caller_info = False


class SensitiveDataFilter:
    """Masks credential fields and bearer tokens, recursing into nested dicts."""

    sensitive_keys = re.compile(
        r"password|token|secret|api.?key|credential|authorization", re.IGNORECASE
    )
    bearer = re.compile(r"Bearer\s+[A-Za-z0-9._\-]+")

    def __init__(self, mask_char: str = "*", preserve_length: bool = False):
        self.mask_char = mask_char
        self.preserve_length = preserve_length

    def filter(self, record: dict[str, Any]) -> dict[str, Any]:
        filtered = {}
        for key, value in record.items():
            if self.sensitive_keys.search(key):
                filtered[key] = self._mask(value)
            elif isinstance(value, str):
                filtered[key] = self.bearer.sub(lambda m: self._mask(m.group()), value)
            elif isinstance(value, dict):
                filtered[key] = self.filter(value)
            else:
                filtered[key] = value
        return filtered

    def _mask(self, value: Any) -> str | None:
        if value is None:
            return None
        if self.preserve_length:
            return self.mask_char * len(str(value))
        return f"{self.mask_char * 3}[MASKED]"


class MessageLengthFilter:
    def __init__(self, max_length: int = 10000, suffix: str = "... [TRUNCATED]"):
        self.max_length = max_length
        self.suffix = suffix

    def filter(self, record: dict[str, Any]) -> dict[str, Any]:
        message = record.get("message", "")
        if not isinstance(message, str) or len(message) <= self.max_length:
            return record

        return {
            **record,
            "message": message[: self.max_length - len(self.suffix)] + self.suffix,
            "original_message_length": len(message),
            "message_truncated": True,
        }


class StructuredLogger:
    """structlog logger that filters every record before emitting it."""

    def __init__(self, name: str, config: LogConfig):
        self.name = name
        self.config = config
        self.filters = [
            SensitiveDataFilter(),
            MessageLengthFilter(config.max_message_length),
        ]
        self._logger = structlog.get_logger(name)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log at error level with the active traceback."""
        self._log(LogLevel.ERROR, message, exc_info=True, **kwargs)

    def _log(self, level: LogLevel, message: str, **kwargs: Any) -> None:
        if level.priority < self.config.level.priority:
            return

        record = {"message": message, **kwargs}
        for log_filter in self.filters:
            record = log_filter.filter(record)

        try:
            getattr(self._logger, level.level_name.lower())(record.pop("message"), **record)
        except Exception:
            # a broken renderer must not take the caller down with it
            fallback = logging.getLogger(self.name)
            fallback.exception("Structured logging failed")
            fallback.log(level.to_logging_level(), message)


class LoggerFactory:
    """Configures structlog once and caches one logger per name."""

    def __init__(self, config: LogConfig):
        self.config = config
        self._loggers: dict[str, StructuredLogger] = {}
        self._configured = False

    def configure_logging(self) -> None:
        if self._configured:
            return

        processors = [
            merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
        ]

        if self.config.enable_caller_info:
            processors.append(
                structlog.processors.CallsiteParameterAdder(
                    parameters=[
                        structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO,
                        structlog.processors.CallsiteParameter.FUNC_NAME,
                    ]
                )
            )

        processors.extend(
            [
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
            ]
        )

        if self.config.format == LogFormat.JSON:
            processors.append(structlog.processors.JSONRenderer())
        elif self.config.format == LogFormat.CONSOLE:
            processors.append(structlog.dev.ConsoleRenderer(colors=True))
        else:
            processors.append(structlog.processors.KeyValueRenderer())

        structlog.configure(
            processors=processors,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=self.config.level.to_logging_level(),
        )

        # provider request lines are only useful while developing
        if self.config.environment == Environment.PRODUCTION:
            logging.getLogger("httpx").setLevel(logging.WARNING)
            logging.getLogger("httpcore").setLevel(logging.WARNING)

        self._configured = True

    def get_logger(self, name: str) -> StructuredLogger:
        self.configure_logging()
        if name not in self._loggers:
            self._loggers[name] = StructuredLogger(name, self.config)
        return self._loggers[name]


_logger_factory: LoggerFactory | None = None


def configure_logging(config: LogConfig | None = None) -> None:
    """
    Configure logging for the process.

    Args:
        config: Logging settings; built from ``get_settings()`` when omitted
    """
    global _logger_factory  # noqa: PLW0603

    if config is None:
        from notifyhub.core.config import get_settings

        settings = get_settings()
        config = LogConfig(
            level=settings.logging.level,
            format=settings.logging.format,
            environment=settings.environment,
        )

    _logger_factory = LoggerFactory(config)
    _logger_factory.configure_logging()


def get_logger(name: str) -> StructuredLogger:
    if _logger_factory is None:
        configure_logging()
    return _logger_factory.get_logger(name)


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind ``kwargs`` to every record logged inside the block."""
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield


__all__ = [
    "LogConfig",
    "MessageLengthFilter",
    "SensitiveDataFilter",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
    "log_context",
]
