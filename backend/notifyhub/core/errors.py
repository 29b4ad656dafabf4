"""Error hierarchy shared by every notifyhub module.

Errors are not logged where they are raised. The code that catches one logs
it together with its ``code`` and ``details``.
"""

from typing import Any


class NotifyHubError(Exception):
    """Base exception for all notifyhub errors.

    ``message`` is the bare reason recorded on aggregates and results;
    ``str()`` prefixes it with the error code for log lines and tracebacks.
    """

    default_code: str = "ERROR"
    status_code: int = 500
    retryable: bool = False

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message
        self.code = kwargs.get("code") or self.default_code
        self.details: dict[str, Any] = kwargs.get("details") or {}
        self.user_message = kwargs.get("user_message") or message
        self.__cause__ = kwargs.get("cause")

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class DomainError(NotifyHubError):
    """Broken business rule."""

    default_code = "DOMAIN_ERROR"
    status_code = 400


class InfrastructureError(NotifyHubError):
    """Failure of something outside the domain: config, providers, the event bus."""

    default_code = "INFRASTRUCTURE_ERROR"
    retryable = True


class ValidationError(NotifyHubError):
    """Invalid input, optionally tied to one field."""

    default_code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, message: str, field: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        if field:
            self.details["field"] = field


class NotFoundError(NotifyHubError):
    default_code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, identifier: Any, **kwargs: Any) -> None:
        super().__init__(
            f"{resource} not found: {identifier}",
            user_message=f"The requested {resource.lower()} was not found",
            **kwargs,
        )
        self.details.update({"resource": resource, "identifier": str(identifier)})


class ConfigurationError(InfrastructureError):
    """Missing or invalid setting. Retrying never helps."""

    default_code = "CONFIGURATION_ERROR"
    retryable = False

    def __init__(self, message: str, config_key: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, user_message="Service configuration issue", **kwargs)
        if config_key:
            self.details["config_key"] = config_key


class ExternalServiceError(InfrastructureError):
    """A provider call failed; ``message`` names the provider."""

    default_code = "EXTERNAL_SERVICE_ERROR"
    status_code = 502

    def __init__(
        self,
        service: str,
        message: str,
        service_status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"{service} error: {message}",
            user_message="External service temporarily unavailable",
            **kwargs,
        )
        self.details.update({"service": service, "service_status_code": service_status_code})


def error_message(exc: BaseException) -> str:
    """Return the human-readable message of an exception.

    notifyhub errors decorate ``str()`` with their code; failure reasons
    recorded on aggregates use the bare message instead.
    """
    if isinstance(exc, NotifyHubError):
        return exc.message
    return str(exc) or exc.__class__.__name__
