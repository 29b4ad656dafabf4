"""HTML templates for outgoing notifications."""

from notifyhub.modules.notification.infrastructure.templates.renderer import (
    EmailTemplateRenderer,
)

__all__ = ["EmailTemplateRenderer"]
