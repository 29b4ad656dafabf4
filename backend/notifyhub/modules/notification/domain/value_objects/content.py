"""Notification message content."""

from typing import Any

from notifyhub.core.domain.base import ValueObject
from notifyhub.core.errors import ValidationError

MAX_TITLE_LENGTH = 255
MAX_BODY_LENGTH = 5000


class NotificationContent(ValueObject):
    """Title, body and free-form metadata of a notification.

    The title may be empty (messaging channels usually have none); the body
    is required.
    """

    def __init__(
        self,
        title: str | None,
        body: str,
        metadata: dict[str, Any] | None = None,
    ):
        """Initialize notification content.

        Args:
            title: Optional title, at most 255 characters
            body: Message body, required, at most 5000 characters
            metadata: Additional content metadata; copied
        """
        super().__init__()

        title = title or ""
        if len(title.strip()) > MAX_TITLE_LENGTH:
            raise ValidationError(
                f"Notification title cannot exceed {MAX_TITLE_LENGTH} characters",
                field="title",
            )

        self.validate_not_empty(body, "body")
        self.validate_max_length(body, MAX_BODY_LENGTH, "body")

        self.title = title.strip()
        self.body = body.strip()
        self.metadata = dict(metadata) if metadata else {}

        self._freeze()

    @property
    def has_title(self) -> bool:
        return bool(self.title)

    def __str__(self) -> str:
        preview = self.body if len(self.body) <= 50 else f"{self.body[:47]}..."
        if self.title:
            return f"{self.title}: {preview}"
        return preview
