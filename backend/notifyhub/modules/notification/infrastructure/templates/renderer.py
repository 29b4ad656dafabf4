"""Jinja2 rendering of notification emails."""

from datetime import date, datetime
from pathlib import Path
from typing import Any

from jinja2 import FileSystemLoader, select_autoescape
from jinja2.sandbox import SandboxedEnvironment

from notifyhub.modules.notification.domain.aggregates import Notification

TEMPLATE_DIR = Path(__file__).parent
EMAIL_TEMPLATE = "email_notification.html"

DEFAULT_FOOTER = (
    "Por favor, não responda a este email. Qualquer dúvida, entre em contato "
    "com o whatsapp do incluir (+55 31 7211-4892)."
)


class EmailTemplateRenderer:
    """Renders a notification into the HTML body of an email.

    Title and body are autoescaped, so user supplied text never becomes markup.
    """

    def __init__(self, footer: str = DEFAULT_FOOTER, template_name: str = EMAIL_TEMPLATE):
        self.footer = footer
        self.env = SandboxedEnvironment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["br_date"] = self._filter_br_date
        self._template = self.env.get_template(template_name)

    @staticmethod
    def _filter_br_date(value: Any) -> str:
        """Format a date the way Brazilian readers expect: dd/mm/yyyy."""
        if isinstance(value, date | datetime):
            return value.strftime("%d/%m/%Y")
        return str(value)

    def render(self, notification: Notification) -> str:
        return self._template.render(
            title=notification.content.title,
            body=notification.content.body,
            channel=notification.channel.value,
            created_at=notification.created_at,
            footer=self.footer,
        )
