"""Notification displays — where an alert is shown to the local user."""

from __future__ import annotations

import abc
import sys
from datetime import UTC, datetime
from typing import TextIO
from uuid import uuid4

import structlog

from src.core.types import Alert, AlertLevel
from src.presentation.formatters import format_alert, render_text

logger = structlog.stdlib.get_logger()


class NotificationDisplay(abc.ABC):
    """Base class for visual alert presentation."""

    @abc.abstractmethod
    def show(self, alert: Alert) -> bool:
        """Display *alert*. Returns True on success; may raise on failure."""

    def show_simple(self, title: str, message: str) -> bool:
        """Display a plain informational status notification."""
        return self.show(
            Alert(
                id=str(uuid4()),
                title=title,
                message=message,
                level=AlertLevel.INFO,
                requires_confirmation=False,
                timestamp=datetime.now(UTC),
            )
        )


class ConsoleDisplay(NotificationDisplay):
    """Writes a framed text block to a terminal stream.

    *confirm_url* is a template with an ``{alert_id}`` placeholder, shown
    next to alerts that need confirmation so the user knows where to ack.
    """

    def __init__(
        self,
        app_id: str = "NotificationAgent",
        stream: TextIO | None = None,
        confirm_url: str | None = None,
    ) -> None:
        self.app_id = app_id
        self._stream = stream
        self._confirm_url = confirm_url

    def show(self, alert: Alert) -> bool:
        content = format_alert(alert)
        hint = self._confirm_url.format(alert_id=alert.id) if self._confirm_url else None
        stream = self._stream or sys.stdout
        stream.write(f"[{self.app_id}]\n" + render_text(content, confirm_hint=hint))
        stream.flush()
        logger.info("notification_displayed", alert_id=alert.id)
        return True
