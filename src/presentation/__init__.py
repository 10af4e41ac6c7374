"""Presentation collaborators — sound, display and local identity."""

from src.presentation.display import ConsoleDisplay, NotificationDisplay
from src.presentation.formatters import NotificationContent, format_alert, render_text
from src.presentation.identity import get_hostname, get_username, local_identity
from src.presentation.sound import SoundPlayer

__all__ = [
    "ConsoleDisplay",
    "NotificationContent",
    "NotificationDisplay",
    "SoundPlayer",
    "format_alert",
    "get_hostname",
    "get_username",
    "local_identity",
    "render_text",
]
