"""Domain types shared by the protocol, agent and presentation layers."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import AwareDatetime, BaseModel, ConfigDict


class AlertLevel(StrEnum):
    """Alert severity as sent by the server (lowercase on the wire)."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"
    EMERGENCY = "emergency"

    @property
    def label(self) -> str:
        return self.value.capitalize()


# Default sound per level when the alert names none.
_DEFAULT_SOUNDS: dict[AlertLevel, str] = {
    AlertLevel.EMERGENCY: "alarm_critical.wav",
    AlertLevel.CRITICAL: "alarm_critical.wav",
    AlertLevel.WARNING: "alarm_warning.wav",
    AlertLevel.INFO: "notification.wav",
}


class Alert(BaseModel):
    """Notification pushed from server to client. Identity is ``id``."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    message: str
    level: AlertLevel
    requires_confirmation: bool
    sound_file: str | None = None
    timestamp: AwareDatetime

    @property
    def sound_filename(self) -> str:
        """Sound to play: the explicit ``sound_file`` or the level default."""
        return self.sound_file or _DEFAULT_SOUNDS[self.level]


class Confirmation(BaseModel):
    """Acknowledgement of an alert, sent from client to server."""

    model_config = ConfigDict(frozen=True)

    alert_id: str
    client_id: str
    confirmed_at: AwareDatetime
    hostname: str
    username: str


class Identity(BaseModel):
    """Who resolved an alert — stamped onto every Confirmation."""

    model_config = ConfigDict(frozen=True)

    hostname: str = "unknown"
    username: str = "unknown"


class PendingEntry(BaseModel):
    """An alert awaiting confirmation, with its registration time."""

    model_config = ConfigDict(frozen=True)

    alert: Alert
    registered_at: datetime
