"""Pure functions that turn an Alert into presentable notification content."""

from __future__ import annotations

from pydantic import BaseModel, Field

from src.core.types import Alert, AlertLevel

# ── Presentation policy per level ───────────────────────────────

_SCENARIO: dict[AlertLevel, tuple[str, str]] = {
    AlertLevel.EMERGENCY: ("urgent", "long"),
    AlertLevel.CRITICAL: ("urgent", "long"),
    AlertLevel.WARNING: ("reminder", "long"),
    AlertLevel.INFO: ("default", "short"),
}

_ICONS: dict[AlertLevel, str] = {
    AlertLevel.EMERGENCY: "⚠️",
    AlertLevel.CRITICAL: "🔴",
    AlertLevel.WARNING: "⚡",
    AlertLevel.INFO: "ℹ️",
}

CONFIRM_ACTION = "Confirm Receipt"
DISMISS_ACTION = "Dismiss"


class NotificationContent(BaseModel):
    """Renderer-agnostic notification: what to show and how urgently."""

    alert_id: str
    scenario: str
    duration: str
    icon: str
    title: str
    lines: list[str] = Field(default_factory=list)
    actions: list[str] = Field(default_factory=list)


def format_alert(alert: Alert) -> NotificationContent:
    """Convert an Alert into NotificationContent."""
    scenario, duration = _SCENARIO[alert.level]
    actions = [CONFIRM_ACTION] if alert.requires_confirmation else []
    actions.append(DISMISS_ACTION)
    return NotificationContent(
        alert_id=alert.id,
        scenario=scenario,
        duration=duration,
        icon=_ICONS[alert.level],
        title=f"{_ICONS[alert.level]} {alert.title}",
        lines=[alert.message, f"Alert ID: {alert.id}"],
        actions=actions,
    )


def render_text(content: NotificationContent, confirm_hint: str | None = None) -> str:
    """Render content as a plain-text block for a terminal."""
    width = max(40, len(content.title) + 4, *(len(line) + 4 for line in content.lines))
    border = ("!" if content.scenario == "urgent" else "=") * width
    parts = [border, f"  {content.title}", *(f"  {line}" for line in content.lines)]
    if CONFIRM_ACTION in content.actions and confirm_hint:
        parts.append(f"  [{CONFIRM_ACTION}] {confirm_hint}")
    parts.append(border)
    return "\n".join(parts) + "\n"
