"""Alert dispatcher — presents inbound alerts and tracks their confirmation."""

from __future__ import annotations

import asyncio

import structlog

from src.agent.exceptions import QueueClosedError
from src.agent.queues import ConfirmationQueue
from src.agent.registry import ConfirmationRegistry
from src.core.types import Alert, Identity
from src.presentation.display import NotificationDisplay
from src.presentation.sound import SoundPlayer

logger = structlog.stdlib.get_logger()


class AlertDispatcher:
    """Bridges inbound alerts to presentation and the confirmation registry.

    - Sound playback is fire-and-forget; failures are logged.
    - Display is synchronous; failures are logged.
    - Alerts that require confirmation are registered regardless of how
      presentation went.

    Manual confirmations from the local user go through :meth:`confirm`,
    which resolves the registry entry and enqueues the result for sending.
    """

    def __init__(
        self,
        registry: ConfirmationRegistry,
        outbound: ConfirmationQueue,
        alerts: asyncio.Queue[Alert],
        sound: SoundPlayer,
        display: NotificationDisplay,
        identity: Identity,
    ) -> None:
        self._registry = registry
        self._outbound = outbound
        self._alerts = alerts
        self._sound = sound
        self._display = display
        self._identity = identity
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._handled = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def handled_count(self) -> int:
        return self._handled

    # ── Lifecycle ───────────────────────────────────────────────

    async def start(self) -> None:
        """Start consuming the inbound alert queue."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._consume_loop(), name="alert-dispatcher")

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _consume_loop(self) -> None:
        while self._running:
            alert = await self._alerts.get()
            try:
                await self.handle_alert(alert)
            except Exception:
                logger.exception("alert_handle_error", alert_id=alert.id)

    # ── Alert handling ──────────────────────────────────────────

    async def handle_alert(self, alert: Alert) -> None:
        logger.info(
            "alert_processing",
            alert_id=alert.id,
            level=alert.level.label,
            title=alert.title,
        )
        self._handled += 1

        try:
            self._sound.play_async(alert.sound_filename)
        except Exception:
            logger.exception("sound_dispatch_error", alert_id=alert.id)

        try:
            self._display.show(alert)
        except Exception:
            logger.exception("notification_display_error", alert_id=alert.id)

        if alert.requires_confirmation:
            await self._registry.register(alert)

    # ── Manual confirmation ─────────────────────────────────────

    async def confirm(self, alert_id: str) -> bool:
        """Confirm *alert_id* as the local user.

        Returns False when the alert was not pending (logged by the registry)
        or when the outbound queue is closed. A closed queue leaves the entry
        pending.
        """
        if self._outbound.closed:
            logger.warning("confirmation_rejected_queue_closed", alert_id=alert_id)
            return False

        confirmation = await self._registry.confirm(alert_id, self._identity)
        if confirmation is None:
            return False
        try:
            await self._outbound.put(confirmation)
        except QueueClosedError:
            logger.error("confirmation_undeliverable", alert_id=alert_id)
            return False
        return True

    def pending_count(self) -> int:
        return self._registry.count()

    def pending_ids(self) -> set[str]:
        return self._registry.ids()
