"""ConfirmationRegistry — pending alerts awaiting human acknowledgement.

The registry is the only structure mutated from several concurrent paths
(inbound dispatch, manual confirmation, timeout expiry). Each operation runs
inside one ``asyncio.Lock`` critical section, so a confirm racing a sweep or
a timer on the same id has exactly one winner; the loser sees ``None`` or an
empty result.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta

import structlog

from src.agent.exceptions import QueueClosedError
from src.core.types import Alert, Confirmation, Identity, PendingEntry

logger = structlog.stdlib.get_logger()

# Receives confirmations synthesized when an entry times out.
ConfirmationSink = Callable[[Confirmation], Awaitable[None]]
Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ConfirmationRegistry:
    """Pending confirmations keyed by alert id, each with a one-shot timeout.

    ``register`` arms a timer per entry; when it fires and the entry is still
    the same registration, a Confirmation is synthesized with the registry's
    default actor and handed to ``on_expired``. ``confirm`` and
    ``sweep_expired`` cancel the timers of the entries they remove.

    Usage::

        registry = ConfirmationRegistry(
            client_id="agent-1",
            actor=local_identity(),
            on_expired=outbound.put,
        )
        await registry.register(alert)
        confirmation = await registry.confirm(alert.id, actor)
    """

    DEFAULT_TIMEOUT_SECS = 300.0

    def __init__(
        self,
        client_id: str,
        actor: Identity | None = None,
        timeout_secs: float = DEFAULT_TIMEOUT_SECS,
        on_expired: ConfirmationSink | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._client_id = client_id
        self._actor = actor or Identity()
        self._timeout_secs = timeout_secs
        self._on_expired = on_expired
        self._clock = clock or _utcnow
        self._entries: dict[str, PendingEntry] = {}
        self._timers: dict[str, asyncio.Task[None]] = {}
        self._lock = asyncio.Lock()
        self._confirmed_count = 0
        self._expired_count = 0

    # ── Properties ────────────────────────────────────────────────

    @property
    def client_id(self) -> str:
        return self._client_id

    @property
    def timeout_secs(self) -> float:
        return self._timeout_secs

    @property
    def confirmed_count(self) -> int:
        """Entries resolved by an explicit confirm."""
        return self._confirmed_count

    @property
    def expired_count(self) -> int:
        """Entries resolved by timeout (timer or sweep)."""
        return self._expired_count

    # ── Operations ────────────────────────────────────────────────

    async def register(self, alert: Alert) -> None:
        """Track *alert* until confirmed or timed out.

        Re-registering an id overwrites the entry and restarts its timer.
        """
        if not alert.requires_confirmation:
            logger.warning("registry_register_skipped", alert_id=alert.id)
            return

        async with self._lock:
            entry = PendingEntry(alert=alert, registered_at=self._clock())
            replaced = alert.id in self._entries
            self._entries[alert.id] = entry
            self._cancel_timer(alert.id)
            self._timers[alert.id] = asyncio.create_task(
                self._expire_after(entry),
                name=f"confirmation-timeout-{alert.id}",
            )
            pending = len(self._entries)

        logger.info(
            "confirmation_pending",
            alert_id=alert.id,
            replaced=replaced,
            pending=pending,
            timeout_secs=self._timeout_secs,
        )

    async def confirm(
        self, alert_id: str, actor: Identity | None = None
    ) -> Confirmation | None:
        """Resolve *alert_id* on behalf of *actor*.

        Returns the Confirmation, or None when the id is not pending
        (unknown or already resolved); that is a warning, not a failure.
        """
        async with self._lock:
            entry = self._entries.pop(alert_id, None)
            if entry is not None:
                self._cancel_timer(alert_id)
                self._confirmed_count += 1

        if entry is None:
            logger.warning("confirmation_not_pending", alert_id=alert_id)
            return None

        confirmation = self._build(alert_id, actor or self._actor, self._clock())
        logger.info(
            "alert_confirmed",
            alert_id=alert_id,
            username=confirmation.username,
        )
        return confirmation

    async def sweep_expired(
        self,
        now: datetime | None = None,
        timeout_secs: float | None = None,
    ) -> list[Confirmation]:
        """Remove every entry with ``registered_at + timeout <= now``.

        Returns one synthesized Confirmation per removed entry.
        """
        now = now or self._clock()
        timeout = timedelta(
            seconds=self._timeout_secs if timeout_secs is None else timeout_secs
        )

        async with self._lock:
            expired = [
                entry
                for entry in self._entries.values()
                if entry.registered_at + timeout <= now
            ]
            for entry in expired:
                del self._entries[entry.alert.id]
                self._cancel_timer(entry.alert.id)
            self._expired_count += len(expired)

        confirmations = [self._build(e.alert.id, self._actor, now) for e in expired]
        for confirmation in confirmations:
            logger.warning("alert_auto_confirmed", alert_id=confirmation.alert_id, via="sweep")
        return confirmations

    def count(self) -> int:
        return len(self._entries)

    def ids(self) -> set[str]:
        return set(self._entries)

    def get(self, alert_id: str) -> PendingEntry | None:
        return self._entries.get(alert_id)

    async def close(self) -> None:
        """Cancel all pending timers (process shutdown)."""
        timers = list(self._timers.values())
        self._timers.clear()
        for task in timers:
            task.cancel()
        for task in timers:
            try:
                await task
            except asyncio.CancelledError:
                pass

    # ── Internals ─────────────────────────────────────────────────

    def _build(self, alert_id: str, actor: Identity, at: datetime) -> Confirmation:
        return Confirmation(
            alert_id=alert_id,
            client_id=self._client_id,
            confirmed_at=at,
            hostname=actor.hostname,
            username=actor.username,
        )

    def _cancel_timer(self, alert_id: str) -> None:
        # Caller holds the lock.
        task = self._timers.pop(alert_id, None)
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    async def _expire_after(self, entry: PendingEntry) -> None:
        alert_id = entry.alert.id
        await asyncio.sleep(self._timeout_secs)

        async with self._lock:
            # Confirmed, swept or re-registered in the meantime.
            if self._entries.get(alert_id) is not entry:
                return
            del self._entries[alert_id]
            self._timers.pop(alert_id, None)
            self._expired_count += 1

        confirmation = self._build(alert_id, self._actor, self._clock())
        logger.warning(
            "alert_auto_confirmed",
            alert_id=alert_id,
            via="timeout",
            timeout_secs=self._timeout_secs,
        )

        if self._on_expired is None:
            return
        try:
            await self._on_expired(confirmation)
        except QueueClosedError:
            logger.warning("auto_confirmation_undeliverable", alert_id=alert_id)
        except Exception:
            logger.exception("auto_confirmation_sink_error", alert_id=alert_id)
