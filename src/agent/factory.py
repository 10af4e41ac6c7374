"""Convenience factory for wiring the agent stack."""

from __future__ import annotations

import asyncio
import functools
from dataclasses import dataclass
from typing import Any

from src.agent.dispatcher import AlertDispatcher
from src.agent.queues import ConfirmationQueue
from src.agent.reconnector import FixedDelayPolicy, Reconnector
from src.agent.registry import ConfirmationRegistry
from src.agent.session import Session
from src.core.config import Settings
from src.core.types import Alert, Identity
from src.control.server import CONFIRM_PATH
from src.presentation.display import ConsoleDisplay, NotificationDisplay
from src.presentation.identity import local_identity
from src.presentation.sound import SoundPlayer


@dataclass
class AgentStack:
    """Everything the entrypoint needs to start, observe and stop the agent."""

    client_id: str
    identity: Identity
    alerts: asyncio.Queue[Alert]
    outbound: ConfirmationQueue
    registry: ConfirmationRegistry
    sound: SoundPlayer
    display: NotificationDisplay
    dispatcher: AlertDispatcher
    reconnector: Reconnector

    def status(self) -> dict[str, Any]:
        outcome = self.reconnector.last_outcome
        return {
            "client_id": self.client_id,
            "state": self.reconnector.state.value,
            "attempts": self.reconnector.attempts,
            "last_outcome": outcome.state.value if outcome else None,
            "outbound_queued": self.outbound.qsize(),
        }


def create_agent_stack(
    settings: Settings,
    identity: Identity | None = None,
    display: NotificationDisplay | None = None,
) -> AgentStack:
    """Build queues, registry, dispatcher and reconnector from settings.

    Nothing is started; call ``dispatcher.start()`` and
    ``reconnector.start()`` from inside a running event loop.
    """
    cfg = settings.agent
    identity = identity or local_identity()

    alerts: asyncio.Queue[Alert] = asyncio.Queue(maxsize=cfg.queue_size)
    outbound = ConfirmationQueue(maxsize=cfg.queue_size)

    registry = ConfirmationRegistry(
        client_id=cfg.client_id,
        actor=identity,
        timeout_secs=cfg.confirmation_timeout_secs,
        on_expired=outbound.put,
    )

    if display is None:
        confirm_url = None
        if settings.control.enabled:
            confirm_url = (
                f"POST http://{settings.control.host}:{settings.control.port}"
                + CONFIRM_PATH
            )
        display = ConsoleDisplay(app_id=cfg.app_id, confirm_url=confirm_url)

    sound = SoundPlayer(cfg.sounds_dir)
    dispatcher = AlertDispatcher(
        registry=registry,
        outbound=outbound,
        alerts=alerts,
        sound=sound,
        display=display,
        identity=identity,
    )

    session_factory = functools.partial(
        Session,
        server_url=cfg.server_url,
        client_id=cfg.client_id,
        hostname=identity.hostname,
        alerts=alerts,
        outbound=outbound,
        heartbeat_interval=cfg.heartbeat_interval_secs,
    )
    reconnector = Reconnector(
        session_factory=session_factory,
        policy=FixedDelayPolicy(cfg.reconnect_delay_secs),
    )

    return AgentStack(
        client_id=cfg.client_id,
        identity=identity,
        alerts=alerts,
        outbound=outbound,
        registry=registry,
        sound=sound,
        display=display,
        dispatcher=dispatcher,
        reconnector=reconnector,
    )
