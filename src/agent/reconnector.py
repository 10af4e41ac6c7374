"""Reconnector: keeps exactly one session running for the life of the process."""

from __future__ import annotations

import abc
import asyncio
from collections.abc import Callable
from enum import StrEnum

import structlog

from src.agent.session import Session, SessionOutcome, SessionState

logger = structlog.stdlib.get_logger()

SessionFactory = Callable[[], Session]


class SupervisorState(StrEnum):
    IDLE = "IDLE"
    CONNECTING = "CONNECTING"
    RUNNING = "RUNNING"


class ReconnectPolicy(abc.ABC):
    """Decides how long to wait before the next attempt."""

    @abc.abstractmethod
    def next_delay(self, outcome: SessionOutcome) -> float:
        """Seconds to wait after *outcome* before reconnecting."""

    def reset(self) -> None:
        """Called after an attempt ends cleanly."""


class FixedDelayPolicy(ReconnectPolicy):
    """Same delay after every attempt, no growth and no retry limit."""

    def __init__(self, delay_secs: float = 5.0) -> None:
        self.delay_secs = delay_secs

    def next_delay(self, outcome: SessionOutcome) -> float:
        return self.delay_secs


class Reconnector:
    """Supervises successive Session attempts, forever.

    IDLE → CONNECTING → RUNNING → IDLE: each turn builds a fresh session from
    *session_factory*, runs it to CLOSED or FAILED, logs the outcome and
    sleeps for the policy's delay. Queues and the confirmation registry
    belong to the caller and survive every reconnect.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        policy: ReconnectPolicy | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._policy = policy or FixedDelayPolicy()
        self._session: Session | None = None
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._attempts = 0
        self._last_outcome: SessionOutcome | None = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def last_outcome(self) -> SessionOutcome | None:
        return self._last_outcome

    @property
    def state(self) -> SupervisorState:
        session = self._session
        if session is None:
            return SupervisorState.IDLE
        if session.state == SessionState.CONNECTING:
            return SupervisorState.CONNECTING
        if session.state in (SessionState.REGISTERED, SessionState.ACTIVE):
            return SupervisorState.RUNNING
        return SupervisorState.IDLE

    async def start(self) -> None:
        """Start the supervisor loop in a background task."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop(), name="reconnector")

    async def stop(self) -> None:
        """Stop reconnecting and cancel the active session."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._session = None

    async def _run_loop(self) -> None:
        while self._running:
            try:
                outcome = await self._attempt()
            except asyncio.CancelledError:
                break
            except Exception:
                # Session.run reports transport errors as an outcome.
                logger.exception("session_crashed", attempt=self._attempts)
                outcome = SessionOutcome(state=SessionState.FAILED)

            if not self._running:
                break

            delay = self._policy.next_delay(outcome)
            logger.info("reconnecting", delay=delay, attempt=self._attempts)
            try:
                await asyncio.sleep(delay)
            except asyncio.CancelledError:
                break

    async def _attempt(self) -> SessionOutcome:
        self._attempts += 1
        session = self._session_factory()
        self._session = session
        try:
            outcome = await session.run()
        finally:
            self._session = None

        self._last_outcome = outcome
        if outcome.failed:
            logger.warning(
                "session_failed",
                attempt=self._attempts,
                error=str(outcome.error),
                cause=repr(outcome.error.__cause__) if outcome.error else None,
            )
        else:
            self._policy.reset()
            logger.info(
                "session_closed",
                attempt=self._attempts,
                heartbeats_sent=outcome.heartbeats_sent,
                alerts_received=outcome.alerts_received,
            )
        return outcome
