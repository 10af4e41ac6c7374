"""A single WebSocket connection attempt to the alert server."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum

import structlog
import websockets
from websockets.asyncio.client import ClientConnection

from src.agent.exceptions import TransportError
from src.agent.queues import ConfirmationQueue
from src.core.types import Alert
from src.protocol import (
    AlertEnvelope,
    ConfirmationEnvelope,
    DecodeError,
    Envelope,
    HeartbeatEnvelope,
    RegisterEnvelope,
    UnknownEnvelope,
    decode,
    encode,
)

logger = structlog.stdlib.get_logger()


class SessionState(StrEnum):
    CONNECTING = "CONNECTING"
    REGISTERED = "REGISTERED"
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"
    FAILED = "FAILED"


@dataclass
class SessionOutcome:
    """How an attempt ended. ``error`` is set only for FAILED."""

    state: SessionState
    error: TransportError | None = None
    heartbeats_sent: int = 0
    alerts_received: int = 0
    confirmations_sent: int = 0

    @property
    def failed(self) -> bool:
        return self.state == SessionState.FAILED


class Session:
    """One connection attempt: connect, register, then multiplex I/O.

    While active, three tasks run side by side until the first one ends:

    - reader: decodes inbound frames and forwards alerts to *alerts*
    - writer: drains *outbound* and sends each item as a confirmation
    - heartbeat: sends a heartbeat every ``heartbeat_interval`` seconds

    The reader ending cleanly (close frame or end of stream) closes the
    session; any transport error fails it. Either way the remaining tasks
    are cancelled and the socket is closed. There is no retry here; the
    Reconnector decides what happens next.
    """

    HEARTBEAT_INTERVAL = 30.0  # seconds

    def __init__(
        self,
        server_url: str,
        client_id: str,
        hostname: str,
        alerts: asyncio.Queue[Alert],
        outbound: ConfirmationQueue,
        heartbeat_interval: float = HEARTBEAT_INTERVAL,
    ) -> None:
        self.server_url = server_url
        self.client_id = client_id
        self.hostname = hostname
        self._alerts = alerts
        self._outbound = outbound
        self._heartbeat_interval = heartbeat_interval
        self._state = SessionState.CONNECTING
        self._send_lock = asyncio.Lock()
        self._heartbeats_sent = 0
        self._alerts_received = 0
        self._confirmations_sent = 0

    @property
    def state(self) -> SessionState:
        return self._state

    async def run(self) -> SessionOutcome:
        """Run the attempt to completion and report how it ended."""
        try:
            await self._connect_and_listen()
        except TransportError as exc:
            logger.debug("session_failed", error=str(exc))
            return self._finish(SessionState.FAILED, exc)
        return self._finish(SessionState.CLOSED)

    async def _connect_and_listen(self) -> None:
        self._set_state(SessionState.CONNECTING)
        logger.info("session_connecting", server_url=self.server_url)

        try:
            ws = await websockets.connect(self.server_url)
        except Exception as exc:
            raise TransportError(f"Failed to connect to {self.server_url}") from exc

        try:
            try:
                await self._send(
                    ws,
                    RegisterEnvelope(client_id=self.client_id, hostname=self.hostname),
                )
            except Exception as exc:
                raise TransportError("Failed to send registration") from exc

            self._set_state(SessionState.REGISTERED)
            logger.info("session_registered", client_id=self.client_id)

            self._set_state(SessionState.ACTIVE)
            await self._multiplex(ws)
        finally:
            try:
                await ws.close()
            except Exception:
                logger.debug("session_close_error", exc_info=True)

    # ── Active phase ──────────────────────────────────────────────

    async def _multiplex(self, ws: ClientConnection) -> None:
        reader = asyncio.create_task(self._read_loop(ws), name="session-reader")
        writer = asyncio.create_task(self._write_loop(ws), name="session-writer")
        heartbeat = asyncio.create_task(self._heartbeat_loop(ws), name="session-heartbeat")
        tasks = {reader, writer, heartbeat}

        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        for task in done:
            exc = task.exception()
            if exc is not None:
                raise TransportError(f"Connection lost: {exc!r}") from exc

    async def _read_loop(self, ws: ClientConnection) -> None:
        # A close frame from the server ends the session cleanly, whatever
        # its code. Only a dropped connection (no close frame) is a failure.
        try:
            async for raw in ws:
                await self._handle_frame(raw)
        except websockets.ConnectionClosedError as exc:
            if exc.rcvd is None:
                raise
            logger.info(
                "session_closed_by_server",
                code=exc.rcvd.code,
                reason=exc.rcvd.reason,
            )

    async def _write_loop(self, ws: ClientConnection) -> None:
        while True:
            confirmation = await self._outbound.get()
            try:
                await self._send(ws, ConfirmationEnvelope(confirmation=confirmation))
            except BaseException:
                # Keep it for the next session.
                self._outbound.put_back(confirmation)
                raise
            self._confirmations_sent += 1
            logger.info("confirmation_sent", alert_id=confirmation.alert_id)

    async def _heartbeat_loop(self, ws: ClientConnection) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._heartbeat_interval
        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            await self._send(ws, HeartbeatEnvelope())
            self._heartbeats_sent += 1
            logger.debug("heartbeat_sent", count=self._heartbeats_sent)
            next_tick += self._heartbeat_interval

    async def _handle_frame(self, raw: str | bytes) -> None:
        """Decode and route one inbound frame. Never raises on bad input."""
        if isinstance(raw, bytes):
            logger.warning("session_binary_frame_ignored", size=len(raw))
            return

        try:
            envelope = decode(raw)
        except DecodeError as exc:
            logger.warning("session_frame_dropped", error=str(exc), raw=raw[:200])
            return

        if isinstance(envelope, AlertEnvelope):
            alert = envelope.alert
            self._alerts_received += 1
            logger.info("alert_received", alert_id=alert.id, title=alert.title)
            await self._alerts.put(alert)
        elif isinstance(envelope, HeartbeatEnvelope):
            logger.debug("heartbeat_received")
        elif isinstance(envelope, UnknownEnvelope):
            logger.warning("session_unknown_frame", type=envelope.type)
        else:
            logger.warning("session_unexpected_frame", type=envelope.type)

    async def _send(self, ws: ClientConnection, envelope: Envelope) -> None:
        async with self._send_lock:
            await ws.send(encode(envelope))

    # ── State ─────────────────────────────────────────────────────

    def _set_state(self, state: SessionState) -> None:
        self._state = state

    def _finish(
        self, state: SessionState, error: TransportError | None = None
    ) -> SessionOutcome:
        self._set_state(state)
        return SessionOutcome(
            state=state,
            error=error,
            heartbeats_sent=self._heartbeats_sent,
            alerts_received=self._alerts_received,
            confirmations_sent=self._confirmations_sent,
        )
