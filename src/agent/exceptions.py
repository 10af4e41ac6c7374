"""Exception hierarchy for the agent runtime."""

from __future__ import annotations


class AgentError(Exception):
    """Base exception for all agent errors."""


class TransportError(AgentError):
    """WebSocket connect, handshake, read or write failure."""


class QueueClosedError(AgentError):
    """A producer tried to enqueue onto a closed channel."""
