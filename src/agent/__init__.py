"""Agent runtime — session loop, reconnector, confirmation tracking."""

from src.agent.dispatcher import AlertDispatcher
from src.agent.exceptions import AgentError, QueueClosedError, TransportError
from src.agent.queues import ConfirmationQueue
from src.agent.reconnector import (
    FixedDelayPolicy,
    ReconnectPolicy,
    Reconnector,
    SupervisorState,
)
from src.agent.registry import ConfirmationRegistry
from src.agent.session import Session, SessionOutcome, SessionState

__all__ = [
    "AgentError",
    "AlertDispatcher",
    "ConfirmationQueue",
    "ConfirmationRegistry",
    "FixedDelayPolicy",
    "QueueClosedError",
    "ReconnectPolicy",
    "Reconnector",
    "Session",
    "SessionOutcome",
    "SessionState",
    "SupervisorState",
    "TransportError",
]
