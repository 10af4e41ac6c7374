"""Wire protocol — envelope types and JSON codec."""

from src.protocol.codec import (
    AlertEnvelope,
    ConfirmationEnvelope,
    Envelope,
    HeartbeatEnvelope,
    RegisterEnvelope,
    UnknownEnvelope,
    decode,
    encode,
)
from src.protocol.exceptions import DecodeError, ProtocolError

__all__ = [
    "AlertEnvelope",
    "ConfirmationEnvelope",
    "DecodeError",
    "Envelope",
    "HeartbeatEnvelope",
    "ProtocolError",
    "RegisterEnvelope",
    "UnknownEnvelope",
    "decode",
    "encode",
]
