"""Wire envelopes and their JSON text encoding.

Every frame is a JSON object with a ``type`` discriminator and its payload
fields inline::

    {"type": "register", "client_id": "...", "hostname": "..."}
    {"type": "alert", "alert": {...}}
    {"type": "confirmation", "confirmation": {...}}
    {"type": "heartbeat"}

Unknown tags decode to :class:`UnknownEnvelope` so callers can log and move
on; structural problems raise :class:`DecodeError`.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from src.core.types import Alert, Confirmation
from src.protocol.exceptions import DecodeError


class RegisterEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["register"] = "register"
    client_id: str
    hostname: str


class AlertEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["alert"] = "alert"
    alert: Alert


class ConfirmationEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["confirmation"] = "confirmation"
    confirmation: Confirmation


class HeartbeatEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["heartbeat"] = "heartbeat"


class UnknownEnvelope(BaseModel):
    """A well-formed frame whose tag this client does not understand."""

    model_config = ConfigDict(frozen=True)

    type: str
    raw: dict[str, Any] = Field(default_factory=dict)


KnownEnvelope = Annotated[
    RegisterEnvelope | AlertEnvelope | ConfirmationEnvelope | HeartbeatEnvelope,
    Field(discriminator="type"),
]

Envelope = RegisterEnvelope | AlertEnvelope | ConfirmationEnvelope | HeartbeatEnvelope | UnknownEnvelope

KNOWN_TYPES: frozenset[str] = frozenset({"register", "alert", "confirmation", "heartbeat"})

_KNOWN_ADAPTER: TypeAdapter[Any] = TypeAdapter(KnownEnvelope)


def encode(envelope: Envelope) -> str:
    """Serialize an envelope to a JSON text frame."""
    if isinstance(envelope, UnknownEnvelope):
        return json.dumps({**envelope.raw, "type": envelope.type})
    return envelope.model_dump_json()


def decode(text: str | bytes) -> Envelope:
    """Parse a JSON text frame into an envelope.

    Raises:
        DecodeError: invalid JSON, not an object, missing ``type``, or a
            known tag whose payload is missing fields or has wrong types.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(f"Invalid JSON frame: {exc}") from exc

    if not isinstance(data, dict):
        raise DecodeError(f"Frame is not a JSON object: {type(data).__name__}")

    tag = data.get("type")
    if not isinstance(tag, str):
        raise DecodeError("Frame has no string 'type' discriminator")

    if tag not in KNOWN_TYPES:
        return UnknownEnvelope(type=tag, raw=data)

    try:
        return _KNOWN_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise DecodeError(f"Malformed {tag!r} frame: {exc.error_count()} error(s)") from exc
