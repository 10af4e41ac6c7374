"""Exception hierarchy for the wire protocol."""

from __future__ import annotations


class ProtocolError(Exception):
    """Base exception for all protocol errors."""


class DecodeError(ProtocolError):
    """A frame could not be decoded into an envelope."""
