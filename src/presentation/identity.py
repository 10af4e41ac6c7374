"""Local machine and user identity, stamped onto confirmations."""

from __future__ import annotations

import getpass
import os
import socket

from src.core.types import Identity

UNKNOWN = "unknown"


def get_hostname() -> str:
    """Return the machine hostname, or ``"unknown"``."""
    try:
        return socket.gethostname() or UNKNOWN
    except OSError:
        return UNKNOWN


def get_username() -> str:
    """Return the login name from USERNAME/USER, then getpass, or ``"unknown"``."""
    for var in ("USERNAME", "USER"):
        value = os.environ.get(var)
        if value:
            return value
    try:
        return getpass.getuser() or UNKNOWN
    except (OSError, KeyError, ImportError):
        return UNKNOWN


def local_identity() -> Identity:
    return Identity(hostname=get_hostname(), username=get_username())
