"""Core module — config, types, logging."""

from src.core.config import (
    ConfigError,
    Settings,
    get_settings,
    load_settings,
    prepare_sounds_dir,
    reset_settings,
)
from src.core.logging import setup_logging
from src.core.types import Alert, AlertLevel, Confirmation, Identity, PendingEntry

__all__ = [
    "Alert",
    "AlertLevel",
    "ConfigError",
    "Confirmation",
    "Identity",
    "PendingEntry",
    "Settings",
    "get_settings",
    "load_settings",
    "prepare_sounds_dir",
    "reset_settings",
    "setup_logging",
]
