"""Pydantic settings loaded from YAML configuration with environment overrides."""

from __future__ import annotations

import os
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

# Environment variable → (section, key)
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "SERVER_URL": ("agent", "server_url"),
    "CLIENT_ID": ("agent", "client_id"),
    "SOUNDS_DIR": ("agent", "sounds_dir"),
    "LOG_LEVEL": ("logging", "level"),
}


class ConfigError(Exception):
    """Invalid or unusable configuration — fatal at startup."""


def _new_client_id() -> str:
    return str(uuid.uuid4())


class AgentConfig(BaseModel):
    """Connection, timing and presentation settings for the agent."""

    server_url: str = "ws://localhost:8080/ws"
    client_id: str = Field(default_factory=_new_client_id)
    sounds_dir: Path = Path("./sounds")
    app_id: str = "NotificationAgent"
    heartbeat_interval_secs: float = 30.0
    reconnect_delay_secs: float = 5.0
    confirmation_timeout_secs: float = 300.0
    queue_size: int = 100


class ControlConfig(BaseModel):
    """Local control API used to confirm alerts by hand."""

    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"


class Settings(BaseModel):
    """Root settings container."""

    agent: AgentConfig = AgentConfig()
    control: ControlConfig = ControlConfig()
    logging: LoggingConfig = LoggingConfig()


def _apply_env_overrides(
    data: dict[str, Any], environ: Mapping[str, str]
) -> dict[str, Any]:
    """Overlay recognised environment variables onto raw YAML data."""
    for var, (section, key) in _ENV_OVERRIDES.items():
        value = environ.get(var)
        if not value:
            continue
        block = data.get(section)
        if not isinstance(block, dict):
            block = {}
        data[section] = {**block, key: value}
    return data


def load_settings(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from a YAML file, apply env overrides and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.
            A missing file is not an error; defaults are used.
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    data = _apply_env_overrides(data, os.environ if environ is None else environ)
    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None


def prepare_sounds_dir(path: str | Path) -> Path:
    """Create the sounds directory if it does not exist.

    Raises:
        ConfigError: the directory cannot be created.
    """
    sounds_dir = Path(path)
    if sounds_dir.is_dir():
        return sounds_dir
    try:
        sounds_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"Failed to create sounds directory: {sounds_dir}") from exc
    return sounds_dir
