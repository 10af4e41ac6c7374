"""Tests for src/core/config.py — YAML loading, env overrides, sounds dir."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from src.core.config import (
    AgentConfig,
    ConfigError,
    ControlConfig,
    LoggingConfig,
    Settings,
    get_settings,
    load_settings,
    prepare_sounds_dir,
    reset_settings,
)


@pytest.fixture(autouse=True)
def _clean_settings() -> None:
    """Reset the global settings cache before each test."""
    reset_settings()


class TestDefaults:
    """Settings should have sensible defaults when no YAML is provided."""

    def test_default_agent_config(self) -> None:
        cfg = AgentConfig()
        assert cfg.server_url == "ws://localhost:8080/ws"
        assert cfg.sounds_dir == Path("./sounds")
        assert cfg.heartbeat_interval_secs == 30.0
        assert cfg.reconnect_delay_secs == 5.0
        assert cfg.confirmation_timeout_secs == 300.0
        assert cfg.queue_size == 100

    def test_client_id_generated_per_instance(self) -> None:
        a = AgentConfig()
        b = AgentConfig()
        assert a.client_id
        assert a.client_id != b.client_id

    def test_default_control_config(self) -> None:
        cfg = ControlConfig()
        assert cfg.enabled is True
        assert cfg.host == "127.0.0.1"
        assert cfg.port == 8765

    def test_default_logging_config(self) -> None:
        cfg = LoggingConfig()
        assert cfg.level == "INFO"
        assert cfg.format == "console"

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        s = load_settings(tmp_path / "nope.yaml", environ={})
        assert s.agent.server_url == "ws://localhost:8080/ws"


class TestYamlLoading:
    """Settings should load correctly from YAML files."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "agent": {
                "server_url": "ws://alerts.example:9000/ws",
                "client_id": "desk-7",
                "confirmation_timeout_secs": 60,
            },
            "control": {"enabled": False},
            "logging": {"level": "DEBUG", "format": "json"},
        }
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump(config_data))

        s = load_settings(config_file, environ={})
        assert s.agent.server_url == "ws://alerts.example:9000/ws"
        assert s.agent.client_id == "desk-7"
        assert s.agent.confirmation_timeout_secs == 60.0
        assert s.control.enabled is False
        assert s.logging.level == "DEBUG"
        assert s.logging.format == "json"

    def test_non_dict_yaml_ignored(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("- just\n- a list\n")
        s = load_settings(config_file, environ={})
        assert s.agent.server_url == "ws://localhost:8080/ws"

    def test_load_caches_globally(self, tmp_path: Path) -> None:
        s = load_settings(tmp_path / "nope.yaml", environ={"CLIENT_ID": "cached"})
        assert get_settings() is s


class TestEnvOverrides:
    def test_env_overrides_defaults(self, tmp_path: Path) -> None:
        env = {
            "SERVER_URL": "ws://10.0.0.5:8080/ws",
            "CLIENT_ID": "env-client",
            "SOUNDS_DIR": "/opt/sounds",
            "LOG_LEVEL": "WARNING",
        }
        s = load_settings(tmp_path / "nope.yaml", environ=env)
        assert s.agent.server_url == "ws://10.0.0.5:8080/ws"
        assert s.agent.client_id == "env-client"
        assert s.agent.sounds_dir == Path("/opt/sounds")
        assert s.logging.level == "WARNING"

    def test_env_overrides_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump({
            "agent": {"server_url": "ws://yaml/ws", "queue_size": 5},
        }))
        s = load_settings(config_file, environ={"SERVER_URL": "ws://env/ws"})
        assert s.agent.server_url == "ws://env/ws"
        # Untouched YAML keys survive.
        assert s.agent.queue_size == 5

    def test_empty_env_value_ignored(self, tmp_path: Path) -> None:
        s = load_settings(tmp_path / "nope.yaml", environ={"SERVER_URL": ""})
        assert s.agent.server_url == "ws://localhost:8080/ws"


class TestSoundsDir:
    def test_creates_missing_dir(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "sounds"
        result = prepare_sounds_dir(target)
        assert result == target
        assert target.is_dir()

    def test_existing_dir_ok(self, tmp_path: Path) -> None:
        assert prepare_sounds_dir(tmp_path) == tmp_path

    def test_uncreatable_dir_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file.txt"
        blocker.write_text("not a directory")
        with pytest.raises(ConfigError):
            prepare_sounds_dir(blocker / "sounds")


class TestSettings:
    def test_settings_sections(self) -> None:
        s = Settings()
        assert isinstance(s.agent, AgentConfig)
        assert isinstance(s.control, ControlConfig)
        assert isinstance(s.logging, LoggingConfig)
