"""Tests for core domain types."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from src.core.types import Alert, AlertLevel, Confirmation, Identity


def _alert(**overrides: object) -> Alert:
    defaults: dict[str, object] = {
        "id": "a-1",
        "title": "Disk full",
        "message": "Volume C: at 99%",
        "level": AlertLevel.WARNING,
        "requires_confirmation": True,
        "sound_file": None,
        "timestamp": datetime(2024, 1, 1, tzinfo=UTC),
    }
    defaults.update(overrides)
    return Alert(**defaults)  # type: ignore[arg-type]


class TestAlertLevel:
    def test_wire_values_lowercase(self) -> None:
        assert [lvl.value for lvl in AlertLevel] == [
            "info",
            "warning",
            "critical",
            "emergency",
        ]

    def test_label(self) -> None:
        assert AlertLevel.EMERGENCY.label == "Emergency"


class TestSoundFilename:
    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            (AlertLevel.EMERGENCY, "alarm_critical.wav"),
            (AlertLevel.CRITICAL, "alarm_critical.wav"),
            (AlertLevel.WARNING, "alarm_warning.wav"),
            (AlertLevel.INFO, "notification.wav"),
        ],
    )
    def test_default_by_level(self, level: AlertLevel, expected: str) -> None:
        assert _alert(level=level).sound_filename == expected

    def test_explicit_sound_wins(self) -> None:
        assert _alert(sound_file="siren.mp3").sound_filename == "siren.mp3"


class TestAlert:
    def test_frozen(self) -> None:
        alert = _alert()
        with pytest.raises(ValidationError):
            alert.title = "changed"  # type: ignore[misc]

    def test_naive_timestamp_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _alert(timestamp=datetime(2024, 1, 1))

    def test_parses_zulu_timestamp(self) -> None:
        alert = _alert(timestamp="2024-01-01T00:00:00Z")
        assert alert.timestamp == datetime(2024, 1, 1, tzinfo=UTC)

    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _alert(level="apocalyptic")


class TestConfirmation:
    def test_fields(self) -> None:
        c = Confirmation(
            alert_id="a-1",
            client_id="c-1",
            confirmed_at=datetime(2024, 1, 1, 0, 5, tzinfo=UTC),
            hostname="desk",
            username="ops",
        )
        assert c.alert_id == "a-1"
        assert c.username == "ops"


class TestIdentity:
    def test_defaults_unknown(self) -> None:
        ident = Identity()
        assert ident.hostname == "unknown"
        assert ident.username == "unknown"
