# tests/test_config.py

from __future__ import annotations

from pathlib import Path

from keh_studio.config import Settings


def test_defaults(monkeypatch) -> None:
    for name in ("KEH_DATA_DIR", "KEH_STATE_DB_PATH", "KEH_MONITOR_INTERVAL_SECONDS", "KEH_DEFAULT_ADMIN_PIN"):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()
    assert s.data_dir == Path(".local/keh")
    assert s.state_db_path == Path(".local/keh/state.sqlite3")
    assert s.monitor_interval_seconds == 60.0
    assert s.default_admin_pin == "1234"


def test_env_overrides_and_clamping(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("KEH_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("KEH_SYNTHETIC_EVENT_PROBABILITY", "1.5")
    monkeypatch.setenv("KEH_SYNTHETIC_EVENTS_ENABLED", "no")
    monkeypatch.setenv("KEH_NOTIFICATION_CAP", "not-a-number")

    s = Settings.from_env()
    assert s.state_db_path == tmp_path / "state.sqlite3"
    assert s.backup_dir == tmp_path / "backups"
    assert s.synthetic_event_probability == 1.0
    assert s.synthetic_events_enabled is False
    assert s.notification_cap == 50
