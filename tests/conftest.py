# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from keh_studio.cli.bootstrap import create_initial_state
from keh_studio.core.state import AppState
from keh_studio.storage.adapter import StateStoreAdapter
from keh_studio.storage.state_store import SQLiteStateStore

from .fakes import FakeClock, FakeRandom, FakeSoundPlayer


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with create_initial_state.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    data_dir = tmp_path / "keh"
    return SimpleNamespace(
        app_name="keh-test",
        log_level="DEBUG",
        # Paths (tmp per test run)
        data_dir=data_dir,
        state_db_path=data_dir / "state.sqlite3",
        backup_dir=data_dir / "backups",
        backup_prefix="KEH_Backup",
        # Monitor
        monitor_interval_seconds=0.01,
        synthetic_events_enabled=False,
        synthetic_event_probability=0.10,
        # Notifications
        notification_cap=50,
        dedup_window_seconds=5.0,
        # Elevation
        default_admin_pin="1234",
        pin_reject_delay_seconds=0.0,
        # Audio
        sounds_enabled=False,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def sound() -> FakeSoundPlayer:
    return FakeSoundPlayer()


@pytest.fixture()
def rng() -> FakeRandom:
    return FakeRandom()


@pytest.fixture()
def store(tmp_path: Path) -> StateStoreAdapter:
    """
    A real SQLite-backed store seeded with the default state.

    NOTE: persistence is part of what we want to test, so no in-memory fake here.
    """
    return StateStoreAdapter(SQLiteStateStore(tmp_path / "store.sqlite3"))


@pytest.fixture()
def state(settings: SimpleNamespace, clock: FakeClock, sound: FakeSoundPlayer, rng: FakeRandom) -> AppState:
    """AppState wired exactly like the CLI, with deterministic fakes for time, audio and randomness."""
    return create_initial_state(settings=settings, sound=sound, clock=clock, rng=rng)
