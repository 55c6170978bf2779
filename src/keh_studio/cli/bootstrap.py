# src/keh_studio/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the state store and every core component into AppState.
"""

from __future__ import annotations

import logging

from ..audio.cues import TerminalBellPlayer
from ..backup.codec import BackupService
from ..config import get_settings
from ..core.clock import utc_now
from ..core.feedback import FeedbackCenter
from ..core.ports import Clock, RandomSource, SoundPlayer
from ..core.state import AppState
from ..notifications.engine import NotificationEngine
from ..notifications.monitor import DeadlineMonitor
from ..preferences.reconciler import SettingsReconciler
from ..security.elevation import ElevationGate
from ..storage.adapter import StateStoreAdapter
from ..storage.defaults import DATA_VERSION
from ..storage.migrations import run_migrations
from ..storage.state_store import SQLiteStateStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.state_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.backup_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    sound: SoundPlayer | None = None,
    clock: Clock = utc_now,
    rng: RandomSource | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if sound is None:
        sound = TerminalBellPlayer(enabled=settings.sounds_enabled)

    store = StateStoreAdapter(
        SQLiteStateStore(settings.state_db_path, migrate=run_migrations, current_version=DATA_VERSION)
    )
    feedback = FeedbackCenter(sound=sound)
    notifications = NotificationEngine(
        store,
        sound=sound,
        clock=clock,
        cap=settings.notification_cap,
        dedup_window_seconds=settings.dedup_window_seconds,
    )

    state = AppState(
        settings=settings,
        store=store,
        feedback=feedback,
        notifications=notifications,
        reconciler=SettingsReconciler(store, feedback=feedback, clock=clock),
        monitor=DeadlineMonitor(
            store,
            notifications,
            interval_seconds=settings.monitor_interval_seconds,
            synthetic_events_enabled=settings.synthetic_events_enabled,
            synthetic_probability=settings.synthetic_event_probability,
            rng=rng,
            clock=clock,
        ),
        gate=ElevationGate(
            store,
            feedback=feedback,
            sound=sound,
            default_pin=settings.default_admin_pin,
            reject_delay_seconds=settings.pin_reject_delay_seconds,
        ),
        backups=BackupService(
            store,
            feedback=feedback,
            migrate=run_migrations,
            current_version=DATA_VERSION,
            backup_dir=settings.backup_dir,
            prefix=settings.backup_prefix,
            clock=clock,
        ),
        sound=sound,
        clock=clock,
    )
    logger.debug("AppState wired (db=%s)", settings.state_db_path)
    return state
