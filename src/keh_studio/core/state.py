# src/keh_studio/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..backup.codec import BackupService
from ..notifications.engine import NotificationEngine
from ..notifications.monitor import DeadlineMonitor
from ..preferences.reconciler import SettingsReconciler
from ..security.elevation import ElevationGate
from ..storage.adapter import StateStoreAdapter
from .clock import utc_now
from .feedback import FeedbackCenter
from .ports import Clock, SoundPlayer


@dataclass
class AppState:
    """
    Wired services for one running application.

    The persisted state tree itself lives behind `store`; this object only
    holds the components that operate on it plus session bookkeeping.
    """

    settings: object

    store: StateStoreAdapter
    feedback: FeedbackCenter
    notifications: NotificationEngine
    reconciler: SettingsReconciler
    monitor: DeadlineMonitor
    gate: ElevationGate
    backups: BackupService
    sound: SoundPlayer | None = None
    clock: Clock = utc_now

    # Bumped on every logout; async work started in an older session is dropped.
    session_generation: int = 0
