# src/keh_studio/core/session.py

"""
Session lifecycle: login / logout, identity switches, refresh, restore.

The deadline monitor lives exactly as long as a logged-in session: login
starts it, logout stops it.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from ..backup.codec import RestoreResult
from ..notifications.models import NavigationIntent
from ..security.elevation import SwitchResult
from .state import AppState
from .users import resolve_current_user

logger = logging.getLogger(__name__)

DEFAULT_VIEW = "Home"


def is_logged_in(state: AppState) -> bool:
    return bool(state.store.get("isLoggedIn", False))


def login(state: AppState, user_id: str) -> NavigationIntent:
    state.store.update_fields(isLoggedIn=True, currentUserId=user_id)
    state.monitor.start()
    logger.info("Logged in user_id=%s", user_id)

    settings = state.store.get("settings") or {}
    prefs = settings.get("userPreferences") or {}
    return NavigationIntent(target_view=str(prefs.get("defaultView") or DEFAULT_VIEW))


def logout(state: AppState) -> None:
    state.store.update_fields(isLoggedIn=False)
    state.monitor.stop()
    state.gate.cancel()
    state.session_generation += 1
    logger.info("Logged out (session generation=%s)", state.session_generation)


def resume_if_logged_in(state: AppState) -> bool:
    """Restart the monitor for a session persisted as logged in (app restart)."""
    if not is_logged_in(state):
        return False
    state.monitor.start()
    return True


def current_user(state: AppState) -> dict[str, Any]:
    return resolve_current_user(state.store.read())


def switch_user(state: AppState, user_id: str) -> SwitchResult:
    return state.gate.request_switch(user_id)


def refresh(state: AppState) -> None:
    state.store.reload()
    state.feedback.success("Data Synced")


async def restore_file_async(state: AppState, path: str | Path) -> RestoreResult | None:
    """
    Read a backup off the event loop, then restore it.

    The read cannot be cancelled; if the session changed while it was in
    flight (logout), the result is dropped and None is returned.
    """
    generation = state.session_generation
    try:
        text = await asyncio.to_thread(Path(path).read_text, "utf-8")
    except (OSError, UnicodeDecodeError) as e:
        if state.session_generation != generation:
            return None
        return state.backups.read_failed(path, e)

    if state.session_generation != generation:
        logger.info("Restore of %s dropped: session changed during read", path)
        return None
    return state.backups.restore_text(text)
