# src/keh_studio/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a default.
- Local overrides live in config_local.py (never committed).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "KEH"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    state_db_path: Path
    backup_dir: Path
    backup_prefix: str

    # ---- Deadline monitor ----
    monitor_interval_seconds: float
    synthetic_events_enabled: bool
    synthetic_event_probability: float

    # ---- Notifications ----
    notification_cap: int
    dedup_window_seconds: float

    # ---- Admin elevation ----
    default_admin_pin: str
    pin_reject_delay_seconds: float

    # ---- Audio cues ----
    sounds_enabled: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "keh-studio").strip() or "keh-studio"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/keh"))
        state_db_path = _env_path(_k("STATE_DB_PATH"), data_dir / "state.sqlite3")
        backup_dir = _env_path(_k("BACKUP_DIR"), data_dir / "backups")
        backup_prefix = _env(_k("BACKUP_PREFIX"), "KEH_Backup").strip() or "KEH_Backup"

        monitor_interval_seconds = _env_float(_k("MONITOR_INTERVAL_SECONDS"), 60.0)
        synthetic_events_enabled = _env_bool(_k("SYNTHETIC_EVENTS_ENABLED"), True)
        synthetic_event_probability = _env_float(_k("SYNTHETIC_EVENT_PROBABILITY"), 0.10)
        # A probability outside [0, 1] is a typo, not a request.
        synthetic_event_probability = max(0.0, min(1.0, synthetic_event_probability))

        notification_cap = max(1, _env_int(_k("NOTIFICATION_CAP"), 50))
        dedup_window_seconds = max(0.0, _env_float(_k("DEDUP_WINDOW_SECONDS"), 5.0))

        default_admin_pin = _env(_k("DEFAULT_ADMIN_PIN"), "1234").strip() or "1234"
        pin_reject_delay_seconds = max(0.0, _env_float(_k("PIN_REJECT_DELAY_SECONDS"), 0.3))

        sounds_enabled = _env_bool(_k("SOUNDS_ENABLED"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            state_db_path=state_db_path,
            backup_dir=backup_dir,
            backup_prefix=backup_prefix,
            monitor_interval_seconds=monitor_interval_seconds,
            synthetic_events_enabled=synthetic_events_enabled,
            synthetic_event_probability=synthetic_event_probability,
            notification_cap=notification_cap,
            dedup_window_seconds=dedup_window_seconds,
            default_admin_pin=default_admin_pin,
            pin_reject_delay_seconds=pin_reject_delay_seconds,
            sounds_enabled=sounds_enabled,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
# Prefer .env; use config_local.py only for a few explicit switches.
try:
    import config_local as _config_local  # type: ignore

    if hasattr(_config_local, "SYNTHETIC_EVENTS_ENABLED"):
        object.__setattr__(  # type: ignore[misc]
            SETTINGS, "synthetic_events_enabled", bool(_config_local.SYNTHETIC_EVENTS_ENABLED)
        )
    if hasattr(_config_local, "SOUNDS_ENABLED"):
        object.__setattr__(SETTINGS, "sounds_enabled", bool(_config_local.SOUNDS_ENABLED))  # type: ignore[misc]
except Exception:
    pass


def get_settings() -> Settings:
    return SETTINGS
