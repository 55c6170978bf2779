# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "KEH_APP_NAME": "App display name, used as the console prompt (default: keh-studio).",
    "KEH_LOG_LEVEL": "Console logging level (default: INFO). The log file always records DEBUG.",
    # Paths (gitignored)
    "KEH_DATA_DIR": "Local data directory (default: .local/keh).",
    "KEH_STATE_DB_PATH": "State tree SQLite path (default: <data_dir>/state.sqlite3).",
    "KEH_BACKUP_DIR": "Where /backup writes files (default: <data_dir>/backups).",
    "KEH_BACKUP_PREFIX": "Backup file name prefix (default: KEH_Backup).",
    # Deadline monitor
    "KEH_MONITOR_INTERVAL_SECONDS": "Seconds between deadline checks (default: 60).",
    "KEH_SYNTHETIC_EVENTS_ENABLED": "Emit random synthetic alerts on each tick (true/false, default: true).",
    "KEH_SYNTHETIC_EVENT_PROBABILITY": "Chance of a synthetic alert per tick, 0..1 (default: 0.10).",
    # Notifications
    "KEH_NOTIFICATION_CAP": "Maximum stored notifications (default: 50).",
    "KEH_DEDUP_WINDOW_SECONDS": "Same title+message within this window is dropped (default: 5).",
    # Admin elevation
    "KEH_DEFAULT_ADMIN_PIN": "PIN used while settings.adminPin is unset (default: 1234).",
    "KEH_PIN_REJECT_DELAY_SECONDS": "Delay before a wrong PIN is rejected (default: 0.3).",
    # Audio
    "KEH_SOUNDS_ENABLED": "Play success/error cues (terminal bell) (true/false, default: true).",
}
