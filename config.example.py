# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
See src/taskpulse/config.py for parsing and defaults.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKPULSE_APP_NAME": "App display name (default: taskpulse).",
    "TASKPULSE_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "TASKPULSE_DATA_DIR": "Local data directory for the DB and log file (default: .local/taskpulse).",
    "TASKPULSE_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    # Notifications
    "TASKPULSE_SOUND_ENABLED": "Play alarm/warning sounds (true/false, default: true).",
    "TASKPULSE_SOUNDS_DIR": (
        "Directory with priorities/{high,medium,low}.wav, alarm.wav and warning.wav (default: sounds)."
    ),
    # Engine tuning
    "TASKPULSE_TICK_INTERVAL_SECONDS": "Reminder engine polling interval (default: 1.0).",
    "TASKPULSE_RETENTION_DAYS": "Tasks older than this many days are evicted on read (default: 14).",
}
