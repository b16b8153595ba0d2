"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority, TaskStatus, TaskStats)
- time_utils.py: "HH:MM" <-> minute-of-day, remaining time, warning thresholds
- task_store.py: SQLite-backed storage with retention-based eviction
- task_selector.py: picks the single current task
- reminder_engine.py: polling state machine (warning, alarm, completion prompt)
- task_api.py: completion/snooze/edit helpers used by the engine and the CLI
- task_stats.py: summary counts
"""
