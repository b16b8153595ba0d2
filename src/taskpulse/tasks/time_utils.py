# src/taskpulse/tasks/time_utils.py

"""
Wall-clock helpers.

All task windows are expressed as minute-of-day integers (0..1439) in local time.
"""

from __future__ import annotations

import math
import re
from datetime import datetime

MINUTES_PER_DAY = 24 * 60
LAST_MINUTE = MINUTES_PER_DAY - 1

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


class FormatError(ValueError):
    """Raised when a time string (or minute value) cannot be interpreted."""


def to_minutes(hhmm: str) -> int:
    """Parse "HH:MM" into minute-of-day."""
    if not isinstance(hhmm, str):
        raise FormatError(f"expected 'HH:MM' string, got {type(hhmm).__name__}")

    m = _HHMM_RE.match(hhmm.strip())
    if not m:
        raise FormatError(f"invalid time {hhmm!r}, expected 'HH:MM'")

    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        raise FormatError(f"time out of range: {hhmm!r}")
    return hour * 60 + minute


def from_minutes(minutes: int) -> str:
    """Format minute-of-day as zero-padded "HH:MM"."""
    if not 0 <= minutes <= LAST_MINUTE:
        raise FormatError(f"minute-of-day out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minute_of_day(dt: datetime) -> int:
    return dt.hour * 60 + dt.minute


def remaining_minutes(now_minutes: int, end_minutes: int) -> int:
    return max(0, end_minutes - now_minutes)


def format_remaining(minutes: int) -> str:
    """0 -> "0m", 75 -> "1h 15m", 40 -> "40m"."""
    if minutes <= 0:
        return "0m"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if hours > 0 else f"{mins}m"


def task_duration(start_minutes: int, end_minutes: int) -> int:
    # No cross-midnight normalization: an inverted window has a negative duration.
    return end_minutes - start_minutes


def warning_threshold(duration_minutes: int) -> int:
    """
    Remaining-minutes value at which the pre-expiry warning fires.

    Tiered so long tasks get proportionally earlier warnings:
    6h+ -> 30, 1h+ -> 10, 30m+ -> 5, shorter -> 10% of the duration (at least 1).
    """
    if duration_minutes >= 360:
        return 30
    if duration_minutes >= 60:
        return 10
    if duration_minutes >= 30:
        return 5
    return max(1, math.floor(duration_minutes * 0.1))


def progress_percent(now_minutes: int, start_minutes: int, end_minutes: int) -> float:
    """Elapsed share of the window, clamped to 0..100."""
    duration = task_duration(start_minutes, end_minutes)
    if duration <= 0:
        return 0.0
    elapsed = now_minutes - start_minutes
    return max(0.0, min(100.0, elapsed / duration * 100.0))
