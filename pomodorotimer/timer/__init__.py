"""Timer package."""

from .engine import (
    TimerEngine,
    Phase,
    DEFAULT_DURATIONS,
    DEFAULT_SOUND,
    SESSIONS_BEFORE_LONG_BREAK,
    format_time,
    progress_for,
)

__all__ = [
    "TimerEngine",
    "Phase",
    "DEFAULT_DURATIONS",
    "DEFAULT_SOUND",
    "SESSIONS_BEFORE_LONG_BREAK",
    "format_time",
    "progress_for",
]
