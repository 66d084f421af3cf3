"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/PomodoroTimer/settings.json

Only preferences live here.  The timer's run state (phase, countdown,
counters) is never written to disk.

Usage::

    settings = load_settings()
    settings.focus_duration = 25 * 60
    save_settings(settings)
"""

from __future__ import annotations

import json
import math
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .timer.engine import DEFAULT_DURATIONS, DEFAULT_SOUND, SESSIONS_BEFORE_LONG_BREAK, Phase


logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "PomodoroTimer"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


# ── option tables offered by the settings dialog ─────────────────────────

FOCUS_MINUTES_OPTIONS = tuple(range(15, 61, 5))
SHORT_BREAK_MINUTES_OPTIONS = tuple(range(1, 11))
LONG_BREAK_MINUTES_OPTIONS = (10, 15, 20, 25, 30)
SESSIONS_OPTIONS = tuple(range(2, 7))

AVAILABLE_SOUNDS = (
    "Glass", "Basso", "Blow", "Bottle", "Frog", "Funk", "Hero",
    "Morse", "Ping", "Pop", "Purr", "Sosumi", "Submarine", "Tink",
)


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    focus_duration: int = DEFAULT_DURATIONS[Phase.FOCUS]           # seconds
    short_break_duration: int = DEFAULT_DURATIONS[Phase.SHORT_BREAK]
    long_break_duration: int = DEFAULT_DURATIONS[Phase.LONG_BREAK]
    sessions_before_long_break: int = SESSIONS_BEFORE_LONG_BREAK

    # ── audio ─────────────────────────────────────────────────────────
    selected_sound: str = DEFAULT_SOUND
    sound_enabled: bool = True
    sound_volume: int = 70                 # 0-100

    # ── notifications ─────────────────────────────────────────────────
    notifications_enabled: bool = True


def _positive_int(value) -> int | None:
    """*value* as an int if it is a positive number, else None.  Booleans are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    value = int(value)
    return value if value >= 1 else None


def sanitize_settings(settings: Settings) -> Settings:
    """Clamp values the engine cannot use.  Mutates and returns *settings*."""
    for name in ("focus_duration", "short_break_duration", "long_break_duration"):
        value = getattr(settings, name)
        coerced = _positive_int(value)
        if coerced is None:
            logger.warning("Invalid %s=%r, using 1 second", name, value)
            coerced = 1
        setattr(settings, name, coerced)
    sessions = _positive_int(settings.sessions_before_long_break)
    settings.sessions_before_long_break = sessions if sessions is not None else 1
    if settings.selected_sound not in AVAILABLE_SOUNDS:
        logger.warning("Unknown sound %r, using %s", settings.selected_sound, DEFAULT_SOUND)
        settings.selected_sound = DEFAULT_SOUND
    settings.sound_volume = max(0, min(int(settings.sound_volume), 100))
    return settings


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return sanitize_settings(Settings(**filtered))
    except (OSError, ValueError, TypeError, AttributeError):
        logger.warning("Could not read %s, using defaults", SETTINGS_PATH, exc_info=True)
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
