"""UI package."""

from .timer_panel import TimerPanel
from .settings_dialog import SettingsDialog

__all__ = [
    "TimerPanel",
    "SettingsDialog",
]
