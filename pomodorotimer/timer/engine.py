"""Phase state machine for PomodoroTimer.

Phases
------
FOCUS         Focus session counting down.
SHORT_BREAK   Short break between focus sessions.
LONG_BREAK    Long break closing a cycle.

Transitions
-----------
FOCUS → SHORT_BREAK            (completion/skip, cycle not finished)
FOCUS → LONG_BREAK             (completion/skip, last session of cycle)
SHORT_BREAK → FOCUS            (completion/skip)
LONG_BREAK → FOCUS             (completion/skip)
Any → FOCUS                    (reset_session)

The engine owns no timer.  The host calls ``tick()`` once per second
while ``is_running`` is true and keeps its driver in step with the
``running_changed`` signal.
"""

from __future__ import annotations

import logging
from datetime import date
from enum import Enum
from functools import lru_cache
from typing import Callable

from PyQt6.QtCore import QObject, pyqtSignal


logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class Phase(Enum):
    FOCUS = "focus"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def label(self) -> str:
        return _PHASE_LABELS[self]


_PHASE_LABELS: dict[Phase, str] = {
    Phase.FOCUS: "Focus",
    Phase.SHORT_BREAK: "Short Break",
    Phase.LONG_BREAK: "Long Break",
}


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_DURATIONS: dict[Phase, int] = {
    Phase.FOCUS: 20 * 60,
    Phase.SHORT_BREAK: 2 * 60,
    Phase.LONG_BREAK: 15 * 60,
}

SESSIONS_BEFORE_LONG_BREAK = 4
DEFAULT_SOUND = "Glass"


# ── derived views ─────────────────────────────────────────────────────────


@lru_cache(maxsize=256)
def format_time(seconds: int) -> str:
    """``MM:SS`` for a non-negative number of seconds."""
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


@lru_cache(maxsize=256)
def progress_for(remaining: int, duration: int) -> float:
    """Elapsed fraction of a phase, 0.0 → 1.0.

    A non-positive duration is a configuration error; the phase is then
    reported as already complete.
    """
    if duration <= 0:
        return 1.0
    return max(0.0, min(1.0, 1.0 - remaining / duration))


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Pomodoro countdown with focus/break cycling and daily counters.

    Signals
    -------
    remaining_changed(remaining_seconds: int)
        Emitted after every decrement and after ``reset()``.
    running_changed(is_running: bool)
        Emitted whenever the countdown is started or paused.
    phase_changed(new_phase: Phase)
        Emitted after every transition and after ``reset_session()``.
    phase_completed(data: dict)
        Emitted after a phase finishes naturally (never on skip).  Keys:
        ``phase``, ``next_phase``, ``sound``, ``session_number``,
        ``completed_focus_sessions``, ``completed_short_breaks``.
    counters_changed()
        Emitted when the completion counters or session number change.
    daily_reset(today: date)
        Emitted when a new calendar day zeroes the counters.
    """

    remaining_changed = pyqtSignal(int)
    running_changed = pyqtSignal(bool)
    phase_changed = pyqtSignal(object)
    phase_completed = pyqtSignal(object)
    counters_changed = pyqtSignal()
    daily_reset = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: Callable[[], date] = date.today,
    ) -> None:
        super().__init__(parent)
        self._clock = clock

        # ── configuration ─────────────────────────────────────────────
        self._durations: dict[Phase, int] = dict(DEFAULT_DURATIONS)
        self._sessions_before_long_break: int = SESSIONS_BEFORE_LONG_BREAK
        self.selected_sound: str = DEFAULT_SOUND

        # ── run state ─────────────────────────────────────────────────
        self._phase: Phase = Phase.FOCUS
        self._remaining: int = self._durations[Phase.FOCUS]
        self._running: bool = False
        self._session_number: int = 1  # 1-indexed position in the cycle
        self._completed_focus: int = 0
        self._completed_short_breaks: int = 0
        self._last_reset_date: date = self._clock()

    # ══════════════════════════════════════════════════════════════════
    #  CONFIGURATION
    # ══════════════════════════════════════════════════════════════════

    def duration_for(self, phase: Phase) -> int:
        return self._durations[phase]

    def set_duration(self, phase: Phase, seconds: int) -> None:
        """Change a phase length.  The running countdown is not rescaled."""
        self._durations[phase] = int(seconds)

    @property
    def focus_duration(self) -> int:
        return self._durations[Phase.FOCUS]

    @focus_duration.setter
    def focus_duration(self, seconds: int) -> None:
        self.set_duration(Phase.FOCUS, seconds)

    @property
    def short_break_duration(self) -> int:
        return self._durations[Phase.SHORT_BREAK]

    @short_break_duration.setter
    def short_break_duration(self, seconds: int) -> None:
        self.set_duration(Phase.SHORT_BREAK, seconds)

    @property
    def long_break_duration(self) -> int:
        return self._durations[Phase.LONG_BREAK]

    @long_break_duration.setter
    def long_break_duration(self, seconds: int) -> None:
        self.set_duration(Phase.LONG_BREAK, seconds)

    @property
    def sessions_before_long_break(self) -> int:
        return self._sessions_before_long_break

    @sessions_before_long_break.setter
    def sessions_before_long_break(self, value: int) -> None:
        self._sessions_before_long_break = max(1, int(value))
        if self._session_number > self._sessions_before_long_break:
            self._session_number = self._sessions_before_long_break
            self.counters_changed.emit()

    # ══════════════════════════════════════════════════════════════════
    #  RUN STATE
    # ══════════════════════════════════════════════════════════════════

    @property
    def current_phase(self) -> Phase:
        return self._phase

    @property
    def time_remaining(self) -> int:
        """Seconds left in the current phase."""
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def current_session_number(self) -> int:
        """Which focus session of the cycle is next or in progress (1-based)."""
        return self._session_number

    @property
    def completed_focus_sessions(self) -> int:
        return self._completed_focus

    @property
    def completed_short_breaks(self) -> int:
        return self._completed_short_breaks

    @property
    def last_reset_date(self) -> date:
        return self._last_reset_date

    # ── derived views ─────────────────────────────────────────────────

    @property
    def formatted_time(self) -> str:
        return format_time(self._remaining)

    @property
    def progress(self) -> float:
        """0.0 → 1.0 progress through the current phase."""
        return progress_for(self._remaining, self._durations[self._phase])

    @property
    def phase_label(self) -> str:
        return self._phase.label

    # ══════════════════════════════════════════════════════════════════
    #  COMMANDS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        self.check_daily_reset()
        self._set_running(True)

    def pause(self) -> None:
        self._set_running(False)

    def toggle(self) -> None:
        if self._running:
            self.pause()
        else:
            self.start()

    def reset(self) -> None:
        """Pause and refill the current phase.  Counters are untouched."""
        self.pause()
        self._remaining = self._durations[self._phase]
        self.remaining_changed.emit(self._remaining)

    def skip(self) -> None:
        """Advance to the next phase silently, without counting it."""
        self.pause()
        logger.debug("Skipping %s", self._phase.value)
        self._transition(counts_as_completion=False)

    def reset_session(self) -> None:
        """Back to the first focus session with zeroed counters."""
        self.pause()
        self._completed_focus = 0
        self._completed_short_breaks = 0
        self._session_number = 1
        self._phase = Phase.FOCUS
        self._remaining = self._durations[Phase.FOCUS]
        self.counters_changed.emit()
        self.phase_changed.emit(self._phase)

    def tick(self) -> None:
        """One elapsed second.  Ignored while paused."""
        if not self._running:
            return
        if self._remaining > 0:
            self._remaining -= 1
            self.remaining_changed.emit(self._remaining)
        else:
            self._complete_phase()

    def check_daily_reset(self, today: date | None = None) -> bool:
        """Zero the daily counters on the first activity of a new day.

        Returns True if a reset happened.
        """
        today = today if today is not None else self._clock()
        if today == self._last_reset_date:
            return False
        logger.info(
            "New day %s (last reset %s), clearing counters",
            today, self._last_reset_date,
        )
        self._completed_focus = 0
        self._completed_short_breaks = 0
        self._session_number = 1
        self._last_reset_date = today
        self.counters_changed.emit()
        self.daily_reset.emit(today)
        return True

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _set_running(self, running: bool) -> None:
        if self._running == running:
            return
        self._running = running
        self.running_changed.emit(running)

    def _complete_phase(self) -> None:
        self.pause()
        finished = self._phase
        self._transition(counts_as_completion=True)
        logger.info("%s complete, next: %s", finished.label, self._phase.label)
        self.phase_completed.emit({
            "phase": finished,
            "next_phase": self._phase,
            "sound": self.selected_sound,
            "session_number": self._session_number,
            "completed_focus_sessions": self._completed_focus,
            "completed_short_breaks": self._completed_short_breaks,
        })

    def _transition(self, *, counts_as_completion: bool) -> None:
        """Move to the next phase.  Shared by completion and skip."""
        if self._phase == Phase.FOCUS:
            if counts_as_completion:
                self._completed_focus += 1
            self._session_number += 1
            if self._session_number > self._sessions_before_long_break:
                self._phase = Phase.LONG_BREAK
                self._session_number = 1
            else:
                self._phase = Phase.SHORT_BREAK
        elif self._phase == Phase.SHORT_BREAK:
            if counts_as_completion:
                self._completed_short_breaks += 1
            self._phase = Phase.FOCUS
        else:
            self._phase = Phase.FOCUS

        self._remaining = self._durations[self._phase]
        self.counters_changed.emit()
        self.phase_changed.emit(self._phase)
