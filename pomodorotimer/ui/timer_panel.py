"""Popup timer panel shown from the menu-bar icon.

Layout (top → bottom):
    - Phase label
    - Remaining time (MM:SS)
    - Progress bar through the current phase
    - Start/Pause, Reset, Skip buttons
    - Session position and today's counters
    - Reset Session / Settings row
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QProgressBar, QFrame,
)

from ..timer.engine import TimerEngine

PROGRESS_STEPS = 1000


class TimerPanel(QWidget):
    """Read-only view of the engine plus the command buttons."""

    toggle_requested = pyqtSignal()
    reset_requested = pyqtSignal()
    skip_requested = pyqtSignal()
    reset_session_requested = pyqtSignal()
    settings_requested = pyqtSignal()

    def __init__(self, engine: TimerEngine, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._engine = engine
        self._build_ui()
        self._connect_signals()
        self.refresh()

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        card = QFrame(self)
        card.setObjectName("card")
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(24, 20, 24, 20)
        layout.setSpacing(10)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._phase_label = QLabel(card)
        self._phase_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._phase_label.setStyleSheet("font-size: 16px; font-weight: 600;")
        layout.addWidget(self._phase_label)

        self._time_label = QLabel(card)
        self._time_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._time_label.setStyleSheet("font-size: 48px; font-family: monospace;")
        layout.addWidget(self._time_label)

        self._progress = QProgressBar(card)
        self._progress.setRange(0, PROGRESS_STEPS)
        self._progress.setTextVisible(False)
        layout.addWidget(self._progress)

        # ── main controls ────────────────────────────────────────────
        btn_row = QHBoxLayout()
        btn_row.setSpacing(12)
        btn_row.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._start_pause_btn = QPushButton("Start", card)
        self._start_pause_btn.setObjectName("primaryButton")
        self._reset_btn = QPushButton("Reset", card)
        self._skip_btn = QPushButton("Skip", card)

        btn_row.addWidget(self._start_pause_btn)
        btn_row.addWidget(self._reset_btn)
        btn_row.addWidget(self._skip_btn)
        layout.addLayout(btn_row)

        # ── counters ─────────────────────────────────────────────────
        self._session_label = QLabel(card)
        self._session_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._session_label)

        self._counters_label = QLabel(card)
        self._counters_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._counters_label.setStyleSheet("color: gray;")
        layout.addWidget(self._counters_label)

        footer = QHBoxLayout()
        self._reset_session_btn = QPushButton("Reset Session", card)
        self._settings_btn = QPushButton("Settings…", card)
        footer.addWidget(self._reset_session_btn)
        footer.addStretch()
        footer.addWidget(self._settings_btn)
        layout.addLayout(footer)

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._start_pause_btn.clicked.connect(lambda: self.toggle_requested.emit())
        self._reset_btn.clicked.connect(lambda: self.reset_requested.emit())
        self._skip_btn.clicked.connect(lambda: self.skip_requested.emit())
        self._reset_session_btn.clicked.connect(lambda: self.reset_session_requested.emit())
        self._settings_btn.clicked.connect(lambda: self.settings_requested.emit())

        self._engine.remaining_changed.connect(self._refresh_time)
        self._engine.running_changed.connect(self._refresh_button)
        self._engine.phase_changed.connect(lambda _phase: self.refresh())
        self._engine.counters_changed.connect(self._refresh_counters)

    # ── slots ─────────────────────────────────────────────────────────────

    def refresh(self) -> None:
        """Re-read everything from the engine."""
        self._phase_label.setText(self._engine.phase_label)
        self._refresh_time()
        self._refresh_button(self._engine.is_running)
        self._refresh_counters()

    def _refresh_time(self, _remaining: int | None = None) -> None:
        self._time_label.setText(self._engine.formatted_time)
        self._progress.setValue(round(self._engine.progress * PROGRESS_STEPS))

    def _refresh_button(self, running: bool) -> None:
        self._start_pause_btn.setText("Pause" if running else "Start")

    def _refresh_counters(self) -> None:
        e = self._engine
        self._session_label.setText(
            f"Session {e.current_session_number} of {e.sessions_before_long_break}"
        )
        self._counters_label.setText(
            f"Today: {e.completed_focus_sessions} focus · "
            f"{e.completed_short_breaks} short breaks"
        )
