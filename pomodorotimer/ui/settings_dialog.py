"""Settings dialog for PomodoroTimer.

A modal dialog that lets users pick timer durations, the cycle length and
the completion sound.  Only the recognised options are offered, so values
reaching the engine are always valid.  The caller applies and saves the
edited ``Settings`` when the dialog closes.
"""

from __future__ import annotations

from typing import Callable

from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QComboBox, QSlider, QCheckBox, QPushButton,
    QFrame, QWidget,
)
from PyQt6.QtCore import Qt

from ..settings import (
    Settings,
    AVAILABLE_SOUNDS,
    FOCUS_MINUTES_OPTIONS,
    SHORT_BREAK_MINUTES_OPTIONS,
    LONG_BREAK_MINUTES_OPTIONS,
    SESSIONS_OPTIONS,
)


def _minutes_combo(options: tuple[int, ...]) -> QComboBox:
    combo = QComboBox()
    for minutes in options:
        combo.addItem(f"{minutes} min", minutes * 60)
    return combo


def _select_data(combo: QComboBox, value) -> None:
    """Select the item carrying *value*, appending it if it isn't offered."""
    idx = combo.findData(value)
    if idx < 0:
        label = f"{value // 60} min" if isinstance(value, int) and value >= 60 else str(value)
        combo.addItem(label, value)
        idx = combo.count() - 1
    combo.setCurrentIndex(idx)


class SettingsDialog(QDialog):
    """Modal dialog for all user preferences."""

    def __init__(
        self,
        settings: Settings,
        parent: QWidget | None = None,
        *,
        sound_preview_callback: Callable[[str], None] | None = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setMinimumWidth(380)
        self.setModal(True)

        self._settings = settings
        self._sound_preview = sound_preview_callback

        self._build_ui()
        self._populate()
        self._connect()

    # ══════════════════════════════════════════════════════════════════
    #  BUILD UI
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(16)

        # ── Timer section ────────────────────────────────────────────
        root.addWidget(self._section_label("Timer Settings"))
        timer_form = QFormLayout()
        timer_form.setHorizontalSpacing(20)
        timer_form.setVerticalSpacing(10)

        self._focus_combo = _minutes_combo(FOCUS_MINUTES_OPTIONS)
        timer_form.addRow("Focus time:", self._focus_combo)

        self._short_combo = _minutes_combo(SHORT_BREAK_MINUTES_OPTIONS)
        timer_form.addRow("Short break:", self._short_combo)

        self._long_combo = _minutes_combo(LONG_BREAK_MINUTES_OPTIONS)
        timer_form.addRow("Long break:", self._long_combo)

        self._sessions_combo = QComboBox()
        for n in SESSIONS_OPTIONS:
            self._sessions_combo.addItem(str(n), n)
        timer_form.addRow("Sessions before long break:", self._sessions_combo)

        root.addLayout(timer_form)
        root.addWidget(self._separator())

        # ── Sound section ────────────────────────────────────────────
        root.addWidget(self._section_label("Sound Settings"))
        snd_form = QFormLayout()
        snd_form.setHorizontalSpacing(20)
        snd_form.setVerticalSpacing(10)

        sound_row = QHBoxLayout()
        self._sound_combo = QComboBox()
        for name in AVAILABLE_SOUNDS:
            self._sound_combo.addItem(name, name)
        self._test_btn = QPushButton("Test Sound")
        sound_row.addWidget(self._sound_combo)
        sound_row.addWidget(self._test_btn)
        sound_wrapper = QWidget()
        sound_wrapper.setLayout(sound_row)
        snd_form.addRow("Completion sound:", sound_wrapper)

        self._sound_cb = QCheckBox("Play sound on completion")
        snd_form.addRow("", self._sound_cb)

        vol_row = QHBoxLayout()
        self._vol_slider = QSlider(Qt.Orientation.Horizontal)
        self._vol_slider.setRange(0, 100)
        self._vol_label = QLabel("70%")
        self._vol_label.setMinimumWidth(36)
        vol_row.addWidget(self._vol_slider)
        vol_row.addWidget(self._vol_label)
        vol_wrapper = QWidget()
        vol_wrapper.setLayout(vol_row)
        snd_form.addRow("Volume:", vol_wrapper)

        self._notif_cb = QCheckBox("Show notification on completion")
        snd_form.addRow("", self._notif_cb)

        root.addLayout(snd_form)

        # ── shortcuts (informational) ────────────────────────────────
        root.addWidget(self._separator())
        root.addWidget(self._section_label("Keyboard Shortcuts"))
        root.addWidget(QLabel("Space: Start/Pause    R: Reset Timer    S: Skip to Next Phase"))

        root.addStretch()
        btn_row = QHBoxLayout()
        btn_row.addStretch()
        done_btn = QPushButton("Done")
        done_btn.setDefault(True)
        done_btn.clicked.connect(self.accept)
        btn_row.addWidget(done_btn)
        root.addLayout(btn_row)

    @staticmethod
    def _section_label(text: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setStyleSheet("font-size: 15px; font-weight: 700; margin-top: 4px;")
        return lbl

    @staticmethod
    def _separator() -> QFrame:
        line = QFrame()
        line.setFrameShape(QFrame.Shape.HLine)
        line.setFixedHeight(1)
        return line

    # ══════════════════════════════════════════════════════════════════
    #  POPULATE FROM SETTINGS
    # ══════════════════════════════════════════════════════════════════

    def _populate(self) -> None:
        s = self._settings
        _select_data(self._focus_combo, s.focus_duration)
        _select_data(self._short_combo, s.short_break_duration)
        _select_data(self._long_combo, s.long_break_duration)
        _select_data(self._sessions_combo, s.sessions_before_long_break)
        _select_data(self._sound_combo, s.selected_sound)
        self._sound_cb.setChecked(s.sound_enabled)
        self._vol_slider.setValue(s.sound_volume)
        self._vol_label.setText(f"{s.sound_volume}%")
        self._notif_cb.setChecked(s.notifications_enabled)

    def _connect(self) -> None:
        for combo in (
            self._focus_combo, self._short_combo,
            self._long_combo, self._sessions_combo, self._sound_combo,
        ):
            combo.currentIndexChanged.connect(self._on_choice_changed)
        self._sound_cb.toggled.connect(self._on_toggle_changed)
        self._notif_cb.toggled.connect(self._on_toggle_changed)
        self._vol_slider.valueChanged.connect(self._on_volume_changed)
        self._test_btn.clicked.connect(self._on_test_sound)

    # ══════════════════════════════════════════════════════════════════
    #  CHANGE HANDLERS
    # ══════════════════════════════════════════════════════════════════

    def _on_choice_changed(self) -> None:
        self._settings.focus_duration = self._focus_combo.currentData()
        self._settings.short_break_duration = self._short_combo.currentData()
        self._settings.long_break_duration = self._long_combo.currentData()
        self._settings.sessions_before_long_break = self._sessions_combo.currentData()
        self._settings.selected_sound = self._sound_combo.currentData()

    def _on_toggle_changed(self) -> None:
        self._settings.sound_enabled = self._sound_cb.isChecked()
        self._settings.notifications_enabled = self._notif_cb.isChecked()

    def _on_volume_changed(self, value: int) -> None:
        self._vol_label.setText(f"{value}%")
        self._settings.sound_volume = value

    def _on_test_sound(self) -> None:
        if self._sound_preview:
            self._sound_preview(self._sound_combo.currentData())

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def settings(self) -> Settings:
        return self._settings
