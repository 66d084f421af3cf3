"""Main application window for PomodoroTimer.

The window owns the one-second tick driver and every OS-facing
collaborator (tray icon, sounds, notifications, shortcuts).  The
``TimerEngine`` itself stays a plain object that this window feeds.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QAction, QGuiApplication, QIcon, QImage, QPainter, QColor, QPen, QPixmap, QKeySequence, QShortcut
from PyQt6.QtWidgets import QApplication, QDialog, QMainWindow, QMenu, QSystemTrayIcon

from .timer.engine import TimerEngine, Phase
from .ui.timer_panel import TimerPanel
from .ui.settings_dialog import SettingsDialog
from .settings import Settings, load_settings, save_settings, sanitize_settings
from .audio.sounds import SoundManager


logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000


# ── tray‑icon image generation ────────────────────────────────────────────


def _make_tray_icon(phase: Phase, running: bool) -> QIcon:
    """Generate a 32×32 monochrome template icon for the menu bar.

    - FOCUS running:    filled circle
    - BREAK running:    circle outline with a centre dot
    - paused (any):     two vertical pause bars
    """
    size = 64  # draw at 2× for Retina
    img = QImage(size, size, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(Qt.GlobalColor.transparent)
    p = QPainter(img)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    colour = QColor(0, 0, 0, 220)
    p.setPen(Qt.PenStyle.NoPen)
    p.setBrush(colour)

    cx, cy, r = size // 2, size // 2, size // 2 - 4

    if not running:
        bar_w, bar_h = 8, 28
        gap = 6
        y = cy - bar_h // 2
        p.drawRoundedRect(cx - gap - bar_w, y, bar_w, bar_h, 3, 3)
        p.drawRoundedRect(cx + gap, y, bar_w, bar_h, 3, 3)
    elif phase == Phase.FOCUS:
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
    else:
        p.setPen(QPen(colour, 4))
        p.setBrush(Qt.BrushStyle.NoBrush)
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(colour)
        dot_r = 6
        p.drawEllipse(cx - dot_r, cy - dot_r, dot_r * 2, dot_r * 2)

    p.end()

    img.setDevicePixelRatio(2.0)
    return QIcon(QPixmap.fromImage(img))


class PomodoroApp(QMainWindow):
    """Menu-bar style window hosting the timer panel."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        sound_manager: SoundManager | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("PomodoroTimer")
        self.setMinimumSize(320, 300)

        # ── settings ──────────────────────────────────────────────────
        self._settings: Settings = settings if settings is not None else load_settings()

        # ── engine + tick driver ──────────────────────────────────────
        self._timer_engine = TimerEngine(parent=self)
        self._apply_settings()
        self._timer_engine.reset()

        self._tick_driver = QTimer(self)
        self._tick_driver.setInterval(TICK_INTERVAL_MS)
        self._tick_driver.timeout.connect(self._timer_engine.tick)

        # ── sound ─────────────────────────────────────────────────────
        self._sound_manager = sound_manager or SoundManager(parent=self)
        self._sound_manager.set_volume(self._settings.sound_volume)
        self._sound_manager.set_enabled(self._settings.sound_enabled)

        # ── panel ─────────────────────────────────────────────────────
        self._panel = TimerPanel(self._timer_engine, self)
        self.setCentralWidget(self._panel)
        self._panel.toggle_requested.connect(self._timer_engine.toggle)
        self._panel.reset_requested.connect(self._timer_engine.reset)
        self._panel.skip_requested.connect(self._timer_engine.skip)
        self._panel.reset_session_requested.connect(self._timer_engine.reset_session)
        self._panel.settings_requested.connect(self._open_settings)

        # ── system tray icon ──────────────────────────────────────────
        self._tray_icon = QSystemTrayIcon(self)
        self._tray_icon.activated.connect(self._on_tray_activated)
        self._build_tray_menu()
        self._refresh_tray()
        self._tray_icon.show()

        # ── engine signals ────────────────────────────────────────────
        self._timer_engine.running_changed.connect(self._sync_driver)
        self._timer_engine.running_changed.connect(lambda _running: self._refresh_tray())
        self._timer_engine.remaining_changed.connect(lambda _remaining: self._refresh_tray())
        self._timer_engine.phase_changed.connect(lambda _phase: self._refresh_tray())
        # Queued: sound and notification work never runs inside an engine call
        self._timer_engine.phase_completed.connect(
            self._on_phase_completed, Qt.ConnectionType.QueuedConnection,
        )

        # ── daily reset when the app comes to the foreground ─────────
        app = QGuiApplication.instance()
        if app is not None:
            app.applicationStateChanged.connect(self._on_application_state_changed)

        self._setup_shortcuts()

    # ══════════════════════════════════════════════════════════════════
    #  TICK DRIVER
    # ══════════════════════════════════════════════════════════════════

    def _sync_driver(self, running: bool) -> None:
        """Keep the 1 s driver active exactly while the engine runs."""
        if running and not self._tick_driver.isActive():
            self._tick_driver.start()
        elif not running and self._tick_driver.isActive():
            self._tick_driver.stop()

    # ══════════════════════════════════════════════════════════════════
    #  SYSTEM TRAY
    # ══════════════════════════════════════════════════════════════════

    def _build_tray_menu(self) -> None:
        """Create the right-click context menu for the tray icon."""
        menu = QMenu(self)

        self._tray_start_action = menu.addAction("Start")
        self._tray_start_action.triggered.connect(self._timer_engine.toggle)

        reset_action = menu.addAction("Reset")
        reset_action.triggered.connect(self._timer_engine.reset)

        skip_action = menu.addAction("Skip")
        skip_action.triggered.connect(self._timer_engine.skip)

        reset_session_action = menu.addAction("Reset Session")
        reset_session_action.triggered.connect(self._timer_engine.reset_session)

        menu.addSeparator()

        show_action = menu.addAction("Show PomodoroTimer")
        show_action.triggered.connect(self._show_window)

        settings_action = menu.addAction("Settings…")
        settings_action.triggered.connect(self._open_settings)

        menu.addSeparator()

        quit_action = menu.addAction("Quit")
        quit_action.triggered.connect(self._quit_app)

        self._tray_icon.setContextMenu(menu)

    def _refresh_tray(self) -> None:
        """Re-sync icon, tooltip and menu label with the engine."""
        engine = self._timer_engine
        self._tray_icon.setIcon(_make_tray_icon(engine.current_phase, engine.is_running))
        self._tray_icon.setToolTip(f"{engine.phase_label} {engine.formatted_time}")
        self._tray_start_action.setText("Pause" if engine.is_running else "Start")

    def _on_tray_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        """Left-click on tray icon → show the panel."""
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self._show_window()

    def _show_window(self) -> None:
        self.show()
        self.raise_()
        self.activateWindow()

    def _quit_app(self) -> None:
        """Actually quit (don't just hide)."""
        self._tick_driver.stop()
        self._tray_icon.hide()
        QApplication.instance().quit()

    # ══════════════════════════════════════════════════════════════════
    #  COMPLETION: SOUND + NOTIFICATION
    # ══════════════════════════════════════════════════════════════════

    def _on_phase_completed(self, data: dict) -> None:
        finished: Phase = data["phase"]
        upcoming: Phase = data["next_phase"]
        try:
            played = self._sound_manager.play_alert(data["sound"])
            logger.debug("Completion sound: %s", played or "(muted)")
            if self._settings.notifications_enabled:
                self._tray_icon.showMessage(
                    f"{finished.label} complete",
                    f"Up next: {upcoming.label}",
                )
        except Exception:
            logger.exception("Completion alert failed")

    # ══════════════════════════════════════════════════════════════════
    #  SETTINGS
    # ══════════════════════════════════════════════════════════════════

    def _open_settings(self) -> None:
        # The dialog edits a copy; cancelling leaves self._settings untouched
        draft = replace(self._settings)
        dlg = SettingsDialog(
            draft, self,
            sound_preview_callback=self._sound_manager.play_alert,
        )
        if dlg.exec() == QDialog.DialogCode.Accepted:
            self._settings = draft
            self._on_settings_accepted()

    def _on_settings_accepted(self) -> None:
        sanitize_settings(self._settings)
        self._apply_settings()
        self._sound_manager.set_volume(self._settings.sound_volume)
        self._sound_manager.set_enabled(self._settings.sound_enabled)
        self._panel.refresh()
        try:
            save_settings(self._settings)
        except OSError:
            logger.warning("Could not save settings", exc_info=True)

    def _apply_settings(self) -> None:
        """Push configuration into the engine.  Countdown is not rescaled."""
        s = self._settings
        engine = self._timer_engine
        engine.focus_duration = s.focus_duration
        engine.short_break_duration = s.short_break_duration
        engine.long_break_duration = s.long_break_duration
        engine.sessions_before_long_break = s.sessions_before_long_break
        engine.selected_sound = s.selected_sound

    # ══════════════════════════════════════════════════════════════════
    #  KEYBOARD SHORTCUTS + ACTIVATION
    # ══════════════════════════════════════════════════════════════════

    def _setup_shortcuts(self) -> None:
        """Space = start/pause, R = reset, S = skip."""
        bindings = (
            ("Space", self._timer_engine.toggle),
            ("R", self._timer_engine.reset),
            ("S", self._timer_engine.skip),
        )
        self._shortcuts: list[QShortcut] = []
        for keys, slot in bindings:
            shortcut = QShortcut(QKeySequence(keys), self)
            shortcut.setContext(Qt.ShortcutContext.ApplicationShortcut)
            shortcut.activated.connect(slot)
            self._shortcuts.append(shortcut)

        settings_action = QAction("Settings…", self)
        settings_action.setShortcut(QKeySequence.StandardKey.Preferences)
        settings_action.triggered.connect(self._open_settings)
        self.addAction(settings_action)

    def _on_application_state_changed(self, state: Qt.ApplicationState) -> None:
        if state == Qt.ApplicationState.ApplicationActive:
            self._timer_engine.check_daily_reset()

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW EVENTS
    # ══════════════════════════════════════════════════════════════════

    def showEvent(self, event) -> None:  # type: ignore[override]
        super().showEvent(event)
        self._timer_engine.check_daily_reset()

    def closeEvent(self, event) -> None:  # type: ignore[override]
        """Hide to the tray instead of quitting while the tray is visible."""
        if self._tray_icon.isVisible():
            event.ignore()
            self.hide()
        else:
            self._tick_driver.stop()
            event.accept()
