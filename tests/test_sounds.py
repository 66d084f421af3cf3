"""Tests for settings, sound synthesis, the alert fallback chain and dialog.

Covers:
- Settings dataclass defaults, sanitising and JSON round-trip
- WAV generation for every completion sound
- SoundManager playback API and fallback to the default sound / beep
- SettingsDialog population and edits
"""

from __future__ import annotations

import io
import json
import wave

import pytest

from pomodorotimer.settings import (
    Settings, load_settings, save_settings, sanitize_settings,
    AVAILABLE_SOUNDS, FOCUS_MINUTES_OPTIONS, SHORT_BREAK_MINUTES_OPTIONS,
    LONG_BREAK_MINUTES_OPTIONS, SESSIONS_OPTIONS,
)
from pomodorotimer.audio.sounds import SoundManager, SOUND_NAMES, RECIPES, generate_sound


# ═══════════════════════════════════════════════════════════════════════
#  SETTINGS
# ═══════════════════════════════════════════════════════════════════════


class TestSettingsDefaults:
    def test_focus_duration(self):
        assert Settings().focus_duration == 20 * 60

    def test_short_break(self):
        assert Settings().short_break_duration == 2 * 60

    def test_long_break(self):
        assert Settings().long_break_duration == 15 * 60

    def test_sessions_before_long_break(self):
        assert Settings().sessions_before_long_break == 4

    def test_sound(self):
        s = Settings()
        assert s.selected_sound == "Glass"
        assert s.sound_enabled is True
        assert s.sound_volume == 70

    def test_notifications_default(self):
        assert Settings().notifications_enabled is True


class TestOptionTables:
    def test_focus_options(self):
        assert FOCUS_MINUTES_OPTIONS == (15, 20, 25, 30, 35, 40, 45, 50, 55, 60)

    def test_short_break_options(self):
        assert SHORT_BREAK_MINUTES_OPTIONS == tuple(range(1, 11))

    def test_long_break_options(self):
        assert LONG_BREAK_MINUTES_OPTIONS == (10, 15, 20, 25, 30)

    def test_sessions_options(self):
        assert SESSIONS_OPTIONS == (2, 3, 4, 5, 6)

    def test_fourteen_sounds(self):
        assert len(AVAILABLE_SOUNDS) == 14
        assert AVAILABLE_SOUNDS[0] == "Glass"


class TestSanitize:
    @pytest.mark.parametrize("value", [0, -60])
    def test_non_positive_duration_clamped(self, value):
        s = sanitize_settings(Settings(focus_duration=value))
        assert s.focus_duration == 1

    def test_sessions_clamped(self):
        s = sanitize_settings(Settings(sessions_before_long_break=0))
        assert s.sessions_before_long_break == 1

    def test_unknown_sound_replaced(self):
        s = sanitize_settings(Settings(selected_sound="Cowbell"))
        assert s.selected_sound == "Glass"

    def test_volume_clamped(self):
        assert sanitize_settings(Settings(sound_volume=250)).sound_volume == 100

    def test_float_duration_coerced(self):
        s = sanitize_settings(Settings(focus_duration=1500.0, long_break_duration=900.7))
        assert s.focus_duration == 1500
        assert type(s.focus_duration) is int
        assert s.long_break_duration == 900

    @pytest.mark.parametrize("value", [True, False, "1500", None, float("nan")])
    def test_non_numeric_duration_rejected(self, value):
        s = sanitize_settings(Settings(short_break_duration=value))
        assert s.short_break_duration == 1
        assert type(s.short_break_duration) is int

    def test_float_sessions_coerced(self):
        assert sanitize_settings(Settings(sessions_before_long_break=3.0)).sessions_before_long_break == 3

    def test_bool_sessions_rejected(self):
        assert sanitize_settings(Settings(sessions_before_long_break=True)).sessions_before_long_break == 1

    def test_valid_values_untouched(self):
        s = Settings(focus_duration=45 * 60, selected_sound="Tink")
        sanitize_settings(s)
        assert s.focus_duration == 45 * 60
        assert s.selected_sound == "Tink"


class TestSettingsPersistence:
    @pytest.fixture(autouse=True)
    def _tmp_settings(self, tmp_path, monkeypatch):
        self.path = tmp_path / "settings.json"
        monkeypatch.setattr("pomodorotimer.settings.SETTINGS_PATH", self.path)
        monkeypatch.setattr("pomodorotimer.settings.APP_SUPPORT_DIR", tmp_path)

    def test_round_trip(self):
        save_settings(Settings(focus_duration=30 * 60, selected_sound="Hero"))
        loaded = load_settings()
        assert loaded.focus_duration == 30 * 60
        assert loaded.selected_sound == "Hero"

    def test_missing_file_returns_defaults(self):
        assert load_settings() == Settings()

    def test_invalid_json_returns_defaults(self):
        self.path.write_text("NOT VALID JSON", encoding="utf-8")
        assert load_settings() == Settings()

    def test_extra_keys_ignored(self):
        data = {"focus_duration": 1800, "unknown_future_key": True}
        self.path.write_text(json.dumps(data), encoding="utf-8")
        s = load_settings()
        assert s.focus_duration == 1800
        assert not hasattr(s, "unknown_future_key")

    def test_json_float_duration_kept(self):
        self.path.write_text(json.dumps({"focus_duration": 1500.0}), encoding="utf-8")
        assert load_settings().focus_duration == 1500

    def test_loaded_values_sanitized(self):
        data = {"sessions_before_long_break": -2, "selected_sound": "Nope"}
        self.path.write_text(json.dumps(data), encoding="utf-8")
        s = load_settings()
        assert s.sessions_before_long_break == 1
        assert s.selected_sound == "Glass"


# ═══════════════════════════════════════════════════════════════════════
#  SOUND SYNTHESIS
# ═══════════════════════════════════════════════════════════════════════


class TestSoundGeneration:
    def test_every_sound_has_a_recipe(self):
        assert set(RECIPES) == set(SOUND_NAMES)

    @pytest.mark.parametrize("name", SOUND_NAMES)
    def test_wav_is_parseable(self, name):
        data = generate_sound(name)
        assert data[:4] == b"RIFF"
        with wave.open(io.BytesIO(data), "rb") as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == 44100
            assert wf.getnframes() > 0

    def test_unknown_name_raises(self):
        with pytest.raises(KeyError):
            generate_sound("Cowbell")


@pytest.mark.usefixtures("qapp")
class TestSoundManager:
    def test_wav_files_generated(self, tmp_path):
        SoundManager(parent=None, sounds_dir=tmp_path)
        for name in SOUND_NAMES:
            path = tmp_path / f"{name}.wav"
            assert path.exists(), f"Missing WAV: {name}"
            assert path.stat().st_size > 100

    def test_all_sounds_available(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        assert all(mgr.available(name) for name in SOUND_NAMES)

    def test_set_volume_clamps(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        mgr.set_volume(30)
        assert mgr.volume == 30
        mgr.set_volume(200)
        assert mgr.volume == 100
        mgr.set_volume(-10)
        assert mgr.volume == 0

    def test_play_alert_selected(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        assert mgr.play_alert("Hero") == "Hero"

    def test_play_alert_falls_back_to_default(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        assert mgr.play_alert("Cowbell") == "Glass"

    def test_play_alert_falls_back_to_beep(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        mgr._effects.clear()
        assert mgr.play_alert("Hero") == "beep"

    def test_play_alert_disabled(self, tmp_path):
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        mgr.set_enabled(False)
        assert mgr.play_alert("Hero") == ""

    def test_truncated_cache_file_regenerated(self, tmp_path):
        good = generate_sound("Hero")
        (tmp_path / "Hero.wav").write_bytes(good[: len(good) // 2])
        mgr = SoundManager(parent=None, sounds_dir=tmp_path)
        assert (tmp_path / "Hero.wav").read_bytes() == good
        assert mgr.play_alert("Hero") == "Hero"

    def test_garbage_cache_file_regenerated(self, tmp_path):
        (tmp_path / "Glass.wav").write_bytes(b"not a wav")
        SoundManager(parent=None, sounds_dir=tmp_path)
        assert (tmp_path / "Glass.wav").read_bytes() == generate_sound("Glass")

    def test_no_temp_files_left_behind(self, tmp_path):
        SoundManager(parent=None, sounds_dir=tmp_path)
        assert list(tmp_path.glob("*.tmp")) == []

    def test_unwritable_cache_degrades(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x", encoding="utf-8")
        mgr = SoundManager(parent=None, sounds_dir=blocker / "sounds")
        assert mgr.play_alert("Hero") == "beep"


# ═══════════════════════════════════════════════════════════════════════
#  SETTINGS DIALOG
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestSettingsDialog:
    def test_create(self):
        from pomodorotimer.ui.settings_dialog import SettingsDialog
        dlg = SettingsDialog(Settings())
        assert dlg.windowTitle() == "Settings"

    def test_reflects_settings(self):
        from pomodorotimer.ui.settings_dialog import SettingsDialog
        s = Settings(focus_duration=30 * 60, sessions_before_long_break=6, selected_sound="Pop")
        dlg = SettingsDialog(s)
        assert dlg._focus_combo.currentData() == 30 * 60
        assert dlg._sessions_combo.currentData() == 6
        assert dlg._sound_combo.currentData() == "Pop"

    def test_unlisted_value_is_kept(self):
        from pomodorotimer.ui.settings_dialog import SettingsDialog
        s = Settings(focus_duration=17 * 60)
        dlg = SettingsDialog(s)
        assert dlg._focus_combo.currentData() == 17 * 60
        assert s.focus_duration == 17 * 60

    def test_changes_update_settings(self):
        from pomodorotimer.ui.settings_dialog import SettingsDialog
        s = Settings()
        dlg = SettingsDialog(s)
        dlg._focus_combo.setCurrentIndex(dlg._focus_combo.findData(45 * 60))
        dlg._long_combo.setCurrentIndex(dlg._long_combo.findData(30 * 60))
        dlg._sound_combo.setCurrentIndex(dlg._sound_combo.findData("Submarine"))
        assert s.focus_duration == 45 * 60
        assert s.long_break_duration == 30 * 60
        assert s.selected_sound == "Submarine"

    def test_volume_slider_updates_label(self):
        from pomodorotimer.ui.settings_dialog import SettingsDialog
        s = Settings()
        dlg = SettingsDialog(s)
        dlg._vol_slider.setValue(85)
        assert dlg._vol_label.text() == "85%"
        assert s.sound_volume == 85

    def test_test_sound_previews_selection(self):
        from pomodorotimer.ui.settings_dialog import SettingsDialog
        calls: list[str] = []
        s = Settings(selected_sound="Frog")
        dlg = SettingsDialog(s, sound_preview_callback=calls.append)
        dlg._test_btn.click()
        assert calls == ["Frog"]
