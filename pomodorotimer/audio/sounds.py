"""Completion sound synthesis and playback using numpy + QSoundEffect.

Every alert is generated programmatically as a WAV file using sine-wave
synthesis with ADSR envelopes.  Files are cached to disk so subsequent
app launches are instant.

Sound names follow the classic macOS alert set: ``Glass``, ``Basso``,
``Blow``, ``Bottle``, ``Frog``, ``Funk``, ``Hero``, ``Morse``, ``Ping``,
``Pop``, ``Purr``, ``Sosumi``, ``Submarine``, ``Tink``.

``play_alert(name)`` resolves a name with a fallback chain: the requested
sound, then ``Glass``, then the platform beep.  Nothing here ever raises
into the caller.
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path
from typing import NamedTuple

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect
from PyQt6.QtWidgets import QApplication

from ..settings import APP_SUPPORT_DIR, AVAILABLE_SOUNDS
from ..timer.engine import DEFAULT_SOUND


logger = logging.getLogger(__name__)

# ── paths ────────────────────────────────────────────────────────────────

SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = AVAILABLE_SOUNDS

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _make_envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.ones(length, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if decay > 0 and d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    s_end = max(length - release, d_end)
    if s_end > d_end:
        env[d_end:s_end] = sustain_level
    if release > 0 and s_end < length:
        env[s_end:] = np.linspace(sustain_level, 0.0, length - s_end)
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    """Pure sine wave at *freq* Hz for *duration_s* seconds."""
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _square(freq: float, duration_s: float) -> np.ndarray:
    """Soft square wave (sign of a sine) for buzzier alerts."""
    return np.sign(_sine(freq, duration_s)) * 0.6


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND RECIPES
# ═══════════════════════════════════════════════════════════════════════════


class Recipe(NamedTuple):
    """How to synthesise one alert."""

    notes: tuple[float, ...]     # Hz, played in sequence
    note_dur: float              # seconds per note
    gap: float = 0.03            # silence between notes
    tail: float = 0.3            # last note held this long
    overtone: float = 0.0        # level of the 2nd harmonic
    square: bool = False
    level: float = 0.5


RECIPES: dict[str, Recipe] = {
    "Glass":     Recipe((1318.51, 1760.00), 0.08, tail=0.6, overtone=0.15),
    "Basso":     Recipe((98.00,), 0.4, tail=0.5, square=True, level=0.4),
    "Blow":      Recipe((220.00, 196.00), 0.15, gap=0.0, tail=0.4, level=0.35),
    "Bottle":    Recipe((392.00,), 0.2, tail=0.5, overtone=0.3),
    "Frog":      Recipe((180.00, 240.00, 180.00), 0.07, gap=0.02, tail=0.1, square=True, level=0.35),
    "Funk":      Recipe((311.13, 233.08), 0.1, tail=0.25, square=True, level=0.35),
    "Hero":      Recipe((523.25, 659.25, 783.99, 1046.50), 0.10, gap=0.02, tail=0.35),
    "Morse":     Recipe((880.00, 880.00, 880.00), 0.05, gap=0.06, tail=0.05, square=True, level=0.3),
    "Ping":      Recipe((1567.98,), 0.05, tail=0.7, overtone=0.1),
    "Pop":       Recipe((600.00,), 0.03, tail=0.06, level=0.6),
    "Purr":      Recipe((150.00, 160.00, 150.00, 160.00), 0.06, gap=0.0, tail=0.06, square=True, level=0.3),
    "Sosumi":    Recipe((783.99, 659.25, 783.99), 0.08, gap=0.03, tail=0.3, overtone=0.1),
    "Submarine": Recipe((293.66,), 0.2, tail=0.9, overtone=0.2, level=0.45),
    "Tink":      Recipe((2093.00,), 0.02, tail=0.12, level=0.4),
}


def generate_sound(name: str) -> bytes:
    """Render the recipe for *name* to WAV bytes.  ``KeyError`` if unknown."""
    recipe = RECIPES[name]
    wave_fn = _square if recipe.square else _sine
    parts: list[np.ndarray] = []
    for i, freq in enumerate(recipe.notes):
        last = i == len(recipe.notes) - 1
        dur = recipe.tail if last else recipe.note_dur
        tone = wave_fn(freq, dur) * recipe.level
        if recipe.overtone:
            tone = tone + _sine(freq * 2, dur) * recipe.overtone
        release = int(len(tone) * (0.6 if last else 0.3))
        env = _make_envelope(len(tone), attack=60, decay=150, sustain_level=0.5, release=release)
        parts.append(tone * env)
        if not last and recipe.gap > 0:
            parts.append(np.zeros(int(SAMPLE_RATE * recipe.gap)))
    # Pad with silence so QSoundEffect doesn't clip
    parts.append(np.zeros(int(SAMPLE_RATE * 0.05)))
    return _to_wav_bytes(np.concatenate(parts))


def _is_complete_wav(path: Path) -> bool:
    """True if *path* parses as a WAV holding every frame its header declares."""
    try:
        with wave.open(str(path), "rb") as wf:
            expected = wf.getnframes() * wf.getsampwidth() * wf.getnchannels()
            return expected > 0 and len(wf.readframes(wf.getnframes())) == expected
    except (OSError, EOFError, wave.Error):
        return False


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Manages sound synthesis, caching, and playback.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.play_alert("Hero")
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0-1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> bool:
        """Play a sound by name.  Returns False if it isn't available."""
        effect = self._effects.get(name)
        if effect is None or effect.status() == QSoundEffect.Status.Error:
            return False
        effect.play()
        return True

    def play_alert(self, name: str) -> str:
        """Play *name*, falling back to the default sound, then a beep.

        Returns what was actually played (a sound name, ``"beep"``, or
        ``""`` when sound is disabled).
        """
        if not self._enabled:
            return ""
        for candidate in (name, DEFAULT_SOUND):
            if self.play(candidate):
                return candidate
            logger.warning("Sound %r unavailable", candidate)
        QApplication.beep()
        return "beep"

    def available(self, name: str) -> bool:
        return name in self._effects

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Generate missing or unreadable WAV files in the cache directory."""
        try:
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            for name in SOUND_NAMES:
                path = self._sounds_dir / f"{name}.wav"
                if _is_complete_wav(path):
                    continue
                if path.exists():
                    logger.info("Regenerating damaged sound %s", path)
                # Written under a temp name so a cached file is never half-written
                tmp = path.with_suffix(".tmp")
                tmp.write_bytes(generate_sound(name))
                tmp.replace(path)
        except OSError:
            logger.warning("Could not cache sounds in %s", self._sounds_dir, exc_info=True)

    def _load_effects(self) -> None:
        """Create QSoundEffect instances from cached WAV files."""
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if _is_complete_wav(path):
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
