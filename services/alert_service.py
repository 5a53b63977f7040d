# -*- coding: utf-8 -*-

import logging
import os
from typing import List, Optional, Tuple

import numpy as np

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
import pygame  # noqa: E402
from plyer import notification  # noqa: E402

from storage.repos import clamp_volume  # noqa: E402

SAMPLE_RATE = 44100
FIXED_REPEAT_COUNT = 4
MAX_REPEAT_COUNT = 5

log = logging.getLogger(__name__)

# (frequency Hz, offset s, duration s, wave) per cycle, and the cycle length
_PATTERNS = {
    "chime": ([(880, 0.0, 0.14, "sine"), (660, 0.18, 0.14, "sine")], 0.5),
    "bell": (
        [
            (1046, 0.0, 0.12, "triangle"),
            (1318, 0.12, 0.12, "triangle"),
            (1568, 0.24, 0.12, "triangle"),
        ],
        0.56,
    ),
    "beep": ([(880, 0.0, 0.2, "square")], 0.42),
}


def peak_gain(volume: int) -> float:
    return min(0.95, 0.38 * (clamp_volume(volume) / 100))


def _note_events(sound_type: str, repeat: int) -> List[Tuple[float, float, float, str]]:
    notes, cycle = _PATTERNS[sound_type]
    events = []
    for i in range(repeat):
        base = i * cycle
        for freq, offset, duration, wave in notes:
            events.append((freq, base + offset, duration, wave))
    return events


def render_tone(
    sound_type: str,
    volume: int,
    repeat: int = FIXED_REPEAT_COUNT,
    sample_rate: int = SAMPLE_RATE,
) -> np.ndarray:
    """
    Mono float waveform in [-1, 1] for a completion sound.
    "silent" (or an unknown type) gives an empty array.
    """
    if sound_type not in _PATTERNS:
        return np.zeros(0, dtype=np.float32)

    repeat = min(MAX_REPEAT_COUNT, max(1, int(repeat)))
    gain = peak_gain(volume)
    events = _note_events(sound_type, repeat)
    total = max(offset + duration for _, offset, duration, _ in events)
    buf = np.zeros(int(total * sample_rate) + 1, dtype=np.float32)

    for freq, offset, duration, wave in events:
        n = int(duration * sample_rate)
        t = np.linspace(0, duration, n, False)
        phase = freq * t * 2 * np.pi
        if wave == "square":
            note = np.sign(np.sin(phase))
        elif wave == "triangle":
            note = 2 / np.pi * np.arcsin(np.sin(phase))
        else:
            note = np.sin(phase)

        # short attack, exponential decay
        attack = max(1, int(sample_rate * 0.02))
        env = np.exp(-np.linspace(0, 6, n))
        env[:attack] *= np.linspace(0, 1, attack)

        start = int(offset * sample_rate)
        buf[start:start + n] += (note * env * gain).astype(np.float32)

    return np.clip(buf, -1.0, 1.0)


class SoundPlayer:
    def __init__(self):
        self._ready: Optional[bool] = None
        self._current = None

    def _ensure_mixer(self) -> bool:
        if self._ready is None:
            try:
                pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=2, buffer=512)
                self._ready = True
            except pygame.error:
                log.debug("no audio device; completion sounds disabled", exc_info=True)
                self._ready = False
        return self._ready

    def play(self, sound_type: str, volume: int, repeat: int = FIXED_REPEAT_COUNT) -> None:
        wave = render_tone(sound_type, volume, repeat)
        if wave.size == 0:
            return
        if not self._ensure_mixer():
            return

        audio = (wave * 32767).astype(np.int16)
        stereo = np.ascontiguousarray(np.repeat(audio.reshape(-1, 1), 2, axis=1))
        self._current = pygame.sndarray.make_sound(stereo)
        self._current.play()


class DesktopNotifier:
    def __init__(self, app_name: str = "Focus Timeline"):
        self.app_name = app_name

    def notify(self, task: str, planned_minutes: int) -> None:
        try:
            notification.notify(
                title="Session complete",
                message=f"{task} ({planned_minutes} min) is complete.",
                app_name=self.app_name,
                timeout=10,
            )
        except NotImplementedError:
            log.debug("no notification backend on this platform")


class CompletionAlerts:
    """
    Fire-and-forget sink for natural timeouts: notification + sound.
    Failures are logged and swallowed so they never touch timer state.
    """

    def __init__(
        self,
        notifier: Optional[DesktopNotifier] = None,
        player: Optional[SoundPlayer] = None,
    ):
        self.notifier = notifier or DesktopNotifier()
        self.player = player or SoundPlayer()

    def __call__(self, task: str, planned_minutes: int, sound_type: str, volume: int) -> None:
        try:
            self.notifier.notify(task, planned_minutes)
        except Exception:
            log.warning("completion notification failed", exc_info=True)
        self.play(sound_type, volume)

    def play(self, sound_type: str, volume: int) -> None:
        try:
            self.player.play(sound_type, volume, FIXED_REPEAT_COUNT)
        except Exception:
            log.warning("completion sound failed", exc_info=True)
