import numpy as np
import pytest

from services.alert_service import (
    FIXED_REPEAT_COUNT,
    SAMPLE_RATE,
    CompletionAlerts,
    peak_gain,
    render_tone,
)


class RecordingNotifier:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def notify(self, task, planned_minutes):
        self.calls.append((task, planned_minutes))
        if self.fail:
            raise RuntimeError("dbus unavailable")


class RecordingPlayer:
    def __init__(self):
        self.calls = []

    def play(self, sound_type, volume, repeat):
        self.calls.append((sound_type, volume, repeat))


def test_silent_renders_nothing():
    assert render_tone("silent", 120).size == 0
    assert render_tone("kazoo", 120).size == 0


@pytest.mark.parametrize("sound_type, cycle, tail", [("chime", 0.5, 0.32), ("bell", 0.56, 0.36), ("beep", 0.42, 0.2)])
def test_tone_length_follows_pattern(sound_type, cycle, tail):
    wave = render_tone(sound_type, 100, repeat=FIXED_REPEAT_COUNT)
    expected = (FIXED_REPEAT_COUNT - 1) * cycle + tail
    assert wave.size == pytest.approx(expected * SAMPLE_RATE, abs=2)


def test_tone_respects_volume():
    loud = render_tone("chime", 200)
    normal = render_tone("chime", 100)

    assert np.abs(normal).max() <= peak_gain(100) + 1e-6
    assert np.abs(loud).max() > np.abs(normal).max()
    assert not np.any(render_tone("beep", 0))


def test_peak_gain_is_capped():
    assert peak_gain(100) == pytest.approx(0.38)
    assert peak_gain(10_000) == pytest.approx(0.76)
    assert peak_gain(0) == 0


def test_alerts_notify_and_play():
    notifier, player = RecordingNotifier(), RecordingPlayer()
    alerts = CompletionAlerts(notifier=notifier, player=player)

    alerts("essay", 25, "bell", 80)

    assert notifier.calls == [("essay", 25)]
    assert player.calls == [("bell", 80, FIXED_REPEAT_COUNT)]


def test_failed_notification_still_plays_sound():
    notifier, player = RecordingNotifier(fail=True), RecordingPlayer()
    CompletionAlerts(notifier=notifier, player=player)("essay", 25, "chime", 120)
    assert player.calls == [("chime", 120, FIXED_REPEAT_COUNT)]
