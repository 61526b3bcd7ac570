"""Tests for the adaptive onset detector."""

import pytest

from tilebloom.audio.onset import OnsetDetector
from tilebloom.config import SIMPLE, OnsetTuning

FRAME_MS = 1000.0 / 60


def _settle(detector, level, start_ms, frames=60):
    t = start_ms
    fired = 0
    for _ in range(frames):
        fired += detector.update(level, t)
        t += FRAME_MS
    return t, fired


class TestOnsetDetector:
    def test_flat_signal_never_fires(self):
        d = OnsetDetector()
        _, fired = _settle(d, 50.0, 0.0, frames=300)
        assert fired == 0

    def test_large_step_fires_once(self):
        d = OnsetDetector()
        t, _ = _settle(d, 20.0, 0.0)
        assert d.update(80.0, t) is True
        # Holding the new level produces no further rises
        _, fired = _settle(d, 80.0, t + FRAME_MS)
        assert fired == 0

    def test_each_separated_step_fires(self):
        d = OnsetDetector()
        t, _ = _settle(d, 10.0, 0.0)
        fired = 0
        for _ in range(5):
            fired += d.update(90.0, t)
            t, _ = _settle(d, 10.0, t + FRAME_MS, frames=30)
        assert fired == 5

    def test_steps_inside_cooldown_suppressed(self):
        d = OnsetDetector()
        t, _ = _settle(d, 10.0, 0.0)
        assert d.update(90.0, t)
        # Drop and rise again 2 frames later, well within 240 ms
        d.update(10.0, t + FRAME_MS)
        assert d.update(90.0, t + 2 * FRAME_MS) is False
        d.update(10.0, t + 3 * FRAME_MS)
        assert d.update(90.0, t + 4 * FRAME_MS) is False

    def test_min_delta_floor(self):
        d = OnsetDetector(OnsetTuning(bias=0.0, k=0.0, min_delta=7.0))
        t, _ = _settle(d, 10.0, 0.0)
        assert d.update(16.0, t) is False

    def test_no_fire_before_first_cooldown(self):
        d = OnsetDetector()
        assert d.update(100.0, 100.0) is False

    def test_falling_energy_ignored(self):
        d = OnsetDetector()
        t, _ = _settle(d, 90.0, 0.0)
        assert d.update(0.0, t) is False

    def test_threshold_adapts_to_noise(self):
        quiet = OnsetDetector()
        noisy = OnsetDetector()
        t = 0.0
        for i in range(120):
            quiet.update(10.0, t)
            noisy.update(10.0 + (25.0 if i % 2 else 0.0), t)
            t += FRAME_MS
        assert noisy.threshold() > quiet.threshold()

    def test_statistics_update_during_cooldown(self):
        d = OnsetDetector()
        d.update(50.0, 0.0)
        assert d.mean_delta > 0.0

    def test_simple_variant_tuning(self):
        d = OnsetDetector(SIMPLE.onset)
        assert d.tuning.cooldown_ms == 180.0
        assert d.tuning.min_delta == 0.0
        t, _ = _settle(d, 10.0, 0.0)
        assert d.update(30.0, t) is True

    def test_reset(self):
        d = OnsetDetector()
        _settle(d, 40.0, 0.0)
        d.reset()
        assert d.prev_energy == 0.0
        assert d.last_fire_ms == 0.0
        assert d.threshold() == pytest.approx(d.tuning.bias)
