"""
Adaptive onset detection on the beat-energy signal.

Tracks an EMA and EMA-variance of the positive first difference and fires
when a rise clears mean + k * std + bias, subject to a hard floor and a
refractory cooldown.
"""

import math

from tilebloom.config import OnsetTuning


class OnsetDetector:
    def __init__(self, tuning: OnsetTuning | None = None):
        self.tuning = tuning or OnsetTuning()
        self.reset()

    def reset(self):
        self.prev_energy = 0.0
        self.mean_delta = 0.0
        self.var_delta = 0.0
        self.last_fire_ms = 0.0

    def threshold(self) -> float:
        """Current firing threshold for the energy delta."""
        t = self.tuning
        std = math.sqrt(max(0.0, self.var_delta))
        return self.mean_delta + t.k * std + t.bias

    def update(self, energy: float, now_ms: float) -> bool:
        """
        Feed one beat-energy sample.

        Statistics update on every call, including calls inside the
        cooldown window.

        Returns:
            True if this sample is an onset.
        """
        t = self.tuning

        d = max(0.0, energy - self.prev_energy)
        self.prev_energy = energy

        diff = d - self.mean_delta
        self.mean_delta += t.alpha * diff
        self.var_delta += t.alpha * (diff * diff - self.var_delta)

        threshold = self.threshold()

        if now_ms - self.last_fire_ms < t.cooldown_ms:
            return False
        if d < t.min_delta:
            return False

        if d > threshold:
            self.last_fire_ms = now_ms
            return True
        return False
