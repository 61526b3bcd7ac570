"""
Spectrum reduction into the two control signals.

Fullness: a loudness-invariant 0..1 measure of how "full" the mix is,
normalized against a slowly decaying running maximum.
Beat energy: a kick-heavy band blend in byte units, fed to onset detection.
"""

from dataclasses import dataclass

import numpy as np

from tilebloom.config import FullnessTuning


@dataclass
class AudioFrame:
    """Result of analyzing one spectrum snapshot."""

    fullness: float
    beat_energy: float
    low: float
    mid: float
    high: float


def band_average(spectrum: np.ndarray, lo: int, hi: int) -> float:
    """Mean of spectrum[lo..hi] inclusive, clamped to the array."""
    lo = max(0, lo)
    hi = min(len(spectrum) - 1, hi)
    if hi < lo:
        return 0.0
    return float(np.mean(spectrum[lo:hi + 1], dtype=np.float64))


class AudioAnalyzer:
    """Stateful fullness tracker over successive spectrum snapshots."""

    def __init__(self, tuning: FullnessTuning | None = None):
        self.tuning = tuning or FullnessTuning()
        self.reset()

    def reset(self):
        self.fullness_ema = 0.0
        self.fullness_max = self.tuning.max_initial

    def analyze(self, spectrum: np.ndarray) -> AudioFrame:
        """
        Reduce one byte-magnitude snapshot.

        Args:
            spectrum: 1-D array of magnitudes in 0..255.

        Returns:
            AudioFrame with normalized fullness and raw beat energy.
        """
        t = self.tuning
        spectrum = np.asarray(spectrum)

        low = band_average(spectrum, *t.low_band)
        mid = band_average(spectrum, *t.mid_band)
        high = band_average(spectrum, *t.high_band)

        raw = (t.low_weight * low + t.mid_weight * mid + t.high_weight * high) / 255.0
        self.fullness_ema += t.ema_alpha * (raw - self.fullness_ema)

        self.fullness_max = max(self.fullness_ema, self.fullness_max * t.max_decay)
        fullness = min(1.0, self.fullness_ema / max(t.max_floor, self.fullness_max))

        drum_mid = band_average(spectrum, *t.drum_band)
        beat_energy = t.beat_low_weight * low + t.beat_mid_weight * drum_mid

        return AudioFrame(
            fullness=fullness,
            beat_energy=beat_energy,
            low=low,
            mid=mid,
            high=high,
        )
