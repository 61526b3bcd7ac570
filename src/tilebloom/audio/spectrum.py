"""
Byte frequency spectra from audio.

Emulates a browser AnalyserNode: Blackman-windowed FFT of 2048 samples,
magnitudes scaled by 1/N, exponential smoothing across frames, then a
decibel window mapped onto 0..255. The engine only ever sees these byte
snapshots, through the SpectrumSource protocol.
"""

from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

import librosa
import numpy as np
from scipy import signal as scipy_signal

FFT_SIZE = 2048
BIN_COUNT = FFT_SIZE // 2
SMOOTHING = 0.72
MIN_DB = -100.0
MAX_DB = -30.0


@runtime_checkable
class SpectrumSource(Protocol):
    """Anything that can hand out the current byte spectrum."""

    def snapshot(self) -> np.ndarray:
        ...


def compute_byte_spectrogram(
    y: np.ndarray,
    sr: int,
    frame_rate: float = 60.0,
    smoothing: float = SMOOTHING,
) -> tuple[np.ndarray, float]:
    """
    Compute analyser-style byte spectra for a whole signal.

    Args:
        y: Mono audio time series.
        sr: Sample rate.
        frame_rate: Snapshots per second to produce.
        smoothing: Time constant of the inter-frame smoothing (0..1).

    Returns:
        Tuple of (uint8 array shaped (n_frames, BIN_COUNT), actual frame rate).
    """
    hop_length = max(1, int(sr / frame_rate))
    actual_rate = sr / hop_length

    if len(y) == 0:
        return np.zeros((0, BIN_COUNT), dtype=np.uint8), actual_rate

    stft = librosa.stft(
        y.astype(np.float32),
        n_fft=FFT_SIZE,
        hop_length=hop_length,
        window="blackman",
        center=True,
    )
    magnitude = np.abs(stft[:BIN_COUNT]) / FFT_SIZE

    # One-pole smoothing along time, as the analyser applies between reads
    smoothed = scipy_signal.lfilter([1.0 - smoothing], [1.0, -smoothing], magnitude, axis=1)

    with np.errstate(divide="ignore"):
        db = 20.0 * np.log10(smoothed)
    scaled = (db - MIN_DB) * (255.0 / (MAX_DB - MIN_DB))
    scaled = np.nan_to_num(scaled, nan=0.0, neginf=0.0)
    bytes_ = np.clip(np.floor(scaled), 0, 255).astype(np.uint8)

    return np.ascontiguousarray(bytes_.T), actual_rate


class SpectrogramSource:
    """
    Serves rows of a precomputed spectrogram at the playback position.

    Args:
        spectrogram: (n_frames, bins) uint8 array.
        frame_rate: Rows per second.
        clock: Returns the current playback position in seconds.
    """

    def __init__(
        self,
        spectrogram: np.ndarray,
        frame_rate: float,
        clock: Callable[[], float],
    ):
        self.spectrogram = spectrogram
        self.frame_rate = frame_rate
        self.clock = clock
        self._silence = np.zeros(spectrogram.shape[1] if spectrogram.ndim == 2 else BIN_COUNT, dtype=np.uint8)

    def __len__(self) -> int:
        return len(self.spectrogram)

    def snapshot(self) -> np.ndarray:
        if len(self.spectrogram) == 0:
            return self._silence
        index = int(self.clock() * self.frame_rate)
        if index < 0 or index >= len(self.spectrogram):
            return self._silence
        return self.spectrogram[index]


@dataclass
class SpectrumAnalysis:
    """Precomputed spectra for one audio file."""

    spectrogram: np.ndarray
    frame_rate: float
    sample_rate: int
    duration: float

    @property
    def n_frames(self) -> int:
        return len(self.spectrogram)

    def source(self, clock: Callable[[], float]) -> SpectrogramSource:
        return SpectrogramSource(self.spectrogram, self.frame_rate, clock)
