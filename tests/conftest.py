"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from tilebloom.config import MosaicConfig
from tilebloom.errors import PlaybackError
from tilebloom.render.surface import ArraySurface

# Analysis rate used by the spectrum emulation
TEST_SR = 44100


class FakeSpectrum:
    """Spectrum source returning whatever array it was last given."""

    def __init__(self, level: int = 0, bins: int = 1024):
        self.current = np.full(bins, level, dtype=np.uint8)

    def set_level(self, level: int):
        self.current = np.full(len(self.current), level, dtype=np.uint8)

    def snapshot(self) -> np.ndarray:
        return self.current


class FakeTransport:
    """In-memory transport; optionally refuses to start."""

    def __init__(self, blocked: bool = False):
        self.blocked = blocked
        self._paused = True
        self.play_calls = 0

    @property
    def paused(self) -> bool:
        return self._paused

    def play(self):
        self.play_calls += 1
        if self.blocked:
            raise PlaybackError("autoplay blocked")
        self._paused = False

    def pause(self):
        self._paused = True

    def position(self) -> float:
        return 0.0


@pytest.fixture
def sample_rate() -> int:
    return TEST_SR


@pytest.fixture
def small_config() -> MosaicConfig:
    """40x30 tile grid (tile 16px) with a fixed seed."""
    return MosaicConfig(width=640, height=480, fps=60, seed=123456789)


@pytest.fixture
def surface(small_config) -> ArraySurface:
    return ArraySurface(
        small_config.width, small_config.height, small_config.tile, small_config.bg_color,
    )


@pytest.fixture
def spectrum() -> FakeSpectrum:
    return FakeSpectrum()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def pure_sine(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate a pure 440Hz sine wave (A4 note).

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    duration = 1.0
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    y = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    return y.astype(np.float32), sample_rate


@pytest.fixture
def click_track(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate a kick-like click track at 120 BPM.

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    duration = 2.0
    samples_per_beat = int(sample_rate * 60 / 120)
    total_samples = int(sample_rate * duration)

    y = np.zeros(total_samples, dtype=np.float32)
    click_duration = int(sample_rate * 0.05)
    t = np.arange(click_duration) / sample_rate
    # Decaying 60Hz thump
    click = 0.8 * np.sin(2 * np.pi * 60.0 * t) * np.exp(-t * 40.0)
    for beat_start in range(0, total_samples, samples_per_beat):
        end = min(beat_start + click_duration, total_samples)
        y[beat_start:end] = click[: end - beat_start]

    return y, sample_rate


@pytest.fixture
def temp_audio_file(tmp_path, click_track):
    """Create a temporary audio file for testing file I/O."""
    import soundfile as sf

    y, sr = click_track
    audio_path = tmp_path / "test_audio.wav"
    sf.write(audio_path, y, sr)
    return audio_path


@pytest.fixture
def blocked_transport() -> FakeTransport:
    return FakeTransport(blocked=True)
