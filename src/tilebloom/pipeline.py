"""
Audio-file-to-spectrum pipeline.

Loads a track, computes its analyser-style byte spectrogram and caches the
result so repeat sessions on the same file start instantly.
"""

import hashlib
import json
import logging
import os
import shutil
from pathlib import Path
from typing import Union

import librosa
import numpy as np

from tilebloom.audio.spectrum import FFT_SIZE, SMOOTHING, SpectrumAnalysis, compute_byte_spectrogram

logger = logging.getLogger(__name__)


class SpectrumPipeline:
    """
    Complete audio-to-spectrogram processing with an on-disk cache.
    """

    # Increment whenever the spectrum computation changes so cached
    # spectrograms are invalidated and regenerated.
    ANALYSIS_VERSION = "1.0"

    def __init__(
        self,
        frame_rate: float = 60.0,
        sample_rate: int = 44100,
        smoothing: float = SMOOTHING,
        cache_dir: Union[str, Path, None] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            frame_rate: Spectrum snapshots per second.
            sample_rate: Load rate; 44.1 kHz keeps analyser bin widths.
            smoothing: Analyser smoothing time constant.
            cache_dir: Override for the cache location.
        """
        self.frame_rate = frame_rate or 60.0
        self.sample_rate = sample_rate
        self.smoothing = smoothing
        self._cache_dir = Path(cache_dir) if cache_dir is not None else None

    def _get_cache_dir(self) -> Path:
        """Return the directory for cached spectrograms."""
        # Defaults to ~/.cache/tilebloom/spectra
        cache_dir = self._cache_dir or Path.home() / ".cache" / "tilebloom" / "spectra"
        cache_dir.mkdir(parents=True, exist_ok=True)
        return cache_dir

    def _calculate_file_hash(self, file_path: Path) -> str:
        """Calculate SHA256 hash of the file."""
        sha256_hash = hashlib.sha256()
        with open(file_path, "rb") as f:
            for byte_block in iter(lambda: f.read(4096), b""):
                sha256_hash.update(byte_block)
        return sha256_hash.hexdigest()

    def _get_config_hash(self) -> str:
        config = {
            "version": self.ANALYSIS_VERSION,
            "frame_rate": self.frame_rate,
            "sr": self.sample_rate,
            "smoothing": self.smoothing,
            "fft": FFT_SIZE,
        }
        return hashlib.md5(json.dumps(config, sort_keys=True).encode("utf-8")).hexdigest()

    def _get_cache_path(self, audio_path: Path) -> Path:
        file_hash = self._calculate_file_hash(audio_path)
        config_hash = self._get_config_hash()
        return self._get_cache_dir() / f"spectrum_{file_hash}_{config_hash}.npz"

    def clear_cache(self):
        """Clear the spectrogram cache."""
        cache_dir = self._get_cache_dir()
        if cache_dir.exists():
            shutil.rmtree(cache_dir)
            cache_dir.mkdir(parents=True, exist_ok=True)

    def analyze_signal(self, y: np.ndarray, sr: int) -> SpectrumAnalysis:
        """Compute spectra for an in-memory signal."""
        spectrogram, rate = compute_byte_spectrogram(
            y, sr, frame_rate=self.frame_rate, smoothing=self.smoothing,
        )
        return SpectrumAnalysis(
            spectrogram=spectrogram,
            frame_rate=rate,
            sample_rate=sr,
            duration=len(y) / float(sr),
        )

    def process(self, audio_path: Union[str, Path], use_cache: bool = True) -> SpectrumAnalysis:
        """
        Load and analyze an audio file.

        Args:
            audio_path: Path to input audio file (wav, mp3, flac).
            use_cache: Whether to read and write the spectrogram cache.

        Returns:
            SpectrumAnalysis for the whole track.
        """
        audio_path = Path(audio_path)

        if use_cache:
            try:
                cache_path = self._get_cache_path(audio_path)
                if cache_path.exists():
                    with np.load(cache_path) as data:
                        analysis = SpectrumAnalysis(
                            spectrogram=data["spectrogram"],
                            frame_rate=float(data["frame_rate"]),
                            sample_rate=int(data["sample_rate"]),
                            duration=float(data["duration"]),
                        )
                    logger.info("Loaded spectrum from cache: %s", cache_path)
                    return analysis
            except Exception as e:
                logger.warning("Failed to load cache: %s. Re-analyzing.", e)

        y, sr = librosa.load(audio_path, sr=self.sample_rate, mono=True)
        analysis = self.analyze_signal(y, sr)

        if use_cache:
            try:
                cache_path = self._get_cache_path(audio_path)
                # Write aside and rename so an interrupted run never leaves a partial cache
                tmp_path = cache_path.with_name(cache_path.name + ".tmp")
                with open(tmp_path, "wb") as f:
                    np.savez_compressed(
                        f,
                        spectrogram=analysis.spectrogram,
                        frame_rate=analysis.frame_rate,
                        sample_rate=analysis.sample_rate,
                        duration=analysis.duration,
                    )
                os.replace(tmp_path, cache_path)
            except OSError as e:
                logger.warning("Failed to save cache: %s", e)

        return analysis
