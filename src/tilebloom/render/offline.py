"""
Headless rendering: whole tracks to frame sequences, seeds to stills.
"""

from typing import Callable, Iterator, Optional

import numpy as np
from PIL import Image

from tilebloom.audio.spectrum import SpectrumAnalysis
from tilebloom.audio.transport import OfflineTransport
from tilebloom.config import MosaicConfig
from tilebloom.render.loop import RenderLoop
from tilebloom.render.surface import ArraySurface


class _Silence:
    def snapshot(self) -> np.ndarray:
        return np.zeros(1024, dtype=np.uint8)


def build_offline_loop(config: MosaicConfig, analysis: Optional[SpectrumAnalysis] = None):
    """Wire a RenderLoop to an in-memory surface and an offline transport."""
    config.validate()
    surface = ArraySurface(config.width, config.height, config.tile, config.bg_color)
    transport = OfflineTransport(duration=analysis.duration if analysis else None)
    spectrum = analysis.source(transport.position) if analysis else _Silence()
    return RenderLoop(config, surface, spectrum, transport), surface, transport


def render_frames(
    config: MosaicConfig,
    analysis: SpectrumAnalysis,
    max_duration: Optional[float] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> Iterator[np.ndarray]:
    """
    Yield one RGB frame per video frame for the whole track.

    Playback starts on the first frame, exactly as a user pressing play.
    """
    loop, surface, transport = build_offline_loop(config, analysis)

    duration = analysis.duration
    if max_duration is not None:
        duration = min(duration, max_duration)
    total = int(duration * config.fps)

    loop.toggle_play()
    for i in range(total):
        t = i / config.fps
        transport.seek(t)
        loop.frame(t * 1000.0)
        if progress_callback:
            progress_callback(i + 1, total)
        yield surface.frame.copy()


def render_still(config: MosaicConfig) -> Image.Image:
    """Render the configured seed's pattern fully bloomed."""
    loop, surface, _ = build_offline_loop(config)
    full = loop.tuning.bloom.max_fraction * loop.max_radius
    loop.audio.bloom_r = full
    loop.audio.bloom_target = full
    loop.frame(0.0)
    return surface.to_image()
