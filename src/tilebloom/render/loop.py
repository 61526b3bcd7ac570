"""
Per-frame orchestration.

Each frame: clear, analyze audio (when playing), update the regime and
bloom target, ease the bloom radius, then paint every grid cell inside it.
Audio analysis always completes before the radius update and paint pass.
"""

import logging
from dataclasses import dataclass

import numpy as np

from tilebloom.audio.analyzer import AudioAnalyzer, AudioFrame
from tilebloom.audio.beat_mode import BeatModeController, VisualMode
from tilebloom.audio.onset import OnsetDetector
from tilebloom.audio.spectrum import SpectrumSource
from tilebloom.audio.transport import PlaybackTransport
from tilebloom.config import AudioTuning, MosaicConfig
from tilebloom.core.grid import GridBuffer, build_pattern, grid_center, max_radius
from tilebloom.core.params import PatternParams, generate_params, next_seed, random_seed
from tilebloom.errors import ConfigError, PlaybackError
from tilebloom.render.surface import Surface

logger = logging.getLogger(__name__)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


@dataclass
class FrameStats:
    """What happened during one frame."""

    audio: AudioFrame | None = None
    mode: VisualMode = VisualMode.BLOOM
    onset: bool = False
    tiles_drawn: int = 0


class AudioState:
    """
    All mutable audio-reactive state for one session.

    Reset whenever playback (re)starts from paused.
    """

    def __init__(self, tuning: AudioTuning):
        self.tuning = tuning
        self.analyzer = AudioAnalyzer(tuning.fullness)
        self.controller = BeatModeController(tuning.beat_mode)
        self.detector = OnsetDetector(tuning.onset)
        self.bloom_r = 0.0
        self.bloom_target = 0.0

    def reset(self, start_radius: float = 0.0):
        self.analyzer.reset()
        self.controller.reset()
        self.detector.reset()
        self.bloom_r = start_radius
        self.bloom_target = start_radius


class RenderLoop:
    """
    Drives pattern generation, audio reaction and painting.

    Args:
        config: Session configuration; validated here.
        surface: Where tiles are painted.
        spectrum: Source of byte frequency snapshots.
        transport: Playback control.

    Raises:
        ConfigError: If the config is invalid or a collaborator is missing.
    """

    def __init__(
        self,
        config: MosaicConfig,
        surface: Surface,
        spectrum: SpectrumSource,
        transport: PlaybackTransport,
    ):
        config.validate()
        if not isinstance(spectrum, SpectrumSource):
            raise ConfigError(f"Spectrum source must provide snapshot(), got {type(spectrum).__name__}")
        if not isinstance(transport, PlaybackTransport):
            raise ConfigError(f"Transport must provide play/pause/paused, got {type(transport).__name__}")

        self.config = config
        self.palette = config.palette
        self.tuning = config.tuning
        self.surface = surface
        self.spectrum = spectrum
        self.transport = transport

        self.seed = config.seed if config.seed is not None else random_seed()
        self.params: PatternParams = generate_params(self.seed)
        self.grid: GridBuffer = GridBuffer(0, 0)
        self.audio = AudioState(self.tuning)
        self.started = False
        self.hidden = False

        self.rebuild()

    # ----- pattern -----

    def rebuild(self):
        """Regenerate params and replace the grid for the current layout."""
        layout = self.surface.layout
        params = generate_params(self.seed)
        grid = build_pattern(params, layout.cols, layout.rows, self.palette)
        # Swap only once fully built so painting never sees a partial grid
        self.params, self.grid = params, grid

    def new_pattern(self):
        self.seed = next_seed(self.seed)
        self.rebuild()
        logger.debug("New pattern: seed=%d mode=%s", self.seed, self.params.mode)

    def resize(self, width: int, height: int):
        self.surface.resize(width, height)
        self.rebuild()

    @property
    def max_radius(self) -> float:
        return max_radius(self.grid.cols, self.grid.rows)

    # ----- playback -----

    @property
    def playing(self) -> bool:
        return self.started and not self.transport.paused

    def toggle_play(self) -> bool:
        """
        Start playback if paused, otherwise pause.

        A refused start is logged and leaves the loop paused.

        Returns:
            True if playback is running afterwards.
        """
        if not self.transport.paused:
            self.transport.pause()
            return False

        try:
            self.transport.play()
        except PlaybackError as e:
            logger.warning("Audio play blocked: %s", e)
            return False

        self.started = True
        self.audio.reset(self.tuning.bloom.start_fraction * self.max_radius)
        return True

    def suspend(self):
        """Window hidden: frames stop until resume()."""
        self.hidden = True

    def resume(self):
        self.hidden = False

    # ----- per frame -----

    def update_audio(self, now_ms: float, stats: FrameStats):
        state = self.audio
        bloom = self.tuning.bloom
        max_r = self.max_radius

        frame = state.analyzer.analyze(self.spectrum.snapshot())
        mode = state.controller.update(frame.fullness, now_ms)
        stats.audio = frame
        stats.mode = mode

        if mode is VisualMode.BLOOM:
            state.bloom_target = _lerp(bloom.min_fraction * max_r, bloom.max_fraction * max_r, frame.fullness)
            # Without beat mode every onset swaps the pattern
            if not self.tuning.beat_mode.enabled:
                stats.onset = state.detector.update(frame.beat_energy, now_ms)
        else:
            state.bloom_target = max_r * (bloom.beat_base + bloom.beat_breath * frame.fullness)
            stats.onset = state.detector.update(frame.beat_energy, now_ms)

        if stats.onset:
            self.new_pattern()

    def visible_cells(self, radius: float) -> tuple[np.ndarray, np.ndarray]:
        """(ys, xs) of painted cells within radius of the grid centre."""
        grid = self.grid
        cx, cy = grid_center(grid.cols, grid.rows)
        ys, xs = np.nonzero(grid.painted())
        inside = (xs - cx) ** 2 + (ys - cy) ** 2 <= radius * radius
        return ys[inside], xs[inside]

    def frame(self, now_ms: float) -> FrameStats:
        """Advance and paint one frame."""
        stats = FrameStats()
        if self.hidden:
            return stats

        self.surface.clear()
        if self.grid.cols == 0 or self.grid.rows == 0:
            return stats

        if self.playing:
            self.update_audio(now_ms, stats)
        else:
            stats.mode = self.audio.controller.mode

        state = self.audio
        state.bloom_r += self.tuning.bloom.damping * (state.bloom_target - state.bloom_r)

        ys, xs = self.visible_cells(state.bloom_r)
        cells = self.grid.cells
        for y, x in zip(ys.tolist(), xs.tolist()):
            self.surface.fill_tile(x, y, int(cells[y, x]))
        stats.tiles_drawn = len(xs)
        return stats
