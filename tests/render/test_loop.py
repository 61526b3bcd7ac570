"""Tests for the per-frame render loop."""

import logging

import numpy as np
import pytest

from tilebloom.audio.beat_mode import VisualMode
from tilebloom.config import MosaicConfig
from tilebloom.core.grid import build_pattern
from tilebloom.core.params import generate_params, next_seed
from tilebloom.errors import ConfigError
from tilebloom.render.loop import RenderLoop

FRAME_MS = 1000.0 / 60


@pytest.fixture
def loop(small_config, surface, spectrum, transport):
    return RenderLoop(small_config, surface, spectrum, transport)


def _run(loop, start_ms, frames):
    t = start_ms
    for _ in range(frames):
        loop.frame(t)
        t += FRAME_MS
    return t


class TestConstruction:
    def test_builds_initial_pattern(self, loop):
        assert loop.seed == 123456789
        assert loop.params == generate_params(123456789)
        assert (loop.grid.cols, loop.grid.rows) == (40, 30)
        assert loop.grid.painted().any()

    def test_random_seed_when_unset(self, surface, spectrum, transport):
        loop = RenderLoop(MosaicConfig(width=640, height=480), surface, spectrum, transport)
        assert 0 <= loop.seed < 2 ** 32

    def test_invalid_color_aborts(self, surface, spectrum, transport):
        with pytest.raises(ConfigError):
            RenderLoop(MosaicConfig(bg_color="maroon"), surface, spectrum, transport)

    def test_missing_spectrum_source(self, small_config, surface, transport):
        with pytest.raises(ConfigError, match="Spectrum"):
            RenderLoop(small_config, surface, None, transport)

    def test_wrong_transport_type(self, small_config, surface, spectrum):
        with pytest.raises(ConfigError, match="Transport"):
            RenderLoop(small_config, surface, spectrum, object())


class TestPlayback:
    def test_toggle_starts_and_pauses(self, loop, transport):
        assert loop.toggle_play() is True
        assert loop.playing
        assert loop.toggle_play() is False
        assert transport.paused
        assert not loop.playing

    def test_start_sets_small_bloom(self, loop):
        loop.toggle_play()
        assert loop.audio.bloom_r == pytest.approx(0.10 * loop.max_radius)
        assert loop.audio.bloom_target == loop.audio.bloom_r

    def test_restart_resets_audio_state(self, loop, spectrum):
        spectrum.set_level(220)
        loop.toggle_play()
        _run(loop, 0.0, 120)
        assert loop.audio.analyzer.fullness_ema > 0.5
        loop.toggle_play()
        loop.toggle_play()
        assert loop.audio.analyzer.fullness_ema == 0.0
        assert loop.audio.controller.mode is VisualMode.BLOOM

    def test_blocked_play_is_recoverable(self, small_config, surface, spectrum, blocked_transport, caplog):
        loop = RenderLoop(small_config, surface, spectrum, blocked_transport)
        with caplog.at_level(logging.WARNING, logger="tilebloom.render.loop"):
            assert loop.toggle_play() is False
        assert "blocked" in caplog.text
        assert not loop.started
        assert not loop.playing

        blocked_transport.blocked = False
        assert loop.toggle_play() is True
        assert blocked_transport.play_calls == 2


class TestFrame:
    def test_paused_frame_skips_audio(self, loop, spectrum):
        spectrum.set_level(200)
        stats = loop.frame(0.0)
        assert stats.audio is None
        assert stats.onset is False
        assert loop.audio.analyzer.fullness_ema == 0.0
        assert stats.tiles_drawn <= 1

    def test_bloom_grows_with_fullness(self, loop, spectrum):
        spectrum.set_level(200)
        loop.toggle_play()
        r0 = loop.audio.bloom_r
        _run(loop, 0.0, 60)
        assert loop.audio.bloom_r > r0
        assert loop.audio.bloom_target <= 1.02 * loop.max_radius + 1e-9

    def test_bloom_eases(self, loop):
        loop.audio.bloom_r = 0.0
        loop.audio.bloom_target = 10.0
        loop.frame(0.0)
        assert loop.audio.bloom_r == pytest.approx(0.8)

    def test_paints_only_inside_radius(self, loop, surface):
        loop.audio.bloom_r = loop.audio.bloom_target = 8.0
        stats = loop.frame(0.0)
        ys, xs = loop.visible_cells(8.0)
        assert stats.tiles_drawn == len(xs)
        cx, cy = loop.grid.center
        assert np.all((xs - cx) ** 2 + (ys - cy) ** 2 <= 64)

    def test_full_radius_paints_whole_grid(self, loop, surface):
        full = 1.02 * loop.max_radius
        loop.audio.bloom_r = loop.audio.bloom_target = full
        stats = loop.frame(0.0)
        assert stats.tiles_drawn == int(loop.grid.painted().sum())

    def test_painted_pixels_match_grid(self, loop, surface):
        full = 1.02 * loop.max_radius
        loop.audio.bloom_r = loop.audio.bloom_target = full
        loop.frame(0.0)
        layout = surface.layout
        cy, cx = np.argwhere(loop.grid.painted())[0]
        x, y, _, _ = layout.tile_rect(int(cx), int(cy))
        packed = loop.grid.get(int(cx), int(cy))
        assert tuple(surface.frame[y, x]) == ((packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF)

    def test_cells_outside_radius_kept_in_grid(self, loop):
        before = loop.grid.cells.copy()
        loop.audio.bloom_r = loop.audio.bloom_target = 2.0
        loop.frame(0.0)
        assert np.array_equal(loop.grid.cells, before)

    def test_hidden_frames_skip(self, loop, surface):
        loop.suspend()
        surface.frame[:] = 7
        loop.frame(0.0)
        assert np.all(surface.frame == 7)
        loop.resume()
        loop.frame(0.0)
        assert not np.all(surface.frame == 7)


class TestPatternChanges:
    def test_new_pattern_advances_seed(self, loop):
        loop.new_pattern()
        assert loop.seed == next_seed(123456789)
        expected = build_pattern(generate_params(loop.seed), 40, 30, loop.palette)
        assert np.array_equal(loop.grid.cells, expected.cells)

    def test_new_pattern_replaces_buffer(self, loop):
        old = loop.grid
        loop.new_pattern()
        assert loop.grid is not old

    def test_resize_rebuilds(self, loop, surface):
        loop.resize(800, 600)
        assert (loop.grid.cols, loop.grid.rows) == (50, 37)
        assert surface.frame.shape == (600, 800, 3)
        assert loop.seed == 123456789

    def test_beat_mode_onsets_swap_patterns(self, loop, spectrum):
        spectrum.set_level(230)
        loop.toggle_play()
        t = _run(loop, 0.0, 120)
        assert loop.audio.controller.mode is VisualMode.BEAT
        # Bloom target hugs full screen in beat mode
        assert loop.audio.bloom_target >= 0.94 * loop.max_radius

        seed_before = loop.seed
        pulses = 0
        for i in range(120):
            spectrum.set_level(250 if i % 20 == 0 else 150)
            stats = loop.frame(t)
            pulses += stats.onset
            t += FRAME_MS
        assert pulses >= 2
        assert loop.seed != seed_before

    def test_bloom_mode_ignores_onsets_in_hybrid(self, loop, spectrum):
        loop.toggle_play()
        t = 0.0
        seed_before = loop.seed
        for i in range(90):
            spectrum.set_level(200 if i % 20 == 0 else 20)
            stats = loop.frame(t)
            assert not stats.onset
            t += FRAME_MS
        assert loop.seed == seed_before

    def test_simple_variant_onsets_in_bloom(self, surface, spectrum, transport):
        config = MosaicConfig(width=640, height=480, seed=5, variant="simple")
        loop = RenderLoop(config, surface, spectrum, transport)
        loop.toggle_play()
        t = 0.0
        pulses = 0
        for i in range(120):
            spectrum.set_level(220 if i % 20 == 0 else 20)
            stats = loop.frame(t)
            assert stats.mode is VisualMode.BLOOM
            pulses += stats.onset
            t += FRAME_MS
        assert pulses >= 2
        assert loop.seed != 5
