"""
Interactive pygame window.

Space or a mouse press toggles playback, N swaps to a new pattern,
Esc or Q quits. While the window is minimized no frames are scheduled.
"""

import logging
from pathlib import Path

import pygame

from tilebloom.audio.spectrum import SpectrumAnalysis
from tilebloom.audio.transport import MixerTransport
from tilebloom.config import MosaicConfig
from tilebloom.render.loop import RenderLoop
from tilebloom.render.surface import PygameSurface

logger = logging.getLogger(__name__)


def run_player(config: MosaicConfig, audio_path: Path, analysis: SpectrumAnalysis):
    """Open the window and run until closed."""
    config.validate()
    pygame.init()
    try:
        screen = pygame.display.set_mode((config.width, config.height), pygame.RESIZABLE)
        pygame.display.set_caption(f"tilebloom - {audio_path.name}")

        transport = MixerTransport(audio_path)
        surface = PygameSurface(screen, config.tile, config.bg_color)
        loop = RenderLoop(config, surface, analysis.source(transport.position), transport)
        logger.info("Seed %d, mode %s", loop.seed, loop.params.mode)

        clock = pygame.time.Clock()
        running = True
        while running:
            if loop.hidden:
                # Block instead of ticking so no frames run while hidden
                events = [pygame.event.wait()]
            else:
                events = pygame.event.get()

            for event in events:
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key in (pygame.K_ESCAPE, pygame.K_q):
                        running = False
                    elif event.key == pygame.K_SPACE:
                        loop.toggle_play()
                    elif event.key == pygame.K_n:
                        loop.new_pattern()
                        logger.info("Seed %d, mode %s", loop.seed, loop.params.mode)
                elif event.type == pygame.MOUSEBUTTONDOWN:
                    loop.toggle_play()
                elif event.type == pygame.VIDEORESIZE:
                    loop.resize(event.w, event.h)
                elif event.type == pygame.WINDOWMINIMIZED:
                    loop.suspend()
                elif event.type in (pygame.WINDOWRESTORED, pygame.WINDOWSHOWN):
                    loop.resume()
                    # Skip the time spent hidden
                    clock.tick()

            if running and not loop.hidden:
                loop.frame(float(pygame.time.get_ticks()))
                pygame.display.flip()
                clock.tick(config.fps)
    finally:
        pygame.quit()
