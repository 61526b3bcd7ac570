"""
Playback transports.

A transport starts and pauses the track and reports the playback position
that drives spectrum lookup. Starting may fail (device busy, unsupported
file); transports signal that with PlaybackError.
"""

from typing import Protocol, runtime_checkable

import pygame

from tilebloom.errors import PlaybackError


@runtime_checkable
class PlaybackTransport(Protocol):
    @property
    def paused(self) -> bool:
        ...

    def play(self) -> None:
        ...

    def pause(self) -> None:
        ...

    def position(self) -> float:
        ...


class MixerTransport:
    """pygame.mixer.music playback of a single track."""

    def __init__(self, audio_path):
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
            pygame.mixer.music.load(str(audio_path))
        except pygame.error as e:
            raise PlaybackError(f"Cannot open audio {audio_path}: {e}") from e
        self._started = False
        self._paused = True

    @property
    def paused(self) -> bool:
        if self._paused:
            return True
        # Track ran to the end
        return not pygame.mixer.music.get_busy()

    def play(self):
        try:
            if self._started and self._paused:
                pygame.mixer.music.unpause()
            else:
                pygame.mixer.music.play()
                self._started = True
        except pygame.error as e:
            raise PlaybackError(str(e)) from e
        self._paused = False

    def pause(self):
        pygame.mixer.music.pause()
        self._paused = True

    def position(self) -> float:
        return max(0, pygame.mixer.music.get_pos()) / 1000.0


class OfflineTransport:
    """Headless transport whose clock is advanced by the caller."""

    def __init__(self, duration: float | None = None):
        self.duration = duration
        self._paused = True
        self._position = 0.0

    @property
    def paused(self) -> bool:
        if self.duration is not None and self._position >= self.duration:
            return True
        return self._paused

    def play(self):
        self._paused = False

    def pause(self):
        self._paused = True

    def seek(self, seconds: float):
        self._position = seconds

    def position(self) -> float:
        return self._position
