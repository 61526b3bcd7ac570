"""
Exception types raised by the Tilebloom engine.
"""


class ConfigError(ValueError):
    """Invalid startup configuration (colors, dimensions, collaborators)."""


class PlaybackError(RuntimeError):
    """The playback transport refused to start."""


class EncodeError(RuntimeError):
    """ffmpeg is missing or failed to produce the video."""
