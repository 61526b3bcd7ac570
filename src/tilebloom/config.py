"""
Configuration for the Tilebloom engine.

Layout, colors and audio tuning live here as dataclasses. Two tuning
presets exist: "hybrid" (bloom phase, then beat-driven pattern swaps once
the track is full) and "simple" (bloom only, every onset swaps pattern).
"""

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

from tilebloom.core.palette import Palette, is_hex_color
from tilebloom.errors import ConfigError

VARIANTS = ("hybrid", "simple")


@dataclass(frozen=True)
class FullnessTuning:
    """Band layout and smoothing for the fullness signal."""

    low_band: tuple[int, int] = (0, 24)
    mid_band: tuple[int, int] = (25, 110)
    high_band: tuple[int, int] = (111, 260)
    drum_band: tuple[int, int] = (25, 90)
    low_weight: float = 0.50
    mid_weight: float = 0.35
    high_weight: float = 0.15
    ema_alpha: float = 0.10
    max_decay: float = 0.995
    max_floor: float = 0.06
    max_initial: float = 0.08
    beat_low_weight: float = 0.72
    beat_mid_weight: float = 0.28


@dataclass(frozen=True)
class BeatModeTuning:
    """Hysteresis thresholds for switching between bloom and beat regimes."""

    enabled: bool = True
    on_threshold: float = 0.78
    off_threshold: float = 0.55
    on_ms: float = 1200.0
    off_ms: float = 900.0


@dataclass(frozen=True)
class OnsetTuning:
    """Adaptive z-score onset detector settings."""

    cooldown_ms: float = 240.0
    alpha: float = 0.12
    k: float = 1.10
    bias: float = 3.2
    min_delta: float = 7.0


@dataclass(frozen=True)
class BloomTuning:
    """Bloom radius targets as fractions of the maximum grid radius."""

    min_fraction: float = 0.12
    max_fraction: float = 1.02
    beat_base: float = 0.94
    beat_breath: float = 0.08
    start_fraction: float = 0.10
    damping: float = 0.08


@dataclass(frozen=True)
class AudioTuning:
    fullness: FullnessTuning = field(default_factory=FullnessTuning)
    beat_mode: BeatModeTuning = field(default_factory=BeatModeTuning)
    onset: OnsetTuning = field(default_factory=OnsetTuning)
    bloom: BloomTuning = field(default_factory=BloomTuning)


HYBRID = AudioTuning()

SIMPLE = AudioTuning(
    beat_mode=BeatModeTuning(enabled=False),
    onset=OnsetTuning(cooldown_ms=180.0, k=1.15, bias=0.0, min_delta=0.0),
)


def tuning_for_variant(variant: str) -> AudioTuning:
    if variant == "hybrid":
        return HYBRID
    if variant == "simple":
        return SIMPLE
    raise ConfigError(f"Unknown variant {variant!r}; expected one of {VARIANTS}")


# camelCase keys accepted in JSON config files
_ALIASES = {
    "tileBase": "tile_base",
    "gridScale": "grid_scale",
    "bgColor": "bg_color",
    "creamColor": "cream_color",
    "haldiColor": "haldi_color",
    "blackColor": "black_color",
}


@dataclass
class MosaicConfig:
    """Universal configuration for a mosaic session."""

    width: int = 1280
    height: int = 720
    fps: int = 60

    # Layout
    tile_base: int = 20
    grid_scale: float = 0.8

    # Colors
    bg_color: str = "#6b0f1a"
    cream_color: str = "#f3e7d3"
    haldi_color: str = "#f2b705"
    black_color: str = "#140f12"

    # Behaviour
    variant: str = "hybrid"  # "hybrid", "simple"
    seed: Optional[int] = None  # None picks a fresh seed per session

    @property
    def tile(self) -> int:
        """Tile edge length in pixels."""
        return max(10, round(self.tile_base * self.grid_scale))

    @property
    def palette(self) -> Palette:
        return Palette(
            background=self.bg_color,
            cream=self.cream_color,
            haldi=self.haldi_color,
            black=self.black_color,
        )

    @property
    def tuning(self) -> AudioTuning:
        return tuning_for_variant(self.variant)

    def validate(self) -> "MosaicConfig":
        """
        Fail fast on anything that would produce a blank or broken frame.

        Raises:
            ConfigError: On a bad color, variant, dimension, scale or seed.
        """
        for name in ("bg_color", "cream_color", "haldi_color", "black_color"):
            value = getattr(self, name)
            if not is_hex_color(value):
                raise ConfigError(f"{name} is not a hex color: {value!r}")
        if self.variant not in VARIANTS:
            raise ConfigError(f"Unknown variant {self.variant!r}; expected one of {VARIANTS}")
        for name in ("width", "height", "fps", "tile_base"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        scale = self.grid_scale
        if isinstance(scale, bool) or not isinstance(scale, (int, float)) or not 0 < scale < float("inf"):
            raise ConfigError(f"grid_scale must be a positive number, got {scale!r}")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise ConfigError(f"seed must be an integer or null, got {self.seed!r}")
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MosaicConfig":
        """Build from a dict, accepting camelCase keys and ignoring unknown ones."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            key = _ALIASES.get(key, key)
            if key in known:
                kwargs[key] = value
        return cls(**kwargs).validate()

    def with_overrides(self, **overrides) -> "MosaicConfig":
        """Copy with non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes).validate()


def load_config(path: Union[str, Path]) -> MosaicConfig:
    """
    Load a JSON config file.

    Raises:
        ConfigError: If the file is not valid JSON or holds invalid values.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must hold a JSON object")
    return MosaicConfig.from_dict(data)
