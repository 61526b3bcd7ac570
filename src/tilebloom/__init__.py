"""Audio-reactive, 8-fold symmetric tile mosaics."""

from tilebloom.config import MosaicConfig, load_config
from tilebloom.core.grid import GridBuffer, build_pattern
from tilebloom.core.params import PatternParams, generate_params
from tilebloom.errors import ConfigError, EncodeError, PlaybackError

__version__ = "0.1.0"
__all__ = [
    "MosaicConfig",
    "load_config",
    "GridBuffer",
    "build_pattern",
    "PatternParams",
    "generate_params",
    "ConfigError",
    "EncodeError",
    "PlaybackError",
]
