"""Procedural pattern engine: hashing, parameters, fields and the grid."""

from tilebloom.core.hashing import hash01, hash2
from tilebloom.core.params import MODES, PatternParams, generate_params
from tilebloom.core.palette import EMPTY, Palette
from tilebloom.core.grid import GridBuffer, build_pattern

__all__ = [
    "hash01",
    "hash2",
    "MODES",
    "PatternParams",
    "generate_params",
    "EMPTY",
    "Palette",
    "GridBuffer",
    "build_pattern",
]
