"""
Pattern parameter generation.

A single 32-bit seed expands into the complete parameter set for one
mosaic. Each field draws from its own fixed hash coordinate pair so the
derived quantities are independent of one another.
"""

import math
import os
import time
from dataclasses import dataclass

from tilebloom.core.hashing import MASK32, hash01, hash2

MODES = (
    "Rosette Dots",
    "Diamond Dots",
    "Weave Dots",
    "Scallop Dots",
    "Petal Dots",
)

PETAL_CHOICES = (6, 8, 10, 12, 14, 16)
TWIST_CHOICES = (0.0, 0.16, 0.28, 0.42, 0.6)

# Golden-ratio increment between consecutive patterns
SEED_STEP = 0x9E3779B9


@dataclass(frozen=True)
class PatternParams:
    """Everything needed to rebuild one pattern."""

    seed: int
    mode: str
    f1: float
    f2: float
    f3: float
    phase: float
    petals: int
    twist: float
    spacing: int  # Period of both dot lattices, 4..7
    ox1: int
    oy1: int
    ox2: int
    oy2: int
    edge_width: float  # Half-width of the stitch-line band
    t_haldi: float
    t_cream: float
    lattice_mix: float  # Gate probability for the secondary lattice


def lerp(lo: float, hi: float, t: float) -> float:
    return lo + (hi - lo) * t


def pick(options, seed: int):
    """Choose one option deterministically from the seed."""
    return options[hash2(seed, seed ^ 0xA3, 0xC0FFEE) % len(options)]


def generate_params(seed: int) -> PatternParams:
    """
    Derive a full parameter set from a seed.

    Pure: the same seed always yields an identical PatternParams.

    Args:
        seed: Any integer; reduced to 32 bits.

    Returns:
        PatternParams satisfying t_cream > t_haldi, 4 <= spacing <= 7 and
        distinct lattice offsets on both axes.
    """
    seed = seed & MASK32
    mode = pick(MODES, seed)

    u1 = hash01(1, 2, seed)
    u2 = hash01(3, 4, seed)
    u3 = hash01(5, 6, seed)
    u4 = hash01(7, 8, seed)
    u5 = hash01(9, 10, seed)
    u6 = hash01(11, 12, seed)

    f1 = lerp(0.12, 0.44, u1)
    f2 = lerp(0.10, 0.62, u2)
    f3 = lerp(0.08, 0.38, u3)
    phase = u4 * math.pi * 2

    petals = PETAL_CHOICES[int(u5 * 6) % 6]
    twist = TWIST_CHOICES[int(u6 * 5) % 5]

    spacing = 4 + hash2(21, 22, seed) % 4
    ox1 = hash2(31, 32, seed) % spacing
    oy1 = hash2(41, 42, seed) % spacing

    ox2 = hash2(33, 34, seed) % spacing
    oy2 = hash2(43, 44, seed) % spacing
    if ox2 == ox1:
        ox2 = (ox2 + 1) % spacing
    if oy2 == oy1:
        oy2 = (oy2 + 1) % spacing

    edge_width = lerp(0.03, 0.07, hash01(51, 52, seed))
    t_haldi = lerp(0.82, 0.89, hash01(61, 62, seed))
    t_cream = lerp(0.89, 0.94, hash01(71, 72, seed))
    if t_cream <= t_haldi:
        # Ranges abut at 0.89; guard against rounding at the seam
        t_cream = math.nextafter(t_haldi, 1.0)
    lattice_mix = lerp(0.35, 0.70, hash01(81, 82, seed))

    return PatternParams(
        seed=seed,
        mode=mode,
        f1=f1,
        f2=f2,
        f3=f3,
        phase=phase,
        petals=petals,
        twist=twist,
        spacing=spacing,
        ox1=ox1,
        oy1=oy1,
        ox2=ox2,
        oy2=oy2,
        edge_width=edge_width,
        t_haldi=t_haldi,
        t_cream=t_cream,
        lattice_mix=lattice_mix,
    )


def next_seed(seed: int) -> int:
    """Seed for the pattern that follows this one."""
    return (seed + SEED_STEP) & MASK32


def random_seed() -> int:
    """Fresh session seed from the clock and OS entropy."""
    return (time.time_ns() ^ int.from_bytes(os.urandom(4), "little")) & MASK32
