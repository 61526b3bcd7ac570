"""
Field evaluation and lattice masking.

All functions accept scalars or numpy arrays of grid offsets from the
pattern centre and broadcast elementwise, so a whole octant can be
evaluated in one pass.
"""

import numpy as np

from tilebloom.core.hashing import hash01
from tilebloom.core.params import PatternParams

# Keeps atan2 away from the dx == 0 singularity
ANGLE_EPSILON = 1e-6

DENSITY_GAIN = 0.95

# Salts keeping each hashed gate independent of the parameter draws
LATTICE_GATE_SALT = 0x13579BDF
EDGE_GATE_PERIOD = 3


def polar(dx, dy):
    """Return (r, theta) for offsets from centre."""
    dx = np.asarray(dx, dtype=np.float64)
    dy = np.asarray(dy, dtype=np.float64)
    r = np.sqrt(dx * dx + dy * dy)
    theta = np.arctan2(dy, dx + ANGLE_EPSILON)
    return r, theta


def field_value(mode: str, dx, dy, r, theta, p: PatternParams):
    """
    Evaluate the scalar field for one of the five closed-form modes.

    Raises:
        ValueError: If mode is not one of the known modes.
    """
    dx = np.asarray(dx, dtype=np.float64)
    dy = np.asarray(dy, dtype=np.float64)
    ph = p.phase

    if mode == "Rosette Dots":
        return np.sin(r * p.f1 + ph) + 0.95 * np.cos(theta * p.petals + ph * 0.7)
    if mode == "Diamond Dots":
        return (
            np.sin((dx + dy) * p.f1 + ph)
            + 0.55 * np.sin(dx * p.f2 + ph * 1.1)
            - 0.40 * np.cos(dy * p.f3 + ph * 0.9)
        )
    if mode == "Weave Dots":
        return (
            np.sin(dx * p.f1 + ph)
            + np.sin(dy * p.f2 + ph * 0.8)
            + 0.55 * np.sin((dx - dy) * p.f3 + ph * 1.2)
        )
    if mode == "Scallop Dots":
        return (
            np.cos(dx * p.f1 + ph) * np.cos(dy * p.f1 + ph)
            + 0.9 * np.sin(r * p.f3 + ph * 0.6)
        )
    if mode == "Petal Dots":
        return (
            np.cos((theta + p.twist * r) * p.petals + ph)
            + 0.85 * np.sin(r * p.f2 + ph * 0.4)
        )
    raise ValueError(f"Unknown field mode: {mode!r}")


def paint_density(v):
    """Squash a field value into [0, 1]."""
    return 0.5 + 0.5 * np.tanh(v * DENSITY_GAIN)


def is_edge(v, edge_width: float):
    """Stitch-line membership: field crosses a multiple of pi."""
    return np.abs(np.sin(v)) < edge_width


def lattice_a(dx, dy, p: PatternParams):
    return ((np.asarray(dx) + p.ox1) % p.spacing == 0) & ((np.asarray(dy) + p.oy1) % p.spacing == 0)


def lattice_b(dx, dy, p: PatternParams):
    return ((np.asarray(dx) + p.ox2) % p.spacing == 0) & ((np.asarray(dy) + p.oy2) % p.spacing == 0)


def on_lattice(dx, dy, p: PatternParams):
    """Primary lattice, or secondary lattice passing the hashed mix gate."""
    gate = hash01(dx, dy, p.seed ^ LATTICE_GATE_SALT) < p.lattice_mix
    return lattice_a(dx, dy, p) | (lattice_b(dx, dy, p) & gate)


def edge_gate(dx, dy, p: PatternParams):
    """Thin the stitch lines to every third diagonal."""
    return (np.asarray(dx) + np.asarray(dy) + (p.seed & 7)) % EDGE_GATE_PERIOD == 0
