"""
Palette handling and ink assignment.

Colors travel through the engine as packed 24-bit ints (0xRRGGBB).
EMPTY sits outside that range so black remains a usable ink.
"""

import re
from dataclasses import dataclass

import numpy as np

from tilebloom.errors import ConfigError

EMPTY = 0xFFFFFFFF

# Probability of the accent ink inside each density band
CREAM_BAND_ACCENT = 0.18
HALDI_BAND_ACCENT = 0.65

COLOR_SALT = 0xBADC0DE

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def is_hex_color(value) -> bool:
    return isinstance(value, str) and bool(_HEX_RE.match(value))


def pack_hex(color: str) -> int:
    """'#abc' or '#aabbcc' -> 0xAABBCC."""
    if not is_hex_color(color):
        raise ConfigError(f"Not a hex color: {color!r}")
    digits = color[1:]
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return int(digits, 16)


def unpack(packed: int) -> tuple[int, int, int]:
    return ((packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF)


def to_hex(packed: int) -> str:
    return f"#{packed:06x}"


@dataclass(frozen=True)
class Palette:
    """Background plus the three inks every pattern must contain."""

    background: str = "#6b0f1a"
    cream: str = "#f3e7d3"  # Base light ink
    haldi: str = "#f2b705"  # Accent ink
    black: str = "#140f12"  # Stitch-line ink

    def __post_init__(self):
        for name in ("background", "cream", "haldi", "black"):
            value = getattr(self, name)
            if not is_hex_color(value):
                raise ConfigError(f"Palette color '{name}' is not a hex value: {value!r}")

    @property
    def background_packed(self) -> int:
        return pack_hex(self.background)

    @property
    def cream_packed(self) -> int:
        return pack_hex(self.cream)

    @property
    def haldi_packed(self) -> int:
        return pack_hex(self.haldi)

    @property
    def black_packed(self) -> int:
        return pack_hex(self.black)

    def inks(self) -> tuple[int, int, int]:
        return (self.cream_packed, self.haldi_packed, self.black_packed)

    def assign(self, edge, n, u, t_haldi: float, t_cream: float):
        """
        Map edge flag, paint density and per-cell salt to a packed ink.

        Edges always take the dark ink. Otherwise density above t_cream is
        mostly cream with a sparse accent, density above t_haldi is mostly
        accent, and anything lower is left unpainted.

        Returns:
            Packed color or EMPTY, with the broadcast shape of the inputs.
        """
        edge = np.asarray(edge, dtype=bool)
        n = np.asarray(n, dtype=np.float64)
        u = np.asarray(u, dtype=np.float64)

        cream_band = np.where(u < CREAM_BAND_ACCENT, self.haldi_packed, self.cream_packed)
        haldi_band = np.where(u < HALDI_BAND_ACCENT, self.haldi_packed, self.cream_packed)

        out = np.where(
            n >= t_cream,
            cream_band,
            np.where(n >= t_haldi, haldi_band, EMPTY),
        )
        out = np.where(edge, self.black_packed, out).astype(np.uint32)
        if out.ndim == 0:
            return int(out)
        return out
