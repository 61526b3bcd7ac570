"""
Drawing surfaces for the tile grid.

The render loop only ever clears a surface and fills single tiles at grid
coordinates. The grid is laid out with a fixed tile size and centred in
the viewport.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np
import pygame
from PIL import Image

from tilebloom.core.palette import pack_hex, unpack


@dataclass(frozen=True)
class GridLayout:
    """Tile grid geometry within a pixel viewport."""

    cols: int
    rows: int
    ox: int  # Pixel origin of tile (0, 0)
    oy: int
    tile: int

    @classmethod
    def fit(cls, width: int, height: int, tile: int) -> "GridLayout":
        cols = width // tile
        rows = height // tile
        return cls(
            cols=cols,
            rows=rows,
            ox=(width - cols * tile) // 2,
            oy=(height - rows * tile) // 2,
            tile=tile,
        )

    def tile_rect(self, gx: int, gy: int) -> tuple[int, int, int, int]:
        """(x, y, w, h) pixel rectangle of one tile."""
        return (self.ox + gx * self.tile, self.oy + gy * self.tile, self.tile, self.tile)


@runtime_checkable
class Surface(Protocol):
    layout: GridLayout

    def clear(self) -> None:
        ...

    def fill_tile(self, gx: int, gy: int, packed: int) -> None:
        ...

    def resize(self, width: int, height: int) -> None:
        ...


class ArraySurface:
    """
    In-memory RGB frame, (H, W, 3) uint8.

    Used for offline video rendering, still images and tests.
    """

    def __init__(self, width: int, height: int, tile: int, background: str = "#000000"):
        self.tile = tile
        self.background = unpack(pack_hex(background))
        self.resize(width, height)

    def resize(self, width: int, height: int):
        self.width = width
        self.height = height
        self.layout = GridLayout.fit(width, height, self.tile)
        self.frame = np.empty((height, width, 3), dtype=np.uint8)
        self.clear()

    def clear(self):
        self.frame[:, :] = self.background

    def fill_tile(self, gx: int, gy: int, packed: int):
        x, y, w, h = self.layout.tile_rect(gx, gy)
        self.frame[y:y + h, x:x + w] = unpack(packed)

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.frame, mode="RGB")


class PygameSurface:
    """Draws onto a pygame display surface."""

    def __init__(self, screen: pygame.Surface, tile: int, background: str):
        self.screen = screen
        self.tile = tile
        self.background = unpack(pack_hex(background))
        self.layout = GridLayout.fit(screen.get_width(), screen.get_height(), tile)

    def resize(self, width: int, height: int):
        # pygame 2 resizes the display surface in place; pick up the new one
        self.screen = pygame.display.get_surface() or self.screen
        self.layout = GridLayout.fit(width, height, self.tile)

    def clear(self):
        self.screen.fill(self.background)

    def fill_tile(self, gx: int, gy: int, packed: int):
        self.screen.fill(unpack(packed), pygame.Rect(*self.layout.tile_rect(gx, gy)))
