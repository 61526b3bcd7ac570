"""
Grid buffer assembly with 8-fold symmetry.

Only the first octant (0 <= dy <= dx) is ever evaluated; every sample is
reflected into its seven mirror images around the grid centre.
"""

import math

import numpy as np

from tilebloom.core.field import edge_gate, field_value, is_edge, on_lattice, paint_density, polar
from tilebloom.core.hashing import hash01, hash2
from tilebloom.core.palette import COLOR_SALT, EMPTY, Palette
from tilebloom.core.params import PatternParams

# Non-edge paint beyond this fraction of the corner radius is dropped
RIM_FADE = 0.965


def grid_center(cols: int, rows: int) -> tuple[int, int]:
    return cols // 2, rows // 2


def max_radius(cols: int, rows: int) -> float:
    """Distance from the grid centre to the farthest corner cell."""
    cx, cy = grid_center(cols, rows)
    max_dx = max(cx, cols - 1 - cx)
    max_dy = max(cy, rows - 1 - cy)
    return math.sqrt(max_dx * max_dx + max_dy * max_dy) or 1.0


# (sign x, sign y, swap axes) for the 8 reflections/rotations of the square
SYMMETRIES = (
    (1, 1, False), (-1, 1, False), (1, -1, False), (-1, -1, False),
    (1, 1, True), (-1, 1, True), (1, -1, True), (-1, -1, True),
)


def _image(dx, dy, sx: int, sy: int, swap: bool):
    ax, ay = (dy, dx) if swap else (dx, dy)
    return sx * ax, sy * ay


def symmetric_offsets(dx: int, dy: int) -> list[tuple[int, int]]:
    """The distinct images of (dx, dy) under the 8 grid symmetries."""
    seen = []
    for sym in SYMMETRIES:
        pt = _image(dx, dy, *sym)
        if pt not in seen:
            seen.append(pt)
    return seen


class GridBuffer:
    """
    Packed colors for every visible tile, indexed [y, x].

    Cells hold a 24-bit RGB int or EMPTY.
    """

    def __init__(self, cols: int, rows: int):
        self.cols = cols
        self.rows = rows
        self.cells = np.full((rows, cols), EMPTY, dtype=np.uint32)

    @property
    def center(self) -> tuple[int, int]:
        return grid_center(self.cols, self.rows)

    def get(self, x: int, y: int) -> int:
        return int(self.cells[y, x])

    def stamp(self, dx, dy, packed):
        """
        Write first-octant samples into all symmetric cells.

        dx, dy and packed may be scalars or equal-length arrays. Each
        sample writes its distinct images from symmetric_offsets() once;
        images falling outside the grid are dropped.
        """
        cx, cy = self.center
        dx = np.atleast_1d(np.asarray(dx, dtype=np.int64))
        dy = np.atleast_1d(np.asarray(dy, dtype=np.int64))
        colors = np.broadcast_to(np.asarray(packed, dtype=np.uint32), dx.shape)

        earlier = []
        for sym in SYMMETRIES:
            ox, oy = _image(dx, dy, *sym)
            # Axis and diagonal samples collapse onto an earlier image
            fresh = np.ones(dx.shape, dtype=bool)
            for px, py in earlier:
                fresh &= (ox != px) | (oy != py)
            earlier.append((ox, oy))

            xs = cx + ox
            ys = cy + oy
            write = fresh & (xs >= 0) & (ys >= 0) & (xs < self.cols) & (ys < self.rows)
            self.cells[ys[write], xs[write]] = colors[write]

    def painted(self) -> np.ndarray:
        return self.cells != EMPTY

    def count(self, packed: int) -> int:
        return int(np.count_nonzero(self.cells == packed))


def stamp_palette_signature(grid: GridBuffer, params: PatternParams, palette: Palette):
    """
    Overlay one ring of each ink near the centre.

    Guarantees cream, haldi and black all appear regardless of what the
    field pass produced.
    """
    s = params.spacing
    a = 1 + hash2(101, 102, params.seed) % 2
    b = 1 + hash2(103, 104, params.seed) % 2

    dx_c, dy_c = max(2, s - 1), 0
    dx_h = max(2, s)
    dy_h = min(dx_h, a)
    dx_b = max(2, s + 1)
    dy_b = min(dx_b, b)

    grid.stamp(dx_c, dy_c, palette.cream_packed)
    grid.stamp(dx_h, dy_h, palette.haldi_packed)
    grid.stamp(dx_b, dy_b, palette.black_packed)


def build_pattern(params: PatternParams, cols: int, rows: int, palette: Palette) -> GridBuffer:
    """
    Assemble a complete grid for one pattern.

    Args:
        params: Pattern parameters.
        cols: Grid width in tiles.
        rows: Grid height in tiles.
        palette: Inks to paint with.

    Returns:
        A freshly built GridBuffer; never a mutated existing one.
    """
    grid = GridBuffer(cols, rows)
    if cols <= 0 or rows <= 0:
        return grid

    cx, cy = grid_center(cols, rows)
    max_dx = max(cx, cols - 1 - cx)
    max_dy = max(cy, rows - 1 - cy)
    max_r = max_radius(cols, rows)
    extent = max(max_dx, max_dy)

    # First octant: rows of the lower triangle give dx >= dy
    dx, dy = np.tril_indices(extent + 1)

    r, theta = polar(dx, dy)
    v = field_value(params.mode, dx, dy, r, theta, params)
    n = paint_density(v)
    edge = is_edge(v, params.edge_width)

    keep = on_lattice(dx, dy, params) | (edge & edge_gate(dx, dy, params))

    u = hash01(dx, dy, params.seed ^ COLOR_SALT)
    colors = palette.assign(edge, n, u, params.t_haldi, params.t_cream)
    keep &= colors != EMPTY

    # Rim fade: only stitch lines survive at the outer edge
    keep &= edge | (r / max_r <= RIM_FADE)

    grid.stamp(dx[keep], dy[keep], colors[keep])
    stamp_palette_signature(grid, params, palette)
    return grid
