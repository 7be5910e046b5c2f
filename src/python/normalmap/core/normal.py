"""Surface normal estimation from tile-scoped slopes.

Each slope is smoothed with its two neighbours across the perpendicular axis
using 1-2-1 weights. Neighbours beyond a clamped tile edge are dropped along
with their weight, so the divisor falls from 5 to 4 (or 3 for a tile one
pixel thick).
"""

import math
from typing import NamedTuple

import numpy as np

from normalmap.core.heightfield import HeightField, TileRect
from normalmap.core.slope import col_slope, col_slopes, row_slope, row_slopes


class NormalVector(NamedTuple):
    """Unit surface normal in tangent space, z always positive."""

    x: float
    y: float
    z: float


def estimate_normal(
    field: HeightField,
    x: int,
    y: int,
    scale: float,
    wrap: bool,
    tile: TileRect,
    legacy_row_guard: bool = False,
) -> NormalVector:
    """Estimate the unit normal at one pixel.

    Args:
        field: Height field to sample.
        x: Column in image coordinates, inside the tile.
        y: Row in image coordinates, inside the tile.
        scale: Effective height-to-slope scale for the conversion.
        wrap: Wrap-around edge policy.
        tile: Active tile.
        legacy_row_guard: See row_slope.

    Returns:
        NormalVector of unit length.
    """
    dh = row_slope(field, x, y, wrap, tile, legacy_row_guard) * 2
    div = 5.0
    if y == tile.y:
        if wrap:
            dh += row_slope(field, x, tile.bottom, wrap, tile, legacy_row_guard)
        else:
            div -= 1.0
    else:
        dh += row_slope(field, x, y - 1, wrap, tile, legacy_row_guard)
    if y == tile.bottom:
        if wrap:
            dh += row_slope(field, x, tile.y, wrap, tile, legacy_row_guard)
        else:
            div -= 1.0
    else:
        dh += row_slope(field, x, y + 1, wrap, tile, legacy_row_guard)
    nx = scale * dh / div

    dh = col_slope(field, x, y, wrap, tile) * 2
    div = 5.0
    if x == tile.x:
        if wrap:
            dh += col_slope(field, tile.right, y, wrap, tile)
        else:
            div -= 1.0
    else:
        dh += col_slope(field, x - 1, y, wrap, tile)
    if x == tile.right:
        if wrap:
            dh += col_slope(field, tile.x, y, wrap, tile)
        else:
            div -= 1.0
    else:
        dh += col_slope(field, x + 1, y, wrap, tile)
    ny = scale * dh / div

    length = math.sqrt(nx * nx + ny * ny + 1.0)
    return NormalVector(nx / length, ny / length, 1.0 / length)


def _smooth(slopes: np.ndarray, axis: int, wrap: bool) -> tuple[np.ndarray, np.ndarray]:
    """Weight slopes 1-2-1 along an axis, returning the sums and their divisors."""
    before = np.roll(slopes, 1, axis=axis)
    after = np.roll(slopes, -1, axis=axis)
    div = np.full(slopes.shape, 5.0)

    if not wrap:
        first = [slice(None)] * slopes.ndim
        last = [slice(None)] * slopes.ndim
        first[axis] = 0
        last[axis] = -1
        before[tuple(first)] = 0
        after[tuple(last)] = 0
        div[tuple(first)] -= 1.0
        div[tuple(last)] -= 1.0

    return slopes * 2 + before + after, div


def estimate_tile_normals(
    heights: np.ndarray,
    scale: float,
    wrap: bool,
    legacy_row_guard: bool = False,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Estimate unit normals for every pixel of a tile.

    Produces the same values as estimate_normal evaluated pixel by pixel.

    Args:
        heights: 2D array of tile intensities, shape (height, width).
        scale: Effective height-to-slope scale for the conversion.
        wrap: Wrap-around edge policy.
        legacy_row_guard: See row_slope.

    Returns:
        Tuple of float64 arrays (x, y, z), each shaped like heights.
    """
    dh, div = _smooth(row_slopes(heights, wrap, legacy_row_guard), axis=0, wrap=wrap)
    nx = scale * dh / div

    dh, div = _smooth(col_slopes(heights, wrap), axis=1, wrap=wrap)
    ny = scale * dh / div

    length = np.sqrt(nx * nx + ny * ny + 1.0)
    return nx / length, ny / length, 1.0 / length
