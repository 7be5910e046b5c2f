"""Tile-scoped intensity slope estimation.

Slopes are central differences of neighbouring intensities. At a tile edge
the estimator either uses the single interior neighbour pair (clamped) or
takes the missing neighbour from the opposite edge of the same tile (wrap).
Neighbours outside the active tile never contribute, even when they lie
inside the image.

The scalar functions evaluate one pixel; row_slopes and col_slopes evaluate
a whole tile array with identical results.
"""

import numpy as np

from normalmap.core.heightfield import HeightField, TileRect


def pixel_diff(
    field: HeightField, x1: int, y1: int, x2: int, y2: int, tile: TileRect
) -> int:
    """Return sample(x2, y2) - sample(x1, y1), or 0 if either lies outside the tile."""
    if not tile.contains(x1, y1) or not tile.contains(x2, y2):
        return 0
    return field.sample(x2, y2) - field.sample(x1, y1)


def row_slope(
    field: HeightField,
    x: int,
    y: int,
    wrap: bool,
    tile: TileRect,
    legacy_row_guard: bool = False,
) -> int:
    """Horizontal slope at (x, y), positive when height falls to the right.

    Args:
        field: Height field to sample.
        x: Column in image coordinates, inside the tile.
        y: Row in image coordinates, inside the tile.
        wrap: Take the missing edge neighbour from the opposite tile edge.
        tile: Active tile.
        legacy_row_guard: Return 0 at tile column 1 rather than for
            single-column tiles.

    Returns:
        Intensity difference in the range -255..255.
    """
    w = tile.width
    column = x - tile.x

    if legacy_row_guard:
        if column == 1:
            return 0
    elif w == 1:
        return 0

    if column == 0:
        if wrap:
            return -pixel_diff(field, tile.x + 1, y, tile.right, y, tile)
        return -pixel_diff(field, tile.x, y, tile.x + 1, y, tile)
    if column == w - 1:
        if wrap:
            return -pixel_diff(field, tile.right - 1, y, tile.x, y, tile)
        return -pixel_diff(field, tile.right - 1, y, tile.right, y, tile)
    return -pixel_diff(field, x - 1, y, x + 1, y, tile)


def col_slope(field: HeightField, x: int, y: int, wrap: bool, tile: TileRect) -> int:
    """Vertical slope at (x, y), positive when height rises downwards.

    Single-row tiles have no vertical gradient and always return 0.
    """
    h = tile.height
    row = y - tile.y

    if h == 1:
        return 0

    if row == 0:
        if wrap:
            return pixel_diff(field, x, tile.y + 1, x, tile.bottom, tile)
        return pixel_diff(field, x, tile.y, x, tile.y + 1, tile)
    if row == h - 1:
        if wrap:
            return pixel_diff(field, x, tile.bottom - 1, x, tile.y, tile)
        return pixel_diff(field, x, tile.bottom - 1, x, tile.bottom, tile)
    return pixel_diff(field, x, y - 1, x, y + 1, tile)


def row_slopes(heights: np.ndarray, wrap: bool, legacy_row_guard: bool = False) -> np.ndarray:
    """Compute row_slope for every pixel of a tile.

    Args:
        heights: 2D array of tile intensities, shape (height, width).
        wrap: Wrap-around edge policy.
        legacy_row_guard: See row_slope.

    Returns:
        int32 array with the same shape as heights.
    """
    h = heights.astype(np.int32)
    slopes = np.zeros(h.shape, dtype=np.int32)
    if h.shape[1] == 1:
        return slopes

    slopes[:, 1:-1] = h[:, :-2] - h[:, 2:]
    if wrap:
        slopes[:, 0] = h[:, 1] - h[:, -1]
        slopes[:, -1] = h[:, -2] - h[:, 0]
    else:
        slopes[:, 0] = h[:, 0] - h[:, 1]
        slopes[:, -1] = h[:, -2] - h[:, -1]

    if legacy_row_guard:
        slopes[:, 1] = 0
    return slopes


def col_slopes(heights: np.ndarray, wrap: bool) -> np.ndarray:
    """Compute col_slope for every pixel of a tile.

    Returns:
        int32 array with the same shape as heights.
    """
    h = heights.astype(np.int32)
    slopes = np.zeros(h.shape, dtype=np.int32)
    if h.shape[0] == 1:
        return slopes

    slopes[1:-1, :] = h[2:, :] - h[:-2, :]
    if wrap:
        slopes[0, :] = h[-1, :] - h[1, :]
        slopes[-1, :] = h[0, :] - h[-2, :]
    else:
        slopes[0, :] = h[1, :] - h[0, :]
        slopes[-1, :] = h[-1, :] - h[-2, :]
    return slopes
