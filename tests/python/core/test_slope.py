"""Unit tests for tile-scoped slope estimation."""

import itertools

import numpy as np
import pytest

from normalmap.core.heightfield import HeightField, TileRect
from normalmap.core.slope import col_slope, col_slopes, pixel_diff, row_slope, row_slopes

RAMP = [0, 10, 30, 60, 100]


@pytest.fixture
def row_field() -> HeightField:
    """A 5x1 field rising to the right."""
    return HeightField(5, 1, bytes(RAMP))


@pytest.fixture
def column_field() -> HeightField:
    """A 1x5 field rising downwards."""
    return HeightField(1, 5, bytes(RAMP))


def whole(field: HeightField) -> TileRect:
    """Tile covering the whole field."""
    return TileRect(0, 0, field.width, field.height)


class TestPixelDiff:
    """Tests for pixel_diff."""

    def test_difference_inside_tile(self, row_field: HeightField) -> None:
        """Should return the second sample minus the first."""
        assert pixel_diff(row_field, 1, 0, 3, 0, whole(row_field)) == 50
        assert pixel_diff(row_field, 3, 0, 1, 0, whole(row_field)) == -50

    def test_outside_tile_is_zero(self, row_field: HeightField) -> None:
        """Points outside the tile contribute nothing, even inside the image."""
        tile = TileRect(0, 0, 3, 1)
        assert pixel_diff(row_field, 1, 0, 3, 0, tile) == 0
        assert pixel_diff(row_field, 3, 0, 1, 0, tile) == 0


class TestRowSlope:
    """Tests for row_slope."""

    def test_interior_central_difference(self, row_field: HeightField) -> None:
        """Interior columns use left minus right neighbour."""
        assert row_slope(row_field, 2, 0, False, whole(row_field)) == 10 - 60

    def test_first_column_clamped(self, row_field: HeightField) -> None:
        """Without wrap the first column uses itself and its right neighbour."""
        assert row_slope(row_field, 0, 0, False, whole(row_field)) == 0 - 10

    def test_first_column_wrapped(self, row_field: HeightField) -> None:
        """With wrap the first column takes the last column as left neighbour."""
        assert row_slope(row_field, 0, 0, True, whole(row_field)) == 10 - 100

    def test_last_column_clamped(self, row_field: HeightField) -> None:
        """Without wrap the last column uses its left neighbour and itself."""
        assert row_slope(row_field, 4, 0, False, whole(row_field)) == 60 - 100

    def test_last_column_wrapped(self, row_field: HeightField) -> None:
        """With wrap the last column takes the first column as right neighbour."""
        assert row_slope(row_field, 4, 0, True, whole(row_field)) == 60 - 0

    def test_single_column_tile(self, row_field: HeightField) -> None:
        """A one pixel wide tile has no horizontal gradient."""
        tile = TileRect(2, 0, 1, 1)
        assert row_slope(row_field, 2, 0, False, tile) == 0
        assert row_slope(row_field, 2, 0, True, tile) == 0

    def test_legacy_guard_zeroes_second_column(self, row_field: HeightField) -> None:
        """The legacy guard returns 0 at tile column 1 only."""
        tile = whole(row_field)
        assert row_slope(row_field, 1, 0, False, tile) == 0 - 30
        assert row_slope(row_field, 1, 0, False, tile, legacy_row_guard=True) == 0
        assert row_slope(row_field, 2, 0, False, tile, legacy_row_guard=True) == 10 - 60

    def test_tile_edges_are_tile_relative(self) -> None:
        """Edges are those of the tile, not of the image."""
        field = HeightField(6, 1, bytes([0, 10, 30, 60, 100, 150]))
        tile = TileRect(3, 0, 3, 1)
        assert row_slope(field, 3, 0, False, tile) == 60 - 100
        # Wraps to the tile's own last column, not to image column 0 or 2
        assert row_slope(field, 3, 0, True, tile) == 100 - 150
        assert row_slope(field, 5, 0, True, tile) == 100 - 60

    def test_clamped_tile_edge_ignores_image_neighbour(self) -> None:
        """A tile edge inside the image behaves like an image edge."""
        field = HeightField(4, 1, bytes([0, 10, 30, 60]))
        assert row_slope(field, 2, 0, False, TileRect(0, 0, 4, 1)) == 10 - 60
        assert row_slope(field, 2, 0, False, TileRect(2, 0, 2, 1)) == 30 - 60


class TestColSlope:
    """Tests for col_slope."""

    def test_interior_central_difference(self, column_field: HeightField) -> None:
        """Interior rows use lower minus upper neighbour."""
        assert col_slope(column_field, 0, 2, False, whole(column_field)) == 60 - 10

    def test_first_row_clamped(self, column_field: HeightField) -> None:
        """Without wrap the first row uses itself and the row below."""
        assert col_slope(column_field, 0, 0, False, whole(column_field)) == 10 - 0

    def test_first_row_wrapped(self, column_field: HeightField) -> None:
        """With wrap the first row takes the last row as upper neighbour."""
        assert col_slope(column_field, 0, 0, True, whole(column_field)) == 100 - 10

    def test_last_row_clamped(self, column_field: HeightField) -> None:
        """Without wrap the last row uses the row above and itself."""
        assert col_slope(column_field, 0, 4, False, whole(column_field)) == 100 - 60

    def test_last_row_wrapped(self, column_field: HeightField) -> None:
        """With wrap the last row takes the first row as lower neighbour."""
        assert col_slope(column_field, 0, 4, True, whole(column_field)) == 0 - 60

    def test_single_row_tile(self, row_field: HeightField) -> None:
        """A one pixel tall tile has no vertical gradient."""
        for x in range(5):
            assert col_slope(row_field, x, 0, False, whole(row_field)) == 0
            assert col_slope(row_field, x, 0, True, whole(row_field)) == 0

    def test_tile_edges_are_tile_relative(self) -> None:
        """Vertical wrap stays inside the tile."""
        field = HeightField(1, 6, bytes([0, 10, 30, 60, 100, 150]))
        tile = TileRect(0, 3, 1, 3)
        assert col_slope(field, 0, 3, False, tile) == 100 - 60
        assert col_slope(field, 0, 3, True, tile) == 150 - 100


class TestVectorisedSlopes:
    """row_slopes and col_slopes must match the scalar estimators exactly."""

    @pytest.mark.parametrize(
        "shape", [(1, 1), (1, 2), (1, 6), (2, 1), (6, 1), (2, 2), (3, 7), (8, 5)]
    )
    @pytest.mark.parametrize("wrap,legacy", list(itertools.product([False, True], repeat=2)))
    def test_matches_scalar(self, shape: tuple, wrap: bool, legacy: bool) -> None:
        """Every pixel of a tile should agree with row_slope and col_slope."""
        rng = np.random.default_rng(sum(shape) * 7 + wrap * 2 + legacy)
        heights = rng.integers(0, 256, size=shape, dtype=np.uint8)
        field = HeightField.from_array(heights)
        tile = whole(field)

        rows = row_slopes(heights, wrap, legacy)
        cols = col_slopes(heights, wrap)

        for y in range(field.height):
            for x in range(field.width):
                assert rows[y, x] == row_slope(field, x, y, wrap, tile, legacy)
                assert cols[y, x] == col_slope(field, x, y, wrap, tile)

    @pytest.mark.parametrize("wrap", [False, True])
    def test_matches_scalar_in_offset_tile(self, wrap: bool) -> None:
        """Tile arrays cut from a larger field should match tile-scoped scalars."""
        rng = np.random.default_rng(11)
        heights = rng.integers(0, 256, size=(7, 9), dtype=np.uint8)
        field = HeightField.from_array(heights)
        tile = TileRect(3, 2, 4, 5)
        region = heights[2:7, 3:7]

        rows = row_slopes(region, wrap)
        cols = col_slopes(region, wrap)

        for y in range(tile.y, tile.y + tile.height):
            for x in range(tile.x, tile.x + tile.width):
                assert rows[y - tile.y, x - tile.x] == row_slope(field, x, y, wrap, tile)
                assert cols[y - tile.y, x - tile.x] == col_slope(field, x, y, wrap, tile)

    def test_no_uint8_overflow(self) -> None:
        """Differences should be signed and span the full -255..255 range."""
        heights = np.array([[255, 0, 255]], dtype=np.uint8)
        rows = row_slopes(heights, wrap=False)
        assert rows.tolist() == [[255, 0, -255]]
