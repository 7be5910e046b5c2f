"""Flat byte-buffer containers for height fields and normal maps.

A HeightField is the read-only grayscale input of a conversion and a
NormalMapBuffer is the RGB/RGBA output. Both keep their pixels in a single
row-major byte buffer and expose numpy views over it for the vectorised code.
"""

from dataclasses import dataclass
from typing import Iterator

import numpy as np


class HeightFieldError(Exception):
    """Raised when a height field or output buffer has inconsistent dimensions."""

    pass


@dataclass(frozen=True)
class TileRect:
    """Rectangle of the image processed with its own boundary conditions.

    Attributes:
        x: Left column in image coordinates.
        y: Top row in image coordinates.
        width: Number of columns, already clipped to the image.
        height: Number of rows, already clipped to the image.
    """

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        """Last column inside the tile."""
        return self.x + self.width - 1

    @property
    def bottom(self) -> int:
        """Last row inside the tile."""
        return self.y + self.height - 1

    def contains(self, x: int, y: int) -> bool:
        """Check whether an image coordinate lies inside the tile."""
        return self.x <= x <= self.right and self.y <= y <= self.bottom


@dataclass(frozen=True)
class HeightField:
    """Single-channel 8-bit height field.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Row-major intensities, one byte per pixel.

    Example:
        >>> field = HeightField(2, 1, bytes([0, 255]))
        >>> field.sample(1, 0)
        255
    """

    width: int
    height: int
    samples: bytes

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise HeightFieldError(
                f"Height field dimensions must be positive, got {self.width}x{self.height}"
            )
        if len(self.samples) != self.width * self.height:
            raise HeightFieldError(
                f"Expected {self.width * self.height} samples for "
                f"{self.width}x{self.height}, got {len(self.samples)}"
            )
        object.__setattr__(self, "samples", bytes(self.samples))

    @classmethod
    def from_array(cls, array: np.ndarray) -> "HeightField":
        """Build a height field from a 2D uint8 array of shape (height, width).

        Raises:
            HeightFieldError: If the array is not 2D uint8.
        """
        if array.dtype != np.uint8:
            raise HeightFieldError(f"Expected uint8 array, got {array.dtype}")
        if array.ndim != 2:
            raise HeightFieldError(f"Expected 2D array, got {array.ndim} dimensions")
        height, width = array.shape
        return cls(width=width, height=height, samples=np.ascontiguousarray(array).tobytes())

    def sample(self, x: int, y: int) -> int:
        """Return the intensity at (x, y) in image coordinates."""
        return self.samples[y * self.width + x]

    def as_array(self) -> np.ndarray:
        """Return a read-only (height, width) uint8 view of the samples."""
        return np.frombuffer(self.samples, dtype=np.uint8).reshape(self.height, self.width)


@dataclass
class NormalMapBuffer:
    """Packed 8-bit RGB or RGBA normal map.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        channel_count: 3 for RGB, 4 for RGBA.
        samples: Row-major pixel bytes, channel_count bytes per pixel.
    """

    width: int
    height: int
    channel_count: int
    samples: bytearray

    @classmethod
    def allocate(cls, width: int, height: int, channel_count: int) -> "NormalMapBuffer":
        """Allocate a zero-filled buffer.

        Raises:
            HeightFieldError: If the channel count is not 3 or 4.
        """
        if channel_count not in (3, 4):
            raise HeightFieldError(f"Channel count must be 3 or 4, got {channel_count}")
        return cls(
            width=width,
            height=height,
            channel_count=channel_count,
            samples=bytearray(width * height * channel_count),
        )

    @property
    def mode(self) -> str:
        """Pillow image mode matching the channel count."""
        return "RGBA" if self.channel_count == 4 else "RGB"

    def pixel(self, x: int, y: int) -> tuple[int, ...]:
        """Return the channel bytes of one pixel."""
        start = (y * self.width + x) * self.channel_count
        return tuple(self.samples[start : start + self.channel_count])

    def as_array(self) -> np.ndarray:
        """Return a writable (height, width, channel_count) view of the samples."""
        return np.frombuffer(self.samples, dtype=np.uint8).reshape(
            self.height, self.width, self.channel_count
        )


def iter_tiles(width: int, height: int, tile_size: int) -> Iterator[TileRect]:
    """Partition an image into row-major, non-overlapping tiles.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        tile_size: Edge length of a square tile; 0 yields a single tile
            covering the whole image.

    Yields:
        TileRect for each tile, clipped so the last tile of each row or
        column may be smaller than tile_size.
    """
    tile_width = tile_size if tile_size > 0 else width
    tile_height = tile_size if tile_size > 0 else height

    for tile_y in range(0, height, tile_height):
        for tile_x in range(0, width, tile_width):
            yield TileRect(
                x=tile_x,
                y=tile_y,
                width=min(tile_width, width - tile_x),
                height=min(tile_height, height - tile_y),
            )
