"""Image container utilities."""

from normalmap.image.container import ImageFormatError, read_heightfield, write_normal_map

__all__ = [
    "ImageFormatError",
    "read_heightfield",
    "write_normal_map",
]
