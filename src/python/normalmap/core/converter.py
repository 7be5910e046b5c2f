"""Tiled height field to normal map conversion.

This module drives a conversion: it computes the global slope scale, walks
the image tile by tile and packs each tile's normals into the output buffer.
"""

import logging

from normalmap.core.heightfield import HeightField, NormalMapBuffer, iter_tiles
from normalmap.core.normal import estimate_tile_normals
from normalmap.core.options import ConversionOptions
from normalmap.core.quantize import to_signed_byte, to_unsigned_byte
from normalmap.core.scale import effective_scale

logger = logging.getLogger(__name__)


def convert(field: HeightField, options: ConversionOptions) -> NormalMapBuffer:
    """Convert a height field into a tangent-space normal map.

    Args:
        field: Grayscale height field.
        options: Validated conversion options.

    Returns:
        NormalMapBuffer with the X, Y and Z bytes at the offsets given by
        options.channel_mapping. Channels not named by the mapping stay 0.

    Example:
        >>> field = HeightField(4, 4, bytes([100] * 16))
        >>> convert(field, ConversionOptions()).pixel(0, 0)
        (128, 128, 255)
    """
    nmap = NormalMapBuffer.allocate(field.width, field.height, options.channel_count)
    xo, yo, zo = options.axis_offsets

    # Must be fixed before any tile is processed
    scale = effective_scale(field, options)
    logger.debug(
        f"Converting {field.width}x{field.height} height field "
        f"(xyz={options.channel_mapping}, scale={scale:.6f}, wrap={options.wrap}, "
        f"tile_size={options.tile_size})"
    )

    heights = field.as_array()
    pixels = nmap.as_array()
    encode_z = to_unsigned_byte if options.unsigned_z else to_signed_byte

    tile_count = 0
    for tile in iter_tiles(field.width, field.height, options.tile_size):
        rows = slice(tile.y, tile.y + tile.height)
        columns = slice(tile.x, tile.x + tile.width)

        nx, ny, nz = estimate_tile_normals(
            heights[rows, columns], scale, options.wrap, options.legacy_row_guard
        )

        region = pixels[rows, columns]
        region[..., xo] = to_signed_byte(nx)
        region[..., yo] = to_signed_byte(ny)
        region[..., zo] = encode_z(nz)
        tile_count += 1

    logger.debug(f"Processed {tile_count} tiles")
    return nmap
