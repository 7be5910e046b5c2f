"""Height field to normal map conversion engine.

This module estimates tangent-space normals from 8-bit height fields and
packs them into RGB or RGBA byte buffers. It works on raw buffers only and
knows nothing about image file formats.
"""

from normalmap.core.converter import convert
from normalmap.core.heightfield import (
    HeightField,
    HeightFieldError,
    NormalMapBuffer,
    TileRect,
    iter_tiles,
)
from normalmap.core.normal import NormalVector, estimate_normal, estimate_tile_normals
from normalmap.core.options import (
    TRACKMANIA_MAPPING,
    ConversionOptions,
    OptionsError,
    validate_channel_mapping,
)
from normalmap.core.quantize import to_signed_byte, to_unsigned_byte
from normalmap.core.scale import effective_scale, intensity_range
from normalmap.core.slope import col_slope, row_slope

__all__ = [
    "ConversionOptions",
    "HeightField",
    "HeightFieldError",
    "NormalMapBuffer",
    "NormalVector",
    "OptionsError",
    "TRACKMANIA_MAPPING",
    "TileRect",
    "col_slope",
    "convert",
    "effective_scale",
    "estimate_normal",
    "estimate_tile_normals",
    "intensity_range",
    "iter_tiles",
    "row_slope",
    "to_signed_byte",
    "to_unsigned_byte",
    "validate_channel_mapping",
]
