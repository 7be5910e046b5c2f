"""Global intensity range and slope scale.

The range is taken over the whole height field regardless of tiling, and the
resulting scale is shared by every tile of a conversion.
"""

from normalmap.core.heightfield import HeightField
from normalmap.core.options import ConversionOptions

# Intensity span of an 8-bit height field
INTENSITY_MAX = 255.0


def intensity_range(field: HeightField) -> tuple[int, int]:
    """Return the (min, max) intensity over the whole height field."""
    heights = field.as_array()
    return int(heights.min()), int(heights.max())


def effective_scale(field: HeightField, options: ConversionOptions) -> float:
    """Compute the height-to-slope scale used for every pixel of a conversion.

    Without normalisation a byte difference of 255 across one pixel is a
    slope of options.scale. With normalisation byte differences are instead
    multiplied by options.scale times the fraction of the byte range that
    the field's intensities span.

    Args:
        field: Height field being converted.
        options: Conversion options.

    Returns:
        Scale applied to intensity differences.
    """
    if options.normalise:
        low, high = intensity_range(field)
        return (high - low) / INTENSITY_MAX * options.scale
    return options.scale / INTENSITY_MAX
