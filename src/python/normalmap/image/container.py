"""Image file decoding and encoding for height fields and normal maps.

Height fields are read with Pillow and reduced to 8-bit grayscale; normal
maps are written as RGB or RGBA in any format Pillow can save.
"""

import logging
from pathlib import Path
from typing import BinaryIO, Optional, Union

from PIL import Image, UnidentifiedImageError

from normalmap.core.heightfield import HeightField, NormalMapBuffer

logger = logging.getLogger(__name__)

# Pillow modes holding more than 8 bits per sample
DEEP_MODES = {"I", "F", "I;16", "I;16B", "I;16L", "I;16N"}

DEFAULT_FORMAT = "PNG"

ImageSource = Union[str, Path, BinaryIO]


class ImageFormatError(Exception):
    """Raised when an image cannot be decoded or encoded."""

    pass


def read_heightfield(source: ImageSource) -> HeightField:
    """Decode an image into an 8-bit height field.

    Color images are converted to luminance; images with more than 8 bits
    per sample are rejected.

    Args:
        source: Path to an image file or a binary stream.

    Returns:
        HeightField with the image's grayscale intensities.

    Raises:
        FileNotFoundError: If a path is given and doesn't exist.
        ImageFormatError: If the data is not a supported 8-bit image.
    """
    if isinstance(source, (str, Path)):
        source = Path(source)
        if not source.exists():
            raise FileNotFoundError(f"Image file not found: {source}")

    try:
        with Image.open(source) as img:
            if img.mode in DEEP_MODES:
                raise ImageFormatError(
                    f"Unsupported image mode {img.mode}: only 8-bit height maps are supported"
                )
            logger.debug(f"Decoded {img.format} image {img.size[0]}x{img.size[1]} ({img.mode})")
            try:
                gray = img if img.mode == "L" else img.convert("L")
            except ValueError as e:
                raise ImageFormatError(
                    f"Cannot convert {img.mode} image to grayscale: {e}"
                ) from e
            return HeightField(width=gray.width, height=gray.height, samples=gray.tobytes())
    except UnidentifiedImageError as e:
        raise ImageFormatError(f"Cannot identify image data: {e}") from e
    except OSError as e:
        raise ImageFormatError(f"Failed to decode image: {e}") from e


def write_normal_map(
    nmap: NormalMapBuffer,
    destination: ImageSource,
    image_format: Optional[str] = None,
) -> None:
    """Encode a normal map buffer as an image.

    Args:
        nmap: Buffer produced by the converter.
        destination: Output path or writable binary stream.
        image_format: Pillow format name. Defaults to the path suffix for
            paths and to PNG for streams.

    Raises:
        ImageFormatError: If the image cannot be encoded in the requested format.
    """
    if image_format is None and not isinstance(destination, (str, Path)):
        image_format = DEFAULT_FORMAT

    img = Image.frombytes(nmap.mode, (nmap.width, nmap.height), bytes(nmap.samples))
    try:
        img.save(destination, format=image_format)
    except (KeyError, ValueError, OSError) as e:
        raise ImageFormatError(f"Failed to encode normal map: {e}") from e

    logger.debug(f"Encoded {nmap.width}x{nmap.height} {nmap.mode} normal map")
