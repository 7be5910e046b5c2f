"""Quantisation of normal vector components to bytes.

Signed encoding stores [-1, 1] as 0-255 centred on 128, so a component of
0.0 becomes 128 and 1.0 becomes 255. Unsigned encoding stores [0, 1] as
0-255 and is only used for Z.
"""

from typing import Union

import numpy as np

ArrayOrFloat = Union[np.ndarray, float]


def to_signed_byte(value: ArrayOrFloat) -> Union[np.ndarray, int]:
    """Encode a component in [-1, 1] as a 128-centred byte.

    Args:
        value: Component value or array of values.

    Returns:
        int for scalar input, uint8 array for array input.
    """
    scaled = np.asarray(value, dtype=np.float64) * 128.0
    scaled = np.where(scaled == 128.0, 127.0, scaled)
    encoded = (np.trunc(scaled) + 128.0).astype(np.uint8)
    return int(encoded) if encoded.ndim == 0 else encoded


def to_unsigned_byte(value: ArrayOrFloat) -> Union[np.ndarray, int]:
    """Encode a component in [0, 1] as a byte.

    Args:
        value: Component value or array of values.

    Returns:
        int for scalar input, uint8 array for array input.
    """
    scaled = np.asarray(value, dtype=np.float64) * 256.0
    scaled = np.where(scaled == 256.0, 255.0, scaled)
    encoded = np.floor(scaled).astype(np.uint8)
    return int(encoded) if encoded.ndim == 0 else encoded
