"""Color sample conversion utilities.

Pure functions for palette expansion and color value normalization. The
stateful raster pipeline lives in engine.image_processor.
"""

import logging
from typing import Optional

import numpy as np

from models.color_space import (
    DEVICE_COLOR_SPACES, ColorSpaceDetails, IndexedColorSpaceDetails, component_count,
)
from utils.validation import IndexOutOfRangeError, InvalidArgumentError

logger = logging.getLogger(__name__)

DECIMAL_PLACES = 4


def expand_indexed_bytes(details: Optional[ColorSpaceDetails], decoded: Optional[bytes]) -> bytes:
    """Replace palette indices with their base color components.

    Args:
        details: Color space of the samples
        decoded: Decoded sample bytes, one byte per index for Indexed spaces

    Returns:
        Expanded bytes for Indexed spaces with an RGB/CMYK/Gray base, the input
        unchanged otherwise, or empty bytes when there is no input.

    Raises:
        IndexOutOfRangeError: If an index addresses past the end of the table
    """
    if decoded is None:
        return b''

    if not isinstance(details, IndexedColorSpaceDetails):
        return bytes(decoded)

    base = details.base_color_space_details.type
    if base not in DEVICE_COLOR_SPACES:
        logger.debug(
            f"Indexed base {base.value} has no palette layout, passing samples through"
        )
        return bytes(decoded)

    return _unwrap_indexed(details.color_table, decoded, component_count(base))


def _unwrap_indexed(color_table: bytes, decoded: bytes, components: int) -> bytes:
    indices = np.frombuffer(bytes(decoded), dtype=np.uint8).astype(np.intp)
    if indices.size == 0:
        return b''

    table = np.frombuffer(color_table, dtype=np.uint8)
    highest = int(indices.max())
    if (highest + 1) * components > table.size:
        raise IndexOutOfRangeError(
            f"Color table index {highest} out of range for a table of "
            f"{table.size} bytes with {components} components per entry"
        )

    offsets = indices[:, np.newaxis] * components + np.arange(components)
    return table[offsets].tobytes()


def rgb_to_decimal(value: float) -> float:
    """Map a 0-255 channel value to the 0-1 range used by PDF color operators."""
    return round(min(1.0, max(0.0, value / 255)), DECIMAL_PLACES)


def check_rgb_decimal(value: float, argument_name: str) -> float:
    """Ensure a decimal channel value lies within 0-1."""
    if value is None or value < 0 or value > 1:
        raise InvalidArgumentError(
            f"Provided decimal for RGB color was not in the range 0 - 1: {argument_name}: {value}"
        )
    return float(value)


def cmyk_to_rgb(cmyk: np.ndarray) -> np.ndarray:
    """Naive CMYK to RGB without color management.

    Args:
        cmyk: uint8 array of shape (..., 4)

    Returns:
        uint8 array of shape (..., 3), each channel truncated towards zero
    """
    fractions = cmyk.astype(np.float64) / 255.0
    c, m, y, k = (fractions[..., i] for i in range(4))
    rgb = np.stack([
        255 * (1 - c) * (1 - k),
        255 * (1 - m) * (1 - k),
        255 * (1 - y) * (1 - k),
    ], axis=-1)
    return np.trunc(rgb).astype(np.uint8)


def unpack_samples(data: bytes, width: int, height: int, components: int,
                   bits_per_component: int, scale_to_byte: bool) -> bytes:
    """Convert packed sub-byte or 16-bit samples to one byte per sample.

    Rows of sub-byte samples start on a byte boundary. 16-bit samples keep
    their most significant byte. With ``scale_to_byte`` sub-byte values are
    stretched over 0-255; otherwise they are kept as raw values (palette
    indices).
    """
    if bits_per_component == 8:
        return bytes(data)

    raw = np.frombuffer(bytes(data), dtype=np.uint8)

    if bits_per_component == 16:
        return raw[0::2].tobytes()

    if bits_per_component not in (1, 2, 4):
        raise InvalidArgumentError(f"Unsupported bits per component: {bits_per_component}")

    samples_per_row = width * components
    row_bytes = (samples_per_row * bits_per_component + 7) // 8
    if raw.size != row_bytes * height:
        raise InvalidArgumentError(
            f"Expected {row_bytes * height} packed bytes, got {raw.size}"
        )

    bits = np.unpackbits(raw.reshape(height, row_bytes), axis=1)
    bits = bits[:, :samples_per_row * bits_per_component]
    weights = 1 << np.arange(bits_per_component - 1, -1, -1)
    values = bits.reshape(height, samples_per_row, bits_per_component).dot(weights)

    if scale_to_byte:
        values = values * (255 // ((1 << bits_per_component) - 1))

    return values.astype(np.uint8).tobytes()
