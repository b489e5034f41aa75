"""
Encoded image readers for the page builder.

JPEG data is embedded as-is, so only its header is read. PNG data is
decoded to 8-bit RGB samples for embedding.
"""

import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, Tuple, Union

from PIL import Image, UnidentifiedImageError

from models.color_space import ColorSpace
from utils.validation import InvalidImageError, validate_image_content, validate_image_signature

logger = logging.getLogger(__name__)

ImageInput = Union[bytes, bytearray, memoryview, BinaryIO]

JPEG_COLOR_SPACES = {
    'L': ColorSpace.DEVICE_GRAY,
    'RGB': ColorSpace.DEVICE_RGB,
    'CMYK': ColorSpace.DEVICE_CMYK,
}


def read_image_input(source: ImageInput) -> bytes:
    """Accept raw bytes or a readable binary stream."""
    if hasattr(source, 'read'):
        return source.read()
    return bytes(source)


def _open(data: bytes, image_format: str) -> Image.Image:
    is_valid, error = validate_image_content(data)
    if is_valid:
        is_valid, error = validate_image_signature(data, image_format)
    if not is_valid:
        raise InvalidImageError(error)

    try:
        return Image.open(io.BytesIO(data))
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError(f"Could not decode {image_format.upper()} image: {e}") from e


@dataclass(frozen=True)
class JpegInformation:
    """Header facts needed to embed a JPEG as a DCTDecode image."""
    width: int
    height: int
    bits_per_component: int
    color_space: ColorSpace


def get_jpeg_information(data: bytes) -> JpegInformation:
    """
    Read JPEG dimensions and color model without decoding the scan data.

    Raises:
        InvalidImageError: If the data is not a readable JPEG
    """
    with _open(data, 'jpeg') as image:
        color_space = JPEG_COLOR_SPACES.get(image.mode)
        if color_space is None:
            raise InvalidImageError(f"Unsupported JPEG mode {image.mode}")
        width, height = image.size

    logger.debug(f"JPEG {width}x{height} {color_space.value}")
    return JpegInformation(width, height, 8, color_space)


class PngImage:
    """Decoded PNG exposing its pixels as 8-bit RGB."""

    def __init__(self, image: Image.Image):
        self.bit_depth = _bit_depth(image.mode)
        self._rgb = image.convert('RGB')
        self.width, self.height = self._rgb.size

    def get_pixel(self, column: int, row: int) -> Tuple[int, int, int]:
        """RGB of the pixel at ``column`` counted from the left, ``row`` from the top."""
        return self._rgb.getpixel((column, row))

    def to_rgb_bytes(self) -> bytes:
        """Row-major samples, top row first, three bytes per pixel."""
        return self._rgb.tobytes()


def _bit_depth(mode: str) -> int:
    if mode == '1':
        return 1
    if mode.startswith('I;16') or mode == 'I':
        return 16
    return 8


def open_png(data: bytes) -> PngImage:
    """
    Decode a PNG.

    Alpha is discarded; transparent pixels keep their stored color.

    Raises:
        InvalidImageError: If the data is not a readable PNG
    """
    with _open(data, 'png') as image:
        try:
            image.load()
        except (OSError, SyntaxError) as e:
            raise InvalidImageError(f"Could not decode PNG image: {e}") from e
        png = PngImage(image)

    logger.debug(f"PNG {png.width}x{png.height}, source bit depth {png.bit_depth}")
    return png
