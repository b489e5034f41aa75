from __future__ import annotations

import io

import pytest
from PIL import Image

from conftest import encode_image, make_rgb_image
from extractors.image_decoders import get_jpeg_information, open_png, read_image_input
from models.color_space import ColorSpace
from utils.validation import InvalidImageError


def test_read_image_input_accepts_streams_and_bytes():
    assert read_image_input(io.BytesIO(b"abc")) == b"abc"
    assert read_image_input(bytearray(b"abc")) == b"abc"
    assert read_image_input(memoryview(b"abc")) == b"abc"


@pytest.mark.parametrize("mode, color, expected", [
    ("RGB", (1, 2, 3), ColorSpace.DEVICE_RGB),
    ("L", 128, ColorSpace.DEVICE_GRAY),
    ("CMYK", (0, 0, 0, 255), ColorSpace.DEVICE_CMYK),
])
def test_jpeg_information(mode, color, expected):
    data = encode_image(make_rgb_image(7, 3, color=color, mode=mode), "JPEG")
    info = get_jpeg_information(data)
    assert (info.width, info.height) == (7, 3)
    assert info.bits_per_component == 8
    assert info.color_space == expected


def test_jpeg_signature_is_checked(png_bytes):
    with pytest.raises(InvalidImageError):
        get_jpeg_information(png_bytes)


def test_corrupt_jpeg():
    with pytest.raises(InvalidImageError):
        get_jpeg_information(b"\xff\xd8\xff" + b"\x00" * 16)


def test_png_pixels_are_rgb():
    image = make_rgb_image(2, 2, color=(10, 20, 30, 0), mode="RGBA")
    image.putpixel((1, 1), (200, 100, 50, 255))
    png = open_png(encode_image(image, "PNG"))

    assert (png.width, png.height) == (2, 2)
    assert png.bit_depth == 8
    assert png.get_pixel(0, 0) == (10, 20, 30)
    assert png.get_pixel(1, 1) == (200, 100, 50)
    assert png.to_rgb_bytes() == bytes([10, 20, 30] * 3 + [200, 100, 50])


def test_palette_and_bilevel_pngs():
    bilevel = open_png(encode_image(make_rgb_image(3, 1, color=1, mode="1"), "PNG"))
    assert bilevel.bit_depth == 1
    assert bilevel.get_pixel(2, 0) == (255, 255, 255)

    palette = open_png(encode_image(make_rgb_image(1, 1, color=(9, 8, 7)).convert("P", palette=Image.Palette.ADAPTIVE), "PNG"))
    assert palette.get_pixel(0, 0) == (9, 8, 7)


@pytest.mark.parametrize("data", [b"", b"\x89PNG\r\n\x1a\n" + b"\x00" * 8, b"GIF89a......."])
def test_invalid_png(data):
    with pytest.raises(InvalidImageError):
        open_png(data)
