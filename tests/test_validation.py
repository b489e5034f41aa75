from __future__ import annotations

import pytest

from utils.validation import (
    IndexOutOfRangeError,
    InvalidArgumentError,
    PdfBuilderError,
    validate_font_size,
    validate_image_content,
    validate_image_signature,
    validate_text,
)


def test_error_hierarchy():
    assert issubclass(IndexOutOfRangeError, IndexError)
    assert issubclass(InvalidArgumentError, ValueError)
    assert issubclass(IndexOutOfRangeError, PdfBuilderError)


def test_font_size():
    assert validate_font_size(12) == 12.0
    for bad in (0, -3, None):
        with pytest.raises(InvalidArgumentError):
            validate_font_size(bad)


def test_text():
    assert validate_text("") == ""
    with pytest.raises(InvalidArgumentError):
        validate_text(None)


def test_image_signatures(jpeg_bytes, png_bytes):
    assert validate_image_signature(jpeg_bytes, "jpeg") == (True, None)
    assert validate_image_signature(png_bytes, "png") == (True, None)

    ok, message = validate_image_signature(png_bytes, "jpeg")
    assert not ok and "signature" in message
    ok, message = validate_image_signature(b"\x89", "png")
    assert not ok and "too small" in message
    ok, message = validate_image_signature(png_bytes, "tiff")
    assert not ok and "Unsupported" in message


def test_image_content_size():
    assert validate_image_content(b"x") == (True, None)
    assert validate_image_content(b"")[0] is False
    ok, message = validate_image_content(b"x" * (2 * 1024 * 1024), max_size_mb=1)
    assert not ok and "too large" in message
