"""
Builder Validation and Error Types
Exception hierarchy and input validation helpers for page building,
resource merging and image conversion.
"""

from typing import Optional, Tuple
import logging

logger = logging.getLogger(__name__)

# Validation constants
VALIDATION_CONSTANTS = {
    'JPEG_SIGNATURE': b'\xff\xd8\xff',
    'PNG_SIGNATURE': b'\x89PNG\r\n\x1a\n',
    'MAX_IMAGE_SIZE_MB': 50,
    'MIN_FONT_SIZE': 0.0,  # Exclusive
}

class PdfBuilderError(Exception):
    """Base exception for all page building and conversion errors"""
    pass

class InvalidColorSpaceError(PdfBuilderError):
    """Raised when a color space is built from a disallowed base or alternate"""
    pass

class IndexOutOfRangeError(PdfBuilderError, IndexError):
    """Raised for out-of-range stream indices and color table lookups"""
    pass

class InvalidArgumentError(PdfBuilderError, ValueError):
    """Raised for invalid caller-supplied arguments"""
    pass

class UnknownFontError(PdfBuilderError):
    """Raised when a font handle was not registered with the document"""
    pass

class GlyphNotFoundError(PdfBuilderError):
    """Raised when a font cannot provide a glyph box or advance width"""
    pass

class MalformedDocumentError(PdfBuilderError):
    """Raised when a source document breaks a structural requirement"""
    pass

class ResourceCollisionError(PdfBuilderError):
    """Raised when two different resources would share one name"""
    pass

class InvalidImageError(PdfBuilderError, ValueError):
    """Raised when image data cannot be decoded"""
    pass

def validate_image_signature(data: bytes, image_format: str) -> Tuple[bool, Optional[str]]:
    """
    Validate image magic bytes before decoding

    Args:
        data: Raw encoded image bytes
        image_format: "jpeg" or "png"

    Returns:
        Tuple of (is_valid, error_message)
    """
    signature_key = f"{image_format.upper()}_SIGNATURE"
    if signature_key not in VALIDATION_CONSTANTS:
        return False, f"Unsupported image format: {image_format}"

    signature = VALIDATION_CONSTANTS[signature_key]
    if data is None or len(data) < len(signature):
        return False, f"Data too small to be a valid {image_format.upper()} image"

    if not data.startswith(signature):
        return False, f"Invalid {image_format.upper()} signature, got {bytes(data[:len(signature)])!r}"

    return True, None

def validate_image_content(data: bytes, max_size_mb: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    """
    Validate encoded image size limits

    Args:
        data: Raw encoded image bytes
        max_size_mb: Maximum image size in MB (uses default if None)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if max_size_mb is None:
        max_size_mb = VALIDATION_CONSTANTS['MAX_IMAGE_SIZE_MB']

    if not data:
        return False, "Image data is empty"

    size_mb = len(data) / (1024 * 1024)
    if size_mb > max_size_mb:
        return False, f"Image too large: {size_mb:.1f}MB (max: {max_size_mb}MB)"

    return True, None

def validate_font_size(font_size: float) -> float:
    """
    Ensure a font size is a positive number.

    Raises:
        InvalidArgumentError: If the size is missing or not positive
    """
    if font_size is None or font_size <= VALIDATION_CONSTANTS['MIN_FONT_SIZE']:
        raise InvalidArgumentError(f"Font size must be greater than 0, got {font_size}")
    return float(font_size)

def validate_text(text: Optional[str]) -> str:
    """Ensure text to lay out is present."""
    if text is None:
        raise InvalidArgumentError("Text must not be None")
    return text

# Export main validation helpers for easy import
__all__ = [
    'validate_image_signature',
    'validate_image_content',
    'validate_font_size',
    'validate_text',
    'PdfBuilderError',
    'InvalidColorSpaceError',
    'IndexOutOfRangeError',
    'InvalidArgumentError',
    'UnknownFontError',
    'GlyphNotFoundError',
    'MalformedDocumentError',
    'ResourceCollisionError',
    'InvalidImageError',
    'VALIDATION_CONSTANTS'
]
