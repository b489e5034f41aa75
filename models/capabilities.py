"""
Capability protocols consumed by the page builder and raster converter.

Implementations live in extractors/ (fontTools-backed fonts, pikepdf-backed
images); tests supply their own lightweight versions.
"""

from typing import Optional, Protocol

from models.color_space import ColorSpaceDetails
from utils.pdf_transforms import PdfRectangle, TransformationMatrix


class WritingFont(Protocol):
    """A font program able to measure and encode characters for output."""

    name: str

    def get_font_matrix(self) -> TransformationMatrix:
        """Glyph space to text space matrix."""
        ...

    def try_get_bounding_box(self, character: str) -> Optional[PdfRectangle]:
        """Glyph box in glyph space, or None if the glyph is missing."""
        ...

    def try_get_advance_width(self, character: str) -> Optional[float]:
        """Advance width in glyph space, or None if the glyph is missing."""
        ...

    def get_value_for_character(self, character: str) -> int:
        """Single-byte character code used in show-text payloads."""
        ...


class PdfImageSource(Protocol):
    """Raw image samples plus the metadata needed to interpret them."""

    width_in_samples: int
    height_in_samples: int
    bits_per_component: int
    color_space_details: Optional[ColorSpaceDetails]

    def try_get_bytes(self) -> Optional[bytes]:
        """Decoded sample bytes, or None if the stream cannot be decoded."""
        ...
