"""
Models for page building results and resource handles
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field

from utils.pdf_transforms import PdfPoint, PdfRectangle

# Letters are black unless a fill color is active
DEFAULT_TEXT_COLOR: Tuple[float, float, float] = (0.0, 0.0, 0.0)

class Letter(BaseModel):
    """A single laid-out glyph with its page-space geometry"""
    model_config = ConfigDict(frozen=True)

    value: str = Field(description="The character this glyph renders")
    glyph_rectangle: PdfRectangle = Field(description="Glyph bounding box in page space")
    start_base_line: PdfPoint = Field(description="Start of the advance on the baseline")
    end_base_line: PdfPoint = Field(description="End of the advance on the baseline")
    width: float = Field(description="Cumulative advance of the run before this glyph")
    font_size: float
    font_name: str
    color: Tuple[float, float, float] = Field(default=DEFAULT_TEXT_COLOR, description="Fill color as RGB decimals")
    point_size: float
    text_sequence: int = Field(description="Shared by every letter laid out by one call")

    @property
    def advance(self) -> float:
        """Distance along the baseline covered by this glyph"""
        return self.end_base_line.x - self.start_base_line.x

@dataclass(frozen=True)
class AddedFont:
    """Handle for a font stored in a document"""
    id: uuid.UUID
    name: str
    reference: Any = field(compare=False, repr=False)

@dataclass(frozen=True)
class AddedImage:
    """Handle for an image XObject stored in a document, reusable across pages"""
    id: uuid.UUID
    reference: Any = field(compare=False, repr=False)
    width: int = 0
    height: int = 0
