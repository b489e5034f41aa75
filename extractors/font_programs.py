"""
TrueType font program backed by fontTools.

Supplies glyph metrics in glyph space and single-byte WinAnsi character
codes, which is what the text layout engine and simple TrueType font
dictionaries need.
"""

import io
import logging
import re
import struct
from typing import Dict, List, Optional, Tuple

from fontTools.pens.boundsPen import BoundsPen
from fontTools.ttLib import TTFont, TTLibError

from utils.pdf_transforms import PdfRectangle, TransformationMatrix
from utils.validation import GlyphNotFoundError, InvalidArgumentError

logger = logging.getLogger(__name__)

WIN_ANSI_CODEC = 'cp1252'
FIRST_CHAR = 32
LAST_CHAR = 255
PDF_GLYPH_UNITS = 1000.0
EMPTY_GLYPH_BOX = PdfRectangle.from_coordinates(0, 0, 0, 0)


class TrueTypeFontProgram:
    """Metrics and encoding for an embeddable TrueType font."""

    def __init__(self, data: bytes):
        try:
            self.ttfont = TTFont(io.BytesIO(data))
            self.units_per_em = self.ttfont['head'].unitsPerEm
        except (TTLibError, KeyError, AssertionError, struct.error) as e:
            raise InvalidArgumentError(f"Not a usable TrueType font: {e}") from e

        self.data = bytes(data)
        self.name = self._postscript_name()
        self._cmap: Dict[int, str] = self.ttfont.getBestCmap() or {}
        self._glyph_set = self.ttfont.getGlyphSet()
        self._bounds_cache: Dict[str, Optional[Tuple[float, float, float, float]]] = {}

    def _postscript_name(self) -> str:
        raw = self.ttfont['name'].getDebugName(6) if 'name' in self.ttfont else None
        cleaned = re.sub(r'[^A-Za-z0-9+\-_]', '', raw or '')
        return cleaned or 'TrueTypeFont'

    def get_font_matrix(self) -> TransformationMatrix:
        scale = 1.0 / self.units_per_em
        return TransformationMatrix.scaling(scale, scale)

    def _glyph_name(self, character: str) -> Optional[str]:
        return self._cmap.get(ord(character))

    def try_get_advance_width(self, character: str) -> Optional[float]:
        glyph_name = self._glyph_name(character)
        if glyph_name is None:
            return None
        return float(self.ttfont['hmtx'].metrics[glyph_name][0])

    def try_get_bounding_box(self, character: str) -> Optional[PdfRectangle]:
        glyph_name = self._glyph_name(character)
        if glyph_name is None:
            return None

        if glyph_name not in self._bounds_cache:
            pen = BoundsPen(self._glyph_set)
            self._glyph_set[glyph_name].draw(pen)
            self._bounds_cache[glyph_name] = pen.bounds

        bounds = self._bounds_cache[glyph_name]
        if bounds is None:
            return EMPTY_GLYPH_BOX
        return PdfRectangle.from_coordinates(*bounds)

    def get_value_for_character(self, character: str) -> int:
        try:
            encoded = character.encode(WIN_ANSI_CODEC)
        except UnicodeEncodeError:
            raise GlyphNotFoundError(f"{character!r} has no WinAnsi code in font {self.name}")
        return encoded[0]

    def _scaled(self, value: float) -> float:
        return round(value * PDF_GLYPH_UNITS / self.units_per_em, 3)

    def widths(self, first_char: int = FIRST_CHAR, last_char: int = LAST_CHAR) -> List[float]:
        """Advance widths in 1/1000 text space for each WinAnsi code, 0 for unmapped codes."""
        result = []
        for code in range(first_char, last_char + 1):
            try:
                character = bytes([code]).decode(WIN_ANSI_CODEC)
            except UnicodeDecodeError:
                result.append(0)
                continue
            advance = self.try_get_advance_width(character)
            result.append(self._scaled(advance) if advance is not None else 0)
        return result

    def descriptor_metrics(self) -> Dict[str, object]:
        """Values for the font descriptor, in 1/1000 text space."""
        head = self.ttfont['head']
        hhea = self.ttfont['hhea'] if 'hhea' in self.ttfont else None
        ascent = hhea.ascent if hhea is not None else head.yMax
        descent = hhea.descent if hhea is not None else head.yMin

        cap_height = ascent
        os2 = self.ttfont['OS/2'] if 'OS/2' in self.ttfont else None
        if os2 is not None and getattr(os2, 'sCapHeight', 0):
            cap_height = os2.sCapHeight

        italic_angle = 0.0
        if 'post' in self.ttfont:
            italic_angle = float(self.ttfont['post'].italicAngle)

        return {
            'FontBBox': [self._scaled(v) for v in (head.xMin, head.yMin, head.xMax, head.yMax)],
            'Ascent': self._scaled(ascent),
            'Descent': self._scaled(descent),
            'CapHeight': self._scaled(cap_height),
            'ItalicAngle': italic_angle,
        }

    def __repr__(self) -> str:
        return f"TrueTypeFontProgram({self.name}, {len(self._cmap)} mapped characters)"
