from __future__ import annotations

import io
import string
from typing import Callable, Dict, Optional

import pikepdf
import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen
from PIL import Image

from engine.document_builder import PdfDocumentBuilder
from utils.pdf_transforms import PdfRectangle, TransformationMatrix


class FakeFont:
    """Fixed-metric font: 500 units per glyph, 250 for spaces, 1000 units per em."""

    name = "FakeSans"

    def get_font_matrix(self) -> TransformationMatrix:
        return TransformationMatrix.scaling(0.001, 0.001)

    def _known(self, character: str) -> bool:
        return character in string.printable

    def try_get_bounding_box(self, character: str) -> Optional[PdfRectangle]:
        if not self._known(character):
            return None
        if character.isspace():
            return PdfRectangle.from_coordinates(0, 0, 0, 0)
        return PdfRectangle.from_coordinates(0, 0, 500, 700)

    def try_get_advance_width(self, character: str) -> Optional[float]:
        if not self._known(character):
            return None
        return 250.0 if character.isspace() else 500.0

    def get_value_for_character(self, character: str) -> int:
        return ord(character)


def make_rgb_image(width: int, height: int, color=(255, 0, 0), mode: str = "RGB") -> Image.Image:
    return Image.new(mode, (width, height), color)


def encode_image(image: Image.Image, image_format: str) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


def _box_glyph():
    pen = TTGlyphPen(None)
    pen.moveTo((50, 0))
    pen.lineTo((50, 700))
    pen.lineTo((550, 700))
    pen.lineTo((550, 0))
    pen.closePath()
    return pen.glyph()


def build_truetype_font() -> bytes:
    builder = FontBuilder(1000, isTTF=True)
    builder.setupGlyphOrder([".notdef", "space", "A", "B"])
    builder.setupCharacterMap({32: "space", 65: "A", 66: "B"})
    builder.setupGlyf({
        ".notdef": _box_glyph(),
        "space": TTGlyphPen(None).glyph(),
        "A": _box_glyph(),
        "B": _box_glyph(),
    })
    builder.setupHorizontalMetrics({
        ".notdef": (600, 50),
        "space": (250, 0),
        "A": (600, 50),
        "B": (600, 50),
    })
    builder.setupHorizontalHeader(ascent=800, descent=-200)
    builder.setupNameTable({
        "familyName": "Test Sans",
        "styleName": "Regular",
        "psName": "TestSans-Regular",
    })
    builder.setupOS2(sTypoAscender=800, usWinAscent=800, usWinDescent=200)
    builder.setupPost()
    builder.setupMaxp()

    buffer = io.BytesIO()
    builder.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def builder():
    document = PdfDocumentBuilder()
    yield document
    document.close()


@pytest.fixture
def page(builder):
    return builder.add_page(width=600, height=800)


@pytest.fixture
def fake_font():
    return FakeFont()


@pytest.fixture
def font(builder, fake_font):
    return builder.add_font(fake_font)


@pytest.fixture
def jpeg_bytes() -> bytes:
    return encode_image(make_rgb_image(4, 2), "JPEG")


@pytest.fixture
def png_bytes() -> bytes:
    return encode_image(make_rgb_image(3, 2, color=(0, 0, 255)), "PNG")


@pytest.fixture(scope="session")
def truetype_bytes() -> bytes:
    return build_truetype_font()


@pytest.fixture
def source_pdf():
    pdf = pikepdf.new()
    yield pdf
    pdf.close()


@pytest.fixture
def make_source_page(source_pdf) -> Callable[..., pikepdf.Page]:
    """Add a page to ``source_pdf`` with the given content and resources.

    ``resources=None`` leaves the page without a /Resources entry.
    """

    def _make(content: bytes, resources: Optional[Dict] = None) -> pikepdf.Page:
        page = source_pdf.add_blank_page(page_size=(200, 200))
        page.obj.Contents = source_pdf.make_stream(content)
        if resources is None:
            if '/Resources' in page.obj:
                del page.obj['/Resources']
        else:
            page.obj.Resources = pikepdf.Dictionary(resources)
        return page

    return _make


@pytest.fixture
def source_font(source_pdf):
    return source_pdf.make_indirect(pikepdf.Dictionary(
        Type=pikepdf.Name.Font,
        Subtype=pikepdf.Name.Type1,
        BaseFont=pikepdf.Name.Helvetica,
    ))


@pytest.fixture
def source_image(source_pdf):
    stream = source_pdf.make_stream(bytes([0, 255, 0]))
    stream.Type = pikepdf.Name.XObject
    stream.Subtype = pikepdf.Name.Image
    stream.Width = 1
    stream.Height = 1
    stream.ColorSpace = pikepdf.Name.DeviceRGB
    stream.BitsPerComponent = 8
    return stream
