"""
Text layout for the page builder.

Lays out a string glyph by glyph through the font, rendering and text
matrices, producing positioned letters and the show-text payloads that
draw them.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from models.capabilities import WritingFont
from models.pdf_types import DEFAULT_TEXT_COLOR, Letter
from utils.pdf_transforms import PdfPoint, PdfRectangle, TransformationMatrix
from utils.validation import GlyphNotFoundError

logger = logging.getLogger(__name__)

HORIZONTAL_SCALING = 1.0
TEXT_RISE = 0.0


@dataclass(frozen=True)
class TextRun:
    """A maximal run of non-whitespace letters and its encoded payload."""
    payload: bytes
    start: PdfPoint


def rendering_matrix(font_size: float) -> TransformationMatrix:
    """Text space scaling for the font size, horizontal scaling and rise."""
    return TransformationMatrix.from_values(
        font_size * HORIZONTAL_SCALING, 0,
        0, font_size,
        0, TEXT_RISE,
    )


def draw_letters(
    text: str,
    font: WritingFont,
    font_size: float,
    text_matrix: TransformationMatrix,
    text_sequence: int,
    font_name: str,
    color: Tuple[float, float, float] = DEFAULT_TEXT_COLOR,
) -> List[Letter]:
    """
    Lay out ``text`` starting at ``text_matrix``.

    Args:
        text: Characters to lay out
        font: Font program providing glyph boxes and advances
        font_size: Size in text space units
        text_matrix: Initial text matrix, typically a translation to the start point
        text_sequence: Identifier shared by every letter of this call
        font_name: Resource name recorded on each letter
        color: Current fill color

    Returns:
        One letter per character, in order

    Raises:
        GlyphNotFoundError: If any character lacks a glyph box or advance width.
            Raised before any letter is returned.
    """
    font_matrix = font.get_font_matrix()
    render_matrix = rendering_matrix(font_size)

    letters: List[Letter] = []
    width = 0.0

    for character in text:
        glyph_box = font.try_get_bounding_box(character)
        if glyph_box is None:
            raise GlyphNotFoundError(f"Font {font.name} has no bounding box for {character!r}")

        advance = font.try_get_advance_width(character)
        if advance is None:
            raise GlyphNotFoundError(f"Font {font.name} has no advance width for {character!r}")

        # glyph space -> text space -> rendering -> user space
        to_page = font_matrix.multiply(render_matrix).multiply(text_matrix)

        glyph_rectangle = to_page.transform_rectangle(glyph_box)
        advance_rectangle = to_page.transform_rectangle(
            PdfRectangle.from_coordinates(0, 0, advance, 0)
        )

        letters.append(Letter(
            value=character,
            glyph_rectangle=glyph_rectangle,
            start_base_line=advance_rectangle.bottom_left,
            end_base_line=advance_rectangle.bottom_right,
            width=width,
            font_size=font_size,
            font_name=font_name,
            color=color,
            point_size=font_size,
            text_sequence=text_sequence,
        ))

        tx = advance_rectangle.width
        width += tx
        text_matrix = TransformationMatrix.translation(tx, 0).multiply(text_matrix)

    return letters


def encode_text_runs(text: str, font: WritingFont, letters: List[Letter]) -> List[TextRun]:
    """
    Split laid-out text into show-text payloads.

    Whitespace ends the current run and is not encoded; each run remembers
    where its first letter starts so callers can reposition for it.
    """
    runs: List[TextRun] = []
    payload = bytearray()
    start = None

    for character, letter in zip(text, letters):
        if character.isspace():
            if payload:
                runs.append(TextRun(bytes(payload), start))
            payload = bytearray()
            start = None
            continue

        if start is None:
            start = letter.start_base_line
        payload.append(font.get_value_for_character(character))

    if payload:
        runs.append(TextRun(bytes(payload), start))

    return runs
