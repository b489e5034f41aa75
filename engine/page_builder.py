"""
Page Builder - Content Stream Authoring

Builds the drawable content of a single page: vector paths, colors, text
laid out through a font, and images. Operations go to the currently
selected content stream; resources go to the page's registry and the
owning document's object store.
"""

import logging
import uuid
from typing import List, Sequence, Tuple, TYPE_CHECKING, Union

import pikepdf
from pikepdf import Name

from constants.pdf_keys import (
    KEY_BITS_PER_COMPONENT, KEY_COLOR_SPACE, KEY_CONTENTS, KEY_FILTER, KEY_HEIGHT,
    KEY_RESOURCES, KEY_SUBTYPE, KEY_TYPE, KEY_WIDTH, VAL_DCT_DECODE, VAL_DEVICE_RGB,
    VAL_FLATE_DECODE, VAL_IMAGE, VAL_XOBJECT,
)
from constants.pdf_operators import (
    OP_BEGIN_TEXT, OP_CTM, OP_DO, OP_END_TEXT, OP_FILL_STROKE_EVEN_ODD, OP_LINE_TO,
    OP_MOVE_TEXT, OP_MOVE_TO, OP_RECTANGLE, OP_RESTORE_STATE, OP_SAVE_STATE,
    OP_SET_FONT, OP_SET_LINE_WIDTH, OP_SET_RGB_COLOR_FILL, OP_SET_RGB_COLOR_STROKE,
    OP_SHOW_TEXT, OP_STROKE,
)
from engine.page_merger import PageMerger
from extractors.image_decoders import ImageInput, get_jpeg_information, open_png, read_image_input
from models.pdf_types import DEFAULT_TEXT_COLOR, AddedFont, AddedImage, Letter
from processors.content_stream import ContentStream, Operation
from processors.resource_registry import ResourceRegistry, name_operand
from processors.text_layout import draw_letters, encode_text_runs
from utils.color_conversion import check_rgb_decimal, rgb_to_decimal
from utils.pdf_transforms import PdfPoint, PdfRectangle, TransformationMatrix, image_placement_matrix
from utils.validation import (
    IndexOutOfRangeError, UnknownFontError, validate_font_size, validate_text,
)

if TYPE_CHECKING:
    from engine.document_builder import FontStored, PdfDocumentBuilder

logger = logging.getLogger(__name__)

DEFAULT_LINE_WIDTH = 1.0
Color = Tuple[float, float, float]


class PdfPageBuilder:
    """
    Builder for one page of a PdfDocumentBuilder.

    A page owns one or more content streams; exactly one is current and
    receives every emitted operation. Created through
    ``PdfDocumentBuilder.add_page``.
    """

    def __init__(self, document: 'PdfDocumentBuilder', page: pikepdf.Page,
                 page_number: int, width: float, height: float):
        self.document = document
        self.page = page
        self.page_number = page_number
        self.page_size = PdfRectangle.from_coordinates(0, 0, width, height)

        self.resources = ResourceRegistry()
        self._streams: List[ContentStream] = [ContentStream()]
        self._current_index = 0
        self._text_sequence = 0

        self._fill_color: Color = DEFAULT_TEXT_COLOR
        self._color_stack: List[Color] = []

    # ------------------------------------------------------------------
    # Content streams
    # ------------------------------------------------------------------

    @property
    def content_streams(self) -> Sequence[ContentStream]:
        return tuple(self._streams)

    @property
    def current_stream(self) -> ContentStream:
        return self._streams[self._current_index]

    @property
    def current_stream_index(self) -> int:
        return self._current_index

    @property
    def operations(self) -> List[Operation]:
        """Every operation on the page in stream order."""
        return [operation for stream in self._streams for operation in stream]

    def new_content_stream_before(self) -> ContentStream:
        """Insert a new stream at ``max(current - 1, 0)`` and make it current."""
        index = max(self._current_index - 1, 0)
        self._streams.insert(index, ContentStream())
        self._current_index = index
        return self.current_stream

    def new_content_stream_after(self) -> ContentStream:
        """Insert a new stream right after the current one and make it current."""
        index = min(self._current_index + 1, len(self._streams))
        self._streams.insert(index, ContentStream())
        self._current_index = index
        return self.current_stream

    def select_content_stream(self, index: int) -> ContentStream:
        """
        Make an existing stream current.

        Raises:
            IndexOutOfRangeError: If ``index`` is not in ``[0, stream count)``
        """
        if not 0 <= index < len(self._streams):
            raise IndexOutOfRangeError(
                f"Content stream index {index} out of range for {len(self._streams)} streams"
            )
        self._current_index = index
        return self.current_stream

    def _emit(self, operator: bytes, *operands) -> None:
        self.current_stream.add(Operation(operator, tuple(operands)))

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def draw_line(self, start: PdfPoint, end: PdfPoint, line_width: float = DEFAULT_LINE_WIDTH) -> None:
        """Stroke a straight line; a non-default width is scoped to this line."""
        scoped = line_width != DEFAULT_LINE_WIDTH
        if scoped:
            self._emit(OP_SAVE_STATE)
            self._emit(OP_SET_LINE_WIDTH, line_width)

        self._emit(OP_MOVE_TO, start.x, start.y)
        self._emit(OP_LINE_TO, end.x, end.y)
        self._emit(OP_STROKE)

        if scoped:
            self._emit(OP_RESTORE_STATE)

    def draw_rectangle(self, position: PdfPoint, width: float, height: float,
                       line_width: float = DEFAULT_LINE_WIDTH, fill: bool = False) -> None:
        """
        Draw a rectangle from its bottom-left corner.

        Args:
            position: Bottom-left corner
            width: Rectangle width
            height: Rectangle height
            line_width: Stroke width, scoped to this rectangle
            fill: Fill with the current fill color (even-odd) as well as stroking
        """
        scoped = line_width != DEFAULT_LINE_WIDTH
        if scoped:
            self._emit(OP_SAVE_STATE)
            self._emit(OP_SET_LINE_WIDTH, line_width)

        self._emit(OP_RECTANGLE, position.x, position.y, width, height)
        self._emit(OP_FILL_STROKE_EVEN_ODD if fill else OP_STROKE)

        if scoped:
            self._emit(OP_RESTORE_STATE)

    # ------------------------------------------------------------------
    # Colors
    # ------------------------------------------------------------------

    def set_stroke_color(self, r: int, g: int, b: int) -> None:
        """Save the graphics state and set the stroke color from 0-255 channels."""
        self.set_stroke_color_exact(rgb_to_decimal(r), rgb_to_decimal(g), rgb_to_decimal(b))

    def set_stroke_color_exact(self, r: float, g: float, b: float) -> None:
        """
        Save the graphics state and set the stroke color from 0-1 channels.

        Raises:
            InvalidArgumentError: If a channel is outside 0-1
        """
        r = check_rgb_decimal(r, 'r')
        g = check_rgb_decimal(g, 'g')
        b = check_rgb_decimal(b, 'b')

        self._push_color_state()
        self._emit(OP_SAVE_STATE)
        self._emit(OP_SET_RGB_COLOR_STROKE, r, g, b)

    def set_text_and_fill_color(self, r: int, g: int, b: int) -> None:
        """Save the graphics state and set the fill (and text) color from 0-255 channels."""
        color = (rgb_to_decimal(r), rgb_to_decimal(g), rgb_to_decimal(b))

        self._push_color_state()
        self._emit(OP_SAVE_STATE)
        self._emit(OP_SET_RGB_COLOR_FILL, *color)
        self._fill_color = color

    def reset_color(self) -> None:
        """Restore the graphics state saved by the last color change."""
        if self._color_stack:
            self._fill_color = self._color_stack.pop()
        else:
            logger.warning(f"reset_color on page {self.page_number} without a matching color change")
        self._emit(OP_RESTORE_STATE)

    def _push_color_state(self) -> None:
        self._color_stack.append(self._fill_color)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def _resolve_font(self, font: AddedFont) -> 'FontStored':
        stored = self.document.get_font(font)
        if stored is None:
            raise UnknownFontError(f"Font {font!r} was not added to this document")
        return stored

    def _layout(self, text: str, font_size: float, position: PdfPoint,
                stored: 'FontStored') -> List[Letter]:
        self._text_sequence += 1
        return draw_letters(
            text,
            stored.program,
            font_size,
            TransformationMatrix.translation(position.x, position.y),
            self._text_sequence,
            stored.font_key.name,
            self._fill_color,
        )

    def measure_text(self, text: str, font_size: float, position: PdfPoint,
                     font: AddedFont) -> List[Letter]:
        """
        Lay out text without drawing it.

        Returns:
            Letters with the geometry ``add_text`` would produce

        Raises:
            UnknownFontError: If the font was not added to this document
            InvalidArgumentError: For missing text or a non-positive size
            GlyphNotFoundError: If the font lacks a glyph
        """
        text = validate_text(text)
        font_size = validate_font_size(font_size)
        stored = self._resolve_font(font)
        return self._layout(text, font_size, position, stored)

    def add_text(self, text: str, font_size: float, position: PdfPoint,
                 font: AddedFont) -> List[Letter]:
        """
        Draw text with its baseline starting at ``position``.

        Whitespace is not written to the show-text payloads; text after
        whitespace is repositioned so it lands where ``measure_text`` puts it.
        Nothing is emitted if any glyph is missing.

        Returns:
            The drawn letters
        """
        text = validate_text(text)
        font_size = validate_font_size(font_size)
        stored = self._resolve_font(font)

        letters = self._layout(text, font_size, position, stored)
        runs = encode_text_runs(text, stored.program, letters)

        self.resources.record_font(stored.font_key.name, stored.font_key.reference)

        self._emit(OP_BEGIN_TEXT)
        self._emit(OP_SET_FONT, name_operand(stored.font_key.name), font_size)
        self._emit(OP_MOVE_TEXT, position.x, position.y)

        line_start = position
        for run in runs:
            if run.start != line_start:
                self._emit(OP_MOVE_TEXT, run.start.x - line_start.x, run.start.y - line_start.y)
                line_start = run.start
            self._emit(OP_SHOW_TEXT, run.payload)

        self._emit(OP_END_TEXT)
        return letters

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def add_jpeg(self, source: Union[ImageInput, AddedImage], placement: PdfRectangle) -> AddedImage:
        """
        Embed a JPEG as-is (DCTDecode) and draw it into ``placement``.

        Passing an ``AddedImage`` reuses an image already stored in the document.
        """
        if isinstance(source, AddedImage):
            self.add_image(source, placement)
            return source

        data = read_image_input(source)
        info = get_jpeg_information(data)

        reference = self.document.add_image({
            KEY_TYPE: Name(VAL_XOBJECT),
            KEY_SUBTYPE: Name(VAL_IMAGE),
            KEY_WIDTH: info.width,
            KEY_HEIGHT: info.height,
            KEY_BITS_PER_COMPONENT: info.bits_per_component,
            KEY_COLOR_SPACE: Name(f"/{info.color_space.value}"),
            KEY_FILTER: Name(VAL_DCT_DECODE),
        }, data)

        image = AddedImage(id=uuid.uuid4(), reference=reference, width=info.width, height=info.height)
        self.add_image(image, placement)
        return image

    def add_png(self, source: ImageInput, placement: PdfRectangle) -> AddedImage:
        """Decode a PNG to 8-bit RGB, store it flate-compressed and draw it into ``placement``."""
        png = open_png(read_image_input(source))

        reference = self.document.add_image({
            KEY_TYPE: Name(VAL_XOBJECT),
            KEY_SUBTYPE: Name(VAL_IMAGE),
            KEY_WIDTH: png.width,
            KEY_HEIGHT: png.height,
            KEY_BITS_PER_COMPONENT: 8,
            KEY_COLOR_SPACE: Name(VAL_DEVICE_RGB),
            KEY_FILTER: Name(VAL_FLATE_DECODE),
        }, self.document.compress_bytes(png.to_rgb_bytes()))

        image = AddedImage(id=uuid.uuid4(), reference=reference, width=png.width, height=png.height)
        self.add_image(image, placement)
        return image

    def add_image(self, image: AddedImage, placement: PdfRectangle) -> str:
        """
        Draw a stored image into ``placement``.

        Returns:
            The XObject name allocated on this page
        """
        name = self.resources.register_xobject(image.reference)

        self._emit(OP_SAVE_STATE)
        self._emit(OP_CTM, *image_placement_matrix(placement))
        self._emit(OP_DO, name_operand(name))
        self._emit(OP_RESTORE_STATE)
        return name

    # ------------------------------------------------------------------
    # Merging and output
    # ------------------------------------------------------------------

    def copy_from(self, source_page: Union[pikepdf.Page, pikepdf.Dictionary]) -> List[Operation]:
        """
        Append another page's content, importing its resources.

        See ``PageMerger`` for how resource names are kept unique.

        Returns:
            The operations appended, after renaming
        """
        return PageMerger(self).merge(source_page)

    def write(self) -> None:
        """Write content streams and resources to the underlying pikepdf page."""
        streams = [self.document.make_content_stream(stream.to_bytes()) for stream in self._streams]
        page_obj = self.page.obj
        page_obj[KEY_CONTENTS] = streams[0] if len(streams) == 1 else pikepdf.Array(streams)
        page_obj[KEY_RESOURCES] = self.resources.to_dictionary()

    def __repr__(self) -> str:
        return (
            f"PdfPageBuilder(page {self.page_number}, {len(self._streams)} streams, "
            f"{len(self.operations)} operations)"
        )
