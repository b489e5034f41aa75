"""
PDF Document Builder - Resource Store and Coordinator

Owns the output pikepdf document, the font store and the pages being
built. Pages register resources through their own registries but every
stored object (fonts, images, copied tokens) lives here.

Usage:
    >>> from engine.document_builder import PdfDocumentBuilder
    >>>
    >>> with PdfDocumentBuilder() as builder:
    ...     font = builder.add_truetype_font(font_bytes)
    ...     page = builder.add_page()
    ...     page.add_text("Hello", 12, PdfPoint(25, 700), font)
    ...     pdf_bytes = builder.build()
"""

import io
import logging
import uuid
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

import pikepdf
from pikepdf import Name

from constants.pdf_keys import KEY_FONT_FILE_2, VAL_FLATE_DECODE, VAL_WIN_ANSI_ENCODING
from engine.base_processor import ProcessorRegistry
from engine.config import BuilderConfig, ImageProcessorOptions, PageSize
from engine.image_processor import ImageProcessor
from engine.page_builder import PdfPageBuilder
from extractors.font_programs import FIRST_CHAR, LAST_CHAR, TrueTypeFontProgram
from models.capabilities import WritingFont
from models.pdf_types import AddedFont
from utils.validation import InvalidArgumentError

logger = logging.getLogger(__name__)

FONT_NAME_PREFIX = "F"
NONSYMBOLIC_FONT_FLAG = 32
DEFAULT_STEM_V = 80


@dataclass(frozen=True)
class FontStored:
    """A font program together with the handle pages use to reference it."""
    program: WritingFont
    font_key: AddedFont


class PdfDocumentBuilder:
    """
    Builder for a new PDF document.

    Example:
        >>> builder = PdfDocumentBuilder(BuilderConfig(default_page_size=PageSize.LETTER))
        >>> page = builder.add_page()
        >>> page.draw_line(PdfPoint(10, 10), PdfPoint(100, 10))
        >>> data = builder.build()
    """

    def __init__(self, config: Optional[BuilderConfig] = None):
        """
        Args:
            config: Builder configuration (uses defaults if None)

        Raises:
            InvalidArgumentError: If the configuration is invalid
        """
        self.config = config or BuilderConfig.default()
        if not self.config.validate():
            raise InvalidArgumentError("Invalid builder configuration")

        self.pdf = pikepdf.new()
        self._pages: List[PdfPageBuilder] = []
        self._fonts: Dict[uuid.UUID, FontStored] = {}
        self._font_id = 1
        self._reserved_font_names: Set[str] = set()

        self._processors = ProcessorRegistry()
        image_options = ImageProcessorOptions.from_dict(self.config.image_processor_options or {})
        self._processors.register("image", ImageProcessor(image_options))
        self._processors.initialize_all()

        logger.debug(f"PdfDocumentBuilder created with {self.config!r}")

    def __enter__(self) -> 'PdfDocumentBuilder':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Release processors and the underlying pikepdf document. Idempotent."""
        self._processors.cleanup_all()
        if self.pdf is not None:
            self.pdf.close()
            self.pdf = None
            logger.debug("PdfDocumentBuilder closed")

    @property
    def image_processor(self) -> ImageProcessor:
        return self._processors.get("image")

    @property
    def pages(self) -> List[PdfPageBuilder]:
        return list(self._pages)

    @property
    def fonts(self) -> Dict[uuid.UUID, FontStored]:
        return dict(self._fonts)

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def add_page(self, width: Optional[float] = None, height: Optional[float] = None,
                 page_size: Optional[PageSize] = None, is_portrait: bool = True) -> PdfPageBuilder:
        """
        Append a blank page.

        Args:
            width: Page width in points
            height: Page height in points
            page_size: Standard size, used when width/height are not given
            is_portrait: Orientation for ``page_size``

        Returns:
            Builder for the new page
        """
        if width is None or height is None:
            if page_size is not None:
                width, height = page_size.to_dimensions(is_portrait)
            else:
                width, height = self.config.default_page_dimensions

        if width <= 0 or height <= 0:
            raise InvalidArgumentError(f"Page dimensions must be positive, got {width}x{height}")

        page = self.pdf.add_blank_page(page_size=(width, height))
        builder = PdfPageBuilder(self, page, len(self._pages) + 1, width, height)
        self._pages.append(builder)
        logger.debug(f"Added page {builder.page_number} ({width}x{height})")
        return builder

    # ------------------------------------------------------------------
    # Fonts
    # ------------------------------------------------------------------

    def allocate_font_name(self) -> str:
        """Take the next unused ``F<n>`` name from the document counter."""
        used = self._reserved_font_names | {f.font_key.name for f in self._fonts.values()}
        while True:
            name = f"{FONT_NAME_PREFIX}{self._font_id}"
            self._font_id += 1
            if name not in used:
                return name

    def reserve_font_name(self, name: str) -> None:
        """Keep a page-local font name (from a merged page) out of future allocations."""
        self._reserved_font_names.add(name)

    def add_font(self, program: WritingFont,
                 font_dictionary: Optional[pikepdf.Dictionary] = None) -> AddedFont:
        """
        Store a font and return the handle used to draw text with it.

        Args:
            program: Font program used for layout and encoding
            font_dictionary: PDF font dictionary; a non-embedded simple font
                referring to the program's name is used if omitted

        Returns:
            Font handle with its allocated resource name
        """
        if font_dictionary is None:
            font_dictionary = pikepdf.Dictionary(
                Type=Name.Font,
                Subtype=Name.Type1,
                BaseFont=Name(f"/{program.name}"),
                Encoding=Name(VAL_WIN_ANSI_ENCODING),
            )

        reference = self.pdf.make_indirect(font_dictionary)
        added = AddedFont(id=uuid.uuid4(), name=self.allocate_font_name(), reference=reference)
        self._fonts[added.id] = FontStored(program=program, font_key=added)

        logger.debug(f"Added font {program.name} as {added.name}")
        return added

    def add_truetype_font(self, data: Union[bytes, io.BufferedIOBase]) -> AddedFont:
        """
        Embed a TrueType font as a simple WinAnsi-encoded font.

        Raises:
            InvalidArgumentError: If the data is not a usable TrueType font
        """
        if hasattr(data, 'read'):
            data = data.read()

        program = TrueTypeFontProgram(data)
        metrics = program.descriptor_metrics()

        font_file = self.make_compressed_stream(program.data)
        font_file.Length1 = len(program.data)

        descriptor = self.pdf.make_indirect(pikepdf.Dictionary(
            Type=Name.FontDescriptor,
            FontName=Name(f"/{program.name}"),
            Flags=NONSYMBOLIC_FONT_FLAG,
            FontBBox=pikepdf.Array(metrics['FontBBox']),
            ItalicAngle=metrics['ItalicAngle'],
            Ascent=metrics['Ascent'],
            Descent=metrics['Descent'],
            CapHeight=metrics['CapHeight'],
            StemV=DEFAULT_STEM_V,
        ))
        descriptor[KEY_FONT_FILE_2] = font_file

        font_dictionary = pikepdf.Dictionary(
            Type=Name.Font,
            Subtype=Name.TrueType,
            BaseFont=Name(f"/{program.name}"),
            FirstChar=FIRST_CHAR,
            LastChar=LAST_CHAR,
            Widths=pikepdf.Array(program.widths()),
            Encoding=Name(VAL_WIN_ANSI_ENCODING),
            FontDescriptor=descriptor,
        )
        return self.add_font(program, font_dictionary)

    def get_font(self, font: AddedFont) -> Optional[FontStored]:
        """Stored font for a handle issued by this document, or None."""
        stored = self._fonts.get(font.id) if font is not None else None
        if stored is None or stored.font_key != font:
            return None
        return stored

    def find_font_by_name(self, name: str) -> Optional[FontStored]:
        for stored in self._fonts.values():
            if stored.font_key.name == name:
                return stored
        return None

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    def add_image(self, descriptor: Dict[str, Any], data: bytes) -> pikepdf.Stream:
        """
        Store an image XObject.

        Args:
            descriptor: Stream dictionary entries keyed by PDF name ("/Width", ...)
            data: Stream data, already encoded per the descriptor's /Filter

        Returns:
            Reference to the stored stream
        """
        stream = self.pdf.make_stream(bytes(data))
        for key, value in descriptor.items():
            stream[key] = value
        logger.debug(f"Stored image XObject ({len(data)} bytes)")
        return stream

    def copy_token(self, token: Any) -> Any:
        """
        Deep-copy a token from another document into this one.

        Indirect objects are copied with ``Pdf.copy_foreign``, which keeps
        shared objects shared; direct containers are rebuilt recursively.
        Tokens already owned by this document are returned as-is.
        """
        if not isinstance(token, pikepdf.Object):
            return token

        if token.is_indirect:
            if token.is_owned_by(self.pdf):
                return token
            return self.pdf.copy_foreign(token)

        if isinstance(token, pikepdf.Dictionary):
            return pikepdf.Dictionary({key: self.copy_token(value) for key, value in token.items()})

        if isinstance(token, pikepdf.Array):
            return pikepdf.Array([self.copy_token(value) for value in token])

        return token

    def compress_bytes(self, data: bytes) -> bytes:
        return zlib.compress(data, self.config.compression_level)

    def make_compressed_stream(self, data: bytes) -> pikepdf.Stream:
        stream = self.pdf.make_stream(self.compress_bytes(data))
        stream.Filter = Name(VAL_FLATE_DECODE)
        return stream

    def make_content_stream(self, data: bytes) -> pikepdf.Stream:
        if self.config.compress_content_streams:
            return self.make_compressed_stream(data)
        return self.pdf.make_stream(data)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def build(self) -> bytes:
        """Write every page's content and resources and serialize the document."""
        for page in self._pages:
            page.write()

        buffer = io.BytesIO()
        self.pdf.save(buffer, compress_streams=self.config.compress_content_streams)
        logger.info(f"Built PDF with {len(self._pages)} pages, {buffer.tell()} bytes")
        return buffer.getvalue()

    def save(self, path: Union[str, Path]) -> None:
        Path(path).write_bytes(self.build())

    def __repr__(self) -> str:
        return f"PdfDocumentBuilder({len(self._pages)} pages, {len(self._fonts)} fonts)"
