"""
pikepdf-backed raw image source.

Reads image XObject metadata, resolves its color space into the
color-space model and hands out decoded sample bytes for raster conversion.
"""

import io
import logging
from typing import Any, Dict, FrozenSet, Optional

import pikepdf
from pikepdf import Name
from PIL import Image

from constants.pdf_keys import (
    CMYK_COLOR_SPACE_NAMES, GRAY_COLOR_SPACE_NAMES, INDEXED_COLOR_SPACE_NAMES,
    KEY_BITS_PER_COMPONENT, KEY_COLOR_SPACE, KEY_FILTER, KEY_HEIGHT, KEY_IMAGE_MASK,
    KEY_N, KEY_RESOURCES, KEY_SUBTYPE, KEY_WIDTH, KEY_XOBJECT, RGB_COLOR_SPACE_NAMES,
    VAL_DCT_DECODE, VAL_ICC_BASED, VAL_IMAGE, VAL_PATTERN, VAL_SEPARATION,
)
from models.color_space import (
    DEVICE_CMYK, DEVICE_GRAY, DEVICE_RGB, PATTERN, UNSUPPORTED,
    ColorSpaceDetails, IndexedColorSpaceDetails, SeparationColorSpaceDetails,
)
from utils.validation import InvalidColorSpaceError

logger = logging.getLogger(__name__)

ICC_COMPONENT_SPACES = {1: DEVICE_GRAY, 3: DEVICE_RGB, 4: DEVICE_CMYK}


def _name_details(name: str) -> Optional[ColorSpaceDetails]:
    if name in GRAY_COLOR_SPACE_NAMES:
        return DEVICE_GRAY
    if name in RGB_COLOR_SPACE_NAMES:
        return DEVICE_RGB
    if name in CMYK_COLOR_SPACE_NAMES:
        return DEVICE_CMYK
    if name == VAL_PATTERN:
        return PATTERN
    return None


def _lookup_bytes(lookup: Any) -> bytes:
    if isinstance(lookup, pikepdf.Stream):
        return lookup.read_bytes()
    return bytes(lookup)


def parse_color_space_details(color_space: Any,
                              resources: Optional[pikepdf.Dictionary] = None,
                              _resolving: FrozenSet[str] = frozenset()) -> ColorSpaceDetails:
    """
    Resolve a PDF color space object into color-space details.

    Handles device names and their abbreviations, calibrated spaces,
    ICCBased (by component count), Indexed, Separation and Pattern. Named
    spaces are looked up in ``resources``' ColorSpace dictionary. Spaces that
    refer back to themselves, directly or through other named spaces, are
    Unsupported, as is anything else malformed.

    Args:
        color_space: pikepdf Name or Array
        resources: Resource dictionary for named color spaces

    Returns:
        Color space details
    """
    if isinstance(color_space, Name):
        name = str(color_space)
        details = _name_details(name)
        if details is not None:
            return details

        if name in _resolving:
            logger.warning(f"Color space {name} refers to itself, treated as unsupported")
            return UNSUPPORTED

        named = resources.get(KEY_COLOR_SPACE) if resources is not None else None
        if named is not None and name in named:
            return parse_color_space_details(named[name], resources, _resolving | {name})

        logger.debug(f"Unsupported color space name {name}")
        return UNSUPPORTED

    if not isinstance(color_space, pikepdf.Array) or len(color_space) == 0:
        return UNSUPPORTED

    if color_space.is_indirect:
        marker = str(color_space.objgen)
        if marker in _resolving:
            logger.warning(f"Color space object {marker} refers to itself, treated as unsupported")
            return UNSUPPORTED
        _resolving = _resolving | {marker}

    if len(color_space) == 1:
        return parse_color_space_details(color_space[0], resources, _resolving)

    family = str(color_space[0])

    try:
        if family in GRAY_COLOR_SPACE_NAMES | RGB_COLOR_SPACE_NAMES:
            return _name_details(family)

        if family == VAL_ICC_BASED:
            components = int(color_space[1].get(KEY_N, 3))
            return ICC_COMPONENT_SPACES.get(components, UNSUPPORTED)

        if family in INDEXED_COLOR_SPACE_NAMES:
            base = parse_color_space_details(color_space[1], resources, _resolving)
            return IndexedColorSpaceDetails(
                base_color_space_details=base,
                hi_val=int(color_space[2]),
                color_table=_lookup_bytes(color_space[3]),
            )

        if family == VAL_SEPARATION:
            return SeparationColorSpaceDetails(
                name=str(color_space[1]).lstrip('/'),
                alternate_color_space_details=parse_color_space_details(color_space[2], resources, _resolving),
                tint_function=color_space[3],
            )

        if family == VAL_PATTERN:
            return PATTERN

    except (InvalidColorSpaceError, IndexError, TypeError, ValueError, pikepdf.PdfError) as e:
        logger.warning(f"Malformed {family} color space treated as unsupported: {e}")
        return UNSUPPORTED

    logger.debug(f"Unsupported color space family {family}")
    return UNSUPPORTED


class PdfImage:
    """Image XObject from a pikepdf document, usable as a raw image source."""

    def __init__(self, stream: pikepdf.Stream, resources: Optional[pikepdf.Dictionary] = None):
        self.stream = stream
        self.width_in_samples = int(stream.get(KEY_WIDTH, 0))
        self.height_in_samples = int(stream.get(KEY_HEIGHT, 0))

        self.is_image_mask = bool(stream.get(KEY_IMAGE_MASK, False))
        if self.is_image_mask:
            self.bits_per_component = 1
            self.color_space_details: Optional[ColorSpaceDetails] = DEVICE_GRAY
        else:
            self.bits_per_component = int(stream.get(KEY_BITS_PER_COMPONENT, 8))
            color_space = stream.get(KEY_COLOR_SPACE)
            self.color_space_details = (
                parse_color_space_details(color_space, resources) if color_space is not None else None
            )

    @property
    def filters(self) -> list:
        filters = self.stream.get(KEY_FILTER)
        if filters is None:
            return []
        if isinstance(filters, pikepdf.Array):
            return [str(f) for f in filters]
        return [str(filters)]

    def try_get_bytes(self) -> Optional[bytes]:
        """
        Decoded sample bytes.

        Stream filters are undone by pikepdf; a lone DCTDecode filter is
        decoded with Pillow. Returns None if the data cannot be decoded.
        """
        try:
            if VAL_DCT_DECODE in self.filters:
                if self.filters != [VAL_DCT_DECODE]:
                    logger.debug(f"Cannot decode filter chain {self.filters}")
                    return None
                return self._decode_dct()
            return self.stream.read_bytes()
        except (pikepdf.PdfError, OSError, ValueError) as e:
            logger.warning(f"Could not decode image stream: {e}")
            return None

    def _decode_dct(self) -> bytes:
        with Image.open(io.BytesIO(self.stream.read_raw_bytes())) as image:
            if image.mode not in ('L', 'RGB', 'CMYK'):
                image = image.convert('RGB')
            return image.tobytes()

    def __repr__(self) -> str:
        space = self.color_space_details.type.value if self.color_space_details else "None"
        return f"PdfImage({self.width_in_samples}x{self.height_in_samples}, {space}, {self.bits_per_component}bpc)"


def extract_page_images(page: pikepdf.Page) -> Dict[str, PdfImage]:
    """
    Collect a page's image XObjects by resource name (without the slash).

    Form XObjects are skipped, as are images whose dictionary cannot be read.
    """
    page_obj = page.obj if isinstance(page, pikepdf.Page) else page
    resources = page_obj.get(KEY_RESOURCES)
    if resources is None:
        return {}

    xobjects = resources.get(KEY_XOBJECT)
    if xobjects is None:
        return {}

    images: Dict[str, PdfImage] = {}
    for key, xobject in xobjects.items():
        if isinstance(xobject, pikepdf.Stream) and xobject.get(KEY_SUBTYPE) == Name(VAL_IMAGE):
            try:
                images[key.lstrip('/')] = PdfImage(xobject, resources)
            except (TypeError, ValueError, pikepdf.PdfError) as e:
                logger.warning(f"Skipping malformed image {key}: {e}")

    logger.debug(f"Found {len(images)} images on page")
    return images
