"""Image Processor for PdfDocumentBuilder

Converts raw PDF image samples into a canonical 8-bit RGB raster and
encodes it as PNG. Conversion is best effort: anything that cannot be
represented returns None instead of raising.
"""

import io
import logging
from typing import Dict, Optional

import numpy as np
import pikepdf
from PIL import Image

from engine.base_processor import BaseProcessor
from engine.config import ImageProcessorOptions
from extractors.pdf_image import extract_page_images
from models.capabilities import PdfImageSource
from models.color_space import DEVICE_COLOR_SPACES, ColorSpace, IndexedColorSpaceDetails, component_count
from utils.color_conversion import cmyk_to_rgb, expand_indexed_bytes, unpack_samples

logger = logging.getLogger(__name__)


class ImageProcessor(BaseProcessor):
    """
    Canonical raster converter.

    Handles gray, RGB and CMYK samples, including indexed images whose
    palette resolves to one of those.
    """

    def __init__(self, options: Optional[ImageProcessorOptions] = None):
        """
        Initialize image processor.

        Args:
            options: ImageProcessorOptions or None for defaults
        """
        super().__init__()
        self.options = options or ImageProcessorOptions()

    def _ready(self) -> bool:
        if not self.validate_state():
            raise RuntimeError("ImageProcessor not initialized. Use it through PdfDocumentBuilder or call initialize().")
        if not self.options.enabled:
            logger.debug("Image processing disabled, skipping")
            return False
        return True

    def try_generate_raster(self, image: PdfImageSource) -> Optional[Image.Image]:
        """
        Convert an image's samples to an RGB raster.

        Args:
            image: Raw image source

        Returns:
            PIL RGB image, or None if the image cannot be converted

        Raises:
            RuntimeError: If the processor is not initialized
        """
        if not self._ready():
            return None

        details = image.color_space_details
        if details is None or details.type == ColorSpace.UNSUPPORTED:
            logger.debug("Image has no supported color space details")
            return None

        if details.base_type not in DEVICE_COLOR_SPACES:
            logger.debug(f"Cannot rasterize images in {details.base_type.value}")
            return None
        multiplier = component_count(details.base_type)

        raw = image.try_get_bytes()
        if raw is None:
            logger.debug("Image bytes could not be decoded")
            return None

        width = int(image.width_in_samples)
        height = int(image.height_in_samples)

        try:
            is_indexed = isinstance(details, IndexedColorSpaceDetails)
            samples = unpack_samples(
                raw, width, height,
                components=1 if is_indexed else multiplier,
                bits_per_component=int(image.bits_per_component),
                scale_to_byte=not is_indexed,
            )
            expanded = expand_indexed_bytes(details, samples)

            expected = width * height * multiplier
            if len(expanded) != expected:
                logger.warning(
                    f"Image data size mismatch: expected {expected} bytes for "
                    f"{width}x{height} {details.base_type.value}, got {len(expanded)}"
                )
                return None

            pixels = np.frombuffer(expanded, dtype=np.uint8).reshape(height, width, multiplier)

            if multiplier == 4:
                rgb = cmyk_to_rgb(pixels)
            elif multiplier == 1:
                rgb = np.repeat(pixels, 3, axis=2)
            else:
                rgb = pixels

            return Image.fromarray(np.ascontiguousarray(rgb, dtype=np.uint8))

        except Exception as e:
            logger.warning(f"Failed to convert image to RGB raster: {e}")
            return None

    def try_generate_png(self, image: PdfImageSource) -> Optional[bytes]:
        """
        Convert an image's samples to PNG bytes.

        Returns:
            PNG bytes, or None if the image cannot be converted
        """
        raster = self.try_generate_raster(image)
        if raster is None:
            return None

        try:
            buffer = io.BytesIO()
            raster.save(
                buffer,
                format='PNG',
                compress_level=self.options.png_compress_level,
                optimize=self.options.optimize_png,
            )
            return buffer.getvalue()
        except Exception as e:
            logger.warning(f"Failed to encode PNG: {e}")
            return None

    def export_page_images(self, page: pikepdf.Page) -> Dict[str, bytes]:
        """
        Convert every image XObject on a page to PNG.

        Args:
            page: Page from any pikepdf document

        Returns:
            PNG bytes keyed by XObject name; images that cannot be converted are omitted
        """
        if not self._ready():
            return {}

        exported: Dict[str, bytes] = {}
        for name, image in extract_page_images(page).items():
            png = self.try_generate_png(image)
            if png is None:
                logger.info(f"Skipping image {name}: {image!r} cannot be converted")
                continue
            exported[name] = png

        logger.debug(f"Exported {len(exported)} images as PNG")
        return exported
