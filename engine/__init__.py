"""
PDF Building Engine

Core engine module for assembling PDF pages.
Contains the PdfDocumentBuilder coordinator, the page builder and merger,
and the raster converter.
"""

__version__ = "2.0.0"

from engine.config import BuilderConfig, ProcessorOptions, ImageProcessorOptions, PageSize
from engine.base_processor import BaseProcessor, ProcessorRegistry
from engine.image_processor import ImageProcessor
from engine.page_merger import PageMerger
from engine.page_builder import PdfPageBuilder
from engine.document_builder import PdfDocumentBuilder, FontStored

__all__ = [
    'PdfDocumentBuilder',
    'FontStored',
    'PdfPageBuilder',
    'PageMerger',
    'BuilderConfig',
    'ProcessorOptions',
    'PageSize',
    'BaseProcessor',
    'ProcessorRegistry',
    'ImageProcessor',
    'ImageProcessorOptions',
]
