"""
Page Content Components

Stateful building blocks for page content:

- ContentStream / Operation: ordered content stream operations
- ResourceRegistry: per-page resource names and image name allocation
- Text layout: glyph-by-glyph placement through font, rendering and text matrices

These differ from utils/ which contains pure, stateless functions.
"""

from processors.content_stream import ContentStream, Operation
from processors.resource_registry import ResourceRegistry
from processors.text_layout import TextRun, draw_letters, encode_text_runs

__version__ = "2.0.0"
__all__ = [
    'ContentStream',
    'Operation',
    'ResourceRegistry',
    'TextRun',
    'draw_letters',
    'encode_text_runs',
]
