"""
Configuration system for the PDF document builder.

Provides structured configuration using dataclasses with clear defaults,
type safety, and dict-based round-tripping.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional, Dict, Any, Tuple, Literal
import logging

from rich.console import Console

from utils import logging_config

logger = logging.getLogger(__name__)

ResourceCollisionPolicy = Literal["fail", "merge"]
RESOURCE_COLLISION_POLICIES = ("fail", "merge")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class PageSize(Enum):
    """Standard page sizes in points, portrait orientation (width, height)."""
    A0 = (2384.0, 3370.0)
    A1 = (1684.0, 2384.0)
    A2 = (1191.0, 1684.0)
    A3 = (842.0, 1191.0)
    A4 = (595.0, 842.0)
    A5 = (420.0, 595.0)
    A6 = (298.0, 420.0)
    LETTER = (612.0, 792.0)
    LEGAL = (612.0, 1008.0)

    def to_dimensions(self, is_portrait: bool = True) -> Tuple[float, float]:
        """
        Get (width, height) for the requested orientation.

        Example:
            >>> PageSize.A4.to_dimensions(is_portrait=False)
            (842.0, 595.0)
        """
        width, height = self.value
        return (width, height) if is_portrait else (height, width)


def _filter_known_keys(cls, config: Dict[str, Any]) -> Dict[str, Any]:
    valid_keys = {f.name for f in fields(cls)}
    filtered_config = {}
    for key, value in config.items():
        if key in valid_keys:
            filtered_config[key] = value
        else:
            logger.warning(f"Unknown config key '{key}' will be ignored")
    return filtered_config


@dataclass
class ProcessorOptions:
    """
    Base class for processor-specific configuration options.

    All processor option classes should inherit from this to provide
    consistent interface and common functionality.
    """
    enabled: bool = True

    def validate(self) -> bool:
        """
        Validate configuration options.

        Returns:
            True if configuration is valid, False otherwise
        """
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {'enabled': self.enabled}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """Create from dictionary, ignoring unknown keys with a warning."""
        return cls(**_filter_known_keys(cls, data))


@dataclass
class ImageProcessorOptions(ProcessorOptions):
    """
    Configuration options for canonical raster conversion.

    Controls how converted RGB rasters are encoded to PNG.
    """
    png_compress_level: int = 6  # zlib level used by the PNG encoder (0-9)
    optimize_png: bool = False  # Let the encoder search for smaller output

    def validate(self) -> bool:
        if not 0 <= self.png_compress_level <= 9:
            logger.error("png_compress_level must be between 0 and 9")
            return False
        return super().validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        base_dict = super().to_dict()
        base_dict.update({
            'png_compress_level': self.png_compress_level,
            'optimize_png': self.optimize_png,
        })
        return base_dict


@dataclass
class BuilderConfig:
    """
    Central configuration for PdfDocumentBuilder.

    Example:
        >>> config = BuilderConfig(default_page_size=PageSize.LETTER)
        >>> builder = PdfDocumentBuilder(config=config)
    """

    # Pages
    default_page_size: PageSize = PageSize.A4
    default_portrait: bool = True

    # Output
    compress_content_streams: bool = True
    compression_level: int = 6

    # Page merging: "fail" raises on clashing non-font, non-XObject
    # categories, "merge" combines their entries by name
    resource_collision_policy: ResourceCollisionPolicy = "fail"

    # Processor-specific options (as dictionaries for flexibility)
    image_processor_options: Optional[Dict[str, Any]] = None

    # Logging
    log_level: str = "INFO"
    enable_debug_logging: bool = False

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True if all values are valid, False otherwise
        """
        if not 0 <= self.compression_level <= 9:
            logger.error("compression_level must be between 0 and 9")
            return False

        if self.resource_collision_policy not in RESOURCE_COLLISION_POLICIES:
            logger.error(
                f"resource_collision_policy must be one of {RESOURCE_COLLISION_POLICIES}, "
                f"got '{self.resource_collision_policy}'"
            )
            return False

        if self.log_level.upper() not in LOG_LEVELS:
            logger.error(f"log_level must be one of {LOG_LEVELS}")
            return False

        if self.image_processor_options is not None:
            if not ImageProcessorOptions.from_dict(self.image_processor_options).validate():
                return False

        return True

    @property
    def default_page_dimensions(self) -> Tuple[float, float]:
        return self.default_page_size.to_dimensions(self.default_portrait)

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.enable_debug_logging else self.log_level.upper()

    def configure_logging(self, console: Optional[Console] = None) -> Console:
        """
        Install Rich console logging at this configuration's effective level.

        Intended for applications that embed the builder; the builder itself
        never touches global logging state.

        Returns:
            The console the handler writes to
        """
        return logging_config.configure_logging(self.effective_log_level, console=console)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Useful for serialization, logging, and debugging.
        """
        return {
            'default_page_size': self.default_page_size.name,
            'default_portrait': self.default_portrait,
            'compress_content_streams': self.compress_content_streams,
            'compression_level': self.compression_level,
            'resource_collision_policy': self.resource_collision_policy,
            'image_processor_options': self.image_processor_options,
            'log_level': self.log_level,
            'enable_debug_logging': self.enable_debug_logging,
        }

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'BuilderConfig':
        """
        Create BuilderConfig from dictionary.

        Unknown keys are ignored with a warning. Page sizes may be given by
        name ("A4", "letter").

        Args:
            config: Dictionary of configuration values

        Returns:
            BuilderConfig instance
        """
        filtered_config = _filter_known_keys(cls, config)

        page_size = filtered_config.get('default_page_size')
        if isinstance(page_size, str):
            try:
                filtered_config['default_page_size'] = PageSize[page_size.upper()]
            except KeyError:
                raise ValueError(f"Unknown page size: {page_size}")

        return cls(**filtered_config)

    @classmethod
    def default(cls) -> 'BuilderConfig':
        """Create configuration with default values."""
        return cls()

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"BuilderConfig("
            f"page={self.default_page_size.name}, "
            f"compress={self.compress_content_streams}, "
            f"collisions={self.resource_collision_policy}, "
            f"log={self.effective_log_level})"
        )
