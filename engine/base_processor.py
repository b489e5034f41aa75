"""
Base processor class and processor registry.

Defines the lifecycle shared by processors attached to a PdfDocumentBuilder.
"""

from abc import ABC
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class BaseProcessor(ABC):
    """
    Abstract base class for document processors.

    Processors must be initialized before use; subclasses extend
    initialize() and cleanup() for their own resources.
    """

    def __init__(self):
        self._initialized = False
        logger.debug(f"{self.__class__.__name__} created")

    def initialize(self) -> None:
        """
        Initialize processor-specific resources.

        Called by the document after processor creation but before use.
        """
        if self._initialized:
            logger.warning(f"{self.__class__.__name__} already initialized")
            return

        self._initialized = True
        logger.debug(f"{self.__class__.__name__} initialized")

    def cleanup(self) -> None:
        """
        Clean up processor-specific resources.

        Safe to call multiple times.
        """
        if not self._initialized:
            return

        self._initialized = False
        logger.debug(f"{self.__class__.__name__} cleaned up")

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def validate_state(self) -> bool:
        """
        Validate that processor is in a valid state for operations.

        Returns:
            True if processor is ready, False otherwise
        """
        if not self._initialized:
            logger.error(f"{self.__class__.__name__} not initialized")
            return False
        return True

    def __repr__(self) -> str:
        status = "initialized" if self._initialized else "not initialized"
        return f"{self.__class__.__name__}({status})"


class ProcessorRegistry:
    """
    Registry for managing processor instances.

    Tracks the processors attached to a document and drives their
    initialization and cleanup in registration order.
    """

    def __init__(self):
        self._processors: dict[str, BaseProcessor] = {}
        self._initialization_order: list[str] = []

    def register(self, name: str, processor: BaseProcessor) -> None:
        """
        Register a processor.

        Args:
            name: Unique name for the processor (e.g., "image")
            processor: Processor instance to register
        """
        if name in self._processors:
            logger.warning(f"Processor '{name}' already registered, replacing")

        self._processors[name] = processor
        if name not in self._initialization_order:
            self._initialization_order.append(name)

        logger.debug(f"Registered processor: {name}")

    def get(self, name: str) -> Optional[BaseProcessor]:
        return self._processors.get(name)

    def initialize_all(self) -> None:
        """Initialize all registered processors in registration order."""
        for name in self._initialization_order:
            processor = self._processors.get(name)
            if processor:
                try:
                    processor.initialize()
                except Exception as e:
                    logger.error(f"Failed to initialize processor '{name}': {e}")
                    raise

    def cleanup_all(self) -> None:
        """Clean up all processors in reverse registration order."""
        for name in reversed(self._initialization_order):
            processor = self._processors.get(name)
            if processor:
                try:
                    processor.cleanup()
                except Exception as e:
                    logger.warning(f"Error cleaning up processor '{name}': {e}")

    @property
    def processor_names(self) -> list[str]:
        return list(self._processors.keys())

    def __repr__(self) -> str:
        return f"ProcessorRegistry({len(self._processors)} processors: {self.processor_names})"
