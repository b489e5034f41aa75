"""Logging setup with a Rich handler for applications embedding the builder."""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGERS = ["constants", "engine", "extractors", "models", "processors", "utils"]


def configure_logging(level: Optional[str] = None, console: Optional[Console] = None) -> Console:
    """
    Configure logging with a Rich handler.

    Third-party loggers stay at WARNING; the builder's own packages log at
    ``level``, falling back to the LOG_LEVEL environment variable and then INFO.

    Returns:
        The console the handler writes to
    """
    console = console or Console(stderr=True)
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    rich_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=True
    )

    logging.basicConfig(level=logging.WARNING, format="%(message)s", handlers=[rich_handler], force=True)

    for module_name in PACKAGE_LOGGERS:
        logging.getLogger(module_name).setLevel(log_level)

    # qpdf warnings arrive through pikepdf and are rarely actionable
    logging.getLogger("pikepdf").setLevel(logging.WARNING)

    return console
