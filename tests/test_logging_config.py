from __future__ import annotations

import io
import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from engine.config import BuilderConfig
from utils.logging_config import PACKAGE_LOGGERS, configure_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    package_levels = {name: logging.getLogger(name).level for name in PACKAGE_LOGGERS + ["pikepdf"]}
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, package_level in package_levels.items():
        logging.getLogger(name).setLevel(package_level)


def test_rich_handler_on_root(restore_logging):
    console = configure_logging("debug", console=Console(file=io.StringIO()))

    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], RichHandler)
    assert handlers[0].console is console
    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("engine").level == logging.DEBUG
    assert logging.getLogger("pikepdf").level == logging.WARNING


def test_level_from_environment(restore_logging, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "error")
    configure_logging(console=Console(file=io.StringIO()))
    assert logging.getLogger("processors").level == logging.ERROR


def test_package_messages_reach_the_console(restore_logging):
    output = io.StringIO()
    configure_logging("INFO", console=Console(file=output, width=200))

    logging.getLogger("engine.document_builder").info("built 3 pages")
    logging.getLogger("some.library").info("hidden chatter")

    text = output.getvalue()
    assert "built 3 pages" in text
    assert "hidden chatter" not in text


@pytest.mark.parametrize("config, expected", [
    (BuilderConfig(log_level="error"), logging.ERROR),
    (BuilderConfig(log_level="error", enable_debug_logging=True), logging.DEBUG),
])
def test_builder_config_sets_package_level(restore_logging, config, expected):
    console = config.configure_logging(console=Console(file=io.StringIO()))

    assert logging.getLogger().handlers[0].console is console
    assert logging.getLogger("engine").level == expected
    assert logging.getLogger("extractors").level == expected
