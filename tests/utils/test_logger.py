"""Tests for the application logger utility."""

from __future__ import annotations

import logging
import logging.handlers
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def reset_logger():
    """Reset the logger singleton and logging state between tests."""
    import nexus_cli.utils.logger as logger_mod

    app_logger = logging.getLogger("nexus_cli")
    original = logger_mod._logger
    original_handlers = list(app_logger.handlers)
    logger_mod._logger = None
    app_logger.handlers = [
        h for h in original_handlers if not isinstance(h, logging.FileHandler)
    ]

    yield

    for handler in app_logger.handlers:
        if handler not in original_handlers:
            handler.close()
    app_logger.handlers = original_handlers
    logger_mod._logger = original


def _get_logger(tmp_path):
    with patch("nexus_cli.utils.logger.user_log_dir", return_value=str(tmp_path)):
        from nexus_cli.utils.logger import get_logger

        return get_logger()


def _file_handlers():
    return [
        h
        for h in logging.getLogger("nexus_cli").handlers
        if isinstance(h, logging.handlers.RotatingFileHandler)
    ]


def _flush():
    for handler in _file_handlers():
        handler.flush()


def test_get_logger_creates_log_file(tmp_path):
    logger = _get_logger(tmp_path)

    assert (tmp_path / "nexus.log").exists()
    assert isinstance(logger, logging.Logger)
    assert logger.name == "nexus_cli"


def test_get_logger_returns_singleton(tmp_path):
    assert _get_logger(tmp_path) is _get_logger(tmp_path)


def test_get_logger_writes_message(tmp_path):
    _get_logger(tmp_path).info("hello from test")
    _flush()

    content = (tmp_path / "nexus.log").read_text()
    assert "hello from test" in content
    assert "INFO" in content


def test_child_logger_writes_to_same_file(tmp_path):
    _get_logger(tmp_path)
    child = logging.getLogger("nexus_cli.google.sync")

    child.warning("from child")
    _flush()

    assert "[nexus_cli.google.sync] from child" in (tmp_path / "nexus.log").read_text()


def test_module_loggers_reach_the_file(tmp_path):
    _get_logger(tmp_path)
    logging.getLogger("nexus_cli.services.google.importer").info("module message")
    _flush()

    assert "module message" in (tmp_path / "nexus.log").read_text()


def test_does_not_propagate_to_root(tmp_path):
    assert _get_logger(tmp_path).propagate is False


def test_single_handler_after_rebuild(tmp_path):
    import nexus_cli.utils.logger as logger_mod

    _get_logger(tmp_path)
    logger_mod._logger = None
    _get_logger(tmp_path)

    assert len(_file_handlers()) == 1


def test_other_handlers_do_not_block_the_file_handler(tmp_path):
    logging.getLogger("nexus_cli").addHandler(logging.NullHandler())

    _get_logger(tmp_path).info("still written")
    _flush()

    assert "still written" in (tmp_path / "nexus.log").read_text()
