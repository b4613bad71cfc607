"""Tests for logging setup."""

import logging

import pytest
from kvdoc.core.logging import setup_logging


@pytest.fixture(autouse=True)
def reset_kvdoc_logger():
    yield
    logger = logging.getLogger("kvdoc")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def test_setup_creates_dated_log_file(tmp_path):
    logger = setup_logging(log_dir=tmp_path / "logs")

    logging.getLogger("kvdoc.engine.collection").debug("hello from the engine")
    for handler in logger.handlers:
        handler.flush()

    files = list((tmp_path / "logs").glob("kvdoc_*.log"))
    assert len(files) == 1
    assert "hello from the engine" in files[0].read_text(encoding="utf-8")


def test_setup_is_idempotent(tmp_path):
    setup_logging(log_dir=tmp_path)
    logger = setup_logging(log_dir=tmp_path)
    assert len(logger.handlers) == 2


def test_file_logging_can_be_disabled(tmp_path):
    logger = setup_logging(log_dir=tmp_path / "logs", file_enabled=False)
    assert len(logger.handlers) == 1
    assert not (tmp_path / "logs").exists()
