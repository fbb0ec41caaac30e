"""Tests for verbose logging."""

import logging
from pathlib import Path

from qunit_ui.verbose import setup_logger


def test_verbose_logger_creates_debug_log(tmp_path: Path):
    """Logger should always create debug.log file."""
    debug_file = tmp_path / "debug.log"
    logger = setup_logger(debug_file=debug_file, verbose=False)

    assert not logger.disabled
    assert logger.level == logging.DEBUG
    assert debug_file.exists()


def test_verbose_logger_writes_to_file(tmp_path: Path):
    """Logger should write messages to debug file."""
    debug_file = tmp_path / "debug.log"
    logger = setup_logger(debug_file=debug_file, verbose=False)

    logger.debug("test message")

    content = debug_file.read_text()
    assert "test message" in content
    assert "DEBUG" in content
    assert "[" in content  # timestamp


def test_verbose_mode_adds_stderr_handler(tmp_path: Path):
    """Logger should have stderr handler when verbose=True."""
    logger = setup_logger(debug_file=tmp_path / "debug.log", verbose=True)

    assert len(logger.handlers) == 2
    handler_types = [type(h).__name__ for h in logger.handlers]
    assert "StreamHandler" in handler_types
    assert "FileHandler" in handler_types


def test_non_verbose_mode_only_file_handler(tmp_path: Path):
    """Logger should only have file handler when verbose=False."""
    logger = setup_logger(debug_file=tmp_path / "debug.log", verbose=False)

    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.FileHandler)


def test_logger_creates_parent_directories(tmp_path: Path):
    """Logger should create parent directories for debug file."""
    debug_file = tmp_path / "nested" / "dir" / "debug.log"
    setup_logger(debug_file=debug_file, verbose=False)

    assert debug_file.exists()


def test_setup_twice_replaces_handlers(tmp_path: Path):
    """Re-configuring a logger name should not duplicate handlers."""
    first = tmp_path / "first.log"
    second = tmp_path / "second.log"

    setup_logger(first, verbose=False, logger_name="qunit_ui_reused")
    logger = setup_logger(second, verbose=False, logger_name="qunit_ui_reused")
    logger.debug("only in second")

    assert len(logger.handlers) == 1
    assert "only in second" in second.read_text()
    assert "only in second" not in first.read_text()


def test_unique_logger_names_are_isolated(tmp_path: Path):
    """Different logger names write to their own files."""
    log1 = tmp_path / "run1.log"
    log2 = tmp_path / "run2.log"

    logger1 = setup_logger(log1, verbose=False, logger_name="qunit_ui_run1")
    logger2 = setup_logger(log2, verbose=False, logger_name="qunit_ui_run2")

    logger1.debug("Message from run1")
    logger2.debug("Message from run2")

    assert logger1 is not logger2
    assert "Message from run1" in log1.read_text()
    assert "Message from run2" not in log1.read_text()
    assert "Message from run2" in log2.read_text()
    assert "Message from run1" not in log2.read_text()


def test_label_is_put_on_every_line(tmp_path: Path):
    """A label tags each record so runs can be told apart in the log."""
    debug_file = tmp_path / "debug.log"
    logger = setup_logger(debug_file, label="2026-01-01_000000 qunit-ledger")

    logger.debug("first")
    logger.warning("second")

    lines = debug_file.read_text().splitlines()
    assert len(lines) == 2
    assert all("[2026-01-01_000000 qunit-ledger]" in line for line in lines)
    assert "WARNING" in lines[1]
