"""Debug logging for a spec run."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(message)s"
LABELLED_LOG_FORMAT = "[%(asctime)s] %(levelname)s [{label}] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def setup_logger(
    debug_file: Path,
    verbose: bool = False,
    logger_name: str = "qunit_ui",
    label: str | None = None,
) -> logging.Logger:
    """
    Configure and return the logger for one run.

    Records always go to ``debug_file``; with ``verbose`` they are echoed to
    stderr too. Calling this again for the same ``logger_name`` replaces the
    handlers instead of stacking them.

    Args:
        debug_file: Path to the debug log (parent directories are created)
        verbose: Also log to stderr
        logger_name: Name of the logger instance
        label: Tag put on every line, e.g. the run id and interface name

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(logger_name)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.disabled = False
    logger.setLevel(logging.DEBUG)

    fmt = LABELLED_LOG_FORMAT.format(label=label) if label else LOG_FORMAT
    formatter = logging.Formatter(fmt=fmt, datefmt=DATE_FORMAT)

    debug_file.parent.mkdir(parents=True, exist_ok=True)
    handlers: list[logging.Handler] = [logging.FileHandler(debug_file, mode="a")]
    if verbose:
        handlers.append(logging.StreamHandler(sys.stderr))
    for handler in handlers:
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
