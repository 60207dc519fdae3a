"""
Logging for dutchswap.

Every module logs through a child of the "dutchswap" logger, obtained with
`get_logger("registry")` and friends at import time. The CLI configures the
tree once per invocation; library use without it gets INFO on stdout the
first time a logger is requested.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import colorlog

ROOT_LOGGER = "dutchswap"
LOG_FILE = "dutchswap.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def _console_handler() -> logging.Handler:
    handler = colorlog.StreamHandler(sys.stdout)
    handler.setFormatter(colorlog.ColoredFormatter(
        "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s",
        datefmt=DATE_FORMAT,
    ))
    return handler


def _file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / LOG_FILE)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(name)s] %(levelname)-8s %(message)s",
        datefmt=DATE_FORMAT,
    ))
    return handler


def configure_logging(level: int = logging.INFO, log_dir: Optional[Path] = None):
    """
    Attach colored console output (and a log file when log_dir is given).

    A second call is a no-op until reset_logging() runs.
    """
    global _configured
    if _configured:
        return

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.addHandler(_console_handler())
    if log_dir is not None:
        root.addHandler(_file_handler(Path(log_dir)))
    _configured = True


def reset_logging():
    """Close and drop every handler so configure_logging() can run again."""
    global _configured
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)
    _configured = False


def get_logger(name: str) -> logging.Logger:
    if not _configured:
        configure_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
