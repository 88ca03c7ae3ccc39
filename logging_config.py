# logging_config.py
"""
Centralized Logging Configuration for the Atomaker Tools
========================================================

All modules log through loggers obtained from get_logger(), which sets up
a single console handler on the root logger the first time it is called.

Usage
-----
    from logging_config import get_logger
    logger = get_logger(__name__)

    logger.info("Building configuration for Z=%d", Z)
    logger.debug("reseat_spot scanned %d states", count)

Log Levels
----------
- DEBUG: every placement, reseat move and scan length
- INFO: start/end of a configuration run, rejected electrons
- WARNING: relaxation hit its iteration cap, partial constants load

Configuration
-------------
The level is read from the environment:
    export ATOMAKER_LOG_LEVEL=DEBUG

or set programmatically with set_log_level(). enable_file_logging() adds
a DEBUG-level file handler next to the console output.

Console output goes to stderr so that reports and constants records
written to stdout stay clean.
"""

from __future__ import annotations
import logging
import os
import sys
from datetime import datetime
from typing import Optional

LOG_LEVEL_ENV = "ATOMAKER_LOG_LEVEL"

_FORMAT = "%(asctime)s | %(name)-16s | %(levelname)-8s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_DEFAULT_LEVEL = logging.WARNING

_loggers: dict = {}
_configured = False
_file_handler: Optional[logging.FileHandler] = None


def _level_from_env() -> int:
    name = os.environ.get(LOG_LEVEL_ENV, "").upper()
    level = logging.getLevelName(name) if name else _DEFAULT_LEVEL
    return level if isinstance(level, int) else _DEFAULT_LEVEL


def _configure_root_handler() -> None:
    """Attach the console handler once; later calls are no-ops."""
    global _configured

    if _configured:
        return

    level = _level_from_env()
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if not root_logger.handlers:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
        root_logger.addHandler(console_handler)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for the given module name (normally __name__).

    Parameters
    ----------
    name : str
        Logger name.

    Returns
    -------
    logging.Logger
        Logger attached to the shared console configuration.
    """
    if name not in _loggers:
        _configure_root_handler()
        _loggers[name] = logging.getLogger(name)
    return _loggers[name]


def set_log_level(level) -> None:
    """
    Set the level of the root logger and its handlers.

    Parameters
    ----------
    level : int or str
        logging level (logging.DEBUG) or its name ("DEBUG").
    """
    if isinstance(level, str):
        name = level
        level = logging.getLevelName(name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name}")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        if handler is not _file_handler:
            handler.setLevel(level)


def enable_file_logging(filename: Optional[str] = None, level: int = logging.DEBUG) -> str:
    """
    Also write log records to a file.

    Parameters
    ----------
    filename : str, optional
        Log file path; a timestamped name is generated when omitted.
    level : int
        Level of the file handler (default DEBUG).

    Returns
    -------
    str
        Path of the log file.
    """
    global _file_handler

    if filename is None:
        filename = f"atomaker_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    disable_file_logging()

    _file_handler = logging.FileHandler(filename, encoding="utf-8")
    _file_handler.setLevel(level)
    _file_handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.addHandler(_file_handler)
    if root_logger.level > level:
        root_logger.setLevel(level)

    return filename


def disable_file_logging() -> None:
    """Remove the file handler added by enable_file_logging(), if any."""
    global _file_handler

    if _file_handler is not None:
        logging.getLogger().removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None


def silence_logger(name: str) -> None:
    """Restrict a (third-party) logger to WARNING and above."""
    logging.getLogger(name).setLevel(logging.WARNING)


# matplotlib is chatty at DEBUG level
silence_logger("matplotlib")
silence_logger("matplotlib.font_manager")
