"""Logging for **ImageScout**.

One named logger serves the whole package::

    from image_scout.logger import logger
    logger.info("Crawl started")

Every record carries the thread name: with the fork-join and futures
strategies the same page can be handled by any worker, and the thread column
is what makes a trace readable.

Crawlers never consult a global "diagnostics" switch. The flag lives in
:class:`~image_scout.config.CrawlerConfig`; the CLI only lowers the logger
level (:func:`enable_diagnostics`) so that the per-step lines get through.
"""
from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Iterator, List, Union

LOGGER_NAME: Final[str] = "ImageScout"
DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(threadName)-14s | %(message)s"

_LevelT = Union[int, str]

_MAX_BYTES: Final[int] = 5 * 1024 * 1024
_BACKUPS: Final[int] = 3


def _build_handlers(log_file: str | Path | None, fmt: str) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(str(log_file), maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """(Re)configure the project logger.

    Parameters
    ----------
    level
        Numeric or textual level (``"DEBUG"``, ``logging.INFO`` ...).
    log_file
        Optional rotating log file in addition to stdout.
    log_format
        :class:`logging.Formatter` format string.
    replace_handlers
        Drop previously installed handlers (closing them) before adding new ones.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()
    for handler in _build_handlers(log_file, log_format):
        lg.addHandler(handler)
    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Entry point used by the CLI."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


def enable_diagnostics() -> None:
    """Let the per-step crawl trace (DEBUG) through every installed handler."""
    logger.setLevel(logging.DEBUG)


@contextmanager
def attached(handler: logging.Handler, level: _LevelT = logging.DEBUG) -> Iterator[logging.Handler]:
    """Temporarily route project records to *handler* as well (e.g. pytest's caplog)."""
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(level)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "enable_diagnostics", "attached", "LOGGER_NAME"]
