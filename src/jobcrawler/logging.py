"""Package logger for the crawler.

Everything under ``jobcrawler.`` logs through the ``jobcrawler`` logger,
either by importing :data:`logger` from here or through
``logging.getLogger(__name__)``, which propagates to it.  Crawl progress
(one line per search URL, per source failure, per run) goes to stderr.

A crawl that runs unattended from cron leaves nothing behind on stderr,
so :func:`configure_file_logging` can add one timestamped file per run
under ``[logging].log_dir``.  ``--verbose`` lowers both to DEBUG through
:func:`set_verbose`, which also surfaces skipped cards and pacing delays.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

DEFAULT_LOG_DIR = "data/logs"

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _formatter() -> logging.Formatter:
    return logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATEFMT)


logger = logging.getLogger("jobcrawler")
logger.setLevel(logging.INFO)

handler = logging.StreamHandler(sys.stderr)
handler.setLevel(logging.INFO)
handler.setFormatter(_formatter())
logger.addHandler(handler)


def set_verbose(verbose: bool = True) -> None:
    """Switch the logger and the stderr handler between DEBUG and INFO."""
    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    handler.setLevel(level)


def configure_file_logging(
    log_dir: str = DEFAULT_LOG_DIR,
    *,
    level: int = logging.INFO,
) -> logging.FileHandler:
    """Write this run's log to ``<log_dir>/jobcrawler_<timestamp>.log``.

    The stderr handler stays attached.  Returns the new handler so the
    caller can detach and close it.
    """
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    started = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
    path = directory / f"jobcrawler_{started}.log"

    file_handler = logging.FileHandler(str(path), encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(_formatter())

    # A DEBUG file under an INFO logger would stay empty
    logger.setLevel(min(logger.level, level))
    logger.addHandler(file_handler)
    logger.debug("Crawl log: %s", path)
    return file_handler


__all__ = ["DEFAULT_LOG_DIR", "configure_file_logging", "handler", "logger", "set_verbose"]
