"""Logging configuration for command-line entry points."""

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LEVEL = "INFO"

# HTTP client libraries log every connection at DEBUG
HTTP_LOGGERS = ("urllib3", "requests")


def _resolve_level(level_name: str) -> int:
    resolved = logging.getLevelName(level_name.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Invalid log level: {level_name}")
    return resolved


def _stdout_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def configure_logging(level_name: str | None = None) -> None:
    """Send all log records to stdout through a single handler.

    Env vars:
      - LOG_LEVEL: DEBUG/INFO/WARNING/ERROR/CRITICAL (default INFO)

    :param level_name: Level to use instead of LOG_LEVEL, e.g. "DEBUG" for --verbose.
    :raises ValueError: If the level name is not a logging level.
    """
    level_name = level_name or os.environ.get("LOG_LEVEL", DEFAULT_LEVEL)
    level = _resolve_level(level_name)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Repeated calls replace the handler instead of duplicating output
    root_logger.handlers.clear()
    root_logger.addHandler(_stdout_handler(level))

    http_level = max(level, logging.INFO)
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s, http_level=%s",
        logging.getLevelName(level),
        logging.getLevelName(http_level),
    )
