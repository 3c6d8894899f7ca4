"""Logging setup for particleflow.

Configurable via environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL. Default: INFO
- LOG_FORMAT: 'text' or 'json'. Default: text

Usage:
    from particleflow.logging_config import configure_logging
    configure_logging()  # once, at program start
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import IO, Any, ClassVar

ROOT_LOGGER_NAME = "particleflow"

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED_RECORD_KEYS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "taskName"}

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_RECORD_KEYS}


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Simulation stats passed via ``extra=`` (frame counts, respawns, build
    times) land under the ``extra`` key so they can be parsed back out.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL):
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = _extra_fields(record)
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human readable formatter: TIMESTAMP LEVEL [LOGGER] MESSAGE.

    DEBUG and ERROR lines also carry file:line.
    """

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET: ClassVar[str] = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        level = record.levelname

        if self.use_colors:
            level_str = f"{self.LEVEL_COLORS.get(level, '')}{level:8s}{self.RESET}"
        else:
            level_str = f"{level:8s}"

        logger_name = record.name.removeprefix(f"{ROOT_LOGGER_NAME}.")

        parts = [f"{timestamp} {level_str} [{logger_name}] {record.getMessage()}"]

        if record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL):
            parts.append(f" ({record.filename}:{record.lineno})")

        if record.exc_info:
            parts.append(f"\n{self.formatException(record.exc_info)}")

        return "".join(parts)


def get_log_level() -> int:
    """Read LOG_LEVEL from the environment, falling back to INFO."""
    return _LEVELS.get(os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)


def get_log_format() -> str:
    """Read LOG_FORMAT from the environment ('text' or 'json')."""
    format_name = os.environ.get("LOG_FORMAT", "text").lower()
    if format_name not in ("text", "json"):
        return "text"
    return format_name


def configure_logging(
    level: int | None = None,
    format_type: str | None = None,
    use_colors: bool = True,
    stream: IO[str] | None = None,
) -> None:
    """Configure the ``particleflow`` logger.

    Call once at program start. Repeated calls replace the handler instead of
    stacking a second one.

    Args:
        level: Log level. If None, reads LOG_LEVEL.
        format_type: 'text' or 'json'. If None, reads LOG_FORMAT.
        use_colors: Colorize text output (only when stderr is a TTY).
        stream: Destination stream, stderr by default.
    """
    if level is None:
        level = get_log_level()
    if format_type is None:
        format_type = get_log_format()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    if format_type == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter(use_colors=use_colors))

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False

    root_logger.debug(
        "Logging configured: level=%s, format=%s",
        logging.getLevelName(level),
        format_type,
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``particleflow`` namespace."""
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


@contextmanager
def log_duration(
    logger: logging.Logger, message: str, *args: Any
) -> Iterator[dict[str, float]]:
    """Log how long the wrapped block took, at INFO.

    Yields a dict that receives ``elapsed`` (seconds) once the block exits.
    """
    timing: dict[str, float] = {}
    start = time.perf_counter()
    try:
        yield timing
    finally:
        timing["elapsed"] = time.perf_counter() - start
        logger.info(
            message + " in %.3fs",
            *args,
            timing["elapsed"],
            extra={"elapsed": timing["elapsed"]},
        )
