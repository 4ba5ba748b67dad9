"""Logging configuration for taskpools.

Structured logging via loguru. Logging is disabled for the ``taskpools``
namespace by default (library behaviour) and enabled by ``enable_logging``.

Example:
    from taskpools import LogConfig, TaskPoolOptions, enable_logging

    handler_ids = enable_logging(LogConfig(level="TRACE"))
    TaskPoolOptions().create_default_pools()   # logs the per-pool thread counts
    disable_logging(handler_ids)
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

from loguru import logger

# Disable by default (library behavior)
logger.disable("taskpools")

LogLevel: TypeAlias = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"]

_CONTEXT_KEYS = ("pool",)


def _format_context(record: Any) -> str:
    extra = record.get("extra", {})
    parts = [f"{k}={extra[k]}" for k in _CONTEXT_KEYS if k in extra]
    return f" [{' '.join(parts)}]" if parts else ""


CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"
    "<dim>{extra[_ctx]}</dim> - "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line}{extra[_ctx]} - {message}"
)


@dataclass(frozen=True, slots=True)
class LogConfig:
    """Logging configuration.

    Attributes:
        level: Minimum console log level. Allocation decisions log at TRACE.
        file: Path to log file. If provided, logs are written to this file.
        console: Whether to log to stderr. Defaults to True.
        rotation: File rotation policy (e.g., "50 MB", "1 day"). Defaults to "50 MB".
        retention: Number of old log files to keep. Defaults to 10.
    """

    level: LogLevel = "INFO"
    file: str | None = None
    console: bool = True
    rotation: str = "50 MB"
    retention: int = 10


def _setup_logging(config: LogConfig) -> list[int]:
    """Configure logging and return handler IDs for cleanup.

    Args:
        config: Logging configuration.

    Returns:
        List of handler IDs that were added (for later removal).
    """
    logger.enable("taskpools")
    handler_ids: list[int] = []

    logger.configure(patcher=lambda r: r["extra"].update(_ctx=_format_context(r)))

    # Console output
    if config.console:
        hid = logger.add(
            sys.stderr,
            level=config.level,
            format=CONSOLE_FORMAT,
            colorize=True,
            filter="taskpools",
        )
        handler_ids.append(hid)

    # File output
    if config.file:
        hid = logger.add(
            config.file,
            level="TRACE",  # File always captures everything
            format=FILE_FORMAT,
            rotation=config.rotation,
            retention=config.retention,
            enqueue=True,
            filter="taskpools",
        )
        handler_ids.append(hid)

    return handler_ids


def _teardown_logging(handler_ids: list[int]) -> None:
    """Remove handlers and disable logging.

    Args:
        handler_ids: List of handler IDs to remove.
    """
    for hid in handler_ids:
        logger.remove(hid)
    logger.disable("taskpools")


def enable_logging(config: LogConfig | bool = True) -> list[int]:
    """Enable taskpools logging. ``True`` means ``LogConfig()``."""
    match config:
        case True:
            return _setup_logging(LogConfig())
        case False:
            return []
        case LogConfig():
            return _setup_logging(config)
        case _:
            raise TypeError(f"Expected LogConfig or bool, got {type(config).__name__}")


def disable_logging(handler_ids: list[int]) -> None:
    _teardown_logging(handler_ids)
