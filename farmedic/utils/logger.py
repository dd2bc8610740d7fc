"""Loguru sinks for farmedic."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from farmedic.config import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message} | {extra}"


def setup_logger(
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    logs_dir: Optional[Path] = None,
) -> None:
    """Log to stderr and to one file per day under ``logs_dir``.

    The file sink also records the context bound by ``log_operation``
    (operation name, medication id) and keeps 30 days of zipped logs.

    Args:
        console_level: Minimum level printed to stderr
        file_level: Minimum level written to the log file
        logs_dir: Directory for log files (default: LOGS_DIR setting)
    """
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    logs_dir = logs_dir or settings.logs_dir
    logs_dir.mkdir(parents=True, exist_ok=True)

    logger.add(
        logs_dir / "farmedic_{time:YYYY-MM-DD}.log",
        format=FILE_FORMAT,
        level=file_level,
        rotation="00:00",
        retention="30 days",
        compression="zip",
        enqueue=True,
    )

    logger.debug(f"Logging to stderr ({console_level}) and {logs_dir} ({file_level})")


__all__ = ["setup_logger", "logger"]
