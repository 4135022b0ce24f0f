"""
Logging setup for hoststat.

Everything logs below the ``hoststat`` logger. The console handler
colors the level name when writing to a terminal; an optional log file
rotates and always gets plain text at debug level.
"""

import logging
import logging.handlers
import sys
from dataclasses import dataclass
from pathlib import Path

RESET = "\033[0m"

LEVEL_COLORS = {
    logging.DEBUG: "\033[2;36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;91m",
}

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps the level name in an ANSI color."""

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelno) if self.use_colors else None
        if not color:
            return super().format(record)

        levelname = record.levelname
        record.levelname = f"{color}{levelname}{RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


@dataclass
class LogConfig:
    """Logging configuration."""

    console_level: str = "info"
    console_colors: bool = True

    # None disables the log file
    file_path: str | None = None
    file_max_bytes: int = 5 * 1024 * 1024
    file_backup_count: int = 3


def get_log_level(level_str: str) -> int:
    """Convert string log level to logging constant, INFO if unknown."""
    level = logging.getLevelName(level_str.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(config: LogConfig | None = None) -> None:
    """
    Configure the ``hoststat`` logger hierarchy.

    Args:
        config: Logging configuration (uses defaults if None)
    """
    if config is None:
        config = LogConfig()

    logger = logging.getLogger("hoststat")
    logger.setLevel(logging.DEBUG)  # Filter at handlers
    logger.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(get_log_level(config.console_level))
    use_colors = config.console_colors and sys.stdout.isatty()
    console.setFormatter(ColoredFormatter(LOG_FORMAT, DATE_FORMAT, use_colors=use_colors))
    logger.addHandler(console)

    if config.file_path:
        path = Path(config.file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=config.file_max_bytes, backupCount=config.file_backup_count
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(file_handler)

    # Reduce noise from the MQTT stack
    for name in ("aiomqtt", "paho"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger below ``hoststat`` for a component."""
    if name.startswith("hoststat"):
        return logging.getLogger(name)
    return logging.getLogger(f"hoststat.{name}")
