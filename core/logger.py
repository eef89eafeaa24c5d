"""
==========================================
Centralized logging for the payroll audit.
==========================================

Console and file logging shared by every module:
- Coloured console output with level emoji
- Optional UTF-8 log file under logs/
- Module loggers via get_logger(__name__)

Library modules only call logging.getLogger(__name__); the root logger is
configured here, once, either explicitly through setup_logging() or
automatically on first import.

Example:
    >>> from core.logger import get_logger, setup_logging
    >>>
    >>> setup_logging(log_level='DEBUG', log_file='payroll.log')
    >>> logger = get_logger(__name__)
    >>> logger.info("Salary updated")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from core.config import config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Console formatter adding ANSI colours and an emoji per level."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    EMOJI = {
        'DEBUG': '🔍',
        'INFO': 'ℹ️ ',
        'WARNING': '⚠️ ',
        'ERROR': '❌',
        'CRITICAL': '🔥'
    }

    def format(self, record):
        # Work on a copy so file handlers sharing the record stay uncoloured
        record = logging.makeLogRecord(record.__dict__)
        levelname = record.levelname
        record.emoji = self.EMOJI.get(levelname, '')
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        return super().format(record)


def _level(name: str) -> int:
    return getattr(logging, name.upper())


def _console_handler(level: int, use_colors: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if use_colors:
        handler.setFormatter(ColoredFormatter('%(emoji)s ' + LOG_FORMAT, datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(level: int, log_file: str, log_dir: Optional[str]) -> logging.Handler:
    log_path = Path(log_dir) if log_dir else config.project.logs_dir
    log_path.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_path / log_file, encoding='utf-8')
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a logger for the given module.

    Args:
        name: Logger name (typically __name__)
        level: Optional level override (DEBUG/INFO/WARNING/ERROR/CRITICAL)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if level:
        logger.setLevel(_level(level))
    return logger


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console_output: bool = True,
    use_colors: bool = True
) -> None:
    """Configure the root logger.

    Replaces any existing root handlers, so it is safe to call again to
    change the level or add a file.

    Args:
        log_level: Level name; defaults to LOG_LEVEL from the environment
        log_file: Optional log file name (e.g. 'payroll.log')
        log_dir: Directory for log_file (defaults to the project logs/ dir)
        console_output: If True, log to stdout
        use_colors: If True, colour console output

    Example:
        >>> setup_logging(log_level='DEBUG', log_file='payroll.log', use_colors=False)
    """
    level = _level(log_level or config.log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console_output:
        root_logger.addHandler(_console_handler(level, use_colors))

    if log_file:
        root_logger.addHandler(_file_handler(level, log_file, log_dir))


def _init_default_logging():
    """Install console logging if nothing configured the root logger yet."""
    if not logging.getLogger().handlers:
        setup_logging(console_output=True, use_colors=True)


_init_default_logging()
