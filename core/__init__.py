"""
================================================
Core infrastructure package for payroll audit.
================================================

Centralized configuration and logging used by every other package.

Modules:
    config: Configuration loaded from environment variables (.env)
    logger: Console/file logging setup and module loggers

Example:
    >>> from core.config import config
    >>> from core.logger import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info(f"Payroll database: {config.payroll_db_name}")
"""

__version__ = "0.1.0"
__all__ = ['get_logger', 'setup_logging', 'config', 'Config']

from core.config import Config, config
from core.logger import get_logger, setup_logging
