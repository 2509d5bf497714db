"""Logging setup for the matchday tracker."""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

LOGGER_NAME = 'matchday'

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'


def _close_handlers(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []


def setup_logging(
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
) -> logging.Logger:
    """
    Configure the ``matchday`` logger.

    Module loggers (``matchday.ledger``, ``matchday.storage``...) propagate
    to it. A league keeps one log file per day, ``matchday_YYYYMMDD.log``,
    appended to by every session opened that day. Handlers from an earlier
    call are closed and replaced.

    Args:
        log_dir: Directory for log files (default: ./logs)
        level: Logging level (default: INFO)
        log_to_file: Whether to log to file (default: True)
        log_to_console: Whether to log to stdout (default: True)

    Returns:
        Configured logger instance

    Example:
        from matchday.logging_config import setup_logging
        logger = setup_logging(Path('data/league/logs'), log_to_console=False)
        logger.info("Matchday opened")
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    _close_handlers(logger)

    if log_to_file:
        log_dir = Path(log_dir) if log_dir is not None else Path('logs')
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f'{LOGGER_NAME}_{date.today():%Y%m%d}.log'
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get a logger in the matchday namespace; short names are prefixed with ``matchday.``."""
    if name != LOGGER_NAME and not name.startswith(f'{LOGGER_NAME}.'):
        name = f'{LOGGER_NAME}.{name}'
    return logging.getLogger(name)
