"""
===========================================
Centralized logging for the query composer.
===========================================

Provides consistent logging setup across all modules with:
- File and console output
- Configurable log levels
- Colored console output
- Statement logging for every generated SQL string

Library modules only ask for named loggers; nothing is configured on import.
Applications call setup_logging() (or setup_logging_from_config()) once at
startup.

Example:
    >>> from core.logger import get_logger, setup_logging
    >>>
    >>> # Setup logging at application start
    >>> setup_logging(log_level='DEBUG', log_file='queries.log')
    >>>
    >>> # Get module logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Building statements")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from core.config import Config, get_config


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps the level name in ANSI colour codes.

    The record is copied before formatting so other handlers sharing the
    record still see the plain level name.

    Attributes:
        COLORS: Dict mapping log levels to ANSI color codes
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        return super().format(record)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a logger instance for the specified module.

    Args:
        name: Logger name (typically __name__ of calling module)
        level: Optional logging level override (DEBUG/INFO/WARNING/ERROR/CRITICAL)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if level:
        logger.setLevel(getattr(logging, level.upper()))

    return logger


def setup_logging(
    log_level: str = 'INFO',
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console_output: bool = True,
    use_colors: bool = True
) -> None:
    """Setup centralized logging configuration.

    Configures the root logger with console and/or file handlers.
    Should be called once at application startup.

    Args:
        log_level: Logging level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        log_file: Optional log file name (e.g., 'queries.log')
        log_dir: Optional log directory path (defaults to 'logs/')
        console_output: If True, output to console (stdout)
        use_colors: If True, use colored output for console

    Example:
        >>> setup_logging(log_level='DEBUG', log_file='queries.log', log_dir='logs')
    """
    level = getattr(logging, log_level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    root_logger.handlers.clear()

    plain_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    datefmt = '%Y-%m-%d %H:%M:%S'

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        formatter_class = ColoredFormatter if use_colors else logging.Formatter
        console_handler.setFormatter(formatter_class(plain_format, datefmt=datefmt))
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_dir) if log_dir else Path('logs')
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(plain_format, datefmt=datefmt))
        root_logger.addHandler(file_handler)


def setup_logging_from_config(cfg: Optional[Config] = None, console_output: bool = True) -> None:
    """Setup logging from a Config instance (the active one by default)."""
    cfg = cfg or get_config()
    setup_logging(
        log_level=cfg.log_level,
        log_file=cfg.log_file,
        log_dir=cfg.log_dir,
        console_output=console_output,
        use_colors=cfg.use_colors
    )


def log_statement(logger: logging.Logger, verb: str, sql: str) -> None:
    """Log a generated statement at DEBUG level.

    Honours the active configuration: nothing is logged when
    ``log_statements`` is off, and statements longer than
    ``max_logged_statement_length`` are cut with a trailing '...'.

    Args:
        logger: Logger of the building module
        verb: Statement kind (SELECT, INSERT, UPDATE, DELETE)
        sql: Generated statement
    """
    cfg = get_config()
    if not cfg.log_statements or not logger.isEnabledFor(logging.DEBUG):
        return

    limit = cfg.max_logged_statement_length
    shown = sql if len(sql) <= limit else sql[:limit] + '...'
    logger.debug(f"Built {verb} statement: {shown}")
