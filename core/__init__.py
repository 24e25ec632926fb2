"""
===============================================
Core infrastructure package for query building.
===============================================

This package provides configuration management and logging infrastructure
used by the query package.

Modules:
    config: Settings for statement logging and SELECT validation
    logger: Centralized logging configuration and utilities

Example:
    >>> from core.config import Config, configure
    >>> from core.logger import get_logger, setup_logging_from_config
    >>>
    >>> configure(Config.from_env('.env'))
    >>> setup_logging_from_config()
    >>> logger = get_logger(__name__)
"""

__version__ = "1.0.0"
__all__ = [
    'Config', 'ConfigurationError', 'configure', 'get_config',
    'get_logger', 'setup_logging', 'setup_logging_from_config', 'log_statement'
]

from core.config import Config, ConfigurationError, configure, get_config
from core.logger import get_logger, log_statement, setup_logging, setup_logging_from_config
