"""
==========================================
Configuration management for query builds.
==========================================

Holds the settings that influence how statements are logged and how strictly
SELECT inputs are checked. Settings never come from the environment on their
own: the module-level ``config`` instance starts with defaults, and an
application opts in to ``.env`` / environment loading via ``Config.from_env``.

The configuration system ensures:
- Single source of truth for logging and validation settings
- Type conversion and validation of environment values
- No hidden reads of files or environment variables during a build

Example:
    >>> from core.config import Config, configure, get_config
    >>>
    >>> # Load QUERY_* settings from .env and the process environment
    >>> configure(Config.from_env('.env'))
    >>>
    >>> # Access individual settings
    >>> print(f"Level: {get_config().log_level}, strict: {get_config().strict_select}")
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from dotenv import dotenv_values

VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

ENV_PREFIX = 'QUERY_'

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off', ''}


class ConfigurationError(ValueError):
    """Exception raised when a configuration value cannot be interpreted."""
    pass


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean flag, got {raw!r}")


def _parse_int(name: str, raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def _parse_level(name: str, raw: str) -> str:
    level = raw.strip().upper()
    if level not in VALID_LOG_LEVELS:
        raise ConfigurationError(
            f"{name} must be one of {', '.join(VALID_LOG_LEVELS)}, got {raw!r}"
        )
    return level


@dataclass(frozen=True)
class Config:
    """Settings for statement logging and SELECT validation.

    Attributes:
        log_level: Root logging level used by setup_logging_from_config
        log_file: Optional log file name; no file handler when None
        log_dir: Directory the log file is written to
        use_colors: Use ANSI colours for console output
        log_statements: Log every generated statement at DEBUG level
        max_logged_statement_length: Truncate logged statements to this length
        strict_select: Reject SELECT builds without a table or CTE alias
    """

    log_level: str = 'INFO'
    log_file: Optional[str] = None
    log_dir: str = 'logs'
    use_colors: bool = True
    log_statements: bool = True
    max_logged_statement_length: int = 500
    strict_select: bool = False

    def __post_init__(self):
        _parse_level('log_level', self.log_level)
        if self.max_logged_statement_length <= 0:
            raise ConfigurationError(
                "max_logged_statement_length must be positive, "
                f"got {self.max_logged_statement_length}"
            )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Optional[str]]) -> 'Config':
        """Build a Config from ``QUERY_*`` string values.

        Unknown keys are ignored and missing keys keep their defaults.

        Args:
            values: Mapping of environment variable names to raw strings

        Returns:
            Config instance

        Raises:
            ConfigurationError: If a recognised value is malformed
        """
        parsed: Dict[str, Union[str, int, bool, None]] = {}

        def get(key: str) -> Optional[str]:
            return values.get(ENV_PREFIX + key)

        raw = get('LOG_LEVEL')
        if raw is not None:
            parsed['log_level'] = _parse_level(ENV_PREFIX + 'LOG_LEVEL', raw)

        raw = get('LOG_FILE')
        if raw is not None:
            parsed['log_file'] = raw.strip() or None

        raw = get('LOG_DIR')
        if raw is not None and raw.strip():
            parsed['log_dir'] = raw.strip()

        for key, field_name in (
            ('LOG_COLORS', 'use_colors'),
            ('LOG_STATEMENTS', 'log_statements'),
            ('STRICT_SELECT', 'strict_select'),
        ):
            raw = get(key)
            if raw is not None:
                parsed[field_name] = _parse_bool(ENV_PREFIX + key, raw)

        raw = get('LOG_MAX_LENGTH')
        if raw is not None:
            parsed['max_logged_statement_length'] = _parse_int(
                ENV_PREFIX + 'LOG_MAX_LENGTH', raw
            )

        return cls(**parsed)

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> 'Config':
        """Load configuration from a .env file and the process environment.

        Process environment variables take precedence over the .env file.

        Args:
            env_file: Optional path to a .env file; skipped when it doesn't exist

        Returns:
            Config instance

        Example:
            >>> cfg = Config.from_env('.env')
            >>> cfg.strict_select
            False
        """
        values: Dict[str, Optional[str]] = {}
        if env_file is not None and Path(env_file).is_file():
            values.update(dotenv_values(env_file))
        values.update(
            {key: value for key, value in os.environ.items() if key.startswith(ENV_PREFIX)}
        )
        return cls.from_mapping(values)

    def with_overrides(self, **overrides) -> 'Config':
        """Return a copy of this configuration with some fields replaced."""
        return replace(self, **overrides)


# Active configuration instance
config = Config()


def get_config() -> Config:
    """Get the active configuration."""
    return config


def configure(new_config: Optional[Config] = None, **overrides) -> Config:
    """Replace the active configuration.

    Args:
        new_config: Config to activate; the current one is used when omitted
        **overrides: Individual fields to change on top of new_config

    Returns:
        The configuration now in effect

    Example:
        >>> configure(strict_select=True)
        >>> configure(Config())  # back to defaults
    """
    global config
    base = new_config if new_config is not None else config
    config = base.with_overrides(**overrides) if overrides else base
    return config
