"""Environment-driven settings for the logging system.

layerconf is a library, so it never reads its own settings from a config
file. Log levels and the optional log directory come from environment
variables instead, with conservative defaults that keep the console quiet.
"""

import os
from pathlib import Path

from layerconf.constants import (
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_FILE_LOG_LEVEL,
    ENV_FILE_LOG_LEVEL,
    ENV_LOG_DIR,
    ENV_LOG_LEVEL,
    LOG_FILE_NAME,
)

_VALID_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def _read_level(variable: str, default: str) -> str:
    value = os.getenv(variable, "").strip().upper()
    if value in _VALID_LEVELS:
        return value
    return default


def load_log_settings() -> tuple[str, str, Path | None]:
    """Load console level, file level, and optional log file path.

    Environment Variables:
        LAYERCONF_LOG_LEVEL: Console log level (default: WARNING)
        LAYERCONF_FILE_LOG_LEVEL: File log level (default: DEBUG)
        LAYERCONF_LOG_DIR: Directory for layerconf.log. File logging is
            disabled when this is unset.

    Unknown level names fall back to the defaults.

    Returns:
        Tuple of (console_level, file_level, log_path) where log_path is
        None when file logging is disabled

    """
    console_level = _read_level(ENV_LOG_LEVEL, DEFAULT_CONSOLE_LOG_LEVEL)
    file_level = _read_level(ENV_FILE_LOG_LEVEL, DEFAULT_FILE_LOG_LEVEL)

    env_log_dir = os.getenv(ENV_LOG_DIR)
    log_path = (
        Path(env_log_dir).expanduser() / LOG_FILE_NAME if env_log_dir else None
    )
    return console_level, file_level, log_path
