"""Centralized constants module for layerconf.

This module serves as the single source of truth for shared constants
across the layerconf codebase. Constants are organized by logical categories
and use typing.Final annotations to ensure immutability.

Usage:
    from layerconf.constants import CONFIG_FILE_SUFFIX
"""

from typing import Final

import orjson

# =============================================================================
# Configuration File Constants
# =============================================================================

# Extension appended to config names by ConfigStore.in_directory()
CONFIG_FILE_SUFFIX: Final[str] = ".json"

# Options used whenever a config document is written to disk.
# Two-space indentation, nulls are kept (orjson never drops them),
# non-string keys of raw default mappings are coerced to strings.
JSON_WRITE_OPTIONS: Final[int] = (
    orjson.OPT_INDENT_2
    | orjson.OPT_NON_STR_KEYS
    | orjson.OPT_PASSTHROUGH_DATACLASS
)

# =============================================================================
# Converter Names
# =============================================================================

CONVERTER_STRING: Final[str] = "STRING"
CONVERTER_DOUBLE: Final[str] = "DOUBLE"
CONVERTER_INTEGER: Final[str] = "INTEGER"
CONVERTER_BOOLEAN: Final[str] = "BOOLEAN"
CONVERTER_VALUE_LIST: Final[str] = "VALUE_LIST"
CONVERTER_VALUE_MAP: Final[str] = "VALUE_MAP"

# =============================================================================
# Logging Constants
# =============================================================================

ROOT_LOGGER_NAME: Final[str] = "layerconf"
LOG_FILE_NAME: Final[str] = "layerconf.log"

DEFAULT_CONSOLE_LOG_LEVEL: Final[str] = "WARNING"
DEFAULT_FILE_LOG_LEVEL: Final[str] = "DEBUG"

# Environment variables read by layerconf.logger.config
ENV_LOG_LEVEL: Final[str] = "LAYERCONF_LOG_LEVEL"
ENV_FILE_LOG_LEVEL: Final[str] = "LAYERCONF_FILE_LOG_LEVEL"
ENV_LOG_DIR: Final[str] = "LAYERCONF_LOG_DIR"

# Maximum size for rotated log files (bytes)
LOG_ROTATION_THRESHOLD_BYTES: Final[int] = 1024 * 1024  # 1 MB

# Number of backup files to keep for rotated logs
LOG_BACKUP_COUNT: Final[int] = 3

# Console and file format strings used by the logger
LOG_CONSOLE_FORMAT: Final[str] = (
    "[%(asctime)s] [%(name)s/%(levelname)s] %(message)s"
)
LOG_CONSOLE_DATE_FORMAT: Final[str] = "%H:%M:%S"
LOG_FILE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(funcName)s:%(lineno)d - %(message)s"
)
LOG_FILE_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Color mapping for console output levels
LOG_COLORS: Final[dict[str, str]] = {
    "DEBUG": "\033[36m",  # Cyan
    "INFO": "\033[32m",  # Green
    "WARNING": "\033[33m",  # Yellow
    "ERROR": "\033[31m",  # Red
    "CRITICAL": "\033[35m",  # Magenta
    "RESET": "\033[0m",
}
