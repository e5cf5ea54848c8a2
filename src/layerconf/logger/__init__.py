"""Logging utilities for layerconf.

This package provides the diagnostic sink used by the config store:
- Named loggers that propagate to the application's logging setup
- Scoped suppression via suppressed_logging() / run_silently()
- Opt-in setup_logging() with colored console output, an optional
  rotating log file (set LAYERCONF_LOG_DIR) and a QueueHandler/
  QueueListener so logging never blocks the caller on I/O

Usage:
    >>> from layerconf.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Loaded %s", path)  # Use %-style formatting

Applications without their own logging configuration can call
setup_logging() once at startup.

Rules for contributors:
    1. Always use: logger = get_logger(__name__)
    2. Never attach handlers to child loggers (only the root has handlers)
    3. Never use f-strings in log calls
"""

from layerconf.logger.formatters import ColoredConsoleFormatter
from layerconf.logger.handlers import ConfigurationError
from layerconf.logger.logger import (
    clear_logger_state,
    flush_all_handlers,
    get_logger,
    setup_logging,
)
from layerconf.logger.state import get_state
from layerconf.logger.suppression import (
    SuppressionFilter,
    run_silently,
    suppressed_logging,
)

__all__ = [
    "ColoredConsoleFormatter",
    "ConfigurationError",
    "SuppressionFilter",
    "clear_logger_state",
    "flush_all_handlers",
    "get_logger",
    "get_state",
    "run_silently",
    "setup_logging",
    "suppressed_logging",
]
