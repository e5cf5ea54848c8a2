"""Logging formatters for console output."""

import logging

from layerconf.constants import LOG_COLORS


class ColoredConsoleFormatter(logging.Formatter):
    """Console formatter with ANSI color support for different log levels.

    The whole formatted line is colored by level, including any traceback
    attached to the record, so that failures stand out in mixed output.

    Colors:
        DEBUG: Cyan
        INFO: Green
        WARNING: Yellow
        ERROR: Red
        CRITICAL: Magenta

    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record wrapped in the color of its level.

        Args:
            record: The log record to format

        Returns:
            Formatted log message with ANSI color codes

        """
        message = super().format(record)
        color = LOG_COLORS.get(record.levelname)
        if color is None:
            return message
        return f"{color}{message}{LOG_COLORS['RESET']}"
