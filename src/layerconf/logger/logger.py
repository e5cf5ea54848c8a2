"""Main logger module providing public API functions.

This module contains the core public API for the layerconf logging system:
- setup_logging(): Opt in to layerconf's own QueueHandler-based output
- get_logger(): Get a layerconf logger that honours suppression
- flush_all_handlers(): Ensure all pending log records are written
- clear_logger_state(): Clear global logger state for testing
"""

import atexit
import contextlib
import logging
import time
from pathlib import Path

from layerconf.constants import ROOT_LOGGER_NAME
from layerconf.logger.config import load_log_settings
from layerconf.logger.handlers import setup_root_logger
from layerconf.logger.state import get_state
from layerconf.logger.suppression import SUPPRESSION_FILTER


def flush_all_handlers() -> None:
    """Flush all handlers in the QueueListener to ensure writes complete.

    Waits (bounded) for the queue to drain, then flushes each handler.
    Safe to call from any thread.
    """
    state = get_state()
    if state.queue_listener is None or state.log_queue is None:
        return

    timeout = 5.0
    start_time = time.time()
    while not state.log_queue.empty():
        if time.time() - start_time > timeout:
            break
        time.sleep(0.01)

    # Give queue listener thread time to process final records
    time.sleep(0.05)

    for handler in state.queue_listener.handlers:
        with contextlib.suppress(OSError, ValueError):
            handler.flush()


def _cleanup_logging() -> None:
    """Stop the QueueListener on interpreter exit."""
    state = get_state()
    if state.queue_listener is not None:
        flush_all_handlers()
        state.queue_listener.stop()
        state.queue_listener = None


atexit.register(_cleanup_logging)


def _reset_library_root() -> None:
    """Leave the layerconf root as an unconfigured library logger.

    Records propagate to the application's logging setup; the NullHandler
    only keeps Python's last-resort handler from printing them.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    root_logger.addHandler(logging.NullHandler())


_reset_library_root()


def setup_logging(
    name: str = ROOT_LOGGER_NAME,
    console_level: str | None = None,
    file_level: str | None = None,
    log_file: Path | None = None,
) -> logging.Logger:
    """Install layerconf's own handlers and return the requested logger.

    Opt-in for applications that want layerconf diagnostics without
    configuring logging themselves. The root ``layerconf`` logger is
    initialized exactly once; later calls only hand out loggers. After
    setup the root stops propagating and owns a single QueueHandler
    feeding the console (and optional file) handlers.

    Args:
        name: Logger name, typically __name__ for module-level loggers
        console_level: Console log level, overrides LAYERCONF_LOG_LEVEL
        file_level: File log level, overrides LAYERCONF_FILE_LOG_LEVEL
        log_file: Log file path, overrides LAYERCONF_LOG_DIR

    Returns:
        Logger instance with the suppression filter attached

    Raises:
        ConfigurationError: If file logging setup fails

    """
    state = get_state()
    with state.lock:
        if not state.root_initialized:
            cfg_console, cfg_file, cfg_path = load_log_settings()
            setup_root_logger(
                state,
                console_level or cfg_console,
                file_level or cfg_file,
                log_file or cfg_path,
            )

    return get_logger(name)


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get a layerconf logger.

    No handlers are installed; records go wherever the application's
    logging sends them, or through setup_logging()'s handlers once that
    has been called.

    Use __name__ as the logger name for proper hierarchical logging:
        >>> logger = get_logger(__name__)
        >>> logger.debug("Loaded %s", path)

    Args:
        name: Logger name, typically __name__ for module loggers

    Returns:
        Logger instance with the suppression filter (singleton per name)

    """
    logger = logging.getLogger(name)
    logger.addFilter(SUPPRESSION_FILTER)
    return logger


def clear_logger_state() -> None:
    """Clear global logger state for testing purposes.

    Stops the QueueListener, closes and removes handlers from layerconf
    loggers, resets all state flags and returns the root ``layerconf``
    logger to its unconfigured, propagating state.

    Warning:
        Intended for tests only; it disrupts all active layerconf logging.

    """
    state = get_state()
    with state.lock:
        if state.queue_listener is not None:
            flush_all_handlers()
            state.queue_listener.stop()
            state.queue_listener = None

        state.log_queue = None
        state.root_initialized = False
        state.suppress_depth = 0

        for logger_name in list(logging.Logger.manager.loggerDict.keys()):
            if logger_name == ROOT_LOGGER_NAME or logger_name.startswith(
                f"{ROOT_LOGGER_NAME}."
            ):
                log_instance = logging.getLogger(logger_name)
                for handler in log_instance.handlers[:]:
                    handler.close()
                    log_instance.removeHandler(handler)

        _reset_library_root()
