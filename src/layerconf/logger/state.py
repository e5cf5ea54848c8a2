"""Logger state management module.

This module provides the global logger state singleton used throughout
layerconf. The singleton guarantees a single root logger setup and a
single suppression counter across the whole process.
"""

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import queue
    from logging.handlers import QueueListener


class _LoggerState:
    """Container for logger state (avoids module-level mutable globals).

    Attributes:
        lock: Thread lock for singleton initialization and suppression
        root_initialized: Whether root logger has been set up
        queue_listener: Background thread processing log records
        log_queue: Queue for non-blocking log record processing
        suppress_depth: Number of active suppressed_logging() blocks

    """

    def __init__(self) -> None:
        """Initialize logger state."""
        self.lock = threading.RLock()
        self.root_initialized = False
        self.queue_listener: QueueListener | None = None
        self.log_queue: queue.Queue | None = None
        self.suppress_depth = 0

    @property
    def suppressed(self) -> bool:
        """Whether records from layerconf loggers are currently dropped."""
        return self.suppress_depth > 0


# Global logger state singleton
_state = _LoggerState()


def get_state() -> _LoggerState:
    """Get the global logger state singleton.

    Returns:
        The global logger state instance

    """
    return _state
