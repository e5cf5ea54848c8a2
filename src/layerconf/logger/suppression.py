"""Scoped suppression of layerconf log output.

Some internal operations are expected to fail or to be noisy (the delete
step of a save, nested conversions). They run inside suppressed_logging()
so that only the outcome of the outer operation is reported.

Suppression is process-wide and nestable: records are dropped while at
least one suppressed_logging() block is active in any thread.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from layerconf.logger.state import get_state

P = ParamSpec("P")
R = TypeVar("R")


class SuppressionFilter(logging.Filter):
    """Drop every record while suppression is active."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        """Return False while a suppressed_logging() block is active."""
        return not get_state().suppressed


# Shared instance so repeated addFilter() calls stay idempotent
SUPPRESSION_FILTER = SuppressionFilter()


@contextmanager
def suppressed_logging() -> Iterator[None]:
    """Silence all layerconf loggers for the duration of the block.

    Example:
        >>> with suppressed_logging():
        ...     store.delete()  # no "file deleted" warning

    """
    state = get_state()
    with state.lock:
        state.suppress_depth += 1
    try:
        yield
    finally:
        with state.lock:
            state.suppress_depth -= 1


def run_silently(
    func: Callable[P, R], *args: P.args, **kwargs: P.kwargs
) -> R:
    """Call func with layerconf logging suppressed and return its result."""
    with suppressed_logging():
        return func(*args, **kwargs)
