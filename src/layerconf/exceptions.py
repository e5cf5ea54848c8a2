"""Exception classes for layerconf operations.

These are raised by the store's internal load/create/save helpers and
caught again at the public boundary, where they are collapsed into the
broken flag or a boolean result. Callers normally only meet them through
``ConfigStore.failure`` or the ``exc_info`` of a log record.
"""

from pathlib import Path


class LayerconfError(Exception):
    """Base exception for layerconf operations."""

    error_prefix: str = "Operation failed"

    def __init__(self, message: str, target: Path | str | None = None) -> None:
        """Initialize error with message and optional target.

        Args:
            message: Error message describing the failure.
            target: Optional path of the file the operation targeted.

        """
        super().__init__(message)
        self.message = message
        self.target = target

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.target:
            return f"{self.error_prefix} for '{self.target}': {self.message}"
        return f"{self.error_prefix}: {self.message}"


class DefaultLoadError(LayerconfError):
    """Raised when the default config file cannot be read or parsed."""

    error_prefix = "Failed to load default config"


class ConfigCreateError(LayerconfError):
    """Raised when a missing config file cannot be generated."""

    error_prefix = "Failed to generate config file"


class ConfigLoadError(LayerconfError):
    """Raised when an existing config file cannot be read or parsed."""

    error_prefix = "Failed to load config file"


class ConfigSaveError(LayerconfError):
    """Raised when the config cannot be written back to disk."""

    error_prefix = "Failed to save config file"
