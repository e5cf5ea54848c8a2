"""Top-level package for layerconf.

Layered JSON configuration: a mutable current config overlaid on an
immutable default config, backed by a JSON file that is generated from the
defaults when missing, plus a registry of converters for typed lookups.
"""

from importlib.metadata import PackageNotFoundError, version

from layerconf.converters import (
    BOOLEAN,
    DEFAULT_REGISTRY,
    DOUBLE,
    INTEGER,
    STRING,
    VALUE_LIST,
    VALUE_MAP,
    Converter,
    ConverterRegistry,
    convert,
    register,
)
from layerconf.exceptions import (
    ConfigCreateError,
    ConfigLoadError,
    ConfigSaveError,
    DefaultLoadError,
    LayerconfError,
)
from layerconf.store import ConfigStore, LoadStatus
from layerconf.value import JsonKind, JsonValue

try:
    __version__ = version("layerconf")
except PackageNotFoundError:
    # Fallback for development environments where package isn't installed
    __version__ = "dev"

__all__ = [
    "BOOLEAN",
    "DEFAULT_REGISTRY",
    "DOUBLE",
    "INTEGER",
    "STRING",
    "VALUE_LIST",
    "VALUE_MAP",
    "ConfigCreateError",
    "ConfigLoadError",
    "ConfigSaveError",
    "ConfigStore",
    "Converter",
    "ConverterRegistry",
    "DefaultLoadError",
    "JsonKind",
    "JsonValue",
    "LayerconfError",
    "LoadStatus",
    "__version__",
    "convert",
    "register",
]
