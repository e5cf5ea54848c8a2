"""Layered JSON configuration store.

A ConfigStore keeps two mappings of key -> JsonValue: the *current* values,
loaded from (and saved to) a JSON file, and the *default* values, loaded
once from a shipped default file or given as a mapping. Lookups fall back
from current to default where asked to.

Construction never raises. If the config file is missing it is generated
from the default content; if it cannot be generated or read, the store is
marked broken and the current values become a copy of the defaults, so the
store is always usable after construction.

The store does no locking. Callers sharing one instance between threads
must serialize put*/save/delete calls themselves, and two instances
pointing at the same file will race on it.
"""

import copy
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import orjson

from layerconf.constants import CONFIG_FILE_SUFFIX, JSON_WRITE_OPTIONS
from layerconf.converters import DEFAULT_REGISTRY, Converter, ConverterRegistry
from layerconf.exceptions import (
    ConfigCreateError,
    ConfigLoadError,
    ConfigSaveError,
    DefaultLoadError,
    LayerconfError,
)
from layerconf.logger import get_logger, run_silently
from layerconf.value import JsonValue, deep_wrap_mapping, wrap_mapping

logger = get_logger(__name__)

T = TypeVar("T")

_MISSING: Any = object()


class LoadStatus(Enum):
    """How the current values were obtained at construction."""

    LOADED = "loaded"  # existing config file was read
    CREATED = "created"  # config file was generated from defaults, then read
    RECOVERED = "recovered"  # file unusable, current is a copy of defaults


def _encode_default(obj: Any) -> Any:  # noqa: ANN401
    """orjson hook: serialize JsonValue wrappers as their content."""
    if isinstance(obj, JsonValue):
        return obj.value
    raise TypeError


def _raw_copy(value: JsonValue | None) -> Any:  # noqa: ANN401
    if value is None:
        return None
    raw = value.value
    if isinstance(raw, list):
        return list(raw)
    if isinstance(raw, dict):
        return dict(raw)
    return raw


def read_document(
    path: Path, error_cls: type[LayerconfError] = ConfigLoadError
) -> dict[str, Any]:
    """Read and parse a JSON object from path.

    An empty (or whitespace-only) file reads as an empty object.

    Args:
        path: File to read
        error_cls: Exception type raised on failure

    Returns:
        The decoded top-level object

    Raises:
        LayerconfError: error_cls, if the file cannot be read, is not valid
            JSON, or its top-level value is not an object

    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise error_cls(str(e), path) from e

    if not data.strip():
        return {}

    try:
        document = orjson.loads(data)
    except orjson.JSONDecodeError as e:
        msg = f"Invalid JSON: {e}"
        raise error_cls(msg, path) from e

    if not isinstance(document, dict):
        msg = (
            "top-level JSON value must be an object, "
            f"got {type(document).__name__}"
        )
        raise error_cls(msg, path)
    return document


def encode_document(
    path: Path,
    document: Mapping[Any, Any],
    error_cls: type[LayerconfError] = ConfigSaveError,
) -> bytes:
    """Serialize document as pretty-printed, null-preserving JSON.

    Raises:
        LayerconfError: error_cls, if a value cannot be serialized

    """
    try:
        return orjson.dumps(
            document, default=_encode_default, option=JSON_WRITE_OPTIONS
        )
    except orjson.JSONEncodeError as e:
        msg = f"Cannot serialize config: {e}"
        raise error_cls(msg, path) from e


def write_document(
    path: Path,
    payload: bytes,
    error_cls: type[LayerconfError] = ConfigSaveError,
) -> None:
    """Write an encoded document to a new file at path.

    The file is created exclusively; an existing file is an error.

    Raises:
        LayerconfError: error_cls, if writing fails

    """
    try:
        with path.open("xb") as f:
            f.write(payload)
    except OSError as e:
        raise error_cls(str(e), path) from e


class ConfigStore:
    """Current configuration overlaid on default configuration.

    Example:
        >>> store = ConfigStore.in_directory(
        ...     config_dir, "mymod", {"var1": 10}
        ... )
        >>> store.get_as("var1", INTEGER)
        10
        >>> store.put("var1", 20)
        >>> store.save()
        True

    """

    def __init__(
        self,
        config_file: Path | str,
        default: Path | str | Mapping[Any, Any],
        *,
        registry: ConverterRegistry | None = None,
    ) -> None:
        """Load the default values and the config file.

        Args:
            config_file: JSON file holding the current values. Generated
                from the default content if it does not exist.
            default: Path to a default JSON file, or a mapping of raw
                default values
            registry: Converter registry used by get_as() probing
                (defaults to DEFAULT_REGISTRY)

        """
        self._config_file = Path(config_file)
        self._registry = registry if registry is not None else DEFAULT_REGISTRY
        self._current: dict[str, JsonValue] = {}
        self._defaults: dict[str, JsonValue] = {}
        self._broken = False
        self._status = LoadStatus.LOADED
        self._failure: LayerconfError | None = None

        self._bootstrap(default)

    @classmethod
    def in_directory(
        cls,
        config_dir: Path | str,
        name: str,
        default: Path | str | Mapping[Any, Any],
        *,
        registry: ConverterRegistry | None = None,
    ) -> "ConfigStore":
        """Create a store for ``config_dir / f"{name}.json"``."""
        config_file = Path(config_dir) / f"{name}{CONFIG_FILE_SUFFIX}"
        return cls(config_file, default, registry=registry)

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------

    def _bootstrap(self, default: Path | str | Mapping[Any, Any]) -> None:
        raw_default = self._load_defaults(default)

        created = False
        try:
            if not self._config_file.exists():
                self._create_config(raw_default)
                created = True
        except OSError as e:
            error = ConfigCreateError(str(e), self._config_file)
            error.__cause__ = e
            self._mark_broken(error)
        except ConfigCreateError as e:
            self._mark_broken(e)

        if not self._broken:
            try:
                self._current = deep_wrap_mapping(
                    read_document(self._config_file, ConfigLoadError)
                )
            except ConfigLoadError as e:
                self._mark_broken(e)

        if self._broken:
            self._current = copy.deepcopy(self._defaults)
        elif created:
            self._status = LoadStatus.CREATED

    def _load_defaults(
        self, default: Path | str | Mapping[Any, Any]
    ) -> Mapping[Any, Any] | None:
        """Fill the default values, returning the raw default content.

        Returns None if a default file could not be loaded; the defaults
        stay empty in that case.
        """
        if isinstance(default, Mapping):
            self._defaults = wrap_mapping(default)
            return default

        default_file = Path(default)
        try:
            document = read_document(default_file, DefaultLoadError)
        except DefaultLoadError as e:
            logger.error("%s", e, exc_info=e)
            return None

        self._defaults = deep_wrap_mapping(document)
        return document

    def _create_config(self, raw_default: Mapping[Any, Any] | None) -> None:
        if raw_default is None:
            msg = "default config content is unavailable"
            raise ConfigCreateError(msg, self._config_file)
        payload = encode_document(
            self._config_file, raw_default, ConfigCreateError
        )
        write_document(self._config_file, payload, ConfigCreateError)
        logger.debug("Generated config file %s", self._config_file)

    def _mark_broken(self, error: LayerconfError) -> None:
        self._broken = True
        self._status = LoadStatus.RECOVERED
        self._failure = error
        logger.error("%s; using default values", error, exc_info=error)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_raw(self, key: str) -> Any:  # noqa: ANN401
        """Return the raw current value for key, or None if absent.

        A list or mapping is returned as a shallow copy; mutating it does
        not change the store.
        """
        return _raw_copy(self._current.get(key))

    def get_raw_or_default(
        self,
        key: str,
        default: Any = _MISSING,  # noqa: ANN401
    ) -> Any:  # noqa: ANN401
        """Return the raw current value, falling back to default.

        Without an explicit default the fallback is the raw value of the
        same key in the default values.
        """
        if default is _MISSING:
            default = self.get_raw_from_default(key)
        value = self.get_raw(key)
        return value if value is not None else default

    def get_raw_from_default(self, key: str) -> Any:  # noqa: ANN401
        """Return the raw default value for key, or None if absent."""
        return _raw_copy(self._defaults.get(key))

    def get(self, key: str) -> JsonValue:
        """Return the current value for key; JsonValue(None) if absent."""
        return JsonValue.of(self.get_raw(key))

    def get_or_default(
        self,
        key: str,
        default: Any = _MISSING,  # noqa: ANN401
    ) -> JsonValue:
        """Return the current value, falling back to default.

        Without an explicit default the fallback is the default value of
        the same key.
        """
        if default is _MISSING:
            default = self.get_from_default(key)
        return JsonValue.of(self.get_raw_or_default(key, default))

    def get_from_default(self, key: str) -> JsonValue:
        """Return the default value for key; JsonValue(None) if absent."""
        return JsonValue.of(self.get_raw_from_default(key))

    def get_as(self, key: str, target: Any) -> Any:  # noqa: ANN401
        """Return the current value for key converted to a typed value.

        Args:
            key: Config key
            target: Either a Converter, or a typed fallback value whose
                shape selects the converter from the registry

        Returns:
            With a Converter: the converted current value, else the
            converted default value, else None. With a fallback value:
            the converted current value, else the fallback.

        """
        if isinstance(target, Converter):
            fallback = target.convert(self.get_raw_from_default(key), None)
            return target.convert(self.get_raw(key), fallback)
        return self.get(key).to_typed(target, self._registry)

    def __contains__(self, key: object) -> bool:
        """Return True if key has a current value."""
        return key in self._current

    def __len__(self) -> int:
        """Return the number of current keys."""
        return len(self._current)

    def keys(self) -> list[str]:
        """Return current keys in insertion order."""
        return list(self._current)

    # ------------------------------------------------------------------
    # Mutation and persistence
    # ------------------------------------------------------------------

    def put(self, key: str, value: Any) -> None:  # noqa: ANN401
        """Set key to value in memory only.

        Nothing is written to disk; call save() to persist the change.
        """
        self._current[key] = JsonValue.of(value)
        logger.debug(
            "Config %s was updated in memory; call save() to persist it",
            self._config_file.name,
        )

    def put_all(self, values: Mapping[str, Any]) -> None:
        """Set every key of values in memory only; see put()."""
        self._current.update(
            (key, JsonValue.of(value)) for key, value in values.items()
        )
        logger.debug(
            "Config %s was updated in memory; call save() to persist it",
            self._config_file.name,
        )

    def put_and_save(self, key: str, value: Any) -> bool:  # noqa: ANN401
        """Set key to value and save; return save()'s result."""
        self.put(key, value)
        return self.save()

    def put_all_and_save(self, values: Mapping[str, Any]) -> bool:
        """Set every key of values and save; return save()'s result."""
        self.put_all(values)
        return self.save()

    def save(self) -> bool:
        """Write the current values to the config file.

        The existing file is removed first (without the delete() warnings)
        and rewritten with keys in insertion order.

        Returns:
            True on success, False if the file could not be written

        """
        logger.debug("Saving config to %s...", self._config_file)
        document = {key: self.get_raw(key) for key in self._current}
        try:
            # Encode first so an unserializable value leaves the file intact
            payload = encode_document(
                self._config_file, document, ConfigSaveError
            )
            run_silently(self.delete)
            write_document(self._config_file, payload, ConfigSaveError)
        except ConfigSaveError as e:
            logger.error("%s", e, exc_info=e)
            return False

        logger.debug("Saved config to %s", self._config_file)
        return True

    def delete(self) -> bool:
        """Remove the config file; in-memory values are kept.

        Returns:
            True if the file was removed, False if it was already missing
            or could not be removed

        """
        try:
            if not self._config_file.exists():
                logger.warning(
                    "Config file %s was already deleted!", self._config_file
                )
                return False
            self._config_file.unlink()
        except OSError as e:
            logger.error(
                "Failed to delete config file %s: %s", self._config_file, e
            )
            return False

        logger.warning(
            "Config file %s was deleted. Restart the application "
            "to regenerate it!",
            self._config_file.name,
        )
        return True

    # ------------------------------------------------------------------
    # Copies and accessors
    # ------------------------------------------------------------------

    def copy(self) -> "ConfigStore":
        """Return an independent copy pointing at the same config file.

        Both value mappings are deep-copied; the broken flag, load status
        and failure are carried over.
        """
        clone = copy.copy(self)
        clone._current = copy.deepcopy(self._current)
        clone._defaults = copy.deepcopy(self._defaults)
        return clone

    def snapshot_current(self) -> dict[str, JsonValue]:
        """Return a copy of the current values."""
        return copy.deepcopy(self._current)

    def snapshot_default(self) -> dict[str, JsonValue]:
        """Return a copy of the default values."""
        return copy.deepcopy(self._defaults)

    def is_broken(self) -> bool:
        """Return True if the config file could not be created or read."""
        return self._broken

    @property
    def broken(self) -> bool:
        """Whether the store runs on a copy of the default values."""
        return self._broken

    @property
    def status(self) -> LoadStatus:
        """How the current values were obtained."""
        return self._status

    @property
    def failure(self) -> LayerconfError | None:
        """The error that made the store broken, if any."""
        return self._failure

    @property
    def config_file(self) -> Path:
        """Path of the backing JSON file."""
        return self._config_file

    @property
    def registry(self) -> ConverterRegistry:
        """Converter registry used for probe conversions."""
        return self._registry

    def __repr__(self) -> str:
        """Return a short description of the store."""
        return (
            f"ConfigStore(config_file={str(self._config_file)!r}, "
            f"status={self._status.value}, keys={len(self._current)})"
        )
