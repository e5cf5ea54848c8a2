"""Converters from decoded JSON values to typed Python values.

A Converter pairs a shape test (``accepts``) with a decode function. The
shape test answers "is this value already a T?" and is what the registry
uses to pick a converter from an example default. ``convert`` runs the
decode function and degrades to the caller's fallback when the value does
not fit; it never raises.

Decode functions signal a shape mismatch by raising TypeError (ValueError
and OverflowError are treated the same way), which keeps custom converters
to a single plain function. Any other exception from a decode function is
logged with its traceback and also degrades to the fallback:

    >>> def decode_path(raw):
    ...     if not isinstance(raw, str):
    ...         raise TypeError("not a path string")
    ...     return Path(raw)
    >>> PATH = register(
    ...     "PATH",
    ...     Converter("PATH", Path, lambda v: isinstance(v, Path),
    ...               decode_path),
    ... )
"""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from layerconf.constants import (
    CONVERTER_BOOLEAN,
    CONVERTER_DOUBLE,
    CONVERTER_INTEGER,
    CONVERTER_STRING,
    CONVERTER_VALUE_LIST,
    CONVERTER_VALUE_MAP,
)
from layerconf.logger import get_logger, run_silently
from layerconf.value import (
    JsonKind,
    JsonValue,
    kind_of,
    wrap_list,
    wrap_mapping,
)

logger = get_logger(__name__)

T = TypeVar("T")

_MISSING: Any = object()


@dataclass(frozen=True)
class Converter(Generic[T]):
    """Named conversion from a raw JSON value to a target type.

    Attributes:
        name: Registry name of the converter
        target: Python type produced by the converter
        accepts: Shape test, True if a value already is a target value
        decode: Decode function; raises TypeError when the shape is wrong

    """

    name: str
    target: type
    accepts: Callable[[Any], bool] = field(repr=False, compare=False)
    decode: Callable[[Any], T] = field(repr=False, compare=False)

    def convert(
        self,
        raw: Any,  # noqa: ANN401
        fallback: T | None = None,
    ) -> T | None:
        """Decode raw, returning fallback unchanged if it does not fit.

        Args:
            raw: Decoded JSON value (a JsonValue is unwrapped one level)
            fallback: Value returned when raw cannot be converted

        Returns:
            Converted value, or fallback

        """
        if isinstance(raw, JsonValue):
            raw = raw.value
        logger.debug("Trying to convert '%s' to %s...", raw, self.name)
        try:
            result = self.decode(raw)
        except (TypeError, ValueError, OverflowError) as e:
            logger.debug("Unable to convert '%s' to %s: %s", raw, self.name, e)
            return fallback
        except Exception as e:  # noqa: BLE001
            # Custom decoders may fail in any way; convert() never raises
            logger.debug(
                "Converter %s failed on '%s': %s",
                self.name,
                raw,
                e,
                exc_info=e,
            )
            return fallback
        logger.debug("Successfully converted '%s' to %s", result, self.name)
        return result


def _decode_string(raw: Any) -> str:  # noqa: ANN401
    if kind_of(raw) is not JsonKind.STRING:
        msg = "it is not a string"
        raise TypeError(msg)
    return raw


def _decode_double(raw: Any) -> float:  # noqa: ANN401
    # JSON does not distinguish 10 from 10.0, so integers widen to float
    if kind_of(raw) not in (JsonKind.FLOAT, JsonKind.INTEGER):
        msg = "it is not a number"
        raise TypeError(msg)
    return float(raw)


def _decode_integer(raw: Any) -> int:  # noqa: ANN401
    if kind_of(raw) is JsonKind.INTEGER:
        return int(raw)
    number = run_silently(DOUBLE.convert, raw, None)
    if number is None:
        msg = "it is not a number"
        raise TypeError(msg)
    # int() truncates toward zero; inf/nan raise OverflowError/ValueError
    return int(number)


def _decode_boolean(raw: Any) -> bool:  # noqa: ANN401
    if kind_of(raw) is not JsonKind.BOOLEAN:
        msg = "it is not a boolean"
        raise TypeError(msg)
    return raw


def _decode_value_list(raw: Any) -> list[JsonValue]:  # noqa: ANN401
    if kind_of(raw) is not JsonKind.LIST:
        msg = "it is not a list"
        raise TypeError(msg)
    return wrap_list(raw)


def _decode_value_map(raw: Any) -> dict[str, JsonValue]:  # noqa: ANN401
    if kind_of(raw) is not JsonKind.MAPPING:
        msg = "it is not a mapping"
        raise TypeError(msg)
    return wrap_mapping(raw)


def _is_kind(kind: JsonKind) -> Callable[[Any], bool]:
    return lambda value: kind_of(value) is kind


STRING: Converter[str] = Converter(
    CONVERTER_STRING, str, _is_kind(JsonKind.STRING), _decode_string
)
DOUBLE: Converter[float] = Converter(
    CONVERTER_DOUBLE, float, _is_kind(JsonKind.FLOAT), _decode_double
)
INTEGER: Converter[int] = Converter(
    CONVERTER_INTEGER, int, _is_kind(JsonKind.INTEGER), _decode_integer
)
BOOLEAN: Converter[bool] = Converter(
    CONVERTER_BOOLEAN, bool, _is_kind(JsonKind.BOOLEAN), _decode_boolean
)
VALUE_LIST: Converter[list[JsonValue]] = Converter(
    CONVERTER_VALUE_LIST, list, _is_kind(JsonKind.LIST), _decode_value_list
)
VALUE_MAP: Converter[dict[str, JsonValue]] = Converter(
    CONVERTER_VALUE_MAP, dict, _is_kind(JsonKind.MAPPING), _decode_value_map
)

BUILTIN_CONVERTERS: tuple[Converter[Any], ...] = (
    STRING,
    DOUBLE,
    INTEGER,
    BOOLEAN,
    VALUE_LIST,
    VALUE_MAP,
)


class ConverterRegistry:
    """Ordered name -> Converter table.

    Registering a name twice replaces the earlier converter but keeps its
    position. Probing walks converters in registration order and uses the
    first whose shape test accepts the example value.
    """

    def __init__(self, converters: Iterable[Converter[Any]] = ()) -> None:
        """Initialize the registry.

        Args:
            converters: Converters to register under their own names

        """
        self._converters: dict[str, Converter[Any]] = {}
        for converter in converters:
            self.register(converter.name, converter)

    @classmethod
    def with_builtins(cls) -> "ConverterRegistry":
        """Create a registry holding the built-in converters."""
        return cls(BUILTIN_CONVERTERS)

    def register(self, name: str, converter: Converter[T]) -> Converter[T]:
        """Store converter under name and return it unchanged."""
        self._converters[name] = converter
        return converter

    def get(self, name: str) -> Converter[Any] | None:
        """Return the converter registered under name, if any."""
        return self._converters.get(name)

    def names(self) -> list[str]:
        """Return registered names in registration order."""
        return list(self._converters)

    def find_by_instance(
        self,
        example: Any,  # noqa: ANN401
    ) -> Converter[Any] | None:
        """Return the first converter whose shape test accepts example.

        A shape test that raises counts as not accepting.
        """
        for converter in self._converters.values():
            try:
                accepted = converter.accepts(example)
            except Exception as e:  # noqa: BLE001
                logger.debug(
                    "Shape test of %s failed on '%s': %s",
                    converter.name,
                    example,
                    e,
                )
                continue
            if accepted:
                return converter
        logger.debug("Couldn't find a converter for '%s'!", example)
        return None

    def convert(
        self,
        raw: Any,  # noqa: ANN401
        target: Any,  # noqa: ANN401
        fallback: Any = _MISSING,  # noqa: ANN401
    ) -> Any:  # noqa: ANN401
        """Convert raw either with an explicit converter or by probing.

        Args:
            raw: Decoded JSON value to convert
            target: A Converter, or a typed example value whose shape
                selects the converter and which doubles as the fallback
            fallback: Explicit fallback for the converter form
                (defaults to None)

        Returns:
            Converted value, or the fallback

        """
        if isinstance(target, Converter):
            explicit = None if fallback is _MISSING else fallback
            return target.convert(raw, explicit)

        converter = self.find_by_instance(target)
        if converter is None:
            logger.debug(
                "Cannot convert '%s' to '%s': no converter for this type",
                raw,
                type(target).__name__,
            )
            return target
        return converter.convert(raw, target)

    def __contains__(self, name: object) -> bool:
        """Return True if a converter is registered under name."""
        return name in self._converters

    def __iter__(self) -> Iterator[Converter[Any]]:
        """Iterate over converters in registration order."""
        return iter(self._converters.values())

    def __len__(self) -> int:
        """Return the number of registered converters."""
        return len(self._converters)


DEFAULT_REGISTRY = ConverterRegistry.with_builtins()


def register(name: str, converter: Converter[T]) -> Converter[T]:
    """Register converter in DEFAULT_REGISTRY."""
    return DEFAULT_REGISTRY.register(name, converter)


def convert(
    raw: Any,  # noqa: ANN401
    target: Any,  # noqa: ANN401
    fallback: Any = _MISSING,  # noqa: ANN401
) -> Any:  # noqa: ANN401
    """Convert raw with DEFAULT_REGISTRY; see ConverterRegistry.convert."""
    return DEFAULT_REGISTRY.convert(raw, target, fallback)
