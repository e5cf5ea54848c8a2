"""Tagged wrapper around one decoded JSON unit.

A JsonValue holds whatever orjson produced for a single JSON node: None,
bool, int, float, str, a list or a dict. Lists and dicts may themselves
hold JsonValues (after deep_wrap) or plain decoded values (after a shallow
wrap); both forms compare equal when their JSON content is the same.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from layerconf.converters import Converter, ConverterRegistry

T = TypeVar("T")


class JsonKind(Enum):
    """Shape tag of a JSON node."""

    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    LIST = "list"
    MAPPING = "mapping"
    OTHER = "other"


def kind_of(raw: Any) -> JsonKind:  # noqa: ANN401, PLR0911
    """Classify a decoded value by its JSON shape.

    bool is checked before int because bool is an int subclass.
    """
    if isinstance(raw, JsonValue):
        return raw.kind
    if raw is None:
        return JsonKind.NULL
    if isinstance(raw, bool):
        return JsonKind.BOOLEAN
    if isinstance(raw, int):
        return JsonKind.INTEGER
    if isinstance(raw, float):
        return JsonKind.FLOAT
    if isinstance(raw, str):
        return JsonKind.STRING
    if isinstance(raw, list | tuple):
        return JsonKind.LIST
    if isinstance(raw, Mapping):
        return JsonKind.MAPPING
    return JsonKind.OTHER


def _unwrap(raw: Any) -> Any:  # noqa: ANN401
    return raw.value if isinstance(raw, JsonValue) else raw


def _json_equal(left: Any, right: Any) -> bool:  # noqa: ANN401
    left, right = _unwrap(left), _unwrap(right)
    left_kind, right_kind = kind_of(left), kind_of(right)
    if left_kind is not right_kind:
        return False
    if left_kind is JsonKind.LIST:
        return len(left) == len(right) and all(
            _json_equal(a, b) for a, b in zip(left, right, strict=True)
        )
    if left_kind is JsonKind.MAPPING:
        if set(left) != set(right):
            return False
        return all(_json_equal(left[key], right[key]) for key in left)
    if left_kind is JsonKind.FLOAT and math.isnan(left) and math.isnan(right):
        return True
    return left == right


@dataclass(frozen=True, eq=False)
class JsonValue:
    """Immutable wrapper around a single decoded JSON value.

    Attributes:
        value: The wrapped value, as decoded (or as put by the caller)

    """

    value: Any = None

    @classmethod
    def of(cls, value: Any) -> JsonValue:  # noqa: ANN401
        """Wrap value, returning it unchanged if it already is a JsonValue."""
        if isinstance(value, JsonValue):
            return value
        return cls(value)

    @property
    def kind(self) -> JsonKind:
        """Shape tag of the wrapped value."""
        return kind_of(self.value)

    @property
    def is_null(self) -> bool:
        """Whether the wrapped value is JSON null (or absent)."""
        return self.value is None

    def to_python(self) -> Any:  # noqa: ANN401
        """Return the wrapped value with every nested JsonValue unwrapped."""
        return unwrap_deep(self.value)

    def to_typed(
        self, fallback: T, registry: ConverterRegistry | None = None
    ) -> T:
        """Convert using the converter whose shape matches fallback.

        Args:
            fallback: Typed example value, returned if conversion fails
            registry: Registry to probe (defaults to DEFAULT_REGISTRY)

        Returns:
            Converted value, or fallback

        """
        from layerconf.converters import DEFAULT_REGISTRY  # noqa: PLC0415

        if registry is None:
            registry = DEFAULT_REGISTRY
        return registry.convert(self.value, fallback)

    def to_type(
        self, converter: Converter[T], fallback: T | None = None
    ) -> T | None:
        """Convert with an explicit converter, degrading to fallback."""
        return converter.convert(self.value, fallback)

    def __eq__(self, other: object) -> bool:
        """Compare by JSON kind and content, recursively."""
        if not isinstance(other, JsonValue):
            return NotImplemented
        return _json_equal(self.value, other.value)

    def __repr__(self) -> str:
        """Return a compact representation."""
        return f"JsonValue({self.value!r})"


def wrap_list(values: Sequence[Any]) -> list[JsonValue]:
    """Wrap each element of a sequence (one level only)."""
    return [JsonValue.of(value) for value in values]


def wrap_mapping(values: Mapping[Any, Any]) -> dict[str, JsonValue]:
    """Wrap each value of a mapping (one level only), coercing keys to str."""
    return {str(key): JsonValue.of(value) for key, value in values.items()}


def deep_wrap(raw: Any) -> JsonValue:  # noqa: ANN401
    """Recursively wrap a decoded JSON document.

    Every nested list element and mapping value becomes a JsonValue, so a
    whole document turns into a tree of JsonValues.
    """
    raw = _unwrap(raw)
    kind = kind_of(raw)
    if kind is JsonKind.LIST:
        return JsonValue([deep_wrap(item) for item in raw])
    if kind is JsonKind.MAPPING:
        return JsonValue(deep_wrap_mapping(raw))
    return JsonValue(raw)


def deep_wrap_mapping(raw: Mapping[Any, Any]) -> dict[str, JsonValue]:
    """Deep-wrap every top-level entry of a decoded JSON object."""
    return {str(key): deep_wrap(value) for key, value in raw.items()}


def unwrap_deep(raw: Any) -> Any:  # noqa: ANN401
    """Inverse of deep_wrap: strip JsonValue wrappers at every level."""
    raw = _unwrap(raw)
    kind = kind_of(raw)
    if kind is JsonKind.LIST:
        return [unwrap_deep(item) for item in raw]
    if kind is JsonKind.MAPPING:
        return {key: unwrap_deep(item) for key, item in raw.items()}
    return raw
