"""
Structured value model shared by the codec and the combinators.

A JSON document is represented as a tree of immutable nodes, one dataclass
per variant. ``IntValue`` and ``FloatValue`` are distinct: ``IntValue(1)`` is
never equal to ``FloatValue(1.0)``, and ``BoolValue(True)`` is never equal to
``IntValue(1)``. Object equality ignores key order.

Nodes are never mutated in place. Combinators narrow a document by replacing
the node held in an ``Input`` box with a smaller one, which is what makes a
failed parse leave its input untouched.
"""

from __future__ import annotations

from collections.abc import Iterator
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from typing import Any

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class NullValue:
    pass


@dataclass(frozen=True)
class BoolValue:
    value: bool


@dataclass(frozen=True)
class IntValue:
    """A signed 64-bit integer node."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("IntValue requires an int")
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise ValueError(
                f"{self.value} is outside the signed 64-bit integer range"
            )


@dataclass(frozen=True)
class FloatValue:
    value: float

    def __post_init__(self) -> None:
        if not isinstance(self.value, float):
            object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True)
class StringValue:
    value: str


@dataclass(frozen=True)
class ArrayValue:
    items: tuple[JsonValue, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[JsonValue]:
        return iter(self.items)

    def __getitem__(self, index: int) -> JsonValue:
        return self.items[index]


@dataclass(frozen=True)
class ObjectValue:
    """A keyed map node. Keys are unique; order is irrelevant for equality."""

    fields: Mapping[str, JsonValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Own a private copy so no caller can mutate the node afterwards.
        object.__setattr__(self, "fields", dict(self.fields))

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, key: object) -> bool:
        return key in self.fields

    def __getitem__(self, key: str) -> JsonValue:
        return self.fields[key]

    def get(self, key: str) -> JsonValue | None:
        return self.fields.get(key)

    def sorted_items(self) -> list[tuple[str, JsonValue]]:
        """Returns the entries in lexicographic key order."""
        return sorted(self.fields.items(), key=lambda item: item[0])

    def with_field(self, key: str, value: JsonValue) -> ObjectValue:
        """Returns a copy with ``key`` inserted or overwritten."""
        fields = dict(self.fields)
        fields[key] = value
        return ObjectValue(fields)

    def without(self, key: str) -> ObjectValue:
        """Returns a copy with ``key`` removed, if present."""
        fields = dict(self.fields)
        fields.pop(key, None)
        return ObjectValue(fields)


type JsonValue = (
    NullValue
    | BoolValue
    | IntValue
    | FloatValue
    | StringValue
    | ArrayValue
    | ObjectValue
)

JSON_VALUE_TYPES = (
    NullValue,
    BoolValue,
    IntValue,
    FloatValue,
    StringValue,
    ArrayValue,
    ObjectValue,
)

NULL = NullValue()

# The "fully consumed" sentinel and the seed accumulator for printing.
EMPTY = ObjectValue({})


def is_empty(value: JsonValue) -> bool:
    """True when ``value`` is the empty sentinel ``ObjectValue({})``."""
    return isinstance(value, ObjectValue) and not value.fields


def kind_name(value: JsonValue) -> str:
    """Human readable name of a node's variant."""
    match value:
        case NullValue():
            return "null"
        case BoolValue():
            return "boolean"
        case IntValue():
            return "integer"
        case FloatValue():
            return "float"
        case StringValue():
            return "string"
        case ArrayValue():
            return "array"
        case ObjectValue():
            return "object"
    raise TypeError(f"not a JSON value: {value!r}")


def from_native(obj: Any) -> JsonValue:  # noqa: PLR0911
    """
    Builds a structured value from plain Python data.

    Accepts None, bool, int, float, str, list/tuple and dicts with str keys.
    Integers outside the signed 64-bit range become ``FloatValue``, the same
    promotion the decoder applies to oversized literals. Existing nodes are
    returned unchanged.
    """
    if isinstance(obj, JSON_VALUE_TYPES):
        return obj
    if obj is None:
        return NULL
    if isinstance(obj, bool):
        return BoolValue(obj)
    if isinstance(obj, int):
        if INT64_MIN <= obj <= INT64_MAX:
            return IntValue(obj)
        return FloatValue(float(obj))
    if isinstance(obj, float):
        return FloatValue(obj)
    if isinstance(obj, str):
        return StringValue(obj)
    if isinstance(obj, list | tuple):
        return ArrayValue(tuple(from_native(item) for item in obj))
    if isinstance(obj, Mapping):
        fields: dict[str, JsonValue] = {}
        for key, item in obj.items():
            if not isinstance(key, str):
                msg = f"keys must be str, not {type(key).__name__}"
                raise TypeError(msg)
            fields[key] = from_native(item)
        return ObjectValue(fields)
    msg = f"Object of type {type(obj).__name__} is not JSON serializable"
    raise TypeError(msg)


def to_native(value: JsonValue) -> Any:
    """Converts a structured value back into plain Python data."""
    match value:
        case NullValue():
            return None
        case BoolValue(v) | IntValue(v) | FloatValue(v) | StringValue(v):
            return v
        case ArrayValue(items):
            return [to_native(item) for item in items]
        case ObjectValue(fields):
            return {key: to_native(item) for key, item in fields.items()}
    raise TypeError(f"not a JSON value: {value!r}")
