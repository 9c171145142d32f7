"""Arrays and objects with homogeneous elements."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .core import Conversion
from .core import Input
from .core import Parser
from .errors import ErrorKind
from .errors import ParsingError
from .errors import PrintingError
from .text import Rest
from .text import print_text
from .value import EMPTY
from .value import ArrayValue
from .value import ObjectValue
from .value import is_empty


@dataclass(frozen=True)
class Arity:
    """Inclusive bounds on a container's size; ``maximum=None`` is open."""

    minimum: int = 0
    maximum: int | None = None

    def __post_init__(self) -> None:
        if self.minimum < 0:
            raise ValueError("minimum must be non-negative")
        if self.maximum is not None and self.maximum < self.minimum:
            raise ValueError("maximum must not be below minimum")

    @classmethod
    def coerce(cls, arity: Arity | int | tuple[int, int | None] | None) -> Arity:
        """Accepts an ``Arity``, an exact count, or a ``(min, max)`` pair."""
        if arity is None:
            return cls()
        if isinstance(arity, Arity):
            return arity
        if isinstance(arity, int):
            return cls(arity, arity)
        minimum, maximum = arity
        return cls(minimum, maximum)

    def __contains__(self, count: int) -> bool:
        return count >= self.minimum and (
            self.maximum is None or count <= self.maximum
        )

    def describe(self, noun: str) -> str:
        """E.g. ``at least 1 element``, ``3 elements``, ``1-5 elements``."""
        if self.maximum is None:
            text = f"at least {self.minimum}"
        elif self.maximum > self.minimum:
            text = f"{self.minimum}-{self.maximum}"
        else:
            text = str(self.minimum)
        singular = self.minimum == 1 and self.maximum in (None, 1)
        return f"{text} {noun}" if singular else f"{text} {noun}s"


class Array(Parser[list[Any]]):
    """An array whose every element is parsed by ``element``."""

    def __init__(
        self,
        element: Parser[Any],
        arity: Arity | int | tuple[int, int | None] | None = None,
    ) -> None:
        self.element = element
        self.arity = Arity.coerce(arity)
        self.can_print = element.can_print

    def parse_from(self, input: Input) -> list[Any]:
        match input.value:
            case ArrayValue(items):
                pass
            case _:
                raise ParsingError.type_mismatch("an array", input.value)

        if len(items) not in self.arity:
            raise ParsingError(
                f"Expected {self.arity.describe('element')} in array, "
                f"but found {len(items)}.",
                kind=ErrorKind.ARITY_VIOLATION,
            )

        outputs = []
        for index, item in enumerate(items):
            try:
                outputs.append(self.element.parse(item))
            except ParsingError as e:
                raise ParsingError.at_index(index, e) from e
        input.value = EMPTY
        return outputs

    def print_into(self, output: Iterable[Any], input: Input) -> None:
        self._require_printer()
        if not is_empty(input.value):
            raise PrintingError.expected_empty("Array", input.value)
        outputs = list(output)
        if len(outputs) not in self.arity:
            raise PrintingError(
                f"An Array parser requiring "
                f"{self.arity.describe('element')} was given "
                f"{len(outputs)} to print.",
                kind=ErrorKind.ARITY_VIOLATION,
            )

        items = []
        for index, element in enumerate(outputs):
            try:
                items.append(self.element.print(element))
            except PrintingError as e:
                raise PrintingError.at_index(index, e) from e
        input.value = ArrayValue(tuple(items))


class Object(Parser[dict[Any, Any]]):
    """
    An object with arbitrary keys and homogeneous values.

    Keys are parsed as text by ``keys`` (a text combinator or a
    ``Conversion`` over the raw key), the raw key string by default. Keys
    are visited in lexicographic order, so the first failure reported is
    deterministic.
    """

    def __init__(
        self,
        values: Parser[Any],
        *,
        keys: Parser[Any] | Conversion | None = None,
        arity: Arity | int | tuple[int, int | None] | None = None,
    ) -> None:
        if keys is None:
            keys = Rest()
        elif isinstance(keys, Conversion):
            keys = Rest().map(keys)
        self.keys = keys
        self.values = values
        self.arity = Arity.coerce(arity)
        self.can_print = keys.can_print and values.can_print

    def parse_from(self, input: Input) -> dict[Any, Any]:
        if not isinstance(input.value, ObjectValue):
            raise ParsingError.type_mismatch("an object", input.value)
        node = input.value

        if len(node) not in self.arity:
            raise ParsingError(
                f"Expected {self.arity.describe('key/value pair')} in object, "
                f"but found {len(node)}.",
                kind=ErrorKind.ARITY_VIOLATION,
            )

        outputs = {}
        for key, item in node.sorted_items():
            try:
                parsed_key = self.keys.parse(key)
            except ParsingError as e:
                raise ParsingError(
                    f"Failed to parse key {key}:\n{e}", kind=e.kind
                ) from e
            try:
                outputs[parsed_key] = self.values.parse(item)
            except ParsingError as e:
                raise ParsingError.at_key(key, e) from e
        input.value = EMPTY
        return outputs

    def print_into(self, output: Mapping[Any, Any], input: Input) -> None:
        self._require_printer()
        if not is_empty(input.value):
            raise PrintingError.expected_empty("Object", input.value)
        if len(output) not in self.arity:
            raise PrintingError(
                f"An Object parser requiring "
                f"{self.arity.describe('key/value pair')} was given "
                f"{len(output)} to print.",
                kind=ErrorKind.ARITY_VIOLATION,
            )

        fields = {}
        for key, value in output.items():
            try:
                printed_key = print_text(self.keys, key)
            except PrintingError as e:
                raise PrintingError(
                    f"Printing failure for key {key}:\n{e}", kind=e.kind
                ) from e
            try:
                fields[printed_key] = self.values.print(value)
            except PrintingError as e:
                raise PrintingError.at_key(printed_key, e) from e
        input.value = ObjectValue(fields)
