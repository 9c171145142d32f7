"""
Keyed field access on objects.

Fields are the only combinators that leave a residue: parsing one removes
its key from the object (or keeps a narrowed value under it) so that the
remaining keys stay available to the next combinator in a ``Sequence``.
"""

from __future__ import annotations

from typing import Any

from .core import Input
from .core import Parser
from .core import ParserPrinter
from .errors import ErrorKind
from .errors import ParsingError
from .errors import PrintingError
from .value import EMPTY
from .value import NullValue
from .value import ObjectValue
from .value import is_empty

_NO_DEFAULT = object()


def _require_object(combinator: str, input: Input) -> ObjectValue:
    if not isinstance(input.value, ObjectValue):
        raise PrintingError.type_mismatch(combinator, "an object", input.value)
    return input.value


class _Present(ParserPrinter[None]):
    """Accepts any node (optionally not null) and discards it."""

    is_void = True

    def __init__(self, allow_null: bool) -> None:
        self.allow_null = allow_null

    def parse_from(self, input: Input) -> None:
        if not self.allow_null and isinstance(input.value, NullValue):
            raise ParsingError.type_mismatch("a non-null value", input.value)
        input.value = EMPTY

    def print_into(self, output: None, input: Input) -> None:
        if not is_empty(input.value):
            raise PrintingError.expected_empty("Field.exists", input.value)


class Field(Parser[Any]):
    """
    The value under ``key``, parsed by ``value``.

    A missing key is an error. Whatever ``value`` leaves unconsumed stays
    under the key; a fully consumed value removes the key.
    """

    def __init__(self, key: str, value: Parser[Any]) -> None:
        self.key = key
        self.value = value
        self.can_print = value.can_print
        self.is_void = value.is_void

    @classmethod
    def exists(cls, key: str, allow_null: bool = False) -> Field:
        """Requires ``key`` to be present and ignores its value."""
        return cls(key, _Present(allow_null))

    def parse_from(self, input: Input) -> Any:
        node = input.value
        if not isinstance(node, ObjectValue):
            raise ParsingError.type_mismatch(
                f'an object (containing the key "{self.key}")', node
            )
        if self.key not in node:
            raise ParsingError(
                f'Key "{self.key}" not present.',
                kind=ErrorKind.KEY_NOT_PRESENT,
            )

        field_input = Input(node[self.key])
        try:
            output = self.value.parse_from(field_input)
        except ParsingError as e:
            raise ParsingError.at_key(self.key, e) from e

        if is_empty(field_input.value):
            input.value = node.without(self.key)
        else:
            input.value = node.with_field(self.key, field_input.value)
        return output

    def print_into(self, output: Any, input: Input) -> None:
        self._require_printer()
        node = _require_object("Field", input)
        try:
            printed = self.value.print(output)
        except PrintingError as e:
            raise PrintingError.at_key(self.key, e) from e
        input.value = node.with_field(self.key, printed)


class OptionalField(Parser[Any]):
    """
    The value under ``key`` when present and not null.

    Absent or null keys produce ``default`` (``None`` without one). When
    printing without a default, ``None`` is omitted. With a default, an
    output equal to it is omitted provided the default's type defines
    equality, and ``None`` goes to the value printer like any other output.
    """

    def __init__(
        self, key: str, value: Parser[Any], default: Any = _NO_DEFAULT
    ) -> None:
        self.key = key
        self.value = value
        self.default = default
        self.can_print = value.can_print

    @property
    def has_default(self) -> bool:
        return self.default is not _NO_DEFAULT

    def parse_from(self, input: Input) -> Any:
        node = input.value
        if not isinstance(node, ObjectValue):
            raise ParsingError.type_mismatch(
                f'an object (optionally containing the key "{self.key}")', node
            )

        item = node.get(self.key)
        if item is None or isinstance(item, NullValue):
            if item is not None:
                input.value = node.without(self.key)
            return self.default if self.has_default else None

        try:
            output = self.value.parse(item)
        except ParsingError as e:
            raise ParsingError.at_key(self.key, e) from e
        input.value = node.without(self.key)
        return output

    def _omits(self, output: Any) -> bool:
        if not self.has_default or self.default is None:
            return output is None
        if type(self.default).__eq__ is object.__eq__:
            return False
        return output == self.default

    def print_into(self, output: Any, input: Input) -> None:
        self._require_printer()
        node = _require_object("OptionalField", input)
        if self._omits(output):
            return
        try:
            printed = self.value.print(output)
        except PrintingError as e:
            raise PrintingError.at_key(self.key, e) from e
        input.value = node.with_field(self.key, printed)
