"""
Leaf combinators: null, booleans, numbers and strings.

Each one consumes the whole node it matches, leaving ``EMPTY`` behind, and
prints only into an empty accumulator.
"""

from __future__ import annotations

import struct
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .core import Conversion
from .core import Input
from .core import Parser
from .core import ParserPrinter
from .errors import ErrorKind
from .errors import ParsingError
from .errors import PrintingError
from .pretty import describe
from .text import Rest
from .text import print_text
from .value import EMPTY
from .value import INT64_MAX
from .value import INT64_MIN
from .value import NULL
from .value import BoolValue
from .value import FloatValue
from .value import IntValue
from .value import NullValue
from .value import StringValue
from .value import is_empty


def _require_empty(combinator: str, input: Input) -> None:
    if not is_empty(input.value):
        raise PrintingError.expected_empty(combinator, input.value)


class Null(ParserPrinter[None]):
    """Matches ``null``."""

    is_void = True

    def parse_from(self, input: Input) -> None:
        if not isinstance(input.value, NullValue):
            raise ParsingError.type_mismatch("a null value", input.value)
        input.value = EMPTY

    def print_into(self, output: None, input: Input) -> None:
        _require_empty("Null", input)
        input.value = NULL


class Boolean(ParserPrinter[bool]):
    def parse_from(self, input: Input) -> bool:
        match input.value:
            case BoolValue(flag):
                input.value = EMPTY
                return flag
        raise ParsingError.type_mismatch("a boolean", input.value)

    def print_into(self, output: bool, input: Input) -> None:
        if not isinstance(output, bool):
            raise PrintingError(
                f"A Boolean parser can only print bool values, "
                f"got {type(output).__name__}.",
                kind=ErrorKind.TYPE_MISMATCH,
            )
        _require_empty("Boolean", input)
        input.value = BoolValue(output)


def _to_float32(number: float) -> float:
    # Raises OverflowError beyond the float32 range.
    return struct.unpack("f", struct.pack("f", number))[0]


def _to_decimal(number: int | float) -> Decimal:
    # repr keeps the shortest round-tripping digits of a float.
    return Decimal(repr(number) if isinstance(number, float) else number)


@dataclass(frozen=True)
class NumericType:
    """
    How a Python numeric type maps onto integer or float nodes.

    ``from_number`` narrows a node's number into the output type and
    ``to_number`` widens an output back. Integral types also carry their
    inclusive bounds, checked in both directions.
    """

    name: str
    integral: bool
    from_number: Callable[[int | float], Any]
    to_number: Callable[[Any], int | float]
    accepts: tuple[type, ...]
    minimum: int | None = None
    maximum: int | None = None

    @classmethod
    def integer(cls, name: str, bits: int, signed: bool = True) -> NumericType:
        if signed:
            minimum, maximum = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1
        else:
            # Integer nodes are signed 64-bit, so uint64 tops out there.
            minimum, maximum = 0, min(2**bits - 1, INT64_MAX)
        return cls(name, True, int, int, (int,), minimum, maximum)

    def in_range(self, number: int) -> bool:
        return (self.minimum is None or number >= self.minimum) and (
            self.maximum is None or number <= self.maximum
        )

    def range_text(self) -> str:
        return f"{self.minimum}...{self.maximum}"


INT = NumericType("int", True, int, int, (int,), INT64_MIN, INT64_MAX)
INT8 = NumericType.integer("int8", 8)
INT16 = NumericType.integer("int16", 16)
INT32 = NumericType.integer("int32", 32)
INT64 = NumericType.integer("int64", 64)
UINT8 = NumericType.integer("uint8", 8, signed=False)
UINT16 = NumericType.integer("uint16", 16, signed=False)
UINT32 = NumericType.integer("uint32", 32, signed=False)
UINT64 = NumericType.integer("uint64", 64, signed=False)
FLOAT = NumericType("float", False, float, float, (int, float))
FLOAT32 = NumericType("float32", False, _to_float32, _to_float32, (int, float))
DECIMAL = NumericType("decimal", False, _to_decimal, float, (int, float, Decimal))

_BY_PYTHON_TYPE = {int: INT, float: FLOAT, Decimal: DECIMAL}


class Number(ParserPrinter[Any]):
    """
    A number narrowed into a ``NumericType``.

    Integral types accept integer nodes only. Float types accept float
    nodes and, unless ``allow_integer`` is false, integer nodes too.
    """

    def __init__(
        self, numeric: NumericType | type = INT, *, allow_integer: bool = True
    ) -> None:
        if isinstance(numeric, type):
            numeric = _BY_PYTHON_TYPE[numeric]
        self.numeric = numeric
        self.allow_integer = allow_integer

    def _expected(self) -> str:
        if self.numeric.integral:
            return "an integer number"
        if self.allow_integer:
            return "a number"
        return "a floating point number"

    def parse_from(self, input: Input) -> Any:
        numeric = self.numeric
        match input.value:
            case IntValue(number) if numeric.integral:
                if not numeric.in_range(number):
                    raise ParsingError(
                        f"Expected an integer number in range "
                        f"{numeric.range_text()}, but found:\n"
                        f"{describe(input.value)}",
                        kind=ErrorKind.OUT_OF_RANGE,
                    )
            case FloatValue(number) if not numeric.integral:
                pass
            case IntValue(number) if self.allow_integer and not numeric.integral:
                pass
            case _:
                raise ParsingError.type_mismatch(self._expected(), input.value)

        try:
            output = numeric.from_number(number)
        except OverflowError as e:
            raise ParsingError(
                f"Expected a number representable as {numeric.name}, "
                f"but found:\n{describe(input.value)}",
                kind=ErrorKind.OUT_OF_RANGE,
            ) from e
        input.value = EMPTY
        return output

    def print_into(self, output: Any, input: Input) -> None:
        numeric = self.numeric
        if isinstance(output, bool) or not isinstance(output, numeric.accepts):
            raise PrintingError(
                f"A Number parser for {numeric.name} cannot print a value "
                f"of type {type(output).__name__}.",
                kind=ErrorKind.TYPE_MISMATCH,
            )
        _require_empty("Number", input)
        try:
            number = numeric.to_number(output)
        except OverflowError as e:
            raise PrintingError(
                f"A Number parser for {numeric.name} cannot represent "
                f"{output}.",
                kind=ErrorKind.OUT_OF_RANGE,
            ) from e
        if numeric.integral:
            if not numeric.in_range(number):
                raise PrintingError(
                    f"A Number parser for {numeric.name} can only print "
                    f"values in range {numeric.range_text()}, "
                    f"but was given {number}.",
                    kind=ErrorKind.OUT_OF_RANGE,
                )
            input.value = IntValue(number)
        else:
            input.value = FloatValue(number)


class String(Parser[Any]):
    """
    A string node, optionally parsed further as text.

    ``String()`` yields the raw string. Given a text combinator, the whole
    string must be consumed by it; given a ``Conversion``, the raw string is
    converted.
    """

    def __init__(self, text: Parser[Any] | Conversion | None = None) -> None:
        if text is None:
            text = Rest()
        elif isinstance(text, Conversion):
            text = Rest().map(text)
        self.text = text
        self.can_print = text.can_print

    def parse_from(self, input: Input) -> Any:
        match input.value:
            case StringValue(raw):
                output = self.text.parse(raw)
                input.value = EMPTY
                return output
        raise ParsingError.type_mismatch("a string", input.value)

    def print_into(self, output: Any, input: Input) -> None:
        self._require_printer()
        _require_empty("String", input)
        input.value = StringValue(print_text(self.text, output))
