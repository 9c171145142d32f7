"""
Combinators over plain text.

These run inside ``String`` and as object key parsers. The box holds the
remaining text: parsing consumes a prefix of it, and printing prepends to
it, which is why ``Sequence`` prints its children last to first.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from .core import Input
from .core import Parser
from .core import ParserPrinter
from .core import unexpected_input
from .errors import ErrorKind
from .errors import PrintingError

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _require_text(combinator: str, output: object) -> str:
    if not isinstance(output, str):
        raise PrintingError(
            f"A {combinator} parser can only print strings, "
            f"got {type(output).__name__}.",
            kind=ErrorKind.TYPE_MISMATCH,
        )
    return output


class TextParser[Output](ParserPrinter[Output]):
    def empty_input(self) -> str:
        return ""


class Rest(TextParser[str]):
    """Consumes all remaining text."""

    def parse_from(self, input: Input) -> str:
        output = input.value
        input.value = ""
        return output

    def print_into(self, output: str, input: Input) -> None:
        input.value = _require_text("Rest", output) + input.value


class Prefix(TextParser[str]):
    """Consumes the longest run of characters matching ``predicate``."""

    def __init__(
        self,
        predicate: Callable[[str], bool],
        minimum: int = 0,
        maximum: int | None = None,
    ) -> None:
        self.predicate = predicate
        self.minimum = minimum
        self.maximum = maximum

    def _describe(self) -> str:
        if self.maximum is None:
            return f"at least {self.minimum} matching characters"
        return f"{self.minimum}-{self.maximum} matching characters"

    def parse_from(self, input: Input) -> str:
        text: str = input.value
        limit = len(text) if self.maximum is None else min(len(text), self.maximum)
        count = 0
        while count < limit and self.predicate(text[count]):
            count += 1
        if count < self.minimum:
            raise unexpected_input(input, self._describe())
        input.value = text[count:]
        return text[:count]

    def print_into(self, output: str, input: Input) -> None:
        output = _require_text("Prefix", output)
        too_long = self.maximum is not None and len(output) > self.maximum
        if len(output) < self.minimum or too_long:
            raise PrintingError(
                f"A Prefix parser expecting {self._describe()} "
                f"was given {len(output)} to print."
            )
        if not all(self.predicate(char) for char in output):
            raise PrintingError(
                f"A Prefix parser was given {output!r}, "
                "which contains non-matching characters."
            )
        input.value = output + input.value


class Literal(TextParser[None]):
    """Matches exact text and produces nothing."""

    is_void = True

    def __init__(self, literal: str) -> None:
        self.literal = literal

    def parse_from(self, input: Input) -> None:
        if not input.value.startswith(self.literal):
            raise unexpected_input(input, f'"{self.literal}"')
        input.value = input.value[len(self.literal) :]

    def print_into(self, output: None, input: Input) -> None:
        input.value = self.literal + input.value


class IntegerText(TextParser[int]):
    """An optionally signed run of decimal digits."""

    def parse_from(self, input: Input) -> int:
        match = _INTEGER.match(input.value)
        if match is None:
            raise unexpected_input(input, "integer")
        input.value = input.value[match.end() :]
        return int(match.group())

    def print_into(self, output: int, input: Input) -> None:
        if isinstance(output, bool) or not isinstance(output, int):
            raise PrintingError(
                f"An IntegerText parser can only print integers, "
                f"got {type(output).__name__}.",
                kind=ErrorKind.TYPE_MISMATCH,
            )
        input.value = str(output) + input.value


class End(TextParser[None]):
    """Succeeds only when no text remains."""

    is_void = True

    def parse_from(self, input: Input) -> None:
        if input.value:
            raise unexpected_input(
                input, "end of input", kind=ErrorKind.TRAILING_INPUT
            )

    def print_into(self, output: None, input: Input) -> None:
        if input.value:
            raise PrintingError(
                f"An End parser expected nothing to follow, "
                f"but found {input.value!r}.",
                kind=ErrorKind.TRAILING_INPUT,
            )


def print_text(parser: Parser[Any], output: Any) -> str:
    """Prints ``output`` through ``parser`` into an empty string."""
    box = Input("")
    parser.print_into(output, box)
    return box.value
