"""
Combinator protocol and the generic composites.

A combinator parses by narrowing the value held in an ``Input`` box and
returning its output, and (when it is a printer) prints by building a value
into a box. The same composites work over structured values and over text:
the box holds a ``JsonValue`` for the former and the remaining ``str`` for
the latter.

Values in a box are immutable, so saving ``box.value`` before an attempt and
assigning it back afterwards is all it takes to make a step transactional.
"""

from __future__ import annotations

from abc import ABC
from abc import abstractmethod
from collections.abc import Callable
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from . import codec
from .errors import CombinatorError
from .errors import ErrorKind
from .errors import ParsingError
from .errors import PrintingError
from .pretty import PrettyConfig
from .pretty import describe
from .pretty import pretty_printed
from .value import EMPTY


class Input:
    """
    Exclusive mutable cursor over the value being parsed or printed.

    ``origin`` keeps the value the cursor started from so text diagnostics
    can point into the original string.
    """

    __slots__ = ("origin", "value")

    def __init__(self, value: Any, origin: Any = None) -> None:
        self.value = value
        self.origin = value if origin is None else origin

    def __repr__(self) -> str:
        return f"Input({self.value!r})"


@dataclass(frozen=True)
class Caret:
    """Where in some text a parse failed and what was expected there."""

    origin: str
    offset: int
    expectations: tuple[str, ...]

    def _location(self) -> tuple[str, int, str]:
        origin = self.origin
        line_no = origin.count("\n", 0, self.offset) + 1
        line_start = origin.rfind("\n", 0, self.offset) + 1
        line_end = origin.find("\n", self.offset)
        if line_end < 0:
            line_end = len(origin)
        column = self.offset - line_start + 1
        return str(line_no), column, origin[line_start:line_end]

    def render(self) -> str:
        gutter, column, line = self._location()
        pad = " " * len(gutter)
        lines = [
            "error: unexpected input",
            f"{pad}--> input:{gutter}:{column}",
            f"{gutter} | {line}",
        ]
        lines.extend(
            f"{pad} | {' ' * (column - 1)}^ expected {expected}"
            for expected in self.expectations
        )
        return "\n".join(lines)

    def render_span(self, headline: str, length: int, label: str) -> str:
        """Underlines ``length`` characters starting at the offset."""
        gutter, column, line = self._location()
        pad = " " * len(gutter)
        length = max(length, 1)
        columns = str(column)
        if length > 1:
            columns += f"-{column + length - 1}"
        return "\n".join(
            [
                headline,
                f"{pad}--> input:{gutter}:{columns}",
                f"{gutter} | {line}",
                f"{pad} | {' ' * (column - 1)}{'^' * length} {label}",
            ]
        )

    def error(self, kind: ErrorKind) -> ParsingError:
        error = ParsingError(self.render(), kind=kind)
        error.caret = self
        return error


def unexpected_input(
    box: Input, expected: str, kind: ErrorKind = ErrorKind.UNEXPECTED_INPUT
) -> ParsingError:
    """Builds a caret diagnostic pointing at the current position in text."""
    origin = box.origin if isinstance(box.origin, str) else ""
    remaining = box.value if isinstance(box.value, str) else ""
    return Caret(origin, len(origin) - len(remaining), (expected,)).error(kind)


def _merged_carets(errors: list[ParsingError]) -> ParsingError | None:
    """Folds text failures at one position into a single diagnostic."""
    carets = [getattr(error, "caret", None) for error in errors]
    if any(caret is None for caret in carets):
        return None
    first = carets[0]
    if any(
        (caret.origin, caret.offset) != (first.origin, first.offset)
        for caret in carets
    ):
        return None
    expectations = tuple(e for caret in carets for e in caret.expectations)
    return Caret(first.origin, first.offset, expectations).error(errors[0].kind)


class Parser[Output](ABC):
    """
    A combinator that can parse.

    Subclasses implement ``parse_from``. ``can_print`` tells whether
    ``print_into`` is available; ``is_void`` marks combinators whose output
    carries no information (``Sequence`` drops it).
    """

    can_print: bool = False
    is_void: bool = False

    @abstractmethod
    def parse_from(self, input: Input) -> Output:
        """Parses from ``input``, narrowing ``input.value`` on success."""

    def print_into(self, output: Output, input: Input) -> None:
        raise TypeError(f"{type(self).__name__} can only parse, not print")

    def empty_input(self) -> Any:
        """
        The accumulator printing starts from.

        ``None`` means the combinator fits any domain and leaves the choice
        to its siblings.
        """
        return EMPTY

    def parse(self, value: Any) -> Output:
        """
        Parses a whole value.

        Structured values may be left partially consumed; text must be
        consumed entirely.
        """
        box = Input(value)
        output = self.parse_from(box)
        if isinstance(box.value, str) and box.value:
            raise unexpected_input(
                box, "end of input", kind=ErrorKind.TRAILING_INPUT
            )
        return output

    def print(self, output: Output) -> Any:
        """Prints ``output`` into a fresh empty accumulator."""
        accumulator = self.empty_input()
        box = Input(EMPTY if accumulator is None else accumulator)
        self.print_into(output, box)
        return box.value

    def map(self, transform: Callable[[Output], Any] | Conversion) -> Mapped:
        """Transforms the output; only a ``Conversion`` keeps printing."""
        return Mapped(self, transform)

    def filter(self, predicate: Callable[[Output], bool]) -> Filtered:
        return Filtered(self, predicate)

    def decode(self, data: bytes | str, **kwargs: bool | int) -> Output:
        """Decodes JSON bytes and parses the resulting value."""
        return self.parse(codec.decode(data, **kwargs))

    def encode(self, output: Output) -> bytes:
        """Prints ``output`` and encodes the value as canonical JSON bytes."""
        return codec.encode(self.print(output))

    def pretty_print(
        self, output: Output, config: PrettyConfig | None = None, **kwargs: Any
    ) -> str:
        return pretty_printed(self.print(output), config, **kwargs)

    def _require_printer(self) -> None:
        if not self.can_print:
            raise TypeError(
                f"{type(self).__name__} cannot print: "
                "one of its parsers is parse-only"
            )


class ParserPrinter[Output](Parser[Output]):
    """A combinator that can both parse and print."""

    can_print = True

    @abstractmethod
    def print_into(self, output: Output, input: Input) -> None:
        """Prints ``output`` into ``input.value``."""


def _coerce(parser: Parser[Any] | str) -> Parser[Any]:
    if isinstance(parser, str):
        from .text import Literal

        return Literal(parser)
    if not isinstance(parser, Parser):
        raise TypeError(f"expected a Parser, got {type(parser).__name__}")
    return parser


def _first_accumulator(parsers: tuple[Parser[Any], ...]) -> Any:
    for parser in parsers:
        accumulator = parser.empty_input()
        if accumulator is not None:
            return accumulator
    return None


def _first_failure_or_all[E: CombinatorError](
    error_type: type[E], errors: list[E]
) -> E:
    if len(errors) == 1:
        return errors[0]
    return error_type.multiple(errors)


@dataclass(frozen=True)
class Conversion[A, B]:
    """
    A pair of functions converting between two representations.

    ``apply`` turns parsed values into outputs and ``unapply`` turns outputs
    back for printing. Either side signals failure by raising ``ValueError``.
    """

    apply: Callable[[A], B]
    unapply: Callable[[B], A]

    def then[C](self, other: Conversion[B, C]) -> Conversion[A, C]:
        """Chains ``other`` after this conversion."""
        return Conversion(
            lambda value: other.apply(self.apply(value)),
            lambda value: self.unapply(other.unapply(value)),
        )


def memberwise(cls: type, arity: int | None = None) -> Conversion[Any, Any]:
    """
    Converts between a tuple of values and an instance of ``cls``.

    Fields are read back through ``__match_args__``, which dataclasses and
    named tuples provide. With ``arity=1`` the single value is passed bare.
    """
    match_args = getattr(cls, "__match_args__", None)
    if match_args is None:
        raise TypeError(f"{cls.__name__} does not define __match_args__")
    if arity is None:
        arity = len(match_args)

    def apply(values: Any) -> Any:
        return cls(values) if arity == 1 else cls(*values)

    def unapply(instance: Any) -> Any:
        if not isinstance(instance, cls):
            raise ValueError(
                f"expected {cls.__name__}, got {type(instance).__name__}"
            )
        values = tuple(getattr(instance, name) for name in match_args[:arity])
        return values[0] if arity == 1 else values

    return Conversion(apply, unapply)


def representing[E: Enum](enum_type: type[E]) -> Conversion[Any, E]:
    """Converts between raw values and members of ``enum_type``."""

    def unapply(member: E) -> Any:
        if not isinstance(member, enum_type):
            raise ValueError(
                f"expected {enum_type.__name__}, got {type(member).__name__}"
            )
        return member.value

    return Conversion(enum_type, unapply)


class Mapped(Parser[Any]):
    """Applies a function (parse-only) or a ``Conversion`` to an output."""

    def __init__(
        self, upstream: Parser[Any], transform: Callable[[Any], Any] | Conversion
    ) -> None:
        self.upstream = _coerce(upstream)
        self.transform = transform
        self.can_print = self.upstream.can_print and isinstance(
            transform, Conversion
        )

    def parse_from(self, input: Input) -> Any:
        saved = input.value
        output = self.upstream.parse_from(input)
        apply = (
            self.transform.apply
            if isinstance(self.transform, Conversion)
            else self.transform
        )
        try:
            return apply(output)
        except CombinatorError:
            input.value = saved
            raise
        except ValueError as e:
            input.value = saved
            raise ParsingError(
                f"Failed to convert {output!r}: {e}",
                kind=ErrorKind.CONVERSION_FAILURE,
            ) from e

    def print_into(self, output: Any, input: Input) -> None:
        self._require_printer()
        if not isinstance(self.transform, Conversion):
            raise TypeError("Mapped cannot print: its transform is a plain function")
        try:
            value = self.transform.unapply(output)
        except CombinatorError:
            raise
        except ValueError as e:
            raise PrintingError(
                f"Failed to convert {output!r} for printing: {e}",
                kind=ErrorKind.CONVERSION_FAILURE,
            ) from e
        self.upstream.print_into(value, input)

    def empty_input(self) -> Any:
        return self.upstream.empty_input()


def _shown(value: Any) -> str:
    return f'"{value}"' if isinstance(value, str) else repr(value)


class Filtered(Parser[Any]):
    """Rejects outputs that fail ``predicate``, in both directions."""

    def __init__(
        self, upstream: Parser[Any], predicate: Callable[[Any], bool]
    ) -> None:
        self.upstream = _coerce(upstream)
        self.predicate = predicate
        self.can_print = self.upstream.can_print
        self.is_void = self.upstream.is_void

    def parse_from(self, input: Input) -> Any:
        saved = input.value
        output = self.upstream.parse_from(input)
        if not self.predicate(output):
            headline = (
                f"error: processed value {_shown(output)} "
                "failed to satisfy predicate"
            )
            if isinstance(saved, str) and isinstance(input.origin, str):
                start = len(input.origin) - len(saved)
                caret = Caret(input.origin, start, ())
                headline = caret.render_span(
                    headline, len(saved) - len(input.value), "processed input"
                )
            input.value = saved
            raise ParsingError(headline)
        return output

    def print_into(self, output: Any, input: Input) -> None:
        self._require_printer()
        if not self.predicate(output):
            raise PrintingError(
                f"error: value {_shown(output)} failed to satisfy predicate"
            )
        self.upstream.print_into(output, input)

    def empty_input(self) -> Any:
        return self.upstream.empty_input()


class Sequence(Parser[Any]):
    """
    Runs parsers one after another on the same input.

    The output is the tuple of the non-void outputs, a single output bare,
    or ``None`` when every child is void. Plain strings are literals. A
    failure restores the input to where the sequence started.
    """

    def __init__(self, *parsers: Parser[Any] | str) -> None:
        if not parsers:
            raise ValueError("Sequence needs at least one parser")
        self.parsers = tuple(_coerce(parser) for parser in parsers)
        self.producers = tuple(p for p in self.parsers if not p.is_void)
        self.can_print = all(parser.can_print for parser in self.parsers)
        self.is_void = not self.producers

    def parse_from(self, input: Input) -> Any:
        saved = input.value
        outputs = []
        try:
            for parser in self.parsers:
                output = parser.parse_from(input)
                if not parser.is_void:
                    outputs.append(output)
        except ParsingError:
            input.value = saved
            raise

        if not outputs:
            return None
        if len(outputs) == 1:
            return outputs[0]
        return tuple(outputs)

    def _split(self, output: Any) -> list[Any]:
        count = len(self.producers)
        if count == 0:
            return []
        if count == 1:
            return [output]
        values = list(output)
        if len(values) != count:
            raise PrintingError(
                f"A Sequence of {count} outputs was given {len(values)} "
                "values to print."
            )
        return values

    def print_into(self, output: Any, input: Input) -> None:
        self._require_printer()
        values = iter(reversed(self._split(output)))
        # Text printers prepend, so the last parser prints first.
        for parser in reversed(self.parsers):
            value = None if parser.is_void else next(values)
            parser.print_into(value, input)

    def empty_input(self) -> Any:
        return _first_accumulator(self.parsers)


class Record(Mapped):
    """A ``Sequence`` whose outputs construct an instance of ``cls``."""

    def __init__(self, cls: type, *parsers: Parser[Any] | str) -> None:
        sequence = Sequence(*parsers)
        super().__init__(
            sequence, memberwise(cls, arity=len(sequence.producers))
        )
        self.cls = cls


class OneOf(Parser[Any]):
    """
    Tries alternatives in order; the first success wins.

    When every alternative fails, the error aggregates all of their
    failures. Printing tries the alternatives in the same order.
    """

    def __init__(self, *parsers: Parser[Any] | str) -> None:
        if not parsers:
            raise ValueError("OneOf needs at least one parser")
        self.parsers = tuple(_coerce(parser) for parser in parsers)
        self.can_print = all(parser.can_print for parser in self.parsers)
        self.is_void = all(parser.is_void for parser in self.parsers)

    def parse_from(self, input: Input) -> Any:
        saved = input.value
        errors: list[ParsingError] = []
        for parser in self.parsers:
            try:
                return parser.parse_from(input)
            except ParsingError as e:
                input.value = saved
                errors.append(e)
        if len(errors) > 1 and (merged := _merged_carets(errors)):
            raise merged
        raise _first_failure_or_all(ParsingError, errors)

    def print_into(self, output: Any, input: Input) -> None:
        self._require_printer()
        saved = input.value
        errors: list[PrintingError] = []
        for parser in self.parsers:
            try:
                parser.print_into(output, input)
                return
            except PrintingError as e:
                input.value = saved
                errors.append(e)
        raise _first_failure_or_all(PrintingError, errors)

    def empty_input(self) -> Any:
        return _first_accumulator(self.parsers)


class Cases(Parser[Any]):
    """
    Tagged-union case selection.

    Parses like ``OneOf`` over the registered parsers; prints through the
    parser registered for the output's type, so printing never guesses.
    """

    def __init__(self, cases: Mapping[type, Parser[Any]]) -> None:
        if not cases:
            raise ValueError("Cases needs at least one case")
        self.cases = dict(cases)
        self.alternatives = OneOf(*self.cases.values())
        self.can_print = self.alternatives.can_print

    def parse_from(self, input: Input) -> Any:
        return self.alternatives.parse_from(input)

    def print_into(self, output: Any, input: Input) -> None:
        self._require_printer()
        for case_type, parser in self.cases.items():
            if isinstance(output, case_type):
                parser.print_into(output, input)
                return
        names = ", ".join(case_type.__name__ for case_type in self.cases)
        raise PrintingError(
            f"No case handles a value of type {type(output).__name__} "
            f"(cases: {names}).",
            kind=ErrorKind.TYPE_MISMATCH,
        )

    def empty_input(self) -> Any:
        return self.alternatives.empty_input()


class Always[T](ParserPrinter[T]):
    """Succeeds without consuming anything, returning ``value``."""

    def __init__(self, value: T) -> None:
        self.value = value
        self.is_void = value is None

    def parse_from(self, input: Input) -> T:
        return self.value

    def print_into(self, output: T, input: Input) -> None:
        pass

    def empty_input(self) -> None:
        return None


class Not(ParserPrinter[None]):
    """
    Succeeds, consuming nothing, only where ``parser`` fails.

    Printing is a no-op.
    """

    is_void = True

    def __init__(self, parser: Parser[Any] | str) -> None:
        self.parser = _coerce(parser)

    def parse_from(self, input: Input) -> None:
        saved = input.value
        try:
            self.parser.parse_from(input)
        except ParsingError:
            return
        finally:
            input.value = saved
        if isinstance(saved, str):
            raise unexpected_input(input, "not to match")
        raise ParsingError(
            f"Expected not to match, but found:\n{describe(saved)}",
            kind=ErrorKind.UNEXPECTED_INPUT,
        )

    def print_into(self, output: None, input: Input) -> None:
        pass

    def empty_input(self) -> Any:
        return self.parser.empty_input()
