"""
Error model shared by the parse and print directions.

A combinator failure is a small tree. Leaves carry a message and an
``ErrorKind``; structural combinators wrap a child failure with the object
key or array index they were working on, so the full path is assembled
bottom-up as the error propagates; alternation aggregates every branch's
failure instead of keeping only the last one.

``ParsingError`` and ``PrintingError`` share the representation but are
distinct classes so a failure can never be mistaken for the other direction.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Self

from .pretty import describe
from .value import JsonValue


class ErrorKind(Enum):
    """Classification of a leaf failure."""

    FAILURE = "failure"
    TYPE_MISMATCH = "type_mismatch"
    KEY_NOT_PRESENT = "key_not_present"
    ARITY_VIOLATION = "arity_violation"
    OUT_OF_RANGE = "out_of_range"
    EXPECTED_EMPTY = "expected_empty"
    TRAILING_INPUT = "trailing_input"
    UNEXPECTED_INPUT = "unexpected_input"
    CONVERSION_FAILURE = "conversion_failure"
    MULTIPLE_FAILURES = "multiple_failures"
    EXTERNAL_CODEC_FAILURE = "external_codec_failure"


@dataclass(frozen=True)
class PathSegment:
    """One step of an error path: an object key or an array index."""

    key: str | None = None
    index: int | None = None

    def __post_init__(self) -> None:
        if (self.key is None) == (self.index is None):
            raise ValueError("PathSegment needs exactly one of key or index")

    def __str__(self) -> str:
        if self.key is not None:
            return f'"{self.key}"'
        return f"[index {self.index}]"


class CombinatorError(ValueError):
    """
    Base class for combinator failures.

    Exactly one shape applies to each instance: a leaf (``message``), a path
    wrapper (``segment`` + ``underlying``), or an aggregate (``failures``).
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        kind: ErrorKind = ErrorKind.FAILURE,
        segment: PathSegment | None = None,
        underlying: BaseException | None = None,
        failures: Iterable[BaseException] = (),
    ) -> None:
        if (segment is None) != (underlying is None):
            raise ValueError("a path wrapper needs a segment and an underlying error")
        self.message = message
        self.segment = segment
        self.underlying = underlying
        self.failures = tuple(failures)
        self._kind = ErrorKind.MULTIPLE_FAILURES if self.failures else kind
        super().__init__(self._render())

    @classmethod
    def failure(
        cls, message: str, kind: ErrorKind = ErrorKind.FAILURE
    ) -> Self:
        return cls(message, kind=kind)

    @classmethod
    def at_key(cls, key: str, error: BaseException) -> Self:
        return cls(segment=PathSegment(key=key), underlying=error)

    @classmethod
    def at_index(cls, index: int, error: BaseException) -> Self:
        return cls(segment=PathSegment(index=index), underlying=error)

    @classmethod
    def multiple(cls, failures: Iterable[BaseException]) -> Self:
        failures = tuple(failures)
        if len(failures) < 2:
            raise ValueError("an aggregate needs at least two failures")
        return cls(failures=failures)

    @property
    def path(self) -> tuple[PathSegment, ...]:
        """Key/index segments from the outermost wrapper to the leaf."""
        segments: list[PathSegment] = []
        error: BaseException | None = self
        while isinstance(error, CombinatorError) and error.segment is not None:
            segments.append(error.segment)
            error = error.underlying
        return tuple(segments)

    @property
    def leaf(self) -> BaseException:
        """The innermost non-wrapper error (a leaf or an aggregate)."""
        error: BaseException = self
        while isinstance(error, CombinatorError) and error.underlying is not None:
            error = error.underlying
        return error

    @property
    def kind(self) -> ErrorKind:
        leaf = self.leaf
        if isinstance(leaf, CombinatorError):
            return leaf._kind
        return ErrorKind.FAILURE

    def _render(self) -> str:
        if self.failures:
            branches = "\n\n".join(str(error) for error in self.failures)
            return f"error: multiple failures occurred\n\n{branches}"
        if self.segment is not None:
            path = "/".join(str(segment) for segment in self.path)
            return f"At {path}:\n{self.leaf}"
        return self.message or ""

    def __str__(self) -> str:
        return self._render()


class ParsingError(CombinatorError):
    """A failure while parsing a structured value (or text) into output."""

    @classmethod
    def type_mismatch(cls, expected: str, got: JsonValue) -> Self:
        return cls(
            f"Expected {expected}, but found:\n{describe(got)}",
            kind=ErrorKind.TYPE_MISMATCH,
        )


class PrintingError(CombinatorError):
    """A failure while printing output back into a structured value."""

    @classmethod
    def type_mismatch(
        cls,
        combinator: str,
        expected: str,
        got: JsonValue,
        kind: ErrorKind = ErrorKind.TYPE_MISMATCH,
    ) -> Self:
        article = "An" if combinator[:1] in "AEIOU" else "A"
        return cls(
            f"{article} {combinator} parser can only print to {expected} "
            f"but attempted to print to:\n{describe(got)}",
            kind=kind,
        )

    @classmethod
    def expected_empty(cls, combinator: str, got: JsonValue) -> Self:
        return cls.type_mismatch(
            combinator,
            "an empty JSON object",
            got,
            kind=ErrorKind.EXPECTED_EMPTY,
        )
