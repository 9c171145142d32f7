"""
Bridge to pydantic's type-driven codec.

``Reflective`` hands a whole node to a ``TypeAdapter`` so any type pydantic
understands (models, dataclasses, typed dicts, containers) can sit inside a
combinator tree. Validation errors are mapped back onto the combinator error
model, their ``loc`` becoming the key/index path.
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from . import codec
from .core import Input
from .core import ParserPrinter
from .errors import ErrorKind
from .errors import ParsingError
from .errors import PrintingError
from .value import EMPTY
from .value import is_empty


def _parsing_error(error: ValidationError) -> ParsingError:
    failures = []
    for detail in error.errors(include_url=False):
        failure = ParsingError(
            f"(ValidationError) - {detail['msg']}",
            kind=ErrorKind.EXTERNAL_CODEC_FAILURE,
        )
        for segment in reversed(detail["loc"]):
            if isinstance(segment, int):
                failure = ParsingError.at_index(segment, failure)
            else:
                failure = ParsingError.at_key(str(segment), failure)
        failures.append(failure)
    if len(failures) == 1:
        return failures[0]
    return ParsingError.multiple(failures)


class Reflective[T](ParserPrinter[T]):
    """
    Parses and prints a whole node through ``TypeAdapter(annotation)``.

    Parsing consumes the node entirely. Printing requires an empty
    accumulator and serializes strictly, so an output of the wrong type is a
    printing error rather than a warning.
    """

    def __init__(self, annotation: Any, *, adapter: TypeAdapter | None = None):
        self.annotation = annotation
        self.adapter = adapter if adapter is not None else TypeAdapter(annotation)

    def parse_from(self, input: Input) -> T:
        try:
            data = codec.encode(input.value)
        except codec.JSONEncodeError as e:
            raise ParsingError(
                f"(EncodingError) - {e}", kind=ErrorKind.EXTERNAL_CODEC_FAILURE
            ) from e
        try:
            output = self.adapter.validate_json(data)
        except ValidationError as e:
            raise _parsing_error(e) from e
        input.value = EMPTY
        return output

    def print_into(self, output: T, input: Input) -> None:
        if not is_empty(input.value):
            raise PrintingError.expected_empty("Reflective", input.value)
        try:
            data = self.adapter.dump_json(output, warnings="error")
        except PydanticSerializationError as e:
            raise PrintingError(
                f"(SerializationError) - {e}",
                kind=ErrorKind.EXTERNAL_CODEC_FAILURE,
            ) from e
        input.value = codec.decode(data)
