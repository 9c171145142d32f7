"""
Byte codec between UTF-8 JSON documents and structured values.

Decoding is a token-driven recursive descent: ``JsonLexer`` scans the text
into tokens and ``JsonParser`` assembles ``JsonValue`` nodes from them.
Encoding is canonical: no inserted whitespace, object keys in lexicographic
order, and only the escapes JSON requires.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import IO

from ._positions import ByteOffsetMap
from ._profile import ProfileContext
from .value import INT64_MAX
from .value import INT64_MIN
from .value import NULL
from .value import ArrayValue
from .value import BoolValue
from .value import FloatValue
from .value import IntValue
from .value import JsonValue
from .value import NullValue
from .value import ObjectValue
from .value import StringValue

type Position = int

ASCII_DIGITS = frozenset("0123456789")
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
WHITESPACE = " \t\n\r"
CONTROL_LIMIT = 0x20

HIGH_SURROGATES = range(0xD800, 0xDC00)
LOW_SURROGATES = range(0xDC00, 0xE000)


class JSONDecodeError(ValueError):
    """
    Handles JSON decoding failures with position and context information.

    ``pos`` is a character offset into the decoded text, ``byte_pos`` the
    matching offset into the original UTF-8 bytes.
    """

    def __init__(self, msg: str, doc: str = "", pos: Position = 0) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if not isinstance(pos, int) or pos < 0:
            raise ValueError("pos must be a non-negative integer")

        self.msg = msg
        self.doc = doc
        self.pos = pos
        self.byte_pos = ByteOffsetMap(doc).byte_offset(pos) if doc else pos

        self.lineno = doc.count("\n", 0, pos) + 1 if doc else 1
        self.colno = pos - doc.rfind("\n", 0, pos) if doc else pos + 1

        super().__init__(f"{msg} at line {self.lineno}, column {self.colno}")


class EmptyInputError(JSONDecodeError):
    """Raised when decoding a zero-length document."""

    def __init__(self) -> None:
        super().__init__("Expecting value, but the input is empty")


class JSONEncodeError(ValueError):
    """Raised when a structured value cannot be serialized."""


class NonFiniteNumberError(JSONEncodeError):
    """Raised when encoding a NaN or infinite float."""

    def __init__(self, value: float) -> None:
        self.value = value
        if math.isnan(value):
            msg = "Can't serialize JSONValue containing a NaN number."
        else:
            msg = "Can't serialize JSONValue containing an infinite number."
        super().__init__(msg)


@dataclass(frozen=True)
class DecodeConfig:
    """
    Configures decoding with immutable settings.

    ``allow_json5`` enables the relaxed grammar (``//`` and ``/* */``
    comments, trailing commas in arrays and objects). ``max_depth`` bounds
    container nesting.
    """

    allow_json5: bool = False
    max_depth: int = 256

    def __post_init__(self) -> None:
        if not isinstance(self.allow_json5, bool):
            raise TypeError("allow_json5 must be a boolean")
        if isinstance(self.max_depth, bool) or not isinstance(
            self.max_depth, int
        ):
            raise TypeError("max_depth must be an int")
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")


class TokenType(Enum):
    """Token categories produced by the lexer."""

    OBJECT_START = "{"
    OBJECT_END = "}"
    ARRAY_START = "["
    ARRAY_END = "]"
    COMMA = ","
    COLON = ":"
    STRING = "string"
    NUMBER = "number"
    LITERAL = "literal"


STRUCTURAL_TOKENS = {
    "{": TokenType.OBJECT_START,
    "}": TokenType.OBJECT_END,
    "[": TokenType.ARRAY_START,
    "]": TokenType.ARRAY_END,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
}


@dataclass(frozen=True)
class JsonToken:
    """A token with its raw text and position in the document."""

    type: TokenType
    value: str
    start: Position
    end: Position


class JsonLexer:
    """
    Tokenizes JSON text.

    Character-by-character scanning of whitespace (and comments in relaxed
    mode), strings, numbers, literals, and structural tokens.
    """

    def __init__(self, text: str, relaxed: bool = False) -> None:
        self.text = text
        self.pos = 0
        self.length = len(text)
        self.relaxed = relaxed

    def peek(self) -> str:
        """Returns current character without advancing."""
        return self.text[self.pos] if self.pos < self.length else "\0"

    def advance(self) -> str:
        """Returns current character and advances position."""
        char = self.peek()
        if self.pos < self.length:
            self.pos += 1
        return char

    def _at_end(self) -> bool:
        return self.pos >= self.length

    def skip_whitespace(self) -> None:
        """Skips whitespace, and comments when the relaxed grammar is on."""
        with ProfileContext("skip_whitespace"):
            while self.pos < self.length:
                char = self.text[self.pos]
                if char in WHITESPACE:
                    self.pos += 1
                elif self.relaxed and self.text.startswith("//", self.pos):
                    newline = self.text.find("\n", self.pos)
                    self.pos = self.length if newline < 0 else newline + 1
                elif self.relaxed and self.text.startswith("/*", self.pos):
                    close = self.text.find("*/", self.pos + 2)
                    if close < 0:
                        raise JSONDecodeError(
                            "Unterminated comment starting at",
                            self.text,
                            self.pos,
                        )
                    self.pos = close + 2
                else:
                    break

    def scan_string(self) -> JsonToken:
        """Scans a JSON string token including quotes."""
        with ProfileContext("scan_string"):
            start = self.pos
            if self.advance() != '"':
                raise JSONDecodeError("Expected string", self.text, start)

            while not self._at_end():
                char = self.advance()
                if char == '"':
                    return JsonToken(
                        TokenType.STRING,
                        self.text[start : self.pos],
                        start,
                        self.pos,
                    )
                if char == "\\":
                    # The escape itself is validated when the token is decoded.
                    if not self._at_end():
                        self.advance()
                elif ord(char) < CONTROL_LIMIT:
                    raise JSONDecodeError(
                        "Invalid control character at", self.text, self.pos - 1
                    )

            raise JSONDecodeError(
                "Unterminated string starting at", self.text, start
            )

    def _scan_digits(self) -> int:
        count = 0
        while self.peek() in ASCII_DIGITS:
            self.advance()
            count += 1
        return count

    def _scan_integer_part(self, start: Position) -> None:
        """Scans the integer part of a JSON number."""
        if self.peek() not in ASCII_DIGITS:
            raise JSONDecodeError("Invalid number", self.text, start)

        if self.peek() == "0":
            self.advance()
            if self.peek() in ASCII_DIGITS:
                raise JSONDecodeError(
                    "Leading zeros not allowed", self.text, start
                )
        else:
            self._scan_digits()

    def _scan_fraction_part(self, start: Position) -> None:
        """Scans the fraction part of a JSON number if present."""
        if self.peek() == ".":
            self.advance()
            if not self._scan_digits():
                raise JSONDecodeError(
                    "Invalid decimal number", self.text, start
                )

    def _scan_exponent_part(self, start: Position) -> None:
        """Scans the exponent part of a JSON number if present."""
        if self.peek() in "eE":
            self.advance()
            if self.peek() in "+-":
                self.advance()
            if not self._scan_digits():
                raise JSONDecodeError("Invalid exponent", self.text, start)

    def scan_number(self) -> JsonToken:
        """Scans a JSON number token."""
        with ProfileContext("scan_number"):
            start = self.pos

            if self.peek() == "-":
                self.advance()

            self._scan_integer_part(start)
            self._scan_fraction_part(start)
            self._scan_exponent_part(start)

            return JsonToken(
                TokenType.NUMBER, self.text[start : self.pos], start, self.pos
            )

    def scan_literal(self) -> JsonToken:
        """Scans literal tokens: true, false, null."""
        with ProfileContext("scan_literal"):
            start = self.pos
            for literal in ("true", "false", "null"):
                if self.text.startswith(literal, self.pos):
                    self.pos += len(literal)
                    return JsonToken(TokenType.LITERAL, literal, start, self.pos)
            raise JSONDecodeError("Invalid literal", self.text, start)

    def next_token(self) -> JsonToken | None:
        """Returns the next token or None if at end."""
        self.skip_whitespace()

        if self._at_end():
            return None

        char = self.peek()
        start = self.pos

        if char in STRUCTURAL_TOKENS:
            self.advance()
            return JsonToken(STRUCTURAL_TOKENS[char], char, start, self.pos)
        elif char == '"':
            return self.scan_string()
        elif char in ASCII_DIGITS or char == "-":
            return self.scan_number()
        elif char in "tfn":
            return self.scan_literal()
        else:
            raise JSONDecodeError("Expecting value", self.text, self.pos)


class JsonParser:
    """
    Recursive descent parser over the lexer's token stream.

    Builds ``JsonValue`` nodes; every container level is counted against
    ``DecodeConfig.max_depth``.
    """

    def __init__(self, lexer: JsonLexer, config: DecodeConfig) -> None:
        self.lexer = lexer
        self.config = config
        self.current_token: JsonToken | None = None
        self.depth = 0
        self._key_cache: dict[str, str] = {}

    def _error(self, msg: str, pos: Position | None = None) -> JSONDecodeError:
        if pos is None:
            pos = (
                self.current_token.start
                if self.current_token
                else self.lexer.pos
            )
        return JSONDecodeError(msg, self.lexer.text, pos)

    def advance_token(self) -> JsonToken | None:
        """Advances to next token and returns it."""
        self.current_token = self.lexer.next_token()
        return self.current_token

    def expect_token(self, expected: TokenType) -> JsonToken:
        """Expects a specific token and advances."""
        if not self.current_token or self.current_token.type != expected:
            raise self._error(f"Expecting '{expected.value}' delimiter")
        token = self.current_token
        self.advance_token()
        return token

    def _enter(self, token: JsonToken) -> None:
        self.depth += 1
        if self.depth > self.config.max_depth:
            raise self._error("Maximum nesting depth exceeded", token.start)

    def parse_value(self) -> JsonValue:
        """Parses any JSON value based on current token."""
        token = self.current_token
        if not token:
            raise self._error("Expecting value", self.lexer.pos)

        match token.type:
            case TokenType.LITERAL:
                self.advance_token()
                return _literal_value(token.value)
            case TokenType.STRING:
                self.advance_token()
                return StringValue(
                    _decode_string(token.value, self.lexer.text, token.start)
                )
            case TokenType.NUMBER:
                self.advance_token()
                return _number_value(token, self.lexer.text)
            case TokenType.OBJECT_START:
                return self.parse_object()
            case TokenType.ARRAY_START:
                return self.parse_array()
            case _:
                raise self._error("Expecting value", token.start)

    def _parse_object_key(self) -> str:
        """Parses an object key, reusing the decoded text of repeated keys."""
        token = self.current_token
        if not token or token.type != TokenType.STRING:
            raise self._error(
                "Expecting property name enclosed in double quotes"
            )
        self.advance_token()

        key = self._key_cache.get(token.value)
        if key is None:
            key = _decode_string(token.value, self.lexer.text, token.start)
            self._key_cache[token.value] = key
        return key

    def _continue_container(self, closing: TokenType, name: str) -> bool:
        """Consumes a ',' or the closing token; True when more items follow."""
        token = self.current_token
        if not token:
            raise self._error("Expecting ',' delimiter", self.lexer.pos)

        if token.type == closing:
            self.advance_token()
            return False
        if token.type != TokenType.COMMA:
            raise self._error("Expecting ',' delimiter", token.start)

        comma_pos = token.start
        self.advance_token()
        if self.current_token and self.current_token.type == closing:
            if self.config.allow_json5:
                self.advance_token()
                return False
            raise self._error(
                f"Illegal trailing comma before end of {name}", comma_pos
            )
        return True

    def parse_object(self) -> ObjectValue:
        """Parses a JSON object."""
        with ProfileContext("parse_object"):
            self._enter(self.expect_token(TokenType.OBJECT_START))

            fields: dict[str, JsonValue] = {}
            if self.current_token and self.current_token.type == TokenType.OBJECT_END:
                self.advance_token()
            else:
                while True:
                    key = self._parse_object_key()
                    self.expect_token(TokenType.COLON)
                    fields[key] = self.parse_value()
                    if not self._continue_container(
                        TokenType.OBJECT_END, "object"
                    ):
                        break

            self.depth -= 1
            return ObjectValue(fields)

    def parse_array(self) -> ArrayValue:
        """Parses a JSON array."""
        with ProfileContext("parse_array"):
            self._enter(self.expect_token(TokenType.ARRAY_START))

            items: list[JsonValue] = []
            if self.current_token and self.current_token.type == TokenType.ARRAY_END:
                self.advance_token()
            else:
                while True:
                    items.append(self.parse_value())
                    if not self._continue_container(
                        TokenType.ARRAY_END, "array"
                    ):
                        break

            self.depth -= 1
            return ArrayValue(tuple(items))


def _literal_value(content: str) -> JsonValue:
    if content == "null":
        return NULL
    return BoolValue(content == "true")


ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


def _read_hex4(inner: str, i: int, doc: str, offset: Position) -> int:
    """Reads the four hex digits following ``\\u`` at ``inner[i]``."""
    digits = inner[i + 2 : i + 6]
    if len(digits) < 4 or not all(c in HEX_DIGITS for c in digits):
        raise JSONDecodeError(
            f"Invalid \\uXXXX escape: \\u{digits}", doc, offset + i
        )
    return int(digits, 16)


def _process_escape_sequence(
    inner: str, i: int, doc: str, offset: Position
) -> tuple[str, int]:
    """Decodes the escape at ``inner[i]``; returns the text and next index."""
    next_char = inner[i + 1]

    if next_char in ESCAPES:
        return ESCAPES[next_char], i + 2
    if next_char != "u":
        raise JSONDecodeError(
            f"Invalid escape sequence: \\{next_char}", doc, offset + i
        )

    code_point = _read_hex4(inner, i, doc, offset)
    if code_point in LOW_SURROGATES:
        raise JSONDecodeError("Unpaired low surrogate", doc, offset + i)
    if code_point not in HIGH_SURROGATES:
        return chr(code_point), i + 6

    # A high surrogate must be followed by an escaped low surrogate.
    if inner[i + 6 : i + 8] != "\\u":
        raise JSONDecodeError("Unpaired high surrogate", doc, offset + i)
    low = _read_hex4(inner, i + 6, doc, offset)
    if low not in LOW_SURROGATES:
        raise JSONDecodeError("Unpaired high surrogate", doc, offset + i)
    combined = 0x10000 + ((code_point - 0xD800) << 10) + (low - 0xDC00)
    return chr(combined), i + 12


def _decode_string(raw: str, doc: str, start: Position) -> str:
    """Decodes a quoted string token, resolving escape sequences."""
    with ProfileContext("decode_string", len(raw)):
        inner = raw[1:-1]
        if "\\" not in inner:
            return inner

        # Offsets inside ``inner`` are one past the opening quote.
        offset = start + 1
        result = []
        i = 0
        while i < len(inner):
            if inner[i] == "\\":
                char, i = _process_escape_sequence(inner, i, doc, offset)
                result.append(char)
            else:
                result.append(inner[i])
                i += 1
        return "".join(result)


def _number_value(token: JsonToken, doc: str) -> IntValue | FloatValue:
    """
    Classifies a numeric literal.

    A fraction or exponent always yields ``FloatValue``. Otherwise the
    literal is an ``IntValue`` unless it overflows the signed 64-bit range,
    in which case it is promoted to ``FloatValue``.
    """
    with ProfileContext("number_value", len(token.value)):
        content = token.value
        try:
            if any(c in ".eE" for c in content):
                number = float(content)
            else:
                integer = int(content)
                if INT64_MIN <= integer <= INT64_MAX:
                    return IntValue(integer)
                number = float(integer)
        except OverflowError as e:
            raise JSONDecodeError("Number out of range", doc, token.start) from e
        except ValueError as e:
            # int() refuses literals beyond the interpreter's digit limit
            raise JSONDecodeError("Number too large", doc, token.start) from e

        if math.isinf(number):
            raise JSONDecodeError("Number out of range", doc, token.start)
        return FloatValue(number)


def _to_text(data: bytes | bytearray | memoryview | str) -> str:
    if isinstance(data, str):
        return data
    if not isinstance(data, bytes | bytearray | memoryview):
        raise TypeError(
            "the JSON document must be bytes or str, "
            f"not {type(data).__name__}"
        )

    raw = bytes(data)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        valid_prefix = raw[: e.start].decode("utf-8")
        raise JSONDecodeError(
            "Invalid UTF-8 byte sequence", valid_prefix, len(valid_prefix)
        ) from e


def decode(
    data: bytes | bytearray | memoryview | str,
    config: DecodeConfig | None = None,
    **kwargs: bool | int,
) -> JsonValue:
    """
    Decodes a UTF-8 JSON document into a structured value.

    Any value may appear at the top level. Options are taken from ``config``
    or, equivalently, from ``DecodeConfig`` keyword arguments.
    """
    if config is None:
        config = DecodeConfig(**kwargs)  # type: ignore[arg-type]
    elif kwargs:
        raise TypeError("pass either a DecodeConfig or keyword options")

    text = _to_text(data)
    if not text:
        raise EmptyInputError()
    if text.startswith("\ufeff"):
        raise JSONDecodeError(
            "JSON input should not contain BOM (Byte Order Mark)", text, 0
        )

    with ProfileContext("decode", len(text)):
        lexer = JsonLexer(text, relaxed=config.allow_json5)
        parser = JsonParser(lexer, config)
        parser.advance_token()

        try:
            result = parser.parse_value()
        except RecursionError:
            raise parser._error("Maximum nesting depth exceeded") from None

        if parser.current_token:
            raise JSONDecodeError("Extra data", text, parser.current_token.start)

        return result


def _encode_string(s: str, out: list[str]) -> None:
    """Appends ``s`` as a quoted JSON string. ``/`` is never escaped."""
    out.append('"')
    for char in s:
        if char == '"':
            out.append('\\"')
        elif char == "\\":
            out.append("\\\\")
        elif ord(char) >= CONTROL_LIMIT:
            out.append(char)
        elif char == "\b":
            out.append("\\b")
        elif char == "\f":
            out.append("\\f")
        elif char == "\n":
            out.append("\\n")
        elif char == "\r":
            out.append("\\r")
        elif char == "\t":
            out.append("\\t")
        else:
            out.append(f"\\u{ord(char):04x}")
    out.append('"')


def _encode_float(number: float) -> str:
    if not math.isfinite(number):
        raise NonFiniteNumberError(number)
    # repr always keeps a '.' or an exponent, so the value decodes as a float.
    return repr(number)


def _encode_into(value: JsonValue, out: list[str]) -> None:
    match value:
        case NullValue():
            out.append("null")
        case BoolValue(flag):
            out.append("true" if flag else "false")
        case IntValue(number):
            out.append(str(number))
        case FloatValue(number):
            out.append(_encode_float(number))
        case StringValue(text):
            _encode_string(text, out)
        case ArrayValue(items):
            out.append("[")
            for index, item in enumerate(items):
                if index:
                    out.append(",")
                _encode_into(item, out)
            out.append("]")
        case ObjectValue():
            out.append("{")
            for index, (key, item) in enumerate(value.sorted_items()):
                if index:
                    out.append(",")
                _encode_string(key, out)
                out.append(":")
                _encode_into(item, out)
            out.append("}")
        case _:
            msg = f"Object of type {type(value).__name__} is not a JSON value"
            raise TypeError(msg)


def encode(value: JsonValue) -> bytes:
    """
    Serializes a structured value to canonical UTF-8 JSON bytes.

    Raises ``NonFiniteNumberError`` for NaN and infinite floats.
    """
    with ProfileContext("encode"):
        out: list[str] = []
        _encode_into(value, out)
        try:
            return "".join(out).encode("utf-8")
        except UnicodeEncodeError as e:
            raise JSONEncodeError(
                "Can't serialize JSONValue containing an unpaired surrogate."
            ) from e


def load(fp: IO[bytes] | IO[str], **kwargs: bool | int) -> JsonValue:
    """Decodes the whole content of a readable file object."""
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    return decode(fp.read(), **kwargs)


def dump(value: JsonValue, fp: IO[bytes]) -> None:
    """Encodes ``value`` into a binary file object."""
    if not hasattr(fp, "write"):
        raise TypeError("fp must have a write() method")

    fp.write(encode(value))
