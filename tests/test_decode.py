"""
JSON decoding functionality tests.

Validates the decoder's number classification, string handling, input
types, the relaxed grammar and the nesting limit.
"""

import sys
from io import BytesIO
from io import StringIO
from typing import Any

import pytest

import jsonparsing
from jsonparsing import DecodeConfig
from jsonparsing import FloatValue
from jsonparsing import IntValue
from jsonparsing import StringValue
from jsonparsing import from_native
from jsonparsing.codec import JsonLexer
from jsonparsing.codec import JsonParser


@pytest.mark.parametrize(
    "document,expected",
    [
        ("0", IntValue(0)),
        ("-0", IntValue(0)),
        ("1.0", FloatValue(1.0)),
        ("1e2", FloatValue(100.0)),
        ("1E-2", FloatValue(0.01)),
        ("9223372036854775807", IntValue(2**63 - 1)),
        ("-9223372036854775808", IntValue(-(2**63))),
        ("9223372036854775808", FloatValue(9223372036854775808.0)),
        ("-9223372036854775809", FloatValue(-9223372036854775809.0)),
    ],
)
def test_number_classification(document: str, expected: Any) -> None:
    """
    Validates integer literals stay integers until they leave int64.
    """
    value = jsonparsing.decode(document)
    assert value == expected
    assert type(value) is type(expected)


def test_integer_and_float_are_distinct() -> None:
    assert jsonparsing.decode("1") != jsonparsing.decode("1.0")
    assert jsonparsing.decode("true") != jsonparsing.decode("1")


@pytest.mark.parametrize("invalid_digit", ["1\uff10", "0.\uff10", "0e\uff10"])
def test_nonascii_digits_rejected(invalid_digit: str) -> None:
    """
    Validates rejection of non-ASCII digits per JSON specification.
    """
    with pytest.raises(jsonparsing.JSONDecodeError):
        jsonparsing.decode(invalid_digit)


@pytest.mark.parametrize(
    "constant",
    ["NaN", "Infinity", "-Infinity", "nan", "infinity", "inFiniTy"],
)
def test_non_finite_constants_rejected(constant: str) -> None:
    """
    Validates NaN and Infinity literals are never accepted.
    """
    with pytest.raises(jsonparsing.JSONDecodeError):
        jsonparsing.decode(constant)


@pytest.mark.parametrize(
    "document,expected_msg",
    [
        ("1e999", "Number out of range"),
        ("-1e999", "Number out of range"),
        ("1" * 400, "Number out of range"),
        ("1" * 5000, "Number too large"),
    ],
)
def test_unrepresentable_numbers(document: str, expected_msg: str) -> None:
    with pytest.raises(jsonparsing.JSONDecodeError) as exc_info:
        jsonparsing.decode(document)
    assert exc_info.value.msg == expected_msg
    assert exc_info.value.pos == 0


@pytest.mark.parametrize(
    "data",
    [b'"hi"', bytearray(b'"hi"'), memoryview(b'"hi"'), '"hi"'],
)
def test_input_types(data: Any) -> None:
    """
    Validates bytes-like and str documents are both accepted.
    """
    assert jsonparsing.decode(data) == StringValue("hi")


@pytest.mark.parametrize("invalid_value", [1, 3.14, [], {}, None])
def test_invalid_input_type_rejection(invalid_value: Any) -> None:
    """
    Validates rejection of non-document input types.
    """
    with pytest.raises(TypeError, match="must be bytes or str"):
        jsonparsing.decode(invalid_value)


def test_string_escapes() -> None:
    """
    Validates every simple escape and surrogate pair decoding.
    """
    value = jsonparsing.decode(r'"\" \\ \/ \b \f \n \r \t \u00e9 \ud83d\ude00"')
    assert value == StringValue('" \\ / \b \f \n \r \t é \U0001f600')


@pytest.mark.parametrize(
    "document,expected_msg",
    [
        (r'"\ud83d"', "Unpaired high surrogate"),
        (r'"\ud83d\u0041"', "Unpaired high surrogate"),
        (r'"\ude00"', "Unpaired low surrogate"),
        (r'"\u12"', "Invalid \\uXXXX escape: \\u12"),
        (r'"\uzzzz"', "Invalid \\uXXXX escape: \\uzzzz"),
        (r'["abc\y"]', "Invalid escape sequence: \\y"),
    ],
)
def test_invalid_escapes(document: str, expected_msg: str) -> None:
    with pytest.raises(jsonparsing.JSONDecodeError) as exc_info:
        jsonparsing.decode(document)
    assert exc_info.value.msg == expected_msg


def test_control_characters_rejected() -> None:
    with pytest.raises(jsonparsing.JSONDecodeError, match="control character"):
        jsonparsing.decode('"a\x01b"')


def test_keys_reuse() -> None:
    """
    Validates decoded keys are shared between objects with the same keys.
    """
    s = '[{"a_key": 1, "b_\xe9": 2}, {"a_key": 3, "b_\xe9": 4}]'
    value = jsonparsing.decode(s)
    (a, b), (c, d) = sorted(value[0].fields), sorted(value[1].fields)

    assert a is c
    assert b is d


def test_duplicate_keys_keep_last() -> None:
    value = jsonparsing.decode('{"a": 1, "a": 2}')
    assert value == from_native({"a": 2})


def test_extra_data_rejection() -> None:
    with pytest.raises(jsonparsing.JSONDecodeError, match="Extra data"):
        jsonparsing.decode("[1, 2, 3]5")


def test_utf8_bom_rejection() -> None:
    """
    Validates rejection of a leading UTF-8 BOM; inside strings it is text.
    """
    bom_json = "[1,2,3]".encode("utf-8-sig")

    with pytest.raises(jsonparsing.JSONDecodeError) as exc_info:
        jsonparsing.decode(bom_json)
    assert "BOM" in str(exc_info.value)

    with pytest.raises(jsonparsing.JSONDecodeError) as exc_info:
        jsonparsing.load(BytesIO(bom_json))
    assert "BOM" in str(exc_info.value)

    assert jsonparsing.decode('"\ufeff"') == StringValue("\ufeff")


def test_load_from_text_and_binary_files() -> None:
    expected = from_native({"key": [1, 2.5, None]})
    assert jsonparsing.load(StringIO('{"key": [1, 2.5, null]}')) == expected
    assert jsonparsing.load(BytesIO(b'{"key": [1, 2.5, null]}')) == expected

    with pytest.raises(TypeError, match="read"):
        jsonparsing.load("not a file")  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "document",
    [
        "[1, 2, 3,]",
        '{"a": 1,}',
        "// leading comment\n[1]",
        "[1, /* inline */ 2]",
    ],
)
def test_json5_relaxations(document: str) -> None:
    """
    Validates comments and trailing commas only decode in json5 mode.
    """
    with pytest.raises(jsonparsing.JSONDecodeError):
        jsonparsing.decode(document)

    assert jsonparsing.decode(document, allow_json5=True) is not None
    config = DecodeConfig(allow_json5=True)
    assert jsonparsing.decode(document, config) == jsonparsing.decode(
        document, allow_json5=True
    )


def test_json5_unterminated_comment() -> None:
    with pytest.raises(jsonparsing.JSONDecodeError) as exc_info:
        jsonparsing.decode("[1] /* open", allow_json5=True)
    assert exc_info.value.msg == "Unterminated comment starting at"
    assert exc_info.value.pos == 4


def test_max_depth() -> None:
    """
    Validates the nesting limit turns deep documents into decode errors.
    """
    document = "[" * 5 + "]" * 5
    jsonparsing.decode(document, max_depth=5)

    with pytest.raises(jsonparsing.JSONDecodeError) as exc_info:
        jsonparsing.decode(document, max_depth=4)
    assert exc_info.value.msg == "Maximum nesting depth exceeded"
    assert exc_info.value.pos == 4

    with pytest.raises(jsonparsing.JSONDecodeError):
        jsonparsing.decode("[" * 600 + "]" * 600)


def test_max_depth_beyond_interpreter_recursion_limit() -> None:
    depth = sys.getrecursionlimit() * 2
    document = "[" * depth + "]" * depth
    with pytest.raises(jsonparsing.JSONDecodeError) as exc_info:
        jsonparsing.decode(document, max_depth=depth)
    assert exc_info.value.msg == "Maximum nesting depth exceeded"
    assert 0 < exc_info.value.pos < depth


def test_container_entry_requires_opening_token() -> None:
    parser = JsonParser(JsonLexer("1"), DecodeConfig())
    parser.advance_token()
    with pytest.raises(jsonparsing.JSONDecodeError) as exc_info:
        parser.parse_array()
    assert exc_info.value.msg == "Expecting '[' delimiter"
    assert parser.depth == 0


@pytest.mark.parametrize(
    "options,error",
    [
        ({"max_depth": 0}, ValueError),
        ({"max_depth": True}, TypeError),
        ({"allow_json5": "yes"}, TypeError),
    ],
)
def test_decode_config_validation(
    options: dict[str, Any], error: type[Exception]
) -> None:
    with pytest.raises(error):
        DecodeConfig(**options)


def test_config_and_keywords_are_exclusive() -> None:
    with pytest.raises(TypeError):
        jsonparsing.decode("[]", DecodeConfig(), max_depth=3)
