"""
JSON specification compliance tests for valid JSON inputs.

Validates that properly formatted JSON documents decode successfully into
the expected structured values and survive an encode/decode round trip.
"""

import pytest

import jsonparsing
from jsonparsing import ArrayValue
from jsonparsing import FloatValue
from jsonparsing import IntValue
from jsonparsing import ObjectValue
from jsonparsing import StringValue
from jsonparsing import from_native

from .conftest import PASS_CASES
from .conftest import JsonTestCase


@pytest.mark.parametrize(
    "case", PASS_CASES, ids=[case.description for case in PASS_CASES]
)
def test_json_spec_compliance(case: JsonTestCase) -> None:
    """
    Validates JSON documents that must decode successfully.

    Each decoded value must also survive re-encoding unchanged.
    """
    value = jsonparsing.decode(case.input_data)
    assert jsonparsing.decode(jsonparsing.encode(value)) == value


def test_pass1_details() -> None:
    """
    Validates number classification and escapes in the pass1 document.
    """
    document = jsonparsing.decode(PASS_CASES[0].input_data)
    assert isinstance(document, ArrayValue)
    assert document[4] == IntValue(-42)

    fields = document[8]
    assert isinstance(fields, ObjectValue)
    assert fields["integer"] == IntValue(1234567890)
    assert fields["real"] == FloatValue(-9876.543210)
    assert fields["E"] == FloatValue(1.234567890e34)
    assert fields[""] == FloatValue(23456789012e66)
    assert fields["controls"] == StringValue("\b\f\n\r\t")
    assert fields["slash"] == StringValue("/ & /")
    assert fields["hex"] == StringValue("\u0123\u4567\u89ab\ucdef\uabcd\uef4a")


def test_pass2_nesting_depth() -> None:
    """
    Validates 19 levels of nesting decode and re-encode compactly.
    """
    document = PASS_CASES[1].input_data
    value = jsonparsing.decode(document)
    assert jsonparsing.encode(value) == document.encode()


def test_basic_json_values(basic_json_values: list[JsonTestCase]) -> None:
    """
    Validates decoding of fundamental JSON value types.
    """
    for case in basic_json_values:
        result = jsonparsing.decode(case.input_data)
        assert result == from_native(case.expected_output), case.description


def test_empty_containers() -> None:
    """
    Validates decoding of empty JSON containers.
    """
    assert jsonparsing.decode("[]") == ArrayValue(())
    assert jsonparsing.decode("{}") == ObjectValue({})
    assert jsonparsing.decode(" [] ") == ArrayValue(())
    assert jsonparsing.decode(" {} ") == ObjectValue({})


def test_whitespace_handling() -> None:
    """
    Validates proper handling of JSON whitespace.
    """
    assert jsonparsing.decode(" null ") == jsonparsing.NULL
    assert jsonparsing.decode("\n\ttrue\n") == from_native(True)
    assert jsonparsing.decode("\r\n42\r\n") == IntValue(42)

    assert jsonparsing.decode("[ 1 , 2 , 3 ]") == from_native([1, 2, 3])
    assert jsonparsing.decode('{ "key" : "value" }') == from_native(
        {"key": "value"}
    )
