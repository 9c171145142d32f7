"""
Bidirectional JSON parser-printer combinators.

A strict byte codec turns JSON text into an immutable value tree, and
combinators built over that tree parse it into Python objects and print
those objects back into a value. The same combinators compose over text,
which is how string contents and object keys are parsed.
"""

from ._profile import HotPathStats
from ._profile import clear_hot_path_stats
from ._profile import get_hot_path_stats
from .bridge import Reflective
from .codec import DecodeConfig
from .codec import EmptyInputError
from .codec import JSONDecodeError
from .codec import JSONEncodeError
from .codec import NonFiniteNumberError
from .codec import decode
from .codec import dump
from .codec import encode
from .codec import load
from .core import Always
from .core import Cases
from .core import Conversion
from .core import Filtered
from .core import Input
from .core import Mapped
from .core import Not
from .core import OneOf
from .core import Parser
from .core import ParserPrinter
from .core import Record
from .core import Sequence
from .core import memberwise
from .core import representing
from .errors import CombinatorError
from .errors import ErrorKind
from .errors import ParsingError
from .errors import PathSegment
from .errors import PrintingError
from .fields import Field
from .fields import OptionalField
from .pretty import PrettyConfig
from .pretty import pretty_printed
from .primitives import DECIMAL
from .primitives import FLOAT
from .primitives import FLOAT32
from .primitives import INT
from .primitives import INT8
from .primitives import INT16
from .primitives import INT32
from .primitives import INT64
from .primitives import UINT8
from .primitives import UINT16
from .primitives import UINT32
from .primitives import UINT64
from .primitives import Boolean
from .primitives import Null
from .primitives import Number
from .primitives import NumericType
from .primitives import String
from .structural import Arity
from .structural import Array
from .structural import Object
from .text import End
from .text import IntegerText
from .text import Literal
from .text import Prefix
from .text import Rest
from .value import EMPTY
from .value import NULL
from .value import ArrayValue
from .value import BoolValue
from .value import FloatValue
from .value import IntValue
from .value import JsonValue
from .value import NullValue
from .value import ObjectValue
from .value import StringValue
from .value import from_native
from .value import is_empty
from .value import to_native

__version__ = "0.1.0"

__all__ = [
    "DECIMAL",
    "EMPTY",
    "FLOAT",
    "FLOAT32",
    "INT",
    "INT8",
    "INT16",
    "INT32",
    "INT64",
    "NULL",
    "UINT8",
    "UINT16",
    "UINT32",
    "UINT64",
    "Always",
    "Arity",
    "Array",
    "ArrayValue",
    "BoolValue",
    "Boolean",
    "Cases",
    "CombinatorError",
    "Conversion",
    "DecodeConfig",
    "EmptyInputError",
    "End",
    "ErrorKind",
    "Field",
    "Filtered",
    "FloatValue",
    "HotPathStats",
    "Input",
    "IntValue",
    "IntegerText",
    "JSONDecodeError",
    "JSONEncodeError",
    "JsonValue",
    "Literal",
    "Mapped",
    "NonFiniteNumberError",
    "Not",
    "Null",
    "NullValue",
    "Number",
    "NumericType",
    "Object",
    "ObjectValue",
    "OneOf",
    "OptionalField",
    "Parser",
    "ParserPrinter",
    "ParsingError",
    "PathSegment",
    "Prefix",
    "PrettyConfig",
    "PrintingError",
    "Record",
    "Reflective",
    "Rest",
    "Sequence",
    "String",
    "StringValue",
    "clear_hot_path_stats",
    "decode",
    "dump",
    "encode",
    "from_native",
    "get_hot_path_stats",
    "is_empty",
    "load",
    "memberwise",
    "pretty_printed",
    "representing",
    "to_native",
]
