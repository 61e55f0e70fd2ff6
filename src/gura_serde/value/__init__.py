"""Gura value tree package.

Provides the ValueTree node types, conversion from the external parser's
output, and the canonical text printer.

Python 3.13+.
"""

from .convert import from_native, to_native
from .parser import parse
from .printer import GuraPrinter, dump, format_float, quote_string
from .tree import (
    NULL,
    VALUE_TYPES,
    Bool,
    Float,
    Integer,
    Mapping,
    Null,
    Sequence,
    String,
    Value,
    describe_value,
    is_value,
)

__all__ = [
    "NULL",
    "VALUE_TYPES",
    "Bool",
    "Float",
    "GuraPrinter",
    "Integer",
    "Mapping",
    "Null",
    "Sequence",
    "String",
    "Value",
    "describe_value",
    "dump",
    "format_float",
    "from_native",
    "is_value",
    "parse",
    "quote_string",
    "to_native",
]
