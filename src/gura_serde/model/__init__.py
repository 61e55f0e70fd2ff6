"""Data model binding: Python types -> schemas for both engines.

Python 3.13+.
"""

from .markers import (
    CHAR,
    F32,
    F64,
    I8,
    I16,
    I32,
    I64,
    U8,
    U16,
    U32,
    U64,
    Char,
    CharMarker,
    FieldOptions,
    field,
)
from .schema import Schema, schema_for, schema_of_value
from .tagged import UnionInfo, VariantInfo, tagged_union, variant

__all__ = [
    "CHAR",
    "F32",
    "F64",
    "I8",
    "I16",
    "I32",
    "I64",
    "U8",
    "U16",
    "U32",
    "U64",
    "Char",
    "CharMarker",
    "FieldOptions",
    "Schema",
    "UnionInfo",
    "VariantInfo",
    "field",
    "schema_for",
    "schema_of_value",
    "tagged_union",
    "variant",
]
