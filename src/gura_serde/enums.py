"""Enumerations for gura-serde type-safe constants.

Uses StrEnum for automatic string conversion.
StrEnum members are strings themselves, eliminating boilerplate __str__ methods.

Python 3.13+.
"""

from enum import StrEnum


class ValueKind(StrEnum):
    """Variant tag of a ValueTree node.

    StrEnum provides automatic string conversion: str(ValueKind.MAPPING) == "mapping"
    """

    NULL = "null"
    BOOL = "bool"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


class IntWidth(StrEnum):
    """Fixed-width integer types of the generic data model.

    Python integers are unbounded; the width records which range a value
    was declared with so that both engines can range-check it.
    """

    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"

    @property
    def signed(self) -> bool:
        """True for the i* widths."""
        return self.value.startswith("i")

    @property
    def bits(self) -> int:
        """Width in bits."""
        return int(self.value[1:])

    @property
    def min_value(self) -> int:
        """Smallest representable value."""
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        """Largest representable value."""
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    def contains(self, value: int) -> bool:
        """Check whether value fits this width."""
        return self.min_value <= value <= self.max_value


class FloatWidth(StrEnum):
    """Floating point types of the generic data model."""

    F32 = "f32"
    F64 = "f64"


class VariantShape(StrEnum):
    """Payload shape of an enum variant.

    StrEnum provides automatic string conversion: str(VariantShape.UNIT) == "unit"
    """

    UNIT = "unit"
    """No payload: serialized as the bare variant name."""

    NEWTYPE = "newtype"
    """One unnamed value: Name: value"""

    TUPLE = "tuple"
    """Several unnamed values: Name: [a, b]"""

    STRUCT = "struct"
    """Named fields: Name: followed by an indented object"""


__all__ = [
    "FloatWidth",
    "IntWidth",
    "ValueKind",
    "VariantShape",
]
