"""ValueTree node definitions.

In-memory representation of a Gura document: scalars, ordered sequences and
ordered key/value mappings. Built bottom-up by the serializer, or converted
whole from the external parser's output; immutable once constructed.

Python 3.13+.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from typing import ClassVar, TypeIs

from gura_serde.diagnostics import (
    ErrorTemplate,
    GuraDuplicateFieldError,
    GuraTypeMismatchError,
)
from gura_serde.enums import FloatWidth, IntWidth, ValueKind

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Nodes
    "Null",
    "Bool",
    "Integer",
    "Float",
    "String",
    "Sequence",
    "Mapping",
    # Singletons and aliases
    "NULL",
    "Value",
    "VALUE_TYPES",
    # Helpers
    "describe_value",
    "is_value",
]


# ============================================================================
# SCALARS
# ============================================================================


@dataclass(frozen=True, slots=True)
class Null:
    """Absence of a value: Gura ``null``."""

    kind: ClassVar[ValueKind] = ValueKind.NULL


@dataclass(frozen=True, slots=True)
class Bool:
    """Boolean: ``true`` / ``false``."""

    kind: ClassVar[ValueKind] = ValueKind.BOOL

    value: bool


@dataclass(frozen=True, slots=True)
class Integer:
    """Integer tagged with its originating width where known.

    Attributes:
        value: The number (arbitrary precision in Python)
        width: Declared width, or None for the widest form (i64, else u64)
    """

    kind: ClassVar[ValueKind] = ValueKind.INTEGER

    value: int
    width: IntWidth | None = None

    def __post_init__(self) -> None:
        """Validate that value fits its declared width."""
        if self.width is not None and not self.width.contains(self.value):
            raise GuraTypeMismatchError(
                ErrorTemplate.integer_out_of_range(
                    self.value, self.width, self.width.min_value, self.width.max_value
                )
            )


@dataclass(frozen=True, slots=True)
class Float:
    """Double precision float tagged with its originating width where known.

    Equality treats two NaNs as equal so that trees compare structurally.
    """

    kind: ClassVar[ValueKind] = ValueKind.FLOAT

    value: float
    width: FloatWidth | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Float):
            return NotImplemented
        if math.isnan(self.value) and math.isnan(other.value):
            return self.width == other.width
        return self.value == other.value and self.width == other.width

    def __hash__(self) -> int:
        return hash(("nan", self.width) if math.isnan(self.value) else (self.value, self.width))


@dataclass(frozen=True, slots=True)
class String:
    """Unicode string."""

    kind: ClassVar[ValueKind] = ValueKind.STRING

    value: str


# ============================================================================
# COMPOSITES
# ============================================================================


@dataclass(frozen=True, slots=True)
class Sequence:
    """Ordered list of nodes (Gura array)."""

    kind: ClassVar[ValueKind] = ValueKind.SEQUENCE

    items: tuple[Value, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)


@dataclass(frozen=True, slots=True)
class Mapping:
    """Ordered mapping of unique string keys to nodes (Gura object).

    Insertion order is preserved and drives output field order.

    Raises:
        GuraDuplicateFieldError: If a key appears twice
    """

    kind: ClassVar[ValueKind] = ValueKind.MAPPING

    entries: tuple[tuple[str, Value], ...] = ()

    def __post_init__(self) -> None:
        """Validate key uniqueness."""
        seen: set[str] = set()
        for key, _ in self.entries:
            if key in seen:
                raise GuraDuplicateFieldError(ErrorTemplate.duplicate_field(key))
            seen.add(key)

    def __len__(self) -> int:
        return len(self.entries)

    def keys(self) -> tuple[str, ...]:
        """Keys in insertion order."""
        return tuple(key for key, _ in self.entries)

    def get(self, key: str, default: Value | None = None) -> Value | None:
        """Look up a key (linear scan; documents are small)."""
        for entry_key, value in self.entries:
            if entry_key == key:
                return value
        return default

    def __contains__(self, key: object) -> bool:
        return any(entry_key == key for entry_key, _ in self.entries)

    @staticmethod
    def singleton(key: str, value: Value) -> Mapping:
        """Mapping with exactly one entry (payload-bearing enum variants)."""
        return Mapping(entries=((key, value),))


# ============================================================================
# TYPE ALIASES AND HELPERS
# ============================================================================

type Value = Null | Bool | Integer | Float | String | Sequence | Mapping

VALUE_TYPES: tuple[type, ...] = (Null, Bool, Integer, Float, String, Sequence, Mapping)

NULL = Null()


def is_value(obj: object) -> TypeIs[Value]:
    """Type guard for ValueTree nodes."""
    return isinstance(obj, VALUE_TYPES)


def describe_value(node: Value) -> str:
    """Short human description of a node for error messages.

    Example:
        >>> describe_value(Integer(300))
        'integer 300'
        >>> describe_value(Sequence(items=()))
        'sequence'
    """
    match node:
        case Null():
            return "null"
        case Bool(value=flag):
            return f"boolean {'true' if flag else 'false'}"
        case Integer(value=number):
            return f"integer {number}"
        case Float(value=number):
            return f"float {number!r}"
        case String(value=text):
            shown = text if len(text) <= 40 else text[:40] + "..."
            return f'string "{shown}"'
        case Sequence():
            return "sequence"
        case Mapping():
            return "mapping"
