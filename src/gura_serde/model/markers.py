"""Annotation markers and field options for the binding layer.

Python integers and floats carry no width, so the declared width travels in
the annotation instead:

    @dataclass
    class Server:
        port: U16
        weight: F32
        grade: Char

``field()`` wraps ``dataclasses.field`` and records how a field appears in
Gura text (name, accepted aliases, or not at all).

Python 3.13+.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Annotated, Any

from gura_serde.enums import FloatWidth, IntWidth

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Integer widths
    "I8",
    "I16",
    "I32",
    "I64",
    "U8",
    "U16",
    "U32",
    "U64",
    # Float widths
    "F32",
    "F64",
    # Text
    "Char",
    "CharMarker",
    "CHAR",
    # Fields
    "FieldOptions",
    "FIELD_OPTIONS_KEY",
    "field",
]

type I8 = Annotated[int, IntWidth.I8]
type I16 = Annotated[int, IntWidth.I16]
type I32 = Annotated[int, IntWidth.I32]
type I64 = Annotated[int, IntWidth.I64]
type U8 = Annotated[int, IntWidth.U8]
type U16 = Annotated[int, IntWidth.U16]
type U32 = Annotated[int, IntWidth.U32]
type U64 = Annotated[int, IntWidth.U64]

type F32 = Annotated[float, FloatWidth.F32]
type F64 = Annotated[float, FloatWidth.F64]


@dataclass(frozen=True, slots=True)
class CharMarker:
    """Annotated metadata: a str holding exactly one code point."""


CHAR = CharMarker()

type Char = Annotated[str, CHAR]


# Key under which FieldOptions are stored in dataclasses.Field.metadata.
FIELD_OPTIONS_KEY = "gura_serde"


@dataclass(frozen=True, slots=True)
class FieldOptions:
    """How a dataclass field maps to a Gura key.

    Attributes:
        rename: Key written and read instead of the attribute name
        aliases: Additional keys accepted when reading
        skip: Neither written nor read; the field keeps its default
    """

    rename: str | None = None
    aliases: tuple[str, ...] = ()
    skip: bool = False


DEFAULT_FIELD_OPTIONS = FieldOptions()


def field(
    *,
    rename: str | None = None,
    alias: str | Iterable[str] = (),
    skip: bool = False,
    default: Any = dataclasses.MISSING,
    default_factory: Callable[[], Any] | Any = dataclasses.MISSING,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field with Gura options.

    Args:
        rename: Gura key for this field
        alias: Extra key (or keys) accepted on input
        skip: Omit the field on output and ignore it on input
        default: Default value, as for dataclasses.field
        default_factory: Default factory, as for dataclasses.field
        **kwargs: Passed through to dataclasses.field

    Returns:
        A dataclasses.Field carrying FieldOptions in its metadata

    Raises:
        ValueError: If skip is set without a default

    Example:
        >>> @dataclass
        ... class Server:
        ...     host: str = field(rename="ip", alias="address")
    """
    if skip and default is dataclasses.MISSING and default_factory is dataclasses.MISSING:
        msg = "skipped fields need a default or default_factory"
        raise ValueError(msg)
    aliases = (alias,) if isinstance(alias, str) else tuple(alias)
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[FIELD_OPTIONS_KEY] = FieldOptions(rename=rename, aliases=aliases, skip=skip)
    return dataclasses.field(
        default=default, default_factory=default_factory, metadata=metadata, **kwargs
    )
