"""Tagged unions: enums whose variants carry data.

A tagged union is a plain class marked with ``@tagged_union``; each variant
is a dataclass registered with ``@variant``. The variant's shape follows
from its fields unless given explicitly:

    @tagged_union
    class Message:
        pass

    @variant(Message)
    @dataclass
    class Quit(Message):             # unit:    "Quit"
        pass

    @variant(Message, shape=VariantShape.NEWTYPE)
    @dataclass
    class Write(Message):            # newtype: Write: "hello"
        text: str

    @variant(Message)
    @dataclass
    class Move(Message):             # struct:  Move:\\n    x: 1\\n    y: 2
        x: int
        y: int

Subclassing the union is not required, but lets type checkers treat
variants as union members.

Python 3.13+.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, overload

from gura_serde.enums import VariantShape

__all__ = [
    "UNION_ATTR",
    "VARIANT_ATTR",
    "UnionInfo",
    "VariantInfo",
    "tagged_union",
    "union_info",
    "variant",
    "variant_info",
]

UNION_ATTR = "__gura_union__"
VARIANT_ATTR = "__gura_variant__"


@dataclass(frozen=True, slots=True)
class VariantInfo:
    """One registered variant.

    Attributes:
        name: Variant name as written in Gura
        cls: Dataclass holding the payload
        shape: Payload shape
        union: The tagged union class this variant belongs to
    """

    name: str
    cls: type
    shape: VariantShape
    union: type


@dataclass(slots=True)
class UnionInfo:
    """Registry of a tagged union's variants, in registration order.

    Attributes:
        name: Union name
        tag: Key holding the variant name (internally tagged), or None for the
            external representation (``Name`` / ``Name: payload``)
        variants: Registered variants
    """

    name: str
    tag: str | None = None
    variants: list[VariantInfo] = field(default_factory=list)

    def names(self) -> tuple[str, ...]:
        return tuple(info.name for info in self.variants)


@overload
def tagged_union[C: type](cls: C, /) -> C: ...


@overload
def tagged_union[C: type](*, tag: str | None = None) -> Callable[[C], C]: ...


def tagged_union(cls: type | None = None, /, *, tag: str | None = None) -> Any:
    """Mark a class as a tagged union.

    Usable bare (``@tagged_union``) or with options
    (``@tagged_union(tag="type")``). With ``tag`` set, variants are written
    as one mapping holding the variant name under that key next to the
    variant's own fields; only unit and struct variants are allowed then.
    """

    def mark(target: type) -> type:
        setattr(target, UNION_ATTR, UnionInfo(name=target.__name__, tag=tag))
        return target

    if cls is None:
        return mark
    return mark(cls)


def union_info(cls: type) -> UnionInfo | None:
    """UnionInfo declared directly on cls (not inherited by variants)."""
    info = cls.__dict__.get(UNION_ATTR)
    return info if isinstance(info, UnionInfo) else None


def variant_info(cls: type) -> VariantInfo | None:
    """VariantInfo declared directly on cls."""
    info = cls.__dict__.get(VARIANT_ATTR)
    return info if isinstance(info, VariantInfo) else None


def _infer_shape(cls: type) -> VariantShape:
    fields = [f for f in dataclasses.fields(cls) if f.init]
    return VariantShape.STRUCT if fields else VariantShape.UNIT


def variant[C: type](
    union: type, *, name: str | None = None, shape: VariantShape | None = None
) -> Callable[[C], C]:
    """Register a dataclass as a variant of union.

    Args:
        union: Class decorated with ``@tagged_union``
        name: Variant name (default: the class name)
        shape: Payload shape (default: UNIT without fields, else STRUCT)

    Raises:
        TypeError: If union is not a tagged union or the class is not a dataclass
        ValueError: If the name is taken or the shape does not fit the fields
    """
    info = union_info(union)
    if info is None:
        msg = f"{union.__name__} is not decorated with @tagged_union"
        raise TypeError(msg)

    def register(cls: C) -> C:
        if not dataclasses.is_dataclass(cls):
            msg = f"variant {cls.__name__} must be a dataclass (apply @dataclass first)"
            raise TypeError(msg)
        variant_name = name or cls.__name__
        if variant_name in info.names():
            msg = f"{info.name} already has a variant named '{variant_name}'"
            raise ValueError(msg)

        resolved = shape or _infer_shape(cls)
        init_fields = [f for f in dataclasses.fields(cls) if f.init]
        if resolved is VariantShape.NEWTYPE and len(init_fields) != 1:
            msg = f"newtype variant {variant_name} must have exactly one field"
            raise ValueError(msg)
        if resolved is VariantShape.UNIT and init_fields:
            msg = f"unit variant {variant_name} cannot have fields"
            raise ValueError(msg)
        if info.tag is not None and resolved in (VariantShape.NEWTYPE, VariantShape.TUPLE):
            msg = f"internally tagged union {info.name} supports only unit and struct variants"
            raise ValueError(msg)

        registered = VariantInfo(name=variant_name, cls=cls, shape=resolved, union=union)
        setattr(cls, VARIANT_ATTR, registered)
        info.variants.append(registered)
        return cls

    return register
