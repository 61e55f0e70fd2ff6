"""Visitor protocol for the deserializer engine.

A target type supplies a ``Visitor`` subclass and overrides exactly the
callbacks for the shapes it accepts. The engine inspects the ValueTree node
and calls one callback; every callback the visitor does not override raises
``GuraTypeMismatchError`` naming what the visitor expected:

    class PortVisitor(Visitor[int]):
        def expecting(self) -> str:
            return "a port number"

        def visit_int(self, value: int) -> int:
            return value

    deserializer.deserialize_u16(PortVisitor())

Python 3.13+.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from gura_serde.diagnostics import ErrorTemplate, GuraTypeMismatchError

if TYPE_CHECKING:
    from .access import EnumAccess, MapAccess, SeqAccess
    from .deserializer import ValueDeserializer

__all__ = ["DeserializeSeed", "Visitor"]


class DeserializeSeed[T](Protocol):
    """Anything that can pull a value of type T out of a deserializer.

    Schemas from ``gura_serde.model`` are seeds; so is any object with a
    matching ``deserialize`` method.
    """

    def deserialize(self, deserializer: ValueDeserializer) -> T: ...


class Visitor[T]:
    """Base visitor: one method per decoded shape, all rejecting by default."""

    def expecting(self) -> str:
        """Human description of what this visitor accepts."""
        return "a value"

    def _reject(self, found: str) -> GuraTypeMismatchError:
        return GuraTypeMismatchError(ErrorTemplate.type_mismatch(self.expecting(), found))

    def visit_bool(self, value: bool) -> T:
        raise self._reject(f"boolean {'true' if value else 'false'}")

    def visit_int(self, value: int) -> T:
        raise self._reject(f"integer {value}")

    def visit_float(self, value: float) -> T:
        raise self._reject(f"float {value!r}")

    def visit_str(self, value: str) -> T:
        raise self._reject(f'string "{value}"')

    def visit_bytes(self, value: bytes) -> T:
        raise self._reject("bytes")

    def visit_none(self) -> T:
        raise self._reject("null")

    def visit_some(self, deserializer: ValueDeserializer) -> T:
        raise self._reject("optional value")

    def visit_unit(self) -> T:
        raise self._reject("unit")

    def visit_newtype_struct(self, deserializer: ValueDeserializer) -> T:
        raise self._reject("newtype struct")

    def visit_seq(self, seq: SeqAccess) -> T:
        raise self._reject("sequence")

    def visit_map(self, map_access: MapAccess) -> T:
        raise self._reject("mapping")

    def visit_enum(self, data: EnumAccess) -> T:
        raise self._reject("enum")
