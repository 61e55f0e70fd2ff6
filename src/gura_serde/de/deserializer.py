"""Deserializer engine: drive a visitor over a ValueTree.

``ValueDeserializer`` wraps one node. ``deserialize_any`` reports the node
as-is; the typed entry points first check that the node has the shape the
target requested, range-check numbers, and only then call the visitor.

Composite nodes are exposed to the visitor through the cursors in
``access``; each child gets its own ``ValueDeserializer`` sharing the pass's
configuration and DepthGuard, with a structural path one segment longer.
The first error raised below a node is located at that node's path.

Python 3.13+.
"""

from __future__ import annotations

import math
import struct
from collections.abc import Callable, Sequence as AbcSequence

from gura_serde.core.config import DEFAULT_CONFIG, GuraConfig
from gura_serde.core.depth_guard import DepthGuard
from gura_serde.diagnostics import (
    ErrorTemplate,
    GuraError,
    GuraTypeMismatchError,
    GuraUnknownFieldError,
    GuraUnknownVariantError,
    PathSegment,
)
from gura_serde.enums import IntWidth
from gura_serde.value.tree import (
    Bool,
    Float,
    Integer,
    Mapping,
    Null,
    Sequence,
    String,
    Value,
    describe_value,
)

from .access import EnumAccess, MapAccess, SeqAccess
from .visitor import Visitor

__all__ = ["ValueDeserializer"]

# Largest integer magnitude below which every integer is an exact double.
_F64_EXACT = 1 << 53


class ValueDeserializer:
    """Deserializes one ValueTree node by driving a visitor.

    Usage:
        >>> de = ValueDeserializer(Integer(8080))
        >>> de.deserialize_u16(PortVisitor())
        8080

    Args:
        node: The node to deserialize
        config: Pass configuration (default: GuraConfig())
        path: Structural path of node within the document
        guard: Depth guard shared with the parent (a fresh one at the root)
    """

    __slots__ = ("_config", "_guard", "_node", "_path")

    def __init__(
        self,
        node: Value,
        *,
        config: GuraConfig | None = None,
        path: tuple[PathSegment, ...] = (),
        guard: DepthGuard | None = None,
    ) -> None:
        self._node = node
        self._config = config or DEFAULT_CONFIG
        self._path = path
        self._guard = guard if guard is not None else DepthGuard(max_depth=self._config.max_depth)

    @property
    def node(self) -> Value:
        """The wrapped node."""
        return self._node

    @property
    def path(self) -> tuple[PathSegment, ...]:
        """Structural path of the wrapped node."""
        return self._path

    @property
    def config(self) -> GuraConfig:
        """Configuration of this pass."""
        return self._config

    # ------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------

    def child(self, node: Value, segment: PathSegment | None = None) -> ValueDeserializer:
        """Deserializer for a child node (same pass, path extended by segment)."""
        path = self._path if segment is None else (*self._path, segment)
        return ValueDeserializer(node, config=self._config, path=path, guard=self._guard)

    def fork(self, node: Value) -> ValueDeserializer:
        """Deserializer for a replacement node at the same path."""
        return self.child(node)

    def descend[R](
        self, node: Value, segment: PathSegment, action: Callable[[ValueDeserializer], R]
    ) -> R:
        """Run action on the child deserializer for node, one level deeper.

        Raises:
            GuraDepthLimitError: If the child would exceed max_depth
            GuraError: Anything action raises, located at the child's path
        """
        child = self.child(node, segment)
        try:
            with self._guard:
                return action(child)
        except GuraError as exc:
            exc.locate(child.path)
            raise

    def _mismatch(self, expected: str) -> GuraTypeMismatchError:
        return GuraTypeMismatchError(ErrorTemplate.type_mismatch(expected, describe_value(self._node)))

    # ------------------------------------------------------------------
    # Self-describing entry
    # ------------------------------------------------------------------

    def deserialize_any[T](self, visitor: Visitor[T]) -> T:
        """Report the node to visitor exactly as it is."""
        match self._node:
            case Null():
                return visitor.visit_none()
            case Bool(value=flag):
                return visitor.visit_bool(flag)
            case Integer():
                return visitor.visit_int(self._widest())
            case Float(value=number):
                return visitor.visit_float(number)
            case String(value=text):
                return visitor.visit_str(text)
            case Sequence(items=items):
                return visitor.visit_seq(SeqAccess(self, items))
            case Mapping(entries=entries):
                return visitor.visit_map(MapAccess(self, entries))

    def deserialize_ignored_any[T](self, visitor: Visitor[T]) -> T:
        if isinstance(self._node, Integer):
            return visitor.visit_int(self._node.value)
        return self.deserialize_any(visitor)

    # ------------------------------------------------------------------
    # Scalars
    # ------------------------------------------------------------------

    def deserialize_bool[T](self, visitor: Visitor[T]) -> T:
        if not isinstance(self._node, Bool):
            raise self._mismatch("bool")
        return visitor.visit_bool(self._node.value)

    def _sized(self, width: IntWidth) -> int:
        if not isinstance(self._node, Integer):
            raise self._mismatch(width)
        number = self._node.value
        if not width.contains(number):
            raise GuraTypeMismatchError(
                ErrorTemplate.integer_out_of_range(number, width, width.min_value, width.max_value)
            )
        return number

    def _widest(self) -> int:
        if not isinstance(self._node, Integer):
            raise self._mismatch("integer")
        number = self._node.value
        if not (IntWidth.I64.contains(number) or IntWidth.U64.contains(number)):
            raise GuraTypeMismatchError(
                ErrorTemplate.integer_out_of_range(
                    number, "i64 or u64", IntWidth.I64.min_value, IntWidth.U64.max_value
                )
            )
        return number

    def deserialize_i8[T](self, visitor: Visitor[T]) -> T:
        return visitor.visit_int(self._sized(IntWidth.I8))

    def deserialize_i16[T](self, visitor: Visitor[T]) -> T:
        return visitor.visit_int(self._sized(IntWidth.I16))

    def deserialize_i32[T](self, visitor: Visitor[T]) -> T:
        return visitor.visit_int(self._sized(IntWidth.I32))

    def deserialize_i64[T](self, visitor: Visitor[T]) -> T:
        return visitor.visit_int(self._sized(IntWidth.I64))

    def deserialize_u8[T](self, visitor: Visitor[T]) -> T:
        return visitor.visit_int(self._sized(IntWidth.U8))

    def deserialize_u16[T](self, visitor: Visitor[T]) -> T:
        return visitor.visit_int(self._sized(IntWidth.U16))

    def deserialize_u32[T](self, visitor: Visitor[T]) -> T:
        return visitor.visit_int(self._sized(IntWidth.U32))

    def deserialize_u64[T](self, visitor: Visitor[T]) -> T:
        return visitor.visit_int(self._sized(IntWidth.U64))

    def deserialize_int[T](self, visitor: Visitor[T]) -> T:
        """Integer of unspecified width: anything within i64 or u64."""
        return visitor.visit_int(self._widest())

    def deserialize_sized[T](self, width: IntWidth | None, visitor: Visitor[T]) -> T:
        """Dispatch to the entry point of the given width (None: widest)."""
        if width is None:
            return self.deserialize_int(visitor)
        return visitor.visit_int(self._sized(width))

    def _as_double(self, expected: str) -> float:
        match self._node:
            case Float(value=number):
                return number
            case Integer(value=number) if abs(number) <= _F64_EXACT:
                return float(number)
            case Integer(value=number):
                # Beyond 2**53 only some integers are exact doubles.
                try:
                    converted = float(number)
                except OverflowError:
                    converted = math.inf
                if math.isfinite(converted) and int(converted) == number:
                    return converted
                raise GuraTypeMismatchError(ErrorTemplate.float_out_of_range(number, expected))
            case _:
                raise self._mismatch(expected)

    def deserialize_f64[T](self, visitor: Visitor[T]) -> T:
        return visitor.visit_float(self._as_double("f64"))

    def deserialize_f32[T](self, visitor: Visitor[T]) -> T:
        """Single precision float: range-checked, then rounded to f32."""
        number = self._as_double("f32")
        try:
            rounded = struct.unpack("<f", struct.pack("<f", number))[0]
        except OverflowError:
            raise GuraTypeMismatchError(ErrorTemplate.float_out_of_range(number, "f32")) from None
        if isinstance(self._node, Integer) and rounded != number:
            raise GuraTypeMismatchError(ErrorTemplate.float_out_of_range(number, "f32"))
        return visitor.visit_float(rounded)

    def deserialize_char[T](self, visitor: Visitor[T]) -> T:
        if not isinstance(self._node, String) or len(self._node.value) != 1:
            raise self._mismatch("char")
        return visitor.visit_str(self._node.value)

    def deserialize_str[T](self, visitor: Visitor[T]) -> T:
        if not isinstance(self._node, String):
            raise self._mismatch("string")
        return visitor.visit_str(self._node.value)

    def deserialize_string[T](self, visitor: Visitor[T]) -> T:
        return self.deserialize_str(visitor)

    def deserialize_identifier[T](self, visitor: Visitor[T]) -> T:
        return self.deserialize_str(visitor)

    def deserialize_bytes[T](self, visitor: Visitor[T]) -> T:
        """Bytes are a sequence of integers 0..255."""
        if not isinstance(self._node, Sequence):
            raise self._mismatch("bytes")
        data = bytearray()
        for index, item in enumerate(self._node.items):
            if not isinstance(item, Integer) or not IntWidth.U8.contains(item.value):
                error = GuraTypeMismatchError(
                    ErrorTemplate.type_mismatch("u8", describe_value(item))
                )
                error.locate((*self._path, index))
                raise error
            data.append(item.value)
        return visitor.visit_bytes(bytes(data))

    # ------------------------------------------------------------------
    # Absence and unit-like shapes
    # ------------------------------------------------------------------

    def deserialize_option[T](self, visitor: Visitor[T]) -> T:
        if isinstance(self._node, Null):
            return visitor.visit_none()
        return visitor.visit_some(self)

    def deserialize_unit[T](self, visitor: Visitor[T]) -> T:
        if not isinstance(self._node, Null):
            raise self._mismatch("unit")
        return visitor.visit_unit()

    def deserialize_unit_struct[T](self, name: str, visitor: Visitor[T]) -> T:
        if not isinstance(self._node, Null):
            raise self._mismatch(f"unit struct {name}")
        return visitor.visit_unit()

    def deserialize_newtype_struct[T](self, name: str, visitor: Visitor[T]) -> T:
        """Newtype structs are transparent: the visitor reads the same node."""
        return visitor.visit_newtype_struct(self)

    # ------------------------------------------------------------------
    # Composites
    # ------------------------------------------------------------------

    def deserialize_seq[T](self, visitor: Visitor[T]) -> T:
        if not isinstance(self._node, Sequence):
            raise self._mismatch("sequence")
        return visitor.visit_seq(SeqAccess(self, self._node.items))

    def deserialize_tuple[T](self, length: int, visitor: Visitor[T]) -> T:
        """Sequence with exactly length elements."""
        if not isinstance(self._node, Sequence):
            raise self._mismatch(f"tuple of {length} elements")
        if len(self._node.items) != length:
            raise GuraTypeMismatchError(
                ErrorTemplate.invalid_length(len(self._node.items), f"{length} elements")
            )
        return visitor.visit_seq(SeqAccess(self, self._node.items))

    def deserialize_tuple_struct[T](self, name: str, length: int, visitor: Visitor[T]) -> T:
        return self.deserialize_tuple(length, visitor)

    def deserialize_map[T](self, visitor: Visitor[T]) -> T:
        if not isinstance(self._node, Mapping):
            raise self._mismatch("mapping")
        return visitor.visit_map(MapAccess(self, self._node.entries))

    def deserialize_struct[T](
        self, name: str, fields: AbcSequence[str], visitor: Visitor[T]
    ) -> T:
        """Mapping whose keys are matched against the declared field names.

        Undeclared keys are skipped, or rejected when the configuration sets
        deny_unknown_fields.

        Raises:
            GuraUnknownFieldError: Undeclared key in strict mode
        """
        if not isinstance(self._node, Mapping):
            raise self._mismatch(f"struct {name}")
        declared = set(fields)
        entries: list[tuple[str, Value]] = []
        for key, item in self._node.entries:
            if key in declared:
                entries.append((key, item))
            elif self._config.deny_unknown_fields:
                error = GuraUnknownFieldError(ErrorTemplate.unknown_field(key, tuple(fields)))
                error.locate((*self._path, key))
                raise error
        return visitor.visit_map(MapAccess(self, entries))

    def deserialize_enum[T](
        self, name: str, variants: AbcSequence[str], visitor: Visitor[T]
    ) -> T:
        """Bare string (unit variant) or single-entry mapping (payload variant).

        Raises:
            GuraUnknownVariantError: Name not declared, or node of another shape
        """
        match self._node:
            case String(value=variant):
                payload: Value | None = None
            case Mapping(entries=((variant, payload),)):
                pass
            case _:
                raise GuraUnknownVariantError(
                    ErrorTemplate.unknown_variant(describe_value(self._node), tuple(variants))
                )
        if variant not in variants:
            raise GuraUnknownVariantError(ErrorTemplate.unknown_variant(variant, tuple(variants)))
        return visitor.visit_enum(EnumAccess(self, variant, payload))
