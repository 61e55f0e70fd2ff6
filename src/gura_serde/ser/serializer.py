"""Serializer engine: drive a data-model traversal and build a ValueTree.

``ValueSerializer`` exposes one method per shape a generic value traversal
can report. Scalars return a node directly; composites return a collector
that accumulates elements and produces the node on ``end()``:

    seq = serializer.serialize_seq(2)
    seq.serialize_element(80)
    seq.serialize_element(8080)
    tree = seq.end()          # Sequence(items=(Integer(80), Integer(8080)))

The traversal itself is reported by a *schema* (see ``gura_serde.model``)
or by a type's own ``__gura_serialize__`` method.

Python 3.13+.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable
from typing import Any, Protocol

from gura_serde.core.config import DEFAULT_CONFIG, GuraConfig
from gura_serde.core.depth_guard import DepthGuard
from gura_serde.diagnostics import (
    ErrorTemplate,
    GuraCustomError,
    GuraDuplicateFieldError,
    GuraError,
    GuraTypeMismatchError,
    GuraUnsupportedError,
    PathSegment,
)
from gura_serde.enums import FloatWidth, IntWidth
from gura_serde.value.tree import (
    NULL,
    Bool,
    Float,
    Integer,
    Mapping,
    Sequence,
    String,
    Value,
    describe_value,
)

__all__ = [
    "SerializeMap",
    "SerializeSchema",
    "SerializeSequence",
    "SerializeStruct",
    "SerializeStructVariant",
    "SerializeTupleVariant",
    "ValueSerializer",
]

class SerializeSchema(Protocol):
    """Anything that can report a value's shape to the serializer."""

    def serialize(self, value: Any, serializer: ValueSerializer) -> Value: ...


def _type_name(value: object) -> str:
    return type(value).__name__


def _resolve(value: object, schema: SerializeSchema | None) -> SerializeSchema:
    """Shape reporter for value: the given schema, or one inferred from its type."""
    if schema is not None:
        return schema
    from gura_serde.model.schema import schema_of_value  # noqa: PLC0415 - circular

    return schema_of_value(value)


class ValueSerializer:
    """Builds a ValueTree from a data-model traversal.

    One instance serves one serialization pass: it owns the pass's depth
    guard and the structural path used to locate errors. Instances are
    cheap; the public ``to_value`` creates a fresh one per call, which
    keeps concurrent passes independent.
    """

    __slots__ = ("_config", "_guard", "_path")

    def __init__(self, *, config: GuraConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG
        self._guard = DepthGuard(max_depth=self._config.max_depth)
        self._path: list[PathSegment] = []

    @property
    def config(self) -> GuraConfig:
        """Configuration of this pass."""
        return self._config

    # ------------------------------------------------------------------
    # Generic entry
    # ------------------------------------------------------------------

    def serialize_value(self, value: object, schema: SerializeSchema | None = None) -> Value:
        """Serialize any value.

        Args:
            value: The value to serialize
            schema: Shape reporter for value; inferred from the runtime type
                when omitted

        Returns:
            ValueTree fragment

        Raises:
            GuraError: If any nested construct cannot be represented
        """
        return _resolve(value, schema).serialize(value, self)

    def _serialize_at(
        self, segment: PathSegment, value: object, schema: SerializeSchema | None
    ) -> Value:
        """Serialize a child value, locating any error at its path."""
        self._path.append(segment)
        try:
            with self._guard:
                return _resolve(value, schema).serialize(value, self)
        except GuraError as exc:
            exc.locate(tuple(self._path))
            raise
        finally:
            self._path.pop()

    # ------------------------------------------------------------------
    # Scalars
    # ------------------------------------------------------------------

    def serialize_bool(self, value: bool) -> Value:
        if not isinstance(value, bool):
            raise GuraTypeMismatchError(ErrorTemplate.type_mismatch("bool", _type_name(value)))
        return Bool(value)

    def _serialize_sized(self, value: int, width: IntWidth) -> Value:
        if isinstance(value, bool) or not isinstance(value, int):
            raise GuraTypeMismatchError(ErrorTemplate.type_mismatch(width, _type_name(value)))
        if not width.contains(value):
            raise GuraTypeMismatchError(
                ErrorTemplate.integer_out_of_range(value, width, width.min_value, width.max_value)
            )
        return Integer(value, width)

    def serialize_i8(self, value: int) -> Value:
        return self._serialize_sized(value, IntWidth.I8)

    def serialize_i16(self, value: int) -> Value:
        return self._serialize_sized(value, IntWidth.I16)

    def serialize_i32(self, value: int) -> Value:
        return self._serialize_sized(value, IntWidth.I32)

    def serialize_i64(self, value: int) -> Value:
        return self._serialize_sized(value, IntWidth.I64)

    def serialize_u8(self, value: int) -> Value:
        return self._serialize_sized(value, IntWidth.U8)

    def serialize_u16(self, value: int) -> Value:
        return self._serialize_sized(value, IntWidth.U16)

    def serialize_u32(self, value: int) -> Value:
        return self._serialize_sized(value, IntWidth.U32)

    def serialize_u64(self, value: int) -> Value:
        return self._serialize_sized(value, IntWidth.U64)

    def serialize_int(self, value: int) -> Value:
        """Serialize an integer of unspecified width in its widest form.

        Raises:
            GuraUnsupportedError: If value fits neither i64 nor u64
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise GuraTypeMismatchError(ErrorTemplate.type_mismatch("integer", _type_name(value)))
        if not (IntWidth.I64.contains(value) or IntWidth.U64.contains(value)):
            raise GuraUnsupportedError(ErrorTemplate.unsupported_integer(value))
        return Integer(value)

    def serialize_sized(self, value: int, width: IntWidth | None) -> Value:
        """Dispatch to the method of the given width (None: widest)."""
        if width is None:
            return self.serialize_int(value)
        return self._serialize_sized(value, width)

    def serialize_f32(self, value: float) -> Value:
        """Serialize a single precision float.

        The value is rounded to single precision; finite values beyond the
        f32 range are rejected rather than turned into infinities.
        """
        number = self._as_float(value, FloatWidth.F32)
        try:
            rounded = struct.unpack("<f", struct.pack("<f", number))[0]
        except OverflowError:
            raise GuraTypeMismatchError(ErrorTemplate.float_out_of_range(number, "f32")) from None
        return Float(rounded, FloatWidth.F32)

    def serialize_f64(self, value: float) -> Value:
        return Float(self._as_float(value, FloatWidth.F64), FloatWidth.F64)

    @staticmethod
    def _as_float(value: float, width: FloatWidth) -> float:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise GuraTypeMismatchError(ErrorTemplate.type_mismatch(width, _type_name(value)))
        try:
            return float(value)
        except OverflowError:
            raise GuraTypeMismatchError(ErrorTemplate.float_out_of_range(value, width)) from None

    def serialize_char(self, value: str) -> Value:
        if not isinstance(value, str) or len(value) != 1:
            raise GuraTypeMismatchError(ErrorTemplate.type_mismatch("char", repr(value)))
        return String(value)

    def serialize_str(self, value: str) -> Value:
        if not isinstance(value, str):
            raise GuraTypeMismatchError(ErrorTemplate.type_mismatch("string", _type_name(value)))
        return String(value)

    def serialize_bytes(self, value: bytes | bytearray | memoryview) -> Value:
        """Serialize bytes as a sequence of u8 integers (Gura has no binary type)."""
        if not isinstance(value, bytes | bytearray | memoryview):
            raise GuraTypeMismatchError(ErrorTemplate.type_mismatch("bytes", _type_name(value)))
        return Sequence(items=tuple(Integer(byte, IntWidth.U8) for byte in bytes(value)))

    # ------------------------------------------------------------------
    # Absence and unit-like shapes
    # ------------------------------------------------------------------

    def serialize_none(self) -> Value:
        return NULL

    def serialize_some(self, value: object, schema: SerializeSchema | None = None) -> Value:
        return self.serialize_value(value, schema)

    def serialize_unit(self) -> Value:
        return NULL

    def serialize_unit_struct(self, name: str) -> Value:
        return NULL

    def serialize_unit_variant(self, name: str, index: int, variant: str) -> Value:
        """Unit variants are the bare variant name."""
        return String(variant)

    def serialize_newtype_struct(
        self, name: str, value: object, schema: SerializeSchema | None = None
    ) -> Value:
        """Newtype structs are transparent: only the wrapped value is written."""
        return self.serialize_value(value, schema)

    def serialize_newtype_variant(
        self,
        name: str,
        index: int,
        variant: str,
        value: object,
        schema: SerializeSchema | None = None,
    ) -> Value:
        """Newtype variants are ``{variant: value}``."""
        return Mapping.singleton(variant, self._serialize_at(variant, value, schema))

    # ------------------------------------------------------------------
    # Composites
    # ------------------------------------------------------------------

    def serialize_seq(self, length: int | None = None) -> SerializeSequence:
        return SerializeSequence(self)

    def serialize_tuple(self, length: int) -> SerializeSequence:
        return SerializeSequence(self)

    def serialize_tuple_struct(self, name: str, length: int) -> SerializeSequence:
        return SerializeSequence(self)

    def serialize_tuple_variant(
        self, name: str, index: int, variant: str, length: int
    ) -> SerializeTupleVariant:
        return SerializeTupleVariant(self, variant)

    def serialize_map(self, length: int | None = None) -> SerializeMap:
        return SerializeMap(self)

    def serialize_struct(self, name: str, length: int) -> SerializeStruct:
        return SerializeStruct(self)

    def serialize_struct_variant(
        self, name: str, index: int, variant: str, length: int
    ) -> SerializeStructVariant:
        return SerializeStructVariant(self, variant)

    def collect_seq(self, values: Iterable[object], schema: SerializeSchema | None = None) -> Value:
        """Serialize every element of an iterable as a sequence."""
        seq = self.serialize_seq()
        for item in values:
            seq.serialize_element(item, schema)
        return seq.end()


# ============================================================================
# COLLECTORS
# ============================================================================


class _Collector:
    """Shared create -> append -> end() lifecycle."""

    __slots__ = ("_finished", "_serializer")

    def __init__(self, serializer: ValueSerializer) -> None:
        self._serializer = serializer
        self._finished = False

    def _check_open(self) -> None:
        if self._finished:
            msg = f"{type(self).__name__} already finalized"
            raise GuraCustomError(ErrorTemplate.custom(msg))

    def _finish(self) -> None:
        self._check_open()
        self._finished = True


class SerializeSequence(_Collector):
    """Collects sequence, tuple and tuple struct elements in supply order."""

    __slots__ = ("_items",)

    def __init__(self, serializer: ValueSerializer) -> None:
        super().__init__(serializer)
        self._items: list[Value] = []

    def serialize_element(self, value: object, schema: SerializeSchema | None = None) -> None:
        self._check_open()
        self._items.append(self._serializer._serialize_at(len(self._items), value, schema))

    # Tuple structs report fields rather than elements.
    serialize_field = serialize_element

    def end(self) -> Value:
        self._finish()
        return Sequence(items=tuple(self._items))


class SerializeTupleVariant(SerializeSequence):
    """Collects tuple variant fields; produces ``{variant: [fields...]}``."""

    __slots__ = ("_variant",)

    def __init__(self, serializer: ValueSerializer, variant: str) -> None:
        super().__init__(serializer)
        self._variant = variant

    def serialize_element(self, value: object, schema: SerializeSchema | None = None) -> None:
        self._check_open()
        self._serializer._path.append(self._variant)
        try:
            self._items.append(self._serializer._serialize_at(len(self._items), value, schema))
        finally:
            self._serializer._path.pop()

    serialize_field = serialize_element

    def end(self) -> Value:
        return Mapping.singleton(self._variant, super().end())


class _EntryCollector(_Collector):
    """Ordered string-keyed entries with duplicate detection."""

    __slots__ = ("_entries", "_keys")

    def __init__(self, serializer: ValueSerializer) -> None:
        super().__init__(serializer)
        self._entries: list[tuple[str, Value]] = []
        self._keys: set[str] = set()

    def _insert(self, key: str, value: object, schema: SerializeSchema | None) -> None:
        if key in self._keys:
            raise GuraDuplicateFieldError(ErrorTemplate.duplicate_field(key))
        node = self._serializer._serialize_at(key, value, schema)
        self._keys.add(key)
        self._entries.append((key, node))

    def _mapping(self) -> Mapping:
        return Mapping(entries=tuple(self._entries))


class SerializeMap(_EntryCollector):
    """Collects map entries. Every key must serialize to a String node."""

    __slots__ = ("_pending_key",)

    def __init__(self, serializer: ValueSerializer) -> None:
        super().__init__(serializer)
        self._pending_key: str | None = None

    def _key_string(self, key: object, schema: SerializeSchema | None) -> str:
        node = self._serializer.serialize_value(key, schema)
        if not isinstance(node, String):
            raise GuraUnsupportedError(ErrorTemplate.unsupported_map_key(describe_value(node)))
        return node.value

    def serialize_key(self, key: object, schema: SerializeSchema | None = None) -> None:
        self._check_open()
        if self._pending_key is not None:
            msg = "serialize_key called twice without serialize_value"
            raise GuraCustomError(ErrorTemplate.custom(msg))
        self._pending_key = self._key_string(key, schema)

    def serialize_value(self, value: object, schema: SerializeSchema | None = None) -> None:
        self._check_open()
        if self._pending_key is None:
            msg = "serialize_value called before serialize_key"
            raise GuraCustomError(ErrorTemplate.custom(msg))
        key, self._pending_key = self._pending_key, None
        self._insert(key, value, schema)

    def serialize_entry(
        self,
        key: object,
        value: object,
        key_schema: SerializeSchema | None = None,
        value_schema: SerializeSchema | None = None,
    ) -> None:
        self.serialize_key(key, key_schema)
        self.serialize_value(value, value_schema)

    def end(self) -> Value:
        if self._pending_key is not None:
            msg = f"map finalized with key '{self._pending_key}' but no value"
            raise GuraCustomError(ErrorTemplate.custom(msg))
        self._finish()
        return self._mapping()


class SerializeStruct(_EntryCollector):
    """Collects struct fields in declaration order."""

    __slots__ = ()

    def serialize_field(self, name: str, value: object, schema: SerializeSchema | None = None) -> None:
        self._check_open()
        self._insert(name, value, schema)

    def skip_field(self, name: str) -> None:
        """Omit a field entirely (no null placeholder)."""
        self._check_open()

    def end(self) -> Value:
        self._finish()
        return self._mapping()


class SerializeStructVariant(SerializeStruct):
    """Collects struct variant fields; produces ``{variant: {fields...}}``."""

    __slots__ = ("_variant",)

    def __init__(self, serializer: ValueSerializer, variant: str) -> None:
        super().__init__(serializer)
        self._variant = variant

    def serialize_field(self, name: str, value: object, schema: SerializeSchema | None = None) -> None:
        self._check_open()
        self._serializer._path.append(self._variant)
        try:
            self._insert(name, value, schema)
        finally:
            self._serializer._path.pop()

    def end(self) -> Value:
        return Mapping.singleton(self._variant, super().end())
