"""Schemas: the bridge between Python types and both engines.

A schema knows the shape of one Python type. It reports a value's shape to
``ValueSerializer`` (``serialize``) and supplies the visitor that
``ValueDeserializer`` drives to rebuild the value (``deserialize``).

``schema_for(tp)`` resolves an annotation into a schema; results are cached
and immutable once resolved, so they can be shared between threads.
Dataclass and tagged-union schemas resolve their members on first use,
which lets types refer to themselves.

Python 3.13+.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import types
from collections.abc import Callable, Iterable
from collections.abc import Mapping as AbcMapping
from collections.abc import MutableMapping, MutableSequence, MutableSet
from collections.abc import Sequence as AbcSequence
from collections.abc import Set as AbcSet
from dataclasses import dataclass
from functools import lru_cache
from typing import (
    TYPE_CHECKING,
    Annotated,
    Any,
    NewType,
    TypeAliasType,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from gura_serde.constants import MAX_SCHEMA_CACHE_SIZE
from gura_serde.de.visitor import Visitor
from gura_serde.diagnostics import (
    ErrorTemplate,
    GuraCustomError,
    GuraDuplicateFieldError,
    GuraMissingFieldError,
    GuraTypeMismatchError,
    GuraUnknownFieldError,
    GuraUnknownVariantError,
    GuraUnsupportedError,
)
from gura_serde.enums import FloatWidth, IntWidth, VariantShape
from gura_serde.value.tree import VALUE_TYPES, Mapping, Null, String, Value, describe_value, is_value

from .markers import DEFAULT_FIELD_OPTIONS, FIELD_OPTIONS_KEY, CharMarker, FieldOptions
from .tagged import UnionInfo, VariantInfo, union_info, variant_info

if TYPE_CHECKING:
    from gura_serde.de.access import EnumAccess, MapAccess, SeqAccess
    from gura_serde.de.deserializer import ValueDeserializer
    from gura_serde.ser.serializer import ValueSerializer

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Base
    "Schema",
    # Resolution
    "schema_for",
    "schema_of_value",
    # Scalars
    "BoolSchema",
    "IntSchema",
    "FloatSchema",
    "CharSchema",
    "StrSchema",
    "BytesSchema",
    "UnitSchema",
    # Wrappers
    "OptionSchema",
    "NewTypeSchema",
    # Collections
    "SeqSchema",
    "TupleSchema",
    "MapSchema",
    # Records and enums
    "FieldSpec",
    "StructSchema",
    "EnumSchema",
    "TaggedUnionSchema",
    # Escape hatches
    "CustomSchema",
    "ValueNodeSchema",
    "AnySchema",
]

logger = logging.getLogger(__name__)


def _type_name(value: object) -> str:
    return type(value).__name__


def _mismatch(expected: str, value: object) -> GuraTypeMismatchError:
    return GuraTypeMismatchError(ErrorTemplate.type_mismatch(expected, _type_name(value)))


# ============================================================================
# BASE
# ============================================================================


class Schema[T]:
    """Shape of one Python type.

    Subclasses implement both directions. ``expecting`` describes the type
    in error messages.
    """

    __slots__ = ()

    expecting: str = "a value"

    def serialize(self, value: T, serializer: ValueSerializer) -> Value:
        raise NotImplementedError

    def deserialize(self, deserializer: ValueDeserializer) -> T:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.expecting})"


class _ValueVisitor[T](Visitor[T]):
    """Visitor that accepts the single shape its schema asks for."""

    def __init__(self, expecting: str) -> None:
        self._expecting = expecting

    def expecting(self) -> str:
        return self._expecting


# ============================================================================
# SCALARS
# ============================================================================


class _BoolVisitor(_ValueVisitor[bool]):
    def visit_bool(self, value: bool) -> bool:
        return value


class _IntVisitor(_ValueVisitor[int]):
    def visit_int(self, value: int) -> int:
        return value


class _FloatVisitor(_ValueVisitor[float]):
    def visit_float(self, value: float) -> float:
        return value


class _StrVisitor(_ValueVisitor[str]):
    def visit_str(self, value: str) -> str:
        return value


class _BytesVisitor(_ValueVisitor[bytes]):
    def visit_bytes(self, value: bytes) -> bytes:
        return value


class _UnitVisitor(_ValueVisitor[None]):
    def visit_unit(self) -> None:
        return None


class BoolSchema(Schema[bool]):
    __slots__ = ()
    expecting = "a boolean"

    def serialize(self, value: bool, serializer: ValueSerializer) -> Value:
        return serializer.serialize_bool(value)

    def deserialize(self, deserializer: ValueDeserializer) -> bool:
        return deserializer.deserialize_bool(_BoolVisitor(self.expecting))


class IntSchema(Schema[int]):
    """Integer of a declared width; None means the widest (i64, else u64)."""

    __slots__ = ("width",)

    def __init__(self, width: IntWidth | None = None) -> None:
        self.width = width

    @property
    def expecting(self) -> str:  # type: ignore[override]
        return str(self.width) if self.width else "an integer"

    def serialize(self, value: int, serializer: ValueSerializer) -> Value:
        return serializer.serialize_sized(value, self.width)

    def deserialize(self, deserializer: ValueDeserializer) -> int:
        return deserializer.deserialize_sized(self.width, _IntVisitor(self.expecting))


class FloatSchema(Schema[float]):
    __slots__ = ("width",)

    def __init__(self, width: FloatWidth = FloatWidth.F64) -> None:
        self.width = width

    @property
    def expecting(self) -> str:  # type: ignore[override]
        return str(self.width)

    def serialize(self, value: float, serializer: ValueSerializer) -> Value:
        if self.width is FloatWidth.F32:
            return serializer.serialize_f32(value)
        return serializer.serialize_f64(value)

    def deserialize(self, deserializer: ValueDeserializer) -> float:
        visitor = _FloatVisitor(self.expecting)
        if self.width is FloatWidth.F32:
            return deserializer.deserialize_f32(visitor)
        return deserializer.deserialize_f64(visitor)


class CharSchema(Schema[str]):
    __slots__ = ()
    expecting = "a single character"

    def serialize(self, value: str, serializer: ValueSerializer) -> Value:
        return serializer.serialize_char(value)

    def deserialize(self, deserializer: ValueDeserializer) -> str:
        return deserializer.deserialize_char(_StrVisitor(self.expecting))


class StrSchema(Schema[str]):
    __slots__ = ()
    expecting = "a string"

    def serialize(self, value: str, serializer: ValueSerializer) -> Value:
        return serializer.serialize_str(value)

    def deserialize(self, deserializer: ValueDeserializer) -> str:
        return deserializer.deserialize_str(_StrVisitor(self.expecting))


class BytesSchema(Schema[bytes | bytearray]):
    __slots__ = ("factory",)
    expecting = "bytes"

    def __init__(self, factory: type[bytes] | type[bytearray] = bytes) -> None:
        self.factory = factory

    def serialize(self, value: bytes | bytearray, serializer: ValueSerializer) -> Value:
        return serializer.serialize_bytes(value)

    def deserialize(self, deserializer: ValueDeserializer) -> bytes | bytearray:
        return self.factory(deserializer.deserialize_bytes(_BytesVisitor(self.expecting)))


class UnitSchema(Schema[None]):
    """``None`` as a type: Gura ``null``."""

    __slots__ = ()
    expecting = "null"

    def serialize(self, value: None, serializer: ValueSerializer) -> Value:
        if value is not None:
            raise _mismatch("None", value)
        return serializer.serialize_unit()

    def deserialize(self, deserializer: ValueDeserializer) -> None:
        return deserializer.deserialize_unit(_UnitVisitor(self.expecting))


_BOOL = BoolSchema()
_INT = IntSchema()
_FLOAT = FloatSchema(FloatWidth.F64)
_STR = StrSchema()
_CHAR = CharSchema()
_BYTES = BytesSchema()
_UNIT = UnitSchema()


# ============================================================================
# WRAPPERS
# ============================================================================


class _OptionVisitor[T](_ValueVisitor[T | None]):
    def __init__(self, inner: Schema[T]) -> None:
        super().__init__(f"optional {inner.expecting}")
        self._inner = inner

    def visit_none(self) -> None:
        return None

    def visit_some(self, deserializer: ValueDeserializer) -> T:
        return self._inner.deserialize(deserializer)


class OptionSchema[T](Schema[T | None]):
    """``T | None``: null, or a value of T."""

    __slots__ = ("inner",)

    def __init__(self, inner: Schema[T]) -> None:
        self.inner = inner

    @property
    def expecting(self) -> str:  # type: ignore[override]
        return f"optional {self.inner.expecting}"

    def serialize(self, value: T | None, serializer: ValueSerializer) -> Value:
        if value is None:
            return serializer.serialize_none()
        return serializer.serialize_some(value, self.inner)

    def deserialize(self, deserializer: ValueDeserializer) -> T | None:
        return deserializer.deserialize_option(_OptionVisitor(self.inner))


class _NewTypeVisitor[T](_ValueVisitor[T]):
    def __init__(self, expecting: str, inner: Schema[T]) -> None:
        super().__init__(expecting)
        self._inner = inner

    def visit_newtype_struct(self, deserializer: ValueDeserializer) -> T:
        return self._inner.deserialize(deserializer)


class NewTypeSchema[T](Schema[T]):
    """``typing.NewType``: written as the wrapped value alone."""

    __slots__ = ("inner", "name")

    def __init__(self, name: str, inner: Schema[T]) -> None:
        self.name = name
        self.inner = inner

    @property
    def expecting(self) -> str:  # type: ignore[override]
        return self.name

    def serialize(self, value: T, serializer: ValueSerializer) -> Value:
        return serializer.serialize_newtype_struct(self.name, value, self.inner)

    def deserialize(self, deserializer: ValueDeserializer) -> T:
        visitor = _NewTypeVisitor(self.name, self.inner)
        return deserializer.deserialize_newtype_struct(self.name, visitor)


# ============================================================================
# COLLECTIONS
# ============================================================================


class _SeqVisitor(_ValueVisitor[Any]):
    def __init__(self, expecting: str, item: Schema[Any], factory: Callable[[list[Any]], Any]) -> None:
        super().__init__(expecting)
        self._item = item
        self._factory = factory

    def visit_seq(self, seq: SeqAccess) -> Any:
        return self._factory(list(seq.iter_elements(self._item)))


class SeqSchema(Schema[Any]):
    """Homogeneous sequence: list, set, frozenset or ``tuple[T, ...]``."""

    __slots__ = ("factory", "item")

    def __init__(self, item: Schema[Any], factory: Callable[[list[Any]], Any] = list) -> None:
        self.item = item
        self.factory = factory

    @property
    def expecting(self) -> str:  # type: ignore[override]
        return f"a sequence of {self.item.expecting}"

    def serialize(self, value: Iterable[Any], serializer: ValueSerializer) -> Value:
        if isinstance(value, str | bytes | bytearray | AbcMapping) or not isinstance(value, Iterable):
            raise _mismatch("sequence", value)
        return serializer.collect_seq(value, self.item)

    def deserialize(self, deserializer: ValueDeserializer) -> Any:
        return deserializer.deserialize_seq(_SeqVisitor(self.expecting, self.item, self.factory))


class _TupleVisitor(_ValueVisitor[Any]):
    def __init__(
        self, expecting: str, items: tuple[Schema[Any], ...], factory: Callable[[list[Any]], Any]
    ) -> None:
        super().__init__(expecting)
        self._items = items
        self._factory = factory

    def visit_seq(self, seq: SeqAccess) -> Any:
        return self._factory([seq.next_element(item) for item in self._items])


class TupleSchema(Schema[tuple[Any, ...]]):
    """Fixed-length heterogeneous tuple; with a name, a tuple struct (NamedTuple)."""

    __slots__ = ("factory", "items", "name")

    def __init__(
        self,
        items: tuple[Schema[Any], ...],
        *,
        name: str | None = None,
        factory: Callable[[list[Any]], Any] = tuple,
    ) -> None:
        self.items = items
        self.name = name
        self.factory = factory

    @property
    def expecting(self) -> str:  # type: ignore[override]
        return self.name or f"a tuple of {len(self.items)} elements"

    def serialize(self, value: tuple[Any, ...], serializer: ValueSerializer) -> Value:
        if not isinstance(value, tuple):
            raise _mismatch(self.expecting, value)
        if len(value) != len(self.items):
            raise GuraTypeMismatchError(
                ErrorTemplate.invalid_length(len(value), f"{len(self.items)} elements")
            )
        if self.name is None:
            collector = serializer.serialize_tuple(len(self.items))
        else:
            collector = serializer.serialize_tuple_struct(self.name, len(self.items))
        for item, schema in zip(value, self.items, strict=True):
            collector.serialize_element(item, schema)
        return collector.end()

    def deserialize(self, deserializer: ValueDeserializer) -> tuple[Any, ...]:
        visitor = _TupleVisitor(self.expecting, self.items, self.factory)
        if self.name is None:
            return deserializer.deserialize_tuple(len(self.items), visitor)
        return deserializer.deserialize_tuple_struct(self.name, len(self.items), visitor)


class _MapVisitor(_ValueVisitor[Any]):
    def __init__(
        self, expecting: str, key: Schema[Any], value: Schema[Any], factory: Callable[[], Any]
    ) -> None:
        super().__init__(expecting)
        self._key = key
        self._value = value
        self._factory = factory

    def visit_map(self, map_access: MapAccess) -> Any:
        result = self._factory()
        while (entry := map_access.next_entry(self._key, self._value)) is not None:
            key, value = entry
            result[key] = value
        return result


class MapSchema(Schema[Any]):
    """``dict[K, V]``: K must serialize to a string."""

    __slots__ = ("factory", "key", "value")

    def __init__(
        self, key: Schema[Any], value: Schema[Any], factory: Callable[[], Any] = dict
    ) -> None:
        self.key = key
        self.value = value
        self.factory = factory

    @property
    def expecting(self) -> str:  # type: ignore[override]
        return f"a mapping of {self.key.expecting} to {self.value.expecting}"

    def serialize(self, value: AbcMapping[Any, Any], serializer: ValueSerializer) -> Value:
        if not isinstance(value, AbcMapping):
            raise _mismatch("mapping", value)
        collector = serializer.serialize_map(len(value))
        for key, item in value.items():
            collector.serialize_entry(key, item, self.key, self.value)
        return collector.end()

    def deserialize(self, deserializer: ValueDeserializer) -> Any:
        visitor = _MapVisitor(self.expecting, self.key, self.value, self.factory)
        return deserializer.deserialize_map(visitor)


# ============================================================================
# RECORDS
# ============================================================================


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One dataclass field as seen by the binding layer.

    Attributes:
        attr: Python attribute name
        key: Gura key written on output
        accepted: Keys accepted on input (key first, then aliases)
        schema: Field schema; None for skipped fields
        has_default: Field may be omitted from the constructor call
    """

    attr: str
    key: str
    accepted: tuple[str, ...]
    schema: Schema[Any] | None
    has_default: bool

    @property
    def skip(self) -> bool:
        return self.schema is None


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return get_type_hints(cls, include_extras=True)
    except NameError as exc:
        raise GuraUnsupportedError(
            ErrorTemplate.unsupported_declaration(cls.__name__, f"unresolvable annotation ({exc})")
        ) from exc


def _field_specs(cls: type) -> tuple[FieldSpec, ...]:
    """Resolve the FieldSpecs of a dataclass, checking key collisions."""
    hints = _type_hints(cls)
    specs: list[FieldSpec] = []
    taken: dict[str, str] = {}
    for dc_field in dataclasses.fields(cls):
        options: FieldOptions = dc_field.metadata.get(FIELD_OPTIONS_KEY, DEFAULT_FIELD_OPTIONS)
        has_default = (
            dc_field.default is not dataclasses.MISSING
            or dc_field.default_factory is not dataclasses.MISSING
        )
        if options.skip or not dc_field.init:
            specs.append(FieldSpec(dc_field.name, dc_field.name, (), None, has_default))
            continue
        key = options.rename or dc_field.name
        accepted = (key, *options.aliases)
        for name in accepted:
            if name in taken:
                reason = f"key '{name}' used by both '{taken[name]}' and '{dc_field.name}'"
                raise GuraUnsupportedError(
                    ErrorTemplate.unsupported_declaration(cls.__name__, reason)
                )
            taken[name] = dc_field.name
        specs.append(
            FieldSpec(dc_field.name, key, accepted, schema_for(hints[dc_field.name]), has_default)
        )
    return tuple(specs)


class _StructVisitor(_ValueVisitor[Any]):
    def __init__(self, schema: StructSchema) -> None:
        super().__init__(schema.expecting)
        self._schema = schema

    def visit_map(self, map_access: MapAccess) -> Any:
        schema = self._schema
        values: dict[str, Any] = {}
        while (key := map_access.next_key()) is not None:
            spec = schema.field_for_key(key)
            if spec is None or spec.schema is None:
                map_access.skip_value()
                continue
            if spec.attr in values:
                raise GuraDuplicateFieldError(ErrorTemplate.duplicate_field(spec.key))
            values[spec.attr] = map_access.next_value(spec.schema)
        return schema.build(values)


class StructSchema(Schema[Any]):
    """Dataclass: a mapping of its fields, in declaration order."""

    __slots__ = ("_by_key", "_fields", "cls")

    def __init__(self, cls: type) -> None:
        self.cls = cls
        self._fields: tuple[FieldSpec, ...] | None = None
        self._by_key: dict[str, FieldSpec] = {}

    @property
    def expecting(self) -> str:  # type: ignore[override]
        return f"struct {self.cls.__name__}"

    @property
    def fields(self) -> tuple[FieldSpec, ...]:
        """Field specs, resolved on first access."""
        if self._fields is None:
            specs = _field_specs(self.cls)
            self._by_key = {name: spec for spec in specs for name in spec.accepted}
            self._fields = specs
        return self._fields

    @property
    def accepted_keys(self) -> tuple[str, ...]:
        return tuple(name for spec in self.fields for name in spec.accepted)

    def field_for_key(self, key: str) -> FieldSpec | None:
        _ = self.fields
        return self._by_key.get(key)

    def serialize_fields(self, value: Any, collector: Any) -> Value:
        """Feed every field of value to a struct(-variant) collector."""
        if not isinstance(value, self.cls):
            raise _mismatch(self.expecting, value)
        for spec in self.fields:
            if spec.schema is None:
                collector.skip_field(spec.key)
            else:
                collector.serialize_field(spec.key, getattr(value, spec.attr), spec.schema)
        return collector.end()

    def serialize(self, value: Any, serializer: ValueSerializer) -> Value:
        collector = serializer.serialize_struct(self.cls.__name__, len(self.fields))
        return self.serialize_fields(value, collector)

    def visitor(self) -> Visitor[Any]:
        return _StructVisitor(self)

    def deserialize(self, deserializer: ValueDeserializer) -> Any:
        return deserializer.deserialize_struct(self.cls.__name__, self.accepted_keys, self.visitor())

    def build(self, values: dict[str, Any]) -> Any:
        """Construct the dataclass from deserialized field values.

        Absent fields take their default; absent optional fields become
        None.

        Raises:
            GuraMissingFieldError: Absent field without default
            GuraCustomError: The constructor rejected the values
        """
        for spec in self.fields:
            if spec.attr in values or spec.has_default or spec.schema is None:
                continue
            if isinstance(spec.schema, OptionSchema):
                values[spec.attr] = None
                continue
            raise GuraMissingFieldError(ErrorTemplate.missing_field(spec.key))
        try:
            return self.cls(**values)
        except (TypeError, ValueError) as exc:
            msg = f"cannot construct {self.cls.__name__}: {exc}"
            raise GuraCustomError(ErrorTemplate.custom(msg)) from exc


# ============================================================================
# ENUMS
# ============================================================================


class _EnumVisitor(_ValueVisitor[Any]):
    def __init__(self, cls: type[enum.Enum]) -> None:
        super().__init__(f"enum {cls.__name__}")
        self._cls = cls

    def visit_enum(self, data: EnumAccess) -> Any:
        name, access = data.variant()
        access.unit_variant()
        return self._cls[name]


class EnumSchema(Schema[enum.Enum]):
    """``enum.Enum``: unit variants named after the members."""

    __slots__ = ("cls", "names")

    def __init__(self, cls: type[enum.Enum]) -> None:
        self.cls = cls
        self.names = tuple(cls.__members__)

    @property
    def expecting(self) -> str:  # type: ignore[override]
        return f"enum {self.cls.__name__}"

    def serialize(self, value: enum.Enum, serializer: ValueSerializer) -> Value:
        if not isinstance(value, self.cls):
            raise _mismatch(self.expecting, value)
        return serializer.serialize_unit_variant(
            self.cls.__name__, self.names.index(value.name), value.name
        )

    def deserialize(self, deserializer: ValueDeserializer) -> enum.Enum:
        return deserializer.deserialize_enum(self.cls.__name__, self.names, _EnumVisitor(self.cls))


@dataclass(frozen=True, slots=True)
class _ResolvedVariant:
    info: VariantInfo
    index: int
    fields: tuple[FieldSpec, ...]
    struct: StructSchema


class _UnionVisitor(_ValueVisitor[Any]):
    def __init__(self, schema: TaggedUnionSchema) -> None:
        super().__init__(schema.expecting)
        self._schema = schema

    def visit_enum(self, data: EnumAccess) -> Any:
        name, access = data.variant()
        resolved = self._schema.resolve_name(name)
        cls = resolved.info.cls
        payload = [spec for spec in resolved.fields if spec.schema is not None]
        match resolved.info.shape:
            case VariantShape.UNIT:
                access.unit_variant()
                return cls()
            case VariantShape.NEWTYPE:
                (spec,) = payload
                return cls(**{spec.attr: access.newtype_variant(spec.schema)})
            case VariantShape.TUPLE:
                schemas = tuple(spec.schema for spec in payload if spec.schema is not None)
                visitor = _TupleVisitor(
                    f"tuple variant {name}",
                    schemas,
                    lambda items: cls(**{s.attr: v for s, v in zip(payload, items, strict=True)}),
                )
                return access.tuple_variant(len(schemas), visitor)
            case VariantShape.STRUCT:
                return access.struct_variant(resolved.struct.accepted_keys, resolved.struct.visitor())


class TaggedUnionSchema(Schema[Any]):
    """``@tagged_union`` class: enum with unit, newtype, tuple and struct variants.

    Externally tagged by default (``Name`` / ``Name: payload``); with a tag
    key, internally tagged (the variant name stored next to the fields).
    """

    __slots__ = ("_by_class", "_by_name", "_count", "cls", "info")

    def __init__(self, cls: type, info: UnionInfo) -> None:
        self.cls = cls
        self.info = info
        self._count = -1
        self._by_name: dict[str, _ResolvedVariant] = {}
        self._by_class: dict[type, _ResolvedVariant] = {}

    @property
    def expecting(self) -> str:  # type: ignore[override]
        return f"enum {self.info.name}"

    def _resolve(self) -> None:
        # Variants register after the union is defined; re-resolve if more arrived.
        if self._count == len(self.info.variants):
            return
        by_name: dict[str, _ResolvedVariant] = {}
        by_class: dict[type, _ResolvedVariant] = {}
        for index, info in enumerate(self.info.variants):
            struct = StructSchema(info.cls)
            resolved = _ResolvedVariant(info, index, struct.fields, struct)
            by_name[info.name] = resolved
            by_class[info.cls] = resolved
        self._by_name, self._by_class = by_name, by_class
        self._count = len(self.info.variants)

    def resolve_name(self, name: str) -> _ResolvedVariant:
        self._resolve()
        return self._by_name[name]

    def _resolve_value(self, value: Any) -> _ResolvedVariant:
        self._resolve()
        resolved = self._by_class.get(type(value))
        if resolved is None:
            raise _mismatch(f"a variant of {self.info.name}", value)
        return resolved

    def serialize(self, value: Any, serializer: ValueSerializer) -> Value:
        resolved = self._resolve_value(value)
        if self.info.tag is not None:
            return self._serialize_internal(value, resolved, serializer, self.info.tag)

        union, index, name = self.info.name, resolved.index, resolved.info.name
        payload = [spec for spec in resolved.fields if spec.schema is not None]
        match resolved.info.shape:
            case VariantShape.UNIT:
                return serializer.serialize_unit_variant(union, index, name)
            case VariantShape.NEWTYPE:
                (spec,) = payload
                return serializer.serialize_newtype_variant(
                    union, index, name, getattr(value, spec.attr), spec.schema
                )
            case VariantShape.TUPLE:
                collector = serializer.serialize_tuple_variant(union, index, name, len(payload))
                for spec in payload:
                    collector.serialize_field(getattr(value, spec.attr), spec.schema)
                return collector.end()
            case VariantShape.STRUCT:
                collector = serializer.serialize_struct_variant(union, index, name, len(payload))
                return resolved.struct.serialize_fields(value, collector)

    def _serialize_internal(
        self, value: Any, resolved: _ResolvedVariant, serializer: ValueSerializer, tag: str
    ) -> Value:
        collector = serializer.serialize_struct(self.info.name, len(resolved.fields) + 1)
        collector.serialize_field(tag, resolved.info.name, _STR)
        return resolved.struct.serialize_fields(value, collector)

    def deserialize(self, deserializer: ValueDeserializer) -> Any:
        self._resolve()
        if self.info.tag is not None:
            return self._deserialize_internal(deserializer, self.info.tag)
        return deserializer.deserialize_enum(
            self.info.name, tuple(self._by_name), _UnionVisitor(self)
        )

    def _deserialize_internal(self, deserializer: ValueDeserializer, tag: str) -> Any:
        node = deserializer.node
        if not isinstance(node, Mapping):
            raise GuraTypeMismatchError(
                ErrorTemplate.type_mismatch(self.expecting, describe_value(node))
            )
        tag_node = node.get(tag)
        if tag_node is None:
            raise GuraMissingFieldError(ErrorTemplate.missing_field(tag))
        if not isinstance(tag_node, String):
            raise GuraTypeMismatchError(
                ErrorTemplate.type_mismatch("variant name", describe_value(tag_node))
            )
        resolved = self._by_name.get(tag_node.value)
        if resolved is None:
            raise GuraUnknownVariantError(
                ErrorTemplate.unknown_variant(tag_node.value, tuple(self._by_name))
            )
        rest = Mapping(entries=tuple((k, v) for k, v in node.entries if k != tag))
        if resolved.info.shape is VariantShape.UNIT:
            if rest.entries and deserializer.config.deny_unknown_fields:
                key = rest.entries[0][0]
                raise GuraUnknownFieldError(ErrorTemplate.unknown_field(key, (tag,)))
            return resolved.info.cls()
        return resolved.struct.deserialize(deserializer.fork(rest))


# ============================================================================
# ESCAPE HATCHES
# ============================================================================


class CustomSchema(Schema[Any]):
    """Type implementing ``__gura_serialize__`` / ``__gura_deserialize__``.

    ``value.__gura_serialize__(serializer)`` returns the node for value;
    ``cls.__gura_deserialize__(deserializer)`` (a classmethod) returns the
    instance.
    """

    __slots__ = ("cls",)

    def __init__(self, cls: type) -> None:
        self.cls = cls

    @property
    def expecting(self) -> str:  # type: ignore[override]
        return self.cls.__name__

    def serialize(self, value: Any, serializer: ValueSerializer) -> Value:
        if not isinstance(value, self.cls):
            raise _mismatch(self.expecting, value)
        return value.__gura_serialize__(serializer)

    def deserialize(self, deserializer: ValueDeserializer) -> Any:
        return self.cls.__gura_deserialize__(deserializer)


class ValueNodeSchema(Schema[Value]):
    """ValueTree nodes: written as-is, captured as-is."""

    __slots__ = ("node_types",)

    def __init__(self, node_types: tuple[type, ...] = VALUE_TYPES) -> None:
        self.node_types = node_types

    @property
    def expecting(self) -> str:  # type: ignore[override]
        return " or ".join(t.__name__ for t in self.node_types)

    def serialize(self, value: Value, serializer: ValueSerializer) -> Value:
        if not isinstance(value, self.node_types):
            raise _mismatch(self.expecting, value)
        return value

    def deserialize(self, deserializer: ValueDeserializer) -> Value:
        node = deserializer.node
        if not isinstance(node, self.node_types):
            raise GuraTypeMismatchError(
                ErrorTemplate.type_mismatch(self.expecting, describe_value(node))
            )
        return node


class _AnyVisitor(Visitor[Any]):
    """Rebuilds plain Python objects from whatever the node holds."""

    def expecting(self) -> str:
        return "any value"

    def visit_none(self) -> None:
        return None

    def visit_bool(self, value: bool) -> bool:
        return value

    def visit_int(self, value: int) -> int:
        return value

    def visit_float(self, value: float) -> float:
        return value

    def visit_str(self, value: str) -> str:
        return value

    def visit_seq(self, seq: SeqAccess) -> list[Any]:
        return list(seq.iter_elements(_ANY))

    def visit_map(self, map_access: MapAccess) -> dict[str, Any]:
        result: dict[str, Any] = {}
        while (entry := map_access.next_entry(None, _ANY)) is not None:
            key, value = entry
            result[key] = value
        return result


class AnySchema(Schema[Any]):
    """``Any`` / ``object``: shape taken from the runtime value.

    Deserializes to plain ``dict``/``list``/scalar objects.
    """

    __slots__ = ()
    expecting = "any value"

    def serialize(self, value: Any, serializer: ValueSerializer) -> Value:
        return schema_of_value(value).serialize(value, serializer)

    def deserialize(self, deserializer: ValueDeserializer) -> Any:
        return deserializer.deserialize_any(_AnyVisitor())


_ANY = AnySchema()
_VALUE_NODE = ValueNodeSchema()
_ANY_LIST = SeqSchema(_ANY)
_ANY_MAP = MapSchema(_ANY, _ANY)


# ============================================================================
# RESOLUTION
# ============================================================================


def _unsupported(tp: object) -> GuraUnsupportedError:
    return GuraUnsupportedError(ErrorTemplate.unsupported_type(repr(tp)))


def _is_custom(cls: type) -> bool:
    return hasattr(cls, "__gura_serialize__") and hasattr(cls, "__gura_deserialize__")


def _class_schema(tp: type) -> Schema[Any]:
    """Schema for a class that is not a builtin scalar."""
    if issubclass(tp, VALUE_TYPES):
        return ValueNodeSchema((tp,))
    if _is_custom(tp):
        return CustomSchema(tp)
    info = union_info(tp)
    if info is not None:
        return TaggedUnionSchema(tp, info)
    if issubclass(tp, enum.Enum):
        return EnumSchema(tp)
    if dataclasses.is_dataclass(tp):
        return StructSchema(tp)
    if issubclass(tp, tuple) and hasattr(tp, "_fields"):
        hints = _type_hints(tp)
        items = tuple(schema_for(hints.get(name, Any)) for name in tp._fields)
        return TupleSchema(items, name=tp.__name__, factory=lambda values: tp(*values))
    raise _unsupported(tp)


def _union_schema(tp: object, args: tuple[Any, ...]) -> Schema[Any]:
    members = [arg for arg in args if arg is not types.NoneType]
    if all(isinstance(m, type) and issubclass(m, VALUE_TYPES) for m in members):
        node_types: tuple[type, ...] = tuple(members)
        if len(members) < len(args):
            node_types = (*node_types, Null)
        return ValueNodeSchema(node_types)
    if len(members) == 1 and len(args) == 2:
        return OptionSchema(schema_for(members[0]))
    # Untagged unions have no unambiguous Gura representation.
    raise _unsupported(tp)


_SEQUENCE_ORIGINS: dict[Any, Callable[[list[Any]], Any]] = {
    list: list,
    AbcSequence: list,
    MutableSequence: list,
    Iterable: list,
    set: set,
    AbcSet: frozenset,
    MutableSet: set,
    frozenset: frozenset,
}

_MAPPING_ORIGINS: dict[Any, Callable[[], Any]] = {
    dict: dict,
    AbcMapping: dict,
    MutableMapping: dict,
}

_BUILTIN_SCHEMAS: dict[Any, Schema[Any]] = {
    bool: _BOOL,
    int: _INT,
    float: _FLOAT,
    str: _STR,
    bytes: _BYTES,
    bytearray: BytesSchema(bytearray),
    None: _UNIT,
    types.NoneType: _UNIT,
    Any: _ANY,
    object: _ANY,
    list: _ANY_LIST,
    dict: _ANY_MAP,
    tuple: SeqSchema(_ANY, tuple),
    set: SeqSchema(_ANY, set),
    frozenset: SeqSchema(_ANY, frozenset),
}


def _build_schema(tp: Any) -> Schema[Any]:
    """Resolve an annotation into a schema (uncached)."""
    if isinstance(tp, TypeAliasType):
        return schema_for(tp.__value__)
    builtin = _BUILTIN_SCHEMAS.get(tp) if _hashable(tp) else None
    if builtin is not None:
        return builtin
    if isinstance(tp, NewType):
        return NewTypeSchema(tp.__name__, schema_for(tp.__supertype__))

    origin = get_origin(tp)
    args = get_args(tp)
    if origin is Annotated:
        base, *metadata = args
        for marker in metadata:
            match marker:
                case IntWidth():
                    return IntSchema(marker)
                case FloatWidth():
                    return FloatSchema(marker)
                case CharMarker():
                    return _CHAR
        return schema_for(base)
    if origin is Union or origin is types.UnionType:
        return _union_schema(tp, args)
    if origin in _SEQUENCE_ORIGINS:
        return SeqSchema(schema_for(args[0]) if args else _ANY, _SEQUENCE_ORIGINS[origin])
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return SeqSchema(schema_for(args[0]), tuple)
        return TupleSchema(tuple(schema_for(arg) for arg in args))
    if origin in _MAPPING_ORIGINS:
        key, value = args if args else (Any, Any)
        return MapSchema(schema_for(key), schema_for(value), _MAPPING_ORIGINS[origin])
    if origin is None and isinstance(tp, type):
        return _class_schema(tp)
    raise _unsupported(tp)


def _hashable(tp: object) -> bool:
    try:
        hash(tp)
    except TypeError:
        return False
    return True


@lru_cache(maxsize=MAX_SCHEMA_CACHE_SIZE)
def _cached_schema(tp: Any) -> Schema[Any]:
    schema = _build_schema(tp)
    logger.debug("Resolved schema for %r: %r", tp, schema)
    return schema


def schema_for(tp: Any) -> Schema[Any]:
    """Resolve an annotation into a schema.

    Args:
        tp: A type annotation (``int``, ``list[U16]``, a dataclass, ...)

    Returns:
        Schema for tp, shared between calls

    Raises:
        GuraUnsupportedError: If tp has no Gura representation

    Example:
        >>> schema_for(list[int])
        SeqSchema(a sequence of an integer)
    """
    if _hashable(tp):
        return _cached_schema(tp)
    return _build_schema(tp)


def schema_of_value(value: object) -> Schema[Any]:
    """Schema inferred from a runtime value.

    Used wherever no annotation is available: ``to_string`` without a type
    hint, ``Any`` fields, and elements of untyped containers.

    Raises:
        GuraUnsupportedError: If the value's type has no Gura representation
    """
    match value:
        case None:
            return _UNIT
        case bool():
            return _BOOL
        case int() if not isinstance(value, enum.Enum):
            return _INT
        case float():
            return _FLOAT
        case str() if not isinstance(value, enum.Enum):
            return _STR
        case bytes() | bytearray():
            return _BYTES
        case _ if is_value(value):
            return _VALUE_NODE

    cls = type(value)
    registered = variant_info(cls)
    if registered is not None:
        return schema_for(registered.union)
    if _is_custom(cls) or isinstance(value, enum.Enum) or dataclasses.is_dataclass(cls):
        return schema_for(cls)
    if isinstance(value, tuple) and hasattr(cls, "_fields"):
        return schema_for(cls)
    if isinstance(value, AbcMapping):
        return _ANY_MAP
    if isinstance(value, list | tuple | set | frozenset):
        return _ANY_LIST
    raise _unsupported(cls)
