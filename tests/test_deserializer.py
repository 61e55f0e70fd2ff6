"""Tests for de/deserializer.py, de/access.py and de/visitor.py.

Drives ValueDeserializer with hand-written visitors: shape checks before
visiting, range checks, cursor protocols, strict/lenient struct handling,
enum encodings, and location of errors at structural paths.

Python 3.13+.
"""

from __future__ import annotations

import math
from typing import Any

import pytest
from hypothesis import event, given
from hypothesis import strategies as st

from gura_serde.core import GuraConfig
from gura_serde.de import EnumAccess, MapAccess, SeqAccess, ValueDeserializer, Visitor
from gura_serde.diagnostics import (
    DiagnosticCode,
    GuraCustomError,
    GuraDepthLimitError,
    GuraTypeMismatchError,
    GuraUnknownFieldError,
    GuraUnknownVariantError,
)
from gura_serde.enums import IntWidth
from gura_serde.model.schema import IntSchema, StrSchema
from gura_serde.value import NULL, Bool, Float, Integer, Mapping, Sequence, String

# ============================================================================
# Visitors used by the tests
# ============================================================================


class PortVisitor(Visitor[int]):
    """Accepts integers only."""

    def expecting(self) -> str:
        return "a port number"

    def visit_int(self, value: int) -> int:
        return value


class FloatVisitor(Visitor[float]):
    def visit_float(self, value: float) -> float:
        return value


class TextVisitor(Visitor[str]):
    def visit_str(self, value: str) -> str:
        return value


class BytesVisitor(Visitor[bytes]):
    def visit_bytes(self, value: bytes) -> bytes:
        return value


class RecordingVisitor(Visitor[Any]):
    """Records which callback deserialize_any chose."""

    def visit_none(self) -> Any:
        return ("none",)

    def visit_bool(self, value: bool) -> Any:
        return ("bool", value)

    def visit_int(self, value: int) -> Any:
        return ("int", value)

    def visit_float(self, value: float) -> Any:
        return ("float", value)

    def visit_str(self, value: str) -> Any:
        return ("str", value)

    def visit_seq(self, seq: SeqAccess) -> Any:
        return ("seq", seq.remaining)

    def visit_map(self, map_access: MapAccess) -> Any:
        return ("map", map_access.remaining)


class OptionalPortVisitor(Visitor[int | None]):
    def visit_none(self) -> None:
        return None

    def visit_some(self, deserializer: ValueDeserializer) -> int:
        return deserializer.deserialize_u16(PortVisitor())


class PortListVisitor(Visitor[list[int]]):
    def visit_seq(self, seq: SeqAccess) -> list[int]:
        return list(seq.iter_elements(IntSchema(IntWidth.U16)))


class PairVisitor(Visitor[tuple[int, str]]):
    def visit_seq(self, seq: SeqAccess) -> tuple[int, str]:
        return seq.next_element(IntSchema()), seq.next_element(StrSchema())


class TooGreedyPairVisitor(Visitor[tuple[int, int, int]]):
    def visit_seq(self, seq: SeqAccess) -> tuple[int, int, int]:
        return (
            seq.next_element(IntSchema()),
            seq.next_element(IntSchema()),
            seq.next_element(IntSchema()),
        )


class EntriesVisitor(Visitor[list[tuple[str, int]]]):
    """Collects every entry of a struct-like mapping as integers."""

    def visit_map(self, map_access: MapAccess) -> list[tuple[str, int]]:
        entries = []
        while (entry := map_access.next_entry(None, IntSchema())) is not None:
            entries.append(entry)
        return entries


class ShapeVisitor(Visitor[Any]):
    """Reads an enum, reporting the variant and its payload."""

    def visit_enum(self, data: EnumAccess) -> Any:
        name, access = data.variant()
        match name:
            case "A":
                access.unit_variant()
                return ("A",)
            case "B":
                return ("B", access.newtype_variant(IntSchema()))
            case "C":
                return ("C", access.tuple_variant(2, PairVisitor()))
            case "D":
                return ("D", access.struct_variant(["a"], EntriesVisitor()))
        raise AssertionError(name)


VARIANTS = ("A", "B", "C", "D")


def _de(node: Any, **config: Any) -> ValueDeserializer:
    return ValueDeserializer(node, config=GuraConfig(**config))


# ============================================================================
# Self-describing entry
# ============================================================================


class TestDeserializeAny:
    """Test deserialize_any dispatch."""

    @pytest.mark.parametrize(
        ("node", "expected"),
        [
            (NULL, ("none",)),
            (Bool(True), ("bool", True)),
            (Integer(7), ("int", 7)),
            (Float(0.5), ("float", 0.5)),
            (String("x"), ("str", "x")),
            (Sequence((NULL, NULL)), ("seq", 2)),
            (Mapping.singleton("a", NULL), ("map", 1)),
        ],
    )
    def test_dispatch(self, node: Any, expected: tuple[Any, ...]) -> None:
        """Every node kind reaches its visitor callback."""
        assert ValueDeserializer(node).deserialize_any(RecordingVisitor()) == expected

    def test_ignored_any(self) -> None:
        """deserialize_ignored_any accepts any node."""
        assert ValueDeserializer(NULL).deserialize_ignored_any(RecordingVisitor()) == ("none",)

    def test_unhandled_callback_reports_expecting(self) -> None:
        """A visitor rejecting a callback names what it expected."""
        with pytest.raises(GuraTypeMismatchError) as exc_info:
            ValueDeserializer(String("80")).deserialize_any(PortVisitor())

        assert exc_info.value.message == 'invalid type: expected a port number, found string "80"'


# ============================================================================
# Scalars
# ============================================================================


class TestScalars:
    """Test typed scalar entry points."""

    def test_u16(self) -> None:
        """An in-range integer is visited."""
        assert ValueDeserializer(Integer(8080)).deserialize_u16(PortVisitor()) == 8080

    def test_u8_out_of_range(self) -> None:
        """300 does not fit u8."""
        with pytest.raises(GuraTypeMismatchError) as exc_info:
            ValueDeserializer(Integer(300)).deserialize_u8(PortVisitor())

        assert exc_info.value.message == "invalid value: integer 300 is out of range for u8"

    def test_wrong_node_kind(self) -> None:
        """A string where an integer is requested is a type mismatch."""
        with pytest.raises(GuraTypeMismatchError) as exc_info:
            ValueDeserializer(String("80")).deserialize_u16(PortVisitor())

        assert exc_info.value.expected == "u16"
        assert exc_info.value.found == 'string "80"'

    def test_sized_dispatch(self) -> None:
        """deserialize_sized with None accepts any integer."""
        de = ValueDeserializer(Integer(-(2**63)))

        assert de.deserialize_sized(None, PortVisitor()) == -(2**63)
        with pytest.raises(GuraTypeMismatchError):
            de.deserialize_sized(IntWidth.U64, PortVisitor())

    @pytest.mark.parametrize("value", [2**64, -(2**63) - 1, 10**26])
    def test_unsized_integer_beyond_64_bits(self, value: int) -> None:
        """An integer of no declared width must still fit i64 or u64."""
        de = ValueDeserializer(Integer(value))

        with pytest.raises(GuraTypeMismatchError) as exc_info:
            de.deserialize_int(PortVisitor())

        assert exc_info.value.diagnostic.code == DiagnosticCode.INTEGER_OUT_OF_RANGE
        assert exc_info.value.message == (
            f"invalid value: integer {value} is out of range for i64 or u64"
        )
        with pytest.raises(GuraTypeMismatchError):
            de.deserialize_any(PortVisitor())

    def test_unsized_integer_edges(self) -> None:
        """The smallest i64 and the largest u64 are both accepted."""
        for value in (-(2**63), 2**64 - 1):
            assert ValueDeserializer(Integer(value)).deserialize_int(PortVisitor()) == value

    def test_bool_mismatch(self) -> None:
        """Integers are not booleans."""
        with pytest.raises(GuraTypeMismatchError):
            ValueDeserializer(Integer(1)).deserialize_bool(PortVisitor())

    def test_f64_accepts_integers(self) -> None:
        """Integers exactly representable as doubles are accepted as floats."""
        assert ValueDeserializer(Integer(3)).deserialize_f64(FloatVisitor()) == 3.0
        assert ValueDeserializer(Integer(2**60)).deserialize_f64(FloatVisitor()) == float(2**60)

    def test_f64_rejects_inexact_integers(self) -> None:
        """Integers that would lose precision are rejected."""
        with pytest.raises(GuraTypeMismatchError) as exc_info:
            ValueDeserializer(Integer(2**53 + 1)).deserialize_f64(FloatVisitor())

        assert exc_info.value.diagnostic.code == DiagnosticCode.FLOAT_OUT_OF_RANGE

    def test_f32_rounds(self) -> None:
        """deserialize_f32 rounds to single precision."""
        value = ValueDeserializer(Float(0.1)).deserialize_f32(FloatVisitor())

        assert value == 0.10000000149011612

    def test_f32_overflow(self) -> None:
        """Finite doubles beyond the f32 range are rejected."""
        with pytest.raises(GuraTypeMismatchError):
            ValueDeserializer(Float(1e300)).deserialize_f32(FloatVisitor())

    def test_f32_specials(self) -> None:
        """inf and nan are valid single precision values."""
        assert ValueDeserializer(Float(-math.inf)).deserialize_f32(FloatVisitor()) == -math.inf
        assert math.isnan(ValueDeserializer(Float(math.nan)).deserialize_f32(FloatVisitor()))

    def test_f32_inexact_integer(self) -> None:
        """Integers not exactly representable in f32 are rejected."""
        with pytest.raises(GuraTypeMismatchError):
            ValueDeserializer(Integer(2**24 + 1)).deserialize_f32(FloatVisitor())
        assert ValueDeserializer(Integer(2**24)).deserialize_f32(FloatVisitor()) == 2.0**24

    def test_char(self) -> None:
        """A char is a string of exactly one character."""
        assert ValueDeserializer(String("x")).deserialize_char(TextVisitor()) == "x"
        with pytest.raises(GuraTypeMismatchError):
            ValueDeserializer(String("xy")).deserialize_char(TextVisitor())

    def test_string_aliases(self) -> None:
        """deserialize_string and deserialize_identifier read strings."""
        de = ValueDeserializer(String("ip"))

        assert de.deserialize_string(TextVisitor()) == "ip"
        assert de.deserialize_identifier(TextVisitor()) == "ip"

    def test_bytes(self) -> None:
        """A sequence of 0..255 integers reads as bytes."""
        node = Sequence((Integer(0), Integer(255)))

        assert ValueDeserializer(node).deserialize_bytes(BytesVisitor()) == b"\x00\xff"

    def test_bytes_bad_element_located(self) -> None:
        """A bad byte is located at its index."""
        node = Sequence((Integer(0), Integer(256)))

        with pytest.raises(GuraTypeMismatchError) as exc_info:
            ValueDeserializer(node, path=("blob",)).deserialize_bytes(BytesVisitor())

        assert exc_info.value.location == "blob[1]"


# ============================================================================
# Absence and unit-like shapes
# ============================================================================


class TestOptionAndUnit:
    """Test option, unit and newtype entry points."""

    def test_option_none(self) -> None:
        """Null is absent."""
        assert ValueDeserializer(NULL).deserialize_option(OptionalPortVisitor()) is None

    def test_option_some(self) -> None:
        """Anything else is the present value."""
        assert ValueDeserializer(Integer(80)).deserialize_option(OptionalPortVisitor()) == 80

    def test_unit_requires_null(self) -> None:
        """Unit reads only from null."""
        with pytest.raises(GuraTypeMismatchError):
            ValueDeserializer(Integer(0)).deserialize_unit(PortVisitor())
        with pytest.raises(GuraTypeMismatchError):
            ValueDeserializer(Bool(False)).deserialize_unit_struct("Marker", PortVisitor())


# ============================================================================
# Composites
# ============================================================================


class TestSequences:
    """Test sequence and tuple entry points."""

    def test_seq(self) -> None:
        """Elements are read in order."""
        node = Sequence((Integer(80), Integer(8080)))

        assert ValueDeserializer(node).deserialize_seq(PortListVisitor()) == [80, 8080]

    def test_seq_error_located(self) -> None:
        """A bad element is located below the sequence path."""
        node = Sequence((Integer(80), Integer(70000)))

        with pytest.raises(GuraTypeMismatchError) as exc_info:
            ValueDeserializer(node, path=("database", "port")).deserialize_seq(PortListVisitor())

        assert exc_info.value.location == "database.port[1]"

    def test_tuple_length_checked(self) -> None:
        """A tuple must have exactly the requested length."""
        node = Sequence((Integer(1), String("a"), NULL))

        with pytest.raises(GuraTypeMismatchError) as exc_info:
            ValueDeserializer(node).deserialize_tuple(2, PairVisitor())

        assert exc_info.value.diagnostic.code == DiagnosticCode.INVALID_LENGTH

    def test_tuple_struct(self) -> None:
        """A tuple struct reads like a tuple."""
        node = Sequence((Integer(1), String("a")))

        assert ValueDeserializer(node).deserialize_tuple_struct("P", 2, PairVisitor()) == (1, "a")

    def test_seq_exhausted(self) -> None:
        """Requesting more elements than present fails."""
        node = Sequence((Integer(1), Integer(2)))

        with pytest.raises(GuraTypeMismatchError) as exc_info:
            ValueDeserializer(node).deserialize_seq(TooGreedyPairVisitor())

        assert exc_info.value.diagnostic.code == DiagnosticCode.INVALID_LENGTH

    def test_depth_limit(self) -> None:
        """Nesting past max_depth is rejected while descending."""

        class NestedVisitor(Visitor[int]):
            def visit_seq(self, seq: SeqAccess) -> int:
                return 1 + sum(seq.iter_elements(Nested()))

        class Nested:
            def deserialize(self, deserializer: ValueDeserializer) -> int:
                return deserializer.deserialize_seq(NestedVisitor())

        node: Sequence = Sequence()
        for _ in range(5):
            node = Sequence((node,))

        assert Nested().deserialize(_de(node, max_depth=10)) == 6
        with pytest.raises(GuraDepthLimitError):
            Nested().deserialize(_de(node, max_depth=3))


class TestMaps:
    """Test map and struct entry points."""

    def test_map_entries(self) -> None:
        """Entries are visited in document order."""
        node = Mapping(entries=(("b", Integer(2)), ("a", Integer(1))))

        assert ValueDeserializer(node).deserialize_map(EntriesVisitor()) == [("b", 2), ("a", 1)]

    def test_struct_lenient_skips_unknown(self) -> None:
        """Undeclared keys are skipped by default."""
        node = Mapping(entries=(("a", Integer(1)), ("extra", Integer(2))))

        assert ValueDeserializer(node).deserialize_struct("S", ["a"], EntriesVisitor()) == [
            ("a", 1)
        ]

    def test_struct_strict_rejects_unknown(self) -> None:
        """Strict mode rejects undeclared keys, located at the key."""
        node = Mapping(entries=(("a", Integer(1)), ("extra", Integer(2))))

        with pytest.raises(GuraUnknownFieldError) as exc_info:
            _de(node, deny_unknown_fields=True).deserialize_struct("S", ["a"], EntriesVisitor())

        assert exc_info.value.name == "extra"
        assert exc_info.value.location == "extra"

    def test_struct_requires_mapping(self) -> None:
        """A struct reads only from a mapping."""
        with pytest.raises(GuraTypeMismatchError, match="struct S"):
            ValueDeserializer(Sequence()).deserialize_struct("S", ["a"], EntriesVisitor())

    def test_value_before_key(self) -> None:
        """next_value without next_key is a protocol violation."""

        class EagerVisitor(Visitor[int]):
            def visit_map(self, map_access: MapAccess) -> int:
                return map_access.next_value(IntSchema())

        with pytest.raises(GuraCustomError, match="before next_key"):
            ValueDeserializer(Mapping.singleton("a", Integer(1))).deserialize_map(EagerVisitor())

    def test_skip_value(self) -> None:
        """skip_value discards the pending value."""

        class KeysVisitor(Visitor[list[str]]):
            def visit_map(self, map_access: MapAccess) -> list[str]:
                keys = []
                while (key := map_access.next_key()) is not None:
                    keys.append(key)
                    map_access.skip_value()
                return keys

        node = Mapping(entries=(("x", NULL), ("y", Sequence())))

        assert ValueDeserializer(node).deserialize_map(KeysVisitor()) == ["x", "y"]


# ============================================================================
# Enums
# ============================================================================


class TestEnums:
    """Test enum encodings."""

    def test_unit_variant(self) -> None:
        """A bare string selects a unit variant."""
        assert ValueDeserializer(String("A")).deserialize_enum("E", VARIANTS, ShapeVisitor()) == (
            "A",
        )

    def test_newtype_variant(self) -> None:
        """`B: 5` is a newtype variant."""
        node = Mapping.singleton("B", Integer(5))

        assert ValueDeserializer(node).deserialize_enum("E", VARIANTS, ShapeVisitor()) == ("B", 5)

    def test_tuple_variant(self) -> None:
        """`C: [1, "a"]` is a tuple variant."""
        node = Mapping.singleton("C", Sequence((Integer(1), String("a"))))

        assert ValueDeserializer(node).deserialize_enum("E", VARIANTS, ShapeVisitor()) == (
            "C",
            (1, "a"),
        )

    def test_struct_variant(self) -> None:
        """`D:` followed by an object is a struct variant."""
        node = Mapping.singleton("D", Mapping.singleton("a", Integer(1)))

        assert ValueDeserializer(node).deserialize_enum("E", VARIANTS, ShapeVisitor()) == (
            "D",
            [("a", 1)],
        )

    def test_unknown_variant(self) -> None:
        """A name outside the declared variants is rejected."""
        with pytest.raises(GuraUnknownVariantError) as exc_info:
            ValueDeserializer(String("Z")).deserialize_enum("E", VARIANTS, ShapeVisitor())

        assert exc_info.value.name == "Z"

    def test_mapping_with_two_entries(self) -> None:
        """An enum mapping must have exactly one entry."""
        node = Mapping(entries=(("A", NULL), ("B", NULL)))

        with pytest.raises(GuraUnknownVariantError):
            ValueDeserializer(node).deserialize_enum("E", VARIANTS, ShapeVisitor())

    def test_unit_variant_with_payload(self) -> None:
        """`A: 1` does not match a unit variant."""
        with pytest.raises(GuraTypeMismatchError):
            ValueDeserializer(Mapping.singleton("A", Integer(1))).deserialize_enum(
                "E", VARIANTS, ShapeVisitor()
            )

    def test_payload_variant_without_payload(self) -> None:
        """A bare `B` lacks the newtype payload."""
        with pytest.raises(GuraTypeMismatchError, match="newtype variant"):
            ValueDeserializer(String("B")).deserialize_enum("E", VARIANTS, ShapeVisitor())

    def test_payload_error_located_below_variant(self) -> None:
        """Payload errors are located under the variant name."""
        node = Mapping.singleton("B", String("five"))

        with pytest.raises(GuraTypeMismatchError) as exc_info:
            ValueDeserializer(node, path=("shape",)).deserialize_enum("E", VARIANTS, ShapeVisitor())

        assert exc_info.value.location == "shape.B"


# ============================================================================
# Hypothesis Property-Based Tests
# ============================================================================


@given(st.sampled_from(list(IntWidth)), st.integers(min_value=-(2**65), max_value=2**65))
def test_property_sized_range_check(width: IntWidth, value: int) -> None:
    """Property: a sized read succeeds iff the value fits the width."""
    event(f"width={width}")
    de = ValueDeserializer(Integer(value))

    if width.contains(value):
        assert de.deserialize_sized(width, PortVisitor()) == value
    else:
        with pytest.raises(GuraTypeMismatchError):
            de.deserialize_sized(width, PortVisitor())


@given(st.integers(min_value=-(2**64), max_value=2**64))
def test_property_f64_integer_exactness(value: int) -> None:
    """Property: integers read as f64 only when the conversion is exact."""
    de = ValueDeserializer(Integer(value))

    if int(float(value)) == value:
        assert de.deserialize_f64(FloatVisitor()) == float(value)
    else:
        with pytest.raises(GuraTypeMismatchError):
            de.deserialize_f64(FloatVisitor())
