"""Tests for value/parser.py and value/position.py.

The parser bridge hands text to the external ``gura`` package; these tests
cover the conversion of its output and the wrapping of its failures into
GuraSyntaxError with line/column information.

Python 3.13+.
"""

from __future__ import annotations

import math

import gura
import pytest

from gura_serde.core import GuraConfig
from gura_serde.diagnostics import DiagnosticCode, ErrorKind, GuraDepthLimitError, GuraSyntaxError
from gura_serde.value import NULL, Bool, Float, Integer, Mapping, Sequence, String, parse
from gura_serde.value.position import column_offset, get_error_context, line_offset, span_at

# ============================================================================
# Successful parses
# ============================================================================


class TestParse:
    """Test conversion of valid documents."""

    def test_database_document(self) -> None:
        """A flat document parses into an ordered root mapping."""
        text = 'ip: "127.0.0.1"\nport: [80, 8080]\nconnection_max: 5000\nenabled: false'

        assert parse(text) == Mapping(
            entries=(
                ("ip", String("127.0.0.1")),
                ("port", Sequence((Integer(80), Integer(8080)))),
                ("connection_max", Integer(5000)),
                ("enabled", Bool(False)),
            )
        )

    def test_empty_document(self) -> None:
        """An empty document is an empty mapping."""
        assert parse("") == Mapping()

    def test_comments_and_nested_objects(self) -> None:
        """Comments are discarded and indentation nests objects."""
        text = "# services\nservices:\n    nginx:\n        host: null\n    port: 80"

        tree = parse(text)

        services = tree.get("services")
        assert isinstance(services, Mapping)
        assert services.keys() == ("nginx", "port")
        assert services.get("nginx") == Mapping.singleton("host", NULL)

    def test_special_floats(self) -> None:
        """inf and nan keywords become floats."""
        tree = parse("a: inf\nb: -inf\nc: nan\nd: 1.5")

        assert tree.get("a") == Float(math.inf)
        assert tree.get("b") == Float(-math.inf)
        assert tree.get("c") == Float(math.nan)
        assert tree.get("d") == Float(1.5)

    def test_variables_are_resolved_by_parser(self) -> None:
        """Gura variables are substituted before the tree is built."""
        tree = parse('$host: "db"\nurl: "postgres://$host"')

        assert tree == Mapping.singleton("url", String("postgres://db"))

    def test_empty_keyword(self) -> None:
        """`empty` parses to an empty mapping."""
        assert parse("settings: empty") == Mapping.singleton("settings", Mapping())

    def test_depth_limit(self) -> None:
        """Documents nesting past max_depth are rejected after parsing."""
        text = "a:\n    b:\n        c:\n            d: 1"

        with pytest.raises(GuraDepthLimitError):
            parse(text, config=GuraConfig(max_depth=3))
        assert parse(text, config=GuraConfig(max_depth=4)) is not None


# ============================================================================
# Failures
# ============================================================================


class TestParseErrors:
    """Test wrapping of parser failures."""

    def test_unterminated_array(self) -> None:
        """Malformed input raises GuraSyntaxError with a position."""
        with pytest.raises(GuraSyntaxError) as exc_info:
            parse("a: 1\nb: [1, 2")

        error = exc_info.value
        assert error.kind == ErrorKind.SYNTAX
        assert error.diagnostic.code == DiagnosticCode.PARSE_FAILED
        assert error.message.startswith("input is not valid Gura: ")
        assert error.line is not None
        assert error.line >= 1
        assert error.column is not None
        assert isinstance(error.__cause__, gura.GuraError)

    def test_message_excludes_parser_position_suffix(self) -> None:
        """The parser's 'at line L' suffix is not repeated in the message."""
        with pytest.raises(GuraSyntaxError) as exc_info:
            parse("a: 1\nb: [1, 2")

        assert "text position" not in exc_info.value.message

    def test_duplicate_key(self) -> None:
        """Duplicate keys are reported by the parser and wrapped."""
        with pytest.raises(GuraSyntaxError) as exc_info:
            parse("a: 1\na: 2")

        assert isinstance(exc_info.value.__cause__, gura.DuplicatedKeyError)
        assert '"a"' in exc_info.value.message
        assert exc_info.value.line == 2

    def test_undefined_variable(self) -> None:
        """An undefined variable is a syntax error, not a KeyError."""
        with pytest.raises(GuraSyntaxError) as exc_info:
            parse("a: $gura_serde_surely_undefined_variable")

        assert isinstance(exc_info.value.__cause__, gura.VariableNotDefinedError)

    def test_source_too_large(self) -> None:
        """Text longer than max_source_size is rejected before parsing."""
        with pytest.raises(GuraSyntaxError) as exc_info:
            parse("a: 12345", config=GuraConfig(max_source_size=4))

        assert exc_info.value.diagnostic.code == DiagnosticCode.SOURCE_TOO_LARGE
        assert exc_info.value.__cause__ is None

    def test_error_context_in_hint(self) -> None:
        """The rendered error shows the offending source line."""
        with pytest.raises(GuraSyntaxError) as exc_info:
            parse("a: 1\nb: [1, 2")

        assert exc_info.value.diagnostic.hint is not None
        assert "^" in exc_info.value.diagnostic.hint


# ============================================================================
# Position utilities
# ============================================================================


class TestPosition:
    """Test offset to line/column conversion."""

    def test_line_offset(self) -> None:
        """line_offset counts newlines before the position."""
        source = "a: 1\nb: 2\nc: 3"

        assert line_offset(source, 0) == 0
        assert line_offset(source, 5) == 1
        assert line_offset(source, 100) == 2

    def test_column_offset(self) -> None:
        """column_offset counts characters since the last newline."""
        assert column_offset("a: 1\nbb: 2", 7) == 2
        assert column_offset("abc", 2) == 2

    def test_negative_position_rejected(self) -> None:
        """Negative offsets are a programming error."""
        with pytest.raises(ValueError, match="must be >= 0"):
            line_offset("abc", -1)
        with pytest.raises(ValueError, match="must be >= 0"):
            column_offset("abc", -1)

    def test_span_at(self) -> None:
        """span_at builds a 1-based span and clamps the offset."""
        span = span_at("a: 1\nb: ]", 8)

        assert (span.line, span.column, span.offset) == (2, 4, 8)
        assert span_at("ab", 99).offset == 2

    def test_error_context(self) -> None:
        """get_error_context marks the column under the offending line."""
        source = "a: 1\nb: ]\nc: 3"

        assert get_error_context(source, 8, context_lines=0) == "b: ]\n   ^"
        assert get_error_context(source, 8) == "a: 1\nb: ]\n   ^\nc: 3"

    def test_error_context_empty_source(self) -> None:
        """An empty source yields the bare marker."""
        assert get_error_context("", 0) == "^"
