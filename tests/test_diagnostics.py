"""Tests for the diagnostics package.

Error hierarchy, locate() semantics, structural path rendering, templates
and the three diagnostic output formats.

Python 3.13+.
"""

from __future__ import annotations

import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from gura_serde.diagnostics import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticFormatter,
    ErrorKind,
    ErrorTemplate,
    GuraCustomError,
    GuraError,
    GuraMissingFieldError,
    GuraSyntaxError,
    GuraTypeMismatchError,
    GuraUnknownVariantError,
    OutputFormat,
    SourceSpan,
    format_path,
)
from gura_serde.enums import IntWidth

# ============================================================================
# Paths
# ============================================================================


class TestFormatPath:
    """Test structural path rendering."""

    def test_root(self) -> None:
        """The empty path is the document root."""
        assert format_path(()) == "."

    def test_keys_and_indices(self) -> None:
        """Keys are dot separated, indices bracketed."""
        assert format_path(("database", "port", 1)) == "database.port[1]"

    def test_leading_index(self) -> None:
        """A path may start with an index (root sequence)."""
        assert format_path((0, "name")) == "[0].name"


# ============================================================================
# Errors
# ============================================================================


class TestGuraError:
    """Test the exception hierarchy and locate()."""

    def test_plain_message_becomes_custom_diagnostic(self) -> None:
        """A string message is wrapped in a CUSTOM diagnostic."""
        error = GuraCustomError("port must be even")

        assert error.kind == ErrorKind.CUSTOM
        assert error.diagnostic.code == DiagnosticCode.CUSTOM
        assert error.message == "port must be even"
        assert error.path is None
        assert error.location is None

    def test_all_errors_share_base(self) -> None:
        """Every error kind is catchable as GuraError."""
        error = GuraMissingFieldError(ErrorTemplate.missing_field("port"))

        assert isinstance(error, GuraError)
        assert error.name == "port"
        assert error.kind == ErrorKind.MISSING_FIELD

    def test_locate_sets_path_and_message(self) -> None:
        """locate() attaches the path and re-renders str()."""
        error = GuraTypeMismatchError(ErrorTemplate.type_mismatch("u16", 'string "80"'))
        error.locate(("database", "port", 0))

        assert error.location == "database.port[0]"
        assert "--> at database.port[0]" in str(error)
        assert error.expected == "u16"
        assert error.found == 'string "80"'

    def test_first_locate_wins(self) -> None:
        """Outer containers cannot overwrite the innermost path."""
        error = GuraTypeMismatchError(ErrorTemplate.type_mismatch("bool", "null"))
        error.locate(("a", "b"))
        error.locate(("a",))
        error.locate(())

        assert error.path == ("a", "b")

    def test_located_at_root(self) -> None:
        """A root-located error renders '.' as its location."""
        error = GuraUnknownVariantError(ErrorTemplate.unknown_variant("D", ("A", "B")))
        error.locate(())

        assert error.location == "."

    def test_syntax_error_position(self) -> None:
        """GuraSyntaxError exposes line and column from its span."""
        error = GuraSyntaxError(
            ErrorTemplate.parse_failed("unexpected ']'", SourceSpan(line=2, column=4), None)
        )

        assert (error.line, error.column) == (2, 4)
        assert GuraSyntaxError("no span").line is None


class TestSourceSpan:
    """Test SourceSpan validation."""

    @pytest.mark.parametrize(
        ("line", "column", "offset"), [(0, 1, None), (1, 0, None), (1, 1, -1)]
    )
    def test_invalid_values_rejected(self, line: int, column: int, offset: int | None) -> None:
        """Lines and columns are 1-based, offsets non-negative."""
        with pytest.raises(ValueError, match="SourceSpan"):
            SourceSpan(line=line, column=column, offset=offset)


# ============================================================================
# Templates
# ============================================================================


class TestErrorTemplate:
    """Test message texts of the templates."""

    def test_type_mismatch(self) -> None:
        """type_mismatch names both sides."""
        diagnostic = ErrorTemplate.type_mismatch("u16", 'string "80"')

        assert diagnostic.message == 'invalid type: expected u16, found string "80"'

    def test_integer_out_of_range(self) -> None:
        """integer_out_of_range names the width and its bounds."""
        width = IntWidth.U8
        diagnostic = ErrorTemplate.integer_out_of_range(300, width, width.min_value, width.max_value)

        assert diagnostic.message == "invalid value: integer 300 is out of range for u8"
        assert diagnostic.hint == "u8 accepts values from 0 to 255"

    def test_unknown_field_lists_expected(self) -> None:
        """unknown_field hints at declared fields."""
        diagnostic = ErrorTemplate.unknown_field("extra", ("ip", "port"))

        assert diagnostic.message == "unknown field 'extra'"
        assert diagnostic.hint == "Expected one of: 'ip', 'port'"

    def test_unknown_variant_without_variants(self) -> None:
        """An enum with no variants lists none."""
        assert ErrorTemplate.unknown_variant("X", ()).hint == "Expected one of: none"

    def test_depth_exceeded(self) -> None:
        """depth_exceeded includes the limit."""
        assert ErrorTemplate.depth_exceeded(7).message == "maximum nesting depth (7) exceeded"


# ============================================================================
# Formatter
# ============================================================================


class TestDiagnosticFormatter:
    """Test the output formats."""

    def _located(self) -> Diagnostic:
        return Diagnostic(
            code=DiagnosticCode.TYPE_MISMATCH,
            message='invalid type: expected u16, found string "80"',
            path=("database", "port", 0),
            expected="u16",
            found='string "80"',
        )

    def test_rust_format(self) -> None:
        """Rust style output lists location, expected and found."""
        text = DiagnosticFormatter().format(self._located())

        assert text == (
            'error[TYPE_MISMATCH]: invalid type: expected u16, found string "80"\n'
            "  --> at database.port[0]\n"
            "  = expected: u16\n"
            '  = found: string "80"'
        )

    def test_simple_format(self) -> None:
        """Simple output is one line with the location appended."""
        text = DiagnosticFormatter(output_format=OutputFormat.SIMPLE).format(self._located())

        assert text == (
            'TYPE_MISMATCH: invalid type: expected u16, found string "80" (at database.port[0])'
        )

    def test_json_format(self) -> None:
        """JSON output is machine readable."""
        text = DiagnosticFormatter(output_format=OutputFormat.JSON).format(self._located())
        data = json.loads(text)

        assert data["code"] == "TYPE_MISMATCH"
        assert data["code_value"] == 2001
        assert data["path"] == "database.port[0]"
        assert data["expected"] == "u16"

    def test_span_rendered(self) -> None:
        """Parse errors show their line and column."""
        diagnostic = ErrorTemplate.parse_failed("bad", SourceSpan(line=3, column=5), "x\n^")
        text = DiagnosticFormatter().format(diagnostic)

        assert "  --> line 3, column 5" in text
        assert "  = help: x\n^" in text

    def test_sanitize_truncates(self) -> None:
        """Sanitizing truncates long messages."""
        formatter = DiagnosticFormatter(
            output_format=OutputFormat.SIMPLE, sanitize=True, max_content_length=10
        )

        assert formatter.format(ErrorTemplate.custom("x" * 50)) == "CUSTOM: xxxxxxxxxx..."

    def test_format_all(self) -> None:
        """format_all separates diagnostics with blank lines."""
        formatter = DiagnosticFormatter(output_format=OutputFormat.SIMPLE)
        diagnostics = [ErrorTemplate.custom("a"), ErrorTemplate.custom("b")]

        assert formatter.format_all(diagnostics) == "CUSTOM: a\n\nCUSTOM: b"


@given(st.lists(st.one_of(st.integers(min_value=0, max_value=99), st.text(min_size=1))))
def test_property_path_rendering_is_total(segments: list[str | int]) -> None:
    """Property: every path renders, and each index appears bracketed."""
    rendered = format_path(tuple(segments))

    assert rendered
    for segment in segments:
        if isinstance(segment, int):
            assert f"[{segment}]" in rendered
