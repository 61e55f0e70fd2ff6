"""Diagnostic codes and data structures.

Defines error kinds, error codes, source spans, structural paths and
diagnostic messages.
Python 3.13+.
"""

from dataclasses import dataclass
from enum import Enum, StrEnum

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "ErrorKind",
    "PathSegment",
    "SourceSpan",
    "format_path",
]

type PathSegment = str | int


class ErrorKind(StrEnum):
    """Error taxonomy shared by the serializer and the deserializer.

    Inherits from ``StrEnum`` so that log aggregation and JSON output
    receive plain strings (``"missing_field"``) rather than enum reprs.
    """

    UNSUPPORTED = "unsupported"
    TYPE_MISMATCH = "type_mismatch"
    MISSING_FIELD = "missing_field"
    DUPLICATE_FIELD = "duplicate_field"
    UNKNOWN_FIELD = "unknown_field"
    UNKNOWN_VARIANT = "unknown_variant"
    CUSTOM = "custom"
    SYNTAX = "syntax"
    DEPTH_LIMIT = "depth_limit"


class DiagnosticCode(Enum):
    """Error codes with unique identifiers.

    Organized by category:
        1000-1999: Representation errors (construct not representable)
        2000-2999: Shape errors (value tree does not fit the target type)
        3000-3999: Syntax errors (external parser failures)
        4000-4999: Resource limits
        9000-9999: Free-form messages from user code
    """

    # Representation errors (1000-1999)
    UNSUPPORTED_MAP_KEY = 1001
    UNSUPPORTED_INTEGER = 1002
    UNSUPPORTED_KEY_SYNTAX = 1003
    UNSUPPORTED_TYPE = 1004
    UNSUPPORTED_DECLARATION = 1005

    # Shape errors (2000-2999)
    TYPE_MISMATCH = 2001
    INTEGER_OUT_OF_RANGE = 2002
    FLOAT_OUT_OF_RANGE = 2003
    INVALID_LENGTH = 2004
    MISSING_FIELD = 2005
    DUPLICATE_FIELD = 2006
    UNKNOWN_FIELD = 2007
    UNKNOWN_VARIANT = 2008

    # Syntax errors (3000-3999)
    PARSE_FAILED = 3001
    SOURCE_TOO_LARGE = 3002

    # Resource limits (4000-4999)
    MAX_DEPTH_EXCEEDED = 4001

    # Free-form (9000-9999)
    CUSTOM = 9001


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Source code location for error reporting.

    Note:
        Python strings measure positions in characters (Unicode code points),
        not bytes.

    Attributes:
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        offset: Character offset (0-indexed), when the parser reported one
    """

    line: int
    column: int
    offset: int | None = None

    def __post_init__(self) -> None:
        """Validate SourceSpan invariants.

        Raises:
            ValueError: If line or column is less than 1, or offset is negative.
        """
        if self.line < 1:
            msg = f"SourceSpan.line must be >= 1 (1-indexed), got {self.line}"
            raise ValueError(msg)
        if self.column < 1:
            msg = f"SourceSpan.column must be >= 1 (1-indexed), got {self.column}"
            raise ValueError(msg)
        if self.offset is not None and self.offset < 0:
            msg = f"SourceSpan.offset must be >= 0, got {self.offset}"
            raise ValueError(msg)


def format_path(path: tuple[PathSegment, ...]) -> str:
    """Render a structural path as ``database.port[1]``.

    The empty path (document root) renders as ``.``.

    Example:
        >>> format_path(("database", "port", 1))
        'database.port[1]'
        >>> format_path(())
        '.'
    """
    if not path:
        return "."
    parts: list[str] = []
    for segment in path:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        elif parts:
            parts.append(f".{segment}")
        else:
            parts.append(segment)
    return "".join(parts)


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured diagnostic message.

    Attributes:
        code: Unique error code
        message: Human-readable error description
        path: Structural path of the failing node (None until located)
        span: Source location (parse errors only)
        hint: Suggestion for fixing the error
        expected: What the target type asked for (type mismatches)
        found: What the value tree contained (type mismatches)
        name: Field or variant name the error is about
    """

    code: DiagnosticCode
    message: str
    path: tuple[PathSegment, ...] | None = None
    span: SourceSpan | None = None
    hint: str | None = None
    expected: str | None = None
    found: str | None = None
    name: str | None = None

    def __str__(self) -> str:
        """Return human-readable error description."""
        return self.message

    @property
    def location(self) -> str | None:
        """Rendered structural path, or None if the error was never located."""
        if self.path is None:
            return None
        return format_path(self.path)

    def format_error(self) -> str:
        """Format diagnostic like the Rust compiler.

        Example output:
            error[MISSING_FIELD]: missing field 'port'
              --> at database
              = help: Add 'port' to the document or give the field a default

        Returns:
            Formatted error message
        """
        from .formatter import DiagnosticFormatter  # noqa: PLC0415 - circular

        return DiagnosticFormatter().format(self)
