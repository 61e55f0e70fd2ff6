"""gura-serde exception hierarchy with structured diagnostics.

Every failure of either engine is a ``GuraError`` subclass carrying a
``Diagnostic``. The subclass encodes the error kind so callers can catch
exactly the failures they care about:

    try:
        config = from_str(text, Config)
    except GuraMissingFieldError as e:
        print(e.name, e.location)

Python 3.13+.
"""

from dataclasses import replace
from typing import ClassVar

from .codes import Diagnostic, DiagnosticCode, ErrorKind, PathSegment

__all__ = [
    "GuraCustomError",
    "GuraDepthLimitError",
    "GuraDuplicateFieldError",
    "GuraError",
    "GuraMissingFieldError",
    "GuraSyntaxError",
    "GuraTypeMismatchError",
    "GuraUnknownFieldError",
    "GuraUnknownVariantError",
    "GuraUnsupportedError",
]


class GuraError(Exception):
    """Base exception for all gura-serde errors.

    Attributes:
        diagnostic: Structured diagnostic information
    """

    kind: ClassVar[ErrorKind] = ErrorKind.CUSTOM

    def __init__(self, message: str | Diagnostic) -> None:
        """Initialize GuraError.

        Args:
            message: Error message string OR Diagnostic object
        """
        if not isinstance(message, Diagnostic):
            message = Diagnostic(code=DiagnosticCode.CUSTOM, message=message)
        self.diagnostic: Diagnostic = message
        super().__init__(message.format_error())

    @property
    def message(self) -> str:
        """Bare error message without location decoration."""
        return self.diagnostic.message

    @property
    def path(self) -> tuple[PathSegment, ...] | None:
        """Structural path of the failing node, None if not located."""
        return self.diagnostic.path

    @property
    def location(self) -> str | None:
        """Rendered structural path (``database.port[1]``)."""
        return self.diagnostic.location

    def locate(self, path: tuple[PathSegment, ...]) -> None:
        """Attach the structural path of the failing node.

        The first call wins: errors travel outwards through every enclosing
        container, and the innermost path is the useful one.
        """
        if self.diagnostic.path is not None:
            return
        self.diagnostic = replace(self.diagnostic, path=path)
        self.args = (self.diagnostic.format_error(),)


class GuraUnsupportedError(GuraError):
    """Construct not representable in Gura.

    Examples:
    - Map with integer keys
    - Key that is not a valid Gura identifier
    - Integer outside the 64-bit range
    """

    kind = ErrorKind.UNSUPPORTED


class GuraTypeMismatchError(GuraError):
    """Value tree node does not fit the requested type.

    Also raised for integers outside the requested width: values are never
    truncated or wrapped.
    """

    kind = ErrorKind.TYPE_MISMATCH

    @property
    def expected(self) -> str | None:
        """Description of the requested type."""
        return self.diagnostic.expected

    @property
    def found(self) -> str | None:
        """Description of the node actually present."""
        return self.diagnostic.found


class _NamedError(GuraError):
    """Error about a specific field or variant name."""

    @property
    def name(self) -> str | None:
        """Field or variant name."""
        return self.diagnostic.name


class GuraMissingFieldError(_NamedError):
    """Required struct field absent from the mapping."""

    kind = ErrorKind.MISSING_FIELD


class GuraDuplicateFieldError(_NamedError):
    """Same key or field supplied twice."""

    kind = ErrorKind.DUPLICATE_FIELD


class GuraUnknownFieldError(_NamedError):
    """Undeclared key in a struct mapping (strict mode only)."""

    kind = ErrorKind.UNKNOWN_FIELD


class GuraUnknownVariantError(_NamedError):
    """Enum value does not select any declared variant."""

    kind = ErrorKind.UNKNOWN_VARIANT


class GuraCustomError(GuraError):
    """Free-form error raised by user code or by misuse of a collector."""

    kind = ErrorKind.CUSTOM


class GuraSyntaxError(GuraError):
    """Gura text rejected by the external parser.

    The parser's own exception is chained as ``__cause__``; its position is
    preserved in ``diagnostic.span``.
    """

    kind = ErrorKind.SYNTAX

    @property
    def line(self) -> int | None:
        """1-based line of the parse failure, if known."""
        span = self.diagnostic.span
        return span.line if span is not None else None

    @property
    def column(self) -> int | None:
        """1-based column of the parse failure, if known."""
        span = self.diagnostic.span
        return span.column if span is not None else None


class GuraDepthLimitError(GuraError):
    """Nesting deeper than the configured maximum depth.

    This error indicates either:
    - Adversarial input designed to exhaust the stack
    - A self-referencing container handed to the serializer
    - Unintended deep nesting in a document
    """

    kind = ErrorKind.DEPTH_LIMIT
