"""Error message templates.

Centralized error message templates for testable, consistent error messages.
Python 3.13+.
"""

from .codes import Diagnostic, DiagnosticCode, SourceSpan

__all__ = ["ErrorTemplate"]


class ErrorTemplate:
    """Centralized error message templates.

    All error messages are created here. NO f-strings in exception constructors!
    This keeps every message testable and documents every error case in one
    place.
    """

    # Base documentation URL
    _DOCS_BASE = "https://gura.netlify.app/docs/spec"

    # ------------------------------------------------------------------
    # Representation errors
    # ------------------------------------------------------------------

    @staticmethod
    def unsupported_map_key(found: str) -> Diagnostic:
        """Map key did not serialize to a string.

        Args:
            found: Description of the serialized key

        Returns:
            Diagnostic for UNSUPPORTED_MAP_KEY
        """
        msg = f"map keys must serialize to strings, found {found}"
        return Diagnostic(
            code=DiagnosticCode.UNSUPPORTED_MAP_KEY,
            message=msg,
            found=found,
            hint="Gura object keys are identifiers; convert keys to str first",
        )

    @staticmethod
    def unsupported_integer(value: int) -> Diagnostic:
        """Integer outside every 64-bit range.

        Args:
            value: The integer that does not fit i64 or u64

        Returns:
            Diagnostic for UNSUPPORTED_INTEGER
        """
        msg = f"integer {value} does not fit in 64 bits"
        return Diagnostic(
            code=DiagnosticCode.UNSUPPORTED_INTEGER,
            message=msg,
            found=f"integer {value}",
        )

    @staticmethod
    def unsupported_key_syntax(key: str) -> Diagnostic:
        """Key cannot be written as an unquoted Gura key.

        Args:
            key: The offending key

        Returns:
            Diagnostic for UNSUPPORTED_KEY_SYNTAX
        """
        msg = f"key {key!r} is not a valid Gura key"
        return Diagnostic(
            code=DiagnosticCode.UNSUPPORTED_KEY_SYNTAX,
            message=msg,
            name=key,
            hint="Gura keys may only contain letters, digits and underscores",
        )

    @staticmethod
    def unsupported_type(type_name: str) -> Diagnostic:
        """Python type has no data model mapping.

        Args:
            type_name: Name of the unsupported type or annotation

        Returns:
            Diagnostic for UNSUPPORTED_TYPE
        """
        msg = f"type {type_name} cannot be mapped to Gura"
        return Diagnostic(
            code=DiagnosticCode.UNSUPPORTED_TYPE,
            message=msg,
            found=type_name,
            hint="Use dataclasses, enums, tagged unions, containers or scalars, "
            "or implement __gura_serialize__/__gura_deserialize__",
        )

    @staticmethod
    def unsupported_declaration(type_name: str, reason: str) -> Diagnostic:
        """Type declaration cannot be bound (clashing keys, unresolvable hints).

        Args:
            type_name: Name of the declaring class
            reason: What is wrong with the declaration

        Returns:
            Diagnostic for UNSUPPORTED_DECLARATION
        """
        msg = f"cannot bind {type_name}: {reason}"
        return Diagnostic(
            code=DiagnosticCode.UNSUPPORTED_DECLARATION,
            message=msg,
            name=type_name,
        )

    # ------------------------------------------------------------------
    # Shape errors
    # ------------------------------------------------------------------

    @staticmethod
    def type_mismatch(expected: str, found: str) -> Diagnostic:
        """Node variant does not match the requested type.

        Args:
            expected: Description of the requested type
            found: Description of the node present

        Returns:
            Diagnostic for TYPE_MISMATCH
        """
        msg = f"invalid type: expected {expected}, found {found}"
        return Diagnostic(
            code=DiagnosticCode.TYPE_MISMATCH,
            message=msg,
            expected=expected,
            found=found,
        )

    @staticmethod
    def integer_out_of_range(value: int, width: str, low: int, high: int) -> Diagnostic:
        """Integer outside the range of the requested width.

        Args:
            value: The integer
            width: Width name (u8, i32, ...)
            low: Smallest value of the width
            high: Largest value of the width

        Returns:
            Diagnostic for INTEGER_OUT_OF_RANGE
        """
        msg = f"invalid value: integer {value} is out of range for {width}"
        return Diagnostic(
            code=DiagnosticCode.INTEGER_OUT_OF_RANGE,
            message=msg,
            expected=width,
            found=f"integer {value}",
            hint=f"{width} accepts values from {low} to {high}",
        )

    @staticmethod
    def float_out_of_range(value: float, width: str) -> Diagnostic:
        """Float outside the range (or precision) of the requested width.

        Args:
            value: The number
            width: Width name (f32, f64)

        Returns:
            Diagnostic for FLOAT_OUT_OF_RANGE
        """
        msg = f"invalid value: {value!r} is not representable as {width}"
        return Diagnostic(
            code=DiagnosticCode.FLOAT_OUT_OF_RANGE,
            message=msg,
            expected=width,
            found=repr(value),
        )

    @staticmethod
    def invalid_length(length: int, expected: str) -> Diagnostic:
        """Sequence length does not match a fixed-size target.

        Args:
            length: Number of elements present
            expected: Description of the expected length

        Returns:
            Diagnostic for INVALID_LENGTH
        """
        msg = f"invalid length {length}, expected {expected}"
        return Diagnostic(
            code=DiagnosticCode.INVALID_LENGTH,
            message=msg,
            expected=expected,
            found=f"sequence of {length} elements",
        )

    @staticmethod
    def missing_field(name: str) -> Diagnostic:
        """Required field absent from the mapping.

        Args:
            name: Field name as written in Gura

        Returns:
            Diagnostic for MISSING_FIELD
        """
        msg = f"missing field '{name}'"
        return Diagnostic(
            code=DiagnosticCode.MISSING_FIELD,
            message=msg,
            name=name,
            hint=f"Add '{name}' to the document or give the field a default",
        )

    @staticmethod
    def duplicate_field(name: str) -> Diagnostic:
        """Field or key supplied twice.

        Args:
            name: Field or key name

        Returns:
            Diagnostic for DUPLICATE_FIELD
        """
        msg = f"duplicate field '{name}'"
        return Diagnostic(
            code=DiagnosticCode.DUPLICATE_FIELD,
            message=msg,
            name=name,
        )

    @staticmethod
    def unknown_field(name: str, expected: tuple[str, ...]) -> Diagnostic:
        """Undeclared key in strict mode.

        Args:
            name: The unknown key
            expected: Declared field names

        Returns:
            Diagnostic for UNKNOWN_FIELD
        """
        msg = f"unknown field '{name}'"
        listing = ", ".join(f"'{f}'" for f in expected) if expected else "none"
        return Diagnostic(
            code=DiagnosticCode.UNKNOWN_FIELD,
            message=msg,
            name=name,
            hint=f"Expected one of: {listing}",
        )

    @staticmethod
    def unknown_variant(name: str, expected: tuple[str, ...]) -> Diagnostic:
        """Value does not select a declared variant.

        Args:
            name: The variant name found (or a description of the node)
            expected: Declared variant names

        Returns:
            Diagnostic for UNKNOWN_VARIANT
        """
        msg = f"unknown variant '{name}'"
        listing = ", ".join(f"'{v}'" for v in expected) if expected else "none"
        return Diagnostic(
            code=DiagnosticCode.UNKNOWN_VARIANT,
            message=msg,
            name=name,
            hint=f"Expected one of: {listing}",
        )

    # ------------------------------------------------------------------
    # Syntax errors
    # ------------------------------------------------------------------

    @staticmethod
    def parse_failed(reason: str, span: SourceSpan | None, context: str | None) -> Diagnostic:
        """External parser rejected the text.

        Args:
            reason: Parser message
            span: Position of the failure, if reported
            context: Source excerpt with a caret marker

        Returns:
            Diagnostic for PARSE_FAILED
        """
        msg = f"input is not valid Gura: {reason}"
        return Diagnostic(
            code=DiagnosticCode.PARSE_FAILED,
            message=msg,
            span=span,
            hint=context,
        )

    @staticmethod
    def source_too_large(size: int, limit: int) -> Diagnostic:
        """Source exceeds the configured size limit.

        Args:
            size: Source length in characters
            limit: Configured maximum

        Returns:
            Diagnostic for SOURCE_TOO_LARGE
        """
        msg = f"source of {size} characters exceeds the limit of {limit}"
        return Diagnostic(
            code=DiagnosticCode.SOURCE_TOO_LARGE,
            message=msg,
            hint="Raise GuraConfig.max_source_size for larger documents",
        )

    # ------------------------------------------------------------------
    # Resource limits
    # ------------------------------------------------------------------

    @staticmethod
    def depth_exceeded(max_depth: int) -> Diagnostic:
        """Nesting depth limit exceeded.

        Args:
            max_depth: The configured limit

        Returns:
            Diagnostic for MAX_DEPTH_EXCEEDED
        """
        msg = f"maximum nesting depth ({max_depth}) exceeded"
        return Diagnostic(
            code=DiagnosticCode.MAX_DEPTH_EXCEEDED,
            message=msg,
            hint="Check for self-referencing containers or raise GuraConfig.max_depth",
        )

    @staticmethod
    def custom(message: str) -> Diagnostic:
        """Free-form message.

        Args:
            message: Text of the error

        Returns:
            Diagnostic for CUSTOM
        """
        return Diagnostic(code=DiagnosticCode.CUSTOM, message=message)
