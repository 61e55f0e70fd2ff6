"""Diagnostic system for gura-serde errors.

Provides structured error diagnostics with codes, paths, spans and hints.
Inspired by Rust compiler diagnostics.

Python 3.13+.
"""

from .codes import Diagnostic, DiagnosticCode, ErrorKind, PathSegment, SourceSpan, format_path
from .errors import (
    GuraCustomError,
    GuraDepthLimitError,
    GuraDuplicateFieldError,
    GuraError,
    GuraMissingFieldError,
    GuraSyntaxError,
    GuraTypeMismatchError,
    GuraUnknownFieldError,
    GuraUnknownVariantError,
    GuraUnsupportedError,
)
from .formatter import DiagnosticFormatter, OutputFormat
from .templates import ErrorTemplate

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticFormatter",
    "ErrorKind",
    "ErrorTemplate",
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
    "OutputFormat",
    "PathSegment",
    "SourceSpan",
    "format_path",
]
