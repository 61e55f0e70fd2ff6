"""Rendering of diagnostics for terminals, logs and tools.

Three layouts share one formatter: a multi-line report in the style of the
Rust compiler (what ``str(GuraError)`` shows), a single line for logs, and
JSON for editors and CI annotations.

Python 3.13+.
"""

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import StrEnum

from .codes import Diagnostic

__all__ = [
    "DiagnosticFormatter",
    "OutputFormat",
]


class OutputFormat(StrEnum):
    """Layouts understood by DiagnosticFormatter."""

    RUST = "rust"
    SIMPLE = "simple"
    JSON = "json"


@dataclass(frozen=True, slots=True)
class DiagnosticFormatter:
    """Turns Diagnostic records into text.

    Attributes:
        output_format: Layout to produce
        sanitize: Cut long messages and found-values short, so that large
            document excerpts do not end up in logs
        max_content_length: Cut-off used when sanitizing

    Example:
        >>> formatter = DiagnosticFormatter()
        >>> diagnostic = ErrorTemplate.missing_field("port")
        >>> print(formatter.format(diagnostic))
        error[MISSING_FIELD]: missing field 'port'
          = help: Add 'port' to the document or give the field a default

        >>> formatter = DiagnosticFormatter(output_format=OutputFormat.SIMPLE)
        >>> print(formatter.format(diagnostic))
        MISSING_FIELD: missing field 'port'
    """

    output_format: OutputFormat = OutputFormat.RUST
    sanitize: bool = False
    max_content_length: int = 100

    def format(self, diagnostic: Diagnostic) -> str:
        """Render one diagnostic in the configured layout."""
        match self.output_format:
            case OutputFormat.RUST:
                return self._report(diagnostic)
            case OutputFormat.SIMPLE:
                return self._line(diagnostic)
            case OutputFormat.JSON:
                return self._json(diagnostic)

    def format_all(self, diagnostics: Iterable[Diagnostic]) -> str:
        """Render several diagnostics, one blank line between each."""
        return "\n\n".join(map(self.format, diagnostics))

    def _clip(self, text: str) -> str:
        if not self.sanitize or len(text) <= self.max_content_length:
            return text
        return f"{text[: self.max_content_length]}..."

    def _annotations(self, diagnostic: Diagnostic) -> Iterator[tuple[str, str]]:
        """(label, text) pairs shown under the headline, in display order."""
        if diagnostic.expected:
            yield "expected", diagnostic.expected
        if diagnostic.found:
            yield "found", self._clip(diagnostic.found)
        if diagnostic.hint:
            yield "help", self._clip(diagnostic.hint)

    def _report(self, diagnostic: Diagnostic) -> str:
        # error[TYPE_MISMATCH]: invalid type: expected u16, found string "80"
        #   --> at database.port[0]
        #   = expected: u16
        #   = found: string "80"
        lines = [f"error[{diagnostic.code.name}]: {self._clip(diagnostic.message)}"]
        if (span := diagnostic.span) is not None:
            lines.append(f"  --> line {span.line}, column {span.column}")
        if diagnostic.location is not None:
            lines.append(f"  --> at {diagnostic.location}")
        lines.extend(f"  = {label}: {text}" for label, text in self._annotations(diagnostic))
        return "\n".join(lines)

    def _line(self, diagnostic: Diagnostic) -> str:
        text = f"{diagnostic.code.name}: {self._clip(diagnostic.message)}"
        if diagnostic.location is None:
            return text
        return f"{text} (at {diagnostic.location})"

    def _json(self, diagnostic: Diagnostic) -> str:
        record: dict[str, str | int] = {
            "code": diagnostic.code.name,
            "code_value": diagnostic.code.value,
            "message": self._clip(diagnostic.message),
        }
        if diagnostic.location is not None:
            record["path"] = diagnostic.location
        if (span := diagnostic.span) is not None:
            record |= {"line": span.line, "column": span.column}
        if diagnostic.name:
            record["name"] = diagnostic.name
        record |= {
            ("hint" if label == "help" else label): text
            for label, text in self._annotations(diagnostic)
        }
        return json.dumps(record, ensure_ascii=False)
