"""Render a ValueTree as canonical Gura text.

Mappings are written in block style (one ``key: value`` pair per line,
nested objects indented by four spaces), sequences in flow style
(``[a, b]``) unless an element needs several lines.

Useful for:
- ``to_string`` / ``to_writer``
- Formatters (parse -> print normalizes a document)
- Property-based testing (roundtrip: print -> parse -> print)

Python 3.13+.
"""

from __future__ import annotations

import math
import re
import struct

from gura_serde.constants import EMPTY_KEYWORD, INDENT, KEY_PATTERN, MAX_DEPTH, NULL_KEYWORD
from gura_serde.core.depth_guard import DepthGuard
from gura_serde.diagnostics import ErrorTemplate, GuraUnsupportedError
from gura_serde.enums import FloatWidth

from .tree import Bool, Float, Integer, Mapping, Null, Sequence, String, Value

__all__ = ["GuraPrinter", "dump", "format_float", "quote_string"]

_KEY_RE = re.compile(KEY_PATTERN)

# Characters with a dedicated escape sequence in Gura basic strings.
# "$" starts variable interpolation and must be escaped as well.
_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "$": "\\$",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}


def quote_string(text: str) -> str:
    """Quote text as a Gura basic string.

    Example:
        >>> quote_string('say "hi"')
        '"say \\\\"hi\\\\""'
    """
    out: list[str] = ['"']
    for char in text:
        escaped = _ESCAPES.get(char)
        if escaped is not None:
            out.append(escaped)
        elif ord(char) < 0x20 or 0x7F <= ord(char) <= 0x9F:
            out.append(f"\\u{ord(char):04X}")
        else:
            out.append(char)
    out.append('"')
    return "".join(out)


def format_float(value: float, width: FloatWidth | None = None) -> str:
    """Shortest text that reads back as the same number.

    Python's repr already yields the shortest round-tripping form for
    doubles. For single precision the shortest text that survives a round
    trip through f32 is searched instead, so ``0.1`` stays ``0.1`` rather
    than ``0.10000000149011612``. The result always contains a ``.`` or an
    exponent so the parser reads it back as a float.
    """
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"

    if width is FloatWidth.F32:
        text = _shortest_f32(value)
    else:
        text = repr(value)

    if not any(marker in text for marker in (".", "e", "E")):
        text += ".0"
    return text


def _shortest_f32(value: float) -> str:
    target = struct.pack("<f", value)
    for precision in range(1, 10):
        candidate = float(f"{value:.{precision}g}")
        if struct.pack("<f", candidate) == target:
            return repr(candidate)
    return repr(value)


class GuraPrinter:
    """Converts a ValueTree to Gura source text.

    Thread-safe printer with no mutable instance state besides the depth
    guard created per print() call.

    Usage:
        >>> printer = GuraPrinter()
        >>> tree = Mapping.singleton("port", Integer(8080))
        >>> printer.print(tree)
        'port: 8080'
    """

    def __init__(self, *, max_depth: int = MAX_DEPTH) -> None:
        self._max_depth = max_depth

    def print(self, value: Value) -> str:
        """Render value as Gura text.

        A root mapping is written as the document's top-level pairs; any
        other root is written inline. There is never a trailing newline.

        Raises:
            GuraUnsupportedError: If a mapping key is not a valid Gura key
            GuraDepthLimitError: If the tree nests deeper than max_depth
        """
        guard = DepthGuard(max_depth=self._max_depth)
        if isinstance(value, Mapping):
            return "\n".join(self._mapping_lines(value, guard))
        return self._render(value, guard)

    def _render(self, value: Value, guard: DepthGuard) -> str:
        """Render a node as a value (right-hand side of ``key:``)."""
        match value:
            case Null():
                return NULL_KEYWORD
            case Bool(value=flag):
                return "true" if flag else "false"
            case Integer(value=number):
                return str(number)
            case Float(value=number, width=width):
                return format_float(number, width)
            case String(value=text):
                return quote_string(text)
            case Sequence():
                return self._render_sequence(value, guard)
            case Mapping():
                if not value.entries:
                    return EMPTY_KEYWORD
                return "\n".join(self._mapping_lines(value, guard))

    def _mapping_lines(self, mapping: Mapping, guard: DepthGuard) -> list[str]:
        """Render a mapping in block style, one pair per line."""
        lines: list[str] = []
        with guard:
            for key, item in mapping.entries:
                if not _KEY_RE.fullmatch(key):
                    raise GuraUnsupportedError(ErrorTemplate.unsupported_key_syntax(key))
                if isinstance(item, Mapping) and item.entries:
                    lines.append(f"{key}:")
                    lines.extend(INDENT + line for line in self._mapping_lines(item, guard))
                    continue
                rendered = self._render(item, guard)
                first, *rest = rendered.split("\n")
                lines.append(f"{key}: {first}")
                lines.extend(rest)
        return lines

    def _render_sequence(self, sequence: Sequence, guard: DepthGuard) -> str:
        """Render a sequence inline, or one element per line if any element spans lines."""
        with guard:
            rendered = [self._render(item, guard) for item in sequence.items]
        if not any("\n" in text for text in rendered) and not any(
            isinstance(item, Mapping) and item.entries for item in sequence.items
        ):
            return "[" + ", ".join(rendered) + "]"

        lines: list[str] = ["["]
        last = len(rendered) - 1
        for index, text in enumerate(rendered):
            element_lines = [INDENT + line for line in text.split("\n")]
            if index < last:
                element_lines[-1] += ","
            lines.extend(element_lines)
        lines.append("]")
        return "\n".join(lines)


def dump(value: Value) -> str:
    """Render a ValueTree as Gura text.

    Convenience function for GuraPrinter.print().

    Example:
        >>> dump(Mapping(entries=(("enabled", Bool(True)),)))
        'enabled: true'
    """
    return GuraPrinter().print(value)
