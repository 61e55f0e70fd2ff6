"""Position utilities for Gura source text.

Converts the character offsets reported by the external parser into
1-based line/column positions and source excerpts for error reporting.

Python 3.13+.
"""

from gura_serde.diagnostics import SourceSpan

__all__ = [
    "column_offset",
    "get_error_context",
    "line_offset",
    "span_at",
]


def line_offset(source: str, pos: int) -> int:
    """Get 0-based line number from character offset.

    Args:
        source: Complete Gura source text
        pos: Character offset in source

    Returns:
        0-based line number

    Example:
        >>> source = "a: 1\\nb: 2\\nc: 3"
        >>> line_offset(source, 0)
        0
        >>> line_offset(source, 5)
        1
    """
    if pos < 0:
        msg = f"Position must be >= 0, got {pos}"
        raise ValueError(msg)
    pos = min(pos, len(source))  # Clamp to source length

    return source.count("\n", 0, pos)


def column_offset(source: str, pos: int) -> int:
    """Get 0-based column number from character offset.

    Example:
        >>> column_offset("a: 1\\nbb: 2", 7)
        2
    """
    if pos < 0:
        msg = f"Position must be >= 0, got {pos}"
        raise ValueError(msg)
    pos = min(pos, len(source))  # Clamp to source length

    line_start = source.rfind("\n", 0, pos)
    if line_start == -1:
        return pos
    return pos - line_start - 1


def span_at(source: str, pos: int) -> SourceSpan:
    """Build a 1-based SourceSpan for a character offset."""
    pos = max(0, min(pos, len(source)))
    return SourceSpan(
        line=line_offset(source, pos) + 1,
        column=column_offset(source, pos) + 1,
        offset=pos,
    )


def get_error_context(source: str, pos: int, context_lines: int = 1, marker: str = "^") -> str:
    """Get formatted error context showing position in source.

    Args:
        source: Complete Gura source text
        pos: Character offset of error
        context_lines: Number of lines to show before/after error
        marker: Character to use for error marker

    Returns:
        Formatted error context string

    Example:
        >>> source = "a: 1\\nb: ]\\nc: 3"
        >>> print(get_error_context(source, 8, context_lines=0))
        b: ]
           ^
    """
    line_num = line_offset(source, pos)
    col_num = column_offset(source, pos)

    lines = source.splitlines(keepends=False)
    if not lines:
        return marker

    start_line = max(0, line_num - context_lines)
    end_line = min(len(lines), line_num + context_lines + 1)

    context = []
    for i in range(start_line, end_line):
        context.append(lines[i])
        if i == line_num:
            context.append(" " * col_num + marker)

    return "\n".join(context)
