"""Bridge to the external Gura parser.

Gura grammar (comments, imports, variables, indentation) is owned by the
``gura`` package. This module hands text to ``gura.loads`` and converts the
result into a ValueTree; every failure of the parser is wrapped into
``GuraSyntaxError`` with its position preserved.

Python 3.13+.
"""

from __future__ import annotations

import logging

import gura

from gura_serde.core.config import DEFAULT_CONFIG, GuraConfig
from gura_serde.diagnostics import ErrorTemplate, GuraSyntaxError, SourceSpan

from .convert import from_native
from .position import get_error_context, span_at
from .tree import Mapping

__all__ = ["parse"]

logger = logging.getLogger(__name__)


def parse(text: str, *, config: GuraConfig | None = None) -> Mapping:
    """Parse Gura text into a ValueTree.

    Args:
        text: Gura document
        config: Limits to apply (default: GuraConfig())

    Returns:
        Root mapping of the document

    Raises:
        GuraSyntaxError: If the text is too large or not valid Gura
        GuraDepthLimitError: If the document nests deeper than config.max_depth
    """
    config = config or DEFAULT_CONFIG
    if len(text) > config.max_source_size:
        raise GuraSyntaxError(ErrorTemplate.source_too_large(len(text), config.max_source_size))

    try:
        native = gura.loads(text)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        # gura raises its own GuraError subclasses, bare ValueError from
        # number parsing and RecursionError on very deep documents.
        logger.debug("Gura parser rejected input: %s", exc)
        raise _wrap_parse_error(text, exc) from exc

    tree = from_native(native, max_depth=config.max_depth)
    if not isinstance(tree, Mapping):
        # gura.loads always returns an object; guard against API drift.
        raise GuraSyntaxError(ErrorTemplate.parse_failed("document root is not an object", None, None))
    return tree


def _wrap_parse_error(text: str, exc: Exception) -> GuraSyntaxError:
    """Convert a parser exception into GuraSyntaxError, keeping its position."""
    reason = _parser_message(exc)
    pos = getattr(exc, "pos", None)
    line = getattr(exc, "line", None)

    span: SourceSpan | None = None
    context: str | None = None
    if isinstance(pos, int) and pos >= 0:
        span = span_at(text, pos)
        context = get_error_context(text, min(pos, len(text)))
    elif isinstance(line, int) and line >= 1:
        span = SourceSpan(line=line, column=1)

    return GuraSyntaxError(ErrorTemplate.parse_failed(reason, span, context))


def _parser_message(exc: Exception) -> str:
    """Message of a parser exception without its position suffix.

    gura exceptions keep a %-style template in ``msg`` and its arguments in
    ``args``; their str() appends "at line L (text position = P)", which
    the diagnostic renders separately.
    """
    template = getattr(exc, "msg", None)
    if not isinstance(template, str):
        return str(exc) or type(exc).__name__
    if not exc.args:
        return template
    try:
        return template % exc.args
    except (TypeError, ValueError):
        return template
