"""Conversion between plain Python objects and ValueTree nodes.

The external Gura parser produces plain ``dict``/``list``/scalar objects;
``from_native`` turns them into an immutable ValueTree, ``to_native`` goes
the other way. Both walks run under a DepthGuard.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Mapping as AbcMapping

from gura_serde.constants import MAX_DEPTH
from gura_serde.core.depth_guard import DepthGuard
from gura_serde.diagnostics import ErrorTemplate, GuraUnsupportedError

from .tree import NULL, Bool, Float, Integer, Mapping, Null, Sequence, String, Value

__all__ = ["from_native", "to_native"]

type Native = None | bool | int | float | str | list[Native] | dict[str, Native]


def from_native(obj: object, *, max_depth: int = MAX_DEPTH) -> Value:
    """Convert parser output into a ValueTree.

    Args:
        obj: ``None``, ``bool``, ``int``, ``float``, ``str``, list/tuple or
            string-keyed mapping, nested arbitrarily
        max_depth: Maximum nesting depth

    Returns:
        Equivalent ValueTree

    Raises:
        GuraUnsupportedError: If obj contains anything else, or a non-string key
        GuraDepthLimitError: If nesting exceeds max_depth
    """
    return _from_native(obj, DepthGuard(max_depth=max_depth))


def _from_native(obj: object, guard: DepthGuard) -> Value:
    match obj:
        case None:
            return NULL
        case bool():
            return Bool(obj)
        case int():
            return Integer(obj)
        case float():
            return Float(obj)
        case str():
            return String(obj)
        case list() | tuple():
            with guard:
                return Sequence(items=tuple(_from_native(item, guard) for item in obj))
        case AbcMapping():
            with guard:
                entries: list[tuple[str, Value]] = []
                for key, item in obj.items():
                    if not isinstance(key, str):
                        raise GuraUnsupportedError(
                            ErrorTemplate.unsupported_map_key(type(key).__name__)
                        )
                    entries.append((key, _from_native(item, guard)))
                return Mapping(entries=tuple(entries))
        case _:
            raise GuraUnsupportedError(ErrorTemplate.unsupported_type(type(obj).__name__))


def to_native(value: Value, *, max_depth: int = MAX_DEPTH) -> Native:
    """Convert a ValueTree into plain Python objects.

    Sequences become lists and mappings become insertion-ordered dicts.
    """
    return _to_native(value, DepthGuard(max_depth=max_depth))


def _to_native(value: Value, guard: DepthGuard) -> Native:
    match value:
        case Null():
            return None
        case Bool(value=flag):
            return flag
        case Integer(value=number):
            return number
        case Float(value=number):
            return number
        case String(value=text):
            return text
        case Sequence(items=items):
            with guard:
                return [_to_native(item, guard) for item in items]
        case Mapping(entries=entries):
            with guard:
                return {key: _to_native(item, guard) for key, item in entries}
