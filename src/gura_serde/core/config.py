"""Configuration for serialization and deserialization passes.

A single frozen dataclass carries every tunable of both engines, so the
public API takes one ``config=`` argument instead of a growing list of
keyword flags.

Python 3.13+.
"""

from __future__ import annotations

from dataclasses import dataclass

from gura_serde.constants import MAX_DEPTH, MAX_SOURCE_SIZE

__all__ = ["DEFAULT_CONFIG", "GuraConfig"]


@dataclass(frozen=True, slots=True)
class GuraConfig:
    """Immutable configuration for gura-serde engines.

    All fields have sensible defaults; ``GuraConfig()`` is the lenient
    configuration used when callers pass nothing.

    Attributes:
        max_depth: Maximum nesting depth walked by either engine
            (default: 100). Clamped against the interpreter recursion limit.
        deny_unknown_fields: Strict mode. If True, a struct mapping containing
            a key that is not a declared field raises GuraUnknownFieldError;
            if False (default), such keys are skipped.
        max_source_size: Largest document, in characters, that ``from_str``
            hands to the parser (default: 10 MiB).

    Example:
        >>> from gura_serde import GuraConfig, from_str
        >>> strict = GuraConfig(deny_unknown_fields=True)
        >>> from_str('ip: "127.0.0.1"\\nextra: 1', Database, config=strict)
        Traceback (most recent call last):
        ...
        gura_serde.diagnostics.errors.GuraUnknownFieldError: ...
    """

    max_depth: int = MAX_DEPTH
    deny_unknown_fields: bool = False
    max_source_size: int = MAX_SOURCE_SIZE

    def __post_init__(self) -> None:
        """Validate configuration values at construction time.

        Raises:
            ValueError: If max_depth or max_source_size is not positive.
        """
        if self.max_depth <= 0:
            msg = "max_depth must be positive"
            raise ValueError(msg)
        if self.max_source_size <= 0:
            msg = "max_source_size must be positive"
            raise ValueError(msg)


DEFAULT_CONFIG = GuraConfig()
