"""Shared constants for gura-serde.

Single source of truth for limits and formatting constants used by the
printer, the serializer and the deserializer. Kept dependency-free so every
subpackage can import it without cycles.

Python 3.13+.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Depth limits
    "MAX_DEPTH",
    # Input limits
    "MAX_SOURCE_SIZE",
    # Formatting
    "INDENT",
    "KEY_PATTERN",
    "EMPTY_KEYWORD",
    "NULL_KEYWORD",
    # Caches
    "MAX_SCHEMA_CACHE_SIZE",
]

# ============================================================================
# DEPTH LIMITS
# ============================================================================
#
# One limit covers every recursive walk: building a ValueTree from parser
# output, serializing a value, printing a tree and deserializing a tree.
# Gura configuration files rarely nest deeper than a handful of levels;
# anything past 100 is treated as malformed or hostile input.

MAX_DEPTH: int = 100

# ============================================================================
# INPUT LIMITS
# ============================================================================

# Maximum accepted source size in characters (10 MiB).
MAX_SOURCE_SIZE: int = 10 * 1024 * 1024

# ============================================================================
# FORMATTING
# ============================================================================

# Gura requires indentation in multiples of four spaces.
INDENT: str = "    "

# Gura keys are unquoted and limited to this character class.
KEY_PATTERN: str = r"[A-Za-z0-9_]+"

# Keyword for an empty object.
EMPTY_KEYWORD: str = "empty"

NULL_KEYWORD: str = "null"

# ============================================================================
# CACHES
# ============================================================================

# Maximum number of annotations whose resolved schema is kept by schema_for.
MAX_SCHEMA_CACHE_SIZE: int = 512
