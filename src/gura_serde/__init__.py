"""gura-serde - Serialize Python values to and from Gura configuration text.

Converts dataclasses, enums, tagged unions, collections and scalars to Gura
text and back without per-type conversion code. Gura grammar is handled by
the ``gura`` package; this library maps between Python values and the
parsed document tree.

Public API:
    to_string - Serialize a value as Gura text
    to_writer - Serialize a value into a text sink
    to_value - Serialize a value into a ValueTree
    from_str - Parse Gura text into a typed value
    from_value - Deserialize a ValueTree into a typed value
    parse - Parse Gura text into a ValueTree
    dump - Render a ValueTree as Gura text
    GuraConfig - Depth limit, strictness and input size limit
    field - Dataclass field with Gura options (rename, alias, skip)
    tagged_union / variant - Enums whose variants carry data
    I8..U64, F32, F64, Char - Width annotations

Exceptions:
    GuraError - Base exception class
    GuraSyntaxError - Text rejected by the Gura parser
    GuraTypeMismatchError - Value does not fit the requested type
    GuraMissingFieldError / GuraUnknownFieldError / GuraDuplicateFieldError
    GuraUnknownVariantError - Enum value selects no declared variant
    GuraUnsupportedError - Construct not representable in Gura
    GuraDepthLimitError - Nesting past GuraConfig.max_depth

Submodules:
    gura_serde.value - ValueTree nodes, parser bridge and printer
    gura_serde.ser - Serializer engine
    gura_serde.de - Deserializer engine and Visitor protocol
    gura_serde.model - Schemas, width markers and tagged unions
    gura_serde.diagnostics - Error types and diagnostic formatting

Python 3.13+.
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

from .api import from_str, from_value, to_string, to_value, to_writer
from .core import GuraConfig
from .diagnostics import (
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
from .enums import FloatWidth, IntWidth, VariantShape
from .model import (
    F32,
    F64,
    I8,
    I16,
    I32,
    I64,
    U8,
    U16,
    U32,
    U64,
    Char,
    field,
    schema_for,
    tagged_union,
    variant,
)
from .value import Value, dump, parse

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
try:
    __version__ = _get_version("gura-serde")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

# Gura specification conformance
__gura_spec_url__ = "https://gura.netlify.app/docs/spec"

__all__ = [
    "F32",
    "F64",
    "I8",
    "I16",
    "I32",
    "I64",
    "U8",
    "U16",
    "U32",
    "U64",
    "Char",
    "FloatWidth",
    "GuraConfig",
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
    "IntWidth",
    "Value",
    "VariantShape",
    "__gura_spec_url__",
    "__version__",
    "dump",
    "field",
    "from_str",
    "from_value",
    "parse",
    "schema_for",
    "tagged_union",
    "to_string",
    "to_value",
    "to_writer",
    "variant",
]
