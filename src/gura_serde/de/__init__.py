"""Deserializer engine: ValueTree -> values.

Python 3.13+.
"""

from .access import EnumAccess, MapAccess, SeqAccess, VariantAccess
from .deserializer import ValueDeserializer
from .visitor import DeserializeSeed, Visitor

__all__ = [
    "DeserializeSeed",
    "EnumAccess",
    "MapAccess",
    "SeqAccess",
    "ValueDeserializer",
    "VariantAccess",
    "Visitor",
]
