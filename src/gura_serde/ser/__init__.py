"""Serializer engine: values -> ValueTree.

Python 3.13+.
"""

from .serializer import (
    SerializeMap,
    SerializeSchema,
    SerializeSequence,
    SerializeStruct,
    SerializeStructVariant,
    SerializeTupleVariant,
    ValueSerializer,
)

__all__ = [
    "SerializeMap",
    "SerializeSchema",
    "SerializeSequence",
    "SerializeStruct",
    "SerializeStructVariant",
    "SerializeTupleVariant",
    "ValueSerializer",
]
