"""Cursors handed to visitors for composite nodes.

- ``SeqAccess``: elements of a Sequence, single pass
- ``MapAccess``: entries of a Mapping, key then value, single pass
- ``EnumAccess`` / ``VariantAccess``: the selected variant and its payload

Every child is deserialized through the owning ``ValueDeserializer`` so it
runs under the pass's DepthGuard and failures are located at the child's
structural path.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any

from gura_serde.diagnostics import (
    ErrorTemplate,
    GuraCustomError,
    GuraTypeMismatchError,
    PathSegment,
)
from gura_serde.value.tree import String, Value, describe_value

if TYPE_CHECKING:
    from .deserializer import ValueDeserializer
    from .visitor import DeserializeSeed, Visitor

__all__ = ["EnumAccess", "MapAccess", "SeqAccess", "VariantAccess"]


class SeqAccess:
    """Non-restartable cursor over sequence elements."""

    __slots__ = ("_deserializer", "_index", "_items")

    def __init__(self, deserializer: ValueDeserializer, items: Sequence[Value]) -> None:
        self._deserializer = deserializer
        self._items = items
        self._index = 0

    @property
    def remaining(self) -> int:
        """Number of elements not yet consumed."""
        return len(self._items) - self._index

    def next_element[T](self, seed: DeserializeSeed[T]) -> T:
        """Deserialize the next element.

        Raises:
            GuraTypeMismatchError: If the sequence is exhausted
        """
        if self._index >= len(self._items):
            size = len(self._items)
            raise GuraTypeMismatchError(
                ErrorTemplate.invalid_length(size, f"more than {size} elements")
            )
        index = self._index
        self._index += 1
        return self._deserializer.descend(self._items[index], index, seed.deserialize)

    def iter_elements[T](self, seed: DeserializeSeed[T]) -> Iterator[T]:
        """Yield every remaining element deserialized with seed."""
        while self.remaining:
            yield self.next_element(seed)


class MapAccess:
    """Non-restartable cursor over mapping entries.

    Protocol: ``next_key`` then exactly one of ``next_value`` or
    ``skip_value``, repeated until ``next_key`` returns None.
    """

    __slots__ = ("_deserializer", "_entries", "_index", "_pending")

    def __init__(
        self, deserializer: ValueDeserializer, entries: Sequence[tuple[str, Value]]
    ) -> None:
        self._deserializer = deserializer
        self._entries = entries
        self._index = 0
        self._pending: tuple[str, Value] | None = None

    @property
    def remaining(self) -> int:
        """Number of entries whose key has not been read yet."""
        return len(self._entries) - self._index

    def next_key(self, seed: DeserializeSeed[Any] | None = None) -> Any:
        """Advance to the next entry and return its key.

        Args:
            seed: Key deserializer; None returns the raw key string

        Returns:
            The key, or None when the mapping is exhausted
        """
        if self._pending is not None:
            raise GuraCustomError(ErrorTemplate.custom("next_key called before the previous value"))
        if self._index >= len(self._entries):
            return None
        self._pending = self._entries[self._index]
        self._index += 1
        key = self._pending[0]
        if seed is None:
            return key
        return self._deserializer.descend(String(key), key, seed.deserialize)

    def _take_pending(self) -> tuple[str, Value]:
        if self._pending is None:
            raise GuraCustomError(ErrorTemplate.custom("value requested before next_key"))
        entry, self._pending = self._pending, None
        return entry

    def next_value[T](self, seed: DeserializeSeed[T]) -> T:
        """Deserialize the value of the entry whose key was just read."""
        key, node = self._take_pending()
        return self._deserializer.descend(node, key, seed.deserialize)

    def skip_value(self) -> None:
        """Discard the value of the entry whose key was just read."""
        self._take_pending()

    def next_entry[K, V](
        self, key_seed: DeserializeSeed[K] | None, value_seed: DeserializeSeed[V]
    ) -> tuple[K, V] | None:
        """Read one key/value pair, or None when exhausted."""
        key = self.next_key(key_seed)
        if key is None and self._pending is None:
            return None
        return key, self.next_value(value_seed)

    def deserializer_for(
        self, node: Value, segment: PathSegment | None = None
    ) -> ValueDeserializer:
        """Deserializer for a node assembled by the visitor.

        The returned deserializer shares this pass's configuration and
        depth guard; its path extends the mapping's path by segment.
        """
        return self._deserializer.child(node, segment)


class EnumAccess:
    """Gives a visitor the variant selected by an enum node."""

    __slots__ = ("_deserializer", "_payload", "_variant")

    def __init__(self, deserializer: ValueDeserializer, variant: str, payload: Value | None) -> None:
        self._deserializer = deserializer
        self._variant = variant
        self._payload = payload

    def variant(self) -> tuple[str, VariantAccess]:
        """Selected variant name and accessor for its payload."""
        return self._variant, VariantAccess(self._deserializer, self._variant, self._payload)


class VariantAccess:
    """Payload of the selected variant, requested in a specific shape.

    ``payload`` is None when the variant was written as a bare string.
    """

    __slots__ = ("_deserializer", "_payload", "_variant")

    def __init__(self, deserializer: ValueDeserializer, variant: str, payload: Value | None) -> None:
        self._deserializer = deserializer
        self._variant = variant
        self._payload = payload

    def _require_payload(self, shape: str) -> Value:
        if self._payload is None:
            raise GuraTypeMismatchError(
                ErrorTemplate.type_mismatch(shape, f"unit variant '{self._variant}'")
            )
        return self._payload

    def unit_variant(self) -> None:
        """Confirm the variant carries no payload."""
        if self._payload is not None:
            raise GuraTypeMismatchError(
                ErrorTemplate.type_mismatch(
                    f"unit variant '{self._variant}'", describe_value(self._payload)
                )
            )

    def newtype_variant[T](self, seed: DeserializeSeed[T]) -> T:
        payload = self._require_payload("newtype variant")
        return self._deserializer.descend(payload, self._variant, seed.deserialize)

    def tuple_variant[T](self, length: int, visitor: Visitor[T]) -> T:
        payload = self._require_payload("tuple variant")
        return self._deserializer.descend(
            payload, self._variant, lambda child: child.deserialize_tuple(length, visitor)
        )

    def struct_variant[T](self, fields: Sequence[str], visitor: Visitor[T]) -> T:
        payload = self._require_payload("struct variant")
        variant = self._variant
        return self._deserializer.descend(
            payload, variant, lambda child: child.deserialize_struct(variant, fields, visitor)
        )
