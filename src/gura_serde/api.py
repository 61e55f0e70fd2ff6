"""Public entry points: values <-> Gura text.

    >>> @dataclass
    ... class Database:
    ...     ip: str
    ...     port: list[U16]
    ...     connection_max: U32
    ...     enabled: bool
    >>> text = to_string(Database("127.0.0.1", [80, 8080], 1200, True))
    >>> print(text)
    ip: "127.0.0.1"
    port: [80, 8080]
    connection_max: 1200
    enabled: true
    >>> from_str(text, Database) == Database("127.0.0.1", [80, 8080], 1200, True)
    True

Every call builds its own engine and depth guard, so calls on separate
threads never share state.

Python 3.13+.
"""

from __future__ import annotations

import logging
from typing import Any, TextIO, overload

from gura_serde.core.config import DEFAULT_CONFIG, GuraConfig
from gura_serde.de.deserializer import ValueDeserializer
from gura_serde.diagnostics import GuraError
from gura_serde.model.schema import Schema, schema_for
from gura_serde.ser.serializer import ValueSerializer
from gura_serde.value.parser import parse
from gura_serde.value.printer import GuraPrinter
from gura_serde.value.tree import Value

__all__ = ["from_str", "from_value", "to_string", "to_value", "to_writer"]

logger = logging.getLogger(__name__)


def to_value(
    value: object, *, type_hint: Any = None, config: GuraConfig | None = None
) -> Value:
    """Serialize a value into a ValueTree.

    Args:
        value: Value to serialize
        type_hint: Annotation describing value (default: inferred from the
            runtime type). Needed for widths and optional/newtype wrappers.
        config: Limits to apply (default: GuraConfig())

    Returns:
        ValueTree for value

    Raises:
        GuraError: If value cannot be represented in Gura
    """
    config = config or DEFAULT_CONFIG
    schema: Schema[Any] | None = None
    if isinstance(type_hint, Schema):
        schema = type_hint
    elif type_hint is not None:
        schema = schema_for(type_hint)
    serializer = ValueSerializer(config=config)
    try:
        return serializer.serialize_value(value, schema)
    except GuraError as exc:
        exc.locate(())
        raise


def to_string(
    value: object, *, type_hint: Any = None, config: GuraConfig | None = None
) -> str:
    """Serialize a value as Gura text.

    The root must serialize to a mapping for the text to be a valid Gura
    document; other roots are rendered inline.

    Raises:
        GuraError: If value cannot be represented in Gura
    """
    config = config or DEFAULT_CONFIG
    logger.debug("Serializing %s to Gura text", type(value).__name__)
    tree = to_value(value, type_hint=type_hint, config=config)
    return GuraPrinter(max_depth=config.max_depth).print(tree)


def to_writer(
    value: object,
    sink: TextIO,
    *,
    type_hint: Any = None,
    config: GuraConfig | None = None,
) -> None:
    """Serialize a value as Gura text into a text sink (file, StringIO, ...).

    Nothing is written if serialization fails.
    """
    sink.write(to_string(value, type_hint=type_hint, config=config))


@overload
def from_value[T](tree: Value, target: type[T], *, config: GuraConfig | None = None) -> T: ...


@overload
def from_value(tree: Value, target: Any, *, config: GuraConfig | None = None) -> Any: ...


def from_value(tree: Value, target: Any, *, config: GuraConfig | None = None) -> Any:
    """Deserialize a ValueTree into target.

    Args:
        tree: ValueTree to read
        target: Type annotation of the result (a dataclass, ``dict[str, int]``,
            ``Any``, ...) or a Schema
        config: Limits and strictness (default: GuraConfig())

    Returns:
        Instance of target

    Raises:
        GuraError: On the first structural mismatch, located at its path
    """
    schema = target if isinstance(target, Schema) else schema_for(target)
    deserializer = ValueDeserializer(tree, config=config or DEFAULT_CONFIG)
    try:
        return schema.deserialize(deserializer)
    except GuraError as exc:
        exc.locate(())
        raise


@overload
def from_str[T](text: str, target: type[T], *, config: GuraConfig | None = None) -> T: ...


@overload
def from_str(text: str, target: Any, *, config: GuraConfig | None = None) -> Any: ...


def from_str(text: str, target: Any, *, config: GuraConfig | None = None) -> Any:
    """Parse Gura text and deserialize it into target.

    Raises:
        GuraSyntaxError: If text is not valid Gura
        GuraError: On the first structural mismatch, located at its path
    """
    config = config or DEFAULT_CONFIG
    logger.debug("Deserializing Gura text (%d chars) into %r", len(text), target)
    return from_value(parse(text, config=config), target, config=config)
