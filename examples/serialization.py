"""Serialization example for gura-serde.

Dataclasses become Gura objects, lists become arrays, and width
annotations (U16, U32, ...) are checked before anything is written.
"""

import io
from dataclasses import dataclass

from gura_serde import U16, U32, GuraError, to_string, to_writer


@dataclass
class Database:
    ip: str
    port: list[U16]
    connection_max: U32
    enabled: bool


@dataclass
class Config:
    database: Database


# Example 1: Nested struct to text
print("=" * 50)
print("Example 1: Struct to Gura text")
print("=" * 50)

config = Config(
    database=Database(
        ip="192.168.1.1",
        port=[8001, 8002, 8003],
        connection_max=5000,
        enabled=False,
    )
)

text = to_string(config)
print(text)
# Output:
# database:
#     ip: "192.168.1.1"
#     port: [8001, 8002, 8003]
#     connection_max: 5000
#     enabled: false

assert text == (
    "database:\n"
    '    ip: "192.168.1.1"\n'
    "    port: [8001, 8002, 8003]\n"
    "    connection_max: 5000\n"
    "    enabled: false"
)

# Example 2: Writing into a sink
print("\n" + "=" * 50)
print("Example 2: Writing into a file-like sink")
print("=" * 50)

sink = io.StringIO()
to_writer(config, sink)
print(f"{len(sink.getvalue())} characters written")

# Example 3: Width violations are reported, never truncated
print("\n" + "=" * 50)
print("Example 3: Out-of-range port")
print("=" * 50)

broken = Config(database=Database("10.0.0.1", [80, 70000], 10, True))
try:
    to_string(broken)
except GuraError as exc:
    print(exc)
    # Output:
    # error[INTEGER_OUT_OF_RANGE]: invalid value: integer 70000 is out of range for u16
    #   --> at database.port[1]
    #   ...

print("\n" + "=" * 50)
print("[SUCCESS] All examples completed successfully!")
print("=" * 50)
