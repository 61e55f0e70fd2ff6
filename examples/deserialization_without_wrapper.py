"""Deserializing without a wrapper dataclass.

A ``dict[str, T]`` target reads a document whose single key holds the
object of interest, with no dataclass for the outer level.
"""

from dataclasses import dataclass

from gura_serde import U16, from_str


@dataclass
class TangoSinger:
    name: str
    surname: str
    year_of_birth: U16


GURA_TEXT = """
tango_singer:
    name: "Carlos"
    surname: "Gardel"
    year_of_birth: 1890
"""

print("=" * 50)
print("Example: dict[str, TangoSinger]")
print("=" * 50)

by_key = from_str(GURA_TEXT, dict[str, TangoSinger])
print(by_key["tango_singer"])
# Output: TangoSinger(name='Carlos', surname='Gardel', year_of_birth=1890)

assert by_key["tango_singer"] == TangoSinger("Carlos", "Gardel", 1890)

print("\n" + "=" * 50)
print("[SUCCESS] All examples completed successfully!")
print("=" * 50)
