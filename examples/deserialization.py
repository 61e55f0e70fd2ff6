"""Deserialization example for gura-serde.

Reads an array of objects into a list of dataclasses.
"""

from dataclasses import dataclass

from gura_serde import U16, from_str


@dataclass
class TangoSinger:
    name: str
    surname: str
    year_of_birth: U16


@dataclass
class TangoSingers:
    tango_singers: list[TangoSinger]


GURA_TEXT = """
# This is a Gura document.

# Array of objects
tango_singers: [
    name: "Carlos"
    surname: "Gardel"
    year_of_birth: 1890,

    name: "Aníbal"
    surname: "Troilo"
    year_of_birth: 1914
]"""

print("=" * 50)
print("Example: Array of objects")
print("=" * 50)

singers = from_str(GURA_TEXT, TangoSingers)
for singer in singers.tango_singers:
    print(f"{singer.name} {singer.surname} ({singer.year_of_birth})")
# Output:
# Carlos Gardel (1890)
# Aníbal Troilo (1914)

assert singers == TangoSingers(
    tango_singers=[
        TangoSinger("Carlos", "Gardel", 1890),
        TangoSinger("Aníbal", "Troilo", 1914),
    ]
)

print("\n" + "=" * 50)
print("[SUCCESS] All examples completed successfully!")
print("=" * 50)
