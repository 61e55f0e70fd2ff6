"""Partial deserialization example for gura-serde.

Only the keys a dataclass declares are read; the rest of the document is
ignored unless ``GuraConfig(deny_unknown_fields=True)`` is passed.
"""

from dataclasses import dataclass

from gura_serde import U16, GuraConfig, GuraUnknownFieldError, from_str


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
]

# Other objects
key: "value"
why: "to demonstrate, to showcase"
what: "not all Gura doc changes are data structure or code changes"
"""

# Example 1: Lenient (default)
print("=" * 50)
print("Example 1: Reading only tango_singers")
print("=" * 50)

singers = from_str(GURA_TEXT, TangoSingers)
print(singers)

assert singers == TangoSingers(
    tango_singers=[
        TangoSinger("Carlos", "Gardel", 1890),
        TangoSinger("Aníbal", "Troilo", 1914),
    ]
)

# Example 2: Strict
print("\n" + "=" * 50)
print("Example 2: deny_unknown_fields")
print("=" * 50)

try:
    from_str(GURA_TEXT, TangoSingers, config=GuraConfig(deny_unknown_fields=True))
except GuraUnknownFieldError as exc:
    print(exc)
    # Output:
    # error[UNKNOWN_FIELD]: unknown field 'key'
    #   --> at key
    #   = help: Expected one of: 'tango_singers'

print("\n" + "=" * 50)
print("[SUCCESS] All examples completed successfully!")
print("=" * 50)
