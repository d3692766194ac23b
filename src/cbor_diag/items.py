"""In-memory representation of CBOR data items.

One class per kind of item:

    UnsignedInt        major type 0
    NegativeInt        major type 1, stored as the magnitude ``-1 - value``
    ByteString         major type 2
    TextString         major type 3
    Array              major type 4
    Map                major type 5, ordered pairs, duplicates allowed
    Tag                major type 6, owns exactly one inner item
    Float              major type 7, with the width it is encoded in
    Simple             major type 7, false/true/null/undefined/simple(n)
    ApplicationLiteral diagnostic-notation only, ``IDENT'payload'``

Equality is value equality.  Whether a string, array or map was encoded
with indefinite length is kept so it can be reproduced, but it does not
take part in comparisons.
"""

import enum
import math
import re
from dataclasses import dataclass, field
from typing import ClassVar, Optional

from .constants import (
    INDENT,
    PRETTY_WIDTH,
    SIMPLE_FALSE,
    SIMPLE_NAMES,
    SIMPLE_NULL,
    SIMPLE_TRUE,
    SIMPLE_UNDEFINED,
    TAG_NEGATIVE_BIGNUM,
    TAG_POSITIVE_BIGNUM,
)

# Prefixes the parser treats as byte string literals, never as
# application-oriented literals.
BYTE_STRING_PREFIXES = frozenset({"h", "b64", "b32", "h32"})

_IDENTIFIER_RE = re.compile(r"[A-Za-z][A-Za-z0-9]*\Z")


def is_application_identifier(ident: str) -> bool:
    """Return True if ``ident`` can prefix an application-oriented literal."""
    return bool(_IDENTIFIER_RE.match(ident)) and ident not in BYTE_STRING_PREFIXES


class FloatWidth(enum.IntEnum):
    """Encoded size of a floating point value, in bits."""

    HALF = 16
    SINGLE = 32
    DOUBLE = 64


class Item:
    """Base class of all data items."""


@dataclass
class UnsignedInt(Item):
    value: int


@dataclass
class NegativeInt(Item):
    """A negative integer ``-1 - magnitude``.

    Keeping the magnitude rather than the value mirrors the wire format
    and makes the full range down to ``-2**64`` representable.
    """

    magnitude: int

    @property
    def value(self) -> int:
        return -1 - self.magnitude


@dataclass
class ByteString(Item):
    """A byte string.

    ``chunks`` is None for a definite-length string; for an
    indefinite-length one it lists the chunks ``value`` is the
    concatenation of.
    """

    value: bytes
    chunks: Optional[list[bytes]] = field(default=None, compare=False)

    @property
    def indefinite(self) -> bool:
        return self.chunks is not None


@dataclass
class TextString(Item):
    """A UTF-8 text string; ``chunks`` as for ByteString."""

    value: str
    chunks: Optional[list[str]] = field(default=None, compare=False)

    @property
    def indefinite(self) -> bool:
        return self.chunks is not None


@dataclass
class Array(Item):
    items: list[Item] = field(default_factory=list)
    indefinite: bool = field(default=False, compare=False)


@dataclass
class Map(Item):
    pairs: list[tuple[Item, Item]] = field(default_factory=list)
    indefinite: bool = field(default=False, compare=False)


@dataclass
class Tag(Item):
    tag: int
    item: Item


@dataclass(eq=False)
class Float(Item):
    value: float
    width: FloatWidth = FloatWidth.DOUBLE

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Float):
            return NotImplemented
        if self.width != other.width:
            return False
        if math.isnan(self.value):
            return math.isnan(other.value)
        # 0.0 == -0.0, but they are distinct CBOR values
        return self.value == other.value and math.copysign(1.0, self.value) == math.copysign(
            1.0, other.value
        )


@dataclass
class Simple(Item):
    """A simple value; 20..23 are false, true, null and undefined."""

    value: int

    @property
    def name(self) -> Optional[str]:
        return SIMPLE_NAMES.get(self.value)


def false() -> Simple:
    return Simple(SIMPLE_FALSE)


def true() -> Simple:
    return Simple(SIMPLE_TRUE)


def null() -> Simple:
    return Simple(SIMPLE_NULL)


def undefined() -> Simple:
    return Simple(SIMPLE_UNDEFINED)


@dataclass
class ApplicationLiteral(Item):
    """An application-oriented literal such as ``DT'1970-01-01T00:00:00Z'``.

    Only diagnostic notation can express these.  They have to be rewritten
    into plain CBOR (see ``cbor_diag.application``) before encoding.
    """

    identifier: str
    payload: str

    def __post_init__(self) -> None:
        if not is_application_identifier(self.identifier):
            raise ValueError(
                f"{self.identifier!r} is not usable as application-oriented literal prefix"
            )


def integer(value: int) -> Item:
    """Build UnsignedInt or NegativeInt depending on the sign of ``value``."""
    if value >= 0:
        return UnsignedInt(value)
    return NegativeInt(-1 - value)


def bignum(value: int) -> Tag:
    """Represent an integer of any size as bignum tag 2 or 3 (RFC 8949 §3.4.3)."""
    if value >= 0:
        tag, magnitude = TAG_POSITIVE_BIGNUM, value
    else:
        tag, magnitude = TAG_NEGATIVE_BIGNUM, -1 - value
    return Tag(tag, ByteString(magnitude.to_bytes((magnitude.bit_length() + 7) // 8, "big")))


@dataclass(frozen=True)
class DelimiterPolicy:
    """How the serializer lays out diagnostic notation.

    ``indent`` None discards all optional whitespace.  Otherwise containers
    that do not fit into ``width`` characters are broken over several
    lines, one element per line, indented by ``indent`` spaces per level.
    """

    DISCARD_ALL: ClassVar["DelimiterPolicy"]

    indent: Optional[int] = INDENT
    width: int = PRETTY_WIDTH

    @classmethod
    def indented(cls, indent: int = INDENT, width: int = PRETTY_WIDTH) -> "DelimiterPolicy":
        return cls(indent=indent, width=width)

    @property
    def compact(self) -> bool:
        return self.indent is None


DelimiterPolicy.DISCARD_ALL = DelimiterPolicy(indent=None)
