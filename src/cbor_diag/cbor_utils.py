"""Interop between item trees and cbor2's native Python objects.

cbor2 is the recommended package for producing and processing binary CBOR
in applications.  This module converts item trees to the objects cbor2
works with and back, and wraps cbor2's own encoder and decoder.

Conversions ignore semantic tags: a tag always becomes a ``CBORTag``, never
a ``datetime`` or ``ipaddress`` object.
"""

from collections.abc import Mapping
from typing import Any

import cbor2

from .constants import (
    SIMPLE_FALSE,
    SIMPLE_NULL,
    SIMPLE_TRUE,
    SIMPLE_UNDEFINED,
    U64_MAX,
)
from .encoder import preferred_float_width
from .errors import ERR_UNRESOLVED_LITERAL, EncodeError
from .items import (
    ApplicationLiteral,
    Array,
    ByteString,
    Float,
    Item,
    Map,
    NegativeInt,
    Simple,
    Tag,
    TextString,
    UnsignedInt,
    bignum,
    false,
    null,
    true,
    undefined,
)

# Type aliases for CBOR special values
CBORTag = cbor2.CBORTag
CBORSimpleValue = cbor2.CBORSimpleValue
CBORDecodeError = cbor2.CBORDecodeError

_SIMPLE_OBJECTS = {
    SIMPLE_FALSE: False,
    SIMPLE_TRUE: True,
    SIMPLE_NULL: None,
    SIMPLE_UNDEFINED: cbor2.undefined,
}


def encode(obj: Any, canonical: bool = False) -> bytes:
    """Encode an object to CBOR bytes with cbor2.

    Args:
        obj: The object to encode
        canonical: Whether to use canonical encoding (deterministic)

    Returns:
        CBOR-encoded bytes
    """
    return cbor2.dumps(obj, canonical=canonical)


def decode(data: bytes) -> Any:
    """Decode CBOR bytes to an object with cbor2.

    Args:
        data: CBOR-encoded bytes

    Returns:
        The decoded object

    Raises:
        CBORDecodeError: If the data is not valid CBOR
    """
    return cbor2.loads(data)


def _hashable(obj: Any) -> Any:
    """Turn a converted map key into something usable as dict key."""
    if isinstance(obj, list):
        return tuple(_hashable(o) for o in obj)
    if isinstance(obj, dict):
        return cbor2.FrozenDict(obj)
    return obj


def to_python(item: Item) -> Any:
    """Convert an item tree to the objects cbor2 uses.

    Args:
        item: The item tree; it must not contain application-oriented literals

    Returns:
        int, bytes, str, list, dict, float, bool, None, ``cbor2.undefined``,
        ``CBORTag`` or ``CBORSimpleValue``

    Raises:
        EncodeError: If an application-oriented literal is left in the tree
    """
    if isinstance(item, (UnsignedInt, NegativeInt)):
        return item.value
    if isinstance(item, (ByteString, TextString)):
        return item.value
    if isinstance(item, Array):
        return [to_python(child) for child in item.items]
    if isinstance(item, Map):
        # Duplicate keys collapse, the last one wins.
        return {_hashable(to_python(k)): to_python(v) for k, v in item.pairs}
    if isinstance(item, Tag):
        return CBORTag(item.tag, to_python(item.item))
    if isinstance(item, Float):
        return item.value
    if isinstance(item, Simple):
        if item.value in _SIMPLE_OBJECTS:
            return _SIMPLE_OBJECTS[item.value]
        return CBORSimpleValue(item.value)
    if isinstance(item, ApplicationLiteral):
        raise EncodeError(
            ERR_UNRESOLVED_LITERAL,
            f"application-oriented literal {item.identifier}'...' has no Python equivalent",
        )
    raise TypeError(f"unsupported item type: {type(item).__name__}")


def from_python(obj: Any) -> Item:
    """Convert a Python object as produced by cbor2 into an item tree.

    Integers outside the 64-bit argument range become bignum tags, floats
    get their narrowest lossless width.

    Raises:
        TypeError: If the object has no CBOR representation
    """
    # bool is a subclass of int and has to be checked first.
    if isinstance(obj, bool):
        return true() if obj else false()
    if obj is None:
        return null()
    if obj is cbor2.undefined:
        return undefined()
    if isinstance(obj, int):
        if 0 <= obj <= U64_MAX:
            return UnsignedInt(obj)
        if -U64_MAX - 1 <= obj < 0:
            return NegativeInt(-1 - obj)
        return bignum(obj)
    if isinstance(obj, float):
        return Float(obj, preferred_float_width(obj))
    if isinstance(obj, str):
        return TextString(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return ByteString(bytes(obj))
    if isinstance(obj, (list, tuple)):
        return Array([from_python(o) for o in obj])
    if isinstance(obj, Mapping):
        return Map([(from_python(k), from_python(v)) for k, v in obj.items()])
    if isinstance(obj, CBORTag):
        return Tag(obj.tag, from_python(obj.value))
    if isinstance(obj, CBORSimpleValue):
        return Simple(obj.value)
    raise TypeError(f"cannot convert {type(obj).__name__} to a CBOR item")
