"""Binary encoder: item tree to CBOR bytes (RFC 8949 §3).

Integers, lengths and tag numbers always use the shortest argument form.
Floats are written in the width they carry, even when a narrower form
would be lossless, so that the width chosen in the source survives.
Strings, arrays and maps that were indefinite-length when decoded or
parsed are written indefinite-length again.
"""

import math
import struct
from typing import Iterable

from .constants import (
    AI_INDEFINITE,
    BREAK,
    MT_ARRAY,
    MT_BYTES,
    MT_MAP,
    MT_NEGATIVE,
    MT_SIMPLE,
    MT_TAG,
    MT_TEXT,
    MT_UNSIGNED,
    SIMPLE_RESERVED,
    U64_MAX,
)
from .errors import ERR_OUT_OF_RANGE, ERR_UNRESOLVED_LITERAL, EncodeError
from .items import (
    ApplicationLiteral,
    Array,
    ByteString,
    Float,
    FloatWidth,
    Item,
    Map,
    NegativeInt,
    Simple,
    Tag,
    TextString,
    UnsignedInt,
)

_FLOAT_FORMATS = {
    FloatWidth.HALF: (25, ">e"),
    FloatWidth.SINGLE: (26, ">f"),
    FloatWidth.DOUBLE: (27, ">d"),
}


def preferred_float_width(value: float) -> FloatWidth:
    """Return the narrowest width that holds ``value`` without loss."""
    if math.isnan(value) or math.isinf(value):
        return FloatWidth.HALF
    for width in (FloatWidth.HALF, FloatWidth.SINGLE):
        fmt = _FLOAT_FORMATS[width][1]
        try:
            if struct.unpack(fmt, struct.pack(fmt, value))[0] == value:
                return width
        except (OverflowError, struct.error):
            continue
    return FloatWidth.DOUBLE


def encode_head(major: int, argument: int) -> bytes:
    """Encode an initial byte plus the shortest argument for ``argument``."""
    if argument < 0 or argument > U64_MAX:
        raise EncodeError(ERR_OUT_OF_RANGE, f"argument {argument} does not fit into 64 bits")
    mt = major << 5
    if argument < 24:
        return bytes([mt | argument])
    if argument <= 0xFF:
        return bytes([mt | 24, argument])
    if argument <= 0xFFFF:
        return bytes([mt | 25]) + struct.pack(">H", argument)
    if argument <= 0xFFFFFFFF:
        return bytes([mt | 26]) + struct.pack(">I", argument)
    return bytes([mt | 27]) + struct.pack(">Q", argument)


def _encode_float(item: Float) -> bytes:
    ai, fmt = _FLOAT_FORMATS[FloatWidth(item.width)]
    value = item.value
    if math.isnan(value):
        # Canonical quiet NaN, independent of the platform's payload.
        value = float("nan")
    try:
        packed = struct.pack(fmt, value)
    except (OverflowError, struct.error) as exc:
        raise EncodeError(
            ERR_OUT_OF_RANGE, f"{value!r} cannot be encoded as {int(item.width)}-bit float"
        ) from exc
    return bytes([(MT_SIMPLE << 5) | ai]) + packed


def _encode_text(value: str) -> bytes:
    try:
        return value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodeError(ERR_OUT_OF_RANGE, "text string is not valid unicode") from exc


def _encode_indefinite(major: int, chunks: Iterable[bytes]) -> bytes:
    parts = [bytes([(major << 5) | AI_INDEFINITE])]
    for chunk in chunks:
        parts.append(encode_head(major, len(chunk)))
        parts.append(chunk)
    parts.append(bytes([BREAK]))
    return b"".join(parts)


def encode_item(item: Item, out: list[bytes]) -> None:
    """Append the encoding of ``item`` to ``out``."""
    if isinstance(item, UnsignedInt):
        out.append(encode_head(MT_UNSIGNED, item.value))
    elif isinstance(item, NegativeInt):
        out.append(encode_head(MT_NEGATIVE, item.magnitude))
    elif isinstance(item, ByteString):
        if item.chunks is not None:
            out.append(_encode_indefinite(MT_BYTES, item.chunks))
        else:
            out.append(encode_head(MT_BYTES, len(item.value)))
            out.append(item.value)
    elif isinstance(item, TextString):
        if item.chunks is not None:
            out.append(_encode_indefinite(MT_TEXT, [_encode_text(c) for c in item.chunks]))
        else:
            raw = _encode_text(item.value)
            out.append(encode_head(MT_TEXT, len(raw)))
            out.append(raw)
    elif isinstance(item, Array):
        if item.indefinite:
            out.append(bytes([(MT_ARRAY << 5) | AI_INDEFINITE]))
        else:
            out.append(encode_head(MT_ARRAY, len(item.items)))
        for child in item.items:
            encode_item(child, out)
        if item.indefinite:
            out.append(bytes([BREAK]))
    elif isinstance(item, Map):
        if item.indefinite:
            out.append(bytes([(MT_MAP << 5) | AI_INDEFINITE]))
        else:
            out.append(encode_head(MT_MAP, len(item.pairs)))
        for key, value in item.pairs:
            encode_item(key, out)
            encode_item(value, out)
        if item.indefinite:
            out.append(bytes([BREAK]))
    elif isinstance(item, Tag):
        out.append(encode_head(MT_TAG, item.tag))
        encode_item(item.item, out)
    elif isinstance(item, Float):
        out.append(_encode_float(item))
    elif isinstance(item, Simple):
        if item.value < 0 or item.value > 0xFF or item.value in SIMPLE_RESERVED:
            raise EncodeError(ERR_OUT_OF_RANGE, f"simple({item.value}) has no encoding")
        out.append(encode_head(MT_SIMPLE, item.value))
    elif isinstance(item, ApplicationLiteral):
        raise EncodeError(
            ERR_UNRESOLVED_LITERAL,
            f"application-oriented literal {item.identifier}'...' was not resolved "
            "into plain CBOR",
        )
    else:
        raise EncodeError(ERR_OUT_OF_RANGE, f"unsupported item type: {type(item).__name__}")


def encode(item: Item) -> bytes:
    """Encode a single item tree to CBOR bytes."""
    out: list[bytes] = []
    encode_item(item, out)
    return b"".join(out)


def encode_sequence(items: Iterable[Item]) -> bytes:
    """Encode items back to back as a CBOR sequence (RFC 8742)."""
    out: list[bytes] = []
    for item in items:
        encode_item(item, out)
    return b"".join(out)
