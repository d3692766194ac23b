"""Binary decoder: CBOR bytes to item tree (RFC 8949 §3).

Decoding works on the whole input buffer.  Each helper takes the buffer
and an offset and returns the decoded value together with the offset
just past it, so a failure can always report where it happened.
"""

import struct
from typing import Optional

from .constants import (
    AI_EIGHT_BYTES,
    AI_FOUR_BYTES,
    AI_INDEFINITE,
    AI_ONE_BYTE,
    AI_RESERVED,
    AI_TWO_BYTES,
    BREAK,
    MAX_DEPTH,
    MT_ARRAY,
    MT_BYTES,
    MT_MAP,
    MT_NEGATIVE,
    MT_SIMPLE,
    MT_TAG,
    MT_TEXT,
    MT_UNSIGNED,
)
from .errors import (
    ERR_DEPTH_EXCEEDED,
    ERR_INVALID_INDEFINITE,
    ERR_INVALID_SIMPLE,
    ERR_INVALID_UTF8,
    ERR_RESERVED_AI,
    ERR_TRAILING_DATA,
    ERR_UNEXPECTED_EOF,
    DecodeError,
)
from .items import (
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

_ARGUMENT_SIZES = {
    AI_ONE_BYTE: 1,
    AI_TWO_BYTES: 2,
    AI_FOUR_BYTES: 4,
    AI_EIGHT_BYTES: 8,
}


def decode_half(raw: bytes) -> float:
    """Decode an IEEE 754 binary16 value (RFC 8949 Appendix D)."""
    return struct.unpack(">e", raw)[0]


def _take(buf: bytes, off: int, n: int, what: str) -> tuple[bytes, int]:
    if off + n > len(buf):
        raise DecodeError(
            ERR_UNEXPECTED_EOF,
            f"truncated {what}: need {n} bytes, {len(buf) - off} left",
            off,
        )
    return buf[off:off + n], off + n


def _read_argument(buf: bytes, off: int, ai: int, start: int) -> tuple[Optional[int], int]:
    """Read the argument announced by ``ai``; None means indefinite length."""
    if ai < AI_ONE_BYTE:
        return ai, off
    if ai in AI_RESERVED:
        raise DecodeError(ERR_RESERVED_AI, f"reserved additional information {ai}", start)
    if ai == AI_INDEFINITE:
        return None, off
    raw, off = _take(buf, off, _ARGUMENT_SIZES[ai], "argument")
    return int.from_bytes(raw, "big"), off


def _decode_text(raw: bytes, off: int) -> str:
    try:
        return raw.decode("utf-8", errors="strict")
    except UnicodeDecodeError as exc:
        raise DecodeError(ERR_INVALID_UTF8, f"invalid utf-8 in text string: {exc.reason}", off) from exc


def _decode_chunks(buf: bytes, off: int, major: int, start: int) -> tuple[list[bytes], int]:
    """Collect the definite-length chunks of an indefinite-length string."""
    chunks: list[bytes] = []
    while True:
        if off >= len(buf):
            raise DecodeError(ERR_UNEXPECTED_EOF, "missing break in indefinite-length string", start)
        if buf[off] == BREAK:
            return chunks, off + 1
        ib = buf[off]
        if ib >> 5 != major or ib & 0x1F == AI_INDEFINITE:
            raise DecodeError(
                ERR_INVALID_INDEFINITE,
                "chunk of indefinite-length string must be a definite string of the same type",
                off,
            )
        length, next_off = _read_argument(buf, off + 1, ib & 0x1F, off)
        assert length is not None
        chunk, next_off = _take(buf, next_off, length, "string chunk")
        if major == MT_TEXT:
            # Chunks are validated individually: a code point may not span two.
            _decode_text(chunk, off)
        chunks.append(chunk)
        off = next_off


def decode_one(buf: bytes, off: int, depth: int = 0) -> tuple[Item, int]:
    """Decode one data item starting at ``off``."""
    if depth > MAX_DEPTH:
        raise DecodeError(ERR_DEPTH_EXCEEDED, f"nesting deeper than {MAX_DEPTH}", off)
    if off >= len(buf):
        raise DecodeError(ERR_UNEXPECTED_EOF, "unexpected end of input", off)

    start = off
    ib = buf[off]
    major, ai = ib >> 5, ib & 0x1F
    off += 1

    if major == MT_SIMPLE:
        return _decode_major7(buf, off, ai, start)

    arg, off = _read_argument(buf, off, ai, start)

    if major == MT_UNSIGNED or major == MT_NEGATIVE or major == MT_TAG:
        if arg is None:
            raise DecodeError(
                ERR_INVALID_INDEFINITE, f"major type {major} cannot be indefinite-length", start
            )
        if major == MT_UNSIGNED:
            return UnsignedInt(arg), off
        if major == MT_NEGATIVE:
            return NegativeInt(arg), off
        inner, off = decode_one(buf, off, depth + 1)
        return Tag(arg, inner), off

    if major == MT_BYTES:
        if arg is None:
            chunks, off = _decode_chunks(buf, off, major, start)
            return ByteString(b"".join(chunks), chunks=chunks), off
        raw, off = _take(buf, off, arg, "byte string")
        return ByteString(raw), off

    if major == MT_TEXT:
        if arg is None:
            chunks, off = _decode_chunks(buf, off, major, start)
            texts = [c.decode("utf-8") for c in chunks]
            return TextString("".join(texts), chunks=texts), off
        raw, off = _take(buf, off, arg, "text string")
        return TextString(_decode_text(raw, start)), off

    if major == MT_ARRAY:
        items: list[Item] = []
        if arg is None:
            while True:
                if off < len(buf) and buf[off] == BREAK:
                    return Array(items, indefinite=True), off + 1
                item, off = decode_one(buf, off, depth + 1)
                items.append(item)
        for _ in range(arg):
            item, off = decode_one(buf, off, depth + 1)
            items.append(item)
        return Array(items), off

    # MT_MAP
    pairs: list[tuple[Item, Item]] = []
    if arg is None:
        while True:
            if off < len(buf) and buf[off] == BREAK:
                return Map(pairs, indefinite=True), off + 1
            key, off = decode_one(buf, off, depth + 1)
            value, off = decode_one(buf, off, depth + 1)
            pairs.append((key, value))
    for _ in range(arg):
        key, off = decode_one(buf, off, depth + 1)
        value, off = decode_one(buf, off, depth + 1)
        pairs.append((key, value))
    return Map(pairs), off


def _decode_major7(buf: bytes, off: int, ai: int, start: int) -> tuple[Item, int]:
    if ai < AI_ONE_BYTE:
        return Simple(ai), off
    if ai == AI_ONE_BYTE:
        raw, off = _take(buf, off, 1, "simple value")
        if raw[0] < 32:
            raise DecodeError(
                ERR_INVALID_SIMPLE, f"simple value {raw[0]} must use the one-byte form", start
            )
        return Simple(raw[0]), off
    if ai == AI_TWO_BYTES:
        raw, off = _take(buf, off, 2, "half-precision float")
        return Float(decode_half(raw), FloatWidth.HALF), off
    if ai == AI_FOUR_BYTES:
        raw, off = _take(buf, off, 4, "single-precision float")
        return Float(struct.unpack(">f", raw)[0], FloatWidth.SINGLE), off
    if ai == AI_EIGHT_BYTES:
        raw, off = _take(buf, off, 8, "double-precision float")
        return Float(struct.unpack(">d", raw)[0], FloatWidth.DOUBLE), off
    if ai in AI_RESERVED:
        raise DecodeError(ERR_RESERVED_AI, f"reserved additional information {ai}", start)
    raise DecodeError(ERR_INVALID_INDEFINITE, "break outside of indefinite-length item", start)


def decode(buf: bytes) -> Item:
    """Decode exactly one data item; anything after it is an error."""
    item, off = decode_one(buf, 0)
    if off != len(buf):
        raise DecodeError(
            ERR_TRAILING_DATA, f"{len(buf) - off} bytes of trailing data after item", off
        )
    return item


def decode_sequence(buf: bytes) -> list[Item]:
    """Decode a CBOR sequence (RFC 8742): zero or more items back to back."""
    items: list[Item] = []
    off = 0
    while off < len(buf):
        item, off = decode_one(buf, off)
        items.append(item)
    return items
