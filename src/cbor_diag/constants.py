"""CBOR wire constants, well-known tag numbers and processing limits.

References: RFC 8949 §3 (major types, additional information),
RFC 8949 §3.3 (simple values), RFC 9164 (IP address tags).
"""

# ── Major types (high 3 bits of the initial byte) ────────────
MT_UNSIGNED: int = 0
MT_NEGATIVE: int = 1
MT_BYTES: int = 2
MT_TEXT: int = 3
MT_ARRAY: int = 4
MT_MAP: int = 5
MT_TAG: int = 6
MT_SIMPLE: int = 7

# ── Additional information (low 5 bits) ──────────────────────
# 0..23 are literal values; 24..27 announce 1/2/4/8 following bytes.
AI_ONE_BYTE: int = 24
AI_TWO_BYTES: int = 25
AI_FOUR_BYTES: int = 26
AI_EIGHT_BYTES: int = 27
AI_INDEFINITE: int = 31
AI_RESERVED = frozenset({28, 29, 30})

BREAK: int = 0xFF

U64_MAX: int = 2**64 - 1

# ── Simple values ────────────────────────────────────────────
SIMPLE_FALSE: int = 20
SIMPLE_TRUE: int = 21
SIMPLE_NULL: int = 22
SIMPLE_UNDEFINED: int = 23
# Simple values 24..31 have no valid encoding.
SIMPLE_RESERVED = range(24, 32)

SIMPLE_NAMES = {
    SIMPLE_FALSE: "false",
    SIMPLE_TRUE: "true",
    SIMPLE_NULL: "null",
    SIMPLE_UNDEFINED: "undefined",
}

# ── Tags with built-in meaning ───────────────────────────────
TAG_DATETIME_STRING: int = 0
TAG_DATETIME_EPOCH: int = 1
TAG_POSITIVE_BIGNUM: int = 2
TAG_NEGATIVE_BIGNUM: int = 3
TAG_IPV4: int = 52
TAG_IPV6: int = 54
# Not a registered general purpose tag; only used as an escape for
# application-oriented literals nobody knows how to resolve.
TAG_APPLICATION_LITERAL: int = 999

# ── Processing limits ────────────────────────────────────────
# Nesting beyond this fails with a structured error instead of
# exhausting the interpreter stack.
MAX_DEPTH: int = 200

# ── Diagnostic output layout ─────────────────────────────────
INDENT: int = 2
PRETTY_WIDTH: int = 72
