"""Error types raised by the diagnostic-notation and binary codecs.

Every error carries a machine readable ``code`` (one of the ``ERR_*``
strings below) and, where known, the ``offset`` into the input: a
character offset for diagnostic text, a byte offset for CBOR input.

All of them are ``ValueError`` subclasses, so code written against the
plain ``ValueError`` contract of ``diag2cbor``/``cbor2diag`` keeps working.
"""

from typing import Optional

# ── Parse errors (diagnostic notation) ───────────────────────
ERR_UNEXPECTED_EOF: str = "unexpected_eof"
ERR_UNEXPECTED_TOKEN: str = "unexpected_token"
ERR_UNTERMINATED: str = "unterminated"
ERR_INVALID_ESCAPE: str = "invalid_escape"
ERR_INVALID_NUMBER: str = "invalid_number"
ERR_INVALID_TAG: str = "invalid_tag"
ERR_INVALID_BYTES: str = "invalid_bytes"
ERR_MIXED_CONCATENATION: str = "mixed_concatenation"
ERR_DEPTH_EXCEEDED: str = "depth_exceeded"

# ── Decode errors (binary CBOR) ──────────────────────────────
# ERR_UNEXPECTED_EOF and ERR_DEPTH_EXCEEDED are shared with parsing.
ERR_RESERVED_AI: str = "reserved_additional_info"
ERR_TRAILING_DATA: str = "trailing_data"
ERR_INVALID_UTF8: str = "invalid_utf8"
ERR_INVALID_INDEFINITE: str = "invalid_indefinite"
ERR_INVALID_SIMPLE: str = "invalid_simple"

# ── Encode errors ────────────────────────────────────────────
ERR_UNRESOLVED_LITERAL: str = "unresolved_application_literal"
ERR_OUT_OF_RANGE: str = "out_of_range"

# ── Visitor errors ───────────────────────────────────────────
ERR_REWRITE_FAILED: str = "rewrite_failed"


class CBORDiagError(ValueError):
    """Base class for all conversion errors.

    Attributes:
        code: One of the ``ERR_*`` constants of this module
        message: Human readable description without the offset
        offset: Position in the input the error refers to, if known
    """

    def __init__(self, code: str, message: str = "", offset: Optional[int] = None) -> None:
        self.code = code
        self.message = message or code
        self.offset = offset
        if offset is None:
            super().__init__(self.message)
        else:
            super().__init__(f"{self.message} (at offset {offset})")


class ParseError(CBORDiagError):
    """Malformed diagnostic notation."""


class DecodeError(CBORDiagError):
    """Malformed binary CBOR."""


class EncodeError(CBORDiagError):
    """An item tree that cannot be expressed in binary CBOR."""


class VisitorError(CBORDiagError):
    """A rewrite rule found a node it is responsible for, but malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(ERR_REWRITE_FAILED, message)
