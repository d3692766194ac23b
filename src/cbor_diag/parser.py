"""Recursive-descent parser for CBOR diagnostic notation.

Covers RFC 8949 §8 and Appendix G plus the application-oriented literals
of draft-ietf-cbor-edn-literals:

    numbers        1, -1, 0x1f, 0o17, 0b101, 1.5, 1e3, 1.5_1, Infinity, NaN
    byte strings   h'00ff', b64'AP8', b32'AD7Q', h32'03VG', 'text', <<1, 2>>
    text strings   "with \\n escapes"
    concatenation  "a" "b", h'00' + h'ff'
    containers     [1, 2], [_ 1, 2], {1: 2}, {_ 1: 2}
    indefinite     (_ h'00', h'ff'), (_ "a", "b"), ''_, ""_
    tags           1(0)
    simple values  false, true, null, undefined, simple(99)
    literals       DT'1970-01-01T00:00:00Z', anything'else'

Whitespace, ``/ block comments /`` and ``# line comments`` are skipped
between tokens.  Application-oriented literals are kept as
``ApplicationLiteral`` items; resolving them is left to the rewrite rules
in ``cbor_diag.application``.
"""

import base64
import binascii
import re
from typing import Optional, Union

from .application import all_aol_to_item
from .constants import MAX_DEPTH, SIMPLE_RESERVED, U64_MAX
from .encoder import encode_sequence, preferred_float_width
from .errors import (
    ERR_DEPTH_EXCEEDED,
    ERR_INVALID_BYTES,
    ERR_INVALID_ESCAPE,
    ERR_INVALID_NUMBER,
    ERR_INVALID_TAG,
    ERR_MIXED_CONCATENATION,
    ERR_UNEXPECTED_EOF,
    ERR_UNEXPECTED_TOKEN,
    ERR_UNTERMINATED,
    CBORDiagError,
    ParseError,
)
from .items import (
    BYTE_STRING_PREFIXES,
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
    bignum,
    false,
    null,
    true,
    undefined,
)
from .visitor import visit_application_literals

_NUMBER_RE = re.compile(
    r"""
    (?P<sign>-)?
    (?:
        0[xX](?P<hex>[0-9a-fA-F]+)
      | 0[oO](?P<oct>[0-7]+)
      | 0[bB](?P<bin>[01]+)
      | (?P<dec>[0-9]+(?P<frac>\.[0-9]+)?(?P<exp>[eE][+-]?[0-9]+)?)
    )
    (?:_(?P<ind>[0-9]))?
    """,
    re.VERBOSE,
)

_IDENT_RE = re.compile(r"[A-Za-z][A-Za-z0-9]*")
_UINT_RE = re.compile(r"[0-9]+")

_ESCAPES = {
    '"': '"',
    "'": "'",
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

_FLOAT_INDICATORS = {1: FloatWidth.HALF, 2: FloatWidth.SINGLE, 3: FloatWidth.DOUBLE}

_KEYWORDS = {
    "false": false,
    "true": true,
    "null": null,
    "undefined": undefined,
}

# A parsed string segment: (is_text, value).
_Segment = tuple[bool, Union[str, bytes]]


def _decode_prefixed(prefix: str, body: str) -> bytes:
    """Decode the content of h'', b64'', b32'' and h32'' literals."""
    if prefix == "h":
        # Comments are allowed inside hex literals.
        cleaned = re.sub(r"/[^/]*/|#[^\n]*", "", body)
        return bytes.fromhex("".join(cleaned.split()))
    compact = "".join(body.split())
    if prefix == "b64":
        compact = compact.replace("-", "+").replace("_", "/")
        compact = compact.rstrip("=")
        compact += "=" * (-len(compact) % 4)
        return base64.b64decode(compact, validate=True)
    compact = compact.upper().rstrip("=")
    compact += "=" * (-len(compact) % 8)
    if prefix == "b32":
        return base64.b32decode(compact)
    return base64.b32hexdecode(compact)


class _Parser:
    """Parser state: the input text and the current position in it."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    # ── Low level helpers ────────────────────────────────────

    def error(self, code: str, message: str, offset: Optional[int] = None) -> ParseError:
        return ParseError(code, message, self.pos if offset is None else offset)

    def peek(self, n: int = 1) -> str:
        return self.text[self.pos:self.pos + n]

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def skip_ws(self) -> None:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch in " \t\r\n":
                self.pos += 1
            elif ch == "/":
                end = text.find("/", self.pos + 1)
                if end < 0:
                    raise self.error(ERR_UNTERMINATED, "unterminated comment")
                self.pos = end + 1
            elif ch == "#":
                end = text.find("\n", self.pos)
                self.pos = len(text) if end < 0 else end + 1
            else:
                return

    def expect(self, token: str) -> None:
        self.skip_ws()
        if self.at_end():
            raise self.error(ERR_UNEXPECTED_EOF, f"unexpected end of input, expected {token!r}")
        if not self.text.startswith(token, self.pos):
            raise self.error(
                ERR_UNEXPECTED_TOKEN, f"expected {token!r}, found {self.text[self.pos]!r}"
            )
        self.pos += len(token)

    # ── Items ────────────────────────────────────────────────

    def parse_item(self, depth: int = 0) -> Item:
        if depth > MAX_DEPTH:
            raise self.error(ERR_DEPTH_EXCEEDED, f"nesting deeper than {MAX_DEPTH}")
        self.skip_ws()
        if self.at_end():
            raise self.error(ERR_UNEXPECTED_EOF, "unexpected end of input, expected an item")

        ch = self.text[self.pos]
        if ch == "[":
            return self.parse_array(depth)
        if ch == "{":
            return self.parse_map(depth)
        if ch == "(" and self.peek(2) == "(_":
            return self.parse_indefinite_string()
        if ch in "\"'" or self.peek(2) == "<<":
            return self.parse_string_chain(depth)
        if ch == "-" or ch in "0123456789":
            if self.text.startswith("-Infinity", self.pos):
                self.pos += len("-Infinity")
                return self.float_with_indicator(float("-inf"))
            return self.parse_number(depth)
        if ch.isascii() and ch.isalpha():
            return self.parse_word(depth)
        raise self.error(ERR_UNEXPECTED_TOKEN, f"unexpected character {ch!r}")

    def parse_array(self, depth: int) -> Array:
        start = self.pos
        self.pos += 1
        indefinite = self.parse_indefinite_marker()
        items: list[Item] = []
        while True:
            self.skip_ws()
            if self.at_end():
                raise self.error(ERR_UNEXPECTED_EOF, "unterminated array", start)
            if self.peek() == "]":
                self.pos += 1
                return Array(items, indefinite=indefinite)
            items.append(self.parse_item(depth + 1))
            self.parse_separator("]", start)

    def parse_map(self, depth: int) -> Map:
        start = self.pos
        self.pos += 1
        indefinite = self.parse_indefinite_marker()
        pairs: list[tuple[Item, Item]] = []
        while True:
            self.skip_ws()
            if self.at_end():
                raise self.error(ERR_UNEXPECTED_EOF, "unterminated map", start)
            if self.peek() == "}":
                self.pos += 1
                return Map(pairs, indefinite=indefinite)
            key = self.parse_item(depth + 1)
            self.expect(":")
            value = self.parse_item(depth + 1)
            pairs.append((key, value))
            self.parse_separator("}", start)

    def parse_separator(self, closer: str, start: int) -> None:
        """After an element: consume a comma, or leave the closer in place."""
        self.skip_ws()
        if self.at_end():
            raise self.error(ERR_UNEXPECTED_EOF, f"unexpected end of input, expected {closer!r}", start)
        ch = self.text[self.pos]
        if ch == ",":
            self.pos += 1
        elif ch != closer:
            raise self.error(ERR_UNEXPECTED_TOKEN, f"expected ',' or {closer!r}, found {ch!r}")

    def parse_indefinite_marker(self) -> bool:
        """Consume the ``_`` that follows ``[``, ``{`` or ``(`` for indefinite length."""
        if self.peek() == "_":
            self.pos += 1
            return True
        return False

    def parse_indefinite_string(self) -> Item:
        start = self.pos
        self.pos += 2
        chunks: list[_Segment] = []
        while True:
            self.skip_ws()
            if self.at_end():
                raise self.error(ERR_UNEXPECTED_EOF, "unterminated indefinite-length string", start)
            if self.peek() == ")":
                self.pos += 1
                break
            chunk_start = self.pos
            segment = self.parse_segment()
            if segment is None:
                raise self.error(ERR_UNEXPECTED_TOKEN, "expected a string chunk")
            if chunks and chunks[0][0] != segment[0]:
                raise self.error(
                    ERR_MIXED_CONCATENATION,
                    "chunks of an indefinite-length string must all be text or all bytes",
                    chunk_start,
                )
            chunks.append(segment)
            self.parse_separator(")", start)
        if not chunks:
            raise self.error(
                ERR_UNEXPECTED_TOKEN, "empty indefinite-length string must be written ''_ or \"\"_", start
            )
        if chunks[0][0]:
            texts = [str(value) for _, value in chunks]
            return TextString("".join(texts), chunks=texts)
        raws = [bytes(value) for _, value in chunks]  # type: ignore[arg-type]
        return ByteString(b"".join(raws), chunks=raws)

    # ── Strings ──────────────────────────────────────────────

    def parse_string_chain(self, depth: int) -> Item:
        """Parse one string or several concatenated ones of the same kind."""
        if self.peek(2) in ("''", '""') and self.text.startswith("_", self.pos + 2):
            is_text = self.peek() == '"'
            self.pos += 3
            if is_text:
                return TextString("", chunks=[])
            return ByteString(b"", chunks=[])
        first = self.parse_segment(depth)
        assert first is not None
        segments = [first]
        while True:
            save = self.pos
            self.skip_ws()
            explicit = False
            if self.peek() == "+":
                self.pos += 1
                self.skip_ws()
                explicit = True
            seg_start = self.pos
            segment = self.parse_segment(depth)
            if segment is None:
                if explicit:
                    raise self.error(ERR_UNEXPECTED_TOKEN, "expected a string after '+'")
                self.pos = save
                break
            if segment[0] != first[0]:
                raise self.error(
                    ERR_MIXED_CONCATENATION,
                    "cannot concatenate text and byte strings",
                    seg_start,
                )
            segments.append(segment)
        if first[0]:
            return TextString("".join(str(value) for _, value in segments))
        return ByteString(b"".join(bytes(value) for _, value in segments))  # type: ignore[arg-type]

    def parse_segment(self, depth: int = 0) -> Optional[_Segment]:
        """Parse a single string literal, or return None if none starts here."""
        ch = self.peek()
        if ch == '"':
            return True, self.parse_quoted('"')
        if ch == "'":
            return False, self.parse_quoted("'").encode("utf-8")
        if self.peek(2) == "<<":
            return False, self.parse_embedded(depth)
        match = _IDENT_RE.match(self.text, self.pos)
        if match and match.group() in BYTE_STRING_PREFIXES and self.text.startswith(
            "'", match.end()
        ):
            start = self.pos
            self.pos = match.end()
            body = self.parse_quoted("'")
            try:
                return False, _decode_prefixed(match.group(), body)
            except (ValueError, binascii.Error) as exc:
                raise self.error(
                    ERR_INVALID_BYTES, f"invalid {match.group()}'' byte string: {exc}", start
                ) from exc
        return None

    def parse_quoted(self, quote: str) -> str:
        """Parse a quoted literal with JSON-style escapes; pos is at the quote."""
        start = self.pos
        self.pos += 1
        text = self.text
        out: list[str] = []
        while True:
            if self.pos >= len(text):
                raise self.error(ERR_UNTERMINATED, "unterminated string", start)
            ch = text[self.pos]
            if ch == quote:
                self.pos += 1
                return "".join(out)
            if ch == "\\":
                out.append(self.parse_escape())
            else:
                out.append(ch)
                self.pos += 1

    def parse_escape(self) -> str:
        start = self.pos
        self.pos += 1
        if self.at_end():
            raise self.error(ERR_UNTERMINATED, "unterminated escape sequence", start)
        ch = self.text[self.pos]
        self.pos += 1
        if ch in _ESCAPES:
            return _ESCAPES[ch]
        if ch != "u":
            raise self.error(ERR_INVALID_ESCAPE, f"invalid escape sequence \\{ch}", start)
        code = self.parse_hex4(start)
        if 0xD800 <= code <= 0xDBFF:
            if self.peek(2) != "\\u":
                raise self.error(ERR_INVALID_ESCAPE, "high surrogate without low surrogate", start)
            self.pos += 2
            low = self.parse_hex4(start)
            if not 0xDC00 <= low <= 0xDFFF:
                raise self.error(ERR_INVALID_ESCAPE, "high surrogate without low surrogate", start)
            code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
        elif 0xDC00 <= code <= 0xDFFF:
            raise self.error(ERR_INVALID_ESCAPE, "unpaired low surrogate", start)
        return chr(code)

    def parse_hex4(self, start: int) -> int:
        digits = self.peek(4)
        if len(digits) != 4 or not all(c in "0123456789abcdefABCDEF" for c in digits):
            raise self.error(ERR_INVALID_ESCAPE, "\\u must be followed by four hex digits", start)
        self.pos += 4
        return int(digits, 16)

    def parse_embedded(self, depth: int) -> bytes:
        """Parse ``<< item, ... >>`` into the encoded CBOR sequence."""
        start = self.pos
        self.pos += 2
        items: list[Item] = []
        while True:
            self.skip_ws()
            if self.at_end():
                raise self.error(ERR_UNEXPECTED_EOF, "unterminated embedded CBOR", start)
            if self.peek(2) == ">>":
                self.pos += 2
                break
            items.append(self.parse_item(depth + 1))
            self.skip_ws()
            if self.peek() == ",":
                self.pos += 1
            elif self.peek(2) != ">>" and not self.at_end():
                raise self.error(
                    ERR_UNEXPECTED_TOKEN, f"expected ',' or '>>', found {self.peek()!r}"
                )
        items = [visit_application_literals(item, all_aol_to_item) for item in items]
        try:
            return encode_sequence(items)
        except CBORDiagError as exc:
            raise self.error(exc.code, f"cannot embed CBOR: {exc.message}", start) from exc

    # ── Numbers, tags and words ──────────────────────────────

    def parse_number(self, depth: int) -> Item:
        start = self.pos
        match = _NUMBER_RE.match(self.text, self.pos)
        if not match:
            raise self.error(ERR_INVALID_NUMBER, "invalid number")
        self.pos = match.end()
        negative = match.group("sign") is not None
        indicator = match.group("ind")

        if match.group("frac") or match.group("exp"):
            value = float(match.group("dec"))
            return self.float_with_indicator(-value if negative else value, indicator, start)

        if match.group("hex") is not None:
            magnitude = int(match.group("hex"), 16)
        elif match.group("oct") is not None:
            magnitude = int(match.group("oct"), 8)
        elif match.group("bin") is not None:
            magnitude = int(match.group("bin"), 2)
        else:
            magnitude = int(match.group("dec"))
        if indicator is not None and int(indicator) > 3:
            raise self.error(ERR_INVALID_NUMBER, f"invalid encoding indicator _{indicator}", start)

        save = self.pos
        self.skip_ws()
        if self.peek() == "(":
            if negative or indicator is not None:
                raise self.error(
                    ERR_INVALID_TAG, "tag number must be a plain non-negative integer", start
                )
            if magnitude > U64_MAX:
                raise self.error(ERR_INVALID_TAG, f"tag number {magnitude} exceeds 64 bits", start)
            self.pos += 1
            inner = self.parse_item(depth + 1)
            self.expect(")")
            return Tag(magnitude, inner)
        self.pos = save

        value = -magnitude if negative else magnitude
        if value >= 0:
            return UnsignedInt(value) if value <= U64_MAX else bignum(value)
        if -1 - value <= U64_MAX:
            return NegativeInt(-1 - value)
        return bignum(value)

    def float_with_indicator(
        self, value: float, indicator: Optional[str] = None, start: Optional[int] = None
    ) -> Float:
        if indicator is None and self.peek() == "_" and self.peek(2)[1:].isdigit():
            indicator = self.text[self.pos + 1]
            self.pos += 2
        if indicator is None:
            return Float(value, preferred_float_width(value))
        if int(indicator) not in _FLOAT_INDICATORS:
            raise self.error(
                ERR_INVALID_NUMBER, f"invalid float encoding indicator _{indicator}", start
            )
        return Float(value, _FLOAT_INDICATORS[int(indicator)])

    def parse_word(self, depth: int) -> Item:
        start = self.pos
        match = _IDENT_RE.match(self.text, self.pos)
        assert match is not None
        word = match.group()

        if self.text.startswith("'", match.end()):
            if word in BYTE_STRING_PREFIXES:
                return self.parse_string_chain(depth)
            self.pos = match.end()
            payload = self.parse_quoted("'")
            return ApplicationLiteral(word, payload)

        self.pos = match.end()
        if word in _KEYWORDS:
            return _KEYWORDS[word]()
        if word == "Infinity":
            return self.float_with_indicator(float("inf"))
        if word == "NaN":
            return self.float_with_indicator(float("nan"))
        if word == "simple":
            self.expect("(")
            self.skip_ws()
            number = _UINT_RE.match(self.text, self.pos)
            if not number:
                raise self.error(ERR_INVALID_NUMBER, "simple() takes an integer 0..255")
            value = int(number.group())
            if value > 0xFF:
                raise self.error(ERR_INVALID_NUMBER, f"simple({value}) out of range", start)
            if value in SIMPLE_RESERVED:
                raise self.error(ERR_INVALID_NUMBER, f"simple({value}) has no encoding", start)
            self.pos = number.end()
            self.expect(")")
            return Simple(value)
        raise self.error(ERR_UNEXPECTED_TOKEN, f"unknown keyword {word!r}", start)


def parse(text: str) -> Item:
    """Parse diagnostic notation holding exactly one item."""
    parser = _Parser(text)
    item = parser.parse_item()
    parser.skip_ws()
    if not parser.at_end():
        raise parser.error(
            ERR_UNEXPECTED_TOKEN, f"unexpected {parser.text[parser.pos]!r} after item"
        )
    return item


def parse_sequence(text: str) -> list[Item]:
    """Parse a comma separated sequence of items; the empty text is the empty sequence."""
    parser = _Parser(text)
    items: list[Item] = []
    parser.skip_ws()
    while not parser.at_end():
        items.append(parser.parse_item())
        parser.skip_ws()
        if parser.at_end():
            break
        parser.expect(",")
        parser.skip_ws()
    return items
