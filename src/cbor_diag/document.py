"""Top-level wrappers tying an item tree to its textual layout.

``StandaloneItem`` holds exactly one item, ``Sequence`` zero or more
(a CBOR sequence, RFC 8742).  Both are created by a parse entry point,
optionally rewritten by visitors, and consumed by a serialize entry point.
"""

from dataclasses import dataclass, field

from . import decoder, encoder, parser, serializer
from .items import DelimiterPolicy, Item
from .visitor import LiteralRule, TagRule, visit_application_literals, visit_tag


@dataclass
class StandaloneItem:
    """A single CBOR item plus the delimiter policy used to render it."""

    item: Item
    delimiters: DelimiterPolicy = field(default_factory=DelimiterPolicy.indented)

    @classmethod
    def parse(cls, text: str) -> "StandaloneItem":
        """Parse diagnostic notation.

        Raises:
            ParseError: If the text is not a single well-formed item
        """
        return cls(parser.parse(text))

    @classmethod
    def from_cbor(cls, data: bytes) -> "StandaloneItem":
        """Decode binary CBOR holding exactly one item.

        Raises:
            DecodeError: If the data is malformed, truncated or has trailing bytes
        """
        return cls(decoder.decode(bytes(data)))

    def to_cbor(self) -> bytes:
        """Encode to binary CBOR.

        Raises:
            EncodeError: If an application-oriented literal is left unresolved
                or a number does not fit its CBOR representation
        """
        return encoder.encode(self.item)

    def serialize(self) -> str:
        return serializer.serialize(self.item, self.delimiters)

    def set_delimiters(self, policy: DelimiterPolicy) -> None:
        self.delimiters = policy

    def visit_tag(self, rule: TagRule) -> None:
        self.item = visit_tag(self.item, rule)

    def visit_application_literals(self, rule: LiteralRule) -> None:
        self.item = visit_application_literals(self.item, rule)


@dataclass
class Sequence:
    """Zero or more CBOR items in a row."""

    items: list[Item] = field(default_factory=list)
    delimiters: DelimiterPolicy = field(default_factory=DelimiterPolicy.indented)

    @classmethod
    def parse(cls, text: str) -> "Sequence":
        return cls(parser.parse_sequence(text))

    @classmethod
    def from_cbor(cls, data: bytes) -> "Sequence":
        return cls(decoder.decode_sequence(bytes(data)))

    def to_cbor(self) -> bytes:
        return encoder.encode_sequence(self.items)

    def serialize(self) -> str:
        return serializer.serialize_sequence(self.items, self.delimiters)

    def set_delimiters(self, policy: DelimiterPolicy) -> None:
        self.delimiters = policy

    def visit_tag(self, rule: TagRule) -> None:
        self.items = [visit_tag(item, rule) for item in self.items]

    def visit_application_literals(self, rule: LiteralRule) -> None:
        self.items = [visit_application_literals(item, rule) for item in self.items]
