"""cbor-diag: conversion between CBOR and its diagnostic notation (EDN).

CBOR is a binary data format defined in RFC 8949, often used in IoT and
modern security applications.  Its diagnostic notation is a human readable
form of it that looks similar to JSON (of which it is a superset), and is
extended with application-oriented literals by draft-ietf-cbor-edn-literals.

    >>> from cbor_diag import diag2cbor, cbor2diag
    >>> diag2cbor('{1: "hello"}').hex()
    'a1016568656c6c6f'
    >>> cbor2diag(bytes.fromhex('a1016568656c6c6f'))
    '{1: "hello"}'
"""

__version__ = "0.1.0"

from .application import (
    APPLICATION_LITERALS,
    TAG_PRETTIFIERS,
    all_aol_to_item,
    all_tag_prettify,
    any_aol_to_tag999,
    tag999_to_aol,
)
from .document import Sequence, StandaloneItem
from .edn_utils import (
    cbor2diag,
    cbor_to_diag,
    diag2cbor,
    diag_to_cbor,
    from_diagnostic,
    to_diagnostic,
)
from .errors import CBORDiagError, DecodeError, EncodeError, ParseError, VisitorError
from .items import (
    ApplicationLiteral,
    Array,
    ByteString,
    DelimiterPolicy,
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
from .visitor import visit_application_literals, visit_tag


__all__ = [
    "__version__",
    # Conversions
    "diag2cbor",
    "cbor2diag",
    "diag_to_cbor",
    "cbor_to_diag",
    "to_diagnostic",
    "from_diagnostic",
    # Top-level wrappers
    "StandaloneItem",
    "Sequence",
    "DelimiterPolicy",
    # Item model
    "Item",
    "UnsignedInt",
    "NegativeInt",
    "ByteString",
    "TextString",
    "Array",
    "Map",
    "Tag",
    "Float",
    "FloatWidth",
    "Simple",
    "ApplicationLiteral",
    # Visitors and rewrite rules
    "visit_tag",
    "visit_application_literals",
    "all_aol_to_item",
    "any_aol_to_tag999",
    "all_tag_prettify",
    "tag999_to_aol",
    "APPLICATION_LITERALS",
    "TAG_PRETTIFIERS",
    # Errors
    "CBORDiagError",
    "ParseError",
    "DecodeError",
    "EncodeError",
    "VisitorError",
]
