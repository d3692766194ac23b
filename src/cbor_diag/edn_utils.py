"""EDN (Extended Diagnostic Notation) conversion entry points.

This module ties the parser, the binary codec and the application-oriented
literal rules together into the two public conversions.
"""

import logging

from .application import all_aol_to_item, all_tag_prettify, any_aol_to_tag999, tag999_to_aol
from .document import StandaloneItem
from .items import DelimiterPolicy

logger = logging.getLogger(__name__)


def diag2cbor(diagnostic: str, *, to999: bool = False) -> bytes:
    """Given a string in CBOR diagnostic notation, produce its CBOR binary encoding.

    >>> diag2cbor('{1: "hello"}').hex()
    'a1016568656c6c6f'

    With ``to999=True``, unknown application-oriented literals are kept in
    tag 999 for the application to process further:

    >>> diag2cbor("[1, spam'eggs']", to999=True).hex()
    '8201d903e782647370616d6465676773'

    Args:
        diagnostic: Diagnostic notation text holding exactly one item
        to999: Escape unknown application-oriented literals into tag 999

    Returns:
        CBOR encoded bytes

    Raises:
        ParseError: If the text is malformed
        VisitorError: If a known literal has an invalid payload
        EncodeError: If an unknown literal remains and ``to999`` is not set
    """
    logger.debug("diag2cbor: %d characters, to999=%s", len(diagnostic), to999)
    data = StandaloneItem.parse(diagnostic)
    data.visit_application_literals(all_aol_to_item)
    if to999:
        data.visit_application_literals(any_aol_to_tag999)
    return data.to_cbor()


def cbor2diag(encoded: bytes, *, pretty: bool = True, from999: bool = False) -> str:
    """Given a byte string containing encoded CBOR, produce diagnostic notation.

    >>> cbor2diag(bytes.fromhex('a1016568656c6c6f'))
    '{1: "hello"}'

    By default, several CBOR tags are recognized as application-oriented
    literals:

    >>> cbor2diag(bytes.fromhex("c105"))
    "DT'1970-01-01T00:00:05+00:00'"

    With ``pretty=False``, no space is left after colons, commas etc., and no
    application-oriented literals are created:

    >>> cbor2diag(bytes.fromhex("c105"), pretty=False)
    '1(5)'

    With ``from999=True``, tag 999 is rendered as application-oriented
    literal.  Unlike other tags, this does not happen by default, as that tag
    is not intended to be used that way in general:

    >>> cbor2diag(bytes.fromhex("d903e78263666f6f63626172"), from999=True)
    "foo'bar'"

    Args:
        encoded: CBOR encoded bytes holding exactly one item
        pretty: Indent large containers and recognize well-known tags
        from999: Render tag 999 as application-oriented literal

    Returns:
        Diagnostic notation string

    Raises:
        DecodeError: If the data is not well-formed CBOR
        VisitorError: If ``from999`` is set and a tag 999 is malformed
    """
    logger.debug("cbor2diag: %d bytes, pretty=%s, from999=%s", len(encoded), pretty, from999)
    parsed = StandaloneItem.from_cbor(encoded)
    if pretty:
        parsed.visit_tag(all_tag_prettify)
    if from999:
        parsed.visit_tag(tag999_to_aol)
    if pretty:
        parsed.set_delimiters(DelimiterPolicy.indented())
    else:
        parsed.set_delimiters(DelimiterPolicy.DISCARD_ALL)
    return parsed.serialize()


def diag_to_cbor(diag_str: str) -> bytes:
    """Alias for diag2cbor with default options."""
    return diag2cbor(diag_str)


def cbor_to_diag(cbor_data: bytes) -> str:
    """Alias for cbor2diag with default options."""
    return cbor2diag(cbor_data)


def to_diagnostic(cbor_data: bytes) -> str:
    """Alias for cbor_to_diag for compatibility."""
    return cbor_to_diag(cbor_data)


def from_diagnostic(diag_str: str) -> bytes:
    """Alias for diag_to_cbor for compatibility."""
    return diag_to_cbor(diag_str)
