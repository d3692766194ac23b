"""Built-in rewrite rules for application-oriented literals.

Two read-only registries drive the rules:

* ``APPLICATION_LITERALS`` maps a literal prefix to a resolver that turns
  the literal's payload into plain CBOR (``DT'...'`` into tag 1).
* ``TAG_PRETTIFIERS`` maps a tag number to the literal prefix and the
  function that renders the tag content as that literal's payload, or
  returns None when the content is not in a shape the literal can
  reproduce exactly.

The rules themselves have the signatures ``cbor_diag.visitor`` expects and
are applied by ``cbor_diag.edn_utils`` in this order:

    diag2cbor:  all_aol_to_item, then any_aol_to_tag999 (with to999)
    cbor2diag:  all_tag_prettify (when pretty), then tag999_to_aol (with from999)

Tag 999 is not a registered general purpose tag, so it is only ever turned
back into a literal on request.
"""

import ipaddress
import logging
import math
import re
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Union

from .constants import TAG_APPLICATION_LITERAL, TAG_DATETIME_EPOCH, TAG_IPV4, TAG_IPV6
from .encoder import preferred_float_width
from .errors import VisitorError
from .items import (
    ApplicationLiteral,
    Array,
    ByteString,
    Float,
    Item,
    NegativeInt,
    Tag,
    TextString,
    UnsignedInt,
    integer,
)

logger = logging.getLogger(__name__)

Resolver = Callable[[str], Item]
Prettifier = Callable[[Item], Optional[str]]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_RFC3339_RE = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})[Tt ]([0-9]{2}):([0-9]{2}):([0-9]{2})"
    r"(\.[0-9]+)?([Zz]|[+-][0-9]{2}:[0-9]{2})\Z"
)


# ── Date/time (DT, dt; tag 1) ────────────────────────────────

def _parse_offset(text: str) -> timezone:
    if text in ("Z", "z"):
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    offset = timedelta(hours=int(text[1:3]), minutes=int(text[4:6]))
    return timezone(sign * offset)


def epoch_seconds(payload: str) -> Item:
    """Convert an RFC 3339 date-time into the number of seconds since 1970.

    Whole seconds give an integer item, anything with a non-zero fraction
    a float in its narrowest lossless width.
    """
    match = _RFC3339_RE.match(payload)
    if not match:
        raise ValueError("not an RFC 3339 date-time with time zone")
    year, month, day, hour, minute, second = (int(match.group(i)) for i in range(1, 7))
    moment = datetime(year, month, day, hour, minute, second, tzinfo=_parse_offset(match.group(8)))
    delta = moment - EPOCH
    seconds = delta.days * 86400 + delta.seconds
    fraction = match.group(7)
    if not fraction or int(fraction[1:]) == 0:
        return integer(seconds)
    value = seconds + float(fraction)
    return Float(value, preferred_float_width(value))


def _resolve_dt_tag(payload: str) -> Item:
    return Tag(TAG_DATETIME_EPOCH, epoch_seconds(payload))


def _prettify_dt(content: Item) -> Optional[str]:
    if isinstance(content, (UnsignedInt, NegativeInt)):
        seconds: float = content.value
    elif isinstance(content, Float) and math.isfinite(content.value):
        seconds = content.value
    else:
        return None
    try:
        text = (EPOCH + timedelta(seconds=seconds)).isoformat()
    except OverflowError:
        return None
    # Microsecond rendering can lose float precision; only use the literal
    # if it reads back as the very same item.
    if epoch_seconds(text) != content:
        return None
    return text


# ── IP addresses (IP, ip; tags 52 and 54, RFC 9164) ──────────

def _ip_address(payload: str) -> Union[ipaddress.IPv4Address, ipaddress.IPv6Address]:
    address = ipaddress.ip_address(payload)
    if getattr(address, "scope_id", None):
        raise ValueError("zone identifiers are not supported")
    return address


def _resolve_ip_tag(payload: str) -> Item:
    if "/" not in payload:
        address = _ip_address(payload)
        return Tag(TAG_IPV4 if address.version == 4 else TAG_IPV6, ByteString(address.packed))
    interface = ipaddress.ip_interface(payload)
    tag = TAG_IPV4 if interface.version == 4 else TAG_IPV6
    prefixlen = interface.network.prefixlen
    if interface.ip == interface.network.network_address:
        trimmed = interface.ip.packed.rstrip(b"\x00")
        return Tag(tag, Array([UnsignedInt(prefixlen), ByteString(trimmed)]))
    return Tag(tag, Array([ByteString(interface.ip.packed), UnsignedInt(prefixlen)]))


def _resolve_ip_bytes(payload: str) -> Item:
    if "/" in payload:
        raise ValueError("ip'' takes a plain address; use IP'' for prefixes")
    return ByteString(_ip_address(payload).packed)


def _ip_prettifier(version: int) -> Prettifier:
    size = 4 if version == 4 else 16
    address_cls = ipaddress.IPv4Address if version == 4 else ipaddress.IPv6Address
    network_cls = ipaddress.IPv4Network if version == 4 else ipaddress.IPv6Network
    interface_cls = ipaddress.IPv4Interface if version == 4 else ipaddress.IPv6Interface

    def prettify(content: Item) -> Optional[str]:
        if isinstance(content, ByteString):
            if content.indefinite or len(content.value) != size:
                return None
            return str(address_cls(content.value))
        if not isinstance(content, Array) or content.indefinite or len(content.items) != 2:
            return None
        first, second = content.items
        if isinstance(first, UnsignedInt) and isinstance(second, ByteString):
            raw, prefixlen = second.value, first.value
            if second.indefinite or len(raw) > size or raw.endswith(b"\x00") or prefixlen > size * 8:
                return None
            try:
                network = network_cls((raw + b"\x00" * (size - len(raw)), prefixlen))
            except ValueError:
                # host bits set
                return None
            return str(network)
        if isinstance(first, ByteString) and isinstance(second, UnsignedInt):
            if first.indefinite or len(first.value) != size or second.value > size * 8:
                return None
            interface = interface_cls((first.value, second.value))
            if interface.ip == interface.network.network_address:
                # IP'' would produce the prefix form for this one
                return None
            return str(interface)
        return None

    return prettify


APPLICATION_LITERALS: Mapping[str, Resolver] = MappingProxyType(
    {
        "DT": _resolve_dt_tag,
        "dt": epoch_seconds,
        "IP": _resolve_ip_tag,
        "ip": _resolve_ip_bytes,
    }
)

TAG_PRETTIFIERS: Mapping[int, tuple[str, Prettifier]] = MappingProxyType(
    {
        TAG_DATETIME_EPOCH: ("DT", _prettify_dt),
        TAG_IPV4: ("IP", _ip_prettifier(4)),
        TAG_IPV6: ("IP", _ip_prettifier(6)),
    }
)


# ── Rewrite rules ────────────────────────────────────────────

def all_aol_to_item(literal: ApplicationLiteral) -> Optional[Item]:
    """Resolve literals with a known prefix; leave the others alone."""
    resolver = APPLICATION_LITERALS.get(literal.identifier)
    if resolver is None:
        return None
    try:
        item = resolver(literal.payload)
    except ValueError as exc:
        raise VisitorError(
            f"invalid application-oriented literal {literal.identifier}'{literal.payload}': {exc}"
        ) from exc
    logger.debug("resolved %s'%s' to %r", literal.identifier, literal.payload, item)
    return item


def any_aol_to_tag999(literal: ApplicationLiteral) -> Item:
    """Keep any literal as ``999([identifier, payload])`` for the application."""
    logger.debug("escaping %s'%s' into tag 999", literal.identifier, literal.payload)
    return Tag(
        TAG_APPLICATION_LITERAL,
        Array([TextString(literal.identifier), TextString(literal.payload)]),
    )


def all_tag_prettify(tag_number: int, tag: Tag) -> Optional[Item]:
    """Render tags with a known literal form as application-oriented literals."""
    entry = TAG_PRETTIFIERS.get(tag_number)
    if entry is None:
        return None
    identifier, prettify = entry
    payload = prettify(tag.item)
    if payload is None:
        return None
    return ApplicationLiteral(identifier, payload)


def tag999_to_aol(tag_number: int, tag: Tag) -> Optional[Item]:
    """Turn ``999([identifier, payload])`` back into ``identifier'payload'``."""
    if tag_number != TAG_APPLICATION_LITERAL:
        return None
    content = tag.item
    if not isinstance(content, Array):
        raise VisitorError("tag 999 content should be an array")
    if len(content.items) != 2:
        raise VisitorError("tag 999 content should contain 2 items")
    identifier, payload = content.items
    if not isinstance(identifier, TextString):
        raise VisitorError("tag 999 identifier should be a text string")
    if not isinstance(payload, TextString):
        raise VisitorError("tag 999 payload should be a text string")
    try:
        return ApplicationLiteral(identifier.value, payload.value)
    except ValueError as exc:
        raise VisitorError(
            "tag 999 identifier is unsuitable for an application-oriented literal"
        ) from exc
