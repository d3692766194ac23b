"""Diagnostic-notation serializer: item tree to text.

Output always parses back into an equal item tree.  Floats carry an
encoding indicator (``1.5_3``) only when their width is not the narrowest
lossless one, which is what the parser assumes without an indicator.
"""

import math

from .encoder import preferred_float_width
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

_SHORT_ESCAPES = {
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_FLOAT_SUFFIX = {FloatWidth.HALF: "_1", FloatWidth.SINGLE: "_2", FloatWidth.DOUBLE: "_3"}


def quote(value: str, delimiter: str = '"') -> str:
    """Quote ``value`` with the minimal escapes needed to read it back."""
    out = [delimiter]
    for ch in value:
        if ch == delimiter:
            out.append("\\" + ch)
        elif ch in _SHORT_ESCAPES:
            out.append(_SHORT_ESCAPES[ch])
        elif ch < " " or ch == "\x7f":
            out.append(f"\\u{ord(ch):04x}")
        elif 0xD800 <= ord(ch) <= 0xDFFF:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    out.append(delimiter)
    return "".join(out)


def format_float(item: Float) -> str:
    value = item.value
    if math.isnan(value):
        text = "NaN"
    elif math.isinf(value):
        text = "Infinity" if value > 0 else "-Infinity"
    else:
        text = repr(value)
    if FloatWidth(item.width) != preferred_float_width(value):
        text += _FLOAT_SUFFIX[FloatWidth(item.width)]
    return text


def _scalar(item: Item) -> str:
    if isinstance(item, UnsignedInt):
        return str(item.value)
    if isinstance(item, NegativeInt):
        return str(item.value)
    # Non-empty indefinite-length strings are handled by render().
    if isinstance(item, ByteString):
        return "''_" if item.chunks == [] else f"h'{item.value.hex()}'"
    if isinstance(item, TextString):
        return '""_' if item.chunks == [] else quote(item.value)
    if isinstance(item, Float):
        return format_float(item)
    if isinstance(item, Simple):
        return item.name or f"simple({item.value})"
    if isinstance(item, ApplicationLiteral):
        return item.identifier + quote(item.payload, "'")
    raise TypeError(f"cannot serialize {type(item).__name__}")


def _join(opener: str, parts: list[str], closer: str, policy: DelimiterPolicy, level: int) -> str:
    if policy.compact:
        return opener.rstrip() + ",".join(parts) + closer
    one_line = opener + ", ".join(parts) + closer
    if not parts or (
        "\n" not in one_line and len(one_line) + level * (policy.indent or 0) <= policy.width
    ):
        return one_line
    pad = " " * ((level + 1) * (policy.indent or 0))
    outer = " " * (level * (policy.indent or 0))
    body = ",\n".join(pad + part for part in parts)
    return f"{opener.rstrip()}\n{body}\n{outer}{closer}"


def render(item: Item, policy: DelimiterPolicy, level: int = 0) -> str:
    """Render ``item`` as diagnostic notation nested ``level`` deep."""
    if isinstance(item, Array):
        parts = [render(child, policy, level + 1) for child in item.items]
        return _join("[_ " if item.indefinite else "[", parts, "]", policy, level)
    if isinstance(item, Map):
        colon = ":" if policy.compact else ": "
        parts = [
            render(key, policy, level + 1) + colon + render(value, policy, level + 1)
            for key, value in item.pairs
        ]
        return _join("{_ " if item.indefinite else "{", parts, "}", policy, level)
    if isinstance(item, Tag):
        return f"{item.tag}({render(item.item, policy, level)})"
    if isinstance(item, ByteString) and item.chunks:
        parts = [f"h'{chunk.hex()}'" for chunk in item.chunks]
        return _join("(_ ", parts, ")", policy, level)
    if isinstance(item, TextString) and item.chunks:
        parts = [quote(chunk) for chunk in item.chunks]
        return _join("(_ ", parts, ")", policy, level)
    return _scalar(item)


def serialize(item: Item, policy: DelimiterPolicy = DelimiterPolicy()) -> str:
    """Render a single item tree as diagnostic notation."""
    return render(item, policy)


def serialize_sequence(items: list[Item], policy: DelimiterPolicy = DelimiterPolicy()) -> str:
    """Render a CBOR sequence as comma separated diagnostic notation."""
    separator = "," if policy.compact else ", "
    return separator.join(render(item, policy) for item in items)
