"""Unit tests for the diagnostic-notation serializer."""

import math

import pytest

from cbor_diag.constants import INDENT, PRETTY_WIDTH
from cbor_diag.items import (
    ApplicationLiteral,
    Array,
    ByteString,
    DelimiterPolicy,
    Float,
    FloatWidth,
    Map,
    NegativeInt,
    Simple,
    Tag,
    TextString,
    UnsignedInt,
)
from cbor_diag.parser import parse
from cbor_diag.serializer import format_float, quote, serialize, serialize_sequence

COMPACT = DelimiterPolicy.DISCARD_ALL


class TestScalars:
    """Rendering of single values."""

    @pytest.mark.unit
    def test_integers(self):
        assert serialize(UnsignedInt(0)) == "0"
        assert serialize(NegativeInt(0)) == "-1"
        assert serialize(NegativeInt(2**64 - 1)) == "-18446744073709551616"

    @pytest.mark.unit
    def test_strings(self):
        assert serialize(ByteString(b"\x00\xff")) == "h'00ff'"
        assert serialize(ByteString(b"")) == "h''"
        assert serialize(TextString("hello")) == '"hello"'

    @pytest.mark.unit
    def test_quote_uses_minimal_escapes(self):
        assert quote('a"b\\c\n') == '"a\\"b\\\\c\\n"'
        assert quote("\x01\x7f") == '"\\u0001\\u007f"'
        assert quote("ü") == '"ü"'
        assert quote("it's", "'") == "'it\\'s'"
        assert quote('say "hi"', "'") == "'say \"hi\"'"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "item,expected",
        [
            (Float(1.5, FloatWidth.HALF), "1.5"),
            (Float(1.5, FloatWidth.SINGLE), "1.5_2"),
            (Float(1.5, FloatWidth.DOUBLE), "1.5_3"),
            (Float(100000.0, FloatWidth.SINGLE), "100000.0"),
            (Float(1.1, FloatWidth.DOUBLE), "1.1"),
            (Float(-0.0, FloatWidth.HALF), "-0.0"),
            (Float(1.0e300, FloatWidth.DOUBLE), "1e+300"),
            (Float(math.inf, FloatWidth.HALF), "Infinity"),
            (Float(-math.inf, FloatWidth.DOUBLE), "-Infinity_3"),
            (Float(math.nan, FloatWidth.HALF), "NaN"),
            (Float(math.nan, FloatWidth.SINGLE), "NaN_2"),
        ],
    )
    def test_floats(self, item, expected):
        assert format_float(item) == expected

    @pytest.mark.unit
    def test_simple_values(self):
        assert serialize(Simple(20)) == "false"
        assert serialize(Simple(22)) == "null"
        assert serialize(Simple(23)) == "undefined"
        assert serialize(Simple(16)) == "simple(16)"

    @pytest.mark.unit
    def test_application_literal(self):
        assert serialize(ApplicationLiteral("DT", "1970-01-01T00:00:05Z")) == (
            "DT'1970-01-01T00:00:05Z'"
        )
        assert serialize(ApplicationLiteral("spam", "it's")) == "spam'it\\'s'"

    @pytest.mark.unit
    def test_tag(self):
        assert serialize(Tag(1, UnsignedInt(5))) == "1(5)"
        assert serialize(Tag(24, Tag(25, ByteString(b"")))) == "24(25(h''))"


class TestContainers:
    """Delimiters, layout and indefinite-length markers."""

    @pytest.mark.unit
    def test_map_pretty_and_compact(self):
        item = Map([(UnsignedInt(1), TextString("hello"))])
        assert serialize(item) == '{1: "hello"}'
        assert serialize(item, COMPACT) == '{1:"hello"}'

    @pytest.mark.unit
    def test_array_pretty_and_compact(self):
        item = Array([UnsignedInt(1), Array([UnsignedInt(2), UnsignedInt(3)])])
        assert serialize(item) == "[1, [2, 3]]"
        assert serialize(item, COMPACT) == "[1,[2,3]]"

    @pytest.mark.unit
    def test_empty_containers(self):
        assert serialize(Array([])) == "[]"
        assert serialize(Map([])) == "{}"
        assert serialize(Array([], indefinite=True)) == "[_ ]"

    @pytest.mark.unit
    def test_indefinite_containers(self):
        item = Array(
            [UnsignedInt(1), Map([(TextString("a"), UnsignedInt(2))], indefinite=True)],
            indefinite=True,
        )
        assert serialize(item) == '[_ 1, {_ "a": 2}]'
        assert serialize(item, COMPACT) == '[_1,{_"a":2}]'
        assert parse(serialize(item, COMPACT)).indefinite
        assert serialize(Array([], indefinite=True), COMPACT) == "[_]"

    @pytest.mark.unit
    def test_indefinite_strings(self):
        raw = ByteString(b"\x01\x02\x03", chunks=[b"\x01", b"\x02\x03"])
        assert serialize(raw) == "(_ h'01', h'0203')"
        assert serialize(raw, COMPACT) == "(_h'01',h'0203')"
        assert parse(serialize(raw, COMPACT)).chunks == [b"\x01", b"\x02\x03"]

        text = TextString("streaming", chunks=["strea", "ming"])
        assert serialize(text) == '(_ "strea", "ming")'

        assert serialize(ByteString(b"", chunks=[])) == "''_"
        assert serialize(TextString("", chunks=[])) == '""_'

    @pytest.mark.unit
    def test_long_array_is_broken_over_lines(self):
        item = Array([TextString("abcdefgh")] * 12)
        expected = "[\n" + ",\n".join(['  "abcdefgh"'] * 12) + "\n]"
        assert serialize(item) == expected
        assert "\n" not in serialize(item, COMPACT)

    @pytest.mark.unit
    def test_nested_indentation(self):
        item = Map([(TextString("k"), Array([TextString("abcdefgh")] * 12))])
        expected = '{\n  "k": [\n' + ",\n".join(['    "abcdefgh"'] * 12) + "\n  ]\n}"
        assert serialize(item) == expected

    @pytest.mark.unit
    def test_custom_indent(self):
        item = Array([TextString("abcdefgh")] * 12)
        text = serialize(item, DelimiterPolicy.indented(indent=4))
        assert text.startswith('[\n    "abcdefgh",\n')

    @pytest.mark.unit
    def test_narrow_width(self):
        item = Array([UnsignedInt(1), UnsignedInt(2)])
        assert serialize(item, DelimiterPolicy.indented(width=4)) == "[\n  1,\n  2\n]"

    @pytest.mark.unit
    def test_sequence(self):
        items = [UnsignedInt(1), TextString("a")]
        assert serialize_sequence(items) == '1, "a"'
        assert serialize_sequence(items, COMPACT) == '1,"a"'
        assert serialize_sequence([]) == ""


class TestReadBack:
    """Whatever the serializer writes parses into an equal tree."""

    @pytest.mark.unit
    @pytest.mark.parametrize("policy", [DelimiterPolicy(), COMPACT, DelimiterPolicy.indented(width=8)])
    def test_parse_serialize_identity(self, policy):
        item = Map(
            [
                (UnsignedInt(1), TextString('quote " and \\ and \t')),
                (NegativeInt(9), Array([Float(1.1), Float(1.5, FloatWidth.SINGLE)])),
                (
                    TextString("nested"),
                    Array(
                        [
                            Tag(24, ByteString(b"\x01")),
                            Simple(99),
                            ApplicationLiteral("spam", "eggs"),
                            ByteString(b"ab", chunks=[b"a", b"b"]),
                        ],
                        indefinite=True,
                    ),
                ),
            ]
        )
        text = serialize(item, policy)
        parsed = parse(text)
        assert parsed == item
        assert parsed.pairs[2][1].indefinite
        assert parsed.pairs[2][1].items[3].chunks == [b"a", b"b"]


class TestDelimiterPolicy:
    """Layout policy objects."""

    @pytest.mark.unit
    def test_policies(self):
        assert DelimiterPolicy.DISCARD_ALL.compact
        assert not DelimiterPolicy.indented().compact
        assert DelimiterPolicy().indent == INDENT
        assert DelimiterPolicy().width == PRETTY_WIDTH
