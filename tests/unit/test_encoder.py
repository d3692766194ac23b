"""Unit tests for the binary CBOR encoder."""

import math

import pytest

from cbor_diag import errors
from cbor_diag.encoder import encode, encode_head, encode_sequence, preferred_float_width
from cbor_diag.errors import EncodeError
from cbor_diag.items import (
    ApplicationLiteral,
    Array,
    ByteString,
    Float,
    FloatWidth,
    Map,
    NegativeInt,
    Simple,
    Tag,
    TextString,
    UnsignedInt,
)


class TestHead:
    """Initial byte plus argument, always in the shortest form."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "argument,expected",
        [
            (0, "00"),
            (23, "17"),
            (24, "1818"),
            (255, "18ff"),
            (256, "190100"),
            (65535, "19ffff"),
            (65536, "1a00010000"),
            (2**32 - 1, "1affffffff"),
            (2**32, "1b0000000100000000"),
            (2**64 - 1, "1bffffffffffffffff"),
        ],
    )
    def test_shortest_argument(self, argument, expected):
        assert encode_head(0, argument).hex() == expected

    @pytest.mark.unit
    def test_major_type_bits(self):
        assert encode_head(4, 2) == b"\x82"
        assert encode_head(6, 999) == b"\xd9\x03\xe7"

    @pytest.mark.unit
    @pytest.mark.parametrize("argument", [-1, 2**64])
    def test_out_of_range(self, argument):
        with pytest.raises(EncodeError) as exc_info:
            encode_head(0, argument)
        assert exc_info.value.code == errors.ERR_OUT_OF_RANGE


class TestItems:
    """Encoding of each kind of item."""

    @pytest.mark.unit
    def test_hello_map(self, hello_map_cbor):
        item = Map([(UnsignedInt(1), TextString("hello"))])
        assert encode(item) == hello_map_cbor

    @pytest.mark.unit
    def test_integers(self):
        assert encode(UnsignedInt(1000)).hex() == "1903e8"
        assert encode(NegativeInt(0)).hex() == "20"
        assert encode(NegativeInt(2**64 - 1)).hex() == "3bffffffffffffffff"

    @pytest.mark.unit
    def test_integer_too_large(self):
        with pytest.raises(EncodeError) as exc_info:
            encode(UnsignedInt(2**64))
        assert exc_info.value.code == errors.ERR_OUT_OF_RANGE

    @pytest.mark.unit
    def test_floats_use_their_width(self):
        assert encode(Float(1.5, FloatWidth.HALF)).hex() == "f93e00"
        assert encode(Float(1.5, FloatWidth.SINGLE)).hex() == "fa3fc00000"
        assert encode(Float(1.5, FloatWidth.DOUBLE)).hex() == "fb3ff8000000000000"
        assert encode(Float(-0.0, FloatWidth.HALF)).hex() == "f98000"

    @pytest.mark.unit
    def test_nan_is_canonical(self):
        assert encode(Float(math.nan, FloatWidth.HALF)).hex() == "f97e00"
        assert encode(Float(math.nan, FloatWidth.SINGLE)).hex() == "fa7fc00000"
        assert encode(Float(math.nan, FloatWidth.DOUBLE)).hex() == "fb7ff8000000000000"

    @pytest.mark.unit
    def test_float_too_large_for_width(self):
        with pytest.raises(EncodeError) as exc_info:
            encode(Float(70000.0, FloatWidth.HALF))
        assert exc_info.value.code == errors.ERR_OUT_OF_RANGE

    @pytest.mark.unit
    def test_simple_values(self):
        assert encode(Simple(20)).hex() == "f4"
        assert encode(Simple(16)).hex() == "f0"
        assert encode(Simple(255)).hex() == "f8ff"

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [24, 31, 256, -1])
    def test_simple_values_without_encoding(self, value):
        with pytest.raises(EncodeError) as exc_info:
            encode(Simple(value))
        assert exc_info.value.code == errors.ERR_OUT_OF_RANGE

    @pytest.mark.unit
    def test_tags(self):
        tag = Tag(999, Array([TextString("foo"), TextString("bar")]))
        assert encode(tag).hex() == "d903e78263666f6f63626172"

    @pytest.mark.unit
    def test_tag_number_too_large(self):
        with pytest.raises(EncodeError):
            encode(Tag(2**64, UnsignedInt(0)))

    @pytest.mark.unit
    def test_indefinite_forms_are_reproduced(self):
        array = Array([UnsignedInt(1), Array([UnsignedInt(2)], indefinite=True)], indefinite=True)
        assert encode(array).hex() == "9f019f02ffff"

        mapping = Map([(TextString("a"), UnsignedInt(1))], indefinite=True)
        assert encode(mapping).hex() == "bf616101ff"

        raw = ByteString(b"\x01\x02\x03", chunks=[b"\x01", b"\x02\x03"])
        assert encode(raw).hex() == "5f4101420203ff"

        text = TextString("streaming", chunks=["strea", "ming"])
        assert encode(text).hex() == "7f657374726561646d696e67ff"

        assert encode(ByteString(b"", chunks=[])).hex() == "5fff"

    @pytest.mark.unit
    def test_unresolved_application_literal(self):
        with pytest.raises(EncodeError) as exc_info:
            encode(Array([ApplicationLiteral("spam", "eggs")]))
        assert exc_info.value.code == errors.ERR_UNRESOLVED_LITERAL

    @pytest.mark.unit
    def test_encode_sequence(self):
        assert encode_sequence([UnsignedInt(1), TextString("a")]).hex() == "016161"
        assert encode_sequence([]) == b""


class TestPreferredFloatWidth:
    """Narrowest lossless width of a float."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value,width",
        [
            (0.0, FloatWidth.HALF),
            (1.5, FloatWidth.HALF),
            (65504.0, FloatWidth.HALF),
            (5.960464477539063e-08, FloatWidth.HALF),
            (100000.0, FloatWidth.SINGLE),
            (3.4028234663852886e38, FloatWidth.SINGLE),
            (1.1, FloatWidth.DOUBLE),
            (1.0e300, FloatWidth.DOUBLE),
            (math.inf, FloatWidth.HALF),
            (math.nan, FloatWidth.HALF),
        ],
    )
    def test_widths(self, value, width):
        assert preferred_float_width(value) == width
