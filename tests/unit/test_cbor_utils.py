"""Unit tests for cbor2 interop."""

import math
from types import MappingProxyType

import cbor2
import pytest

from cbor_diag import cbor_utils
from cbor_diag.encoder import encode
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
from cbor_diag.parser import parse


class TestToPython:
    """Item trees to cbor2 objects."""

    @pytest.mark.unit
    def test_scalars_and_containers(self):
        item = parse("{1: [h'01', \"x\"], -1: 1.5, \"t\": [true, false, null]}")
        assert cbor_utils.to_python(item) == {
            1: [b"\x01", "x"],
            -1: 1.5,
            "t": [True, False, None],
        }

    @pytest.mark.unit
    def test_special_values(self):
        assert cbor_utils.to_python(Simple(23)) is cbor2.undefined
        assert cbor_utils.to_python(Simple(16)) == cbor_utils.CBORSimpleValue(16)
        assert cbor_utils.to_python(Tag(1, UnsignedInt(5))) == cbor_utils.CBORTag(1, 5)
        assert math.isnan(cbor_utils.to_python(Float(math.nan, FloatWidth.HALF)))

    @pytest.mark.unit
    def test_container_keys_become_hashable(self):
        item = Map([(Array([UnsignedInt(1), UnsignedInt(2)]), TextString("pair"))])
        assert cbor_utils.to_python(item) == {(1, 2): "pair"}

    @pytest.mark.unit
    def test_map_keys_become_hashable(self):
        item = Map([(Map([(UnsignedInt(1), UnsignedInt(2))]), TextString("inner"))])
        converted = cbor_utils.to_python(item)
        key = next(iter(converted))
        assert dict(key) == {1: 2}
        assert converted[key] == "inner"

    @pytest.mark.unit
    def test_application_literal_is_rejected(self):
        with pytest.raises(EncodeError):
            cbor_utils.to_python(Array([ApplicationLiteral("spam", "eggs")]))


class TestFromPython:
    """cbor2 objects to item trees."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "obj,expected",
        [
            (True, Simple(21)),
            (False, Simple(20)),
            (None, Simple(22)),
            (cbor2.undefined, Simple(23)),
            (0, UnsignedInt(0)),
            (-1, NegativeInt(0)),
            (2**64 - 1, UnsignedInt(2**64 - 1)),
            (-(2**64), NegativeInt(2**64 - 1)),
            (2**64, Tag(2, ByteString(b"\x01" + bytes(8)))),
            (1.5, Float(1.5, FloatWidth.HALF)),
            (1.1, Float(1.1, FloatWidth.DOUBLE)),
            ("a", TextString("a")),
            (b"\x00", ByteString(b"\x00")),
            ([1, "a"], Array([UnsignedInt(1), TextString("a")])),
            ((1,), Array([UnsignedInt(1)])),
            ({1: 2}, Map([(UnsignedInt(1), UnsignedInt(2))])),
            (cbor2.CBORTag(1, 5), Tag(1, UnsignedInt(5))),
            (cbor2.CBORSimpleValue(16), Simple(16)),
        ],
    )
    def test_conversions(self, obj, expected):
        assert cbor_utils.from_python(obj) == expected

    @pytest.mark.unit
    def test_any_mapping_becomes_map(self):
        expected = Map([(UnsignedInt(1), TextString("a"))])
        assert cbor_utils.from_python(MappingProxyType({1: "a"})) == expected
        assert cbor_utils.from_python(cbor_utils.decode(bytes.fromhex("a1016161"))) == expected

    @pytest.mark.unit
    def test_decoded_map_key_converts_back(self):
        data = bytes.fromhex("a1a10102656f75746572")
        obj = cbor_utils.decode(data)
        assert encode(cbor_utils.from_python(obj)) == data

    @pytest.mark.unit
    def test_unsupported_object(self):
        with pytest.raises(TypeError):
            cbor_utils.from_python(object())

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "obj",
        [
            0,
            -1000,
            2**64 - 1,
            "hello",
            b"\x00\xff",
            [1, [2, 3], []],
            {1: "hello", "a": [True, None]},
            cbor2.CBORTag(24, b"\x01"),
        ],
    )
    def test_encoding_matches_cbor2(self, obj):
        assert encode(cbor_utils.from_python(obj)) == cbor_utils.encode(obj)

    @pytest.mark.unit
    def test_decode_round_trip(self, hello_map_cbor):
        obj = cbor_utils.decode(hello_map_cbor)
        assert obj == {1: "hello"}
        assert encode(cbor_utils.from_python(obj)) == hello_map_cbor

    @pytest.mark.unit
    def test_decode_error_alias(self):
        with pytest.raises(cbor_utils.CBORDecodeError):
            cbor_utils.decode(bytes.fromhex("a101"))
