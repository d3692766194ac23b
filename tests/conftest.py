"""Pytest configuration and shared fixtures for cbor-diag tests."""

from pathlib import Path

import pytest


@pytest.fixture
def hello_map_cbor() -> bytes:
    """CBOR encoding of {1: "hello"}."""
    return bytes.fromhex("a1016568656c6c6f")


@pytest.fixture
def hello_map_diag() -> str:
    """Diagnostic notation of {1: "hello"}."""
    return '{1: "hello"}'


@pytest.fixture
def tag999_cbor() -> bytes:
    """999(["foo", "bar"]), the binary escape of foo'bar'."""
    return bytes.fromhex("d903e78263666f6f63626172")


@pytest.fixture
def epoch5_cbor() -> bytes:
    """1(5): five seconds past the epoch."""
    return bytes.fromhex("c105")


@pytest.fixture
def round_trip_texts() -> list[str]:
    """Literal-free diagnostic texts in the compact form the serializer emits."""
    return [
        "0",
        "-1",
        "18446744073709551615",
        "-18446744073709551616",
        "1.5",
        "1.5_3",
        "1.1",
        "100000.0",
        "-0.0",
        "Infinity",
        "-Infinity_2",
        "NaN",
        "h''",
        "h'00ff'",
        '""',
        '"tab\\there"',
        "[]",
        "[1,[2,3],[_4,5]]",
        "[_]",
        "{}",
        '{1:2,"a":[true,false,null,undefined]}',
        "{_1:2}",
        "(_h'01',h'0203')",
        '(_"ab","c")',
        "''_",
        '""_',
        "simple(16)",
        "simple(255)",
        "24(h'6449455446')",
        '0("2013-03-21T20:04:00Z")',
        "{1:2,1:3}",
    ]


@pytest.fixture
def write_input(tmp_path: Path):
    """Write CLI input files into a temporary directory."""

    def _write(name: str, data) -> Path:
        path = tmp_path / name
        if isinstance(data, bytes):
            path.write_bytes(data)
        else:
            path.write_text(data)
        return path

    return _write


@pytest.fixture
def shallow_depth(monkeypatch: pytest.MonkeyPatch) -> int:
    """Lower the nesting limit so depth tests stay small."""
    from cbor_diag import decoder, parser

    monkeypatch.setattr(decoder, "MAX_DEPTH", 8)
    monkeypatch.setattr(parser, "MAX_DEPTH", 8)
    return 8
