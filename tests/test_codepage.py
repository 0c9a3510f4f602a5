#!/usr/bin/env python3
"""
Tests for codepage transcoding.

Tests verify:
1. Alias resolution is case-insensitive and limited to the cp1251 family
2. Cyrillic text written as win1251 reads back identically
3. Invalid bytes abort with TranscodeError
4. Canonical UTF-8 input with a BOM is read cleanly
"""

import sys

import pytest

from traconv.codepage import (
    decode_bytes,
    encode_text,
    list_codepages,
    open_sink,
    open_source,
    resolve_codepage,
)
from traconv.errors import SourceNotFoundError, TranscodeError


def test_resolve_aliases():
    """Test 1: Known aliases map to cp1251 regardless of case."""
    for alias in ["win1251", "WIN1251", "windows-1251", "Windows-1251", "cp1251", "CP1251"]:
        assert resolve_codepage(alias) == "cp1251"


def test_resolve_unknown_is_canonical():
    """Test 2: Other names mean canonical text."""
    assert resolve_codepage("utf-8") is None
    assert resolve_codepage("latin-1") is None
    assert resolve_codepage("") is None
    assert resolve_codepage(None) is None


def test_encode_decode_cp1251():
    """Test 3: Cyrillic survives a cp1251 round trip and is single-byte."""
    data = encode_text("Привет", "win1251")
    assert data == "Привет".encode("cp1251")
    assert len(data) == 6
    assert decode_bytes(data, "windows-1251") == "Привет"


def test_canonical_passthrough():
    """Test 4: Non-legacy names read and write UTF-8."""
    assert encode_text("Привет", "utf-8") == "Привет".encode("utf-8")
    assert decode_bytes("Привет".encode("utf-8"), "whatever") == "Привет"


def test_invalid_utf8_raises():
    """Test 5: Bytes that are not UTF-8 raise TranscodeError."""
    with pytest.raises(TranscodeError):
        decode_bytes("Привет".encode("cp1251"), "utf-8")


def test_unencodable_text_raises():
    """Test 6: Characters outside cp1251 raise TranscodeError."""
    with pytest.raises(TranscodeError):
        encode_text("日本語", "cp1251")


def test_stream_round_trip(tmp_path):
    """Test 7: Writer and reader agree on cp1251 with multi-line content."""
    path = tmp_path / "ru.tra"
    with open_sink(path, "win1251") as sink:
        sink.write("@1 = ~Привет~\n")
        sink.write("@2 = ~Строка\nвторая~\n")

    assert path.read_bytes() == "@1 = ~Привет~\n@2 = ~Строка\nвторая~\n".encode("cp1251")

    with open_source(path, "win1251") as reader:
        lines = list(reader)
    assert lines == ["@1 = ~Привет~", "@2 = ~Строка", "вторая~"]


def test_reader_strips_bom(tmp_path):
    """Test 8: A UTF-8 BOM does not end up in the first line."""
    path = tmp_path / "bom.tra"
    path.write_bytes(b"\xef\xbb\xbf@1 = ~x~\n")
    with open_source(path) as reader:
        assert list(reader) == ["@1 = ~x~"]


def test_reader_invalid_bytes_raise(tmp_path):
    """Test 9: Invalid bytes found while streaming raise TranscodeError."""
    path = tmp_path / "bad.tra"
    path.write_bytes(b"@1 = ~ok~\n@2 = ~\xff\xfe~\n")
    with pytest.raises(TranscodeError) as exc_info:
        with open_source(path, "utf-8") as reader:
            list(reader)
    assert exc_info.value.path == str(path)


def test_reader_missing_file(tmp_path):
    """Test 10: Missing input raises SourceNotFoundError."""
    with pytest.raises(SourceNotFoundError):
        open_source(tmp_path / "missing.tra")


def test_list_codepages():
    """Test 11: Listing covers every alias."""
    aliases = {c["alias"] for c in list_codepages()}
    assert aliases == {"win1251", "windows-1251", "cp1251"}


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
