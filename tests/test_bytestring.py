from __future__ import annotations

import string

import pytest

from codec_qr_tool.bytestring import atob, btoa, narrow_from_bytes, widen_to_bytes
from codec_qr_tool.errors import DecodeError


@pytest.mark.parametrize(
    "text",
    ["", string.printable, "héllo wörld", "✓ check", "emoji \U0001F600", "null\x00byte"],
)
def test_widen_narrow_roundtrip(text):
    assert narrow_from_bytes(widen_to_bytes(text)) == text


def test_widen_produces_one_character_per_utf8_byte():
    widened = widen_to_bytes("é✓")

    assert widened == "\xc3\xa9\xe2\x9c\x93"
    assert all(ord(char) <= 0xFF for char in widened)


def test_narrow_replaces_invalid_utf8():
    assert narrow_from_bytes("\xff") == "\ufffd"


def test_narrow_rejects_characters_above_byte_range():
    with pytest.raises(DecodeError):
        narrow_from_bytes("✓")


def test_btoa_matches_standard_base64():
    assert btoa(widen_to_bytes("hello")) == "aGVsbG8="


def test_atob_tolerates_whitespace_and_missing_padding():
    assert atob("aGVs\nbG8") == "hello"
    assert atob("  aGVsbG8=  ") == "hello"


@pytest.mark.parametrize("bad", ["@@@", "abcde", "aGVsbG8=x", "✓✓✓✓"])
def test_atob_rejects_malformed_input(bad):
    with pytest.raises(DecodeError):
        atob(bad)
