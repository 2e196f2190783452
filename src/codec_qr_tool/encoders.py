"""Reversible text encoders: base64, hex, URL escaping and XOR."""
from __future__ import annotations

import re
import urllib.parse
from itertools import cycle

from .bytestring import atob, btoa, from_raw_bytes, narrow_from_bytes, to_raw_bytes, widen_to_bytes
from .errors import DecodeError

# Characters left alone by JavaScript's ``encodeURIComponent``.
URL_SAFE_CHARACTERS = "-_.!~*'()"

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")
_HEX_CHUNK = re.compile(r"\s*([+-]?)([0-9a-fA-F]*)")
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9a-fA-F]{2})")


def base64_encode(text: str) -> str:
    return btoa(widen_to_bytes(text))


def base64_decode(text: str) -> str:
    return narrow_from_bytes(atob(text))


def hex_encode(text: str) -> str:
    """Return each character's code point as (at least) two hex digits."""

    return "".join(format(ord(char), "02x") for char in text)


def hex_decode(text: str, strict: bool = False) -> str:
    """Parse pairs of hex digits back into characters.

    In the default permissive mode every two-character chunk contributes the
    value parsed from it the way a lenient integer parse reads it: leading
    whitespace and a sign are skipped, then the leading hex digits are read.
    A chunk with no digits gives code point 0 and a negative value wraps to
    16 bits.  A trailing single character forms its own chunk.  With
    ``strict`` an odd length or a non-hex digit raises :class:`DecodeError`.
    """

    if strict:
        if len(text) % 2:
            raise DecodeError("Invalid hex input: odd number of digits")
        if _HEX_DIGITS.fullmatch(text) is None:
            raise DecodeError("Invalid hex input: non-hex characters present")

    chars = []
    for start in range(0, len(text), 2):
        chunk = text[start : start + 2]
        sign, digits = _HEX_CHUNK.match(chunk).groups()
        value = int(digits, 16) if digits else 0
        chars.append(chr(-value & 0xFFFF if sign == "-" else value))
    return "".join(chars)


def url_encode(text: str) -> str:
    return urllib.parse.quote(text, safe=URL_SAFE_CHARACTERS)


def url_decode(text: str) -> str:
    """Percent-decode ``text``, rejecting malformed escapes."""

    match = _MALFORMED_ESCAPE.search(text)
    if match is not None:
        raise DecodeError(f"URI malformed: bad escape at position {match.start()}")

    try:
        return urllib.parse.unquote_to_bytes(text).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError("URI malformed: escapes do not form valid UTF-8") from exc


def xor_bytes(data: bytes, key: bytes) -> bytes:
    """XOR ``data`` with ``key`` repeated to the length of ``data``."""

    if not key:
        raise ValueError("XOR key must not be empty")
    return bytes(byte ^ key_byte for byte, key_byte in zip(data, cycle(key)))


def xor_encode(text: str, key: str) -> str:
    """XOR the UTF-8 bytes of ``text`` with ``key`` and base64 the result."""

    mixed = xor_bytes(to_raw_bytes(widen_to_bytes(text)), key.encode("utf-8"))
    return btoa(from_raw_bytes(mixed))


def xor_decode(text: str, key: str) -> str:
    mixed = to_raw_bytes(atob(text))
    return narrow_from_bytes(from_raw_bytes(xor_bytes(mixed, key.encode("utf-8"))))


__all__ = [
    "URL_SAFE_CHARACTERS",
    "base64_encode",
    "base64_decode",
    "hex_encode",
    "hex_decode",
    "url_encode",
    "url_decode",
    "xor_bytes",
    "xor_encode",
    "xor_decode",
]
