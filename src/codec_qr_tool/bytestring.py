"""Byte-per-character string helpers.

Text entered in the UI may contain any Unicode character while base64 works
on bytes.  A *byte string* here is a ``str`` whose characters are all in the
range ``0..255``, each standing for one raw byte.  The helpers below convert
between the two views so that text can be pushed through byte-oriented
encoders without corrupting non-ASCII characters.
"""
from __future__ import annotations

import base64
import binascii
import re

from .errors import DecodeError

_WHITESPACE = re.compile(r"[\t\n\f\r ]+")


def widen_to_bytes(text: str) -> str:
    """Return ``text`` encoded as UTF-8, one character per byte."""

    return text.encode("utf-8").decode("latin-1")


def narrow_from_bytes(byte_string: str) -> str:
    """Reverse :func:`widen_to_bytes`.

    Invalid UTF-8 sequences are replaced with U+FFFD rather than rejected.
    A character above ``0xFF`` cannot stand for a byte and raises
    :class:`DecodeError`.
    """

    return to_raw_bytes(byte_string).decode("utf-8", errors="replace")


def to_raw_bytes(byte_string: str) -> bytes:
    try:
        return byte_string.encode("latin-1")
    except UnicodeEncodeError as exc:
        raise DecodeError("Input contains characters outside the byte range") from exc


def from_raw_bytes(data: bytes) -> str:
    return data.decode("latin-1")


def btoa(byte_string: str) -> str:
    """Base64-encode a byte string."""

    return base64.b64encode(to_raw_bytes(byte_string)).decode("ascii")


def atob(text: str) -> str:
    """Base64-decode ``text`` into a byte string.

    ASCII whitespace is ignored and missing ``=`` padding is tolerated; any
    other deviation raises :class:`DecodeError`.
    """

    compact = _WHITESPACE.sub("", text)
    remainder = len(compact) % 4
    if remainder == 1:
        raise DecodeError("Invalid base64 input: incorrect length")
    if remainder:
        compact += "=" * (4 - remainder)

    try:
        data = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Invalid base64 input: {exc}") from exc
    return from_raw_bytes(data)


__all__ = [
    "widen_to_bytes",
    "narrow_from_bytes",
    "to_raw_bytes",
    "from_raw_bytes",
    "btoa",
    "atob",
]
