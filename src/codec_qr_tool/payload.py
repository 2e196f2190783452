"""Binary container for the authenticated (``sealed``) AES format."""
from __future__ import annotations

import struct
from dataclasses import dataclass

from .errors import DecodeError

MAGIC = b"CQ"
"""Leading bytes identifying a sealed payload."""

FORMAT_VERSION = 1
"""Current sealed payload format version."""

_HEADER = struct.Struct(">2sBBHHHI")
"""Header: magic, format version, kdf enum, version len, salt len, nonce len, ciphertext len."""

_IGNORABLE_SUFFIX = b"\x09\x0A\x0B\x0C\x0D\x20"
"""Whitespace bytes that may trail a payload pasted through a text box."""

_KDF_TO_CODE = {"argon2id": 1, "pbkdf2": 2}
_CODE_TO_KDF = {value: key for key, value in _KDF_TO_CODE.items()}


@dataclass(slots=True, frozen=True)
class SealedPayload:
    """Components of one AES-GCM encryption."""

    version: str
    kdf: str
    salt: bytes
    nonce: bytes
    ciphertext: bytes


def pack_sealed(payload: SealedPayload) -> bytes:
    """Serialise ``payload`` into the binary container."""

    try:
        kdf_code = _KDF_TO_CODE[payload.kdf]
    except KeyError as exc:
        raise ValueError(f"Unsupported KDF: {payload.kdf}") from exc

    version_bytes = payload.version.encode("utf-8")
    header = _HEADER.pack(
        MAGIC,
        FORMAT_VERSION,
        kdf_code,
        len(version_bytes),
        len(payload.salt),
        len(payload.nonce),
        len(payload.ciphertext),
    )
    return b"".join((header, version_bytes, payload.salt, payload.nonce, payload.ciphertext))


def unpack_sealed(data: bytes) -> SealedPayload:
    """Parse the binary container produced by :func:`pack_sealed`."""

    if len(data) < _HEADER.size:
        raise DecodeError("Sealed payload is truncated")

    (
        magic,
        format_version,
        kdf_code,
        version_len,
        salt_len,
        nonce_len,
        ciphertext_len,
    ) = _HEADER.unpack_from(data)

    if magic != MAGIC:
        raise DecodeError("Not a sealed payload")
    if format_version != FORMAT_VERSION:
        raise DecodeError(f"Unsupported payload format version: {format_version}")

    try:
        kdf = _CODE_TO_KDF[kdf_code]
    except KeyError as exc:
        raise DecodeError(f"Unsupported KDF code: {kdf_code}") from exc

    end_version = _HEADER.size + version_len
    end_salt = end_version + salt_len
    end_nonce = end_salt + nonce_len
    end_ciphertext = end_nonce + ciphertext_len

    if len(data) < end_ciphertext:
        raise DecodeError("Sealed payload is truncated")

    suffix = data[end_ciphertext:]
    if any(byte not in _IGNORABLE_SUFFIX for byte in suffix):
        raise DecodeError("Sealed payload length mismatch")

    try:
        version = data[_HEADER.size:end_version].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError("Version field is not valid UTF-8") from exc

    return SealedPayload(
        version=version,
        kdf=kdf,
        salt=data[end_version:end_salt],
        nonce=data[end_salt:end_nonce],
        ciphertext=data[end_nonce:end_ciphertext],
    )


def is_sealed_payload(data: bytes) -> bool:
    """Return ``True`` if ``data`` parses as a sealed payload."""

    if not data.startswith(MAGIC):
        return False
    try:
        unpack_sealed(data)
    except DecodeError:
        return False
    return True


__all__ = [
    "MAGIC",
    "FORMAT_VERSION",
    "SealedPayload",
    "pack_sealed",
    "unpack_sealed",
    "is_sealed_payload",
]
