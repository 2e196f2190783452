"""Password based encryption and one-way digests."""
from __future__ import annotations

import hashlib
import json
import logging
import os
from dataclasses import dataclass
from typing import Tuple

from argon2.exceptions import HashingError
from argon2.low_level import Type as Argon2Type, hash_secret_raw
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .bytestring import atob, from_raw_bytes, btoa, to_raw_bytes
from .config import AppConfig
from .errors import DecodeError
from .payload import MAGIC, SealedPayload, pack_sealed, unpack_sealed

logger = logging.getLogger(__name__)

INVALID_PASSWORD_MESSAGE = "Invalid password or corrupted cipher."

OPENSSL_MAGIC = b"Salted__"
"""Prefix of OpenSSL ``enc`` / CryptoJS passphrase ciphertexts."""

_OPENSSL_SALT_SIZE = 8
_GCM_NONCE_SIZE = 12


def md5_hex(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def evp_bytes_to_key(password: bytes, salt: bytes, key_len: int = 32, iv_len: int = 16) -> Tuple[bytes, bytes]:
    """Derive key and IV the way OpenSSL's ``EVP_BytesToKey`` does with MD5.

    This is the derivation CryptoJS applies when AES is given a passphrase,
    so ciphertexts produced here decrypt there and vice versa.
    """

    derived = b""
    block = b""
    while len(derived) < key_len + iv_len:
        block = hashlib.md5(block + password + salt).digest()
        derived += block
    return derived[:key_len], derived[key_len : key_len + iv_len]


@dataclass(slots=True)
class CryptoManager:
    """High level facade around the two supported AES formats.

    ``openssl`` produces ``Salted__`` AES-256-CBC ciphertexts compatible with
    OpenSSL and CryptoJS.  ``sealed`` produces AES-256-GCM ciphertexts whose
    key comes from argon2id or PBKDF2; wrong passwords are detected by the
    authentication tag instead of by padding checks.
    """

    config: AppConfig

    _SUPPORTED_FORMATS = ("openssl", "sealed")
    _SUPPORTED_KDFS = ("argon2id", "pbkdf2")

    def _normalise_format(self, name: str | None) -> str:
        fmt = (name or self.config.aes_format).strip().lower()
        if fmt not in self._SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported AES format: {name or self.config.aes_format}")
        return fmt

    def _normalise_kdf_name(self, name: str | None) -> str:
        algorithm = (name or self.config.kdf_algorithm).strip().lower()
        if algorithm not in self._SUPPORTED_KDFS:
            raise ValueError(f"Unsupported KDF algorithm: {name}")
        return algorithm

    def _derive_key_pbkdf2(self, password: bytes, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=self.config.aes_key_size_bytes,
            salt=salt,
            iterations=self.config.pbkdf2_iterations,
            backend=default_backend(),
        )
        return kdf.derive(password)

    def _derive_key_argon2(self, password: bytes, salt: bytes) -> bytes:
        return hash_secret_raw(
            password,
            salt,
            time_cost=self.config.argon2_time_cost,
            memory_cost=self.config.argon2_memory_cost_kib,
            parallelism=self.config.argon2_parallelism,
            hash_len=self.config.aes_key_size_bytes,
            type=Argon2Type.ID,
        )

    def _derive_key(self, password: bytes, salt: bytes, algorithm: str) -> bytes:
        if algorithm == "argon2id":
            return self._derive_key_argon2(password, salt)
        return self._derive_key_pbkdf2(password, salt)

    @staticmethod
    def _build_aad(version: str, kdf_algorithm: str) -> bytes:
        metadata = {
            "cipher": "AES-256-GCM",
            "kdf": kdf_algorithm,
            "version": version,
        }
        return json.dumps(metadata, sort_keys=True, separators=(",", ":")).encode("utf-8")

    def encrypt(self, text: str, password: str, aes_format: str | None = None) -> str:
        """Encrypt ``text`` with ``password`` and return base64 text."""

        fmt = self._normalise_format(aes_format)
        if fmt == "openssl":
            raw = self._encrypt_openssl(text.encode("utf-8"), password.encode("utf-8"))
        else:
            raw = self._encrypt_sealed(text.encode("utf-8"), password.encode("utf-8"))
        return btoa(from_raw_bytes(raw))

    def decrypt(self, ciphertext: str, password: str) -> str:
        """Decrypt base64 text produced by :meth:`encrypt` in either format.

        Every failure, including an empty plaintext, raises
        :class:`DecodeError` carrying :data:`INVALID_PASSWORD_MESSAGE`.
        """

        try:
            raw = to_raw_bytes(atob(ciphertext))
        except DecodeError as exc:
            raise DecodeError(INVALID_PASSWORD_MESSAGE) from exc

        secret = password.encode("utf-8")
        if raw.startswith(OPENSSL_MAGIC):
            plaintext = self._decrypt_openssl(raw, secret)
        elif raw.startswith(MAGIC):
            plaintext = self._decrypt_sealed(raw, secret)
        else:
            logger.debug("Ciphertext has no recognised header")
            raise DecodeError(INVALID_PASSWORD_MESSAGE)

        try:
            text = plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(INVALID_PASSWORD_MESSAGE) from exc
        if not text:
            raise DecodeError(INVALID_PASSWORD_MESSAGE)
        return text

    def _encrypt_openssl(self, data: bytes, password: bytes) -> bytes:
        salt = os.urandom(_OPENSSL_SALT_SIZE)
        key, iv = evp_bytes_to_key(password, salt)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(data) + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv), backend=default_backend()).encryptor()
        return OPENSSL_MAGIC + salt + encryptor.update(padded) + encryptor.finalize()

    def _decrypt_openssl(self, raw: bytes, password: bytes) -> bytes:
        header_len = len(OPENSSL_MAGIC) + _OPENSSL_SALT_SIZE
        salt = raw[len(OPENSSL_MAGIC):header_len]
        body = raw[header_len:]
        if len(salt) != _OPENSSL_SALT_SIZE or not body:
            raise DecodeError(INVALID_PASSWORD_MESSAGE)

        key, iv = evp_bytes_to_key(password, salt)
        try:
            decryptor = Cipher(algorithms.AES(key), modes.CBC(iv), backend=default_backend()).decryptor()
            padded = decryptor.update(body) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as exc:
            logger.debug("OpenSSL-format decryption failed: %s", exc)
            raise DecodeError(INVALID_PASSWORD_MESSAGE) from exc

    def _encrypt_sealed(self, data: bytes, password: bytes) -> bytes:
        salt = os.urandom(self.config.salt_size_bytes)
        kdf_algorithm = self._normalise_kdf_name(None)
        key = self._derive_key(password, salt, kdf_algorithm)
        nonce = os.urandom(_GCM_NONCE_SIZE)
        version = self.config.app_version
        ciphertext = AESGCM(key).encrypt(nonce, data, self._build_aad(version, kdf_algorithm))
        return pack_sealed(
            SealedPayload(
                version=version,
                kdf=kdf_algorithm,
                salt=salt,
                nonce=nonce,
                ciphertext=ciphertext,
            )
        )

    def _decrypt_sealed(self, raw: bytes, password: bytes) -> bytes:
        try:
            payload = unpack_sealed(raw)
        except DecodeError as exc:
            logger.debug("Sealed payload rejected: %s", exc)
            raise DecodeError(INVALID_PASSWORD_MESSAGE) from exc

        if len(payload.nonce) != _GCM_NONCE_SIZE:
            raise DecodeError(INVALID_PASSWORD_MESSAGE)

        try:
            key = self._derive_key(password, payload.salt, payload.kdf)
        except (HashingError, ValueError) as exc:
            raise DecodeError(INVALID_PASSWORD_MESSAGE) from exc
        aad = self._build_aad(payload.version, payload.kdf)
        try:
            return AESGCM(key).decrypt(payload.nonce, payload.ciphertext, aad)
        except InvalidTag as exc:
            raise DecodeError(INVALID_PASSWORD_MESSAGE) from exc


__all__ = [
    "INVALID_PASSWORD_MESSAGE",
    "OPENSSL_MAGIC",
    "CryptoManager",
    "evp_bytes_to_key",
    "md5_hex",
    "sha256_hex",
]
