from __future__ import annotations

import base64
from dataclasses import replace

import pytest

from codec_qr_tool.config import AppConfig
from codec_qr_tool.errors import DecodeError
from codec_qr_tool.payload import is_sealed_payload
from codec_qr_tool.security import (
    INVALID_PASSWORD_MESSAGE,
    OPENSSL_MAGIC,
    CryptoManager,
    evp_bytes_to_key,
    md5_hex,
    sha256_hex,
)


def test_digests_are_lowercase_hex():
    assert md5_hex("hello") == "5d41402abc4b2a76b9719d911017c592"
    assert sha256_hex("hello") == "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"


def test_evp_bytes_to_key_lengths_and_determinism():
    key, iv = evp_bytes_to_key(b"password", b"saltsalt")

    assert len(key) == 32
    assert len(iv) == 16
    assert (key, iv) == evp_bytes_to_key(b"password", b"saltsalt")
    assert key != evp_bytes_to_key(b"password", b"saltsal2")[0]


def test_openssl_format_layout(config: AppConfig):
    crypto = CryptoManager(config)

    ciphertext = crypto.encrypt("secret message", "pw")
    raw = base64.b64decode(ciphertext)

    assert ciphertext.startswith("U2FsdGVkX1")
    assert raw.startswith(OPENSSL_MAGIC)
    assert (len(raw) - 16) % 16 == 0


@pytest.mark.parametrize("text", ["secret", "héllo ✓", "x" * 100])
def test_openssl_roundtrip(config: AppConfig, text):
    crypto = CryptoManager(config)

    assert crypto.decrypt(crypto.encrypt(text, "pass phrase"), "pass phrase") == text


def test_encryption_is_salted(config: AppConfig):
    crypto = CryptoManager(config)

    assert crypto.encrypt("same", "pw") != crypto.encrypt("same", "pw")


def test_openssl_wrong_password(config: AppConfig):
    crypto = CryptoManager(config)
    ciphertext = crypto.encrypt("secret", "right")

    with pytest.raises(DecodeError) as excinfo:
        crypto.decrypt(ciphertext, "wrong")

    assert str(excinfo.value) == INVALID_PASSWORD_MESSAGE


@pytest.mark.parametrize("kdf", ["argon2id", "pbkdf2"])
def test_sealed_roundtrip(config: AppConfig, kdf):
    crypto = CryptoManager(replace(config, aes_format="sealed", kdf_algorithm=kdf))

    ciphertext = crypto.encrypt("meet at the north gate", "A" * 12)

    assert is_sealed_payload(base64.b64decode(ciphertext))
    assert crypto.decrypt(ciphertext, "A" * 12) == "meet at the north gate"


def test_sealed_wrong_password(config: AppConfig):
    crypto = CryptoManager(replace(config, aes_format="sealed", kdf_algorithm="pbkdf2"))
    ciphertext = crypto.encrypt("secret", "A" * 12)

    with pytest.raises(DecodeError) as excinfo:
        crypto.decrypt(ciphertext, "B" * 12)

    assert str(excinfo.value) == INVALID_PASSWORD_MESSAGE


def test_sealed_rejects_tampered_ciphertext(config: AppConfig):
    crypto = CryptoManager(replace(config, aes_format="sealed", kdf_algorithm="pbkdf2"))
    raw = bytearray(base64.b64decode(crypto.encrypt("secret", "pw")))
    raw[-1] ^= 0x01

    with pytest.raises(DecodeError):
        crypto.decrypt(base64.b64encode(bytes(raw)).decode("ascii"), "pw")


def test_decrypt_reads_either_format(config: AppConfig):
    sealed = CryptoManager(replace(config, aes_format="sealed", kdf_algorithm="pbkdf2"))
    openssl = CryptoManager(config)

    assert openssl.decrypt(sealed.encrypt("one", "pw"), "pw") == "one"
    assert sealed.decrypt(openssl.encrypt("two", "pw"), "pw") == "two"


def test_explicit_format_overrides_config(config: AppConfig):
    crypto = CryptoManager(config)

    ciphertext = crypto.encrypt("text", "pw", aes_format="sealed")

    assert is_sealed_payload(base64.b64decode(ciphertext))


@pytest.mark.parametrize(
    "ciphertext",
    ["not base64!!", base64.b64encode(b"random bytes here").decode("ascii"), "U2FsdGVkX18="],
)
def test_decrypt_rejects_malformed_ciphertext(config: AppConfig, ciphertext):
    crypto = CryptoManager(config)

    with pytest.raises(DecodeError) as excinfo:
        crypto.decrypt(ciphertext, "pw")

    assert str(excinfo.value) == INVALID_PASSWORD_MESSAGE


def test_unsupported_format_raises(config: AppConfig):
    crypto = CryptoManager(replace(config, aes_format="rot13"))

    with pytest.raises(ValueError):
        crypto.encrypt("text", "pw")
