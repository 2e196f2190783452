from __future__ import annotations

import base64
import sys
import types
from dataclasses import replace
from itertools import product

import pytest

from codec_qr_tool import encoders
from codec_qr_tool.dispatcher import (
    HASH_DECODE_MESSAGE,
    QR_GENERATED_MESSAGE,
    UNSUPPORTED_DECODE_MESSAGE,
    UNSUPPORTED_ENCODE_MESSAGE,
    Direction,
    Method,
    OperationRequest,
    ResultKind,
    TransformDispatcher,
)
from codec_qr_tool.errors import UserInputError
from codec_qr_tool.qr import QRCodeManager
from codec_qr_tool.security import INVALID_PASSWORD_MESSAGE
from codec_qr_tool.state import AppState


def encode(dispatcher, method, text="", key=""):
    return dispatcher.run(OperationRequest(Method(method), Direction.ENCODE, text, key))


def decode(dispatcher, method, text="", key="", image_path=None):
    return dispatcher.run(OperationRequest(Method(method), Direction.DECODE, text, key, image_path))


def test_every_method_and_direction_has_a_handler(dispatcher):
    assert set(dispatcher._handlers) == set(product(Method, Direction))


def test_base64_encode_scenario(dispatcher):
    result = encode(dispatcher, "base64", "hello")

    assert result.text == "aGVsbG8="
    assert result.kind is ResultKind.TEXT


def test_hex_encode_scenario(dispatcher):
    assert encode(dispatcher, "hex", "AB").text == "4142"


def test_hex_decode_empty_input(dispatcher):
    assert decode(dispatcher, "hex", "").text == ""


def test_hex_strict_mode_reports_decode_error(config):
    dispatcher = TransformDispatcher(replace(config, strict_hex=True))

    result = decode(dispatcher, "hex", "abc")

    assert result.is_error
    assert "odd number" in result.text


def test_xor_scenario(dispatcher):
    encoded = encode(dispatcher, "xor", "test", "k").text

    assert encoded == base64.b64encode(bytes(b ^ ord("k") for b in b"test")).decode("ascii")
    assert decode(dispatcher, "xor", encoded, "k").text == "test"


@pytest.mark.parametrize(
    "direction, message",
    [
        (Direction.ENCODE, "Enter XOR key (one character recommended)."),
        (Direction.DECODE, "Enter XOR key used during encode."),
    ],
)
def test_xor_requires_key(dispatcher, direction, message):
    with pytest.raises(UserInputError) as excinfo:
        dispatcher.run(OperationRequest(Method.XOR, direction, "text"))

    assert str(excinfo.value) == message


def test_aes_roundtrip_and_wrong_password(dispatcher):
    ciphertext = encode(dispatcher, "aes", "attack at dawn", "pw").text

    assert decode(dispatcher, "aes", ciphertext, "pw").text == "attack at dawn"

    wrong = decode(dispatcher, "aes", ciphertext, "not-pw")
    assert wrong.text == INVALID_PASSWORD_MESSAGE
    assert wrong.is_error


def test_aes_requires_password(dispatcher):
    with pytest.raises(UserInputError) as excinfo:
        encode(dispatcher, "aes", "text")

    assert str(excinfo.value) == "Enter AES password."


def test_aes_garbage_is_invalid_password(dispatcher):
    assert decode(dispatcher, "aes", "%%%", "pw").text == INVALID_PASSWORD_MESSAGE


def test_hashes(dispatcher):
    assert encode(dispatcher, "md5", "hello").text == "5d41402abc4b2a76b9719d911017c592"
    assert encode(dispatcher, "sha256", "").text == (
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )


@pytest.mark.parametrize("method", ["md5", "sha256"])
@pytest.mark.parametrize("text", ["", "anything", "5d41402abc4b2a76b9719d911017c592"])
def test_hash_decode_is_rejected(dispatcher, method, text):
    result = decode(dispatcher, method, text, key="ignored")

    assert result.text == HASH_DECODE_MESSAGE
    assert result.is_error


def test_base64_decode_error_is_reported_in_result(dispatcher):
    result = decode(dispatcher, "base64", "not*base64")

    assert result.is_error
    assert result.text.startswith("Invalid base64 input")


def test_url_decode_error_is_reported_in_result(dispatcher):
    result = decode(dispatcher, "url", "%zz")

    assert result.is_error
    assert result.text.startswith("URI malformed")


def test_unexpected_exception_is_rendered(dispatcher, monkeypatch):
    def boom(_text):
        raise RuntimeError("boom")

    monkeypatch.setattr(encoders, "hex_encode", boom)

    result = encode(dispatcher, "hex", "AB")

    assert result.text == "Error: boom"
    assert result.is_error


def test_qrgen_returns_image_result(dispatcher, monkeypatch):
    monkeypatch.setitem(sys.modules, "segno", types.SimpleNamespace(make=lambda *_a, **_k: object()))

    result = encode(dispatcher, "qrgen", "https://example.com")

    assert result.kind is ResultKind.QR_IMAGE
    assert result.text == QR_GENERATED_MESSAGE
    assert result.qr_text == "https://example.com"


def test_qrgen_requires_text(dispatcher):
    with pytest.raises(UserInputError) as excinfo:
        encode(dispatcher, "qrgen", "")

    assert str(excinfo.value) == "Enter text to generate QR code."


def test_not_applicable_directions(dispatcher):
    assert decode(dispatcher, "qrgen", "x").text == UNSUPPORTED_DECODE_MESSAGE
    assert encode(dispatcher, "qrdecode", "x").text == UNSUPPORTED_ENCODE_MESSAGE


def test_qrdecode_without_file_leaves_output_unchanged(dispatcher):
    state = AppState(result_text="previous output")
    request = OperationRequest(Method.QRDECODE, Direction.DECODE, "ignored")

    with pytest.raises(UserInputError) as excinfo:
        state.apply_result(dispatcher.run(request))

    assert "Upload QR Image" in str(excinfo.value)
    assert state.result_text == "previous output"


def test_qrdecode_reports_unreadable_file(dispatcher, monkeypatch, tmp_path):
    monkeypatch.setattr("codec_qr_tool.qr._import_decoders", lambda: (None, None, None))

    result = decode(dispatcher, "qrdecode", image_path=str(tmp_path / "missing.png"))

    assert result.is_error
    assert result.text == "Error decoding QR: Failed to read file"


def test_qrdecode_reports_missing_code(dispatcher, monkeypatch):
    monkeypatch.setattr(QRCodeManager, "read_text_from_file", lambda _self, _path: None)

    result = decode(dispatcher, "qrdecode", image_path="blank.png")

    assert result.text == "No QR code found in image."


def test_qrdecode_returns_decoded_text(dispatcher, monkeypatch):
    monkeypatch.setattr(QRCodeManager, "read_text_from_file", lambda _self, _path: "hi")

    assert decode(dispatcher, "qrdecode", image_path="code.png").text == "hi"


def test_unknown_method_is_user_error():
    with pytest.raises(UserInputError):
        Method.parse("rot13")
