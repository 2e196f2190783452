"""Map a selected method, direction and input onto a displayable result."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional

from . import encoders
from .config import AppConfig
from .errors import DecodeError, QRDecodeError, UnsupportedOperationError, UserInputError
from .qr import QRCodeManager
from .security import INVALID_PASSWORD_MESSAGE, CryptoManager, md5_hex, sha256_hex

logger = logging.getLogger(__name__)

HASH_DECODE_MESSAGE = "❌ Hashes (MD5/SHA256) are one-way and cannot be decoded."
QR_GENERATED_MESSAGE = "QR image generated below."
QR_NOT_FOUND_MESSAGE = "No QR code found in image."
UNSUPPORTED_ENCODE_MESSAGE = "Unsupported method for encode."
UNSUPPORTED_DECODE_MESSAGE = "Unsupported method for decode."


class Method(str, Enum):
    BASE64 = "base64"
    HEX = "hex"
    URL = "url"
    XOR = "xor"
    AES = "aes"
    MD5 = "md5"
    SHA256 = "sha256"
    QRGEN = "qrgen"
    QRDECODE = "qrdecode"

    @classmethod
    def parse(cls, value: "str | Method") -> "Method":
        try:
            return cls(value)
        except ValueError as exc:
            raise UserInputError(f"Unknown method: {value}") from exc


class Direction(str, Enum):
    ENCODE = "encode"
    DECODE = "decode"


class ResultKind(str, Enum):
    TEXT = "text"
    ERROR = "error"
    QR_IMAGE = "qr_image"


@dataclass(slots=True, frozen=True)
class OperationRequest:
    method: Method
    direction: Direction
    input_text: str = ""
    key: str = ""
    image_path: Optional[str] = None


@dataclass(slots=True, frozen=True)
class OperationResult:
    """Outcome of one request.

    ``qr_text`` is set only for QR generation; the interface renders it as
    an image next to the confirmation ``text``.
    """

    text: str
    kind: ResultKind = ResultKind.TEXT
    qr_text: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.kind is ResultKind.ERROR


Handler = Callable[[OperationRequest], OperationResult]


@dataclass(slots=True)
class TransformDispatcher:
    """Run one :class:`OperationRequest`.

    Missing inputs raise :class:`UserInputError` before anything is computed.
    Every other failure is reported through the returned result.
    """

    config: AppConfig
    crypto: CryptoManager = field(init=False, repr=False)
    qr: QRCodeManager = field(init=False, repr=False)
    _handlers: Dict[tuple, Handler] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.crypto = CryptoManager(self.config)
        self.qr = QRCodeManager(self.config)
        encode, decode = Direction.ENCODE, Direction.DECODE
        self._handlers = {
            (Method.BASE64, encode): lambda r: _text(encoders.base64_encode(r.input_text)),
            (Method.BASE64, decode): lambda r: _text(encoders.base64_decode(r.input_text)),
            (Method.HEX, encode): lambda r: _text(encoders.hex_encode(r.input_text)),
            (Method.HEX, decode): self._hex_decode,
            (Method.URL, encode): lambda r: _text(encoders.url_encode(r.input_text)),
            (Method.URL, decode): lambda r: _text(encoders.url_decode(r.input_text)),
            (Method.XOR, encode): self._xor_encode,
            (Method.XOR, decode): self._xor_decode,
            (Method.AES, encode): self._aes_encode,
            (Method.AES, decode): self._aes_decode,
            (Method.MD5, encode): lambda r: _text(md5_hex(r.input_text)),
            (Method.MD5, decode): _reject_hash_decode,
            (Method.SHA256, encode): lambda r: _text(sha256_hex(r.input_text)),
            (Method.SHA256, decode): _reject_hash_decode,
            (Method.QRGEN, encode): self._qr_generate,
            (Method.QRGEN, decode): _unsupported(UNSUPPORTED_DECODE_MESSAGE),
            (Method.QRDECODE, encode): _unsupported(UNSUPPORTED_ENCODE_MESSAGE),
            (Method.QRDECODE, decode): self._qr_decode,
        }
        missing = [
            (method.value, direction.value)
            for method in Method
            for direction in Direction
            if (method, direction) not in self._handlers
        ]
        if missing:  # pragma: no cover - guards future edits to the table
            raise RuntimeError(f"No handler registered for {missing}")

    def run(self, request: OperationRequest) -> OperationResult:
        method = Method.parse(request.method)
        direction = Direction(request.direction)
        handler = self._handlers[(method, direction)]
        logger.debug("Running %s %s", direction.value, method.value)

        try:
            return handler(request)
        except UserInputError:
            raise
        except (DecodeError, UnsupportedOperationError) as exc:
            logger.info("%s %s rejected: %s", direction.value, method.value, exc)
            return OperationResult(str(exc), ResultKind.ERROR)
        except Exception as exc:
            logger.exception("Unexpected failure during %s %s", direction.value, method.value)
            return OperationResult(f"Error: {exc}", ResultKind.ERROR)

    def _hex_decode(self, request: OperationRequest) -> OperationResult:
        return _text(encoders.hex_decode(request.input_text, strict=self.config.strict_hex))

    def _xor_encode(self, request: OperationRequest) -> OperationResult:
        if not request.key:
            raise UserInputError("Enter XOR key (one character recommended).")
        return _text(encoders.xor_encode(request.input_text, request.key))

    def _xor_decode(self, request: OperationRequest) -> OperationResult:
        if not request.key:
            raise UserInputError("Enter XOR key used during encode.")
        return _text(encoders.xor_decode(request.input_text, request.key))

    def _aes_encode(self, request: OperationRequest) -> OperationResult:
        if not request.key:
            raise UserInputError("Enter AES password.")
        return _text(self.crypto.encrypt(request.input_text, request.key))

    def _aes_decode(self, request: OperationRequest) -> OperationResult:
        if not request.key:
            raise UserInputError("Enter AES password.")
        try:
            return _text(self.crypto.decrypt(request.input_text, request.key))
        except DecodeError:
            return OperationResult(INVALID_PASSWORD_MESSAGE, ResultKind.ERROR)

    def _qr_generate(self, request: OperationRequest) -> OperationResult:
        if not request.input_text:
            raise UserInputError("Enter text to generate QR code.")
        # Build the symbol now so capacity errors surface in the result area.
        self.qr.make(request.input_text)
        return OperationResult(QR_GENERATED_MESSAGE, ResultKind.QR_IMAGE, qr_text=request.input_text)

    def _qr_decode(self, request: OperationRequest) -> OperationResult:
        if not request.image_path:
            raise UserInputError('Choose a QR image file using "Upload QR Image" button.')
        try:
            text = self.qr.read_text_from_file(request.image_path)
        except QRDecodeError as exc:
            return OperationResult(f"Error decoding QR: {exc}", ResultKind.ERROR)
        if text is None:
            return OperationResult(QR_NOT_FOUND_MESSAGE, ResultKind.ERROR)
        return _text(text)


def _text(value: str) -> OperationResult:
    return OperationResult(value)


def _reject_hash_decode(_request: OperationRequest) -> OperationResult:
    raise UnsupportedOperationError(HASH_DECODE_MESSAGE)


def _unsupported(message: str) -> Handler:
    def handler(_request: OperationRequest) -> OperationResult:
        raise UnsupportedOperationError(message)

    return handler


__all__ = [
    "HASH_DECODE_MESSAGE",
    "QR_GENERATED_MESSAGE",
    "QR_NOT_FOUND_MESSAGE",
    "UNSUPPORTED_ENCODE_MESSAGE",
    "UNSUPPORTED_DECODE_MESSAGE",
    "Method",
    "Direction",
    "ResultKind",
    "OperationRequest",
    "OperationResult",
    "TransformDispatcher",
]
