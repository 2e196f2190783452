"""QR code generation and decoding utilities."""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import AppConfig
from .errors import QRDecodeError

logger = logging.getLogger(__name__)


def _import_segno():
    try:
        import segno  # type: ignore
    except Exception as exc:  # pragma: no cover - depends on environment
        raise RuntimeError("QR generation requires segno; install segno") from exc
    return segno


def _import_decoders():
    try:
        import cv2  # type: ignore
        import numpy  # type: ignore
        from pyzbar import pyzbar  # type: ignore
    except Exception as exc:  # pragma: no cover - depends on environment
        raise RuntimeError(
            "QR decoding requires opencv-python-headless, numpy and pyzbar"
        ) from exc
    return cv2, numpy, pyzbar


@dataclass(slots=True)
class QRCodeManager:
    """Generate QR codes with :mod:`segno` and read them with :mod:`pyzbar`."""

    config: AppConfig

    def is_available(self) -> bool:
        try:
            _import_segno()
        except RuntimeError:
            return False
        return True

    def can_decode(self) -> bool:
        try:
            _import_decoders()
        except RuntimeError:
            return False
        return True

    def make(self, text: str):
        """Return a :mod:`segno` QR code for ``text``."""

        segno = _import_segno()
        return segno.make(text, error=self.config.qr_error_correction.lower(), micro=False)

    def to_png_bytes(self, text: str, scale: int | None = None) -> bytes:
        buffer = io.BytesIO()
        self.make(text).save(
            buffer,
            kind="png",
            scale=scale or self.config.qr_scale,
            border=self.config.qr_border,
        )
        return buffer.getvalue()

    def save_png(self, text: str, path: str | Path) -> Path:
        """Write a QR code representing ``text`` to ``path``."""

        target = Path(path)
        target.write_bytes(self.to_png_bytes(text))
        logger.info("QR image written to %s", target)
        return target

    def to_qpixmap(self, text: str):  # pragma: no cover - requires PyQt at runtime
        """Return a ``QPixmap`` of the QR code sized for the preview area."""

        try:
            from PyQt5.QtCore import Qt
            from PyQt5.QtGui import QImage, QPixmap
        except Exception as exc:  # pragma: no cover - depends on environment
            raise RuntimeError("PyQt5 is required to generate a preview pixmap") from exc

        image = QImage()
        if not image.loadFromData(self.to_png_bytes(text)):
            raise RuntimeError("Failed to load QR image into QImage")

        size = self.config.qr_preview_size
        return QPixmap.fromImage(image).scaled(
            size, size, Qt.KeepAspectRatio, Qt.FastTransformation
        )

    def load_image(self, path: str | Path):
        """Read ``path`` and rasterise it at native resolution.

        Returns a grayscale pixel array.  Transparent pixels are composited
        onto white so that codes drawn on a transparent background stay
        readable.
        """

        cv2, numpy, _pyzbar = _import_decoders()

        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise QRDecodeError("Failed to read file") from exc
        if not data:
            raise QRDecodeError("Invalid image")

        try:
            image = cv2.imdecode(numpy.frombuffer(data, dtype=numpy.uint8), cv2.IMREAD_UNCHANGED)
        except cv2.error as exc:
            raise QRDecodeError("Invalid image") from exc
        if image is None:
            raise QRDecodeError("Invalid image")

        if image.dtype == numpy.uint16:
            image = (image // 257).astype(numpy.uint8)
        if image.ndim == 2:
            return image
        if image.shape[2] == 4:
            alpha = image[:, :, 3:4].astype(numpy.float32) / 255.0
            blended = image[:, :, :3].astype(numpy.float32) * alpha + 255.0 * (1.0 - alpha)
            image = blended.astype(numpy.uint8)
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)

    def decode_image(self, gray) -> Optional[str]:
        """Scan a grayscale pixel array and return the first QR code's text."""

        cv2, _numpy, pyzbar = _import_decoders()

        for processed in (
            gray,
            cv2.GaussianBlur(gray, (5, 5), 0),
            cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)[1],
        ):
            decoded = pyzbar.decode(processed, symbols=[pyzbar.ZBarSymbol.QRCODE])
            if decoded:
                return bytes(decoded[0].data).decode("utf-8", errors="replace")

        return None

    def read_text_from_file(self, path: str | Path) -> Optional[str]:
        """Decode the QR code in the image at ``path``.

        Returns ``None`` when the image holds no readable code and raises
        :class:`~codec_qr_tool.errors.QRDecodeError` when the file cannot be
        read or is not an image.
        """

        text = self.decode_image(self.load_image(path))
        logger.debug("QR scan of %s %s", path, "succeeded" if text is not None else "found nothing")
        return text


__all__ = ["QRCodeManager"]
