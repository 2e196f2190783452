"""Exception hierarchy shared by the transforms and the user interfaces."""
from __future__ import annotations


class ToolError(Exception):
    """Base class for errors raised by the Codec QR Tool."""


class UserInputError(ToolError):
    """A required input (key, text or image file) is missing or invalid.

    The interfaces report these as a blocking alert; no computation happens.
    """


class DecodeError(ToolError, ValueError):
    """Input could not be decoded or decrypted."""


class UnsupportedOperationError(ToolError):
    """The direction is not available for the selected method."""


class QRDecodeError(DecodeError):
    """An image file could not be read or rasterised for QR scanning."""


__all__ = [
    "ToolError",
    "UserInputError",
    "DecodeError",
    "UnsupportedOperationError",
    "QRDecodeError",
]
