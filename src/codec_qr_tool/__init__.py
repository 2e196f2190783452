"""Codec QR Tool package."""
from __future__ import annotations

from .config import AppConfig, StyleConfig
from .dispatcher import Direction, Method, OperationRequest, OperationResult, TransformDispatcher
from .qr import QRCodeManager
from .security import CryptoManager
from .state import AppState

__all__ = [
    "AppConfig",
    "StyleConfig",
    "AppState",
    "Direction",
    "Method",
    "OperationRequest",
    "OperationResult",
    "TransformDispatcher",
    "QRCodeManager",
    "CryptoManager",
]

__version__ = "1.0"
