"""Runtime state containers used by the Codec QR Tool."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - imported for static type checking only
    from .dispatcher import OperationResult


@dataclass(slots=True)
class AppState:
    """Mutable state shared between UI components.

    Only the selected method and the displayed result survive between user
    actions; both are overwritten by the next operation.
    """

    method: str = "base64"
    result_text: str = ""
    image_path: Optional[str] = None
    dark_theme: bool = False
    qr_visible: bool = False

    def apply_result(self, result: "OperationResult") -> None:
        """Record ``result`` as the currently displayed output."""

        self.result_text = result.text
        self.qr_visible = result.qr_text is not None

    def toggle_theme(self) -> bool:
        self.dark_theme = not self.dark_theme
        return self.dark_theme


__all__ = ["AppState"]
