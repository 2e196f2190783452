"""Configuration data structures for the Codec QR Tool."""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class AppConfig:
    """Static configuration options used across the application."""

    app_name: str = "CodecQRTool"
    app_version: str = "1.0"
    aes_format: str = "openssl"
    kdf_algorithm: str = "argon2id"
    pbkdf2_iterations: int = 600_000
    argon2_time_cost: int = 3
    argon2_memory_cost_kib: int = 131_072
    argon2_parallelism: int = 2
    salt_size_bytes: int = 16
    aes_key_size_bytes: int = 32
    strict_hex: bool = False
    qr_error_correction: str = "H"
    qr_scale: int = 10
    qr_border: int = 4
    qr_preview_size: int = 240
    download_filename: str = "result.txt"
    log_level: str = "INFO"


@dataclass(slots=True, frozen=True)
class Palette:
    """Colours for one visual theme."""

    bg_primary: str
    bg_secondary: str
    fg_primary: str
    fg_secondary: str
    accent: str
    border: str
    warning: str


def _light_palette() -> Palette:
    return Palette(
        bg_primary="#ECEFF4",
        bg_secondary="#FFFFFF",
        fg_primary="#2E3440",
        fg_secondary="#3B4252",
        accent="#5E81AC",
        border="#D8DEE9",
        warning="#BF616A",
    )


def _dark_palette() -> Palette:
    return Palette(
        bg_primary="#2E3440",
        bg_secondary="#3B4252",
        fg_primary="#D8DEE9",
        fg_secondary="#ECEFF4",
        accent="#88C0D0",
        border="#4C566A",
        warning="#BF616A",
    )


@dataclass(slots=True)
class StyleConfig:
    """UI styling constants for the light and dark themes."""

    light: Palette = field(default_factory=_light_palette)
    dark: Palette = field(default_factory=_dark_palette)
    font_family: str = "Segoe UI, sans-serif"
    font_size: int = 14
    font_mono: str = "Courier New, monospace"
    light_toggle_label: str = "\U0001F319"
    dark_toggle_label: str = "☀️"

    def palette(self, dark: bool) -> Palette:
        return self.dark if dark else self.light

    def toggle_label(self, dark: bool) -> str:
        """Return the theme button caption for the current theme."""

        return self.dark_toggle_label if dark else self.light_toggle_label


__all__ = ["AppConfig", "Palette", "StyleConfig"]
