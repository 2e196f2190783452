"""Run the Codec QR Tool GUI."""
from __future__ import annotations


def main() -> int:
    from .app import run

    return run()


if __name__ == "__main__":  # pragma: no cover - manual launch only
    raise SystemExit(main())
