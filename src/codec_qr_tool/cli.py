"""Command line front end for the transforms.

Usage:
    codec-qr encode base64 "hello"
    codec-qr decode xor "Hw4YHw==" --key k
    echo secret | codec-qr encode aes --key "pass phrase"
    codec-qr encode qrgen "https://example.com" --qr-out code.png
    codec-qr decode qrdecode --image code.png
"""
from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .config import AppConfig
from .dispatcher import Direction, Method, OperationRequest, TransformDispatcher
from .errors import UserInputError
from .logging_setup import configure_logging

EXIT_OK = 0
EXIT_ERROR_RESULT = 1
EXIT_USER_INPUT = 2

QR_OUT_HINT = "Pass --qr-out PATH to save the QR image."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codec-qr",
        description="Encode, decode, encrypt, hash and QR-convert text.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Methods: " + ", ".join(method.value for method in Method) + "\n"
            "TEXT is read from standard input when omitted."
        ),
    )
    parser.add_argument("direction", choices=[direction.value for direction in Direction])
    parser.add_argument("method", choices=[method.value for method in Method])
    parser.add_argument("text", nargs="?", default=None, help="Input text")
    parser.add_argument("-k", "--key", default="", help="XOR key or AES password")
    parser.add_argument("--image", default=None, help="Image file for qrdecode")
    parser.add_argument("--qr-out", default=None, help="Write the qrgen PNG to this path")
    parser.add_argument("-o", "--output", default=None, help="Write the result to a UTF-8 file")
    parser.add_argument(
        "--aes-format",
        choices=["openssl", "sealed"],
        default=None,
        help="Ciphertext format used by aes encode (default: openssl)",
    )
    parser.add_argument(
        "--strict-hex",
        action="store_true",
        help="Reject odd-length or non-hex input on hex decode",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = AppConfig()
    if args.aes_format:
        config = replace(config, aes_format=args.aes_format)
    if args.strict_hex:
        config = replace(config, strict_hex=True)
    if args.log_level:
        config = replace(config, log_level=args.log_level)
    configure_logging(config.log_level)

    text = args.text
    if text is None:
        text = "" if args.method == Method.QRDECODE.value else sys.stdin.read().rstrip("\n")

    dispatcher = TransformDispatcher(config)
    request = OperationRequest(
        method=Method(args.method),
        direction=Direction(args.direction),
        input_text=text,
        key=args.key,
        image_path=args.image,
    )

    try:
        result = dispatcher.run(request)
    except UserInputError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USER_INPUT

    if result.qr_text is not None:
        if args.qr_out:
            try:
                dispatcher.qr.save_png(result.qr_text, args.qr_out)
            except (OSError, RuntimeError, ValueError) as exc:
                print(f"Error: {exc}", file=sys.stderr)
                return EXIT_ERROR_RESULT
        else:
            print(QR_OUT_HINT, file=sys.stderr)

    if result.is_error:
        print(result.text, file=sys.stderr)
        return EXIT_ERROR_RESULT

    if args.output:
        try:
            Path(args.output).write_bytes(result.text.encode("utf-8"))
        except OSError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return EXIT_ERROR_RESULT
    else:
        print(result.text)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - manual launch only
    raise SystemExit(main())
