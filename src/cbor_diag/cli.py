"""Command-line interface for cbor-diag."""

import argparse
import logging
import sys
from collections.abc import Sequence
from typing import Optional, Union

from . import __version__
from .edn_utils import cbor2diag, diag2cbor


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cbor-diag",
        description="Convert between CBOR and its diagnostic notation (EDN)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # diag2cbor subcommand
    d2c_parser = subparsers.add_parser("diag2cbor", help="Diagnostic notation to CBOR")
    d2c_parser.add_argument("input", nargs="?", help="Input file (default: stdin)")
    d2c_parser.add_argument(
        "--to999", action="store_true", help="Keep unknown literals in tag 999"
    )
    d2c_parser.add_argument("--hex", action="store_true", help="Write hex instead of binary")
    d2c_parser.add_argument("--output", "-o", help="Output file (default: stdout)")

    # cbor2diag subcommand
    c2d_parser = subparsers.add_parser("cbor2diag", help="CBOR to diagnostic notation")
    c2d_parser.add_argument("input", nargs="?", help="Input file (default: stdin)")
    c2d_parser.add_argument("--hex", action="store_true", help="Read hex instead of binary")
    c2d_parser.add_argument(
        "--compact", action="store_true", help="No whitespace, no literal recognition"
    )
    c2d_parser.add_argument(
        "--from999", action="store_true", help="Render tag 999 as application literal"
    )
    c2d_parser.add_argument("--output", "-o", help="Output file (default: stdout)")

    return parser


def _read(path: Optional[str], binary: bool) -> Union[str, bytes]:
    if path is None:
        return sys.stdin.buffer.read() if binary else sys.stdin.read()
    mode = "rb" if binary else "r"
    with open(path, mode) as f:
        return f.read()


def _write(path: Optional[str], data: bytes) -> None:
    if path is None:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
        return
    with open(path, "wb") as f:
        f.write(data)


def _diag2cbor(args: argparse.Namespace) -> None:
    text = _read(args.input, binary=False)
    encoded = diag2cbor(str(text), to999=args.to999)
    if args.hex:
        _write(args.output, encoded.hex().encode("ascii") + b"\n")
    else:
        _write(args.output, encoded)


def _cbor2diag(args: argparse.Namespace) -> None:
    if args.hex:
        data = bytes.fromhex("".join(str(_read(args.input, binary=False)).split()))
    else:
        data = bytes(_read(args.input, binary=True))
    text = cbor2diag(data, pretty=not args.compact, from999=args.from999)
    _write(args.output, text.encode("utf-8") + b"\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "diag2cbor":
            _diag2cbor(args)
        else:
            _cbor2diag(args)
    except (ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
