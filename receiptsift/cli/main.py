#!/usr/bin/env python3

import argparse
import logging
from collections.abc import Callable, Sequence


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    """
    Normalize command handlers that call sys.exit().

    This keeps process termination centralized in this module's entrypoint.
    """
    try:
        command(args)
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="receiptsift",
        description="Turn noisy OCR receipt text into structured receipts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  parse <file> [--json]      Parse an OCR JSON result or a plain-text receipt
  scan <image> [--ocr-url]   OCR a receipt image, then parse it
  serve [--host] [--port]    Start the receipt parsing HTTP server

Environment:
  RECEIPTSIFT_LOG_LEVEL      DEBUG, INFO, WARNING or ERROR (default: INFO)
  RECEIPTSIFT_CONFIG         Parser settings TOML (default: config/parser.toml)
  OCR_SERVICE_URL            OCR service base URL (default: http://localhost:8001)
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log parsing decisions (DEBUG level)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # parse command
    parse_parser = subparsers.add_parser("parse", help="Parse an OCR JSON result or plain-text receipt")
    parse_parser.add_argument("file", help="OCR JSON (*.json) or plain-text receipt")
    parse_parser.add_argument("--json", action="store_true", help="Print the parsed receipt as JSON")
    parse_parser.add_argument("--config", default=None, help="Parser settings TOML file")

    # scan command
    scan_parser = subparsers.add_parser("scan", help="Scan a receipt image")
    scan_parser.add_argument("image", help="Path to receipt image")
    scan_parser.add_argument("--ocr-url", default=None, help="OCR service URL (default: $OCR_SERVICE_URL)")
    scan_parser.add_argument("--save-ocr", action="store_true", help="Save the raw OCR JSON under ocr_json/")
    scan_parser.add_argument("--json", action="store_true", help="Print the parsed receipt as JSON")
    scan_parser.add_argument("--config", default=None, help="Parser settings TOML file")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start receipt parsing server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=8080, help="Port to bind to (default: 8080)")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.verbose:
        from receiptsift.runtime import configure_logging, set_log_level

        configure_logging()
        set_log_level(logging.DEBUG)

    if args.command == "parse":
        from receiptsift.cli.receipt import cmd_parse

        return _run_command(cmd_parse, args)
    elif args.command == "scan":
        from receiptsift.cli.receipt import cmd_scan

        return _run_command(cmd_scan, args)
    elif args.command == "serve":
        from receiptsift.cli.receipt import cmd_serve

        return _run_command(cmd_serve, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
