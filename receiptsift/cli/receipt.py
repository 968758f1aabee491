"""Receipt command handlers used by the unified CLI."""

import argparse
import json
import sys
import tomllib
from pathlib import Path

from receiptsift.domain.receipt import OcrResult, ParsedReceipt
from receiptsift.receipt.formatter import format_parsed_receipt
from receiptsift.receipt.ocr_result_parser import parse_receipt
from receiptsift.receipt.parser_config import ParserConfig
from receiptsift.receipt.serialization import (
    ReceiptInputError,
    ocr_result_from_dict,
    ocr_result_from_text,
    parsed_receipt_to_dict,
)
from receiptsift.runtime import get_logger, load_parser_config

logger = get_logger(__name__)


def _load_config_or_exit(config_path: str | None) -> ParserConfig:
    try:
        return load_parser_config(config_path)
    except (tomllib.TOMLDecodeError, ValueError) as e:
        logger.error("Invalid parser settings: %s", e)
        print(f"Error: invalid parser settings: {e}")
        sys.exit(1)


def _print_receipt(receipt: ParsedReceipt, as_json: bool) -> None:
    if as_json:
        print(json.dumps(parsed_receipt_to_dict(receipt), indent=2, ensure_ascii=False))
    else:
        print(format_parsed_receipt(receipt), end="")


def _read_ocr_input(path: Path) -> OcrResult:
    """Read an OCR JSON payload (``*.json``) or plain receipt text."""
    content = path.read_text(encoding="utf-8")
    if path.suffix.lower() != ".json":
        return ocr_result_from_text(content)
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise ReceiptInputError(f"{path} is not valid JSON: {e}") from e
    return ocr_result_from_dict(payload)


def cmd_parse(args: argparse.Namespace) -> None:
    """Parse an OCR JSON result or a plain-text receipt file."""
    input_path = Path(args.file)
    if not input_path.exists():
        print(f"Error: File not found: {input_path}")
        sys.exit(1)

    config = _load_config_or_exit(args.config)
    try:
        ocr_result = _read_ocr_input(input_path)
    except ReceiptInputError as e:
        logger.error("%s", e)
        print(f"Error: {e}")
        sys.exit(1)

    receipt = parse_receipt(ocr_result, config)
    _print_receipt(receipt, args.json)


def cmd_scan(args: argparse.Namespace) -> None:
    """Send a receipt image to the OCR service and parse the result."""
    from receiptsift.runtime.ocr_client import OCRServiceUnavailable, call_ocr_service, default_ocr_url, save_ocr_json

    image_path = Path(args.image)
    if not image_path.exists():
        print(f"Error: Receipt file not found: {image_path}")
        sys.exit(1)

    config = _load_config_or_exit(args.config)
    try:
        raw_ocr_result, ocr_result = call_ocr_service(image_path, args.ocr_url or default_ocr_url())
    except OCRServiceUnavailable as e:
        logger.error("%s", e)
        print(f"OCR service unavailable: {e}")
        print("Make sure the OCR service is running before scanning receipts.")
        sys.exit(1)

    if args.save_ocr:
        ocr_json_path = save_ocr_json(raw_ocr_result, image_path)
        print(f"Saved OCR JSON to: {ocr_json_path}")

    receipt = parse_receipt(ocr_result, config)
    _print_receipt(receipt, args.json)


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI server for parsing receipts over HTTP."""
    import uvicorn

    from receiptsift.runtime import receipt_server as server

    print(f"Starting receipt server on {args.host}:{args.port}")
    print(f"Endpoints: http://{args.host}:{args.port}/parse | /upload | /health")
    print("Press Ctrl+C to stop")

    uvicorn.run(server.app, host=args.host, port=args.port)
