"""FastAPI server exposing the receipt parser over HTTP."""

import json
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from receiptsift.receipt.ocr_result_parser import parse_receipt
from receiptsift.receipt.parser_config import ParserConfig
from receiptsift.receipt.serialization import ReceiptInputError, ocr_result_from_dict, parsed_receipt_to_dict
from receiptsift.runtime.logging import get_logger
from receiptsift.runtime.ocr_client import OCRServiceUnavailable, call_ocr_service_async, default_ocr_url
from receiptsift.runtime.parser_settings import load_parser_config

logger = get_logger(__name__)

app = FastAPI(title="Receipt Parser")


def _parser_config() -> ParserConfig:
    return load_parser_config()


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"status": "error", "message": message}, status_code=status_code)


@app.post("/parse")
async def parse_ocr_result(request: Request) -> JSONResponse:
    """Parse an OCR result (JSON contract) into a structured receipt."""
    try:
        payload = await request.json()
    except json.JSONDecodeError:
        return _error("Request body must be JSON", 422)

    try:
        ocr_result = ocr_result_from_dict(payload)
    except ReceiptInputError as e:
        logger.info("Rejected OCR payload: %s", e)
        return _error(str(e), 422)

    receipt = parse_receipt(ocr_result, _parser_config())
    logger.info("Parsed receipt: %s, %d items", receipt.merchant_name, len(receipt.items))
    return JSONResponse(parsed_receipt_to_dict(receipt))


@app.post("/upload")
async def upload_receipt(request: Request) -> JSONResponse:
    """Receive a receipt image, run it through the OCR service and parse the result."""
    form = await request.form()

    file = None
    for key, value in form.items():
        logger.debug("Form field: key=%r, type=%s", key, type(value))
        if hasattr(value, "read"):
            file = value
            break

    if not file:
        return _error("No file found in request", 400)

    file_filename = getattr(file, "filename", None) or "receipt.jpg"
    contents = await file.read()

    try:
        _, ocr_result = await call_ocr_service_async(Path(file_filename).name, contents, default_ocr_url())
    except OCRServiceUnavailable as e:
        return _error(str(e), 502)

    receipt = parse_receipt(ocr_result, _parser_config())
    logger.info("Parsed upload %s: %s, %d items", file_filename, receipt.merchant_name, len(receipt.items))
    return JSONResponse(parsed_receipt_to_dict(receipt))


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
