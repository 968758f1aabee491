"""HTTP client for the external OCR service."""

import json
import mimetypes
import os
import time
from pathlib import Path
from typing import Any

import httpx

from receiptsift.domain.receipt import OcrResult
from receiptsift.receipt.serialization import ocr_result_from_dict
from receiptsift.runtime.logging import get_logger
from receiptsift.runtime.paths import get_paths

logger = get_logger(__name__)

DEFAULT_OCR_SERVICE_URL = "http://localhost:8001"
OCR_TIMEOUT_SECONDS = 60.0


class OCRServiceUnavailable(RuntimeError):
    """Raised when the OCR service cannot be reached or returns an error."""


def default_ocr_url() -> str:
    return os.environ.get("OCR_SERVICE_URL", DEFAULT_OCR_SERVICE_URL)


def _image_upload(filename: str, image_bytes: bytes) -> dict[str, tuple[str, bytes, str]]:
    content_type = mimetypes.guess_type(filename)[0] or "image/jpeg"
    return {"file": (filename, image_bytes, content_type)}


def _read_ocr_response(response: httpx.Response) -> tuple[dict[str, Any], OcrResult]:
    if response.status_code != 200:
        # Response body may contain receipt text; keep it out of the logs
        logger.error("OCR service error: %s", response.status_code)
        raise OCRServiceUnavailable(f"OCR service error: {response.status_code}")

    try:
        raw_result = response.json()
        return raw_result, ocr_result_from_dict(raw_result)
    # ReceiptInputError and JSON decode errors are both ValueErrors
    except ValueError as e:
        logger.error("OCR service returned an invalid payload: %s", e)
        raise OCRServiceUnavailable(f"OCR service returned an invalid payload: {e}") from e


def call_ocr_service(
    image_path: Path,
    ocr_url: str,
    client: httpx.Client | None = None,
) -> tuple[dict[str, Any], OcrResult]:
    """
    Send a receipt image to the OCR service.

    Args:
        image_path: Receipt image on disk
        ocr_url: Base URL of the OCR service; the image is POSTed to ``{ocr_url}/ocr``
        client: Optional preconfigured client (tests pass one with a mock transport)

    Returns:
        Tuple of (raw JSON payload, OcrResult)

    Raises:
        OCRServiceUnavailable: On connection failures, non-200 responses or
            payloads that do not follow the OCR contract
    """
    ocr_url = ocr_url.rstrip("/")
    logger.info("Sending receipt to OCR service at %s...", ocr_url)

    files = _image_upload(image_path.name, image_path.read_bytes())
    http = client or httpx.Client(timeout=OCR_TIMEOUT_SECONDS)

    try:
        start_time = time.time()
        response = http.post(f"{ocr_url}/ocr", files=files)
        elapsed_time = time.time() - start_time
        logger.info("OCR service returned in %.2f seconds", elapsed_time)
    except httpx.RequestError as e:
        logger.error("Failed to connect to OCR service: %s", e)
        raise OCRServiceUnavailable(f"Failed to connect to OCR service: {e}") from e
    finally:
        if client is None:
            http.close()

    return _read_ocr_response(response)


async def call_ocr_service_async(
    filename: str,
    image_bytes: bytes,
    ocr_url: str,
    client: httpx.AsyncClient | None = None,
) -> tuple[dict[str, Any], OcrResult]:
    """Async variant of :func:`call_ocr_service` for uploaded image bytes."""
    ocr_url = ocr_url.rstrip("/")
    logger.info("Forwarding %s to OCR service at %s...", filename, ocr_url)

    files = _image_upload(filename, image_bytes)
    http = client or httpx.AsyncClient(timeout=OCR_TIMEOUT_SECONDS)

    try:
        response = await http.post(f"{ocr_url}/ocr", files=files)
    except httpx.RequestError as e:
        logger.error("Failed to connect to OCR service: %s", e)
        raise OCRServiceUnavailable(f"Failed to connect to OCR service: {e}") from e
    finally:
        if client is None:
            await http.aclose()

    return _read_ocr_response(response)


def save_ocr_json(ocr_result: dict[str, Any], image_path: Path, output_dir: Path | None = None) -> Path:
    """Save the raw OCR payload for debugging."""
    output_dir = output_dir or get_paths().ocr_json
    output_dir.mkdir(parents=True, exist_ok=True)
    ocr_json_path = output_dir / f"{image_path.stem}.json"
    ocr_json_path.write_text(json.dumps(ocr_result, indent=2))
    logger.debug("OCR JSON saved to: %s", ocr_json_path)
    return ocr_json_path
