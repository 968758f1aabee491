"""Convert between the JSON wire contract and receipt dataclasses.

Input follows the OCR step's camelCase contract::

    {"success": true, "text": "...", "confidence": 91.5,
     "textBlocks": [{"text": "...", "confidence": 98.1, "lineNumber": 0,
                     "boundingPolygon": [{"x": 10, "y": 20}, ...]}]}

Output mirrors ParsedReceipt with decimals as two-decimal strings.
"""

import math
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from receiptsift.domain.receipt import (
    DigitCorrection,
    OcrResult,
    OcrTextBlock,
    ParsedReceipt,
    ParsedReceiptItem,
    Point,
    TotalVerification,
)


class ReceiptInputError(ValueError):
    """Raised when an OCR payload does not follow the input contract."""


def _to_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, bool):
        raise ReceiptInputError(f"{field_name} must be a number, got {value!r}")
    try:
        number = Decimal(str(value))
    except InvalidOperation as e:
        raise ReceiptInputError(f"{field_name} must be a number, got {value!r}") from e
    if not number.is_finite():
        raise ReceiptInputError(f"{field_name} must be a finite number, got {value!r}")
    return number


def _to_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ReceiptInputError(f"{field_name} must be an integer, got {value!r}")
    # JSON decoders accept NaN and Infinity
    if isinstance(value, float) and not (math.isfinite(value) and value.is_integer()):
        raise ReceiptInputError(f"{field_name} must be an integer, got {value!r}")
    return int(value)


def _polygon_from_list(raw: Any, field_name: str) -> list[Point] | None:
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise ReceiptInputError(f"{field_name} must be a list of points")
    points: list[Point] = []
    for index, raw_point in enumerate(raw):
        if not isinstance(raw_point, Mapping) or "x" not in raw_point or "y" not in raw_point:
            raise ReceiptInputError(f"{field_name}[{index}] must be an object with x and y")
        points.append(
            Point(
                x=_to_int(raw_point["x"], f"{field_name}[{index}].x"),
                y=_to_int(raw_point["y"], f"{field_name}[{index}].y"),
            )
        )
    return points


def _text_block_from_dict(raw: Any, index: int) -> OcrTextBlock:
    field_name = f"textBlocks[{index}]"
    if not isinstance(raw, Mapping):
        raise ReceiptInputError(f"{field_name} must be an object")
    text = raw.get("text", "")
    if not isinstance(text, str):
        raise ReceiptInputError(f"{field_name}.text must be a string")
    return OcrTextBlock(
        text=text,
        confidence=_to_decimal(raw.get("confidence", 0), f"{field_name}.confidence"),
        line_number=_to_int(raw.get("lineNumber", index), f"{field_name}.lineNumber"),
        bounding_polygon=_polygon_from_list(raw.get("boundingPolygon"), f"{field_name}.boundingPolygon"),
    )


def ocr_result_from_dict(payload: Any) -> OcrResult:
    """
    Build an OcrResult from a decoded JSON payload.

    Raises:
        ReceiptInputError: If the payload is not an object or a field has the wrong type
    """
    if not isinstance(payload, Mapping):
        raise ReceiptInputError("OCR payload must be a JSON object")

    success = payload.get("success", False)
    if not isinstance(success, bool):
        raise ReceiptInputError(f"success must be a boolean, got {success!r}")
    text = payload.get("text")
    if text is None:
        text = ""
    if not isinstance(text, str):
        raise ReceiptInputError("text must be a string")
    raw_blocks = payload.get("textBlocks")
    if raw_blocks is None:
        raw_blocks = []
    if not isinstance(raw_blocks, list):
        raise ReceiptInputError("textBlocks must be a list")
    error_message = payload.get("errorMessage")

    return OcrResult(
        success=success,
        text=text,
        confidence=_to_decimal(payload.get("confidence", 0), "confidence"),
        text_blocks=[_text_block_from_dict(raw, index) for index, raw in enumerate(raw_blocks)],
        error_message=str(error_message) if error_message is not None else None,
    )


def ocr_result_from_text(text: str) -> OcrResult:
    """Wrap plain receipt text (no confidence or geometry) as a successful OCR result."""
    return OcrResult(success=True, text=text)


def _money(value: Decimal | None) -> str | None:
    if value is None:
        return None
    return f"{value:.2f}"


def _item_to_dict(item: ParsedReceiptItem) -> dict[str, Any]:
    return {
        "itemName": item.item_name,
        "quantity": item.quantity,
        "unitPrice": _money(item.unit_price),
        "totalPrice": _money(item.total_price),
        "lineNumber": item.line_number,
        "confidence": f"{item.confidence:.2f}",
    }


def _correction_to_dict(correction: DigitCorrection) -> dict[str, Any]:
    return {
        "itemName": correction.item_name,
        "originalPrice": _money(correction.original_price),
        "correctedPrice": _money(correction.corrected_price),
        "originalDigit": correction.original_digit,
        "correctedDigit": correction.corrected_digit,
        "position": correction.position,
    }


def _verification_to_dict(verification: TotalVerification | None) -> dict[str, Any] | None:
    if verification is None:
        return None
    return {
        "status": verification.status,
        "statedTotal": _money(verification.stated_total),
        "calculatedTotal": _money(verification.calculated_total),
        "discrepancy": _money(verification.discrepancy),
        "corrections": [_correction_to_dict(correction) for correction in verification.corrections],
    }


def parsed_receipt_to_dict(receipt: ParsedReceipt) -> dict[str, Any]:
    """Serialize a ParsedReceipt (including derived totals) to JSON-ready data."""
    return {
        "merchantName": receipt.merchant_name,
        "receiptDate": receipt.receipt_date.isoformat() if receipt.receipt_date else None,
        "totalAmount": _money(receipt.total_amount),
        "items": [_item_to_dict(item) for item in receipt.items],
        "calculatedTotal": _money(receipt.calculated_total),
        "totalDiscrepancy": _money(receipt.total_discrepancy),
        "totalMatchesReceipt": receipt.total_matches_receipt,
        "verification": _verification_to_dict(receipt.verification),
    }
