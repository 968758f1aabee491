"""Parse an OCR result into a structured ParsedReceipt."""

import logging

from receiptsift.domain.receipt import OcrResult, ParsedReceipt

from .ocr_parser import (
    _deduplicate_items,
    _extract_date,
    _extract_items,
    _extract_merchant,
    _extract_total,
    split_lines,
)
from .parser_config import DEFAULT_PARSER_CONFIG, ParserConfig
from .verification import verify_totals

logger = logging.getLogger(__name__)


def parse_receipt(ocr_result: OcrResult, config: ParserConfig = DEFAULT_PARSER_CONFIG) -> ParsedReceipt:
    """
    Parse an OCR result into a ParsedReceipt.

    This is a best-effort parser - results should be manually reviewed.
    A failed or empty OCR result yields an empty receipt rather than an error.

    Args:
        ocr_result: Output of the OCR step; ``text_blocks`` should be
            index-aligned with the non-empty lines of ``text``
        config: Parser thresholds

    Returns:
        ParsedReceipt with deduplicated items and total verification
    """
    if not ocr_result.success or not ocr_result.text:
        logger.warning("OCR result unsuccessful or empty; returning an empty receipt")
        return ParsedReceipt()

    lines = split_lines(ocr_result.text)
    logger.info("Parsing receipt with %d lines", len(lines))

    merchant = _extract_merchant(lines, config)
    receipt_date = _extract_date(lines)
    total = _extract_total(lines)

    items = _deduplicate_items(_extract_items(lines, ocr_result.text_blocks, config=config))
    logger.info("After deduplication: %d unique items", len(items))

    return ParsedReceipt(
        merchant_name=merchant,
        receipt_date=receipt_date,
        total_amount=total,
        items=items,
        verification=verify_totals(items, total, config),
    )
