"""Core domain models for receiptsift.

This module provides the data models shared by every layer:
- OcrResult, OcrTextBlock, Point: OCR step output
- ParsedReceipt, ParsedReceiptItem: Parser output
- TotalVerification, DigitCorrection: Total check diagnostics

Usage:
    from receiptsift.domain import OcrResult, ParsedReceipt
"""

from receiptsift.domain.receipt import (
    DigitCorrection,
    OcrResult,
    OcrTextBlock,
    ParsedReceipt,
    ParsedReceiptItem,
    Point,
    TotalVerification,
)

__all__ = [
    "DigitCorrection",
    "OcrResult",
    "OcrTextBlock",
    "ParsedReceipt",
    "ParsedReceiptItem",
    "Point",
    "TotalVerification",
]
