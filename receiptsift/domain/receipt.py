"""Data models for OCR input and parsed receipts."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Literal


VerificationStatus = Literal["match", "minor_discrepancy", "missing_items", "possible_false_positive"]


@dataclass
class Point:
    """A 2D point of an OCR bounding polygon."""

    x: int
    y: int


@dataclass
class OcrTextBlock:
    """One recognized physical line from the OCR step."""

    text: str
    confidence: Decimal = Decimal("0")  # 0-100
    line_number: int = 0
    # Usually 4 points: top-left, top-right, bottom-right, bottom-left
    bounding_polygon: list[Point] | None = None


@dataclass
class OcrResult:
    """Result of the (external) OCR step."""

    success: bool
    text: str = ""
    confidence: Decimal = Decimal("0")  # Average over blocks, informational only
    text_blocks: list[OcrTextBlock] = field(default_factory=list)
    error_message: str | None = None


@dataclass
class ParsedReceiptItem:
    """A single purchasable line item."""

    item_name: str
    quantity: int = 1
    unit_price: Decimal | None = None
    total_price: Decimal = Decimal("0")
    line_number: int = 0  # Source line of first occurrence
    confidence: Decimal = Decimal("0")


@dataclass(frozen=True)
class DigitCorrection:
    """A single-digit OCR misread that would explain a total discrepancy."""

    item_name: str
    original_price: Decimal
    corrected_price: Decimal
    original_digit: str
    corrected_digit: str
    # 1-based index into the price digits with the decimal point removed ("12.50" -> "1250")
    position: int


@dataclass
class TotalVerification:
    """Outcome of comparing the item sum with the receipt's stated total."""

    status: VerificationStatus
    stated_total: Decimal
    calculated_total: Decimal
    discrepancy: Decimal
    corrections: list[DigitCorrection] = field(default_factory=list)


@dataclass
class ParsedReceipt:
    """Parsed receipt data."""

    merchant_name: str | None = None
    receipt_date: datetime | None = None  # Midnight UTC of the printed date
    total_amount: Decimal | None = None
    items: list[ParsedReceiptItem] = field(default_factory=list)
    # None when no total was found (nothing to verify against)
    verification: TotalVerification | None = None

    @property
    def calculated_total(self) -> Decimal:
        return sum((item.total_price for item in self.items), Decimal("0"))

    @property
    def total_discrepancy(self) -> Decimal | None:
        """Calculated minus stated total.

        Positive means parsed items exceed the receipt total (possible false
        positives); negative means items are missing.
        """
        if self.total_amount is None:
            return None
        return self.calculated_total - self.total_amount

    @property
    def total_matches_receipt(self) -> bool:
        """True when verification found the item sum within the match tolerance."""
        return self.verification is not None and self.verification.status == "match"

    @property
    def has_minor_discrepancy(self) -> bool:
        return self.verification is not None and self.verification.status == "minor_discrepancy"
