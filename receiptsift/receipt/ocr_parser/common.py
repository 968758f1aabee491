"""Shared constants and helpers for OCR receipt parsing."""

import re
from decimal import Decimal, InvalidOperation

# Both "." and "," are accepted as the decimal separator (international receipts).
PRICE_AMOUNT = r"[0-9]+[.,][0-9]{2}"

# "2x Chicken Rice $5.00", "1 Burger 10,00"
QUANTITY_ITEM_PRICE_PATTERN = re.compile(rf"^\s*(\d+)x?\s+(.+?)\s+\$?({PRICE_AMOUNT})\s*$", re.IGNORECASE)

# Leading quantity ("1 ", "1x "); ":", "I" and "l" are common OCR misreads of "1"
QUANTITY_ITEM_PATTERN = re.compile(r"^\s*([1-9Il:])x?(\s+)(.+)", re.IGNORECASE)
QUANTITY_PREFIX_PATTERN = re.compile(r"^[1-9Il:]x?\s")
OCR_ONE_MISREADS = {"I", "i", "l", "L", ":"}

# Price at the end of a line
PRICE_PATTERN = re.compile(rf"\$?\s*({PRICE_AMOUNT})\s*$")

# Price token removed when testing for a price-only line
PRICE_TOKEN_PATTERN = re.compile(rf"\$?{PRICE_AMOUNT}")

# Letter (Latin or CJK) followed later by a price at the very end
TRAILING_PRICE_PATTERN = re.compile(rf"[a-zA-Z\u4e00-\u9fff].+\$?{PRICE_AMOUNT}$")

STANDALONE_PRICE_PATTERN = re.compile(rf"^\d+[.,]\d{{2}}$")

TOTAL_PATTERN = re.compile(rf"(?:ORDER\s+)?TOTAL[:\s]*\$?\s*({PRICE_AMOUNT})", re.IGNORECASE)

ISO_DATE_PATTERN = re.compile(r"(\d{4})[/-](\d{2})[/-](\d{2})")
LABELED_DATE_PATTERN = re.compile(r"DATE[:\s]*(\d{2}[/-]\d{2}[/-]\d{2,4})", re.IGNORECASE)
LABELED_DATE_FORMATS = ("%d/%m/%Y", "%d-%m-%Y", "%d/%m/%y", "%d-%m-%y")

# Header/footer region sizes used to derive the body window
HEADER_LINES = 3
FOOTER_LINES = 7


def split_lines(text: str) -> list[str]:
    """Split raw OCR text into trimmed, non-empty lines, preserving order."""
    if not text:
        return []
    return [line.strip() for line in text.split("\n") if line.strip()]


def body_window(line_count: int) -> tuple[int, int]:
    """
    Return the ``[start, end)`` range of lines presumed to hold items.

    Skips roughly the first 3 lines (merchant, address, date) and the last 7
    (totals, payment). Short receipts fall back to quarter-based bounds; the
    result is clamped so it is never negative-length.
    """
    start = min(HEADER_LINES, line_count // 4)
    end = max(line_count - FOOTER_LINES, line_count * 3 // 4)
    end = min(max(end, start), line_count)
    return start, end


def normalize_price(price_text: str) -> str:
    """Use "." as the decimal separator ("3,19" -> "3.19")."""
    return price_text.replace(",", ".")


def parse_price(price_text: str) -> Decimal | None:
    """Parse a matched price token; malformed text means no price."""
    try:
        return Decimal(normalize_price(price_text.strip()))
    except InvalidOperation:
        return None


def extract_trailing_price(line: str) -> Decimal | None:
    """Return the price at the end of a line, if any."""
    match = PRICE_PATTERN.search(line)
    if not match:
        return None
    return parse_price(match.group(1))


def clean_item_name(name: str) -> str:
    """Collapse whitespace runs in an item name."""
    return re.sub(r"\s+", " ", name).strip()
