"""Merchant/date/total extraction helpers."""

import logging
import re
from datetime import date, datetime, timezone
from decimal import Decimal

from ..parser_config import DEFAULT_PARSER_CONFIG, ParserConfig
from .common import (
    ISO_DATE_PATTERN,
    LABELED_DATE_FORMATS,
    LABELED_DATE_PATTERN,
    TOTAL_PATTERN,
    extract_trailing_price,
    parse_price,
)

logger = logging.getLogger(__name__)


def _extract_merchant(lines: list[str], config: ParserConfig = DEFAULT_PARSER_CONFIG) -> str | None:
    """
    Return the first plausible merchant line near the top of the receipt.

    A candidate is longer than 3 characters, has no "$", does not start with a
    digit and contains at least one letter.
    """
    for line in lines[: config.merchant_scan_lines]:
        if len(line) > 3 and "$" not in line and not re.match(r"^\d", line) and any(c.isalpha() for c in line):
            logger.debug("Extracted merchant name: %s", line)
            return line
    return None


def _to_utc_midnight(value: date) -> datetime:
    """Treat the printed calendar date as midnight UTC; no timezone inference."""
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def _parse_iso_date(line: str) -> datetime | None:
    match = ISO_DATE_PATTERN.search(line)
    if not match:
        return None
    try:
        return _to_utc_midnight(date(int(match.group(1)), int(match.group(2)), int(match.group(3))))
    except ValueError:
        return None


def _parse_labeled_date(line: str) -> datetime | None:
    """Parse "DATE: 15/01/2024"-style dates (day first)."""
    match = LABELED_DATE_PATTERN.search(line)
    if not match:
        return None
    date_text = match.group(1)
    for date_format in LABELED_DATE_FORMATS:
        try:
            parsed = datetime.strptime(date_text, date_format)
        except ValueError:
            continue
        return _to_utc_midnight(parsed.date())
    return None


def _extract_date(lines: list[str]) -> datetime | None:
    """Extract the receipt date (ISO first, then labeled day-first formats)."""
    for line in lines:
        parsed = _parse_iso_date(line) or _parse_labeled_date(line)
        if parsed is not None:
            logger.debug("Extracted date: %s", parsed.date().isoformat())
            return parsed
    return None


def _extract_total(lines: list[str]) -> Decimal | None:
    """
    Extract the stated total.

    Lines are scanned in order; the first "TOTAL <amount>" wins. A line that
    mentions "total" without an amount borrows a trailing price from the next
    line. Returns None rather than guessing when nothing matches.
    """
    for i, line in enumerate(lines):
        match = TOTAL_PATTERN.search(line)
        if match:
            total = parse_price(match.group(1))
            if total is not None:
                logger.debug("Extracted total: %s", total)
                return total

        if "total" in line.lower() and i + 1 < len(lines):
            total = extract_trailing_price(lines[i + 1])
            if total is not None:
                logger.debug("Extracted total from next line: %s", total)
                return total
    return None
