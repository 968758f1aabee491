"""Compare parsed items against the receipt's stated total.

Verification only reports; it never changes the parsed items.
"""

import logging
from decimal import Decimal

from receiptsift.domain.receipt import DigitCorrection, ParsedReceiptItem, TotalVerification

from .parser_config import DEFAULT_PARSER_CONFIG, ParserConfig

logger = logging.getLogger(__name__)

# Digits OCR commonly confuses with each key digit
DIGIT_SUBSTITUTIONS: dict[str, tuple[str, ...]] = {
    "0": ("9", "8"),
    "1": ("7", "4"),
    "2": ("7", "4"),
    "3": ("8", "5"),
    "4": ("9", "2", "1"),
    "5": ("6", "3"),
    "6": ("5", "8"),
    "7": ("1", "2"),
    "8": ("0", "6", "3"),
    "9": ("0", "4"),
}


def _digits_to_price(digits: str) -> Decimal:
    """Reinsert the decimal point two places from the right ("1250" -> 12.50)."""
    return Decimal(f"{digits[:-2]}.{digits[-2:]}")


def suggest_digit_corrections(
    items: list[ParsedReceiptItem],
    missing_amount: Decimal,
    config: ParserConfig = DEFAULT_PARSER_CONFIG,
) -> list[DigitCorrection]:
    """
    Find single-digit misreads that would explain a shortfall.

    Every digit of every item price is swapped for each of its common OCR
    confusions. A swap is reported when it raises the price by roughly
    ``missing_amount``.

    Args:
        items: Parsed items
        missing_amount: Unsigned amount the item sum falls short of the total
        config: Supplies the matching tolerance

    Returns:
        Candidate corrections in item order, then digit position
    """
    corrections: list[DigitCorrection] = []
    for item in items:
        price_digits = f"{item.total_price:.2f}".replace(".", "")
        for index, digit in enumerate(price_digits):
            for replacement in DIGIT_SUBSTITUTIONS.get(digit, ()):
                corrected_digits = price_digits[:index] + replacement + price_digits[index + 1 :]
                corrected_price = _digits_to_price(corrected_digits)
                if abs((corrected_price - item.total_price) - missing_amount) < config.ocr_correction_tolerance:
                    corrections.append(
                        DigitCorrection(
                            item_name=item.item_name,
                            original_price=item.total_price,
                            corrected_price=corrected_price,
                            original_digit=digit,
                            corrected_digit=replacement,
                            position=index + 1,
                        )
                    )
    return corrections


def verify_totals(
    items: list[ParsedReceiptItem],
    stated_total: Decimal | None,
    config: ParserConfig = DEFAULT_PARSER_CONFIG,
) -> TotalVerification | None:
    """
    Classify the difference between the item sum and the stated total.

    Returns None when the receipt has no stated total.
    """
    if stated_total is None:
        logger.warning("Receipt total not found - cannot verify item totals")
        return None

    calculated_total = sum((item.total_price for item in items), Decimal("0"))
    discrepancy = calculated_total - stated_total

    if abs(discrepancy) < config.match_tolerance:
        logger.info("Total verification: calculated %.2f matches receipt %.2f", calculated_total, stated_total)
        return TotalVerification("match", stated_total, calculated_total, discrepancy)

    if abs(discrepancy) < config.minor_discrepancy_tolerance:
        logger.warning(
            "Total verification: minor discrepancy of %.2f (calculated %.2f, receipt %.2f)",
            abs(discrepancy),
            calculated_total,
            stated_total,
        )
        return TotalVerification("minor_discrepancy", stated_total, calculated_total, discrepancy)

    if discrepancy < 0:
        logger.warning(
            "Total verification: missing items, calculated %.2f < receipt %.2f (difference %.2f)",
            calculated_total,
            stated_total,
            abs(discrepancy),
        )
        corrections = suggest_digit_corrections(items, abs(discrepancy), config)
        for correction in corrections:
            logger.warning(
                "Potential OCR error in '%s': %.2f might be %.2f (digit '%s' -> '%s' at position %d)",
                correction.item_name,
                correction.original_price,
                correction.corrected_price,
                correction.original_digit,
                correction.corrected_digit,
                correction.position,
            )
        return TotalVerification("missing_items", stated_total, calculated_total, discrepancy, corrections)

    logger.warning(
        "Total verification: possible false positives, calculated %.2f > receipt %.2f (difference %.2f)",
        calculated_total,
        stated_total,
        discrepancy,
    )
    return TotalVerification("possible_false_positive", stated_total, calculated_total, discrepancy)
