"""Merge repeated receipt items."""

import logging
from decimal import Decimal

from receiptsift.domain.receipt import ParsedReceiptItem

logger = logging.getLogger(__name__)


def _normalized_name(item_name: str) -> str:
    return item_name.strip().lower()


def _deduplicate_items(items: list[ParsedReceiptItem]) -> list[ParsedReceiptItem]:
    """
    Combine items that share a name (trimmed, case-insensitive).

    Quantities and total prices are summed, confidence is averaged, and the
    first occurrence keeps its capitalization and line number. The result is
    ordered by line number.
    """
    groups: dict[str, list[ParsedReceiptItem]] = {}
    for item in items:
        groups.setdefault(_normalized_name(item.item_name), []).append(item)

    merged: list[ParsedReceiptItem] = []
    for group in groups.values():
        first = group[0]
        quantity = sum(item.quantity for item in group)
        total_price = sum((item.total_price for item in group), Decimal("0"))
        confidence = sum((item.confidence for item in group), Decimal("0")) / len(group)

        if len(group) > 1:
            logger.info(
                "Merged %d duplicate '%s' items: %s -> %dx, %s -> %s",
                len(group),
                first.item_name,
                ", ".join(f"{item.quantity}x" for item in group),
                quantity,
                " + ".join(f"{item.total_price:.2f}" for item in group),
                f"{total_price:.2f}",
            )

        merged.append(
            ParsedReceiptItem(
                item_name=first.item_name,
                quantity=quantity,
                unit_price=total_price / quantity if quantity > 0 else None,
                total_price=total_price,
                line_number=first.line_number,
                confidence=confidence,
            )
        )

    merged.sort(key=lambda item: item.line_number)
    return merged
