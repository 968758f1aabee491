from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from receiptsift.domain.receipt import DigitCorrection, ParsedReceipt, ParsedReceiptItem, TotalVerification
from receiptsift.receipt.formatter import format_parsed_receipt


def _item(name: str, price: str, quantity: int = 1, line_number: int = 0) -> ParsedReceiptItem:
    return ParsedReceiptItem(
        item_name=name,
        quantity=quantity,
        unit_price=Decimal(price) / quantity,
        total_price=Decimal(price),
        line_number=line_number,
        confidence=Decimal("0.7"),
    )


def test_matching_receipt() -> None:
    receipt = ParsedReceipt(
        merchant_name="Diner",
        receipt_date=datetime(2024, 1, 15, tzinfo=timezone.utc),
        total_amount=Decimal("24.00"),
        items=[_item("Burger", "20.00", quantity=2, line_number=1), _item("Iced Tea", "4.00", line_number=3)],
        verification=TotalVerification(
            status="match",
            stated_total=Decimal("24.00"),
            calculated_total=Decimal("24.00"),
            discrepancy=Decimal("0.00"),
        ),
    )

    output = format_parsed_receipt(receipt)

    assert output.splitlines() == [
        "; === PARSED RECEIPT ===",
        "; @merchant: Diner",
        "; @date: 2024-01-15",
        "; @total: 24.00",
        "; @items: 2",
        "",
        "  Burger    20.00  ; qty 2 @ 10.00",
        "  Iced Tea   4.00",
        "",
        "; verification: OK: items match the receipt total",
        ";   calculated 24.00, stated 24.00, discrepancy +0.00",
    ]


def test_missing_items_shows_correction_hint() -> None:
    receipt = ParsedReceipt(
        total_amount=Decimal("14.00"),
        items=[_item("Fries", "4.00")],
        verification=TotalVerification(
            status="missing_items",
            stated_total=Decimal("14.00"),
            calculated_total=Decimal("4.00"),
            discrepancy=Decimal("-10.00"),
            corrections=[
                DigitCorrection(
                    item_name="Fries",
                    original_price=Decimal("4.00"),
                    corrected_price=Decimal("14.00"),
                    original_digit="0",
                    corrected_digit="1",
                    position=1,
                )
            ],
        ),
    )

    output = format_parsed_receipt(receipt)

    assert "; @merchant: UNKNOWN" in output
    assert "; @date: UNKNOWN" in output
    assert "discrepancy -10.00" in output
    assert "hint: 'Fries' 4.00 might be 14.00" in output


def test_empty_receipt() -> None:
    output = format_parsed_receipt(ParsedReceipt())

    assert "; @total: UNKNOWN" in output
    assert "; @items: 0" in output
    assert output.endswith("; verification: no total found, cannot verify\n")
