"""Format ParsedReceipt data as a human-readable review block."""

from receiptsift.domain.receipt import ParsedReceipt, TotalVerification

_STATUS_LABELS = {
    "match": "OK: items match the receipt total",
    "minor_discrepancy": "WARN: minor discrepancy",
    "missing_items": "WARN: items short of the receipt total (missing items?)",
    "possible_false_positive": "WARN: items exceed the receipt total (false positives?)",
}


def _format_rows_aligned(
    rows: list[tuple[str, str, str | None]],
    indent: str = "  ",
) -> list[str]:
    """
    Format item rows with aligned names, amounts and comments.

    Args:
        rows: List of (name, amount, comment_or_none) tuples
        indent: Indentation prefix for each line

    Returns:
        List of formatted lines
    """
    if not rows:
        return []

    max_name_len = max(len(name) for name, _, _ in rows)
    max_amount_len = max(len(amount) for _, amount, _ in rows)

    lines = []
    for name, amount, comment in rows:
        base = f"{indent}{name.ljust(max_name_len)}  {amount.rjust(max_amount_len)}"
        if comment:
            lines.append(f"{base}  ; {comment}")
        else:
            lines.append(base)
    return lines


def _format_verification(verification: TotalVerification | None) -> list[str]:
    if verification is None:
        return ["; verification: no total found, cannot verify"]

    lines = [
        f"; verification: {_STATUS_LABELS[verification.status]}",
        f";   calculated {verification.calculated_total:.2f}, stated {verification.stated_total:.2f}, "
        f"discrepancy {verification.discrepancy:+.2f}",
    ]
    for correction in verification.corrections:
        lines.append(
            f";   hint: '{correction.item_name}' {correction.original_price:.2f} might be "
            f"{correction.corrected_price:.2f} (digit '{correction.original_digit}' -> "
            f"'{correction.corrected_digit}' at position {correction.position})"
        )
    return lines


def format_parsed_receipt(receipt: ParsedReceipt) -> str:
    """
    Format a parsed receipt for manual review.

    Args:
        receipt: Parsed receipt data

    Returns:
        Header, aligned item rows and the verification outcome
    """
    lines = []
    lines.append("; === PARSED RECEIPT ===")
    lines.append(f"; @merchant: {receipt.merchant_name or 'UNKNOWN'}")
    if receipt.receipt_date is not None:
        lines.append(f"; @date: {receipt.receipt_date.date().isoformat()}")
    else:
        lines.append("; @date: UNKNOWN")
    if receipt.total_amount is not None:
        lines.append(f"; @total: {receipt.total_amount:.2f}")
    else:
        lines.append("; @total: UNKNOWN")
    lines.append(f"; @items: {len(receipt.items)}")
    lines.append("")

    rows: list[tuple[str, str, str | None]] = []
    for item in receipt.items:
        comment = f"qty {item.quantity} @ {item.unit_price:.2f}" if item.quantity > 1 and item.unit_price else None
        rows.append((item.item_name, f"{item.total_price:.2f}", comment))
    lines.extend(_format_rows_aligned(rows))
    if rows:
        lines.append("")

    lines.extend(_format_verification(receipt.verification))
    return "\n".join(lines) + "\n"
