"""Text-line based receipt item extraction.

Receipts print the same logical item in three layouts: everything on one
line ("1x Chicken Rice $5.00"), name then price on the next line, and name
plus modifier lines then the price. Each candidate line is tried against the
single-line pattern first; otherwise a bounded lookahead collects modifiers
and locates the price.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from receiptsift.domain.receipt import OcrTextBlock, ParsedReceiptItem

from ..parser_config import DEFAULT_PARSER_CONFIG, ParserConfig
from .common import (
    OCR_ONE_MISREADS,
    PRICE_PATTERN,
    QUANTITY_ITEM_PATTERN,
    QUANTITY_ITEM_PRICE_PATTERN,
    body_window,
    clean_item_name,
    extract_trailing_price,
    parse_price,
)
from .layout import _is_right_side_text, _measure_layout
from .line_classifier import (
    LineRole,
    _classify_lines,
    _contains_total_keywords,
    _is_modifier_line,
    _is_valid_item_name,
    _is_valid_item_price,
)

logger = logging.getLogger(__name__)


@dataclass
class _ModifierScan:
    """Result of collecting modifier lines below an item name."""

    modifiers: list[str] = field(default_factory=list)
    end_line: int = 0
    # First valid price-only line seen while collecting
    price: Decimal | None = None
    price_line: int | None = None


def _line_confidence(text_blocks: list[OcrTextBlock], line_number: int, config: ParserConfig) -> Decimal:
    """Confidence of the OCR block for a line; out-of-range lines get the default."""
    if 0 <= line_number < len(text_blocks):
        return text_blocks[line_number].confidence
    return config.default_line_confidence


def _is_translation_line(roles: list[LineRole], i: int, start: int) -> bool:
    """
    Return True for a translation printed under a "+++" add-on.

    Asian receipts print "+++百香果气泡水 $0" followed by "Passion Fruit Soda";
    the second line is not a separate item unless it carries its own
    quantity or price.
    """
    if i <= start:
        return False
    previous = roles[i - 1].text.strip()
    if not (previous.startswith("+++") or previous.startswith("+ + +")):
        return False
    role = roles[i]
    return not role.has_quantity_prefix and not role.has_price_on_line


def _try_single_line_item(
    roles: list[LineRole],
    i: int,
    text_blocks: list[OcrTextBlock],
    config: ParserConfig,
) -> tuple[bool, ParsedReceiptItem | None]:
    """
    Match "qty x? item $price" on one line.

    Returns ``(matched, item)``; a match whose price or name is rejected
    yields ``(True, None)`` and the line is not tried any further.
    """
    match = QUANTITY_ITEM_PRICE_PATTERN.match(roles[i].text)
    if not match:
        return False, None

    price = parse_price(match.group(3))
    if price is None or not _is_valid_item_price(price, config):
        logger.debug("Line %d: price %s looks like a total, skipping", i, match.group(3))
        return True, None

    item_name = clean_item_name(match.group(2))
    if not _is_valid_item_name(item_name):
        logger.debug("Line %d: invalid item name %r", i, item_name)
        return True, None
    if _contains_total_keywords(item_name):
        logger.debug("Line %d: item name %r is a total label", i, item_name)
        return True, None

    return True, ParsedReceiptItem(
        item_name=item_name,
        quantity=int(match.group(1)),
        total_price=price,
        line_number=i,
        confidence=_line_confidence(text_blocks, i, config),
    )


def _next_line_is_item_price(roles: list[LineRole], j: int, skip_lines: set[int], config: ParserConfig) -> bool:
    """Return True if line ``j`` is an unclaimed price-only line with a plausible item price."""
    if j >= len(roles) or j in skip_lines or not roles[j].is_price_only:
        return False
    price = extract_trailing_price(roles[j].text)
    return price is not None and _is_valid_item_price(price, config)


def _collect_modifiers(
    roles: list[LineRole],
    i: int,
    skip_lines: set[int],
    config: ParserConfig,
) -> _ModifierScan:
    """
    Collect modifier/continuation lines after item line ``i``.

    A price-only line is remembered (first one wins) but does not end the
    scan, since more modifiers may follow it. Consumed modifier lines are
    added to ``skip_lines``.
    """
    scan = _ModifierScan(end_line=i)
    previous_text = roles[i].text

    for j in range(i + 1, min(i + config.modifier_lookahead, len(roles))):
        role = roles[j]
        if j in skip_lines:
            break
        if role.has_quantity_prefix:
            logger.debug("  line %d starts a new item, stopping modifier collection", j)
            break
        if role.is_excluded:
            logger.debug("  line %d is sub-item/header/total, stopping modifier collection", j)
            break

        if _is_modifier_line(role.text, previous_text):
            # "Make It Blue" followed by "$5.00" is its own item, not a modifier
            if _next_line_is_item_price(roles, j + 1, skip_lines, config):
                logger.debug("  line %d has its own price on the next line, stopping", j)
                break
            logger.debug("  line %d is a modifier: %r", j, role.text)
            scan.modifiers.append(role.text)
            scan.end_line = j
            skip_lines.add(j)
            previous_text = role.text
        elif role.is_price_only:
            price = extract_trailing_price(role.text)
            if price is not None and _is_valid_item_price(price, config) and scan.price_line is None:
                logger.debug("  line %d is price-only (%s), keeping it", j, price)
                scan.price = price
                scan.price_line = j
        else:
            logger.debug("  line %d is neither modifier nor price, stopping", j)
            break

    return scan


def _find_price_after(
    roles: list[LineRole],
    start: int,
    skip_lines: set[int],
    running_total: Decimal,
    config: ParserConfig,
) -> tuple[Decimal, int] | None:
    """
    Look a few lines below ``start`` for the item's price.

    Stops at a quantity-prefixed line: "Pelu Cabernet Sauvignon" must not
    steal the price of the "1 SAND GOLD CHIX" line below it. Prices over the
    ceiling and prices equal to the running item sum (cumulative subtotals)
    are passed over.
    """
    for j in range(start + 1, min(start + config.price_lookahead, len(roles))):
        role = roles[j]
        if j in skip_lines:
            continue
        if role.is_excluded:
            continue
        if role.has_quantity_prefix:
            logger.debug("  line %d starts a new item, stopping price search", j)
            break

        match = PRICE_PATTERN.search(role.text)
        if not match:
            continue
        price = parse_price(match.group(1))
        if price is None:
            continue
        if not _is_valid_item_price(price, config):
            logger.debug("  price %s on line %d is not an item price", price, j)
            continue
        if running_total > 0 and abs(price - running_total) < config.subtotal_tolerance:
            logger.debug("  price %s on line %d matches running total %s, subtotal", price, j, running_total)
            continue
        return price, j
    return None


def _split_leading_quantity(line: str) -> tuple[int, str]:
    """Return (quantity, rest of line); "I", "l", ":" are OCR'd "1"."""
    match = QUANTITY_ITEM_PATTERN.match(line)
    if not match:
        return 1, line
    quantity_text = match.group(1)
    quantity = 1 if quantity_text in OCR_ONE_MISREADS else int(quantity_text)
    return quantity, match.group(3)


def _extract_items(
    lines: list[str],
    text_blocks: list[OcrTextBlock] | None = None,
    *,
    config: ParserConfig = DEFAULT_PARSER_CONFIG,
) -> list[ParsedReceiptItem]:
    """
    Extract line items from the body of the receipt (before deduplication).

    Args:
        lines: Normalized receipt lines
        text_blocks: OCR blocks index-aligned with ``lines`` (confidence, geometry)
        config: Parser thresholds

    Every physical line contributes to at most one item.
    """
    text_blocks = text_blocks or []
    items: list[ParsedReceiptItem] = []
    skip_lines: set[int] = set()
    roles = _classify_lines(lines)

    start, end = body_window(len(lines))
    layout = _measure_layout(text_blocks, start, end)
    logger.debug("Parsing items from line %d to %d (of %d)", start, end, len(lines))

    for i in range(start, end):
        if i in skip_lines:
            continue
        role = roles[i]
        line = role.text

        if role.is_sub_item:
            logger.debug("Line %d: sub-item %r", i, line)
            continue
        if role.is_header_footer:
            logger.debug("Line %d: header/footer %r", i, line)
            continue
        if role.is_total:
            logger.debug("Line %d: total/subtotal %r", i, line)
            continue
        if _is_translation_line(roles, i, start):
            logger.debug("Line %d: translation of the add-on above %r", i, line)
            continue
        if _is_right_side_text(text_blocks, i, layout):
            logger.debug("Line %d: starts in the price column %r", i, line)

        matched, item = _try_single_line_item(roles, i, text_blocks, config)
        if matched:
            if item is not None:
                logger.debug("Line %d: item %dx %s = %s", i, item.quantity, item.item_name, item.total_price)
                items.append(item)
            continue

        # The food keyword route catches item lines OCR stripped the quantity from
        is_candidate = role.looks_like_item_name or role.has_item_keyword
        if not is_candidate or role.has_price_on_line:
            continue

        logger.debug("Line %d: looking ahead for modifiers and price of %r", i, line)
        scan = _collect_modifiers(roles, i, skip_lines, config)
        if scan.price is not None and scan.price_line is not None:
            found: tuple[Decimal, int] | None = (scan.price, scan.price_line)
        else:
            running_total = sum((it.total_price for it in items), Decimal("0"))
            found = _find_price_after(roles, scan.end_line, skip_lines, running_total, config)
        if found is None:
            continue
        price, price_line = found

        quantity, item_name = _split_leading_quantity(line)
        if scan.modifiers:
            item_name = f"{item_name} {' '.join(scan.modifiers)}"
        item_name = clean_item_name(item_name)

        if not _is_valid_item_name(item_name):
            logger.debug("Line %d: invalid item name %r", i, item_name)
            continue
        if _contains_total_keywords(item_name):
            logger.debug("Line %d: item name %r is a total label", i, item_name)
            continue

        items.append(
            ParsedReceiptItem(
                item_name=item_name,
                quantity=quantity,
                total_price=price,
                line_number=i,
                confidence=_line_confidence(text_blocks, i, config),
            )
        )
        skip_lines.add(price_line)
        logger.debug("Line %d: item %dx %s = %s (price on line %d)", i, quantity, item_name, price, price_line)

    logger.info("Extracted %d items before deduplication", len(items))
    return items
