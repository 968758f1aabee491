from decimal import Decimal

from receiptsift.receipt.ocr_parser.line_classifier import (
    _classify_lines,
    _contains_total_keywords,
    _has_price_on_same_line,
    _has_quantity_prefix,
    _is_header_footer,
    _is_modifier_line,
    _is_price_only_line,
    _is_sub_item,
    _is_total_line,
    _is_valid_item_name,
    _is_valid_item_price,
    _looks_like_item_name,
)


def test_sub_item_detection() -> None:
    for line in ["  Extra sauce", "\tNo onions", "- No pickles", "+++Passion Fruit Soda", "(2) BMOD Up", "CON TODO"]:
        assert _is_sub_item(line), line
    for line in ["Chicken Rice", "Add Lobster", "1 Burger $5.00"]:
        assert not _is_sub_item(line), line


def test_header_footer_detection() -> None:
    for line in [
        "Qty",
        "Starbucks (Downtown)",
        "Platform fee",
        "Thank you for visiting!",
        "VISA ****1234",
        "Server: Anna",
        "#12 - TO GO",
        "==========",
        "Tel: 555-1234",
    ]:
        assert _is_header_footer(line), line
    assert not _is_header_footer("Chicken Rice")


def test_total_line_detection_includes_chinese() -> None:
    for line in ["SUBTOTAL $12.00", "GST 9%", "Service Charge", "Rounding -0.02", "小计 $27.80", "税 $2.20"]:
        assert _is_total_line(line), line
    assert not _is_total_line("Chicken Rice")


def test_total_keyword_names() -> None:
    assert _contains_total_keywords("Cash")
    assert _contains_total_keywords("Sub Total")
    assert not _contains_total_keywords("Chicken Rice")


def test_item_name_validity() -> None:
    assert _is_valid_item_name("XO")
    assert _is_valid_item_name("Chicken Rice")
    for name in ["", " ", "A", "12", "$$", "×1"]:
        assert not _is_valid_item_name(name), name


def test_item_price_validity() -> None:
    assert _is_valid_item_price(Decimal("0"))
    assert _is_valid_item_price(Decimal("0.10"))
    assert _is_valid_item_price(Decimal("200.00"))
    assert not _is_valid_item_price(Decimal("0.09"))
    assert not _is_valid_item_price(Decimal("200.01"))
    assert not _is_valid_item_price(Decimal("-1.00"))


def test_price_on_line_vs_price_only() -> None:
    assert _has_price_on_same_line("1x Chicken Rice $5.50")
    assert not _has_price_on_same_line("$5.50")
    assert _is_price_only_line("$5.50")
    assert _is_price_only_line("  3,19 ")
    assert not _is_price_only_line("Chicken Rice $5.50")


def test_quantity_prefix_tolerates_misreads() -> None:
    for line in ["1 Burger", "2x Fries", "I Burger", "l Burger", ": Burger"]:
        assert _has_quantity_prefix(line), line
    assert not _has_quantity_prefix("12 Wings")
    assert not _has_quantity_prefix("Burger")


def test_looks_like_item_name() -> None:
    for line in ["Chicken Salad", "Fries", "Salmon Teriyaki", "珍珠奶茶"]:
        assert _looks_like_item_name(line), line
    for line in ["12.50", "(T.1)", "TUE JANUARY 30,2018", "12:45 PM", "Table 12", "View details", "Thank you"]:
        assert not _looks_like_item_name(line), line


def test_modifier_lines() -> None:
    assert _is_modifier_line("W/ DRESSING")
    assert _is_modifier_line("SD SALAD")
    assert _is_modifier_line("Dress on side")
    assert _is_modifier_line("Pelu Cabernet Sauvignon", previous_line="1 CAB PEJU SAUV S")
    assert not _is_modifier_line("Pelu Cabernet Sauvignon")
    assert not _is_modifier_line("Caesar Wrap")
    assert not _is_modifier_line("1 Burger")
    assert not _is_modifier_line("$5.00")


def test_classify_lines_is_index_aligned() -> None:
    lines = ["Store Name", "1x Chicken Rice $5.00", "$5.00", "TOTAL $5.00"]

    roles = _classify_lines(lines)

    assert [role.text for role in roles] == lines
    assert roles[0].is_header_footer
    assert roles[1].has_quantity_prefix and roles[1].has_price_on_line
    assert roles[2].is_price_only
    assert roles[3].is_total and roles[3].is_excluded
