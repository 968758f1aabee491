from decimal import Decimal

from receiptsift.domain.receipt import OcrTextBlock
from receiptsift.receipt.ocr_parser.items_text_parser import _extract_items
from receiptsift.receipt.ocr_parser.line_classifier import _looks_like_item_name
from receiptsift.receipt.parser_config import ParserConfig


def test_extract_items_single_line_item() -> None:
    lines = ["Store Name", "1x Chicken Rice $5.00", "TOTAL $5.00"]

    items = _extract_items(lines)

    assert len(items) == 1
    assert items[0].item_name == "Chicken Rice"
    assert items[0].quantity == 1
    assert items[0].total_price == Decimal("5.00")
    assert items[0].line_number == 1


def test_extract_items_name_price_and_modifier_lines() -> None:
    lines = [
        "Bistro Grill",
        "2024-01-15 12:30",
        "Chicken Salad",
        "$12.50",
        "W/ DRESSING",
        "1 Iced Tea $3.00",
        "Thank you",
        "SUBTOTAL $15.50",
        "TOTAL $15.50",
        "VISA $15.50",
    ]

    items = _extract_items(lines)

    assert [(item.item_name, item.total_price) for item in items] == [
        ("Chicken Salad W/ DRESSING", Decimal("12.50")),
        ("Iced Tea", Decimal("3.00")),
    ]
    assert items[0].line_number == 2


def test_price_search_stops_at_next_quantity_line() -> None:
    lines = [
        "Wine Bar",
        "2024-03-02",
        "1 CAB PEJU SAUV S",
        "Pelu Cabernet Sauvignon",
        "1 SAND GOLD CHIX",
        "$14.00",
        "TOTAL $14.00",
        "VISA $14.00",
    ]

    items = _extract_items(lines)

    assert len(items) == 1
    assert items[0].item_name == "SAND GOLD CHIX"
    assert items[0].quantity == 1
    assert items[0].total_price == Decimal("14.00")


def test_price_matching_running_total_is_treated_as_subtotal() -> None:
    lines = [
        "Burger Hut",
        "2024-05-01",
        "1 Burger $8.00",
        "1 Fries $4.00",
        "Side Salad",
        "Thank you",
        "$12.00",
        "$3.50",
        "TOTAL $15.50",
    ]

    items = _extract_items(lines)

    assert [(item.item_name, item.total_price) for item in items] == [
        ("Burger", Decimal("8.00")),
        ("Fries", Decimal("4.00")),
        ("Side Salad", Decimal("3.50")),
    ]


def test_translation_line_after_addon_is_not_an_item() -> None:
    lines = [
        "Noodle House",
        "2024-02-10",
        "1 Beef Noodles $12.80",
        "+++百香果气泡水 $0",
        "Passion Fruit Soda",
        "$4.50",
        "TOTAL $12.80",
        "VISA $12.80",
    ]

    items = _extract_items(lines)

    assert [item.item_name for item in items] == ["Beef Noodles"]


def test_item_price_bounds() -> None:
    lines = [
        "Corner Deli",
        "2024-05-01",
        "1 Catering Tray $250.00",
        "1 Gum $0.05",
        "1 Water $0.00",
        "1 Mint $0.10",
        "TOTAL $0.10",
        "VISA $0.10",
    ]

    items = _extract_items(lines)

    assert [(item.item_name, item.total_price) for item in items] == [
        ("Water", Decimal("0.00")),
        ("Mint", Decimal("0.10")),
    ]


def test_configured_price_ceiling_is_respected() -> None:
    lines = ["Store Name", "1 Catering Tray $250.00", "TOTAL $250.00"]

    assert _extract_items(lines) == []
    items = _extract_items(lines, config=ParserConfig(max_item_price=Decimal("500.00")))
    assert [item.total_price for item in items] == [Decimal("250.00")]


def test_ocr_misread_quantity_defaults_to_one() -> None:
    lines = [
        "Taco Stand",
        "2024-05-01",
        "I Fish Taco",
        "$4.25",
        "TOTAL $4.25",
        "VISA $4.25",
        "Come again",
        "Bye",
    ]

    items = _extract_items(lines)

    assert len(items) == 1
    assert items[0].item_name == "Fish Taco"
    assert items[0].quantity == 1
    assert items[0].total_price == Decimal("4.25")


def test_confidence_comes_from_aligned_text_block() -> None:
    lines = ["Store Name", "1x Chicken Rice $5.00", "TOTAL $5.00"]
    blocks = [
        OcrTextBlock(text="Store Name", confidence=Decimal("99.0"), line_number=0),
        OcrTextBlock(text="1x Chicken Rice $5.00", confidence=Decimal("93.5"), line_number=1),
        OcrTextBlock(text="TOTAL $5.00", confidence=Decimal("97.0"), line_number=2),
    ]

    assert _extract_items(lines, blocks)[0].confidence == Decimal("93.5")
    # Missing blocks fall back to the default line confidence
    assert _extract_items(lines)[0].confidence == Decimal("0.7")


def test_each_line_contributes_to_at_most_one_item() -> None:
    lines = [
        "Bistro Grill",
        "2024-01-15",
        "Chicken Salad",
        "Caesar Wrap",
        "$12.50",
        "$9.00",
        "TOTAL $21.50",
        "VISA $21.50",
    ]

    items = _extract_items(lines)

    used_lines = [item.line_number for item in items]
    assert len(used_lines) == len(set(used_lines))
    assert sum(item.total_price for item in items) <= Decimal("21.50")


def test_short_inputs_do_not_fail() -> None:
    for lines in ([], ["TOTAL $5.00"], ["Cafe", "1 Tea $2.00"], ["A", "B", "C", "D", "E", "F"]):
        assert isinstance(_extract_items(lines), list)


def test_modifier_shaped_line_with_its_own_price_is_an_item() -> None:
    lines = [
        "Bar",
        "2024-01-01",
        "Table 5",
        "Margarita Rocks",
        "Make It Blue",
        "$5.00",
        "$9.00",
        "SUBTOTAL $14.00",
        "TOTAL $14.00",
        "VISA $14.00",
    ]

    items = _extract_items(lines)

    assert [(item.item_name, item.total_price) for item in items] == [
        ("Margarita Rocks", Decimal("5.00")),
        ("Make It Blue", Decimal("9.00")),
    ]


def test_food_keyword_rescues_line_rejected_as_item_name() -> None:
    # "Sun" reads as a day name, but "pasta" marks a real dish
    assert not _looks_like_item_name("Sun Dried Tomato Pasta")
    lines = [
        "Trattoria",
        "2024-03-02",
        "Sun Dried Tomato Pasta",
        "$14.50",
        "1 Soda $2.00",
        "TOTAL $16.50",
        "VISA $16.50",
        "Thank you",
    ]

    items = _extract_items(lines)

    assert [(item.item_name, item.total_price) for item in items] == [
        ("Sun Dried Tomato Pasta", Decimal("14.50")),
        ("Soda", Decimal("2.00")),
    ]


def test_modifier_collection_is_bounded() -> None:
    modifiers = [
        "W/ BASIL",
        "W/ LIME",
        "W/ MINT",
        "W/ CHILI",
        "W/ SPROUTS",
        "W/ TRIPE",
        "W/ TENDON",
        "W/ BRISKET",
        "W/ FLANK",
        "W/ MEATBALL",
    ]
    lines = [
        "Pho House",
        "2024-04-04",
        "Hanoi Street",
        "Pho Special",
        *modifiers,
        "$15.00",
        "TOTAL $15.00",
        "VISA $15.00",
        "Thank you",
    ]

    items = _extract_items(lines)

    assert len(items) == 1
    # Nine lines follow the item inside the window; the tenth is left out
    assert items[0].item_name == " ".join(["Pho Special", *modifiers[:9]])
    assert items[0].total_price == Decimal("15.00")
