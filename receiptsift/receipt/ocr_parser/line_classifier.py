"""Line classification predicates shared by every parsing stage.

All predicates are pure string classifiers, independent of line position.
``_classify_lines`` evaluates them once per line so a parse call never
re-derives the same classification.
"""

import re
from dataclasses import dataclass
from decimal import Decimal

from ..parser_config import DEFAULT_PARSER_CONFIG, ParserConfig
from .common import (
    PRICE_TOKEN_PATTERN,
    QUANTITY_PREFIX_PATTERN,
    STANDALONE_PRICE_PATTERN,
    TRAILING_PRICE_PATTERN,
)

SUB_ITEM_PREFIXES = ("-", "+", "•", "*", ">", "○", "·", "[")
# English and Spanish (con/sin/copa) modifier words
SUB_ITEM_MODIFIER_WORDS = ("no ", "extra ", "less ", "with ", "without ", "more ", "con ", "sin ", "copa ")
PARENTHETICAL_COUNT_PATTERN = re.compile(r"^\(\d+\)\s+")

COLUMN_HEADERS = {
    "price",
    "qty",
    "item",
    "qty item",
    "quantity",
    "amount",
    "description",
    "unit price",
    "total price",
}

# "pandamart (Punggol)", "Starbucks (Downtown)"
STORE_LOCATION_PATTERN = re.compile(r"^[\w\s]+\([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?\)$")
ITEM_COUNT_PATTERN = re.compile(r"^\(\d+\s+items?\)$", re.IGNORECASE)

FEE_PHRASES = (
    "platform fee",
    "service fee",
    "convenience fee",
    "delivery fee",
    "booking fee",
    "processing fee",
    "small order fee",
)
STATUS_WORDS = {"free", "promo", "discount applied", "applied"}
DELIVERY_TYPES = {"standard delivery", "express delivery", "priority delivery", "scheduled delivery"}

ORDER_NUMBER_PATTERN = re.compile(r"^#\d+\s*-?\s*(HERE|TO[-\s]?GO|DINE[-\s]?IN)?$", re.IGNORECASE)
METADATA_PATTERNS = [
    re.compile(r"^(server|cashier|clerk|employee|staff|waiter|waitress)[:\s]+", re.IGNORECASE),
    re.compile(r"^(guest|guests|party|people|ppl|covers?)[:\s]+", re.IGNORECASE),
    re.compile(r"^(reprint|copy|duplicate)[:\s#]+", re.IGNORECASE),
    re.compile(r"^(member|membership|invoice|pickup)[:\s]+", re.IGNORECASE),
    re.compile(r"^table[\s#]+\d+", re.IGNORECASE),
    # (858) 488-7311 / 858-488-7311
    re.compile(r"^\(\d{3}\)\s*\d{3}[-\s]?\d{4}"),
    re.compile(r"^\d{3}[-.\s]\d{3}[-.\s]\d{4}"),
]

# Greetings, store banners and taglines. "din! ia" / "din!" are OCR misreads of "DINE IN".
BANNER_PHRASES = (
    "thank you",
    "thanks",
    "visit",
    "receipt",
    "invoice",
    "welcome",
    "store",
    "branch",
    "exquisita",
    "mexicana",
    "delicious",
    "dine in",
    "din! ia",
    "din!",
    "take out",
    "takeout",
)

# "70-go" / "t0-go" are OCR misreads of "to-go"
PAYMENT_PHRASES = (
    "payment",
    "card",
    "cash",
    "change",
    "tender",
    "paid",
    "acct:",
    "auth:",
    "trans",
    "to-go",
    "70-go",
    "t0-go",
    "dine",
    "pickup",
    "delivery",
)
CARD_BRANDS = {"visa", "mastercard", "amex", "discover"}
CONTACT_PHRASES = ("tel:", "phone:", "email:", "website:", "www.")

TOTAL_PHRASES = (
    "total",
    "subtotal",
    "sub-total",
    "sub total",
    "grand total",
    "amount due",
    "balance",
    "tax",
    "gst",
    "vat",
    "service charge",
    "s/c",
    "discount",
    "rounding",
    # Chinese: total, subtotal, sum, tax, discount
    "总计",
    "小计",
    "合计",
    "税",
    "折扣",
)
TOTAL_WORDS = {"total", "subtotal", "tax", "gst", "discount", "change", "cash", "payment"}

# Words that mark a main item rather than a modifier
ITEM_KEYWORDS = (
    # Mains
    "salad", "soup", "sandwich", "burger", "pizza", "pasta",
    "chicken", "beef", "pork", "fish", "shrimp", "salmon", "steak",
    "rice", "noodles", "wrap", "taco", "burrito", "quesadilla",
    # Sides
    "fries", "wings", "nachos", "asparagus", "brussel", "broccoli",
    "potato", "potatoes", "coleslaw", "beans", "corn",
    # Desserts
    "cake", "cookie", "pie", "ice cream", "brownie", "cheesecake",
    # Drinks
    "margarita", "cocktail", "beer", "wine", "soda", "juice",
    "drink", "fountain", "draft",
    # Abbreviations: salad, sandwich, nachos, MOD Pizza
    "sld", "sand", "nac", "mod",
)

MODIFIER_PREFIXES = ("dress ", "dressing ", "sauce ", "on side", "on the side")

# Dates, times, days, months, order/check/table references
NON_ITEM_PATTERNS = [
    re.compile(r"\d{1,2}[-/]\w{3}[-/]\d{2,4}"),  # 27-Apr-2017
    re.compile(r"\d{4}[-/]\d{1,2}[-/]\d{1,2}"),  # 2023-04-15
    re.compile(r"\d{1,2}[-/]\d{1,2}[-/]\d{2,4}"),  # 04/15/2023
    # Whole words only: "Fries" and "Salmon" are not day names
    re.compile(r"\b(MON|TUES?|WED|THURS?|FRI|SAT|SUN)(DAY|NESDAY|URDAY)?\b", re.IGNORECASE),
    re.compile(
        r"\b(JANUARY|FEBRUARY|MARCH|APRIL|MAY|JUNE|JULY|AUGUST|SEPTEMBER|OCTOBER|NOVEMBER|DECEMBER)\b",
        re.IGNORECASE,
    ),
    re.compile(r"\d{1,2}:\d{2}(:\d{2})?[AP]?M?", re.IGNORECASE),
    re.compile(r"^ORDER[:\s#]", re.IGNORECASE),
    re.compile(r"^CHECK[:\s#]", re.IGNORECASE),
    re.compile(r"^TABLE[\s#]*\d+", re.IGNORECASE),
]
DELIVERY_UI_PREFIXES = ("view details", "view order", "see details")
BARE_NUMBER_PATTERN = re.compile(r"^\d+\.?\d*$")


def _has_latin_letter(text: str) -> bool:
    return any("A" <= c <= "Z" or "a" <= c <= "z" for c in text)


def _is_cjk(c: str) -> bool:
    return "一" <= c <= "鿿"


def _is_store_location(text: str) -> bool:
    """Store name with a parenthesized location; Latin text only so Chinese lines survive."""
    return _has_latin_letter(text) and STORE_LOCATION_PATTERN.match(text) is not None


def _has_quantity_prefix(line: str) -> bool:
    """Return True if the line starts with a quantity ("1 ", or OCR'd "I ", "l ", ": ")."""
    return QUANTITY_PREFIX_PATTERN.match(line.strip()) is not None


def _is_sub_item(line: str) -> bool:
    """
    Return True for indented or bulleted sub-items and modifier notes.

    Examples: "  Extra sauce", "- No pickles", "+++Passion Fruit Soda",
    "[Chicken] [5*]", "(2) BMOD Up", "CON TODO".
    """
    if not line:
        return False
    if line.startswith("  ") or line.startswith("\t"):
        return True

    trimmed = line.lstrip()
    if trimmed.startswith(SUB_ITEM_PREFIXES):
        return True
    if PARENTHETICAL_COUNT_PATTERN.match(trimmed):
        return True

    # "Add Lobster" with its own price is a real item, so "add " is not listed
    lower = trimmed.lower()
    return lower.startswith(SUB_ITEM_MODIFIER_WORDS) or " copa " in lower


def _is_header_footer(line: str) -> bool:
    """Return True for column headers, banners, payment, contact and separator lines."""
    lower = line.lower()
    trimmed = line.strip()

    if lower in COLUMN_HEADERS:
        return True
    if _is_store_location(trimmed):
        return True

    # Delivery app UI
    if lower in ("help", "view details", "your order") or lower.startswith("view details"):
        return True
    if "(" in lower and "items)" in lower:
        return True

    if any(phrase in lower for phrase in FEE_PHRASES):
        return True
    if lower in STATUS_WORDS or lower in DELIVERY_TYPES:
        return True

    if ORDER_NUMBER_PATTERN.match(trimmed):
        return True
    if any(pattern.match(trimmed) for pattern in METADATA_PATTERNS):
        return True
    if "member" in lower and any(word in lower for word in ("consumption", "policy", "preferential")):
        return True

    if any(phrase in lower for phrase in BANNER_PHRASES):
        return True

    # Decorated taglines like "!!!!!!!!!"
    if sum(1 for c in line if c in "!*#") > 3:
        return True

    if any(phrase in lower for phrase in PAYMENT_PHRASES) or lower in CARD_BRANDS:
        return True

    # Separators
    if lower.startswith(("===", "---", "***")):
        return True
    if all(c in "=-*" or c.isspace() for c in lower):
        return True

    return any(phrase in lower for phrase in CONTACT_PHRASES)


def _is_total_line(line: str) -> bool:
    """Return True if the line mentions totals, tax, charges, discounts or rounding."""
    lower = line.lower()
    return any(phrase in lower for phrase in TOTAL_PHRASES)


def _contains_total_keywords(item_name: str) -> bool:
    """Return True if an item name is really a total/payment label."""
    if item_name.lower() in TOTAL_WORDS:
        return True
    return _is_total_line(item_name)


def _contains_item_keywords(line: str) -> bool:
    """Return True if the line names food or drink (a main item, not a modifier)."""
    lower = line.lower()
    return any(keyword in lower for keyword in ITEM_KEYWORDS)


def _is_valid_item_name(item_name: str) -> bool:
    """Reject empty, symbol-only and stray-glyph names; "AA" and "XO" are fine."""
    if not item_name or not item_name.strip():
        return False
    trimmed = item_name.strip()
    if len(trimmed) < 2:
        return False
    if not any(c.isalpha() for c in trimmed):
        return False
    if all(not c.isalnum() for c in trimmed):
        return False
    # European receipts print "×" between quantity and price
    if len(trimmed) <= 3 and "×" in trimmed:
        return False
    return True


def _is_valid_item_price(price: Decimal, config: ParserConfig = DEFAULT_PARSER_CONFIG) -> bool:
    """
    Return True if a price is plausible for a single item.

    Zero is allowed for comped items. Prices above the ceiling are usually
    totals or subtotals; tiny non-zero prices are usually OCR noise.
    """
    if price == 0:
        return True
    if price < 0:
        return False
    if price > config.max_item_price:
        return False
    return price >= config.min_item_price


def _has_price_on_same_line(line: str) -> bool:
    """
    Return True if the line ends with a price after some text.

    "1x Chicken Rice $5.50" matches; "Chang (2@$3.50)" does not.
    """
    return TRAILING_PRICE_PATTERN.search(line.rstrip()) is not None


def _is_price_only_line(line: str) -> bool:
    """Return True if nothing but a price (and maybe "$") remains on the line."""
    residue = PRICE_TOKEN_PATTERN.sub("", line)
    residue = re.sub(r"\s+", "", residue).replace("$", "")
    return len(residue) <= 2


def _looks_like_item_name(line: str) -> bool:
    """Return True if the line could name a purchasable item."""
    if len(line) < 3:
        return False
    if BARE_NUMBER_PATTERN.match(line):
        return False

    trimmed = line.strip()
    # "(T.1)", "(A)" table/check references
    if trimmed.startswith("(") and trimmed.endswith(")") and len(trimmed) < 10:
        return False
    if PARENTHETICAL_COUNT_PATTERN.match(trimmed):
        return False
    if any(pattern.search(trimmed) for pattern in NON_ITEM_PATTERNS):
        return False

    lower = trimmed.lower()
    if lower.startswith(DELIVERY_UI_PREFIXES) or ITEM_COUNT_PATTERN.match(trimmed):
        return False
    if _is_store_location(trimmed):
        return False

    if _is_sub_item(line) or _is_header_footer(line) or _is_total_line(line):
        return False

    return any(c.isalpha() or _is_cjk(c) for c in line)


def _is_modifier_line(line: str, previous_line: str | None = None) -> bool:
    """
    Return True if the line refines the item above it rather than naming a new one.

    Examples: "W/ DRESSING", "SD SALAD", "DRESS ON SIDE", or a brand line like
    "Pelu Cabernet Sauvignon" under "1 CAB PEJU SAUY S".
    """
    if not line:
        return False

    trimmed = line.strip()
    lower = trimmed.lower()

    if _has_quantity_prefix(trimmed):
        return False
    if lower.startswith(("w/", "w /")):
        return True
    if lower.startswith(MODIFIER_PREFIXES):
        return True
    # "SD" is a side dish only when the line is short
    if lower.startswith("sd ") and len(trimmed) < 15:
        return True

    def _mostly_letters(ratio: float) -> bool:
        letters = sum(1 for c in trimmed if c.isalpha())
        return letters > len(trimmed) * ratio

    def _plain_text() -> bool:
        return (
            not _has_price_on_same_line(trimmed)
            and not STANDALONE_PRICE_PATTERN.match(trimmed)
            and not _contains_item_keywords(trimmed)
        )

    if previous_line is not None and _has_quantity_prefix(previous_line):
        if len(trimmed) < 30 and _plain_text() and _mostly_letters(0.6):
            return True

    return len(trimmed) < 15 and _plain_text() and _mostly_letters(0.7)


@dataclass(frozen=True)
class LineRole:
    """Position-independent classification of one line."""

    text: str
    is_sub_item: bool
    is_header_footer: bool
    is_total: bool
    has_quantity_prefix: bool
    has_price_on_line: bool
    is_price_only: bool
    looks_like_item_name: bool
    has_item_keyword: bool

    @property
    def is_excluded(self) -> bool:
        """Sub-item, header/footer or total: never an item start."""
        return self.is_sub_item or self.is_header_footer or self.is_total


def _classify_line(line: str) -> LineRole:
    return LineRole(
        text=line,
        is_sub_item=_is_sub_item(line),
        is_header_footer=_is_header_footer(line),
        is_total=_is_total_line(line),
        has_quantity_prefix=_has_quantity_prefix(line),
        has_price_on_line=_has_price_on_same_line(line),
        is_price_only=_is_price_only_line(line),
        looks_like_item_name=_looks_like_item_name(line),
        has_item_keyword=_contains_item_keywords(line),
    )


def _classify_lines(lines: list[str]) -> list[LineRole]:
    """Classify every line once; index-aligned with ``lines``."""
    return [_classify_line(line) for line in lines]
