"""Composable OCR receipt parser components."""

from .common import body_window, split_lines
from .dedup import _deduplicate_items
from .fields_parser import _extract_date, _extract_merchant, _extract_total
from .items_text_parser import _extract_items
from .line_classifier import LineRole, _classify_lines

__all__ = [
    "LineRole",
    "_classify_lines",
    "_deduplicate_items",
    "_extract_date",
    "_extract_items",
    "_extract_merchant",
    "_extract_total",
    "body_window",
    "split_lines",
]
