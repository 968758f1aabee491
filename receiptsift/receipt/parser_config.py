"""Tunable thresholds for the receipt parser.

Defaults live here as an in-memory layer; runtime files (see
``receiptsift.runtime.parser_settings``) may override individual keys via a
``[parser]`` table.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from decimal import Decimal, InvalidOperation
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParserConfig:
    """Heuristic limits used by extraction and verification."""

    # Anything above this is treated as a total/subtotal, not an item
    max_item_price: Decimal = Decimal("200.00")
    # Non-zero prices at or below this are treated as OCR noise
    min_item_price: Decimal = Decimal("0.10")
    match_tolerance: Decimal = Decimal("0.01")
    minor_discrepancy_tolerance: Decimal = Decimal("1.00")
    # A found price this close to the running item sum is a cumulative subtotal
    subtotal_tolerance: Decimal = Decimal("0.11")
    ocr_correction_tolerance: Decimal = Decimal("0.05")
    # Exclusive end offsets, matching range(i + 1, i + lookahead)
    modifier_lookahead: int = 10
    price_lookahead: int = 4
    default_line_confidence: Decimal = Decimal("0.7")
    merchant_scan_lines: int = 5


DEFAULT_PARSER_CONFIG = ParserConfig()

_FIELD_TYPES = {f.name: f.type for f in fields(ParserConfig)}


def _coerce(name: str, raw: Any) -> Decimal | int:
    kind = _FIELD_TYPES[name]
    if kind in (int, "int"):
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
            raise ValueError(f"parser.{name} must be a positive integer, got {raw!r}")
        return raw
    try:
        value = Decimal(str(raw))
    except InvalidOperation as e:
        raise ValueError(f"parser.{name} must be a number, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"parser.{name} must not be negative, got {raw!r}")
    return value


def build_parser_config(*configs: Mapping[str, Any]) -> ParserConfig:
    """Merge ``[parser]`` tables over the defaults; later layers win."""
    config = DEFAULT_PARSER_CONFIG
    for raw_config in configs:
        table = raw_config.get("parser", {})
        if not isinstance(table, Mapping):
            continue
        overrides: dict[str, Any] = {}
        for key, raw in table.items():
            if key not in _FIELD_TYPES:
                logger.warning("Ignoring unknown parser setting: %s", key)
                continue
            overrides[key] = _coerce(key, raw)
        if overrides:
            config = replace(config, **overrides)
    return config
