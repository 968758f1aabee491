"""Bounding-polygon geometry for OCR text blocks."""

import logging
from dataclasses import dataclass

from receiptsift.domain.receipt import OcrTextBlock

logger = logging.getLogger(__name__)

# Used when no block carries geometry
DEFAULT_RECEIPT_WIDTH = 1000
# Text starting beyond this fraction of the content width is a price column
RIGHT_SIDE_RATIO = 0.6


@dataclass(frozen=True)
class ReceiptLayout:
    """Where item names start and how wide the receipt is, in pixels."""

    left_boundary: int
    width: int


def _left_edge(block: OcrTextBlock) -> int | None:
    if not block.bounding_polygon:
        return None
    return min(point.x for point in block.bounding_polygon)


def _right_edge(block: OcrTextBlock) -> int | None:
    if not block.bounding_polygon:
        return None
    return max(point.x for point in block.bounding_polygon)


def _calculate_left_boundary(text_blocks: list[OcrTextBlock], start: int, end: int) -> int:
    """Median left edge over the body window; the median ignores stray indents."""
    left_edges = sorted(
        edge for edge in (_left_edge(block) for block in text_blocks[start:end]) if edge is not None
    )
    if not left_edges:
        return 0
    return left_edges[len(left_edges) // 2]


def _calculate_receipt_width(text_blocks: list[OcrTextBlock]) -> int:
    right_edges = [edge for edge in (_right_edge(block) for block in text_blocks) if edge is not None]
    if not right_edges:
        return DEFAULT_RECEIPT_WIDTH
    return max(right_edges)


def _measure_layout(text_blocks: list[OcrTextBlock], start: int, end: int) -> ReceiptLayout:
    layout = ReceiptLayout(
        left_boundary=_calculate_left_boundary(text_blocks, start, end),
        width=_calculate_receipt_width(text_blocks),
    )
    logger.debug("Layout: left boundary %spx, receipt width %spx", layout.left_boundary, layout.width)
    return layout


def _is_right_side_text(text_blocks: list[OcrTextBlock], line_index: int, layout: ReceiptLayout) -> bool:
    """
    Return True if the block starts in the right-hand price column.

    Without geometry nothing is right-side text.
    """
    if line_index >= len(text_blocks):
        return False
    left_edge = _left_edge(text_blocks[line_index])
    if left_edge is None or layout.left_boundary == 0 or layout.width == 0:
        return False

    threshold = layout.left_boundary + int((layout.width - layout.left_boundary) * RIGHT_SIDE_RATIO)
    return left_edge > threshold
