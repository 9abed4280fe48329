"""
Receipt - Accumulates sold line items and the running total of a sale
"""

import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from exporter import PathLike, export_to_file, now_timestamp
from models import LineItem, Money, format_money

logger = logging.getLogger(__name__)

RECEIPT_HEADER = "===== RECEIPT ====="
RECEIPT_SEPARATOR = "-------------------"
RECEIPT_FOOTER = "==================="


class Receipt:
    """Running receipt for the current session"""

    def __init__(self):
        self._items: List[LineItem] = []
        self.total = Decimal("0")

    def __len__(self):
        return len(self._items)

    def add_item(self, name: str, quantity: int, unit_price: Money):
        """Record a sold item. Callers only pass items produced by a successful sale."""
        item = LineItem(name, quantity, unit_price)
        self._items.append(item)
        self.total += item.line_total
        logger.info("Receipt line added: %s", item.to_receipt_line())

    def is_empty(self) -> bool:
        return not self._items

    def clear(self):
        """Start a new receipt"""
        self._items = []
        self.total = Decimal("0")
        logger.info("Receipt cleared")

    def snapshot(self) -> Tuple[Tuple[LineItem, ...], Decimal]:
        """Line items in sale order and the total"""
        items = tuple(LineItem(i.name, i.quantity, i.unit_price) for i in self._items)
        return items, self.total

    def get_file_content(self, timestamp: Optional[str] = None) -> str:
        lines = [
            RECEIPT_HEADER,
            f"Timestamp: {timestamp or now_timestamp()}",
            RECEIPT_SEPARATOR,
        ]
        lines.extend(item.to_receipt_line() for item in self._items)
        lines.extend([
            RECEIPT_SEPARATOR,
            f"Total: {format_money(self.total)}",
            RECEIPT_FOOTER,
        ])
        return "\n".join(lines) + "\n"

    def print_to_file(self, filepath: PathLike) -> bool:
        # Exporting never clears; the caller decides when a new receipt starts
        return export_to_file(self.get_file_content(), filepath)
