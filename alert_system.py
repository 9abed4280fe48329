"""
Alert System - Handles stock level warnings after sales and restocks
Classifies the resulting quantity of a product and notifies observers
"""

import logging
from typing import List, Optional, Callable

from rich.console import Console

from models import Product, StockTier

logger = logging.getLogger(__name__)


class AlertObserver:
    """Base class for alert observers"""

    def on_alert(self, tier: StockTier, product: Product, message: str):
        """Called when a product lands in a warning tier"""
        raise NotImplementedError


class ConsoleAlertObserver(AlertObserver):
    """Prints alerts to console"""

    STYLES = {
        StockTier.EMPTY: "bold red",
        StockTier.LOW_STOCK: "bold yellow",
        StockTier.FULL: "bold green",
    }

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def on_alert(self, tier: StockTier, product: Product, message: str):
        self.console.print(f"⚠️  {message}", style=self.STYLES[tier], markup=False)


class CallbackAlertObserver(AlertObserver):
    """Calls a custom callback function on alert"""

    def __init__(self, callback: Callable[[StockTier, Product, str], None]):
        self.callback = callback

    def on_alert(self, tier: StockTier, product: Product, message: str):
        self.callback(tier, product, message)


class AlertSystem:
    """Classifies stock levels and fans warnings out to observers"""

    MESSAGES = {
        StockTier.EMPTY: "Product '{name}' is now EMPTY!",
        StockTier.LOW_STOCK: "Product '{name}' is SHORT and needs refilling!",
        StockTier.FULL: "Product '{name}' is FULL.",
    }

    def __init__(self):
        self._observers: List[AlertObserver] = []

    def add_observer(self, observer: AlertObserver):
        """Add an alert observer"""
        self._observers.append(observer)

    def remove_observer(self, observer: AlertObserver):
        """Remove an alert observer"""
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify_observers(self, tier: StockTier, product: Product, message: str):
        """Notify all observers of an alert"""
        for observer in self._observers:
            try:
                observer.on_alert(tier, product, message)
            except Exception:
                logger.exception("Error notifying alert observer %r", observer)

    @classmethod
    def message_for(cls, tier: StockTier, product: Product) -> str:
        return cls.MESSAGES[tier].format(name=product.name)

    def check_product_stock(self, product: Product) -> Optional[StockTier]:
        """Check a single product's stock level and alert if it is in a warning tier"""
        tier = product.stock_tier
        if tier is None:
            return None

        message = self.message_for(tier, product)
        logger.info("Stock alert for product %s: %s", product.id, tier.value)
        self._notify_observers(tier, product, message)
        return tier
