"""
Inventory Manager - Core logic for inventory management operations
Handles the product catalog, stock rules, sales and the stock transaction log
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from config import DATABASE_URL, MAX_QUANTITY
from alert_system import AlertSystem
from exporter import PathLike, export_to_file, now_timestamp
from models import (
    Product, StockTransaction, LineItem, OperationResult,
    TransactionType, InventoryError, Money, MAX_PRICE,
    fits_sqlite_integer, to_money,
    init_database, get_session
)

logger = logging.getLogger(__name__)

INVENTORY_HEADER = "=== INVENTORY EXPORT ==="


class InventoryManager:
    """Core inventory management class"""

    def __init__(self, db_url: str = DATABASE_URL, alert_system: AlertSystem = None):
        self.db_url = db_url
        self.engine = init_database(db_url)
        self.session = get_session(self.engine)
        self.alert_system = alert_system or AlertSystem()

    def close(self):
        """Close database session"""
        self.session.close()

    # ==================== Product Management ====================

    def insert_product(self, product_id: int, name: str, quantity: int, price: Money,
                       performed_by: str = "System") -> OperationResult:
        """
        Add a new product to the catalog

        Prices are kept in whole cents; non-finite or negative prices are refused.
        """
        if not fits_sqlite_integer(product_id):
            return self._refuse(InventoryError.INVALID_ID, "Product ID is out of range.", product_id)
        if self._get(product_id) is not None:
            return self._refuse(InventoryError.ALREADY_EXISTS, "Product already exists.", product_id)
        if quantity > MAX_QUANTITY:
            return self._refuse(InventoryError.QUANTITY_EXCEEDED,
                                f"Quantity cannot exceed {MAX_QUANTITY}.", product_id)
        price = to_money(price)
        if quantity < 0 or not price.is_finite() or price < 0:
            return self._refuse(InventoryError.INVALID_AMOUNT,
                                "Quantity and price must be non-negative numbers.", product_id)
        if price > MAX_PRICE:
            return self._refuse(InventoryError.INVALID_AMOUNT,
                                f"Price cannot exceed {MAX_PRICE}.", product_id)

        product = Product(id=product_id, name=name, quantity=quantity, price=price)
        self.session.add(product)
        self._create_transaction(product, TransactionType.INSERT, quantity,
                                 previous_stock=0, performed_by=performed_by)
        if not self._commit():
            return self._storage_failed(product_id)

        logger.info("Inserted product %s (%s) with quantity %s", product_id, name, quantity)
        return OperationResult.success("Product inserted successfully.",
                                       product=product.detached_copy())

    def delete_product(self, product_id: int, performed_by: str = "System") -> OperationResult:
        """Remove a product from the catalog"""
        product = self._get(product_id)
        if product is None:
            return self._refuse(InventoryError.NOT_FOUND, "Product not found.", product_id)

        removed = product.detached_copy()
        self._create_transaction(product, TransactionType.DELETE, -product.quantity,
                                 previous_stock=product.quantity, new_stock=0,
                                 performed_by=performed_by)
        self.session.delete(product)
        if not self._commit():
            return self._storage_failed(product_id)

        logger.info("Deleted product %s (%s)", product_id, removed.name)
        return OperationResult.success("Product deleted successfully.", product=removed)

    def get_product(self, product_id: int) -> Optional[Product]:
        """Get a detached copy of a product by ID"""
        product = self._get(product_id)
        return product.detached_copy() if product is not None else None

    def product_exists(self, product_id: int) -> bool:
        return self._get(product_id) is not None

    def snapshot(self) -> List[Product]:
        """Detached copies of every product, ordered by ID"""
        products = self.session.query(Product).order_by(Product.id).all()
        return [p.detached_copy() for p in products]

    # ==================== Stock Management ====================

    def restock_product(self, product_id: int, amount: int,
                        performed_by: str = "System") -> OperationResult:
        """Restock a product (increases stock, never beyond the cap)"""
        product = self._get(product_id)
        if product is None:
            return self._refuse(InventoryError.NOT_FOUND, "Product not found.", product_id)
        if amount <= 0:
            return self._refuse(InventoryError.INVALID_AMOUNT,
                                "Restock amount must be positive.", product_id)
        if product.quantity + amount > MAX_QUANTITY:
            return self._refuse(InventoryError.QUANTITY_EXCEEDED,
                                f"Cannot restock beyond {MAX_QUANTITY}.", product_id)

        previous_stock = product.quantity
        product.quantity = previous_stock + amount
        self._create_transaction(product, TransactionType.RESTOCK, amount,
                                 previous_stock=previous_stock, performed_by=performed_by)
        if not self._commit():
            return self._storage_failed(product_id)

        logger.info("Restocked product %s: %s -> %s", product_id, previous_stock, product.quantity)
        warning = self.alert_system.check_product_stock(product)
        return OperationResult.success(
            f"Restocked successfully. Current quantity: {product.quantity}",
            product=product.detached_copy(),
            warning=warning
        )

    def sell_product(self, product_id: int, amount: int,
                     performed_by: str = "System") -> OperationResult:
        """
        Record a sale (reduces stock)

        On success the result carries ``sold_item``, a record of exactly what
        was taken (name, unit price, amount), and ``warning``, the stock tier
        of the remaining quantity if it is in one.
        """
        product = self._get(product_id)
        if product is None:
            return self._refuse(InventoryError.NOT_FOUND, "Product not found.", product_id)
        if amount <= 0:
            return self._refuse(InventoryError.INVALID_AMOUNT,
                                "Sale amount must be positive.", product_id)
        if product.quantity < amount:
            return self._refuse(InventoryError.INSUFFICIENT_STOCK, "Not enough stock.", product_id)

        previous_stock = product.quantity
        product.quantity = previous_stock - amount
        sold_item = LineItem(product.name, amount, product.price)
        self._create_transaction(product, TransactionType.SALE, -amount,
                                 previous_stock=previous_stock, performed_by=performed_by)
        if not self._commit():
            return self._storage_failed(product_id)

        logger.info("Sold %s of product %s: %s -> %s", amount, product_id, previous_stock, product.quantity)
        warning = self.alert_system.check_product_stock(product)
        return OperationResult.success(
            "Sale successful.",
            product=product.detached_copy(),
            sold_item=sold_item,
            warning=warning
        )

    # ==================== Export ====================

    def get_file_content(self, timestamp: Optional[str] = None) -> str:
        lines = [
            INVENTORY_HEADER,
            f"Timestamp: {timestamp or now_timestamp()}",
            "",
        ]
        lines.extend(p.to_file_line() for p in self.snapshot())
        return "\n".join(lines) + "\n"

    def print_to_file(self, filepath: PathLike) -> bool:
        return export_to_file(self.get_file_content(), filepath)

    # ==================== Transaction History ====================

    def get_transactions(self, product_id: int = None,
                         transaction_type: TransactionType = None,
                         limit: int = 100) -> List[StockTransaction]:
        """Get transaction history with optional filters, newest first"""
        query = self.session.query(StockTransaction)

        if product_id is not None:
            if not fits_sqlite_integer(product_id):
                return []
            query = query.filter(StockTransaction.product_id == product_id)
        if transaction_type:
            query = query.filter(StockTransaction.transaction_type == transaction_type)

        return query.order_by(StockTransaction.id.desc()).limit(limit).all()

    # ==================== Helper Methods ====================

    def _get(self, product_id: int) -> Optional[Product]:
        # Ids SQLite cannot store are never in the catalog
        if not fits_sqlite_integer(product_id):
            return None
        return self.session.get(Product, product_id)

    def _commit(self) -> bool:
        """Commit the pending change, or roll it back so the session stays usable"""
        try:
            self.session.commit()
        except SQLAlchemyError:
            logger.exception("Commit failed, rolling back")
            self.session.rollback()
            return False
        return True

    def _storage_failed(self, product_id: int) -> OperationResult:
        return self._refuse(InventoryError.STORAGE_FAILED, "Could not save the change.", product_id)

    def _refuse(self, error: InventoryError, message: str, product_id: int) -> OperationResult:
        logger.info("Refused operation on product %s: %s", product_id, error.value)
        return OperationResult.failure(error, message)

    def _create_transaction(self, product: Product, transaction_type: TransactionType,
                            quantity: int, previous_stock: int = None, new_stock: int = None,
                            performed_by: str = "System") -> StockTransaction:
        """Create a stock transaction record"""
        if previous_stock is None:
            previous_stock = product.quantity - quantity
        if new_stock is None:
            new_stock = product.quantity

        transaction = StockTransaction(
            product_id=product.id,
            product_name=product.name,
            transaction_type=transaction_type,
            quantity=quantity,
            previous_stock=previous_stock,
            new_stock=new_stock,
            unit_price_cents=product.price_cents,
            total_value_cents=abs(quantity) * product.price_cents,
            performed_by=performed_by
        )
        self.session.add(transaction)
        return transaction
