"""
Database Models for the Supermarket Inventory System
Defines Product and StockTransaction models, plus the plain records and
outcome types shared by the inventory and the receipt
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union
from sqlalchemy import create_engine, Column, Integer, String, DateTime, Enum as SQLEnum
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.sql import func
import enum

from config import DATABASE_URL, LOW_STOCK_THRESHOLD, MAX_QUANTITY

Base = declarative_base()

Money = Union[Decimal, float, int]

CENT = Decimal("0.01")

# SQLite INTEGER is a signed 64-bit value
SQLITE_INT_MIN = -2 ** 63
SQLITE_INT_MAX = 2 ** 63 - 1

# Highest price whose line value at full stock still fits in cents
MAX_PRICE = Decimal(SQLITE_INT_MAX // MAX_QUANTITY) / 100


def fits_sqlite_integer(value: int) -> bool:
    return SQLITE_INT_MIN <= value <= SQLITE_INT_MAX


def to_money(value: Money) -> Decimal:
    """Exact decimal for a price; floats are read through their shortest repr"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def to_cents(value: Money) -> int:
    """Round a finite price to whole cents"""
    return int(to_money(value).quantize(CENT, rounding=ROUND_HALF_UP) * 100)


def from_cents(cents: int) -> Decimal:
    return Decimal(cents) / 100


def format_money(value: Money) -> str:
    """Shortest plain rendering with at least one decimal: 2.5, 125.0, 0.3"""
    text = format(to_money(value).normalize(), "f")
    return text if "." in text else f"{text}.0"


class TransactionType(enum.Enum):
    """Types of stock transactions"""
    INSERT = "Insert"
    RESTOCK = "Restock"
    SALE = "Sale"
    DELETE = "Delete"


class StockTier(enum.Enum):
    """Informational stock level tiers"""
    EMPTY = "empty"
    LOW_STOCK = "low stock"
    FULL = "full"


class InventoryError(enum.Enum):
    """Reasons an operation can be refused"""
    ALREADY_EXISTS = "AlreadyExists"
    NOT_FOUND = "NotFound"
    QUANTITY_EXCEEDED = "QuantityExceeded"
    INSUFFICIENT_STOCK = "InsufficientStock"
    INVALID_AMOUNT = "InvalidAmount"
    INVALID_ID = "InvalidId"
    STORAGE_FAILED = "StorageFailed"
    FILE_WRITE_FAILED = "FileWriteFailed"


def classify_stock(quantity: int) -> Optional[StockTier]:
    """Classify a stock level into at most one warning tier"""
    if quantity == 0:
        return StockTier.EMPTY
    elif quantity < LOW_STOCK_THRESHOLD:
        return StockTier.LOW_STOCK
    elif quantity == MAX_QUANTITY:
        return StockTier.FULL
    return None


class Product(Base):
    """Product model - stores product information and current stock level"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    price_cents = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', quantity={self.quantity})>"

    @property
    def price(self) -> Decimal:
        return from_cents(self.price_cents)

    @price.setter
    def price(self, value: Money):
        self.price_cents = to_cents(value)

    @property
    def stock_tier(self) -> Optional[StockTier]:
        """Get the warning tier for the current quantity"""
        return classify_stock(self.quantity)

    def detached_copy(self) -> "Product":
        """Return a transient copy that is not tracked by any session"""
        return Product(id=self.id, name=self.name, quantity=self.quantity, price=self.price)

    def to_display_line(self) -> str:
        return f"ID: {self.id} | Name: {self.name} | Qty: {self.quantity} | Price: {format_money(self.price)}"

    def to_file_line(self) -> str:
        return f"{self.id} {self.name} {self.quantity} {format_money(self.price)}"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "price": format_money(self.price),
            "stock_tier": self.stock_tier.value if self.stock_tier else None
        }


class StockTransaction(Base):
    """Stock Transaction model - tracks all catalog mutations"""
    __tablename__ = "stock_transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # No foreign key: the log outlives deleted products
    product_id = Column(Integer, nullable=False)
    product_name = Column(String(200), nullable=False)
    transaction_type = Column(SQLEnum(TransactionType), nullable=False)
    quantity = Column(Integer, nullable=False)  # Positive for additions, negative for deductions
    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)
    unit_price_cents = Column(Integer)
    total_value_cents = Column(Integer)
    performed_by = Column(String(100))
    created_at = Column(DateTime, default=func.now())

    def __repr__(self):
        return f"<StockTransaction(id={self.id}, product_id={self.product_id}, type={self.transaction_type.value}, qty={self.quantity})>"

    @property
    def unit_price(self) -> Optional[Decimal]:
        return from_cents(self.unit_price_cents) if self.unit_price_cents is not None else None

    @property
    def total_value(self) -> Optional[Decimal]:
        return from_cents(self.total_value_cents) if self.total_value_cents is not None else None

    def to_dict(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "transaction_type": self.transaction_type.value,
            "quantity": self.quantity,
            "previous_stock": self.previous_stock,
            "new_stock": self.new_stock,
            "unit_price": format_money(self.unit_price) if self.unit_price is not None else None,
            "total_value": format_money(self.total_value) if self.total_value is not None else None,
            "performed_by": self.performed_by,
            "created_at": self.created_at.isoformat() if self.created_at else None
        }


class LineItem:
    """One sold item: what left the shelf, at the price it was sold for"""

    def __init__(self, name: str, quantity: int, unit_price: Money):
        self.name = name
        self.quantity = quantity
        self.unit_price = to_money(unit_price)

    def __repr__(self):
        return f"<LineItem(name='{self.name}', quantity={self.quantity}, unit_price={self.unit_price})>"

    def __eq__(self, other):
        if not isinstance(other, LineItem):
            return NotImplemented
        return (self.name, self.quantity, self.unit_price) == (other.name, other.quantity, other.unit_price)

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price

    def to_receipt_line(self) -> str:
        return f"{self.name} x{self.quantity} @ {format_money(self.unit_price)} = {format_money(self.line_total)}"


class OperationResult:
    """
    Outcome of an inventory, receipt or export operation

    Truthy only on success. Failures carry the refusal reason in ``error``
    and a human-readable ``message``.
    """

    def __init__(self, ok: bool, message: str, error: Optional[InventoryError] = None,
                 product: Optional[Product] = None, sold_item: Optional[LineItem] = None,
                 warning: Optional[StockTier] = None, path: Optional[str] = None):
        self.ok = ok
        self.message = message
        self.error = error
        self.product = product
        self.sold_item = sold_item
        self.warning = warning
        self.path = path

    def __bool__(self):
        return self.ok

    def __repr__(self):
        status = "ok" if self.ok else self.error.value
        return f"<OperationResult({status}, message='{self.message}')>"

    @classmethod
    def success(cls, message: str, **kwargs) -> "OperationResult":
        return cls(True, message, **kwargs)

    @classmethod
    def failure(cls, error: InventoryError, message: str, **kwargs) -> "OperationResult":
        return cls(False, message, error=error, **kwargs)


# Database setup functions
def get_engine(db_url: str = DATABASE_URL):
    """Create and return database engine"""
    return create_engine(db_url, echo=False)


def get_session(engine):
    """Create and return database session"""
    Session = sessionmaker(bind=engine)
    return Session()


def init_database(db_url: str = DATABASE_URL):
    """Initialize database and create all tables"""
    engine = get_engine(db_url)
    Base.metadata.create_all(engine)
    return engine
