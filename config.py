"""
Configuration for the Supermarket Inventory System
Business rules, storage, export and logging settings
"""

import logging
import os
from pathlib import Path

from rich.logging import RichHandler

# Business rules
MAX_QUANTITY = 100
LOW_STOCK_THRESHOLD = 20

# In-memory SQLite: the catalog lives only as long as the process
DATABASE_URL = "sqlite://"

# Export files
EXPORT_DIR = Path(os.environ.get("SUPERMARKET_EXPORT_DIR", "."))
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
INVENTORY_FILE_PREFIX = "inventory"
RECEIPT_FILE_PREFIX = "receipt"

# Logging
LOG_LEVEL = os.environ.get("SUPERMARKET_LOG_LEVEL", "WARNING")
LOG_FORMAT = "%(name)s | %(message)s"


def configure_logging(level: str = None):
    """Route all log records through rich"""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format=LOG_FORMAT,
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
