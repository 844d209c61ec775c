"""Stock Ledger: inventory tracking for a small retail store.

Tracks plain and perishable items, dated batches, per-manager
contributions, a reversible undo log, and a queue of text orders, and
persists everything to a flat CSV file.

Usage:
    from datetime import date
    from stock_ledger import Ledger, PlainItem, load_ledger, save_ledger

    ledger, result = load_ledger("inventory.csv")
    ledger.add_item(PlainItem(name="Rice", section="Pantry", quantity=40))
    ledger.add_or_update_perishable("Apple", 50, date(2025, 5, 10), "Vegetables & Fruits")
    ledger.add_order("10 apples")
    outcomes = ledger.process_orders()
    save_ledger(ledger, "inventory.csv")
"""

from .config import LedgerSettings, StoreConfig, get_settings, load_store_config
from .errors import (
    DuplicateItem,
    InsufficientStock,
    InvalidAmount,
    ItemKindMismatch,
    ItemNotFound,
    LedgerError,
    MalformedOrder,
    PersistenceError,
)
from .ledger import Ledger
from .models import (
    Batch,
    BatchConsumption,
    BatchReportEntry,
    Fulfillment,
    Item,
    ManagerSummary,
    MostStocked,
    PerishableItem,
    PlainItem,
    SectionGroup,
    StockOperator,
    normalize_name,
    parse_item,
)
from .orders import Order, OrderOutcome, OrderQueue, OrderStatus, parse_order
from .persistence import LoadResult, load_ledger, save_ledger
from .undo import ChangeKind, StockChange, UndoLog

__all__ = [
    # Ledger
    "Ledger",
    # Models
    "Batch",
    "BatchConsumption",
    "BatchReportEntry",
    "Fulfillment",
    "Item",
    "ManagerSummary",
    "MostStocked",
    "PerishableItem",
    "PlainItem",
    "SectionGroup",
    "StockOperator",
    "normalize_name",
    "parse_item",
    # Orders
    "Order",
    "OrderOutcome",
    "OrderQueue",
    "OrderStatus",
    "parse_order",
    # Undo
    "ChangeKind",
    "StockChange",
    "UndoLog",
    # Persistence
    "LoadResult",
    "load_ledger",
    "save_ledger",
    # Config
    "LedgerSettings",
    "StoreConfig",
    "get_settings",
    "load_store_config",
    # Errors
    "DuplicateItem",
    "InsufficientStock",
    "InvalidAmount",
    "ItemKindMismatch",
    "ItemNotFound",
    "LedgerError",
    "MalformedOrder",
    "PersistenceError",
]
