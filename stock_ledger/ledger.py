"""Inventory Ledger.

The ledger owns every item in the store, indexed by normalized name, and
is the only thing allowed to mutate item and batch state. It also keeps
per-manager contribution totals, a reversible undo log of stock
mutations, and the FIFO queue of pending orders.

Stock policy:
- Plain items never go below zero. A removal larger than the current
  quantity raises InsufficientStock and leaves the item untouched.
- Perishable stock only changes through batch merges (restocking) and
  order fulfillment, which consumes the earliest-expiring batch first.

Reports use thresholds injected at construction (defaults: low < 5,
over > 100, expiring within 7 days).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import date, timedelta

from .config import (
    EXPIRING_WINDOW_DAYS,
    LOW_STOCK_THRESHOLD,
    OVER_STOCK_THRESHOLD,
    StoreConfig,
)
from .errors import (
    DuplicateItem,
    InsufficientStock,
    InvalidAmount,
    ItemKindMismatch,
    ItemNotFound,
)
from .models import (
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
)
from .orders import OrderOutcome, OrderQueue
from .undo import DEFAULT_UNDO_DEPTH, ChangeKind, StockChange, UndoLog

logger = logging.getLogger("stock_ledger.ledger")


class Ledger:
    """The owning aggregate of all items, logs, and contribution accounting.

    Usage:
        ledger = Ledger()
        ledger.add_item(PlainItem(name="Rice", section="Pantry", quantity=40))
        ledger.add_or_update_perishable("Apple", 50, date(2025, 5, 10), "Vegetables & Fruits")
        ledger.add_order("10 apples")
        for outcome in ledger.process_orders():
            print(outcome.message)
    """

    def __init__(
        self,
        low_stock_threshold: int = LOW_STOCK_THRESHOLD,
        over_stock_threshold: int = OVER_STOCK_THRESHOLD,
        expiring_window_days: int = EXPIRING_WINDOW_DAYS,
        undo_depth: int = DEFAULT_UNDO_DEPTH,
    ):
        self.low_stock_threshold = low_stock_threshold
        self.over_stock_threshold = over_stock_threshold
        self.expiring_window_days = expiring_window_days
        self._items: dict[str, Item] = {}
        self.manager_contributions: dict[str, int] = {}
        self.undo_log = UndoLog(undo_depth)
        self.orders = OrderQueue()

    @classmethod
    def from_config(cls, config: StoreConfig) -> Ledger:
        return cls(
            low_stock_threshold=config.low_stock_threshold,
            over_stock_threshold=config.over_stock_threshold,
            expiring_window_days=config.expiring_window_days,
            undo_depth=config.undo_depth,
        )

    # -----------------------------------------------------------------
    # Lookup
    # -----------------------------------------------------------------

    @property
    def items(self) -> list[Item]:
        """All items in insertion order."""
        return list(self._items.values())

    def get(self, name: str) -> Item | None:
        return self._items.get(normalize_name(name))

    def require(self, name: str) -> Item:
        """Exact case-insensitive lookup, raising ItemNotFound on a miss."""
        item = self.get(name)
        if item is None:
            raise ItemNotFound(name)
        return item

    def resolve(self, name: str) -> Item:
        """Lookup used for order text.

        Tries an exact case-insensitive match first, then the same name
        with one trailing "s" stripped ("apples" -> "apple"). This is a
        naive plural fold, not general pluralization.
        """
        item = self.get(name)
        if item is not None:
            return item

        key = normalize_name(name)
        if key.endswith("s"):
            item = self._items.get(key[:-1])
            if item is not None:
                return item

        raise ItemNotFound(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self._items

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    # -----------------------------------------------------------------
    # Mutations
    # -----------------------------------------------------------------

    def add_item(self, item: Item) -> None:
        """Insert a new item.

        Raises:
            DuplicateItem: If an item with the same normalized name exists.
        """
        if item.key in self._items:
            raise DuplicateItem(item.name)
        self._items[item.key] = item
        logger.debug("Added %s item %s (qty %d)", item.kind, item.name, item.quantity)

    def add_or_update_perishable(
        self,
        name: str,
        quantity: int,
        expiration_date: date,
        section: str,
    ) -> PerishableItem:
        """Stock a perishable item, merging batches by expiration date.

        Creates the item with a single batch when the name is new.
        ``section`` is only used on creation.

        Raises:
            InvalidAmount: If ``quantity`` is negative.
            ItemKindMismatch: If the name belongs to a plain item.
        """
        if quantity < 0:
            raise InvalidAmount(quantity, "quantity")

        existing = self.get(name)
        if existing is None:
            item = PerishableItem(name=name, section=section)
            item.merge_batch(quantity, expiration_date)
            self._items[item.key] = item
            logger.debug(
                "Created perishable %s with %d units expiring %s",
                item.name,
                quantity,
                expiration_date,
            )
            return item

        if not isinstance(existing, PerishableItem):
            raise ItemKindMismatch(existing.name, "perishable")

        created = existing.merge_batch(quantity, expiration_date)
        logger.debug(
            "%s batch %s for %s (+%d)",
            "Created" if created else "Merged into",
            expiration_date,
            existing.name,
            quantity,
        )
        return existing

    def update_stock(self, name: str, delta: int) -> Item:
        """Add ``delta`` (possibly negative) to a plain item's quantity.

        Every call is logged, including refused ones, which go in as
        no-op entries. Perishable items are left untouched; their stock
        changes only through batches.

        Raises:
            ItemNotFound: If no item matches ``name``.
            InsufficientStock: If the result would drop below zero.
        """
        item = self.require(name)

        if isinstance(item, PerishableItem):
            self._log_no_op(
                ChangeKind.UPDATE,
                item,
                f"Ignored update of {delta:+d} for perishable {item.name}",
            )
            return item

        if item.quantity + delta < 0:
            self._log_no_op(
                ChangeKind.UPDATE,
                item,
                f"Refused update of {item.name} by {delta:+d} (had {item.quantity})",
            )
            raise InsufficientStock(item.name, -delta, item.quantity)

        description = f"Updated {item.name} by {delta:+d} (was {item.quantity})"
        item.quantity += delta
        self.undo_log.push(
            StockChange(
                kind=ChangeKind.UPDATE,
                item_key=item.key,
                description=description,
                delta=delta,
            )
        )
        logger.debug("Updated %s by %+d -> %d", item.name, delta, item.quantity)
        return item

    def adjust_stock(self, name: str, operator: str, value: int) -> Item:
        """Apply ``+ value`` or ``- value`` to a plain item.

        Like ``update_stock``, every call on an existing item is logged.
        Perishable items do not support operator adjustment, and a refused
        subtraction changes nothing; both are logged as no-ops.

        Raises:
            ValueError: If ``operator`` is not "+" or "-".
            InvalidAmount: If ``value`` is negative.
            ItemNotFound: If no item matches ``name``.
            InsufficientStock: If subtracting more than is on hand.
        """
        op = StockOperator(operator)
        if value < 0:
            raise InvalidAmount(value)
        item = self.require(name)

        if isinstance(item, PerishableItem):
            self._log_no_op(
                ChangeKind.ADJUST,
                item,
                f"Ignored adjustment {op.value}{value} for perishable {item.name}",
            )
            return item

        description = f"Adjusted {item.name} {op.value}{value} (was {item.quantity})"
        if op is StockOperator.ADD:
            item.add_stock(value)
            delta = value
        else:
            try:
                item.remove_stock(value)
            except InsufficientStock:
                self._log_no_op(
                    ChangeKind.ADJUST,
                    item,
                    f"Refused adjustment {item.name} -{value} (had {item.quantity})",
                )
                raise
            delta = -value

        self.undo_log.push(
            StockChange(
                kind=ChangeKind.ADJUST,
                item_key=item.key,
                description=description,
                delta=delta,
            )
        )
        logger.debug("Adjusted %s %s%d -> %d", item.name, op.value, value, item.quantity)
        return item

    def _log_no_op(self, kind: ChangeKind, item: Item, description: str) -> None:
        self.undo_log.push(StockChange(kind=kind, item_key=item.key, description=description))
        logger.warning(description)

    def fulfill(self, name: str, quantity: int) -> Fulfillment:
        """Remove ``quantity`` units for an order, all or nothing.

        Perishable stock is consumed earliest-expiration first.

        Raises:
            InvalidAmount: If ``quantity`` is negative.
            ItemNotFound: If the name does not resolve (plural folding applies).
            InsufficientStock: If fewer than ``quantity`` units are on hand.
        """
        if quantity < 0:
            raise InvalidAmount(quantity, "quantity")
        item = self.resolve(name)
        if item.quantity < quantity:
            raise InsufficientStock(item.name, quantity, item.quantity)

        change = StockChange(
            kind=ChangeKind.FULFILL,
            item_key=item.key,
            description=f"Fulfilled order of {quantity} x {item.name} (was {item.quantity})",
        )
        if isinstance(item, PerishableItem):
            change.consumed = item.consume(quantity)
        else:
            item.remove_stock(quantity)
            change.delta = -quantity
        self.undo_log.push(change)

        logger.debug("Fulfilled %d x %s, %d remaining", quantity, item.name, item.quantity)
        return Fulfillment(
            item_name=item.name,
            requested=quantity,
            remaining=item.quantity,
            consumed=change.consumed,
        )

    def record_manager_contribution(self, manager: str, quantity: int) -> int:
        """Credit ``manager`` with ``quantity`` units added. Returns the new total."""
        if quantity < 0:
            raise InvalidAmount(quantity, "contribution")
        total = self.manager_contributions.get(manager, 0) + quantity
        self.manager_contributions[manager] = total
        return total

    def undo_last_update(self) -> StockChange | None:
        """Revert the most recent stock mutation.

        Returns:
            The reverted change, or None when there is nothing to undo.
        """
        change = self.undo_log.pop()
        if change is None:
            return None

        item = self._items[change.item_key]
        change.revert(item)
        logger.info("Undid: %s", change.description)
        return change

    # -----------------------------------------------------------------
    # Orders
    # -----------------------------------------------------------------

    def add_order(self, text: str) -> None:
        self.orders.add_order(text)

    def process_orders(self) -> list[OrderOutcome]:
        return self.orders.process(self)

    # -----------------------------------------------------------------
    # Reports
    # -----------------------------------------------------------------

    def low_stock_items(self) -> list[Item]:
        return [i for i in self._items.values() if i.quantity < self.low_stock_threshold]

    def over_stock_items(self) -> list[Item]:
        return [i for i in self._items.values() if i.quantity > self.over_stock_threshold]

    def expiring_batches(self, today: date | None = None) -> list[BatchReportEntry]:
        """Batches expiring within ``[today, today + window]``, inclusive.

        Reported per batch, since one item can have several qualifying
        batches.
        """
        today = today or date.today()
        horizon = today + timedelta(days=self.expiring_window_days)
        return [
            entry
            for entry in self._batch_entries(today)
            if today <= entry.expiration_date <= horizon
        ]

    def expired_batches(self, today: date | None = None) -> list[BatchReportEntry]:
        """Batches with stock left whose expiration date has passed."""
        today = today or date.today()
        return [
            entry
            for entry in self._batch_entries(today)
            if entry.expiration_date < today and entry.quantity > 0
        ]

    def _batch_entries(self, today: date) -> Iterator[BatchReportEntry]:
        for item in self._items.values():
            if not isinstance(item, PerishableItem):
                continue
            for batch in item.batches:
                yield BatchReportEntry(
                    item_name=item.name,
                    section=item.section,
                    quantity=batch.quantity,
                    expiration_date=batch.expiration_date,
                    days_left=batch.days_until_expiry(today),
                )

    def most_stocked_item(self) -> MostStocked:
        """Item with the highest quantity. The first one seen wins ties."""
        best: Item | None = None
        for item in self._items.values():
            if best is None or item.quantity > best.quantity:
                best = item
        if best is None:
            return MostStocked()
        return MostStocked(name=best.name, quantity=best.quantity)

    def group_by_section(self) -> dict[str, SectionGroup]:
        """Partition items by section, sections in first-seen order."""
        groups: dict[str, SectionGroup] = {}
        for item in self._items.values():
            group = groups.get(item.section)
            if group is None:
                group = groups[item.section] = SectionGroup(section=item.section)
            group.items.append(item)
        return groups

    @property
    def total_item_count(self) -> int:
        return len(self._items)

    @property
    def low_stock_count(self) -> int:
        return len(self.low_stock_items())

    @property
    def total_units(self) -> int:
        return sum(item.quantity for item in self._items.values())

    def manager_summary(self) -> ManagerSummary:
        return ManagerSummary(
            total_items=self.total_item_count,
            low_stock_count=self.low_stock_count,
            total_units=self.total_units,
            contributions=dict(self.manager_contributions),
        )
