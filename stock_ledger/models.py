"""Pydantic models for stock items, batches, and ledger reports.

An item is a tagged variant discriminated by ``kind``:

    PlainItem       flat quantity counter
    PerishableItem  quantity derived from dated batches

Parse either form from a dict:
    item = parse_item({"kind": "plain", "name": "Rice", "section": "Pantry", "quantity": 12})
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .errors import InsufficientStock, InvalidAmount


def normalize_name(name: str) -> str:
    """Case-insensitive lookup key for an item name."""
    return name.strip().lower()


class StockOperator(str, Enum):
    """Operator accepted by operator-based stock adjustment."""

    ADD = "+"
    SUBTRACT = "-"


class Batch(BaseModel):
    """One dated sub-quantity of a perishable item."""

    model_config = ConfigDict(validate_assignment=True)

    quantity: int = Field(ge=0)
    expiration_date: date

    def days_until_expiry(self, today: date) -> int:
        return (self.expiration_date - today).days


class BatchConsumption(BaseModel):
    """Record of units taken from a single batch during fulfillment."""

    expiration_date: date
    quantity_taken: int
    quantity_remaining: int


class PlainItem(BaseModel):
    """A non-perishable stock-keeping unit with a flat counter."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    kind: Literal["plain"] = "plain"
    name: str = Field(min_length=1)
    section: str = ""
    quantity: int = Field(default=0, ge=0)

    @property
    def key(self) -> str:
        return normalize_name(self.name)

    @property
    def perishable(self) -> bool:
        return False

    def add_stock(self, amount: int) -> None:
        if amount < 0:
            raise InvalidAmount(amount)
        self.quantity += amount

    def remove_stock(self, amount: int) -> None:
        """Remove ``amount`` units.

        Raises:
            InvalidAmount: If ``amount`` is negative.
            InsufficientStock: If ``amount`` exceeds the current quantity.
        """
        if amount < 0:
            raise InvalidAmount(amount)
        if amount > self.quantity:
            raise InsufficientStock(self.name, amount, self.quantity)
        self.quantity -= amount


class PerishableItem(BaseModel):
    """A perishable stock-keeping unit tracked through dated batches.

    ``quantity`` is always the sum of the batch quantities. At most one
    batch exists per expiration date; batches are never removed, even
    when they reach zero.
    """

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    kind: Literal["perishable"] = "perishable"
    name: str = Field(min_length=1)
    section: str = ""
    batches: list[Batch] = Field(default_factory=list)

    @property
    def key(self) -> str:
        return normalize_name(self.name)

    @property
    def perishable(self) -> bool:
        return True

    @property
    def quantity(self) -> int:
        return sum(batch.quantity for batch in self.batches)

    def batch_for(self, expiration_date: date) -> Batch | None:
        for batch in self.batches:
            if batch.expiration_date == expiration_date:
                return batch
        return None

    def merge_batch(self, quantity: int, expiration_date: date) -> bool:
        """Add stock for a given expiration date.

        Merges into the batch with the same date when one exists,
        otherwise appends a new batch.

        Returns:
            True if a new batch was created, False if merged.
        """
        if quantity < 0:
            raise InvalidAmount(quantity)

        existing = self.batch_for(expiration_date)
        if existing is not None:
            existing.quantity += quantity
            return False

        self.batches.append(Batch(quantity=quantity, expiration_date=expiration_date))
        return True

    def consume(self, amount: int) -> list[BatchConsumption]:
        """Take ``amount`` units, earliest expiration date first.

        All-or-nothing: when ``amount`` exceeds the total quantity no
        batch is touched. Emptied batches stay in place.
        """
        if amount < 0:
            raise InvalidAmount(amount)
        available = self.quantity
        if amount > available:
            raise InsufficientStock(self.name, amount, available)

        records: list[BatchConsumption] = []
        remaining = amount
        for batch in sorted(self.batches, key=lambda b: b.expiration_date):
            if remaining <= 0:
                break
            if batch.quantity == 0:
                continue
            taken = min(batch.quantity, remaining)
            batch.quantity -= taken
            remaining -= taken
            records.append(
                BatchConsumption(
                    expiration_date=batch.expiration_date,
                    quantity_taken=taken,
                    quantity_remaining=batch.quantity,
                )
            )
        return records


Item = Annotated[Union[PlainItem, PerishableItem], Field(discriminator="kind")]

_item_adapter: TypeAdapter[Item] = TypeAdapter(Item)


def parse_item(data: dict) -> PlainItem | PerishableItem:
    """Validate a dict into the matching item variant."""
    return _item_adapter.validate_python(data)


# ---------------------------------------------------------------------------
# Report models
# ---------------------------------------------------------------------------


class BatchReportEntry(BaseModel):
    """A single batch surfaced by the expiring or expired report."""

    item_name: str
    section: str
    quantity: int
    expiration_date: date
    days_left: int

    @property
    def is_expired(self) -> bool:
        return self.days_left < 0


class MostStocked(BaseModel):
    """Result of the most-stocked query. ``("none", 0)`` on an empty ledger."""

    name: str = "none"
    quantity: int = 0


class SectionGroup(BaseModel):
    """Items sharing one store section."""

    section: str
    items: list[Item] = Field(default_factory=list)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def item_count(self) -> int:
        return len(self.items)


class Fulfillment(BaseModel):
    """Stock removed for one order line."""

    item_name: str
    requested: int
    remaining: int
    consumed: list[BatchConsumption] = Field(default_factory=list)


class ManagerSummary(BaseModel):
    """Read-only figures for the manager-only summary report."""

    total_items: int
    low_stock_count: int
    total_units: int
    contributions: dict[str, int] = Field(default_factory=dict)
