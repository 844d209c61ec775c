"""Reversible undo log for stock mutations.

Each entry is a ``StockChange`` command holding the change it made: the
signed delta applied to a plain item, or the per-batch amounts taken
from a perishable item. Undoing applies the inverse to the item's
current state, so stock restocked after the change is kept.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .models import BatchConsumption, Item, PerishableItem, PlainItem

DEFAULT_UNDO_DEPTH = 20


class ChangeKind(str, Enum):
    UPDATE = "update"
    ADJUST = "adjust"
    FULFILL = "fulfill"

    @property
    def display_name(self) -> str:
        return {
            ChangeKind.UPDATE: "Stock update",
            ChangeKind.ADJUST: "Stock adjustment",
            ChangeKind.FULFILL: "Order fulfillment",
        }[self]


class StockChange(BaseModel):
    """One undoable stock mutation.

    ``delta`` is the signed change to a plain item's quantity and
    ``consumed`` lists the units taken from each perishable batch. An
    entry with neither is a logged no-op.
    """

    kind: ChangeKind
    item_key: str
    description: str
    delta: int = 0
    consumed: list[BatchConsumption] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_no_op(self) -> bool:
        return self.delta == 0 and not self.consumed

    def revert(self, item: Item) -> None:
        """Apply the inverse of this change to ``item`` in place."""
        if isinstance(item, PlainItem):
            if self.consumed:
                raise TypeError(f"Cannot restore batches on plain item {item.name}")
            item.quantity -= self.delta
        elif isinstance(item, PerishableItem):
            if self.delta:
                raise TypeError(f"Cannot apply a flat delta to perishable item {item.name}")
            for record in self.consumed:
                item.merge_batch(record.quantity_taken, record.expiration_date)


class UndoLog:
    """Bounded LIFO of stock changes. The oldest entries fall off first.

    Usage:
        log = UndoLog(depth=10)
        log.push(change)
        latest = log.pop()
    """

    def __init__(self, depth: int = DEFAULT_UNDO_DEPTH):
        if depth < 1:
            raise ValueError(f"Undo depth must be at least 1, got {depth}")
        self._entries: deque[StockChange] = deque(maxlen=depth)

    @property
    def depth(self) -> int:
        return self._entries.maxlen or 0

    def push(self, change: StockChange) -> None:
        self._entries.append(change)

    def pop(self) -> StockChange | None:
        if not self._entries:
            return None
        return self._entries.pop()

    def peek(self) -> StockChange | None:
        if not self._entries:
            return None
        return self._entries[-1]

    def descriptions(self) -> list[str]:
        """Entry descriptions, most recent first."""
        return [change.description for change in reversed(self._entries)]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
