"""Order parsing and the FIFO order queue.

Orders arrive as free text of the form ``"<quantity> <item name words...>"``,
e.g. ``"10 apples"`` or ``"2 whole milk"``. The queue is drained strictly
in arrival order; a failing order is reported and skipped without
affecting the rest of the queue.
"""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from .errors import InsufficientStock, ItemNotFound, MalformedOrder
from .models import BatchConsumption

if TYPE_CHECKING:
    from .ledger import Ledger

logger = logging.getLogger("stock_ledger.orders")


class Order(BaseModel):
    """A parsed order line."""

    raw: str
    quantity: int
    item_name: str


def parse_order(text: str) -> Order:
    """Parse ``"<quantity> <item name>"`` into an Order.

    Tokens after the quantity are joined by single spaces, so
    ``"3   sour  cream"`` names the item ``"sour cream"``.

    Raises:
        MalformedOrder: If the quantity is not plain ASCII digits, is
            below 1, or no item name follows it.
    """
    tokens = text.split()
    if not tokens:
        raise MalformedOrder(text, "empty order")

    if not (tokens[0].isascii() and tokens[0].isdigit()):
        raise MalformedOrder(text, f"quantity {tokens[0]!r} is not a number")

    quantity = int(tokens[0])
    if quantity < 1:
        raise MalformedOrder(text, "quantity must be at least 1")
    if len(tokens) < 2:
        raise MalformedOrder(text, "missing item name")

    return Order(raw=text, quantity=quantity, item_name=" ".join(tokens[1:]))


class OrderStatus(str, Enum):
    FULFILLED = "fulfilled"
    MALFORMED = "malformed"
    NOT_FOUND = "not_found"
    INSUFFICIENT_STOCK = "insufficient_stock"

    @property
    def display_name(self) -> str:
        return {
            OrderStatus.FULFILLED: "Fulfilled",
            OrderStatus.MALFORMED: "Malformed order",
            OrderStatus.NOT_FOUND: "Item not found",
            OrderStatus.INSUFFICIENT_STOCK: "Insufficient stock",
        }[self]


class OrderOutcome(BaseModel):
    """What happened to one order when the queue was processed."""

    raw: str
    status: OrderStatus
    message: str
    item_name: str | None = None
    requested: int | None = None
    remaining: int | None = None
    consumed: list[BatchConsumption] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == OrderStatus.FULFILLED


class OrderQueue:
    """FIFO of raw order strings awaiting fulfillment.

    Usage:
        queue = OrderQueue()
        queue.add_order("10 apples")
        outcomes = queue.process(ledger)
    """

    def __init__(self) -> None:
        self._pending: deque[str] = deque()

    def add_order(self, text: str) -> None:
        self._pending.append(text)

    def pending(self) -> list[str]:
        return list(self._pending)

    def process(self, ledger: Ledger) -> list[OrderOutcome]:
        """Drain the queue against ``ledger``, one order at a time."""
        outcomes: list[OrderOutcome] = []
        while self._pending:
            raw = self._pending.popleft()
            outcomes.append(self._process_one(raw, ledger))

        fulfilled = sum(1 for o in outcomes if o.ok)
        logger.info(
            "Processed %d orders: %d fulfilled, %d failed",
            len(outcomes),
            fulfilled,
            len(outcomes) - fulfilled,
        )
        return outcomes

    def _process_one(self, raw: str, ledger: Ledger) -> OrderOutcome:
        try:
            order = parse_order(raw)
        except MalformedOrder as e:
            logger.warning("Skipping order: %s", e)
            return OrderOutcome(raw=raw, status=OrderStatus.MALFORMED, message=str(e))

        try:
            result = ledger.fulfill(order.item_name, order.quantity)
        except ItemNotFound as e:
            logger.warning("Skipping order %r: %s", raw, e)
            return OrderOutcome(
                raw=raw,
                status=OrderStatus.NOT_FOUND,
                message=str(e),
                item_name=order.item_name,
                requested=order.quantity,
            )
        except InsufficientStock as e:
            logger.warning("Skipping order %r: %s", raw, e)
            return OrderOutcome(
                raw=raw,
                status=OrderStatus.INSUFFICIENT_STOCK,
                message=str(e),
                item_name=e.name,
                requested=order.quantity,
                remaining=e.available,
            )

        return OrderOutcome(
            raw=raw,
            status=OrderStatus.FULFILLED,
            message=(
                f"Fulfilled {result.requested} x {result.item_name}, "
                f"{result.remaining} remaining"
            ),
            item_name=result.item_name,
            requested=result.requested,
            remaining=result.remaining,
            consumed=result.consumed,
        )

    def __len__(self) -> int:
        return len(self._pending)
