"""Exception taxonomy for ledger operations.

Every error is recoverable at the call site: the caller reports the
condition and carries on with the next operation. Nothing here aborts
the ledger as a whole.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all ledger failures."""


class ItemNotFound(LedgerError):
    """Raised when a lookup by name misses."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Item not found: {name}")


class InsufficientStock(LedgerError):
    """Raised when a removal exceeds the available quantity."""

    def __init__(self, name: str, requested: int, available: int):
        self.name = name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {name}: requested {requested}, "
            f"available {available}"
        )


class MalformedOrder(LedgerError):
    """Raised when order text cannot be parsed."""

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"Malformed order {text!r}: {reason}")


class InvalidAmount(LedgerError):
    """Raised for a negative amount where only non-negative ones are allowed."""

    def __init__(self, amount: int, context: str = "amount"):
        self.amount = amount
        super().__init__(f"Invalid {context}: {amount} (must be >= 0)")


class DuplicateItem(LedgerError):
    """Raised when adding an item whose normalized name is already taken."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Item already exists: {name}")


class ItemKindMismatch(LedgerError):
    """Raised when a perishable operation targets a plain item."""

    def __init__(self, name: str, expected: str):
        self.name = name
        self.expected = expected
        super().__init__(f"Item {name} is not {expected}")


class PersistenceError(LedgerError):
    """Raised when the inventory file cannot be read or written."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(message)
