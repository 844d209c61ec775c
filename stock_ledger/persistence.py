"""CSV persistence for the ledger.

File layout: no header, one row per item:

    name,quantity,expirationDateOrNA,section,perishable

    Rice,40,N/A,Pantry,false
    Apple,20,2025-05-01,Vegetables & Fruits,true

    quantity            integer units
    expirationDateOrNA  ISO date (YYYY-MM-DD), or N/A for plain items
    perishable          literal true / false

Perishable items with several batches:
    The default layout writes only the first batch of a perishable item,
    so reloading a multi-batch item loses the other batches and their
    quantity. ``per_batch=True`` writes one row per batch in the same
    five-field layout instead; the loader merges rows by name, so that
    layout round-trips. Files written either way load with the same code.

Loading rules:
    - Missing file -> empty ledger, not an error.
    - Rows with a field count other than 5 are skipped.
    - Rows with an unreadable quantity, date or flag, and rows that clash
      with an item already loaded, are skipped with a warning.
"""

from __future__ import annotations

import csv
import logging
from datetime import date
from pathlib import Path

from pydantic import BaseModel, Field

from .errors import DuplicateItem, ItemKindMismatch, PersistenceError
from .ledger import Ledger
from .models import Item, PerishableItem, PlainItem

logger = logging.getLogger("stock_ledger.persistence")

NOT_APPLICABLE = "N/A"
FIELD_COUNT = 5


class LoadResult(BaseModel):
    """Diagnostics from loading an inventory file."""

    source: str
    file_found: bool = True
    rows_read: int = 0
    items_loaded: int = 0
    skipped: int = 0
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    @property
    def summary(self) -> str:
        """Human-readable summary of the load."""
        if not self.file_found:
            return f"No inventory file at {self.source}; starting empty."
        parts = [
            f"Source: {self.source}",
            f"Rows read: {self.rows_read}",
            f"Items loaded: {self.items_loaded}",
        ]
        if self.skipped:
            parts.append(f"Rows skipped: {self.skipped}")
        if self.warnings:
            parts.append(f"Warnings: {len(self.warnings)}")
        return "\n".join(parts)


class _RowError(ValueError):
    """A row with the right shape but unreadable values."""


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def _flag(value: bool) -> str:
    return "true" if value else "false"


def item_rows(item: Item, per_batch: bool = False) -> list[list[str]]:
    """Serialize one item to its CSV row(s)."""
    if isinstance(item, PlainItem):
        return [[item.name, str(item.quantity), NOT_APPLICABLE, item.section, _flag(False)]]

    if not item.batches:
        return [[item.name, "0", NOT_APPLICABLE, item.section, _flag(True)]]

    batches = item.batches if per_batch else item.batches[:1]
    return [
        [
            item.name,
            str(batch.quantity),
            batch.expiration_date.isoformat(),
            item.section,
            _flag(True),
        ]
        for batch in batches
    ]


def save_ledger(ledger: Ledger, path: str | Path, per_batch: bool = False) -> int:
    """Write every item in ``ledger`` to ``path``.

    Not transactional: a failure part-way leaves a partial file.

    Returns:
        Number of rows written.

    Raises:
        PersistenceError: If the file cannot be written.
    """
    path = Path(path)
    rows_written = 0
    try:
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, lineterminator="\n")
            for item in ledger:
                rows = item_rows(item, per_batch=per_batch)
                writer.writerows(rows)
                rows_written += len(rows)
    except OSError as e:
        raise PersistenceError(f"Cannot write inventory file {path}: {e}", str(path)) from e

    logger.info("Saved %d items (%d rows) to %s", len(ledger), rows_written, path)
    return rows_written


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def _safe_int(s: str) -> int | None:
    """Parse int, returning None on failure."""
    s = s.strip()
    if not s:
        return None
    try:
        return int(s)
    except ValueError:
        return None


def _parse_flag(s: str) -> bool:
    value = s.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    raise _RowError(f"perishable flag {s!r} is not true/false")


def _parse_expiration(s: str) -> date | None:
    value = s.strip()
    if not value or value.upper() == NOT_APPLICABLE:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise _RowError(f"expiration date {s!r} is not YYYY-MM-DD") from None


def _apply_row(ledger: Ledger, fields: list[str]) -> bool:
    """Add one row to the ledger. Returns True if a new item was created."""
    name, qty_raw, exp_raw, section, flag_raw = (f.strip() for f in fields)
    if not name:
        raise _RowError("empty item name")

    quantity = _safe_int(qty_raw)
    if quantity is None or quantity < 0:
        raise _RowError(f"quantity {qty_raw!r} is not a non-negative integer")

    perishable = _parse_flag(flag_raw)
    expiration = _parse_expiration(exp_raw)

    if not perishable:
        ledger.add_item(PlainItem(name=name, section=section, quantity=quantity))
        return True

    is_new = name not in ledger
    if expiration is None:
        if quantity > 0:
            raise _RowError("perishable row with stock needs an expiration date")
        if is_new:
            ledger.add_item(PerishableItem(name=name, section=section))
        elif not isinstance(ledger.get(name), PerishableItem):
            raise ItemKindMismatch(name, "perishable")
        return is_new

    ledger.add_or_update_perishable(name, quantity, expiration, section)
    return is_new


def load_ledger(
    path: str | Path,
    ledger: Ledger | None = None,
) -> tuple[Ledger, LoadResult]:
    """Read an inventory file into ``ledger`` (a fresh one by default).

    Loading does not touch the undo log.

    Returns:
        The populated ledger and the load diagnostics.

    Raises:
        PersistenceError: If the file exists but cannot be read.
    """
    path = Path(path)
    ledger = ledger if ledger is not None else Ledger()
    result = LoadResult(source=str(path))

    try:
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.reader(f)
            for row_num, fields in enumerate(reader, start=1):
                result.rows_read += 1
                if len(fields) != FIELD_COUNT:
                    result.skipped += 1
                    logger.debug(
                        "Row %d: expected %d fields, got %d", row_num, FIELD_COUNT, len(fields)
                    )
                    continue
                try:
                    if _apply_row(ledger, fields):
                        result.items_loaded += 1
                except (_RowError, DuplicateItem, ItemKindMismatch) as e:
                    result.skipped += 1
                    if len(result.warnings) < 50:  # Cap warning messages
                        result.warnings.append(f"Row {row_num}: {e}")
    except FileNotFoundError:
        logger.info("No inventory file at %s, starting with an empty ledger", path)
        result.file_found = False
        return ledger, result
    except (OSError, UnicodeDecodeError) as e:
        raise PersistenceError(f"Cannot read inventory file {path}: {e}", str(path)) from e

    if result.skipped:
        logger.warning("Skipped %d of %d rows in %s", result.skipped, result.rows_read, path)
    logger.info("Loaded %d items from %s", result.items_loaded, path)
    return ledger, result
