"""Plain-text rendering of ledger state and reports.

Structured templates only. Every renderer builds a list of lines and
joins them, so output is stable enough to assert on in tests.
"""

from __future__ import annotations

from datetime import date

from .ledger import Ledger
from .models import BatchReportEntry, Item, ManagerSummary, PerishableItem
from .orders import OrderOutcome


def format_qty(qty: int) -> str:
    """Format a unit count with the right plural."""
    return f"{qty} unit{'s' if qty != 1 else ''}"


def _days_phrase(days_left: int) -> str:
    if days_left < 0:
        return f"expired {-days_left}d ago"
    if days_left == 0:
        return "expires today"
    return f"expires in {days_left}d"


def render_item(item: Item) -> str:
    """One-line item summary.

    Example: "Apple - 50 units (perishable, 2 batches) [Vegetables & Fruits]"
    """
    if isinstance(item, PerishableItem):
        count = len(item.batches)
        kind = f"perishable, {count} batch{'es' if count != 1 else ''}"
    else:
        kind = "non-perishable"
    return f"{item.name} - {format_qty(item.quantity)} ({kind}) [{item.section}]"


def render_batch_line(entry: BatchReportEntry) -> str:
    return (
        f"  {entry.item_name}: {format_qty(entry.quantity)}, "
        f"{entry.expiration_date.isoformat()} ({_days_phrase(entry.days_left)})"
    )


def render_inventory(ledger: Ledger) -> str:
    """Inventory grouped by section with per-section totals."""
    if len(ledger) == 0:
        return "Inventory is empty."

    lines: list[str] = []
    for section, group in ledger.group_by_section().items():
        lines.append(
            f"{section or 'Unassigned'} ({group.item_count} items, "
            f"{format_qty(group.total_quantity)})"
        )
        for item in group.items:
            lines.append(f"  {render_item(item)}")
            if isinstance(item, PerishableItem):
                for batch in item.batches:
                    lines.append(
                        f"      {format_qty(batch.quantity)} exp "
                        f"{batch.expiration_date.isoformat()}"
                    )
        lines.append("")
    return "\n".join(lines).rstrip()


def render_stock_report(ledger: Ledger, today: date | None = None) -> str:
    """Low/over-stock, expiring, expired and most-stocked sections."""
    lines: list[str] = []

    low = ledger.low_stock_items()
    lines.append(f"Low stock (< {ledger.low_stock_threshold}): {len(low)}")
    for item in low:
        lines.append(f"  {render_item(item)}")

    over = ledger.over_stock_items()
    lines.append(f"Over stock (> {ledger.over_stock_threshold}): {len(over)}")
    for item in over:
        lines.append(f"  {render_item(item)}")

    expiring = ledger.expiring_batches(today)
    lines.append(
        f"Expiring within {ledger.expiring_window_days} days: {len(expiring)} batches"
    )
    lines.extend(render_batch_line(entry) for entry in expiring)

    expired = ledger.expired_batches(today)
    if expired:
        lines.append(f"Expired: {len(expired)} batches")
        lines.extend(render_batch_line(entry) for entry in expired)

    top = ledger.most_stocked_item()
    lines.append(f"Most stocked: {top.name} ({format_qty(top.quantity)})")

    return "\n".join(lines)


def render_order_outcomes(outcomes: list[OrderOutcome]) -> str:
    if not outcomes:
        return "No orders to process."

    lines: list[str] = []
    for i, outcome in enumerate(outcomes, 1):
        mark = "OK" if outcome.ok else "FAILED"
        lines.append(f"{i}. [{mark}] {outcome.raw!r}: {outcome.message}")
        for record in outcome.consumed:
            lines.append(
                f"     took {record.quantity_taken} from batch "
                f"{record.expiration_date.isoformat()} "
                f"({record.quantity_remaining} left)"
            )
    fulfilled = sum(1 for o in outcomes if o.ok)
    lines.append(f"{fulfilled} of {len(outcomes)} orders fulfilled.")
    return "\n".join(lines)


def render_manager_summary(summary: ManagerSummary, manager: str) -> str:
    lines: list[str] = []
    lines.append(f"Manager summary for {manager}")
    lines.append(f"Items tracked: {summary.total_items}")
    lines.append(f"Units on hand: {summary.total_units}")
    lines.append(f"Low stock items: {summary.low_stock_count}")
    if summary.contributions:
        lines.append("Contributions:")
        for name, qty in sorted(
            summary.contributions.items(), key=lambda kv: kv[1], reverse=True
        ):
            lines.append(f"  {name}: {format_qty(qty)}")
    return "\n".join(lines)
