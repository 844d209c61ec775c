"""Tests for plain-text rendering."""

from datetime import date

from stock_ledger.ledger import Ledger
from stock_ledger.models import ManagerSummary, PerishableItem, PlainItem
from stock_ledger.rendering import (
    format_qty,
    render_inventory,
    render_item,
    render_manager_summary,
    render_order_outcomes,
    render_stock_report,
)

TODAY = date(2025, 5, 1)


def _make_ledger() -> Ledger:
    ledger = Ledger()
    ledger.add_item(PlainItem(name="Rice", section="Pantry", quantity=40))
    ledger.add_item(PlainItem(name="Salt", section="Pantry", quantity=1))
    ledger.add_or_update_perishable("Apple", 50, date(2025, 5, 4), "Vegetables & Fruits")
    ledger.add_or_update_perishable("Apple", 10, date(2025, 5, 30), "Vegetables & Fruits")
    return ledger


def test_format_qty():
    assert format_qty(1) == "1 unit"
    assert format_qty(0) == "0 units"
    assert format_qty(12) == "12 units"


def test_render_item():
    ledger = _make_ledger()
    assert render_item(ledger.get("rice")) == "Rice - 40 units (non-perishable) [Pantry]"
    assert render_item(ledger.get("apple")) == (
        "Apple - 60 units (perishable, 2 batches) [Vegetables & Fruits]"
    )
    milk = PerishableItem(name="Milk", section="Dairy")
    milk.merge_batch(1, TODAY)
    assert render_item(milk) == "Milk - 1 unit (perishable, 1 batch) [Dairy]"


class TestRenderInventory:
    def test_empty(self):
        assert render_inventory(Ledger()) == "Inventory is empty."

    def test_grouped_by_section(self):
        output = render_inventory(_make_ledger())
        lines = output.splitlines()
        assert lines[0] == "Pantry (2 items, 41 units)"
        assert "Vegetables & Fruits (1 items, 60 units)" in lines
        assert "      50 units exp 2025-05-04" in lines

    def test_unassigned_section(self):
        ledger = Ledger()
        ledger.add_item(PlainItem(name="Tape", quantity=2))
        assert render_inventory(ledger).splitlines()[0] == "Unassigned (1 items, 2 units)"


class TestRenderStockReport:
    def test_report(self):
        output = render_stock_report(_make_ledger(), today=TODAY)
        assert "Low stock (< 5): 1" in output
        assert "Over stock (> 100): 0" in output
        assert "Expiring within 7 days: 1 batches" in output
        assert "  Apple: 50 units, 2025-05-04 (expires in 3d)" in output
        assert "Expired" not in output
        assert output.endswith("Most stocked: Apple (60 units)")

    def test_expired_section(self):
        output = render_stock_report(_make_ledger(), today=date(2025, 5, 6))
        assert "Expired: 1 batches" in output
        assert "(expired 2d ago)" in output

    def test_empty_ledger(self):
        output = render_stock_report(Ledger(), today=TODAY)
        assert output.endswith("Most stocked: none (0 units)")


def test_render_order_outcomes():
    ledger = _make_ledger()
    assert render_order_outcomes([]) == "No orders to process."

    ledger.add_order("5 apples")
    ledger.add_order("2 pears")
    output = render_order_outcomes(ledger.process_orders())
    lines = output.splitlines()

    assert lines[0] == "1. [OK] '5 apples': Fulfilled 5 x Apple, 55 remaining"
    assert lines[1] == "     took 5 from batch 2025-05-04 (45 left)"
    assert lines[2] == "2. [FAILED] '2 pears': Item not found: pears"
    assert lines[-1] == "1 of 2 orders fulfilled."


def test_render_manager_summary():
    summary = ManagerSummary(
        total_items=3,
        low_stock_count=1,
        total_units=101,
        contributions={"sam": 5, "alex": 20},
    )
    output = render_manager_summary(summary, "alex")
    assert output.splitlines() == [
        "Manager summary for alex",
        "Items tracked: 3",
        "Units on hand: 101",
        "Low stock items: 1",
        "Contributions:",
        "  alex: 20 units",
        "  sam: 5 units",
    ]
