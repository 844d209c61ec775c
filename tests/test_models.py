"""Tests for item and batch models."""

from datetime import date

import pytest
from pydantic import ValidationError
from stock_ledger.errors import InsufficientStock, InvalidAmount
from stock_ledger.models import (
    Batch,
    MostStocked,
    PerishableItem,
    PlainItem,
    SectionGroup,
    normalize_name,
    parse_item,
)

MAY_10 = date(2025, 5, 10)
MAY_15 = date(2025, 5, 15)
MAY_20 = date(2025, 5, 20)


def _make_perishable(*batches: tuple[int, date], name: str = "Milk") -> PerishableItem:
    item = PerishableItem(name=name, section="Dairy")
    for qty, expires in batches:
        item.merge_batch(qty, expires)
    return item


def test_normalize_name():
    assert normalize_name("  Apple ") == "apple"
    assert normalize_name("WHOLE Milk") == "whole milk"


class TestPlainItem:
    def test_defaults(self):
        item = PlainItem(name="Rice")
        assert item.kind == "plain"
        assert item.quantity == 0
        assert item.perishable is False
        assert item.key == "rice"

    def test_whitespace_stripped(self):
        item = PlainItem(name="Rice ", section=" Pantry")
        assert (item.name, item.section) == ("Rice", "Pantry")

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            PlainItem(name="   ")

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            PlainItem(name="Rice", quantity=-1)

    def test_assignment_is_validated(self):
        item = PlainItem(name="Rice", quantity=3)
        with pytest.raises(ValidationError):
            item.quantity = -1
        assert item.quantity == 3

    def test_add_stock(self):
        item = PlainItem(name="Rice", quantity=3)
        item.add_stock(7)
        assert item.quantity == 10

    def test_add_negative_stock(self):
        item = PlainItem(name="Rice", quantity=3)
        with pytest.raises(InvalidAmount):
            item.add_stock(-1)
        assert item.quantity == 3

    def test_remove_stock_exact(self):
        item = PlainItem(name="Rice", quantity=5)
        item.remove_stock(5)
        assert item.quantity == 0

    def test_remove_stock_partial(self):
        item = PlainItem(name="Rice", quantity=5)
        item.remove_stock(2)
        assert item.quantity == 3

    def test_remove_more_than_available(self):
        item = PlainItem(name="Rice", quantity=5)
        with pytest.raises(InsufficientStock) as exc:
            item.remove_stock(6)
        assert exc.value.requested == 6
        assert exc.value.available == 5
        assert item.quantity == 5

    def test_remove_negative(self):
        item = PlainItem(name="Rice", quantity=5)
        with pytest.raises(InvalidAmount):
            item.remove_stock(-2)


class TestPerishableItem:
    def test_empty_item_has_zero_quantity(self):
        item = PerishableItem(name="Milk", section="Dairy")
        assert item.quantity == 0
        assert item.batches == []
        assert item.perishable is True

    def test_merge_same_date(self):
        item = _make_perishable((10, MAY_10))
        created = item.merge_batch(5, MAY_10)
        assert created is False
        assert len(item.batches) == 1
        assert item.batches[0].quantity == 15

    def test_merge_new_date_creates_one_batch(self):
        item = _make_perishable((10, MAY_10))
        created = item.merge_batch(5, MAY_20)
        assert created is True
        assert len(item.batches) == 2

    def test_quantity_is_sum_of_batches(self):
        item = _make_perishable((10, MAY_10), (5, MAY_20), (3, MAY_10))
        assert item.quantity == sum(b.quantity for b in item.batches) == 18

    def test_merge_negative(self):
        item = _make_perishable((10, MAY_10))
        with pytest.raises(InvalidAmount):
            item.merge_batch(-1, MAY_10)
        assert item.quantity == 10

    def test_consume_earliest_first(self):
        # Later batch added first: consumption goes by date, not list order
        item = _make_perishable((10, MAY_20), (5, MAY_10))
        records = item.consume(8)

        assert item.batch_for(MAY_10).quantity == 0
        assert item.batch_for(MAY_20).quantity == 7
        assert [(r.expiration_date, r.quantity_taken, r.quantity_remaining) for r in records] == [
            (MAY_10, 5, 0),
            (MAY_20, 3, 7),
        ]
        assert [b.expiration_date for b in item.batches] == [MAY_20, MAY_10]

    def test_consume_keeps_empty_batches(self):
        item = _make_perishable((5, MAY_10), (5, MAY_15), (5, MAY_20))
        item.consume(10)
        assert len(item.batches) == 3
        assert item.quantity == 5
        assert item.batch_for(MAY_20).quantity == 5

    def test_consume_skips_empty_batches(self):
        item = _make_perishable((0, MAY_10), (4, MAY_15))
        records = item.consume(2)
        assert len(records) == 1
        assert records[0].expiration_date == MAY_15

    def test_consume_all_or_nothing(self):
        item = _make_perishable((5, MAY_10), (5, MAY_20))
        with pytest.raises(InsufficientStock):
            item.consume(11)
        assert item.batch_for(MAY_10).quantity == 5
        assert item.batch_for(MAY_20).quantity == 5


class TestBatch:
    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            Batch(quantity=-3, expiration_date=MAY_10)

    def test_days_until_expiry(self):
        batch = Batch(quantity=1, expiration_date=MAY_15)
        assert batch.days_until_expiry(MAY_10) == 5
        assert batch.days_until_expiry(MAY_20) == -5


class TestParseItem:
    def test_plain(self):
        item = parse_item({"kind": "plain", "name": "Rice", "section": "Pantry", "quantity": 12})
        assert isinstance(item, PlainItem)
        assert item.quantity == 12

    def test_perishable(self):
        item = parse_item(
            {
                "kind": "perishable",
                "name": "Milk",
                "section": "Dairy",
                "batches": [
                    {"quantity": 4, "expiration_date": "2025-05-10"},
                    {"quantity": 6, "expiration_date": "2025-05-20"},
                ],
            }
        )
        assert isinstance(item, PerishableItem)
        assert item.quantity == 10
        assert item.batches[0].expiration_date == MAY_10

    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            parse_item({"kind": "frozen", "name": "Peas"})


class TestReportModels:
    def test_most_stocked_sentinel(self):
        sentinel = MostStocked()
        assert (sentinel.name, sentinel.quantity) == ("none", 0)

    def test_section_group_totals(self):
        group = SectionGroup(section="Dairy")
        group.items.append(_make_perishable((4, MAY_10)))
        group.items.append(PlainItem(name="Butter", section="Dairy", quantity=6))
        assert group.item_count == 2
        assert group.total_quantity == 10
