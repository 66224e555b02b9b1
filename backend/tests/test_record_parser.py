"""Tests for raw record normalization."""
from datetime import date

import pytest

from forecaster.models.financial import ItemType
from forecaster.services.record_parser import parse_adjustments, parse_item, parse_items, parse_snapshot


class TestParseItem:
    def test_camel_case_document(self):
        record = {
            "id": "doc-1",
            "name": "Rent",
            "amount": 1200,
            "dueDate": "2026-11-01T00:00:00.000Z",
            "frequency": "Monthly",
            "isRecurring": True,
            "category": "Housing",
        }
        item = parse_item(record, ItemType.bill, 0)
        assert item.id == "doc-1"
        assert item.amount == 1200.0
        assert item.recurrence.anchor_date == date(2026, 11, 1)
        assert item.recurrence.frequency == "monthly"
        assert item.category == "Housing"

    def test_snake_case_keys(self):
        record = {"name": "Gym", "amount": "45", "due_date": "2026-10-20", "end_date": "2027-03-20"}
        item = parse_item(record, ItemType.expense, 0)
        assert item.recurrence.end_date == date(2027, 3, 20)

    def test_generated_id(self):
        item = parse_item({"amount": 10, "date": "2026-10-20"}, ItemType.bill, 2)
        assert item.id == "bill-0003"

    def test_currency_string_and_sign(self):
        item = parse_item({"amount": "-$1,234.50", "date": "2026-10-20"}, ItemType.expense, 0)
        assert item.amount == 1234.5

    def test_not_recurring_overrides_frequency(self):
        record = {"amount": 10, "date": "2026-10-20", "frequency": "weekly", "isRecurring": False}
        assert parse_item(record, ItemType.expense, 0).recurrence.frequency == "once"

    def test_frequency_aliases(self):
        for raw, expected in [("Bi-Weekly", "biweekly"), ("yearly", "annual"), ("Semi-Annually", "semiannual")]:
            item = parse_item({"amount": 1, "date": "2026-10-20", "frequency": raw}, ItemType.income, 0)
            assert item.recurrence.frequency == expected

    def test_paid_flag(self):
        item = parse_item({"amount": 1, "date": "2026-10-20", "isPaid": "true"}, ItemType.bill, 0)
        assert item.is_paid is True

    def test_unreadable_fields_become_none(self):
        item = parse_item({"amount": "n/a", "date": "soon"}, ItemType.bill, 0)
        assert item.amount is None
        assert item.recurrence.anchor_date is None

    def test_parse_items_numbers_each_record(self):
        items = parse_items([{"amount": 1}, {"amount": 2}], ItemType.income)
        assert [i.id for i in items] == ["income-0001", "income-0002"]


class TestParseAdjustments:
    def test_amount_from_balance_change(self):
        records = [{"date": "2026-10-20", "previousBalance": 1000, "newBalance": 850, "reason": "Car repair"}]
        (adj,) = parse_adjustments(records)
        assert adj.amount == -150.0
        assert adj.name == "Car repair"

    def test_explicit_amount_keeps_sign(self):
        (adj,) = parse_adjustments([{"date": "2026-10-20", "amount": -40}])
        assert adj.amount == -40.0

    def test_missing_date_skipped(self):
        assert parse_adjustments([{"amount": 10}]) == []


def test_parse_snapshot():
    payload = {
        "currentBalance": "2,500.00",
        "incomes": [{"name": "Salary", "amount": 3000, "date": "2026-10-25", "frequency": "monthly"}],
        "bills": [{"name": "Rent", "amount": 1200, "dueDate": "2026-11-01", "frequency": "monthly"}],
        "expenses": [],
    }
    request = parse_snapshot(payload)
    assert request.starting_balance == 2500.0
    assert len(request.incomes) == 1
    assert request.bills[0].type is ItemType.bill
    assert request.expenses == []
    assert request.adjustments == []


def test_parse_snapshot_rejects_non_list_stream():
    with pytest.raises(ValueError, match="bills"):
        parse_snapshot({"balance": 10, "bills": {"name": "Rent"}})
