"""Tests for summary metrics and ratio helpers."""
from datetime import date

import pytest

from forecaster.models.financial import ItemType
from forecaster.models.forecast import ForecastItem
from forecaster.simulation.metrics import (
    budget_utilization,
    goal_progress,
    safe_percentage,
    summarize,
    upcoming_items,
)


def _make_forecast_item(when, amount, balance, item_type=ItemType.bill, **overrides) -> ForecastItem:
    defaults = dict(name="Item", category="Utilities", source_id="src")
    defaults.update(overrides)
    return ForecastItem(date=when, type=item_type, amount=amount, running_balance=balance, **defaults)


def test_safe_percentage_zero_denominator_is_finite():
    assert safe_percentage(5.0, 0.0) == pytest.approx(5.0 / 1e-9 * 100)
    assert safe_percentage(25.0, 200.0) == 12.5


@pytest.mark.parametrize("budget,spent,expected", [
    (100.0, 50.0, 50.0),
    (100.0, 150.0, 100.0),
    (100.0, -10.0, 0.0),
])
def test_budget_utilization(budget, spent, expected):
    assert budget_utilization(budget, spent) == expected


def test_goal_progress():
    assert goal_progress(250.0, 1000.0) == 25.0
    assert goal_progress(1500.0, 1000.0) == 100.0
    assert goal_progress(50.0, 0.0) == 0.0


class TestSummarize:
    def test_headline_figures(self):
        items = [
            _make_forecast_item(date(2026, 10, 20), 500.0, 1500.0, ItemType.income),
            _make_forecast_item(date(2026, 11, 1), -1200.0, 300.0),
            _make_forecast_item(date(2026, 11, 5), -100.0, 200.0, ItemType.expense),
            _make_forecast_item(date(2026, 11, 25), 500.0, 700.0, ItemType.income),
        ]
        summary = summarize(items, 1000.0)
        assert summary.current_balance == 1500.0
        assert summary.projected_balance == 700.0
        assert summary.lowest_balance == 200.0
        assert summary.lowest_balance_date == date(2026, 11, 5)
        assert summary.total_income == 1000.0
        assert summary.total_outflow == 1300.0
        assert summary.net_change == -300.0
        assert summary.change_percent == -30.0
        assert summary.item_count == 4

    def test_empty_forecast(self):
        summary = summarize([], 250.0)
        assert summary.projected_balance == 250.0
        assert summary.lowest_balance == 250.0
        assert summary.lowest_balance_date is None
        assert summary.item_count == 0


def test_upcoming_items_filters_type_and_range():
    today = date(2026, 10, 18)
    items = [
        _make_forecast_item(date(2026, 10, 19), -50.0, 950.0),
        _make_forecast_item(date(2026, 10, 20), 100.0, 1050.0, ItemType.income),
        _make_forecast_item(date(2026, 10, 25), -20.0, 1030.0),
        _make_forecast_item(date(2026, 10, 26), -20.0, 1010.0),
    ]
    upcoming = upcoming_items(items, today, days=7)
    assert [i.date for i in upcoming] == [date(2026, 10, 19), date(2026, 10, 25)]
