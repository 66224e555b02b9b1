"""Tests for the period aggregator."""
from datetime import date, timedelta

import pytest

from forecaster.models.breakdown import Granularity
from forecaster.models.financial import FinancialItem, ItemType, RecurrenceRule
from forecaster.models.scenario import ScenarioParameters
from forecaster.simulation.aggregator import aggregate, classify, plan_periods, select_granularity
from forecaster.simulation.generator import generate_forecast
from forecaster.simulation.scenarios import simulate_scenario


def _make_item(item_type, amount, anchor, frequency="monthly", category="Housing", **overrides) -> FinancialItem:
    defaults = dict(id=f"{item_type.value}-{anchor:%m%d}", name=category)
    defaults.update(overrides)
    return FinancialItem(
        type=item_type,
        amount=amount,
        category=category,
        recurrence=RecurrenceRule(frequency=frequency, anchor_date=anchor),
        **defaults,
    )


def _household():
    incomes = [_make_item(ItemType.income, 2000.0, date(2026, 10, 25), category="Salary")]
    bills = [_make_item(ItemType.bill, 1000.0, date(2026, 11, 1))]
    expenses = [_make_item(ItemType.expense, 50.0, date(2026, 10, 18), frequency="weekly", category="dining out")]
    return incomes, bills, expenses


def _forecast(today, horizon=90):
    incomes, bills, expenses = _household()
    return generate_forecast(1000.0, incomes, bills, expenses, [], horizon, today)


@pytest.mark.parametrize("horizon,expected", [
    (0, Granularity.daily),
    (30, Granularity.daily),
    (31, Granularity.weekly),
    (90, Granularity.weekly),
    (91, Granularity.biweekly),
    (180, Granularity.biweekly),
    (181, Granularity.monthly),
    (730, Granularity.monthly),
])
def test_select_granularity(horizon, expected):
    assert select_granularity(horizon) == expected


class TestPlanPeriods:
    @pytest.mark.parametrize("horizon", [0, 7, 30, 60, 90, 120, 180, 365, 730])
    def test_contiguous_cover_within_cap(self, today, horizon):
        _, _, periods = plan_periods(today, horizon, max_buckets=20)
        assert 1 <= len(periods) <= 20
        assert periods[0].start == today
        assert periods[-1].end == today + timedelta(days=horizon)
        for prev, nxt in zip(periods, periods[1:]):
            assert nxt.start == prev.end + timedelta(days=1)

    def test_weekly_labels(self, today):
        granularity, interval, periods = plan_periods(today, 90)
        assert granularity is Granularity.weekly
        assert interval == 7
        assert len(periods) == 13
        assert periods[0].label == "Week of Oct 18"
        assert periods[-1].end == date(2027, 1, 16)

    def test_daily_widened_to_fit(self, today):
        granularity, interval, periods = plan_periods(today, 30)
        assert granularity is Granularity.daily
        assert interval == 2
        assert periods[0].label == "Oct 18 - Oct 19"
        assert periods[-1].label == "Nov 17"

    def test_monthly_labels(self, today):
        granularity, interval, periods = plan_periods(today, 365)
        assert granularity is Granularity.monthly
        assert interval == 1
        assert len(periods) == 13
        assert periods[0].label == "October 2026"
        assert periods[0].start == today
        assert periods[0].end == date(2026, 10, 31)
        assert periods[1].start == date(2026, 11, 1)

    def test_two_year_horizon_groups_months(self, today):
        _, interval, periods = plan_periods(today, 730)
        assert interval == 2
        assert len(periods) == 13
        assert periods[0].label == "Oct 2026 - Nov 2026"

    def test_invalid_cap(self, today):
        with pytest.raises(ValueError):
            plan_periods(today, 90, max_buckets=0)


class TestAggregate:
    def test_totals_and_classification(self, today):
        items = _forecast(today)
        buckets = aggregate(
            items, horizon_days=90, window_start=today, starting_balance=1000.0,
            optional_categories=["Dining Out"],
        )
        assert sum(b.income for b in buckets) == 6000.0
        assert sum(b.mandatory_expenses for b in buckets) == 3000.0
        assert sum(b.optional_expenses for b in buckets) == 650.0
        first = buckets[0]
        assert first.optional_expenses == 50.0
        assert first.net_cash_flow == -50.0
        assert first.running_balance == 950.0

    def test_reconciles_with_final_balance(self, today):
        items = _forecast(today)
        buckets = aggregate(items, horizon_days=90, window_start=today, starting_balance=1000.0)
        flow = sum(b.net_cash_flow + b.adjustments for b in buckets)
        assert flow == pytest.approx(items[-1].running_balance - 1000.0)
        assert buckets[-1].running_balance == items[-1].running_balance

    def test_empty_bucket_carries_balance(self, today):
        bills = [_make_item(ItemType.bill, 100.0, date(2026, 11, 1))]
        items = generate_forecast(1000.0, [], bills, [], [], 90, today)
        buckets = aggregate(items, horizon_days=90, window_start=today, starting_balance=1000.0)
        assert buckets[0].item_count == 0
        assert buckets[0].running_balance == 1000.0
        assert buckets[2].running_balance == 900.0
        assert buckets[3].item_count == 0
        assert buckets[3].running_balance == 900.0

    def test_item_sample_capped_but_totals_complete(self, today):
        expenses = [_make_item(ItemType.expense, 5.0, today, frequency="daily", category="Groceries")]
        items = generate_forecast(1000.0, [], [], expenses, [], 90, today)
        buckets = aggregate(items, horizon_days=90, window_start=today, starting_balance=1000.0, sample_size=3)
        assert all(len(b.items) <= 3 for b in buckets)
        assert sum(b.item_count for b in buckets) == len(items) == 91
        assert buckets[0].mandatory_expenses == 35.0

    def test_scenario_columns(self, today):
        incomes, bills, expenses = _household()
        baseline = generate_forecast(1000.0, incomes, bills, expenses, [], 90, today)
        scenario = simulate_scenario(
            incomes, bills, expenses, ScenarioParameters(one_time_income=500.0), 1000.0, 90, today,
        )
        buckets = aggregate(
            baseline, scenario, 90, window_start=today,
            starting_balance=1000.0, scenario_starting_balance=1000.0,
        )
        assert buckets[0].scenario_adjustments == 500.0
        assert buckets[0].adjustments == 0.0
        assert buckets[-1].scenario_running_balance == buckets[-1].running_balance + 500.0

    def test_no_scenario_leaves_columns_empty(self, today):
        buckets = aggregate(_forecast(today), horizon_days=90, window_start=today)
        assert all(b.scenario_running_balance is None for b in buckets)

    def test_empty_forecast_without_window(self):
        assert aggregate([], horizon_days=90) == []

    def test_classify_is_case_insensitive(self, today):
        items = _forecast(today)
        dining = next(i for i in items if i.type is ItemType.expense)
        assert classify(dining, frozenset({"dining out"})) == "optional"
        assert classify(dining, frozenset()) == "mandatory"
