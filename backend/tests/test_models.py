"""Tests for model parsing and validation."""
from datetime import date, datetime

import pytest
from pydantic import ValidationError

from forecaster.models.financial import (
    FinancialItem,
    Frequency,
    ItemType,
    RecurrenceRule,
    normalize_frequency,
    parse_amount,
    parse_date,
)
from forecaster.models.forecast import ForecastRequest
from forecaster.models.scenario import ScenarioParameters


@pytest.mark.parametrize("raw,expected", [
    (None, "once"),
    ("", "once"),
    ("Monthly", "monthly"),
    ("  WEEKLY ", "weekly"),
    ("fortnightly", "biweekly"),
    ("annually", "annual"),
    ("one-time", "once"),
    (Frequency.quarterly, "quarterly"),
    ("every full moon", "every full moon"),
])
def test_normalize_frequency(raw, expected):
    assert normalize_frequency(raw) == expected


class TestParseAmount:
    def test_numbers(self):
        assert parse_amount(12) == 12.0
        assert parse_amount(-3.5) == -3.5

    def test_strings(self):
        assert parse_amount("$1,200.00") == 1200.0
        assert parse_amount("abc") is None

    def test_rejects_non_finite_and_bools(self):
        assert parse_amount(float("nan")) is None
        assert parse_amount(float("inf")) is None
        assert parse_amount(True) is None


class TestParseDate:
    def test_accepts_dates_datetimes_and_iso(self):
        assert parse_date(date(2026, 1, 2)) == date(2026, 1, 2)
        assert parse_date(datetime(2026, 1, 2, 15, 30)) == date(2026, 1, 2)
        assert parse_date("2026-01-02T10:00:00Z") == date(2026, 1, 2)

    def test_unreadable(self):
        assert parse_date("2026-13-45") is None
        assert parse_date(20260102) is None
        assert parse_date(None) is None


class TestFinancialItem:
    def test_lenient_amount(self):
        item = FinancialItem(id="x", type=ItemType.bill, amount="not a number")
        assert item.amount is None

    def test_default_recurrence_is_once_without_anchor(self):
        item = FinancialItem(id="x", type=ItemType.income, amount=5)
        assert item.recurrence.frequency == "once"
        assert item.recurrence.anchor_date is None

    def test_unknown_frequency_kept_for_reporting(self):
        rule = RecurrenceRule(frequency="Lunar", anchor_date="2026-10-20")
        assert rule.frequency == "lunar"
        assert rule.parsed_frequency() is None

    def test_weekday_range(self):
        with pytest.raises(ValidationError):
            RecurrenceRule(frequency="weekly", weekday=7)


class TestScenarioParameters:
    def test_defaults_are_neutral(self):
        assert ScenarioParameters().is_neutral()

    def test_negative_savings_is_neutral(self):
        assert ScenarioParameters(monthly_savings_delta=-50).is_neutral()

    def test_non_neutral(self):
        assert not ScenarioParameters(income_adjustment_percent=5).is_neutral()

    def test_percent_floor(self):
        with pytest.raises(ValidationError):
            ScenarioParameters(expense_adjustment_percent=-150)


def test_forecast_request_rejects_negative_horizon():
    with pytest.raises(ValidationError):
        ForecastRequest(horizon_days=-1)
