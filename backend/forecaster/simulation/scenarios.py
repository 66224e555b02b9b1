"""Scenario overlay: what-if runs against cloned, adjusted inputs.

The baseline records are never touched. Every item is deep-copied before any
amount changes, and synthetic adjustments are appended to a copy of the
adjustment list. Neutral parameters return the baseline forecast unchanged.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Sequence

from dateutil.relativedelta import relativedelta

from forecaster.models.financial import BalanceAdjustment, FinancialItem
from forecaster.models.forecast import DataIssue, ForecastItem
from forecaster.models.scenario import ScenarioParameters
from forecaster.simulation.generator import generate_forecast

SCENARIO_CATEGORY = "scenario"


def adjust_items(items: Sequence[FinancialItem], percent: float) -> list[FinancialItem]:
    """Deep-copied items with ``amount *= (1 + percent / 100)``.

    Valid items scaled down to nothing are left out of the scenario; malformed
    ones are passed through unchanged so the generator still reports them.
    """
    factor = 1.0 + percent / 100.0
    adjusted = []
    for item in items:
        clone = item.model_copy(deep=True)
        if percent != 0 and clone.amount is not None and clone.amount > 0:
            clone.amount = round(clone.amount * factor, 2)
            if clone.amount <= 0:
                continue
        adjusted.append(clone)
    return adjusted


def savings_adjustments(
    today: date,
    window_end: date,
    monthly_delta: float,
    max_months: int = 12,
) -> list[BalanceAdjustment]:
    """One positive adjustment on the 1st of each future month in the window."""
    if monthly_delta <= 0:
        return []
    adjustments = []
    month_start = today.replace(day=1) + relativedelta(months=1)
    while month_start <= window_end and len(adjustments) < max_months:
        adjustments.append(BalanceAdjustment(
            id=f"scenario-savings-{month_start:%Y-%m}",
            date=month_start,
            amount=round(monthly_delta, 2),
            name="Monthly Savings Boost",
            category=SCENARIO_CATEGORY,
        ))
        month_start += relativedelta(months=1)
    return adjustments


def one_time_adjustments(today: date, params: ScenarioParameters) -> list[BalanceAdjustment]:
    adjustments = []
    if params.one_time_income > 0:
        adjustments.append(BalanceAdjustment(
            id="scenario-one-time-income",
            date=today,
            amount=round(params.one_time_income, 2),
            name="One-Time Income",
            category=SCENARIO_CATEGORY,
        ))
    if params.one_time_expense > 0:
        adjustments.append(BalanceAdjustment(
            id="scenario-one-time-expense",
            date=today,
            amount=-round(params.one_time_expense, 2),
            name="One-Time Expense",
            category=SCENARIO_CATEGORY,
        ))
    return adjustments


def build_scenario_inputs(
    incomes: Sequence[FinancialItem],
    bills: Sequence[FinancialItem],
    expenses: Sequence[FinancialItem],
    adjustments: Sequence[BalanceAdjustment],
    params: ScenarioParameters,
    horizon_days: int,
    today: date,
    max_savings_months: int = 12,
) -> tuple[list[FinancialItem], list[FinancialItem], list[FinancialItem], list[BalanceAdjustment]]:
    """Transformed copies of the four input streams."""
    window_end = today + timedelta(days=horizon_days)
    scenario_adjustments = [adj.model_copy(deep=True) for adj in adjustments]
    scenario_adjustments.extend(one_time_adjustments(today, params))
    scenario_adjustments.extend(
        savings_adjustments(today, window_end, params.monthly_savings_delta, max_savings_months)
    )
    return (
        adjust_items(incomes, params.income_adjustment_percent),
        adjust_items(bills, params.expense_adjustment_percent),
        adjust_items(expenses, params.expense_adjustment_percent),
        scenario_adjustments,
    )


def simulate_scenario(
    baseline_incomes: Sequence[FinancialItem],
    baseline_bills: Sequence[FinancialItem],
    baseline_expenses: Sequence[FinancialItem],
    params: ScenarioParameters,
    starting_balance: float,
    horizon_days: int,
    today: date,
    adjustments: Sequence[BalanceAdjustment] = (),
    max_savings_months: int = 12,
    issues: list[DataIssue] | None = None,
) -> list[ForecastItem]:
    """Run the generator on adjusted copies of the baseline inputs.

    Same window and starting balance as the baseline, so the two outputs can
    be differenced directly.
    """
    incomes, bills, expenses, scenario_adjustments = build_scenario_inputs(
        baseline_incomes, baseline_bills, baseline_expenses, adjustments,
        params, horizon_days, today, max_savings_months,
    )
    return generate_forecast(
        starting_balance, incomes, bills, expenses, scenario_adjustments,
        horizon_days, today, issues,
    )
