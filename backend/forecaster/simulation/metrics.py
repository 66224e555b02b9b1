"""Headline figures and ratio helpers.

Ratios substitute a small epsilon for near-zero denominators instead of
dividing by zero.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Sequence

from forecaster.models.financial import ItemType
from forecaster.models.forecast import ForecastItem, ForecastSummary

EPSILON = 1e-9


def safe_percentage(part: float, whole: float, epsilon: float = EPSILON) -> float:
    denominator = whole if abs(whole) > epsilon else epsilon
    return part / denominator * 100.0


def budget_utilization(budget_amount: float, spent: float) -> float:
    """Share of a budget already spent, clamped to [0, 100]."""
    return min(max(safe_percentage(spent, budget_amount), 0.0), 100.0)


def goal_progress(current_amount: float, target_amount: float) -> float:
    if target_amount <= 0:
        return 0.0
    return min(max(safe_percentage(current_amount, target_amount), 0.0), 100.0)


def summarize(items: Sequence[ForecastItem], starting_balance: float) -> ForecastSummary:
    """Current/projected balances and totals for an unsampled forecast."""
    total_income = sum(i.amount for i in items if i.type is ItemType.income)
    total_outflow = -sum(i.amount for i in items if i.amount < 0)

    current = items[0].running_balance if items else starting_balance
    projected = items[-1].running_balance if items else starting_balance

    lowest_balance = starting_balance
    lowest_date: date | None = None
    for item in items:
        if item.running_balance < lowest_balance:
            lowest_balance = item.running_balance
            lowest_date = item.date

    net_change = projected - starting_balance
    return ForecastSummary(
        starting_balance=round(starting_balance, 2),
        current_balance=round(current, 2),
        projected_balance=round(projected, 2),
        lowest_balance=round(lowest_balance, 2),
        lowest_balance_date=lowest_date,
        total_income=round(total_income, 2),
        total_outflow=round(total_outflow, 2),
        net_change=round(net_change, 2),
        change_percent=round(safe_percentage(net_change, abs(starting_balance)), 2),
        item_count=len(items),
    )


def upcoming_items(
    items: Sequence[ForecastItem],
    today: date,
    days: int = 7,
    types: tuple[ItemType, ...] = (ItemType.bill,),
) -> list[ForecastItem]:
    """Items of the given types due within ``days`` of ``today``."""
    until = today + timedelta(days=days)
    return [i for i in items if i.type in types and today <= i.date <= until]
