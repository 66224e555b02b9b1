"""Forecast generator: the baseline cash-flow simulation.

Expands every item over [today, today + horizon_days], merges the streams and
walks the merged ledger once, carrying the running balance. Cost is linear in
the number of occurrences actually produced; the horizon length only matters
through those occurrences.
"""
from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from typing import Sequence

from forecaster.models.financial import BalanceAdjustment, FinancialItem, Frequency, ItemType
from forecaster.models.forecast import DataIssue, ForecastItem
from forecaster.simulation.merger import LedgerEntry, Occurrence, merge
from forecaster.simulation.recurrence import expand

logger = logging.getLogger(__name__)


def forecast_window(today: date, horizon_days: int) -> tuple[date, date]:
    if horizon_days < 0:
        raise ValueError(f"horizon_days must be >= 0, got {horizon_days}")
    return today, today + timedelta(days=horizon_days)


def validate_item(item: FinancialItem) -> str | None:
    """Reason the item cannot be forecast, or None if it is usable."""
    if item.amount is None:
        return "missing or non-numeric amount"
    if item.amount <= 0:
        return f"non-positive amount {item.amount}"
    if item.recurrence.anchor_date is None:
        return "missing or invalid date"
    return None


def _report(issues: list[DataIssue] | None, item_id: str | None, stream: ItemType, reason: str) -> None:
    logger.warning("Skipping %s item %s: %s", stream.value, item_id, reason)
    if issues is not None:
        issues.append(DataIssue(item_id=item_id, stream=stream.value, reason=reason))


def expand_stream(
    items: Sequence[FinancialItem],
    stream: ItemType,
    window_start: date,
    window_end: date,
    issues: list[DataIssue] | None = None,
) -> list[Occurrence]:
    """Expand one input stream, skipping malformed items individually."""
    occurrences: list[Occurrence] = []
    for input_index, item in enumerate(items):
        reason = validate_item(item)
        if reason is not None:
            _report(issues, item.id, stream, reason)
            continue
        if (
            stream is ItemType.bill
            and item.is_paid
            and item.recurrence.parsed_frequency() is Frequency.once
        ):
            logger.debug("Bill %s already paid, not forecast", item.id)
            continue
        for occurrence_index, when in enumerate(expand(item, window_start, window_end, issues)):
            occurrences.append(Occurrence(
                item=item,
                date=when,
                occurrence_index=occurrence_index,
                input_index=input_index,
            ))
    return occurrences


def _usable_adjustments(
    adjustments: Sequence[BalanceAdjustment],
    window_start: date,
    window_end: date,
    issues: list[DataIssue] | None,
) -> list[BalanceAdjustment]:
    usable = []
    for adj in adjustments:
        if math.isnan(adj.amount) or math.isinf(adj.amount):
            _report(issues, adj.id, ItemType.adjustment, "non-numeric amount")
            continue
        if window_start <= adj.date <= window_end:
            usable.append(adj)
    return usable


def accumulate(starting_balance: float, ledger: Sequence[LedgerEntry]) -> list[ForecastItem]:
    """Attach the post-event running balance to every ledger entry."""
    running = starting_balance
    items: list[ForecastItem] = []
    for entry in ledger:
        amount = round(entry.amount, 2)
        running = round(running + amount, 2)
        items.append(ForecastItem(
            date=entry.date,
            type=entry.type,
            name=entry.name,
            category=entry.category,
            amount=amount,
            running_balance=running,
            source_id=entry.source_id,
            occurrence_index=entry.occurrence_index,
        ))
    return items


def generate_forecast(
    starting_balance: float,
    incomes: Sequence[FinancialItem],
    bills: Sequence[FinancialItem],
    expenses: Sequence[FinancialItem],
    adjustments: Sequence[BalanceAdjustment],
    horizon_days: int,
    today: date,
    issues: list[DataIssue] | None = None,
) -> list[ForecastItem]:
    """Project the running balance over [today, today + horizon_days].

    Pure: the result depends only on the arguments. Items that cannot be
    read are skipped and appended to ``issues``.
    """
    if math.isnan(starting_balance) or math.isinf(starting_balance):
        raise ValueError(f"starting_balance must be finite, got {starting_balance}")
    window_start, window_end = forecast_window(today, horizon_days)

    ledger = merge(
        expand_stream(incomes, ItemType.income, window_start, window_end, issues),
        expand_stream(bills, ItemType.bill, window_start, window_end, issues),
        expand_stream(expenses, ItemType.expense, window_start, window_end, issues),
        _usable_adjustments(adjustments, window_start, window_end, issues),
    )
    items = accumulate(round(starting_balance, 2), ledger)
    logger.info(
        "Generated %d forecast items over %d days (%d incomes, %d bills, %d expenses, %d adjustments)",
        len(items), horizon_days, len(incomes), len(bills), len(expenses), len(adjustments),
    )
    return items
