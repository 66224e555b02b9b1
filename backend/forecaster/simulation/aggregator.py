"""Period aggregator: buckets forecast items into calendar periods.

Granularity follows the horizon (daily up to 30 days, weekly up to 90,
bi-weekly up to 180, monthly beyond) and the interval is widened until the
bucket count fits ``max_buckets``. Totals include every item in a bucket;
only the attached ``items`` sample is capped. An empty bucket carries the
previous bucket's balance forward.
"""
from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Sequence

from dateutil.relativedelta import relativedelta

from forecaster.models.breakdown import Granularity, PeriodBucket
from forecaster.models.financial import ItemType
from forecaster.models.forecast import ForecastItem

logger = logging.getLogger(__name__)

_DAY_INTERVALS: dict[Granularity, int] = {
    Granularity.daily: 1,
    Granularity.weekly: 7,
    Granularity.biweekly: 14,
}


@dataclass(frozen=True)
class Period:
    label: str
    start: date
    end: date


def select_granularity(horizon_days: int) -> Granularity:
    if horizon_days <= 30:
        return Granularity.daily
    if horizon_days <= 90:
        return Granularity.weekly
    if horizon_days <= 180:
        return Granularity.biweekly
    return Granularity.monthly


def _day_label(start: date, end: date, granularity: Granularity) -> str:
    if start == end:
        return f"{start:%b} {start.day}"
    if granularity is Granularity.weekly:
        return f"Week of {start:%b} {start.day}"
    return f"{start:%b} {start.day} - {end:%b} {end.day}"


def _month_label(start: date, end: date) -> str:
    if (start.year, start.month) == (end.year, end.month):
        return f"{start:%B %Y}"
    return f"{start:%b %Y} - {end:%b %Y}"


def plan_periods(
    window_start: date,
    horizon_days: int,
    max_buckets: int = 20,
) -> tuple[Granularity, int, list[Period]]:
    """Contiguous periods covering [window_start, window_start + horizon_days].

    Returns the granularity, the interval (days, or months when monthly) and
    the periods themselves.
    """
    if max_buckets < 1:
        raise ValueError(f"max_buckets must be >= 1, got {max_buckets}")
    if horizon_days < 0:
        raise ValueError(f"horizon_days must be >= 0, got {horizon_days}")

    window_end = window_start + timedelta(days=horizon_days)
    granularity = select_granularity(horizon_days)
    periods: list[Period] = []

    if granularity is Granularity.monthly:
        months = (
            (window_end.year - window_start.year) * 12
            + window_end.month - window_start.month + 1
        )
        interval = max(1, -(-months // max_buckets))
        month_start = window_start.replace(day=1)
        while month_start <= window_end:
            next_start = month_start + relativedelta(months=interval)
            start = max(month_start, window_start)
            end = min(next_start - timedelta(days=1), window_end)
            periods.append(Period(_month_label(start, end), start, end))
            month_start = next_start
        return granularity, interval, periods

    span_days = horizon_days + 1
    interval = max(_DAY_INTERVALS[granularity], -(-span_days // max_buckets))
    start = window_start
    while start <= window_end:
        end = min(start + timedelta(days=interval - 1), window_end)
        periods.append(Period(_day_label(start, end, granularity), start, end))
        start = end + timedelta(days=1)
    return granularity, interval, periods


def classify(item: ForecastItem, optional_categories: frozenset[str]) -> str:
    """One of ``income``, ``mandatory``, ``optional`` or ``adjustment``."""
    if item.type is ItemType.income:
        return "income"
    if item.type is ItemType.adjustment:
        return "adjustment"
    if item.category.casefold() in optional_categories:
        return "optional"
    return "mandatory"


@dataclass
class _Tally:
    income: float = 0.0
    mandatory: float = 0.0
    optional: float = 0.0
    adjustments: float = 0.0
    last_balance: float | None = None
    count: int = 0
    sample: list[ForecastItem] = field(default_factory=list)


def _tally(
    items: Iterable[ForecastItem],
    periods: Sequence[Period],
    optional_categories: frozenset[str],
    sample_size: int,
) -> list[_Tally]:
    tallies = [_Tally() for _ in periods]
    starts = [p.start for p in periods]
    window_end = periods[-1].end if periods else None

    for item in items:
        idx = bisect.bisect_right(starts, item.date) - 1
        if idx < 0 or window_end is None or item.date > window_end:
            logger.warning("Forecast item %s on %s is outside the breakdown window", item.source_id, item.date)
            continue
        tally = tallies[idx]
        kind = classify(item, optional_categories)
        if kind == "income":
            tally.income += item.amount
        elif kind == "adjustment":
            tally.adjustments += item.amount
        elif kind == "optional":
            tally.optional += -item.amount
        else:
            tally.mandatory += -item.amount
        tally.last_balance = item.running_balance
        tally.count += 1
        if len(tally.sample) < sample_size:
            tally.sample.append(item)
    return tallies


def _opening_balance(items: Sequence[ForecastItem]) -> float:
    if not items:
        return 0.0
    return round(items[0].running_balance - items[0].amount, 2)


def aggregate(
    baseline_items: Sequence[ForecastItem],
    scenario_items: Sequence[ForecastItem] | None = None,
    horizon_days: int = 90,
    *,
    window_start: date | None = None,
    starting_balance: float | None = None,
    scenario_starting_balance: float | None = None,
    optional_categories: Iterable[str] = (),
    max_buckets: int = 20,
    sample_size: int = 10,
) -> list[PeriodBucket]:
    """Bucket baseline (and optionally scenario) items into calendar periods.

    ``optional_categories`` decides which bill/expense categories count as
    optional spending; everything else is mandatory. ``net_cash_flow`` is
    always income minus both expense kinds.
    """
    if window_start is None:
        if not baseline_items:
            return []
        window_start = baseline_items[0].date
    if starting_balance is None:
        starting_balance = _opening_balance(baseline_items)
    if scenario_starting_balance is None:
        scenario_starting_balance = (
            _opening_balance(scenario_items) if scenario_items else starting_balance
        )

    optional_set = frozenset(c.casefold() for c in optional_categories)
    _, _, periods = plan_periods(window_start, horizon_days, max_buckets)

    base = _tally(baseline_items, periods, optional_set, sample_size)
    scen = (
        _tally(scenario_items, periods, optional_set, 0)
        if scenario_items is not None else None
    )

    buckets: list[PeriodBucket] = []
    carry = starting_balance
    scenario_carry = scenario_starting_balance
    for i, period in enumerate(periods):
        tally = base[i]
        carry = tally.last_balance if tally.last_balance is not None else carry
        bucket = PeriodBucket(
            label=period.label,
            period_start=period.start,
            period_end=period.end,
            income=round(tally.income, 2),
            mandatory_expenses=round(tally.mandatory, 2),
            optional_expenses=round(tally.optional, 2),
            adjustments=round(tally.adjustments, 2),
            net_cash_flow=round(tally.income - tally.mandatory - tally.optional, 2),
            running_balance=round(carry, 2),
            item_count=tally.count,
            items=tally.sample,
        )
        if scen is not None:
            s = scen[i]
            scenario_carry = s.last_balance if s.last_balance is not None else scenario_carry
            bucket.scenario_income = round(s.income, 2)
            bucket.scenario_mandatory_expenses = round(s.mandatory, 2)
            bucket.scenario_optional_expenses = round(s.optional, 2)
            bucket.scenario_adjustments = round(s.adjustments, 2)
            bucket.scenario_net_cash_flow = round(s.income - s.mandatory - s.optional, 2)
            bucket.scenario_running_balance = round(scenario_carry, 2)
        buckets.append(bucket)
    return buckets
