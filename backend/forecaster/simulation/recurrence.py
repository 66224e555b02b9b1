"""Recurrence expander: concrete occurrence dates of one item inside a window.

Fixed-length frequencies (daily, weekly, biweekly) fast-forward from the
anchor with a ceiling division instead of walking day by day. Calendar
frequencies (monthly, quarterly, semiannual, annual) are always computed as
anchor + k periods with relativedelta, so a 31st anchor comes back to the 31st
after a short month and a Feb 29 anchor comes back to Feb 29 in leap years.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from forecaster.models.financial import FinancialItem, Frequency
from forecaster.models.forecast import DataIssue

logger = logging.getLogger(__name__)

_DAY_PERIODS: dict[Frequency, int] = {
    Frequency.daily: 1,
    Frequency.weekly: 7,
    Frequency.biweekly: 14,
}

_MONTH_PERIODS: dict[Frequency, int] = {
    Frequency.monthly: 1,
    Frequency.quarterly: 3,
    Frequency.semiannual: 6,
    Frequency.annual: 12,
}


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def next_weekday(current: date, weekday: int) -> date:
    """First date on or after ``current`` falling on ``weekday`` (0=Mon)."""
    return current + timedelta(days=(weekday - current.weekday()) % 7)


def period_of(frequency: Frequency) -> timedelta | relativedelta | None:
    """Step between two occurrences, or None for one-off items."""
    if frequency in _DAY_PERIODS:
        return timedelta(days=_DAY_PERIODS[frequency])
    if frequency in _MONTH_PERIODS:
        return relativedelta(months=_MONTH_PERIODS[frequency])
    return None


def expand(
    item: FinancialItem,
    window_start: date,
    window_end: date,
    issues: list[DataIssue] | None = None,
) -> list[date]:
    """Return the ascending occurrence dates of ``item`` within the window.

    Never emits a date before the anchor, after the rule's end date or outside
    [window_start, window_end]. An unrecognized frequency degrades to a single
    occurrence on the anchor date and is reported in ``issues``.
    """
    rule = item.recurrence
    anchor = rule.anchor_date
    if anchor is None or window_end < window_start:
        return []

    stop = window_end if rule.end_date is None else min(window_end, rule.end_date)

    frequency = rule.parsed_frequency()
    if frequency is None:
        logger.warning(
            "Item %s has unrecognized frequency %r, using a single occurrence",
            item.id, rule.frequency,
        )
        if issues is not None:
            issues.append(DataIssue(
                item_id=item.id,
                stream=item.type.value,
                reason=f"unrecognized frequency {rule.frequency!r}, treated as once",
            ))
        frequency = Frequency.once

    if frequency is Frequency.once:
        return [anchor] if window_start <= anchor <= stop else []

    if rule.weekday is not None and frequency in (Frequency.weekly, Frequency.biweekly):
        anchor = next_weekday(anchor, rule.weekday)

    if anchor > stop:
        return []

    if frequency in _DAY_PERIODS:
        return _expand_fixed(anchor, _DAY_PERIODS[frequency], window_start, stop)
    return _expand_calendar(anchor, _MONTH_PERIODS[frequency], window_start, stop)


def _expand_fixed(anchor: date, period_days: int, window_start: date, stop: date) -> list[date]:
    periods = 0
    if anchor < window_start:
        periods = _ceil_div((window_start - anchor).days, period_days)

    step = timedelta(days=period_days)
    current = anchor + timedelta(days=periods * period_days)
    dates: list[date] = []
    while current <= stop:
        dates.append(current)
        current += step
    return dates


def _expand_calendar(anchor: date, period_months: int, window_start: date, stop: date) -> list[date]:
    periods = 0
    if anchor < window_start:
        elapsed_months = (
            (window_start.year - anchor.year) * 12 + window_start.month - anchor.month
        )
        periods = _ceil_div(elapsed_months, period_months)
        # Same month as the window start but a clamped/earlier day
        if anchor + relativedelta(months=periods * period_months) < window_start:
            periods += 1

    dates: list[date] = []
    current = anchor + relativedelta(months=periods * period_months)
    while current <= stop:
        dates.append(current)
        periods += 1
        current = anchor + relativedelta(months=periods * period_months)
    return dates
