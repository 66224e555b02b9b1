"""Forecast orchestration service.

Binds configuration to the pure simulation functions, samples output for
display, and turns any unexpected failure into a recoverable error result
so a consumer never sees a crash instead of a forecast.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, Sequence

from forecaster.config import settings
from forecaster.models.breakdown import BreakdownRequest, BreakdownResponse
from forecaster.models.forecast import (
    DataIssue,
    ForecastItem,
    ForecastRequest,
    ForecastResult,
    ForecastStatus,
)
from forecaster.models.scenario import ChartPoint, ScenarioComparison, ScenarioRequest
from forecaster.services.memo import ForecastMemo, fingerprint
from forecaster.simulation.aggregator import aggregate, plan_periods
from forecaster.simulation.generator import forecast_window, generate_forecast
from forecaster.simulation.metrics import summarize
from forecaster.simulation.sampler import sample_forecast
from forecaster.simulation.scenarios import simulate_scenario

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "could not generate forecast"


def resolve_horizon(requested: Optional[int], default: Optional[int] = None, maximum: Optional[int] = None) -> int:
    """Requested horizon, or the configured default; capped at the maximum."""
    default = settings.DEFAULT_HORIZON_DAYS if default is None else default
    maximum = settings.MAX_HORIZON_DAYS if maximum is None else maximum
    if requested is None:
        return default
    if requested > maximum:
        logger.warning("Horizon %d days exceeds maximum %d, clamping", requested, maximum)
        return maximum
    return requested


def _records(request: ForecastRequest) -> dict[str, list]:
    return {
        "incomes": request.incomes,
        "bills": request.bills,
        "expenses": request.expenses,
        "adjustments": request.adjustments,
    }


def _safe_run(
    label: str,
    run: Callable[[list[DataIssue]], list[ForecastItem]],
) -> tuple[Optional[list[ForecastItem]], list[DataIssue]]:
    """Run one generation; None items means it failed."""
    issues: list[DataIssue] = []
    try:
        return run(issues), issues
    except Exception:
        logger.exception("%s forecast generation failed", label.capitalize())
        return None, issues


def _to_result(
    items: Optional[list[ForecastItem]],
    issues: list[DataIssue],
    starting_balance: float,
    horizon_days: int,
    today: date,
    cap: int,
) -> ForecastResult:
    window_start, window_end = forecast_window(today, horizon_days)
    if items is None:
        return ForecastResult(
            status=ForecastStatus.error,
            message=ERROR_MESSAGE,
            starting_balance=starting_balance,
            horizon_days=horizon_days,
            window_start=window_start,
            window_end=window_end,
            issues=issues,
        )

    display = items
    if len(items) > cap:
        display = sample_forecast(items, cap, settings.NEAR_TERM_ITEMS)
    return ForecastResult(
        starting_balance=starting_balance,
        horizon_days=horizon_days,
        window_start=window_start,
        window_end=window_end,
        items=display,
        total_items=len(items),
        sampled=len(display) < len(items),
        summary=summarize(items, starting_balance),
        issues=issues,
    )


def run_forecast(
    request: ForecastRequest,
    today: date,
    memo: Optional[ForecastMemo] = None,
) -> ForecastResult:
    """Baseline forecast for an inline snapshot."""
    horizon = resolve_horizon(request.horizon_days)
    cap = request.sample_cap or settings.CHART_SAMPLE_CAP

    def compute() -> ForecastResult:
        items, issues = _safe_run("baseline", lambda issues: generate_forecast(
            request.starting_balance, request.incomes, request.bills, request.expenses,
            request.adjustments, horizon, today, issues,
        ))
        return _to_result(items, issues, request.starting_balance, horizon, today, cap)

    if memo is None:
        return compute()
    fp = fingerprint(request.starting_balance, _records(request), horizon, today, extra={"cap": cap})
    return memo.get_or_compute(fp, compute, cacheable=lambda r: r.status is ForecastStatus.ok)


def build_chart_series(
    baseline: Sequence[ForecastItem],
    scenario: Optional[Sequence[ForecastItem]] = None,
    starting_balance: float = 0.0,
    scenario_starting_balance: Optional[float] = None,
) -> list[ChartPoint]:
    """One point per event date with each series' last balance on that date."""
    base_by_date = {item.date: item.running_balance for item in baseline}
    scen_by_date = {item.date: item.running_balance for item in scenario} if scenario is not None else {}
    dates = sorted(set(base_by_date) | set(scen_by_date))

    base_balance = starting_balance
    scen_balance = starting_balance if scenario_starting_balance is None else scenario_starting_balance
    points: list[ChartPoint] = []
    for when in dates:
        base_balance = base_by_date.get(when, base_balance)
        point = ChartPoint(date=when, running_balance=base_balance)
        if scenario is not None:
            scen_balance = scen_by_date.get(when, scen_balance)
            point.scenario_balance = scen_balance
        points.append(point)
    return points


def _comparison_ok(comparison: ScenarioComparison) -> bool:
    return (
        comparison.baseline.status is ForecastStatus.ok
        and comparison.scenario.status is ForecastStatus.ok
    )


def _scenario_horizon(request: ScenarioRequest) -> int:
    requested = request.parameters.horizon_days
    return resolve_horizon(requested if requested is not None else request.horizon_days)


def run_scenario(
    request: ScenarioRequest,
    today: date,
    memo: Optional[ForecastMemo] = None,
) -> ScenarioComparison:
    """Baseline and what-if forecasts over the same window, side by side."""
    horizon = _scenario_horizon(request)
    cap = request.sample_cap or settings.CHART_SAMPLE_CAP

    def compute() -> ScenarioComparison:
        base_items, base_issues = _safe_run("baseline", lambda issues: generate_forecast(
            request.starting_balance, request.incomes, request.bills, request.expenses,
            request.adjustments, horizon, today, issues,
        ))
        scen_items, scen_issues = _safe_run("scenario", lambda issues: simulate_scenario(
            request.incomes, request.bills, request.expenses, request.parameters,
            request.starting_balance, horizon, today,
            adjustments=request.adjustments,
            max_savings_months=settings.MAX_SAVINGS_MONTHS,
            issues=issues,
        ))
        baseline = _to_result(base_items, base_issues, request.starting_balance, horizon, today, cap)
        scenario = _to_result(scen_items, scen_issues, request.starting_balance, horizon, today, cap)

        chart: list[ChartPoint] = []
        difference = 0.0
        if base_items is not None and scen_items is not None:
            chart = build_chart_series(base_items, scen_items, request.starting_balance)
            if len(chart) > cap:
                chart = sample_forecast(chart, cap, settings.NEAR_TERM_ITEMS)
            difference = round(
                scenario.summary.projected_balance - baseline.summary.projected_balance, 2
            )
        return ScenarioComparison(
            baseline=baseline,
            scenario=scenario,
            chart=chart,
            projected_difference=difference,
        )

    if memo is None:
        return compute()
    fp = fingerprint(
        request.starting_balance, _records(request), horizon, today,
        scenario=request.parameters, extra={"cap": cap},
    )
    return memo.get_or_compute(fp, compute, cacheable=_comparison_ok)


def run_breakdown(
    request: BreakdownRequest,
    today: date,
    memo: Optional[ForecastMemo] = None,
) -> BreakdownResponse:
    """Period buckets for the baseline and, on request, the scenario."""
    horizon = _scenario_horizon(request) if request.include_scenario else resolve_horizon(request.horizon_days)
    optional_categories = (
        request.optional_categories
        if request.optional_categories is not None
        else settings.OPTIONAL_EXPENSE_CATEGORIES
    )
    granularity, interval, _ = plan_periods(today, horizon, settings.MAX_PERIOD_BUCKETS)

    def compute() -> BreakdownResponse:
        base_items, issues = _safe_run("baseline", lambda issues: generate_forecast(
            request.starting_balance, request.incomes, request.bills, request.expenses,
            request.adjustments, horizon, today, issues,
        ))
        scen_items = None
        scenario_failed = False
        if request.include_scenario:
            scen_items, scen_issues = _safe_run("scenario", lambda issues: simulate_scenario(
                request.incomes, request.bills, request.expenses, request.parameters,
                request.starting_balance, horizon, today,
                adjustments=request.adjustments,
                max_savings_months=settings.MAX_SAVINGS_MONTHS,
                issues=issues,
            ))
            scenario_failed = scen_items is None
            issues = issues + scen_issues
        if base_items is None or scenario_failed:
            return BreakdownResponse(
                status=ForecastStatus.error,
                message=ERROR_MESSAGE,
                granularity=granularity,
                interval=interval,
                issues=issues,
            )

        buckets = aggregate(
            base_items,
            scen_items,
            horizon,
            window_start=today,
            starting_balance=request.starting_balance,
            scenario_starting_balance=request.starting_balance,
            optional_categories=optional_categories,
            max_buckets=settings.MAX_PERIOD_BUCKETS,
            sample_size=settings.BUCKET_SAMPLE_SIZE,
        )
        return BreakdownResponse(granularity=granularity, interval=interval, buckets=buckets, issues=issues)

    if memo is None:
        return compute()
    fp = fingerprint(
        request.starting_balance, _records(request), horizon, today,
        scenario=request.parameters if request.include_scenario else None,
        extra={"optional": sorted(optional_categories), "scenario": request.include_scenario},
    )
    return memo.get_or_compute(fp, compute, cacheable=lambda r: r.status is ForecastStatus.ok)
