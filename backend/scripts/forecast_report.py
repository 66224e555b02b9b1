#!/usr/bin/env python3
"""Print a period breakdown for a JSON snapshot of financial records.

Usage:
    python scripts/forecast_report.py snapshot.json
    python scripts/forecast_report.py snapshot.json --days 180 --today 2026-01-15
    python scripts/forecast_report.py snapshot.json --income-pct 10 --savings 200

The snapshot holds a starting balance plus raw ``incomes``, ``bills``,
``expenses`` and ``adjustments`` records as exported from the document store.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(BACKEND_DIR))

from forecaster.models.breakdown import BreakdownRequest  # noqa: E402
from forecaster.models.scenario import ScenarioParameters  # noqa: E402
from forecaster.services.forecast_service import run_breakdown, run_forecast  # noqa: E402
from forecaster.services.record_parser import parse_snapshot  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def _money(value: float | None) -> str:
    if value is None:
        return ""
    return f"{value:>12,.2f}"


def format_breakdown(response, with_scenario: bool) -> str:
    header = f"{'Period':<28}{'Income':>12}{'Mandatory':>12}{'Optional':>12}{'Net':>12}{'Balance':>12}"
    if with_scenario:
        header += f"{'Scen. Net':>12}{'Scen. Bal.':>12}"
    lines = [header, "-" * len(header)]
    for b in response.buckets:
        row = (
            f"{b.label:<28}{_money(b.income)}{_money(b.mandatory_expenses)}"
            f"{_money(b.optional_expenses)}{_money(b.net_cash_flow)}{_money(b.running_balance)}"
        )
        if with_scenario:
            row += f"{_money(b.scenario_net_cash_flow)}{_money(b.scenario_running_balance)}"
        lines.append(row)
    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(description="Cash flow forecast breakdown report")
    parser.add_argument("snapshot", help="Path to JSON snapshot")
    parser.add_argument("--days", type=int, default=None, help="Horizon in days (default: 90)")
    parser.add_argument("--today", type=date.fromisoformat, default=None,
                        help="Forecast start date, YYYY-MM-DD (default: today)")
    parser.add_argument("--income-pct", type=float, default=0.0, help="Scenario income change in percent")
    parser.add_argument("--expense-pct", type=float, default=0.0, help="Scenario expense change in percent")
    parser.add_argument("--savings", type=float, default=0.0, help="Scenario monthly savings boost")
    parser.add_argument("--one-time-expense", type=float, default=0.0)
    parser.add_argument("--one-time-income", type=float, default=0.0)
    args = parser.parse_args()

    path = Path(args.snapshot)
    if not path.exists():
        logger.error("Snapshot not found: %s", path)
        sys.exit(1)
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)

    today = args.today or date.today()
    snapshot = parse_snapshot(payload)
    params = ScenarioParameters(
        income_adjustment_percent=args.income_pct,
        expense_adjustment_percent=args.expense_pct,
        monthly_savings_delta=args.savings,
        one_time_expense=args.one_time_expense,
        one_time_income=args.one_time_income,
    )
    request = BreakdownRequest(
        **snapshot.model_dump(exclude={"horizon_days"}),
        horizon_days=args.days,
        parameters=params,
        include_scenario=not params.is_neutral(),
    )

    result = run_forecast(request, today)
    if result.status != "ok":
        logger.error("Forecast failed: %s", result.message)
        sys.exit(2)
    for issue in result.issues:
        logger.warning("Skipped %s %s: %s", issue.stream, issue.item_id, issue.reason)

    summary = result.summary
    logger.info("Forecast %s to %s (%d events)", result.window_start, result.window_end, result.total_items)
    logger.info("Starting balance  %s", _money(summary.starting_balance))
    logger.info("Projected balance %s", _money(summary.projected_balance))
    logger.info("Lowest balance    %s on %s", _money(summary.lowest_balance), summary.lowest_balance_date)

    breakdown = run_breakdown(request, today)
    if breakdown.status != "ok":
        logger.error("Breakdown failed: %s", breakdown.message)
        sys.exit(2)
    logger.info("")
    logger.info(format_breakdown(breakdown, request.include_scenario))


if __name__ == "__main__":
    main()
