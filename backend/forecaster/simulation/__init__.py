"""Forecast engine: recurrence, merging, generation, scenarios, sampling, aggregation."""
from forecaster.simulation.recurrence import expand, next_weekday, period_of
from forecaster.simulation.merger import merge, Occurrence, LedgerEntry, SOURCE_PRECEDENCE
from forecaster.simulation.generator import generate_forecast, validate_item
from forecaster.simulation.scenarios import simulate_scenario
from forecaster.simulation.sampler import sample_forecast
from forecaster.simulation.aggregator import aggregate, plan_periods, select_granularity
from forecaster.simulation.metrics import summarize

__all__ = [
    "expand",
    "next_weekday",
    "period_of",
    "merge",
    "Occurrence",
    "LedgerEntry",
    "SOURCE_PRECEDENCE",
    "generate_forecast",
    "validate_item",
    "simulate_scenario",
    "sample_forecast",
    "aggregate",
    "plan_periods",
    "select_granularity",
    "summarize",
]
