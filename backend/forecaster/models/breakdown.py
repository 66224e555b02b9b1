from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from forecaster.models.forecast import DataIssue, ForecastItem, ForecastStatus
from forecaster.models.scenario import ScenarioRequest


class Granularity(str, Enum):
    daily = "daily"
    weekly = "weekly"
    biweekly = "biweekly"
    monthly = "monthly"


class PeriodBucket(BaseModel):
    """Calendar period summary for the monthly-breakdown view.

    Totals cover every contributing item; ``items`` is only a capped sample.
    """
    label: str
    period_start: date
    period_end: date
    income: float = 0.0
    mandatory_expenses: float = 0.0
    optional_expenses: float = 0.0
    adjustments: float = 0.0
    net_cash_flow: float = 0.0
    running_balance: float = 0.0
    item_count: int = 0
    items: list[ForecastItem] = []
    scenario_income: Optional[float] = None
    scenario_mandatory_expenses: Optional[float] = None
    scenario_optional_expenses: Optional[float] = None
    scenario_adjustments: Optional[float] = None
    scenario_net_cash_flow: Optional[float] = None
    scenario_running_balance: Optional[float] = None


class BreakdownRequest(ScenarioRequest):
    include_scenario: bool = False
    optional_categories: Optional[list[str]] = None


class BreakdownResponse(BaseModel):
    status: ForecastStatus = ForecastStatus.ok
    message: Optional[str] = None
    granularity: Granularity
    interval: int  # days, or months for monthly
    buckets: list[PeriodBucket] = []
    issues: list[DataIssue] = []
