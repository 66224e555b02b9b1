from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from forecaster.models.forecast import ForecastRequest, ForecastResult


class ScenarioParameters(BaseModel):
    """What-if overlay. All-zero values reproduce the baseline exactly."""
    income_adjustment_percent: float = Field(0.0, ge=-100.0)
    expense_adjustment_percent: float = Field(0.0, ge=-100.0)
    monthly_savings_delta: float = 0.0
    one_time_expense: float = Field(0.0, ge=0.0)
    one_time_income: float = Field(0.0, ge=0.0)
    horizon_days: Optional[int] = Field(None, ge=0)

    def is_neutral(self) -> bool:
        return (
            self.income_adjustment_percent == 0
            and self.expense_adjustment_percent == 0
            and self.monthly_savings_delta <= 0
            and self.one_time_expense <= 0
            and self.one_time_income <= 0
        )


class ScenarioRequest(ForecastRequest):
    parameters: ScenarioParameters = ScenarioParameters()


class ChartPoint(BaseModel):
    """Balance-over-time point for the chart renderer."""
    date: date
    running_balance: float
    scenario_balance: Optional[float] = None


class ScenarioComparison(BaseModel):
    baseline: ForecastResult
    scenario: ForecastResult
    chart: list[ChartPoint] = []
    projected_difference: float = 0.0
