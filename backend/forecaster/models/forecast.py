from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from forecaster.models.financial import BalanceAdjustment, FinancialItem, ItemType


class ForecastItem(BaseModel):
    """One dated event of a forecast and the balance right after it."""
    date: date
    type: ItemType
    name: str
    category: str
    amount: float  # signed
    running_balance: float
    source_id: str
    occurrence_index: int = 0


class DataIssue(BaseModel):
    """A record that was skipped or degraded during generation."""
    item_id: Optional[str] = None
    stream: str
    reason: str


class ForecastSummary(BaseModel):
    starting_balance: float
    current_balance: float
    projected_balance: float
    lowest_balance: float
    lowest_balance_date: Optional[date] = None
    total_income: float
    total_outflow: float
    net_change: float
    change_percent: float
    item_count: int


class ForecastStatus(str, Enum):
    ok = "ok"
    error = "error"


class ForecastRequest(BaseModel):
    """Inline snapshot of a user's records, no persistence required."""
    starting_balance: float = 0.0
    incomes: list[FinancialItem] = []
    bills: list[FinancialItem] = []
    expenses: list[FinancialItem] = []
    adjustments: list[BalanceAdjustment] = []
    horizon_days: Optional[int] = Field(None, ge=0)
    today: Optional[date] = None
    sample_cap: Optional[int] = Field(None, ge=2)


class ForecastResult(BaseModel):
    status: ForecastStatus = ForecastStatus.ok
    message: Optional[str] = None
    starting_balance: float
    horizon_days: int
    window_start: date
    window_end: date
    items: list[ForecastItem] = []
    total_items: int = 0
    sampled: bool = False
    summary: Optional[ForecastSummary] = None
    issues: list[DataIssue] = []
