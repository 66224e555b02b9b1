"""Financial records as supplied by the persistence layer.

Dates and amounts are parsed leniently: a value that cannot be read becomes
``None`` so the forecast can skip that one record instead of rejecting the
whole request.
"""
import math
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class ItemType(str, Enum):
    """Source stream of a forecast event. Order here is the same-day order."""
    income = "income"
    bill = "bill"
    expense = "expense"
    adjustment = "adjustment"


class Frequency(str, Enum):
    once = "once"
    daily = "daily"
    weekly = "weekly"
    biweekly = "biweekly"
    monthly = "monthly"
    quarterly = "quarterly"
    semiannual = "semiannual"
    annual = "annual"


_FREQUENCY_ALIASES: dict[str, str] = {
    "one-time": "once",
    "one time": "once",
    "onetime": "once",
    "none": "once",
    "day": "daily",
    "week": "weekly",
    "bi-weekly": "biweekly",
    "bi weekly": "biweekly",
    "fortnightly": "biweekly",
    "month": "monthly",
    "quarter": "quarterly",
    "semiannually": "semiannual",
    "semi-annually": "semiannual",
    "semi annually": "semiannual",
    "semi-annual": "semiannual",
    "annually": "annual",
    "yearly": "annual",
    "year": "annual",
}


def normalize_frequency(value: Any) -> str:
    """Canonical frequency name for ``value``.

    Empty values mean a one-off item. Unknown names are returned lower-cased
    so the expander can report them.
    """
    if value is None:
        return Frequency.once.value
    if isinstance(value, Frequency):
        return value.value
    text = str(value).strip().lower()
    if not text:
        return Frequency.once.value
    return _FREQUENCY_ALIASES.get(text, text)


def parse_date(value: Any) -> Optional[date]:
    """Read a date from a date, datetime or ISO string; ``None`` if unreadable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) < 10:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def parse_amount(value: Any) -> Optional[float]:
    """Read a finite number; strings may carry currency symbols and separators."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        cleaned = "".join(ch for ch in value if ch.isdigit() or ch in ".-")
        if not cleaned:
            return None
        try:
            result = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


class RecurrenceRule(BaseModel):
    """Tagged recurrence variant: a frequency plus the fields it uses."""
    frequency: str = Frequency.once.value
    anchor_date: Optional[date] = None
    end_date: Optional[date] = None
    weekday: Optional[int] = Field(None, ge=0, le=6)  # 0=Mon, weekly/biweekly only

    @field_validator("frequency", mode="before")
    @classmethod
    def _normalize_frequency(cls, value: Any) -> str:
        return normalize_frequency(value)

    @field_validator("anchor_date", "end_date", mode="before")
    @classmethod
    def _lenient_date(cls, value: Any) -> Optional[date]:
        return parse_date(value)

    def parsed_frequency(self) -> Optional[Frequency]:
        try:
            return Frequency(self.frequency)
        except ValueError:
            return None


class FinancialItem(BaseModel):
    """An income, bill or expense. ``amount`` is a magnitude; sign comes from ``type``."""
    id: str
    name: str = ""
    category: str = ""
    type: ItemType
    amount: Optional[float] = None
    recurrence: RecurrenceRule = Field(default_factory=RecurrenceRule)
    is_paid: bool = False

    @field_validator("amount", mode="before")
    @classmethod
    def _lenient_amount(cls, value: Any) -> Optional[float]:
        return parse_amount(value)


class BalanceAdjustment(BaseModel):
    """A dated one-off signed delta (unexpected cost, windfall, savings boost)."""
    id: str
    date: date
    amount: float
    name: str = "Balance Adjustment"
    category: str = "adjustment"
