"""Normalize raw document-store records into forecast inputs.

Field lookup is flexible (case- and separator-insensitive, first match wins)
so snapshots exported with camelCase or snake_case keys both work. Values
that cannot be read are left as ``None``; the generator skips those records
with a warning rather than failing the whole snapshot.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from forecaster.models.financial import (
    BalanceAdjustment,
    FinancialItem,
    Frequency,
    ItemType,
    RecurrenceRule,
    parse_amount,
    parse_date,
)
from forecaster.models.forecast import ForecastRequest

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Field matching helpers
# ---------------------------------------------------------------------------
_FIELD_NAMES: dict[str, list[str]] = {
    "id": ["id", "item id", "doc id"],
    "name": ["name", "title", "reason", "description"],
    "amount": ["amount", "value"],
    "date": ["due date", "date", "next due date", "next date", "start date"],
    "end_date": ["end date"],
    "frequency": ["frequency", "recurrence"],
    "recurring": ["is recurring", "recurring"],
    "paid": ["is paid", "paid"],
    "category": ["category"],
    "weekday": ["day of week", "weekday"],
    "previous_balance": ["previous balance"],
    "new_balance": ["new balance"],
}

_BALANCE_FIELDS = ["starting balance", "current balance", "balance"]


def _normalize_key(key: str) -> str:
    out = []
    for i, ch in enumerate(key):
        if ch.isupper() and i > 0 and key[i - 1].islower():
            out.append(" ")
        out.append(" " if ch in "_-" else ch.lower())
    return " ".join("".join(out).split())


def _field(record: Mapping[str, Any], key: str) -> Any:
    names = _FIELD_NAMES.get(key, [key])
    normalized = {_normalize_key(k): v for k, v in record.items()}
    for name in names:
        if name in normalized and normalized[name] not in (None, ""):
            return normalized[name]
    return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "y")
    return bool(value)


def _as_weekday(value: Any) -> int | None:
    if value is None:
        return None
    try:
        weekday = int(value)
    except (TypeError, ValueError):
        return None
    return weekday if 0 <= weekday <= 6 else None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def parse_item(record: Mapping[str, Any], item_type: ItemType, position: int) -> FinancialItem:
    """Build one FinancialItem; the sign of a raw amount is dropped."""
    item_id = _field(record, "id")
    if item_id is None:
        item_id = f"{item_type.value}-{position + 1:04d}"

    amount = parse_amount(_field(record, "amount"))
    if amount is not None:
        amount = abs(amount)

    frequency = _field(record, "frequency")
    recurring = _field(record, "recurring")
    if recurring is not None and not _as_bool(recurring):
        frequency = Frequency.once.value

    return FinancialItem(
        id=str(item_id),
        name=str(_field(record, "name") or ""),
        category=str(_field(record, "category") or ""),
        type=item_type,
        amount=amount,
        recurrence=RecurrenceRule(
            frequency=frequency,
            anchor_date=_field(record, "date"),
            end_date=_field(record, "end_date"),
            weekday=_as_weekday(_field(record, "weekday")),
        ),
        is_paid=_as_bool(_field(record, "paid")),
    )


def parse_items(records: Iterable[Mapping[str, Any]], item_type: ItemType) -> list[FinancialItem]:
    items = [parse_item(record, item_type, i) for i, record in enumerate(records)]
    logger.info("Parsed %d %s records", len(items), item_type.value)
    return items


def parse_adjustments(records: Iterable[Mapping[str, Any]]) -> list[BalanceAdjustment]:
    """Adjustments need a date and either an amount or before/after balances."""
    adjustments: list[BalanceAdjustment] = []
    for i, record in enumerate(records):
        when = parse_date(_field(record, "date"))
        amount = parse_amount(_field(record, "amount"))
        if amount is None:
            previous = parse_amount(_field(record, "previous_balance"))
            new = parse_amount(_field(record, "new_balance"))
            if previous is not None and new is not None:
                amount = new - previous
        item_id = str(_field(record, "id") or f"adjustment-{i + 1:04d}")
        if when is None or amount is None:
            logger.warning("Skipping adjustment %s: missing date or amount", item_id)
            continue
        adjustments.append(BalanceAdjustment(
            id=item_id,
            date=when,
            amount=amount,
            name=str(_field(record, "name") or "Balance Adjustment"),
        ))
    return adjustments


def parse_snapshot(payload: Mapping[str, Any]) -> ForecastRequest:
    """Convert an exported snapshot into a ForecastRequest.

    Expected keys: a starting/current balance and ``incomes``, ``bills``,
    ``expenses`` and ``adjustments`` lists. Missing lists are empty; a stream
    that is not a list of records raises ValueError.
    """
    normalized = {_normalize_key(k): v for k, v in payload.items()}
    balance = None
    for name in _BALANCE_FIELDS:
        balance = parse_amount(normalized.get(name))
        if balance is not None:
            break

    streams = {}
    for key in ("incomes", "bills", "expenses", "adjustments"):
        records = normalized.get(key) or []
        if not isinstance(records, list) or not all(isinstance(r, Mapping) for r in records):
            raise ValueError(f"'{key}' must be a list of records")
        streams[key] = records

    return ForecastRequest(
        starting_balance=balance or 0.0,
        incomes=parse_items(streams["incomes"], ItemType.income),
        bills=parse_items(streams["bills"], ItemType.bill),
        expenses=parse_items(streams["expenses"], ItemType.expense),
        adjustments=parse_adjustments(streams["adjustments"]),
    )
