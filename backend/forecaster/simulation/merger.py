"""Event stream merger.

Combines dated income, bill, expense and adjustment events into one
chronological ledger. Signs are applied here: income is positive, bills and
expenses negative, adjustments keep their own sign. Same-day events follow
SOURCE_PRECEDENCE, then input order, so identical inputs always merge
identically.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from forecaster.models.financial import BalanceAdjustment, FinancialItem, ItemType

SOURCE_PRECEDENCE: dict[ItemType, int] = {
    ItemType.income: 0,
    ItemType.bill: 1,
    ItemType.expense: 2,
    ItemType.adjustment: 3,
}


@dataclass(frozen=True, eq=False)
class Occurrence:
    """One expanded date of a financial item."""
    item: FinancialItem
    date: date
    occurrence_index: int
    input_index: int


@dataclass(frozen=True)
class LedgerEntry:
    """A signed, dated event ready for balance accumulation."""
    date: date
    type: ItemType
    name: str
    category: str
    amount: float
    source_id: str
    occurrence_index: int
    input_index: int

    @property
    def sort_key(self) -> tuple[date, int, int, int]:
        return (self.date, SOURCE_PRECEDENCE[self.type], self.input_index, self.occurrence_index)


def _signed(item_type: ItemType, magnitude: float) -> float:
    if item_type is ItemType.income:
        return abs(magnitude)
    return -abs(magnitude)


def _entries(occurrences: Iterable[Occurrence], item_type: ItemType) -> list[LedgerEntry]:
    return [
        LedgerEntry(
            date=occ.date,
            type=item_type,
            name=occ.item.name or item_type.value.title(),
            category=occ.item.category or item_type.value.title(),
            amount=_signed(item_type, occ.item.amount or 0.0),
            source_id=occ.item.id,
            occurrence_index=occ.occurrence_index,
            input_index=occ.input_index,
        )
        for occ in occurrences
    ]


def merge(
    income_occurrences: Iterable[Occurrence],
    bill_occurrences: Iterable[Occurrence],
    expense_occurrences: Iterable[Occurrence],
    adjustments: Sequence[BalanceAdjustment] = (),
) -> list[LedgerEntry]:
    """Merge the four streams into one deterministically ordered list."""
    entries = _entries(income_occurrences, ItemType.income)
    entries.extend(_entries(bill_occurrences, ItemType.bill))
    entries.extend(_entries(expense_occurrences, ItemType.expense))
    entries.extend(
        LedgerEntry(
            date=adj.date,
            type=ItemType.adjustment,
            name=adj.name,
            category=adj.category,
            amount=adj.amount,
            source_id=adj.id,
            occurrence_index=0,
            input_index=i,
        )
        for i, adj in enumerate(adjustments)
    )
    # sorted() is stable; the key already fixes every tie
    return sorted(entries, key=lambda e: e.sort_key)
