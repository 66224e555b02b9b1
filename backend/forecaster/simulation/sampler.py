"""Display sampler for long forecasts.

Selects a true subsequence of at most ``cap`` points: the first and last
items always, a contiguous near-term block right after the first item (at
most half of the interior budget), and an even stride through the rest.
Balances are never recomputed, so the conservation law is checked on the
unsampled list.
"""
from __future__ import annotations

from typing import Sequence, TypeVar

T = TypeVar("T")


def sample_forecast(items: Sequence[T], cap: int, near_term: int = 100) -> list[T]:
    """Reduce ``items`` to at most ``cap`` entries, preserving order.

    The near-term block is shortened to half of the interior budget when
    ``near_term`` does not fit.
    """
    if cap < 2:
        raise ValueError(f"cap must be >= 2, got {cap}")
    if len(items) <= cap:
        return list(items)

    interior = cap - 2
    near_keep = max(0, min(near_term, interior // 2))

    near = list(items[1:1 + near_keep])
    middle = items[1 + near_keep:-1]
    budget = interior - near_keep

    strided: list[T] = []
    if budget > 0 and middle:
        stride = -(-len(middle) // budget)
        strided = list(middle[::stride])

    return [items[0], *near, *strided, items[-1]]
