"""Caller-owned memoization for forecast runs.

Each consumer (baseline view, scenario view, breakdown) owns its own
ForecastMemo, so one consumer's inputs never evict another's result. A run
is registered with ``begin`` and only the most recent ticket may ``commit``;
results from superseded runs are dropped.
"""
from __future__ import annotations

import hashlib
import json
import logging
import threading
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True)
class ForecastFingerprint:
    starting_balance: float
    content_hash: str
    horizon_days: int
    today: date
    scenario_hash: str = ""


def _digest(payload: Any) -> str:
    blob = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(blob.encode("utf-8")).hexdigest()


def fingerprint(
    starting_balance: float,
    records: dict[str, list[BaseModel]],
    horizon_days: int,
    today: date,
    scenario: Optional[BaseModel] = None,
    extra: Optional[dict[str, Any]] = None,
) -> ForecastFingerprint:
    """Fingerprint over the full content of every input record."""
    content = {
        name: [r.model_dump(mode="json") for r in rows]
        for name, rows in records.items()
    }
    if extra:
        content["extra"] = extra
    return ForecastFingerprint(
        starting_balance=starting_balance,
        content_hash=_digest(content),
        horizon_days=horizon_days,
        today=today,
        scenario_hash=_digest(scenario.model_dump(mode="json")) if scenario is not None else "",
    )


class ForecastMemo(Generic[R]):
    """Last result per consumer, keyed by fingerprint, last writer wins."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._fingerprint: Optional[ForecastFingerprint] = None
        self._result: Optional[R] = None
        self._ticket = 0
        self._pending: Optional[tuple[int, ForecastFingerprint]] = None

    def lookup(self, fp: ForecastFingerprint) -> Optional[R]:
        with self._lock:
            if self._fingerprint == fp:
                return self._result
            return None

    def begin(self, fp: ForecastFingerprint) -> int:
        with self._lock:
            self._ticket += 1
            self._pending = (self._ticket, fp)
            return self._ticket

    def commit(self, ticket: int, result: R) -> bool:
        """Store ``result`` if ``ticket`` is still the latest request."""
        with self._lock:
            if self._pending is None or self._pending[0] != ticket:
                logger.debug("Discarding superseded forecast result (ticket %d)", ticket)
                return False
            self._fingerprint = self._pending[1]
            self._result = result
            self._pending = None
            return True

    def clear(self) -> None:
        with self._lock:
            self._fingerprint = None
            self._result = None
            self._pending = None

    def get_or_compute(
        self,
        fp: ForecastFingerprint,
        compute: Callable[[], R],
        cacheable: Callable[[R], bool] = lambda _: True,
    ) -> R:
        cached = self.lookup(fp)
        if cached is not None:
            logger.debug("Forecast memo hit for %s", fp.content_hash[:12])
            return cached
        ticket = self.begin(fp)
        result = compute()
        if cacheable(result):
            self.commit(ticket, result)
        return result
