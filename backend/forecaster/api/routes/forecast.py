from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from forecaster.api.deps import get_forecast_memos
from forecaster.models.breakdown import BreakdownRequest, BreakdownResponse
from forecaster.models.forecast import ForecastRequest, ForecastResult
from forecaster.models.scenario import ScenarioComparison, ScenarioRequest
from forecaster.services.forecast_service import run_breakdown, run_forecast, run_scenario
from forecaster.services.record_parser import parse_snapshot

router = APIRouter(prefix="/forecast", tags=["forecast"])


@router.post("/run", response_model=ForecastResult)
def run_forecast_endpoint(request: ForecastRequest, memos=Depends(get_forecast_memos)):
    """Baseline forecast over an inline snapshot of records.

    ``today`` defaults to the server date. Failed generations come back with
    ``status="error"`` rather than a 5xx.
    """
    return run_forecast(request, request.today or date.today(), memos["baseline"])


@router.post("/snapshot", response_model=ForecastResult)
def run_snapshot_endpoint(
    payload: dict[str, Any] = Body(...),
    horizon_days: Optional[int] = None,
    today: Optional[date] = None,
    memos=Depends(get_forecast_memos),
):
    """Baseline forecast over a raw document-store export (camelCase records)."""
    if horizon_days is not None and horizon_days < 0:
        raise HTTPException(status_code=422, detail="horizon_days must be >= 0")
    try:
        request = parse_snapshot(payload)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    request.horizon_days = horizon_days
    return run_forecast(request, today or date.today(), memos["baseline"])


@router.post("/scenario", response_model=ScenarioComparison)
def run_scenario_endpoint(request: ScenarioRequest, memos=Depends(get_forecast_memos)):
    """Baseline and what-if forecasts with a merged chart series."""
    return run_scenario(request, request.today or date.today(), memos["scenario"])


@router.post("/breakdown", response_model=BreakdownResponse)
def run_breakdown_endpoint(request: BreakdownRequest, memos=Depends(get_forecast_memos)):
    return run_breakdown(request, request.today or date.today(), memos["breakdown"])
