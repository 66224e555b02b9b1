from fastapi import Request

from forecaster.services.memo import ForecastMemo


def get_forecast_memos(request: Request) -> dict[str, ForecastMemo]:
    """FastAPI dependency returning the per-consumer forecast memos."""
    return request.app.state.forecast_memos
