import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from forecaster.config import settings
from forecaster.services.memo import ForecastMemo
from forecaster.api.routes import health, forecast

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: configure logging and start from empty memos
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for memo in app.state.forecast_memos.values():
        memo.clear()
    logger.info("Forecast service started (default horizon %d days)", settings.DEFAULT_HORIZON_DAYS)
    yield


app = FastAPI(title="Cash Flow Forecaster", version="0.1.0", lifespan=lifespan)

# One memo per consumer so a scenario run never evicts the baseline.
app.state.forecast_memos = {
    "baseline": ForecastMemo(),
    "scenario": ForecastMemo(),
    "breakdown": ForecastMemo(),
}

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api")
app.include_router(forecast.router, prefix="/api")
