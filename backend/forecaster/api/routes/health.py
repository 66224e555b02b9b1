from fastapi import APIRouter

from forecaster.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check():
    return {
        "status": "ok",
        "config": {
            "default_horizon_days": settings.DEFAULT_HORIZON_DAYS,
            "max_horizon_days": settings.MAX_HORIZON_DAYS,
            "chart_sample_cap": settings.CHART_SAMPLE_CAP,
            "max_period_buckets": settings.MAX_PERIOD_BUCKETS,
        },
    }
