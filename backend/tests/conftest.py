from datetime import date

import pytest


@pytest.fixture
def today() -> date:
    """Fixed clock for deterministic forecasts (a Sunday)."""
    return date(2026, 10, 18)
