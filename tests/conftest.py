"""
Pytest Configuration and Fixtures
==================================
Shared fixtures and configuration for all tests.
"""
import os
import sys
import tempfile
from datetime import date
from pathlib import Path

# Keep test log output out of the working tree
os.environ.setdefault("OPENFOLIO_LOG_DIR", tempfile.mkdtemp(prefix="openfolio-logs-"))

import pandas as pd
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from openfolio.data.provider import FramePriceProvider  # noqa: E402
from openfolio.portfolio.ledger import Ledger  # noqa: E402


def business_day_frame(start: str, end: str, open_price: float, close_price: float) -> pd.DataFrame:
    """Constant Open/Close bars on every business day in ``[start, end]``."""
    dates = pd.bdate_range(start=start, end=end)
    return pd.DataFrame({"Open": open_price, "Close": close_price}, index=dates)


@pytest.fixture
def flat_provider() -> FramePriceProvider:
    """AAPL closes at 150 and MSFT at 250 on every business day of 2023."""
    return FramePriceProvider({
        "AAPL": business_day_frame("2023-01-02", "2023-12-29", 149.0, 150.0),
        "MSFT": business_day_frame("2023-01-02", "2023-12-29", 251.0, 250.0),
    })


@pytest.fixture
def crossover_closes() -> list:
    """Closes that cross a 3-day average upwards on day 5 and downwards on day 8."""
    return [10.0, 10.0, 10.0, 10.0, 8.0, 12.0, 12.0, 12.0, 9.0, 9.0]


@pytest.fixture
def trading_days(crossover_closes) -> list:
    """Business days starting Monday 2023-01-02, one per crossover close."""
    return [ts.date() for ts in pd.bdate_range("2023-01-02", periods=len(crossover_closes))]


@pytest.fixture
def crossover_provider(crossover_closes, trading_days) -> FramePriceProvider:
    """Ticker XYZ opening at 10 every day with the crossover closes."""
    quotes = {d: (10.0, c) for d, c in zip(trading_days, crossover_closes)}
    return FramePriceProvider.from_quotes({"XYZ": quotes})


@pytest.fixture
def ledger() -> Ledger:
    """Empty ledger for a test portfolio."""
    return Ledger(name="Retirement", owner="test@example.com")


@pytest.fixture
def past_day() -> date:
    return date(2023, 3, 1)
