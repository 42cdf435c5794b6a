"""yfinance data loader for daily equity/ETF prices.
Returns Open/Close bars indexed by trading date.
"""
from __future__ import annotations
from datetime import date, timedelta
from typing import Optional
import pandas as pd
import yfinance as yf

from .provider import PRICE_COLUMNS, PriceDataError, normalize_frame


def fetch_daily_prices(
    ticker: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> pd.DataFrame:
    """Fetch daily Open/Close bars from yfinance.

    ``end`` is inclusive (yfinance treats it as exclusive, so one day is added).
    An unknown ticker yields an empty frame; transport failures raise
    ``PriceDataError``.
    """
    end_excl = (end or date.today()) + timedelta(days=1)
    try:
        df = yf.download(
            ticker,
            start=start,
            end=end_excl,
            interval="1d",
            auto_adjust=False,
            progress=False,
        )
    except Exception as e:
        raise PriceDataError(f"Failed to download prices for {ticker}: {e}") from e

    if df is None or df.empty:
        return normalize_frame(None)

    # yfinance returns (field, ticker) MultiIndex columns in recent releases
    if isinstance(df.columns, pd.MultiIndex):
        df.columns = df.columns.get_level_values(0)
    return normalize_frame(df[PRICE_COLUMNS])
