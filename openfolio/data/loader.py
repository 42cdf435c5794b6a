"""Price provider factory and the cached yfinance-backed provider."""
from __future__ import annotations
from datetime import date
from typing import Dict, Optional
import pandas as pd

from .cache import CacheConfig, PriceCache
from .provider import FramePriceProvider, PriceProvider, normalize_frame
from ..config.schemas import DataConfig
from ..utils.logging import get_logger
from ..utils.validation import normalize_ticker, to_date

LOGGER = get_logger(__name__)


class YFinancePriceProvider(PriceProvider):
    """Daily prices from yfinance with an in-process and an on-disk cache layer.

    A ticker's full history is downloaded once (from ``lookback_start`` to
    today) and served from memory afterwards; the SQLite cache keeps it across
    sessions until its TTL expires.
    """

    def __init__(self, config: Optional[DataConfig] = None, cache: Optional[PriceCache] = None):
        self.config = config or DataConfig()
        self._frames: Dict[str, pd.DataFrame] = {}
        if cache is None and self.config.cache_enabled:
            cache = PriceCache(CacheConfig(sqlite_path=self.config.cache_path, ttl=self.config.cache_ttl))
        self._cache = cache

    def history(self, ticker: str) -> pd.DataFrame:
        ticker = normalize_ticker(ticker)
        if ticker in self._frames:
            return self._frames[ticker]

        df = self._cache.get(ticker) if self._cache is not None else None
        if df is None:
            df = self._download(ticker)
        self._frames[ticker] = df
        return df

    def refresh(self, ticker: str) -> pd.DataFrame:
        """Drop any cached history for ``ticker`` and download it again."""
        ticker = normalize_ticker(ticker)
        self._frames.pop(ticker, None)
        if self._cache is not None:
            self._cache.delete(ticker)
        return self.history(ticker)

    def _download(self, ticker: str) -> pd.DataFrame:
        from .yfinance_source import fetch_daily_prices

        start = to_date(self.config.lookback_start, "lookback_start")
        df = fetch_daily_prices(ticker, start=start, end=date.today())
        if df.empty:
            LOGGER.warning(f"No price data found for {ticker}", extra={'ticker': ticker})
        elif self._cache is not None:
            self._cache.set(ticker, df)
        LOGGER.info(f"Downloaded {len(df)} daily bars for {ticker}", extra={'ticker': ticker})
        return normalize_frame(df)


def make_provider(config: Optional[DataConfig] = None) -> PriceProvider:
    """Build the price provider named by ``config.source``.

    Raises:
        ValueError: For an unknown source name.
    """
    config = config or DataConfig()
    if config.source == "yfinance":
        return YFinancePriceProvider(config)
    if config.source == "memory":
        return FramePriceProvider({})
    raise ValueError(f"Unknown data source: {config.source}")
