"""Per-ticker trend, moving-average and crossover analytics."""
from __future__ import annotations
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..config.schemas import AnalyticsConfig, ChartConfig
from ..data.provider import PriceDataError, PriceProvider
from ..reporting.charts import render_bar_chart
from ..utils.logging import get_logger
from ..utils.validation import (
    ValidationError,
    normalize_ticker,
    validate_date_range,
    validate_not_future,
    validate_window,
)

LOGGER = get_logger(__name__)


class Trend(str, Enum):
    GAIN = "Gain"
    LOSE = "Lose"
    NEITHER = "Neither Gain nor Lose"


class Signal(str, Enum):
    BUY = "Buy"
    SELL = "Sell"


def crossover_signals(days: Sequence[date], fast: Sequence[float], slow: Sequence[float]) -> Dict[date, Signal]:
    """Date-ordered Buy/Sell signals where ``fast - slow`` changes sign.

    ``Buy`` when the spread goes from negative to positive between two
    consecutive entries, ``Sell`` for the reverse. Touching zero is not a
    crossing.
    """
    spread = np.asarray(fast, dtype=float) - np.asarray(slow, dtype=float)
    if len(spread) < 2:
        return {}
    prev, cur = spread[:-1], spread[1:]
    buys = (prev < 0) & (cur > 0)
    sells = (prev > 0) & (cur < 0)

    signals: Dict[date, Signal] = {}
    for i in np.flatnonzero(buys | sells):
        signals[days[i + 1]] = Signal.BUY if buys[i] else Signal.SELL
    return signals


class StockAnalysis:
    """Analytics over the daily price history of one ticker.

    Args:
        ticker: Symbol to analyse.
        provider: Price source.
        config: Analytics settings (crossover window).
        chart_config: Rendering settings for the performance chart.
    """

    def __init__(self, ticker: str, provider: PriceProvider,
                 config: Optional[AnalyticsConfig] = None,
                 chart_config: Optional[ChartConfig] = None):
        self.ticker = normalize_ticker(ticker)
        self.provider = provider
        self.config = config or AnalyticsConfig()
        self.chart_config = chart_config or ChartConfig()

    def moving_average(self, day, days: int) -> float:
        """Mean of the ``days`` most recent closes strictly before ``day``.

        Raises:
            ValidationError: For a future date or a non-positive window.
            InsufficientHistoryError: If fewer than ``days`` closes exist.
        """
        day = validate_not_future(day)
        days = validate_window(days)
        closes = self.provider.closes_before(self.ticker, day, days)
        return float(closes.mean())

    def stock_trend(self, start, end=None) -> Trend:
        """Compare the open on ``start`` with the close on ``end`` (defaults to ``start``).

        A close above the open is ``Trend.GAIN`` and a close below it is
        ``Trend.LOSE``. Earlier releases of this tool reported these two the
        other way round.
        """
        start, end = validate_date_range(start, start if end is None else end)
        opening = self.provider.opening_price(self.ticker, start)
        closing = self.provider.closing_price(self.ticker, end)
        if opening is None or closing is None:
            missing = start if opening is None else end
            raise PriceDataError(f"No price data for {self.ticker} on {missing.isoformat()}")
        if closing > opening:
            return Trend.GAIN
        if closing < opening:
            return Trend.LOSE
        return Trend.NEITHER

    def _trading_days(self, start, end) -> List[date]:
        start, end = validate_date_range(start, end)
        return list(self.provider.closes_between(self.ticker, start, end).index)

    def single_crossover_days(self, start, end) -> Dict[date, Signal]:
        """Days where the close crosses its moving average (``crossover_window`` days)."""
        start, end = validate_date_range(start, end)
        closes = self.provider.closes_between(self.ticker, start, end)
        if len(closes) < 2:
            return {}
        days = list(closes.index)
        window = self.config.crossover_window
        averages = [self.moving_average(d, window) for d in days]
        signals = crossover_signals(days, closes.to_numpy(), averages)
        LOGGER.debug(f"{len(signals)} single crossovers for {self.ticker} between {start} and {end}",
                     extra={'ticker': self.ticker})
        return signals

    def dual_crossover_days(self, start, end, x: int, y: int) -> Dict[date, Signal]:
        """Days where the ``x``-day average crosses the ``y``-day average.

        Raises:
            ValidationError: Unless ``0 < x < y``.
        """
        x = validate_window(x, "x")
        y = validate_window(y, "y")
        if x >= y:
            raise ValidationError(
                "The shorter moving average period 'x' must be less than the longer period 'y'."
            )
        days = self._trading_days(start, end)
        if len(days) < 2:
            return {}
        fast = [self.moving_average(d, x) for d in days]
        slow = [self.moving_average(d, y) for d in days]
        return crossover_signals(days, fast, slow)

    def stock_performance_chart(self, start, end) -> str:
        """Text bar chart of the closing prices between ``start`` and ``end``."""
        start, end = validate_date_range(start, end)
        closes = self.provider.closes_between(self.ticker, start, end)
        points = [(d, float(v)) for d, v in closes.items()]
        return render_bar_chart(points, self.chart_config)
