"""Cost basis, point-in-time valuation and performance charts for a ledger."""
from __future__ import annotations
from datetime import date
from typing import List, Optional, Tuple

import pandas as pd

from .ledger import Ledger
from ..config.schemas import ChartConfig
from ..data.provider import PriceDataError, PriceProvider
from ..reporting.charts import render_bar_chart
from ..utils.logging import get_logger
from ..utils.validation import validate_date_range, validate_not_future

LOGGER = get_logger(__name__)


def cost_basis(ledger: Ledger, provider: PriceProvider, day) -> float:
    """Total capital committed to the portfolio up to and including ``day``.

    Every increase in a ticker's share count between consecutive snapshots
    is priced at that snapshot date's close. Decreases are ignored. A
    missing close, or a price lookup that fails, contributes nothing and
    is logged.

    Args:
        ledger: Portfolio ledger.
        provider: Price source.
        day: Valuation date (not in the future).

    Returns:
        Cost basis in USD.
    """
    day = validate_not_future(day)
    total = 0.0
    for ticker in sorted(ledger.tickers()):
        previous = 0.0
        for snap_day, rows in ledger.snapshots():
            if snap_day > day:
                break
            current = rows.get(ticker, 0.0)
            increase = current - previous
            previous = current
            if increase <= ledger.config.share_epsilon:
                continue
            try:
                close = provider.closing_price(ticker, snap_day)
            except PriceDataError as e:
                LOGGER.warning(
                    f"Price lookup for {ticker} on {snap_day} failed; excluded from cost basis: {e}",
                    extra={'ticker': ticker, 'portfolio': ledger.name, 'reason': str(e)},
                )
                continue
            if close is None:
                LOGGER.warning(
                    f"No closing price for {ticker} on {snap_day}; excluded from cost basis",
                    extra={'ticker': ticker, 'portfolio': ledger.name},
                )
                continue
            total += increase * close
    return total


def total_value(ledger: Ledger, provider: PriceProvider, day) -> float:
    """Market value of the holdings at ``day``.

    Returns 0.0 when ``day`` precedes the first recorded transaction.

    Raises:
        PriceDataError: If a held ticker has no close (or a zero close) on ``day``.
    """
    day = validate_not_future(day)
    first = ledger.first_date()
    if first is None or day < first:
        return 0.0

    holdings = pd.Series(ledger.holdings_at(day), dtype=float)
    if holdings.empty:
        return 0.0
    closes = pd.Series({t: provider.closing_price(t, day) for t in holdings.index}, dtype=float)
    missing = closes[closes.isna() | (closes == 0.0)]
    if not missing.empty:
        raise PriceDataError(
            f"No price data for {', '.join(missing.index)} on {day.isoformat()}"
        )
    return float((holdings * closes).sum())


def value_series(ledger: Ledger, provider: PriceProvider, start: date, end: date) -> List[Tuple[date, float]]:
    """Daily portfolio values over ``[start, end]``.

    A calendar day without price data for some held ticker (weekend,
    holiday) repeats the previous day's value; the first day falls back to 0.
    """
    points: List[Tuple[date, float]] = []
    last = 0.0
    for ts in pd.date_range(start, end, freq="D"):
        day = ts.date()
        try:
            last = total_value(ledger, provider, day)
        except PriceDataError:
            LOGGER.debug(f"No prices on {day}; carrying {last:.2f} forward",
                         extra={'portfolio': ledger.name})
        points.append((day, last))
    return points


def performance_chart(ledger: Ledger, provider: PriceProvider, start, end,
                      config: Optional[ChartConfig] = None) -> str:
    """Text bar chart of the portfolio value between ``start`` and ``end``.

    Raises:
        ValidationError: If ``end`` is not after ``start`` or lies in the future.
    """
    start, end = validate_date_range(start, end, strict=True)
    return render_bar_chart(value_series(ledger, provider, start, end), config)
