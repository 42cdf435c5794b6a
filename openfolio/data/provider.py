"""Daily price series providers.

A provider exposes, per ticker, a date-indexed frame with ``Open`` and
``Close`` columns. Lookups by exact trading date return ``None`` when the
source has no row for that date, so "no data" never collapses into a zero
price at this layer.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Dict, Mapping, NamedTuple, Optional

import pandas as pd

from ..utils.validation import normalize_ticker, to_date

PRICE_COLUMNS = ["Open", "Close"]


class PriceDataError(Exception):
    """Raised when price data cannot be fetched or is missing for a request."""
    pass


class InsufficientHistoryError(PriceDataError):
    """Raised when fewer historical closes exist than a computation needs."""
    pass


class PriceQuote(NamedTuple):
    open: float
    close: float


def normalize_frame(df: Optional[pd.DataFrame]) -> pd.DataFrame:
    """Return an ascending, de-duplicated ``[Open, Close]`` frame indexed by ``date``."""
    if df is None or df.empty:
        return pd.DataFrame(columns=PRICE_COLUMNS, index=pd.Index([], name="Date")).astype(float)
    missing = [c for c in PRICE_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(f"Price frame missing columns: {missing}")
    out = df[PRICE_COLUMNS].astype(float).dropna(how="any")
    out.index = pd.Index([to_date(ix) for ix in out.index], name="Date")
    out = out[~out.index.duplicated(keep="last")]
    return out.sort_index()


class PriceProvider(ABC):
    """Abstract daily price source.

    Subclasses only implement :meth:`history`; the lookup helpers are shared.
    """

    @abstractmethod
    def history(self, ticker: str) -> pd.DataFrame:
        """Return the full ``[Open, Close]`` history for ``ticker`` (may be empty)."""
        raise NotImplementedError

    def quote(self, ticker: str, day) -> Optional[PriceQuote]:
        """Open/close on an exact trading date, or None when the source has no row."""
        day = to_date(day)
        hist = self.history(normalize_ticker(ticker))
        if day not in hist.index:
            return None
        row = hist.loc[day]
        return PriceQuote(open=float(row["Open"]), close=float(row["Close"]))

    def closing_price(self, ticker: str, day) -> Optional[float]:
        q = self.quote(ticker, day)
        return None if q is None else q.close

    def opening_price(self, ticker: str, day) -> Optional[float]:
        q = self.quote(ticker, day)
        return None if q is None else q.open

    def closes_between(self, ticker: str, start, end) -> pd.Series:
        """Closing prices of the trading days in ``[start, end]``, ascending."""
        start, end = to_date(start), to_date(end)
        hist = self.history(normalize_ticker(ticker))
        mask = (hist.index >= start) & (hist.index <= end)
        return hist.loc[mask, "Close"]

    def closes_before(self, ticker: str, day, count: int) -> pd.Series:
        """The ``count`` most recent closes strictly before ``day`` (ascending).

        Raises:
            InsufficientHistoryError: If fewer than ``count`` closes exist.
        """
        day = to_date(day)
        hist = self.history(normalize_ticker(ticker))
        closes = hist.loc[hist.index < day, "Close"].tail(count)
        if len(closes) < count:
            raise InsufficientHistoryError(
                f"Insufficient data for {ticker}: requested {count} days before "
                f"{day.isoformat()}, but only found {len(closes)}"
            )
        return closes


@dataclass
class FramePriceProvider(PriceProvider):
    """In-memory provider backed by one DataFrame per ticker."""

    frames: Dict[str, pd.DataFrame]

    def __post_init__(self):
        self.frames = {normalize_ticker(t): normalize_frame(df) for t, df in self.frames.items()}

    @classmethod
    def from_quotes(cls, quotes: Mapping[str, Mapping[date, tuple]]) -> FramePriceProvider:
        """Build from ``{ticker: {date: (open, close)}}``."""
        frames = {}
        for ticker, rows in quotes.items():
            frames[ticker] = pd.DataFrame(
                [tuple(v) for v in rows.values()],
                index=list(rows.keys()),
                columns=PRICE_COLUMNS,
            )
        return cls(frames)

    def history(self, ticker: str) -> pd.DataFrame:
        return self.frames.get(normalize_ticker(ticker), normalize_frame(None))

    def add_history(self, ticker: str, df: pd.DataFrame) -> None:
        self.frames[normalize_ticker(ticker)] = normalize_frame(df)
