"""Temporal composition ledger.

Holdings are stored as a date-sorted sequence of full snapshots
(``date -> {ticker: shares}``), each one the cumulative composition as of
that date. Transactions may be recorded out of order: a backdated buy or
sell is applied at its own date and then propagated to every later
snapshot, so ``composition_at(d)`` always reflects everything that took
effect on or before ``d``.

Sells deplete shares LIFO-style across the recorded snapshots: starting at
the latest snapshot on or before the sell date and walking backwards, each
snapshot's row is reduced until the requested amount is covered. The walk
is planned on copies of the affected snapshots and only committed when it
succeeds, so a rejected sell leaves the ledger untouched.
"""
from __future__ import annotations
import bisect
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

from ..config.schemas import LedgerConfig
from ..utils.logging import get_logger, TransactionLogger
from ..utils.validation import normalize_ticker, validate_not_future, validate_positive, to_date

LOGGER = get_logger(__name__)

Composition = Dict[str, float]


class InsufficientSharesError(ValueError):
    """Raised when a sell cannot be covered by the shares held."""
    pass


@dataclass(frozen=True)
class Depleted:
    """A sell that can be fully covered; ``snapshots`` holds the rewritten rows to commit."""
    ticker: str
    shares: float
    on: date
    snapshots: Dict[date, Composition]
    taken: Tuple[Tuple[date, float], ...] = ()


@dataclass(frozen=True)
class InsufficientAtDate:
    """A sell that exhausts every snapshot on or before ``on`` with shares still outstanding."""
    ticker: str
    shares: float
    on: date
    outstanding: float


SellOutcome = Union[Depleted, InsufficientAtDate]


@dataclass
class Ledger:
    """Point-in-time holdings of one named portfolio."""

    name: str = ""
    owner: str = ""
    config: LedgerConfig = field(default_factory=LedgerConfig)
    _snapshots: Dict[date, Composition] = field(default_factory=dict, init=False, repr=False)
    _dates: List[date] = field(default_factory=list, init=False, repr=False)
    _net_shares: Dict[str, float] = field(default_factory=dict, init=False, repr=False)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def dates(self) -> List[date]:
        """Snapshot dates in ascending order."""
        return list(self._dates)

    @property
    def net_shares(self) -> Dict[str, float]:
        """Running total of buys minus sells per ticker, independent of dates."""
        return dict(self._net_shares)

    def is_empty(self) -> bool:
        return not self._dates

    def first_date(self) -> Optional[date]:
        return self._dates[0] if self._dates else None

    def tickers(self) -> Set[str]:
        """Every ticker that appears in any snapshot."""
        seen: Set[str] = set()
        for rows in self._snapshots.values():
            seen.update(rows)
        return seen

    def snapshots(self) -> Iterator[Tuple[date, Composition]]:
        """Iterate ``(date, composition)`` in ascending date order (copies)."""
        for day in self._dates:
            yield day, dict(self._snapshots[day])

    def _floor_date(self, day: date) -> Optional[date]:
        """Latest snapshot date on or before ``day``."""
        idx = bisect.bisect_right(self._dates, day)
        return self._dates[idx - 1] if idx > 0 else None

    def _query_date(self, day: date) -> Optional[date]:
        floor = self._floor_date(day)
        if floor is None and self._dates:
            return self._dates[0]
        return floor

    def holdings_at(self, day) -> Composition:
        """Share counts at ``day`` as floats, zero rows removed.

        Uses the latest snapshot on or before ``day``; a date earlier than
        every record falls back to the earliest snapshot.
        """
        query = self._query_date(to_date(day))
        if query is None:
            return {}
        eps = self.config.share_epsilon
        return {t: s for t, s in self._snapshots[query].items() if abs(s) > eps}

    def composition_at(self, day) -> Dict[str, str]:
        """Holdings at ``day`` with share counts formatted to the configured decimals."""
        decimals = self.config.share_decimals
        return {t: f"{s:.{decimals}f}" for t, s in self.holdings_at(day).items()}

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def buy(self, ticker: str, shares: float, day) -> None:
        """Record a purchase of ``shares`` of ``ticker`` taking effect on ``day``.

        Raises:
            ValidationError: For a future date or non-positive share count.
        """
        ticker = normalize_ticker(ticker)
        with TransactionLogger(LOGGER, self.name, ticker, "BUY") as tx:
            day = validate_not_future(day)
            shares = validate_positive(shares, "shares")

            floor = self._floor_date(day)
            base = self._snapshots[floor] if floor is not None else {}
            rows = dict(base)
            rows[ticker] = rows.get(ticker, 0.0) + shares

            rewritten: Dict[date, Composition] = {day: rows}
            for later in self._dates_after(day):
                future = dict(self._snapshots[later])
                future[ticker] = future.get(ticker, 0.0) + shares
                rewritten[later] = future

            self._commit(rewritten)
            self._net_shares[ticker] = self._net_shares.get(ticker, 0.0) + shares
            tx.log_execution(shares, day)

    def plan_sell(self, ticker: str, shares: float, day) -> SellOutcome:
        """Plan a sell without touching the ledger.

        Walks snapshots on or before ``day`` most-recent-first, removing up to
        each row's current count until ``shares`` are covered, then subtracts
        the full ``shares`` from every later snapshot. The ``net_shares``
        pre-check is not applied here.

        Raises:
            ValidationError: For an invalid ticker or date, or non-positive shares.
        """
        ticker = normalize_ticker(ticker)
        day = to_date(day)
        shares = validate_positive(shares, "shares")
        eps = self.config.share_epsilon
        outstanding = shares
        rewritten: Dict[date, Composition] = {}
        taken: List[Tuple[date, float]] = []

        idx = bisect.bisect_right(self._dates, day)
        for past in reversed(self._dates[:idx]):
            if outstanding <= eps:
                break
            held = self._snapshots[past].get(ticker)
            if held is None:
                continue
            take = min(held, outstanding)
            rows = dict(self._snapshots[past])
            remaining = held - take
            rows[ticker] = 0.0 if abs(remaining) <= eps else remaining
            rewritten[past] = rows
            outstanding -= take
            if take > 0:
                taken.append((past, take))

        if outstanding > eps:
            return InsufficientAtDate(ticker=ticker, shares=shares, on=day, outstanding=outstanding)

        for later in self._dates_after(day):
            future = dict(self._snapshots[later])
            remaining = future.get(ticker, 0.0) - shares
            if remaining < -eps:
                LOGGER.warning(
                    f"Clamping {ticker} on {later} to zero after selling {shares} on {day}",
                    extra={'ticker': ticker, 'portfolio': self.name, 'shares': remaining},
                )
            future[ticker] = max(0.0, remaining) if abs(remaining) > eps else 0.0
            rewritten[later] = future

        return Depleted(ticker=ticker, shares=shares, on=day, snapshots=rewritten, taken=tuple(taken))

    def sell(self, ticker: str, shares: float, day) -> Depleted:
        """Record a sale of ``shares`` of ``ticker`` taking effect on ``day``.

        Returns:
            The committed ``Depleted`` outcome.

        Raises:
            ValidationError: For a future date or non-positive share count.
            InsufficientSharesError: If the running total or the depletion
                walk cannot cover the sale; the ledger is left unchanged.
        """
        ticker = normalize_ticker(ticker)
        with TransactionLogger(LOGGER, self.name, ticker, "SELL") as tx:
            day = validate_not_future(day)
            shares = validate_positive(shares, "shares")

            available = self._net_shares.get(ticker, 0.0)
            if available + self.config.share_epsilon < shares:
                raise InsufficientSharesError(
                    f"Cannot sell the stock: not enough shares available for {ticker}"
                )

            outcome = self.plan_sell(ticker, shares, day)
            if isinstance(outcome, InsufficientAtDate):
                raise InsufficientSharesError(
                    f"Cannot sell the stock: not enough shares or stock not found by {day.isoformat()}"
                )

            self._commit(outcome.snapshots)
            self._net_shares[ticker] = available - shares
            tx.log_execution(shares, day)
            return outcome

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _dates_after(self, day: date) -> List[date]:
        return self._dates[bisect.bisect_right(self._dates, day):]

    def _commit(self, rewritten: Dict[date, Composition]) -> None:
        for day, rows in rewritten.items():
            if day not in self._snapshots:
                bisect.insort(self._dates, day)
            self._snapshots[day] = rows
