"""Dollar-cost averaging: invest a fixed amount at fixed intervals.

A periodic run is a schedule of steps. Each step starts ``Pending`` at its
scheduled date and tries to buy; a failed attempt (no price data, market
closed) moves that step's cursor one day later. After ``max_retries``
failed attempts the step is ``Exhausted`` and skipped. The next step is
scheduled ``interval_days`` after the date the previous one ended on.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Mapping, Optional

from .base import BaseStrategy
from ..data.provider import PriceDataError
from ..utils.logging import get_logger
from ..utils.validation import (
    ValidationError,
    to_date,
    validate_date_range,
    validate_not_future,
    validate_positive,
    validate_ratios,
)

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class StrategyInvocation:
    """Validated parameters of one periodic investment call."""
    amount: float
    stock_ratio: Dict[str, float]
    start_date: date
    end_date: Optional[date] = None
    interval_days: int = 30

    @classmethod
    def create(cls, amount: float, stock_ratio: Mapping[str, float], start_date, end_date=None,
               interval_days: int = 30, tolerance: float = 1e-6,
               today: Optional[date] = None) -> StrategyInvocation:
        """Validate and normalise the parameters.

        Raises:
            ValidationError: For a non-positive amount, an invalid date range,
                an interval outside ``[1, end - start]`` days or invalid ratios.
        """
        amount = validate_positive(amount, "amount")
        today = today or date.today()
        start = to_date(start_date, "start date")
        end = today if end_date is None else to_date(end_date, "end date")
        start, end = validate_date_range(start, end, today=today)
        span = (end - start).days
        if isinstance(interval_days, bool) or int(interval_days) != interval_days or interval_days < 1:
            raise ValidationError(f"Interval days must be a positive integer, got {interval_days!r}")
        if interval_days > span:
            raise ValidationError(
                "Interval days cannot be more than the difference between start date and end date."
            )
        weights = validate_ratios(stock_ratio, tolerance)
        return cls(amount=amount, stock_ratio=weights, start_date=start, end_date=end,
                   interval_days=int(interval_days))


class StepStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass
class StepResult:
    """Outcome of one scheduled investment step."""
    scheduled: date
    cursor: date
    attempts: int = 0
    status: StepStatus = StepStatus.PENDING
    errors: List[str] = field(default_factory=list)

    @property
    def executed_on(self) -> Optional[date]:
        return self.cursor if self.status is StepStatus.SUCCEEDED else None


class DollarCostAveragingStrategy(BaseStrategy):
    """Split a fixed amount across tickers by weight on each investment date."""

    def invest(self, amount: float, ratios: Mapping[str, float], day) -> None:
        """Invest ``amount`` on ``day`` into tickers already held at that date.

        Raises:
            ValidationError: For a future date, a non-positive amount, invalid
                ratios or a ticker absent from the composition at ``day``.
            PriceDataError: If any ticker has no usable close on ``day``; no
                buy is issued in that case.
        """
        day = validate_not_future(day)
        amount = validate_positive(amount, "amount")
        weights = validate_ratios(ratios, self.config.ratio_tolerance)
        composition = self.ledger.composition_at(day)
        for ticker in weights:
            if ticker not in composition:
                raise ValidationError(
                    f"Trying to invest in a non-existing stock {ticker}. "
                    "Please buy the stock first or try investing on another date."
                )
        self._buy_weighted(amount, weights, day)

    def _buy_weighted(self, amount: float, weights: Mapping[str, float], day: date) -> Dict[str, float]:
        closes: Dict[str, float] = {}
        for ticker in weights:
            close = self.provider.closing_price(ticker, day)
            if not close:
                raise PriceDataError(
                    f"Cannot invest in {ticker} on {day.isoformat()}, please try again on another date."
                )
            closes[ticker] = close

        bought: Dict[str, float] = {}
        for ticker, ratio in weights.items():
            if ratio == 0:
                continue
            shares = amount * ratio / closes[ticker]
            self.ledger.buy(ticker, shares, day)
            bought[ticker] = shares
        return bought

    def run_step(self, invocation: StrategyInvocation, scheduled: date) -> StepResult:
        """Attempt one scheduled investment, moving forward a day per failure."""
        step = StepResult(scheduled=scheduled, cursor=scheduled)
        while step.status is StepStatus.PENDING:
            step.attempts += 1
            try:
                self._buy_weighted(invocation.amount, invocation.stock_ratio, step.cursor)
            except (ValueError, PriceDataError) as e:
                step.errors.append(str(e))
                LOGGER.debug(f"Investment attempt {step.attempts} on {step.cursor} failed: {e}",
                             extra={'portfolio': self.ledger.name, 'reason': str(e)})
                step.cursor += timedelta(days=1)
                if step.attempts >= self.config.max_retries:
                    step.status = StepStatus.EXHAUSTED
            else:
                step.status = StepStatus.SUCCEEDED
        return step

    def invest_periodically(self, amount: float, ratios: Mapping[str, float],
                            start, end=None, interval_days: int = 30) -> List[StepResult]:
        """Invest ``amount`` every ``interval_days`` from ``start`` until ``end`` (default today).

        Tickers do not need to be held beforehand. Steps that cannot be
        executed are skipped and reported with ``StepStatus.EXHAUSTED``.

        Returns:
            One ``StepResult`` per scheduled step, in order.
        """
        invocation = StrategyInvocation.create(
            amount, ratios, start, end, interval_days, tolerance=self.config.ratio_tolerance,
        )
        results: List[StepResult] = []
        cursor = invocation.start_date
        while cursor <= invocation.end_date:
            step = self.run_step(invocation, cursor)
            results.append(step)
            if step.status is StepStatus.EXHAUSTED:
                LOGGER.warning(
                    f"Skipped investment scheduled for {step.scheduled} after {step.attempts} attempts",
                    extra={'portfolio': self.ledger.name, 'reason': step.errors[-1]},
                )
            cursor = step.cursor + timedelta(days=invocation.interval_days)

        done = sum(1 for r in results if r.status is StepStatus.SUCCEEDED)
        LOGGER.info(f"Periodic investment into '{self.ledger.name}': {done}/{len(results)} steps executed",
                    extra={'portfolio': self.ledger.name, 'event_type': 'strategy'})
        return results
