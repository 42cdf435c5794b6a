"""Portfolio management for one user context.

``PortfolioManager`` owns the named ledgers of a user, resolves portfolio
names case-insensitively and dispatches transactions, valuation and
strategy runs to them. It replaces process-wide session state: callers
create one manager per user and pass it around explicitly.
"""
from __future__ import annotations
from typing import Dict, List, Mapping, Optional

from .ledger import Depleted, Ledger
from .valuation import cost_basis, performance_chart, total_value
from ..analysis.stock_analysis import StockAnalysis
from ..config.schemas import Config
from ..data.provider import PriceProvider
from ..strategies.dollar_cost import StepResult
from ..strategies.registry import make_strategy
from ..utils.logging import get_logger
from ..utils.validation import ValidationError

LOGGER = get_logger(__name__)


class PortfolioNotFoundError(KeyError):
    """Raised when a portfolio name does not resolve to a ledger."""
    pass


class PortfolioManager:
    """Named portfolios of one user over a shared price provider."""

    def __init__(self, user_id: str, provider: PriceProvider, config: Optional[Config] = None):
        self.user_id = user_id
        self.provider = provider
        self.config = config or Config()
        self._ledgers: Dict[str, Ledger] = {}

    @staticmethod
    def _key(name: str) -> str:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError(f"Invalid portfolio name: {name!r}")
        return name.strip().lower()

    # ------------------------------------------------------------------
    # Portfolio lookup
    # ------------------------------------------------------------------

    def create_portfolio(self, name: str) -> Ledger:
        """Declare a new, empty portfolio.

        Raises:
            ValidationError: If the name is blank or already taken (case-insensitive).
        """
        key = self._key(name)
        if key in self._ledgers:
            raise ValidationError(f"Portfolio '{name}' already exists")
        ledger = Ledger(name=name.strip(), owner=self.user_id, config=self.config.ledger)
        self._ledgers[key] = ledger
        LOGGER.info(f"Created portfolio '{ledger.name}' for {self.user_id}",
                    extra={'portfolio': ledger.name, 'event_type': 'created'})
        return ledger

    def portfolio_exists(self, name: str) -> bool:
        return self._key(name) in self._ledgers

    def list_portfolios(self) -> List[str]:
        return [ledger.name for ledger in self._ledgers.values()]

    def get_ledger(self, name: str) -> Ledger:
        key = self._key(name)
        try:
            return self._ledgers[key]
        except KeyError:
            raise PortfolioNotFoundError(f"Portfolio '{name}' not found") from None

    # ------------------------------------------------------------------
    # Transactions and queries
    # ------------------------------------------------------------------

    def buy(self, name: str, ticker: str, shares: float, day) -> None:
        self.get_ledger(name).buy(ticker, shares, day)

    def sell(self, name: str, ticker: str, shares: float, day) -> Depleted:
        return self.get_ledger(name).sell(ticker, shares, day)

    def composition_at(self, name: str, day) -> Dict[str, str]:
        return self.get_ledger(name).composition_at(day)

    def cost_basis(self, name: str, day) -> float:
        return cost_basis(self.get_ledger(name), self.provider, day)

    def total_value(self, name: str, day) -> float:
        return total_value(self.get_ledger(name), self.provider, day)

    def performance_chart(self, name: str, start, end) -> str:
        return performance_chart(self.get_ledger(name), self.provider, start, end, self.config.chart)

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def invest(self, name: str, strategy_name: Optional[str], amount: float,
               ratios: Mapping[str, float], day) -> None:
        """Run a one-off investment with the named strategy on an existing portfolio."""
        ledger = self.get_ledger(name)
        strategy = make_strategy(strategy_name or self.config.strategy.default_strategy,
                                 ledger, self.provider, self.config.strategy)
        strategy.invest(amount, ratios, day)

    def invest_periodically(self, name: str, strategy_name: Optional[str], amount: float,
                            ratios: Mapping[str, float], start, end=None,
                            interval_days: int = 30) -> List[StepResult]:
        """Run a periodic investment, creating the portfolio first if it does not exist."""
        strategy_name = strategy_name or self.config.strategy.default_strategy
        ledger = self._ledgers.get(self._key(name))
        created = ledger is None
        if created:
            ledger = Ledger(name=name.strip(), owner=self.user_id, config=self.config.ledger)
        strategy = make_strategy(strategy_name, ledger, self.provider, self.config.strategy)
        results = strategy.invest_periodically(amount, ratios, start, end, interval_days)
        if created:
            self._ledgers[self._key(name)] = ledger
            LOGGER.info(f"Created portfolio '{ledger.name}' for {self.user_id} via {strategy_name}",
                        extra={'portfolio': ledger.name, 'event_type': 'created'})
        return results

    def stock_analysis(self, ticker: str) -> StockAnalysis:
        return StockAnalysis(ticker, self.provider, self.config.analytics, self.config.chart)
