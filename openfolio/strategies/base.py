"""Base classes for investment strategies."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Mapping, Optional

from ..config.schemas import StrategyConfig
from ..data.provider import PriceProvider

if TYPE_CHECKING:
    from ..portfolio.ledger import Ledger


class BaseStrategy(ABC):
    """Abstract investment strategy bound to one portfolio ledger.

    Ratios map tickers to the share of ``amount`` invested in each; they must
    be non-negative and sum to 1.
    """

    def __init__(self, ledger: Ledger, provider: PriceProvider, config: Optional[StrategyConfig] = None):
        self.ledger = ledger
        self.provider = provider
        self.config = config or StrategyConfig()

    @abstractmethod
    def invest(self, amount: float, ratios: Mapping[str, float], day) -> None:
        """Invest ``amount`` once on ``day``, split according to ``ratios``."""
        raise NotImplementedError

    @abstractmethod
    def invest_periodically(self, amount: float, ratios: Mapping[str, float],
                            start, end=None, interval_days: int = 30):
        """Invest ``amount`` every ``interval_days`` between ``start`` and ``end``."""
        raise NotImplementedError
