"""Portfolio ledgers, valuation and the per-user portfolio manager."""
from .ledger import Depleted, InsufficientAtDate, InsufficientSharesError, Ledger, SellOutcome
from .valuation import cost_basis, performance_chart, total_value, value_series
from .manager import PortfolioManager, PortfolioNotFoundError

__all__ = [
    "Depleted",
    "InsufficientAtDate",
    "InsufficientSharesError",
    "Ledger",
    "SellOutcome",
    "cost_basis",
    "performance_chart",
    "total_value",
    "value_series",
    "PortfolioManager",
    "PortfolioNotFoundError",
]
