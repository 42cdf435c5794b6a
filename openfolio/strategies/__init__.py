"""Investment strategies applied to portfolio ledgers."""
from .base import BaseStrategy
from .dollar_cost import DollarCostAveragingStrategy, StepResult, StepStatus, StrategyInvocation
from .registry import REGISTRY, make_strategy

__all__ = [
    "BaseStrategy",
    "DollarCostAveragingStrategy",
    "StepResult",
    "StepStatus",
    "StrategyInvocation",
    "REGISTRY",
    "make_strategy",
]
