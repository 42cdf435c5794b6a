"""Strategy registry to look up investment strategies by name."""
from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .base import BaseStrategy
from .dollar_cost import DollarCostAveragingStrategy

REGISTRY: dict[str, Callable[..., BaseStrategy]] = {
    "dollarcostaveraging": DollarCostAveragingStrategy,
}


def make_strategy(name: str, *args: Any, **params: Any) -> BaseStrategy:
    """Factory function to create strategy instances by name.

    Args:
        name: Strategy name, matched case-insensitively (e.g. ``dollarCostAveraging``)
        *args: Positional constructor arguments (ledger, provider)
        **params: Strategy-specific keyword arguments

    Returns:
        Strategy instance

    Raises:
        KeyError: If strategy name is not found in registry
    """
    key = name.replace("_", "").replace("-", "").lower()
    if key not in REGISTRY:
        raise KeyError(f"Unknown strategy: {name}. Available: {list(REGISTRY.keys())}")
    return REGISTRY[key](*args, **params)
