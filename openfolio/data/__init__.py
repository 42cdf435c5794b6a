"""Daily price data: provider interface, yfinance source and cache."""
from .provider import (
    PriceProvider,
    FramePriceProvider,
    PriceQuote,
    PriceDataError,
    InsufficientHistoryError,
)
from .loader import YFinancePriceProvider, make_provider

__all__ = [
    "PriceProvider",
    "FramePriceProvider",
    "PriceQuote",
    "PriceDataError",
    "InsufficientHistoryError",
    "YFinancePriceProvider",
    "make_provider",
]
