"""Ticker analytics: trends, moving averages and crossovers."""
from .stock_analysis import Signal, StockAnalysis, Trend, crossover_signals

__all__ = ["Signal", "StockAnalysis", "Trend", "crossover_signals"]
