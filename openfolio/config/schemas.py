"""Pydantic schemas for configuration validation."""
from __future__ import annotations
from typing import Literal
from pydantic import BaseModel, Field


class DataConfig(BaseModel):
    """Price data source configuration."""
    source: Literal["yfinance", "memory"] = Field(default="yfinance", description="Price provider backend")
    lookback_start: str = Field(default="2000-01-01", description="Earliest date requested from the source (ISO)")
    cache_enabled: bool = Field(default=True, description="Persist downloaded price history in the SQLite cache")
    cache_path: str = Field(default="data_cache/prices.db", description="SQLite cache file")
    cache_ttl: int = Field(default=86400, gt=0, description="Cache time-to-live in seconds")


class LedgerConfig(BaseModel):
    """Temporal ledger settings."""
    share_decimals: int = Field(default=3, ge=0, le=10, description="Decimals used when surfacing share counts")
    share_epsilon: float = Field(default=1e-9, ge=0, description="Tolerance when deciding a depletion is complete")


class ChartConfig(BaseModel):
    """Text bar chart rendering."""
    max_lines: int = Field(default=30, ge=1, description="Maximum number of sampled rows")
    max_stars: int = Field(default=50, ge=1, description="Target width of the widest bar")
    date_format: str = Field(default="%b %d %Y", description="strftime pattern for row labels")
    currency: str = Field(default="USD", description="Currency shown in the scale footer")


class AnalyticsConfig(BaseModel):
    """Trend and crossover analytics."""
    crossover_window: int = Field(default=30, ge=1, description="Moving-average window for single crossovers")


class StrategyConfig(BaseModel):
    """Investment strategy executor."""
    max_retries: int = Field(default=7, ge=1, description="Attempts per interval step before skipping it")
    ratio_tolerance: float = Field(default=1e-6, gt=0, description="Allowed deviation of the ratio sum from 1")
    default_strategy: str = Field(default="dollarCostAveraging", description="Strategy used when none is named")


class LoggingConfig(BaseModel):
    """Logging output. The log directory comes from ``$OPENFOLIO_LOG_DIR``."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="Root log level")


class Config(BaseModel):
    """Main configuration schema."""
    data: DataConfig = Field(default_factory=DataConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    chart: ChartConfig = Field(default_factory=ChartConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    strategy: StrategyConfig = Field(default_factory=StrategyConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
