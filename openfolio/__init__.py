"""OpenFolio: point-in-time portfolio ledgers, valuation and investment strategies."""

__version__ = "0.1.0"
