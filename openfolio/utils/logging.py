"""
Structured logging utilities for OpenFolio.

Provides JSON-formatted file logs plus a human-readable console stream.
"""
import logging
import json
import os
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional

# Structured fields copied from ``extra=`` into the JSON payload
EXTRA_FIELDS = (
    'ticker',
    'portfolio',
    'action',
    'shares',
    'price',
    'reason',
    'event_type',
)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        for name in EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def get_logger(name: str, log_dir: Optional[str] = None) -> logging.Logger:
    """
    Get a structured logger with JSON file output and console output.

    Args:
        name: Logger name (usually __name__)
        log_dir: Directory to store log files. Defaults to ``$OPENFOLIO_LOG_DIR``
            or ``logs``.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    level_name = os.getenv("OPENFOLIO_LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    log_dir = log_dir or os.getenv("OPENFOLIO_LOG_DIR", "logs")
    Path(log_dir).mkdir(parents=True, exist_ok=True)

    logfile = os.path.join(log_dir, "openfolio.log")
    json_handler = logging.FileHandler(filename=logfile, encoding='utf-8', delay=True)
    json_handler.setFormatter(JSONFormatter())

    console_handler = logging.StreamHandler()
    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(logging.WARNING)

    logger.addHandler(json_handler)
    logger.addHandler(console_handler)

    return logger


class TransactionLogger:
    """Context manager for logging ledger transactions on one portfolio."""

    def __init__(self, logger: logging.Logger, portfolio: str, ticker: str, action: str):
        self.logger = logger
        self.portfolio = portfolio
        self.ticker = ticker
        self.action = action
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.now(timezone.utc)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.logger.warning(
                f"{self.action} {self.ticker} rejected for portfolio '{self.portfolio}': {exc_val}",
                extra={
                    'ticker': self.ticker,
                    'portfolio': self.portfolio,
                    'action': self.action,
                    'reason': str(exc_val),
                    'event_type': 'rejected',
                },
            )
        return False

    def log_execution(self, shares: float, on: object):
        """Log an accepted transaction."""
        self.logger.info(
            f"Executed: {self.action} {shares} {self.ticker} on {on} in '{self.portfolio}'",
            extra={
                'ticker': self.ticker,
                'portfolio': self.portfolio,
                'action': self.action,
                'shares': shares,
                'event_type': 'execution',
            },
        )


def set_level(level: str, prefix: str = "openfolio") -> None:
    """Apply a log level to every logger already created under ``prefix``."""
    numeric = getattr(logging, str(level).upper(), logging.INFO)
    for name in list(logging.root.manager.loggerDict):
        if name == prefix or name.startswith(prefix + "."):
            logging.getLogger(name).setLevel(numeric)
