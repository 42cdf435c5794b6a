"""Input validation helpers shared by the ledger, analytics and strategies."""
from __future__ import annotations
import math
from datetime import date, datetime
from typing import Dict, Mapping, Optional


class ValidationError(ValueError):
    """Raised when parameter validation fails."""
    pass


def to_date(value, name: str = "date") -> date:
    """Coerce a ``date``, ``datetime`` (incl. ``pd.Timestamp``) or ISO string into a ``date``.

    Raises:
        ValidationError: If the value is missing or cannot be parsed.
    """
    if value is None:
        raise ValidationError(f"{name} cannot be None")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as e:
            raise ValidationError(f"{name} must be in yyyy-MM-dd format, got {value!r}") from e
    raise ValidationError(f"{name} must be a date, got {type(value).__name__}")


def validate_positive(value: float, name: str, allow_zero: bool = False) -> float:
    """Validate that a value is positive (optionally allowing zero).

    Args:
        value: Value to validate.
        name: Parameter name for error message.
        allow_zero: If True, allow zero values.

    Returns:
        The validated value.

    Raises:
        ValidationError: If value is not positive.
    """
    try:
        val = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(val):
        raise ValidationError(f"{name} must be a finite number, got {val}")
    if allow_zero:
        if val < 0:
            raise ValidationError(f"{name} must be non-negative, got {val}")
    else:
        if val <= 0:
            raise ValidationError(f"{name} must be positive, got {val}")
    return val


def validate_not_future(value, name: str = "date", today: Optional[date] = None) -> date:
    """Validate that a date is not after today."""
    day = to_date(value, name)
    today = today or date.today()
    if day > today:
        raise ValidationError(f"Invalid {name} {day.isoformat()}: cannot be in the future")
    return day


def validate_date_range(start, end, today: Optional[date] = None,
                        strict: bool = False) -> tuple[date, date]:
    """Validate an ordered date range that does not end in the future.

    Args:
        start: Range start.
        end: Range end.
        today: Reference date for the future check.
        strict: If True, ``end`` must be strictly after ``start``.

    Returns:
        Tuple of (start, end) as dates.
    """
    start_day = to_date(start, "start date")
    end_day = to_date(end, "end date")
    if strict and end_day <= start_day:
        raise ValidationError("End date should be after the start date.")
    if start_day > end_day:
        raise ValidationError("Start date must not be after end date.")
    validate_not_future(end_day, "end date", today=today)
    return start_day, end_day


def validate_window(days: int, name: str = "days") -> int:
    """Validate a moving-average window size."""
    if isinstance(days, bool) or not isinstance(days, (int, float)) or int(days) != days:
        raise ValidationError(f"{name} must be an integer, got {days!r}")
    days = int(days)
    if days <= 0:
        raise ValidationError(f"{name} must be positive, got {days}")
    return days


def validate_ratios(ratios: Mapping[str, float], tolerance: float = 1e-6) -> Dict[str, float]:
    """Validate investment weights: non-empty, each >= 0, summing to 1.

    Returns:
        A new dict with upper-cased tickers and float weights.
    """
    if not ratios:
        raise ValidationError("At least one stock ratio is required.")
    weights: Dict[str, float] = {}
    for ticker, ratio in ratios.items():
        try:
            ratio = float(ratio)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid weighted ratio for stock {ticker}: {ratio!r}") from e
        if not math.isfinite(ratio):
            raise ValidationError(f"Invalid weighted ratio for stock {ticker}: {ratio}")
        if ratio < 0:
            raise ValidationError(
                f"Weighted ratio cannot be negative! Please change the value for stock {ticker}."
            )
        key = str(ticker).strip().upper()
        weights[key] = weights.get(key, 0.0) + ratio
    total = sum(weights.values())
    if not math.isfinite(total) or abs(total - 1.0) > tolerance:
        raise ValidationError(f"The sum of the investment ratios must equal 1, got {total:.6f}.")
    return weights


def normalize_ticker(ticker: str) -> str:
    """Return the canonical (stripped, upper-case) ticker symbol."""
    if not isinstance(ticker, str) or not ticker.strip():
        raise ValidationError(f"Invalid ticker symbol: {ticker!r}")
    return ticker.strip().upper()
