"""Tests for cost basis, total value and the portfolio performance chart."""
from datetime import date

import pytest

from openfolio.data.provider import FramePriceProvider, PriceDataError, PriceProvider
from openfolio.portfolio.valuation import cost_basis, performance_chart, total_value, value_series
from openfolio.utils.validation import ValidationError


def test_cost_basis_sums_increases_at_close(ledger, flat_provider):
    ledger.buy("AAPL", 10, date(2023, 3, 1))
    ledger.buy("AAPL", 5, date(2023, 3, 10))

    assert cost_basis(ledger, flat_provider, date(2023, 2, 1)) == 0.0
    assert cost_basis(ledger, flat_provider, date(2023, 3, 1)) == pytest.approx(1500.0)
    assert cost_basis(ledger, flat_provider, date(2023, 3, 10)) == pytest.approx(2250.0)


def test_cost_basis_ignores_decreases(ledger, flat_provider):
    ledger.buy("AAPL", 10, date(2023, 3, 1))
    ledger.buy("MSFT", 2, date(2023, 3, 10))
    ledger.buy("AAPL", 1, date(2023, 3, 15))
    ledger.sell("MSFT", 1, date(2023, 3, 15))

    assert ledger.holdings_at(date(2023, 3, 15))["MSFT"] == pytest.approx(1.0)
    assert cost_basis(ledger, flat_provider, date(2023, 3, 31)) == pytest.approx(1500.0 + 500.0 + 150.0)


def test_cost_basis_is_monotonic(ledger, flat_provider):
    ledger.buy("AAPL", 10, date(2023, 3, 1))
    ledger.buy("MSFT", 3, date(2023, 3, 8))
    ledger.buy("AAPL", 1, date(2023, 3, 15))

    days = [date(2023, 2, 28), date(2023, 3, 1), date(2023, 3, 8), date(2023, 3, 15), date(2023, 4, 1)]
    values = [cost_basis(ledger, flat_provider, d) for d in days]
    assert values == sorted(values)


def test_cost_basis_skips_days_without_price(ledger, flat_provider):
    # 2023-03-04 is a Saturday
    ledger.buy("AAPL", 10, date(2023, 3, 4))
    assert cost_basis(ledger, flat_provider, date(2023, 3, 10)) == 0.0


def test_total_value(ledger, flat_provider):
    ledger.buy("AAPL", 10, date(2023, 3, 1))
    ledger.buy("MSFT", 5, date(2023, 3, 8))

    assert total_value(ledger, flat_provider, date(2023, 2, 1)) == 0.0
    assert total_value(ledger, flat_provider, date(2023, 3, 1)) == pytest.approx(1500.0)
    assert total_value(ledger, flat_provider, date(2023, 3, 10)) == pytest.approx(2750.0)


def test_total_value_without_prices_raises(ledger, flat_provider):
    ledger.buy("AAPL", 10, date(2023, 3, 1))
    with pytest.raises(PriceDataError):
        total_value(ledger, flat_provider, date(2023, 3, 11))


def test_total_value_treats_zero_close_as_missing(ledger):
    provider = FramePriceProvider.from_quotes({"AAPL": {date(2023, 3, 1): (1.0, 0.0)}})
    ledger.buy("AAPL", 10, date(2023, 3, 1))
    with pytest.raises(PriceDataError):
        total_value(ledger, provider, date(2023, 3, 1))


def test_value_series_carries_weekend_values_forward(ledger, flat_provider):
    ledger.buy("AAPL", 10, date(2023, 3, 1))
    points = value_series(ledger, flat_provider, date(2023, 2, 28), date(2023, 3, 6))

    values = dict(points)
    assert values[date(2023, 2, 28)] == 0.0
    assert values[date(2023, 3, 4)] == pytest.approx(1500.0)
    assert values[date(2023, 3, 5)] == pytest.approx(1500.0)
    assert len(points) == 7


def test_performance_chart(ledger, flat_provider):
    ledger.buy("AAPL", 10, date(2023, 3, 1))
    chart = performance_chart(ledger, flat_provider, date(2023, 3, 1), date(2023, 3, 5))

    lines = chart.splitlines()
    assert lines[0] == "Mar 01 2023: " + "*" * 50
    assert len(lines) == 6
    assert lines[-1] == "Scale: * = 30 USD."


def test_performance_chart_requires_end_after_start(ledger, flat_provider):
    ledger.buy("AAPL", 10, date(2023, 3, 1))
    with pytest.raises(ValidationError, match="End date should be after the start date"):
        performance_chart(ledger, flat_provider, date(2023, 3, 1), date(2023, 3, 1))


class UnreachableProvider(PriceProvider):
    """Provider whose remote source is down."""

    def history(self, ticker):
        raise PriceDataError("network down")


def test_cost_basis_survives_failing_provider(ledger):
    ledger.buy("AAPL", 10, date(2023, 3, 1))
    assert cost_basis(ledger, UnreachableProvider(), date(2023, 3, 2)) == 0.0


def test_cost_basis_skips_only_failing_tickers(ledger, flat_provider):
    class PartialProvider(PriceProvider):
        def history(self, ticker):
            if ticker == "MSFT":
                raise PriceDataError("network down")
            return flat_provider.history(ticker)

    ledger.buy("AAPL", 10, date(2023, 3, 1))
    ledger.buy("MSFT", 4, date(2023, 3, 1))
    assert cost_basis(ledger, PartialProvider(), date(2023, 3, 2)) == pytest.approx(1500.0)
