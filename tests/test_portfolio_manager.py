"""Tests for the per-user portfolio manager."""
from datetime import date

import pytest

from openfolio.analysis.stock_analysis import StockAnalysis
from openfolio.config.schemas import Config
from openfolio.portfolio.ledger import InsufficientSharesError
from openfolio.portfolio.manager import PortfolioManager, PortfolioNotFoundError
from openfolio.utils.validation import ValidationError


@pytest.fixture
def manager(flat_provider):
    return PortfolioManager("alice@example.com", flat_provider)


def test_create_and_lookup_is_case_insensitive(manager):
    manager.create_portfolio("Growth")

    assert manager.portfolio_exists("growth")
    assert manager.portfolio_exists("GROWTH")
    assert manager.list_portfolios() == ["Growth"]
    assert manager.get_ledger("gRoWtH").owner == "alice@example.com"


def test_duplicate_portfolio_rejected(manager):
    manager.create_portfolio("Growth")
    with pytest.raises(ValidationError):
        manager.create_portfolio("growth")
    with pytest.raises(ValidationError):
        manager.create_portfolio("   ")


def test_unknown_portfolio(manager):
    with pytest.raises(PortfolioNotFoundError):
        manager.get_ledger("missing")
    with pytest.raises(KeyError):
        manager.buy("missing", "AAPL", 1, "2023-03-01")
    assert not manager.portfolio_exists("missing")


def test_transactions_and_queries(manager):
    manager.create_portfolio("Growth")
    manager.buy("Growth", "aapl", 10, "2023-03-01")
    manager.buy("growth", "MSFT", 4, date(2023, 3, 8))
    manager.sell("Growth", "AAPL", 2, "2023-03-08")

    assert manager.composition_at("Growth", "2023-03-08") == {"AAPL": "8.000", "MSFT": "4.000"}
    assert manager.total_value("Growth", "2023-03-08") == pytest.approx(8 * 150.0 + 4 * 250.0)
    assert manager.cost_basis("Growth", "2023-03-08") == pytest.approx(1500.0 + 1000.0)
    assert manager.performance_chart("Growth", "2023-03-01", "2023-03-03").startswith("Mar 01 2023: ")


def test_failed_sell_surfaces_consistency_error(manager):
    manager.create_portfolio("Growth")
    manager.buy("Growth", "AAPL", 10, "2023-03-01")
    with pytest.raises(InsufficientSharesError):
        manager.sell("Growth", "AAPL", 11, "2023-03-02")
    assert manager.get_ledger("Growth").net_shares["AAPL"] == 10


def test_invest_uses_named_strategy(manager):
    manager.create_portfolio("Growth")
    manager.buy("Growth", "AAPL", 1, "2023-03-01")
    manager.invest("Growth", "dollarCostAveraging", 300, {"AAPL": 1.0}, "2023-03-01")

    assert manager.composition_at("Growth", "2023-03-01") == {"AAPL": "3.000"}


def test_invest_with_unknown_strategy(manager):
    manager.create_portfolio("Growth")
    with pytest.raises(KeyError):
        manager.invest("Growth", "martingale", 300, {"AAPL": 1.0}, "2023-03-01")


def test_invest_periodically_creates_portfolio(manager):
    results = manager.invest_periodically("Pension", None, 1500, {"AAPL": 1.0},
                                          "2023-03-01", "2023-03-15", 7)

    assert len(results) == 3
    assert manager.portfolio_exists("pension")
    assert manager.composition_at("Pension", "2023-03-15") == {"AAPL": "30.000"}


def test_invest_periodically_validation_does_not_create_portfolio(manager):
    with pytest.raises(ValidationError):
        manager.invest_periodically("Pension", None, 1500, {"AAPL": 0.7, "MSFT": 0.7},
                                    "2023-03-01", "2023-03-15", 7)
    assert not manager.portfolio_exists("Pension")


def test_stock_analysis_uses_manager_config(flat_provider):
    config = Config()
    config.analytics.crossover_window = 5
    manager = PortfolioManager("bob@example.com", flat_provider, config)

    analysis = manager.stock_analysis("aapl")
    assert isinstance(analysis, StockAnalysis)
    assert analysis.ticker == "AAPL"
    assert analysis.config.crossover_window == 5
