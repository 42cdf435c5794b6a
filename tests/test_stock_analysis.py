"""Tests for trend, moving-average and crossover analytics."""
from datetime import date, timedelta

import pytest

from openfolio.analysis.stock_analysis import Signal, StockAnalysis, Trend, crossover_signals
from openfolio.config.schemas import AnalyticsConfig
from openfolio.data.provider import InsufficientHistoryError, PriceDataError
from openfolio.utils.validation import ValidationError


@pytest.fixture
def analysis(crossover_provider):
    return StockAnalysis("xyz", crossover_provider, AnalyticsConfig(crossover_window=3))


def test_moving_average_uses_closes_before_date(analysis, trading_days):
    assert analysis.moving_average(trading_days[3], 3) == pytest.approx(10.0)
    assert analysis.moving_average(trading_days[5], 3) == pytest.approx(28.0 / 3)


def test_moving_average_insufficient_history(analysis, trading_days):
    with pytest.raises(InsufficientHistoryError):
        analysis.moving_average(trading_days[1], 3)


def test_moving_average_validation(analysis, trading_days):
    with pytest.raises(ValidationError):
        analysis.moving_average(trading_days[5], 0)
    with pytest.raises(ValidationError):
        analysis.moving_average(date.today() + timedelta(days=1), 3)


def test_stock_trend_single_day(analysis, trading_days):
    assert analysis.stock_trend(trading_days[5]) is Trend.GAIN
    assert analysis.stock_trend(trading_days[4]) is Trend.LOSE
    assert analysis.stock_trend(trading_days[0]) is Trend.NEITHER


def test_stock_trend_range(analysis, trading_days):
    assert analysis.stock_trend(trading_days[4], trading_days[6]) == "Gain"
    assert analysis.stock_trend(trading_days[0], trading_days[8]) is Trend.LOSE


def test_stock_trend_rejects_bad_input(analysis, trading_days):
    with pytest.raises(ValidationError):
        analysis.stock_trend(trading_days[5], trading_days[1])
    with pytest.raises(ValidationError):
        analysis.stock_trend(None)
    # 2023-01-07 is a Saturday
    with pytest.raises(PriceDataError):
        analysis.stock_trend(date(2023, 1, 7))


def test_single_crossover_days(analysis, trading_days):
    signals = analysis.single_crossover_days(trading_days[3], trading_days[9])

    assert signals == {trading_days[5]: Signal.BUY, trading_days[8]: Signal.SELL}
    assert list(signals) == sorted(signals)
    assert signals[trading_days[5]] == "Buy"


def test_single_crossover_needs_two_trading_days(analysis, trading_days):
    assert analysis.single_crossover_days(trading_days[5], trading_days[5]) == {}
    # weekend only
    assert analysis.single_crossover_days(date(2023, 1, 7), date(2023, 1, 8)) == {}


def test_single_crossover_without_history_raises(analysis, trading_days):
    with pytest.raises(InsufficientHistoryError):
        analysis.single_crossover_days(trading_days[0], trading_days[5])


def test_dual_crossover_days(analysis, trading_days):
    signals = analysis.dual_crossover_days(trading_days[4], trading_days[9], 1, 3)
    assert signals == {trading_days[6]: Signal.BUY}


@pytest.mark.parametrize("x,y", [(3, 3), (5, 2), (0, 3)])
def test_dual_crossover_window_validation(analysis, trading_days, x, y):
    with pytest.raises(ValidationError):
        analysis.dual_crossover_days(trading_days[4], trading_days[9], x, y)


def test_crossover_signals_ignore_touching_zero():
    days = [date(2023, 1, d) for d in range(2, 7)]
    signals = crossover_signals(days, [1.0, 2.0, 2.0, 3.0, 1.0], [2.0, 2.0, 1.0, 1.0, 2.0])
    assert signals == {days[4]: Signal.SELL}


def test_stock_performance_chart(analysis, trading_days):
    chart = analysis.stock_performance_chart(trading_days[0], trading_days[3])
    lines = chart.splitlines()

    assert lines[0] == "Jan 02 2023: " + "*" * 10
    assert len(lines) == 5
    assert lines[-1] == "Scale: * = 1 USD."
