from __future__ import annotations

import math

import numpy as np
import pytest

from relative_strength.errors import InvalidArgument
from relative_strength.numeric import financial, sliding_window


def test_simple_and_log_returns() -> None:
    prices = [100.0, 110.0, 99.0]
    simple = financial.returns(prices)
    assert simple.tolist() == pytest.approx([0.1, -0.1])
    logs = financial.returns(prices, method="log")
    assert logs.tolist() == pytest.approx([math.log(1.1), math.log(0.9)])
    assert financial.returns([100.0]).size == 0


def test_returns_guard_non_positive_prices() -> None:
    assert financial.returns([0.0, 10.0, 11.0]).tolist() == pytest.approx([0.0, 0.1])
    assert financial.returns([10.0, 0.0], method="log").tolist() == [0.0]
    with pytest.raises(InvalidArgument):
        financial.returns([1.0, 2.0], method="geometric")


def test_sharpe_ratio_zero_for_flat_series() -> None:
    assert financial.sharpe_ratio([0.01] * 10) == 0.0
    series = np.array([0.01, -0.02, 0.03, 0.0])
    assert financial.sharpe_ratio(series) == pytest.approx(series.mean() / series.std())


def test_sortino_counts_only_downside_observations() -> None:
    series = np.array([0.04, -0.02, 0.03, -0.04])
    downside = math.sqrt((0.02**2 + 0.04**2) / 2)
    assert financial.downside_deviation(series) == pytest.approx(downside)
    assert financial.sortino_ratio(series) == pytest.approx(series.mean() / downside)
    assert financial.sortino_ratio([0.01, 0.02]) == 0.0


def test_max_drawdown_on_compounded_curve() -> None:
    assert financial.max_drawdown([]) == 0.0
    assert financial.max_drawdown([0.1, 0.2]) == 0.0
    assert financial.max_drawdown([0.1, -0.5, 0.2]) == pytest.approx(0.5)
    assert financial.max_drawdown([-0.1, -0.1]) == pytest.approx(0.19)


def test_moving_averages_and_rolling_std() -> None:
    result = sliding_window.moving_averages([1.0, 2.0, 3.0, 4.0, 5.0], 3)
    assert result.values.tolist() == pytest.approx([2.0, 3.0, 4.0])
    assert result.timestamps.tolist() == [2.0, 3.0, 4.0]
    assert result.statistics.count == 3
    assert result.statistics.mean == pytest.approx(3.0)

    stds = sliding_window.rolling_standard_deviation([1.0, 2.0, 3.0, 4.0], 2)
    assert stds.values.tolist() == pytest.approx([math.sqrt(0.5)] * 3)


def test_zscores_are_zero_for_flat_windows() -> None:
    result = sliding_window.rolling_zscores([5.0] * 6, 3)
    assert result.values.tolist() == [0.0] * 4


def test_window_metrics_bands_bracket_the_mean() -> None:
    rng = np.random.default_rng(5)
    prices = 100 + np.cumsum(rng.normal(0, 1, 60))
    metrics = sliding_window.window_metrics(prices, 20)
    assert metrics.moving_averages.values.size == 41
    assert np.all(metrics.bollinger.upper >= metrics.bollinger.middle)
    assert np.all(metrics.bollinger.lower <= metrics.bollinger.middle)
    assert np.allclose(metrics.moving_averages.values, sliding_window.moving_averages(prices, 20).values)


def test_sliding_windows_reject_short_data() -> None:
    with pytest.raises(InvalidArgument):
        sliding_window.moving_averages([1.0, 2.0], 3)
    with pytest.raises(InvalidArgument):
        sliding_window.rolling_zscores([1.0, 2.0, 3.0], 2, timestamps=[1.0])


def test_rolling_moments_keep_precision_on_large_low_variance_prices() -> None:
    rng = np.random.default_rng(11)
    prices = 1e9 + rng.normal(0.0, 1e-3, 300)
    window = 20
    expected = np.array([prices[i : i + window].std() for i in range(prices.size - window + 1)])

    metrics = sliding_window.window_metrics(prices, window)
    assert np.all(metrics.volatility.values > 0)
    assert np.allclose(metrics.volatility.values, expected, rtol=1e-2)

    sample = sliding_window.rolling_standard_deviation(prices, window)
    assert np.allclose(sample.values, expected * math.sqrt(window / (window - 1)), rtol=1e-2)
