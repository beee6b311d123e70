"""Numeric vector kernel and financial helpers."""

from . import financial, sliding_window, vector
from .financial import max_drawdown, returns, sharpe_ratio, sortino_ratio
from .sliding_window import (
    SlidingWindowResult,
    WindowMetrics,
    moving_averages,
    rolling_standard_deviation,
    rolling_zscores,
    window_metrics,
)
from .vector import EPSILON, WelfordStats, kahan_sum, percentile, welford

__all__ = [
    "EPSILON",
    "SlidingWindowResult",
    "WelfordStats",
    "WindowMetrics",
    "financial",
    "kahan_sum",
    "max_drawdown",
    "moving_averages",
    "percentile",
    "returns",
    "rolling_standard_deviation",
    "rolling_zscores",
    "sharpe_ratio",
    "sliding_window",
    "sortino_ratio",
    "vector",
    "welford",
    "window_metrics",
]
