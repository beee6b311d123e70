"""Sliding window indicators.

Each indicator walks the data once, updating the window mean and sum of
squared deviations as one value enters and one leaves (Welford), so the cost
is O(n) regardless of window size and large, low-variance series keep their
precision.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..errors import InvalidArgument
from .vector import ArrayLike

PRECISION = 1e-10


@dataclass(frozen=True, slots=True)
class WindowStatistics:
    mean: float
    standard_deviation: float
    min: float
    max: float
    count: int


@dataclass(frozen=True, slots=True)
class SlidingWindowResult:
    values: np.ndarray
    timestamps: np.ndarray
    statistics: WindowStatistics


@dataclass(frozen=True, slots=True)
class BollingerBands:
    upper: np.ndarray
    middle: np.ndarray
    lower: np.ndarray
    timestamps: np.ndarray


@dataclass(frozen=True, slots=True)
class WindowMetrics:
    zscores: SlidingWindowResult
    moving_averages: SlidingWindowResult
    volatility: SlidingWindowResult
    bollinger: BollingerBands


def _prepare(
    values: ArrayLike, window: int, timestamps: Sequence[float] | np.ndarray | None
) -> tuple[np.ndarray, np.ndarray]:
    data = np.asarray(values, dtype=float)
    if window < 1:
        raise InvalidArgument(f"Window size must be at least 1, got {window}")
    if data.size < window:
        raise InvalidArgument(f"Data length ({data.size}) must be >= window size ({window})")
    if timestamps is None:
        stamps = np.arange(data.size, dtype=float)
    else:
        stamps = np.asarray(timestamps, dtype=float)
        if stamps.size != data.size:
            raise InvalidArgument("timestamps must align with values")
    return data, stamps


def _summarize(values: np.ndarray) -> WindowStatistics:
    count = int(values.size)
    avg = float(values.mean())
    return WindowStatistics(
        mean=avg,
        standard_deviation=float(values.std()),
        min=float(values.min()),
        max=float(values.max()),
        count=count,
    )


def _rolling_moments(data: np.ndarray, window: int, ddof: int = 0) -> tuple[np.ndarray, np.ndarray]:
    """Rolling mean and standard deviation, sliding one value in and one out per step."""
    values = data.tolist()
    count = len(values) - window + 1
    means = np.empty(count, dtype=float)
    stds = np.empty(count, dtype=float)
    divisor = window - ddof

    avg = 0.0
    m2 = 0.0
    for n, value in enumerate(values[:window], start=1):
        delta = value - avg
        avg += delta / n
        m2 += delta * (value - avg)
    means[0] = avg
    stds[0] = math.sqrt(max(m2, 0.0) / divisor)

    for idx in range(1, count):
        incoming = values[idx + window - 1]
        outgoing = values[idx - 1]
        previous = avg
        avg += (incoming - outgoing) / window
        m2 += (incoming - outgoing) * (incoming - avg + outgoing - previous)
        means[idx] = avg
        stds[idx] = math.sqrt(max(m2, 0.0) / divisor)
    return means, stds


def rolling_zscores(
    values: ArrayLike,
    window: int,
    timestamps: Sequence[float] | np.ndarray | None = None,
    precision: int = 6,
) -> SlidingWindowResult:
    data, stamps = _prepare(values, window, timestamps)
    means, stds = _rolling_moments(data, window)
    current = data[window - 1 :]
    z = np.zeros_like(current)
    np.divide(current - means, stds, out=z, where=stds > PRECISION)
    z = np.round(z, precision)
    return SlidingWindowResult(values=z, timestamps=stamps[window - 1 :].copy(), statistics=_summarize(z))


def moving_averages(
    values: ArrayLike,
    window: int,
    timestamps: Sequence[float] | np.ndarray | None = None,
) -> SlidingWindowResult:
    data, stamps = _prepare(values, window, timestamps)
    means, _ = _rolling_moments(data, window)
    return SlidingWindowResult(values=means, timestamps=stamps[window - 1 :].copy(), statistics=_summarize(means))


def rolling_standard_deviation(
    values: ArrayLike,
    window: int,
    timestamps: Sequence[float] | np.ndarray | None = None,
) -> SlidingWindowResult:
    """Sample standard deviation of each full window."""
    data, stamps = _prepare(values, window, timestamps)
    if window < 2:
        raise InvalidArgument("Rolling standard deviation needs a window of at least 2")
    _, out = _rolling_moments(data, window, ddof=1)
    return SlidingWindowResult(values=out, timestamps=stamps[window - 1 :].copy(), statistics=_summarize(out))


def window_metrics(
    values: ArrayLike,
    window: int,
    timestamps: Sequence[float] | np.ndarray | None = None,
    band_width: float = 2.0,
) -> WindowMetrics:
    """Z-scores, moving averages, volatility and Bollinger bands in one pass."""
    data, stamps = _prepare(values, window, timestamps)
    means, stds = _rolling_moments(data, window)
    current = data[window - 1 :]
    z = np.zeros_like(current)
    np.divide(current - means, stds, out=z, where=stds > PRECISION)
    out_stamps = stamps[window - 1 :].copy()
    return WindowMetrics(
        zscores=SlidingWindowResult(values=z, timestamps=out_stamps, statistics=_summarize(z)),
        moving_averages=SlidingWindowResult(values=means, timestamps=out_stamps, statistics=_summarize(means)),
        volatility=SlidingWindowResult(values=stds, timestamps=out_stamps, statistics=_summarize(stds)),
        bollinger=BollingerBands(
            upper=means + band_width * stds,
            middle=means.copy(),
            lower=means - band_width * stds,
            timestamps=out_stamps,
        ),
    )
