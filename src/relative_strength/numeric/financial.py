"""Return-series helpers layered on the vector kernel."""

from __future__ import annotations

import math

import numpy as np

from ..errors import InvalidArgument
from . import vector
from .vector import EPSILON, ArrayLike


def returns(prices: ArrayLike, method: str = "simple") -> np.ndarray:
    """Period returns from a price series; invalid (non-positive) prices yield 0."""
    arr = np.asarray(prices, dtype=float)
    if arr.size <= 1:
        return np.empty(0, dtype=float)
    prev = arr[:-1]
    curr = arr[1:]
    out = np.zeros(arr.size - 1, dtype=float)
    if method == "simple":
        valid = prev > 0
        np.divide(curr - prev, prev, out=out, where=valid)
    elif method == "log":
        valid = (prev > 0) & (curr > 0)
        ratio = np.ones_like(out)
        np.divide(curr, prev, out=ratio, where=valid)
        out = np.log(ratio)
    else:
        raise InvalidArgument(f"Unknown return method '{method}', expected 'simple' or 'log'")
    return out


def sharpe_ratio(period_returns: ArrayLike, risk_free_rate: float = 0.0) -> float:
    excess = vector.scalar_add(period_returns, -risk_free_rate)
    std = vector.standard_deviation(excess)
    if std <= EPSILON:
        return 0.0
    return vector.mean(excess) / std


def downside_deviation(period_returns: ArrayLike, target_return: float = 0.0) -> float:
    """Root mean square of the excess returns that fall below zero."""
    excess = vector.scalar_add(period_returns, -target_return)
    downside = excess[excess < 0]
    if downside.size == 0:
        return 0.0
    return math.sqrt(vector.kahan_sum(downside * downside) / downside.size)


def sortino_ratio(period_returns: ArrayLike, target_return: float = 0.0) -> float:
    excess = vector.scalar_add(period_returns, -target_return)
    dd = downside_deviation(period_returns, target_return)
    if dd <= EPSILON:
        return 0.0
    return vector.mean(excess) / dd


def equity_curve(period_returns: ArrayLike, start: float = 1.0) -> np.ndarray:
    arr = np.asarray(period_returns, dtype=float)
    return np.concatenate(([start], start * np.cumprod(1.0 + arr)))


def max_drawdown(period_returns: ArrayLike) -> float:
    """Largest peak-to-trough decline of the compounded equity curve, as a positive fraction."""
    arr = np.asarray(period_returns, dtype=float)
    if arr.size == 0:
        return 0.0
    curve = equity_curve(arr)
    running_max = np.maximum.accumulate(curve)
    drawdown = np.zeros_like(curve)
    np.divide(running_max - curve, running_max, out=drawdown, where=running_max > 0)
    return float(max(0.0, drawdown.max()))
