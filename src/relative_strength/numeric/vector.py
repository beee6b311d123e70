"""Numeric vector kernel.

Pure functions over one-dimensional float64 buffers. Every function coerces
its inputs with ``np.asarray(..., dtype=float)`` and returns a new array or a
Python float; inputs are never mutated.

Reductions that accumulate many terms use Kahan compensated summation, and
``welford`` provides the single-pass online alternative. The two paths agree
to within floating point tolerance on long vectors of mixed magnitude.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

import numpy as np

from ..errors import DivisionByZero, InvalidArgument, LengthMismatch

EPSILON = 1e-15

ArrayLike = Sequence[float] | np.ndarray


def _pair(a: ArrayLike, b: ArrayLike) -> tuple[np.ndarray, np.ndarray]:
    left = np.asarray(a, dtype=float)
    right = np.asarray(b, dtype=float)
    if left.shape[0] != right.shape[0]:
        raise LengthMismatch(f"Array length mismatch: {left.shape[0]} != {right.shape[0]}")
    return left, right


# Element-wise arithmetic


def add(a: ArrayLike, b: ArrayLike) -> np.ndarray:
    left, right = _pair(a, b)
    with np.errstate(over="ignore", invalid="ignore"):
        result = left + right
    overflow = ~np.isfinite(result) & np.isfinite(left) & np.isfinite(right)
    if overflow.any():
        result[overflow] = np.copysign(sys.float_info.max, result[overflow])
    return result


def subtract(a: ArrayLike, b: ArrayLike) -> np.ndarray:
    left, right = _pair(a, b)
    return left - right


def multiply(a: ArrayLike, b: ArrayLike) -> np.ndarray:
    left, right = _pair(a, b)
    return left * right


def divide(a: ArrayLike, b: ArrayLike) -> np.ndarray:
    """Element-wise division; divisors with ``|b| <= EPSILON`` yield 0."""
    left, right = _pair(a, b)
    result = np.zeros_like(left)
    safe = np.abs(right) > EPSILON
    np.divide(left, right, out=result, where=safe)
    return result


def scalar_add(values: ArrayLike, scalar: float) -> np.ndarray:
    return np.asarray(values, dtype=float) + float(scalar)


def scalar_multiply(values: ArrayLike, scalar: float) -> np.ndarray:
    return np.asarray(values, dtype=float) * float(scalar)


def scalar_divide(values: ArrayLike, scalar: float) -> np.ndarray:
    if abs(scalar) <= EPSILON:
        raise DivisionByZero("Division by zero or near-zero scalar")
    return np.asarray(values, dtype=float) * (1.0 / float(scalar))


def absolute(values: ArrayLike) -> np.ndarray:
    return np.abs(np.asarray(values, dtype=float))


def sqrt(values: ArrayLike) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    return np.sqrt(np.where(arr >= 0, arr, 0.0))


def square(values: ArrayLike) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    return arr * arr


def log(values: ArrayLike) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    result = np.full_like(arr, -np.inf)
    np.log(arr, out=result, where=arr > 0)
    return result


# Reductions


def kahan_sum(values: ArrayLike) -> float:
    """Compensated summation; bounds error growth independently of length."""
    total = 0.0
    compensation = 0.0
    for value in np.asarray(values, dtype=float).tolist():
        y = value - compensation
        t = total + y
        compensation = (t - total) - y
        total = t
    return total


def mean(values: ArrayLike) -> float:
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    return kahan_sum(arr) / arr.size


def variance(values: ArrayLike, ddof: int = 0) -> float:
    """Two-pass variance; ``ddof=0`` is the population divisor, ``ddof=1`` the sample one."""
    arr = np.asarray(values, dtype=float)
    if arr.size <= ddof:
        return 0.0
    centered = arr - mean(arr)
    return kahan_sum(centered * centered) / (arr.size - ddof)


def standard_deviation(values: ArrayLike, ddof: int = 0) -> float:
    return math.sqrt(variance(values, ddof))


@dataclass(frozen=True, slots=True)
class WelfordStats:
    count: int
    mean: float
    variance: float
    standard_deviation: float

    @property
    def total(self) -> float:
        return self.mean * self.count


def welford(values: ArrayLike, ddof: int = 1) -> WelfordStats:
    """Single-pass online mean/variance (Welford)."""
    count = 0
    running_mean = 0.0
    m2 = 0.0
    for value in np.asarray(values, dtype=float).tolist():
        count += 1
        delta = value - running_mean
        running_mean += delta / count
        m2 += delta * (value - running_mean)
    var = m2 / (count - ddof) if count > ddof else 0.0
    return WelfordStats(count=count, mean=running_mean, variance=var, standard_deviation=math.sqrt(var))


def correlation(a: ArrayLike, b: ArrayLike) -> float:
    """Pearson correlation; 0 for mismatched, empty or zero-variance inputs."""
    left = np.asarray(a, dtype=float)
    right = np.asarray(b, dtype=float)
    if left.shape[0] != right.shape[0] or left.size == 0:
        return 0.0
    da = left - mean(left)
    db = right - mean(right)
    numerator = kahan_sum(da * db)
    denominator = math.sqrt(kahan_sum(da * da) * kahan_sum(db * db))
    if denominator <= EPSILON:
        return 0.0
    return numerator / denominator


def minimum(values: ArrayLike) -> float:
    arr = np.asarray(values, dtype=float)
    return float(arr.min()) if arr.size else math.inf


def maximum(values: ArrayLike) -> float:
    arr = np.asarray(values, dtype=float)
    return float(arr.max()) if arr.size else -math.inf


def argmin(values: ArrayLike) -> int:
    arr = np.asarray(values, dtype=float)
    return int(arr.argmin()) if arr.size else -1


def argmax(values: ArrayLike) -> int:
    arr = np.asarray(values, dtype=float)
    return int(arr.argmax()) if arr.size else -1


def percentile(values: ArrayLike, p: float) -> float:
    """Linear interpolation between order statistics of a sorted copy."""
    if not 0.0 <= p <= 100.0:
        raise InvalidArgument(f"Percentile must be between 0 and 100, got {p}")
    ordered = np.sort(np.asarray(values, dtype=float))
    if ordered.size == 0:
        return 0.0
    index = (p / 100.0) * (ordered.size - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    if lower == upper:
        return float(ordered[lower])
    weight = index - lower
    return float(ordered[lower] * (1.0 - weight) + ordered[upper] * weight)


def median(values: ArrayLike) -> float:
    return percentile(values, 50.0)


def quantile(values: ArrayLike, q: float) -> float:
    return percentile(values, q * 100.0)


# Array manipulation


def take(values: ArrayLike, start: int, end: int | None = None) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    stop = arr.size if end is None else end
    if stop - start <= 0:
        return np.empty(0, dtype=float)
    return arr[start:stop].copy()


def concatenate(arrays: Iterable[ArrayLike]) -> np.ndarray:
    parts = [np.asarray(arr, dtype=float) for arr in arrays]
    if not parts:
        return np.empty(0, dtype=float)
    return np.concatenate(parts)


def reverse(values: ArrayLike) -> np.ndarray:
    return np.asarray(values, dtype=float)[::-1].copy()


def select(values: ArrayLike, predicate: Callable[[float], bool]) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    return np.array([value for value in arr.tolist() if predicate(value)], dtype=float)


def where(condition: ArrayLike, if_true: ArrayLike, if_false: ArrayLike) -> np.ndarray:
    cond, yes = _pair(condition, if_true)
    _, no = _pair(condition, if_false)
    return np.where(np.abs(cond) > EPSILON, yes, no)


# Rolling windows


def _check_window(size: int, window_size: int) -> None:
    if window_size < 1 or window_size > size:
        raise InvalidArgument(f"Invalid window size: {window_size} (length {size})")


def rolling_sum(values: ArrayLike, window_size: int) -> np.ndarray:
    """O(n) sliding-window sums; output length is ``len(values) - window_size + 1``."""
    arr = np.asarray(values, dtype=float)
    _check_window(arr.size, window_size)
    data = arr.tolist()
    out = np.empty(arr.size - window_size + 1, dtype=float)
    window = sum(data[:window_size])
    out[0] = window
    for i in range(1, out.size):
        window += data[i + window_size - 1] - data[i - 1]
        out[i] = window
    return out


def rolling_mean(values: ArrayLike, window_size: int) -> np.ndarray:
    return rolling_sum(values, window_size) / window_size


# Predicates


def is_finite(values: ArrayLike) -> bool:
    return bool(np.all(np.isfinite(np.asarray(values, dtype=float))))


def has_nan(values: ArrayLike) -> bool:
    return bool(np.any(np.isnan(np.asarray(values, dtype=float))))


def replace_nan(values: ArrayLike, replacement: float = 0.0) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    return np.where(np.isnan(arr), replacement, arr)


def equal(a: ArrayLike, b: ArrayLike, tolerance: float = EPSILON) -> bool:
    left = np.asarray(a, dtype=float)
    right = np.asarray(b, dtype=float)
    if left.shape[0] != right.shape[0]:
        return False
    return bool(np.all(np.abs(left - right) <= tolerance))
