"""Scorecard for a strategy evaluated over discrete return windows."""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Sequence

import numpy as np

from ..config import AnalyzerConfig
from ..errors import ValidationError
from ..numeric import financial, vector
from ..numeric.vector import EPSILON
from ..types import WindowResult

logger = logging.getLogger(__name__)

GRADE_THRESHOLDS = [(90.0, "A+"), (85.0, "A"), (80.0, "B+"), (75.0, "B"), (70.0, "C+"), (65.0, "C"), (60.0, "D")]
RISK_THRESHOLDS = [(10.0, "Low"), (20.0, "Medium"), (35.0, "High")]

COMPOSITE_WEIGHTS = {
    "sharpe": 0.25,
    "win_rate": 0.20,
    "profit_factor": 0.20,
    "drawdown": 0.25,
    "consistency": 0.10,
}


@dataclass(frozen=True, slots=True)
class SuccessMetrics:
    total_return: float
    annualized_return: float
    sharpe_ratio: float
    sortino_ratio: float
    calmar_ratio: float
    win_rate: float
    profit_factor: float
    average_win: float
    average_loss: float
    largest_win: float
    largest_loss: float
    max_drawdown: float
    volatility: float
    downside_deviation: float
    value_at_risk_95: float
    consistency: float
    stability_index: float
    kelly_percentage: float
    composite_score: float
    risk_adjusted_score: float
    strategy_grade: str
    risk_level: str
    recommendation: str

    @staticmethod
    def neutral() -> "SuccessMetrics":
        return SuccessMetrics(
            total_return=0.0,
            annualized_return=0.0,
            sharpe_ratio=0.0,
            sortino_ratio=0.0,
            calmar_ratio=0.0,
            win_rate=0.0,
            profit_factor=0.0,
            average_win=0.0,
            average_loss=0.0,
            largest_win=0.0,
            largest_loss=0.0,
            max_drawdown=0.0,
            volatility=0.0,
            downside_deviation=0.0,
            value_at_risk_95=0.0,
            consistency=0.0,
            stability_index=0.0,
            kelly_percentage=0.0,
            composite_score=0.0,
            risk_adjusted_score=0.0,
            strategy_grade="F",
            risk_level="Low",
            recommendation="No windows to analyze",
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def _validate(windows: Sequence[WindowResult]) -> None:
    for idx, window in enumerate(windows):
        if not math.isfinite(window.return_):
            raise ValidationError(f"window {idx}: return must be finite, got {window.return_!r}")
        if not math.isfinite(window.duration) or window.duration < 0:
            raise ValidationError(f"window {idx}: duration must be a non-negative number, got {window.duration!r}")


def total_return(period_returns: np.ndarray) -> float:
    return float(np.prod(1.0 + period_returns)) - 1.0 if period_returns.size else 0.0


def annualized_return(total: float, total_days: float, days_per_year: float = 365.25) -> float:
    years = total_days / days_per_year
    if years <= 0:
        return 0.0
    if total <= -1.0:
        return -1.0
    exponent = math.log1p(total) / years
    if exponent > 700.0:
        return math.inf
    return math.expm1(exponent)


def consistency(period_returns: np.ndarray, rolling_period: int = 12) -> float:
    """Percentage of rolling-period return sums that are positive."""
    if period_returns.size < rolling_period:
        return 0.0
    sums = vector.rolling_sum(period_returns, rolling_period)
    return float(np.count_nonzero(sums > 0)) / sums.size * 100.0


def stability_index(period_returns: np.ndarray) -> float:
    avg = vector.mean(period_returns)
    std = vector.standard_deviation(period_returns)
    if std <= EPSILON and avg >= 0:
        return 100.0
    if avg <= 0:
        return 0.0
    return _clamp(avg / std * 10.0, 0.0, 100.0)


def kelly_percentage(win_rate: float, average_win: float, average_loss: float) -> float:
    """Kelly fraction from the win rate and average win/loss magnitudes."""
    loss = abs(average_loss)
    if average_win <= 0 or loss <= 0:
        return 0.0
    return _clamp((win_rate * average_win - (1.0 - win_rate) * loss) / average_win, 0.0, 1.0)


def composite_score(
    sharpe: float, win_rate: float, profit_factor: float, max_drawdown: float, consistency_pct: float
) -> float:
    normalized = {
        "sharpe": _clamp((sharpe + 1.0) * 25.0, 0.0, 100.0),
        "win_rate": _clamp(win_rate * 100.0, 0.0, 100.0),
        "profit_factor": _clamp((profit_factor - 1.0) * 25.0, 0.0, 100.0),
        "drawdown": max(0.0, 100.0 - max_drawdown * 200.0),
        "consistency": _clamp(consistency_pct, 0.0, 100.0),
    }
    return sum(normalized[name] * weight for name, weight in COMPOSITE_WEIGHTS.items())


def risk_adjusted_score(annualized: float, max_drawdown: float, sharpe: float, sortino: float) -> float:
    return_score = _clamp(annualized * 200.0, 0.0, 100.0)
    sharpe_score = _clamp(sharpe * 25.0, 0.0, 100.0)
    sortino_score = _clamp(sortino * 20.0, 0.0, 100.0)
    return max(0.0, (return_score + sharpe_score + sortino_score) / 3.0 - max_drawdown * 100.0)


def grade_strategy(score: float) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def assess_risk_level(max_drawdown: float, volatility: float) -> str:
    risk_score = (max_drawdown * 0.6 + volatility * 0.4) * 100.0
    for threshold, level in RISK_THRESHOLDS:
        if risk_score < threshold:
            return level
    return "Very High"


def build_recommendation(
    grade: str,
    risk_level: str,
    win_rate: float,
    profit_factor: float,
    sharpe: float,
    kelly: float,
    config: AnalyzerConfig | None = None,
) -> str:
    cfg = config or AnalyzerConfig()
    notes: list[str] = []
    if grade in ("A+", "A"):
        notes.append("Excellent strategy - ready for live trading")
    elif grade in ("B+", "B"):
        notes.append("Good strategy - consider optimization")
    elif grade in ("C+", "C"):
        notes.append("Marginal strategy - needs improvement")
    else:
        notes.append("Poor strategy - requires significant changes")

    if risk_level == "Very High":
        notes.append("HIGH RISK: Reduce position size significantly")
    elif risk_level == "High":
        notes.append("Use conservative position sizing")

    if win_rate < cfg.min_win_rate:
        notes.append("Low win rate - improve entry signals")
    if profit_factor < cfg.min_profit_factor:
        notes.append("Poor profit factor - optimize exit strategy")
    if sharpe < cfg.min_sharpe:
        notes.append("Low risk-adjusted returns - reduce volatility")
    if kelly > 0:
        notes.append(f"Optimal position size: {kelly * 100:.1f}%")
    return ". ".join(notes)


def analyze_window_results(
    windows: Sequence[WindowResult],
    config: AnalyzerConfig | None = None,
) -> SuccessMetrics:
    """
    Compute the full scorecard for one backtest run.

    Windows are expected in chronological order for annualization and
    drawdown to be meaningful. An empty input yields ``SuccessMetrics.neutral()``.
    """
    cfg = (config or AnalyzerConfig()).validate()
    if not windows:
        return SuccessMetrics.neutral()
    _validate(windows)

    rets = np.array([w.return_ for w in windows], dtype=float)
    gains = rets[rets > 0]
    losses = rets[rets < 0]

    total = total_return(rets)
    total_days = math.fsum(float(w.duration) for w in windows)
    annualized = annualized_return(total, total_days, cfg.days_per_year)

    sharpe = financial.sharpe_ratio(rets)
    sortino = financial.sortino_ratio(rets, cfg.target_return)
    max_dd = financial.max_drawdown(rets)
    calmar = annualized / (max_dd if max_dd > 0 else 1.0)

    win_rate = gains.size / rets.size
    total_gains = vector.kahan_sum(gains)
    total_losses = abs(vector.kahan_sum(losses))
    profit_factor = total_gains / total_losses if total_losses > 0 else math.inf

    average_win = total_gains / gains.size if gains.size else 0.0
    average_loss = -total_losses / losses.size if losses.size else 0.0
    largest_win = float(gains.max()) if gains.size else 0.0
    largest_loss = float(losses.min()) if losses.size else 0.0

    volatility = vector.standard_deviation(rets)
    below_target = rets[rets < cfg.target_return]
    downside_dev = vector.standard_deviation(below_target) if below_target.size else 0.0
    var_95 = vector.percentile(rets, cfg.var_percentile)

    consistency_pct = consistency(rets, cfg.rolling_period)
    stability = stability_index(rets)
    kelly = kelly_percentage(win_rate, average_win, average_loss)

    composite = composite_score(sharpe, win_rate, profit_factor, max_dd, consistency_pct)
    risk_adjusted = risk_adjusted_score(annualized, max_dd, sharpe, sortino)
    grade = grade_strategy(composite)
    risk_level = assess_risk_level(max_dd, volatility)

    logger.debug(
        "Scored %d windows: total_return=%.4f composite=%.1f grade=%s", len(windows), total, composite, grade
    )
    return SuccessMetrics(
        total_return=total,
        annualized_return=annualized,
        sharpe_ratio=sharpe,
        sortino_ratio=sortino,
        calmar_ratio=calmar,
        win_rate=win_rate,
        profit_factor=profit_factor,
        average_win=average_win,
        average_loss=average_loss,
        largest_win=largest_win,
        largest_loss=largest_loss,
        max_drawdown=max_dd,
        volatility=volatility,
        downside_deviation=downside_dev,
        value_at_risk_95=var_95,
        consistency=consistency_pct,
        stability_index=stability,
        kelly_percentage=kelly,
        composite_score=composite,
        risk_adjusted_score=risk_adjusted,
        strategy_grade=grade,
        risk_level=risk_level,
        recommendation=build_recommendation(grade, risk_level, win_rate, profit_factor, sharpe, kelly, cfg),
    )
