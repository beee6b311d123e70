from __future__ import annotations

import math
from datetime import datetime, timedelta

import numpy as np
import pytest

from relative_strength.analytics import SuccessMetrics, analyze_window_results
from relative_strength.analytics import success_metrics as sm
from relative_strength.errors import ValidationError
from relative_strength.types import WindowResult


def _windows(returns: list[float], duration: float = 30.0, trades: int = 10) -> list[WindowResult]:
    start = datetime(2024, 1, 1)
    out = []
    for i, value in enumerate(returns):
        begin = start + timedelta(days=duration * i)
        out.append(
            WindowResult(
                return_=value,
                duration=duration,
                start_date=begin,
                end_date=begin + timedelta(days=duration),
                trades=trades,
            )
        )
    return out


def test_empty_input_yields_neutral_scorecard() -> None:
    metrics = analyze_window_results([])
    assert metrics.total_return == 0.0
    assert metrics == SuccessMetrics.neutral()
    assert metrics.strategy_grade == "F"


def test_single_window_scorecard() -> None:
    metrics = analyze_window_results(_windows([0.1], duration=60.0, trades=25))
    assert metrics.total_return == pytest.approx(0.1, abs=1e-5)
    assert metrics.win_rate == 1.0
    assert metrics.profit_factor == math.inf
    assert metrics.average_loss == 0.0
    assert metrics.kelly_percentage == 0.0
    assert metrics.annualized_return == pytest.approx(1.1 ** (365.25 / 60.0) - 1.0)
    assert metrics.max_drawdown == 0.0
    assert metrics.stability_index == 100.0


def test_mixed_windows_scorecard() -> None:
    metrics = analyze_window_results(_windows([0.1, -0.05, 0.15, -0.03, 0.08]))
    assert metrics.win_rate == pytest.approx(0.6)
    assert metrics.total_return > 0
    assert metrics.average_win == pytest.approx(0.11)
    assert metrics.average_loss == pytest.approx(-0.04)
    assert metrics.largest_win == pytest.approx(0.15)
    assert metrics.largest_loss == pytest.approx(-0.05)
    assert metrics.profit_factor == pytest.approx(0.33 / 0.08)
    assert metrics.max_drawdown == pytest.approx(0.05)
    assert metrics.calmar_ratio == pytest.approx(metrics.annualized_return / 0.05)
    assert metrics.kelly_percentage == pytest.approx((0.6 * 0.11 - 0.4 * 0.04) / 0.11)
    assert metrics.consistency == 0.0
    assert 0.0 <= metrics.composite_score <= 100.0
    assert "Optimal position size: 45.5%" in metrics.recommendation


def test_flat_run_keeps_infinite_profit_factor() -> None:
    metrics = analyze_window_results(_windows([0.0, 0.0, 0.0]))
    assert metrics.profit_factor == math.inf
    assert metrics.win_rate == 0.0
    assert metrics.average_loss == 0.0
    # sharpe 25 * 0.25, profit factor 100 * 0.20, drawdown 100 * 0.25
    assert metrics.composite_score == pytest.approx(51.25)
    assert "Poor profit factor" not in metrics.recommendation


def test_total_return_compounds() -> None:
    metrics = analyze_window_results(_windows([0.1, -0.1]))
    assert metrics.total_return == pytest.approx(1.1 * 0.9 - 1.0)


def test_zero_duration_guards_annualization() -> None:
    metrics = analyze_window_results(_windows([0.05, 0.02], duration=0.0))
    assert metrics.annualized_return == 0.0


def test_consistency_uses_rolling_twelve_window_sums() -> None:
    returns = [0.02] * 12 + [-0.5] + [0.02] * 11
    metrics = analyze_window_results(_windows(returns))
    # 13 rolling sums; the first is positive, every later one contains the -0.5 window.
    assert metrics.consistency == pytest.approx(100.0 / 13.0)
    steady = analyze_window_results(_windows([0.01] * 24))
    assert steady.consistency == 100.0
    assert steady.stability_index == 100.0


def test_stability_index_rules() -> None:
    assert sm.stability_index(np.array([0.01, 0.01])) == 100.0
    assert sm.stability_index(np.array([-0.02, 0.01])) == 0.0
    assert sm.stability_index(np.array([0.02, 0.04])) == pytest.approx(30.0)
    assert sm.stability_index(np.array([-0.01, -0.01])) == 0.0


def test_kelly_percentage_edge_cases() -> None:
    assert sm.kelly_percentage(0.6, 0.0, -0.04) == 0.0
    assert sm.kelly_percentage(0.6, 0.11, 0.0) == 0.0
    assert sm.kelly_percentage(0.1, 0.01, -0.5) == 0.0
    assert sm.kelly_percentage(1.0, 0.1, -0.1) == 1.0


def test_grade_and_risk_thresholds() -> None:
    assert sm.grade_strategy(95.0) == "A+"
    assert sm.grade_strategy(90.0) == "A+"
    assert sm.grade_strategy(89.99) == "A"
    assert sm.grade_strategy(80.0) == "B+"
    assert sm.grade_strategy(70.0) == "C+"
    assert sm.grade_strategy(60.0) == "D"
    assert sm.grade_strategy(59.99) == "F"
    assert sm.assess_risk_level(0.05, 0.05) == "Low"
    assert sm.assess_risk_level(0.2, 0.1) == "Medium"
    assert sm.assess_risk_level(0.3, 0.3) == "High"
    assert sm.assess_risk_level(0.5, 0.5) == "Very High"


def test_composite_score_normalization() -> None:
    perfect = sm.composite_score(sharpe=3.0, win_rate=1.0, profit_factor=math.inf, max_drawdown=0.0, consistency_pct=100.0)
    assert perfect == pytest.approx(100.0)
    worst = sm.composite_score(sharpe=-2.0, win_rate=0.0, profit_factor=0.0, max_drawdown=0.9, consistency_pct=0.0)
    assert worst == 0.0


def test_risk_adjusted_score_subtracts_drawdown() -> None:
    assert sm.risk_adjusted_score(0.5, 0.0, 4.0, 5.0) == pytest.approx(100.0)
    assert sm.risk_adjusted_score(0.5, 0.2, 4.0, 5.0) == pytest.approx(80.0)
    assert sm.risk_adjusted_score(0.0, 0.5, 0.0, 0.0) == 0.0


def test_recommendation_flags_weaknesses() -> None:
    text = sm.build_recommendation("F", "Very High", win_rate=0.3, profit_factor=0.9, sharpe=0.1, kelly=0.0)
    assert text.startswith("Poor strategy")
    assert "HIGH RISK" in text
    assert "Low win rate" in text
    assert "Poor profit factor" in text
    assert "Low risk-adjusted returns" in text
    assert "Optimal position size" not in text
    good = sm.build_recommendation("A", "Low", win_rate=0.7, profit_factor=2.0, sharpe=1.5, kelly=0.25)
    assert good == "Excellent strategy - ready for live trading. Optimal position size: 25.0%"


def test_non_finite_returns_are_rejected() -> None:
    with pytest.raises(ValidationError):
        analyze_window_results(_windows([0.1, float("nan")]))
    with pytest.raises(ValidationError):
        analyze_window_results(_windows([0.1], duration=-1.0))


def test_scorecard_serializes_to_plain_dict() -> None:
    payload = analyze_window_results(_windows([0.03, -0.01, 0.02])).to_dict()
    assert payload["strategy_grade"] in {"A+", "A", "B+", "B", "C+", "C", "D", "F"}
    assert payload["risk_level"] in {"Low", "Medium", "High", "Very High"}
    assert set(payload) == set(SuccessMetrics.__dataclass_fields__)
