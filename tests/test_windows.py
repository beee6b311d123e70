from __future__ import annotations

import math

import numpy as np
import pandas as pd
import pytest

from relative_strength.analytics import score_runs, windows_from_equity_curve
from relative_strength.types import WindowResult


def _equity_curve() -> pd.DataFrame:
    times = pd.date_range("2024-01-01", "2024-03-31", freq="D", tz="UTC")
    rng = np.random.default_rng(3)
    equity = 100_000.0 * np.cumprod(1.0 + rng.normal(0.001, 0.01, len(times)))
    return pd.DataFrame({"event_time": times, "equity": equity})


def test_monthly_windows_chain_to_full_curve_return() -> None:
    curve = _equity_curve()
    windows = windows_from_equity_curve(curve, freq="ME")
    assert len(windows) == 3
    compounded = math.prod(1.0 + w.return_ for w in windows)
    assert compounded == pytest.approx(curve["equity"].iloc[-1] / curve["equity"].iloc[0])
    assert windows[0].duration == pytest.approx(30.0)
    assert windows[1].duration == pytest.approx(29.0)
    assert windows[1].start_date == windows[0].end_date
    assert windows[2].end_date == curve["event_time"].iloc[-1].to_pydatetime()


def test_trades_are_counted_by_exit_time() -> None:
    trades = pd.DataFrame(
        {"exit_time": pd.to_datetime(["2024-01-05", "2024-01-20", "2024-03-02"], utc=True)}
    )
    windows = windows_from_equity_curve(_equity_curve(), trades=trades)
    assert [w.trades for w in windows] == [2, 0, 1]


def test_windows_require_columns() -> None:
    with pytest.raises(ValueError, match="missing required columns"):
        windows_from_equity_curve(pd.DataFrame({"equity": [1.0]}))
    assert windows_from_equity_curve(pd.DataFrame(columns=["event_time", "equity"])) == []


def test_score_runs_ranks_by_composite_score() -> None:
    start = pd.Timestamp("2024-01-01", tz="UTC").to_pydatetime()

    def run(returns: list[float]) -> list[WindowResult]:
        return [WindowResult(r, 30.0, start, start, 5) for r in returns]

    table = score_runs(
        {
            "losing": run([-0.05, -0.02, 0.01, -0.04]),
            "winning": run([0.04, 0.03, -0.01, 0.05]),
        },
        max_workers=2,
    )
    assert table["run_id"].tolist() == ["winning", "losing"]
    assert table["composite_score"].is_monotonic_decreasing
    assert {"strategy_grade", "kelly_percentage"} <= set(table.columns)


def test_score_runs_with_no_runs_returns_empty_table() -> None:
    table = score_runs({})
    assert table.empty
    assert "composite_score" in table.columns
