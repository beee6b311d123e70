"""Build evaluation windows from equity curves and score many runs at once."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Mapping, Sequence

import pandas as pd

from ..config import AnalyzerConfig
from ..types import WindowResult
from .success_metrics import SuccessMetrics, analyze_window_results

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400.0


def windows_from_equity_curve(
    equity_curve: pd.DataFrame,
    freq: str = "ME",
    trades: pd.DataFrame | None = None,
) -> list[WindowResult]:
    """
    Split an equity curve into calendar windows.

    equity_curve required columns:
      event_time, equity
    trades optional column:
      exit_time (one row per closed trade)

    Each window's return compounds from the last equity of the previous window
    (or the first observation for the first window) to its own last equity.
    """
    missing = [col for col in ("event_time", "equity") if col not in equity_curve.columns]
    if missing:
        raise ValueError(f"equity_curve: missing required columns {missing}")
    if equity_curve.empty:
        return []

    curve = equity_curve.copy()
    curve["event_time"] = pd.to_datetime(curve["event_time"], utc=True)
    curve = curve.sort_values("event_time").set_index("event_time")
    equity = curve["equity"].astype(float)

    times = pd.Series(equity.index, index=equity.index)
    closes = equity.resample(freq).last().dropna()
    starts = times.resample(freq).min().reindex(closes.index)
    ends = times.resample(freq).max().reindex(closes.index)
    opens = closes.shift(1)
    opens.iloc[0] = float(equity.iloc[0])

    trade_counts = pd.Series(0, index=closes.index, dtype=int)
    if trades is not None and not trades.empty and "exit_time" in trades.columns:
        exit_times = pd.DatetimeIndex(pd.to_datetime(trades["exit_time"], utc=True))
        counts = pd.Series(1, index=exit_times).sort_index().resample(freq).sum()
        trade_counts = counts.reindex(closes.index, fill_value=0).astype(int)

    windows: list[WindowResult] = []
    previous_end: pd.Timestamp | None = None
    for label in closes.index:
        start = previous_end if previous_end is not None else starts[label]
        end = ends[label]
        open_equity = float(opens[label])
        period_return = float(closes[label]) / open_equity - 1.0 if open_equity > 0 else 0.0
        windows.append(
            WindowResult(
                return_=period_return,
                duration=(end - start).total_seconds() / SECONDS_PER_DAY,
                start_date=start.to_pydatetime(),
                end_date=end.to_pydatetime(),
                trades=int(trade_counts[label]),
            )
        )
        previous_end = end
    return windows


def score_runs(
    runs: Mapping[str, Sequence[WindowResult]],
    config: AnalyzerConfig | None = None,
    max_workers: int | None = None,
) -> pd.DataFrame:
    """Score independent backtest runs in parallel, ranked by composite score."""
    if not runs:
        return pd.DataFrame(columns=["run_id", *SuccessMetrics.__dataclass_fields__])

    run_ids = list(runs)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        results = list(executor.map(lambda run_id: analyze_window_results(runs[run_id], config), run_ids))

    rows = [{"run_id": run_id, **metrics.to_dict()} for run_id, metrics in zip(run_ids, results)]
    table = pd.DataFrame(rows).sort_values("composite_score", ascending=False, kind="stable")
    logger.info("Scored %d runs; best=%s", len(rows), table["run_id"].iloc[0])
    return table.reset_index(drop=True)
