"""Strategy success metrics package."""

from .success_metrics import SuccessMetrics, analyze_window_results
from .windows import score_runs, windows_from_equity_curve

__all__ = ["SuccessMetrics", "analyze_window_results", "score_runs", "windows_from_equity_curve"]
