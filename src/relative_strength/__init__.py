"""Relative strength ratings and strategy success metrics."""

from .analytics import SuccessMetrics, analyze_window_results
from .config import AnalyzerConfig, EngineConfig, RatingConfig, load_config, save_config
from .errors import DivisionByZero, InvalidArgument, LengthMismatch, RelativeStrengthError, ValidationError
from .rating import GlickoEngine, SynchronizedGlickoEngine
from .types import AssetRatingState, Comparison, VolumeMetrics, WindowResult

__all__ = [
    "AnalyzerConfig",
    "AssetRatingState",
    "Comparison",
    "DivisionByZero",
    "EngineConfig",
    "GlickoEngine",
    "InvalidArgument",
    "LengthMismatch",
    "RatingConfig",
    "RelativeStrengthError",
    "SuccessMetrics",
    "SynchronizedGlickoEngine",
    "ValidationError",
    "VolumeMetrics",
    "WindowResult",
    "analyze_window_results",
    "load_config",
    "save_config",
]
