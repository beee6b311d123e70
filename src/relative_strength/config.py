"""Engine configuration objects and helpers."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import InvalidArgument

VOLATILITY_METHODS = ("closed_form", "illinois")


@dataclass(slots=True)
class RatingConfig:
    initial_rating: float = 1500.0
    initial_rd: float = 350.0
    initial_volatility: float = 0.06
    min_rd: float = 30.0
    max_rd: float = 350.0
    min_volatility: float = 0.01
    max_volatility: float = 0.2
    score_scale: float = 50.0
    draw_threshold: float = 0.001
    volume_weight: float = 0.3
    volatility_method: str = "closed_form"
    tau: float = 0.5

    def validate(self) -> "RatingConfig":
        if not 0 <= self.min_rd <= self.max_rd:
            raise InvalidArgument(f"RD bounds must satisfy 0 <= min <= max, got [{self.min_rd}, {self.max_rd}]")
        if not 0 < self.min_volatility <= self.max_volatility:
            raise InvalidArgument(
                f"volatility bounds must satisfy 0 < min <= max, got [{self.min_volatility}, {self.max_volatility}]"
            )
        if not self.min_rd <= self.initial_rd <= self.max_rd:
            raise InvalidArgument(f"initial_rd {self.initial_rd} outside RD bounds")
        if not self.min_volatility <= self.initial_volatility <= self.max_volatility:
            raise InvalidArgument(f"initial_volatility {self.initial_volatility} outside volatility bounds")
        if self.score_scale <= 0:
            raise InvalidArgument("score_scale must be positive")
        if self.draw_threshold < 0:
            raise InvalidArgument("draw_threshold cannot be negative")
        if not 0.0 <= self.volume_weight <= 1.0:
            raise InvalidArgument("volume_weight must be between 0 and 1")
        if self.volatility_method not in VOLATILITY_METHODS:
            raise InvalidArgument(
                f"Unknown volatility_method '{self.volatility_method}', expected one of {VOLATILITY_METHODS}"
            )
        if self.tau <= 0:
            raise InvalidArgument("tau must be positive")
        return self


@dataclass(slots=True)
class AnalyzerConfig:
    rolling_period: int = 12
    var_percentile: float = 5.0
    target_return: float = 0.0
    days_per_year: float = 365.25
    min_win_rate: float = 0.40
    min_profit_factor: float = 1.2
    min_sharpe: float = 0.5

    def validate(self) -> "AnalyzerConfig":
        if self.rolling_period < 1:
            raise InvalidArgument("rolling_period must be at least 1")
        if not 0.0 <= self.var_percentile <= 100.0:
            raise InvalidArgument("var_percentile must be between 0 and 100")
        if self.days_per_year <= 0:
            raise InvalidArgument("days_per_year must be positive")
        return self


@dataclass(slots=True)
class EngineConfig:
    rating: RatingConfig = field(default_factory=RatingConfig)
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> "EngineConfig":
        config = EngineConfig(
            rating=RatingConfig(**payload.get("rating", {})),
            analyzer=AnalyzerConfig(**payload.get("analyzer", {})),
        )
        config.rating.validate()
        config.analyzer.validate()
        return config


def load_config(path: str | Path) -> EngineConfig:
    """Load engine configuration from YAML."""
    file_path = Path(path)
    with file_path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    return EngineConfig.from_dict(payload)


def save_config(config: EngineConfig, path: str | Path) -> None:
    """Persist engine configuration to YAML."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with file_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(config.to_dict(), handle, sort_keys=False)
