"""Core domain datatypes."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import datetime
from typing import Any


@dataclass(slots=True)
class AssetRatingState:
    symbol: str
    rating: float
    rating_deviation: float
    volatility: float
    last_updated: datetime
    matches_played: int = 0

    def copy(self) -> "AssetRatingState":
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class VolumeMetrics:
    volume: float
    taker_buy_volume: float

    @property
    def taker_buy_ratio(self) -> float:
        if self.volume <= 0:
            return 0.5
        return min(1.0, max(0.0, self.taker_buy_volume / self.volume))


@dataclass(frozen=True, slots=True)
class Comparison:
    """One pairwise game: the move of `asset_a` measured against `asset_b`."""

    asset_a: str
    asset_b: str
    price_change: float
    timestamp: datetime
    volume: VolumeMetrics | None = None


@dataclass(frozen=True, slots=True)
class WindowResult:
    """One evaluation period of a backtest run."""

    return_: float
    duration: float
    start_date: datetime
    end_date: datetime
    trades: int
    max_drawdown_in_window: float | None = None
