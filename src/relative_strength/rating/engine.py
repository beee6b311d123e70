"""Pairwise Glicko-2 rating engine for a universe of assets."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

import pandas as pd

from ..config import RatingConfig
from ..errors import ValidationError
from ..types import AssetRatingState, Comparison, VolumeMetrics
from . import glicko_math

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GameOutcome:
    score: float
    state_a: AssetRatingState
    state_b: AssetRatingState


class GlickoEngine:
    """
    Maintain one rating state per asset and apply pairwise games.

    Each game maps a relative price move of ``asset_a`` against ``asset_b``
    to a continuous score and updates both sides against the other's
    pre-game state. The engine holds no locks; callers serialize games that
    share a symbol and quiesce all games around ``normalize_ratings``
    (see ``SynchronizedGlickoEngine``).
    """

    def __init__(
        self,
        config: RatingConfig | None = None,
        initial_states: Iterable[AssetRatingState] | None = None,
    ) -> None:
        self.config = (config or RatingConfig()).validate()
        self._states: dict[str, AssetRatingState] = {}
        for state in initial_states or ():
            self._states[state.symbol] = state.copy()

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._states

    def ensure_coin_exists(self, symbol: str, timestamp: datetime) -> AssetRatingState:
        state = self._states.get(symbol)
        if state is None:
            state = AssetRatingState(
                symbol=symbol,
                rating=self.config.initial_rating,
                rating_deviation=self.config.initial_rd,
                volatility=self.config.initial_volatility,
                last_updated=timestamp,
            )
            self._states[symbol] = state
            logger.debug("Registered %s at rating %.1f", symbol, state.rating)
        return state

    def get_coin_state(self, symbol: str) -> AssetRatingState | None:
        return self._states.get(symbol)

    def symbols(self) -> list[str]:
        return sorted(self._states)

    def states(self) -> list[AssetRatingState]:
        return [self._states[symbol] for symbol in self.symbols()]

    def snapshot(self) -> dict[str, AssetRatingState]:
        """Independent copies of every state, keyed by symbol."""
        return {symbol: state.copy() for symbol, state in self._states.items()}

    def outcome_score(self, price_change: float, volume: VolumeMetrics | None = None) -> float:
        """Map a relative price move (and optional taker volume) to a score in [0, 1]."""
        cfg = self.config
        if abs(price_change) < cfg.draw_threshold:
            price_score = 0.5
        else:
            price_score = min(1.0, max(0.0, 0.5 + price_change * cfg.score_scale))
        if volume is None or volume.volume <= 0 or cfg.volume_weight == 0:
            return price_score
        weight = cfg.volume_weight
        return price_score * (1.0 - weight) + volume.taker_buy_ratio * weight

    def _require(self, symbol: str) -> AssetRatingState:
        state = self._states.get(symbol)
        if state is None:
            raise ValidationError(f"Unknown symbol '{symbol}'; call ensure_coin_exists first")
        return state

    def _updated(self, state: AssetRatingState, opponent: AssetRatingState, score: float) -> glicko_math.RatingUpdate:
        cfg = self.config
        return glicko_math.update_rating(
            rating=state.rating,
            rd=state.rating_deviation,
            sigma=state.volatility,
            opponent_rating=opponent.rating,
            opponent_rd=opponent.rating_deviation,
            score=score,
            min_volatility=cfg.min_volatility,
            max_volatility=cfg.max_volatility,
            volatility_method=cfg.volatility_method,
            tau=cfg.tau,
        )

    def _apply(self, state: AssetRatingState, update: glicko_math.RatingUpdate, timestamp: datetime) -> None:
        cfg = self.config
        state.rating = update.rating
        state.rating_deviation = min(cfg.max_rd, max(cfg.min_rd, update.rating_deviation))
        state.volatility = min(cfg.max_volatility, max(cfg.min_volatility, update.volatility))
        state.last_updated = timestamp
        state.matches_played += 1

    def process_game(
        self,
        asset_a: str,
        asset_b: str,
        price_change: float,
        timestamp: datetime,
        volume: VolumeMetrics | None = None,
    ) -> GameOutcome:
        if asset_a == asset_b:
            raise ValidationError(f"An asset cannot play itself: '{asset_a}'")
        if not math.isfinite(price_change):
            raise ValidationError(f"price_change must be finite, got {price_change!r} for {asset_a}/{asset_b}")
        if volume is not None:
            for name in ("volume", "taker_buy_volume"):
                value = getattr(volume, name)
                if not math.isfinite(value) or value < 0:
                    raise ValidationError(
                        f"{name} must be a non-negative finite number, got {value!r} for {asset_a}/{asset_b}"
                    )
        state_a = self._require(asset_a)
        state_b = self._require(asset_b)

        score_a = self.outcome_score(price_change, volume)
        update_a = self._updated(state_a, state_b, score_a)
        update_b = self._updated(state_b, state_a, 1.0 - score_a)
        self._apply(state_a, update_a, timestamp)
        self._apply(state_b, update_b, timestamp)
        return GameOutcome(score=score_a, state_a=state_a.copy(), state_b=state_b.copy())

    def process_comparison(self, comparison: Comparison) -> GameOutcome:
        return self.process_game(
            comparison.asset_a,
            comparison.asset_b,
            comparison.price_change,
            comparison.timestamp,
            comparison.volume,
        )

    def process_games(self, comparisons: Iterable[Comparison], normalize_every: int | None = None) -> int:
        """Apply a batch of comparisons in order; optionally re-center every N games."""
        played = 0
        for comparison in comparisons:
            self.process_comparison(comparison)
            played += 1
            if normalize_every and played % normalize_every == 0:
                self.normalize_ratings()
        return played

    def apply_decay(self, symbol: str) -> None:
        """Inflate RD by one rating period of volatility for an inactive asset."""
        state = self._states.get(symbol)
        if state is None:
            return
        mu, phi = glicko_math.to_glicko2_scale(state.rating, state.rating_deviation)
        _, rd = glicko_math.from_glicko2_scale(mu, math.sqrt(phi * phi + state.volatility * state.volatility))
        state.rating_deviation = min(rd, self.config.max_rd)

    def normalize_ratings(self) -> float:
        """Shift every rating so the universe mean equals the initial rating; returns the shift."""
        if not self._states:
            return 0.0
        ratings = [state.rating for state in self._states.values()]
        adjustment = self.config.initial_rating - math.fsum(ratings) / len(ratings)
        for state in self._states.values():
            state.rating += adjustment
        logger.debug("Normalized %d ratings by %.6f", len(ratings), adjustment)
        return adjustment

    def leaderboard(self) -> pd.DataFrame:
        columns = ["symbol", "rating", "rating_deviation", "volatility", "matches_played", "last_updated"]
        if not self._states:
            return pd.DataFrame(columns=columns)
        frame = pd.DataFrame([state.to_dict() for state in self._states.values()])
        return frame.loc[:, columns].sort_values("rating", ascending=False).reset_index(drop=True)
