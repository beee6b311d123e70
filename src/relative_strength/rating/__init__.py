"""Pairwise Glicko-2 rating engine package."""

from .concurrency import SynchronizedGlickoEngine
from .engine import GameOutcome, GlickoEngine
from .glicko_math import GLICKO_SCALE, INITIAL_RATING, RatingUpdate, update_rating
from .replay import ReplaySummary, replay_klines, split_pair

__all__ = [
    "GLICKO_SCALE",
    "GameOutcome",
    "GlickoEngine",
    "INITIAL_RATING",
    "RatingUpdate",
    "ReplaySummary",
    "SynchronizedGlickoEngine",
    "replay_klines",
    "split_pair",
    "update_rating",
]
