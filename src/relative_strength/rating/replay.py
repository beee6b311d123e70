"""Chronological replay of pair klines into rating games."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

import numpy as np
import pandas as pd

from ..types import VolumeMetrics
from .engine import GlickoEngine

logger = logging.getLogger(__name__)

REQUIRED_KLINE_COLUMNS = ["symbol", "open_time", "open", "close"]


@dataclass(slots=True)
class ReplaySummary:
    timestamps: int = 0
    games: int = 0
    skipped: int = 0
    normalizations: int = 0


def split_pair(symbol: str, base_assets: Iterable[str]) -> tuple[str, str] | None:
    """Split a pair symbol such as ``ETHBTC`` into ``("ETH", "BTC")`` using known assets."""
    assets = sorted(set(base_assets), key=len, reverse=True)
    for base in assets:
        if not symbol.startswith(base):
            continue
        quote = symbol[len(base) :]
        if quote in assets and quote != base:
            return base, quote
    return None


def validate_klines(klines: pd.DataFrame) -> None:
    missing = [col for col in REQUIRED_KLINE_COLUMNS if col not in klines.columns]
    if missing:
        raise ValueError(f"klines: missing required columns {missing}")


def replay_klines(
    engine: GlickoEngine,
    klines: pd.DataFrame,
    base_assets: Iterable[str],
    normalize_every: int | None = 12,
) -> ReplaySummary:
    """
    Play every kline as a game of base versus quote asset.

    klines required columns:
      symbol, open_time, open, close
    Optional:
      volume, taker_buy_volume

    Timestamps are processed in ascending order. Ratings are re-centered after
    every `normalize_every` timestamps and once more at the end.
    """
    validate_klines(klines)
    summary = ReplaySummary()
    if klines.empty:
        return summary

    assets = list(base_assets)
    frame = klines.copy()
    frame["open_time"] = pd.to_datetime(frame["open_time"], utc=True)
    frame = frame.sort_values(["open_time", "symbol"], kind="stable")
    has_volume = {"volume", "taker_buy_volume"}.issubset(frame.columns)

    pairs = {symbol: split_pair(symbol, assets) for symbol in frame["symbol"].unique()}
    for symbol, pair in pairs.items():
        if pair is None:
            logger.warning("Skipping %s: cannot split into two known assets", symbol)

    for open_time, group in frame.groupby("open_time", sort=True):
        timestamp = open_time.to_pydatetime()
        for row in group.itertuples(index=False):
            pair = pairs[row.symbol]
            open_price = float(row.open)
            close_price = float(row.close)
            if pair is None or not np.isfinite(open_price) or not np.isfinite(close_price) or open_price <= 0:
                summary.skipped += 1
                continue
            base, quote = pair
            engine.ensure_coin_exists(base, timestamp)
            engine.ensure_coin_exists(quote, timestamp)
            volume = None
            if has_volume and pd.notna(row.volume) and pd.notna(row.taker_buy_volume):
                volume = VolumeMetrics(volume=float(row.volume), taker_buy_volume=float(row.taker_buy_volume))
            engine.process_game(base, quote, (close_price - open_price) / open_price, timestamp, volume)
            summary.games += 1

        summary.timestamps += 1
        if normalize_every and summary.timestamps % normalize_every == 0:
            engine.normalize_ratings()
            summary.normalizations += 1

    engine.normalize_ratings()
    summary.normalizations += 1
    logger.info(
        "Replayed %d games over %d timestamps (%d skipped)", summary.games, summary.timestamps, summary.skipped
    )
    return summary
