"""Thread-safe facade enforcing per-symbol exclusion and a normalization barrier."""

from __future__ import annotations

import threading
from contextlib import ExitStack, contextmanager
from datetime import datetime
from typing import Iterator

from ..types import AssetRatingState, Comparison, VolumeMetrics
from .engine import GameOutcome, GlickoEngine


class SynchronizedGlickoEngine:
    """
    Wrap a ``GlickoEngine`` for use from several threads.

    Games lock only their two symbols (acquired in sorted order), so games on
    disjoint symbols proceed in parallel. ``normalize_ratings`` is a full
    barrier: it stops new games from starting, waits for in-flight games to
    finish, re-centers the universe, then releases waiting games.
    """

    def __init__(self, engine: GlickoEngine | None = None) -> None:
        self.engine = engine or GlickoEngine()
        self._registry_lock = threading.Lock()
        self._symbol_locks: dict[str, threading.Lock] = {}
        self._barrier = threading.Condition()
        self._in_flight = 0
        self._normalizing = False

    def _lock_for(self, symbol: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._symbol_locks.get(symbol)
            if lock is None:
                lock = threading.Lock()
                self._symbol_locks[symbol] = lock
            return lock

    @contextmanager
    def _shared(self, *symbols: str) -> Iterator[None]:
        with self._barrier:
            while self._normalizing:
                self._barrier.wait()
            self._in_flight += 1
        try:
            with ExitStack() as stack:
                for symbol in sorted(set(symbols)):
                    stack.enter_context(self._lock_for(symbol))
                yield
        finally:
            with self._barrier:
                self._in_flight -= 1
                self._barrier.notify_all()

    def ensure_coin_exists(self, symbol: str, timestamp: datetime) -> AssetRatingState:
        with self._shared(symbol):
            return self.engine.ensure_coin_exists(symbol, timestamp).copy()

    def get_coin_state(self, symbol: str) -> AssetRatingState | None:
        with self._shared(symbol):
            state = self.engine.get_coin_state(symbol)
            return state.copy() if state is not None else None

    def process_game(
        self,
        asset_a: str,
        asset_b: str,
        price_change: float,
        timestamp: datetime,
        volume: VolumeMetrics | None = None,
    ) -> GameOutcome:
        with self._shared(asset_a, asset_b):
            return self.engine.process_game(asset_a, asset_b, price_change, timestamp, volume)

    def process_comparison(self, comparison: Comparison) -> GameOutcome:
        with self._shared(comparison.asset_a, comparison.asset_b):
            return self.engine.process_comparison(comparison)

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        with self._barrier:
            while self._normalizing:
                self._barrier.wait()
            self._normalizing = True
            while self._in_flight:
                self._barrier.wait()
        try:
            yield
        finally:
            with self._barrier:
                self._normalizing = False
                self._barrier.notify_all()

    def normalize_ratings(self) -> float:
        with self._exclusive():
            return self.engine.normalize_ratings()

    def snapshot(self) -> dict[str, AssetRatingState]:
        with self._exclusive():
            return self.engine.snapshot()
