"""Glicko-2 primitives adapted for continuous pairwise outcomes.

Reference: Glickman, "Example of the Glicko-2 system". Two departures from the
paper are part of the contract and are used for live/backtest parity:

* outcomes are continuous scores in [0, 1] rather than {0, 0.5, 1};
* the volatility update is the closed form ``sqrt(sigma^2 + delta^2 / v)``,
  clamped to the volatility bounds, instead of the iterative root solve.

``illinois_volatility`` implements the paper's iterative solve for research
comparison only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

GLICKO_SCALE = 173.7178
INITIAL_RATING = 1500.0
MIN_EXPECTATION_SPREAD = 1e-12
CONVERGENCE_TOLERANCE = 1e-6
MAX_SOLVER_ITERATIONS = 100


@dataclass(frozen=True, slots=True)
class RatingUpdate:
    rating: float
    rating_deviation: float
    volatility: float
    expected: float
    variance: float
    delta: float


def to_glicko2_scale(rating: float, rd: float) -> tuple[float, float]:
    """Return ``(mu, phi)`` for an external-scale rating and RD."""
    return (rating - INITIAL_RATING) / GLICKO_SCALE, rd / GLICKO_SCALE


def from_glicko2_scale(mu: float, phi: float) -> tuple[float, float]:
    """Return ``(rating, rd)`` for internal-scale ``mu`` and ``phi``."""
    return mu * GLICKO_SCALE + INITIAL_RATING, phi * GLICKO_SCALE


def g(phi: float) -> float:
    return 1.0 / math.sqrt(1.0 + 3.0 * phi * phi / (math.pi * math.pi))


def expected_score(mu: float, mu_opponent: float, g_opponent: float) -> float:
    return 1.0 / (1.0 + math.exp(-g_opponent * (mu - mu_opponent)))


def estimated_variance(g_opponent: float, expected: float) -> float:
    spread = max(expected * (1.0 - expected), MIN_EXPECTATION_SPREAD)
    return 1.0 / (g_opponent * g_opponent * spread)


def estimated_delta(variance: float, g_opponent: float, score: float, expected: float) -> float:
    return variance * g_opponent * (score - expected)


def closed_form_volatility(
    sigma: float,
    delta: float,
    variance: float,
    lower: float = 0.01,
    upper: float = 0.2,
) -> float:
    new_sigma = math.sqrt(sigma * sigma + delta * delta / variance)
    return min(upper, max(lower, new_sigma))


def illinois_volatility(
    sigma: float,
    delta: float,
    phi: float,
    variance: float,
    tau: float = 0.5,
    tolerance: float = CONVERGENCE_TOLERANCE,
) -> float:
    """Iterative Glicko-2 volatility (step 5 of the paper, Illinois variant of regula falsi)."""
    a = math.log(sigma * sigma)
    delta_sq = delta * delta
    phi_sq = phi * phi
    tau_sq = tau * tau

    def f(x: float) -> float:
        ex = math.exp(x)
        num = ex * (delta_sq - phi_sq - variance - ex)
        den = 2.0 * (phi_sq + variance + ex) ** 2
        return num / den - (x - a) / tau_sq

    big_a = a
    if delta_sq > phi_sq + variance:
        big_b = math.log(delta_sq - phi_sq - variance)
    else:
        k = 1
        while f(a - k * tau) < 0:
            k += 1
        big_b = a - k * tau

    f_a = f(big_a)
    f_b = f(big_b)
    for _ in range(MAX_SOLVER_ITERATIONS):
        if abs(big_b - big_a) <= tolerance:
            break
        big_c = big_a + (big_a - big_b) * f_a / (f_b - f_a)
        f_c = f(big_c)
        if f_c * f_b <= 0:
            big_a, f_a = big_b, f_b
        else:
            f_a /= 2.0
        big_b, f_b = big_c, f_c
    return math.exp(big_a / 2.0)


def update_rating(
    rating: float,
    rd: float,
    sigma: float,
    opponent_rating: float,
    opponent_rd: float,
    score: float,
    min_volatility: float = 0.01,
    max_volatility: float = 0.2,
    volatility_method: str = "closed_form",
    tau: float = 0.5,
) -> RatingUpdate:
    """Single-game rating update against one opponent's pre-game state.

    The returned rating deviation is not clamped; the caller owns RD bounds.
    """
    mu, phi = to_glicko2_scale(rating, rd)
    mu_opp, phi_opp = to_glicko2_scale(opponent_rating, opponent_rd)

    g_opp = g(phi_opp)
    expected = expected_score(mu, mu_opp, g_opp)
    v = estimated_variance(g_opp, expected)
    delta = estimated_delta(v, g_opp, score, expected)

    if volatility_method == "illinois":
        new_sigma = illinois_volatility(sigma, delta, phi, v, tau=tau)
        new_sigma = min(max_volatility, max(min_volatility, new_sigma))
    else:
        new_sigma = closed_form_volatility(sigma, delta, v, lower=min_volatility, upper=max_volatility)

    phi_star = math.sqrt(phi * phi + new_sigma * new_sigma)
    new_phi = 1.0 / math.sqrt(1.0 / (phi_star * phi_star) + 1.0 / v)
    new_mu = mu + new_phi * new_phi * g_opp * (score - expected)

    new_rating, new_rd = from_glicko2_scale(new_mu, new_phi)
    return RatingUpdate(
        rating=new_rating,
        rating_deviation=new_rd,
        volatility=new_sigma,
        expected=expected,
        variance=v,
        delta=delta,
    )
