"""Player-level Glicko-2 logic."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from math import exp, log, pi, sqrt
from typing import Final

from domain.common import Player
from domain.errors import InvalidRatingError, RatingConvergenceError
from domain.ratings.common import (
    DEFAULT_VOLATILITY,
    MAX_DEVIATION,
    MIN_DEVIATION,
    InternalRating,
    Rating,
    require_finite,
    to_internal_deviation,
    to_internal_rating,
)
from domain.ratings.protocol import Algorithm, RatingUpdate, round_half_up
from domain.ratings.reliability import CALIBRATION_MATCHES, DECAY_CONSTANT, uncertainty_for_matches

_VARIANCE_FLOOR: Final[float] = 1e-6


@dataclass(frozen=True)
class Glicko2Parameters:
    initial_volatility: float = DEFAULT_VOLATILITY
    tau: float = 0.5
    epsilon: float = 1e-6
    max_iterations: int = 100
    min_rd: float = MIN_DEVIATION
    max_rd: float = MAX_DEVIATION
    decay_constant: float = DECAY_CONSTANT
    calibration_matches: int = CALIBRATION_MATCHES


@dataclass(frozen=True)
class Glicko2OpponentResult:
    opponent_rating: float
    opponent_rd: float
    score: float


def _g(phi: float) -> float:
    return 1.0 / sqrt(1.0 + ((3.0 * (phi**2)) / (pi**2)))


def _expected(mu: float, opp_mu: float, opp_phi: float) -> float:
    exponent = -_g(opp_phi) * (mu - opp_mu)
    if exponent >= 0.0:
        exp_term = exp(-exponent)
        return exp_term / (1.0 + exp_term)
    exp_term = exp(exponent)
    return 1.0 / (1.0 + exp_term)


def calculate_expected_score(
    *,
    rating: float,
    opponent_rating: float,
    opponent_rd: float,
) -> float:
    """Compute expected score for one side under Glicko-2."""
    return _expected(
        to_internal_rating(rating),
        to_internal_rating(opponent_rating),
        to_internal_deviation(opponent_rd),
    )


def _solve_volatility(
    *,
    phi: float,
    sigma: float,
    delta: float,
    v: float,
    tau: float,
    epsilon: float,
    max_iterations: int,
) -> float:
    a = log(sigma**2)

    def f(x: float) -> float:
        ex = exp(x)
        numerator = ex * ((delta**2) - (phi**2) - v - ex)
        denominator = 2.0 * ((phi**2) + v + ex) ** 2
        return (numerator / denominator) - ((x - a) / (tau**2))

    a_value = a
    if (delta**2) > ((phi**2) + v):
        b_value = log(max((delta**2) - (phi**2) - v, _VARIANCE_FLOOR))
    else:
        k = 1
        b_value = a_value - (k * tau)
        while f(b_value) < 0.0:
            k += 1
            if k > max_iterations:
                raise RatingConvergenceError("Glicko-2 volatility solve failed to bracket root.")
            b_value = a_value - (k * tau)

    f_a = f(a_value)
    f_b = f(b_value)
    iterations = 0
    while abs(b_value - a_value) > epsilon:
        iterations += 1
        if iterations > max_iterations:
            raise RatingConvergenceError(
                f"Glicko-2 volatility solve did not converge within {max_iterations} iterations."
            )
        if f_b == f_a:
            c_value = (a_value + b_value) / 2.0
        else:
            c_value = a_value + (((a_value - b_value) * f_a) / (f_b - f_a))
        f_c = f(c_value)
        if f_c * f_b < 0.0:
            a_value = b_value
            f_a = f_b
        else:
            f_a /= 2.0
        b_value = c_value
        f_b = f_c

    return exp(a_value / 2.0)


def update_glicko2_player(
    *,
    rating: Rating,
    results: Sequence[Glicko2OpponentResult],
    params: Glicko2Parameters | None = None,
) -> Rating:
    """Update one player for one Glicko-2 rating period.

    Without results the deviation grows by the volatility, up to the ceiling.
    """
    params = params or Glicko2Parameters()
    state = rating.to_internal()
    max_phi = to_internal_deviation(params.max_rd)

    if not results:
        inflated_phi = min(sqrt((state.phi**2) + (state.sigma**2)), max_phi)
        return InternalRating(mu=state.mu, phi=inflated_phi, sigma=state.sigma).to_display()

    g_terms: list[float] = []
    score_minus_e_terms: list[float] = []
    v_inverse = 0.0
    for result in results:
        opp_mu = to_internal_rating(require_finite("opponent_rating", result.opponent_rating))
        opp_phi = to_internal_deviation(require_finite("opponent_rd", result.opponent_rd))
        g_term = _g(opp_phi)
        expected = _expected(state.mu, opp_mu, opp_phi)
        g_terms.append(g_term)
        score_minus_e_terms.append(result.score - expected)
        v_inverse += (g_term**2) * expected * (1.0 - expected)

    v = 1.0 / max(v_inverse, _VARIANCE_FLOOR)
    improvement = sum(g_term * score_minus_e for g_term, score_minus_e in zip(g_terms, score_minus_e_terms))
    delta = v * improvement
    sigma_prime = _solve_volatility(
        phi=state.phi,
        sigma=state.sigma,
        delta=delta,
        v=v,
        tau=params.tau,
        epsilon=params.epsilon,
        max_iterations=params.max_iterations,
    )

    phi_star = sqrt((state.phi**2) + (sigma_prime**2))
    phi_prime = min(1.0 / sqrt((1.0 / (phi_star**2)) + (1.0 / v)), max_phi)
    mu_prime = state.mu + (phi_prime**2) * improvement

    return InternalRating(mu=mu_prime, phi=phi_prime, sigma=sigma_prime).to_display()


def rate_player(
    current_rating: float,
    matches_played: int,
    params: Glicko2Parameters | None = None,
) -> Rating:
    """Rating snapshot whose deviation is derived from the match count."""
    params = params or Glicko2Parameters()
    require_finite("current_rating", current_rating)
    deviation = uncertainty_for_matches(
        matches_played,
        max_deviation=params.max_rd,
        min_deviation=params.min_rd,
        decay_constant=params.decay_constant,
    )
    return Rating(rating=current_rating, deviation=deviation, volatility=params.initial_volatility)


def update_rating_glicko2(
    rating: Rating,
    opponent_rating: float,
    opponent_deviation: float,
    score: float,
    params: Glicko2Parameters | None = None,
) -> Rating:
    """Single-game Glicko-2 update against one opponent."""
    if not 0.0 <= score <= 1.0:
        raise InvalidRatingError(f"score must be between 0 and 1 (got {score})")
    return update_glicko2_player(
        rating=rating,
        results=[
            Glicko2OpponentResult(
                opponent_rating=opponent_rating,
                opponent_rd=opponent_deviation,
                score=score,
            )
        ],
        params=params,
    )


class PlayerGlicko2Calculator:
    """Refined per-match strategy; snapshots the deviation from matches played."""

    algorithm = Algorithm.GLICKO2

    def __init__(self, params: Glicko2Parameters | None = None) -> None:
        self.params = params or Glicko2Parameters()

    def snapshot(self, player: Player) -> Rating:
        return rate_player(player.current_rating, player.matches_played, self.params)

    def rate(
        self,
        *,
        player: Player,
        opponent_rating: float,
        opponent_deviation: float,
        did_win: bool,
    ) -> RatingUpdate:
        pre = self.snapshot(player)
        post = update_rating_glicko2(
            pre,
            opponent_rating,
            opponent_deviation,
            1.0 if did_win else 0.0,
            self.params,
        )
        return RatingUpdate(
            expected_score=calculate_expected_score(
                rating=pre.rating,
                opponent_rating=opponent_rating,
                opponent_rd=opponent_deviation,
            ),
            post_rating=float(round_half_up(post.rating)),
        )
