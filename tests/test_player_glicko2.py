"""Unit tests for player-level Glicko-2 calculations."""

from __future__ import annotations

import pytest

from domain.common import Player, PlayerStatistics, Role
from domain.errors import InvalidRatingError, RatingConvergenceError
from domain.ratings.common import (
    Rating,
    to_display_deviation,
    to_display_rating,
    to_internal_deviation,
    to_internal_rating,
)
from domain.ratings.glicko2.calculator import (
    Glicko2OpponentResult,
    Glicko2Parameters,
    PlayerGlicko2Calculator,
    rate_player,
    update_glicko2_player,
    update_rating_glicko2,
)


def test_scale_conversion_round_trip() -> None:
    assert to_internal_rating(1500.0) == pytest.approx(0.0)
    assert to_display_rating(to_internal_rating(1862.5)) == pytest.approx(1862.5)


@pytest.mark.parametrize("deviation", [50.0, 200.0, 350.0])
def test_deviation_conversion_round_trip(deviation: float) -> None:
    assert to_internal_deviation(deviation) == pytest.approx(deviation / 173.7178)
    assert to_display_deviation(to_internal_deviation(deviation)) == pytest.approx(deviation)


@pytest.mark.parametrize("deviation", [50.0, 200.0, 350.0])
def test_rating_triple_round_trip(deviation: float) -> None:
    rating = Rating(rating=1725.0, deviation=deviation, volatility=0.06)

    restored = rating.to_internal().to_display()

    assert restored.rating == pytest.approx(rating.rating)
    assert restored.deviation == pytest.approx(rating.deviation)
    assert restored.volatility == pytest.approx(rating.volatility)


def test_single_game_update_shrinks_deviation() -> None:
    start = Rating(rating=1500.0, deviation=200.0, volatility=0.06)

    updated = update_rating_glicko2(start, 1400.0, 30.0, 1.0)

    # phi' = 1 / sqrt(1 / (phi^2 + sigma'^2) + 1 / v), mu' = mu + phi'^2 * g * (s - E)
    assert updated.deviation == pytest.approx(175.40, abs=0.05)
    assert updated.rating == pytest.approx(1563.56, abs=0.1)


def test_rating_period_matches_reference_example() -> None:
    updated = update_glicko2_player(
        rating=Rating(rating=1500.0, deviation=200.0, volatility=0.06),
        results=[
            Glicko2OpponentResult(opponent_rating=1400.0, opponent_rd=30.0, score=1.0),
            Glicko2OpponentResult(opponent_rating=1550.0, opponent_rd=100.0, score=0.0),
            Glicko2OpponentResult(opponent_rating=1700.0, opponent_rd=300.0, score=0.0),
        ],
    )

    assert updated.rating == pytest.approx(1464.06, abs=0.1)
    assert updated.deviation == pytest.approx(151.52, abs=0.1)
    assert updated.volatility == pytest.approx(0.05999, abs=1e-4)


def test_win_raises_and_loss_lowers_rating() -> None:
    start = Rating(rating=1500.0, deviation=200.0)

    won = update_rating_glicko2(start, 1500.0, 200.0, 1.0)
    lost = update_rating_glicko2(start, 1500.0, 200.0, 0.0)

    assert won.rating > start.rating > lost.rating
    assert won.deviation < start.deviation
    assert lost.deviation < start.deviation


def test_deviation_never_exceeds_ceiling() -> None:
    start = Rating(rating=1500.0, deviation=350.0, volatility=0.06)

    idle = update_glicko2_player(rating=start, results=[])
    played = update_rating_glicko2(start, 1500.0, 350.0, 1.0)

    assert idle.rating == pytest.approx(1500.0)
    assert idle.deviation == pytest.approx(350.0)
    assert played.deviation <= 350.0


def test_idle_period_inflates_deviation() -> None:
    start = Rating(rating=1600.0, deviation=100.0, volatility=0.06)

    idle = update_glicko2_player(rating=start, results=[])

    assert idle.rating == pytest.approx(1600.0)
    assert idle.deviation > start.deviation


def test_score_outside_unit_interval_is_rejected() -> None:
    with pytest.raises(InvalidRatingError):
        update_rating_glicko2(Rating(rating=1500.0, deviation=200.0), 1500.0, 200.0, 1.5)


def test_volatility_solve_respects_iteration_cap() -> None:
    params = Glicko2Parameters(epsilon=1e-12, max_iterations=1)

    with pytest.raises(RatingConvergenceError):
        update_rating_glicko2(Rating(rating=1500.0, deviation=200.0), 1400.0, 30.0, 1.0, params)


def test_rate_player_derives_deviation_from_matches() -> None:
    fresh = rate_player(1200.0, 0)
    seasoned = rate_player(1200.0, 10)

    assert fresh.rating == pytest.approx(1200.0)
    assert fresh.deviation == pytest.approx(350.0)
    assert seasoned.deviation == pytest.approx(50.0)
    assert fresh.volatility == pytest.approx(0.06)


def test_calculator_rounds_post_rating() -> None:
    calculator = PlayerGlicko2Calculator()
    player = Player(
        name="Veteran",
        rating=1500.0,
        roles=(Role.GOLD,),
        stats=PlayerStatistics(rating=1500.0, wins=3, losses=3),
    )

    update = calculator.rate(player=player, opponent_rating=1500.0, opponent_deviation=50.0, did_win=True)

    assert update.expected_score == pytest.approx(0.5)
    assert update.post_rating > 1500.0
    assert update.post_rating == float(int(update.post_rating))
