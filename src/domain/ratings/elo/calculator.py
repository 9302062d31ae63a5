"""Player-level Elo logic."""

from __future__ import annotations

from dataclasses import dataclass

from domain.common import Player
from domain.ratings.common import require_finite
from domain.ratings.protocol import Algorithm, RatingUpdate, round_half_up


@dataclass(frozen=True)
class EloParameters:
    k_factor: float = 32.0
    scale_factor: float = 400.0


def calculate_expected_score(rating: float, opponent_rating: float, scale_factor: float = 400.0) -> float:
    """Compute the Elo expected score for one side."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / scale_factor))


def calculate_rating_delta(
    rating: float,
    opponent_rating: float,
    did_win: bool,
    params: EloParameters | None = None,
) -> int:
    """Signed whole-point change for one result."""
    params = params or EloParameters()
    require_finite("rating", rating)
    require_finite("opponent_rating", opponent_rating)
    expected = calculate_expected_score(rating, opponent_rating, params.scale_factor)
    actual = 1.0 if did_win else 0.0
    return round_half_up(params.k_factor * (actual - expected))


def update_rating(
    player_rating: float,
    opponent_average_rating: float,
    did_win: bool,
    params: EloParameters | None = None,
) -> float:
    """Rating after one match against a side with ``opponent_average_rating``."""
    return player_rating + calculate_rating_delta(player_rating, opponent_average_rating, did_win, params)


class PlayerEloCalculator:
    """Simple per-match Elo strategy; ignores the opponent deviation."""

    algorithm = Algorithm.ELO

    def __init__(self, params: EloParameters | None = None) -> None:
        self.params = params or EloParameters()

    def rate(
        self,
        *,
        player: Player,
        opponent_rating: float,
        opponent_deviation: float,
        did_win: bool,
    ) -> RatingUpdate:
        pre_rating = player.current_rating
        return RatingUpdate(
            expected_score=calculate_expected_score(pre_rating, opponent_rating, self.params.scale_factor),
            post_rating=update_rating(pre_rating, opponent_rating, did_win, self.params),
        )
