"""Elo rating modules."""

from domain.ratings.elo.calculator import (
    EloParameters,
    PlayerEloCalculator,
    calculate_expected_score,
    calculate_rating_delta,
    update_rating,
)
from domain.ratings.elo.config import EloSystemConfig, load_elo_system_configs

__all__ = [
    "EloParameters",
    "EloSystemConfig",
    "PlayerEloCalculator",
    "calculate_expected_score",
    "calculate_rating_delta",
    "load_elo_system_configs",
    "update_rating",
]
