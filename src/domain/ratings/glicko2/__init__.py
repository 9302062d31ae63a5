"""Glicko-2 rating modules."""

from domain.ratings.glicko2.calculator import (
    Glicko2OpponentResult,
    Glicko2Parameters,
    PlayerGlicko2Calculator,
    calculate_expected_score,
    rate_player,
    update_glicko2_player,
    update_rating_glicko2,
)
from domain.ratings.glicko2.config import Glicko2SystemConfig, load_glicko2_system_configs

__all__ = [
    "Glicko2OpponentResult",
    "Glicko2Parameters",
    "Glicko2SystemConfig",
    "PlayerGlicko2Calculator",
    "calculate_expected_score",
    "load_glicko2_system_configs",
    "rate_player",
    "update_glicko2_player",
    "update_rating_glicko2",
]
