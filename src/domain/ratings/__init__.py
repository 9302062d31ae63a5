"""Rating engine: Elo/Glicko-2 updates, tiers and reliability."""

from domain.ratings.common import Rating
from domain.ratings.elo.calculator import calculate_expected_score, update_rating
from domain.ratings.engine import (
    CalibrationStatus,
    MatchRatingResult,
    PlayerRatingEvent,
    RatingEngine,
    calibration_status,
    initialize_rating,
    rating_after_matches,
)
from domain.ratings.glicko2.calculator import rate_player, update_rating_glicko2
from domain.ratings.protocol import Algorithm, RatingStrategy, RatingUpdate
from domain.ratings.reliability import matches_until_reliable, reliability, uncertainty_for_matches
from domain.ratings.tiers import Tier, TierInfo, default_rating_for, tier_info, tier_of

__all__ = [
    "Algorithm",
    "CalibrationStatus",
    "MatchRatingResult",
    "PlayerRatingEvent",
    "Rating",
    "RatingEngine",
    "RatingStrategy",
    "RatingUpdate",
    "Tier",
    "TierInfo",
    "calculate_expected_score",
    "calibration_status",
    "default_rating_for",
    "initialize_rating",
    "matches_until_reliable",
    "rate_player",
    "rating_after_matches",
    "reliability",
    "tier_info",
    "tier_of",
    "uncertainty_for_matches",
    "update_rating",
    "update_rating_glicko2",
]
