"""League rating and team-balancing domain modules."""

from domain.common import MatchOutcome, Player, PlayerStatistics, Role, SkillCategory, Team, TeamSide
from domain.errors import (
    DuplicatePlayerError,
    InsufficientPoolError,
    InvalidMatchError,
    InvalidRatingError,
    RatingConvergenceError,
)
from domain.balancing import BalancedTeams, BalancerParameters, SeedStrategy, balance_teams
from domain.ratings import (
    Rating,
    RatingEngine,
    Tier,
    default_rating_for,
    initialize_rating,
    matches_until_reliable,
    rate_player,
    rating_after_matches,
    reliability,
    tier_info,
    tier_of,
    update_rating,
)

apply_match_result = update_rating
reliability_of = reliability

__all__ = [
    "BalancedTeams",
    "BalancerParameters",
    "DuplicatePlayerError",
    "InsufficientPoolError",
    "InvalidMatchError",
    "InvalidRatingError",
    "MatchOutcome",
    "Player",
    "PlayerStatistics",
    "Rating",
    "RatingConvergenceError",
    "RatingEngine",
    "Role",
    "SeedStrategy",
    "SkillCategory",
    "Team",
    "TeamSide",
    "Tier",
    "apply_match_result",
    "balance_teams",
    "default_rating_for",
    "initialize_rating",
    "matches_until_reliable",
    "rate_player",
    "rating_after_matches",
    "reliability",
    "reliability_of",
    "tier_info",
    "tier_of",
    "update_rating",
]
