"""ORM models."""

from models.base import Base
from models.match_result import MatchResultRecord, PlayerRatingEventRecord
from models.player import PlayerRecord
from models.team_composition import TeamCompositionPlayer, TeamCompositionRecord

__all__ = [
    "Base",
    "MatchResultRecord",
    "PlayerRatingEventRecord",
    "PlayerRecord",
    "TeamCompositionPlayer",
    "TeamCompositionRecord",
]
