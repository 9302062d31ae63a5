"""Database repository helpers."""

from repositories.league_repository import (
    LeagueRepository,
    MatchStatistics,
    PlayerInUseError,
    RecordNotFoundError,
    StoredMatchResult,
    StoredTeamComposition,
    record_match,
)

__all__ = [
    "LeagueRepository",
    "MatchStatistics",
    "PlayerInUseError",
    "RecordNotFoundError",
    "StoredMatchResult",
    "StoredTeamComposition",
    "record_match",
]
