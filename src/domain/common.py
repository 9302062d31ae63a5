"""Shared league types consumed by the rating engine and team balancer."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from enum import Enum
from math import floor, isfinite

from domain.errors import InvalidMatchError, InvalidRatingError

MAX_ROLES_PER_PLAYER = 3


class Role(str, Enum):
    """Lane/position a player prefers."""

    ROAM = "Roam"
    MID = "Mid"
    GOLD = "Gold"
    JUNGLE = "Jungle"
    EXP = "Exp"


class SkillCategory(str, Enum):
    """Coarse three-level skill bracket."""

    EXPERT = "Expert"
    INTERMEDIATE = "Intermediate"
    BEGINNER = "Beginner"


class TeamSide(str, Enum):
    """Which side of a team composition won."""

    TEAM1 = "team1"
    TEAM2 = "team2"

    @property
    def opponent(self) -> TeamSide:
        return TeamSide.TEAM2 if self is TeamSide.TEAM1 else TeamSide.TEAM1


def calculate_win_rate(wins: int, matches_played: int) -> float:
    """Win percentage rounded half-up to one decimal; 0 without matches."""
    if matches_played == 0:
        return 0.0
    return floor((wins / matches_played) * 1000.0 + 0.5) / 10.0


@dataclass(frozen=True)
class PlayerStatistics:
    """Accumulated results for one player."""

    rating: float
    wins: int = 0
    losses: int = 0
    rating_change: int = 0

    def __post_init__(self) -> None:
        if self.wins < 0 or self.losses < 0:
            raise InvalidMatchError(
                f"wins/losses must be non-negative (wins={self.wins}, losses={self.losses})"
            )
        if not isfinite(self.rating):
            raise InvalidRatingError(f"rating must be finite (got {self.rating!r})")

    @property
    def matches_played(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> float:
        return calculate_win_rate(self.wins, self.matches_played)

    def record_result(self, *, won: bool, new_rating: float) -> PlayerStatistics:
        """Return statistics after one more match."""
        return PlayerStatistics(
            rating=new_rating,
            wins=self.wins + 1 if won else self.wins,
            losses=self.losses if won else self.losses + 1,
            rating_change=int(round(new_rating - self.rating)),
        )


@dataclass(frozen=True)
class Player:
    """A rostered league player.

    ``rating`` is the rating the player was created (or manually edited)
    with; once matches have been recorded ``stats.rating`` is authoritative.
    """

    name: str
    rating: float
    roles: tuple[Role, ...]
    id: str | None = None
    category: SkillCategory | None = None
    stats: PlayerStatistics | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("player name must not be empty")
        if not isfinite(self.rating):
            raise InvalidRatingError(f"rating must be finite (got {self.rating!r})")
        roles = tuple(Role(role) for role in self.roles)
        if not 1 <= len(roles) <= MAX_ROLES_PER_PLAYER:
            raise ValueError(
                f"player {self.name!r} must have between 1 and {MAX_ROLES_PER_PLAYER} roles "
                f"(got {len(roles)})"
            )
        if len(set(roles)) != len(roles):
            raise ValueError(f"player {self.name!r} has duplicate roles: {[r.value for r in roles]}")
        object.__setattr__(self, "roles", roles)

    @property
    def key(self) -> str:
        """Identity used to detect duplicate selections."""
        return self.id if self.id is not None else self.name

    @property
    def current_rating(self) -> float:
        if self.stats is not None:
            return self.stats.rating
        return self.rating

    @property
    def matches_played(self) -> int:
        return 0 if self.stats is None else self.stats.matches_played

    def ensure_stats(self) -> PlayerStatistics:
        """Statistics record, creating an empty one seeded from ``rating``."""
        if self.stats is not None:
            return self.stats
        return PlayerStatistics(rating=self.rating)

    def with_stats(self, stats: PlayerStatistics) -> Player:
        return replace(self, stats=stats)


@dataclass(frozen=True)
class Team:
    """Ordered roster of players."""

    players: tuple[Player, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "players", tuple(self.players))

    def __iter__(self) -> Iterator[Player]:
        return iter(self.players)

    def __len__(self) -> int:
        return len(self.players)

    @property
    def size(self) -> int:
        return len(self.players)

    @property
    def average_rating(self) -> float:
        if not self.players:
            return 0.0
        return sum(player.current_rating for player in self.players) / float(len(self.players))


@dataclass(frozen=True)
class MatchOutcome:
    """Result of one played team composition."""

    team1: Team
    team2: Team
    winner: TeamSide
    score_summary: str | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "winner", TeamSide(self.winner))
        if not self.team1.players or not self.team2.players:
            raise InvalidMatchError("match outcome is missing players for one or both teams")
        team1_keys = {player.key for player in self.team1}
        team2_keys = {player.key for player in self.team2}
        overlap = team1_keys & team2_keys
        if overlap:
            raise InvalidMatchError(f"players appear on both teams: {sorted(overlap)}")

    def team(self, side: TeamSide) -> Team:
        return self.team1 if side is TeamSide.TEAM1 else self.team2


__all__ = [
    "MAX_ROLES_PER_PLAYER",
    "MatchOutcome",
    "Player",
    "PlayerStatistics",
    "Role",
    "SkillCategory",
    "Team",
    "TeamSide",
    "calculate_win_rate",
]
