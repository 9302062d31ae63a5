"""Apply match outcomes to every participant with a chosen rating strategy."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from domain.common import MatchOutcome, Player, SkillCategory, Team, TeamSide
from domain.ratings.common import Rating
from domain.ratings.elo.calculator import PlayerEloCalculator
from domain.ratings.glicko2.calculator import Glicko2Parameters, rate_player
from domain.ratings.protocol import RatingStrategy, round_half_up
from domain.ratings.reliability import matches_until_reliable, reliability
from domain.ratings.tiers import Tier, default_rating_for, default_rating_for_category, parse_category

logger = logging.getLogger(__name__)

_CATEGORY_KEYS = frozenset(category.value.lower() for category in SkillCategory)


@dataclass(frozen=True)
class PlayerRatingEvent:
    """Per-player rating change produced by one match."""

    player_key: str
    side: TeamSide
    won: bool
    expected_score: float
    pre_rating: float
    rating_delta: float
    post_rating: float


@dataclass(frozen=True)
class MatchRatingResult:
    """Updated rosters plus the per-team mean rating change."""

    team1: Team
    team2: Team
    winner: TeamSide
    team1_rating_change: int
    team2_rating_change: int
    events: tuple[PlayerRatingEvent, ...]

    def updated_players(self) -> tuple[Player, ...]:
        return self.team1.players + self.team2.players


def initialize_rating(
    tier_or_category: Tier | SkillCategory | str,
    params: Glicko2Parameters | None = None,
) -> Rating:
    """Starting rating snapshot for a newly rostered player."""
    if isinstance(tier_or_category, SkillCategory):
        rating = default_rating_for_category(tier_or_category)
    elif isinstance(tier_or_category, Tier):
        rating = default_rating_for(tier_or_category)
    elif tier_or_category.strip().lower() in _CATEGORY_KEYS:
        rating = default_rating_for_category(parse_category(tier_or_category))
    else:
        rating = default_rating_for(tier_or_category)
    return rate_player(rating, 0, params)


def rating_after_matches(
    current_rating: float,
    matches_played: int,
    params: Glicko2Parameters | None = None,
) -> Rating:
    """Deviation/volatility snapshot for display; no match is applied."""
    return rate_player(current_rating, matches_played, params)


@dataclass(frozen=True)
class CalibrationStatus:
    """How settled a player's rating is."""

    rating: Rating
    reliability: float
    matches_until_reliable: int


def calibration_status(
    current_rating: float,
    matches_played: int,
    params: Glicko2Parameters | None = None,
) -> CalibrationStatus:
    params = params or Glicko2Parameters()
    snapshot = rate_player(current_rating, matches_played, params)
    return CalibrationStatus(
        rating=snapshot,
        reliability=reliability(
            snapshot.deviation,
            max_deviation=params.max_rd,
            min_deviation=params.min_rd,
        ),
        matches_until_reliable=matches_until_reliable(
            snapshot.deviation,
            max_deviation=params.max_rd,
            decay_constant=params.decay_constant,
            calibration_matches=params.calibration_matches,
        ),
    )


class RatingEngine:
    """Rates both rosters of a match against the opposing side's average."""

    def __init__(
        self,
        strategy: RatingStrategy | None = None,
        *,
        snapshot_params: Glicko2Parameters | None = None,
    ) -> None:
        self.strategy = strategy or PlayerEloCalculator()
        self.snapshot_params = snapshot_params or Glicko2Parameters()

    def _average_deviation(self, team: Team) -> float:
        deviations = [
            rate_player(player.current_rating, player.matches_played, self.snapshot_params).deviation
            for player in team
        ]
        return sum(deviations) / float(len(deviations))

    def _rate_side(
        self,
        *,
        team: Team,
        side: TeamSide,
        opponent: Team,
        won: bool,
    ) -> tuple[Team, list[PlayerRatingEvent], int]:
        opponent_rating = float(round_half_up(opponent.average_rating))
        opponent_deviation = self._average_deviation(opponent)

        updated_players: list[Player] = []
        events: list[PlayerRatingEvent] = []
        total_delta = 0.0
        for player in team:
            pre_rating = player.current_rating
            update = self.strategy.rate(
                player=player,
                opponent_rating=opponent_rating,
                opponent_deviation=opponent_deviation,
                did_win=won,
            )
            stats = player.ensure_stats().record_result(won=won, new_rating=update.post_rating)
            updated_players.append(player.with_stats(stats))
            delta = update.post_rating - pre_rating
            total_delta += delta
            events.append(
                PlayerRatingEvent(
                    player_key=player.key,
                    side=side,
                    won=won,
                    expected_score=update.expected_score,
                    pre_rating=pre_rating,
                    rating_delta=delta,
                    post_rating=update.post_rating,
                )
            )

        return Team(tuple(updated_players)), events, round_half_up(total_delta / float(len(team)))

    def apply_match(self, outcome: MatchOutcome) -> MatchRatingResult:
        """Rate every participant; team membership is left untouched."""
        team1_won = outcome.winner is TeamSide.TEAM1
        team1, team1_events, team1_change = self._rate_side(
            team=outcome.team1,
            side=TeamSide.TEAM1,
            opponent=outcome.team2,
            won=team1_won,
        )
        team2, team2_events, team2_change = self._rate_side(
            team=outcome.team2,
            side=TeamSide.TEAM2,
            opponent=outcome.team1,
            won=not team1_won,
        )
        logger.info(
            "applied match algorithm=%s winner=%s team1_change=%+d team2_change=%+d players=%d",
            self.strategy.algorithm.value,
            outcome.winner.value,
            team1_change,
            team2_change,
            len(team1_events) + len(team2_events),
        )
        return MatchRatingResult(
            team1=team1,
            team2=team2,
            winner=outcome.winner,
            team1_rating_change=team1_change,
            team2_rating_change=team2_change,
            events=tuple(team1_events + team2_events),
        )


__all__ = [
    "CalibrationStatus",
    "MatchRatingResult",
    "PlayerRatingEvent",
    "RatingEngine",
    "calibration_status",
    "initialize_rating",
    "rating_after_matches",
]
