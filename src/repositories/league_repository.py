"""Persistence for league players, team compositions and match results."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from domain.common import MatchOutcome, Player, PlayerStatistics, Role, SkillCategory, Team, TeamSide
from domain.errors import InvalidMatchError
from domain.ratings.engine import MatchRatingResult, RatingEngine
from domain.ratings.tiers import Tier, default_rating_for, default_rating_for_category, parse_category
from models import (
    Base,
    MatchResultRecord,
    PlayerRatingEventRecord,
    PlayerRecord,
    TeamCompositionPlayer,
    TeamCompositionRecord,
)

logger = logging.getLogger(__name__)

_LEAGUE_TABLES = (
    PlayerRecord.__table__,
    TeamCompositionRecord.__table__,
    TeamCompositionPlayer.__table__,
    MatchResultRecord.__table__,
    PlayerRatingEventRecord.__table__,
)


class RecordNotFoundError(LookupError):
    """A player or team composition id does not exist."""


class PlayerInUseError(ValueError):
    """A player still belongs to a saved team composition and cannot be deleted."""


@dataclass(frozen=True)
class StoredTeamComposition:
    """A saved pair of rosters and, once played, its result."""

    id: str
    created_at: datetime
    team1: Team
    team2: Team
    team1_avg_rating: float
    team2_avg_rating: float
    winning_team: TeamSide | None = None
    score_summary: str | None = None
    notes: str | None = None
    team1_rating_change: int | None = None
    team2_rating_change: int | None = None

    @property
    def is_recorded(self) -> bool:
        return self.winning_team is not None


@dataclass(frozen=True)
class StoredMatchResult:
    id: str
    team_composition_id: str
    match_date: datetime
    winning_team: TeamSide
    algorithm: str
    team1_rating_change: int
    team2_rating_change: int
    score_summary: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class MatchStatistics:
    total: int
    team1_wins: int
    team2_wins: int


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def _to_player(row: PlayerRecord) -> Player:
    return Player(
        id=row.id,
        name=row.name,
        rating=row.rating,
        roles=tuple(Role(role) for role in row.roles),
        category=None if row.category is None else SkillCategory(row.category),
        stats=PlayerStatistics(
            rating=row.current_rating,
            wins=row.wins,
            losses=row.losses,
            rating_change=row.rating_change,
        ),
    )


def _to_match_result(row: MatchResultRecord) -> StoredMatchResult:
    return StoredMatchResult(
        id=row.id,
        team_composition_id=row.team_composition_id,
        match_date=row.match_date,
        winning_team=TeamSide(row.winning_team),
        algorithm=row.algorithm,
        team1_rating_change=row.team1_rating_change,
        team2_rating_change=row.team2_rating_change,
        score_summary=row.score_summary,
        notes=row.notes,
    )


class LeagueRepository:
    """Session-scoped CRUD plus the atomic match-recording step.

    Methods never commit; callers own the transaction boundary.
    """

    def __init__(self, *, default_tier: Tier = Tier.BUDLOTAY) -> None:
        self.default_tier = default_tier

    def ensure_schema(self, engine: Engine) -> None:
        """Create league tables and indexes if they do not exist."""
        Base.metadata.create_all(bind=engine, tables=list(_LEAGUE_TABLES))

    # players

    def add_player(
        self,
        session: Session,
        *,
        name: str,
        roles: Sequence[Role | str],
        rating: float | None = None,
        tier: Tier | str | None = None,
        category: SkillCategory | str | None = None,
    ) -> Player:
        """Roster a player; rating falls back to tier, then category, then the league default."""
        if rating is None:
            if tier is not None:
                rating = default_rating_for(tier)
            elif category is not None:
                rating = default_rating_for_category(category)
            else:
                rating = default_rating_for(self.default_tier)

        player = Player(
            id=str(uuid4()),
            name=name.strip(),
            rating=float(rating),
            roles=tuple(Role(role) for role in roles),
            category=None if category is None else parse_category(category),
        )
        session.add(
            PlayerRecord(
                id=player.id,
                name=player.name,
                rating=player.rating,
                roles=[role.value for role in player.roles],
                category=None if player.category is None else player.category.value,
                wins=0,
                losses=0,
                current_rating=player.rating,
                rating_change=0,
            )
        )
        session.flush()
        logger.info("added player id=%s name=%s rating=%.0f", player.id, player.name, player.rating)
        return self.get_player(session, player.id)

    def _player_row(self, session: Session, player_id: str) -> PlayerRecord:
        row = session.get(PlayerRecord, player_id)
        if row is None:
            raise RecordNotFoundError(f"player_id={player_id} not found")
        return row

    def get_player(self, session: Session, player_id: str) -> Player:
        return _to_player(self._player_row(session, player_id))

    def list_players(self, session: Session) -> list[Player]:
        """All players ordered by name."""
        rows = session.execute(select(PlayerRecord).order_by(PlayerRecord.name, PlayerRecord.id)).scalars()
        return [_to_player(row) for row in rows]

    def update_player(
        self,
        session: Session,
        player_id: str,
        *,
        name: str | None = None,
        rating: float | None = None,
        roles: Sequence[Role | str] | None = None,
        category: SkillCategory | str | None = None,
    ) -> Player:
        """Edit profile fields.

        A manual rating edit also resets the effective rating while the
        player has no recorded matches.
        """
        row = self._player_row(session, player_id)
        current = _to_player(row)
        updated = Player(
            id=current.id,
            name=current.name if name is None else name.strip(),
            rating=current.rating if rating is None else float(rating),
            roles=current.roles if roles is None else tuple(Role(role) for role in roles),
            category=current.category if category is None else parse_category(category),
            stats=current.stats,
        )

        row.name = updated.name
        row.rating = updated.rating
        row.roles = [role.value for role in updated.roles]
        row.category = None if updated.category is None else updated.category.value
        if rating is not None and current.matches_played == 0:
            row.current_rating = updated.rating
        row.updated_at = _utcnow()
        session.flush()
        return _to_player(row)

    def delete_player(self, session: Session, player_id: str) -> None:
        """Remove a player who has never been drawn into a saved composition."""
        row = self._player_row(session, player_id)
        compositions = session.execute(
            select(func.count())
            .select_from(TeamCompositionPlayer)
            .where(TeamCompositionPlayer.player_id == player_id)
        ).scalar_one()
        if compositions:
            raise PlayerInUseError(
                f"player_id={player_id} appears in {compositions} saved team composition(s) and cannot be deleted"
            )
        session.delete(row)
        session.flush()
        logger.info("deleted player id=%s name=%s", row.id, row.name)

    def top_players_by_win_rate(self, session: Session, limit: int = 10) -> list[Player]:
        """Players with at least one match, best win rate first."""
        if limit <= 0:
            raise ValueError("limit must be greater than 0")
        rows = session.execute(
            select(PlayerRecord)
            .where((PlayerRecord.wins + PlayerRecord.losses) > 0)
            .order_by(PlayerRecord.name, PlayerRecord.id)
        ).scalars()
        players = [_to_player(row) for row in rows]
        players.sort(key=lambda player: player.ensure_stats().win_rate, reverse=True)
        return players[:limit]

    # team compositions

    def save_team_composition(
        self,
        session: Session,
        team1: Team,
        team2: Team,
        *,
        created_at: datetime | None = None,
    ) -> StoredTeamComposition:
        """Persist two drawn rosters of already-rostered players."""
        if not team1.players or not team2.players:
            raise InvalidMatchError("team composition is missing players for one or both teams")
        for player in (*team1.players, *team2.players):
            if player.id is None:
                raise InvalidMatchError(f"player {player.name!r} has not been saved")
            self._player_row(session, player.id)
        overlap = {player.key for player in team1} & {player.key for player in team2}
        if overlap:
            raise InvalidMatchError(f"players appear on both teams: {sorted(overlap)}")

        composition = TeamCompositionRecord(
            id=str(uuid4()),
            created_at=created_at or _utcnow(),
            team1_avg_rating=team1.average_rating,
            team2_avg_rating=team2.average_rating,
        )
        for side, team in ((TeamSide.TEAM1, team1), (TeamSide.TEAM2, team2)):
            for position, player in enumerate(team):
                composition.members.append(
                    TeamCompositionPlayer(
                        player_id=player.id,
                        side=side.value,
                        position=position,
                        rating_at_draw=player.current_rating,
                    )
                )
        session.add(composition)
        session.flush()
        logger.info(
            "saved team composition id=%s team1_size=%d team2_size=%d",
            composition.id,
            len(team1),
            len(team2),
        )
        return self._to_composition(session, composition)

    def _composition_row(
        self,
        session: Session,
        team_composition_id: str,
        *,
        for_update: bool = False,
    ) -> TeamCompositionRecord:
        row = session.get(TeamCompositionRecord, team_composition_id, with_for_update=for_update)
        if row is None:
            raise RecordNotFoundError(f"team_composition_id={team_composition_id} not found")
        return row

    def _load_players(
        self,
        session: Session,
        player_ids: Sequence[str],
        *,
        for_update: bool = False,
    ) -> dict[str, PlayerRecord]:
        statement = select(PlayerRecord).where(PlayerRecord.id.in_(player_ids))
        if for_update:
            statement = statement.with_for_update()
        rows = {row.id: row for row in session.execute(statement).scalars()}
        missing = sorted(set(player_ids) - set(rows))
        if missing:
            raise RecordNotFoundError(f"player_ids={missing} not found")
        return rows

    def _member_ids(self, composition: TeamCompositionRecord, side: TeamSide) -> list[str]:
        members = sorted(
            (member for member in composition.members if member.side == side.value),
            key=lambda member: member.position,
        )
        return [member.player_id for member in members]

    def _to_composition(self, session: Session, row: TeamCompositionRecord) -> StoredTeamComposition:
        team1_ids = self._member_ids(row, TeamSide.TEAM1)
        team2_ids = self._member_ids(row, TeamSide.TEAM2)
        players = self._load_players(session, team1_ids + team2_ids)
        return StoredTeamComposition(
            id=row.id,
            created_at=row.created_at,
            team1=Team(tuple(_to_player(players[player_id]) for player_id in team1_ids)),
            team2=Team(tuple(_to_player(players[player_id]) for player_id in team2_ids)),
            team1_avg_rating=row.team1_avg_rating,
            team2_avg_rating=row.team2_avg_rating,
            winning_team=None if row.winning_team is None else TeamSide(row.winning_team),
            score_summary=row.score_summary,
            notes=row.notes,
            team1_rating_change=row.team1_rating_change,
            team2_rating_change=row.team2_rating_change,
        )

    def get_team_composition(self, session: Session, team_composition_id: str) -> StoredTeamComposition:
        return self._to_composition(session, self._composition_row(session, team_composition_id))

    def recent_team_compositions(self, session: Session, limit: int = 5) -> list[StoredTeamComposition]:
        if limit <= 0:
            raise ValueError("limit must be greater than 0")
        rows = session.execute(
            select(TeamCompositionRecord)
            .order_by(TeamCompositionRecord.created_at.desc(), TeamCompositionRecord.id)
            .limit(limit)
        ).scalars()
        return [self._to_composition(session, row) for row in rows]

    # match results

    def record_match_result(
        self,
        session: Session,
        team_composition_id: str,
        winning_team: TeamSide | str,
        *,
        engine: RatingEngine | None = None,
        score_summary: str | None = None,
        notes: str | None = None,
        match_date: datetime | None = None,
    ) -> StoredMatchResult:
        """Rate one played composition and write every participant.

        Players are read with their current statistics, not as drawn.
        """
        engine = engine or RatingEngine()
        winner = TeamSide(winning_team)
        composition = self._composition_row(session, team_composition_id, for_update=True)
        if composition.winning_team is not None:
            raise InvalidMatchError(f"team_composition_id={team_composition_id} already has a recorded result")

        team1_ids = self._member_ids(composition, TeamSide.TEAM1)
        team2_ids = self._member_ids(composition, TeamSide.TEAM2)
        rows = self._load_players(session, team1_ids + team2_ids, for_update=True)
        outcome = MatchOutcome(
            team1=Team(tuple(_to_player(rows[player_id]) for player_id in team1_ids)),
            team2=Team(tuple(_to_player(rows[player_id]) for player_id in team2_ids)),
            winner=winner,
            score_summary=score_summary,
            notes=notes,
        )
        rating_result = engine.apply_match(outcome)

        updated_at = _utcnow()
        for player in rating_result.updated_players():
            row = rows[player.key]
            stats = player.ensure_stats()
            row.wins = stats.wins
            row.losses = stats.losses
            row.current_rating = stats.rating
            row.rating_change = stats.rating_change
            row.updated_at = updated_at

        composition.winning_team = winner.value
        composition.score_summary = score_summary
        composition.notes = notes
        composition.team1_rating_change = rating_result.team1_rating_change
        composition.team2_rating_change = rating_result.team2_rating_change

        match_result = MatchResultRecord(
            id=str(uuid4()),
            team_composition_id=composition.id,
            match_date=match_date or updated_at,
            winning_team=winner.value,
            algorithm=engine.strategy.algorithm.value,
            score_summary=score_summary,
            notes=notes,
            team1_rating_change=rating_result.team1_rating_change,
            team2_rating_change=rating_result.team2_rating_change,
        )
        session.add(match_result)
        session.flush()
        self._insert_rating_events(session, rating_result, match_result_id=match_result.id)

        logger.info(
            "recorded match id=%s team_composition_id=%s winner=%s",
            match_result.id,
            composition.id,
            winner.value,
        )
        return _to_match_result(match_result)

    def _insert_rating_events(
        self,
        session: Session,
        rating_result: MatchRatingResult,
        *,
        match_result_id: str,
    ) -> None:
        payload = [
            {
                "match_result_id": match_result_id,
                "player_id": event.player_key,
                "side": event.side.value,
                "won": event.won,
                "expected_score": event.expected_score,
                "pre_rating": event.pre_rating,
                "rating_delta": event.rating_delta,
                "post_rating": event.post_rating,
            }
            for event in rating_result.events
        ]
        if payload:
            session.execute(insert(PlayerRatingEventRecord), payload)

    def match_result_for_team_composition(
        self,
        session: Session,
        team_composition_id: str,
    ) -> StoredMatchResult | None:
        row = session.execute(
            select(MatchResultRecord).where(MatchResultRecord.team_composition_id == team_composition_id)
        ).scalar_one_or_none()
        return None if row is None else _to_match_result(row)

    def recent_match_results(self, session: Session, limit: int = 10) -> list[StoredMatchResult]:
        if limit <= 0:
            raise ValueError("limit must be greater than 0")
        rows = session.execute(
            select(MatchResultRecord)
            .order_by(MatchResultRecord.match_date.desc(), MatchResultRecord.id)
            .limit(limit)
        ).scalars()
        return [_to_match_result(row) for row in rows]

    def match_statistics(
        self,
        session: Session,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> MatchStatistics:
        """Win counts per side, optionally bounded by match date (inclusive)."""
        statement = select(MatchResultRecord.winning_team, func.count()).group_by(MatchResultRecord.winning_team)
        if start is not None:
            statement = statement.where(MatchResultRecord.match_date >= start)
        if end is not None:
            statement = statement.where(MatchResultRecord.match_date <= end)
        counts = {winning_team: int(count) for winning_team, count in session.execute(statement)}
        team1_wins = counts.get(TeamSide.TEAM1.value, 0)
        team2_wins = counts.get(TeamSide.TEAM2.value, 0)
        return MatchStatistics(total=team1_wins + team2_wins, team1_wins=team1_wins, team2_wins=team2_wins)


def record_match(
    session_factory: sessionmaker[Session],
    team_composition_id: str,
    winning_team: TeamSide | str,
    *,
    repository: LeagueRepository | None = None,
    engine: RatingEngine | None = None,
    score_summary: str | None = None,
    notes: str | None = None,
) -> StoredMatchResult:
    """Record one result in its own transaction; nothing is written on failure."""
    repository = repository or LeagueRepository()
    with session_factory() as session:
        try:
            result = repository.record_match_result(
                session,
                team_composition_id,
                winning_team,
                engine=engine,
                score_summary=score_summary,
                notes=notes,
            )
            session.commit()
        except Exception:
            session.rollback()
            raise
    return result


__all__ = [
    "LeagueRepository",
    "MatchStatistics",
    "PlayerInUseError",
    "RecordNotFoundError",
    "StoredMatchResult",
    "StoredTeamComposition",
    "record_match",
]
