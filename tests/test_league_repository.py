"""League persistence tests against in-memory SQLite."""

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from db import create_db_engine, create_session_factory
from domain.common import Player, Role, SkillCategory, Team, TeamSide
from domain.errors import InvalidMatchError
from domain.ratings.engine import RatingEngine
from domain.ratings.registry import get
from domain.ratings.tiers import Tier
from models import PlayerRatingEventRecord
from repositories import (
    LeagueRepository,
    PlayerInUseError,
    RecordNotFoundError,
    StoredTeamComposition,
    record_match,
)


@pytest.fixture()
def repository() -> LeagueRepository:
    return LeagueRepository()


@pytest.fixture()
def session_factory(repository: LeagueRepository) -> sessionmaker[Session]:
    engine = create_db_engine("sqlite://")
    repository.ensure_schema(engine)
    return create_session_factory(engine)


def _roster(session: Session, repository: LeagueRepository, count: int, rating: float = 1500.0) -> list[Player]:
    roles = (Role.ROAM, Role.MID, Role.GOLD, Role.JUNGLE, Role.EXP)
    return [
        repository.add_player(session, name=f"player{index}", roles=[roles[index % 5]], rating=rating)
        for index in range(count)
    ]


def _composition(
    session: Session,
    repository: LeagueRepository,
    *,
    created_at: datetime | None = None,
) -> StoredTeamComposition:
    players = _roster(session, repository, 4)
    return repository.save_team_composition(
        session,
        Team(tuple(players[:2])),
        Team(tuple(players[2:])),
        created_at=created_at,
    )


def test_add_player_resolves_starting_rating(session_factory: sessionmaker[Session], repository: LeagueRepository) -> None:
    with session_factory() as session:
        default = repository.add_player(session, name="Default", roles=[Role.MID])
        by_tier = repository.add_player(session, name="Tiered", roles=["Gold"], tier="Maaram")
        by_category = repository.add_player(
            session,
            name="Middler",
            roles=[Role.EXP, Role.ROAM],
            category=SkillCategory.INTERMEDIATE,
        )
        explicit = repository.add_player(session, name="Explicit", roles=[Role.JUNGLE], rating=1725.0)
        session.commit()

    assert default.rating == pytest.approx(1000.0)
    assert by_tier.rating == pytest.approx(1400.0)
    assert by_category.rating == pytest.approx(1200.0)
    assert by_category.category is SkillCategory.INTERMEDIATE
    assert explicit.current_rating == pytest.approx(1725.0)
    assert default.id is not None and default.matches_played == 0


def test_default_tier_comes_from_repository(session_factory: sessionmaker[Session]) -> None:
    repository = LeagueRepository(default_tier=Tier.MAKARIT)
    with session_factory() as session:
        player = repository.add_player(session, name="New", roles=[Role.MID])

    assert player.rating == pytest.approx(1800.0)


def test_list_get_update_delete(session_factory: sessionmaker[Session], repository: LeagueRepository) -> None:
    with session_factory() as session:
        zed = repository.add_player(session, name="Zed", roles=[Role.MID], rating=1100.0)
        repository.add_player(session, name="Amy", roles=[Role.GOLD], rating=1300.0)
        session.commit()

        assert [player.name for player in repository.list_players(session)] == ["Amy", "Zed"]

        updated = repository.update_player(session, zed.id, rating=1250.0, roles=["Mid", "Exp"])
        assert updated.rating == pytest.approx(1250.0)
        assert updated.current_rating == pytest.approx(1250.0)
        assert updated.roles == (Role.MID, Role.EXP)

        repository.delete_player(session, zed.id)
        session.commit()

        with pytest.raises(RecordNotFoundError):
            repository.get_player(session, zed.id)
        with pytest.raises(RecordNotFoundError):
            repository.update_player(session, "missing", name="Ghost")


def test_save_and_fetch_team_composition(session_factory: sessionmaker[Session], repository: LeagueRepository) -> None:
    with session_factory() as session:
        saved = _composition(session, repository)
        session.commit()

        fetched = repository.get_team_composition(session, saved.id)

    assert [player.name for player in fetched.team1] == ["player0", "player1"]
    assert [player.name for player in fetched.team2] == ["player2", "player3"]
    assert fetched.team1_avg_rating == pytest.approx(1500.0)
    assert not fetched.is_recorded


def test_drawn_player_cannot_be_deleted(session_factory: sessionmaker[Session], repository: LeagueRepository) -> None:
    with session_factory() as session:
        saved = _composition(session, repository)
        bench = repository.add_player(session, name="Bench", roles=[Role.ROAM])
        session.commit()

        drawn_id = saved.team1.players[0].id
        with pytest.raises(PlayerInUseError):
            repository.delete_player(session, drawn_id)
        session.rollback()

        repository.delete_player(session, bench.id)
        session.commit()

        history = repository.recent_team_compositions(session)
        assert [composition.id for composition in history] == [saved.id]
        assert repository.get_player(session, drawn_id).name == "player0"
        with pytest.raises(RecordNotFoundError):
            repository.get_player(session, bench.id)


def test_save_team_composition_rejects_bad_rosters(session_factory: sessionmaker[Session], repository: LeagueRepository) -> None:
    with session_factory() as session:
        players = _roster(session, repository, 3)

        with pytest.raises(InvalidMatchError, match="both teams"):
            repository.save_team_composition(session, Team(tuple(players[:2])), Team(tuple(players[1:])))
        with pytest.raises(InvalidMatchError, match="missing players"):
            repository.save_team_composition(session, Team(tuple(players)), Team())


def test_record_match_updates_every_participant(session_factory: sessionmaker[Session], repository: LeagueRepository) -> None:
    with session_factory() as session:
        composition = _composition(session, repository)
        session.commit()

    result = record_match(
        session_factory,
        composition.id,
        "team1",
        repository=repository,
        score_summary="13-7",
    )

    assert result.winning_team is TeamSide.TEAM1
    assert result.algorithm == "elo"
    assert (result.team1_rating_change, result.team2_rating_change) == (16, -16)

    with session_factory() as session:
        recorded = repository.get_team_composition(session, composition.id)
        events = session.scalar(select(func.count()).select_from(PlayerRatingEventRecord))

        assert recorded.winning_team is TeamSide.TEAM1
        assert recorded.score_summary == "13-7"
        assert [player.current_rating for player in recorded.team1] == [1516.0, 1516.0]
        assert [player.current_rating for player in recorded.team2] == [1484.0, 1484.0]
        assert recorded.team1.players[0].ensure_stats().win_rate == pytest.approx(100.0)
        assert recorded.team2.players[0].ensure_stats().losses == 1
        assert recorded.team1.players[0].rating == pytest.approx(1500.0)
        assert events == 4
        assert repository.match_result_for_team_composition(session, composition.id) == result


def test_second_result_for_same_composition_is_rejected(
    session_factory: sessionmaker[Session], repository: LeagueRepository
) -> None:
    with session_factory() as session:
        composition = _composition(session, repository)
        session.commit()

    record_match(session_factory, composition.id, TeamSide.TEAM2, repository=repository)
    with pytest.raises(InvalidMatchError, match="already has a recorded result"):
        record_match(session_factory, composition.id, TeamSide.TEAM1, repository=repository)

    with session_factory() as session:
        assert repository.match_statistics(session).total == 1


def test_failed_record_leaves_no_partial_writes(
    session_factory: sessionmaker[Session], repository: LeagueRepository, monkeypatch: pytest.MonkeyPatch
) -> None:
    with session_factory() as session:
        composition = _composition(session, repository)
        session.commit()

    def _boom(*args, **kwargs) -> None:
        raise RuntimeError("event insert failed")

    monkeypatch.setattr(LeagueRepository, "_insert_rating_events", _boom)
    with pytest.raises(RuntimeError, match="event insert failed"):
        record_match(session_factory, composition.id, TeamSide.TEAM1, repository=repository)

    with session_factory() as session:
        reloaded = repository.get_team_composition(session, composition.id)
        assert not reloaded.is_recorded
        assert all(player.matches_played == 0 for player in reloaded.team1)
        assert all(player.current_rating == 1500.0 for player in reloaded.team2)
        assert repository.recent_match_results(session) == []


def test_unknown_composition_raises(session_factory: sessionmaker[Session], repository: LeagueRepository) -> None:
    with pytest.raises(RecordNotFoundError):
        record_match(session_factory, "missing", TeamSide.TEAM1, repository=repository)


def test_record_with_glicko2_engine(session_factory: sessionmaker[Session], repository: LeagueRepository) -> None:
    with session_factory() as session:
        composition = _composition(session, repository)
        session.commit()

    result = record_match(
        session_factory,
        composition.id,
        TeamSide.TEAM2,
        repository=repository,
        engine=RatingEngine(get("glicko2").build()),
    )

    assert result.algorithm == "glicko2"
    assert result.team1_rating_change < 0 < result.team2_rating_change


def test_history_queries(session_factory: sessionmaker[Session], repository: LeagueRepository) -> None:
    with session_factory() as session:
        early = _composition(session, repository, created_at=datetime(2026, 1, 1, 12, 0))
        late = _composition(session, repository, created_at=datetime(2026, 2, 1, 12, 0))
        repository.record_match_result(
            session, early.id, TeamSide.TEAM1, match_date=datetime(2026, 1, 1, 13, 0)
        )
        repository.record_match_result(
            session, late.id, TeamSide.TEAM2, match_date=datetime(2026, 2, 1, 13, 0)
        )
        session.commit()

        assert [item.id for item in repository.recent_team_compositions(session, 5)] == [late.id, early.id]
        assert [item.team_composition_id for item in repository.recent_match_results(session, 1)] == [late.id]

        overall = repository.match_statistics(session)
        january = repository.match_statistics(session, end=datetime(2026, 1, 31))
        assert (overall.total, overall.team1_wins, overall.team2_wins) == (2, 1, 1)
        assert (january.total, january.team1_wins, january.team2_wins) == (1, 1, 0)

        top = repository.top_players_by_win_rate(session, 3)
        assert len(top) == 3
        assert all(player.ensure_stats().win_rate == pytest.approx(100.0) for player in top)
        assert len(repository.top_players_by_win_rate(session, 50)) == 8
