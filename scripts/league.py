#!/usr/bin/env python3
"""League CLI: roster players, draw balanced teams and record results."""

from __future__ import annotations

import logging
import random
import sys
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer
from sqlalchemy.orm import Session, sessionmaker

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory
from domain.balancing import (
    BalancingSystemConfig,
    SeedStrategy,
    TeamBalancer,
    load_balancing_system_configs,
    role_coverage,
)
from domain.common import Player, Role, SkillCategory, Team, TeamSide
from domain.config_base import select_system_config
from domain.ratings import registry
from domain.ratings.engine import RatingEngine, calibration_status
from domain.ratings.protocol import Algorithm
from domain.ratings.tiers import TIER_LADDER, tier_of
from repositories import LeagueRepository, PlayerInUseError, RecordNotFoundError, record_match

BALANCING_CONFIG_DIR = ROOT_DIR / "configs" / "balancing"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="League roster, team balancing and match recording commands.",
)

DbUrlOption = Annotated[
    str,
    typer.Option("--db-url", help="Database URL. Defaults to a local SQLite file."),
]
BalancingConfigOption = Annotated[
    str | None,
    typer.Option(
        "--balancing-config",
        help="Balancing config file or system name (for example: default.toml).",
    ),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_balancing_config(config_name: str | None) -> BalancingSystemConfig:
    try:
        configs = load_balancing_system_configs(BALANCING_CONFIG_DIR)
        return select_system_config(configs, config_name)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--balancing-config") from exc


def _open(
    db_url: str,
    default_config: BalancingSystemConfig | None = None,
) -> tuple[LeagueRepository, sessionmaker[Session]]:
    engine = create_db_engine(db_url)
    repository = LeagueRepository(
        default_tier=(default_config or _load_balancing_config(None)).default_tier,
    )
    repository.ensure_schema(engine)
    return repository, create_session_factory(engine)


def _fail(message: str) -> typer.Exit:
    typer.echo(f"error: {message}", err=True)
    return typer.Exit(code=1)


def _format_player(player: Player) -> str:
    stats = player.ensure_stats()
    calibration = calibration_status(player.current_rating, player.matches_played)
    roles = "/".join(role.value for role in player.roles)
    return (
        f"{player.name:<20} rating={player.current_rating:>6.0f} "
        f"tier={tier_of(player.current_rating).value:<14} roles={roles:<18} "
        f"record={stats.wins}-{stats.losses} win_rate={stats.win_rate:.1f}% "
        f"reliability={calibration.reliability:.0%} "
        f"to_reliable={calibration.matches_until_reliable}"
    )


def _echo_team(label: str, team: Team) -> None:
    typer.echo(
        f"{label} avg_rating={team.average_rating:.1f} size={team.size} "
        f"roles_covered={len(role_coverage(team))}"
    )
    for player in team:
        typer.echo(f"  {_format_player(player)}")


def _resolve_players(roster: list[Player], selectors: list[str]) -> list[Player]:
    by_id = {player.key: player for player in roster}
    by_name: dict[str, list[Player]] = {}
    for player in roster:
        by_name.setdefault(player.name.lower(), []).append(player)

    selected: list[Player] = []
    for selector in selectors:
        if selector in by_id:
            selected.append(by_id[selector])
            continue
        matches = by_name.get(selector.lower(), [])
        if len(matches) != 1:
            reason = "is ambiguous" if matches else "was not found"
            raise _fail(f"player {selector!r} {reason}")
        selected.append(matches[0])
    return selected


@app.command()
def tiers() -> None:
    """Print the tier ladder."""
    for info in TIER_LADDER:
        floor = "-" if info.min_rating is None else f"{info.min_rating:.0f}"
        typer.echo(
            f"{info.name:<14} min_rating={floor:>5} default_rating={info.default_rating:.0f} color={info.color}"
        )


@app.command("add-player")
def add_player(
    name: Annotated[str, typer.Argument(help="Player display name.")],
    role: Annotated[
        list[Role],
        typer.Option("--role", "-r", help="Preferred role; repeat for up to three roles."),
    ],
    rating: Annotated[float | None, typer.Option("--rating", help="Explicit starting rating.")] = None,
    tier: Annotated[str | None, typer.Option("--tier", help="Start at this tier's default rating.")] = None,
    category: Annotated[
        SkillCategory | None,
        typer.Option("--category", help="Optional coarse skill category."),
    ] = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    balancing_config: BalancingConfigOption = None,
) -> None:
    """Roster a new player."""
    repository, session_factory = _open(db_url, _load_balancing_config(balancing_config))
    with session_factory() as session:
        try:
            player = repository.add_player(
                session,
                name=name,
                roles=role,
                rating=rating,
                tier=tier,
                category=category,
            )
            session.commit()
        except ValueError as exc:
            session.rollback()
            raise _fail(str(exc)) from exc
    typer.echo(f"added player_id={player.id} {_format_player(player)}")


@app.command()
def players(db_url: DbUrlOption = DEFAULT_DB_URL) -> None:
    """List all rostered players."""
    repository, session_factory = _open(db_url)
    with session_factory() as session:
        roster = repository.list_players(session)
    if not roster:
        typer.echo("no players")
        return
    for player in roster:
        typer.echo(f"{player.id} {_format_player(player)}")


@app.command("edit-player")
def edit_player(
    player: Annotated[str, typer.Argument(help="Player id or name.")],
    name: Annotated[str | None, typer.Option("--name", help="New display name.")] = None,
    rating: Annotated[float | None, typer.Option("--rating", help="New base rating.")] = None,
    role: Annotated[
        list[Role] | None,
        typer.Option("--role", "-r", help="Replace preferred roles; repeat for up to three roles."),
    ] = None,
    category: Annotated[
        SkillCategory | None,
        typer.Option("--category", help="New coarse skill category."),
    ] = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Edit a rostered player's profile."""
    repository, session_factory = _open(db_url)
    with session_factory() as session:
        (selected,) = _resolve_players(repository.list_players(session), [player])
        try:
            updated = repository.update_player(
                session,
                selected.key,
                name=name,
                rating=rating,
                roles=role or None,
                category=category,
            )
            session.commit()
        except ValueError as exc:
            session.rollback()
            raise _fail(str(exc)) from exc
    typer.echo(f"updated player_id={updated.id} {_format_player(updated)}")


@app.command("remove-player")
def remove_player(
    player: Annotated[str, typer.Argument(help="Player id or name.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Remove a player who was never drawn into a saved team composition."""
    repository, session_factory = _open(db_url)
    with session_factory() as session:
        (selected,) = _resolve_players(repository.list_players(session), [player])
        try:
            repository.delete_player(session, selected.key)
            session.commit()
        except PlayerInUseError as exc:
            session.rollback()
            raise _fail(str(exc)) from exc
    typer.echo(f"removed player_id={selected.key} name={selected.name}")


@app.command()
def balance(
    selectors: Annotated[
        list[str] | None,
        typer.Argument(help="Player ids or names to include. Defaults to the whole roster."),
    ] = None,
    strategy: Annotated[
        SeedStrategy | None,
        typer.Option("--strategy", help="Override the configured seed strategy."),
    ] = None,
    seed: Annotated[int | None, typer.Option("--seed", help="Random seed for a reproducible draw.")] = None,
    save: Annotated[bool, typer.Option("--save", help="Persist the drawn team composition.")] = False,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    balancing_config: BalancingConfigOption = None,
) -> None:
    """Split selected players into two balanced, role-diverse teams."""
    config = _load_balancing_config(balancing_config)
    params = config.parameters if strategy is None else replace(config.parameters, seed_strategy=strategy)
    repository, session_factory = _open(db_url, config)

    with session_factory() as session:
        roster = repository.list_players(session)
        pool = _resolve_players(roster, selectors) if selectors else roster
        try:
            result = TeamBalancer(params, rng=random.Random(seed)).balance(pool)
        except ValueError as exc:
            raise _fail(str(exc)) from exc

        _echo_team("team1", result.team1)
        _echo_team("team2", result.team2)
        typer.echo(
            f"score={result.score:.2f} seed_score={result.seed_score:.2f} "
            f"rating_gap={result.rating_gap:.1f} strategy={params.seed_strategy.value}"
        )

        if save:
            try:
                composition = repository.save_team_composition(session, result.team1, result.team2)
                session.commit()
            except Exception:
                session.rollback()
                raise
            typer.echo(f"saved team_composition_id={composition.id}")


@app.command("record-match")
def record_match_command(
    team_composition_id: Annotated[str, typer.Argument(help="Saved team composition id.")],
    winner: Annotated[TeamSide, typer.Argument(help="Winning side (team1, team2).")],
    algorithm: Annotated[
        Algorithm,
        typer.Option("--algorithm", help="Rating update to apply (elo, glicko2)."),
    ] = Algorithm.ELO,
    config_name: Annotated[
        str | None,
        typer.Option("--config-name", help="Optional rating config file (for example: default.toml)."),
    ] = None,
    score_summary: Annotated[str | None, typer.Option("--score", help="Free-text score summary.")] = None,
    notes: Annotated[str | None, typer.Option("--notes", help="Free-text notes.")] = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Record a result and update every participant's rating."""
    try:
        strategy = registry.get(algorithm).build(config_name)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config-name") from exc

    repository, session_factory = _open(db_url)
    try:
        result = record_match(
            session_factory,
            team_composition_id,
            winner,
            repository=repository,
            engine=RatingEngine(strategy),
            score_summary=score_summary,
            notes=notes,
        )
    except (RecordNotFoundError, ValueError) as exc:
        raise _fail(str(exc)) from exc

    typer.echo(
        f"recorded match_result_id={result.id} winner={result.winning_team.value} "
        f"algorithm={result.algorithm} "
        f"team1_change={result.team1_rating_change:+d} team2_change={result.team2_rating_change:+d}"
    )


@app.command()
def leaderboard(
    limit: Annotated[int, typer.Option("--limit", help="Number of players to show.")] = 10,
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Top players by win rate plus overall side statistics."""
    if limit <= 0:
        raise typer.BadParameter("--limit must be greater than 0")

    repository, session_factory = _open(db_url)
    with session_factory() as session:
        top_players = repository.top_players_by_win_rate(session, limit)
        statistics = repository.match_statistics(session)

    typer.echo(
        f"matches={statistics.total} team1_wins={statistics.team1_wins} team2_wins={statistics.team2_wins}"
    )
    if not top_players:
        typer.echo("no players with recorded matches")
        return
    for rank, player in enumerate(top_players, start=1):
        typer.echo(f"{rank:>2}. {_format_player(player)}")


if __name__ == "__main__":
    app()
