"""match_results and player_rating_events table models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class MatchResultRecord(Base):
    """Recorded outcome of one team composition."""

    __tablename__ = "match_results"
    __table_args__ = (
        UniqueConstraint("team_composition_id", name="uq_match_results_team_composition"),
        CheckConstraint("winning_team IN ('team1', 'team2')", name="ck_match_results_winning_team"),
        Index("idx_match_results_match_date", "match_date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    team_composition_id: Mapped[str] = mapped_column(ForeignKey("team_compositions.id"), nullable=False)
    match_date: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    winning_team: Mapped[str] = mapped_column(String(8), nullable=False)
    algorithm: Mapped[str] = mapped_column(String(16), nullable=False)
    score_summary: Mapped[str | None] = mapped_column(String(256), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    team1_rating_change: Mapped[int] = mapped_column(Integer, nullable=False)
    team2_rating_change: Mapped[int] = mapped_column(Integer, nullable=False)


class PlayerRatingEventRecord(Base):
    """Historical per-player rating events (one row per player per match)."""

    __tablename__ = "player_rating_events"
    __table_args__ = (
        UniqueConstraint("match_result_id", "player_id", name="uq_player_rating_events_match_player"),
        CheckConstraint(
            "expected_score >= 0.0 AND expected_score <= 1.0",
            name="ck_player_rating_events_expected_score",
        ),
        Index("idx_player_rating_events_player", "player_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_result_id: Mapped[str] = mapped_column(ForeignKey("match_results.id"), nullable=False)
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id"), nullable=False)
    side: Mapped[str] = mapped_column(String(8), nullable=False)
    won: Mapped[bool] = mapped_column(Boolean, nullable=False)
    expected_score: Mapped[float] = mapped_column(Float, nullable=False)
    pre_rating: Mapped[float] = mapped_column(Float, nullable=False)
    rating_delta: Mapped[float] = mapped_column(Float, nullable=False)
    post_rating: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
