"""team_compositions and team_composition_players table models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base


class TeamCompositionRecord(Base):
    """Two drawn rosters; the match result is embedded once recorded."""

    __tablename__ = "team_compositions"
    __table_args__ = (
        CheckConstraint(
            "winning_team IS NULL OR winning_team IN ('team1', 'team2')",
            name="ck_team_compositions_winning_team",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, index=True)
    team1_avg_rating: Mapped[float] = mapped_column(Float, nullable=False)
    team2_avg_rating: Mapped[float] = mapped_column(Float, nullable=False)
    winning_team: Mapped[str | None] = mapped_column(String(8), nullable=True)
    score_summary: Mapped[str | None] = mapped_column(String(256), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    team1_rating_change: Mapped[int | None] = mapped_column(Integer, nullable=True)
    team2_rating_change: Mapped[int | None] = mapped_column(Integer, nullable=True)

    members: Mapped[list[TeamCompositionPlayer]] = relationship(
        back_populates="composition",
        cascade="all, delete-orphan",
        order_by="TeamCompositionPlayer.position",
    )


class TeamCompositionPlayer(Base):
    """One player slot in a team composition."""

    __tablename__ = "team_composition_players"
    __table_args__ = (
        CheckConstraint("side IN ('team1', 'team2')", name="ck_team_composition_players_side"),
    )

    composition_id: Mapped[str] = mapped_column(
        ForeignKey("team_compositions.id", ondelete="CASCADE"),
        primary_key=True,
    )
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id"), primary_key=True)
    side: Mapped[str] = mapped_column(String(8), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    rating_at_draw: Mapped[float] = mapped_column(Float, nullable=False)

    composition: Mapped[TeamCompositionRecord] = relationship(back_populates="members")
