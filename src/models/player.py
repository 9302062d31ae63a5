"""players table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, CheckConstraint, DateTime, Float, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class PlayerRecord(Base):
    """Rostered player with accumulated statistics."""

    __tablename__ = "players"
    __table_args__ = (
        CheckConstraint("wins >= 0", name="ck_players_wins"),
        CheckConstraint("losses >= 0", name="ck_players_losses"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    roles: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    category: Mapped[str | None] = mapped_column(String(32), nullable=True)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_rating: Mapped[float] = mapped_column(Float, nullable=False)
    rating_change: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
