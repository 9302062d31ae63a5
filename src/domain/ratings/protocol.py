"""Shared protocols and enums for rating strategies."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from math import floor
from typing import Protocol, runtime_checkable

from domain.common import Player


class Algorithm(str, Enum):
    """Available per-match rating update modes."""

    ELO = "elo"
    GLICKO2 = "glicko2"


@dataclass(frozen=True)
class RatingUpdate:
    """Outcome of rating one player against one opponent side."""

    expected_score: float
    post_rating: float


@runtime_checkable
class RatingStrategy(Protocol):
    """Contract every per-match rating strategy satisfies."""

    algorithm: Algorithm

    def rate(
        self,
        *,
        player: Player,
        opponent_rating: float,
        opponent_deviation: float,
        did_win: bool,
    ) -> RatingUpdate: ...


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity."""
    return int(floor(value + 0.5))


__all__ = [
    "Algorithm",
    "RatingStrategy",
    "RatingUpdate",
    "round_half_up",
]
