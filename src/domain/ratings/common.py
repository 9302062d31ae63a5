"""Rating triples and conversions between the display and Glicko-2 scales."""

from __future__ import annotations

from dataclasses import dataclass
from math import isfinite
from typing import Final

from domain.errors import InvalidRatingError

GLICKO2_SCALE: Final[float] = 173.7178
DEFAULT_RATING: Final[float] = 1500.0
DEFAULT_VOLATILITY: Final[float] = 0.06
MAX_DEVIATION: Final[float] = 350.0
MIN_DEVIATION: Final[float] = 50.0


def to_internal_rating(rating: float) -> float:
    return (rating - DEFAULT_RATING) / GLICKO2_SCALE


def to_internal_deviation(deviation: float) -> float:
    return deviation / GLICKO2_SCALE


def to_display_rating(mu: float) -> float:
    return (mu * GLICKO2_SCALE) + DEFAULT_RATING


def to_display_deviation(phi: float) -> float:
    return phi * GLICKO2_SCALE


def require_finite(name: str, value: float) -> float:
    if not isfinite(value):
        raise InvalidRatingError(f"{name} must be finite (got {value!r})")
    return value


@dataclass(frozen=True)
class InternalRating:
    """Rating triple on the Glicko-2 internal scale (centred at 0)."""

    mu: float
    phi: float
    sigma: float

    def to_display(self) -> Rating:
        return Rating(
            rating=to_display_rating(self.mu),
            deviation=to_display_deviation(self.phi),
            volatility=self.sigma,
        )


@dataclass(frozen=True)
class Rating:
    """Rating triple on the 1500-centred display scale."""

    rating: float
    deviation: float
    volatility: float = DEFAULT_VOLATILITY

    def __post_init__(self) -> None:
        require_finite("rating", self.rating)
        require_finite("deviation", self.deviation)
        require_finite("volatility", self.volatility)
        if self.deviation <= 0.0:
            raise InvalidRatingError(f"deviation must be > 0 (got {self.deviation})")
        if self.volatility <= 0.0:
            raise InvalidRatingError(f"volatility must be > 0 (got {self.volatility})")

    def to_internal(self) -> InternalRating:
        return InternalRating(
            mu=to_internal_rating(self.rating),
            phi=to_internal_deviation(self.deviation),
            sigma=self.volatility,
        )


__all__ = [
    "DEFAULT_RATING",
    "DEFAULT_VOLATILITY",
    "GLICKO2_SCALE",
    "InternalRating",
    "MAX_DEVIATION",
    "MIN_DEVIATION",
    "Rating",
    "require_finite",
    "to_display_deviation",
    "to_display_rating",
    "to_internal_deviation",
    "to_internal_rating",
]
