"""Deviation decay and rating-confidence helpers."""

from __future__ import annotations

from math import ceil, exp, log
from typing import Final

from domain.errors import InvalidRatingError
from domain.ratings.common import MAX_DEVIATION, MIN_DEVIATION, require_finite

# Chosen so the deviation reaches the floor after five matches.
DECAY_CONSTANT: Final[float] = 2.04
CALIBRATION_MATCHES: Final[int] = 7
RELIABLE_DEVIATION: Final[float] = 100.0


def uncertainty_for_matches(
    matches_played: int,
    *,
    max_deviation: float = MAX_DEVIATION,
    min_deviation: float = MIN_DEVIATION,
    decay_constant: float = DECAY_CONSTANT,
) -> float:
    """Display-scale deviation after ``matches_played`` matches."""
    if matches_played < 0:
        raise InvalidRatingError(f"matches_played must be >= 0 (got {matches_played})")
    return max(max_deviation * exp(-matches_played / decay_constant), min_deviation)


def reliability(
    deviation: float,
    *,
    max_deviation: float = MAX_DEVIATION,
    min_deviation: float = MIN_DEVIATION,
) -> float:
    """Confidence in [0, 1]: 1 at or below the floor, 0 at or above the ceiling."""
    require_finite("deviation", deviation)
    value = 1.0 - ((deviation - min_deviation) / (max_deviation - min_deviation))
    return max(0.0, min(value, 1.0))


def matches_until_reliable(
    deviation: float,
    *,
    max_deviation: float = MAX_DEVIATION,
    decay_constant: float = DECAY_CONSTANT,
    calibration_matches: int = CALIBRATION_MATCHES,
    reliable_deviation: float = RELIABLE_DEVIATION,
) -> int:
    """Matches still needed before a rating counts as calibrated."""
    require_finite("deviation", deviation)
    if deviation <= 0.0:
        raise InvalidRatingError(f"deviation must be > 0 (got {deviation})")
    if deviation <= reliable_deviation:
        return 0

    # A deviation above the ceiling reads as a brand-new player.
    matches_played = max(0, ceil(-decay_constant * log(deviation / max_deviation)))
    return max(0, calibration_matches - matches_played)


__all__ = [
    "CALIBRATION_MATCHES",
    "DECAY_CONSTANT",
    "RELIABLE_DEVIATION",
    "matches_until_reliable",
    "reliability",
    "uncertainty_for_matches",
]
