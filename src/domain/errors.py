"""Typed failures raised by the rating engine and team balancer."""

from __future__ import annotations


class InvalidRatingError(ValueError):
    """A rating, deviation or match count is outside the accepted domain."""


class InvalidMatchError(ValueError):
    """A match outcome cannot be applied (empty roster, unknown winner)."""


class InsufficientPoolError(ValueError):
    """Too few players were supplied to form two teams."""

    def __init__(self, pool_size: int, minimum: int = 2) -> None:
        super().__init__(
            f"At least {minimum} players are required to form teams (got {pool_size})"
        )
        self.pool_size = pool_size
        self.minimum = minimum


class DuplicatePlayerError(ValueError):
    """The same player was selected more than once."""


class RatingConvergenceError(RuntimeError):
    """The Glicko-2 volatility solve did not converge within its iteration cap."""


__all__ = [
    "DuplicatePlayerError",
    "InsufficientPoolError",
    "InvalidMatchError",
    "InvalidRatingError",
    "RatingConvergenceError",
]
