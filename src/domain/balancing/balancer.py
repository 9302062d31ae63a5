"""Two-team partitioning balanced on rating and role coverage."""

from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from domain.common import Player, Role, SkillCategory, Team
from domain.errors import DuplicatePlayerError, InsufficientPoolError
from domain.ratings.tiers import category_for_rating

logger = logging.getLogger(__name__)

MIN_POOL_SIZE = 2
MIN_ITERATIONS = 100
MAX_ITERATIONS = 200

ROLE_COVERAGE_POINTS = 10.0
ROLE_DUPLICATE_PENALTY = 2.0

_CATEGORY_ORDER: tuple[SkillCategory, ...] = (
    SkillCategory.EXPERT,
    SkillCategory.INTERMEDIATE,
    SkillCategory.BEGINNER,
)


class SeedStrategy(str, Enum):
    """How the initial split is drawn before refinement."""

    SNAKE_DRAFT = "snake_draft"
    CATEGORY_STRATIFIED = "category_stratified"


@dataclass(frozen=True)
class BalancerParameters:
    seed_strategy: SeedStrategy = SeedStrategy.SNAKE_DRAFT
    iterations: int = MAX_ITERATIONS
    rating_aware: bool = True
    rating_penalty_weight: float = 2.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "seed_strategy", SeedStrategy(self.seed_strategy))
        if not MIN_ITERATIONS <= self.iterations <= MAX_ITERATIONS:
            raise ValueError(
                f"iterations must be between {MIN_ITERATIONS} and {MAX_ITERATIONS} (got {self.iterations})"
            )
        if self.rating_penalty_weight < 0.0:
            raise ValueError(f"rating_penalty_weight must be >= 0 (got {self.rating_penalty_weight})")


@dataclass(frozen=True)
class BalancedTeams:
    """Final rosters with the objective before and after refinement."""

    team1: Team
    team2: Team
    score: float
    seed_score: float

    @property
    def rating_gap(self) -> float:
        return abs(self.team1.average_rating - self.team2.average_rating)


def skill_category(player: Player) -> SkillCategory:
    if player.category is not None:
        return player.category
    return category_for_rating(player.current_rating)


def role_counts(players: Iterable[Player]) -> Counter[Role]:
    counts: Counter[Role] = Counter()
    for player in players:
        counts.update(player.roles)
    return counts


def role_coverage(players: Iterable[Player]) -> set[Role]:
    return set(role_counts(players))


def category_counts(players: Iterable[Player]) -> dict[SkillCategory, int]:
    counts = Counter(skill_category(player) for player in players)
    return {category: counts.get(category, 0) for category in _CATEGORY_ORDER}


def role_score(players: Iterable[Player]) -> float:
    """+10 per distinct role covered, -2 per extra player on an already covered role."""
    counts = role_counts(players)
    duplicates = sum(max(0, count - 1) for count in counts.values())
    return (ROLE_COVERAGE_POINTS * len(counts)) - (ROLE_DUPLICATE_PENALTY * duplicates)


def _average_rating(players: Sequence[Player]) -> float:
    return Team(tuple(players)).average_rating


def combined_score(
    team1: Sequence[Player],
    team2: Sequence[Player],
    params: BalancerParameters | None = None,
) -> float:
    params = params or BalancerParameters()
    score = role_score(team1) + role_score(team2)
    if params.rating_aware:
        score -= params.rating_penalty_weight * abs(_average_rating(team1) - _average_rating(team2))
    return score


def snake_draft_split(players: Sequence[Player], rng: random.Random) -> tuple[list[Player], list[Player]]:
    """Sort by rating (ties in random order) and deal 1-2-2-1."""
    shuffled = list(players)
    rng.shuffle(shuffled)
    ordered = sorted(shuffled, key=lambda player: player.current_rating, reverse=True)

    team1: list[Player] = []
    team2: list[Player] = []
    for position, player in enumerate(ordered):
        if position % 4 in (0, 3):
            team1.append(player)
        else:
            team2.append(player)
    return team1, team2


def category_stratified_split(
    players: Sequence[Player], rng: random.Random
) -> tuple[list[Player], list[Player]]:
    """Alternate within each shuffled category, strongest category first."""
    team1: list[Player] = []
    team2: list[Player] = []
    for category in _CATEGORY_ORDER:
        sub_pool = [player for player in players if skill_category(player) is category]
        rng.shuffle(sub_pool)
        for index, player in enumerate(sub_pool):
            if index % 2 == 0:
                team1.append(player)
            else:
                team2.append(player)
    return team1, team2


def reconcile_sizes(team1: list[Player], team2: list[Player]) -> tuple[list[Player], list[Player]]:
    """Move trailing players from the larger team until sizes differ by at most parity."""
    team1 = list(team1)
    team2 = list(team2)
    allowed_gap = (len(team1) + len(team2)) % 2
    while abs(len(team1) - len(team2)) > allowed_gap:
        if len(team1) > len(team2):
            team2.append(team1.pop())
        else:
            team1.append(team2.pop())
    return team1, team2


def _ensure_unique(players: Sequence[Player]) -> None:
    counts = Counter(player.key for player in players)
    duplicates = sorted(key for key, count in counts.items() if count > 1)
    if duplicates:
        raise DuplicatePlayerError(f"players selected more than once: {duplicates}")


def _is_valid_partition(team1: Sequence[Player], team2: Sequence[Player], expected_keys: frozenset[str]) -> bool:
    keys = [player.key for player in team1] + [player.key for player in team2]
    return len(keys) == len(expected_keys) and set(keys) == expected_keys


class TeamBalancer:
    """Seeded split followed by randomized swap refinement."""

    def __init__(
        self,
        params: BalancerParameters | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.params = params or BalancerParameters()
        self.rng = rng or random.Random()

    def _seed(self, players: Sequence[Player]) -> tuple[list[Player], list[Player]]:
        if self.params.seed_strategy is SeedStrategy.CATEGORY_STRATIFIED:
            team1, team2 = category_stratified_split(players, self.rng)
        else:
            team1, team2 = snake_draft_split(players, self.rng)
        return reconcile_sizes(team1, team2)

    def _pick_swap(self, team1: Sequence[Player], team2: Sequence[Player]) -> tuple[int, int] | None:
        if not team1 or not team2:
            return None
        if self.params.seed_strategy is SeedStrategy.SNAKE_DRAFT:
            return self.rng.randrange(len(team1)), self.rng.randrange(len(team2))

        candidates: list[tuple[list[int], list[int]]] = []
        for category in _CATEGORY_ORDER:
            team1_indices = [index for index, player in enumerate(team1) if skill_category(player) is category]
            team2_indices = [index for index, player in enumerate(team2) if skill_category(player) is category]
            if team1_indices and team2_indices:
                candidates.append((team1_indices, team2_indices))
        if not candidates:
            return None
        team1_indices, team2_indices = self.rng.choice(candidates)
        return self.rng.choice(team1_indices), self.rng.choice(team2_indices)

    def balance(self, pool: Iterable[Player]) -> BalancedTeams:
        players = list(pool)
        if len(players) < MIN_POOL_SIZE:
            raise InsufficientPoolError(len(players), MIN_POOL_SIZE)
        _ensure_unique(players)
        expected_keys = frozenset(player.key for player in players)

        best_team1, best_team2 = self._seed(players)
        seed_score = combined_score(best_team1, best_team2, self.params)
        best_score = seed_score

        for _ in range(self.params.iterations):
            swap = self._pick_swap(best_team1, best_team2)
            if swap is None:
                break
            index1, index2 = swap
            team1_temp = list(best_team1)
            team2_temp = list(best_team2)
            team1_temp[index1], team2_temp[index2] = team2_temp[index2], team1_temp[index1]
            if not _is_valid_partition(team1_temp, team2_temp, expected_keys):
                continue

            score = combined_score(team1_temp, team2_temp, self.params)
            if score > best_score:
                best_team1, best_team2, best_score = team1_temp, team2_temp, score

        logger.debug(
            "balanced pool_size=%d strategy=%s seed_score=%.2f best_score=%.2f",
            len(players),
            self.params.seed_strategy.value,
            seed_score,
            best_score,
        )
        return BalancedTeams(
            team1=Team(tuple(best_team1)),
            team2=Team(tuple(best_team2)),
            score=best_score,
            seed_score=seed_score,
        )


def balance_teams(
    pool: Iterable[Player],
    params: BalancerParameters | None = None,
    *,
    rng: random.Random | None = None,
) -> BalancedTeams:
    """Partition ``pool`` into two balanced, role-diverse teams."""
    return TeamBalancer(params, rng=rng).balance(pool)


__all__ = [
    "BalancedTeams",
    "BalancerParameters",
    "MAX_ITERATIONS",
    "MIN_ITERATIONS",
    "MIN_POOL_SIZE",
    "SeedStrategy",
    "TeamBalancer",
    "balance_teams",
    "category_counts",
    "category_stratified_split",
    "combined_score",
    "reconcile_sizes",
    "role_coverage",
    "role_score",
    "skill_category",
    "snake_draft_split",
]
