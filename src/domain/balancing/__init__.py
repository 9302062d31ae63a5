"""Team balancing modules."""

from domain.balancing.balancer import (
    BalancedTeams,
    BalancerParameters,
    SeedStrategy,
    TeamBalancer,
    balance_teams,
    category_counts,
    role_coverage,
    role_score,
)
from domain.balancing.config import BalancingSystemConfig, load_balancing_system_configs

__all__ = [
    "BalancedTeams",
    "BalancerParameters",
    "BalancingSystemConfig",
    "SeedStrategy",
    "TeamBalancer",
    "balance_teams",
    "category_counts",
    "load_balancing_system_configs",
    "role_coverage",
    "role_score",
]
