"""Load team-balancing and league defaults from TOML files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from domain.balancing.balancer import MAX_ITERATIONS, BalancerParameters, SeedStrategy
from domain.config_base import BaseSystemConfig, load_system_configs, parse_system_section
from domain.ratings.tiers import Tier, parse_tier


@dataclass(frozen=True)
class BalancingSystemConfig(BaseSystemConfig):
    """Balancer parameters plus league-wide defaults for new players."""

    parameters: BalancerParameters
    default_tier: Tier = Tier.BUDLOTAY


def load_balancing_system_configs(config_dir: Path) -> list[BalancingSystemConfig]:
    """Load and validate all balancing TOML config files in a directory."""
    return load_system_configs(
        config_dir,
        _parse_balancing_system_config,
        duplicate_name_label="balancing",
    )


def _parse_balancing_system_config(raw: dict[str, Any], file_path: Path) -> BalancingSystemConfig:
    name, description = parse_system_section(raw, file_path)
    balancing_raw = raw.get("balancing", {})
    league_raw = raw.get("league", {})

    seed_value = str(balancing_raw.get("seed_strategy", SeedStrategy.SNAKE_DRAFT.value))
    try:
        seed_strategy = SeedStrategy(seed_value)
    except ValueError as exc:
        choices = ", ".join(strategy.value for strategy in SeedStrategy)
        raise ValueError(f"{file_path}: [balancing].seed_strategy must be one of {choices}") from exc

    rating_aware = balancing_raw.get("rating_aware", True)
    if not isinstance(rating_aware, bool):
        raise ValueError(f"{file_path}: [balancing].rating_aware must be a boolean")

    try:
        parameters = BalancerParameters(
            seed_strategy=seed_strategy,
            iterations=int(balancing_raw.get("iterations", MAX_ITERATIONS)),
            rating_aware=rating_aware,
            rating_penalty_weight=float(balancing_raw.get("rating_penalty_weight", 2.0)),
        )
    except ValueError as exc:
        raise ValueError(f"{file_path}: [balancing] {exc}") from exc

    try:
        default_tier = parse_tier(str(league_raw.get("default_tier", Tier.BUDLOTAY.value)))
    except ValueError as exc:
        raise ValueError(f"{file_path}: [league].default_tier {exc}") from exc

    return BalancingSystemConfig(
        name=name,
        description=description,
        file_path=file_path,
        parameters=parameters,
        default_tier=default_tier,
    )
