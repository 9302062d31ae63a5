"""Registry of available rating strategies."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from domain.config_base import BaseSystemConfig, select_system_config
from domain.ratings.elo.calculator import EloParameters, PlayerEloCalculator
from domain.ratings.elo.config import load_elo_system_configs
from domain.ratings.glicko2.calculator import Glicko2Parameters, PlayerGlicko2Calculator
from domain.ratings.glicko2.config import load_glicko2_system_configs
from domain.ratings.protocol import Algorithm, RatingStrategy

ROOT_DIR = Path(__file__).resolve().parents[3]

LoadConfigsFn = Callable[[Path], list[Any]]
CreateStrategyFn = Callable[[Any], RatingStrategy]


@dataclass(frozen=True)
class RatingStrategyDescriptor:
    """Everything required to build one rating strategy."""

    algorithm: Algorithm
    config_dir: Path
    load_configs: LoadConfigsFn
    create_strategy: CreateStrategyFn
    default_parameters: Any

    def build(self, config_name: str | None = None, *, config_dir: Path | None = None) -> RatingStrategy:
        """Build from the named TOML config, or from defaults when none exist."""
        target_dir = config_dir or self.config_dir
        if config_name is None and not target_dir.is_dir():
            return self.create_strategy(self.default_parameters)
        configs: list[BaseSystemConfig] = self.load_configs(target_dir)
        config = select_system_config(configs, config_name)
        return self.create_strategy(getattr(config, "parameters"))


_REGISTRY: dict[Algorithm, RatingStrategyDescriptor] = {}


def register(descriptor: RatingStrategyDescriptor) -> None:
    """Register one rating-strategy descriptor."""
    if descriptor.algorithm in _REGISTRY:
        raise ValueError(f"Duplicate rating strategy registration for algorithm={descriptor.algorithm.value}")
    _REGISTRY[descriptor.algorithm] = descriptor


def get_all() -> list[RatingStrategyDescriptor]:
    """Return all registered descriptors in deterministic order."""
    return [_REGISTRY[key] for key in sorted(_REGISTRY.keys(), key=lambda item: item.value)]


def get(algorithm: Algorithm | str) -> RatingStrategyDescriptor:
    """Get one registered descriptor by algorithm key."""
    try:
        key = Algorithm(str(algorithm).lower()) if not isinstance(algorithm, Algorithm) else algorithm
        return _REGISTRY[key]
    except (KeyError, ValueError) as exc:
        available = ", ".join(item.value for item in sorted(_REGISTRY.keys(), key=lambda item: item.value))
        raise KeyError(
            f"No rating strategy registered for {algorithm}. Available: {available}"
        ) from exc


def _register_defaults() -> None:
    if _REGISTRY:
        return
    register(
        RatingStrategyDescriptor(
            algorithm=Algorithm.ELO,
            config_dir=ROOT_DIR / "configs" / "ratings" / "elo",
            load_configs=load_elo_system_configs,
            create_strategy=PlayerEloCalculator,
            default_parameters=EloParameters(),
        )
    )
    register(
        RatingStrategyDescriptor(
            algorithm=Algorithm.GLICKO2,
            config_dir=ROOT_DIR / "configs" / "ratings" / "glicko2",
            load_configs=load_glicko2_system_configs,
            create_strategy=PlayerGlicko2Calculator,
            default_parameters=Glicko2Parameters(),
        )
    )


_register_defaults()

__all__ = [
    "RatingStrategyDescriptor",
    "get",
    "get_all",
    "register",
]
