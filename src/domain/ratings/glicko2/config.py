"""Load Glicko-2 system definitions from TOML files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from domain.config_base import BaseSystemConfig, load_system_configs, parse_system_section
from domain.ratings.glicko2.calculator import Glicko2Parameters


@dataclass(frozen=True)
class Glicko2SystemConfig(BaseSystemConfig):
    """Configuration for one Glicko-2 update mode."""

    parameters: Glicko2Parameters


def load_glicko2_system_configs(config_dir: Path) -> list[Glicko2SystemConfig]:
    """Load and validate all Glicko-2 TOML config files in a directory."""
    return load_system_configs(
        config_dir,
        _parse_glicko2_system_config,
        duplicate_name_label="glicko2",
    )


def _parse_glicko2_system_config(raw: dict[str, Any], file_path: Path) -> Glicko2SystemConfig:
    name, description = parse_system_section(raw, file_path)
    glicko2_raw = raw.get("glicko2", {})

    parameters = Glicko2Parameters(
        initial_volatility=float(glicko2_raw.get("initial_volatility", 0.06)),
        tau=float(glicko2_raw.get("tau", 0.5)),
        epsilon=float(glicko2_raw.get("epsilon", 1e-6)),
        max_iterations=int(glicko2_raw.get("max_iterations", 100)),
        min_rd=float(glicko2_raw.get("min_rd", 50.0)),
        max_rd=float(glicko2_raw.get("max_rd", 350.0)),
        decay_constant=float(glicko2_raw.get("decay_constant", 2.04)),
        calibration_matches=int(glicko2_raw.get("calibration_matches", 7)),
    )
    _validate_parameters(file_path=file_path, parameters=parameters)

    return Glicko2SystemConfig(
        name=name,
        description=description,
        file_path=file_path,
        parameters=parameters,
    )


def _validate_parameters(*, file_path: Path, parameters: Glicko2Parameters) -> None:
    if parameters.initial_volatility <= 0.0:
        raise ValueError(f"{file_path}: [glicko2].initial_volatility must be > 0")
    if parameters.tau <= 0.0:
        raise ValueError(f"{file_path}: [glicko2].tau must be > 0")
    if parameters.epsilon <= 0.0:
        raise ValueError(f"{file_path}: [glicko2].epsilon must be > 0")
    if parameters.max_iterations <= 0:
        raise ValueError(f"{file_path}: [glicko2].max_iterations must be > 0")
    if parameters.min_rd <= 0.0:
        raise ValueError(f"{file_path}: [glicko2].min_rd must be > 0")
    if parameters.max_rd <= 0.0:
        raise ValueError(f"{file_path}: [glicko2].max_rd must be > 0")
    if parameters.min_rd > parameters.max_rd:
        raise ValueError(f"{file_path}: [glicko2].min_rd must be <= max_rd")
    if parameters.decay_constant <= 0.0:
        raise ValueError(f"{file_path}: [glicko2].decay_constant must be > 0")
    if parameters.calibration_matches < 0:
        raise ValueError(f"{file_path}: [glicko2].calibration_matches must be >= 0")
