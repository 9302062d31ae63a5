"""Shared config-loading utilities for rating and balancing systems."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar
import tomllib

DEFAULT_CONFIG_FILE = "default.toml"


@dataclass(frozen=True)
class BaseSystemConfig:
    """Minimal metadata shared across all system configs."""

    name: str
    description: str | None
    file_path: Path


T = TypeVar("T", bound=BaseSystemConfig)


def load_system_configs(
    config_dir: Path,
    parser: Callable[[dict[str, Any], Path], T],
    *,
    duplicate_name_label: str = "rating",
) -> list[T]:
    """Load all TOML files in a directory with duplicate-name validation."""
    if not config_dir.exists():
        raise FileNotFoundError(f"Config directory not found: {config_dir}")
    if not config_dir.is_dir():
        raise NotADirectoryError(f"Config path is not a directory: {config_dir}")

    config_files = sorted(config_dir.glob("*.toml"))
    if not config_files:
        raise ValueError(f"No .toml config files found in: {config_dir}")

    systems: list[T] = []
    for file_path in config_files:
        with file_path.open("rb") as file:
            raw = tomllib.load(file)
        systems.append(parser(raw, file_path))

    names = [system.name for system in systems]
    if len(names) != len(set(names)):
        raise ValueError(
            f"Duplicate {duplicate_name_label} system names found in {config_dir}: {names}"
        )

    return systems


def select_system_config(configs: list[T], config_name: str | None) -> T:
    """Pick a config by file or system name; without a name prefer ``default.toml``."""
    if config_name is None:
        for config in configs:
            if config.file_path.name == DEFAULT_CONFIG_FILE:
                return config
        return configs[0]
    for config in configs:
        if config.file_path.name == config_name or config.name == config_name:
            return config
    available = ", ".join(config.file_path.name for config in configs)
    raise ValueError(f"No config named '{config_name}'. Available: {available}")


def parse_system_section(raw: dict[str, Any], file_path: Path) -> tuple[str, str | None]:
    """Validate the common ``[system]`` table and return (name, description)."""
    system_raw = raw.get("system", {})

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")

    description_value = system_raw.get("description")
    description = None if description_value is None else str(description_value)
    return name, description


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "BaseSystemConfig",
    "load_system_configs",
    "parse_system_section",
    "select_system_config",
]
