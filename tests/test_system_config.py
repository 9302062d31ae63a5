"""Tests for TOML-based rating and balancing config loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from domain.balancing.balancer import SeedStrategy
from domain.balancing.config import load_balancing_system_configs
from domain.config_base import select_system_config
from domain.ratings.elo.config import load_elo_system_configs
from domain.ratings.glicko2.config import load_glicko2_system_configs
from domain.ratings.tiers import Tier

ROOT_DIR = Path(__file__).resolve().parents[1]


def test_load_elo_system_configs_from_directory(tmp_path: Path) -> None:
    config_path = tmp_path / "default.toml"
    config_path.write_text(
        """
[system]
name = "system_a"
description = "A test system"

[elo]
k_factor = 24.0
scale_factor = 420.0
""".strip()
    )

    configs = load_elo_system_configs(tmp_path)
    assert len(configs) == 1

    system = configs[0]
    assert system.name == "system_a"
    assert system.description == "A test system"
    assert system.parameters.k_factor == pytest.approx(24.0)
    assert system.parameters.scale_factor == pytest.approx(420.0)


def test_elo_defaults_when_omitted(tmp_path: Path) -> None:
    (tmp_path / "defaulted.toml").write_text('[system]\nname = "elo_defaulted"\n')

    system = load_elo_system_configs(tmp_path)[0]

    assert system.description is None
    assert system.parameters.k_factor == pytest.approx(32.0)
    assert system.parameters.scale_factor == pytest.approx(400.0)


def test_invalid_k_factor_raises_validation_error(tmp_path: Path) -> None:
    (tmp_path / "invalid.toml").write_text('[system]\nname = "bad"\n\n[elo]\nk_factor = 0.0\n')

    with pytest.raises(ValueError, match=r"k_factor must be > 0"):
        load_elo_system_configs(tmp_path)


def test_missing_system_name_raises(tmp_path: Path) -> None:
    (tmp_path / "nameless.toml").write_text("[elo]\nk_factor = 16.0\n")

    with pytest.raises(ValueError, match=r"\[system\].name is required"):
        load_elo_system_configs(tmp_path)


def test_duplicate_names_raise_error(tmp_path: Path) -> None:
    template = '[system]\nname = "dup"\n\n[glicko2]\n'
    (tmp_path / "a.toml").write_text(template)
    (tmp_path / "b.toml").write_text(template)

    with pytest.raises(ValueError, match="Duplicate glicko2 system names"):
        load_glicko2_system_configs(tmp_path)


def test_missing_directory_and_empty_directory(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_elo_system_configs(tmp_path / "missing")
    with pytest.raises(ValueError, match="No .toml config files"):
        load_elo_system_configs(tmp_path)


def test_all_glicko2_parameter_defaults_when_omitted(tmp_path: Path) -> None:
    (tmp_path / "defaulted.toml").write_text('[system]\nname = "glicko2_defaulted"\n\n[glicko2]\n')

    system = load_glicko2_system_configs(tmp_path)[0]

    assert system.parameters.initial_volatility == pytest.approx(0.06)
    assert system.parameters.tau == pytest.approx(0.5)
    assert system.parameters.epsilon == pytest.approx(1e-6)
    assert system.parameters.max_iterations == 100
    assert system.parameters.min_rd == pytest.approx(50.0)
    assert system.parameters.max_rd == pytest.approx(350.0)
    assert system.parameters.decay_constant == pytest.approx(2.04)
    assert system.parameters.calibration_matches == 7


def test_invalid_glicko2_rd_bounds_raise(tmp_path: Path) -> None:
    (tmp_path / "invalid_rd.toml").write_text(
        '[system]\nname = "glicko2_invalid_rd"\n\n[glicko2]\nmin_rd = 400.0\nmax_rd = 350.0\n'
    )

    with pytest.raises(ValueError, match=r"min_rd must be <= max_rd"):
        load_glicko2_system_configs(tmp_path)


def test_load_balancing_config(tmp_path: Path) -> None:
    (tmp_path / "default.toml").write_text(
        """
[system]
name = "balancing_a"

[balancing]
seed_strategy = "category_stratified"
iterations = 150
rating_aware = false
rating_penalty_weight = 1.5

[league]
default_tier = "maaramay"
""".strip()
    )

    system = load_balancing_system_configs(tmp_path)[0]

    assert system.parameters.seed_strategy is SeedStrategy.CATEGORY_STRATIFIED
    assert system.parameters.iterations == 150
    assert system.parameters.rating_aware is False
    assert system.parameters.rating_penalty_weight == pytest.approx(1.5)
    assert system.default_tier is Tier.MAARAMAY


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ('[balancing]\nseed_strategy = "greedy"\n', r"seed_strategy must be one of"),
        ("[balancing]\niterations = 500\n", r"iterations must be between 100 and 200"),
        ('[balancing]\nrating_aware = "yes"\n', r"rating_aware must be a boolean"),
        ('[league]\ndefault_tier = "Legend"\n', r"default_tier"),
    ],
)
def test_invalid_balancing_values_raise(tmp_path: Path, body: str, message: str) -> None:
    (tmp_path / "invalid.toml").write_text(f'[system]\nname = "invalid"\n\n{body}')

    with pytest.raises(ValueError, match=message):
        load_balancing_system_configs(tmp_path)


def test_shipped_configs_load() -> None:
    configs_dir = ROOT_DIR / "configs"

    assert load_elo_system_configs(configs_dir / "ratings" / "elo")
    assert load_glicko2_system_configs(configs_dir / "ratings" / "glicko2")
    balancing = load_balancing_system_configs(configs_dir / "balancing")

    default = select_system_config(balancing, None)
    assert default.file_path.name == "default.toml"
    assert default.parameters.seed_strategy is SeedStrategy.SNAKE_DRAFT
    assert default.default_tier is Tier.BUDLOTAY
    assert select_system_config(balancing, "balancing_category").parameters.rating_aware is False


def test_select_unknown_config_raises(tmp_path: Path) -> None:
    (tmp_path / "only.toml").write_text('[system]\nname = "only"\n')
    configs = load_elo_system_configs(tmp_path)

    assert select_system_config(configs, None).name == "only"
    with pytest.raises(ValueError, match="No config named 'other.toml'"):
        select_system_config(configs, "other.toml")
