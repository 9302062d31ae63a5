"""Tier ladder and category mapping tests."""

from __future__ import annotations

import pytest

from domain.common import SkillCategory
from domain.ratings.tiers import (
    TIER_LADDER,
    Tier,
    category_for_rating,
    default_rating_for,
    default_rating_for_category,
    parse_category,
    parse_tier,
    tier_index,
    tier_info,
    tier_of,
)


@pytest.mark.parametrize(
    ("rating", "expected"),
    [
        (0.0, Tier.BUDLOT),
        (999.0, Tier.BUDLOT),
        (1000.0, Tier.BUDLOTAY),
        (1199.0, Tier.BUDLOTAY),
        (1200.0, Tier.MAARAMAY),
        (1400.0, Tier.MAARAM),
        (1650.0, Tier.MAKARITAY),
        (1800.0, Tier.MAKARIT),
        (2000.0, Tier.MAKARIT_KARITAN),
        (2199.9, Tier.MAKARIT_KARITAN),
        (2200.0, Tier.GIKAKARITI),
        (3500.0, Tier.GIKAKARITI),
    ],
)
def test_tier_of_uses_inclusive_floors(rating: float, expected: Tier) -> None:
    assert tier_of(rating) is expected


def test_tier_of_is_monotonic() -> None:
    previous = -1
    for rating in range(0, 2600, 10):
        current = tier_index(tier_of(float(rating)))
        assert current >= previous
        previous = current


def test_default_rating_falls_inside_its_own_tier() -> None:
    for info in TIER_LADDER:
        assert tier_of(default_rating_for(info.tier)) is info.tier


def test_tier_metadata() -> None:
    info = tier_info("Budlot")
    assert info.min_rating is None
    assert info.default_rating == pytest.approx(900.0)
    assert info.color == "gray"

    top = tier_info(Tier.GIKAKARITI)
    assert top.name == "Gikakariti"
    assert top.min_rating == pytest.approx(2200.0)
    assert top.color == "purple-pink"
    assert len(TIER_LADDER) == 8


@pytest.mark.parametrize("value", ["MakaritKaritan", "makaritkaritan", "MAKARIT_KARITAN", " makarit_karitan "])
def test_parse_tier_accepts_value_or_member_name(value: str) -> None:
    assert parse_tier(value) is Tier.MAKARIT_KARITAN


def test_parse_tier_rejects_unknown_names() -> None:
    with pytest.raises(ValueError, match="Unknown tier"):
        parse_tier("Legend")


@pytest.mark.parametrize(
    ("rating", "expected"),
    [
        (900.0, SkillCategory.BEGINNER),
        (1199.0, SkillCategory.BEGINNER),
        (1200.0, SkillCategory.INTERMEDIATE),
        (1399.0, SkillCategory.INTERMEDIATE),
        (1400.0, SkillCategory.EXPERT),
        (2400.0, SkillCategory.EXPERT),
    ],
)
def test_category_for_rating(rating: float, expected: SkillCategory) -> None:
    assert category_for_rating(rating) is expected


def test_category_default_ratings() -> None:
    assert default_rating_for_category(SkillCategory.EXPERT) == pytest.approx(1400.0)
    assert default_rating_for_category("Intermediate") == pytest.approx(1200.0)
    assert default_rating_for_category(SkillCategory.BEGINNER) == pytest.approx(1000.0)


@pytest.mark.parametrize("value", ["Expert", "expert", " EXPERT "])
def test_parse_category_ignores_case(value: str) -> None:
    assert parse_category(value) is SkillCategory.EXPERT
    assert default_rating_for_category(value) == pytest.approx(1400.0)


def test_parse_category_rejects_unknown_names() -> None:
    with pytest.raises(ValueError, match="Unknown skill category"):
        parse_category("Pro")
