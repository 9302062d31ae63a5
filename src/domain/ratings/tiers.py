"""Rating tier ladder and its inverse default-rating lookup."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from domain.common import SkillCategory
from domain.ratings.common import require_finite


class Tier(str, Enum):
    """Named skill brackets, lowest first."""

    BUDLOT = "Budlot"
    BUDLOTAY = "Budlotay"
    MAARAMAY = "Maaramay"
    MAARAM = "Maaram"
    MAKARITAY = "Makaritay"
    MAKARIT = "Makarit"
    MAKARIT_KARITAN = "MakaritKaritan"
    GIKAKARITI = "Gikakariti"


@dataclass(frozen=True)
class TierInfo:
    """Presentation metadata for one tier."""

    tier: Tier
    min_rating: float | None
    default_rating: float
    color: str

    @property
    def name(self) -> str:
        return self.tier.value


# Ordered lowest to highest. The lowest tier has no floor.
TIER_LADDER: tuple[TierInfo, ...] = (
    TierInfo(Tier.BUDLOT, None, 900.0, "gray"),
    TierInfo(Tier.BUDLOTAY, 1000.0, 1000.0, "blue"),
    TierInfo(Tier.MAARAMAY, 1200.0, 1200.0, "green"),
    TierInfo(Tier.MAARAM, 1400.0, 1400.0, "purple"),
    TierInfo(Tier.MAKARITAY, 1600.0, 1600.0, "amber"),
    TierInfo(Tier.MAKARIT, 1800.0, 1800.0, "orange"),
    TierInfo(Tier.MAKARIT_KARITAN, 2000.0, 2000.0, "red"),
    TierInfo(Tier.GIKAKARITI, 2200.0, 2200.0, "purple-pink"),
)

_TIER_INFO: dict[Tier, TierInfo] = {info.tier: info for info in TIER_LADDER}
_TIER_INDEX: dict[Tier, int] = {info.tier: index for index, info in enumerate(TIER_LADDER)}

# Category brackets expressed as the lowest tier of each category.
_CATEGORY_FLOORS: tuple[tuple[SkillCategory, Tier], ...] = (
    (SkillCategory.EXPERT, Tier.MAARAM),
    (SkillCategory.INTERMEDIATE, Tier.MAARAMAY),
    (SkillCategory.BEGINNER, Tier.BUDLOTAY),
)


def parse_tier(value: Tier | str) -> Tier:
    """Resolve a tier from its enum, value or member name (case-insensitive)."""
    if isinstance(value, Tier):
        return value
    normalized = value.strip().lower().replace("_", "")
    for tier in Tier:
        if normalized in (tier.value.lower(), tier.name.lower().replace("_", "")):
            return tier
    available = ", ".join(tier.value for tier in Tier)
    raise ValueError(f"Unknown tier {value!r}. Available: {available}")


def tier_of(rating: float) -> Tier:
    """Highest tier whose floor does not exceed ``rating``."""
    require_finite("rating", rating)
    for info in reversed(TIER_LADDER):
        if info.min_rating is None or rating >= info.min_rating:
            return info.tier
    return TIER_LADDER[0].tier


def tier_info(tier: Tier | str) -> TierInfo:
    return _TIER_INFO[parse_tier(tier)]


def tier_index(tier: Tier | str) -> int:
    return _TIER_INDEX[parse_tier(tier)]


def default_rating_for(tier: Tier | str) -> float:
    return tier_info(tier).default_rating


def category_for_rating(rating: float) -> SkillCategory:
    """Coarse category implied by a continuous rating."""
    rating_tier_index = tier_index(tier_of(rating))
    for category, floor_tier in _CATEGORY_FLOORS[:-1]:
        if rating_tier_index >= tier_index(floor_tier):
            return category
    return SkillCategory.BEGINNER


def parse_category(value: SkillCategory | str) -> SkillCategory:
    """Resolve a skill category from its enum, value or member name (case-insensitive)."""
    if isinstance(value, SkillCategory):
        return value
    normalized = value.strip().lower()
    for category in SkillCategory:
        if normalized in (category.value.lower(), category.name.lower()):
            return category
    available = ", ".join(category.value for category in SkillCategory)
    raise ValueError(f"Unknown skill category {value!r}. Available: {available}")


def representative_tier(category: SkillCategory | str) -> Tier:
    resolved = parse_category(category)
    for candidate, floor_tier in _CATEGORY_FLOORS:
        if candidate is resolved:
            return floor_tier
    raise ValueError(f"Unknown skill category {category!r}")


def default_rating_for_category(category: SkillCategory | str) -> float:
    return default_rating_for(representative_tier(category))


__all__ = [
    "TIER_LADDER",
    "Tier",
    "TierInfo",
    "category_for_rating",
    "default_rating_for",
    "default_rating_for_category",
    "parse_category",
    "parse_tier",
    "representative_tier",
    "tier_index",
    "tier_info",
    "tier_of",
]
