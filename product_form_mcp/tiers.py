"""
订阅等级约束表
Subscription tier constraints for product listings
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Union


class InvalidTierError(ValueError):
    """Raised when a value outside the Tier enumeration is used"""


class Tier(str, Enum):
    FREEMIUM = "freemium"
    SILVER = "silver"
    GOLD = "gold"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank >= other.rank


_TIER_ORDER = (Tier.FREEMIUM, Tier.SILVER, Tier.GOLD)

# 产品页面使用 plus/premium 命名
TIER_ALIASES = {
    "plus": Tier.SILVER,
    "premium": Tier.GOLD,
}

TierLike = Union[Tier, str]


@dataclass(frozen=True)
class TierConstraints:
    """Per-tier limits for a product listing"""
    max_categories: int  # includes main category
    max_features: int
    gallery_allowed: bool
    max_gallery_images: int
    video_allowed: bool
    demo_link_allowed: bool

    @property
    def max_secondary_categories(self) -> int:
        return max(self.max_categories - 1, 0)

    def to_dict(self) -> dict:
        return {
            "max_categories": self.max_categories,
            "max_secondary_categories": self.max_secondary_categories,
            "max_features": self.max_features,
            "gallery_allowed": self.gallery_allowed,
            "max_gallery_images": self.max_gallery_images,
            "video_allowed": self.video_allowed,
            "demo_link_allowed": self.demo_link_allowed,
        }


TIER_CONSTRAINTS: Mapping[Tier, TierConstraints] = MappingProxyType({
    Tier.FREEMIUM: TierConstraints(
        max_categories=1,  # main only, no secondary
        max_features=3,
        gallery_allowed=False,
        max_gallery_images=0,
        video_allowed=False,
        demo_link_allowed=False,
    ),
    Tier.SILVER: TierConstraints(
        max_categories=3,
        max_features=5,
        gallery_allowed=True,
        max_gallery_images=5,
        video_allowed=False,
        demo_link_allowed=False,
    ),
    Tier.GOLD: TierConstraints(
        max_categories=5,
        max_features=10,
        gallery_allowed=True,
        max_gallery_images=10,
        video_allowed=True,
        demo_link_allowed=True,
    ),
})


def parse_tier(value: TierLike) -> Tier:
    """Resolve a tier name (or alias) to a Tier

    Raises:
        InvalidTierError: value is not part of the tier enumeration
    """
    if isinstance(value, Tier):
        return value
    if not isinstance(value, str):
        raise InvalidTierError(f"Invalid tier: {value!r}")

    key = value.strip().lower()
    if key in TIER_ALIASES:
        return TIER_ALIASES[key]
    try:
        return Tier(key)
    except ValueError:
        raise InvalidTierError(f"Invalid tier: {value!r}") from None


def constraints_for(tier: TierLike) -> TierConstraints:
    """Look up the limits for a tier"""
    return TIER_CONSTRAINTS[parse_tier(tier)]
