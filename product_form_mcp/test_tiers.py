"""
订阅等级约束表测试
"""

import dataclasses

import pytest

from product_form_mcp.tiers import (
    TIER_CONSTRAINTS,
    InvalidTierError,
    Tier,
    constraints_for,
    parse_tier,
)


def test_every_tier_has_constraints():
    for tier in Tier:
        assert constraints_for(tier) is TIER_CONSTRAINTS[tier]
        assert constraints_for(tier.value) is TIER_CONSTRAINTS[tier]


def test_freemium_limits():
    c = constraints_for("freemium")
    assert c.max_categories == 1
    assert c.max_secondary_categories == 0
    assert c.max_features == 3
    assert not c.gallery_allowed
    assert not c.video_allowed
    assert not c.demo_link_allowed


def test_silver_and_gold_limits():
    silver = constraints_for(Tier.SILVER)
    assert silver.max_features == 5
    assert silver.gallery_allowed and silver.max_gallery_images == 5
    assert not silver.video_allowed

    gold = constraints_for(Tier.GOLD)
    assert gold.max_categories == 5
    assert gold.max_features == 10
    assert gold.max_gallery_images == 10
    assert gold.video_allowed and gold.demo_link_allowed


def test_constraints_grow_with_tier():
    """测试更高等级的限制不会更严格"""
    ordered = sorted(Tier)
    assert ordered == [Tier.FREEMIUM, Tier.SILVER, Tier.GOLD]
    for lower, higher in zip(ordered, ordered[1:]):
        lo, hi = TIER_CONSTRAINTS[lower], TIER_CONSTRAINTS[higher]
        for field in dataclasses.fields(lo):
            assert getattr(hi, field.name) >= getattr(lo, field.name), field.name


@pytest.mark.parametrize("value, expected", [
    ("plus", Tier.SILVER),
    ("premium", Tier.GOLD),
    (" Gold ", Tier.GOLD),
    ("FREEMIUM", Tier.FREEMIUM),
    (Tier.SILVER, Tier.SILVER),
])
def test_parse_tier_aliases(value, expected):
    assert parse_tier(value) is expected


@pytest.mark.parametrize("value", ["platinum", "", None, 2])
def test_invalid_tier_fails_fast(value):
    with pytest.raises(InvalidTierError):
        constraints_for(value)


def test_invalid_tier_is_value_error():
    assert issubclass(InvalidTierError, ValueError)


def test_table_is_read_only():
    with pytest.raises(TypeError):
        TIER_CONSTRAINTS[Tier.FREEMIUM] = TIER_CONSTRAINTS[Tier.GOLD]
    with pytest.raises(dataclasses.FrozenInstanceError):
        TIER_CONSTRAINTS[Tier.FREEMIUM].max_features = 99
