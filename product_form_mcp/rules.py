"""
等级约束执行
Tier-gated mutations for product drafts.

Every function here is total: a mutation that would break a tier limit
returns the draft it was given, untouched. Callers check the matching
``can_*`` predicate first to disable controls; these functions are the
second line of defence, not an error channel.
"""

import logging
from typing import Any, List

from .models import COLLECTION_FIELDS, READ_ONLY_FIELDS, ProductDraft
from .tiers import TierLike, constraints_for

logger = logging.getLogger(__name__)


def _rejected(action: str, value: Any, reason: str) -> None:
    logger.debug(f"{action}({value!r}) ignored: {reason}")


# Category helpers

def can_add_category(draft: ProductDraft, tier: TierLike) -> bool:
    # -1 for main category
    return len(draft.categories) < constraints_for(tier).max_categories - 1


def add_category(draft: ProductDraft, category: str, tier: TierLike) -> ProductDraft:
    category = (category or "").strip()
    if not can_add_category(draft, tier):
        _rejected("add_category", category, "category limit reached")
        return draft
    if not category or category == draft.main_category or category in draft.categories:
        _rejected("add_category", category, "blank, main category or duplicate")
        return draft
    return draft.model_copy(update={"categories": [*draft.categories, category]})


def remove_category(draft: ProductDraft, category: str) -> ProductDraft:
    if category not in draft.categories:
        return draft
    return draft.model_copy(update={"categories": [c for c in draft.categories if c != category]})


def set_main_category(draft: ProductDraft, category: str) -> ProductDraft:
    category = (category or "").strip()
    if category == draft.main_category:
        return draft
    return draft.model_copy(update={
        "main_category": category,
        "categories": [c for c in draft.categories if c != category],
    })


# Feature helpers

def can_add_feature(draft: ProductDraft, tier: TierLike) -> bool:
    return len(draft.features) < constraints_for(tier).max_features


def add_feature(draft: ProductDraft, feature: str, tier: TierLike) -> ProductDraft:
    feature = (feature or "").strip()
    if not can_add_feature(draft, tier):
        _rejected("add_feature", feature, "feature limit reached")
        return draft
    if not feature or feature in draft.features:
        _rejected("add_feature", feature, "blank or duplicate")
        return draft
    return draft.model_copy(update={"features": [*draft.features, feature]})


def remove_feature(draft: ProductDraft, feature: str) -> ProductDraft:
    if feature not in draft.features:
        return draft
    return draft.model_copy(update={"features": [f for f in draft.features if f != feature]})


# Language helpers (not tier gated)

def add_language(draft: ProductDraft, language: str) -> ProductDraft:
    language = (language or "").strip()
    if not language or language in draft.languages:
        return draft
    return draft.model_copy(update={"languages": [*draft.languages, language]})


def remove_language(draft: ProductDraft, language: str) -> ProductDraft:
    if language not in draft.languages:
        return draft
    return draft.model_copy(update={"languages": [lang for lang in draft.languages if lang != language]})


# Gallery helpers

def can_add_gallery(draft: ProductDraft, tier: TierLike) -> bool:
    constraints = constraints_for(tier)
    return constraints.gallery_allowed and len(draft.gallery) < constraints.max_gallery_images


def add_gallery_image(draft: ProductDraft, url: str, tier: TierLike) -> ProductDraft:
    url = (url or "").strip()
    if not can_add_gallery(draft, tier):
        _rejected("add_gallery_image", url, "gallery not allowed or full")
        return draft
    if not url:
        return draft
    return draft.model_copy(update={"gallery": [*draft.gallery, url]})


def remove_gallery_image(draft: ProductDraft, index: int) -> ProductDraft:
    if not 0 <= index < len(draft.gallery):
        _rejected("remove_gallery_image", index, "index out of range")
        return draft
    return draft.model_copy(update={"gallery": [u for i, u in enumerate(draft.gallery) if i != index]})


# Feature flags

def can_use_video(tier: TierLike) -> bool:
    return constraints_for(tier).video_allowed


def can_use_demo(tier: TierLike) -> bool:
    return constraints_for(tier).demo_link_allowed


SCALAR_FIELDS = tuple(
    name for name in ProductDraft.model_fields
    if name not in COLLECTION_FIELDS and name not in READ_ONLY_FIELDS
)


def set_field(draft: ProductDraft, name: str, value: Any) -> ProductDraft:
    """Set a scalar field on the draft

    Collections only change through the add/remove helpers above.

    Raises:
        ValueError: unknown, collection or read-only field name
    """
    if name not in SCALAR_FIELDS:
        raise ValueError(f"Field '{name}' cannot be set directly")
    if name == "main_category":
        return set_main_category(draft, value)
    # 重新校验，保证 listing_status 等字段合法
    return ProductDraft.model_validate({**draft.model_dump(), name: value})


def tier_violations(draft: ProductDraft, tier: TierLike) -> List[str]:
    """Describe where the draft exceeds the tier's limits

    Used after a tier downgrade: the draft keeps its content and these
    items are dropped from the submission payload.
    """
    constraints = constraints_for(tier)
    violations = []
    if len(draft.categories) > constraints.max_secondary_categories:
        violations.append(
            f"categories: {len(draft.categories)} selected, "
            f"{constraints.max_secondary_categories} allowed"
        )
    if len(draft.features) > constraints.max_features:
        violations.append(
            f"features: {len(draft.features)} selected, {constraints.max_features} allowed"
        )
    if draft.gallery:
        if not constraints.gallery_allowed:
            violations.append("gallery: not available on this tier")
        elif len(draft.gallery) > constraints.max_gallery_images:
            violations.append(
                f"gallery: {len(draft.gallery)} images, "
                f"{constraints.max_gallery_images} allowed"
            )
    if draft.video_url and not constraints.video_allowed:
        violations.append("video_url: not available on this tier")
    if draft.demo_link and not constraints.demo_link_allowed:
        violations.append("demo_link: not available on this tier")
    return violations
