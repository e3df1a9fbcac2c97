"""
表单完成度计算
"""

import math
from dataclasses import asdict, dataclass
from typing import Dict, List

from .models import REQUIRED_FIELDS, ProductDraft
from .tiers import TierLike, constraints_for


@dataclass(frozen=True)
class CompletionState:
    """Required-field progress of a draft"""
    completed_required_fields: int
    total_required_fields: int
    percentage: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class SectionStep:
    """One form section in the progress sidebar"""
    id: str
    label: str
    is_completed: bool


def _filled(value) -> bool:
    return bool(value.strip()) if isinstance(value, str) else bool(value)


def completion(draft: ProductDraft) -> CompletionState:
    completed = sum(1 for name in REQUIRED_FIELDS if _filled(getattr(draft, name)))
    total = len(REQUIRED_FIELDS)
    # round half up
    percentage = math.floor(100 * completed / total + 0.5)
    return CompletionState(
        completed_required_fields=completed,
        total_required_fields=total,
        percentage=percentage,
    )


def section_progress(draft: ProductDraft, tier: TierLike) -> List[SectionStep]:
    """Per-section completion for the form sidebar

    The links section also counts a demo link when the tier allows one.
    """
    constraints = constraints_for(tier)
    media_done = _filled(draft.logo)
    links_done = _filled(draft.website_link) or (
        constraints.demo_link_allowed and _filled(draft.demo_link)
    )
    return [
        SectionStep("basic", "Basic information",
                    _filled(draft.product_name) and _filled(draft.short_desc)),
        SectionStep("category", "Categories", _filled(draft.main_category)),
        SectionStep("features", "Features", bool(draft.features)),
        SectionStep("media", "Media", media_done),
        SectionStep("links", "Links", links_done),
    ]
