"""
产品表单控制器
Stateful wrapper around the draft rules, one instance per open form.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from . import rules
from .completion import CompletionState, SectionStep, completion, section_progress
from .mapper import from_api_product, to_api_payload
from .models import REQUIRED_FIELDS, ProductDraft, validate_draft
from .tiers import Tier, TierConstraints, TierLike, constraints_for, parse_tier

logger = logging.getLogger(__name__)

Observer = Callable[["ProductForm"], None]


class ProductForm:
    """Owns one ProductDraft and applies tier-gated edits to it

    Mutating methods return True when the draft changed and False when the
    edit was a no-op (limit reached, duplicate, out of range).
    """

    def __init__(self,
                 tier: TierLike = Tier.FREEMIUM,
                 initial_data: Optional[Mapping[str, Any]] = None,
                 on_dirty_change: Optional[Callable[[bool], None]] = None):
        self._tier = parse_tier(tier)
        self._on_dirty_change = on_dirty_change
        self._observers: List[Observer] = []
        self._draft = ProductDraft.model_validate(dict(initial_data or {}))
        self._baseline = self._draft
        self._was_dirty = False

    # State

    @property
    def draft(self) -> ProductDraft:
        return self._draft

    @property
    def tier(self) -> Tier:
        return self._tier

    @property
    def constraints(self) -> TierConstraints:
        return constraints_for(self._tier)

    @property
    def is_dirty(self) -> bool:
        return self._draft != self._baseline

    @property
    def errors(self) -> Dict[str, str]:
        return validate_draft(self._draft)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    # Observers

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """Register a callback run after every applied change"""
        self._observers.append(callback)

        def unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _commit(self, draft: ProductDraft) -> bool:
        if draft is self._draft or draft == self._draft:
            return False
        self._draft = draft
        self._notify()
        return True

    def _notify(self):
        for callback in list(self._observers):
            callback(self)
        dirty = self.is_dirty
        if dirty != self._was_dirty:
            self._was_dirty = dirty
            if self._on_dirty_change:
                self._on_dirty_change(dirty)

    # Lifecycle

    def reset(self, data: Optional[Mapping[str, Any]] = None):
        """Replace the draft with defaults (plus data) and mark it clean"""
        self._draft = ProductDraft.model_validate(dict(data or {}))
        self._baseline = self._draft
        self._notify()

    def populate(self, product: Mapping[str, Any]):
        """Load a backend product record for editing"""
        self._draft = from_api_product(product)
        self._baseline = self._draft
        self._notify()

    def get_api_values(self) -> Dict[str, Any]:
        return to_api_payload(self._draft, self._tier)

    def set_tier(self, tier: TierLike) -> bool:
        """Switch tier; draft content is preserved and stripped only on submit"""
        tier = parse_tier(tier)
        if tier == self._tier:
            return False
        logger.info(f"Product form tier changed: {self._tier.value} -> {tier.value}")
        self._tier = tier
        self._notify()
        return True

    def tier_violations(self) -> List[str]:
        return rules.tier_violations(self._draft, self._tier)

    # Field setters

    def set_field(self, name: str, value: Any) -> bool:
        return self._commit(rules.set_field(self._draft, name, value))

    def set_main_category(self, category: str) -> bool:
        return self._commit(rules.set_main_category(self._draft, category))

    def update_fields(self, updates: Mapping[str, Any]) -> List[str]:
        """Set several scalar fields together

        Every value is checked before anything is applied, so a rejected
        value leaves the draft as it was.

        Returns:
            Names of the fields whose value changed
        """
        draft = self._draft
        changed = []
        for name, value in updates.items():
            candidate = rules.set_field(draft, name, value)
            if candidate != draft:
                changed.append(name)
            draft = candidate
        self._commit(draft)
        return changed

    # Category helpers

    @property
    def can_add_category(self) -> bool:
        return rules.can_add_category(self._draft, self._tier)

    def add_category(self, category: str) -> bool:
        return self._commit(rules.add_category(self._draft, category, self._tier))

    def remove_category(self, category: str) -> bool:
        return self._commit(rules.remove_category(self._draft, category))

    # Feature helpers

    @property
    def can_add_feature(self) -> bool:
        return rules.can_add_feature(self._draft, self._tier)

    def add_feature(self, feature: str) -> bool:
        return self._commit(rules.add_feature(self._draft, feature, self._tier))

    def remove_feature(self, feature: str) -> bool:
        return self._commit(rules.remove_feature(self._draft, feature))

    # Language helpers

    def add_language(self, language: str) -> bool:
        return self._commit(rules.add_language(self._draft, language))

    def remove_language(self, language: str) -> bool:
        return self._commit(rules.remove_language(self._draft, language))

    # Gallery helpers

    @property
    def can_add_gallery(self) -> bool:
        return rules.can_add_gallery(self._draft, self._tier)

    def add_gallery_image(self, url: str) -> bool:
        return self._commit(rules.add_gallery_image(self._draft, url, self._tier))

    def remove_gallery_image(self, index: int) -> bool:
        return self._commit(rules.remove_gallery_image(self._draft, index))

    # Feature flags based on tier

    @property
    def can_use_video(self) -> bool:
        return rules.can_use_video(self._tier)

    @property
    def can_use_demo(self) -> bool:
        return rules.can_use_demo(self._tier)

    # Progress tracking

    @property
    def completion(self) -> CompletionState:
        return completion(self._draft)

    @property
    def completed_fields(self) -> int:
        return self.completion.completed_required_fields

    @property
    def total_required_fields(self) -> int:
        return len(REQUIRED_FIELDS)

    @property
    def completion_percentage(self) -> int:
        return self.completion.percentage

    def section_progress(self) -> List[SectionStep]:
        return section_progress(self._draft, self._tier)

    def capabilities(self) -> Dict[str, bool]:
        return {
            "can_add_category": self.can_add_category,
            "can_add_feature": self.can_add_feature,
            "can_add_gallery": self.can_add_gallery,
            "can_use_video": self.can_use_video,
            "can_use_demo": self.can_use_demo,
        }
