"""
HR Product Form MCP
HR科技产品市场的产品表单规则引擎
"""

__version__ = "0.1.0"
__author__ = "HR Marketplace Team"

from .completion import CompletionState, completion
from .form import ProductForm
from .mapper import from_api_product, to_api_payload
from .models import ProductDraft, validate_draft
from .tiers import TIER_CONSTRAINTS, InvalidTierError, Tier, TierConstraints, constraints_for

__all__ = [
    "CompletionState",
    "completion",
    "ProductForm",
    "from_api_product",
    "to_api_payload",
    "ProductDraft",
    "validate_draft",
    "TIER_CONSTRAINTS",
    "InvalidTierError",
    "Tier",
    "TierConstraints",
    "constraints_for",
]
