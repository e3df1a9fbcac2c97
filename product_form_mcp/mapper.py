"""
表单 <-> API 数据转换
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict

from .models import ListingStatus, ProductDraft
from .tiers import TierLike, constraints_for, parse_tier

logger = logging.getLogger(__name__)


class ApiProduct(BaseModel):
    """Product record as stored by the marketplace backend"""
    model_config = ConfigDict(extra="ignore")

    product_name: Optional[str] = None
    short_desc: Optional[str] = None
    long_desc: Optional[str] = None
    main_category: Optional[str] = None
    categories: Optional[List[str]] = None
    features: Optional[List[str]] = None
    logo: Optional[str] = None
    gallery: Optional[List[str]] = None
    video_url: Optional[str] = None
    website_link: Optional[str] = None
    demo_link: Optional[str] = None
    pricing: Optional[str] = None
    languages: Optional[List[str]] = None
    release_date: Optional[str] = None
    listing_status: Optional[ListingStatus] = None
    rating: Optional[float] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


def _or_none(value: str) -> Optional[str]:
    return value if value and value.strip() else None


def _list_or_none(values: List[str]) -> Optional[List[str]]:
    return list(values) if values else None


def to_api_payload(draft: ProductDraft, tier: TierLike) -> Dict[str, Any]:
    """Convert a draft into the payload sent to the backend

    Tier-gated content is re-checked here regardless of what the form
    allowed, since the tier may have changed while the draft was open.
    """
    tier = parse_tier(tier)
    constraints = constraints_for(tier)

    categories = [c for c in draft.categories if c != draft.main_category]
    categories = categories[:constraints.max_secondary_categories]
    features = draft.features[:constraints.max_features]
    gallery = draft.gallery[:constraints.max_gallery_images] if constraints.gallery_allowed else []
    video_url = draft.video_url if constraints.video_allowed else ""
    demo_link = draft.demo_link if constraints.demo_link_allowed else ""

    dropped = {
        "categories": len(draft.categories) - len(categories),
        "features": len(draft.features) - len(features),
        "gallery": len(draft.gallery) - len(gallery),
        "video_url": int(bool(draft.video_url) and not video_url),
        "demo_link": int(bool(draft.demo_link) and not demo_link),
    }
    dropped = {k: v for k, v in dropped.items() if v}
    if dropped:
        logger.info(f"Stripped content not allowed on tier '{tier.value}': {dropped}")

    return {
        "product_name": draft.product_name,
        "short_desc": draft.short_desc,
        "long_desc": _or_none(draft.long_desc),
        "main_category": draft.main_category,
        "categories": _list_or_none(categories),
        "features": _list_or_none(features),
        "logo": draft.logo,
        "gallery": _list_or_none(gallery),
        "video_url": _or_none(video_url),
        "website_link": _or_none(draft.website_link),
        "demo_link": _or_none(demo_link),
        "pricing": _or_none(draft.pricing),
        "languages": _list_or_none(draft.languages),
        "release_date": _or_none(draft.release_date),
        "listing_status": draft.listing_status,
        "rating": draft.rating,
    }


def from_api_product(product: Union[ApiProduct, Mapping[str, Any]]) -> ProductDraft:
    """Build a draft from a backend record (edit flow)

    Missing arrays become empty lists so the rule functions stay total.
    """
    if not isinstance(product, ApiProduct):
        product = ApiProduct.model_validate(dict(product))

    return ProductDraft(
        product_name=product.product_name or "",
        short_desc=product.short_desc or "",
        long_desc=product.long_desc or "",
        main_category=product.main_category or "",
        categories=product.categories or [],
        features=product.features or [],
        logo=product.logo or "",
        gallery=product.gallery or [],
        video_url=product.video_url or "",
        website_link=product.website_link or "",
        demo_link=product.demo_link or "",
        pricing=product.pricing or "",
        languages=product.languages or [],
        release_date=product.release_date or "",
        listing_status=product.listing_status or "pending",
        rating=product.rating,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )
