"""
MCP工具函数定义
"""

import logging
import os
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple

from fastmcp import FastMCP
from pydantic import Field

from .form import ProductForm
from .models import AVAILABLE_FEATURES, AVAILABLE_LANGUAGES
from .storage import DraftSession, DraftSessionStore
from .tiers import TIER_CONSTRAINTS, InvalidTierError, parse_tier

logger = logging.getLogger(__name__)

# 初始化存储
storage = DraftSessionStore()

TierName = Annotated[str, Field(description="Subscription tier: freemium, silver (plus) or gold (premium)")]
OptionalTierName = Annotated[Optional[str], Field(description="Subscription tier: freemium, silver (plus) or gold (premium); DEFAULT_TIER when omitted")]
OwnerId = Annotated[Optional[str], Field(description="User ID for ownership verification")]


def _default_tier() -> str:
    return os.getenv("DEFAULT_TIER", "freemium")


def _get_session(draft_id: str, user_id: Optional[str]) -> Tuple[Optional[DraftSession], Optional[Dict[str, Any]]]:
    session = storage.get(draft_id)
    if not session:
        return None, {"error": f"Product draft {draft_id} not found"}
    # 验证用户权限（如果提供了user_id）
    if user_id and session.user_id and session.user_id != user_id:
        return None, {"error": "Access denied: Draft belongs to different user"}
    return session, None


def _apply_additions(form: ProductForm,
                     categories: Optional[List[str]] = None,
                     features: Optional[List[str]] = None,
                     languages: Optional[List[str]] = None,
                     gallery: Optional[List[str]] = None) -> Tuple[Dict[str, List[str]], Dict[str, List[str]]]:
    """Push items through the tier rules, collecting what was kept and what was refused"""
    added: Dict[str, List[str]] = {}
    rejected: Dict[str, List[str]] = {}
    steps = (
        ("categories", categories, form.add_category),
        ("features", features, form.add_feature),
        ("languages", languages, form.add_language),
        ("gallery", gallery, form.add_gallery_image),
    )
    for name, items, add in steps:
        for item in items or []:
            bucket = added if add(item) else rejected
            bucket.setdefault(name, []).append(item)
    return added, rejected


def _draft_view(session: DraftSession) -> Dict[str, Any]:
    form = session.form
    return {
        "draft_id": session.draft_id,
        "user_id": session.user_id,
        "tier": form.tier.value,
        "draft": form.draft.to_dict(),
        "constraints": form.constraints.to_dict(),
        "capabilities": form.capabilities(),
        "completion": form.completion.to_dict(),
        "sections": [
            {"id": s.id, "label": s.label, "is_completed": s.is_completed}
            for s in form.section_progress()
        ],
        "tier_violations": form.tier_violations(),
        "is_dirty": form.is_dirty,
        "created_at": session.created_at,
        "updated_at": session.updated_at,
        "version": session.version,
    }


def create_product_draft(
    user_id: Annotated[str, Field(description="Unique user identifier for draft ownership and access control")],
    tier: OptionalTierName = None,
    product_name: Annotated[str, Field(description="Product name (2-100 characters)")] = "",
    short_desc: Annotated[str, Field(description="Short description (10-200 characters)")] = "",
    long_desc: Annotated[str, Field(description="Detailed description (max 5000 characters)")] = "",
    main_category: Annotated[str, Field(description="Main category (required, counts toward the category limit)")] = "",
    logo: Annotated[str, Field(description="Logo URL or encoded image (required)")] = "",
    website_link: Annotated[str, Field(description="Product website URL")] = "",
    video_url: Annotated[str, Field(description="Product video URL (gold tier only)")] = "",
    demo_link: Annotated[str, Field(description="Demo link URL (gold tier only)")] = "",
    pricing: Annotated[str, Field(description="Free-form pricing text (max 100 characters)")] = "",
    release_date: Annotated[str, Field(description="Release date, YYYY-MM-DD")] = "",
    categories: Annotated[Optional[List[str]], Field(description="Secondary categories (limited by tier)")] = None,
    features: Annotated[Optional[List[str]], Field(description="Product features (limited by tier)")] = None,
    languages: Annotated[Optional[List[str]], Field(description="Supported languages")] = None,
    gallery: Annotated[Optional[List[str]], Field(description="Gallery image URLs (silver and gold only)")] = None,
) -> Dict[str, Any]:
    """Create a new product draft for a vendor

    Collection values go through the same tier rules as the form; items over
    the tier limit are reported back under "rejected" instead of failing.

    Returns:
        draft_id, tier, completion and the added/rejected collection items
    """
    try:
        tier_value = parse_tier(tier or _default_tier())
    except InvalidTierError as e:
        return {"error": str(e)}

    session = storage.create(user_id, tier_value, initial_data={
        "product_name": product_name,
        "short_desc": short_desc,
        "long_desc": long_desc,
        "main_category": main_category,
        "logo": logo,
        "website_link": website_link,
        "video_url": video_url,
        "demo_link": demo_link,
        "pricing": pricing,
        "release_date": release_date,
    })
    added, rejected = _apply_additions(session.form, categories, features, languages, gallery)
    # 新建的草稿以当前内容为基准
    session.form.reset(session.form.draft.to_dict())

    return {
        "draft_id": session.draft_id,
        "tier": session.form.tier.value,
        "status": "created",
        "created_at": session.created_at,
        "completion": session.form.completion.to_dict(),
        "added": added,
        "rejected": rejected,
    }


def load_product_record(
    user_id: Annotated[str, Field(description="Unique user identifier for draft ownership and access control")],
    record: Annotated[Dict[str, Any], Field(description="Existing product record from the backend (snake_case fields)")],
    tier: OptionalTierName = None,
) -> Dict[str, Any]:
    """Open an existing product for editing (edit flow)

    Returns:
        draft_id plus the populated draft and any tier violations it carries
    """
    try:
        tier_value = parse_tier(tier or _default_tier())
    except InvalidTierError as e:
        return {"error": str(e)}
    try:
        session = storage.create(user_id, tier_value, record=record)
    except ValueError as e:
        return {"error": f"Invalid product record: {e}"}
    return {"status": "loaded", **_draft_view(session)}


def get_product_draft(
    draft_id: Annotated[str, Field(description="Draft ID to retrieve")],
    user_id: OwnerId = None,
    summary_only: Annotated[bool, Field(description="Return summary instead of full draft details")] = False,
) -> Dict[str, Any]:
    """Retrieve a draft with its completion, capabilities and tier violations"""
    session, error = _get_session(draft_id, user_id)
    if error:
        return error
    if summary_only:
        return session.summary()
    return _draft_view(session)


def list_product_drafts(
    user_id: Annotated[Optional[str], Field(description="User ID for filtering (empty = all users)")] = None,
    tier: Annotated[Optional[str], Field(description="Filter by subscription tier")] = None,
    limit: Annotated[Optional[int], Field(description="Max results to return (pagination)", ge=1, le=100)] = None,
    offset: Annotated[Optional[int], Field(description="Results to skip (pagination start)", ge=0)] = None,
) -> Dict[str, Any]:
    """List open drafts as summaries, most recently updated first"""
    sessions = storage.list_sessions(user_id)

    # 按等级过滤
    if tier:
        try:
            tier_value = parse_tier(tier)
        except InvalidTierError as e:
            return {"error": str(e)}
        sessions = [s for s in sessions if s.form.tier == tier_value]

    sessions.sort(key=lambda s: s.updated_at, reverse=True)
    total_count = len(sessions)
    start = offset or 0
    page = sessions[start:start + limit] if limit else sessions[start:]
    return {
        "total_count": total_count,
        "returned_count": len(page),
        "drafts": [s.summary() for s in page],
    }


def update_product_draft(
    draft_id: Annotated[str, Field(description="Draft ID to update (required)")],
    user_id: OwnerId = None,
    product_name: Annotated[Optional[str], Field(description="Updated product name")] = None,
    short_desc: Annotated[Optional[str], Field(description="Updated short description")] = None,
    long_desc: Annotated[Optional[str], Field(description="Updated detailed description")] = None,
    main_category: Annotated[Optional[str], Field(description="Updated main category (removed from secondary categories)")] = None,
    logo: Annotated[Optional[str], Field(description="Updated logo")] = None,
    website_link: Annotated[Optional[str], Field(description="Updated website URL")] = None,
    video_url: Annotated[Optional[str], Field(description="Updated video URL (kept in draft, sent only on gold tier)")] = None,
    demo_link: Annotated[Optional[str], Field(description="Updated demo link (kept in draft, sent only on gold tier)")] = None,
    pricing: Annotated[Optional[str], Field(description="Updated pricing text")] = None,
    release_date: Annotated[Optional[str], Field(description="Updated release date, YYYY-MM-DD")] = None,
    listing_status: Annotated[Optional[Literal["pending", "approved", "rejected"]], Field(description="Listing status (admin only)")] = None,
    rating: Annotated[Optional[float], Field(description="Rating 0-5 (admin only)", ge=0, le=5)] = None,
) -> Dict[str, Any]:
    """Replace scalar field values on a draft

    Use add_to_product_draft / remove_from_product_draft for categories,
    features, languages and gallery images.

    Returns:
        Update status, changed fields, new version and completion
    """
    session, error = _get_session(draft_id, user_id)
    if error:
        return error

    updates = {
        "product_name": product_name,
        "short_desc": short_desc,
        "long_desc": long_desc,
        "main_category": main_category,
        "logo": logo,
        "website_link": website_link,
        "video_url": video_url,
        "demo_link": demo_link,
        "pricing": pricing,
        "release_date": release_date,
        "listing_status": listing_status,
        "rating": rating,
    }
    try:
        changed = session.form.update_fields(
            {name: value for name, value in updates.items() if value is not None}
        )
    except ValueError as e:
        return {"error": f"Update failed: {e}"}

    if changed:
        storage.touch(draft_id)
    return {
        "status": "updated" if changed else "unchanged",
        "draft_id": draft_id,
        "updated_fields": changed,
        "version": session.version,
        "updated_at": session.updated_at,
        "completion": session.form.completion.to_dict(),
    }


def add_to_product_draft(
    draft_id: Annotated[str, Field(description="Draft ID to update incrementally (required)")],
    user_id: OwnerId = None,
    categories: Annotated[Optional[List[str]], Field(description="Secondary categories to add (limited by tier)")] = None,
    features: Annotated[Optional[List[str]], Field(description="Features to add (limited by tier)")] = None,
    languages: Annotated[Optional[List[str]], Field(description="Languages to add")] = None,
    gallery: Annotated[Optional[List[str]], Field(description="Gallery image URLs to append (silver and gold only)")] = None,
) -> Dict[str, Any]:
    """Add items to draft collections without replacing existing data

    Items refused by the tier limits (or duplicates) are listed under
    "rejected"; this is not an error.
    """
    session, error = _get_session(draft_id, user_id)
    if error:
        return error
    if not any((categories, features, languages, gallery)):
        return {"error": "No valid fields provided to add"}

    added, rejected = _apply_additions(session.form, categories, features, languages, gallery)
    if added:
        storage.touch(draft_id)
    return {
        "status": "added" if added else "unchanged",
        "draft_id": draft_id,
        "added": added,
        "rejected": rejected,
        "capabilities": session.form.capabilities(),
        "version": session.version,
        "updated_at": session.updated_at,
    }


def remove_from_product_draft(
    draft_id: Annotated[str, Field(description="Draft ID to update selectively (required)")],
    user_id: OwnerId = None,
    categories: Annotated[Optional[List[str]], Field(description="Secondary categories to remove")] = None,
    features: Annotated[Optional[List[str]], Field(description="Features to remove")] = None,
    languages: Annotated[Optional[List[str]], Field(description="Languages to remove")] = None,
    gallery_indexes: Annotated[Optional[List[int]], Field(description="Zero-based positions of gallery images to remove")] = None,
) -> Dict[str, Any]:
    """Remove specific items from draft collections"""
    session, error = _get_session(draft_id, user_id)
    if error:
        return error
    if not any((categories, features, languages, gallery_indexes)):
        return {"error": "No valid fields provided to remove"}

    form = session.form
    removed: Dict[str, List[Any]] = {}
    steps = (
        ("categories", categories or [], form.remove_category),
        ("features", features or [], form.remove_feature),
        ("languages", languages or [], form.remove_language),
        # 从后往前删，保证下标对应原始位置
        ("gallery", sorted(set(gallery_indexes or []), reverse=True), form.remove_gallery_image),
    )
    for name, items, remove in steps:
        for item in items:
            if remove(item):
                removed.setdefault(name, []).append(item)

    if removed:
        storage.touch(draft_id)
    return {
        "status": "removed" if removed else "unchanged",
        "draft_id": draft_id,
        "removed": removed,
        "version": session.version,
        "updated_at": session.updated_at,
    }


def change_draft_tier(
    draft_id: Annotated[str, Field(description="Draft ID whose vendor tier changed")],
    tier: TierName,
    user_id: OwnerId = None,
) -> Dict[str, Any]:
    """Re-evaluate a draft under a different subscription tier

    Draft content is kept; content the new tier does not allow is listed
    under "tier_violations" and left out of the exported payload.
    """
    session, error = _get_session(draft_id, user_id)
    if error:
        return error
    try:
        changed = session.form.set_tier(tier)
    except InvalidTierError as e:
        return {"error": str(e)}
    if changed:
        storage.touch(draft_id)
    return {
        "status": "tier_changed" if changed else "unchanged",
        "draft_id": draft_id,
        "tier": session.form.tier.value,
        "capabilities": session.form.capabilities(),
        "tier_violations": session.form.tier_violations(),
        "version": session.version,
    }


def validate_product_draft(
    draft_id: Annotated[str, Field(description="Draft ID to validate")],
    user_id: OwnerId = None,
) -> Dict[str, Any]:
    """Check the draft against the submission field rules"""
    session, error = _get_session(draft_id, user_id)
    if error:
        return error
    errors = session.form.errors
    return {
        "draft_id": draft_id,
        "is_valid": not errors,
        "errors": errors,
        "completion": session.form.completion.to_dict(),
        "tier_violations": session.form.tier_violations(),
    }


def export_product_payload(
    draft_id: Annotated[str, Field(description="Draft ID to export for submission (required)")],
    user_id: OwnerId = None,
) -> Dict[str, Any]:
    """Export the draft as the backend product payload

    Tier-gated fields are nulled and collections truncated to the current
    tier's limits.
    """
    session, error = _get_session(draft_id, user_id)
    if error:
        return error
    errors = session.form.errors
    return {
        "product_data": session.form.get_api_values(),
        "metadata": {
            "draft_id": session.draft_id,
            "tier": session.form.tier.value,
            "version": session.version,
            "created_at": session.created_at,
            "updated_at": session.updated_at,
        },
        "errors": errors,
        "stripped": session.form.tier_violations(),
        "ready_for_submission": not errors,
    }


def discard_product_draft(
    draft_id: Annotated[str, Field(description="Draft ID to discard (required)")],
    user_id: OwnerId = None,
) -> Dict[str, Any]:
    """Discard an unsaved draft"""
    _, error = _get_session(draft_id, user_id)
    if error:
        return error
    storage.discard(draft_id)
    return {"status": "discarded", "draft_id": draft_id}


def get_tier_constraints(
    tier: Annotated[Optional[str], Field(description="Tier to describe (all tiers when omitted)")] = None,
) -> Dict[str, Any]:
    """Describe the listing limits of one or all subscription tiers"""
    if tier:
        try:
            tier_value = parse_tier(tier)
        except InvalidTierError as e:
            return {"error": str(e)}
        return {"tier": tier_value.value, "constraints": TIER_CONSTRAINTS[tier_value].to_dict()}
    return {
        "tiers": {t.value: c.to_dict() for t, c in TIER_CONSTRAINTS.items()},
        "feature_options": list(AVAILABLE_FEATURES),
        "language_options": list(AVAILABLE_LANGUAGES),
    }


TOOLS = (
    (create_product_draft, "Create a new product listing draft; collection items are checked against the vendor's tier limits"),
    (load_product_record, "Open an existing product record for editing under a vendor tier"),
    (get_product_draft, "Retrieve a draft with completion progress, tier capabilities and tier violations"),
    (list_product_drafts, "List open product drafts, optionally filtered by user or tier"),
    (update_product_draft, "Replace scalar field values of a product draft; nothing is applied if any value is invalid"),
    (add_to_product_draft, "Add categories, features, languages or gallery images; items over the tier limit are rejected"),
    (remove_from_product_draft, "Remove categories, features, languages or gallery images from a draft"),
    (change_draft_tier, "Switch the draft to another subscription tier, keeping its content"),
    (validate_product_draft, "Validate a product draft against the submission field rules"),
    (export_product_payload, "Export the draft as the backend payload with tier-gated fields stripped"),
    (discard_product_draft, "Discard an unsaved product draft"),
    (get_tier_constraints, "Show listing limits per subscription tier and the suggested feature and language options"),
)


def register_tools(mcp: FastMCP):
    """注册所有MCP工具"""
    for fn, description in TOOLS:
        mcp.tool(name=fn.__name__, description=description)(fn)
    logger.info(f"Registered {len(TOOLS)} product form tools")
