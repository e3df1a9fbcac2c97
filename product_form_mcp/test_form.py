"""
产品表单控制器测试
"""

import pytest

from product_form_mcp.form import ProductForm
from product_form_mcp.tiers import InvalidTierError, Tier

RECORD = {
    "product_name": "TalentHub",
    "short_desc": "Recruiting suite for agencies",
    "main_category": "ATS",
    "categories": ["Recruiting", "Onboarding"],
    "features": ["Automation", "AI Assistant"],
    "logo": "https://cdn.example.com/talenthub.png",
    "gallery": ["https://cdn.example.com/t1.png"],
    "video_url": "https://video.example.com/talenthub",
    "demo_link": None,
    "languages": ["English"],
    "listing_status": "approved",
    "rating": 4.0,
}


def test_defaults_to_freemium():
    form = ProductForm()
    assert form.tier is Tier.FREEMIUM
    assert form.can_add_category is False
    assert form.can_add_feature is True
    assert form.can_add_gallery is False
    assert form.can_use_video is False
    assert form.can_use_demo is False
    assert form.is_dirty is False


def test_invalid_tier_in_constructor():
    with pytest.raises(InvalidTierError):
        ProductForm(tier="bronze")


def test_initial_data_and_completion():
    form = ProductForm(tier="silver", initial_data={"product_name": "TalentHub", "main_category": "ATS"})
    assert form.completed_fields == 2
    assert form.total_required_fields == 4
    assert form.completion_percentage == 50
    assert form.is_dirty is False


def test_mutations_report_whether_applied():
    form = ProductForm(tier="silver")
    assert form.add_feature("Automation") is True
    assert form.add_feature("Automation") is False
    assert form.remove_feature("Automation") is True
    assert form.remove_feature("Automation") is False

    assert form.add_category("Payroll") is True
    assert form.add_category("Benefits") is True
    assert form.add_category("Learning") is False
    assert form.draft.categories == ["Payroll", "Benefits"]


def test_dirty_tracking_callback():
    calls = []
    form = ProductForm(on_dirty_change=calls.append)

    form.set_field("product_name", "TalentHub")
    form.add_language("English")
    assert calls == [True]
    assert form.is_dirty

    form.set_field("product_name", "")
    form.remove_language("English")
    assert calls == [True, False]
    assert not form.is_dirty


def test_observers():
    seen = []
    form = ProductForm(tier="gold")
    unsubscribe = form.subscribe(lambda f: seen.append(f.draft.features))

    form.add_feature("Automation")
    form.add_feature("Automation")  # no-op, no notification
    assert seen == [["Automation"]]

    unsubscribe()
    form.add_feature("Integrations")
    assert len(seen) == 1


def test_reset_and_populate():
    form = ProductForm(tier="gold")
    form.add_feature("Automation")
    form.reset({"product_name": "Fresh"})
    assert form.draft.product_name == "Fresh"
    assert form.draft.features == []
    assert not form.is_dirty

    form.populate(RECORD)
    assert form.draft.main_category == "ATS"
    assert form.draft.demo_link == ""
    assert form.draft.rating == 4.0
    assert not form.is_dirty


def test_set_main_category_moves_out_of_secondary():
    form = ProductForm(tier="gold")
    form.populate(RECORD)
    assert form.set_main_category("Recruiting") is True
    assert form.draft.categories == ["Onboarding"]


def test_downgrade_preserves_draft_and_strips_on_submit():
    form = ProductForm(tier="gold")
    form.populate(RECORD)

    form.set_tier("silver")
    assert form.tier is Tier.SILVER
    assert form.draft.video_url == "https://video.example.com/talenthub"
    assert form.tier_violations() == ["video_url: not available on this tier"]

    payload = form.get_api_values()
    assert payload["video_url"] is None
    assert payload["gallery"] == ["https://cdn.example.com/t1.png"]

    form.set_tier("freemium")
    payload = form.get_api_values()
    assert payload["gallery"] is None
    assert payload["categories"] is None
    assert form.can_add_category is False


def test_validation_state():
    form = ProductForm(tier="gold")
    assert not form.is_valid
    form.populate(RECORD)
    assert form.is_valid
    assert form.errors == {}

    form.set_field("website_link", "not-a-url")
    assert form.errors == {"website_link": "Enter a valid website URL"}


def test_capabilities():
    form = ProductForm(tier="premium")
    assert form.capabilities() == {
        "can_add_category": True,
        "can_add_feature": True,
        "can_add_gallery": True,
        "can_use_video": True,
        "can_use_demo": True,
    }


def test_update_fields_applies_all_or_nothing():
    form = ProductForm(tier="gold", initial_data={"product_name": "TalentHub"})
    seen = []
    form.subscribe(lambda f: seen.append(f.draft.product_name))

    with pytest.raises(ValueError):
        form.update_fields({"product_name": "PeopleOS", "listing_status": "archived"})
    assert form.draft.product_name == "TalentHub"
    assert seen == []

    changed = form.update_fields({"product_name": "PeopleOS", "pricing": "Free", "logo": ""})
    assert changed == ["product_name", "pricing"]
    assert seen == ["PeopleOS"]


def test_set_tier_reports_change():
    form = ProductForm(tier="silver")
    assert form.set_tier("plus") is False
    assert form.set_tier("gold") is True
    assert form.tier is Tier.GOLD
