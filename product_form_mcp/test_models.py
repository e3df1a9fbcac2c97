"""
数据模型和字段校验测试
"""

import pytest
from pydantic import ValidationError

from product_form_mcp.models import ProductDraft, validate_draft


def _valid_draft(**overrides):
    data = {
        "product_name": "PeopleOS",
        "short_desc": "All-in-one HR platform for growing teams",
        "main_category": "HRIS",
        "logo": "https://cdn.example.com/logo.png",
    }
    data.update(overrides)
    return ProductDraft(**data)


def test_defaults():
    draft = ProductDraft()
    assert draft.product_name == ""
    assert draft.categories == []
    assert draft.gallery == []
    assert draft.listing_status == "pending"
    assert draft.rating is None


def test_none_collections_become_empty():
    draft = ProductDraft(categories=None, features=None, languages=None, gallery=None, long_desc=None)
    assert draft.categories == []
    assert draft.features == []
    assert draft.languages == []
    assert draft.gallery == []
    assert draft.long_desc == ""


def test_sets_drop_duplicates_and_main_category():
    draft = ProductDraft(
        main_category="HRIS",
        categories=["Payroll", "HRIS", "Payroll", " "],
        features=["Automation", "Automation"],
    )
    assert draft.categories == ["Payroll"]
    assert draft.features == ["Automation"]


def test_draft_is_immutable():
    draft = ProductDraft()
    with pytest.raises(ValidationError):
        draft.product_name = "changed"


def test_dict_round_trip():
    draft = _valid_draft(features=["Automation"], rating=4.5)
    assert ProductDraft.from_dict(draft.to_dict()) == draft


def test_valid_draft_has_no_errors():
    assert validate_draft(_valid_draft()) == {}
    assert validate_draft(_valid_draft(website_link="https://peopleos.example.com", release_date="2024-03-01")) == {}


def test_empty_draft_reports_required_fields():
    errors = validate_draft(ProductDraft())
    assert set(errors) == {"product_name", "short_desc", "main_category", "logo"}


@pytest.mark.parametrize("field, value", [
    ("product_name", "P"),
    ("product_name", "x" * 101),
    ("short_desc", "too short"),
    ("short_desc", "x" * 201),
    ("long_desc", "x" * 5001),
    ("pricing", "x" * 101),
    ("video_url", "not a url"),
    ("website_link", "ftp://files.example.com"),
    ("demo_link", "demo"),
    ("release_date", "next spring"),
    ("rating", 6),
])
def test_field_rules(field, value):
    errors = validate_draft(_valid_draft(**{field: value}))
    assert list(errors) == [field]
    assert errors[field]


def test_blank_required_field_is_invalid():
    errors = validate_draft(_valid_draft(product_name="   "))
    assert "product_name" in errors


def test_unknown_listing_status_rejected():
    with pytest.raises(ValidationError):
        ProductDraft(listing_status="archived")


def test_main_category_is_trimmed():
    draft = ProductDraft(main_category=" HRIS ", categories=["HRIS", "Payroll"])
    assert draft.main_category == "HRIS"
    assert draft.categories == ["Payroll"]


def test_blank_optional_strings_are_unset():
    draft = ProductDraft(long_desc="  ", pricing="\t", website_link=" ")
    assert draft.long_desc == ""
    assert draft.pricing == ""
    assert draft.website_link == ""
    # 非空内容保持原样
    assert ProductDraft(long_desc=" text ").long_desc == " text "
