"""
完成度计算测试
"""

from itertools import combinations

from product_form_mcp.completion import CompletionState, completion, section_progress
from product_form_mcp.models import REQUIRED_FIELDS, ProductDraft

FILLED = {
    "product_name": "PeopleOS",
    "short_desc": "All-in-one HR platform",
    "main_category": "HRIS",
    "logo": "https://cdn.example.com/logo.png",
}


def test_one_of_four_filled():
    state = completion(ProductDraft(product_name="X", short_desc="", main_category="", logo=""))
    assert state == CompletionState(completed_required_fields=1, total_required_fields=4, percentage=25)


def test_empty_and_full():
    assert completion(ProductDraft()).percentage == 0
    full = completion(ProductDraft(**FILLED))
    assert full.completed_required_fields == 4
    assert full.percentage == 100


def test_whitespace_does_not_count():
    assert completion(ProductDraft(product_name="   ", short_desc="\t")).completed_required_fields == 0


def test_optional_fields_do_not_count():
    draft = ProductDraft(long_desc="Long text", features=["Automation"], website_link="https://x.example.com")
    assert completion(draft).completed_required_fields == 0


def test_filling_a_field_never_lowers_percentage():
    """测试填写必填字段时完成度单调不减"""
    for size in range(len(REQUIRED_FIELDS) + 1):
        for filled in combinations(REQUIRED_FIELDS, size):
            draft = ProductDraft(**{name: FILLED[name] for name in filled})
            before = completion(draft).percentage
            for name in REQUIRED_FIELDS:
                if name in filled:
                    continue
                after = completion(draft.model_copy(update={name: FILLED[name]})).percentage
                assert after >= before


def test_section_progress():
    draft = ProductDraft(product_name="PeopleOS", short_desc="HR platform", demo_link="https://demo.example.com")

    steps = {s.id: s.is_completed for s in section_progress(draft, "silver")}
    assert steps == {"basic": True, "category": False, "features": False, "media": False, "links": False}

    # gold 等级允许演示链接
    steps = {s.id: s.is_completed for s in section_progress(draft, "gold")}
    assert steps["links"] is True
