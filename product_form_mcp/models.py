"""
数据模型定义
"""

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

ListingStatus = Literal["pending", "approved", "rejected"]

REQUIRED_FIELDS = ("product_name", "short_desc", "main_category", "logo")

COLLECTION_FIELDS = ("categories", "features", "languages", "gallery")

# 服务端维护的字段，表单只读
READ_ONLY_FIELDS = ("created_at", "updated_at")

AVAILABLE_FEATURES = (
    "Automation",
    "Leadership",
    "Communication",
    "AI Assistant",
    "Analytics & Reporting",
    "Integrations",
    "Security & Compliance",
    "Collaboration",
    "Mobile Support",
    "Onboarding Tools",
    "Training & LMS",
    "Performance Feedback",
)

AVAILABLE_LANGUAGES = (
    "Turkish",
    "English",
    "German",
    "French",
    "Spanish",
    "Italian",
    "Portuguese",
    "Dutch",
    "Polish",
    "Russian",
    "Japanese",
    "Chinese",
    "Korean",
    "Arabic",
)


def unique_items(items) -> List[str]:
    """Drop blanks and duplicates, keeping first-seen order"""
    result = []
    for item in items or []:
        if item is None:
            continue
        value = str(item).strip()
        if value and value not in result:
            result.append(value)
    return result


class ProductDraft(BaseModel):
    """产品草稿数据模型

    An in-progress product listing. Drafts are values: the rule functions
    never modify a draft in place, they return a new one.
    """
    model_config = ConfigDict(frozen=True)

    # Basic info
    product_name: str = ""
    short_desc: str = ""
    long_desc: str = ""

    # Categories
    main_category: str = ""
    categories: List[str] = Field(default_factory=list)

    # Features
    features: List[str] = Field(default_factory=list)

    # Media
    logo: str = ""
    gallery: List[str] = Field(default_factory=list)
    video_url: str = ""

    # Links
    website_link: str = ""
    demo_link: str = ""

    # Other
    pricing: str = ""
    languages: List[str] = Field(default_factory=list)
    release_date: str = ""

    # Status (admin only) and server metadata
    listing_status: ListingStatus = "pending"
    rating: Optional[float] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("product_name", "short_desc", "logo", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator(
        "long_desc", "video_url", "website_link", "demo_link", "pricing", "release_date",
        mode="before",
    )
    @classmethod
    def _blank_to_empty(cls, v):
        # 可选字段只含空白时视为未填写
        if v is None or (isinstance(v, str) and not v.strip()):
            return ""
        return v

    @field_validator("main_category", mode="before")
    @classmethod
    def _strip_main_category(cls, v):
        if v is None:
            return ""
        return v.strip() if isinstance(v, str) else v

    @field_validator("categories", "features", "languages", mode="before")
    @classmethod
    def _as_set(cls, v):
        return unique_items(v)

    @field_validator("gallery", mode="before")
    @classmethod
    def _as_list(cls, v):
        return [str(url).strip() for url in (v or []) if url and str(url).strip()]

    @field_validator("listing_status", mode="before")
    @classmethod
    def _default_status(cls, v):
        return v or "pending"

    @model_validator(mode="before")
    @classmethod
    def _main_category_not_secondary(cls, data):
        main = data.get("main_category") if isinstance(data, dict) else None
        if isinstance(main, str) and main.strip():
            main = main.strip()
            data = {
                **data,
                "categories": [c for c in unique_items(data.get("categories")) if c != main],
            }
        return data

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Dict) -> "ProductDraft":
        return cls.model_validate(data)


_HTTP_URL = TypeAdapter(AnyHttpUrl)


def _check_url(value: str) -> str:
    if value:
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError:
            raise ValueError(f"invalid URL: {value}") from None
    return value


class ProductSubmission(BaseModel):
    """Field rules a draft must satisfy before it can be submitted"""
    model_config = ConfigDict(extra="ignore")

    product_name: str = Field(min_length=2, max_length=100)
    short_desc: str = Field(min_length=10, max_length=200)
    long_desc: str = Field("", max_length=5000)
    main_category: str = Field(min_length=1)
    logo: str = Field(min_length=1)
    video_url: str = ""
    website_link: str = ""
    demo_link: str = ""
    pricing: str = Field("", max_length=100)
    release_date: str = ""
    listing_status: ListingStatus = "pending"
    rating: Optional[float] = Field(None, ge=0, le=5)

    @field_validator("product_name", "short_desc", "main_category", "logo", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("video_url", "website_link", "demo_link")
    @classmethod
    def _url(cls, v):
        return _check_url(v)

    @field_validator("release_date")
    @classmethod
    def _iso_date(cls, v):
        if v:
            date.fromisoformat(v)
        return v


FIELD_MESSAGES = {
    "product_name": "Product name must be between 2 and 100 characters",
    "short_desc": "Short description must be between 10 and 200 characters",
    "long_desc": "Detailed description can be at most 5000 characters",
    "main_category": "A main category must be selected",
    "logo": "A logo must be uploaded",
    "video_url": "Enter a valid video URL",
    "website_link": "Enter a valid website URL",
    "demo_link": "Enter a valid demo link",
    "pricing": "Pricing can be at most 100 characters",
    "release_date": "Enter a valid release date (YYYY-MM-DD)",
    "listing_status": "Listing status must be pending, approved or rejected",
    "rating": "Rating must be between 0 and 5",
}


def validate_draft(draft: ProductDraft) -> Dict[str, str]:
    """Check a draft against the submission rules

    Returns:
        Mapping of field name to error message, empty when the draft is valid
    """
    try:
        ProductSubmission.model_validate(draft.model_dump())
    except ValidationError as e:
        errors = {}
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "__root__"
            errors.setdefault(field, FIELD_MESSAGES.get(field, err["msg"]))
        return errors
    return {}
