"""
ToolRecord model — one AI tool listed in the directory.

Records are stored in ``data/tools.json`` using the camelCase keys the
public site reads (``descriptionEn``, ``iconClass`` …). The Python side
uses snake_case attribute names; aliases map between the two.
"""

from __future__ import annotations

import uuid
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field

Group = Literal["online", "desktop", "mobile", "extensions"]
Pricing = Literal["free", "freemium", "paid"]

# Fixed display order of the four catalog groups
GROUPS: tuple[str, ...] = ("online", "desktop", "mobile", "extensions")
PRICING_TIERS: tuple[str, ...] = ("free", "freemium", "paid")

# Groups whose records carry a platform list / a category
PLATFORM_GROUPS: tuple[str, ...] = ("desktop", "mobile")
CATEGORY_GROUPS: tuple[str, ...] = ("online",)

DEFAULT_ICON_CLASS = "fas fa-tools"

# Choices offered by the admin form (records may carry other values)
BADGES: tuple[str, ...] = ("Popular", "New", "Premium", "Trending")
PLATFORMS: tuple[str, ...] = ("windows", "mac", "linux", "android", "ios")


def is_web_url(url: str) -> bool:
    """An absolute http(s) URL with a host."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def new_tool_id() -> str:
    """Generate a stable record identifier."""
    return uuid.uuid4().hex[:12]


class ToolRecord(BaseModel):
    """A single tool entry.

    ``id`` is assigned once, when the record is first created or first
    loaded from a document that predates ids, and never changes after
    that. Every store mutation is keyed by it.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(default_factory=new_tool_id)
    name: str
    description_en: str = Field(default="", alias="descriptionEn")
    description_ar: str = Field(default="", alias="descriptionAr")
    url: str
    category: str | None = None
    pricing: Pricing = "free"
    badge: str | None = None
    icon_class: str = Field(default=DEFAULT_ICON_CLASS, alias="iconClass")
    icon_gradient: str | None = Field(default=None, alias="iconGradient")
    features_en: list[str] = Field(default_factory=list, alias="featuresEn")
    features_ar: list[str] = Field(default_factory=list, alias="featuresAr")
    platforms: list[str] | None = None

    def to_document(self) -> dict:
        """Serialize with the on-disk camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def description(self, lang: str) -> str:
        """Description in the requested language, falling back to the other one."""
        if lang == "ar":
            return self.description_ar or self.description_en
        return self.description_en or self.description_ar

    def features(self, lang: str) -> list[str]:
        """Feature tags in the requested language.

        Arabic tags fall back to the English tag at the same position.
        """
        if lang != "ar":
            return list(self.features_en)
        tags = []
        for i, feature in enumerate(self.features_en):
            translated = self.features_ar[i] if i < len(self.features_ar) else ""
            tags.append(translated or feature)
        # Arabic-only tags beyond the English list
        tags.extend(self.features_ar[len(self.features_en):])
        return tags
