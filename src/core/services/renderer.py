"""
Renderer — catalog → localized cards, filtered and searched.

Pure functions: the same (catalog, group, language, query, category)
always gives the same cards, and nothing here touches the network, the
disk or the session. Templates turn the cards into HTML; a language
switch simply renders again.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.core.models.catalog import Catalog
from src.core.models.tool import GROUPS, PLATFORM_GROUPS, ToolRecord, is_web_url
from src.core.services.i18n import label, normalize_language, platform_icon, translate

DEFAULT_GRADIENT = "linear-gradient(135deg, #667eea, #764ba2)"
ALL_CATEGORIES = "all"


@dataclass
class ToolCard:
    """Display-ready view of one record in one language."""

    id: str
    group: str
    position: int
    name: str
    description: str
    url: str
    pricing: str
    pricing_label: str
    icon_class: str
    icon_gradient: str
    category: str = ""
    badge: str = ""
    badge_label: str = ""
    features: list[str] = field(default_factory=list)
    platform_icons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "group": self.group,
            "position": self.position,
            "name": self.name,
            "description": self.description,
            "url": self.url,
            "pricing": self.pricing,
            "pricing_label": self.pricing_label,
            "icon_class": self.icon_class,
            "icon_gradient": self.icon_gradient,
            "category": self.category,
            "badge": self.badge,
            "badge_label": self.badge_label,
            "features": self.features,
            "platform_icons": self.platform_icons,
        }


def matches(tool: ToolRecord, query: str, lang: str) -> bool:
    """Case-insensitive substring search.

    Looks at the name, both descriptions and the feature tags shown in
    ``lang``. An empty query matches everything.
    """
    needle = query.strip().lower()
    if not needle:
        return True
    haystack = [tool.name, tool.description_en, tool.description_ar, *tool.features(lang)]
    return any(needle in text.lower() for text in haystack if text)


def in_category(tool: ToolRecord, category: str | None) -> bool:
    if not category or category == ALL_CATEGORIES:
        return True
    return (tool.category or "") == category


def card_for(tool: ToolRecord, group: str, position: int, lang: str) -> ToolCard:
    """Localize one record.

    Records imported or pulled from GitHub skip form validation; a URL
    that is not http(s) is dropped so it never reaches an href.
    """
    platforms = tool.platforms or []
    return ToolCard(
        id=tool.id,
        group=group,
        position=position,
        name=tool.name,
        description=tool.description(lang),
        url=tool.url if is_web_url(tool.url) else "",
        pricing=tool.pricing,
        pricing_label=label("pricing", tool.pricing, lang),
        icon_class=tool.icon_class,
        icon_gradient=tool.icon_gradient or DEFAULT_GRADIENT,
        category=tool.category or "",
        badge=tool.badge or "",
        badge_label=label("badge", tool.badge, lang),
        features=tool.features(lang),
        platform_icons=(
            [platform_icon(p) for p in platforms] if group in PLATFORM_GROUPS else []
        ),
    )


def render_cards(
    catalog: Catalog,
    group: str,
    lang: str = "en",
    query: str = "",
    category: str | None = ALL_CATEGORIES,
) -> list[ToolCard]:
    """Cards for one group after search and category filtering.

    ``position`` on each card is the record's index in the unfiltered
    group, so a filtered row still points at the right record.
    """
    lang = normalize_language(lang)
    return [
        card_for(tool, group, position, lang)
        for position, tool in enumerate(catalog.group(group))
        if in_category(tool, category) and matches(tool, query, lang)
    ]


def render_all(
    catalog: Catalog,
    lang: str = "en",
    query: str = "",
) -> dict[str, list[ToolCard]]:
    """Every group, in display order (the public page shows them all)."""
    return {group: render_cards(catalog, group, lang, query) for group in GROUPS}


def render_stats(catalog: Catalog) -> dict[str, int]:
    stats = catalog.counts()
    stats["total"] = catalog.total
    return stats


def categories(catalog: Catalog, group: str = "online") -> list[str]:
    """Distinct categories used in a group, in first-seen order."""
    seen: list[str] = []
    for tool in catalog.group(group):
        if tool.category and tool.category not in seen:
            seen.append(tool.category)
    return seen


def group_titles(lang: str) -> dict[str, str]:
    return {group: translate(f"group.{group}", lang) for group in GROUPS}
