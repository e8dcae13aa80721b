"""
Template context builders shared by the Flask pages and the static build.

Both produce plain dicts; nothing here knows about requests or files.
"""

from __future__ import annotations

from functools import partial

from src.core.models.catalog import Catalog
from src.core.models.directory import DirectoryConfig
from src.core.models.tool import GROUPS
from src.core.services.i18n import direction, normalize_language, translate
from src.core.services.renderer import (
    ALL_CATEGORIES,
    categories,
    group_titles,
    render_cards,
    render_stats,
)


def _other_language(lang: str) -> str:
    return "ar" if lang == "en" else "en"


def directory_page_context(
    catalog: Catalog,
    config: DirectoryConfig,
    lang: str = "en",
    asset_base: str = "/static/",
    lang_urls: dict[str, str] | None = None,
    search_action: str | None = "/",
    query: str = "",
    category: str = ALL_CATEGORIES,
    group: str | None = None,
) -> dict:
    """Variables for ``index.html``.

    ``search_action`` is None for the static build (no server to search).
    """
    lang = normalize_language(lang)
    titles = group_titles(lang)
    shown = [group] if group in GROUPS else list(GROUPS)

    sections = []
    for name in shown:
        sections.append({
            "group": name,
            "title": titles[name],
            "cards": render_cards(
                catalog,
                name,
                lang,
                query=query,
                category=category if name == "online" else ALL_CATEGORIES,
            ),
        })

    return {
        "lang": lang,
        "dir": direction(lang),
        "other_lang": _other_language(lang),
        "t": partial(translate, lang=lang),
        "title": config.title_ar if lang == "ar" else config.title,
        "stats": render_stats(catalog),
        "sections": sections,
        "group_titles": titles,
        "categories": categories(catalog),
        "active_category": category or ALL_CATEGORIES,
        "active_group": group if group in GROUPS else None,
        "query": query,
        "asset_base": asset_base,
        "lang_urls": lang_urls or {},
        "search_action": search_action,
    }


def admin_page_context(
    catalog: Catalog,
    config: DirectoryConfig,
    lang: str,
    group: str,
    query: str = "",
) -> dict:
    """Variables for ``admin.html`` (the session-dependent parts are added by the route)."""
    lang = normalize_language(lang)
    return {
        "lang": lang,
        "dir": direction(lang),
        "other_lang": _other_language(lang),
        "t": partial(translate, lang=lang),
        "title": config.title_ar if lang == "ar" else config.title,
        "groups": list(GROUPS),
        "group_titles": group_titles(lang),
        "active_group": group,
        "stats": render_stats(catalog),
        "cards": render_cards(catalog, group, lang, query=query),
        "query": query,
    }
