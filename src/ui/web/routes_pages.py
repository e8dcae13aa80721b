"""
Page routes — the public, bilingual tools directory.

GET /                 → all groups (``?lang=``, ``?group=``, ``?q=``, ``?category=``)
GET /data/tools.json  → the catalog document the page is rendered from
"""

from __future__ import annotations

from flask import Blueprint, Response, render_template, request, url_for

from src.core.services.i18n import LANGUAGES
from src.core.services.renderer import ALL_CATEGORIES
from src.ui.web.helpers import request_group, request_language, session_ctx
from src.ui.web.page_context import directory_page_context

pages_bp = Blueprint("pages", __name__)


@pages_bp.route("/")
def index():  # type: ignore[no-untyped-def]
    """Render the directory in the requested (or remembered) language."""
    ctx = session_ctx()
    lang = request_language(ctx)
    group = request_group(default=None)
    query = request.args.get("q", "")
    category = request.args.get("category", ALL_CATEGORIES) or ALL_CATEGORIES

    lang_urls = {
        code: url_for("pages.index", lang=code, q=query or None, group=group, category=None)
        for code in LANGUAGES
    }
    return render_template(
        "index.html",
        **directory_page_context(
            ctx.store.catalog,
            ctx.config,
            lang=lang,
            asset_base=url_for("static", filename=""),
            lang_urls=lang_urls,
            search_action=url_for("pages.index"),
            query=query,
            category=category,
            group=group,
        ),
    )


@pages_bp.route("/data/tools.json")
def catalog_document():  # type: ignore[no-untyped-def]
    ctx = session_ctx()
    return Response(ctx.store.catalog.to_json(), mimetype="application/json")
