"""
Web shared helpers.

Functions used across the route blueprints to reach the session and to
read common request parameters.
"""

from __future__ import annotations

from flask import current_app, request

from src.core.context import SessionContext
from src.core.models.tool import GROUPS
from src.core.services.i18n import LANGUAGES


def session_ctx() -> SessionContext:
    """The SessionContext owned by the running app."""
    from src.ui.web.server import SESSION_KEY

    return current_app.extensions[SESSION_KEY]


def request_language(ctx: SessionContext) -> str:
    """``?lang=`` wins and is remembered; otherwise the saved preference."""
    lang = request.args.get("lang", "")
    if lang in LANGUAGES and lang != ctx.language:
        with ctx.lock:
            ctx.set_language(lang)
    return ctx.language


def request_group(default: str | None = "online") -> str | None:
    group = request.args.get("group", "")
    return group if group in GROUPS else default


def truthy(value: object) -> bool:
    """Interpret form / query / JSON flags."""
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")
