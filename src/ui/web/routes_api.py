"""
Catalog API routes — JSON access to the catalog and its edits.

GET    /api/status                       → session status
GET    /api/catalog                      → catalog document + dirty flag
GET    /api/catalog/<group>              → localized cards (``?lang=&q=&category=``)
POST   /api/catalog/<group>              → add a tool (JSON body)
PUT    /api/catalog/<group>/<id>         → update a tool (body ``group`` moves it)
DELETE /api/catalog/<group>/<id>         → delete; without ``?confirm=1`` only names it
POST   /api/catalog/import               → replace the catalog; needs ``?confirm=1``
GET    /api/catalog/export               → download the catalog

Edits are staged: they mark the session dirty and reach GitHub on
``POST /api/sync``.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, jsonify, request

from src.core.models.tool import GROUPS
from src.core.services.renderer import ALL_CATEGORIES, render_cards
from src.core.services.tool_form import ToolForm
from src.core.use_cases.edit import delete_tool, request_delete, save_tool
from src.core.use_cases.status import get_status
from src.core.use_cases.sync import export_filename, import_catalog
from src.ui.web.helpers import session_ctx, truthy

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def _unknown_group(group: str):  # type: ignore[no-untyped-def]
    return jsonify({"error": f"Unknown section '{group}'", "groups": list(GROUPS)}), 404


@api_bp.route("/status")
def api_status():  # type: ignore[no-untyped-def]
    return jsonify(get_status(session_ctx()).to_dict())


# ── Read ────────────────────────────────────────────────────────────


@api_bp.route("/catalog")
def api_catalog():  # type: ignore[no-untyped-def]
    """Full catalog, in the published document shape."""
    ctx = session_ctx()
    return jsonify({
        "catalog": ctx.store.catalog.to_document(),
        "counts": ctx.store.counts(),
        "dirty": ctx.store.dirty,
    })


@api_bp.route("/catalog/<group>")
def api_group(group: str):  # type: ignore[no-untyped-def]
    """Rendered cards for one section."""
    if group not in GROUPS:
        return _unknown_group(group)

    ctx = session_ctx()
    lang = request.args.get("lang") or ctx.language
    cards = render_cards(
        ctx.store.catalog,
        group,
        lang,
        query=request.args.get("q", ""),
        category=request.args.get("category", ALL_CATEGORIES),
    )
    return jsonify({"group": group, "lang": lang, "cards": [c.to_dict() for c in cards]})


# ── Edit ────────────────────────────────────────────────────────────


@api_bp.route("/catalog/<group>", methods=["POST"])
def api_add(group: str):  # type: ignore[no-untyped-def]
    if group not in GROUPS:
        return _unknown_group(group)

    data = request.get_json(silent=True) or {}
    form = ToolForm.from_mapping({**data, "group": data.get("group", group)})
    result = save_tool(session_ctx(), form)
    if not result.ok:
        return jsonify(result.to_dict()), 400
    return jsonify(result.to_dict()), 201


@api_bp.route("/catalog/<group>/<tool_id>", methods=["PUT"])
def api_update(group: str, tool_id: str):  # type: ignore[no-untyped-def]
    ctx = session_ctx()
    data = request.get_json(silent=True) or {}
    form = ToolForm.from_mapping(data, group=group)
    result = save_tool(ctx, form, group=group, tool_id=tool_id)
    if not result.ok:
        status = 400 if result.field_errors else 404
        return jsonify(result.to_dict()), status
    return jsonify(result.to_dict())


@api_bp.route("/catalog/<group>/<tool_id>", methods=["DELETE"])
def api_delete(group: str, tool_id: str):  # type: ignore[no-untyped-def]
    """Two steps: the first call names the tool, ``?confirm=1`` removes it."""
    ctx = session_ctx()
    pending = request_delete(ctx, group, tool_id)
    if pending is None:
        return jsonify({"error": f"Tool '{tool_id}' not found"}), 404

    if not truthy(request.args.get("confirm")):
        return jsonify({
            "confirm_required": True,
            "group": pending.group,
            "id": pending.tool_id,
            "name": pending.name,
        }), 409

    result = delete_tool(ctx, pending)
    if not result.ok:
        return jsonify(result.to_dict()), 404
    return jsonify(result.to_dict())


# ── Import / export ─────────────────────────────────────────────────


@api_bp.route("/catalog/import", methods=["POST"])
def api_import():  # type: ignore[no-untyped-def]
    """Replace the whole catalog with the posted document."""
    if not truthy(request.args.get("confirm")):
        return jsonify({
            "error": "Import replaces all current data; repeat with ?confirm=1",
            "confirm_required": True,
        }), 409

    document = request.get_json(silent=True)
    if document is None:
        return jsonify({"error": "Request body must be a JSON catalog"}), 400

    result = import_catalog(session_ctx(), document)
    if not result.ok:
        return jsonify(result.to_dict()), 400
    return jsonify(result.to_dict())


@api_bp.route("/catalog/export")
def api_export():  # type: ignore[no-untyped-def]
    ctx = session_ctx()
    return Response(
        ctx.store.catalog.to_json(),
        mimetype="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )
