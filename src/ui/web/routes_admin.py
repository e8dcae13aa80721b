"""
Admin routes — the HTML admin panel and its form posts.

GET  /admin/                              → panel (``?group=``, ``?q=``, ``?edit=<id>``, ``?delete=<id>``)
POST /admin/tools                         → add a tool
POST /admin/tools/<group>/<id>            → update (and maybe move) a tool
POST /admin/tools/<group>/<id>/delete     → delete, needs ``confirm=1``
POST /admin/sync | /admin/pull            → push staged edits / reload from GitHub
POST /admin/remote                        → save repository settings
POST /admin/remote/detect                 → guess owner/repo from a token (not saved)
POST /admin/remote/disconnect             → forget repository settings
POST /admin/import                        → replace the catalog, needs ``confirm=1``
GET  /admin/export                        → download the catalog

Every post redirects back to the panel with a flash message, except
form validation failures, which re-render the panel with the values
the user typed.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, flash, redirect, render_template, request, url_for

from src.core.context import SessionContext
from src.core.models.catalog import CatalogError
from src.core.models.tool import BADGES, GROUPS, PLATFORMS, PRICING_TIERS
from src.core.services.tool_form import ToolForm
from src.core.use_cases.edit import delete_tool as delete_tool_use_case
from src.core.use_cases.edit import request_delete, save_tool
from src.core.use_cases.status import get_status
from src.core.use_cases.sync import (
    configure_remote,
    detect_repository,
    export_filename,
    import_catalog,
    pull,
    sync,
)
from src.ui.web.helpers import request_group, request_language, session_ctx, truthy
from src.ui.web.page_context import admin_page_context

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__)


def _remote_form(ctx: SessionContext) -> dict:
    remote = ctx.remote
    return {"owner": remote.owner, "repo": remote.repo, "branch": remote.branch, "path": remote.path}


def _render(
    ctx: SessionContext,
    group: str,
    form: ToolForm | None = None,
    form_errors: dict | None = None,
    editing: str | None = None,
    editing_group: str | None = None,
    pending_delete=None,
    remote_form: dict | None = None,
    status_code: int = 200,
):  # type: ignore[no-untyped-def]
    lang = request_language(ctx)
    status = get_status(ctx).to_dict()
    context = admin_page_context(
        ctx.store.catalog, ctx.config, lang, group, query=request.args.get("q", ""),
    )
    context.update(
        status=status,
        remote=status["remote"],
        remote_form=remote_form or _remote_form(ctx),
        remember=ctx.state.remember,
        form=form or ToolForm(group=group),
        form_errors=form_errors or {},
        editing=editing,
        editing_group=editing_group,
        pending_delete=pending_delete,
        pricing_tiers=PRICING_TIERS,
        badges=BADGES,
        platforms=PLATFORMS,
        asset_base=url_for("static", filename=""),
        lang_urls={
            code: url_for("admin.index", group=group, lang=code) for code in ("en", "ar")
        },
    )
    return render_template("admin.html", **context), status_code


def _back(group: str | None = None):  # type: ignore[no-untyped-def]
    return redirect(url_for("admin.index", group=group or request_group()))


# ── Panel ───────────────────────────────────────────────────────────


@admin_bp.route("/")
def index():  # type: ignore[no-untyped-def]
    """Render the admin panel."""
    ctx = session_ctx()
    group = request_group()
    form = editing = editing_group = pending = None

    edit_id = request.args.get("edit")
    if edit_id:
        try:
            editing_group, record = ctx.store.find(edit_id)
        except CatalogError:
            flash("Tool not found", "error")
        else:
            form = ToolForm.from_record(record, editing_group)
            editing = edit_id

    delete_id = request.args.get("delete")
    if delete_id:
        pending = request_delete(ctx, group, delete_id)
        if pending is None:
            flash("Tool not found", "error")

    return _render(ctx, group, form=form, editing=editing, editing_group=editing_group, pending_delete=pending)


# ── Tools ───────────────────────────────────────────────────────────


@admin_bp.route("/tools", methods=["POST"])
def add_tool():  # type: ignore[no-untyped-def]
    ctx = session_ctx()
    form = ToolForm.from_mapping(request.form)
    result = save_tool(ctx, form)
    if not result.ok:
        return _render(ctx, form.group if form.group in GROUPS else "online",
                       form=form, form_errors=result.field_errors or {"form": result.error},
                       status_code=400)
    flash("Tool added successfully", "success")
    return _back(result.group)


@admin_bp.route("/tools/<group>/<tool_id>", methods=["POST"])
def update_tool(group: str, tool_id: str):  # type: ignore[no-untyped-def]
    ctx = session_ctx()
    form = ToolForm.from_mapping(request.form, group=group)
    result = save_tool(ctx, form, group=group, tool_id=tool_id)
    if not result.ok:
        if not result.field_errors:
            flash(result.error or "Update failed", "error")
            return _back(group)
        return _render(ctx, group, form=form, form_errors=result.field_errors,
                       editing=tool_id, editing_group=group, status_code=400)
    flash("Tool updated successfully", "success")
    return _back(result.group)


@admin_bp.route("/tools/<group>/<tool_id>/delete", methods=["POST"])
def delete_tool(group: str, tool_id: str):  # type: ignore[no-untyped-def]
    """Second step of the delete; the first is ``GET /admin/?delete=<id>``."""
    ctx = session_ctx()
    if not truthy(request.form.get("confirm")):
        return redirect(url_for("admin.index", group=group, delete=tool_id))

    pending = request_delete(ctx, group, tool_id)
    if pending is None:
        flash("Tool not found", "error")
        return _back(group)

    result = delete_tool_use_case(ctx, pending)
    flash("Tool deleted successfully" if result.ok else (result.error or "Delete failed"),
          "success" if result.ok else "error")
    return _back(pending.group)


# ── Sync ────────────────────────────────────────────────────────────


@admin_bp.route("/sync", methods=["POST"])
def sync_now():  # type: ignore[no-untyped-def]
    result = sync(session_ctx(), force=truthy(request.form.get("force")))
    if result.ok:
        flash(result.message, "success")
    else:
        flash(result.error or "Sync failed", "warning" if result.conflict else "error")
    return _back()


@admin_bp.route("/pull", methods=["POST"])
def pull_now():  # type: ignore[no-untyped-def]
    result = pull(session_ctx(), force=truthy(request.form.get("force")))
    flash(result.message if result.ok else (result.error or "Reload failed"),
          "success" if result.ok else "error")
    return _back()


# ── Remote settings ─────────────────────────────────────────────────


@admin_bp.route("/remote", methods=["POST"])
def save_remote():  # type: ignore[no-untyped-def]
    ctx = session_ctx()
    data = request.form
    result = configure_remote(
        ctx,
        owner=data.get("owner", ""),
        repo=data.get("repo", ""),
        token=data.get("token", "") or ctx.remote.token,
        branch=data.get("branch") or None,
        path=data.get("path") or None,
        remember=truthy(data.get("remember")),
    )
    if not result.ok:
        flash(result.error or "Could not save settings", "error")
        return _back()

    for warning in result.warnings:
        flash(warning, "warning")
    flash("Settings saved", "success")
    if result.loaded is not None:
        flash(result.loaded.message, "success" if result.loaded.ok else "error")
    return _back()


@admin_bp.route("/remote/detect", methods=["POST"])
def detect():  # type: ignore[no-untyped-def]
    """Show the guessed repository in the settings form without saving it."""
    ctx = session_ctx()
    result = detect_repository(ctx, token=request.form.get("token") or None)
    if not result.ok or result.guess is None:
        flash(result.error or "Could not detect the repository", "error")
        return _back()

    flash(f"Detected {result.guess.owner}/{result.guess.repo} ({result.guess.reason}). "
          "Review and save to use it.", "success")
    remote_form = _remote_form(ctx)
    remote_form.update(owner=result.guess.owner, repo=result.guess.repo)
    return _render(ctx, request_group(), remote_form=remote_form)


@admin_bp.route("/remote/disconnect", methods=["POST"])
def disconnect():  # type: ignore[no-untyped-def]
    ctx = session_ctx()
    with ctx.lock:
        ctx.clear_remote()
    flash("GitHub settings removed", "success")
    return _back()


# ── Import / export ─────────────────────────────────────────────────


@admin_bp.route("/import", methods=["POST"])
def import_file():  # type: ignore[no-untyped-def]
    ctx = session_ctx()
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        flash("Choose a JSON file to import", "error")
        return _back()
    if not truthy(request.form.get("confirm")):
        flash("Import not confirmed: the current data was left unchanged", "warning")
        return _back()

    result = import_catalog(ctx, upload.read())
    flash(result.message if result.ok else (result.error or "Failed to import"),
          "success" if result.ok else "error")
    return _back()


@admin_bp.route("/export")
def export():  # type: ignore[no-untyped-def]
    ctx = session_ctx()
    return Response(
        ctx.store.catalog.to_json(),
        mimetype="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )
