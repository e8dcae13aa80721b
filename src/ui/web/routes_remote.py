"""
Remote API routes — GitHub settings, detection and sync.

GET    /api/remote           → settings (never the token)
POST   /api/remote           → save settings {owner, repo, token, branch?, path?, remember?, load?}
DELETE /api/remote           → forget settings
POST   /api/remote/detect    → guess owner/repo from {token}; nothing is saved
POST   /api/sync             → push staged edits {force?, message?}
POST   /api/pull             → replace local catalog with GitHub's {force?}
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from src.core.use_cases.sync import configure_remote, detect_repository, pull, sync
from src.ui.web.helpers import session_ctx, truthy

logger = logging.getLogger(__name__)

remote_bp = Blueprint("remote", __name__)


@remote_bp.route("/remote")
def api_remote():  # type: ignore[no-untyped-def]
    ctx = session_ctx()
    return jsonify({"remote": ctx.remote.public_dict(), "remember": ctx.state.remember})


@remote_bp.route("/remote", methods=["POST"])
def api_remote_save():  # type: ignore[no-untyped-def]
    ctx = session_ctx()
    data = request.get_json(silent=True) or {}
    result = configure_remote(
        ctx,
        owner=str(data.get("owner", "")),
        repo=str(data.get("repo", "")),
        token=str(data.get("token", "") or ctx.remote.token),
        branch=data.get("branch") or None,
        path=data.get("path") or None,
        remember=truthy(data.get("remember", True)),
        load=truthy(data.get("load", True)),
    )
    if not result.ok:
        return jsonify(result.to_dict()), 400
    return jsonify(result.to_dict())


@remote_bp.route("/remote", methods=["DELETE"])
def api_remote_clear():  # type: ignore[no-untyped-def]
    ctx = session_ctx()
    with ctx.lock:
        ctx.clear_remote()
    return jsonify({"ok": True, "remote": ctx.remote.public_dict()})


@remote_bp.route("/remote/detect", methods=["POST"])
def api_remote_detect():  # type: ignore[no-untyped-def]
    data = request.get_json(silent=True) or {}
    result = detect_repository(session_ctx(), token=data.get("token") or None)
    if not result.ok:
        return jsonify(result.to_dict()), 400
    return jsonify(result.to_dict())


# ── Sync ────────────────────────────────────────────────────────────


@remote_bp.route("/sync", methods=["POST"])
def api_sync():  # type: ignore[no-untyped-def]
    """Push staged edits. A version conflict answers 409."""
    data = request.get_json(silent=True) or {}
    result = sync(
        session_ctx(),
        force=truthy(data.get("force")),
        message=data.get("message") or None,
    )
    if result.conflict:
        return jsonify(result.to_dict()), 409
    if not result.ok:
        return jsonify(result.to_dict()), 502
    return jsonify(result.to_dict())


@remote_bp.route("/pull", methods=["POST"])
def api_pull():  # type: ignore[no-untyped-def]
    data = request.get_json(silent=True) or {}
    result = pull(session_ctx(), force=truthy(data.get("force")))
    if not result.ok:
        return jsonify(result.to_dict()), 400
    return jsonify(result.to_dict())
