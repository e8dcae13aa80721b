"""
Sync use cases — load, pull, sync, import, export, detect, configure.

Every function takes a SessionContext, does one user-level operation,
writes an audit entry and returns a result object. Errors come back in
the result (``error``), they are never raised to the caller: the CLI and
the web layer only decide how to show them.

Sync policy: edits are staged locally (the store goes dirty, the working
copy is saved to .state/) and only reach GitHub on an explicit ``sync``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from src.core.context import SessionContext
from src.core.models.catalog import Catalog, CatalogError, InvalidStructure
from src.core.models.remote import RemoteConfig, RepositoryGuess, looks_like_token
from src.core.persistence.audit import AuditEntry
from src.core.services.github_contents import (
    ConflictError,
    GatewayError,
    NetworkOrAuthError,
)

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of a load / pull / sync / import."""

    operation: str
    ok: bool = False
    source: str = ""                 # remote, snapshot, working_copy, empty, local
    version_token: str | None = None
    tool_count: int = 0
    message: str = ""
    error: str | None = None
    conflict: bool = False

    def to_dict(self) -> dict:
        return {
            "operation": self.operation,
            "ok": self.ok,
            "source": self.source,
            "version_token": self.version_token,
            "tool_count": self.tool_count,
            "message": self.message,
            "error": self.error,
            "conflict": self.conflict,
        }


def _finish(ctx: SessionContext, result: SyncResult, **context: Any) -> SyncResult:
    """Fill the common fields and write the audit entry."""
    if result.source:
        context["source"] = result.source
    result.tool_count = ctx.store.catalog.total
    if result.version_token is None:
        result.version_token = ctx.sync.version_token
    ctx.record(AuditEntry(
        operation=result.operation,
        status="ok" if result.ok else "failed",
        version_token=result.version_token,
        tool_count=result.tool_count,
        message=result.message,
        error=result.error,
        context=context,
    ))
    return result


# ═══════════════════════════════════════════════════════════════════
#  Read side
# ═══════════════════════════════════════════════════════════════════


def load_catalog(ctx: SessionContext) -> SyncResult:
    """Session start: decide which catalog the session edits.

    Order: unsynced local edits (never silently dropped), then the
    remote file, then the local snapshot, then an empty catalog.
    """
    result = SyncResult(operation="load")
    with ctx.lock:
        if ctx.store.dirty:
            result.ok = True
            result.source = "working_copy"
            result.message = "Kept local changes that are not synced yet"
            return _finish(ctx, result)

        if not ctx.connected:
            result.ok = True
            result.source = "snapshot" if ctx.state.snapshot is not None else "empty"
            result.message = "GitHub not configured — using local copy"
            return _finish(ctx, result)

        fetched = ctx.gateway().fetch_catalog()
        if fetched.version_token is not None:
            ctx.store.load(fetched.catalog)
            ctx.mark_synced(fetched.version_token)
            result.ok = True
            result.source = "remote"
            result.message = "Tools loaded successfully"
            return _finish(ctx, result)

        # Absent file or failed read: degrade, never block
        if ctx.state.snapshot is not None and ctx.store.catalog.total:
            result.source = "snapshot"
            result.message = "Could not read from GitHub — using local copy"
        else:
            ctx.store.load(Catalog.empty())
            ctx.sync.version_token = None
            result.source = "empty"
            result.message = "No catalog on GitHub yet — starting empty"
        ctx.save()
        result.ok = True
        return _finish(ctx, result)


def pull(ctx: SessionContext, force: bool = False) -> SyncResult:
    """Replace the local catalog with the remote one.

    Refuses while there are unsynced edits unless ``force`` is set.
    """
    result = SyncResult(operation="pull")
    with ctx.lock:
        if not ctx.connected:
            result.error = "GitHub is not configured"
            return _finish(ctx, result)

        if ctx.store.dirty and not force:
            result.error = (
                "There are local changes that are not synced. "
                "Sync them first, or pull with force to discard them."
            )
            return _finish(ctx, result)

        try:
            fetched = ctx.gateway().read_catalog()
        except NetworkOrAuthError as e:
            if e.status != 404:
                result.error = str(e)
                return _finish(ctx, result)
            ctx.store.load(Catalog.empty())
            ctx.mark_synced(None)
            result.ok = True
            result.source = "empty"
            result.message = f"No catalog at {ctx.remote.path} yet"
            return _finish(ctx, result)
        except (GatewayError, CatalogError) as e:
            result.error = str(e)
            return _finish(ctx, result)

        ctx.store.load(fetched.catalog)
        ctx.mark_synced(fetched.version_token)
        result.ok = True
        result.source = "remote"
        result.version_token = fetched.version_token
        result.message = f"Pulled {fetched.catalog.total} tools from {ctx.remote.slug}"
        return _finish(ctx, result)


# ═══════════════════════════════════════════════════════════════════
#  Write side
# ═══════════════════════════════════════════════════════════════════


def sync(ctx: SessionContext, force: bool = False, message: str | None = None) -> SyncResult:
    """Push staged edits to GitHub.

    Uses the version token from the last pull/sync. With ``force`` the
    current remote sha is read first, so the write replaces whatever is
    there (explicit last-write-wins).
    """
    result = SyncResult(operation="sync")
    with ctx.lock:
        if not ctx.connected:
            ctx.save()
            result.ok = True
            result.source = "local"
            result.message = "Saved locally (GitHub not configured)"
            return _finish(ctx, result)

        if not ctx.store.dirty and not force:
            result.ok = True
            result.source = "remote"
            result.message = "Nothing to sync"
            return _finish(ctx, result)

        gateway = ctx.gateway()
        commit = message or ctx.commit_message()
        try:
            token = gateway.current_version_token() if force else ctx.sync.version_token
            new_token = gateway.write_catalog(ctx.store.catalog, token, commit)
        except ConflictError as e:
            result.conflict = True
            result.error = (
                f"{e}. The catalog on GitHub changed since it was last pulled; "
                "pull to get the latest version, or sync with force to overwrite it."
            )
            return _finish(ctx, result)
        except GatewayError as e:
            result.error = str(e)
            return _finish(ctx, result)

        ctx.mark_synced(new_token)
        result.ok = True
        result.source = "remote"
        result.version_token = new_token
        result.message = "Saved to GitHub successfully"
        return _finish(ctx, result, commit=commit)


def import_catalog(ctx: SessionContext, source: Path | str | bytes | dict | Any) -> SyncResult:
    """Replace the whole catalog with an imported document (staged).

    ``source`` is a path to a JSON file, JSON text or raw bytes, or an
    already parsed document. Asking the user for confirmation is the caller's job.
    """
    result = SyncResult(operation="import", source="local")
    with ctx.lock:
        try:
            document = _read_document(source)
            catalog = ctx.store.replace_all(document)
        except InvalidStructure as e:
            result.error = f"Failed to import: {e}"
            return _finish(ctx, result)

        ctx.stage("Import data from file")
        result.ok = True
        result.message = f"Data imported successfully ({catalog.total} tools)"
        return _finish(ctx, result)


def _read_document(source: Path | str | bytes | dict | Any) -> Any:
    if isinstance(source, Path):
        try:
            text = source.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise InvalidStructure(f"{source} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise InvalidStructure(f"Cannot read {source}: {e}") from e
    elif isinstance(source, bytes):
        try:
            text = source.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidStructure(f"File is not valid UTF-8: {e}") from e
    elif isinstance(source, str):
        text = source
    else:
        return source

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidStructure(f"Not valid JSON: {e}") from e


@dataclass
class ExportResult:
    ok: bool = False
    path: Path | None = None
    tool_count: int = 0
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "path": str(self.path) if self.path else None,
            "tool_count": self.tool_count,
            "error": self.error,
        }


def export_filename(today: date | None = None) -> str:
    """Dated file name used for exports."""
    return f"ai-tools-data-{(today or date.today()).isoformat()}.json"


def export_catalog(ctx: SessionContext, destination: Path | None = None) -> ExportResult:
    """Write the current catalog as pretty JSON.

    ``destination`` may be a file or a directory; by default the dated
    file goes to the workspace root.
    """
    target = destination or ctx.root
    if target.is_dir():
        target = target / export_filename()

    result = ExportResult(path=target, tool_count=ctx.store.catalog.total)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(ctx.store.catalog.to_json(), encoding="utf-8")
    except OSError as e:
        result.error = f"Failed to export: {e}"
    else:
        result.ok = True

    ctx.record(AuditEntry(
        operation="export",
        status="ok" if result.ok else "failed",
        tool_count=result.tool_count,
        message=str(target),
        error=result.error,
    ))
    return result


# ═══════════════════════════════════════════════════════════════════
#  Remote setup
# ═══════════════════════════════════════════════════════════════════


@dataclass
class DetectResult:
    ok: bool = False
    guess: RepositoryGuess | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "guess": self.guess.model_dump() if self.guess else None,
            "error": self.error,
        }


def detect_repository(ctx: SessionContext, token: str | None = None) -> DetectResult:
    """Guess the target repository from a token. Nothing is saved."""
    result = DetectResult()
    token = token or ctx.remote.token
    if not token:
        result.error = "A GitHub token is required to detect the repository"
        return result

    try:
        result.guess = ctx.gateway().detect_repository(
            token,
            default_repo=ctx.config.default_repo,
            path=ctx.remote.path,
        )
        result.ok = True
    except GatewayError as e:
        result.error = str(e)

    ctx.record(AuditEntry(
        operation="detect",
        repository=f"{result.guess.owner}/{result.guess.repo}" if result.guess else "",
        status="ok" if result.ok else "failed",
        message=result.guess.reason if result.guess else "",
        error=result.error,
    ))
    return result


@dataclass
class ConfigureResult:
    ok: bool = False
    remote: dict = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    error: str | None = None
    loaded: SyncResult | None = None

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "remote": self.remote,
            "warnings": self.warnings,
            "error": self.error,
            "loaded": self.loaded.to_dict() if self.loaded else None,
        }


def configure_remote(
    ctx: SessionContext,
    owner: str,
    repo: str,
    token: str,
    branch: str | None = None,
    path: str | None = None,
    remember: bool = True,
    load: bool = True,
) -> ConfigureResult:
    """Save the repository settings and (optionally) load from it."""
    result = ConfigureResult()
    owner, repo, token = owner.strip(), repo.strip(), token.strip()
    if not (owner and repo and token):
        result.error = "Owner, repository and token are all required"
        return result

    if not looks_like_token(token):
        result.warnings.append("Token does not look like a GitHub token (ghp_…, github_pat_…)")

    remote = RemoteConfig(
        owner=owner,
        repo=repo,
        token=token,
        branch=branch or ctx.config.branch,
        path=path or ctx.config.catalog_path,
    )
    with ctx.lock:
        ctx.set_remote(remote, remember=remember)
        result.ok = True
        result.remote = remote.public_dict()
        if load:
            result.loaded = load_catalog(ctx)

    logger.info("Remote set to %s (%s)", remote.slug, remote.path)
    return result
