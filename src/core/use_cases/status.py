"""
Status use case — aggregate workspace, remote and sync state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from src.core.context import SessionContext
from src.core.persistence.audit import AuditEntry
from src.core.services.renderer import render_stats


@dataclass
class StatusResult:
    """Aggregated session status."""

    root: Path | None = None
    name: str = ""
    language: str = "en"
    remote: dict = field(default_factory=dict)
    connected: bool = False
    dirty: bool = False
    pending: list[str] = field(default_factory=list)
    version_token: str | None = None
    last_synced_at: str | None = None
    last_push: dict | None = None
    counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "workspace": {
                "name": self.name,
                "root": str(self.root) if self.root else None,
                "language": self.language,
            },
            "remote": self.remote,
            "connected": self.connected,
            "sync": {
                "dirty": self.dirty,
                "pending": self.pending,
                "version_token": self.version_token,
                "last_synced_at": self.last_synced_at,
                "last_push": self.last_push,
            },
            "counts": self.counts,
        }


def _push_summary(entry: AuditEntry | None) -> dict | None:
    if entry is None:
        return None
    return {
        "at": entry.timestamp,
        "commit": entry.context.get("commit", ""),
        "version_token": entry.version_token,
    }


def get_status(ctx: SessionContext) -> StatusResult:
    """Snapshot of the session (no network access)."""
    pushed = ctx.audit.last_push(ctx.remote.slug) if ctx.connected else None
    return StatusResult(
        root=ctx.root,
        name=ctx.config.name,
        language=ctx.language,
        remote=ctx.remote.public_dict(),
        connected=ctx.connected,
        dirty=ctx.store.dirty,
        pending=list(ctx.state.pending_messages),
        version_token=ctx.sync.version_token,
        last_synced_at=ctx.sync.last_synced_at,
        last_push=_push_summary(pushed),
        counts=render_stats(ctx.store.catalog),
    )
