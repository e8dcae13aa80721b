"""
WorkspaceState — what survives between sessions.

Serialized to .state/current.json. This is the local equivalent of the
browser storage the admin panel used: remote settings (only when the user
asked to be remembered), the language preference, and the working copy of
the catalog with its sync bookkeeping.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

from src.core.models.catalog import Catalog
from src.core.models.remote import RemoteConfig


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class WorkspaceState(BaseModel):
    """Root state model — serialized to .state/current.json."""

    # ── Schema ───────────────────────────────────────────────────
    schema_version: int = 1

    # ── Preferences ──────────────────────────────────────────────
    language: Literal["en", "ar"] = "en"
    remember: bool = True

    # ── Remote ───────────────────────────────────────────────────
    remote: RemoteConfig | None = None

    # ── Working copy ─────────────────────────────────────────────
    snapshot: Catalog | None = None
    version_token: str | None = None
    dirty: bool = False
    last_synced_at: str | None = None
    pending_messages: list[str] = Field(default_factory=list)  # staged edit summaries

    # ── Timestamps ───────────────────────────────────────────────
    created_at: str = Field(default_factory=_now_iso)
    updated_at: str = Field(default_factory=_now_iso)

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = _now_iso()
