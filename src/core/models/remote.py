"""
Remote models — where the catalog lives and how far we are from it.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

DEFAULT_BRANCH = "main"
DEFAULT_CATALOG_PATH = "data/tools.json"

# Prefixes GitHub uses for its token types (classic PAT, OAuth,
# user-to-server, server-to-server, refresh, fine-grained PAT)
TOKEN_PREFIXES = ("ghp_", "gho_", "ghu_", "ghs_", "ghr_", "github_pat_")


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


def looks_like_token(token: str) -> bool:
    """Prefix heuristic only. A False result is a warning, not a failure."""
    return token.startswith(TOKEN_PREFIXES)


class RemoteConfig(BaseModel):
    """Target repository for the catalog file."""

    owner: str = ""
    repo: str = ""
    token: str = ""
    branch: str = DEFAULT_BRANCH
    path: str = DEFAULT_CATALOG_PATH

    @property
    def configured(self) -> bool:
        """Whether there is enough to talk to the remote."""
        return bool(self.owner and self.repo and self.token)

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}" if self.owner and self.repo else ""

    def public_dict(self) -> dict:
        """Config without the secret, for display and JSON responses."""
        return {
            "owner": self.owner,
            "repo": self.repo,
            "branch": self.branch,
            "path": self.path,
            "has_token": bool(self.token),
            "configured": self.configured,
        }


class SyncState(BaseModel):
    """Version token of the last remote revision we read or wrote."""

    version_token: str | None = None
    last_synced_at: str | None = None

    def record(self, version_token: str | None) -> None:
        self.version_token = version_token
        self.last_synced_at = _now_iso()


class RepositoryGuess(BaseModel):
    """Outcome of repository auto-detection.

    ``reason`` tells how the repository was chosen:
    ``name`` (matched the default name), ``probe`` (holds the catalog
    file) or ``fallback`` (most recently updated).
    """

    owner: str
    repo: str
    reason: str
    candidates: list[str] = Field(default_factory=list)
