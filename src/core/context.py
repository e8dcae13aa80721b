"""
Session context — everything one editing session works on.

One object owns the workspace config, the persisted workspace state, the
catalog store, the sync bookkeeping and the audit ledger. Entry points
build it once and hand it down:

    - CLI:          each command → ``SessionContext.open(config_path)``
    - Web server:   create_app() → one context stored on the app
    - Tests:        ``SessionContext.open(tmp_path / "directory.yml")``

Closing the context (or leaving its ``with`` block) writes the working
copy back to .state/current.json. Nothing else lives at module level.

The web server may call in from several request threads; callers that
mutate take ``ctx.lock`` for the whole operation.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from src.core.config.loader import find_config_file, load_config, workspace_root
from src.core.models.directory import DirectoryConfig
from src.core.models.remote import RemoteConfig, SyncState
from src.core.models.state import WorkspaceState
from src.core.persistence.audit import AuditEntry, AuditWriter
from src.core.persistence.state_file import default_state_path, load_state, save_state
from src.core.services.catalog_store import CatalogStore
from src.core.services.github_contents import GitHubContentsGateway
from src.core.services.i18n import normalize_language

logger = logging.getLogger(__name__)

# Used when no token was persisted
TOKEN_ENV_VAR = "GITHUB_TOKEN"

DEFAULT_COMMIT_MESSAGE = "Update tools data"


class SessionContext:
    """Application context for one editing session."""

    def __init__(
        self,
        root: Path,
        config: DirectoryConfig,
        state: WorkspaceState,
        state_path: Path | None = None,
    ):
        self.root = root
        self.config = config
        self.state = state
        self.state_path = state_path or default_state_path(root)
        self.audit = AuditWriter(root=root)
        self.lock = threading.RLock()

        self.store = CatalogStore(
            catalog=state.snapshot.model_copy(deep=True) if state.snapshot else None,
            dirty=state.dirty,
        )
        self.sync = SyncState(
            version_token=state.version_token,
            last_synced_at=state.last_synced_at,
        )
        self._closed = False

    # ── Construction / teardown ─────────────────────────────────────

    @classmethod
    def open(cls, config_path: Path | None = None, root: Path | None = None) -> SessionContext:
        """Load config and persisted state for a workspace.

        Args:
            config_path: Explicit directory.yml (else searched from ``root``/cwd).
            root: Workspace root when there is no config file.
        """
        if config_path is None:
            config_path = find_config_file(root)
        config = load_config(config_path) if config_path else DirectoryConfig()
        resolved_root = workspace_root(config_path) if config_path else (root or Path.cwd()).resolve()

        state_path = default_state_path(resolved_root)
        state = load_state(state_path)
        logger.debug("Session opened at %s", resolved_root)
        return cls(resolved_root, config, state, state_path)

    def close(self) -> None:
        """Persist the working copy. Safe to call twice."""
        if self._closed:
            return
        self.save()
        self._closed = True

    def __enter__(self) -> SessionContext:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ── Remote ──────────────────────────────────────────────────────

    @property
    def remote(self) -> RemoteConfig:
        """Effective remote config (persisted values, workspace defaults, env token)."""
        remote = self.state.remote or RemoteConfig(
            branch=self.config.branch,
            path=self.config.catalog_path,
        )
        if not remote.token and os.environ.get(TOKEN_ENV_VAR):
            remote = remote.model_copy(update={"token": os.environ[TOKEN_ENV_VAR]})
        return remote

    @property
    def connected(self) -> bool:
        return self.remote.configured

    def gateway(self, remote: RemoteConfig | None = None) -> GitHubContentsGateway:
        return GitHubContentsGateway(
            remote or self.remote,
            api_url=self.config.api_url,
            timeout=self.config.timeout,
        )

    def set_remote(self, remote: RemoteConfig, remember: bool = True) -> None:
        """Point the session at a repository.

        A different repository or path means the known version token no
        longer applies.
        """
        previous = self.state.remote
        if previous is None or (previous.slug, previous.path, previous.branch) != (
            remote.slug,
            remote.path,
            remote.branch,
        ):
            self.sync.version_token = None
        self.state.remote = remote
        self.state.remember = remember
        self.save()

    def clear_remote(self) -> None:
        self.state.remote = None
        self.sync.version_token = None
        self.save()

    # ── Preferences ─────────────────────────────────────────────────

    @property
    def language(self) -> str:
        return self.state.language

    def set_language(self, lang: str) -> str:
        self.state.language = normalize_language(lang)
        self.save()
        return self.state.language

    # ── Staging / persistence ───────────────────────────────────────

    def stage(self, message: str) -> None:
        """Record a staged edit and save the working copy locally."""
        self.state.pending_messages.append(message)
        self.save()

    def commit_message(self) -> str:
        """Message for the next sync, built from the staged edits."""
        pending = self.state.pending_messages
        if not pending:
            return DEFAULT_COMMIT_MESSAGE
        if len(pending) == 1:
            return pending[0]
        lines = "\n".join(f"- {m}" for m in pending)
        return f"{DEFAULT_COMMIT_MESSAGE} ({len(pending)} changes)\n\n{lines}"

    def mark_synced(self, version_token: str | None) -> None:
        """The store now matches the remote revision ``version_token``."""
        self.sync.record(version_token)
        self.store.mark_clean()
        self.state.pending_messages = []
        self.save()

    def save(self) -> None:
        """Write settings and the working copy to .state/current.json."""
        self.state.snapshot = self.store.catalog
        self.state.dirty = self.store.dirty
        self.state.version_token = self.sync.version_token
        self.state.last_synced_at = self.sync.last_synced_at
        save_state(self.state, self.state_path)

    def record(self, entry: AuditEntry) -> None:
        """Append to the audit ledger, tagging the current repository."""
        if not entry.repository:
            entry.repository = self.remote.slug
        if not entry.path:
            entry.path = self.remote.path
        self.audit.write(entry)
