"""
Audit ledger — append-only sync history.

Every pull, sync, import, export and repository detection writes an entry
to an NDJSON (newline-delimited JSON) file. It answers "what did we push,
where, and did it work" after the fact.

The ledger is append-only: entries are never modified or deleted.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_DIR = ".state"
DEFAULT_AUDIT_FILE = "audit.ndjson"


class AuditEntry(BaseModel):
    """A single audit log entry."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    operation: str = ""            # load, pull, sync, import, export, detect

    # Where
    repository: str = ""           # owner/repo, empty when local only
    path: str = ""

    # Results
    status: str = ""               # ok, failed
    version_token: str | None = None
    tool_count: int = 0
    message: str = ""
    error: str | None = None

    context: dict[str, Any] = Field(default_factory=dict)


def _ledger_path(path: Path | None, root: Path | None) -> Path:
    if path is not None:
        return path
    return (root or Path(".")) / DEFAULT_AUDIT_DIR / DEFAULT_AUDIT_FILE


class AuditWriter:
    """Sync history for one workspace, one JSON object per line.

    Writing never raises: a ledger that cannot be written must not turn a
    successful push into a failed one. Unreadable lines are skipped.
    """

    def __init__(self, path: Path | None = None, root: Path | None = None):
        self._path = _ledger_path(path, root)

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: AuditEntry) -> None:
        """Append one entry, creating ``.state/`` on first use."""
        line = json.dumps(entry.model_dump(mode="json"), ensure_ascii=False)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            logger.error("Could not record %s in %s: %s", entry.operation, self._path, e)
            return
        logger.debug("Recorded %s (%s) for %s", entry.operation, entry.status, entry.repository or "local")

    def entries(self) -> Iterator[AuditEntry]:
        """Yield entries oldest first."""
        if not self._path.is_file():
            return
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for num, raw in enumerate(f, start=1):
                    if not raw.strip():
                        continue
                    try:
                        yield AuditEntry.model_validate_json(raw)
                    except ValidationError as e:
                        logger.warning(
                            "%s:%d is not an audit entry, skipped (%d errors)",
                            self._path.name, num, e.error_count(),
                        )
        except OSError as e:
            logger.error("Could not read %s: %s", self._path, e)

    def read_all(self) -> list[AuditEntry]:
        return list(self.entries())

    def read_recent(
        self,
        n: int = 20,
        operation: str | None = None,
        repository: str | None = None,
    ) -> list[AuditEntry]:
        """The last ``n`` entries, optionally narrowed to one operation or repository."""
        if n <= 0:
            return []
        recent: deque[AuditEntry] = deque(maxlen=n)
        for entry in self.entries():
            if operation and entry.operation != operation:
                continue
            if repository and entry.repository != repository:
                continue
            recent.append(entry)
        return list(recent)

    def last_push(self, repository: str) -> AuditEntry | None:
        """Most recent sync that committed to ``repository``, if any."""
        found = None
        for entry in self.entries():
            if entry.operation == "sync" and entry.repository == repository and "commit" in entry.context:
                found = entry
        return found
