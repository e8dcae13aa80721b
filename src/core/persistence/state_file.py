"""
State file persistence — the workspace's ``.state/current.json``.

Holds what a browser would keep in local storage: the repository
settings (only while "remember me" is on), the language preference and
the working copy of the catalog with its staged edits.

Saves go through a temp file in the same directory and ``os.replace``,
so a crash mid-write leaves the previous file intact. A working copy
that no longer validates is discarded on load, but the settings around
it are kept.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from src.core.models.state import WorkspaceState

logger = logging.getLogger(__name__)

DEFAULT_STATE_DIR = ".state"
DEFAULT_STATE_FILE = "current.json"

# Fields that only make sense together with the snapshot
_WORKING_COPY_FIELDS = ("snapshot", "version_token", "dirty", "pending_messages")


def default_state_path(root: Path) -> Path:
    return root / DEFAULT_STATE_DIR / DEFAULT_STATE_FILE


def _without_working_copy(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in _WORKING_COPY_FIELDS}


def load_state(path: Path) -> WorkspaceState:
    """Read the workspace state; a fresh state when there is nothing usable.

    When only the working copy is invalid (say, a hand-edited snapshot),
    the remote settings and language survive and the catalog is reloaded
    from GitHub on the next session.
    """
    if not path.is_file():
        logger.info("No state file at %s, starting fresh", path)
        return WorkspaceState()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Unreadable state file %s (%s), starting fresh", path, e)
        return WorkspaceState()
    if not isinstance(data, dict):
        logger.warning("State file %s is not an object, starting fresh", path)
        return WorkspaceState()

    try:
        return WorkspaceState.model_validate(data)
    except ValidationError as e:
        first_error = e
    try:
        state = WorkspaceState.model_validate(_without_working_copy(data))
    except ValidationError:
        logger.warning("Invalid state file %s (%s), starting fresh", path, first_error)
        return WorkspaceState()

    logger.warning("Discarding invalid working copy in %s (%d errors)", path, first_error.error_count())
    return state


def save_state(state: WorkspaceState, path: Path) -> None:
    """Write the workspace state atomically.

    Records keep their camelCase document keys. The remote config,
    token included, is left out unless ``state.remember`` is set; the
    in-memory ``state`` is not modified apart from ``updated_at``.
    """
    state.touch()
    data = state.model_dump(mode="json", by_alias=True, exclude_none=True)
    if not state.remember:
        data.pop("remote", None)
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}_", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(content)
        os.replace(tmp_name, path)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        logger.error("Could not save workspace state to %s: %s", path, e)
        raise
    logger.debug("Workspace state saved to %s (dirty=%s)", path, state.dirty)
