"""
Catalog store — the in-memory catalog and every mutation of it.

All edits go through here so the renderer always sees a consistent
catalog. Mutations are keyed by record id, never by list position; a
position is only meaningful for the render pass that displayed it
(``id_at`` converts one into an id).

The store tracks whether it holds edits the remote has not seen yet
(``dirty``). Nothing here talks to the network or the disk.
"""

from __future__ import annotations

import logging
from typing import Any

from src.core.models.catalog import Catalog, ToolNotFound
from src.core.models.tool import GROUPS, ToolRecord, new_tool_id

logger = logging.getLogger(__name__)


class CatalogStore:
    """Owns the authoritative catalog for one session."""

    def __init__(self, catalog: Catalog | None = None, dirty: bool = False):
        self._catalog = catalog if catalog is not None else Catalog.empty()
        self._dirty = dirty

    # ── Observable state ────────────────────────────────────────────

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def dirty(self) -> bool:
        """True when the store holds staged changes not yet synced."""
        return self._dirty

    def mark_clean(self) -> None:
        self._dirty = False

    def counts(self) -> dict[str, int]:
        return self._catalog.counts()

    def snapshot(self) -> Catalog:
        """Deep copy of the current catalog."""
        return self._catalog.model_copy(deep=True)

    # ── Lookups ─────────────────────────────────────────────────────

    def get(self, group: str) -> list[ToolRecord]:
        """Records of one group, in order (a copy of the list)."""
        return list(self._catalog.group(group))

    def find(self, tool_id: str) -> tuple[str, ToolRecord]:
        """Locate a record anywhere in the catalog.

        Raises:
            ToolNotFound: no record has this id.
        """
        for group in GROUPS:
            for tool in self._catalog.group(group):
                if tool.id == tool_id:
                    return group, tool
        raise ToolNotFound(f"No tool with id '{tool_id}'")

    def id_at(self, group: str, index: int) -> str:
        """Id of the record currently displayed at ``index`` in ``group``."""
        tools = self._catalog.group(group)
        if index < 0 or index >= len(tools):
            raise ToolNotFound(f"No tool at position {index} in '{group}'")
        return tools[index].id

    def _has_id(self, tool_id: str) -> bool:
        return any(
            tool.id == tool_id for group in GROUPS for tool in self._catalog.group(group)
        )

    def _index_of(self, group: str, tool_id: str) -> int:
        for i, tool in enumerate(self._catalog.group(group)):
            if tool.id == tool_id:
                return i
        raise ToolNotFound(f"No tool with id '{tool_id}' in '{group}'")

    # ── Mutations ───────────────────────────────────────────────────

    def add(self, group: str, record: ToolRecord) -> ToolRecord:
        """Append a record to a group."""
        tools = self._catalog.group(group)
        if not record.id or self._has_id(record.id):
            record = record.model_copy(update={"id": new_tool_id()})
        tools.append(record)
        self._dirty = True
        logger.debug("Added '%s' to %s (%s)", record.name, group, record.id)
        return record

    def update(
        self,
        group: str,
        tool_id: str,
        record: ToolRecord,
        target_group: str | None = None,
    ) -> ToolRecord:
        """Replace a record in place, or move it to ``target_group``.

        The stored record keeps ``tool_id`` whatever id ``record`` carries.
        A move removes the record from ``group`` and appends it to the end
        of ``target_group``.
        """
        index = self._index_of(group, tool_id)
        updated = record.model_copy(update={"id": tool_id})
        target = target_group or group

        if target == group:
            self._catalog.group(group)[index] = updated
        else:
            destination = self._catalog.group(target)
            del self._catalog.group(group)[index]
            destination.append(updated)
            logger.debug("Moved '%s' from %s to %s", updated.name, group, target)

        self._dirty = True
        return updated

    def remove(self, group: str, tool_id: str) -> ToolRecord:
        """Delete a record and return it."""
        index = self._index_of(group, tool_id)
        removed = self._catalog.group(group).pop(index)
        self._dirty = True
        logger.debug("Removed '%s' from %s", removed.name, group)
        return removed

    def replace_all(self, source: Catalog | Any) -> Catalog:
        """Swap in a whole new catalog (import).

        ``source`` is either a Catalog or a parsed JSON document. A
        document is validated first; on ``InvalidStructure`` the current
        catalog is left untouched.
        """
        if isinstance(source, Catalog):
            catalog = source.model_copy(deep=True)
        else:
            catalog = Catalog.from_document(source)

        self._catalog = catalog
        self._dirty = True
        logger.info("Catalog replaced (%d tools)", catalog.total)
        return catalog

    def load(self, catalog: Catalog, dirty: bool = False) -> None:
        """Replace the catalog with one that matches a known revision."""
        self._catalog = catalog
        self._dirty = dirty
