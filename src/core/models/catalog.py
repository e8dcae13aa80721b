"""
Catalog model — the four named groups of tool records.

A catalog always carries all four groups (possibly empty). Documents
coming from imports or the remote file are validated through
``Catalog.from_document`` which rejects anything else.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from src.core.models.tool import GROUPS, ToolRecord, new_tool_id


class CatalogError(Exception):
    """Base class for catalog errors."""


class InvalidStructure(CatalogError):
    """Raised when a document is not a valid four-group catalog."""


class UnknownGroup(CatalogError):
    """Raised for a group name outside the four fixed groups."""


class ToolNotFound(CatalogError):
    """Raised when no record carries the requested id."""


class Catalog(BaseModel):
    """Grouped collection of tool records."""

    model_config = ConfigDict(extra="forbid")

    online: list[ToolRecord] = Field(default_factory=list)
    desktop: list[ToolRecord] = Field(default_factory=list)
    mobile: list[ToolRecord] = Field(default_factory=list)
    extensions: list[ToolRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_ids(self) -> Catalog:
        # Hand-edited files may repeat an id; later copies get a fresh one
        seen: set[str] = set()
        for group in GROUPS:
            tools = getattr(self, group)
            for i, tool in enumerate(tools):
                if tool.id in seen:
                    tools[i] = tool.model_copy(update={"id": new_tool_id()})
                seen.add(tools[i].id)
        return self

    @classmethod
    def empty(cls) -> Catalog:
        """A catalog with four empty groups."""
        return cls()

    @classmethod
    def from_document(cls, data: Any) -> Catalog:
        """Validate a parsed JSON document.

        Raises:
            InvalidStructure: unless ``data`` is a mapping with exactly the
                four group keys, each a list of tool-shaped objects.
        """
        if not isinstance(data, dict):
            raise InvalidStructure(
                f"Expected a JSON object with groups {', '.join(GROUPS)}, "
                f"got {type(data).__name__}"
            )

        keys = set(data)
        missing = [g for g in GROUPS if g not in keys]
        extra = sorted(keys - set(GROUPS))
        if missing:
            raise InvalidStructure(f"Missing group(s): {', '.join(missing)}")
        if extra:
            raise InvalidStructure(f"Unexpected key(s): {', '.join(extra)}")

        for group in GROUPS:
            if not isinstance(data[group], list):
                raise InvalidStructure(
                    f"Group '{group}' must be a list, got {type(data[group]).__name__}"
                )

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidStructure(f"Invalid tool record: {e}") from e

    def to_document(self) -> dict:
        """Serialize to the on-disk JSON shape (camelCase records)."""
        return {
            group: [tool.to_document() for tool in self.group(group)]
            for group in GROUPS
        }

    def to_json(self) -> str:
        """Pretty-printed JSON text, as published and exported."""
        return json.dumps(self.to_document(), indent=2, ensure_ascii=False) + "\n"

    def group(self, name: str) -> list[ToolRecord]:
        """Return the (mutable) list for a group."""
        if name not in GROUPS:
            raise UnknownGroup(f"Unknown group '{name}' (expected one of: {', '.join(GROUPS)})")
        return getattr(self, name)

    def counts(self) -> dict[str, int]:
        """Number of records per group."""
        return {group: len(self.group(group)) for group in GROUPS}

    @property
    def total(self) -> int:
        return sum(self.counts().values())
