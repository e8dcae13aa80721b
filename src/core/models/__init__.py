"""
Domain models — Pydantic types for the tools directory.

All models are re-exported here for convenient access:

    from src.core.models import Catalog, ToolRecord, RemoteConfig, WorkspaceState
"""

from src.core.models.catalog import (
    Catalog,
    CatalogError,
    InvalidStructure,
    ToolNotFound,
    UnknownGroup,
)
from src.core.models.directory import DirectoryConfig
from src.core.models.remote import (
    RemoteConfig,
    RepositoryGuess,
    SyncState,
    looks_like_token,
)
from src.core.models.state import WorkspaceState
from src.core.models.tool import GROUPS, PRICING_TIERS, ToolRecord, new_tool_id

__all__ = [
    # tool.py
    "GROUPS",
    "PRICING_TIERS",
    "ToolRecord",
    "new_tool_id",
    # catalog.py
    "Catalog",
    "CatalogError",
    "InvalidStructure",
    "ToolNotFound",
    "UnknownGroup",
    # remote.py
    "RemoteConfig",
    "RepositoryGuess",
    "SyncState",
    "looks_like_token",
    # directory.py
    "DirectoryConfig",
    # state.py
    "WorkspaceState",
]
