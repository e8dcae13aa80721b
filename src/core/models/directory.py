"""
Directory model — workspace configuration loaded from directory.yml.

Everything here has a default, so a workspace without a directory.yml
still works: it publishes to ``data/tools.json`` on ``main``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from src.core.models.remote import DEFAULT_BRANCH, DEFAULT_CATALOG_PATH

DEFAULT_REPO_NAME = "ai-tools-hub"
DEFAULT_API_URL = "https://api.github.com"


class DirectoryConfig(BaseModel):
    """Root workspace configuration."""

    version: int = 1

    name: str = "ai-tools-directory"
    title: str = "AI Tools Hub"
    title_ar: str = "دليل أدوات الذكاء الاصطناعي"

    # Remote defaults (a persisted RemoteConfig overrides branch/path)
    catalog_path: str = DEFAULT_CATALOG_PATH
    default_repo: str = DEFAULT_REPO_NAME
    branch: str = DEFAULT_BRANCH
    api_url: str = DEFAULT_API_URL
    timeout: float = Field(default=15.0, gt=0)

    # Static site output, relative to the workspace root
    site_dir: str = "site"
