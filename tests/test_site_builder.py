"""
Tests for the static site build.
"""

from __future__ import annotations

import json
from pathlib import Path

from src.core.models.catalog import Catalog
from src.core.models.directory import DirectoryConfig
from src.ui.web.site_builder import BUILD_MARKER, build_site


class TestBuildSite:
    def test_builds_both_languages(self, tmp_path: Path, sample_catalog: Catalog):
        result = build_site(sample_catalog, tmp_path / "site", DirectoryConfig(title="My Tools"))
        assert result.ok
        assert set(result.files) == {
            "index.html", "ar/index.html", "data/tools.json", "static/css/site.css",
        }

        en = (tmp_path / "site" / "index.html").read_text(encoding="utf-8")
        ar = (tmp_path / "site" / "ar" / "index.html").read_text(encoding="utf-8")
        assert 'lang="en" dir="ltr"' in en
        assert 'lang="ar" dir="rtl"' in ar
        assert "My Tools" in en
        assert "ChatGPT" in en and "ChatGPT" in ar
        assert "مساعد ذكاء اصطناعي للمحادثة" in ar

    def test_relative_links(self, tmp_path: Path, sample_catalog: Catalog):
        build_site(sample_catalog, tmp_path / "site")
        en = (tmp_path / "site" / "index.html").read_text(encoding="utf-8")
        ar = (tmp_path / "site" / "ar" / "index.html").read_text(encoding="utf-8")
        assert 'href="static/css/site.css"' in en
        assert 'href="ar/index.html"' in en
        assert 'href="../static/css/site.css"' in ar
        assert 'href="../index.html"' in ar

    def test_no_search_form_in_static_build(self, tmp_path: Path, sample_catalog: Catalog):
        build_site(sample_catalog, tmp_path / "site")
        assert "<form" not in (tmp_path / "site" / "index.html").read_text(encoding="utf-8")

    def test_publishes_catalog(self, tmp_path: Path, sample_catalog: Catalog):
        build_site(sample_catalog, tmp_path / "site")
        data = json.loads((tmp_path / "site" / "data" / "tools.json").read_text(encoding="utf-8"))
        assert Catalog.from_document(data) == sample_catalog

    def test_output_is_rebuilt(self, tmp_path: Path, sample_catalog: Catalog):
        out = tmp_path / "site"
        assert build_site(sample_catalog, out).ok
        assert (out / BUILD_MARKER).is_file()
        (out / "stale.html").write_text("old")
        assert build_site(sample_catalog, out).ok
        assert not (out / "stale.html").exists()

    def test_refuses_foreign_directory(self, tmp_path: Path, sample_catalog: Catalog):
        out = tmp_path / "docs"
        out.mkdir()
        (out / "notes.md").write_text("keep me")
        result = build_site(sample_catalog, out)
        assert not result.ok
        assert "not empty" in result.error
        assert (out / "notes.md").read_text() == "keep me"

    def test_refuses_protected_paths(self, tmp_path: Path, sample_catalog: Catalog):
        root = tmp_path / "workspace"
        state = root / ".state"
        state.mkdir(parents=True)
        (root / "directory.yml").write_text("name: w\n")
        (state / BUILD_MARKER).write_text("")

        for target in (root, state, tmp_path):
            result = build_site(sample_catalog, target, protected=(root, state))
            assert not result.ok
            assert "would delete" in result.error
        assert (root / "directory.yml").is_file()

    def test_empty_existing_directory_is_used(self, tmp_path: Path, sample_catalog: Catalog):
        out = tmp_path / "site"
        out.mkdir()
        assert build_site(sample_catalog, out).ok

    def test_empty_catalog(self, tmp_path: Path):
        result = build_site(Catalog.empty(), tmp_path / "site")
        assert result.ok
        html = (tmp_path / "site" / "index.html").read_text(encoding="utf-8")
        assert "No tools found in this section" in html
