"""
Tests for core models — ToolRecord, Catalog, RemoteConfig, WorkspaceState.
"""

from __future__ import annotations

import json

import pytest

from src.core.models import (
    GROUPS,
    Catalog,
    DirectoryConfig,
    InvalidStructure,
    RemoteConfig,
    SyncState,
    ToolRecord,
    UnknownGroup,
    WorkspaceState,
    looks_like_token,
)
from src.core.models.tool import DEFAULT_ICON_CLASS


class TestToolRecord:
    def test_camel_case_aliases(self):
        tool = ToolRecord.model_validate({
            "name": "X",
            "url": "https://x.ai",
            "descriptionEn": "English",
            "iconClass": "fas fa-x",
            "featuresAr": ["أ"],
        })
        assert tool.description_en == "English"
        assert tool.icon_class == "fas fa-x"
        assert tool.features_ar == ["أ"]

    def test_snake_case_accepted(self):
        tool = ToolRecord(name="X", url="https://x.ai", description_ar="عربي")
        assert tool.description_ar == "عربي"

    def test_defaults(self):
        tool = ToolRecord(name="X", url="https://x.ai")
        assert tool.icon_class == DEFAULT_ICON_CLASS
        assert tool.pricing == "free"
        assert tool.id

    def test_to_document_uses_aliases_and_drops_none(self):
        doc = ToolRecord(id="a1", name="X", url="https://x.ai", description_en="E").to_document()
        assert doc["descriptionEn"] == "E"
        assert "description_en" not in doc
        assert "badge" not in doc
        assert "platforms" not in doc

    def test_unknown_fields_preserved(self):
        tool = ToolRecord.model_validate({"name": "X", "url": "https://x.ai", "rating": 4.5})
        assert tool.to_document()["rating"] == 4.5

    def test_description_falls_back(self):
        only_ar = ToolRecord(name="X", url="https://x.ai", description_ar="عربي")
        only_en = ToolRecord(name="X", url="https://x.ai", description_en="English")
        assert only_ar.description("en") == "عربي"
        assert only_en.description("ar") == "English"

    def test_arabic_features_fall_back_by_index(self):
        tool = ToolRecord(
            name="X", url="https://x.ai",
            features_en=["Chat", "Code", "Images"],
            features_ar=["محادثة"],
        )
        assert tool.features("ar") == ["محادثة", "Code", "Images"]
        assert tool.features("en") == ["Chat", "Code", "Images"]

    def test_invalid_pricing_rejected(self):
        with pytest.raises(ValueError):
            ToolRecord(name="X", url="https://x.ai", pricing="expensive")


class TestCatalog:
    def test_empty_has_four_groups(self):
        catalog = Catalog.empty()
        assert catalog.counts() == {g: 0 for g in GROUPS}
        assert catalog.total == 0

    def test_from_document(self, sample_catalog: Catalog):
        assert sample_catalog.counts() == {"online": 2, "desktop": 1, "mobile": 1, "extensions": 0}
        assert sample_catalog.total == 4

    def test_missing_group_rejected(self):
        with pytest.raises(InvalidStructure, match="extensions"):
            Catalog.from_document({"online": [], "desktop": [], "mobile": []})

    def test_extra_key_rejected(self):
        doc = {g: [] for g in GROUPS}
        doc["games"] = []
        with pytest.raises(InvalidStructure, match="games"):
            Catalog.from_document(doc)

    def test_non_list_group_rejected(self):
        doc = {g: [] for g in GROUPS}
        doc["online"] = {"name": "X"}
        with pytest.raises(InvalidStructure):
            Catalog.from_document(doc)

    def test_non_object_rejected(self):
        with pytest.raises(InvalidStructure):
            Catalog.from_document([1, 2, 3])

    def test_bad_record_rejected(self):
        doc = {g: [] for g in GROUPS}
        doc["online"] = [{"descriptionEn": "no name or url"}]
        with pytest.raises(InvalidStructure):
            Catalog.from_document(doc)

    def test_duplicate_ids_reassigned(self):
        doc = {g: [] for g in GROUPS}
        doc["online"] = [
            {"id": "same", "name": "A", "url": "https://a.ai"},
            {"id": "same", "name": "B", "url": "https://b.ai"},
        ]
        catalog = Catalog.from_document(doc)
        ids = [t.id for t in catalog.online]
        assert ids[0] == "same"
        assert ids[1] != "same"

    def test_unknown_group(self, sample_catalog: Catalog):
        with pytest.raises(UnknownGroup):
            sample_catalog.group("games")

    def test_to_json_keeps_arabic(self, sample_catalog: Catalog):
        text = sample_catalog.to_json()
        assert "مساعد" in text
        assert text.endswith("\n")
        assert list(json.loads(text)) == list(GROUPS)

    def test_document_round_trip(self, sample_catalog: Catalog):
        again = Catalog.from_document(json.loads(sample_catalog.to_json()))
        assert again == sample_catalog


class TestRemote:
    def test_configured_needs_owner_repo_token(self):
        assert not RemoteConfig(owner="o", repo="r").configured
        assert RemoteConfig(owner="o", repo="r", token="t").configured

    def test_public_dict_hides_token(self):
        info = RemoteConfig(owner="o", repo="r", token="ghp_secret").public_dict()
        assert "token" not in info
        assert info["has_token"] is True
        assert "ghp_secret" not in json.dumps(info)

    def test_token_heuristic(self):
        assert looks_like_token("ghp_abc123")
        assert looks_like_token("github_pat_11ABC")
        assert not looks_like_token("password123")

    def test_sync_state_record(self):
        state = SyncState()
        state.record("abc")
        assert state.version_token == "abc"
        assert state.last_synced_at


class TestDirectoryConfig:
    def test_defaults(self):
        config = DirectoryConfig()
        assert config.catalog_path == "data/tools.json"
        assert config.branch == "main"
        assert config.default_repo == "ai-tools-hub"

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            DirectoryConfig(timeout=0)


class TestWorkspaceState:
    def test_defaults(self):
        state = WorkspaceState()
        assert state.language == "en"
        assert state.remember is True
        assert state.snapshot is None
        assert state.dirty is False

    def test_touch_updates_timestamp(self):
        state = WorkspaceState(updated_at="2000-01-01T00:00:00+00:00")
        state.touch()
        assert state.updated_at != "2000-01-01T00:00:00+00:00"
