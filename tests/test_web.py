"""
Tests for the web app — public page, admin panel and JSON API.
"""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from flask.testing import FlaskClient

from src.core.models.catalog import Catalog
from src.ui.web.server import SESSION_KEY, create_app


@pytest.fixture()
def app(workspace: Path, sample_catalog: Catalog):  # type: ignore[no-untyped-def]
    """App over a local (not connected) workspace holding the sample catalog."""
    app = create_app(config_path=workspace)
    app.config["TESTING"] = True
    ctx = app.extensions[SESSION_KEY]
    ctx.store.load(sample_catalog.model_copy(deep=True))
    yield app
    ctx.close()


@pytest.fixture()
def client(app) -> FlaskClient:  # type: ignore[no-untyped-def]
    return app.test_client()


def _tool_json(name: str = "Claude", **kw) -> dict:
    data = {
        "name": name,
        "descriptionEn": "Helpful assistant",
        "url": "https://claude.ai",
        "pricing": "freemium",
    }
    data.update(kw)
    return data


class TestAppFactory:
    def test_creates_app(self, app):
        assert app.config["WORKSPACE_ROOT"]
        assert SESSION_KEY in app.extensions

    def test_startup_load_without_remote(self, workspace: Path):
        app = create_app(config_path=workspace)
        ctx = app.extensions[SESSION_KEY]
        assert ctx.store.catalog.total == 0
        assert ctx.audit.read_recent(1)[0].operation == "load"
        ctx.close()


class TestPublicPage:
    def test_index_english(self, client: FlaskClient):
        resp = client.get("/")
        assert resp.status_code == 200
        html = resp.data.decode("utf-8")
        assert 'dir="ltr"' in html
        assert "ChatGPT" in html
        assert "Online Tools" in html
        assert "Free + Paid" in html

    def test_index_arabic(self, client: FlaskClient):
        html = client.get("/?lang=ar").data.decode("utf-8")
        assert 'dir="rtl"' in html
        assert "أدوات أونلاين" in html
        assert "مساعد ذكاء اصطناعي للمحادثة" in html

    def test_language_is_remembered(self, client: FlaskClient, app):
        client.get("/?lang=ar")
        assert app.extensions[SESSION_KEY].language == "ar"
        assert 'dir="rtl"' in client.get("/").data.decode("utf-8")

    def test_search(self, client: FlaskClient):
        html = client.get("/?q=chat").data.decode("utf-8")
        assert "ChatGPT" in html
        assert "Midjourney" not in html

    def test_search_no_match(self, client: FlaskClient):
        html = client.get("/?q=zzz").data.decode("utf-8")
        assert "No tools found matching" in html

    def test_category_filter(self, client: FlaskClient):
        html = client.get("/?category=image").data.decode("utf-8")
        assert "Midjourney" in html
        assert "ChatGPT" not in html

    def test_single_group(self, client: FlaskClient):
        html = client.get("/?group=desktop").data.decode("utf-8")
        assert "LM Studio" in html
        assert "ChatGPT" not in html

    def test_catalog_document(self, client: FlaskClient):
        resp = client.get("/data/tools.json")
        assert resp.status_code == 200
        assert set(resp.get_json()) == {"online", "desktop", "mobile", "extensions"}


class TestCatalogAPI:
    def test_status(self, client: FlaskClient):
        data = client.get("/api/status").get_json()
        assert data["connected"] is False
        assert data["counts"]["total"] == 4

    def test_catalog(self, client: FlaskClient):
        data = client.get("/api/catalog").get_json()
        assert data["counts"]["online"] == 2
        assert data["catalog"]["online"][0]["descriptionEn"] == "Conversational AI assistant"
        assert data["dirty"] is False

    def test_group_cards(self, client: FlaskClient):
        data = client.get("/api/catalog/online?lang=ar&q=chat").get_json()
        assert [c["name"] for c in data["cards"]] == ["ChatGPT"]
        assert data["cards"][0]["pricing_label"] == "مجاني + مدفوع"

    def test_unknown_group(self, client: FlaskClient):
        resp = client.get("/api/catalog/games")
        assert resp.status_code == 404
        assert "error" in resp.get_json()

    def test_add(self, client: FlaskClient, app):
        resp = client.post("/api/catalog/extensions", json=_tool_json())
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["message"] == "Add new tool: Claude"
        assert data["group"] == "extensions"
        assert app.extensions[SESSION_KEY].store.dirty

    def test_add_invalid(self, client: FlaskClient):
        resp = client.post("/api/catalog/online", json={"name": "X"})
        assert resp.status_code == 400
        assert "url" in resp.get_json()["field_errors"]

    def test_update(self, client: FlaskClient, app):
        body = _tool_json("ChatGPT Plus", url="https://chat.openai.com")
        resp = client.put("/api/catalog/online/chatgpt", json=body)
        assert resp.status_code == 200
        assert resp.get_json()["tool"]["id"] == "chatgpt"
        assert app.extensions[SESSION_KEY].store.find("chatgpt")[1].name == "ChatGPT Plus"

    def test_update_moves(self, client: FlaskClient, app):
        body = _tool_json("Midjourney", url="https://midjourney.com", group="desktop")
        assert client.put("/api/catalog/online/midjourney", json=body).status_code == 200
        assert app.extensions[SESSION_KEY].store.find("midjourney")[0] == "desktop"

    def test_update_missing(self, client: FlaskClient):
        assert client.put("/api/catalog/online/nope", json=_tool_json()).status_code == 404

    def test_delete_is_two_step(self, client: FlaskClient, app):
        first = client.delete("/api/catalog/online/chatgpt")
        assert first.status_code == 409
        assert first.get_json()["name"] == "ChatGPT"
        assert app.extensions[SESSION_KEY].store.catalog.total == 4

        second = client.delete("/api/catalog/online/chatgpt?confirm=1")
        assert second.status_code == 200
        assert second.get_json()["message"] == "Delete tool: ChatGPT"
        assert app.extensions[SESSION_KEY].store.catalog.total == 3

    def test_delete_missing(self, client: FlaskClient):
        assert client.delete("/api/catalog/online/nope?confirm=1").status_code == 404

    def test_import_requires_confirm(self, client: FlaskClient):
        resp = client.post("/api/catalog/import", json={"online": [], "desktop": [], "mobile": [], "extensions": []})
        assert resp.status_code == 409

    def test_import(self, client: FlaskClient, app):
        doc = {"online": [_tool_json()], "desktop": [], "mobile": [], "extensions": []}
        resp = client.post("/api/catalog/import?confirm=1", json=doc)
        assert resp.status_code == 200
        assert app.extensions[SESSION_KEY].store.catalog.total == 1

    def test_import_invalid(self, client: FlaskClient, app):
        resp = client.post("/api/catalog/import?confirm=1", json={"online": []})
        assert resp.status_code == 400
        assert app.extensions[SESSION_KEY].store.catalog.total == 4

    def test_export(self, client: FlaskClient):
        resp = client.get("/api/catalog/export")
        assert resp.status_code == 200
        assert "ai-tools-data-" in resp.headers["Content-Disposition"]
        assert json.loads(resp.data)["online"][0]["name"] == "ChatGPT"


class TestRemoteAPI:
    def test_remote_not_configured(self, client: FlaskClient):
        data = client.get("/api/remote").get_json()
        assert data["remote"]["configured"] is False

    def test_configure_sync_and_conflict(self, client: FlaskClient, app, fake_github, sample_catalog):
        fake_github.put_catalog("octo", "ai-tools-hub", sample_catalog)
        resp = client.post("/api/remote", json={
            "owner": "octo", "repo": "ai-tools-hub", "token": "ghp_testtoken123",
        })
        assert resp.status_code == 200
        data = resp.get_json()
        assert "ghp_testtoken123" not in json.dumps(data)
        assert data["loaded"]["source"] == "remote"

        client.post("/api/catalog/online", json=_tool_json())
        synced = client.post("/api/sync", json={})
        assert synced.status_code == 200
        assert synced.get_json()["message"] == "Saved to GitHub successfully"

        fake_github.put_catalog("octo", "ai-tools-hub", Catalog.empty())  # someone else wrote
        client.post("/api/catalog/online", json=_tool_json("Another"))
        conflict = client.post("/api/sync", json={})
        assert conflict.status_code == 409
        assert conflict.get_json()["conflict"] is True

        forced = client.post("/api/sync", json={"force": True})
        assert forced.status_code == 200

    def test_configure_missing_fields(self, client: FlaskClient):
        assert client.post("/api/remote", json={"owner": "octo"}).status_code == 400

    def test_pull_refuses_dirty(self, client: FlaskClient, fake_github, sample_catalog):
        fake_github.put_catalog("octo", "ai-tools-hub", sample_catalog)
        client.post("/api/remote", json={"owner": "octo", "repo": "ai-tools-hub", "token": "ghp_x", "load": False})
        client.post("/api/catalog/online", json=_tool_json())
        assert client.post("/api/pull", json={}).status_code == 400
        assert client.post("/api/pull", json={"force": True}).status_code == 200

    def test_detect(self, client: FlaskClient, app, fake_github):
        fake_github.add_repo("ai-tools-hub")
        resp = client.post("/api/remote/detect", json={"token": "ghp_abc"})
        assert resp.status_code == 200
        assert resp.get_json()["guess"]["reason"] == "name"
        assert not app.extensions[SESSION_KEY].connected

    def test_disconnect(self, client: FlaskClient, fake_github):
        client.post("/api/remote", json={"owner": "octo", "repo": "r", "token": "ghp_x", "load": False})
        data = client.delete("/api/remote").get_json()
        assert data["remote"]["configured"] is False


class TestAdminPanel:
    def test_panel(self, client: FlaskClient):
        resp = client.get("/admin/")
        assert resp.status_code == 200
        html = resp.data.decode("utf-8")
        assert "Admin Panel" in html
        assert "ChatGPT" in html
        assert "Not Connected" in html

    def test_panel_arabic(self, client: FlaskClient):
        html = client.get("/admin/?lang=ar").data.decode("utf-8")
        assert "لوحة التحكم" in html
        assert 'dir="rtl"' in html

    def test_edit_prefills_form(self, client: FlaskClient):
        html = client.get("/admin/?edit=chatgpt").data.decode("utf-8")
        assert 'value="https://chat.openai.com"' in html
        assert "/admin/tools/online/chatgpt" in html

    def test_add_form(self, client: FlaskClient, app):
        resp = client.post("/admin/tools", data={
            "name": "Claude",
            "url": "https://claude.ai",
            "description_en": "Assistant",
            "pricing": "free",
            "group": "desktop",
            "platforms": ["windows", "mac"],
        })
        assert resp.status_code == 302
        group, record = app.extensions[SESSION_KEY].store.find(
            app.extensions[SESSION_KEY].store.get("desktop")[-1].id
        )
        assert group == "desktop"
        assert record.platforms == ["windows", "mac"]

    def test_add_form_errors_rerender(self, client: FlaskClient):
        resp = client.post("/admin/tools", data={"name": "Claude", "pricing": "free"})
        assert resp.status_code == 400
        html = resp.data.decode("utf-8")
        assert "URL is required" in html
        assert 'value="Claude"' in html

    def test_update_form(self, client: FlaskClient, app):
        resp = client.post("/admin/tools/online/chatgpt", data={
            "name": "ChatGPT",
            "url": "https://chat.openai.com",
            "description_en": "Updated",
            "pricing": "paid",
            "group": "online",
        })
        assert resp.status_code == 302
        assert app.extensions[SESSION_KEY].store.find("chatgpt")[1].pricing == "paid"

    def test_delete_confirmation_page(self, client: FlaskClient):
        html = client.get("/admin/?delete=chatgpt").data.decode("utf-8")
        assert "Are you sure you want to delete" in html
        assert "ChatGPT" in html

    def test_delete_without_confirm_does_nothing(self, client: FlaskClient, app):
        resp = client.post("/admin/tools/online/chatgpt/delete")
        assert resp.status_code == 302
        assert app.extensions[SESSION_KEY].store.catalog.total == 4

    def test_delete_confirmed(self, client: FlaskClient, app):
        resp = client.post("/admin/tools/online/chatgpt/delete", data={"confirm": "1"})
        assert resp.status_code == 302
        assert app.extensions[SESSION_KEY].store.catalog.total == 3

    def test_flash_after_redirect(self, client: FlaskClient):
        resp = client.post("/admin/tools/online/chatgpt/delete", data={"confirm": "1"}, follow_redirects=True)
        assert "Tool deleted successfully" in resp.data.decode("utf-8")

    def test_import_upload(self, client: FlaskClient, app):
        doc = json.dumps({"online": [_tool_json()], "desktop": [], "mobile": [], "extensions": []})
        resp = client.post("/admin/import", data={
            "file": (io.BytesIO(doc.encode("utf-8")), "tools.json"),
            "confirm": "1",
        }, content_type="multipart/form-data")
        assert resp.status_code == 302
        assert app.extensions[SESSION_KEY].store.catalog.total == 1

    def test_import_not_confirmed(self, client: FlaskClient, app):
        doc = json.dumps({"online": [], "desktop": [], "mobile": [], "extensions": []})
        client.post("/admin/import", data={
            "file": (io.BytesIO(doc.encode("utf-8")), "tools.json"),
        }, content_type="multipart/form-data")
        assert app.extensions[SESSION_KEY].store.catalog.total == 4

    def test_import_upload_not_utf8(self, client: FlaskClient, app):
        raw = (
            b'{"online": [{"name": "Caf\xe9", "descriptionEn": "x", "url": "https://cafe.ai"}], '
            b'"desktop": [], "mobile": [], "extensions": []}'
        )
        resp = client.post("/admin/import", data={
            "file": (io.BytesIO(raw), "tools.json"),
            "confirm": "1",
        }, content_type="multipart/form-data", follow_redirects=True)
        assert "not valid UTF-8" in resp.data.decode("utf-8")
        store = app.extensions[SESSION_KEY].store
        assert store.catalog.total == 4
        assert not store.dirty

    def test_export_download(self, client: FlaskClient):
        resp = client.get("/admin/export")
        assert resp.headers["Content-Disposition"].startswith("attachment;")

    def test_sync_without_remote(self, client: FlaskClient):
        resp = client.post("/admin/sync", follow_redirects=True)
        assert "Saved locally (GitHub not configured)" in resp.data.decode("utf-8")

    def test_detect_prefills_without_saving(self, client: FlaskClient, app, fake_github):
        fake_github.add_repo("ai-tools-hub")
        resp = client.post("/admin/remote/detect", data={"token": "ghp_abc"})
        assert resp.status_code == 200
        html = resp.data.decode("utf-8")
        assert 'value="ai-tools-hub"' in html
        assert not app.extensions[SESSION_KEY].connected
