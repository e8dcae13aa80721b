"""
Shared test fixtures and configuration.

``fake_github`` stands in for the GitHub REST API: it replaces
``urllib.request.urlopen`` and keeps repositories and files in memory.
"""

from __future__ import annotations

import base64
import email.message
import io
import json
import re
import textwrap
import urllib.error
import urllib.parse
from pathlib import Path

import pytest

from src.core.context import SessionContext
from src.core.models.catalog import Catalog
from src.core.models.remote import RemoteConfig

_CONTENTS_RE = re.compile(r"^/repos/([^/]+)/([^/]+)/contents/(.+)$")


# ── Fake GitHub ─────────────────────────────────────────────────────


class _Response:
    def __init__(self, payload: object):
        self._body = json.dumps(payload).encode("utf-8")

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> _Response:
        return self

    def __exit__(self, *exc: object) -> None:
        return None


class FakeGitHub:
    """In-memory GitHub: one user, a list of repositories, some files."""

    def __init__(self, login: str = "octo"):
        self.login = login
        self.repos: list[dict] = []
        self.files: dict[tuple[str, str, str], dict] = {}
        self.requests: list[dict] = []
        self.fail_with: int | None = None
        self._counter = 0

    # ── Setup helpers ──

    def add_repo(self, name: str, owner: str | None = None) -> None:
        self.repos.append({"name": name, "owner": {"login": owner or self.login}})

    def put_file(self, owner: str, repo: str, path: str, text: str) -> str:
        sha = self._next_sha()
        self.files[(owner, repo, path)] = {"text": text, "sha": sha}
        return sha

    def put_catalog(self, owner: str, repo: str, catalog: Catalog, path: str = "data/tools.json") -> str:
        return self.put_file(owner, repo, path, catalog.to_json())

    def document(self, owner: str, repo: str, path: str = "data/tools.json") -> dict:
        return json.loads(self.files[(owner, repo, path)]["text"])

    def sha(self, owner: str, repo: str, path: str = "data/tools.json") -> str:
        return self.files[(owner, repo, path)]["sha"]

    def _next_sha(self) -> str:
        self._counter += 1
        return f"{self._counter:040x}"

    # ── urlopen replacement ──

    def _error(self, url: str, code: int, message: str) -> urllib.error.HTTPError:
        body = io.BytesIO(json.dumps({"message": message}).encode("utf-8"))
        return urllib.error.HTTPError(url, code, message, email.message.Message(), body)

    def __call__(self, req, timeout=None):  # type: ignore[no-untyped-def]
        parsed = urllib.parse.urlparse(req.full_url)
        method = req.get_method()
        body = json.loads(req.data.decode("utf-8")) if req.data else None
        path = urllib.parse.unquote(parsed.path)
        self.requests.append({
            "method": method,
            "path": path,
            "query": parsed.query,
            "body": body,
            "auth": req.get_header("Authorization"),
        })

        if self.fail_with:
            raise self._error(req.full_url, self.fail_with, "Simulated failure")

        if path == "/user":
            return _Response({"login": self.login})
        if path == f"/users/{self.login}/repos":
            return _Response(self.repos)

        match = _CONTENTS_RE.match(path)
        if not match:
            raise self._error(req.full_url, 404, "Not Found")
        key = match.groups()
        stored = self.files.get(key)

        if method == "GET":
            if stored is None:
                raise self._error(req.full_url, 404, "Not Found")
            encoded = base64.b64encode(stored["text"].encode("utf-8")).decode("ascii")
            # GitHub wraps the Base64 body every 60 characters
            wrapped = "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60))
            return _Response({"content": wrapped, "encoding": "base64", "sha": stored["sha"]})

        if method == "PUT":
            assert body is not None
            if stored is not None and "sha" not in body:
                raise self._error(req.full_url, 422, '"sha" wasn\'t supplied.')
            if stored is not None and body["sha"] != stored["sha"]:
                raise self._error(req.full_url, 409, "does not match")
            text = base64.b64decode(body["content"]).decode("utf-8")
            sha = self.put_file(*key, text=text)
            return _Response({"content": {"sha": sha, "path": key[2]}, "commit": {"message": body["message"]}})

        raise self._error(req.full_url, 405, "Method not allowed")


# ── Fixtures ────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _no_env_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's GITHUB_TOKEN out of the tests."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


@pytest.fixture
def fake_github(monkeypatch: pytest.MonkeyPatch) -> FakeGitHub:
    fake = FakeGitHub()
    monkeypatch.setattr("urllib.request.urlopen", fake)
    return fake


@pytest.fixture
def sample_catalog() -> Catalog:
    """A small catalog covering all four groups."""
    return Catalog.from_document({
        "online": [
            {
                "id": "chatgpt",
                "name": "ChatGPT",
                "descriptionEn": "Conversational AI assistant",
                "descriptionAr": "مساعد ذكاء اصطناعي للمحادثة",
                "url": "https://chat.openai.com",
                "category": "chat",
                "pricing": "freemium",
                "badge": "Popular",
                "iconClass": "fas fa-comments",
                "featuresEn": ["Chat", "Code"],
                "featuresAr": ["محادثة"],
            },
            {
                "id": "midjourney",
                "name": "Midjourney",
                "descriptionEn": "Image generation from text prompts",
                "url": "https://midjourney.com",
                "category": "image",
                "pricing": "paid",
                "featuresEn": ["Images"],
            },
        ],
        "desktop": [
            {
                "id": "lmstudio",
                "name": "LM Studio",
                "descriptionEn": "Run local language models",
                "url": "https://lmstudio.ai",
                "pricing": "free",
                "platforms": ["windows", "mac", "linux"],
            },
        ],
        "mobile": [
            {
                "id": "perplexity",
                "name": "Perplexity",
                "descriptionAr": "محرك بحث بالذكاء الاصطناعي",
                "url": "https://perplexity.ai",
                "pricing": "free",
                "platforms": ["android", "ios"],
            },
        ],
        "extensions": [],
    })


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A workspace directory; returns the path to its directory.yml."""
    config = tmp_path / "directory.yml"
    config.write_text(textwrap.dedent("""\
        name: test-directory
        title: Test Tools
        title_ar: أدوات الاختبار
        catalog_path: data/tools.json
        branch: main
    """), encoding="utf-8")
    return config


@pytest.fixture
def session(workspace: Path) -> SessionContext:
    ctx = SessionContext.open(config_path=workspace)
    yield ctx
    ctx.close()


@pytest.fixture
def connected_session(
    session: SessionContext,
    fake_github: FakeGitHub,
    sample_catalog: Catalog,
) -> SessionContext:
    """Session pointed at octo/ai-tools-hub, which holds ``sample_catalog``."""
    fake_github.add_repo("ai-tools-hub")
    fake_github.put_catalog("octo", "ai-tools-hub", sample_catalog)
    session.set_remote(RemoteConfig(owner="octo", repo="ai-tools-hub", token="ghp_testtoken123"))
    return session
