"""
GitHub Contents gateway — read and write the catalog file in a repository.

Talks to the REST API directly over ``urllib.request``:

    GET  /repos/{owner}/{repo}/contents/{path}?ref={branch}  → {content, sha}
    PUT  /repos/{owner}/{repo}/contents/{path}               ← {message, content, branch, sha?}
    GET  /user                                               → {login}
    GET  /users/{login}/repos?sort=updated                   → [{name, owner.login}]

The file body travels Base64-encoded. We encode from UTF-8 bytes so
Arabic text survives the round trip.

The ``sha`` returned with every read is the version token: a write must
carry the sha of the revision it replaces, and GitHub rejects it (409/422)
when the file moved on in the meantime. There is no retry here; callers
decide whether to pull again or force.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any

from src import __version__
from src.core.models.catalog import Catalog, InvalidStructure
from src.core.models.directory import DEFAULT_API_URL, DEFAULT_REPO_NAME
from src.core.models.remote import RemoteConfig, RepositoryGuess

logger = logging.getLogger(__name__)

_USER_AGENT = f"toolsdir/{__version__}"


# ═══════════════════════════════════════════════════════════════════
#  Errors
# ═══════════════════════════════════════════════════════════════════


class GatewayError(Exception):
    """Base class for remote catalog failures."""


class NetworkOrAuthError(GatewayError):
    """Non-success HTTP response or transport failure.

    Covers bad credentials, missing repositories and permission errors.
    ``status`` is the HTTP status code, or None for transport failures.
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class ConflictError(NetworkOrAuthError):
    """Write rejected because the version token is stale or missing."""


class NotFound(NetworkOrAuthError):
    """Nothing to work with (e.g. an account without repositories)."""


class DecodeError(GatewayError):
    """Malformed Base64, UTF-8 or JSON in a response."""


@dataclass
class FetchResult:
    """Catalog read from the remote, with the sha it was read at."""

    catalog: Catalog
    version_token: str | None = None


# ═══════════════════════════════════════════════════════════════════
#  Encoding
# ═══════════════════════════════════════════════════════════════════


def encode_catalog(catalog: Catalog) -> str:
    """Pretty-printed JSON → UTF-8 → Base64 text."""
    text = catalog.to_json()
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_catalog(content: str) -> Catalog:
    """Inverse of :func:`encode_catalog`.

    Raises:
        DecodeError: for bad Base64, UTF-8 or JSON.
        InvalidStructure: when the JSON is not a four-group catalog.
    """
    try:
        raw = base64.b64decode("".join(content.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid Base64 content: {e}") from e

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Catalog is not valid UTF-8: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Catalog is not valid JSON: {e}") from e

    return Catalog.from_document(data)


# ═══════════════════════════════════════════════════════════════════
#  Gateway
# ═══════════════════════════════════════════════════════════════════


class GitHubContentsGateway:
    """Reads and writes one catalog file in one repository."""

    def __init__(
        self,
        remote: RemoteConfig,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 15.0,
    ):
        self.remote = remote
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    # ── HTTP ────────────────────────────────────────────────────────

    def _request(
        self,
        method: str,
        endpoint: str,
        body: dict | None = None,
        token: str | None = None,
    ) -> Any:
        """Issue one API call and return the parsed JSON response."""
        url = f"{self.api_url}{endpoint}"
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": _USER_AGENT,
        }
        bearer = token if token is not None else self.remote.token
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"

        data = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"

        req = urllib.request.Request(url, data=data, headers=headers, method=method)
        logger.debug("%s %s", method, url)

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                payload = resp.read()
        except urllib.error.HTTPError as e:
            raise _http_error(method, endpoint, e) from e
        except (urllib.error.URLError, OSError) as e:
            raise NetworkOrAuthError(f"{method} {endpoint} failed: {e}") from e

        if not payload:
            return {}
        try:
            return json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodeError(f"Unreadable response from {endpoint}: {e}") from e

    def _contents_endpoint(self, path: str, owner: str | None = None, repo: str | None = None) -> str:
        owner = owner or self.remote.owner
        repo = repo or self.remote.repo
        quoted = urllib.parse.quote(path.lstrip("/"), safe="/")
        return f"/repos/{owner}/{repo}/contents/{quoted}"

    # ── Read ────────────────────────────────────────────────────────

    def read_catalog(self, path: str | None = None) -> FetchResult:
        """Strict read.

        Raises:
            NetworkOrAuthError: any non-2xx response (404 included).
            DecodeError: the payload could not be decoded.
            InvalidStructure: the decoded JSON is not a catalog.
        """
        path = path or self.remote.path
        ref = urllib.parse.quote(self.remote.branch, safe="")
        data = self._request("GET", f"{self._contents_endpoint(path)}?ref={ref}")

        if not isinstance(data, dict) or "content" not in data:
            raise DecodeError(f"{path} is not a file")
        if data.get("encoding", "base64") != "base64":
            raise DecodeError(f"Unsupported content encoding '{data.get('encoding')}' for {path}")

        catalog = decode_catalog(data["content"] or "")
        logger.info("Fetched %s@%s (%d tools)", path, str(data.get("sha", ""))[:7], catalog.total)
        return FetchResult(catalog=catalog, version_token=data.get("sha"))

    def fetch_catalog(self, path: str | None = None) -> FetchResult:
        """Lenient read: any failure yields an empty catalog and no token.

        Missing file and transient errors look the same from here.
        """
        try:
            return self.read_catalog(path)
        except (GatewayError, InvalidStructure) as e:
            logger.warning("Could not fetch catalog from %s: %s", self.remote.slug, e)
            return FetchResult(catalog=Catalog.empty(), version_token=None)

    def current_version_token(self, path: str | None = None) -> str | None:
        """Sha of the file as it is now, or None when it does not exist."""
        path = path or self.remote.path
        ref = urllib.parse.quote(self.remote.branch, safe="")
        try:
            data = self._request("GET", f"{self._contents_endpoint(path)}?ref={ref}")
        except NetworkOrAuthError as e:
            if e.status == 404:
                return None
            raise
        return data.get("sha") if isinstance(data, dict) else None

    # ── Write ───────────────────────────────────────────────────────

    def write_catalog(
        self,
        catalog: Catalog,
        version_token: str | None,
        message: str,
        path: str | None = None,
    ) -> str:
        """Replace the catalog file and return the new version token.

        ``version_token`` is sent as ``sha`` when known and omitted for the
        first write of a new file.

        Raises:
            ConflictError: the remote holds a newer revision (stale sha),
                or the file exists and no sha was supplied.
            NetworkOrAuthError: credentials, permissions, transport.
        """
        path = path or self.remote.path
        body: dict[str, Any] = {
            "message": message,
            "content": encode_catalog(catalog),
            "branch": self.remote.branch,
        }
        if version_token:
            body["sha"] = version_token

        data = self._request("PUT", self._contents_endpoint(path), body=body)
        new_token = (data.get("content") or {}).get("sha") if isinstance(data, dict) else None
        if not new_token:
            raise DecodeError(f"Write to {path} returned no version token")

        logger.info("Wrote %s to %s (%s)", path, self.remote.slug, new_token[:7])
        return new_token

    # ── Repository detection ────────────────────────────────────────

    def detect_repository(
        self,
        token: str,
        default_repo: str = DEFAULT_REPO_NAME,
        path: str | None = None,
    ) -> RepositoryGuess:
        """Best-effort guess of which repository holds the catalog.

        Order: a repository named ``default_repo`` (case-insensitive), then
        the first repository (most recently updated first) that has the
        catalog file, then simply the most recently updated repository.
        The guess must be confirmed by the user before it is saved.

        Raises:
            NotFound: the account has no repositories.
            NetworkOrAuthError: the token was rejected.
        """
        path = path or self.remote.path
        user = self._request("GET", "/user", token=token)
        login = user.get("login", "") if isinstance(user, dict) else ""
        if not login:
            raise NetworkOrAuthError("Could not resolve the token's user")

        repos = self._request(
            "GET",
            f"/users/{urllib.parse.quote(login)}/repos?sort=updated&per_page=100",
            token=token,
        )
        if not isinstance(repos, list) or not repos:
            raise NotFound(f"No repositories found for {login}")

        candidates = [(_repo_owner(r, login), r.get("name", "")) for r in repos]
        names = [f"{owner}/{name}" for owner, name in candidates]

        for owner, name in candidates:
            if name.lower() == default_repo.lower():
                logger.info("Detected %s/%s by name", owner, name)
                return RepositoryGuess(owner=owner, repo=name, reason="name", candidates=names)

        for owner, name in candidates:
            if self._has_file(owner, name, path, token):
                logger.info("Detected %s/%s by catalog file", owner, name)
                return RepositoryGuess(owner=owner, repo=name, reason="probe", candidates=names)

        owner, name = candidates[0]
        logger.info("No match — falling back to most recent repository %s/%s", owner, name)
        return RepositoryGuess(owner=owner, repo=name, reason="fallback", candidates=names)

    def _has_file(self, owner: str, repo: str, path: str, token: str) -> bool:
        try:
            self._request("GET", self._contents_endpoint(path, owner, repo), token=token)
        except GatewayError as e:
            logger.debug("Probe %s/%s: %s", owner, repo, e)
            return False
        return True


def _repo_owner(repo: dict, default: str) -> str:
    owner = repo.get("owner")
    if isinstance(owner, dict) and owner.get("login"):
        return owner["login"]
    return default


def _http_error(method: str, endpoint: str, err: urllib.error.HTTPError) -> NetworkOrAuthError:
    """Map an HTTP error to the gateway taxonomy."""
    detail = ""
    try:
        body = json.loads(err.read().decode("utf-8"))
        detail = body.get("message", "") if isinstance(body, dict) else ""
    except Exception:
        detail = ""

    message = f"GitHub API error {err.code} on {method} {endpoint}"
    if detail:
        message += f": {detail}"

    if method == "PUT" and err.code in (409, 422):
        return ConflictError(message, status=err.code)
    return NetworkOrAuthError(message, status=err.code)
