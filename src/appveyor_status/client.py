"""AppVeyor API client using httpx."""

from __future__ import annotations

import json
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from .config import AppVeyorConfig
from .exceptions import (
    AppVeyorApiError,
    AppVeyorAuthError,
    AppVeyorNotFoundError,
    TransportError,
)
from .models.projects import Project, ProjectBuild
from .models.repository import BadgeParams

M = TypeVar("M", bound=BaseModel)

SVG_TYPE = "image/svg+xml"

# Badge labels matching the build status enumeration, so badges can be parsed
BADGE_TEXT_PARAMS = {
    "failingText": "failed",
    "passingText": "success",
    "pendingText": "queued",
    "svg": "true",
}


class AppVeyorClient:
    """Async HTTP client for the AppVeyor REST API.

    An ``http_client`` supplied by the caller is shared, not owned: ``close()``
    only closes the connection pool this client created itself.
    """

    def __init__(
        self,
        config: AppVeyorConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or AppVeyorConfig.from_env()
        self.config.validate()
        self._headers: dict[str, str] = {}
        if self.config.token:
            self._headers["Authorization"] = f"Bearer {self.config.token}"
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=self.config.timeout,
            verify=self.config.ssl_verify,
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AppVeyorClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ── HTTP helpers ──────────────────────────────────────────────

    @staticmethod
    def _encode(segment: str) -> str:
        return quote(segment, safe="")

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        accept: str = "application/json",
        prefix: str = "",
    ) -> httpx.Response:
        """Make an API request and return the successful response."""
        headers = {"Accept": accept, **self._headers}
        url = f"{self.config.api_url}{path}"

        try:
            resp = await self._client.request(method, url, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"{prefix}{e}", cause=e) from e

        if resp.status_code in (401, 403):
            raise AppVeyorAuthError(resp.status_code, resp.text, prefix)
        if resp.status_code == 404:
            raise AppVeyorNotFoundError(resp.text, prefix)
        if not resp.is_success:
            raise AppVeyorApiError(resp.status_code, resp.reason_phrase or "", resp.text, prefix)

        return resp

    async def _get_json(
        self, path: str, params: dict[str, Any] | None = None, *, prefix: str = ""
    ) -> Any:
        resp = await self._request("GET", path, params=params, prefix=prefix)

        content_type = resp.headers.get("content-type", "")
        if "text/html" in content_type:
            msg = "Unexpected HTML response, check URL and authentication"
            raise AppVeyorApiError(resp.status_code, msg, resp.text[:500], prefix)

        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise AppVeyorApiError(
                resp.status_code,
                f"Unable to parse JSON with Content-Type {content_type or '(none)'}: {e}",
                resp.text[:500],
                prefix,
            ) from e

    async def _get_svg(
        self, path: str, params: dict[str, Any] | None = None, *, prefix: str = ""
    ) -> str:
        resp = await self._request(
            "GET",
            path,
            params={**BADGE_TEXT_PARAMS, **(params or {})},
            accept=SVG_TYPE,
            prefix=prefix,
        )

        content_type = (resp.headers.get("content-type") or "(none)").lower()
        if not content_type.startswith(SVG_TYPE):
            raise AppVeyorApiError(
                resp.status_code, f"Expected {SVG_TYPE} got {content_type}", resp.text[:500], prefix
            )
        return resp.text

    @staticmethod
    def _parse(model: type[M], data: Any, prefix: str) -> M:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise TransportError(f"{prefix}Unexpected response: {e}", cause=e) from e

    # ── Projects ──────────────────────────────────────────────────

    async def list_projects(self) -> list[Project]:
        prefix = "Unable to get projects: "
        data = await self._get_json("/projects", prefix=prefix)
        if not isinstance(data, list):
            msg = f"{prefix}Expected a list of projects, got {type(data).__name__}"
            raise TransportError(msg)
        return [self._parse(Project, item, prefix) for item in data]

    async def get_project_last_build(
        self, account_name: str, slug: str, branch: str | None = None
    ) -> ProjectBuild:
        prefix = "Unable to get last project build: "
        path = f"/projects/{self._encode(account_name)}/{self._encode(slug)}"
        if branch:
            path += f"/branch/{self._encode(branch)}"
        data = await self._get_json(path, prefix=prefix)
        return self._parse(ProjectBuild, data, prefix)

    # ── Status badges ─────────────────────────────────────────────

    async def get_status_badge(self, status_badge_id: str, branch: str | None = None) -> str:
        path = f"/projects/status/{self._encode(status_badge_id)}"
        if branch:
            path += f"/branch/{self._encode(branch)}"
        return await self._get_svg(path, prefix="Unable to get project status badge: ")

    async def get_public_status_badge(
        self, badge: BadgeParams, branch: str | None = None
    ) -> str:
        path = (
            f"/projects/status/{self._encode(badge.provider)}"
            f"/{self._encode(badge.account_name)}/{self._encode(badge.slug)}"
        )
        params = {"branch": branch} if branch else None
        return await self._get_svg(path, params, prefix="Unable to get project status badge: ")
