"""Async client for the Firebase Rules API (v1).

Wraps ruleset and release calls: listing, fetching, creating,
releasing, testing and deleting rulesets.
"""

from __future__ import annotations

import logging
import urllib.parse
from datetime import datetime, timezone
from typing import Any, Iterable

import httpx

from . import defaults as D
from .config import RulesConfig
from .errors import RulesError
from .models import (
    PageOfReleases,
    PageOfRulesets,
    Release,
    RulesetFile,
    release_name,
)
from .responses import classify, raise_for_result

logger = logging.getLogger(__name__)

API_VERSION = D.API_VERSION
_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def newest_first(releases: Iterable[Release]) -> list[Release]:
    """Sort releases by update time, newest first.

    Ties keep their original order; releases without an update time come first.
    """
    return sorted(
        releases,
        key=lambda r: (r.update_time is None, r.update_time or _EPOCH),
        reverse=True,
    )


def _files_payload(files: Iterable[RulesetFile | dict[str, Any]]) -> list[dict[str, Any]]:
    return [f.to_dict() if isinstance(f, RulesetFile) else dict(f) for f in files]


class RulesClient:
    """HTTP client for the rules service.

    All methods are async and raise RulesError on failure, except
    test_ruleset which hands back the raw response.
    """

    def __init__(
        self,
        origin: str = D.DEFAULT_ORIGIN,
        token: str = "",
        timeout: float = D.DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers: dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self.origin = origin.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.origin,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: RulesConfig) -> RulesClient:
        return cls(origin=config.origin, token=config.token, timeout=config.timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> RulesClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # --- Releases ---

    async def get_latest_ruleset_name(self, project_id: str, service: str) -> str | None:
        """Get the ruleset currently released for a service.

        GET /v1/projects/{projectId}/releases

        Args:
            project_id: Project to look in.
            service: Service name, e.g. ``cloud.firestore`` or ``firebase.storage``.

        Returns:
            The ruleset name of the most recently updated release whose name
            starts with ``projects/{projectId}/releases/{service}``, or None.
        """
        body = await self._request("GET", f"/{API_VERSION}/projects/{project_id}/releases")
        releases = [Release.from_api(r) for r in body.get("releases") or []]
        if not releases:
            # Likely the service has never been used on this project.
            return None

        prefix = release_name(project_id, service)
        for release in newest_first(releases):
            if release.name.startswith(prefix):
                return release.ruleset_name
        return None

    async def list_releases(self, project_id: str, page_token: str | None = None) -> PageOfReleases:
        """List one page of releases.

        GET /v1/projects/{projectId}/releases?pageToken=...
        """
        params = {"pageToken": page_token} if page_token else None
        body = await self._request(
            "GET", f"/{API_VERSION}/projects/{project_id}/releases", params=params
        )
        return PageOfReleases.from_api(body)

    async def list_all_releases(self, project_id: str) -> list[Release]:
        """List every release, following page tokens until exhausted."""
        releases: list[Release] = []
        page_token: str | None = None
        while True:
            page = await self.list_releases(project_id, page_token)
            releases.extend(page.releases)
            if not page.has_more:
                return releases
            page_token = page.next_page_token

    async def create_release(self, project_id: str, ruleset_name: str, release: str) -> str:
        """Create a named release pointing at a ruleset.

        POST /v1/projects/{projectId}/releases

        Fails if a release with that name already exists.

        Returns:
            Name of the created release.
        """
        payload = {
            "name": release_name(project_id, release),
            "rulesetName": ruleset_name,
        }
        body = await self._request(
            "POST", f"/{API_VERSION}/projects/{project_id}/releases", json=payload
        )
        logger.debug("[rules] created release %s", body.get("name"))
        return body.get("name")

    async def update_release(self, project_id: str, ruleset_name: str, release: str) -> str:
        """Point an existing release at a different ruleset.

        PATCH /v1/projects/{projectId}/releases/{releaseName}

        Fails if the release does not exist.

        Returns:
            Name of the updated release.
        """
        payload = {
            "release": {
                "name": release_name(project_id, release),
                "rulesetName": ruleset_name,
            },
        }
        body = await self._request(
            "PATCH",
            f"/{API_VERSION}/projects/{project_id}/releases/{release}",
            json=payload,
        )
        logger.debug("[rules] updated release %s", body.get("name"))
        return body.get("name")

    async def update_or_create_release(
        self, project_id: str, ruleset_name: str, release: str
    ) -> str:
        """Update the release, falling back to creating it on any failure.

        The fallback does not look at why the update failed.
        """
        logger.debug("[rules] releasing %s with ruleset %s", release, ruleset_name)
        try:
            return await self.update_release(project_id, ruleset_name, release)
        except RulesError:
            logger.debug("[rules] ruleset update failed, attempting to create instead")
            return await self.create_release(project_id, ruleset_name, release)

    # --- Rulesets ---

    async def get_ruleset_content(self, name: str) -> list[RulesetFile]:
        """Fetch the source files of a ruleset.

        GET /v1/{rulesetName}
        """
        body = await self._request("GET", f"/{API_VERSION}/{name}")
        files = (body.get("source") or {}).get("files") or []
        return [RulesetFile.from_dict(f) for f in files]

    async def list_rulesets(self, project_id: str, page_token: str | None = None) -> PageOfRulesets:
        """List one page of rulesets.

        GET /v1/projects/{projectId}/rulesets?pageToken=...

        Pass the returned next_page_token back in to fetch the next page.
        """
        params = {"pageToken": page_token} if page_token else None
        body = await self._request(
            "GET", f"/{API_VERSION}/projects/{project_id}/rulesets", params=params
        )
        return PageOfRulesets.from_api(body)

    async def list_all_rulesets(self, project_id: str) -> list[dict[str, Any]]:
        """List every ruleset, following page tokens until exhausted."""
        rulesets: list[dict[str, Any]] = []
        page_token: str | None = None
        while True:
            page = await self.list_rulesets(project_id, page_token)
            rulesets.extend(page.rulesets)
            if not page.has_more:
                return rulesets
            page_token = page.next_page_token

    async def create_ruleset(
        self, project_id: str, files: Iterable[RulesetFile | dict[str, Any]]
    ) -> str:
        """Create a ruleset that can then be released.

        POST /v1/projects/{projectId}/rulesets

        Args:
            project_id: Project to create the ruleset in.
            files: Source files, as RulesetFile or ``{name, content}`` dicts.

        Returns:
            Service-assigned ruleset name.
        """
        payload = {"source": {"files": _files_payload(files)}}
        body = await self._request(
            "POST", f"/{API_VERSION}/projects/{project_id}/rulesets", json=payload
        )
        logger.debug("[rules] created ruleset %s", body.get("name"))
        return body.get("name")

    async def delete_ruleset(self, project_id: str, ruleset_id: str) -> None:
        """Delete a ruleset by id.

        DELETE /v1/projects/{projectId}/rulesets/{rulesetId}
        """
        await self._request(
            "DELETE", f"/{API_VERSION}/projects/{project_id}/rulesets/{ruleset_id}"
        )
        logger.debug("[rules] deleted ruleset %s", ruleset_id)

    async def test_ruleset(
        self, project_id: str, files: Iterable[RulesetFile | dict[str, Any]]
    ) -> httpx.Response:
        """Submit files for dry-run validation.

        POST /v1/projects/{projectId}:test

        Returns:
            The raw HTTP response. Its status is not checked; pass it to
            ``responses.classify`` to interpret it.
        """
        project = urllib.parse.quote(project_id, safe="")
        payload = {"source": {"files": _files_payload(files)}}
        return await self._send("POST", f"/{API_VERSION}/projects/{project}:test", json=payload)

    # --- Internal ---

    async def _request(
        self,
        method: str,
        url: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the parsed body of a 200 response.

        Raises:
            RulesError: On any non-200 response or connection failure.
        """
        response = await self._send(method, url, json=json, params=params)
        body = raise_for_result(classify(response))
        if not isinstance(body, dict):
            return {}
        return body

    async def _send(
        self,
        method: str,
        url: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            return await self._client.request(method, url, json=json, params=params)
        except httpx.ConnectError as e:
            raise RulesError(f"Cannot connect to rules service: {e}") from e
        except httpx.TimeoutException as e:
            raise RulesError(f"Request timed out: {method} {url}") from e
        except httpx.HTTPError as e:
            raise RulesError(f"Request failed: {method} {url}: {e}") from e
