"""
Minimal Artifactory REST client

Covers the calls the harness needs: repositories, groups, permission
targets, artifact upload and storage info. Every call authenticates with
HTTP Basic credentials; errors are mapped onto the harness exception types
and never retried.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter

from ldap_sync_harness.exceptions import (
    RepositoryApiError,
    RepositoryAuthorizationError,
    RepositoryNotFoundError,
)
from ldap_sync_harness.utils.logger import get_logger

from .models import Group, LocalRepository, PermissionTarget

logger = get_logger(__name__)


def _segment(value: str) -> str:
    return quote(value, safe="")


def _path(value: str) -> str:
    return quote(value.strip("/"), safe="/")


class ArtifactoryClient:
    """Artifactory REST client bound to one set of credentials."""

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.timeout = timeout
        self._session = session or requests.Session()
        if session is None:
            adapter = HTTPAdapter(pool_connections=2, pool_maxsize=4)
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)
        self._session.auth = (username, password)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> ArtifactoryClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}/{path.lstrip('/')}"
        kwargs.setdefault("timeout", self.timeout)
        resp = self._session.request(method, url, **kwargs)
        logger.debug(
            "Artifactory request completed",
            event="harness.client.request",
            method=method,
            url=url,
            status=resp.status_code,
            user=self.username,
        )
        if resp.status_code >= 400:
            body = resp.text[:2000]
            message = f"{method} {url} failed with HTTP {resp.status_code}"
            if resp.status_code in (401, 403):
                raise RepositoryAuthorizationError(message, resp.status_code, body)
            if resp.status_code == 404:
                raise RepositoryNotFoundError(message, resp.status_code, body)
            raise RepositoryApiError(message, resp.status_code, body)
        return resp

    # Repositories
    def create_repository(self, repository: LocalRepository) -> None:
        self._request("PUT", f"api/repositories/{_segment(repository.key)}", json=repository.to_payload())

    def delete_repository(self, key: str) -> None:
        self._request("DELETE", f"api/repositories/{_segment(key)}")

    # Groups
    def create_or_update_group(self, group: Group) -> None:
        self._request("PUT", f"api/security/groups/{_segment(group.name)}", json=group.to_payload())

    def delete_group(self, name: str) -> None:
        self._request("DELETE", f"api/security/groups/{_segment(name)}")

    # Permission targets
    def create_or_replace_permission_target(self, target: PermissionTarget) -> None:
        self._request("PUT", f"api/security/permissions/{_segment(target.name)}", json=target.to_payload())

    def get_permission_target(self, name: str) -> dict[str, Any]:
        return self._request("GET", f"api/security/permissions/{_segment(name)}").json()

    def list_permission_targets(self) -> list[dict[str, Any]]:
        return self._request("GET", "api/security/permissions").json()

    def delete_permission_target(self, name: str) -> None:
        self._request("DELETE", f"api/security/permissions/{_segment(name)}")

    # Artifacts
    def upload(self, repo_key: str, path: str, data: bytes) -> dict[str, Any]:
        resp = self._request(
            "PUT",
            f"{_segment(repo_key)}/{_path(path)}",
            data=data,
            headers={"Content-Type": "application/octet-stream"},
        )
        return resp.json() if resp.content else {}

    def file_info(self, repo_key: str, path: str) -> dict[str, Any]:
        return self._request("GET", f"api/storage/{_segment(repo_key)}/{_path(path)}").json()
