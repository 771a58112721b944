"""Configuration transport for ``/api/system/configuration``.

The server exposes its global configuration as a single XML document that can
only be read and replaced as a whole.
"""

from __future__ import annotations

import base64

import requests

from ldap_sync_harness.exceptions import ConfigurationAuthError
from ldap_sync_harness.utils.logger import get_logger

from .document import ConfigDocument, describe_patches

logger = get_logger(__name__)

CONFIGURATION_ENDPOINT = "api/system/configuration"


def basic_auth_header(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return f"Basic {token}"


class ConfigurationTransport:
    """Fetch and persist the server's global configuration document."""

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        self.url = f"{base_url.rstrip('/')}/{CONFIGURATION_ENDPOINT}"
        self.timeout = timeout
        self._auth = basic_auth_header(username, password)
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def fetch(self, retry_if_unauthorized: bool = True) -> ConfigDocument:
        """GET the configuration document.

        A 401 is retried exactly once when *retry_if_unauthorized* is set:
        right after directory integration is removed, the admin session that
        was resolved through LDAP must be re-resolved against the internal
        user store, and only the next request succeeds.
        """
        return self._fetch(retry_if_unauthorized, attempt=1)

    def _fetch(self, retry_if_unauthorized: bool, attempt: int) -> ConfigDocument:
        logger.info(
            "Fetching server configuration",
            event="harness.config_transport.fetch",
            url=self.url,
            attempt=attempt,
        )
        try:
            resp = self._session.get(self.url, headers={"Authorization": self._auth}, timeout=self.timeout)
        except requests.RequestException:
            logger.error(
                "Configuration fetch failed",
                event="harness.config_transport.fetch_error",
                url=self.url,
                exc_info=True,
            )
            raise
        logger.info(
            "Configuration fetch response",
            event="harness.config_transport.fetch_response",
            status=resp.status_code,
            attempt=attempt,
        )

        if resp.status_code == 401:
            if retry_if_unauthorized:
                resp.close()
                return self._fetch(False, attempt=attempt + 1)
            logger.error(
                "Configuration fetch unauthorized",
                event="harness.config_transport.unauthorized",
                attempts=attempt,
            )
            raise ConfigurationAuthError(
                f"GET {self.url} returned 401 after {attempt} attempt(s)", attempts=attempt
            )

        try:
            resp.raise_for_status()
        except requests.HTTPError:
            logger.error(
                "Configuration fetch returned an error status",
                event="harness.config_transport.fetch_error",
                status=resp.status_code,
                exc_info=True,
            )
            raise
        return ConfigDocument.from_text(resp.content)

    def persist(self, document: ConfigDocument) -> int:
        """POST *document* as the full replacement; return the HTTP status."""
        logger.info(
            "Saving server configuration",
            event="harness.config_transport.persist",
            url=self.url,
            revision=document.revision,
            patches=describe_patches(document.patches),
        )
        try:
            resp = self._session.post(
                self.url,
                data=document.content,
                headers={"Authorization": self._auth, "Content-Type": "application/xml"},
                timeout=self.timeout,
            )
        except requests.RequestException:
            logger.error(
                "Configuration persist failed",
                event="harness.config_transport.persist_error",
                url=self.url,
                exc_info=True,
            )
            raise
        logger.info(
            "Configuration persist response",
            event="harness.config_transport.persist_response",
            status=resp.status_code,
        )
        return resp.status_code
