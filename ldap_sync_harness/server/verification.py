"""Artifact existence checks via storage metadata lookups."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ldap_sync_harness.exceptions import RepositoryNotFoundError
from ldap_sync_harness.utils.logger import get_logger

from .client import ArtifactoryClient

logger = get_logger(__name__)


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class ArtifactLookup:
    status: LookupStatus
    info: dict[str, Any] | None = None
    error: Exception | None = None

    @property
    def exists(self) -> bool:
        return self.status is LookupStatus.FOUND


def lookup_artifact(client: ArtifactoryClient, repo_key: str, path: str) -> ArtifactLookup:
    """Look up artifact metadata, telling "not found" apart from other failures."""
    try:
        info = client.file_info(repo_key, path)
    except RepositoryNotFoundError as exc:
        logger.info(
            "Artifact not found",
            event="harness.verify.not_found",
            repo_key=repo_key,
            path=path,
        )
        return ArtifactLookup(LookupStatus.NOT_FOUND, error=exc)
    except Exception as exc:
        logger.warning(
            "Artifact lookup failed",
            event="harness.verify.lookup_failed",
            repo_key=repo_key,
            path=path,
            exc_info=True,
        )
        return ArtifactLookup(LookupStatus.ERROR, error=exc)
    return ArtifactLookup(LookupStatus.FOUND, info=info)


def artifact_exists(client: ArtifactoryClient, repo_key: str, path: str) -> bool:
    """True when metadata for *path* is retrievable; any failure reads as False."""
    logger.info(
        "Checking if artifact exists",
        event="harness.verify.exists",
        repo_key=repo_key,
        path=path,
    )
    return lookup_artifact(client, repo_key, path).exists
