"""End-to-end check of LDAP group deploy permissions against a live Artifactory.

Requirements:
- Docker installed and usable by the current user (an OpenLDAP container is
  started on the configured port)
- An Artifactory instance reachable at ``[server] base_url`` with the admin
  credentials from the harness configuration
- ``HARNESS_E2E=1`` in the environment
"""

from __future__ import annotations

import os
import shutil

import pytest
import requests

from ldap_sync_harness.config import load_settings
from ldap_sync_harness.exceptions import RepositoryAuthorizationError
from ldap_sync_harness.scenario import DeployPermissionScenario

pytestmark = pytest.mark.e2e


@pytest.fixture
def live_settings():
    if not shutil.which("docker"):
        pytest.skip("Docker is required for the LDAP E2E test")
    settings = load_settings(os.environ.get("HARNESS_CONFIG"))
    try:
        requests.get(f"{settings.server.base_url}/api/system/ping", timeout=5)
    except requests.RequestException as exc:
        pytest.skip(f"Artifactory not reachable at {settings.server.base_url}: {exc}")
    return settings


def test_ldap_user_uploading_artifact_to_restricted_repo(live_settings):
    result = DeployPermissionScenario(live_settings).run()

    assert result.upload_error is None
    assert result.uploaded
    assert result.artifact_visible, f"artifact lookup: {result.lookup}"


def test_ldap_user_without_permission_is_denied(live_settings):
    live_settings.scenario.grant_permission = False

    result = DeployPermissionScenario(live_settings).run()

    assert isinstance(result.upload_error, RepositoryAuthorizationError)
    assert not result.artifact_visible
