"""
Test configuration and fixtures - fake Artifactory server and harness settings
"""

from __future__ import annotations

import pytest

from ldap_sync_harness.config.schema import (
    DirectorySettings,
    HarnessSettings,
    ScenarioSettings,
    ServerSettings,
)
from tests.fakes import BASE_URL, FakeArtifactory


@pytest.fixture
def fake_artifactory() -> FakeArtifactory:
    return FakeArtifactory()


@pytest.fixture
def harness_settings(tmp_path) -> HarnessSettings:
    ldif = tmp_path / "data.ldif"
    ldif.write_text("dn: ou=People,dc=example,dc=org\n", encoding="utf-8")
    return HarnessSettings(
        server=ServerSettings(base_url=BASE_URL, admin_user="admin", admin_password="password", request_timeout=5),
        ldap=DirectorySettings(
            image="osixia/openldap:1.1.9",
            container_name="openldap-test",
            host="localhost",
            port=389,
            base_dn="dc=example,dc=org",
            admin_user="admin",
            admin_password="admin",
            ldif_path=str(ldif),
        ),
        scenario=ScenarioSettings(
            ldap_user="john",
            ldap_user_password="johnldap",
            repo_key="repo-local",
            group_name="frogs",
            permission_name="frogs-can-deploy-to-repo-local",
            artifact_path="artifact",
        ),
    )
