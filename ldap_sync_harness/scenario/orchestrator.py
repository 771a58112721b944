"""LDAP group deploy-permission scenario.

Setup → action → verification → cleanup. Cleanup always runs; every step of
it is planned before setup starts, so each one is attempted exactly once
however far setup got.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ldap_sync_harness.config.schema import HarnessSettings
from ldap_sync_harness.directory.runner import DirectoryEndpoint, DirectoryServiceRunner, DirectoryServiceSpec
from ldap_sync_harness.exceptions import RepositoryAuthorizationError
from ldap_sync_harness.server.access_control import AccessControlProvisioner
from ldap_sync_harness.server.client import ArtifactoryClient
from ldap_sync_harness.server.integration import DirectoryIntegration, LdapIntegrationSettings
from ldap_sync_harness.server.transport import ConfigurationTransport
from ldap_sync_harness.server.verification import ArtifactLookup, lookup_artifact
from ldap_sync_harness.utils.logger import get_logger, logging_context

from .teardown import CleanupReport, Teardown

logger = get_logger(__name__)

ClientFactory = Callable[[str, str, str, float], ArtifactoryClient]


def _default_client_factory(base_url: str, username: str, password: str, timeout: float) -> ArtifactoryClient:
    return ArtifactoryClient(base_url, username, password, timeout=timeout)


@dataclass
class ScenarioResult:
    grant_permission: bool
    uploaded: bool = False
    upload_error: Exception | None = None
    lookup: ArtifactLookup | None = None
    cleanup_report: CleanupReport | None = None

    @property
    def artifact_visible(self) -> bool:
        return self.lookup is not None and self.lookup.exists

    @property
    def as_expected(self) -> bool:
        """Visible when permission was granted; denied and absent otherwise."""
        if self.grant_permission:
            return self.uploaded and self.artifact_visible
        return isinstance(self.upload_error, RepositoryAuthorizationError) and not self.artifact_visible

    def to_dict(self) -> dict[str, Any]:
        return {
            "grant_permission": self.grant_permission,
            "uploaded": self.uploaded,
            "upload_error": str(self.upload_error) if self.upload_error else None,
            "artifact_visible": self.artifact_visible,
            "lookup": self.lookup.status.value if self.lookup else None,
            "as_expected": self.as_expected,
            "cleanup": self.cleanup_report.to_dict() if self.cleanup_report else None,
        }


class DeployPermissionScenario:
    """Checks that an LDAP group member can deploy once the group is granted."""

    def __init__(
        self,
        settings: HarnessSettings,
        runner: DirectoryServiceRunner | None = None,
        transport: ConfigurationTransport | None = None,
        admin_client: ArtifactoryClient | None = None,
        client_factory: ClientFactory | None = None,
    ):
        self.settings = settings
        server = settings.server
        ldap = settings.ldap
        scenario = settings.scenario

        self.runner = runner or DirectoryServiceRunner(
            settle_delay=ldap.settle_delay, ready_timeout=ldap.ready_timeout
        )
        self.transport = transport or ConfigurationTransport(
            server.base_url, server.admin_user, server.admin_password, timeout=server.request_timeout
        )
        self.admin_client = admin_client or ArtifactoryClient(
            server.base_url, server.admin_user, server.admin_password, timeout=server.request_timeout
        )
        # built here, so closed here once the run is over
        self._owned: list[ConfigurationTransport | ArtifactoryClient] = []
        if transport is None:
            self._owned.append(self.transport)
        if admin_client is None:
            self._owned.append(self.admin_client)
        self.client_factory = client_factory or _default_client_factory
        self.provisioner = AccessControlProvisioner(self.admin_client)
        self.integration = DirectoryIntegration(
            self.transport,
            LdapIntegrationSettings(
                ldap_url=ldap.url,
                base_dn=ldap.base_dn,
                manager_dn=ldap.admin_dn,
                manager_password=ldap.admin_password,
                key=scenario.ldap_setting_key,
                group_setting_name=scenario.ldap_group_setting_name,
            ),
        )
        self.endpoint: DirectoryEndpoint | None = None
        self.last_cleanup_report: CleanupReport | None = None

    def plan_teardown(self) -> Teardown:
        """Destructors pushed in setup order, so they run in reverse."""
        scenario = self.settings.scenario
        teardown = Teardown()
        teardown.push("stop_directory_service", self.runner.stop, self.settings.ldap.container_name)
        teardown.push("remove_ldap_configuration", self.integration.retract)
        teardown.push("delete_repository", self.provisioner.delete_repository, scenario.repo_key)
        teardown.push("delete_group", self.provisioner.delete_group, scenario.group_name)
        teardown.push("delete_permission_target", self.provisioner.delete_permission_target, scenario.permission_name)
        return teardown

    def setup(self) -> None:
        scenario = self.settings.scenario
        logger.info("Setting up test case", event="harness.scenario.setup")
        self.endpoint = self.runner.start(DirectoryServiceSpec.from_settings(self.settings.ldap))
        self.integration.apply()
        self.provisioner.create_repository(scenario.repo_key)
        self.provisioner.create_group(scenario.group_name)
        if scenario.grant_permission:
            self.provisioner.grant_deploy_permission(
                scenario.permission_name, scenario.group_name, scenario.repo_key
            )

    def act(self, result: ScenarioResult) -> None:
        """Upload the artifact as the directory user."""
        server = self.settings.server
        scenario = self.settings.scenario
        logger.info(
            "Uploading artifact as directory user",
            event="harness.scenario.upload",
            user=scenario.ldap_user,
            path=scenario.artifact_path,
        )
        client = self.client_factory(
            server.base_url, scenario.ldap_user, scenario.ldap_user_password, server.request_timeout
        )
        try:
            client.upload(scenario.repo_key, scenario.artifact_path, scenario.artifact_content.encode("utf-8"))
            result.uploaded = True
        except RepositoryAuthorizationError as exc:
            logger.info(
                "Upload denied",
                event="harness.scenario.upload_denied",
                status=exc.status_code,
            )
            result.upload_error = exc
        finally:
            client.close()

    def verify(self, result: ScenarioResult) -> None:
        scenario = self.settings.scenario
        result.lookup = lookup_artifact(self.admin_client, scenario.repo_key, scenario.artifact_path)

    def run(self) -> ScenarioResult:
        scenario = self.settings.scenario
        result = ScenarioResult(grant_permission=scenario.grant_permission)
        teardown = self.plan_teardown()
        with logging_context(scenario="ldap_group_deploy", repo_key=scenario.repo_key, group=scenario.group_name):
            try:
                self.setup()
                self.act(result)
                self.verify(result)
            finally:
                logger.info("Cleaning up test case", event="harness.scenario.cleanup")
                result.cleanup_report = self.last_cleanup_report = teardown.run()
                for owned in self._owned:
                    owned.close()
            logger.info(
                "Scenario finished",
                event="harness.scenario.finished",
                uploaded=result.uploaded,
                artifact_visible=result.artifact_visible,
                as_expected=result.as_expected,
            )
        return result
