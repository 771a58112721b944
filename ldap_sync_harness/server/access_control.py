"""Repository, group and permission provisioning through the REST API."""

from __future__ import annotations

from ldap_sync_harness.utils.logger import get_logger

from .client import ArtifactoryClient
from .models import Group, LocalRepository, PermissionTarget, Principal, Principals, Privilege

logger = get_logger(__name__)


def deploy_permission_target(permission_name: str, group_name: str, repo_key: str) -> PermissionTarget:
    """Permission target granting *group_name* deploy-only rights on *repo_key*."""
    principal = Principal(name=group_name, privileges=frozenset({Privilege.DEPLOY}))
    return PermissionTarget(
        name=permission_name,
        repositories=(repo_key,),
        principals=Principals(groups=(principal,)),
    )


class AccessControlProvisioner:
    """Creates and deletes the server-side objects a scenario needs.

    Validation is left to the server; its errors propagate unchanged.
    """

    def __init__(self, client: ArtifactoryClient):
        self.client = client

    def create_repository(self, key: str) -> None:
        logger.info("Creating local repository", event="harness.acl.create_repository", repo_key=key)
        self.client.create_repository(LocalRepository(key=key))

    def create_group(self, name: str) -> None:
        logger.info("Creating group", event="harness.acl.create_group", group=name)
        self.client.create_or_update_group(Group(name=name, auto_join=False, description=name))

    def grant_deploy_permission(self, permission_name: str, group_name: str, repo_key: str) -> PermissionTarget:
        target = deploy_permission_target(permission_name, group_name, repo_key)
        logger.info(
            "Granting deploy permission",
            event="harness.acl.grant_deploy",
            permission=permission_name,
            group=group_name,
            repo_key=repo_key,
        )
        self.client.create_or_replace_permission_target(target)
        return target

    def delete_permission_target(self, name: str) -> None:
        self.client.delete_permission_target(name)

    def delete_group(self, name: str) -> None:
        self.client.delete_group(name)

    def delete_repository(self, key: str) -> None:
        self.client.delete_repository(key)
