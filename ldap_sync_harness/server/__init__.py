"""Artifactory-side pieces: REST client, configuration document and provisioning."""

from .access_control import AccessControlProvisioner, deploy_permission_target
from .client import ArtifactoryClient
from .document import AddSection, ConfigDocument, RemoveSection
from .integration import (
    DirectoryIntegration,
    LdapIntegrationSettings,
    add_integration,
    remove_integration,
)
from .transport import ConfigurationTransport
from .verification import ArtifactLookup, LookupStatus, artifact_exists, lookup_artifact

__all__ = [
    "AccessControlProvisioner",
    "deploy_permission_target",
    "ArtifactoryClient",
    "AddSection",
    "ConfigDocument",
    "RemoveSection",
    "DirectoryIntegration",
    "LdapIntegrationSettings",
    "add_integration",
    "remove_integration",
    "ConfigurationTransport",
    "ArtifactLookup",
    "LookupStatus",
    "artifact_exists",
    "lookup_artifact",
]
