"""Directory service (OpenLDAP container) management."""

from .runner import (
    DirectoryEndpoint,
    DirectoryServiceRunner,
    DirectoryServiceSpec,
    ldap_admin_bind,
)

__all__ = [
    "DirectoryEndpoint",
    "DirectoryServiceRunner",
    "DirectoryServiceSpec",
    "ldap_admin_bind",
]
