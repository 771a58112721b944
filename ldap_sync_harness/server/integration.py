"""Directory (LDAP) integration sections of the server configuration.

``add_integration`` appends one ``ldapSetting`` and one ``ldapGroupSetting``;
``remove_integration`` drops both containers when the add created them and
otherwise empties them, so a server that already had empty containers gets
them back. Everything else in the document is passed through untouched.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass

from ldap_sync_harness.exceptions import ConfigurationPersistError
from ldap_sync_harness.utils.logger import get_logger

from .document import AddSection, ConfigDocument, RemoveSection
from .transport import ConfigurationTransport

logger = get_logger(__name__)

LDAP_SETTINGS_PATH = ("security", "ldapSettings")
LDAP_GROUP_SETTINGS_PATH = ("security", "ldapGroupSettings")

# Elements that follow the LDAP containers inside <security>
_AFTER_LDAP_GROUP_SETTINGS = (
    "httpSsoSettings",
    "crowdSettings",
    "samlSettings",
    "oauthSettings",
    "accessClientSettings",
    "buildGlobalBasicReadAllowed",
    "buildGlobalBasicReadForAnonymous",
    "userLockPolicy",
)
_AFTER_LDAP_SETTINGS = ("ldapGroupSettings",) + _AFTER_LDAP_GROUP_SETTINGS


@dataclass(frozen=True)
class LdapIntegrationSettings:
    """Field values for the directory connection and group mapping."""

    ldap_url: str
    base_dn: str
    manager_dn: str
    manager_password: str
    key: str = "ldap"
    group_setting_name: str = "il-users"
    user_dn_pattern: str = "uid={0},ou=People"
    search_filter: str = "uid={0}"
    group_filter: str = "(objectClass=posixGroup)"
    group_name_attribute: str = "cn"
    group_member_attribute: str = "memberUid"
    description_attribute: str = "cn"
    strategy: str = "STATIC"
    email_attribute: str = "mail"

    def ldap_setting(self) -> AddSection:
        return AddSection(
            path=LDAP_SETTINGS_PATH,
            tag="ldapSetting",
            insert_before=_AFTER_LDAP_SETTINGS,
            fields={
                "key": self.key,
                "enabled": "true",
                "ldapUrl": f"{self.ldap_url.rstrip('/')}/{self.base_dn}",
                "userDnPattern": self.user_dn_pattern,
                "search": {
                    "searchFilter": self.search_filter,
                    "searchSubTree": "true",
                    "managerDn": self.manager_dn,
                    "managerPassword": self.manager_password,
                },
                "autoCreateUser": "false",
                "emailAttribute": self.email_attribute,
                "ldapPoisoningProtection": "true",
            },
        )

    def ldap_group_setting(self) -> AddSection:
        return AddSection(
            path=LDAP_GROUP_SETTINGS_PATH,
            tag="ldapGroupSetting",
            insert_before=_AFTER_LDAP_GROUP_SETTINGS,
            fields={
                "name": self.group_setting_name,
                "groupBaseDn": None,
                "groupNameAttribute": self.group_name_attribute,
                "groupMemberAttribute": self.group_member_attribute,
                "subTree": "true",
                "filter": self.group_filter,
                "descriptionAttribute": self.description_attribute,
                "strategy": self.strategy,
                "enabledLdap": self.key,
            },
        )


def add_integration(document: ConfigDocument, settings: LdapIntegrationSettings) -> ConfigDocument:
    return document.apply(settings.ldap_setting(), settings.ldap_group_setting())


def remove_integration(
    document: ConfigDocument, created: Collection[tuple[str, ...]] | None = None
) -> ConfigDocument:
    """Take the LDAP sections out of *document*.

    *created* lists the containers the matching add introduced; it defaults to
    what *document* itself recorded.
    """
    if created is None:
        created = document.created
    return document.apply(
        *(
            RemoveSection(path, keep_empty=path not in created)
            for path in (LDAP_SETTINGS_PATH, LDAP_GROUP_SETTINGS_PATH)
        )
    )


class DirectoryIntegration:
    """Read-modify-write cycle that installs or retracts the LDAP sections."""

    def __init__(self, transport: ConfigurationTransport, settings: LdapIntegrationSettings):
        self.transport = transport
        self.settings = settings
        self._created: tuple[tuple[str, ...], ...] = ()

    def _save(self, document: ConfigDocument) -> int:
        status = self.transport.persist(document)
        if status >= 400:
            raise ConfigurationPersistError(
                f"Server rejected configuration revision {document.revision} with HTTP {status}",
                status_code=status,
            )
        return status

    def apply(self) -> ConfigDocument:
        logger.info(
            "Setting up LDAP integration",
            event="harness.integration.apply",
            ldap_key=self.settings.key,
            group_setting=self.settings.group_setting_name,
        )
        document = add_integration(self.transport.fetch(retry_if_unauthorized=True), self.settings)
        self._save(document)
        self._created = document.created
        return document

    def retract(self) -> ConfigDocument:
        logger.info("Removing LDAP integration", event="harness.integration.retract")
        document = remove_integration(self.transport.fetch(retry_if_unauthorized=True), self._created)
        self._save(document)
        self._created = ()
        return document
