"""Configuration constants and defaults.

Defaults reproduce the stock scenario: a local Artifactory on port 8088, an
OpenLDAP container seeded with ``john`` and a ``frogs`` principal group
allowed to deploy to ``repo-local``.
"""

from pathlib import Path

# Section names
SECTION_SERVER = "server"
SECTION_LDAP = "ldap"
SECTION_SCENARIO = "scenario"
SECTION_LOGGING = "logging"

# Environment variable prefix (HARNESS_<SECTION>_<KEY>)
ENV_PREFIX = "HARNESS_"

# Secrets (environment, override the file)
ENV_ADMIN_PASSWORD = "HARNESS_ADMIN_PASSWORD"
ENV_LDAP_ADMIN_PASSWORD = "HARNESS_LDAP_ADMIN_PASSWORD"

# Meta-configuration
ENV_HARNESS_CONFIG = "HARNESS_CONFIG"

DEFAULT_LDIF_PATH = str(Path(__file__).resolve().parent.parent / "directory" / "data" / "ldap_data.ldif")

DEFAULTS = {
    SECTION_SERVER: {
        "base_url": "http://localhost:8088/artifactory",
        "admin_user": "admin",
        "admin_password": "password",
        "request_timeout": "30",
    },
    SECTION_LDAP: {
        "image": "osixia/openldap:1.1.9",
        "container_name": "openldap",
        "host": "localhost",
        "port": "389",
        "base_dn": "dc=example,dc=org",
        "admin_user": "admin",
        "admin_password": "admin",
        "ldif_path": DEFAULT_LDIF_PATH,
        "settle_delay": "0",
        "ready_timeout": "60",
    },
    SECTION_SCENARIO: {
        "ldap_user": "john",
        "ldap_user_password": "johnldap",
        "repo_key": "repo-local",
        "group_name": "frogs",
        "permission_name": "frogs-can-deploy-to-repo-local",
        "artifact_path": "artifact",
        "artifact_content": "content",
        "ldap_setting_key": "ldap",
        "ldap_group_setting_name": "il-users",
        "grant_permission": "true",
    },
    SECTION_LOGGING: {
        "level": "INFO",
    },
}
