"""LDAP group deploy-permission harness for Artifactory."""

__version__ = "0.1.0"
