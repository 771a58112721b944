# ldap_sync_harness/exceptions.py
"""
Custom exceptions for the LDAP group sync harness.
"""

from typing import Any


class HarnessError(Exception):
    """Base exception for all harness errors."""

    error_code = "harness_error"

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# Config exceptions
class ConfigError(HarnessError):
    """Base exception for harness configuration errors."""

    error_code = "config_error"


class ConfigValidationError(ConfigError):
    """Raised when harness configuration validation fails."""

    error_code = "config_validation_error"

    def __init__(
        self, message: str, field: str | None = None, value: Any = None, **kwargs: Any
    ):
        details = {"field": field, "value": value, **kwargs}
        super().__init__(message, details)
        self.field = field
        self.value = value


# Server configuration document exceptions
class ConfigurationDocumentError(HarnessError):
    """Raised when the server configuration document cannot be parsed or patched."""

    error_code = "configuration_document_error"


class ConfigurationAuthError(HarnessError):
    """Raised when the configuration endpoint keeps answering 401."""

    error_code = "configuration_unauthorized"

    def __init__(self, message: str, status_code: int = 401, attempts: int = 1):
        super().__init__(message, {"status_code": status_code, "attempts": attempts})
        self.status_code = status_code
        self.attempts = attempts


class ConfigurationPersistError(HarnessError):
    """Raised when the server rejects a persisted configuration document."""

    error_code = "configuration_persist_failed"

    def __init__(self, message: str, status_code: int):
        super().__init__(message, {"status_code": status_code})
        self.status_code = status_code


# Repository REST API exceptions
class RepositoryApiError(HarnessError):
    """Raised when the repository server answers with an error status."""

    error_code = "repository_api_error"

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(message, {"status_code": status_code, "body": body})
        self.status_code = status_code
        self.body = body


class RepositoryAuthorizationError(RepositoryApiError):
    """Raised on 401/403 from the repository server."""

    error_code = "repository_unauthorized"


class RepositoryNotFoundError(RepositoryApiError):
    """Raised on 404 from the repository server."""

    error_code = "repository_not_found"


# Directory service
class ServiceNotReadyError(HarnessError):
    """Raised when the directory service does not accept binds in time."""

    error_code = "service_not_ready"
