"""Pydantic schema for harness configuration validation."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServerSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")
    base_url: str = Field(..., description="Artifactory base URL, including the context path")
    admin_user: str
    admin_password: str
    request_timeout: float = Field(default=30.0, gt=0)

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, v: str) -> str:
        if not re.match(r"^https?://", v):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")


class DirectorySettings(BaseModel):
    model_config = ConfigDict(extra="ignore")
    image: str
    container_name: str = Field(..., pattern=r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")
    host: str = Field(default="localhost")
    port: int = Field(default=389, ge=1, le=65535)
    base_dn: str
    admin_user: str = Field(default="admin")
    admin_password: str
    ldif_path: str
    settle_delay: float = Field(default=0.0, ge=0)
    ready_timeout: float = Field(default=60.0, gt=0)

    @property
    def admin_dn(self) -> str:
        return f"cn={self.admin_user},{self.base_dn}"

    @property
    def url(self) -> str:
        return f"ldap://{self.host}:{self.port}"


class ScenarioSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")
    ldap_user: str
    ldap_user_password: str
    repo_key: str = Field(..., pattern=r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")
    group_name: str
    permission_name: str
    artifact_path: str
    artifact_content: str = Field(default="content")
    ldap_setting_key: str = Field(default="ldap")
    ldap_group_setting_name: str = Field(default="il-users")
    grant_permission: bool = Field(default=True)

    @field_validator("artifact_path")
    @classmethod
    def _relative_path(cls, v: str) -> str:
        v = v.strip("/")
        if not v:
            raise ValueError("artifact_path must not be empty")
        return v


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO")


class HarnessSettings(BaseModel):
    server: ServerSettings
    ldap: DirectorySettings
    scenario: ScenarioSettings
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
