"""Security and repository models sent to the Artifactory REST API."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Privilege(str, Enum):
    """Permission target privilege codes (security API v1)."""

    READ = "r"
    ANNOTATE = "n"
    DEPLOY = "w"
    DELETE = "d"
    MANAGE = "m"


@dataclass(frozen=True)
class LocalRepository:
    key: str
    package_type: str = "generic"

    def to_payload(self) -> dict[str, Any]:
        return {"key": self.key, "rclass": "local", "packageType": self.package_type}


@dataclass(frozen=True)
class Group:
    name: str
    auto_join: bool = False
    description: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {"name": self.name, "autoJoin": self.auto_join, "description": self.description}


@dataclass(frozen=True)
class Principal:
    """A user or group name with the privileges granted to it."""

    name: str
    privileges: frozenset[Privilege]

    def codes(self) -> list[str]:
        return sorted(p.value for p in self.privileges)


@dataclass(frozen=True)
class Principals:
    users: tuple[Principal, ...] = ()
    groups: tuple[Principal, ...] = ()

    def to_payload(self) -> dict[str, dict[str, list[str]]]:
        payload: dict[str, dict[str, list[str]]] = {}
        if self.users:
            payload["users"] = {p.name: p.codes() for p in self.users}
        if self.groups:
            payload["groups"] = {p.name: p.codes() for p in self.groups}
        return payload


@dataclass(frozen=True)
class PermissionTarget:
    name: str
    repositories: tuple[str, ...]
    principals: Principals = field(default_factory=Principals)
    include_pattern: str = "**"
    exclude_pattern: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "includesPattern": self.include_pattern,
            "excludesPattern": self.exclude_pattern,
            "repositories": list(self.repositories),
            "principals": self.principals.to_payload(),
        }
