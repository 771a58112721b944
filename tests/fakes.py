"""In-memory Artifactory, scripted HTTP sessions and a recording directory runner."""

from __future__ import annotations

import base64
import json as _json
from typing import Any
from urllib.parse import unquote, urlparse

import requests

BASE_URL = "http://artifactory.test:8088/artifactory"
CONFIG_NS = "http://artifactory.jfrog.org/xml/schema/artifactory-v2_2_5.xsd"

SAMPLE_CONFIG = f"""<?xml version='1.0' encoding='UTF-8'?>
<config xmlns="{CONFIG_NS}">
    <offlineMode>false</offlineMode>
    <security>
        <anonAccessEnabled>false</anonAccessEnabled>
        <passwordSettings>
            <encryptionPolicy>supported</encryptionPolicy>
        </passwordSettings>
        <crowdSettings>
            <enableIntegration>false</enableIntegration>
        </crowdSettings>
        <userLockPolicy>
            <enabled>false</enabled>
        </userLockPolicy>
    </security>
    <localRepositories>
        <localRepository>
            <key>example-repo-local</key>
            <type>generic</type>
        </localRepository>
    </localRepositories>
    <urlBase>http://artifactory.test</urlBase>
</config>
"""

# Stock installs ship both LDAP containers, empty
STOCK_CONFIG = SAMPLE_CONFIG.replace(
    "<crowdSettings>", "<ldapSettings/>\n        <ldapGroupSettings/>\n        <crowdSettings>"
)


class FakeResponse:
    """Just enough of requests.Response for the harness."""

    def __init__(self, status_code: int = 200, content: bytes | str = b"", json_data: Any = None):
        self.status_code = status_code
        if json_data is not None:
            content = _json.dumps(json_data)
        self.content = content.encode("utf-8") if isinstance(content, str) else content
        self.closed = False

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")

    def json(self) -> Any:
        return _json.loads(self.content)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def close(self) -> None:
        self.closed = True


class ScriptedSession:
    """Session returning queued responses and recording every call."""

    def __init__(self, *responses: FakeResponse | Exception):
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []
        self.auth = None

    def _next(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("POST", url, **kwargs)

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        return self._next(method, url, **kwargs)

    def mount(self, prefix: str, adapter: Any) -> None:
        pass

    def close(self) -> None:
        pass


class FakeArtifactory:
    """Stateful stand-in for the Artifactory REST API.

    Users are resolved against ``users``; directory users get the groups
    listed in ``memberships`` once the LDAP group setting is configured.
    """

    def __init__(self, config: str = SAMPLE_CONFIG):
        self.config = config.encode("utf-8")
        self.users = {"admin": "password", "john": "johnldap"}
        self.admins = {"admin"}
        self.memberships = {"john": {"frogs"}}
        self.repositories: dict[str, dict] = {}
        self.groups: dict[str, dict] = {}
        self.permissions: dict[str, dict] = {}
        self.artifacts: dict[tuple[str, str], bytes] = {}
        self.unauthorized_fetches = 0
        self.failures: dict[tuple[str, str], int] = {}
        self.log: list[tuple[str, str, int]] = []

    def session(self) -> FakeArtifactorySession:
        return FakeArtifactorySession(self)

    def _user(self, auth: Any, headers: dict[str, str]) -> str | None:
        if auth is None and "Authorization" in headers:
            raw = base64.b64decode(headers["Authorization"].split(" ", 1)[1]).decode()
            auth = tuple(raw.split(":", 1))
        if not auth:
            return None
        username, password = auth
        if username == "john" and b"<ldapSetting>" not in self.config:
            return None
        return username if self.users.get(username) == password else None

    def can_deploy(self, user: str, repo: str) -> bool:
        if user in self.admins:
            return True
        groups = self.memberships.get(user, set())
        for target in self.permissions.values():
            if repo not in target["repositories"]:
                continue
            granted = target.get("principals", {}).get("groups", {})
            if any("w" in granted.get(g, []) for g in groups):
                return True
        return False

    def handle(self, method: str, url: str, auth: Any = None, headers: dict | None = None,
               json: Any = None, data: Any = None) -> FakeResponse:
        resp = self._handle(method, url, auth, headers or {}, json, data)
        self.log.append((method, urlparse(url).path[len(urlparse(BASE_URL).path):], resp.status_code))
        return resp

    def _handle(self, method, url, auth, headers, json, data) -> FakeResponse:
        path = unquote(urlparse(url).path)[len(urlparse(BASE_URL).path) + 1:]
        forced = self.failures.get((method, path))
        if forced:
            return FakeResponse(forced, "forced failure")

        if path == "api/system/configuration" and method == "GET" and self.unauthorized_fetches:
            self.unauthorized_fetches -= 1
            return FakeResponse(401, "unauthorized")

        user = self._user(auth, headers)
        if user is None:
            return FakeResponse(401, "unauthorized")

        parts = path.split("/")
        if path == "api/system/configuration":
            if method == "GET":
                return FakeResponse(200, self.config)
            self.config = data
            return FakeResponse(200, "Reload of new configuration succeeded")

        if parts[:2] == ["api", "repositories"]:
            key = parts[2]
            if method == "PUT":
                if key in self.repositories:
                    return FakeResponse(400, "Repository already exists")
                self.repositories[key] = json
                return FakeResponse(200, f"Successfully created repository '{key}'")
            if method == "DELETE":
                if self.repositories.pop(key, None) is None:
                    return FakeResponse(404, "not found")
                self.artifacts = {k: v for k, v in self.artifacts.items() if k[0] != key}
                return FakeResponse(200, "deleted")

        if parts[:3] == ["api", "security", "groups"]:
            name = parts[3]
            if method == "PUT":
                self.groups[name] = json
                return FakeResponse(201)
            if method == "GET":
                if name not in self.groups:
                    return FakeResponse(404, "not found")
                return FakeResponse(200, json_data=self.groups[name])
            if method == "DELETE":
                if self.groups.pop(name, None) is None:
                    return FakeResponse(404, "not found")
                return FakeResponse(200)

        if parts[:3] == ["api", "security", "permissions"]:
            if len(parts) == 3 and method == "GET":
                return FakeResponse(200, json_data=[{"name": n} for n in self.permissions])
            name = parts[3]
            if method == "PUT":
                missing = [r for r in json["repositories"] if r not in self.repositories]
                if missing:
                    return FakeResponse(400, f"repository {missing[0]} does not exist")
                self.permissions[name] = json
                return FakeResponse(201)
            if method == "GET":
                if name not in self.permissions:
                    return FakeResponse(404, "not found")
                return FakeResponse(200, json_data=self.permissions[name])
            if method == "DELETE":
                if self.permissions.pop(name, None) is None:
                    return FakeResponse(404, "not found")
                return FakeResponse(200)

        if parts[:2] == ["api", "storage"]:
            key = (parts[2], "/".join(parts[3:]))
            if key not in self.artifacts:
                return FakeResponse(404, "not found")
            return FakeResponse(200, json_data={"repo": key[0], "path": "/" + key[1], "size": str(len(self.artifacts[key]))})

        if method == "PUT" and parts[0] in self.repositories:
            if not self.can_deploy(user, parts[0]):
                return FakeResponse(403, "Not enough permissions to deploy")
            self.artifacts[(parts[0], "/".join(parts[1:]))] = data
            return FakeResponse(201, json_data={"repo": parts[0], "path": "/" + "/".join(parts[1:])})

        return FakeResponse(404, "not found")


class FakeArtifactorySession:
    def __init__(self, server: FakeArtifactory):
        self.server = server
        self.auth = None
        self.closed = False

    def request(self, method: str, url: str, headers=None, json=None, data=None, timeout=None, **kw):
        return self.server.handle(method, url, auth=self.auth, headers=headers, json=json, data=data)

    def get(self, url: str, headers=None, timeout=None, **kw):
        return self.request("GET", url, headers=headers)

    def post(self, url: str, data=None, headers=None, timeout=None, **kw):
        return self.request("POST", url, headers=headers, data=data)

    def mount(self, prefix: str, adapter: Any) -> None:
        pass

    def close(self) -> None:
        self.closed = True


class FakeRunner:
    """Directory service runner that records calls instead of running docker."""

    def __init__(self, fail_start: Exception | None = None):
        self.fail_start = fail_start
        self.started: list[Any] = []
        self.stopped: list[str] = []

    def start(self, spec):
        self.started.append(spec)
        if self.fail_start:
            raise self.fail_start
        return spec

    def stop(self, container_name: str) -> None:
        self.stopped.append(container_name)
