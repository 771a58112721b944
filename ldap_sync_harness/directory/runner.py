"""Directory service runner.

Starts an OpenLDAP container with docker, waits until it accepts an admin
bind, seeds it from an LDIF file and removes it again. The docker CLI's own
stdout/stderr go straight to the harness process output.
"""

from __future__ import annotations

import subprocess
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

import ldap3
from ldap3.core.exceptions import LDAPException

from ldap_sync_harness.config.schema import DirectorySettings
from ldap_sync_harness.exceptions import ServiceNotReadyError
from ldap_sync_harness.utils.logger import get_logger
from ldap_sync_harness.utils.retry import retry

logger = get_logger(__name__)

CONTAINER_LDAP_PORT = 389
CONTAINER_LDIF_PATH = "/ldap_data.ldif"


@dataclass(frozen=True)
class DirectoryServiceSpec:
    """What to launch: image, container name, host port and seed data."""

    image: str
    container_name: str
    host: str
    port: int
    base_dn: str
    admin_dn: str
    admin_password: str
    ldif_path: str | None = None

    @classmethod
    def from_settings(cls, settings: DirectorySettings) -> DirectoryServiceSpec:
        return cls(
            image=settings.image,
            container_name=settings.container_name,
            host=settings.host,
            port=settings.port,
            base_dn=settings.base_dn,
            admin_dn=settings.admin_dn,
            admin_password=settings.admin_password,
            ldif_path=settings.ldif_path,
        )


@dataclass(frozen=True)
class DirectoryEndpoint:
    """A running directory service."""

    container_name: str
    host: str
    port: int
    base_dn: str
    admin_dn: str
    admin_password: str

    @property
    def url(self) -> str:
        return f"ldap://{self.host}:{self.port}"


def ldap_admin_bind(host: str, port: int, admin_dn: str, password: str, timeout: float = 5.0) -> None:
    """Bind once as *admin_dn*; raise on any failure."""
    server = ldap3.Server(host, port=port, use_ssl=False, connect_timeout=max(1, int(timeout)))
    with ldap3.Connection(server, user=admin_dn, password=password, auto_bind=True, receive_timeout=max(1, int(timeout))):
        return


class DirectoryServiceRunner:
    """Launch and remove the directory service container."""

    def __init__(
        self,
        docker: str = "docker",
        settle_delay: float = 0.0,
        ready_timeout: float = 60.0,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        probe: Callable[[str, int, str, str], None] = ldap_admin_bind,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.docker = docker
        self.settle_delay = settle_delay
        self.ready_timeout = ready_timeout
        self._run = run
        self._probe = probe
        self._sleep = sleep

    def _execute(self, args: Sequence[str]) -> int:
        command = [self.docker, *args]
        logger.info(
            "Executing docker command",
            event="harness.directory.exec",
            command=" ".join(command),
        )
        # stdout/stderr are inherited from the harness process
        proc = self._run(command, check=False)
        if proc.returncode != 0:
            logger.warning(
                "Docker command exited with non-zero status",
                event="harness.directory.exec_failed",
                command=" ".join(command),
                returncode=proc.returncode,
            )
        return proc.returncode

    def start(self, spec: DirectoryServiceSpec) -> DirectoryEndpoint:
        """Run the container, wait for it and load the seed data."""
        self._execute(
            [
                "run",
                "--name",
                spec.container_name,
                "-p",
                f"{spec.port}:{CONTAINER_LDAP_PORT}",
                "-d",
                spec.image,
            ]
        )
        if self.settle_delay:
            self._sleep(self.settle_delay)

        endpoint = DirectoryEndpoint(
            container_name=spec.container_name,
            host=spec.host,
            port=spec.port,
            base_dn=spec.base_dn,
            admin_dn=spec.admin_dn,
            admin_password=spec.admin_password,
        )
        self.wait_until_ready(endpoint)

        if spec.ldif_path:
            self.load_data(spec, Path(spec.ldif_path))
        return endpoint

    def wait_until_ready(self, endpoint: DirectoryEndpoint) -> None:
        """Poll with an admin bind until it succeeds or ``ready_timeout`` passes."""

        @retry(
            max_retries=1000,
            initial_delay=0.5,
            max_delay=5.0,
            backoff=2.0,
            exceptions=(LDAPException, OSError),
            timeout=self.ready_timeout,
            sleep=self._sleep,
        )
        def _bind() -> None:
            self._probe(endpoint.host, endpoint.port, endpoint.admin_dn, endpoint.admin_password)

        started = time.monotonic()
        try:
            _bind()
        except (LDAPException, OSError) as exc:
            logger.error(
                "Directory service did not accept binds in time",
                event="harness.directory.not_ready",
                url=endpoint.url,
                timeout=self.ready_timeout,
                error=str(exc),
            )
            raise ServiceNotReadyError(
                f"Directory service at {endpoint.url} did not become ready within {self.ready_timeout}s",
                {"container": endpoint.container_name, "error": str(exc)},
            ) from exc
        logger.info(
            "Directory service is ready",
            event="harness.directory.ready",
            url=endpoint.url,
            elapsed_ms=int((time.monotonic() - started) * 1000),
        )

    def load_data(self, spec: DirectoryServiceSpec, ldif: Path) -> None:
        """Copy *ldif* into the container and bulk-load it with ldapadd."""
        self._execute(["cp", str(ldif.resolve()), f"{spec.container_name}:{CONTAINER_LDIF_PATH}"])
        self._execute(
            [
                "exec",
                spec.container_name,
                "ldapadd",
                "-x",
                "-H",
                "ldap://localhost",
                "-D",
                spec.admin_dn,
                "-w",
                spec.admin_password,
                "-f",
                CONTAINER_LDIF_PATH,
            ]
        )

    def stop(self, container_name: str) -> None:
        """Forcibly remove the container."""
        self._execute(["rm", "-f", container_name])
