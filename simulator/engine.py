"""Container engine contract and its Docker implementation."""

import logging
from typing import Iterator, Optional, Protocol, Sequence

import docker

from simulator.models import MountSpec

logger = logging.getLogger(__name__)


class Engine(Protocol):
    """The calls the runner makes against a container engine.

    Every call is blocking; the runner moves them off the event loop.
    """

    def create_container(
        self,
        image: str,
        environment: list[str],
        command: Sequence[str],
        tty: bool,
        mounts: Sequence[MountSpec],
    ) -> str: ...

    def attach(self, container_id: str) -> Iterator[bytes]: ...

    def start(self, container_id: str) -> None: ...

    def stop(self, container_id: str, timeout: Optional[int] = None) -> None: ...

    def remove(self, container_id: str) -> None: ...


class DockerEngine:
    """Engine backed by the Docker SDK."""

    def __init__(self, docker_client: docker.DockerClient):
        self.docker_client = docker_client

    def create_container(
        self,
        image: str,
        environment: list[str],
        command: Sequence[str],
        tty: bool,
        mounts: Sequence[MountSpec],
    ) -> str:
        """Create (but do not start) a container, returning its id.

        Created non-detached so stdout and stderr are attachable.
        """
        container = self.docker_client.containers.create(
            image,
            command=list(command),
            environment=environment,
            tty=tty,
            detach=False,
            mounts=[m.to_docker() for m in mounts],
        )
        logger.debug(f"Created container {container.short_id} from {image}")
        return container.id

    def attach(self, container_id: str) -> Iterator[bytes]:
        """Attach to combined stdout/stderr, returning a stream of raw chunks."""
        return self.docker_client.api.attach(
            container_id,
            stdout=True,
            stderr=True,
            stream=True,
        )

    def start(self, container_id: str) -> None:
        self.docker_client.api.start(container_id)

    def stop(self, container_id: str, timeout: Optional[int] = None) -> None:
        self.docker_client.api.stop(container_id, timeout=timeout)

    def remove(self, container_id: str) -> None:
        self.docker_client.api.remove_container(container_id)


def from_env() -> DockerEngine:
    """Build an engine from DOCKER_HOST and friends.

    Raises docker.errors.DockerException when no daemon is reachable.
    """
    return DockerEngine(docker.from_env())
