import asyncio
import logging
import sys
from functools import partial
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, Optional, Sequence

from docker.errors import DockerException
from requests.exceptions import RequestException

from simulator import engine as engine_module
from simulator.config import Config, aws_env
from simulator.engine import Engine
from simulator.errors import (
    AttachFailed,
    ClientUnavailable,
    CreateFailed,
    HomeNotFound,
    StartFailed,
)
from simulator.models import MountSpec

logger = logging.getLogger(__name__)

# Errors the Docker SDK surfaces for a failed engine call
ENGINE_ERRORS = (DockerException, RequestException)


class ContainerRunner:
    """Runs one command in a throwaway simulator container.

    Each call to run() creates a container, streams its output and always
    stops and removes it again, including when the caller is cancelled.
    """

    def __init__(
        self,
        config: Config,
        engine_factory: Callable[[], Engine] = engine_module.from_env,
        home_resolver: Callable[[], Path] = Path.home,
        output: Optional[BinaryIO] = None,
    ):
        self.config = config
        self.engine_factory = engine_factory
        self.home_resolver = home_resolver
        self.output = output if output is not None else sys.stdout.buffer

    async def run(self, command: Sequence[str]) -> None:
        """Execute ``command`` in a new container and wait for it to finish.

        Raises one of the SimulatorError subclasses when the container
        cannot be created, attached to or started.
        """
        try:
            home = self.home_resolver()
        except (RuntimeError, KeyError, OSError) as e:
            raise HomeNotFound() from e

        try:
            engine = self.engine_factory()
        except ENGINE_ERRORS as e:
            raise ClientUnavailable() from e

        request = self.config.to_request(command)
        mounts = request.mounts(home)

        container_id = await self._create(engine, request.image, request.command, mounts)
        try:
            stream = await self._attach(engine, container_id)
            await self._call(engine.start, container_id, error=StartFailed)
            logger.info(f"Started container {container_id[:12]}")

            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._drain, stream)
        finally:
            await self._cleanup(engine, container_id)

    async def _call(self, fn: Callable, *args, error: type):
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, partial(fn, *args))
        except ENGINE_ERRORS as e:
            raise error() from e

    async def _create(
        self,
        engine: Engine,
        image: str,
        command: Sequence[str],
        mounts: Sequence[MountSpec],
    ) -> str:
        """Create the container.

        If the caller is cancelled mid-create the call is left to settle so a
        container it produces can still be cleaned up.
        """
        loop = asyncio.get_running_loop()
        create = loop.run_in_executor(
            None,
            partial(
                engine.create_container,
                image,
                aws_env(),
                command,
                True,
                mounts,
            ),
        )
        try:
            container_id = await asyncio.shield(create)
        except asyncio.CancelledError:
            await self._reap(engine, create)
            raise
        except ENGINE_ERRORS as e:
            raise CreateFailed() from e

        logger.debug(f"Created container {container_id[:12]} with {len(mounts)} mounts")
        return container_id

    async def _reap(self, engine: Engine, create: asyncio.Future) -> None:
        """Clean up whatever an interrupted create call produced.

        Further cancellations are absorbed until the create call settles;
        the caller re-raises the cancellation afterwards.
        """
        while not create.done():
            try:
                await asyncio.wait([create])
            except asyncio.CancelledError:
                logger.debug("Cancelled again while waiting on container create")

        if create.cancelled():
            return
        error = create.exception()
        if error is not None:
            logger.debug(f"Interrupted container create failed: {error}")
            return
        await self._cleanup(engine, create.result())

    async def _attach(self, engine: Engine, container_id: str) -> Iterator[bytes]:
        loop = asyncio.get_running_loop()
        attach = loop.run_in_executor(None, engine.attach, container_id)
        try:
            return await asyncio.shield(attach)
        except asyncio.CancelledError:
            attach.add_done_callback(self._close_late_stream)
            raise
        except ENGINE_ERRORS as e:
            raise AttachFailed() from e

    @staticmethod
    def _close_late_stream(attach: asyncio.Future) -> None:
        """Close a stream that arrived after the caller gave up on it."""
        if attach.cancelled() or attach.exception() is not None:
            return
        close = getattr(attach.result(), "close", None)
        if close is not None:
            close()

    def _drain(self, stream: Iterator[bytes]) -> None:
        """Copy the attached stream to the output until it closes (sync, runs in executor)."""
        try:
            for chunk in stream:
                self.output.write(chunk)
                self.output.flush()
        except Exception as e:
            logger.debug(f"Output stream ended early: {e}")

    async def _cleanup(self, engine: Engine, container_id: str) -> None:
        """Stop then remove the container, whatever state the caller is in."""
        loop = asyncio.get_running_loop()
        cleanup = loop.run_in_executor(
            None, self._stop_and_remove, engine, container_id
        )
        try:
            await asyncio.wait_for(
                asyncio.shield(cleanup), timeout=self.config.cleanup_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Cleanup of container {container_id[:12]} did not finish "
                f"within {self.config.cleanup_timeout}s"
            )

    def _stop_and_remove(self, engine: Engine, container_id: str) -> None:
        """Best-effort stop and remove (sync, runs in executor)."""
        try:
            engine.stop(container_id, timeout=self.config.stop_timeout)
        except Exception as e:
            logger.warning(f"Failed to stop container {container_id[:12]}: {e}")

        try:
            engine.remove(container_id)
            logger.debug(f"Removed container {container_id[:12]}")
        except Exception as e:
            logger.warning(f"Failed to remove container {container_id[:12]}: {e}")
