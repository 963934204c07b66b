"""Shared fixtures: an in-memory engine that records every call."""

import io
import threading
from pathlib import Path

import pytest
from docker.errors import APIError

from simulator.config import Config
from simulator.runner import ContainerRunner


class FakeStream:
    """Attached output: yields the chunks, then optionally waits for stop."""

    def __init__(self, chunks, block, stopped):
        self.chunks = chunks
        self.block = block
        self.stopped = stopped
        self.closed = threading.Event()

    def __iter__(self):
        yield from self.chunks
        if self.block:
            self.stopped.wait(timeout=10)

    def close(self):
        self.closed.set()


class FakeEngine:
    """Stand-in for DockerEngine.

    ``fail`` names the call that should raise APIError. With ``block`` set the
    attached stream only ends once the container is stopped.
    """

    def __init__(self, container_id="c1", chunks=(b"hello\n",), fail=None, block=False):
        self.container_id = container_id
        self.chunks = list(chunks)
        self.fail = fail
        self.block = block
        self.calls = []
        self.create_kwargs = None
        self.stop_timeouts = []
        self.streams = []
        self.started = threading.Event()
        self.stopped = threading.Event()
        self._lock = threading.Lock()

    def _record(self, name, *args):
        with self._lock:
            self.calls.append((name, *args))
        if self.fail == name:
            raise APIError(f"{name} exploded")

    def names(self):
        return [call[0] for call in self.calls]

    def create_container(self, image, environment, command, tty, mounts):
        self.create_kwargs = dict(
            image=image,
            environment=environment,
            command=command,
            tty=tty,
            mounts=mounts,
        )
        self._record("create")
        return self.container_id

    def attach(self, container_id):
        self._record("attach", container_id)
        stream = FakeStream(self.chunks, self.block, self.stopped)
        self.streams.append(stream)
        return stream

    def start(self, container_id):
        self._record("start", container_id)
        self.started.set()

    def stop(self, container_id, timeout=None):
        self.stop_timeouts.append(timeout)
        self.stopped.set()
        self._record("stop", container_id)

    def remove(self, container_id):
        self._record("remove", container_id)


@pytest.fixture
def config(tmp_path):
    return Config(base_dir=tmp_path / "ws", image="simulator:test", cleanup_timeout=5)


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def output():
    return io.BytesIO()


@pytest.fixture
def make_runner(config, output):
    """Build a runner around a given engine."""

    def _make(engine, home=Path("/home/u"), **overrides):
        return ContainerRunner(
            overrides.get("config", config),
            engine_factory=lambda: engine,
            home_resolver=lambda: home,
            output=overrides.get("output", output),
        )

    return _make
