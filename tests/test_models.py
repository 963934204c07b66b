"""Tests for the mount set a run request produces."""

from pathlib import Path

from simulator.models import MountSpec, RunRequest


def request(dev: bool) -> RunRequest:
    return RunRequest(base_dir=Path("/ws"), dev=dev, image="img", command=("true",))


class TestMounts:
    def test_non_dev_mounts(self):
        assert request(dev=False).mounts(Path("/home/u")) == (
            MountSpec("/ws/home", "/home/ubuntu", read_only=False),
            MountSpec("/home/u/.aws", "/home/ubuntu/.aws", read_only=True),
        )

    def test_dev_adds_three_mounts_after_base(self):
        mounts = request(dev=True).mounts(Path("/home/u"))

        assert len(mounts) == 5
        assert mounts[:2] == request(dev=False).mounts(Path("/home/u"))
        assert [(m.source, m.target) for m in mounts[2:]] == [
            ("/ws/scenarios", "/simulator/scenarios"),
            ("/ws/packer", "/simulator/packer"),
            ("/ws/terraform", "/simulator/terraform"),
        ]

    def test_mounts_are_repeatable(self):
        req = request(dev=True)
        assert req.mounts(Path("/home/u")) == req.mounts(Path("/home/u"))


class TestMountSpec:
    def test_to_docker_bind(self):
        mount = MountSpec("/home/u/.aws", "/home/ubuntu/.aws", read_only=True).to_docker()

        assert mount["Type"] == "bind"
        assert mount["Source"] == "/home/u/.aws"
        assert mount["Target"] == "/home/ubuntu/.aws"
        assert mount["ReadOnly"] is True
