"""Internal models for the container runner."""

from dataclasses import dataclass
from pathlib import Path

from docker.types import Mount

# Workspace subdirectories under the base directory
HOME = "home"
SCENARIOS = "scenarios"
PACKER = "packer"
TERRAFORM = "terraform"

# Fixed paths inside the simulator container
HOME_DIR = "/home/ubuntu"
AWS_DIR = "/home/ubuntu/.aws"
ANSIBLE_DIR = "/simulator/scenarios"
PACKER_TEMPLATE_DIR = "/simulator/packer"
TERRAFORM_DIR = "/simulator/terraform"


@dataclass(frozen=True)
class MountSpec:
    """A single bind mount from the host into the container."""
    source: str
    target: str
    read_only: bool = False

    def to_docker(self) -> Mount:
        return Mount(
            target=self.target,
            source=self.source,
            type="bind",
            read_only=self.read_only,
        )


@dataclass(frozen=True)
class RunRequest:
    """Everything a single run needs; nothing here outlives the run."""
    base_dir: Path
    dev: bool
    image: str
    command: tuple[str, ...]

    def mounts(self, home: Path) -> tuple[MountSpec, ...]:
        """Build the mount set for this request.

        The persistent home and the user's AWS credentials are always
        mounted. Dev mode additionally exposes the scenario, packer and
        terraform directories of the workspace.
        """
        mounts = [
            MountSpec(str(self.base_dir / HOME), HOME_DIR),
            MountSpec(str(home / ".aws"), AWS_DIR, read_only=True),
        ]

        if self.dev:
            mounts += [
                MountSpec(str(self.base_dir / SCENARIOS), ANSIBLE_DIR),
                MountSpec(str(self.base_dir / PACKER), PACKER_TEMPLATE_DIR),
                MountSpec(str(self.base_dir / TERRAFORM), TERRAFORM_DIR),
            ]

        return tuple(mounts)
