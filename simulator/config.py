"""Runner configuration loaded from the environment."""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Sequence

from simulator.models import AWS_DIR, RunRequest

DEFAULT_IMAGE = "controlplane/simulator:latest"
DEFAULT_CLEANUP_TIMEOUT = 300.0  # 5 minutes

# Host AWS SDK settings forwarded into the container when set
AWS_PASSTHROUGH = [
    "AWS_PROFILE",
    "AWS_REGION",
    "AWS_DEFAULT_REGION",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_SESSION_TOKEN",
]

_TRUE = {"1", "true", "yes", "on"}


def aws_env(environ: Optional[dict] = None) -> list[str]:
    """Environment for the AWS SDK inside the container."""
    environ = os.environ if environ is None else environ
    env = [
        f"AWS_SHARED_CREDENTIALS_FILE={AWS_DIR}/credentials",
        f"AWS_CONFIG_FILE={AWS_DIR}/config",
    ]
    for name in AWS_PASSTHROUGH:
        value = environ.get(name)
        if value:
            env.append(f"{name}={value}")
    return env


@dataclass(frozen=True)
class Config:
    """Settings for a simulator run."""
    base_dir: Path
    dev: bool = False
    image: str = DEFAULT_IMAGE
    stop_timeout: Optional[int] = None  # None leaves it to the engine
    cleanup_timeout: float = DEFAULT_CLEANUP_TIMEOUT

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from SIMULATOR_* environment variables."""
        base_dir = os.getenv("SIMULATOR_BASE_DIR")
        stop_timeout = os.getenv("SIMULATOR_STOP_TIMEOUT")

        return cls(
            base_dir=Path(base_dir).expanduser() if base_dir else Path.home() / ".simulator",
            dev=os.getenv("SIMULATOR_DEV", "false").strip().lower() in _TRUE,
            image=os.getenv("SIMULATOR_IMAGE", DEFAULT_IMAGE),
            stop_timeout=int(stop_timeout) if stop_timeout else None,
            cleanup_timeout=float(
                os.getenv("SIMULATOR_CLEANUP_TIMEOUT", str(DEFAULT_CLEANUP_TIMEOUT))
            ),
        )

    def override(self, **changes) -> "Config":
        """Return a copy with the non-None values in ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def to_request(self, command: Sequence[str]) -> RunRequest:
        return RunRequest(
            base_dir=self.base_dir,
            dev=self.dev,
            image=self.image,
            command=tuple(command),
        )
