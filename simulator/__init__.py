# simulator - A throwaway control-plane workspace
"""
simulator - Run commands inside an ephemeral simulator container.

Each run gets its own container, which is always stopped and removed afterwards.
"""

from simulator.config import Config
from simulator.errors import (
    AttachFailed,
    ClientUnavailable,
    CreateFailed,
    HomeNotFound,
    SimulatorError,
    StartFailed,
)
from simulator.models import MountSpec, RunRequest
from simulator.runner import ContainerRunner

__all__ = [
    "ContainerRunner",
    "Config",
    "MountSpec",
    "RunRequest",
    "SimulatorError",
    "HomeNotFound",
    "ClientUnavailable",
    "CreateFailed",
    "AttachFailed",
    "StartFailed",
]

__version__ = "0.1.0"
