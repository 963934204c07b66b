"""Errors raised by the container runner.

Each one is terminal for the run that raised it; nothing here is retried.
"""


class SimulatorError(Exception):
    """Base class for runner failures."""

    message = "simulator run failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class HomeNotFound(SimulatorError):
    message = "unable to determine your home directory"


class ClientUnavailable(SimulatorError):
    message = "unable to create docker client"


class CreateFailed(SimulatorError):
    message = "unable to create simulator container"


class AttachFailed(SimulatorError):
    message = "unable to attach to simulator container"


class StartFailed(SimulatorError):
    message = "unable to start simulator container"
