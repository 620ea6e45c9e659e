"""
Execution-specific errors.

These are raised synchronously while a job is being set up, before the
converter is running. Once a converter has started, failures are
recorded on the job instead of raised.
"""


class ExecutionError(Exception):
    """Base exception for converter setup failures."""

    pass


class ConverterNotFoundError(ExecutionError):
    """
    The ffmpeg binary could not be located.

    Raised when an explicit path is configured but missing or not
    executable, or when nothing is found on PATH or in the usual
    install locations.
    """

    pass


class ConverterLaunchError(ExecutionError):
    """The operating system refused to start the converter process."""

    def __init__(self, command: str, reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"Failed to start converter '{command}': {reason}")
