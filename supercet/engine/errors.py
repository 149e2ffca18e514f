"""Exception hierarchy for the headless session engine.

Only pre-spawn rejections are raised. Once a child process exists,
failures (spawn error, nonzero exit, timeout) are recorded on the
session and surface as a terminal Failed event instead.
"""
from __future__ import annotations


class HeadlessCliError(Exception):
    """Base exception for all session engine errors."""


class InvalidInputError(HeadlessCliError):
    """A session request failed validation before anything was spawned."""


class InvalidPromptError(InvalidInputError):
    def __init__(self, reason: str = "Prompt must be a non-empty string"):
        self.reason = reason
        super().__init__(reason)


class InvalidWorkingDirError(InvalidInputError):
    """Working directory is missing, not a directory, or out of bounds."""
    def __init__(self, path: object, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(reason)


class InvalidSessionIdError(InvalidInputError):
    def __init__(self, session_id: object):
        self.session_id = session_id
        super().__init__("Invalid session ID format (must be a valid UUID)")


class InvalidModelError(InvalidInputError):
    def __init__(self, model: object, reason: str = "Model must be a string"):
        self.model = model
        super().__init__(reason)


class UnsupportedToolError(InvalidInputError):
    """Requested tool name is not one of the supported CLIs."""
    def __init__(self, value: object, supported: list[str]):
        self.value = value
        self.supported = supported
        super().__init__(
            f"Unsupported cli '{value}'. "
            f"Supported values are: {', '.join(supported)}"
        )


class CliUnavailableError(HeadlessCliError):
    """The target CLI cannot be run on this host."""


class CliNotFoundError(CliUnavailableError):
    def __init__(self, tool: str, executable: str):
        self.tool = tool
        self.executable = executable
        super().__init__(
            f"'{executable}' CLI is not available on this system "
            f"(command not found)."
        )


class CliPreflightFailedError(CliUnavailableError):
    """Preflight probe timed out, exited nonzero, or could not start."""
    def __init__(self, tool: str, reason: str, details: str = ""):
        self.tool = tool
        self.reason = reason
        self.details = details
        message = f"'{tool}' {reason}"
        if details:
            message = f"{message}: {details}"
        super().__init__(message)
