"""Headless CLI session engine. Drives agent CLIs as supervised subprocesses."""
from .models import (
    CliCommand,
    FailureKind,
    SessionMode,
    SessionRequest,
    SessionState,
    SessionStatus,
    StreamName,
    ToolKind,
)
from .config import EngineConfig
from .events import (
    Completed,
    ErrorOutput,
    Failed,
    Output,
    SessionIdentified,
    StreamEvent,
)
from .errors import (
    CliNotFoundError,
    CliPreflightFailedError,
    CliUnavailableError,
    HeadlessCliError,
    InvalidInputError,
    InvalidModelError,
    InvalidPromptError,
    InvalidSessionIdError,
    InvalidWorkingDirError,
    UnsupportedToolError,
)

__all__ = [
    # Core engine (lazy import to avoid circular deps)
    "HeadlessCliEngine",
    "AvailabilityCache",
    # Models
    "CliCommand",
    "FailureKind",
    "SessionMode",
    "SessionRequest",
    "SessionState",
    "SessionStatus",
    "StreamName",
    "ToolKind",
    # Config
    "EngineConfig",
    "load_yaml_config",
    # Events
    "Completed",
    "ErrorOutput",
    "Failed",
    "Output",
    "SessionIdentified",
    "StreamEvent",
    # Errors
    "CliNotFoundError",
    "CliPreflightFailedError",
    "CliUnavailableError",
    "HeadlessCliError",
    "InvalidInputError",
    "InvalidModelError",
    "InvalidPromptError",
    "InvalidSessionIdError",
    "InvalidWorkingDirError",
    "UnsupportedToolError",
]


def __getattr__(name: str):
    if name == "HeadlessCliEngine":
        from .engine import HeadlessCliEngine
        return HeadlessCliEngine
    if name == "AvailabilityCache":
        from .availability import AvailabilityCache
        return AvailabilityCache
    if name == "load_yaml_config":
        from .yaml_config import load_yaml_config
        return load_yaml_config
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
