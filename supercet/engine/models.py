"""Core data models for the session engine.

All dataclasses and enums in one place to avoid circular imports.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import UnsupportedToolError


class ToolKind(str, Enum):
    """The external agent CLIs this engine knows how to drive."""
    CLAUDE = "claude"
    CODEX = "codex"

    @classmethod
    def parse(cls, value: object) -> ToolKind:
        """Resolve a caller-supplied tool name. Raises UnsupportedToolError."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        raise UnsupportedToolError(value, [m.value for m in cls])


class SessionMode(str, Enum):
    CREATE = "create"
    RESUME = "resume"


class SessionStatus(str, Enum):
    """Session lifecycle states. See lifecycle.py for transition rules."""
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


class FailureKind(str, Enum):
    """Why a session ended in SessionStatus.ERROR."""
    SPAWN = "spawn"
    EXIT = "exit"
    TIMEOUT = "timeout"
    INTERNAL = "internal"  # unexpected error while supervising


class StreamName(str, Enum):
    STDOUT = "stdout"
    STDERR = "stderr"


@dataclass(frozen=True)
class SessionRequest:
    """A validated request. Only built by validation.validate_request()."""
    tool: ToolKind
    prompt: str
    working_dir: str
    session_id: str | None = None
    model: str | None = None

    @property
    def mode(self) -> SessionMode:
        return SessionMode.RESUME if self.session_id else SessionMode.CREATE


@dataclass(frozen=True)
class CliCommand:
    """Executable plus discrete argv elements. Never joined into a shell string."""
    executable: str
    args: tuple[str, ...]

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]


@dataclass
class SessionState:
    """In-memory state of one headless session.

    Mutated only by HeadlessSession; callers treat it as read-only.
    """
    tool: ToolKind
    session_id: str | None = None
    status: SessionStatus = SessionStatus.RUNNING
    output: list[str] = field(default_factory=list)
    error: list[str] = field(default_factory=list)
    process: asyncio.subprocess.Process | None = field(default=None, repr=False)
    failure: FailureKind | None = None
    message: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not SessionStatus.RUNNING

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "status": self.status.value,
            "output": list(self.output),
            "error": list(self.error),
        }
