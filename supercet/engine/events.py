"""Event types produced by a running session.

A session emits, in order: at most one SessionIdentified, any number
of Output / ErrorOutput, then exactly one terminal Completed or Failed.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StreamEvent:
    """Base event from a headless session."""
    event_type: str = ""

    @property
    def is_terminal(self) -> bool:
        return False


@dataclass(frozen=True)
class Output(StreamEvent):
    event_type: str = "stdout"
    line: str = ""


@dataclass(frozen=True)
class ErrorOutput(StreamEvent):
    event_type: str = "stderr"
    line: str = ""


@dataclass(frozen=True)
class SessionIdentified(StreamEvent):
    event_type: str = "session_id"
    session_id: str = ""


@dataclass(frozen=True)
class Completed(StreamEvent):
    event_type: str = "complete"
    message: str = ""

    @property
    def is_terminal(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed(StreamEvent):
    event_type: str = "error"
    message: str = ""

    @property
    def is_terminal(self) -> bool:
        return True
