"""Session lifecycle state machine.

Defines valid transitions and enforces them. Invalid transitions
raise ValueError rather than silently proceeding.

State Diagram:

    RUNNING ──┬──> COMPLETED   (exit code 0)
              │
              └──> ERROR       (nonzero exit, timeout, spawn error)

    RUNNING is entered once, at creation. Terminal states have no
    outgoing edges.
"""
from __future__ import annotations

from .models import SessionStatus

VALID_TRANSITIONS: dict[SessionStatus, set[SessionStatus]] = {
    SessionStatus.RUNNING: {
        SessionStatus.COMPLETED,
        SessionStatus.ERROR,
    },
    SessionStatus.COMPLETED: set(),
    SessionStatus.ERROR: set(),
}


def validate_transition(current: SessionStatus, target: SessionStatus) -> None:
    """Validate a state transition. Raises ValueError if invalid."""
    allowed = VALID_TRANSITIONS.get(current, set())
    if target not in allowed:
        allowed_str = ", ".join(s.value for s in allowed) or "none (terminal)"
        raise ValueError(
            f"Invalid state transition: {current.value} -> {target.value}. "
            f"Allowed from {current.value}: {allowed_str}"
        )
