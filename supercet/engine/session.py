"""Session state machine.

Owns one SessionState and is the only thing that mutates it: framed
lines are appended to the output/error logs, the session id is
latched at most once, and the single terminal transition emits the
terminal event. Every other trigger after that is a no-op.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from .events import (
    Completed,
    ErrorOutput,
    Failed,
    Output,
    SessionIdentified,
    StreamEvent,
)
from .lifecycle import validate_transition
from .models import (
    FailureKind,
    SessionRequest,
    SessionState,
    SessionStatus,
    StreamName,
)
from .tools import ToolDialect

logger = logging.getLogger(__name__)

EventSink = Callable[[StreamEvent], None]

COMPLETED_MESSAGE = "Session completed successfully"


class HeadlessSession:
    """State machine for one headless CLI run."""

    def __init__(
        self,
        request: SessionRequest,
        dialect: ToolDialect,
        emit: EventSink,
    ) -> None:
        self.request = request
        self._dialect = dialect
        self._emit = emit
        # A resume run already knows its identity.
        self.state = SessionState(tool=request.tool, session_id=request.session_id)

    @property
    def tool(self) -> str:
        return self.request.tool.value

    def begin(self) -> None:
        """Announce an already-known session id before any output."""
        if self.state.session_id:
            self._emit(SessionIdentified(session_id=self.state.session_id))

    def attach_process(self, process: asyncio.subprocess.Process) -> None:
        self.state.process = process

    def handle_line(self, line: str, stream: StreamName) -> None:
        """Process one framed line from stdout or stderr."""
        if self.state.is_terminal:
            logger.debug("%s: dropping %s line after finalization", self.tool, stream.value)
            return
        if not line.strip():
            return

        if stream is StreamName.STDOUT:
            self.state.output.append(line)
        else:
            self.state.error.append(line)

        if self.state.session_id is None:
            found = self._dialect.extract_session_id(line)
            if found:
                self.state.session_id = found
                logger.info("%s: session identified as %s", self.tool, found)
                self._emit(SessionIdentified(session_id=found))

        if stream is StreamName.STDOUT:
            self._emit(Output(line=line))
        else:
            self._emit(ErrorOutput(line=line))

    def complete(self, returncode: int | None) -> bool:
        """Finalize from a process exit. Returns False if already final."""
        if returncode == 0:
            return self._finalize(
                SessionStatus.COMPLETED, None, COMPLETED_MESSAGE,
            )
        return self.fail(
            FailureKind.EXIT, f"{self.tool} exited with code {returncode}",
        )

    def fail(self, kind: FailureKind, message: str) -> bool:
        """Finalize as an error. Returns False if already final."""
        return self._finalize(SessionStatus.ERROR, kind, message)

    def _finalize(
        self,
        status: SessionStatus,
        kind: FailureKind | None,
        message: str,
    ) -> bool:
        if self.state.is_terminal:
            logger.debug(
                "%s: ignoring %s finalization, already %s",
                self.tool, status.value, self.state.status.value,
            )
            return False
        validate_transition(self.state.status, status)
        self.state.status = status
        self.state.failure = kind
        self.state.message = message

        if status is SessionStatus.COMPLETED:
            logger.info("%s session %s completed", self.tool, self.state.session_id)
            self._emit(Completed(message=message))
        else:
            logger.warning(
                "%s session %s failed (%s): %s",
                self.tool, self.state.session_id, kind.value if kind else "?", message,
            )
            self._emit(Failed(message=message))
        return True
