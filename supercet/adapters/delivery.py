"""Delivery adapters over a SessionChannel.

- collect(): blocking accumulator, returns the final SessionState.
- StreamForwarder: pushes each event to one live subscriber under
  "<tool>:session:<suffix>" channel names.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from supercet.engine.errors import HeadlessCliError
from supercet.engine.events import (
    Completed,
    ErrorOutput,
    Failed,
    Output,
    SessionIdentified,
    StreamEvent,
)
from supercet.engine.models import SessionMode, SessionState, ToolKind

from .channel import SessionChannel

if TYPE_CHECKING:
    from supercet.engine.engine import HeadlessCliEngine

logger = logging.getLogger(__name__)

# Signature: async def send(event_name, payload) -> None
SendCallback = Callable[[str, dict[str, Any]], Awaitable[None]]

# Raised by transports when the subscriber has gone away.
DISCONNECT_ERRORS = (ConnectionError,)


async def collect(
    channel: SessionChannel,
    events: list[StreamEvent] | None = None,
) -> SessionState:
    """Wait for the terminal event and return the complete session state.

    If *events* is given, every event is appended to it in order.
    """
    async for event in channel.events():
        if events is not None:
            events.append(event)
    return channel.state


def event_payload(event: StreamEvent) -> tuple[str, dict[str, Any]]:
    """Map an event to its (suffix, payload) wire form."""
    if isinstance(event, SessionIdentified):
        return "id", {"sessionId": event.session_id}
    if isinstance(event, Output):
        return "output", {"data": event.line}
    if isinstance(event, ErrorOutput):
        return "error:output", {"data": event.line}
    if isinstance(event, Completed):
        return "complete", {"message": event.message}
    if isinstance(event, Failed):
        return "error", {"error": event.message}
    raise TypeError(f"Unknown stream event: {event!r}")


class StreamForwarder:
    """Forwards one session's events, in order, to a single subscriber."""

    def __init__(
        self,
        tool: ToolKind,
        operation: SessionMode,
        send: SendCallback,
    ) -> None:
        self.tool = tool
        self.operation = operation
        self.prefix = f"{tool.value}:session"
        self._send = send
        self.disconnected = False

    async def emit(self, suffix: str, payload: dict[str, Any]) -> None:
        await self._send(f"{self.prefix}:{suffix}", payload)

    async def reject(self, message: str) -> None:
        """Report a pre-spawn failure as the one and only error event."""
        await self.emit("error", {"error": message})

    async def run(
        self,
        engine: HeadlessCliEngine,
        request: dict[str, Any],
    ) -> bool:
        """Drive a session through engine.subscribe() and forward it.

        Returns True if the terminal event reached the subscriber.
        """
        if self.operation is SessionMode.RESUME:
            notice = f"Resuming {self.tool.value} session..."
        else:
            notice = f"{self.tool.value} session starting..."

        try:
            await self.emit("started", {"message": notice})
        except DISCONNECT_ERRORS:
            self.disconnected = True
            return False

        events = engine.subscribe(self.tool, self.operation, request)
        try:
            async for event in events:
                suffix, payload = event_payload(event)
                try:
                    await self.emit(suffix, payload)
                except DISCONNECT_ERRORS as exc:
                    # The child keeps running; only delivery stops.
                    logger.info(
                        "%s subscriber disconnected during %s: %s",
                        self.prefix, self.operation.value, exc,
                    )
                    self.disconnected = True
                    return False
                if event.is_terminal:
                    return True
        except HeadlessCliError as exc:
            logger.info("%s %s rejected: %s", self.prefix, self.operation.value, exc)
            try:
                await self.reject(str(exc))
            except DISCONNECT_ERRORS:
                self.disconnected = True
            return False
        finally:
            await events.aclose()
        return False
