"""Per-session event channel.

The session state machine puts events synchronously from stream
callbacks; exactly one subscriber consumes them in order until the
terminal event, after which the channel is closed.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from supercet.engine.events import StreamEvent
from supercet.engine.models import SessionState

logger = logging.getLogger(__name__)


class SessionChannel:
    """Single-subscriber async queue bridging one session to its consumer."""

    def __init__(self, state: SessionState, label: str = "") -> None:
        self.state = state
        self.label = label or state.tool.value
        self._queue: asyncio.Queue[StreamEvent] = asyncio.Queue()
        self._terminal_queued = False
        self._subscribed = False
        self._detached = False
        self._closed = False
        self._finished = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def detached(self) -> bool:
        return self._detached

    def put(self, event: StreamEvent) -> None:
        """Queue an event. Anything after the terminal event is dropped."""
        if self._terminal_queued:
            logger.debug("Channel %s: dropping post-terminal %s", self.label, event.event_type)
            return
        if event.is_terminal:
            self._terminal_queued = True
        if self._detached:
            return
        self._queue.put_nowait(event)

    async def events(self) -> AsyncIterator[StreamEvent]:
        """Yield events as they arrive. Stops after the terminal event."""
        if self._subscribed:
            raise RuntimeError(f"Channel {self.label} already has a subscriber")
        self._subscribed = True
        try:
            while True:
                event = await self._queue.get()
                yield event
                if event.is_terminal:
                    break
        finally:
            self._closed = True

    def detach(self) -> None:
        """Subscriber went away; stop queueing. The child keeps running."""
        if self._detached:
            return
        self._detached = True
        while not self._queue.empty():
            self._queue.get_nowait()
        logger.info(
            "Channel %s: subscriber detached, session continues unobserved",
            self.label,
        )

    def mark_finished(self) -> None:
        """Called once the supervising task has fully exited."""
        self._finished.set()

    async def wait_finished(self) -> None:
        """Wait until the child has been reaped and the supervisor is done."""
        await self._finished.wait()
