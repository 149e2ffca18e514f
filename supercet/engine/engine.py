"""HeadlessCliEngine, the service root.

Owns the configuration, the dialect registry and the availability
cache, and exposes the blocking (create_session / resume_session)
and streaming (subscribe) operations. Both paths go through
open_session(), so spawning and framing exist in one place.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping
from typing import Any

from supercet.adapters.channel import SessionChannel
from supercet.adapters.delivery import collect

from .availability import AvailabilityCache
from .config import EngineConfig
from .events import StreamEvent
from .models import FailureKind, SessionMode, SessionRequest, SessionState, ToolKind
from .session import HeadlessSession
from .supervisor import ProcessSupervisor
from .tools import ToolRegistry, build_tool_registry
from .validation import validate_request

logger = logging.getLogger(__name__)


class HeadlessCliEngine:
    """Runs headless agent CLI sessions as supervised subprocesses."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        registry: ToolRegistry | None = None,
        availability: AvailabilityCache | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.registry = registry or build_tool_registry(self.config)
        self.availability = availability or AvailabilityCache(
            self.registry,
            timeout_seconds=self.config.preflight_timeout_seconds,
        )
        # Strong references so running sessions are not garbage collected
        # when their subscriber goes away.
        self._tasks: set[asyncio.Task[SessionState]] = set()

    @property
    def active_sessions(self) -> int:
        return len(self._tasks)

    def validate(
        self,
        tool: object,
        mode: SessionMode,
        prompt: object,
        working_dir: object,
        *,
        session_id: object = None,
        model: object = None,
    ) -> SessionRequest:
        return validate_request(
            tool,
            prompt,
            working_dir,
            self.config.allowed_roots,
            session_id=session_id,
            model=model,
            resume=mode is SessionMode.RESUME,
        )

    async def open_session(self, request: SessionRequest) -> SessionChannel:
        """Check availability, then start the child and return its channel.

        Raises CliUnavailableError before anything is spawned. Every
        later failure arrives on the channel as a Failed event.
        """
        await self.availability.ensure_available(request.tool, request.working_dir)

        dialect = self.registry.get(request.tool)
        command = dialect.build_command(
            request.mode,
            request.prompt,
            session_id=request.session_id,
            model=request.model,
        )
        if request.mode is SessionMode.RESUME:
            prefix = f"Failed to resume {dialect.name} session"
        else:
            prefix = f"Failed to start {dialect.name}"

        channel: SessionChannel | None = None

        def emit(event: StreamEvent) -> None:
            channel.put(event)

        session = HeadlessSession(request, dialect, emit)
        channel = SessionChannel(session.state, label=f"{dialect.name}:{request.mode.value}")
        supervisor = ProcessSupervisor(
            session,
            command,
            working_dir=request.working_dir,
            timeout_seconds=self.config.session_timeout_seconds,
            kill_grace_seconds=self.config.kill_grace_seconds,
            spawn_error_prefix=prefix,
        )

        task = asyncio.create_task(supervisor.run())
        self._tasks.add(task)

        def _done(t: asyncio.Task[SessionState]) -> None:
            self._tasks.discard(t)
            if t.cancelled():
                session.fail(FailureKind.INTERNAL, f"{dialect.name} session was cancelled")
            elif (exc := t.exception()) is not None:
                logger.error("%s supervisor crashed", dialect.name, exc_info=exc)
                session.fail(FailureKind.INTERNAL, f"{dialect.name} session failed: {exc}")
            channel.mark_finished()

        task.add_done_callback(_done)
        return channel

    async def run_session(self, request: SessionRequest) -> SessionState:
        channel = await self.open_session(request)
        return await collect(channel)

    async def create_session(
        self,
        tool: ToolKind | str,
        prompt: str,
        working_dir: str,
        model: str | None = None,
    ) -> SessionState:
        """Start a new session and wait for it to finish."""
        request = self.validate(tool, SessionMode.CREATE, prompt, working_dir, model=model)
        return await self.run_session(request)

    async def resume_session(
        self,
        tool: ToolKind | str,
        session_id: str,
        prompt: str,
        working_dir: str,
        model: str | None = None,
    ) -> SessionState:
        """Continue an existing session and wait for it to finish."""
        request = self.validate(
            tool, SessionMode.RESUME, prompt, working_dir,
            session_id=session_id, model=model,
        )
        return await self.run_session(request)

    async def subscribe(
        self,
        tool: ToolKind | str,
        operation: SessionMode | str,
        request: Mapping[str, Any],
    ) -> AsyncIterator[StreamEvent]:
        """Yield the events of one session in order, ending after the terminal one.

        *request* carries prompt, workingDir (or working_dir), and
        optionally sessionId and model. Validation and availability
        errors are raised before the first event.
        """
        mode = SessionMode(operation)
        checked = self.validate(
            tool,
            mode,
            request.get("prompt"),
            request.get("workingDir", request.get("working_dir")),
            session_id=request.get("sessionId", request.get("session_id")),
            model=request.get("model"),
        )
        channel = await self.open_session(checked)
        try:
            async for event in channel.events():
                yield event
        finally:
            if not channel.state.is_terminal:
                channel.detach()

    async def wait_idle(self) -> None:
        """Wait for every running session's child to be reaped."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
