"""Process supervisor for one headless CLI run.

Spawns the child with asyncio.create_subprocess_exec (array-based, no
shell), pumps stdout and stderr concurrently through line framers into
the session, and enforces the session timeout. Finalization happens
exactly once: whichever of exit, timeout or spawn error gets there
first wins.
"""
from __future__ import annotations

import asyncio
import logging
import os

from .framing import LineFramer
from .models import CliCommand, FailureKind, SessionState, StreamName
from .session import HeadlessSession

logger = logging.getLogger(__name__)

_READ_CHUNK = 64 * 1024


def describe_duration(seconds: float) -> str:
    """Human wording for timeout messages ("10 minutes", "0.5 seconds")."""
    if seconds >= 60 and seconds % 60 == 0:
        minutes = int(seconds // 60)
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    return f"{seconds:g} second{'s' if seconds != 1 else ''}"


class ProcessSupervisor:
    """Runs one child process on behalf of a HeadlessSession."""

    def __init__(
        self,
        session: HeadlessSession,
        command: CliCommand,
        *,
        working_dir: str,
        timeout_seconds: float,
        kill_grace_seconds: float = 5.0,
        spawn_error_prefix: str | None = None,
    ) -> None:
        self._session = session
        self._command = command
        self._working_dir = working_dir
        self._timeout_seconds = timeout_seconds
        self._kill_grace_seconds = kill_grace_seconds
        self._spawn_error_prefix = spawn_error_prefix or f"Failed to start {session.tool}"
        self._process: asyncio.subprocess.Process | None = None
        self._timeout_handle: asyncio.TimerHandle | None = None
        self._kill_handle: asyncio.TimerHandle | None = None

    async def run(self) -> SessionState:
        """Spawn, pump and reap the child. Never raises for child failures."""
        session = self._session
        session.begin()

        try:
            # create_subprocess_exec passes args as an array, no shell
            proc = await asyncio.create_subprocess_exec(
                self._command.executable,
                *self._command.args,
                cwd=self._working_dir,
                env=os.environ.copy(),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as exc:
            # ValueError: argv or cwd rejected by the OS layer (embedded NUL)
            session.fail(FailureKind.SPAWN, f"{self._spawn_error_prefix}: {exc}")
            return session.state

        self._process = proc
        session.attach_process(proc)
        logger.info(
            "%s session started (pid=%d, cwd=%s, mode=%s)",
            session.tool, proc.pid, self._working_dir, session.request.mode.value,
        )

        loop = asyncio.get_running_loop()
        self._timeout_handle = loop.call_later(self._timeout_seconds, self._on_timeout)
        pumps = [
            asyncio.create_task(self._pump(proc.stdout, StreamName.STDOUT)),
            asyncio.create_task(self._pump(proc.stderr, StreamName.STDERR)),
        ]
        try:
            await asyncio.gather(*pumps)
            returncode = await proc.wait()
        except Exception as exc:
            logger.exception("%s session supervision failed", session.tool)
            for pump in pumps:
                pump.cancel()
            await asyncio.gather(*pumps, return_exceptions=True)
            self._cancel_timeout()
            session.fail(FailureKind.INTERNAL, f"{session.tool} session failed: {exc}")
            self._terminate()
            self._kill_handle = loop.call_later(self._kill_grace_seconds, self._force_kill)
            await proc.wait()
            self._kill_handle.cancel()
            self._kill_handle = None
            return session.state
        finally:
            self._cancel_timeout()

        if self._kill_handle is not None:
            self._kill_handle.cancel()
            self._kill_handle = None
        logger.debug("%s child pid=%d exited with %s", session.tool, proc.pid, returncode)
        session.complete(returncode)
        return session.state

    async def _pump(self, reader: asyncio.StreamReader | None, stream: StreamName) -> None:
        if reader is None:
            return
        framer = LineFramer()
        while True:
            chunk = await reader.read(_READ_CHUNK)
            if not chunk:
                break
            for line in framer.feed(chunk):
                self._session.handle_line(line, stream)
        tail = framer.flush()
        if tail is not None:
            self._session.handle_line(tail, stream)

    def _cancel_timeout(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None

    def _on_timeout(self) -> None:
        self._timeout_handle = None
        message = f"Session timed out after {describe_duration(self._timeout_seconds)}"
        if not self._session.fail(FailureKind.TIMEOUT, message):
            return
        self._terminate()
        loop = asyncio.get_running_loop()
        self._kill_handle = loop.call_later(self._kill_grace_seconds, self._force_kill)

    def _terminate(self) -> None:
        proc = self._process
        if proc is None or proc.returncode is not None:
            return
        try:
            proc.terminate()
        except ProcessLookupError:
            pass

    def _force_kill(self) -> None:
        self._kill_handle = None
        proc = self._process
        if proc is None or proc.returncode is not None:
            return
        logger.warning(
            "%s child pid=%d ignored SIGTERM for %ss, killing",
            self._session.tool, proc.pid, self._kill_grace_seconds,
        )
        try:
            proc.kill()
        except ProcessLookupError:
            pass
