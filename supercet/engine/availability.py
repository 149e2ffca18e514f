"""Per-tool availability cache.

The first request for a tool runs a short `--version` probe. Once a
probe succeeds the tool stays marked available until the process
restarts; later requests skip the probe entirely.
"""
from __future__ import annotations

import asyncio
import logging
import os

from .errors import CliNotFoundError, CliPreflightFailedError
from .models import ToolKind
from .tools import ToolRegistry

logger = logging.getLogger(__name__)


class AvailabilityCache:
    """Memoized "is this CLI runnable here" check.

    Add-only. Concurrent first calls for the same tool may both probe;
    inserting the same tool twice is harmless.
    """

    def __init__(self, registry: ToolRegistry, timeout_seconds: float = 5.0) -> None:
        self._registry = registry
        self._timeout_seconds = timeout_seconds
        self._available: set[ToolKind] = set()

    def is_available(self, tool: ToolKind) -> bool:
        return tool in self._available

    def snapshot(self) -> list[str]:
        return sorted(t.value for t in self._available)

    async def ensure_available(self, tool: ToolKind, working_dir: str) -> None:
        """Return once *tool* is known to run. Raises CliUnavailableError."""
        if tool in self._available:
            return

        dialect = self._registry.get(tool)
        argv = [dialect.command, *dialect.preflight_args()]
        logger.debug("Preflight %s: %s (cwd=%s)", tool.value, argv, working_dir)

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                cwd=working_dir,
                env=os.environ.copy(),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            logger.warning("Preflight %s: '%s' not found", tool.value, dialect.command)
            raise CliNotFoundError(tool.value, dialect.command) from None
        except OSError as exc:
            raise CliPreflightFailedError(
                tool.value, f"preflight check could not start ({exc})",
            ) from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
            logger.warning(
                "Preflight %s timed out after %ss", tool.value, self._timeout_seconds,
            )
            raise CliPreflightFailedError(
                tool.value,
                f"is installed but failed preflight "
                f"(timeout after {self._timeout_seconds:g}s)",
            ) from None

        if proc.returncode != 0:
            details = "\n".join(
                part.decode("utf-8", errors="replace")
                for part in (stdout, stderr)
            ).strip()
            logger.warning(
                "Preflight %s exited with code %s", tool.value, proc.returncode,
            )
            raise CliPreflightFailedError(
                tool.value,
                f"CLI is available but failed preflight with exit code "
                f"{proc.returncode}",
                details,
            )

        self._available.add(tool)
        logger.info("Tool %s is available (%s)", tool.value, dialect.command)
