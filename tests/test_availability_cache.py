"""Preflight probing and caching of CLI availability."""
from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from supercet.engine.availability import AvailabilityCache
from supercet.engine.config import EngineConfig
from supercet.engine.errors import CliNotFoundError, CliPreflightFailedError
from supercet.engine.models import ToolKind
from supercet.engine.tools import build_tool_registry


def _cache(tmp_path: Path, claude_command: str, timeout: float = 5.0) -> AvailabilityCache:
    registry = build_tool_registry(EngineConfig(
        tool_commands={"claude": claude_command, "codex": str(tmp_path / "missing-codex")},
    ))
    return AvailabilityCache(registry, timeout_seconds=timeout)


@pytest.mark.asyncio
async def test_success_is_cached(tmp_path, fake_cli, workdir):
    cli = fake_cli("claude", "print('unused')")
    cache = _cache(tmp_path, str(cli.path))

    await cache.ensure_available(ToolKind.CLAUDE, str(workdir))
    await cache.ensure_available(ToolKind.CLAUDE, str(workdir))

    assert cache.is_available(ToolKind.CLAUDE)
    assert not cache.is_available(ToolKind.CODEX)
    assert cache.snapshot() == ["claude"]
    assert cli.preflights() == 1


@pytest.mark.asyncio
async def test_missing_executable(tmp_path, workdir):
    cache = _cache(tmp_path, str(tmp_path / "no-such-claude"))
    with pytest.raises(CliNotFoundError) as exc_info:
        await cache.ensure_available(ToolKind.CLAUDE, str(workdir))
    assert "command not found" in str(exc_info.value)
    assert not cache.is_available(ToolKind.CLAUDE)


@pytest.mark.asyncio
async def test_nonzero_preflight_reports_output(tmp_path, fake_cli, workdir):
    cli = fake_cli(
        "claude",
        "print('unused')",
        version_body="print('please log in', file=sys.stderr)\nsys.exit(3)",
    )
    cache = _cache(tmp_path, str(cli.path))

    with pytest.raises(CliPreflightFailedError) as exc_info:
        await cache.ensure_available(ToolKind.CLAUDE, str(workdir))
    assert "exit code 3" in str(exc_info.value)
    assert exc_info.value.details == "please log in"

    # Failures are not cached; the next request probes again.
    with pytest.raises(CliPreflightFailedError):
        await cache.ensure_available(ToolKind.CLAUDE, str(workdir))
    assert cli.preflights() == 2


@pytest.mark.asyncio
async def test_preflight_timeout(tmp_path, fake_cli, workdir):
    cli = fake_cli("claude", "print('unused')", version_body="time.sleep(30)")
    cache = _cache(tmp_path, str(cli.path), timeout=0.3)

    with pytest.raises(CliPreflightFailedError, match=r"timeout after 0\.3s"):
        await cache.ensure_available(ToolKind.CLAUDE, str(workdir))
    assert not cache.is_available(ToolKind.CLAUDE)


@pytest.mark.asyncio
async def test_preflight_spawn_permission_error(tmp_path, workdir):
    cache = _cache(tmp_path, "claude")
    with patch(
        "asyncio.create_subprocess_exec",
        new=AsyncMock(side_effect=PermissionError("denied")),
    ):
        with pytest.raises(CliPreflightFailedError, match="could not start"):
            await cache.ensure_available(ToolKind.CLAUDE, str(workdir))
