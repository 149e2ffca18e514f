from __future__ import annotations

from pathlib import Path

import pytest

from fake_cli import FakeCli, write_fake_cli
from supercet.engine.config import EngineConfig
from supercet.engine.engine import HeadlessCliEngine


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def fake_cli(tmp_path: Path):
    bindir = tmp_path / "bin"

    def _make(name: str, body: str, **kwargs) -> FakeCli:
        return write_fake_cli(bindir, name, body, **kwargs)

    return _make


@pytest.fixture
def make_engine(tmp_path: Path):
    """Build an engine whose allowed roots are tmp_path and whose tools are fakes.

    A tool with no fake points at a path that does not exist, so no
    real CLI on the host is ever run.
    """

    def _make(
        claude: FakeCli | None = None,
        codex: FakeCli | None = None,
        **overrides,
    ) -> HeadlessCliEngine:
        commands = {
            "claude": str(claude.path) if claude else str(tmp_path / "missing-claude"),
            "codex": str(codex.path) if codex else str(tmp_path / "missing-codex"),
        }
        settings = {
            "server_cwd": str(tmp_path),
            "home_dir": str(tmp_path),
            "tool_commands": commands,
            "session_timeout_seconds": 20.0,
            "kill_grace_seconds": 1.0,
        }
        settings.update(overrides)
        return HeadlessCliEngine(EngineConfig(**settings))

    return _make
