"""Environment and YAML configuration."""
from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml

from supercet.engine.config import EngineConfig
from supercet.engine.errors import UnsupportedToolError
from supercet.engine.yaml_config import load_yaml_config


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    config = EngineConfig()
    assert config.session_timeout_seconds == 600.0
    assert config.preflight_timeout_seconds == 5.0
    assert config.default_tool == "claude"
    assert config.server_cwd == os.getcwd()
    assert config.allowed_roots == [config.server_cwd, config.home_dir]


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("SUPERCET_SESSION_TIMEOUT", "30")
    monkeypatch.setenv("SUPERCET_PREFLIGHT_TIMEOUT", "2.5")
    monkeypatch.setenv("SUPERCET_CODEX_COMMAND", "/opt/codex")
    monkeypatch.setenv("SUPERCET_CWD", str(tmp_path))
    monkeypatch.setenv("SUPERCET_LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("SUPERCET_CLAUDE_COMMAND", raising=False)

    config = EngineConfig.from_env()

    assert config.session_timeout_seconds == 30.0
    assert config.preflight_timeout_seconds == 2.5
    assert config.tool_commands == {"codex": "/opt/codex"}
    assert config.server_cwd == str(tmp_path)
    assert config.log_level == "DEBUG"


def test_yaml_overlays_base(tmp_path: Path):
    path = tmp_path / "supercet.yaml"
    path.write_text(
        "engine:\n"
        "  session_timeout_seconds: 900\n"
        "  default_tool: codex\n"
        f"  cwd: {tmp_path}\n"
        "  colour: blue\n"
        "tools:\n"
        "  claude:\n"
        "    command: /opt/claude/bin/claude\n",
        encoding="utf-8",
    )
    base = EngineConfig(tool_commands={"codex": "/usr/local/bin/codex"}, log_level="WARNING")

    config = load_yaml_config(path, base=base)

    assert config.session_timeout_seconds == 900.0
    assert config.default_tool == "codex"
    assert config.server_cwd == str(tmp_path)
    assert config.log_level == "WARNING"
    assert config.tool_commands == {
        "codex": "/usr/local/bin/codex",
        "claude": "/opt/claude/bin/claude",
    }
    assert base.tool_commands == {"codex": "/usr/local/bin/codex"}


def test_empty_yaml_keeps_base(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    base = EngineConfig(session_timeout_seconds=12)
    assert load_yaml_config(path, base=base).session_timeout_seconds == 12


def test_unknown_tool_in_yaml(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("tools:\n  gemini:\n    command: gemini\n", encoding="utf-8")
    with pytest.raises(UnsupportedToolError):
        load_yaml_config(path)


def test_non_mapping_yaml(tmp_path: Path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml_config(path)


def test_missing_and_malformed_files(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_yaml_config(tmp_path / "missing.yaml")
    broken = tmp_path / "broken.yaml"
    broken.write_text("engine: [unclosed\n", encoding="utf-8")
    with pytest.raises(yaml.YAMLError):
        load_yaml_config(broken)
