"""Argv construction for each CLI dialect."""
from __future__ import annotations

import pytest

from supercet.engine.models import SessionMode
from supercet.engine.tools import ClaudeDialect, CodexDialect, build_tool_registry
from supercet.engine.config import EngineConfig
from supercet.engine.models import ToolKind

SESSION_ID = "11111111-1111-1111-1111-111111111111"


def test_claude_create_args():
    cmd = ClaudeDialect().build_command(SessionMode.CREATE, "Summarize the repo")
    assert cmd.argv == [
        "claude", "-p", "--verbose",
        "--permission-mode", "acceptEdits",
        "--output-format", "stream-json",
        "Summarize the repo",
    ]


def test_claude_resume_with_model():
    cmd = ClaudeDialect().build_command(
        SessionMode.RESUME, "continue", session_id=SESSION_ID, model="opus",
    )
    assert cmd.args == (
        "-p", "--verbose",
        "--resume", SESSION_ID,
        "--model", "opus",
        "--permission-mode", "acceptEdits",
        "--output-format", "stream-json",
        "continue",
    )


def test_codex_create_args():
    cmd = CodexDialect().build_command(SessionMode.CREATE, "fix tests", model="o3")
    assert cmd.argv == [
        "codex", "exec", "--json", "--skip-git-repo-check",
        "--sandbox", "workspace-write",
        "--model", "o3",
        "fix tests",
    ]


def test_codex_resume_args():
    cmd = CodexDialect().build_command(SessionMode.RESUME, "go on", session_id=SESSION_ID)
    assert cmd.argv == [
        "codex", "exec", "resume", "--json", "--skip-git-repo-check",
        SESSION_ID, "go on",
    ]


@pytest.mark.parametrize("dialect_cls", [ClaudeDialect, CodexDialect])
def test_prompt_is_one_argument_even_with_shell_metacharacters(dialect_cls):
    prompt = 'rm -rf / ; echo "$(whoami)" && `ls` | cat > out'
    cmd = dialect_cls().build_command(SessionMode.CREATE, prompt)
    assert cmd.args[-1] == prompt
    assert cmd.args.count(prompt) == 1


@pytest.mark.parametrize("dialect_cls", [ClaudeDialect, CodexDialect])
def test_empty_model_adds_no_flag(dialect_cls):
    cmd = dialect_cls().build_command(SessionMode.CREATE, "hi", model=None)
    assert "--model" not in cmd.args


def test_resume_without_session_id_is_rejected():
    with pytest.raises(ValueError):
        ClaudeDialect().build_command(SessionMode.RESUME, "hi")


def test_preflight_probe_is_version():
    assert ClaudeDialect().preflight_args() == ["--version"]
    assert CodexDialect().preflight_args() == ["--version"]


def test_registry_applies_command_overrides():
    registry = build_tool_registry(
        EngineConfig(tool_commands={"codex": "/opt/codex/bin/codex"})
    )
    assert registry.get(ToolKind.CODEX).command == "/opt/codex/bin/codex"
    assert registry.get(ToolKind.CLAUDE).command == "claude"
    assert registry.list_names() == ["claude", "codex"]
    cmd = registry.get(ToolKind.CODEX).build_command(SessionMode.CREATE, "hi")
    assert cmd.executable == "/opt/codex/bin/codex"
