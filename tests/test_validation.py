"""Request validation runs before anything is spawned."""
from __future__ import annotations

from pathlib import Path

import pytest

from supercet.engine.errors import (
    InvalidModelError,
    InvalidPromptError,
    InvalidSessionIdError,
    InvalidWorkingDirError,
    UnsupportedToolError,
)
from supercet.engine.models import SessionMode, ToolKind
from supercet.engine.validation import (
    validate_model,
    validate_prompt,
    validate_request,
    validate_session_id,
    validate_working_dir,
)

SESSION_ID = "11111111-1111-1111-1111-111111111111"


def test_working_dir_inside_root_is_resolved(tmp_path: Path):
    project = tmp_path / "project"
    (project / "src").mkdir(parents=True)
    result = validate_working_dir(str(project / "src" / ".."), [str(tmp_path)])
    assert result == str(project.resolve())


def test_root_itself_is_allowed(tmp_path: Path):
    assert validate_working_dir(str(tmp_path), [str(tmp_path)]) == str(tmp_path.resolve())


def test_missing_working_dir(tmp_path: Path):
    with pytest.raises(InvalidWorkingDirError, match="does not exist"):
        validate_working_dir(str(tmp_path / "nope"), [str(tmp_path)])


def test_working_dir_must_be_directory(tmp_path: Path):
    target = tmp_path / "file.txt"
    target.write_text("x")
    with pytest.raises(InvalidWorkingDirError, match="is not a directory"):
        validate_working_dir(str(target), [str(tmp_path)])


def test_working_dir_outside_roots(tmp_path: Path):
    root = tmp_path / "root"
    other = tmp_path / "other"
    root.mkdir()
    other.mkdir()
    with pytest.raises(InvalidWorkingDirError, match="must be within"):
        validate_working_dir(str(other), [str(root)])


def test_sibling_with_shared_prefix_is_outside(tmp_path: Path):
    root = tmp_path / "proj"
    sibling = tmp_path / "project2"
    root.mkdir()
    sibling.mkdir()
    with pytest.raises(InvalidWorkingDirError):
        validate_working_dir(str(sibling), [str(root)])


def test_symlink_escaping_root_is_rejected(tmp_path: Path):
    root = tmp_path / "root"
    outside = tmp_path / "outside"
    root.mkdir()
    outside.mkdir()
    (root / "link").symlink_to(outside, target_is_directory=True)
    with pytest.raises(InvalidWorkingDirError):
        validate_working_dir(str(root / "link"), [str(root)])


def test_tilde_expands_to_home(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    (tmp_path / "work").mkdir()
    assert validate_working_dir("~/work", [str(tmp_path)]) == str((tmp_path / "work").resolve())


@pytest.mark.parametrize("value", ["", None, 3, ["a"]])
def test_bad_prompts(value):
    with pytest.raises(InvalidPromptError):
        validate_prompt(value)


def test_session_id_accepts_any_case():
    upper = SESSION_ID.upper().replace("1", "A")
    assert validate_session_id(upper) == upper


@pytest.mark.parametrize("value", ["abc", SESSION_ID + "1", "", None])
def test_bad_session_ids(value):
    with pytest.raises(InvalidSessionIdError, match="must be a valid UUID"):
        validate_session_id(value)


def test_model_normalization():
    assert validate_model(None) is None
    assert validate_model("") is None
    assert validate_model("opus") == "opus"
    with pytest.raises(InvalidModelError):
        validate_model(7)


def test_unsupported_tool_names_supported_values():
    with pytest.raises(UnsupportedToolError) as exc_info:
        ToolKind.parse("gemini")
    assert str(exc_info.value) == (
        "Unsupported cli 'gemini'. Supported values are: claude, codex"
    )


def test_validate_request_builds_resume_request(tmp_path: Path):
    req = validate_request(
        "codex", "go", str(tmp_path), [str(tmp_path)],
        session_id=SESSION_ID, model="", resume=True,
    )
    assert req.tool is ToolKind.CODEX
    assert req.session_id == SESSION_ID
    assert req.model is None
    assert req.mode is SessionMode.RESUME


def test_create_request_ignores_session_id(tmp_path: Path):
    req = validate_request(
        "claude", "go", str(tmp_path), [str(tmp_path)], session_id="garbage",
    )
    assert req.session_id is None
    assert req.mode is SessionMode.CREATE


def test_session_id_checked_before_working_dir(tmp_path: Path):
    with pytest.raises(InvalidSessionIdError):
        validate_request(
            "claude", "go", str(tmp_path / "missing"), [str(tmp_path)],
            session_id="bad", resume=True,
        )


def test_tool_checked_first(tmp_path: Path):
    with pytest.raises(UnsupportedToolError):
        validate_request("gemini", "", None, [str(tmp_path)])


def test_nul_in_working_dir_is_invalid_input(tmp_path: Path):
    with pytest.raises(InvalidWorkingDirError):
        validate_working_dir(str(tmp_path) + "\x00x", [str(tmp_path)])


def test_nul_in_prompt_or_model():
    with pytest.raises(InvalidPromptError, match="NUL"):
        validate_prompt("a\x00b")
    with pytest.raises(InvalidModelError, match="NUL"):
        validate_model("op\x00us")
