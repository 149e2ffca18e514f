"""Input validation for session requests.

Everything here runs before a subprocess is spawned; a request that
fails any check has no side effects.
"""
from __future__ import annotations

import os
from pathlib import Path

from .errors import (
    InvalidModelError,
    InvalidPromptError,
    InvalidSessionIdError,
    InvalidWorkingDirError,
)
from .identity import is_valid_uuid
from .models import SessionRequest, ToolKind


def _is_within(path: Path, root: Path) -> bool:
    try:
        return os.path.commonpath([str(path), str(root)]) == str(root)
    except ValueError:
        # Different drives on Windows
        return False


def validate_working_dir(path: object, allowed_roots: list[str]) -> str:
    """Resolve *path* and check it is an existing directory inside a root.

    Returns the absolute resolved path.
    """
    if not path or not isinstance(path, str):
        raise InvalidWorkingDirError(path, "Working directory must be a non-empty string")

    try:
        resolved = Path(path).expanduser().resolve()
        exists = resolved.exists()
        is_dir = resolved.is_dir()
    except (OSError, ValueError) as exc:
        raise InvalidWorkingDirError(path, f"Invalid working directory: {exc}") from None
    if not exists:
        raise InvalidWorkingDirError(
            path, f"Invalid working directory: {resolved} does not exist",
        )
    if not is_dir:
        raise InvalidWorkingDirError(
            path, f"Invalid working directory: {resolved} is not a directory",
        )

    roots = [Path(r).expanduser().resolve() for r in allowed_roots if r]
    if not any(_is_within(resolved, root) for root in roots):
        raise InvalidWorkingDirError(
            path,
            "Working directory must be within current working directory "
            "or home directory",
        )
    return str(resolved)


def validate_prompt(prompt: object) -> str:
    if not prompt or not isinstance(prompt, str):
        raise InvalidPromptError()
    if "\x00" in prompt:
        raise InvalidPromptError("Prompt must not contain NUL characters")
    return prompt


def validate_session_id(session_id: object) -> str:
    if not is_valid_uuid(session_id):
        raise InvalidSessionIdError(session_id)
    return session_id  # type: ignore[return-value]


def validate_model(model: object) -> str | None:
    """Return the model name, or None when absent or empty."""
    if model is None:
        return None
    if not isinstance(model, str):
        raise InvalidModelError(model)
    if "\x00" in model:
        raise InvalidModelError(model, "Model must not contain NUL characters")
    return model or None


def validate_request(
    tool: object,
    prompt: object,
    working_dir: object,
    allowed_roots: list[str],
    *,
    session_id: object = None,
    model: object = None,
    resume: bool = False,
) -> SessionRequest:
    """Validate every field of a create or resume request.

    When *resume* is true a session id is mandatory.
    """
    kind = ToolKind.parse(tool)
    prompt = validate_prompt(prompt)
    checked_id = validate_session_id(session_id) if resume else None
    checked_model = validate_model(model)
    resolved_dir = validate_working_dir(working_dir, allowed_roots)
    return SessionRequest(
        tool=kind,
        prompt=prompt,
        working_dir=resolved_dir,
        session_id=checked_id,
        model=checked_model,
    )
