"""OpenAI Codex CLI dialect.

Uses `codex exec --json` for new sessions and `codex exec resume`
to continue one. Output is JSON lines; the thread/session id is
recovered by walking the decoded event.
"""
from __future__ import annotations

from ..identity import extract_from_json_line
from ..models import SessionMode, ToolKind
from .base import ToolDialect


class CodexDialect(ToolDialect):
    """Dialect for the `codex` CLI."""

    @property
    def kind(self) -> ToolKind:
        return ToolKind.CODEX

    def build_args(
        self,
        mode: SessionMode,
        prompt: str,
        *,
        session_id: str | None = None,
        model: str | None = None,
    ) -> list[str]:
        if mode is SessionMode.RESUME:
            return [
                "exec",
                "resume",
                "--json",
                "--skip-git-repo-check",
                *self.model_args(model),
                session_id,
                prompt,
            ]

        return [
            "exec",
            "--json",
            "--skip-git-repo-check",
            "--sandbox",
            "workspace-write",
            *self.model_args(model),
            prompt,
        ]

    def extract_session_id(self, line: str) -> str | None:
        return extract_from_json_line(line)
