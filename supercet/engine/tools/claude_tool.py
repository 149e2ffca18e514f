"""Claude Code CLI dialect.

Runs `claude -p` in print mode with stream-json output. The session
id shows up as a UUID in the output stream, so lines are scanned as
plain text.
"""
from __future__ import annotations

from ..identity import scan_text
from ..models import SessionMode, ToolKind
from .base import ToolDialect

_PERMISSION_MODE = "acceptEdits"


class ClaudeDialect(ToolDialect):
    """Dialect for the `claude` CLI."""

    @property
    def kind(self) -> ToolKind:
        return ToolKind.CLAUDE

    def build_args(
        self,
        mode: SessionMode,
        prompt: str,
        *,
        session_id: str | None = None,
        model: str | None = None,
    ) -> list[str]:
        args = ["-p", "--verbose"]
        if mode is SessionMode.RESUME:
            args.extend(["--resume", session_id])
        args.extend(self.model_args(model))
        args.extend(["--permission-mode", _PERMISSION_MODE])
        args.extend(["--output-format", "stream-json"])
        # Prompt is always the last discrete argument.
        args.append(prompt)
        return args

    def extract_session_id(self, line: str) -> str | None:
        return scan_text(line)
