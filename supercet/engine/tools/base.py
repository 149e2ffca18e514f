"""Abstract base for CLI dialects.

Each dialect wraps a different headless agent CLI (Claude Code,
OpenAI Codex). The engine asks a dialect for the argv of a create or
resume run, for its preflight probe, and to pull the session identity
out of an output line.
"""
from __future__ import annotations

import abc
import logging
import shutil

from ..models import CliCommand, SessionMode, ToolKind

logger = logging.getLogger(__name__)


class ToolDialect(abc.ABC):
    """Abstract dialect interface.

    Implementations describe a specific CLI:
    - ClaudeDialect: `claude -p ... --output-format stream-json`
    - CodexDialect: `codex exec --json ...` / `codex exec resume ...`
    """

    def __init__(self, command: str | None = None) -> None:
        # The raw value is kept even when it is not on PATH so the
        # preflight can name it in its not-found error.
        self._command = command or self.kind.value
        if not self.is_installed():
            logger.debug(
                "Command %s not found on PATH for %s; deferring to preflight",
                self._command, self.kind.value,
            )

    @property
    @abc.abstractmethod
    def kind(self) -> ToolKind:
        """The tool this dialect speaks for."""

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def command(self) -> str:
        return self._command

    @abc.abstractmethod
    def build_args(
        self,
        mode: SessionMode,
        prompt: str,
        *,
        session_id: str | None = None,
        model: str | None = None,
    ) -> list[str]:
        """Return the argv (without executable) for a create or resume run."""

    @abc.abstractmethod
    def extract_session_id(self, line: str) -> str | None:
        """Return the session UUID carried by an output line, if any."""

    def build_command(
        self,
        mode: SessionMode,
        prompt: str,
        *,
        session_id: str | None = None,
        model: str | None = None,
    ) -> CliCommand:
        if mode is SessionMode.RESUME and not session_id:
            raise ValueError(f"{self.name}: resume requires a session id")
        args = self.build_args(mode, prompt, session_id=session_id, model=model)
        return CliCommand(executable=self._command, args=tuple(args))

    def preflight_args(self) -> list[str]:
        """Arguments for the cheap availability probe."""
        return ["--version"]

    @staticmethod
    def model_args(model: str | None) -> list[str]:
        return ["--model", model] if model else []

    def is_installed(self) -> bool:
        """Cheap PATH lookup. Does not prove the CLI actually runs."""
        return shutil.which(self._command) is not None
