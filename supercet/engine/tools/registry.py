"""Tool registry: maps ToolKind to its dialect."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..models import ToolKind
from .base import ToolDialect
from .claude_tool import ClaudeDialect
from .codex_tool import CodexDialect

if TYPE_CHECKING:
    from ..config import EngineConfig

logger = logging.getLogger(__name__)

_DIALECT_CLASSES: dict[ToolKind, type[ToolDialect]] = {
    ToolKind.CLAUDE: ClaudeDialect,
    ToolKind.CODEX: CodexDialect,
}


class ToolRegistry:
    """Registry of dialects, one per supported ToolKind."""

    def __init__(self, dialects: dict[ToolKind, ToolDialect]) -> None:
        missing = [k.value for k in ToolKind if k not in dialects]
        if missing:
            raise ValueError(f"No dialect registered for: {', '.join(missing)}")
        self._dialects = dict(dialects)

    def get(self, tool: ToolKind) -> ToolDialect:
        return self._dialects[tool]

    def list_names(self) -> list[str]:
        return [k.value for k in self._dialects]

    def get_installed_report(self) -> dict[str, bool]:
        """Return tool name → found on PATH, for diagnostics only."""
        return {
            k.value: d.is_installed() for k, d in self._dialects.items()
        }


def build_tool_registry(config: EngineConfig | None = None) -> ToolRegistry:
    """Build the registry, applying configured command overrides."""
    commands = dict(config.tool_commands) if config is not None else {}
    dialects: dict[ToolKind, ToolDialect] = {}
    for kind, cls in _DIALECT_CLASSES.items():
        dialects[kind] = cls(command=commands.get(kind.value))
        logger.info(
            "Tool registered: %s (command=%s)", kind.value, dialects[kind].command,
        )
    return ToolRegistry(dialects)
