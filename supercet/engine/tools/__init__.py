"""CLI dialects for the headless session engine."""
from .base import ToolDialect
from .registry import ToolRegistry, build_tool_registry
from .claude_tool import ClaudeDialect
from .codex_tool import CodexDialect

__all__ = [
    "ToolDialect",
    "ToolRegistry",
    "build_tool_registry",
    "ClaudeDialect",
    "CodexDialect",
]
