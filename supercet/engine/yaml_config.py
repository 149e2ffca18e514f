"""YAML configuration loader.

Overlays a YAML file on top of an EngineConfig (usually the one built
by EngineConfig.from_env()). When no YAML is provided, env vars work
exactly as before.

Example YAML:
    engine:
      session_timeout_seconds: 900
      preflight_timeout_seconds: 5
      kill_grace_seconds: 5
      default_tool: codex
      cwd: /path/to/workspace
      log_level: DEBUG

    tools:
      claude:
        command: /opt/claude/bin/claude
      codex:
        command: codex
"""
from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

import yaml

from .config import EngineConfig
from .models import ToolKind

logger = logging.getLogger(__name__)

_FLOAT_KEYS = (
    "session_timeout_seconds",
    "preflight_timeout_seconds",
    "kill_grace_seconds",
)
_ENGINE_KEYS = set(_FLOAT_KEYS) | {"default_tool", "cwd", "log_level"}


def load_yaml_config(
    path: str | Path,
    base: EngineConfig | None = None,
) -> EngineConfig:
    """Load a YAML config file and overlay it on *base*.

    Raises FileNotFoundError / yaml.YAMLError on unreadable files and
    ValueError on sections of the wrong shape. Unknown keys are logged
    and ignored.
    """
    path = Path(path)
    base = base or EngineConfig()
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.error(
            "load_yaml_config: config file not found at %s (absolute path: %s)",
            path, path.absolute(),
        )
        raise
    except yaml.YAMLError as exc:
        logger.error("load_yaml_config: YAML parse error in %s: %s", path, exc)
        raise

    if not isinstance(raw, dict):
        raise ValueError(f"{path}: top level must be a mapping")

    top_sections = sorted(raw.keys())
    logger.info(
        "Parsed YAML config %s, sections: %s",
        path.name, ", ".join(top_sections) if top_sections else "(empty)",
    )
    for key in top_sections:
        if key not in ("engine", "tools"):
            logger.warning("load_yaml_config: ignoring unknown section '%s'", key)

    engine_raw = raw.get("engine") or {}
    tools_raw = raw.get("tools") or {}
    if not isinstance(engine_raw, dict) or not isinstance(tools_raw, dict):
        raise ValueError(f"{path}: 'engine' and 'tools' must be mappings")

    for key in engine_raw:
        if key not in _ENGINE_KEYS:
            logger.warning("load_yaml_config: ignoring unknown engine key '%s'", key)

    changes: dict[str, object] = {}
    for key in _FLOAT_KEYS:
        if key in engine_raw:
            changes[key] = float(engine_raw[key])
    if "default_tool" in engine_raw:
        changes["default_tool"] = ToolKind.parse(engine_raw["default_tool"]).value
    if engine_raw.get("cwd"):
        changes["server_cwd"] = str(Path(engine_raw["cwd"]).expanduser())
    if engine_raw.get("log_level"):
        changes["log_level"] = str(engine_raw["log_level"])

    tool_commands = dict(base.tool_commands)
    for name, tool_raw in tools_raw.items():
        kind = ToolKind.parse(name)
        if not isinstance(tool_raw, dict):
            raise ValueError(f"{path}: tools.{name} must be a mapping")
        command = tool_raw.get("command")
        if command:
            tool_commands[kind.value] = str(command)
    changes["tool_commands"] = tool_commands

    return replace(base, **changes)
