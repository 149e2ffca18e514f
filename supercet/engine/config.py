"""Configuration loaded from environment variables.

All settings have sensible defaults. Override via SUPERCET_* env vars
or a YAML file (see yaml_config.py).
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


def _default_cwd() -> str:
    return os.getcwd()


def _default_home() -> str:
    return os.environ.get("HOME") or str(Path.home())


@dataclass
class EngineConfig:
    """Session engine configuration."""

    # Hard wall-clock limit for one agent run.
    session_timeout_seconds: float = 600.0
    # Bound on the `--version` availability probe.
    preflight_timeout_seconds: float = 5.0
    # Delay between SIGTERM and SIGKILL once a session has timed out.
    kill_grace_seconds: float = 5.0

    # Tool used when a caller does not name one.
    default_tool: str = "claude"
    # Executable override per tool name, e.g. {"codex": "/opt/bin/codex"}.
    tool_commands: dict[str, str] = field(default_factory=dict)

    # Working directories must resolve inside one of these two roots.
    server_cwd: str = field(default_factory=_default_cwd)
    home_dir: str = field(default_factory=_default_home)

    # Logging
    log_level: str = "INFO"

    @property
    def allowed_roots(self) -> list[str]:
        return [self.server_cwd, self.home_dir]

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Load configuration from SUPERCET_* environment variables."""
        overrides = {
            k: v for k, v in os.environ.items() if k.startswith("SUPERCET_")
        }
        if overrides:
            logger.info(
                "EngineConfig.from_env: SUPERCET_* env overrides: %s",
                ", ".join(f"{k}={v}" for k, v in sorted(overrides.items())),
            )
        else:
            logger.debug("EngineConfig.from_env: no SUPERCET_* env vars set, using defaults")

        tool_commands: dict[str, str] = {}
        for tool in ("claude", "codex"):
            command = os.getenv(f"SUPERCET_{tool.upper()}_COMMAND")
            if command:
                tool_commands[tool] = command

        config = cls(
            session_timeout_seconds=float(os.getenv(
                "SUPERCET_SESSION_TIMEOUT", str(cls.session_timeout_seconds)
            )),
            preflight_timeout_seconds=float(os.getenv(
                "SUPERCET_PREFLIGHT_TIMEOUT", str(cls.preflight_timeout_seconds)
            )),
            kill_grace_seconds=float(os.getenv(
                "SUPERCET_KILL_GRACE", str(cls.kill_grace_seconds)
            )),
            default_tool=os.getenv("SUPERCET_DEFAULT_TOOL", cls.default_tool),
            tool_commands=tool_commands,
            server_cwd=os.getenv("SUPERCET_CWD") or _default_cwd(),
            log_level=os.getenv("SUPERCET_LOG_LEVEL", cls.log_level),
        )
        logger.info(
            "EngineConfig.from_env: timeout=%ss preflight=%ss default_tool=%s cwd=%s",
            config.session_timeout_seconds, config.preflight_timeout_seconds,
            config.default_tool, config.server_cwd,
        )
        return config
