"""CLI entry point for the supercet server.

Usage:
    supercet
    supercet --port 4444 --cwd ~/projects/app
    supercet --config supercet.yaml --verbose
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import yaml

from supercet import __version__
from supercet.engine.config import EngineConfig
from supercet.engine.errors import HeadlessCliError
from supercet.engine.yaml_config import load_yaml_config

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="supercet",
        description="Local control plane for headless claude/codex sessions",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=4444, help="Port (default: 4444)")
    parser.add_argument(
        "--cwd",
        default=None,
        help="Server working directory; default for requests without workingDir",
    )
    parser.add_argument("--config", default=None, help="Optional YAML config file")
    parser.add_argument(
        "--log-file",
        default=None,
        help="Log file path (default: ~/.supercet/logs/supercet-server.log)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(level_name: str, log_file: Path | None = None) -> Path:
    """Send logs to a rotating file and stderr with one shared format."""
    log_file = log_file or Path.home() / ".supercet" / "logs" / "supercet-server.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name.upper(), logging.INFO))
    root.handlers.clear()
    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s [pid=%(process)d] %(message)s"
    )
    file_handler = RotatingFileHandler(
        log_file, maxBytes=2_000_000, backupCount=5, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    root.addHandler(file_handler)
    root.addHandler(stream_handler)
    return log_file


def build_config(args: argparse.Namespace) -> EngineConfig:
    config = EngineConfig.from_env()
    if args.config:
        config = load_yaml_config(args.config, base=config)
    if args.cwd:
        config.server_cwd = str(Path(args.cwd).expanduser().resolve())
    if args.verbose:
        config.log_level = "DEBUG"
    return config


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)

    level = "DEBUG" if args.verbose else os.getenv("SUPERCET_LOG_LEVEL", "INFO")
    log_file = configure_logging(level, Path(args.log_file) if args.log_file else None)

    try:
        config = build_config(args)
    except (OSError, ValueError, yaml.YAMLError, HeadlessCliError) as exc:
        logger.error("Invalid configuration: %s", exc)
        sys.exit(2)
    logging.getLogger().setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    logger.info(
        "Starting supercet %s cwd=%s port=%s config=%s log=%s",
        __version__, config.server_cwd, args.port, args.config or "<none>", log_file,
    )

    from supercet.web.server import SupercetServer

    server = SupercetServer(host=args.host, port=args.port, config=config)
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
