"""HTTP + SSE server for the headless session engine.

Blocking REST endpoints run a session to completion and return its
output; streaming endpoints forward each session event as a
Server-Sent Event.

Usage:
    supercet [--port PORT]
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
import time
import uuid
from pathlib import Path
from typing import Any

from aiohttp import web

from supercet.adapters.delivery import StreamForwarder
from supercet.engine.config import EngineConfig
from supercet.engine.engine import HeadlessCliEngine
from supercet.engine.errors import (
    CliUnavailableError,
    HeadlessCliError,
    InvalidInputError,
)
from supercet.engine.models import SessionMode, SessionState, SessionStatus, ToolKind

logger = logging.getLogger(__name__)


class RequestError(Exception):
    """Malformed request body; answered with 400."""


class SupercetServer:
    """aiohttp application exposing HeadlessCliEngine."""

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 4444,
        config: EngineConfig | None = None,
        engine: HeadlessCliEngine | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._engine = engine or HeadlessCliEngine(config)
        self._cwd = self._engine.config.server_cwd or str(Path.cwd())
        self._started_at = time.time()
        self._app = web.Application(middlewares=[self._request_logging_middleware])
        self._setup_routes()
        logger.info(
            "SupercetServer init host=%s port=%s cwd=%s pid=%s",
            self._host, self._port, self._cwd, os.getpid(),
        )

    @property
    def app(self) -> web.Application:
        return self._app

    @property
    def engine(self) -> HeadlessCliEngine:
        return self._engine

    # ── Middleware ──

    @web.middleware
    async def _request_logging_middleware(self, request: web.Request, handler) -> web.StreamResponse:
        req_id = request.headers.get("x-supercet-request-id", str(uuid.uuid4())[:8])
        request["req_id"] = req_id
        start = time.monotonic()
        logger.info("HTTP %s %s req=%s from=%s", request.method, request.path_qs, req_id, request.remote)
        try:
            response = await handler(request)
            elapsed_ms = (time.monotonic() - start) * 1000
            logger.info(
                "HTTP %s %s req=%s status=%s duration_ms=%.1f",
                request.method, request.path_qs, req_id,
                getattr(response, "status", "?"), elapsed_ms,
            )
            return response
        except Exception:
            elapsed_ms = (time.monotonic() - start) * 1000
            logger.exception("HTTP %s %s req=%s failed duration_ms=%.1f", request.method, request.path_qs, req_id, elapsed_ms)
            raise

    # ── Route setup ──

    def _setup_routes(self) -> None:
        r = self._app.router
        r.add_get("/health", self._handle_health)
        r.add_post("/api/session", self._handle_create)
        r.add_post("/api/session/stream", self._handle_create_stream)
        r.add_post("/api/{tool}/session", self._handle_create)
        r.add_post("/api/{tool}/session/stream", self._handle_create_stream)
        r.add_post("/api/{tool}/session/{session_id}/resume", self._handle_resume)
        r.add_post("/api/{tool}/session/{session_id}/resume/stream", self._handle_resume_stream)

    # ── Lifecycle ──

    async def start(self) -> None:
        """Start the server and serve until cancelled."""
        runner = web.AppRunner(self._app)
        await runner.setup()
        site = web.TCPSite(runner, self._host, self._port)
        await site.start()
        sys.stdout.write(json.dumps({"port": self._port}) + "\n")
        sys.stdout.flush()
        logger.info("Supercet server listening on %s:%d", self._host, self._port)
        try:
            await asyncio.Event().wait()
        finally:
            await runner.cleanup()

    # ── Request parsing ──

    async def _read_body(self, request: web.Request) -> dict[str, Any]:
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise RequestError("Request body must be valid JSON") from None
        if not isinstance(body, dict):
            raise RequestError("Request body must be a JSON object")

        prompt = body.get("prompt")
        if not prompt or not isinstance(prompt, str):
            raise RequestError("Prompt is required and must be a string")
        working_dir = body.get("workingDir")
        if working_dir is not None and not isinstance(working_dir, str):
            raise RequestError("Working directory must be a string")
        model = body.get("model")
        if model is not None and not isinstance(model, str):
            raise RequestError("Model must be a string")

        return {
            "prompt": prompt,
            "workingDir": working_dir or self._cwd,
            "model": model,
        }

    def _tool_for(self, request: web.Request) -> ToolKind:
        # Routes without a {tool} segment use the configured default.
        name = request.match_info.get("tool") or self._engine.config.default_tool
        return ToolKind.parse(name)

    @staticmethod
    def _error(message: str, status: int) -> web.Response:
        return web.json_response({"success": False, "error": message}, status=status)

    def _session_response(self, tool: ToolKind, state: SessionState) -> web.Response:
        payload: dict[str, Any] = {
            "success": state.status is SessionStatus.COMPLETED,
            "cli": tool.value,
            **state.to_dict(),
        }
        if state.status is SessionStatus.COMPLETED:
            if not state.error:
                payload.pop("error")
            return web.json_response(payload)
        # Partial output is kept; stderr lines move aside so "error"
        # carries the failure message.
        payload["stderr"] = payload.pop("error")
        payload["error"] = state.message or "Unknown error occurred"
        return web.json_response(payload, status=500)

    # ── Handlers ──

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.json_response({
            "status": "ok",
            "pid": os.getpid(),
            "uptime_seconds": round(max(0.0, time.time() - self._started_at), 3),
            "cwd": self._cwd,
            "active_sessions": self._engine.active_sessions,
            "available_tools": self._engine.availability.snapshot(),
            "installed_tools": self._engine.registry.get_installed_report(),
        })

    async def _run_blocking(
        self,
        request: web.Request,
        mode: SessionMode,
    ) -> web.Response:
        try:
            tool = self._tool_for(request)
            body = await self._read_body(request)
            if mode is SessionMode.RESUME:
                state = await self._engine.resume_session(
                    tool,
                    request.match_info["session_id"],
                    body["prompt"],
                    body["workingDir"],
                    model=body["model"],
                )
            else:
                state = await self._engine.create_session(
                    tool, body["prompt"], body["workingDir"], model=body["model"],
                )
        except (RequestError, InvalidInputError) as exc:
            return self._error(str(exc), 400)
        except CliUnavailableError as exc:
            return self._error(str(exc), 503)
        except HeadlessCliError as exc:
            return self._error(str(exc), 500)
        return self._session_response(tool, state)

    async def _handle_create(self, request: web.Request) -> web.Response:
        return await self._run_blocking(request, SessionMode.CREATE)

    async def _handle_resume(self, request: web.Request) -> web.Response:
        return await self._run_blocking(request, SessionMode.RESUME)

    async def _run_stream(
        self,
        request: web.Request,
        mode: SessionMode,
    ) -> web.StreamResponse:
        try:
            tool = self._tool_for(request)
            body = await self._read_body(request)
        except (RequestError, InvalidInputError) as exc:
            return self._error(str(exc), 400)
        if mode is SessionMode.RESUME:
            body["sessionId"] = request.match_info["session_id"]

        response = web.StreamResponse(
            status=200,
            headers={
                "Content-Type": "text/event-stream",
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
            },
        )
        await response.prepare(request)

        async def send(event_name: str, payload: dict[str, Any]) -> None:
            data = json.dumps(payload)
            await response.write(f"event: {event_name}\ndata: {data}\n\n".encode())

        forwarder = StreamForwarder(tool, mode, send)
        delivered = await forwarder.run(self._engine, body)
        logger.info(
            "SSE %s:%s req=%s delivered=%s disconnected=%s",
            tool.value, mode.value, request.get("req_id", "unknown"),
            delivered, forwarder.disconnected,
        )
        if not forwarder.disconnected:
            await response.write_eof()
        return response

    async def _handle_create_stream(self, request: web.Request) -> web.StreamResponse:
        return await self._run_stream(request, SessionMode.CREATE)

    async def _handle_resume_stream(self, request: web.Request) -> web.StreamResponse:
        return await self._run_stream(request, SessionMode.RESUME)
