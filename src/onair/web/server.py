"""
Web server for OnAir.

Provides the FastAPI application: the listener WebSocket, a liveness check
and, when a built client is present, static file serving with single-page
app fallback.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from pydantic import ValidationError

from ..infra.logging import get_logger
from ..infra.settings import Settings, settings
from ..runtime.bootstrap import StationRuntime, build_runtime
from ..runtime.listeners import Listener
from ..shared.schemas import ControlMessage

logger = get_logger(__name__)


async def _forward_events(ws: WebSocket, listener: Listener) -> None:
    """Forward queued station events to one client until it goes away."""
    try:
        while True:
            message = await listener.next_message()
            await ws.send_text(message)
    except (WebSocketDisconnect, RuntimeError) as e:
        logger.debug("listener_send_closed", listener_id=listener.listener_id, error=str(e))
    except Exception:
        logger.exception("listener_send_failed", listener_id=listener.listener_id)
        # Closing makes the receive loop see a disconnect and unregister.
        try:
            await ws.close(code=status.WS_1011_INTERNAL_ERROR)
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.debug("listener_close_failed", listener_id=listener.listener_id, error=str(e))


def _resolve_static_file(static_root: Path, request_path: str) -> Path | None:
    """Return the file to serve for request_path, falling back to index.html."""
    root = static_root.resolve()
    if request_path:
        candidate = (root / request_path).resolve()
        if candidate.is_relative_to(root) and candidate.is_file():
            return candidate
    index = root / "index.html"
    return index if index.is_file() else None


def create_app(cfg: Settings | None = None, runtime: StationRuntime | None = None) -> FastAPI:
    """Build the FastAPI application around a station runtime."""
    cfg = cfg or settings
    runtime = runtime or build_runtime(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        runtime.start_background()
        logger.info("server_started", port=cfg.port)
        try:
            yield
        finally:
            runtime.shutdown()
            logger.info("server_stopped")

    app = FastAPI(title="OnAir", lifespan=lifespan)
    app.state.runtime = runtime
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.origins or ["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/session")
    async def session_state() -> dict[str, object]:
        return {**runtime.orchestrator.state.snapshot(), "listeners": runtime.registry.count}

    @app.websocket("/ws")
    async def listener_socket(ws: WebSocket):
        await ws.accept()
        listener = runtime.registry.connect()
        sender = asyncio.create_task(_forward_events(ws, listener))
        try:
            while True:
                raw = await ws.receive_text()
                try:
                    control = ControlMessage.model_validate_json(raw)
                except ValidationError as e:
                    logger.warning(
                        "control_message_rejected",
                        listener_id=listener.listener_id,
                        errors=e.error_count(),
                    )
                    continue
                await runtime.orchestrator.handle_control(control.event)
        except WebSocketDisconnect:
            pass
        finally:
            sender.cancel()
            runtime.registry.disconnect(listener.listener_id)

    static_root = Path(cfg.static_dir)

    @app.get("/{full_path:path}", include_in_schema=False)
    async def client_app(full_path: str):
        if not static_root.is_dir():
            raise HTTPException(status_code=404)
        target = _resolve_static_file(static_root, full_path)
        if target is None:
            raise HTTPException(status_code=404)
        return FileResponse(target)

    return app


def run_server(cfg: Settings | None = None) -> None:
    cfg = cfg or settings
    uvicorn.run(create_app(cfg), host=cfg.host, port=cfg.port, log_config=None)
