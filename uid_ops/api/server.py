"""FastAPI app for UID Ops: records, plans, bins, export and the scan pulse stream."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from uid_ops.api.events_routes import router as events_router
from uid_ops.api.plan_routes import router as plan_router
from uid_ops.api.records_routes import router as records_router
from uid_ops.api.scan_events import ScanEventHub
from uid_ops.config import ALLOWED_ORIGINS
from uid_ops.db import init_db
from uid_ops.db.repositories import BinStore, PlanStore, RecordStore
from uid_ops.errors import RecordConflictError, UidOpsError, ValidationError
from uid_ops.utils.logger import bind_context, clear_context, get_logger

logger = get_logger("uid_ops.api.server")


class ApiPrefixAlias:
    """Serve every route under ``/api`` as well, by dropping the prefix before routing."""

    def __init__(self, app: ASGIApp, prefix: str = "/api"):
        self.app = app
        self.prefix = prefix.rstrip("/")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] in ("http", "websocket"):
            path: str = scope.get("path", "")
            if path == self.prefix or path.startswith(self.prefix + "/"):
                new_path = path[len(self.prefix):] or "/"
                scope = dict(scope)
                scope["path"] = new_path
                scope["raw_path"] = new_path.encode("utf-8")
        await self.app(scope, receive, send)


class RequestLogContext:
    """Bind method and path into the structlog context for each HTTP request."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        clear_context()
        bind_context(method=scope.get("method"), path=scope.get("path"))
        try:
            await self.app(scope, receive, send)
        finally:
            clear_context()


def _status_for(error: UidOpsError) -> int:
    """400 for bad input, 409 for key conflicts, 500 for StorageError and the rest."""
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, RecordConflictError):
        return 409
    return 500


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(UidOpsError)
    async def uid_ops_error_handler(request: Request, exc: UidOpsError) -> JSONResponse:
        status_code = _status_for(exc)
        log = logger.warning if status_code < 500 else logger.error
        log("api.request_error", path=request.url.path, status=status_code, error=exc.message)
        return JSONResponse(status_code=status_code, content=exc.to_dict())


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """Ensure tables exist on startup; release SSE listeners on shutdown."""
    init_db()
    logger.info("server.lifespan.started", allowed_origins=ALLOWED_ORIGINS)
    yield
    app.state.scan_events.close()
    logger.info("server.lifespan.stopped")


def create_app(allowed_origins: list[str] | None = None) -> FastAPI:
    """Create FastAPI app with its stores and the shared scan pulse hub on app.state."""
    app = FastAPI(title="UID Ops Backend", version="0.1.0", lifespan=_lifespan)

    hub = ScanEventHub()
    app.state.scan_events = hub
    app.state.record_store = RecordStore(events=hub)
    app.state.plan_store = PlanStore()
    app.state.bin_store = BinStore()

    origins = allowed_origins or ALLOWED_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(RequestLogContext)
    app.add_middleware(ApiPrefixAlias)

    _register_error_handlers(app)
    app.include_router(records_router)
    app.include_router(plan_router)
    app.include_router(events_router)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"ok": True, "now": datetime.now(timezone.utc).isoformat()}

    return app
