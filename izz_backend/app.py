"""
FastAPI application entry point for the izz backend.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from izz_backend.config import Settings, get_settings
from izz_backend.errors import IdentityError
from izz_backend.routes import admin, auth, data, task, update

logger = logging.getLogger(__name__)

ROUTE_NOT_FOUND = {"message": "Route not found"}
ROUTING_MISSES = {404: "Not Found", 405: "Method Not Allowed"}


def _mount_client_build(app: FastAPI, build_dir: Path) -> None:
    """
    Serves the built client and falls back to its index.html so client-side
    routes resolve. Registered after the API so it never shadows it.
    """
    index_file = build_dir / "index.html"

    @app.get("/{full_path:path}", include_in_schema=False)
    def client_app(full_path: str):
        candidate = (build_dir / full_path).resolve()
        if (
            full_path
            and candidate.is_file()
            and candidate.is_relative_to(build_dir.resolve())
        ):
            return FileResponse(candidate)
        if index_file.is_file():
            return FileResponse(index_file)
        return JSONResponse(status_code=404, content=ROUTE_NOT_FOUND)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="izz Backend (FastAPI)", version="0.1.0")
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(IdentityError)
    async def identity_error_handler(request: Request, exc: IdentityError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException):
        # Routing misses (path or method) carry the default detail.
        if ROUTING_MISSES.get(exc.status_code) == exc.detail:
            return JSONResponse(status_code=404, content=ROUTE_NOT_FOUND)
        return await http_exception_handler(request, exc)

    @app.get("/")
    def root():
        return {"message": "Hello, from izz"}

    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(data.router, prefix="/api/data", tags=["data"])
    app.include_router(task.router, prefix="/api/task", tags=["task"])
    app.include_router(update.router, prefix="/update", tags=["update"])
    app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

    # A missing uploads directory behaves like an empty one: requests 404.
    if Path(settings.uploads_dir).is_dir():
        app.mount(
            "/uploads", StaticFiles(directory=settings.uploads_dir), name="uploads"
        )

    if settings.is_production:
        build_dir = Path(settings.static_build_dir)
        logger.info("Serving client build from %s", build_dir)
        _mount_client_build(app, build_dir)

    return app


app = create_app()
