from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.staticfiles import StaticFiles

from license_console import __version__
from license_console.auth import (
    clear_session_cookies,
    extract_token_from_request,
    login_redirect_url,
    requires_session,
)
from license_console.backend.client import SessionExpired, build_http_client
from license_console.config import apply_env_overrides, ensure_console_config
from license_console.home import ensure_console_layout, resolve_console_home
from license_console.ui.rendering import STATIC_DIR as UI_STATIC_DIR
from license_console.ui.rendering import render
from license_console.ui.router import router as ui_router

logger = logging.getLogger(__name__)


def _error_page(request: Request, status_code: int, detail: str) -> HTMLResponse:
    return render(
        request,
        "error.html",
        {
            "title": f"{status_code} • License Console",
            "status_code": status_code,
            "detail": detail,
            "hide_nav": status_code == 404 and not extract_token_from_request(request),
        },
        status_code=status_code,
    )


def create_app(*, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    """Build the console app.

    ``transport`` replaces the network transport of the backend HTTP client;
    tests pass an ``httpx.MockTransport`` here.
    """

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        home = resolve_console_home()
        paths = ensure_console_layout(home)
        config = apply_env_overrides(ensure_console_config(paths))

        # Configure Logging
        file_handler = RotatingFileHandler(
            paths.log_file,
            maxBytes=config.logging.max_size_mb * 1024 * 1024,
            backupCount=config.logging.backup_count,
            encoding="utf-8",
        )
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        file_handler.setFormatter(formatter)

        # Configure root logger to capture all module logs
        root = logging.getLogger()
        root.setLevel(getattr(logging, config.logging.level.upper(), logging.INFO))
        # Avoid adding duplicate handlers if reloaded
        if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
            root.addHandler(file_handler)

        logger.info("License Console starting up")
        logger.info(f"Logs directory: {paths.logs_dir}")
        logger.info(f"Backend: {config.backend.base_url}")

        app.state.console_home = home
        app.state.console_paths = paths
        app.state.console_config = config
        app.state.http_client = build_http_client(config.backend, transport=transport)

        try:
            yield
        finally:
            await app.state.http_client.aclose()
            logger.info("License Console shut down")

    app = FastAPI(title="License Console", version=__version__, lifespan=_lifespan)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - {response.status_code}")
        return response

    class _SessionMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next) -> Response:
            if requires_session(request.url.path) and not extract_token_from_request(request):
                return RedirectResponse(url=login_redirect_url(), status_code=302)
            return await call_next(request)

    app.add_middleware(_SessionMiddleware)

    @app.exception_handler(SessionExpired)
    async def _session_expired_handler(request: Request, exc: SessionExpired) -> Response:
        logger.info("Backend rejected the session token; logging out")
        resp = RedirectResponse(url=login_redirect_url("Session expired"), status_code=302)
        clear_session_cookies(resp)
        return resp

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> HTMLResponse:
        if exc.status_code == 404:
            detail = "Page not found"
        else:
            detail = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return _error_page(request, exc.status_code, detail)

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> HTMLResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_page(request, 500, "Internal server error")

    if UI_STATIC_DIR.is_dir():
        app.mount(
            "/ui/static",
            StaticFiles(directory=str(UI_STATIC_DIR)),
            name="ui-static",
        )
    else:
        logger.warning(
            "UI static directory is missing (%s); /ui/static will not be served",
            UI_STATIC_DIR,
        )
    app.include_router(ui_router)

    @app.get("/")
    async def root() -> RedirectResponse:
        return RedirectResponse(url="/ui/", status_code=302)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
