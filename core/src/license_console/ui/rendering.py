from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

from fastapi import HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from license_console.auth import current_user_name, extract_token_from_request
from license_console.backend.client import BackendClient, BackendError, BackendUnavailable
from license_console.backend.models import Pagination
from license_console.config import ConsoleConfig
from license_console.forms import APP_STATUSES, PROJECT_STATUSES, PROJECT_TYPES

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals.update(
    project_statuses=PROJECT_STATUSES,
    project_types=PROJECT_TYPES,
    app_statuses=APP_STATUSES,
)

_FLASH_PARAMS = frozenset({"msg", "kind"})


def flash_from_request(request: Request) -> dict[str, Any] | None:
    msg = request.query_params.get("msg")
    if not msg:
        return None
    kind = request.query_params.get("kind") or ""
    return {"message": msg, "kind": kind}


def redirect_with_flash(url: str, message: str, *, kind: str = "ok") -> RedirectResponse:
    sep = "&" if "?" in url else "?"
    query = urlencode({"msg": message, "kind": kind})
    return RedirectResponse(url=f"{url}{sep}{query}", status_code=302)


def get_config(request: Request) -> ConsoleConfig:
    config = getattr(request.app.state, "console_config", None)
    if config is None:
        raise HTTPException(status_code=500, detail="Console not initialized")
    return config


def get_backend(request: Request) -> BackendClient:
    http = getattr(request.app.state, "http_client", None)
    if http is None:
        raise HTTPException(status_code=500, detail="Backend client not initialized")
    return BackendClient(http, token=extract_token_from_request(request))


def render(
    request: Request,
    name: str,
    context: dict[str, Any],
    *,
    status_code: int = 200,
) -> HTMLResponse:
    ctx = {
        "flash": flash_from_request(request),
        "user_name": current_user_name(request),
        "active": None,
    }
    ctx.update(context)
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)


def form_error_status(exc: BackendError) -> int:
    """Status code for a form re-rendered after a failed backend call."""

    if isinstance(exc, BackendUnavailable):
        return 502
    if exc.errors:
        return 422
    return 400


def load_error_status(exc: BackendError) -> int:
    """Status code for a page whose primary record could not be loaded."""

    if isinstance(exc, BackendUnavailable):
        return 502
    if exc.status_code is not None and exc.status_code >= 400:
        return exc.status_code
    return 200


def past_last_page(page: int, items: list[Any], pagination: Pagination | None) -> int | None:
    """Page to fall back to when ``page`` ran past the end of the list, else None."""

    if items or pagination is None:
        return None
    last = max(pagination.last_page, 1)
    return last if page > last else None


def redirect_to_page(request: Request, page: int, param: str = "page") -> RedirectResponse:
    """Same screen on another page; a pending flash message is kept."""

    query = dict(request.query_params)
    query[param] = str(page)
    return RedirectResponse(url=f"{request.url.path}?{urlencode(query)}", status_code=302)


def page_href(request: Request, param: str = "page") -> Callable[[int], str]:
    """Link builder for the pagination widget; keeps the other query params."""

    base = {k: v for k, v in request.query_params.items() if k not in _FLASH_PARAMS}
    path = request.url.path

    def _href(page: int) -> str:
        query = dict(base)
        query[param] = str(page)
        return f"{path}?{urlencode(query)}"

    return _href
