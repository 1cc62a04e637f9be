from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.responses import Response

from license_console.auth import clear_session_cookies, login_redirect_url, set_session_cookies
from license_console.backend.auth_histories import latest_auth_histories, list_auth_histories
from license_console.backend.client import BackendError, BackendUnavailable, SessionExpired
from license_console.backend.models import AuthHistory, ProjectSummary
from license_console.backend.projects import list_projects
from license_console.backend.session import get_current_user, login, logout
from license_console.forms import LoginForm
from license_console.pagination import build_pagination_view, coerce_page
from license_console.ui.apps import router as apps_router
from license_console.ui.licenses import router as licenses_router
from license_console.ui.projects import router as projects_router
from license_console.ui.rendering import (
    get_backend,
    get_config,
    page_href,
    past_last_page,
    redirect_to_page,
    redirect_with_flash,
    render,
)
from license_console.ui.users import router as users_router

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ui", tags=["ui"])

router.include_router(projects_router)
router.include_router(licenses_router)
router.include_router(apps_router)
router.include_router(users_router)


def _render_login(
    request: Request,
    form: LoginForm,
    *,
    error: str | None = None,
    field_errors: dict[str, str] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    return render(
        request,
        "login.html",
        {
            "title": "Login • License Console",
            "hide_nav": True,
            "form": form,
            "error": error,
            "field_errors": field_errors or {},
        },
        status_code=status_code,
    )


@router.get("/login", response_class=HTMLResponse)
async def ui_login(request: Request) -> HTMLResponse:
    return _render_login(request, LoginForm())


@router.post("/login", response_model=None)
async def ui_login_post(request: Request) -> Response:
    form = LoginForm.from_form(await request.form())
    field_errors = form.validate()
    if field_errors:
        return _render_login(request, form, field_errors=field_errors, status_code=400)

    backend = get_backend(request).with_token(None)
    try:
        token = await login(backend, login_id=form.login_id, password=form.password)
        user = await get_current_user(backend.with_token(token))
    except BackendError as exc:
        logger.info("Login rejected for %s: %s", form.login_id, exc.message)
        status = 502 if isinstance(exc, BackendUnavailable) else 401
        return _render_login(request, form, error=exc.message, status_code=status)
    except SessionExpired:
        logger.info("Backend rejected the token issued to %s", form.login_id)
        return _render_login(request, form, error="Login failed", status_code=401)

    logger.info("Operator %s logged in", form.login_id)
    resp = redirect_with_flash("/ui/", "Logged in")
    set_session_cookies(
        resp,
        token=token,
        user_name=user.display_name or form.login_id,
        config=get_config(request).session,
    )
    return resp


@router.post("/logout")
async def ui_logout(request: Request) -> RedirectResponse:
    try:
        await logout(get_backend(request))
    except (BackendError, SessionExpired) as exc:
        # The local session ends regardless; the backend token may already be gone.
        logger.warning("Backend logout failed: %s", exc)

    resp = RedirectResponse(url=login_redirect_url("Logged out", kind="ok"), status_code=302)
    clear_session_cookies(resp)
    return resp


@router.get("/", response_class=HTMLResponse)
async def ui_dashboard(request: Request) -> HTMLResponse:
    config = get_config(request)
    backend = get_backend(request)

    histories: list[AuthHistory] = []
    history_error: str | None = None
    try:
        histories = await latest_auth_histories(
            backend, limit=config.ui.dashboard_history_limit
        )
    except BackendError as exc:
        history_error = exc.message

    q = (request.query_params.get("q") or "").strip()
    results: list[ProjectSummary] = []
    search_error: str | None = None
    if q:
        limit = config.ui.dashboard_search_limit
        try:
            found = await list_projects(backend, page=1, search=q, limit=limit)
            results = found.items[:limit]
        except BackendError as exc:
            search_error = exc.message

    return render(
        request,
        "dashboard.html",
        {
            "title": "Dashboard • License Console",
            "active": "dashboard",
            "histories": histories,
            "history_error": history_error,
            "q": q,
            "results": results,
            "search_error": search_error,
        },
    )


@router.get("/history", response_model=None)
async def ui_auth_history(request: Request) -> Response:
    page = coerce_page(request.query_params.get("page"))
    search = (request.query_params.get("search") or "").strip()

    ctx: dict[str, Any] = {
        "title": "Authentication history • License Console",
        "active": "history",
        "search": search,
        "items": [],
        "pagination": None,
        "error": None,
    }
    try:
        result = await list_auth_histories(get_backend(request), page=page, search=search or None)
    except BackendError as exc:
        ctx["error"] = exc.message
    else:
        fallback = past_last_page(page, result.items, result.pagination)
        if fallback is not None:
            return redirect_to_page(request, fallback)
        ctx["items"] = result.items
        ctx["pagination"] = build_pagination_view(result.pagination, href=page_href(request))

    return render(request, "auth_history.html", ctx)
