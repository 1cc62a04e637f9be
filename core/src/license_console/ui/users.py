from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from starlette.responses import Response

from license_console.backend.client import BackendError
from license_console.backend.users import create_user, list_users
from license_console.forms import UserForm
from license_console.ui.rendering import form_error_status, get_backend, redirect_with_flash, render

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ui-users"])


def _render_form(
    request: Request,
    form: UserForm,
    *,
    error: str | None = None,
    field_errors: dict[str, str] | None = None,
    backend_errors: dict[str, list[str]] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    # Never echo the password back into the page.
    form.password = ""
    return render(
        request,
        "user_form.html",
        {
            "title": "Register user • License Console",
            "active": "users",
            "form": form,
            "error": error,
            "field_errors": field_errors or {},
            "backend_errors": backend_errors or {},
        },
        status_code=status_code,
    )


@router.get("/users", response_class=HTMLResponse)
async def ui_users_list(request: Request) -> HTMLResponse:
    ctx: dict[str, Any] = {
        "title": "Users • License Console",
        "active": "users",
        "items": [],
        "error": None,
    }
    try:
        ctx["items"] = await list_users(get_backend(request))
    except BackendError as exc:
        ctx["error"] = exc.message
    return render(request, "users_list.html", ctx)


@router.get("/users/new", response_class=HTMLResponse)
async def ui_user_new(request: Request) -> HTMLResponse:
    return _render_form(request, UserForm())


@router.post("/users/new", response_model=None)
async def ui_user_create(request: Request) -> Response:
    form = UserForm.from_form(await request.form())
    field_errors = form.validate()
    if field_errors:
        return _render_form(request, form, field_errors=field_errors, status_code=400)

    try:
        message = await create_user(get_backend(request), form.to_payload())
    except BackendError as exc:
        return _render_form(
            request,
            form,
            error=exc.message,
            backend_errors=exc.errors,
            status_code=form_error_status(exc),
        )

    logger.info("Registered user %s", form.login_id)
    return redirect_with_flash("/ui/users", message or "User registered")
