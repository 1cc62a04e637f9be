from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.responses import Response

from license_console.backend.apps import create_app, delete_app, get_app, list_apps, update_app
from license_console.backend.client import BackendClient, BackendError
from license_console.backend.licenses import list_licenses
from license_console.backend.models import License
from license_console.forms import AppForm
from license_console.ui.rendering import (
    form_error_status,
    get_backend,
    load_error_status,
    redirect_with_flash,
    render,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ui-apps"])


async def _license_choices(backend: BackendClient) -> tuple[list[License], str | None]:
    # The app form stays usable without the license list.
    try:
        return await list_licenses(backend), None
    except BackendError as exc:
        logger.warning("Could not load licenses for the app form: %s", exc.message)
        return [], exc.message


async def _render_form(
    request: Request,
    form: AppForm | None,
    *,
    app_id: str | None = None,
    error: str | None = None,
    field_errors: dict[str, str] | None = None,
    backend_errors: dict[str, list[str]] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    editing = app_id is not None
    licenses: list[License] = []
    licenses_error: str | None = None
    if form is not None:
        licenses, licenses_error = await _license_choices(get_backend(request))

    return render(
        request,
        "app_form.html",
        {
            "title": ("Edit app" if editing else "Register app") + " • License Console",
            "active": "apps",
            "editing": editing,
            "app_id": app_id,
            "action": f"/ui/apps/{app_id}/edit" if editing else "/ui/apps/new",
            "form": form,
            "licenses": licenses,
            "licenses_error": licenses_error,
            "error": error,
            "field_errors": field_errors or {},
            "backend_errors": backend_errors or {},
        },
        status_code=status_code,
    )


@router.get("/apps", response_class=HTMLResponse)
async def ui_apps_list(request: Request) -> HTMLResponse:
    ctx: dict[str, Any] = {
        "title": "Apps • License Console",
        "active": "apps",
        "items": [],
        "error": None,
    }
    try:
        ctx["items"] = await list_apps(get_backend(request))
    except BackendError as exc:
        ctx["error"] = exc.message
    return render(request, "apps_list.html", ctx)


@router.get("/apps/new", response_class=HTMLResponse)
async def ui_app_new(request: Request) -> HTMLResponse:
    return await _render_form(request, AppForm())


@router.post("/apps/new", response_model=None)
async def ui_app_create(request: Request) -> Response:
    form = AppForm.from_form(await request.form())
    field_errors = form.validate()
    if field_errors:
        return await _render_form(request, form, field_errors=field_errors, status_code=400)

    try:
        message = await create_app(get_backend(request), form.to_payload())
    except BackendError as exc:
        return await _render_form(
            request,
            form,
            error=exc.message,
            backend_errors=exc.errors,
            status_code=form_error_status(exc),
        )

    logger.info("Registered app %s %s", form.name, form.version)
    return redirect_with_flash("/ui/apps", message or "App registered")


@router.get("/apps/{app_id}/edit", response_class=HTMLResponse)
async def ui_app_edit(request: Request, app_id: str) -> HTMLResponse:
    try:
        app = await get_app(get_backend(request), app_id)
    except BackendError as exc:
        return await _render_form(
            request,
            None,
            app_id=app_id,
            error=exc.message,
            status_code=load_error_status(exc),
        )
    return await _render_form(request, AppForm.from_app(app), app_id=app_id)


@router.post("/apps/{app_id}/edit", response_model=None)
async def ui_app_update(request: Request, app_id: str) -> Response:
    form = AppForm.from_form(await request.form())
    field_errors = form.validate()
    if field_errors:
        return await _render_form(
            request, form, app_id=app_id, field_errors=field_errors, status_code=400
        )

    try:
        message = await update_app(get_backend(request), app_id, form.to_payload())
    except BackendError as exc:
        return await _render_form(
            request,
            form,
            app_id=app_id,
            error=exc.message,
            backend_errors=exc.errors,
            status_code=form_error_status(exc),
        )

    logger.info("Updated app %s", app_id)
    return redirect_with_flash("/ui/apps", message or "App updated")


@router.post("/apps/{app_id}/delete")
async def ui_app_delete(request: Request, app_id: str) -> RedirectResponse:
    try:
        message = await delete_app(get_backend(request), app_id)
    except BackendError as exc:
        return redirect_with_flash("/ui/apps", exc.message, kind="bad")

    logger.info("Deleted app %s", app_id)
    return redirect_with_flash("/ui/apps", message or "App deleted")
