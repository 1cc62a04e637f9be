from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.responses import Response

from license_console.backend.client import BackendError
from license_console.backend.licenses import (
    create_license,
    delete_license,
    get_license,
    list_licenses,
    parse_license_key,
    update_license,
)
from license_console.backend.models import LicenseKeyPair
from license_console.forms import LicenseForm
from license_console.ui.rendering import (
    form_error_status,
    get_backend,
    load_error_status,
    redirect_with_flash,
    render,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ui-licenses"])


def _render_form(
    request: Request,
    form: LicenseForm | None,
    *,
    license_id: str | None = None,
    error: str | None = None,
    field_errors: dict[str, str] | None = None,
    backend_errors: dict[str, list[str]] | None = None,
    blank_rows: int = 1,
    status_code: int = 200,
) -> HTMLResponse:
    editing = license_id is not None
    key_rows: list[LicenseKeyPair] = []
    if form is not None:
        key_rows = list(form.key_pairs)
        key_rows.extend(LicenseKeyPair(key="", value="") for _ in range(blank_rows))

    return render(
        request,
        "license_form.html",
        {
            "title": ("Edit license" if editing else "Register license") + " • License Console",
            "active": "licenses",
            "editing": editing,
            "license_id": license_id,
            "action": f"/ui/licenses/{license_id}/edit" if editing else "/ui/licenses/new",
            "form": form,
            "key_rows": key_rows,
            "error": error,
            "field_errors": field_errors or {},
            "backend_errors": backend_errors or {},
        },
        status_code=status_code,
    )


def _wants_extra_row(raw: Any) -> bool:
    return isinstance(raw, str) and raw == "add_key"


@router.get("/licenses", response_class=HTMLResponse)
async def ui_licenses_list(request: Request) -> HTMLResponse:
    ctx: dict[str, Any] = {
        "title": "Licenses • License Console",
        "active": "licenses",
        "items": [],
        "error": None,
    }
    try:
        items = await list_licenses(get_backend(request))
    except BackendError as exc:
        ctx["error"] = exc.message
    else:
        ctx["items"] = [
            {"license": lic, "keys": parse_license_key(lic.license_key)} for lic in items
        ]
    return render(request, "licenses_list.html", ctx)


@router.get("/licenses/new", response_class=HTMLResponse)
async def ui_license_new(request: Request) -> HTMLResponse:
    return _render_form(request, LicenseForm())


@router.post("/licenses/new", response_model=None)
async def ui_license_create(request: Request) -> Response:
    raw = await request.form()
    form = LicenseForm.from_form(raw)
    if _wants_extra_row(raw.get("action")):
        return _render_form(request, form, blank_rows=2)

    field_errors = form.validate()
    if field_errors:
        return _render_form(request, form, field_errors=field_errors, status_code=400)

    try:
        message = await create_license(get_backend(request), form.to_payload())
    except BackendError as exc:
        return _render_form(
            request,
            form,
            error=exc.message,
            backend_errors=exc.errors,
            status_code=form_error_status(exc),
        )

    logger.info("Registered license %s", form.name)
    return redirect_with_flash("/ui/licenses", message or "License registered")


@router.get("/licenses/{license_id}/edit", response_class=HTMLResponse)
async def ui_license_edit(request: Request, license_id: str) -> HTMLResponse:
    try:
        lic = await get_license(get_backend(request), license_id)
    except BackendError as exc:
        return _render_form(
            request,
            None,
            license_id=license_id,
            error=exc.message,
            status_code=load_error_status(exc),
        )
    return _render_form(request, LicenseForm.from_license(lic), license_id=license_id)


@router.post("/licenses/{license_id}/edit", response_model=None)
async def ui_license_update(request: Request, license_id: str) -> Response:
    raw = await request.form()
    form = LicenseForm.from_form(raw)
    if _wants_extra_row(raw.get("action")):
        return _render_form(request, form, license_id=license_id, blank_rows=2)

    field_errors = form.validate()
    if field_errors:
        return _render_form(
            request, form, license_id=license_id, field_errors=field_errors, status_code=400
        )

    try:
        message = await update_license(get_backend(request), license_id, form.to_payload())
    except BackendError as exc:
        return _render_form(
            request,
            form,
            license_id=license_id,
            error=exc.message,
            backend_errors=exc.errors,
            status_code=form_error_status(exc),
        )

    logger.info("Updated license %s", license_id)
    return redirect_with_flash("/ui/licenses", message or "License updated")


@router.post("/licenses/{license_id}/delete")
async def ui_license_delete(request: Request, license_id: str) -> RedirectResponse:
    try:
        message = await delete_license(get_backend(request), license_id)
    except BackendError as exc:
        return redirect_with_flash("/ui/licenses", exc.message, kind="bad")

    logger.info("Deleted license %s", license_id)
    return redirect_with_flash("/ui/licenses", message or "License deleted")
