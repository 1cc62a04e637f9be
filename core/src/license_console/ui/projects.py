from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.responses import Response

from license_console.backend.client import BackendError
from license_console.backend.projects import (
    create_project,
    delete_project,
    get_project,
    list_project_auth_histories,
    list_project_terminals,
    list_projects,
    update_project,
)
from license_console.forms import ProjectForm
from license_console.pagination import build_pagination_view, coerce_page
from license_console.ui.rendering import (
    form_error_status,
    get_backend,
    load_error_status,
    page_href,
    past_last_page,
    redirect_to_page,
    redirect_with_flash,
    render,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ui-projects"])


def _render_form(
    request: Request,
    form: ProjectForm | None,
    *,
    project_id: str | None = None,
    error: str | None = None,
    field_errors: dict[str, str] | None = None,
    backend_errors: dict[str, list[str]] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    editing = project_id is not None
    return render(
        request,
        "project_form.html",
        {
            "title": ("Edit project" if editing else "Register project") + " • License Console",
            "active": "projects",
            "editing": editing,
            "project_id": project_id,
            "action": f"/ui/projects/{project_id}/edit" if editing else "/ui/projects/new",
            "form": form,
            "error": error,
            "field_errors": field_errors or {},
            "backend_errors": backend_errors or {},
        },
        status_code=status_code,
    )


@router.get("/projects", response_model=None)
async def ui_projects_list(request: Request) -> Response:
    page = coerce_page(request.query_params.get("page"))
    search = (request.query_params.get("search") or "").strip()

    ctx: dict[str, Any] = {
        "title": "Projects • License Console",
        "active": "projects",
        "search": search,
        "page": page,
        "items": [],
        "pagination": None,
        "error": None,
    }
    try:
        result = await list_projects(get_backend(request), page=page, search=search or None)
    except BackendError as exc:
        ctx["error"] = exc.message
    else:
        # A delete can empty the last page; fall back to the new last page.
        fallback = past_last_page(page, result.items, result.pagination)
        if fallback is not None:
            return redirect_to_page(request, fallback)
        ctx["items"] = result.items
        ctx["pagination"] = build_pagination_view(result.pagination, href=page_href(request))

    return render(request, "projects_list.html", ctx)


@router.get("/projects/new", response_class=HTMLResponse)
async def ui_project_new(request: Request) -> HTMLResponse:
    return _render_form(request, ProjectForm())


@router.post("/projects/new", response_model=None)
async def ui_project_create(request: Request) -> Response:
    form = ProjectForm.from_form(await request.form())
    field_errors = form.validate()
    if field_errors:
        return _render_form(request, form, field_errors=field_errors, status_code=400)

    try:
        message = await create_project(get_backend(request), form.to_payload())
    except BackendError as exc:
        return _render_form(
            request,
            form,
            error=exc.message,
            backend_errors=exc.errors,
            status_code=form_error_status(exc),
        )

    logger.info("Registered project %s", form.name)
    return redirect_with_flash("/ui/projects", message or "Project registered")


@router.get("/projects/{project_id}", response_class=HTMLResponse)
async def ui_project_detail(request: Request, project_id: str) -> HTMLResponse:
    backend = get_backend(request)
    terminals_page = coerce_page(request.query_params.get("terminals_page"))
    histories_page = coerce_page(request.query_params.get("histories_page"))

    ctx: dict[str, Any] = {
        "title": "Project details • License Console",
        "active": "projects",
        "project_id": project_id,
        "project": None,
        "project_error": None,
        "terminals": [],
        "terminals_pagination": None,
        "terminals_error": None,
        "histories": [],
        "histories_pagination": None,
        "histories_error": None,
    }
    status_code = 200

    try:
        project = await get_project(backend, project_id)
    except BackendError as exc:
        ctx["project_error"] = exc.message
        status_code = load_error_status(exc)
    else:
        ctx["project"] = project
        ctx["title"] = f"{project.name} • License Console"

    try:
        terminals = await list_project_terminals(backend, project_id, page=terminals_page)
    except BackendError as exc:
        ctx["terminals_error"] = exc.message
    else:
        ctx["terminals"] = terminals.items
        ctx["terminals_pagination"] = build_pagination_view(
            terminals.pagination, href=page_href(request, "terminals_page")
        )

    try:
        histories = await list_project_auth_histories(backend, project_id, page=histories_page)
    except BackendError as exc:
        ctx["histories_error"] = exc.message
    else:
        ctx["histories"] = histories.items
        ctx["histories_pagination"] = build_pagination_view(
            histories.pagination, href=page_href(request, "histories_page")
        )

    return render(request, "project_detail.html", ctx, status_code=status_code)


@router.get("/projects/{project_id}/edit", response_class=HTMLResponse)
async def ui_project_edit(request: Request, project_id: str) -> HTMLResponse:
    try:
        project = await get_project(get_backend(request), project_id)
    except BackendError as exc:
        return _render_form(
            request,
            None,
            project_id=project_id,
            error=exc.message,
            status_code=load_error_status(exc),
        )
    return _render_form(request, ProjectForm.from_project(project), project_id=project_id)


@router.post("/projects/{project_id}/edit", response_model=None)
async def ui_project_update(request: Request, project_id: str) -> Response:
    form = ProjectForm.from_form(await request.form())
    field_errors = form.validate()
    if field_errors:
        return _render_form(
            request, form, project_id=project_id, field_errors=field_errors, status_code=400
        )

    try:
        message = await update_project(get_backend(request), project_id, form.to_payload())
    except BackendError as exc:
        return _render_form(
            request,
            form,
            project_id=project_id,
            error=exc.message,
            backend_errors=exc.errors,
            status_code=form_error_status(exc),
        )

    logger.info("Updated project %s", project_id)
    return redirect_with_flash(f"/ui/projects/{project_id}", message or "Project updated")


@router.post("/projects/{project_id}/delete")
async def ui_project_delete(request: Request, project_id: str) -> RedirectResponse:
    form = await request.form()
    raw_page = form.get("page")
    raw_search = form.get("search")
    page = coerce_page(raw_page if isinstance(raw_page, str) else None)
    search = raw_search.strip() if isinstance(raw_search, str) else ""

    query: dict[str, str] = {}
    if page > 1:
        query["page"] = str(page)
    if search:
        query["search"] = search
    back = f"/ui/projects?{urlencode(query)}" if query else "/ui/projects"

    try:
        message = await delete_project(get_backend(request), project_id)
    except BackendError as exc:
        return redirect_with_flash(back, exc.message, kind="bad")

    logger.info("Deleted project %s", project_id)
    return redirect_with_flash(back, message or "Project deleted")
