from __future__ import annotations

from typing import Any

from license_console.backend.client import (
    BackendClient,
    Page,
    decode_items,
    decode_pagination,
    decode_record,
)
from license_console.backend.models import AuthHistory, Project, ProjectSummary, Terminal


async def list_projects(
    client: BackendClient,
    *,
    page: int = 1,
    search: str | None = None,
    limit: int | None = None,
) -> Page[ProjectSummary]:
    env = await client.call(
        "GET",
        "/projects",
        params={"page": page, "search": search, "limit": limit},
        failure_message="Failed to load projects",
    )
    return Page(
        items=decode_items(ProjectSummary, env.data, what="project"),
        pagination=decode_pagination(env.pagination),
    )


async def get_project(client: BackendClient, project_id: str | int) -> Project:
    env = await client.call(
        "GET", f"/projects/{project_id}", failure_message="Failed to load project details"
    )
    return decode_record(Project, env.data, what="project")


async def create_project(client: BackendClient, payload: dict[str, Any]) -> str | None:
    env = await client.call(
        "POST", "/projects", json=payload, failure_message="Failed to register project"
    )
    return env.message


async def update_project(
    client: BackendClient, project_id: str | int, payload: dict[str, Any]
) -> str | None:
    env = await client.call(
        "PUT",
        f"/projects/{project_id}",
        json=payload,
        failure_message="Failed to update project",
    )
    return env.message


async def delete_project(client: BackendClient, project_id: str | int) -> str | None:
    env = await client.call(
        "DELETE", f"/projects/{project_id}", failure_message="Failed to delete project"
    )
    return env.message


async def list_project_terminals(
    client: BackendClient, project_id: str | int, *, page: int = 1
) -> Page[Terminal]:
    env = await client.call(
        "GET",
        f"/projects/{project_id}/terminals",
        params={"page": page},
        failure_message="Failed to load terminals",
    )
    return Page(
        items=decode_items(Terminal, env.data, what="terminal"),
        pagination=decode_pagination(env.pagination),
    )


async def list_project_auth_histories(
    client: BackendClient, project_id: str | int, *, page: int = 1
) -> Page[AuthHistory]:
    env = await client.call(
        "GET",
        f"/projects/{project_id}/auth/histories",
        params={"page": page},
        failure_message="Failed to load authentication history",
    )
    return Page(
        items=decode_items(AuthHistory, env.data, what="authentication history"),
        pagination=decode_pagination(env.pagination),
    )
