from __future__ import annotations

from license_console.backend.client import BackendClient, Page, decode_items, decode_pagination
from license_console.backend.models import AuthHistory


async def list_auth_histories(
    client: BackendClient, *, page: int = 1, search: str | None = None
) -> Page[AuthHistory]:
    env = await client.call(
        "GET",
        "/auth/histories",
        params={"page": page, "search": search},
        failure_message="Failed to load authentication history",
    )
    return Page(
        items=decode_items(AuthHistory, env.data, what="authentication history"),
        pagination=decode_pagination(env.pagination),
    )


async def latest_auth_histories(client: BackendClient, *, limit: int = 5) -> list[AuthHistory]:
    env = await client.call(
        "GET",
        "/auth/histories",
        params={"limit": limit},
        failure_message="Failed to load the latest authentications",
    )
    # The backend may ignore ``limit``; keep at most that many rows.
    return decode_items(AuthHistory, env.data, what="authentication history")[:limit]
