from __future__ import annotations

from typing import Any

from license_console.backend.client import BackendClient, decode_items, decode_record
from license_console.backend.models import App


async def list_apps(client: BackendClient) -> list[App]:
    env = await client.call("GET", "/apps", failure_message="Failed to load apps")
    return decode_items(App, env.data, what="app")


async def get_app(client: BackendClient, app_id: str | int) -> App:
    env = await client.call("GET", f"/apps/{app_id}", failure_message="Failed to load app")
    return decode_record(App, env.data, what="app")


async def create_app(client: BackendClient, payload: dict[str, Any]) -> str | None:
    env = await client.call(
        "POST", "/apps", json=payload, failure_message="Failed to register app"
    )
    return env.message


async def update_app(
    client: BackendClient, app_id: str | int, payload: dict[str, Any]
) -> str | None:
    env = await client.call(
        "PUT", f"/apps/{app_id}", json=payload, failure_message="Failed to update app"
    )
    return env.message


async def delete_app(client: BackendClient, app_id: str | int) -> str | None:
    env = await client.call("DELETE", f"/apps/{app_id}", failure_message="Failed to delete app")
    return env.message
