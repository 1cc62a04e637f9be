from __future__ import annotations

from typing import Any

from license_console.backend.client import (
    BackendClient,
    BackendError,
    decode_items,
    normalize_errors,
)
from license_console.backend.models import User

# The user endpoints are judged by HTTP status; ``success`` may be absent.


def _unwrap(body: Any, *, failure_message: str) -> tuple[Any, str | None]:
    if not isinstance(body, dict):
        return body, None
    message = body.get("message") if isinstance(body.get("message"), str) else None
    if body.get("success") is False:
        raise BackendError(
            message or failure_message, errors=normalize_errors(body.get("errors"))
        )
    return body.get("data", body), message


async def list_users(client: BackendClient) -> list[User]:
    body = await client.request("GET", "/users", failure_message="Failed to load users")
    data, _ = _unwrap(body, failure_message="Failed to load users")
    return decode_items(User, data, what="user")


async def create_user(client: BackendClient, payload: dict[str, Any]) -> str | None:
    body = await client.request(
        "POST", "/users", json=payload, failure_message="Failed to register user"
    )
    _, message = _unwrap(body, failure_message="Failed to register user")
    return message
