from __future__ import annotations

import logging

from license_console.backend.client import BackendClient, BackendError, decode_record
from license_console.backend.models import CurrentUser

logger = logging.getLogger(__name__)


async def login(client: BackendClient, *, login_id: str, password: str) -> str:
    """Exchange credentials for a bearer token (``POST /login``)."""

    body = await client.request(
        "POST",
        "/login",
        json={"login_id": login_id, "password": password},
        allow_unauthorized=True,
        failure_message="Login failed",
    )
    token = body.get("token") if isinstance(body, dict) else None
    if not isinstance(token, str) or not token.strip():
        message = body.get("message") if isinstance(body, dict) else None
        raise BackendError(message if isinstance(message, str) and message else "Login failed")
    return token.strip()


async def get_current_user(client: BackendClient) -> CurrentUser:
    body = await client.request("GET", "/user")
    # Some deployments wrap the user in the standard envelope.
    if isinstance(body, dict) and "success" in body and isinstance(body.get("data"), dict):
        body = body["data"]
    return decode_record(CurrentUser, body, what="user")


async def logout(client: BackendClient) -> None:
    """Invalidate the token on the backend (``POST /logout``)."""

    await client.request("POST", "/logout")
    logger.info("Operator logged out")
