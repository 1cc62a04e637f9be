from __future__ import annotations

from typing import Final
from urllib.parse import quote, unquote, urlencode

from fastapi import Request
from starlette.responses import Response

from license_console.config import SessionConfig

TOKEN_COOKIE: Final[str] = "lc_token"
USER_COOKIE: Final[str] = "lc_user"
LOGIN_PATH: Final[str] = "/ui/login"


def is_exempt_path(path: str) -> bool:
    """Paths reachable without a backend session."""

    if path == "/healthz":
        return True
    if path == LOGIN_PATH:
        return True
    if path.startswith("/ui/static/"):
        return True
    return False


def requires_session(path: str) -> bool:
    return (path == "/ui" or path.startswith("/ui/")) and not is_exempt_path(path)


def extract_token_from_request(request: Request) -> str | None:
    token = (request.cookies.get(TOKEN_COOKIE) or "").strip()
    return token or None


def current_user_name(request: Request) -> str | None:
    name = unquote(request.cookies.get(USER_COOKIE) or "").strip()
    return name or None


def login_redirect_url(message: str | None = None, *, kind: str = "bad") -> str:
    if not message:
        return LOGIN_PATH
    query = urlencode({"msg": message, "kind": kind})
    return f"{LOGIN_PATH}?{query}"


def set_session_cookies(
    response: Response, *, token: str, user_name: str | None, config: SessionConfig
) -> None:
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        httponly=True,
        samesite="lax",
        secure=config.secure_cookie,
        max_age=config.cookie_max_age_seconds,
    )
    if user_name:
        response.set_cookie(
            USER_COOKIE,
            quote(user_name),
            httponly=True,
            samesite="lax",
            secure=config.secure_cookie,
            max_age=config.cookie_max_age_seconds,
        )


def clear_session_cookies(response: Response) -> None:
    response.delete_cookie(TOKEN_COOKIE)
    response.delete_cookie(USER_COOKIE)
