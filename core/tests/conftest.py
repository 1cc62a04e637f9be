from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from license_console.app import create_app

Handler = Callable[[httpx.Request], httpx.Response]


def envelope(
    data: Any = None,
    *,
    message: str | None = None,
    success: bool = True,
    pagination: dict[str, Any] | None = None,
    errors: dict[str, Any] | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": success, "data": data}
    if message is not None:
        body["message"] = message
    if pagination is not None:
        body["pagination"] = pagination
    if errors is not None:
        body["errors"] = errors
    return body


def page_meta(current: int, last: int, *, per_page: int = 10, total: int | None = None) -> dict:
    """A Laravel-style pagination descriptor."""

    total = per_page * last if total is None else total
    links: list[dict[str, Any]] = [
        {
            "url": None if current <= 1 else f"http://backend/api?page={current - 1}",
            "label": "&laquo; Previous",
            "active": False,
        }
    ]
    for n in range(1, last + 1):
        links.append({"url": f"http://backend/api?page={n}", "label": str(n), "active": n == current})
    links.append(
        {
            "url": None if current >= last else f"http://backend/api?page={current + 1}",
            "label": "Next &raquo;",
            "active": False,
        }
    )
    return {
        "total": total,
        "per_page": per_page,
        "current_page": current,
        "last_page": last,
        "next_page_url": None if current >= last else f"http://backend/api?page={current + 1}",
        "prev_page_url": None if current <= 1 else f"http://backend/api?page={current - 1}",
        "from": (current - 1) * per_page + 1,
        "to": min(current * per_page, total),
        "links": links,
    }


class FakeBackend:
    """In-memory stand-in for the licensing REST API, served via httpx.MockTransport."""

    prefix = "/api"

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        status: int = 200,
        handler: Handler | None = None,
    ) -> None:
        if handler is None:

            def _respond(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status, json=body)

            handler = _respond

        self.routes[(method.upper(), self.prefix + path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"success": False, "message": "Not found"})
        return route(request)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        full = self.prefix + path
        return [r for r in self.requests if r.method == method and r.url.path == full]

    def last_json(self, method: str, path: str) -> Any:
        return json.loads(self.calls(method, path)[-1].content)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def client(tmp_path: Path, monkeypatch, backend: FakeBackend) -> Iterator[TestClient]:
    monkeypatch.setenv("LICENSE_CONSOLE_HOME", str(tmp_path))
    monkeypatch.delenv("LICENSE_CONSOLE_BACKEND_URL", raising=False)

    app = create_app(transport=httpx.MockTransport(backend.handle))
    with TestClient(app) as c:
        yield c


def login(client: TestClient, backend: FakeBackend, *, token: str = "tok-1") -> None:
    backend.on("POST", "/login", {"token": token})
    backend.on("GET", "/user", {"id": 1, "login_id": "admin", "name": "Admin User"})
    r = client.post(
        "/ui/login", data={"login_id": "admin", "password": "secret"}, follow_redirects=False
    )
    assert r.status_code == 302


@pytest.fixture
def authed(client: TestClient, backend: FakeBackend) -> TestClient:
    login(client, backend)
    return client
