from __future__ import annotations

from conftest import FakeBackend, envelope, login
from fastapi.testclient import TestClient


def _set_cookie_headers(response) -> list[str]:
    return response.headers.get_list("set-cookie")


def test_ui_login_is_public_and_ui_requires_session(client: TestClient) -> None:
    r = client.get("/ui/login")
    assert r.status_code == 200
    assert "Login ID" in r.text

    r2 = client.get("/ui/projects", follow_redirects=False)
    assert r2.status_code == 302
    assert r2.headers["location"] == "/ui/login"

    css = client.get("/ui/static/console.css")
    assert css.status_code == 200


def test_login_validation_does_not_call_backend(client: TestClient, backend: FakeBackend) -> None:
    r = client.post("/ui/login", data={"login_id": "", "password": ""})

    assert r.status_code == 400
    assert "Login ID is required" in r.text
    assert "Password is required" in r.text
    assert backend.requests == []


def test_login_sets_session_cookie_and_forwards_bearer(
    client: TestClient, backend: FakeBackend
) -> None:
    backend.on("POST", "/login", {"token": "tok-42"})
    backend.on("GET", "/user", {"id": 1, "login_id": "admin", "name": "Admin User"})
    backend.on("GET", "/auth/histories", envelope([]))

    r = client.post(
        "/ui/login", data={"login_id": "admin", "password": "secret"}, follow_redirects=False
    )
    assert r.status_code == 302
    assert r.headers["location"].startswith("/ui/?msg=Logged+in")
    assert any(h.startswith("lc_token=tok-42") for h in _set_cookie_headers(r))
    assert any("HttpOnly" in h for h in _set_cookie_headers(r))

    (user_call,) = backend.calls("GET", "/user")
    assert user_call.headers["Authorization"] == "Bearer tok-42"

    dash = client.get("/ui/")
    assert dash.status_code == 200
    assert "Admin User" in dash.text
    assert backend.calls("GET", "/auth/histories")[-1].headers["Authorization"] == "Bearer tok-42"


def test_login_failure_shows_backend_message(client: TestClient, backend: FakeBackend) -> None:
    backend.on("POST", "/login", {"message": "Invalid credentials"}, status=401)

    r = client.post("/ui/login", data={"login_id": "admin", "password": "nope"})

    assert r.status_code == 401
    assert "Invalid credentials" in r.text
    assert "lc_token" not in client.cookies


def test_backend_401_logs_the_operator_out(client: TestClient, backend: FakeBackend) -> None:
    login(client, backend)
    backend.on("GET", "/projects", {"message": "Unauthenticated."}, status=401)

    r = client.get("/ui/projects", follow_redirects=False)

    assert r.status_code == 302
    assert r.headers["location"].startswith("/ui/login?msg=Session+expired")
    assert any(h.startswith('lc_token=""') for h in _set_cookie_headers(r))


def test_logout_clears_cookies_even_if_backend_fails(
    client: TestClient, backend: FakeBackend
) -> None:
    login(client, backend)
    backend.on("POST", "/logout", {"message": "boom"}, status=500)

    r = client.post("/ui/logout", follow_redirects=False)

    assert r.status_code == 302
    assert r.headers["location"].startswith("/ui/login?msg=Logged+out")
    assert len(backend.calls("POST", "/logout")) == 1
    assert any(h.startswith('lc_token=""') for h in _set_cookie_headers(r))

    again = client.get("/ui/", follow_redirects=False)
    assert again.status_code == 302
    assert again.headers["location"] == "/ui/login"


def test_unknown_ui_page_renders_html_404(authed: TestClient) -> None:
    r = authed.get("/ui/does-not-exist")
    assert r.status_code == 404
    assert "text/html" in r.headers["content-type"]
    assert "Page not found" in r.text
