from __future__ import annotations

from conftest import FakeBackend, envelope, page_meta
from fastapi.testclient import TestClient


def _history(n: int) -> dict:
    return {
        "auth_history_id": n,
        "project_id": 1,
        "project_name": "Shop POS",
        "terminal_name": f"POS-{n:03d}",
        "serial_no": f"SN{n}",
        "action": "activate",
        "result": "success",
        "authenticate_at": "2025-06-01 10:00:00",
    }


def test_dashboard_shows_latest_histories(authed: TestClient, backend: FakeBackend) -> None:
    backend.on("GET", "/auth/histories", envelope([_history(n) for n in range(1, 9)]))

    r = authed.get("/ui/")

    assert r.status_code == 200
    assert "POS-005" in r.text
    assert "POS-006" not in r.text
    assert backend.calls("GET", "/projects") == []


def test_dashboard_search_finds_projects(authed: TestClient, backend: FakeBackend) -> None:
    backend.on("GET", "/auth/histories", envelope([]))
    backend.on("GET", "/projects", envelope([{"project_id": 3, "name": "Shop POS"}]))

    r = authed.get("/ui/", params={"q": "shop"})

    assert r.status_code == 200
    assert "/ui/projects/3" in r.text
    (call,) = backend.calls("GET", "/projects")
    assert call.url.params["search"] == "shop"


def test_dashboard_sections_fail_independently(authed: TestClient, backend: FakeBackend) -> None:
    backend.on("GET", "/auth/histories", {"message": "History is down"}, status=500)
    backend.on("GET", "/projects", envelope([]))

    r = authed.get("/ui/", params={"q": "nothing"})

    assert r.status_code == 200
    assert "History is down" in r.text
    assert "No projects match" in r.text


def test_history_page_paginates(authed: TestClient, backend: FakeBackend) -> None:
    backend.on(
        "GET",
        "/auth/histories",
        envelope([_history(n) for n in range(11, 21)], pagination=page_meta(2, 3)),
    )

    r = authed.get("/ui/history", params={"page": "2", "search": "SN1"})

    assert r.status_code == 200
    assert "POS-011" in r.text
    assert "11-20 of 30" in r.text
    assert "/ui/history?page=1&amp;search=SN1" in r.text or "search=SN1&amp;page=1" in r.text
    call = backend.calls("GET", "/auth/histories")[-1]
    assert call.url.params["page"] == "2"
    assert call.url.params["search"] == "SN1"


def test_history_page_shows_backend_error(authed: TestClient, backend: FakeBackend) -> None:
    backend.on("GET", "/auth/histories", envelope(None, success=False, message="No access"))

    r = authed.get("/ui/history")

    assert r.status_code == 200
    assert "No access" in r.text


def test_history_page_past_the_end_redirects(authed: TestClient, backend: FakeBackend) -> None:
    meta = dict(page_meta(3, 3), current_page=5, **{"from": None, "to": None})
    backend.on("GET", "/auth/histories", envelope([], pagination=meta))

    r = authed.get("/ui/history", params={"page": "5", "search": "SN1"}, follow_redirects=False)

    assert r.status_code == 302
    assert r.headers["location"] == "/ui/history?page=3&search=SN1"


def test_history_page_keeps_pager_when_empty(authed: TestClient, backend: FakeBackend) -> None:
    meta = dict(page_meta(1, 1, total=0), **{"from": None, "to": None})
    backend.on("GET", "/auth/histories", envelope([], pagination=meta))

    r = authed.get("/ui/history")

    assert r.status_code == 200
    assert "No authentication history." in r.text
    assert '<nav class="pagination">' in r.text
