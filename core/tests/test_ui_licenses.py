from __future__ import annotations

import httpx
from conftest import FakeBackend, envelope
from fastapi.testclient import TestClient

LICENSE_RECORD = {
    "license_id": 3,
    "name": "Office Suite",
    "license_key": '[{"key": "serial", "value": "AAA-BBB"}]',
    "used": 2,
    "limit": 10,
    "expire_at": "2026-03-31 00:00:00",
    "supplier": {"suppliers_id": 4, "suppliers_name": "Acme"},
}


def test_licenses_list_shows_parsed_keys(authed: TestClient, backend: FakeBackend) -> None:
    backend.on("GET", "/licenses", envelope([LICENSE_RECORD]))

    r = authed.get("/ui/licenses")

    assert r.status_code == 200
    assert "Office Suite" in r.text
    assert "AAA-BBB" in r.text
    assert "Acme" in r.text
    assert "/ui/licenses/3/edit" in r.text


def test_add_key_row_rerenders_without_saving(authed: TestClient, backend: FakeBackend) -> None:
    data = {"name": "Office", "key_name": "serial", "key_value": "AAA", "action": "add_key"}

    r = authed.post("/ui/licenses/new", data=data)

    assert r.status_code == 200
    assert r.text.count('name="key_name"') == 3
    assert 'value="AAA"' in r.text
    assert backend.calls("POST", "/licenses") == []


def test_create_license_posts_key_pairs(authed: TestClient, backend: FakeBackend) -> None:
    backend.on("POST", "/licenses", envelope(None, message="License created"))
    data = [
        ("name", "Office"),
        ("supplier_id", "4"),
        ("limit", "5"),
        ("used", "0"),
        ("key_name", "serial"),
        ("key_value", "AAA"),
        ("key_name", ""),
        ("key_value", ""),
        ("action", "save"),
    ]

    r = authed.post(
        "/ui/licenses/new",
        content="&".join(f"{k}={v}" for k, v in data),
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        follow_redirects=False,
    )

    assert r.status_code == 302
    assert r.headers["location"] == "/ui/licenses?msg=License+created&kind=ok"
    payload = backend.last_json("POST", "/licenses")
    assert payload["license_key"] == [{"key": "serial", "value": "AAA"}]
    assert payload["supplier_id"] == 4


def test_license_validation_message(authed: TestClient, backend: FakeBackend) -> None:
    r = authed.post("/ui/licenses/new", data={"name": "", "action": "save"})

    assert r.status_code == 400
    assert "License name is required" in r.text
    assert "Supplier ID is required" in r.text
    assert backend.calls("POST", "/licenses") == []


def test_edit_license_prefills_key_rows(authed: TestClient, backend: FakeBackend) -> None:
    backend.on("GET", "/licenses/3", envelope(LICENSE_RECORD))
    backend.on("PUT", "/licenses/3", envelope(None, message="License updated"))

    page = authed.get("/ui/licenses/3/edit")
    assert page.status_code == 200
    assert 'value="serial"' in page.text
    assert 'value="2026-03-31"' in page.text

    r = authed.post(
        "/ui/licenses/3/edit",
        data={
            "name": "Office Suite",
            "supplier_id": "4",
            "limit": "10",
            "used": "2",
            "action": "save",
        },
        follow_redirects=False,
    )
    assert r.status_code == 302
    assert backend.last_json("PUT", "/licenses/3")["license_key"] == []


def test_delete_license(authed: TestClient, backend: FakeBackend) -> None:
    backend.on("DELETE", "/licenses/3", envelope(None, message="License deleted"))

    r = authed.post("/ui/licenses/3/delete", follow_redirects=False)

    assert r.status_code == 302
    assert r.headers["location"] == "/ui/licenses?msg=License+deleted&kind=ok"
    assert len(backend.calls("DELETE", "/licenses/3")) == 1


def test_deleted_license_disappears_from_list(authed: TestClient, backend: FakeBackend) -> None:
    rows = [LICENSE_RECORD, dict(LICENSE_RECORD, license_id=4, name="Map Pack")]

    def _list(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=envelope(list(rows)))

    def _delete(request: httpx.Request) -> httpx.Response:
        rows[:] = [row for row in rows if row["license_id"] != 4]
        return httpx.Response(200, json=envelope(None, message="License deleted"))

    backend.on("GET", "/licenses", handler=_list)
    backend.on("DELETE", "/licenses/4", handler=_delete)

    before = authed.get("/ui/licenses")
    assert "Map Pack" in before.text

    r = authed.post("/ui/licenses/4/delete", follow_redirects=True)

    assert r.status_code == 200
    assert "License deleted" in r.text
    assert "Office Suite" in r.text
    assert "Map Pack" not in r.text
    assert len(backend.calls("GET", "/licenses")) == 2
