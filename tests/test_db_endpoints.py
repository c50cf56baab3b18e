from __future__ import annotations

import base64
import json

import pytest


SECRET = "panera:panque"


def _basic(token: str) -> dict[str, str]:
    return {"Authorization": f"Basic {token}"}


def test_get_before_any_write_returns_null(make_client, fake_store):
    client = make_client()

    r = client.get("/api/db")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "db": None}
    assert r.headers["content-type"].startswith("application/json")
    assert r.headers["cache-control"] == "no-store"
    assert fake_store.closed == 1


def test_put_then_get_roundtrip(make_client, fake_store):
    client = make_client()
    doc = {"orders": [{"id": 1, "item": "bagel"}], "nested": {"a": None, "ü": "ñ"}}

    r = client.put("/api/db", json={"db": doc})
    assert r.status_code == 200
    assert r.json() == {"ok": True}
    assert r.headers["cache-control"] == "no-store"

    r = client.get("/api/db")
    assert r.json() == {"ok": True, "db": doc}
    assert json.loads(fake_store.data["db"]) == doc


def test_repeated_get_is_stable(make_client):
    client = make_client()
    client.post("/api/db", json={"a": 1})

    first = client.get("/api/db").json()
    second = client.get("/api/db").json()
    assert first == second == {"ok": True, "db": {"a": 1}}


def test_bare_and_wrapped_bodies_store_the_same_document(make_client, fake_store):
    client = make_client()

    client.put("/api/db", json={"a": 1})
    bare = fake_store.data["db"]

    client.put("/api/db", json={"db": {"a": 1}})
    wrapped = fake_store.data["db"]

    assert bare == wrapped == '{"a":1}'


def test_write_replaces_whole_document(make_client):
    client = make_client()
    client.post("/api/db", json={"a": 1, "b": 2})
    client.post("/api/db", json={"c": 3})

    assert client.get("/api/db").json()["db"] == {"c": 3}


def test_netlify_function_path_is_served(make_client):
    client = make_client()
    client.post("/.netlify/functions/db", json={"a": 1})

    assert client.get("/.netlify/functions/db").json() == {"ok": True, "db": {"a": 1}}


@pytest.mark.parametrize(
    "content, error",
    [
        (b"", "missing_body"),
        (b"not json", "invalid_json"),
        (b"\xff\xfe{", "invalid_json"),
        (b'{"a": NaN}', "invalid_json"),
        (b"null", "invalid_db"),
        (b"42", "invalid_db"),
        (b'"text"', "invalid_db"),
        (b"[1, 2]", "invalid_db"),
        (b'{"db": null}', "invalid_db"),
        (b'{"db": 7}', "invalid_db"),
    ],
)
def test_invalid_bodies_are_rejected(make_client, fake_store, content, error):
    client = make_client()

    r = client.post("/api/db", content=content, headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"ok": False, "error": error}
    assert ("set", "db") not in fake_store.calls


def test_unsupported_method_is_405(make_client):
    client = make_client()

    r = client.delete("/api/db")
    assert r.status_code == 405
    assert r.json() == {"ok": False, "error": "method_not_allowed"}
    assert r.headers["allow"] == "GET, POST, PUT"
    assert r.headers["cache-control"] == "no-store"


@pytest.mark.parametrize("method", ["TRACE", "PROPFIND", "PATCH", "BREW"])
def test_any_other_method_gets_the_json_405(make_client, fake_store, method):
    client = make_client()

    r = client.request(method, "/api/db")
    assert r.status_code == 405
    assert r.json() == {"ok": False, "error": "method_not_allowed"}
    assert r.headers["allow"] == "GET, POST, PUT"
    assert r.headers["cache-control"] == "no-store"
    assert ("set", "db") not in fake_store.calls


def test_unknown_method_without_credentials_is_401(make_client, fake_store):
    client = make_client(auth_secret=SECRET)

    r = client.request("PROPFIND", "/.netlify/functions/db")
    assert r.status_code == 401
    assert r.json() == {"ok": False, "error": "unauthorized"}
    assert r.headers["cache-control"] == "no-store"
    assert fake_store.calls == []


def test_corrupt_stored_value_reads_as_null(make_client, fake_store):
    fake_store.data["db"] = "{not json"
    client = make_client()

    r = client.get("/api/db")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "db": None}


@pytest.mark.parametrize("method", ["get", "post", "put"])
def test_store_fault_is_503(make_client, fake_store, method):
    fake_store.fail = True
    client = make_client()

    kwargs = {} if method == "get" else {"json": {"a": 1}}
    r = getattr(client, method)("/api/db", **kwargs)
    assert r.status_code == 503
    assert r.json() == {"ok": False, "error": "blobs_unavailable"}


@pytest.mark.parametrize("method", ["GET", "POST", "PUT", "DELETE"])
def test_unconfigured_store_is_503_for_every_method(make_client, method):
    client = make_client(store=None)

    r = client.request(method, "/api/db", json={"a": 1} if method in ("POST", "PUT") else None)
    assert r.status_code == 503
    body = r.json()
    assert body["ok"] is False
    assert body["error"] == "blobs_not_configured"
    assert body["hint"]


def test_failing_store_opener_is_treated_as_unconfigured(make_settings):
    from fastapi.testclient import TestClient

    import app as app_module

    def _boom():
        raise RuntimeError("cannot open")

    client = TestClient(app_module.create_app(settings=make_settings(), store_opener=_boom))
    r = client.get("/api/db")
    assert r.status_code == 503
    assert r.json()["error"] == "blobs_not_configured"


# -------------------- auth --------------------


def test_missing_credentials_are_401_without_store_access(make_client, fake_store):
    client = make_client(auth_secret=SECRET)

    for method in ("GET", "POST", "PUT", "DELETE"):
        r = client.request(method, "/api/db")
        assert r.status_code == 401
        assert r.json() == {"ok": False, "error": "unauthorized"}

    assert fake_store.calls == []
    assert fake_store.closed == 0


def test_wrong_credentials_are_401(make_client, fake_store):
    client = make_client(auth_secret=SECRET)

    for headers in (
        _basic("panera:wrong"),
        _basic(base64.b64encode(b"panera:wrong").decode()),
        _basic("%%%not-base64%%%"),
        {"Authorization": f"Bearer {SECRET}"},
        {"X-Panera-Auth": "nope"},
    ):
        r = client.get("/api/db", headers=headers)
        assert r.status_code == 401, headers

    assert fake_store.calls == []


@pytest.mark.parametrize(
    "headers",
    [
        _basic(SECRET),
        _basic(base64.b64encode(SECRET.encode()).decode()),
        {"authorization": f"basic {SECRET}"},
        {"X-Panera-Auth": SECRET},
        {"x-panera-auth": base64.b64encode(SECRET.encode()).decode()},
    ],
)
def test_accepted_credential_forms(make_client, headers):
    client = make_client(auth_secret=SECRET)

    r = client.get("/api/db", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"ok": True, "db": None}


def test_open_mode_ignores_headers(make_client):
    client = make_client(auth_secret=None)

    assert client.get("/api/db").status_code == 200
    assert client.get("/api/db", headers=_basic("garbage")).status_code == 200
