from dataclasses import replace
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from app.errors import FetchError, StoreError
from app.main import app, get_fetcher, get_settings, get_store, settings as app_settings
from tests.doubles import FakeFetcher, FakeStore


@pytest.fixture
def store():
    return FakeStore(url="https://cdn.example.com/documents/fabric/abc.pdf")


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def client(store, fetcher):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_fetcher] = lambda: fetcher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_index_message(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"message": "FabricJS JSON to PDF Server"}


def test_health(client):
    assert client.get("/health").json()["ok"] is True


def test_unknown_route_is_plain_404(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.text == "Resource not found"


def test_convert_returns_url(client, store):
    body = {
        "fabricJSON": {
            "background": "#ffffff",
            "objects": [
                {"type": "rect", "left": 10, "top": 10, "width": 100, "height": 50, "fill": "#ff0000"},
                {"type": "polygon", "left": 0, "top": 0},
            ],
        }
    }
    resp = client.post("/fabric/convert-to-pdf", json=body)
    assert resp.status_code == 200
    assert resp.json() == "https://cdn.example.com/documents/fabric/abc.pdf"
    [(data, kind)] = store.stored
    assert kind == "pdf"
    assert data.startswith(b"%PDF-")


def test_fetch_failure_is_502_with_kind(client, fetcher, store):
    fetcher.failures.add("https://img.example.com/gone.png")
    body = {"fabricJSON": {"objects": [{"type": "image", "left": 0, "top": 0, "width": 5, "height": 5, "src": "https://img.example.com/gone.png"}]}}
    resp = client.post("/fabric/convert-to-pdf", json=body)
    assert resp.status_code == 502
    assert resp.json()["error"] == "FetchError"
    assert store.stored == []


def test_malformed_object_is_400(client):
    body = {"fabricJSON": {"objects": [{"type": "rect", "left": 0, "top": 0, "fill": "red"}]}}
    resp = client.post("/fabric/convert-to-pdf", json=body)
    assert resp.status_code == 400
    assert resp.json()["error"] == "RenderError"


def test_store_failure_is_502(client, store):
    store.error = StoreError("upload of documents/fabric/x.pdf failed")
    resp = client.post("/fabric/convert-to-pdf", json={"fabricJSON": {"objects": []}})
    assert resp.status_code == 502
    assert resp.json() == {"error": "StoreError", "message": "upload of documents/fabric/x.pdf failed"}


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"fabricJSON": {"background": 123, "objects": []}},
        {"fabricJSON": {"objects": None}},
        {
            "fabricJSON": {
                "background": "notacolour",
                "objects": [{"type": "image", "left": 0, "top": 0, "width": 5, "height": 5, "src": "https://x/a.png"}],
            }
        },
    ],
)
def test_malformed_request_uses_error_descriptor(client, fetcher, store, body):
    resp = client.post("/fabric/convert-to-pdf", json=body)
    assert resp.status_code == 400
    payload = resp.json()
    assert set(payload) == {"error", "message"}
    assert payload["error"] == "RenderError"
    assert payload["message"].startswith("invalid request:")
    assert fetcher.calls == []
    assert store.stored == []


def test_fetcher_dependency_closes_session(settings):
    session = Mock()
    deps = get_fetcher(settings)
    fetcher = next(deps)
    fetcher._session = session
    with pytest.raises(StopIteration):
        next(deps)
    session.close.assert_called_once()


def test_internal_key_enforced_when_configured(client):
    app.dependency_overrides[get_settings] = lambda: replace(app_settings, INTERNAL_API_KEY="s3cret")
    body = {"fabricJSON": {"objects": []}}
    assert client.post("/fabric/convert-to-pdf", json=body).status_code == 401
    resp = client.post("/fabric/convert-to-pdf", json=body, headers={"x-internal-key": "s3cret"})
    assert resp.status_code == 200
