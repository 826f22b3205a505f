import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.di import get_http, get_settings
from app.main import app
from conftest import WHEAT_JSON, gemini_envelope


@pytest.fixture()
def api(fast_settings):
    state = {"settings": fast_settings, "replies": [], "requests": []}

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        status, body = state["replies"][len(state["requests"]) - 1]
        if isinstance(body, Exception):
            raise body
        return httpx.Response(status, json=body) if isinstance(body, dict) else httpx.Response(status, text=body)

    upstream = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_settings] = lambda: state["settings"]
    app.dependency_overrides[get_http] = lambda: upstream
    yield TestClient(app), state
    app.dependency_overrides.clear()
    asyncio.run(upstream.aclose())


def test_root(api):
    client, _ = api
    r = client.get("/")
    assert r.status_code == 200
    assert r.text == "Crop service is running"


def test_health(api):
    client, _ = api
    r = client.get("/health")
    assert r.status_code == 200
    assert r.text == "OK"


def test_get_price_structured(api):
    client, state = api
    state["replies"] = [(200, gemini_envelope("```json\n" + WHEAT_JSON + "\n```"))]
    r = client.get("/get-price/wheat")
    assert r.status_code == 200
    assert r.json() == {"commodity": "wheat", "price": 25.5, "currency": "INR", "unit": "per kilogram"}


def test_get_price_plain_text(api):
    client, state = api
    state["replies"] = [(200, gemini_envelope(WHEAT_JSON))]
    r = client.get("/get-price/wheat", params={"format": "text"})
    assert r.status_code == 200
    assert r.json() == {"explanation": "₹ 25.5"}


def test_get_price_rejects_unknown_format(api):
    client, state = api
    r = client.get("/get-price/wheat", params={"format": "xml"})
    assert r.status_code == 422
    assert state["requests"] == []


def test_missing_key_returns_config_error(api):
    client, state = api
    state["settings"] = Settings(GEMINI_API_KEY="")
    r = client.get("/get-price/wheat")
    assert r.status_code == 500
    assert r.json() == {"error": "Server configuration error: AI Key missing."}
    assert state["requests"] == []


def test_upstream_client_error(api):
    client, state = api
    state["replies"] = [(403, {"error": {"message": "permission denied"}})]
    r = client.get("/get-price/wheat")
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "Failed to get response from AI service."
    assert "403" in body["details"]
    assert len(state["requests"]) == 1


def test_upstream_retries_exhausted(api):
    client, state = api
    state["replies"] = [(503, "unavailable")] * 5
    r = client.get("/get-price/wheat")
    assert r.status_code == 500
    assert r.json()["error"] == "Failed to get response from AI service."
    assert "5 attempts" in r.json()["details"]
    assert len(state["requests"]) == 5


def test_parse_failure(api):
    client, state = api
    state["replies"] = [(200, gemini_envelope("{invalid json"))]
    r = client.get("/get-price/wheat")
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to parse response from AI service.", "details": "malformed JSON"}


def test_blank_name(api):
    client, state = api
    r = client.get("/get-price/%20%20")
    assert r.status_code == 400
    assert state["requests"] == []


def test_undecodable_upstream_body_returns_json_error(api):
    client, state = api
    state["replies"] = [(200, httpx.DecodingError("bad gzip"))]
    r = client.get("/get-price/wheat")
    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/json")
    body = r.json()
    assert body["error"] == "Failed to get response from AI service."
    assert "DecodingError" in body["details"]
    assert len(state["requests"]) == 1


def test_unexpected_exception_returns_json_error(api):
    client, state = api
    state["replies"] = [(200, RuntimeError("handler exploded"))]
    r = client.get("/get-price/wheat")
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to get response from AI service.", "details": "handler exploded"}
