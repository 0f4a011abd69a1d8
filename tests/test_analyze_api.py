"""Tests for the gateway: POST /api/analyze, GET /api/health, error mapping and method handling."""

import asyncio
import json

import pytest

from gamelens.api.main import _get_model_client, _get_settings, app
from gamelens.core.errors import UpstreamParseError, UpstreamStatusError, UpstreamTimeoutError
from tests.conftest import RecordingClient, make_images

pytestmark = [pytest.mark.fast]


def test_health(api_client):
    resp = api_client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_analyze_success_returns_result_text(api_client, recording_client):
    resp = api_client.post("/api/analyze", json={"images": make_images(5)})
    assert resp.status_code == 200
    assert resp.json() == {"resultText": "final analysis"}
    assert len(recording_client.vision_calls()) == 5
    assert len(recording_client.thinking_calls()) == 1


def test_analyze_single_image_is_400_without_calls(api_client, recording_client):
    resp = api_client.post("/api/analyze", json={"images": make_images(1)})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Please upload 2-9 screenshots", "kind": "validation"}
    assert recording_client.calls == []


def test_analyze_prompts_and_models_are_forwarded(api_client, recording_client):
    resp = api_client.post(
        "/api/analyze",
        json={
            "images": make_images(2),
            "prompts": {"vision": "V!", "thinking": "T!"},
            "visionModel": "v-override",
            "thinkingModel": "t-override",
        },
    )
    assert resp.status_code == 200
    step, model, content = recording_client.vision_calls()[0]
    assert model == "v-override"
    assert content[1].text == "V!\n(Screenshot 1)"
    assert recording_client.thinking_calls()[0][1] == "t-override"
    assert recording_client.thinking_calls()[0][2][0].text.startswith("T!\n\n")


def test_analyze_empty_body_is_bound_violation(api_client, recording_client):
    resp = api_client.post("/api/analyze", content=b"", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Please upload 2-9 screenshots"


def test_analyze_invalid_json_is_400(api_client, recording_client):
    resp = api_client.post("/api/analyze", content=b"{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Request body is not valid JSON", "kind": "validation"}
    assert recording_client.calls == []


@pytest.mark.parametrize("body", [b"[1, 2]", b'"text"'])
def test_analyze_non_object_json_is_400(api_client, body):
    resp = api_client.post("/api/analyze", content=body, headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["kind"] == "validation"


def test_analyze_wrong_images_type_is_400(api_client, recording_client):
    resp = api_client.post("/api/analyze", json={"images": "not-a-list"})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("images")
    assert recording_client.calls == []


def test_analyze_body_too_large_is_400(api_client, settings, recording_client):
    app.dependency_overrides[_get_settings] = lambda: settings.model_copy(update={"max_body_bytes": 100})
    resp = api_client.post("/api/analyze", json={"images": ["x" * 200, "y"]})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Request body too large"
    assert recording_client.calls == []


def _post_chunked(pieces: list[bytes]) -> tuple[int, bytes, int]:
    """Drive the app over raw ASGI with a chunked body. Returns (status, response body, chunks pulled)."""
    pulled = 0
    messages: list[dict] = []

    async def receive() -> dict:
        nonlocal pulled
        if pulled >= len(pieces):
            return {"type": "http.disconnect"}
        pulled += 1
        return {"type": "http.request", "body": pieces[pulled - 1], "more_body": pulled < len(pieces)}

    async def send(message: dict) -> None:
        messages.append(message)

    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "POST",
        "scheme": "http",
        "path": "/api/analyze",
        "raw_path": b"/api/analyze",
        "root_path": "",
        "query_string": b"",
        "headers": [
            (b"host", b"testserver"),
            (b"content-type", b"application/json"),
            (b"transfer-encoding", b"chunked"),
        ],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }
    asyncio.run(app(scope, receive, send))
    start = next(m for m in messages if m["type"] == "http.response.start")
    body = b"".join(m.get("body", b"") for m in messages if m["type"] == "http.response.body")
    return start["status"], body, pulled


def test_analyze_chunked_body_stops_reading_past_cap(api_client, settings, recording_client):
    app.dependency_overrides[_get_settings] = lambda: settings.model_copy(update={"max_body_bytes": 100})
    status, body, pulled = _post_chunked([b"x" * 100] * 1000)
    assert status == 400
    assert json.loads(body)["error"] == "Request body too large"
    assert pulled <= 3
    assert recording_client.calls == []


def test_analyze_chunked_body_within_cap_is_read(api_client, recording_client):
    payload = json.dumps({"images": make_images(2)}).encode()
    pieces = [payload[i : i + 16] for i in range(0, len(payload), 16)]
    status, body, pulled = _post_chunked(pieces)
    assert status == 200
    assert json.loads(body) == {"resultText": "final analysis"}
    assert pulled == len(pieces)
    assert len(recording_client.vision_calls()) == 2


def test_analyze_missing_api_key_is_500(api_client, settings, recording_client):
    app.dependency_overrides[_get_settings] = lambda: settings.model_copy(update={"api_key": ""})
    resp = api_client.post("/api/analyze", json={"images": make_images(3)})
    assert resp.status_code == 500
    assert resp.json() == {"error": "ARK_API_KEY is not configured", "kind": "configuration"}
    assert recording_client.calls == []


def test_analyze_missing_model_is_500(api_client, settings, recording_client):
    app.dependency_overrides[_get_settings] = lambda: settings.model_copy(
        update={"vision_model": "", "thinking_model": ""}
    )
    resp = api_client.post("/api/analyze", json={"images": make_images(3)})
    assert resp.status_code == 500
    assert resp.json()["kind"] == "configuration"
    assert recording_client.calls == []


@pytest.mark.parametrize(
    "exc, kind",
    [
        (UpstreamStatusError(429, "rate limited"), "upstream_status"),
        (UpstreamParseError(), "upstream_parse"),
        (UpstreamTimeoutError(180000), "upstream_timeout"),
    ],
)
def test_analyze_upstream_failures_are_500(api_client, exc, kind):
    def responder(step, model, content):
        raise exc

    app.dependency_overrides[_get_model_client] = lambda: RecordingClient(responder=responder)
    resp = api_client.post("/api/analyze", json={"images": make_images(2)})
    assert resp.status_code == 500
    body = resp.json()
    assert body["kind"] == kind
    assert body["error"] == exc.message
    assert "resultText" not in body


def test_analyze_batched_policy_from_settings(api_client, settings, recording_client):
    app.dependency_overrides[_get_settings] = lambda: settings.model_copy(update={"policy": "batched"})
    resp = api_client.post("/api/analyze", json={"images": make_images(3)})
    assert resp.status_code == 200
    assert recording_client.steps() == ["vision_batched", "thinking"]


@pytest.mark.parametrize("method", ["put", "delete", "patch"])
def test_other_methods_are_405(api_client, method):
    resp = getattr(api_client, method)("/api/analyze")
    assert resp.status_code == 405
    assert resp.json() == {"error": "Method Not Allowed"}


def test_post_to_static_path_is_405(api_client):
    resp = api_client.post("/index.html")
    assert resp.status_code == 405
