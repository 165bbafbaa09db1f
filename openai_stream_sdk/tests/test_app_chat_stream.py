"""Demo service routes exercised through ``TestClient`` over a mock transport."""
from __future__ import annotations

import itertools
import json
from typing import Any, Dict, List

import httpx
from fastapi.testclient import TestClient

from openai_stream_sdk.demo.app import create_app
from openai_stream_sdk.demo.conversations import ConversationStore
from openai_stream_sdk.tests.streaming.helpers import (
    chunk_json,
    json_handler,
    make_client,
    sse,
    stream_handler,
)

MODELS = {"object": "list", "data": [{"id": "gpt-4o-mini", "object": "model", "owned_by": "openai"}]}


def _app(handler) -> TestClient:
    counter = itertools.count(1)
    store = ConversationStore(make_client(handler), id_provider=lambda: f"id{next(counter)}")
    return TestClient(create_app(store=store))


def _lines(response: httpx.Response) -> List[Dict[str, Any]]:
    return [json.loads(line) for line in response.text.splitlines() if line.strip()]


def test_post_message_streams_deltas_then_one_final_event() -> None:
    body = sse(chunk_json(content="Hel", role="assistant"), chunk_json(content="lo"), done=True)
    client = _app(stream_handler([body]))
    conv_id = client.post("/api/conversations").json()["id"]

    resp = client.post(f"/api/conversations/{conv_id}/messages", json={"content": "hi"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/x-ndjson")
    events = _lines(resp)
    assert [e["delta"] for e in events if e["type"] == "delta"] == ["Hel", "lo"]
    finals = [e for e in events if e["finish"]]
    assert len(finals) == 1 and finals[0]["type"] == "final"

    detail = client.get(f"/api/conversations/{conv_id}").json()
    messages = detail["conversation"]["messages"]
    assert [(m["role"], m["content"]) for m in messages] == [("user", "hi"), ("assistant", "Hello")]
    assert detail["error"] is None


def test_post_message_upstream_failure_emits_error_event() -> None:
    client = _app(stream_handler([b'{"error":{"message":"boom"}}'], status=500))
    conv_id = client.post("/api/conversations").json()["id"]

    events = _lines(client.post(f"/api/conversations/{conv_id}/messages", json={"content": "hi"}))
    assert events == [
        {"type": "error", "delta": None, "finish": True, "error": "boom", "code": "server_error"}
    ]
    detail = client.get(f"/api/conversations/{conv_id}").json()
    assert detail["error"] == {"code": "server_error", "message": "boom"}


def test_post_message_unknown_conversation_is_404() -> None:
    client = _app(stream_handler([sse(chunk_json())]))
    resp = client.post("/api/conversations/nope/messages", json={"content": "hi"})
    assert resp.status_code == 404
    assert client.post("/api/conversations/nope/messages", json={"content": ""}).status_code == 422


def test_conversation_crud_and_selection() -> None:
    client = _app(stream_handler([]))
    first = client.post("/api/conversations").json()["id"]
    second = client.post("/api/conversations").json()["id"]

    listing = client.get("/api/conversations").json()
    assert listing == {"ok": True, "selected": None, "conversations": [first, second]}

    assert client.post(f"/api/conversations/{second}/select").json() == {"ok": True, "selected": second}
    assert client.get("/api/conversations").json()["selected"] == second

    assert client.delete(f"/api/conversations/{second}").json() == {"ok": True}
    listing = client.get("/api/conversations").json()
    assert listing["conversations"] == [first] and listing["selected"] is None

    assert client.get(f"/api/conversations/{second}").status_code == 404
    assert client.delete(f"/api/conversations/{second}").status_code == 404
    assert client.post("/api/conversations/missing/select").status_code == 404


def test_models_route_lists_ids_and_maps_errors() -> None:
    assert _app(json_handler(MODELS)).get("/api/models").json() == {"ok": True, "models": ["gpt-4o-mini"]}

    resp = _app(json_handler({"error": {"message": "bad key"}}, status=401)).get("/api/models")
    assert resp.status_code == 502
    assert resp.json()["detail"] == {"code": "auth", "message": "bad key"}
