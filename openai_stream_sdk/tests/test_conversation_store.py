"""Unit tests for the demo ``ConversationStore``."""
from __future__ import annotations

import itertools

import pytest

from openai_stream_sdk.base.errors import HTTPStatusError, RemoteError
from openai_stream_sdk.demo.conversations import ConversationStore, UnknownConversationError
from openai_stream_sdk.tests.streaming.helpers import chunk_json, make_client, sse, stream_handler
from openai_stream_sdk.tests.utils import capture_logger


def _store(chunks, status: int = 200) -> ConversationStore:
    counter = itertools.count(1)
    return ConversationStore(
        make_client(stream_handler(chunks, status=status)),
        id_provider=lambda: f"id{next(counter)}",
        default_model="gpt-4o-mini",
    )


def test_stream_chunks_meld_into_one_message_per_completion_id():
    body = sse(
        chunk_json(chunk_id="c1", content="Hel", role="assistant"),
        chunk_json(chunk_id="c1", content="lo"),
        chunk_json(chunk_id="c1", content=None),
        done=True,
    )
    store = _store([body])
    conv = store.create_conversation()
    assert store.send_message(conv.id, "hi", "gpt-4o-mini") is None
    assert [(m.id, m.role, m.content) for m in conv.messages] == [
        ("id2", "user", "hi"),
        ("c1", "assistant", "Hello"),
    ]
    assert conv.messages[1].created_at == 1700000000.0


def test_stream_reply_yields_only_non_empty_deltas():
    body = sse(chunk_json(content=""), chunk_json(content="a"), chunk_json(content="b"), done=True)
    store = _store([body])
    conv = store.create_conversation()
    store.add_user_message(conv.id, "hi")
    assert list(store.stream_reply(conv.id, "gpt-4o-mini")) == ["a", "b"]


def test_failure_is_recorded_then_cleared_by_the_next_reply():
    store = _store([b"service down"], status=503)
    conv = store.create_conversation()
    logger, handler = capture_logger("test.demo.store")
    store._logger = logger  # type: ignore[attr-defined]

    err = store.send_message(conv.id, "hi", "gpt-4o-mini")
    assert isinstance(err, HTTPStatusError)
    assert store.errors[conv.id] is err
    assert err.message == "service down"
    events = handler.events()
    assert events[-1]["event"] == "demo.reply.error"
    assert events[-1]["error_code"] == "unavailable"
    assert events[-1]["emitted"] is False

    store._client = make_client(stream_handler([sse(chunk_json(content="ok"), done=True)]))  # type: ignore[attr-defined]
    assert store.complete_chat(conv.id, "gpt-4o-mini") is None
    assert conv.id not in store.errors
    assert handler.events()[-1]["event"] == "demo.reply.end"


def test_mid_stream_remote_error_keeps_partial_reply():
    body = sse(chunk_json(chunk_id="c1", content="par")) + b'data: {"error":{"message":"cut","code":"x"}}\n\n'
    store = _store([body])
    conv = store.create_conversation()
    err = store.send_message(conv.id, "hi", "gpt-4o-mini")
    assert isinstance(err, RemoteError)
    assert conv.messages[-1].content == "par"


def test_selection_and_deletion():
    store = _store([])
    a = store.create_conversation()
    b = store.create_conversation()
    store.select_conversation(b.id)
    assert store.selected_conversation is b
    with pytest.raises(UnknownConversationError):
        store.select_conversation("missing")
    assert store.selected_id == b.id

    store.errors[b.id] = RemoteError(code="x", message="y")
    store.delete_conversation(b.id)
    assert store.selected_id is None and store.selected_conversation is None
    assert b.id not in store.errors
    assert [c.id for c in store.conversations] == [a.id]

    store.select_conversation(a.id)
    store.select_conversation(None)
    assert store.selected_id is None
    with pytest.raises(UnknownConversationError):
        store.add_user_message("missing", "hi")
