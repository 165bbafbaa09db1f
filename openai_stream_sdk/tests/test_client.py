"""Non-streaming client operations over ``httpx.MockTransport``."""
from __future__ import annotations

import asyncio
import json
from typing import List

import httpx
import pytest

from openai_stream_sdk.base.errors import ErrorCode, HTTPStatusError
from openai_stream_sdk.base.middleware import MiddlewareChain, OpenAIMiddleware, set_global_middleware
from openai_stream_sdk.base.models import (
    AudioFileType,
    AudioResponseFormat,
    AudioTranscriptionQuery,
    AudioTranslationQuery,
    AssistantsQuery,
    AssistantTool,
    ChatMessage,
    ChatQuery,
    FunctionDeclaration,
    MessageQuery,
    ModerationsQuery,
    ThreadsQuery,
)
from openai_stream_sdk.client import OpenAIClient
from openai_stream_sdk.tests.streaming.helpers import (
    API_KEY,
    chat_result,
    json_handler,
    make_async_client,
    make_client,
    make_config,
)

QUERY = ChatQuery(model="gpt-4o-mini", messages=[ChatMessage(role="user", content="hi")], extra={"seed": 3})
MODEL = {"id": "gpt-4o-mini", "object": "model", "created": 1686935002, "owned_by": "openai"}


def test_chats_sends_auth_and_returns_text():
    seen: List[httpx.Request] = []
    client = make_client(json_handler(chat_result("Hello there"), seen=seen))
    result = client.chats(QUERY)
    assert result.text == "Hello there"
    assert result.usage is not None and result.usage.total_tokens == 5
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.test/v1/chat/completions"
    assert request.headers["authorization"] == f"Bearer {API_KEY}"
    assert "openai-organization" not in request.headers
    body = json.loads(request.content)
    assert body["seed"] == 3 and "stream" not in body and "extra" not in body


def test_organization_and_custom_headers():
    seen: List[httpx.Request] = []
    config = make_config(organization="org-42", headers={"X-Team": "sdk"})
    client = OpenAIClient(
        config,
        headers={"X-Call": "1"},
        transport=httpx.MockTransport(json_handler({"object": "list", "data": []}, seen=seen)),
    )
    assert client.models().data == []
    headers = seen[0].headers
    assert headers["openai-organization"] == "org-42"
    assert headers["x-team"] == "sdk" and headers["x-call"] == "1"


def test_missing_key_sends_no_authorization():
    seen: List[httpx.Request] = []
    client = OpenAIClient(
        make_config(api_key=None),
        transport=httpx.MockTransport(json_handler({"error": {"message": "no key"}}, status=401, seen=seen)),
    )
    with pytest.raises(HTTPStatusError) as info:
        client.models()
    assert "authorization" not in seen[0].headers
    assert info.value.code == ErrorCode.AUTH


def test_model_lookup_and_models_path():
    seen: List[httpx.Request] = []
    client = make_client(json_handler(MODEL, seen=seen))
    assert client.model("gpt-4o-mini").owned_by == "openai"
    assert seen[0].url.path == "/v1/models/gpt-4o-mini"


def test_moderations():
    payload = {
        "id": "modr-1",
        "model": "omni-moderation-latest",
        "results": [{"flagged": True, "categories": {"violence": True}, "category_scores": {"violence": 0.9}}],
    }
    seen: List[httpx.Request] = []
    client = make_client(json_handler(payload, seen=seen))
    result = client.moderations(ModerationsQuery(input=["a", "b"]))
    assert result.results[0].flagged is True
    assert json.loads(seen[0].content) == {"input": ["a", "b"]}


def test_audio_transcription_multipart_and_plain_text():
    captured: List[bytes] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        captured.append(request.read())
        assert request.headers["content-type"].startswith("multipart/form-data")
        if b"srt" in captured[-1]:
            return httpx.Response(200, text="1\n00:00:00,000 --> 00:00:01,000\nhello\n")
        return httpx.Response(200, json={"text": "hello", "language": "en"})

    client = make_client(_handler)
    query = AudioTranscriptionQuery(file=b"RIFF....", file_type=AudioFileType.MPGA, model="whisper-1")
    assert client.audio_transcriptions(query).language == "en"
    assert b'filename="speech.mp3"' in captured[0]
    assert b"whisper-1" in captured[0]

    srt = query.model_copy(update={"response_format": AudioResponseFormat.SRT})
    assert client.audio_transcriptions(srt).text.endswith("hello\n")


def test_global_middleware_applies_to_every_client():
    class _Stamp(OpenAIMiddleware):
        def intercept_request(self, request: httpx.Request) -> httpx.Request:
            request.headers["X-Stamp"] = "global"
            return request

    set_global_middleware(MiddlewareChain([_Stamp()]))
    seen: List[httpx.Request] = []
    make_client(json_handler(MODEL, seen=seen)).model("gpt-4o-mini")
    assert seen[0].headers["x-stamp"] == "global"


def test_response_middleware_can_rewrite_body():
    class _Rename(OpenAIMiddleware):
        def intercept_response(self, response, request, data):
            return response, (data or b"").replace(b"openai", b"someone")

    client = make_client(json_handler(MODEL), middlewares=[_Rename()])
    assert client.model("gpt-4o-mini").owned_by == "someone"


def test_context_manager_closes_owned_clients():
    with make_client(json_handler(MODEL)) as client:
        client.model("gpt-4o-mini")
    assert client._owned == []  # type: ignore[attr-defined]


def test_async_client_operations():
    async def _run():
        async with make_async_client(json_handler(chat_result("async hi"))) as client:
            return await client.chats(QUERY)

    assert asyncio.run(_run()).text == "async hi"


def test_async_client_error_status():
    async def _run():
        async with make_async_client(json_handler({"error": {"message": "slow"}}, status=429)) as client:
            await client.models()

    with pytest.raises(HTTPStatusError) as info:
        asyncio.run(_run())
    assert info.value.code == ErrorCode.RATE_LIMIT
    assert info.value.message == "slow"


ASSISTANT = {
    "id": "asst_1",
    "object": "assistant",
    "created_at": 1699009709,
    "model": "gpt-4o-mini",
    "name": "Helper",
    "instructions": "Be brief.",
    "tools": [
        {"type": "code_interpreter"},
        {"type": "function", "function": {"name": "lookup", "parameters": {"type": "object"}}},
    ],
    "file_ids": [],
}
ASSISTANT_QUERY = AssistantsQuery(
    model="gpt-4o-mini",
    name="Helper",
    instructions="Be brief.",
    tools=[AssistantTool.code_interpreter(), AssistantTool.for_function(FunctionDeclaration(name="lookup"))],
)


def test_audio_translation_multipart_and_plain_text():
    captured: List[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        request.read()
        captured.append(request)
        if b"name=\"response_format\"" in request.content:
            return httpx.Response(200, text="hello in english\n")
        return httpx.Response(200, json={"text": "hello in english"})

    client = make_client(_handler)
    query = AudioTranslationQuery(file=b"OggS....", file_type=AudioFileType.OGG, model="whisper-1")
    assert client.audio_translations(query).text == "hello in english"
    assert captured[0].url.path == "/v1/audio/translations"
    assert captured[0].headers["content-type"].startswith("multipart/form-data")
    assert b'filename="speech.ogg"' in captured[0].content
    assert b"language" not in captured[0].content

    text = query.model_copy(update={"response_format": AudioResponseFormat.TEXT})
    assert client.audio_translations(text).text == "hello in english\n"


def test_assistant_create_sends_beta_header_and_tools():
    seen: List[httpx.Request] = []
    client = make_client(json_handler(ASSISTANT, seen=seen))
    result = client.assistant_create(ASSISTANT_QUERY)
    assert result.id == "asst_1"
    assert [t.type for t in result.tools] == ["code_interpreter", "function"]
    assert [f.name for f in result.function_declarations] == ["lookup"]
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/v1/assistants"
    assert request.headers["openai-beta"] == "assistants=v2"
    body = json.loads(request.content)
    assert body["tools"] == [{"type": "code_interpreter"}, {"type": "function", "function": {"name": "lookup"}}]
    assert "file_ids" not in body


def test_assistant_modify_posts_to_the_assistant_path():
    seen: List[httpx.Request] = []
    client = make_client(json_handler(ASSISTANT, seen=seen))
    client.assistant_modify(ASSISTANT_QUERY, "asst_1")
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/v1/assistants/asst_1"


def test_assistants_listing_pages_with_after_cursor():
    seen: List[httpx.Request] = []
    page = {"object": "list", "data": [ASSISTANT], "first_id": "asst_1", "last_id": "asst_1", "has_more": True}
    client = make_client(json_handler(page, seen=seen))
    first = client.assistants()
    assert [a.id for a in first.data] == ["asst_1"]
    assert first.has_more is True
    client.assistants(limit=20, after=first.last_id)
    assert seen[0].url.query == b""
    assert seen[1].url.params["after"] == "asst_1"
    assert seen[1].url.params["limit"] == "20"
    assert seen[1].method == "GET"


def test_threads_create_with_messages():
    seen: List[httpx.Request] = []
    client = make_client(json_handler({"id": "thread_1", "object": "thread", "created_at": 1699012949}, seen=seen))
    result = client.threads(ThreadsQuery(messages=[MessageQuery(content="Hello")]))
    assert result.id == "thread_1"
    assert seen[0].url.path == "/v1/threads"
    assert seen[0].headers["openai-beta"] == "assistants=v2"
    assert json.loads(seen[0].content) == {"messages": [{"role": "user", "content": "Hello"}]}


def test_async_assistants_threads_and_translations():
    def _handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/v1/assistants" and request.method == "GET":
            return httpx.Response(200, json={"data": [ASSISTANT]})
        if path.startswith("/v1/assistants"):
            return httpx.Response(200, json=ASSISTANT)
        if path == "/v1/threads":
            return httpx.Response(200, json={"id": "thread_2"})
        return httpx.Response(200, json={"text": "translated"})

    async def _run():
        async with make_async_client(_handler) as client:
            created = await client.assistant_create(ASSISTANT_QUERY)
            modified = await client.assistant_modify(ASSISTANT_QUERY, created.id)
            listed = await client.assistants(after="asst_0")
            thread = await client.threads(ThreadsQuery(messages=[MessageQuery(content="hi")]))
            query = AudioTranslationQuery(file=b"fLaC", file_type=AudioFileType.FLAC, model="whisper-1")
            translation = await client.audio_translations(query)
            return created, modified, listed, thread, translation

    created, modified, listed, thread, translation = asyncio.run(_run())
    assert created.id == modified.id == "asst_1"
    assert [a.name for a in listed.data] == ["Helper"]
    assert listed.has_more is False
    assert thread.id == "thread_2"
    assert translation.text == "translated"
