"""HTTP client facade for the chat completions style API.

:class:`OpenAIClient` (blocking) and :class:`AsyncOpenAIClient` (asyncio)
expose the same operations:

* ``chats`` - single chat completion.
* ``chats_stream`` - lazy, cancellable stream of ``ChatStreamResult`` chunks.
* ``models`` / ``model`` - model listing and lookup.
* ``moderations`` - content moderation.
* ``audio_transcriptions`` / ``audio_translations`` - multipart audio upload.
* ``assistant_create`` / ``assistant_modify`` / ``assistants`` - assistant
  management with cursor pagination.
* ``threads`` - thread creation.

Every request carries ``Authorization: Bearer <key>`` (when a key is
configured), the optional ``OpenAI-Organization`` header and any custom
headers from the configuration. Middleware is the global chain followed by
the client's own middleware list.

Tests inject an ``httpx`` transport (for example ``httpx.MockTransport``)
instead of reaching the network.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar, Union

import httpx

from .base.cancellation import CancellationToken
from .base.errors import OpenAIError
from .base.extraction import ErrorPayloadExtractor
from .base.http import STREAM_PURPOSE, get_httpx_client, new_async_client
from .base.logging import LogContext, get_logger
from .base.middleware import MiddlewareChain, OpenAIMiddleware, get_middleware_chain
from .base.models import (
    AudioResponseFormat,
    AudioTranscriptionQuery,
    AudioTranscriptionResult,
    AudioTranslationQuery,
    AudioTranslationResult,
    AssistantResult,
    AssistantsQuery,
    AssistantsResult,
    ChatQuery,
    ChatResult,
    ChatStreamResult,
    ModelResult,
    ModelsResult,
    ModerationsQuery,
    ModerationsResult,
    ThreadsQuery,
    ThreadsResult,
)
from .base.streaming import (
    AsyncStreamController,
    StreamController,
    aopen_stream,
    aperform_request,
    open_stream,
    perform_request,
    stream_with_callbacks,
)
from .base.timeouts import to_httpx_timeout
from .config import ClientConfig, get_client_config
from .config.defaults import (
    ASSISTANTS_BETA_HEADER,
    ASSISTANTS_BETA_VALUE,
    OPENAI_AUTH_SCHEME,
    ORGANIZATION_HEADER,
)

T = TypeVar("T")

CHAT_COMPLETIONS_PATH = "/chat/completions"
MODELS_PATH = "/models"
MODERATIONS_PATH = "/moderations"
AUDIO_TRANSCRIPTIONS_PATH = "/audio/transcriptions"
AUDIO_TRANSLATIONS_PATH = "/audio/translations"
ASSISTANTS_PATH = "/assistants"
THREADS_PATH = "/threads"

_PLAIN_TEXT_FORMATS = (AudioResponseFormat.TEXT, AudioResponseFormat.SRT, AudioResponseFormat.VTT)


class _ClientCore:
    """Configuration, headers and request building shared by both clients."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        organization: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        middlewares: Optional[List[OpenAIMiddleware]] = None,
        extractor: Optional[ErrorPayloadExtractor] = None,
    ) -> None:
        if config is None:
            config = get_client_config(
                {"api_key": api_key, "base_url": base_url, "organization": organization}
            )
        self.config = config
        self._extra_headers = {**config.headers, **dict(headers or {})}
        self._middlewares = list(middlewares or [])
        self._extractor = extractor or ErrorPayloadExtractor()
        self._logger = get_logger("openai_stream_sdk.client")

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def _middleware(self) -> MiddlewareChain:
        return get_middleware_chain().extended(self._middlewares)

    def _headers(self, *, streaming: bool = False, beta: bool = False) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.config.api_key:
            headers["Authorization"] = f"{OPENAI_AUTH_SCHEME} {self.config.api_key}"
        if self.config.organization:
            headers[ORGANIZATION_HEADER] = self.config.organization
        if streaming:
            headers["Accept"] = "text/event-stream"
        if beta:
            headers[ASSISTANTS_BETA_HEADER] = ASSISTANTS_BETA_VALUE
        headers.update(self._extra_headers)
        return headers

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    def _build(
        self,
        http: Union[httpx.Client, httpx.AsyncClient],
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        streaming: bool = False,
        beta: bool = False,
    ) -> httpx.Request:
        return http.build_request(
            method,
            self._url(path),
            headers=self._headers(streaming=streaming, beta=beta),
            json=json,
            data=data,
            files=files,
            params=params,
        )

    def _ctx(self, path: str, model: Optional[str] = None) -> LogContext:
        return LogContext(endpoint=path, model=model)

    @staticmethod
    def _stream_body(query: ChatQuery) -> Dict[str, Any]:
        return query.model_copy(update={"stream": True}).to_request_body()

    @staticmethod
    def _chat_body(query: ChatQuery) -> Dict[str, Any]:
        return query.model_copy(update={"stream": False}).to_request_body()

    @staticmethod
    def _page_params(limit: Optional[int], after: Optional[str]) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if limit is not None:
            params["limit"] = limit
        if after is not None:
            params["after"] = after
        return params


class OpenAIClient(_ClientCore):
    """Blocking client.

    Parameters:
        config: Fully resolved configuration; when omitted it is merged from
            defaults, the config file, the environment and the keyword
            arguments below.
        transport: Optional ``httpx`` transport. When given the client owns
            private ``httpx.Client`` instances bound to it; otherwise pooled
            clients from :func:`get_httpx_client` are used.
        middlewares: Per-client middleware appended to the global chain.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        organization: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        middlewares: Optional[List[OpenAIMiddleware]] = None,
        extractor: Optional[ErrorPayloadExtractor] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        super().__init__(
            config,
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            headers=headers,
            middlewares=middlewares,
            extractor=extractor,
        )
        self._owned: List[httpx.Client] = []
        if transport is not None:
            self._http = httpx.Client(transport=transport, timeout=to_httpx_timeout())
            self._stream_http = httpx.Client(transport=transport, timeout=to_httpx_timeout(streaming=True))
            self._owned = [self._http, self._stream_http]
        else:
            self._http = get_httpx_client(self.base_url, "http")
            self._stream_http = get_httpx_client(self.base_url, STREAM_PURPOSE)

    # ------------------------------------------------------------ lifecycle
    def close(self) -> None:
        """Close privately owned HTTP clients (pooled clients stay open)."""
        for c in self._owned:
            c.close()
        self._owned = []

    def __enter__(self) -> "OpenAIClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------ operations
    def _perform(self, request: httpx.Request, result_type: Type[T], ctx: LogContext) -> T:
        return perform_request(
            self._http,
            request,
            result_type,
            middleware=self._middleware(),
            extractor=self._extractor,
            ctx=ctx,
        )

    def chats(self, query: ChatQuery) -> ChatResult:
        request = self._build(self._http, "POST", CHAT_COMPLETIONS_PATH, json=self._chat_body(query))
        return self._perform(request, ChatResult, self._ctx(CHAT_COMPLETIONS_PATH, query.model))

    def chats_stream(
        self,
        query: ChatQuery,
        *,
        token: Optional[CancellationToken] = None,
        on_receive_raw_data: Optional[Callable[[bytes], None]] = None,
    ) -> StreamController[ChatStreamResult]:
        """Return a lazy stream of completion chunks; nothing is sent until iterated."""
        request = self._build(self._stream_http, "POST", CHAT_COMPLETIONS_PATH, json=self._stream_body(query), streaming=True)
        return open_stream(
            self._stream_http,
            request,
            ChatStreamResult,
            middleware=self._middleware(),
            extractor=self._extractor,
            token=token,
            on_receive_raw_data=on_receive_raw_data,
            ctx=self._ctx(CHAT_COMPLETIONS_PATH, query.model),
        )

    def chats_stream_callbacks(
        self,
        query: ChatQuery,
        *,
        on_event: Callable[[ChatStreamResult], None],
        on_error: Optional[Callable[[OpenAIError], None]] = None,
        on_complete: Optional[Callable[[Optional[OpenAIError]], None]] = None,
        token: Optional[CancellationToken] = None,
    ) -> Optional[OpenAIError]:
        """Stream with callbacks; processing errors are reported and decoding continues."""
        request = self._build(self._stream_http, "POST", CHAT_COMPLETIONS_PATH, json=self._stream_body(query), streaming=True)
        return stream_with_callbacks(
            self._stream_http,
            request,
            ChatStreamResult,
            on_event=on_event,
            on_error=on_error,
            on_complete=on_complete,
            middleware=self._middleware(),
            extractor=self._extractor,
            token=token,
        )

    def models(self) -> ModelsResult:
        request = self._build(self._http, "GET", MODELS_PATH)
        return self._perform(request, ModelsResult, self._ctx(MODELS_PATH))

    def model(self, model_id: str) -> ModelResult:
        path = f"{MODELS_PATH}/{model_id}"
        request = self._build(self._http, "GET", path)
        return self._perform(request, ModelResult, self._ctx(MODELS_PATH, model_id))

    def moderations(self, query: ModerationsQuery) -> ModerationsResult:
        request = self._build(self._http, "POST", MODERATIONS_PATH, json=query.model_dump(exclude_none=True))
        return self._perform(request, ModerationsResult, self._ctx(MODERATIONS_PATH, query.model))

    def audio_transcriptions(self, query: AudioTranscriptionQuery) -> AudioTranscriptionResult:
        """Upload audio; plain text formats (text, srt, vtt) land in ``result.text``."""
        data, files = query.to_multipart()
        request = self._build(self._http, "POST", AUDIO_TRANSCRIPTIONS_PATH, data=data, files=files)
        ctx = self._ctx(AUDIO_TRANSCRIPTIONS_PATH, query.model)
        if query.response_format in _PLAIN_TEXT_FORMATS:
            return AudioTranscriptionResult(text=self._perform(request, str, ctx))
        return self._perform(request, AudioTranscriptionResult, ctx)

    def audio_translations(self, query: AudioTranslationQuery) -> AudioTranslationResult:
        """Translate speech to English text; plain text formats land in ``result.text``."""
        data, files = query.to_multipart()
        request = self._build(self._http, "POST", AUDIO_TRANSLATIONS_PATH, data=data, files=files)
        ctx = self._ctx(AUDIO_TRANSLATIONS_PATH, query.model)
        if query.response_format in _PLAIN_TEXT_FORMATS:
            return AudioTranslationResult(text=self._perform(request, str, ctx))
        return self._perform(request, AudioTranslationResult, ctx)

    def assistant_create(self, query: AssistantsQuery) -> AssistantResult:
        request = self._build(self._http, "POST", ASSISTANTS_PATH, json=query.to_request_body(), beta=True)
        return self._perform(request, AssistantResult, self._ctx(ASSISTANTS_PATH, query.model))

    def assistant_modify(self, query: AssistantsQuery, assistant_id: str) -> AssistantResult:
        path = f"{ASSISTANTS_PATH}/{assistant_id}"
        request = self._build(self._http, "POST", path, json=query.to_request_body(), beta=True)
        return self._perform(request, AssistantResult, self._ctx(ASSISTANTS_PATH, query.model))

    def assistants(self, *, limit: Optional[int] = None, after: Optional[str] = None) -> AssistantsResult:
        """One page of assistants; pass the previous page's ``last_id`` as ``after``."""
        params = self._page_params(limit, after)
        request = self._build(self._http, "GET", ASSISTANTS_PATH, params=params, beta=True)
        return self._perform(request, AssistantsResult, self._ctx(ASSISTANTS_PATH))

    def threads(self, query: ThreadsQuery) -> ThreadsResult:
        request = self._build(self._http, "POST", THREADS_PATH, json=query.to_request_body(), beta=True)
        return self._perform(request, ThreadsResult, self._ctx(THREADS_PATH))


class AsyncOpenAIClient(_ClientCore):
    """Asyncio client with the same operations as :class:`OpenAIClient`.

    ``httpx.AsyncClient`` instances are bound to an event loop, so this client
    owns its own and must be closed with :meth:`aclose` (or ``async with``).
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        organization: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        middlewares: Optional[List[OpenAIMiddleware]] = None,
        extractor: Optional[ErrorPayloadExtractor] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(
            config,
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            headers=headers,
            middlewares=middlewares,
            extractor=extractor,
        )
        if transport is not None:
            self._http = httpx.AsyncClient(transport=transport, timeout=to_httpx_timeout(streaming=True))
        else:
            self._http = new_async_client(None, streaming=True)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "AsyncOpenAIClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _perform(self, request: httpx.Request, result_type: Type[T], ctx: LogContext) -> T:
        return await aperform_request(
            self._http,
            request,
            result_type,
            middleware=self._middleware(),
            extractor=self._extractor,
            ctx=ctx,
        )

    async def chats(self, query: ChatQuery) -> ChatResult:
        request = self._build(self._http, "POST", CHAT_COMPLETIONS_PATH, json=self._chat_body(query))
        return await self._perform(request, ChatResult, self._ctx(CHAT_COMPLETIONS_PATH, query.model))

    def chats_stream(
        self,
        query: ChatQuery,
        *,
        token: Optional[CancellationToken] = None,
        on_receive_raw_data: Optional[Callable[[bytes], None]] = None,
    ) -> AsyncStreamController[ChatStreamResult]:
        request = self._build(self._http, "POST", CHAT_COMPLETIONS_PATH, json=self._stream_body(query), streaming=True)
        return aopen_stream(
            self._http,
            request,
            ChatStreamResult,
            middleware=self._middleware(),
            extractor=self._extractor,
            token=token,
            on_receive_raw_data=on_receive_raw_data,
            ctx=self._ctx(CHAT_COMPLETIONS_PATH, query.model),
        )

    async def models(self) -> ModelsResult:
        request = self._build(self._http, "GET", MODELS_PATH)
        return await self._perform(request, ModelsResult, self._ctx(MODELS_PATH))

    async def model(self, model_id: str) -> ModelResult:
        path = f"{MODELS_PATH}/{model_id}"
        request = self._build(self._http, "GET", path)
        return await self._perform(request, ModelResult, self._ctx(MODELS_PATH, model_id))

    async def moderations(self, query: ModerationsQuery) -> ModerationsResult:
        request = self._build(self._http, "POST", MODERATIONS_PATH, json=query.model_dump(exclude_none=True))
        return await self._perform(request, ModerationsResult, self._ctx(MODERATIONS_PATH, query.model))

    async def audio_transcriptions(self, query: AudioTranscriptionQuery) -> AudioTranscriptionResult:
        data, files = query.to_multipart()
        request = self._build(self._http, "POST", AUDIO_TRANSCRIPTIONS_PATH, data=data, files=files)
        ctx = self._ctx(AUDIO_TRANSCRIPTIONS_PATH, query.model)
        if query.response_format in _PLAIN_TEXT_FORMATS:
            return AudioTranscriptionResult(text=await self._perform(request, str, ctx))
        return await self._perform(request, AudioTranscriptionResult, ctx)

    async def audio_translations(self, query: AudioTranslationQuery) -> AudioTranslationResult:
        data, files = query.to_multipart()
        request = self._build(self._http, "POST", AUDIO_TRANSLATIONS_PATH, data=data, files=files)
        ctx = self._ctx(AUDIO_TRANSLATIONS_PATH, query.model)
        if query.response_format in _PLAIN_TEXT_FORMATS:
            return AudioTranslationResult(text=await self._perform(request, str, ctx))
        return await self._perform(request, AudioTranslationResult, ctx)

    async def assistant_create(self, query: AssistantsQuery) -> AssistantResult:
        request = self._build(self._http, "POST", ASSISTANTS_PATH, json=query.to_request_body(), beta=True)
        return await self._perform(request, AssistantResult, self._ctx(ASSISTANTS_PATH, query.model))

    async def assistant_modify(self, query: AssistantsQuery, assistant_id: str) -> AssistantResult:
        path = f"{ASSISTANTS_PATH}/{assistant_id}"
        request = self._build(self._http, "POST", path, json=query.to_request_body(), beta=True)
        return await self._perform(request, AssistantResult, self._ctx(ASSISTANTS_PATH, query.model))

    async def assistants(self, *, limit: Optional[int] = None, after: Optional[str] = None) -> AssistantsResult:
        params = self._page_params(limit, after)
        request = self._build(self._http, "GET", ASSISTANTS_PATH, params=params, beta=True)
        return await self._perform(request, AssistantsResult, self._ctx(ASSISTANTS_PATH))

    async def threads(self, query: ThreadsQuery) -> ThreadsResult:
        request = self._build(self._http, "POST", THREADS_PATH, json=query.to_request_body(), beta=True)
        return await self._perform(request, ThreadsResult, self._ctx(THREADS_PATH))


__all__ = [
    "OpenAIClient",
    "AsyncOpenAIClient",
    "CHAT_COMPLETIONS_PATH",
    "MODELS_PATH",
    "MODERATIONS_PATH",
    "AUDIO_TRANSCRIPTIONS_PATH",
    "AUDIO_TRANSLATIONS_PATH",
    "ASSISTANTS_PATH",
    "THREADS_PATH",
]
