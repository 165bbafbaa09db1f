"""In-memory conversation store for the demo chat application.

Purpose
-------
Hold a list of conversations, the selected conversation and the last error
per conversation. Sending a message appends it and streams the assistant
reply into the same conversation: every streamed chunk shares the completion
id, so deltas are melded into one assistant message keyed by that id.

Error semantics
---------------
Stream failures never escape :meth:`ConversationStore.complete_chat`; they
are recorded in ``errors[conversation_id]`` and returned. Starting a new
reply clears the previous error of that conversation.
"""
from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional

from ..base.errors import OpenAIError
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import ChatMessage, ChatQuery, ChatStreamResult
from ..client import OpenAIClient


class UnknownConversationError(KeyError):
    """Raised when a conversation id does not exist in the store."""


@dataclass
class DemoMessage:
    id: str
    role: str
    content: str
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, object]:
        return {"id": self.id, "role": self.role, "content": self.content, "created_at": self.created_at}


@dataclass
class Conversation:
    id: str
    messages: List[DemoMessage] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {"id": self.id, "messages": [m.to_dict() for m in self.messages]}


def _new_id() -> str:
    return uuid.uuid4().hex


class ConversationStore:
    """Thread-safe conversation list backed by an :class:`OpenAIClient`."""

    def __init__(
        self,
        client: OpenAIClient,
        id_provider: Callable[[], str] = _new_id,
        *,
        default_model: Optional[str] = None,
    ) -> None:
        self._client = client
        self.default_model = default_model or client.config.model
        self._id_provider = id_provider
        self._lock = threading.RLock()
        self.conversations: List[Conversation] = []
        self.errors: Dict[str, OpenAIError] = {}
        self.selected_id: Optional[str] = None
        self._logger = get_logger("openai_stream_sdk.demo")

    @property
    def client(self) -> OpenAIClient:
        return self._client

    # ------------------------------------------------------------ selection
    def create_conversation(self) -> Conversation:
        conversation = Conversation(id=self._id_provider())
        with self._lock:
            self.conversations.append(conversation)
        return conversation

    def select_conversation(self, conversation_id: Optional[str]) -> None:
        """Select a conversation; ``None`` clears the selection."""
        with self._lock:
            if conversation_id is not None:
                self.get(conversation_id)
            self.selected_id = conversation_id

    @property
    def selected_conversation(self) -> Optional[Conversation]:
        with self._lock:
            if self.selected_id is None:
                return None
            return self._find(self.selected_id)

    def delete_conversation(self, conversation_id: str) -> None:
        with self._lock:
            self.conversations = [c for c in self.conversations if c.id != conversation_id]
            self.errors.pop(conversation_id, None)
            if self.selected_id == conversation_id:
                self.selected_id = None

    def get(self, conversation_id: str) -> Conversation:
        with self._lock:
            conversation = self._find(conversation_id)
        if conversation is None:
            raise UnknownConversationError(conversation_id)
        return conversation

    def _find(self, conversation_id: str) -> Optional[Conversation]:
        return next((c for c in self.conversations if c.id == conversation_id), None)

    # ------------------------------------------------------------- messages
    def add_user_message(self, conversation_id: str, content: str) -> DemoMessage:
        message = DemoMessage(id=self._id_provider(), role="user", content=content)
        with self._lock:
            self.get(conversation_id).messages.append(message)
        return message

    def send_message(self, conversation_id: str, content: str, model: str) -> Optional[OpenAIError]:
        """Append a user message and stream the reply; returns the error, if any."""
        self.add_user_message(conversation_id, content)
        return self.complete_chat(conversation_id, model)

    def complete_chat(self, conversation_id: str, model: str) -> Optional[OpenAIError]:
        try:
            for _ in self.stream_reply(conversation_id, model):
                pass
        except OpenAIError as exc:
            return exc
        return None

    def stream_reply(self, conversation_id: str, model: str) -> Iterator[str]:
        """Yield reply text deltas while melding them into the conversation.

        Raises the stream's ``OpenAIError`` after recording it in ``errors``.
        """
        conversation = self.get(conversation_id)
        with self._lock:
            self.errors.pop(conversation_id, None)
            history = [ChatMessage(role=m.role, content=m.content) for m in conversation.messages]
        query = ChatQuery(model=model, messages=history)
        ctx = LogContext(endpoint="demo.reply", model=model, stream_id=conversation_id)
        emitted = 0
        try:
            with self._client.chats_stream(query) as stream:
                for chunk in stream:
                    for text in self._meld(conversation, chunk):
                        emitted += 1
                        yield text
        except OpenAIError as exc:
            with self._lock:
                self.errors[conversation_id] = exc
            normalized_log_event(
                self._logger,
                "demo.reply.error",
                ctx,
                phase="finalize",
                error_code=exc.code_value,
                emitted=emitted > 0,
                tokens=None,
            )
            raise
        normalized_log_event(
            self._logger, "demo.reply.end", ctx, phase="finalize", emitted=emitted > 0, tokens=None
        )

    def _meld(self, conversation: Conversation, chunk: ChatStreamResult) -> List[str]:
        texts: List[str] = []
        with self._lock:
            for choice in chunk.choices:
                text = choice.delta.content or ""
                existing = next((m for m in conversation.messages if m.id == chunk.id), None)
                if existing is None:
                    conversation.messages.append(
                        DemoMessage(
                            id=chunk.id,
                            role=choice.delta.role or "assistant",
                            content=text,
                            created_at=float(chunk.created) if chunk.created else time.time(),
                        )
                    )
                else:
                    existing.content += text
                if text:
                    texts.append(text)
        return texts


__all__ = ["ConversationStore", "Conversation", "DemoMessage", "UnknownConversationError"]
