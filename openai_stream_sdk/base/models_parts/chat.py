"""
Chat completion request and result DTOs (regular and streaming).

Only the commonly used fields are modelled. Unknown response fields are
ignored so newer API versions keep decoding. The required fields (``id``,
``choices``) are what lets the stream interpreter tell a real chunk apart
from an error document during trial decoding.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


Role = Literal["system", "user", "assistant", "tool", "developer"]


class ChatMessage(BaseModel):
    """One conversation message."""

    role: Role
    content: Optional[str] = None
    name: Optional[str] = None


class ChatQuery(BaseModel):
    """Request body for ``POST /chat/completions``.

    Parameters:
        model: Target model identifier (non-empty).
        messages: Ordered, non-empty list of messages.
        temperature: If provided, must be within [0.0, 2.0].
        max_tokens: If provided, must be positive.
        stream: Set by the client; callers normally leave it alone.
        extra: Additional body fields merged verbatim into the request.
    """

    model: str = Field(..., min_length=1)
    messages: List[ChatMessage] = Field(..., min_length=1)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    stop: Optional[List[str]] = None
    user: Optional[str] = None
    stream: bool = False
    extra: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_sequence(self) -> "ChatQuery":
        if self.messages[0].role in ("assistant", "tool"):
            raise ValueError("first message must not be from 'assistant' or 'tool'")
        return self

    def to_request_body(self) -> Dict[str, Any]:
        body = self.model_dump(exclude_none=True, exclude={"extra"})
        if not self.stream:
            body.pop("stream", None)
        body.update(self.extra)
        return body


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatChoice(BaseModel):
    index: int = 0
    message: ChatMessage
    finish_reason: Optional[str] = None


class ChatResult(BaseModel):
    """Response of a non-streaming chat completion."""

    id: str
    object: str = "chat.completion"
    created: int = 0
    model: str = ""
    choices: List[ChatChoice]
    usage: Optional[Usage] = None

    @property
    def text(self) -> str:
        """Content of the first choice (empty when absent)."""
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""


class ChatDelta(BaseModel):
    role: Optional[Role] = None
    content: Optional[str] = None


class ChatStreamChoice(BaseModel):
    index: int = 0
    delta: ChatDelta = Field(default_factory=ChatDelta)
    finish_reason: Optional[str] = None


class ChatStreamResult(BaseModel):
    """One ``chat.completion.chunk`` event of a streaming completion."""

    id: str
    object: str = "chat.completion.chunk"
    created: int = 0
    model: str = ""
    choices: List[ChatStreamChoice]
    usage: Optional[Usage] = None

    @property
    def delta_text(self) -> str:
        """Concatenated delta content across choices (usually one)."""
        return "".join(c.delta.content or "" for c in self.choices)


__all__ = [
    "Role",
    "ChatMessage",
    "ChatQuery",
    "Usage",
    "ChatChoice",
    "ChatResult",
    "ChatDelta",
    "ChatStreamChoice",
    "ChatStreamResult",
]
