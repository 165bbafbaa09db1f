"""
FastAPI streaming reply route for the demo chat service.

Purpose
-------
Expose ``POST /api/conversations/{conversation_id}/messages`` as an NDJSON
streaming endpoint: the user message is appended to the conversation and the
assistant reply is relayed line by line while it is melded into the store.

Fallback semantics
------------------
- Unknown conversations return HTTP 404 before any streaming starts.
- If the stream fails, a final NDJSON event with ``type="error"`` and
  ``finish=True`` is emitted so the client can terminate cleanly. The same
  error is recorded on the conversation.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Iterator, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from ..base.errors import OpenAIError
from .conversations import ConversationStore, UnknownConversationError

router = APIRouter()


class MessageBody(BaseModel):
    """A user message and the model used for the reply."""

    content: str = Field(..., min_length=1)
    model: Optional[str] = None


def get_store_dep() -> ConversationStore:  # pragma: no cover - replaced by the app factory
    raise RuntimeError("conversation store not configured")


def _ndjson(chunk: Dict[str, Any]) -> bytes:
    return (json.dumps(chunk) + "\n").encode("utf-8")


@router.post("/api/conversations/{conversation_id}/messages")
def post_message_stream(
    conversation_id: str,
    body: MessageBody,
    store: ConversationStore = Depends(get_store_dep),
) -> StreamingResponse:
    """Stream the assistant reply as NDJSON events.

    Each line has the shape::

        {"type": "delta" | "final" | "error", "delta": str | null,
         "finish": bool, "error": str | null, "code": str | null}

    Invariant: exactly one event with ``finish=True`` closes the stream.
    """
    try:
        store.add_user_message(conversation_id, body.content)
    except UnknownConversationError as e:
        raise HTTPException(status_code=404, detail=f"unknown conversation '{conversation_id}'") from e
    model = body.model or store.default_model

    def iter_ndjson() -> Iterator[bytes]:
        try:
            for delta in store.stream_reply(conversation_id, model):
                yield _ndjson({"type": "delta", "delta": delta, "finish": False, "error": None, "code": None})
        except OpenAIError as exc:
            yield _ndjson(
                {"type": "error", "delta": None, "finish": True, "error": exc.message, "code": exc.code_value}
            )
            return
        yield _ndjson({"type": "final", "delta": None, "finish": True, "error": None, "code": None})

    return StreamingResponse(iter_ndjson(), media_type="application/x-ndjson")


__all__ = ["router", "MessageBody", "get_store_dep", "post_message_stream"]
