"""FastAPI demo chat service.

Routes
------
- ``GET    /api/conversations``                   list conversations
- ``POST   /api/conversations``                   create a conversation
- ``GET    /api/conversations/{id}``              messages and last error
- ``DELETE /api/conversations/{id}``              delete a conversation
- ``POST   /api/conversations/{id}/select``       select a conversation
- ``POST   /api/conversations/{id}/messages``     send + stream reply (NDJSON)
- ``GET    /api/models``                          upstream model ids

The app is built by :func:`create_app` around one :class:`ConversationStore`
so tests can inject a client backed by a mock transport. ``app`` is the
default instance used by ``dev_server``.
"""
from __future__ import annotations

import os
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ..base.errors import OpenAIError
from ..client import OpenAIClient
from ..config.defaults import DEMO_SERVICE_CORS_DEFAULT_ORIGINS
from .chat_stream import get_store_dep, router as chat_stream_router
from .conversations import ConversationStore, UnknownConversationError


def _error_payload(err: Optional[OpenAIError]) -> Optional[Dict[str, Any]]:
    if err is None:
        return None
    return {"code": err.code_value, "message": err.message}


def _get_or_404(store: ConversationStore, conversation_id: str):
    try:
        return store.get(conversation_id)
    except UnknownConversationError as e:
        raise HTTPException(status_code=404, detail=f"unknown conversation '{conversation_id}'") from e


def create_app(client: Optional[OpenAIClient] = None, *, store: Optional[ConversationStore] = None) -> FastAPI:
    """Build the demo app around ``store`` (or a new store over ``client``)."""
    if store is None:
        store = ConversationStore(client or OpenAIClient())
    app = FastAPI(title="Demo Chat Service", version="0.1.0")
    app.state.store = store

    cors_origins_env = os.getenv("DEMO_SERVICE_CORS_ORIGINS", DEMO_SERVICE_CORS_DEFAULT_ORIGINS)
    allow_origins = [o.strip() for o in cors_origins_env.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _store() -> ConversationStore:
        return app.state.store

    app.dependency_overrides[get_store_dep] = _store
    app.include_router(chat_stream_router)

    @app.get("/api/conversations")
    def list_conversations(store: ConversationStore = Depends(_store)) -> Dict[str, Any]:
        return {
            "ok": True,
            "selected": store.selected_id,
            "conversations": [c.id for c in store.conversations],
        }

    @app.post("/api/conversations")
    def create_conversation(store: ConversationStore = Depends(_store)) -> Dict[str, Any]:
        conversation = store.create_conversation()
        return {"ok": True, "id": conversation.id}

    @app.get("/api/conversations/{conversation_id}")
    def get_conversation(conversation_id: str, store: ConversationStore = Depends(_store)) -> Dict[str, Any]:
        conversation = _get_or_404(store, conversation_id)
        return {
            "ok": True,
            "conversation": conversation.to_dict(),
            "error": _error_payload(store.errors.get(conversation_id)),
        }

    @app.delete("/api/conversations/{conversation_id}")
    def delete_conversation(conversation_id: str, store: ConversationStore = Depends(_store)) -> Dict[str, Any]:
        _get_or_404(store, conversation_id)
        store.delete_conversation(conversation_id)
        return {"ok": True}

    @app.post("/api/conversations/{conversation_id}/select")
    def select_conversation(conversation_id: str, store: ConversationStore = Depends(_store)) -> Dict[str, Any]:
        _get_or_404(store, conversation_id)
        store.select_conversation(conversation_id)
        return {"ok": True, "selected": conversation_id}

    @app.get("/api/models")
    def list_models(store: ConversationStore = Depends(_store)) -> Dict[str, Any]:
        try:
            result = store.client.models()
        except OpenAIError as e:
            raise HTTPException(status_code=502, detail=_error_payload(e)) from e
        return {"ok": True, "models": [m.id for m in result.data]}

    return app


app = create_app()

__all__ = ["app", "create_app"]
