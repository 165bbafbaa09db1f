"""
Thread DTOs for ``POST /threads``.

A thread is created with its opening messages; only ``user`` and
``assistant`` roles are accepted there.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class MessageQuery(BaseModel):
    role: Literal["user", "assistant"] = "user"
    content: str
    file_ids: Optional[List[str]] = None


class ThreadsQuery(BaseModel):
    messages: List[MessageQuery] = Field(default_factory=list)

    def to_request_body(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ThreadsResult(BaseModel):
    id: str
    object: str = "thread"
    created_at: int = 0
    metadata: Optional[Dict[str, Any]] = None


__all__ = ["MessageQuery", "ThreadsQuery", "ThreadsResult"]
