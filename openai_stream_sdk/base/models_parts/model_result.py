"""
Model listing DTOs for ``GET /models`` and ``GET /models/{id}``.

Some compatible servers omit ``created`` or the list ``object`` marker; both
default rather than failing the decode.
"""
from __future__ import annotations

from typing import List

from pydantic import BaseModel


class ModelResult(BaseModel):
    """A single model entry.

    Attributes:
        id: Stable model identifier.
        created: Unix timestamp (``0`` when the server omits it).
        object: Object type marker, normally ``"model"``.
        owned_by: Owning organization.
    """

    id: str
    created: float = 0
    object: str
    owned_by: str


class ModelsResult(BaseModel):
    data: List[ModelResult]
    object: str = "list"


__all__ = ["ModelResult", "ModelsResult"]
