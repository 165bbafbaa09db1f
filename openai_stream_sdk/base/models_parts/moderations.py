"""Moderation request and result DTOs (``POST /moderations``)."""
from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


class ModerationsQuery(BaseModel):
    input: Union[str, List[str]]
    model: Optional[str] = None


class ModerationResult(BaseModel):
    flagged: bool
    categories: Dict[str, bool] = Field(default_factory=dict)
    category_scores: Dict[str, float] = Field(default_factory=dict)


class ModerationsResult(BaseModel):
    id: str
    model: str
    results: List[ModerationResult]


__all__ = ["ModerationsQuery", "ModerationResult", "ModerationsResult"]
