"""
Assistant DTOs for ``/assistants`` (create, modify, paginated listing).

Tools are tagged by ``type``: ``code_interpreter`` and ``retrieval`` carry
nothing else, ``function`` carries its declaration. Listing follows the
cursor convention of the API: pass the previous page's ``last_id`` as
``after`` while ``has_more`` is true.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


class FunctionDeclaration(BaseModel):
    """A callable function exposed to an assistant."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None


class AssistantTool(BaseModel):
    type: Literal["code_interpreter", "retrieval", "file_search", "function"]
    function: Optional[FunctionDeclaration] = None

    @model_validator(mode="after")
    def _function_needs_declaration(self) -> "AssistantTool":
        if self.type == "function" and self.function is None:
            raise ValueError("function tools need a declaration")
        return self

    @classmethod
    def code_interpreter(cls) -> "AssistantTool":
        return cls(type="code_interpreter")

    @classmethod
    def retrieval(cls) -> "AssistantTool":
        return cls(type="retrieval")

    @classmethod
    def for_function(cls, declaration: FunctionDeclaration) -> "AssistantTool":
        return cls(type="function", function=declaration)


class AssistantsQuery(BaseModel):
    """Request body for ``POST /assistants`` and ``POST /assistants/{id}``."""

    model: str = Field(..., min_length=1)
    name: Optional[str] = None
    description: Optional[str] = None
    instructions: Optional[str] = None
    tools: List[AssistantTool] = Field(default_factory=list)
    file_ids: Optional[List[str]] = None

    def to_request_body(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class AssistantResult(BaseModel):
    id: str
    object: str = "assistant"
    created_at: int = 0
    model: str = ""
    name: Optional[str] = None
    description: Optional[str] = None
    instructions: Optional[str] = None
    tools: List[AssistantTool] = Field(default_factory=list)
    file_ids: List[str] = Field(default_factory=list)

    @property
    def function_declarations(self) -> List[FunctionDeclaration]:
        return [t.function for t in self.tools if t.type == "function" and t.function is not None]


class AssistantsResult(BaseModel):
    """One page of ``GET /assistants``."""

    data: List[AssistantResult] = Field(default_factory=list)
    object: str = "list"
    first_id: Optional[str] = None
    last_id: Optional[str] = None
    has_more: bool = False


__all__ = [
    "FunctionDeclaration",
    "AssistantTool",
    "AssistantsQuery",
    "AssistantResult",
    "AssistantsResult",
]
