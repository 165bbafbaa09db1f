"""
Request and result DTOs public surface.

Re-exports the pydantic models under ``openai_stream_sdk.base.models_parts``
so callers have one stable import path.
"""

from .models_parts.api_error import APIError, APIErrorResponse
from .models_parts.chat import (
    ChatChoice,
    ChatDelta,
    ChatMessage,
    ChatQuery,
    ChatResult,
    ChatStreamChoice,
    ChatStreamResult,
    Role,
    Usage,
)
from .models_parts.model_result import ModelResult, ModelsResult
from .models_parts.moderations import ModerationResult, ModerationsQuery, ModerationsResult
from .models_parts.audio import (
    AudioFileType,
    AudioResponseFormat,
    AudioTranscriptionQuery,
    AudioTranscriptionResult,
    AudioTranslationQuery,
    AudioTranslationResult,
)
from .models_parts.assistants import (
    AssistantResult,
    AssistantsQuery,
    AssistantsResult,
    AssistantTool,
    FunctionDeclaration,
)
from .models_parts.threads import MessageQuery, ThreadsQuery, ThreadsResult

__all__ = [
    "APIError",
    "APIErrorResponse",
    "Role",
    "ChatMessage",
    "ChatQuery",
    "Usage",
    "ChatChoice",
    "ChatResult",
    "ChatDelta",
    "ChatStreamChoice",
    "ChatStreamResult",
    "ModelResult",
    "ModelsResult",
    "ModerationsQuery",
    "ModerationResult",
    "ModerationsResult",
    "AudioFileType",
    "AudioResponseFormat",
    "AudioTranscriptionQuery",
    "AudioTranscriptionResult",
    "AudioTranslationQuery",
    "AudioTranslationResult",
    "FunctionDeclaration",
    "AssistantTool",
    "AssistantsQuery",
    "AssistantResult",
    "AssistantsResult",
    "MessageQuery",
    "ThreadsQuery",
    "ThreadsResult",
]
