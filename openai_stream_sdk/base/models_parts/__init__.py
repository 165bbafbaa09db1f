"""Models parts package public surface.

Re-exports the request/result DTOs; `openai_stream_sdk.base.models` remains
the primary stable import path.
"""

from .api_error import APIError, APIErrorResponse
from .chat import (
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
from .model_result import ModelResult, ModelsResult
from .moderations import ModerationResult, ModerationsQuery, ModerationsResult
from .audio import (
    AudioFileType,
    AudioResponseFormat,
    AudioTranscriptionQuery,
    AudioTranscriptionResult,
    AudioTranslationQuery,
    AudioTranslationResult,
)
from .assistants import (
    AssistantResult,
    AssistantsQuery,
    AssistantsResult,
    AssistantTool,
    FunctionDeclaration,
)
from .threads import MessageQuery, ThreadsQuery, ThreadsResult

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
