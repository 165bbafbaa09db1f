"""
Audio transcription and translation DTOs (``POST /audio/transcriptions``,
``POST /audio/translations``).

Both queries are sent as ``multipart/form-data``: ``to_multipart`` returns
the ``data`` and ``files`` mappings that ``httpx`` encodes. ``mpga`` uploads
are labelled as mp3, matching what the API expects.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class AudioFileType(str, Enum):
    FLAC = "flac"
    MP3 = "mp3"
    MPGA = "mpga"
    MP4 = "mp4"
    M4A = "m4a"
    MPEG = "mpeg"
    OGG = "ogg"
    WAV = "wav"
    WEBM = "webm"

    @property
    def file_name(self) -> str:
        ext = AudioFileType.MP3.value if self is AudioFileType.MPGA else self.value
        return f"speech.{ext}"

    @property
    def content_type(self) -> str:
        ext = AudioFileType.MP3.value if self is AudioFileType.MPGA else self.value
        return f"audio/{ext}"


class AudioResponseFormat(str, Enum):
    JSON = "json"
    TEXT = "text"
    VERBOSE_JSON = "verbose_json"
    SRT = "srt"
    VTT = "vtt"


class _AudioUpload(BaseModel):
    file: bytes
    file_type: AudioFileType
    model: str = Field(..., min_length=1)
    prompt: Optional[str] = None
    temperature: Optional[float] = None
    response_format: Optional[AudioResponseFormat] = None

    def _form_data(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"model": self.model}
        if self.prompt is not None:
            data["prompt"] = self.prompt
        if self.temperature is not None:
            data["temperature"] = str(self.temperature)
        if self.response_format is not None:
            data["response_format"] = self.response_format.value
        return data

    def to_multipart(self) -> Tuple[Dict[str, Any], Dict[str, Tuple[str, bytes, str]]]:
        files = {"file": (self.file_type.file_name, self.file, self.file_type.content_type)}
        return self._form_data(), files


class AudioTranscriptionQuery(_AudioUpload):
    """Transcription request.

    Attributes:
        file: Raw audio bytes.
        file_type: Container format; decides the uploaded file name and MIME type.
        model: Transcription model identifier.
        timestamp_granularities: ``"word"`` and/or ``"segment"``.
        include: Extra response sections (``"logprobs"``).
    """

    language: Optional[str] = None
    timestamp_granularities: List[str] = Field(default_factory=list)
    include: List[str] = Field(default_factory=list)

    def _form_data(self) -> Dict[str, Any]:
        data = super()._form_data()
        if self.language is not None:
            data["language"] = self.language
        if self.timestamp_granularities:
            data["timestamp_granularities[]"] = list(self.timestamp_granularities)
        if self.include:
            data["include[]"] = list(self.include)
        return data


class AudioTranscriptionResult(BaseModel):
    text: str
    language: Optional[str] = None
    duration: Optional[float] = None


class AudioTranslationQuery(_AudioUpload):
    """Translation request: speech in any supported language to English text."""


class AudioTranslationResult(BaseModel):
    text: str


__all__ = [
    "AudioFileType",
    "AudioResponseFormat",
    "AudioTranscriptionQuery",
    "AudioTranscriptionResult",
    "AudioTranslationQuery",
    "AudioTranslationResult",
]
