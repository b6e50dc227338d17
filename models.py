"""Core data models for the app."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class SessionState(str, Enum):
    IDLE = "IDLE"
    RECORDING = "RECORDING"


class Language(str, Enum):
    """Supported target languages, in matching order."""

    SWIFT = "swift"
    PYTHON = "python"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    DART = "dart"
    RUST = "rust"
    GO = "go"
    KOTLIN = "kotlin"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    Language.SWIFT: "Swift",
    Language.PYTHON: "Python",
    Language.JAVASCRIPT: "JavaScript",
    Language.TYPESCRIPT: "TypeScript",
    Language.DART: "Dart",
    Language.RUST: "Rust",
    Language.GO: "Go",
    Language.KOTLIN: "Kotlin",
}


@dataclass
class AudioFrame:
    pcm16_bytes: bytes
    sample_rate: int = 16000
    channels: int = 1


@dataclass
class RecordedAudio:
    """A finished recording handed to the transcriber."""

    pcm16_bytes: bytes
    sample_rate: int = 16000
    channels: int = 1

    @property
    def duration_s(self) -> float:
        bytes_per_second = self.sample_rate * self.channels * 2
        if not bytes_per_second:
            return 0.0
        return len(self.pcm16_bytes) / bytes_per_second


@dataclass
class ServiceResult:
    success: bool
    text: str = ""
    code: str = ""
    message: str = ""
    retryable: bool = False


@dataclass
class ClipboardResult:
    success: bool
    reason: str


@dataclass(frozen=True)
class ConversionRecord:
    transcription: str
    code: str
    language: Language
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def short_id(self) -> str:
        return self.id[:8]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "transcription": self.transcription,
            "code": self.code,
            "language": self.language.value,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConversionRecord":
        """Build a record from its JSON form; raises ValueError/KeyError/TypeError on bad input."""
        timestamp = datetime.fromisoformat(str(data["timestamp"]))
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return cls(
            id=str(data["id"]),
            transcription=str(data["transcription"]),
            code=str(data["code"]),
            language=Language(str(data["language"]).lower()),
            timestamp=timestamp,
        )
