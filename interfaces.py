"""Protocol interfaces used by Session."""

from __future__ import annotations

from queue import Queue
from typing import Optional, Protocol

from models import AudioFrame, ClipboardResult, Language, RecordedAudio, ServiceResult


class Recorder(Protocol):
    def start(self, audio_queue: Queue[AudioFrame | None]) -> None: ...

    def stop(self) -> None: ...


class Transcriber(Protocol):
    def transcribe(self, audio: RecordedAudio) -> ServiceResult: ...


class CodeGenerator(Protocol):
    def generate(self, transcript: str, language: Language) -> ServiceResult: ...


class Clipboard(Protocol):
    def set_text(self, text: str) -> ClipboardResult: ...


class CredentialStore(Protocol):
    def get_api_key(self) -> Optional[str]: ...

    def set_api_key(self, key: str) -> None: ...
