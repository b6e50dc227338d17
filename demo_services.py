"""Offline stand-ins for the microphone and the AI services.

Used by ``voicecoder --demo`` and by the tests; they answer with fixed text
so the command loop can be exercised without audio hardware or network.
"""

from __future__ import annotations

from queue import Queue
from typing import Optional

from models import AudioFrame, Language, RecordedAudio, ServiceResult

DEMO_TRANSCRIPT = (
    "Create a function that takes an array of integers and returns "
    "only the even numbers sorted in descending order"
)

DEMO_SNIPPETS = {
    Language.SWIFT: """func filterEvenNumbers(_ numbers: [Int]) -> [Int] {
    return numbers.filter { $0 % 2 == 0 }.sorted(by: >)
}

// Usage:
let numbers = [1, 2, 3, 4, 5, 6, 7, 8]
let evens = filterEvenNumbers(numbers)
print(evens) // [8, 6, 4, 2]""",
    Language.PYTHON: """def filter_even_numbers(numbers):
    return sorted([n for n in numbers if n % 2 == 0], reverse=True)

# Usage:
numbers = [1, 2, 3, 4, 5, 6, 7, 8]
evens = filter_even_numbers(numbers)
print(evens)  # [8, 6, 4, 2]""",
    Language.JAVASCRIPT: """function filterEvenNumbers(numbers) {
    return numbers.filter(n => n % 2 === 0).sort((a, b) => b - a);
}

// Usage:
const numbers = [1, 2, 3, 4, 5, 6, 7, 8];
const evens = filterEvenNumbers(numbers);
console.log(evens); // [8, 6, 4, 2]""",
}


class SilentRecorder:
    """Recorder that produces one short block of silence per take."""

    def __init__(self, sample_rate: int = 16000, duration_ms: int = 100) -> None:
        self.sample_rate = sample_rate
        self.duration_ms = duration_ms
        self._audio_queue: Queue[AudioFrame | None] | None = None

    def start(self, audio_queue: Queue[AudioFrame | None]) -> None:
        self._audio_queue = audio_queue

    def stop(self) -> None:
        if self._audio_queue is None:
            return
        n_samples = self.sample_rate * self.duration_ms // 1000
        self._audio_queue.put(AudioFrame(pcm16_bytes=b"\x00\x00" * n_samples, sample_rate=self.sample_rate))
        self._audio_queue.put(None)
        self._audio_queue = None


class DemoTranscriber:
    def __init__(self, transcript: str = DEMO_TRANSCRIPT) -> None:
        self.transcript = transcript
        self.calls: list[RecordedAudio] = []

    def transcribe(self, audio: RecordedAudio) -> ServiceResult:
        self.calls.append(audio)
        return ServiceResult(success=True, text=self.transcript)


class DemoCodeGenerator:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Language]] = []

    def generate(self, transcript: str, language: Language) -> ServiceResult:
        self.calls.append((transcript, language))
        snippet = DEMO_SNIPPETS.get(language)
        if snippet is None:
            snippet = f"// Generated code for {language.value}\n// Based on: {transcript}"
        return ServiceResult(success=True, text=snippet)


class MemoryCredentialStore:
    def __init__(self, api_key: Optional[str] = None) -> None:
        self._api_key = api_key

    def get_api_key(self) -> Optional[str]:
        return self._api_key or None

    def set_api_key(self, key: str) -> None:
        self._api_key = key.strip()
