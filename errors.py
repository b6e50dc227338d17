"""Shared error codes and user-facing messages."""

from __future__ import annotations

MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
INVALID_LANGUAGE = "INVALID_LANGUAGE"
NOT_RECORDING = "NOT_RECORDING"
ALREADY_RECORDING = "ALREADY_RECORDING"
RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
RECORDER_FAILED = "RECORDER_FAILED"
TRANSCRIPTION_FAILED = "TRANSCRIPTION_FAILED"
GENERATION_FAILED = "GENERATION_FAILED"
CLIPBOARD_FAILED = "CLIPBOARD_FAILED"
PERSISTENCE_FAILED = "PERSISTENCE_FAILED"
AUTH_FAILED = "AUTH_FAILED"
NETWORK_ERROR = "NETWORK_ERROR"
TIMEOUT = "TIMEOUT"

ERROR_MESSAGES = {
    MISSING_CREDENTIAL: "No API key set. Use 'api-key YOUR_KEY' or DASHSCOPE_API_KEY.",
    INVALID_LANGUAGE: "Unsupported language.",
    NOT_RECORDING: "Not recording.",
    ALREADY_RECORDING: "Already recording! Type 'stop' to finish.",
    RECORD_NOT_FOUND: "Entry not found.",
    RECORDER_FAILED: "Could not start the microphone.",
    TRANSCRIPTION_FAILED: "Transcription failed, please retry.",
    GENERATION_FAILED: "Code generation failed, please retry.",
    CLIPBOARD_FAILED: "Could not copy to clipboard.",
    PERSISTENCE_FAILED: "Could not save history.",
    AUTH_FAILED: "API key is invalid.",
    NETWORK_ERROR: "Network failed, please retry.",
    TIMEOUT: "The service did not answer in time.",
}


class VoiceCoderError(Exception):
    """Raised by command handlers; reported to the user by the session loop."""

    def __init__(self, code: str, message: str = "") -> None:
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, code)
        super().__init__(self.message)
