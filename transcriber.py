"""Speech-to-text adapter using DashScope qwen3-asr-flash.

The model accepts complete audio (file path, URL, or base64) and streams back
growing recognition results via ``stream=True``. The recorded PCM is wrapped
as a base64 WAV and the last non-empty chunk is taken as the transcript.
"""

from __future__ import annotations

import base64
import io
import logging
import wave
from typing import Callable, Optional

from errors import (
    AUTH_FAILED,
    MISSING_CREDENTIAL,
    NETWORK_ERROR,
    TRANSCRIPTION_FAILED,
)
from models import RecordedAudio, ServiceResult

try:
    import dashscope
except Exception:  # pragma: no cover
    dashscope = None  # type: ignore

logger = logging.getLogger(__name__)

ApiKeyProvider = Callable[[], Optional[str]]


def _pcm_to_wav_base64(
    pcm: bytes,
    sample_rate: int = 16000,
    channels: int = 1,
    sample_width: int = 2,
) -> str:
    """Convert raw PCM bytes to a base64-encoded WAV string."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)
    wav_bytes = buf.getvalue()
    return base64.b64encode(wav_bytes).decode("ascii")


def error_result(exc: Exception, fallback_code: str) -> ServiceResult:
    """Map an SDK/network exception to a failed result."""
    message = str(exc) or exc.__class__.__name__
    low = message.lower()
    if "401" in low or "auth" in low or "api key" in low:
        code = AUTH_FAILED
        retryable = False
    elif "timeout" in low or "network" in low or "connection" in low or isinstance(exc, ConnectionError):
        code = NETWORK_ERROR
        retryable = True
    else:
        code = fallback_code
        retryable = True
    return ServiceResult(success=False, code=code, message=message, retryable=retryable)


def _field(response: object, name: str) -> object:
    value = getattr(response, name, None)
    if value is None and isinstance(response, dict):
        value = response.get(name)
    return value


def status_error(response: object, fallback_code: str) -> Optional[ServiceResult]:
    """Return a failed result for a non-200 DashScope response, else None."""
    status = _field(response, "status_code")
    if status is None or status == 200:
        return None
    code = _field(response, "code") or ""
    message = _field(response, "message") or f"HTTP {status}"
    logger.warning("dashscope returned %s %s: %s", status, code, message)
    detail = " ".join(str(part) for part in (status, code, message) if part)
    return error_result(RuntimeError(detail), fallback_code)


class DashscopeTranscriber:
    def __init__(
        self,
        api_key_provider: ApiKeyProvider,
        model: str = "qwen3-asr-flash",
        request_timeout_s: float = 30.0,
    ) -> None:
        self._api_key_provider = api_key_provider
        self._model = model
        self._request_timeout_s = request_timeout_s

    def transcribe(self, audio: RecordedAudio) -> ServiceResult:
        if not audio.pcm16_bytes:
            return ServiceResult(success=True, text="")
        if dashscope is None:
            return ServiceResult(
                success=False,
                code=TRANSCRIPTION_FAILED,
                message="dashscope is not installed",
            )
        api_key = self._api_key_provider()
        if not api_key:
            return ServiceResult(
                success=False,
                code=MISSING_CREDENTIAL,
                message="No API key configured",
            )

        wav_b64 = _pcm_to_wav_base64(audio.pcm16_bytes, audio.sample_rate, audio.channels)
        logger.info("transcribing %.1fs of audio with %s", audio.duration_s, self._model)
        try:
            response = dashscope.MultiModalConversation.call(
                api_key=api_key,
                model=self._model,
                messages=[
                    {"role": "system", "content": [{"text": ""}]},
                    {"role": "user", "content": [{"audio": wav_b64}]},
                ],
                result_format="message",
                asr_options={"enable_itn": False},
                stream=True,
                timeout=self._request_timeout_s,
            )
            latest_text = ""
            for chunk in response:
                failure = status_error(chunk, TRANSCRIPTION_FAILED)
                if failure is not None:
                    return failure
                text = self._extract_text(chunk)
                if text:
                    latest_text = text
        except Exception as exc:
            logger.warning("transcription request failed: %s", exc)
            return error_result(exc, TRANSCRIPTION_FAILED)

        return ServiceResult(success=True, text=latest_text)

    def _extract_text(self, chunk: object) -> str:
        """Pull text from a dashscope streaming chunk dict."""
        if isinstance(chunk, dict):
            output = chunk.get("output") or {}
            choices = output.get("choices", [])
            if not choices:
                return ""
            message = choices[0].get("message", {})
            content = message.get("content", [])
            if not content:
                return ""
            value = content[0]
            if isinstance(value, dict):
                return str(value.get("text", ""))
        return ""
