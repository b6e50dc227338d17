"""Code generation adapter using DashScope chat models."""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional

from errors import GENERATION_FAILED, MISSING_CREDENTIAL
from models import Language, ServiceResult
from transcriber import error_result, status_error

try:
    import dashscope
except Exception:  # pragma: no cover
    dashscope = None  # type: ignore

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You turn spoken programming requests into {language} code. "
    "Reply with a single self-contained snippet followed by a short usage example. "
    "Output only source code; put any explanation in code comments."
)

_FENCE_RE = re.compile(r"^```[\w+#.-]*[ \t]*\n(.*?)\n?```[ \t]*$", re.DOTALL | re.MULTILINE)


def strip_code_fences(text: str) -> str:
    """Return the first fenced block's body, or the text itself when unfenced."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip("\n")
    return text.strip()


class DashscopeCodeGenerator:
    def __init__(
        self,
        api_key_provider: Callable[[], Optional[str]],
        model: str = "qwen-coder-plus",
        request_timeout_s: float = 60.0,
    ) -> None:
        self._api_key_provider = api_key_provider
        self._model = model
        self._request_timeout_s = request_timeout_s

    def generate(self, transcript: str, language: Language) -> ServiceResult:
        if dashscope is None:
            return ServiceResult(
                success=False,
                code=GENERATION_FAILED,
                message="dashscope is not installed",
            )
        api_key = self._api_key_provider()
        if not api_key:
            return ServiceResult(
                success=False,
                code=MISSING_CREDENTIAL,
                message="No API key configured",
            )

        logger.info("generating %s code with %s", language.value, self._model)
        try:
            response = dashscope.Generation.call(
                api_key=api_key,
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT.format(language=language.display_name)},
                    {"role": "user", "content": transcript},
                ],
                result_format="message",
                timeout=self._request_timeout_s,
            )
        except Exception as exc:
            logger.warning("generation request failed: %s", exc)
            return error_result(exc, GENERATION_FAILED)

        failure = status_error(response, GENERATION_FAILED)
        if failure is not None:
            return failure

        content = self._extract_content(response)
        if not content.strip():
            return ServiceResult(
                success=False,
                code=GENERATION_FAILED,
                message="Empty response from code model",
                retryable=True,
            )
        return ServiceResult(success=True, text=strip_code_fences(content))

    def _extract_content(self, response: object) -> str:
        if not isinstance(response, dict):
            return ""
        output = response.get("output") or {}
        choices = output.get("choices") or []
        if choices:
            message = choices[0].get("message") or {}
            return str(message.get("content") or "")
        return str(output.get("text") or "")
