"""System clipboard sink."""

from __future__ import annotations

import logging

from errors import CLIPBOARD_FAILED
from models import ClipboardResult

try:
    import pyperclip
except Exception:  # pragma: no cover
    pyperclip = None  # type: ignore

logger = logging.getLogger(__name__)


class PyperclipClipboard:
    def set_text(self, text: str) -> ClipboardResult:
        if pyperclip is None:
            return ClipboardResult(success=False, reason="pyperclip is not installed")
        try:
            pyperclip.copy(text)
        except Exception as exc:
            logger.warning("clipboard copy failed: %s", exc)
            return ClipboardResult(success=False, reason=f"{CLIPBOARD_FAILED}: {exc}")
        return ClipboardResult(success=True, reason="ok")
