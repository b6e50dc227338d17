"""Target language selection with case-insensitive prefix matching."""

from __future__ import annotations

import logging
from typing import Optional

from errors import INVALID_LANGUAGE, VoiceCoderError
from models import Language

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = Language.SWIFT


def match_language(name: str) -> Optional[Language]:
    """Resolve ``name`` to a language by exact name, then by prefix.

    Prefixes are checked in enumeration order, so an ambiguous prefix
    resolves to the first candidate (``"s"`` is Swift, never anything later).
    """
    wanted = name.strip().lower()
    if not wanted:
        return None
    for language in Language:
        if language.value == wanted:
            return language
    for language in Language:
        if language.value.startswith(wanted):
            return language
    return None


def valid_names() -> str:
    return ", ".join(language.display_name for language in Language)


class LanguageSelector:
    def __init__(self, default: Language = DEFAULT_LANGUAGE) -> None:
        self._current = default

    @property
    def current(self) -> Language:
        return self._current

    def set(self, name: str) -> Language:
        if not name.strip():
            raise VoiceCoderError(INVALID_LANGUAGE, "Please specify a language")
        language = match_language(name)
        if language is None:
            raise VoiceCoderError(
                INVALID_LANGUAGE,
                f"Unknown language '{name.strip()}'. Valid languages: {valid_names()}",
            )
        logger.debug("language %s -> %s", self._current.value, language.value)
        self._current = language
        return language
