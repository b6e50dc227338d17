"""Persisted log of voice-to-code conversions.

Records are kept newest first, both in memory and on disk, so the file reads
in the same order ``history`` displays it. Every change rewrites the whole
file through a temporary sibling and ``os.replace``.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from errors import PERSISTENCE_FAILED, RECORD_NOT_FOUND, VoiceCoderError
from models import ConversionRecord

logger = logging.getLogger(__name__)

TRANSCRIPT_PREVIEW_CHARS = 40


def format_record_line(record: ConversionRecord, preview_chars: int = TRANSCRIPT_PREVIEW_CHARS) -> str:
    text = record.transcription
    if len(text) > preview_chars:
        text = text[:preview_chars] + "..."
    return f"[{record.short_id}] {record.language.value} - {text}"


class HistoryStore:
    def __init__(self, path: Path) -> None:
        self._path = path
        self._records: list[ConversionRecord] = []

    @property
    def path(self) -> Path:
        return self._path

    def __len__(self) -> int:
        return len(self._records)

    def load(self) -> None:
        """Replace in-memory records with the file contents; never raises."""
        self._records = []
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
            logger.warning("ignoring unreadable history file %s: %s", self._path, exc)
            return
        if not isinstance(data, list):
            logger.warning("ignoring history file %s: expected a list", self._path)
            return
        for item in data:
            try:
                self._records.append(ConversionRecord.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("skipping malformed history entry: %s", exc)
        logger.debug("loaded %d history records", len(self._records))

    def append(self, record: ConversionRecord) -> None:
        self._records.insert(0, record)
        self._save()

    def list(self, limit: Optional[int] = None) -> list[ConversionRecord]:
        if limit is None:
            return list(self._records)
        return self._records[: max(limit, 0)]

    def find_by_id_prefix(self, prefix: str) -> ConversionRecord:
        wanted = prefix.strip().lower()
        if wanted:
            for record in self._records:
                if record.id.lower().startswith(wanted):
                    return record
        raise VoiceCoderError(RECORD_NOT_FOUND, f"Entry not found: {prefix.strip()}")

    def clear(self) -> None:
        self._records = []
        self._save()

    def _save(self) -> None:
        payload = json.dumps([r.to_dict() for r in self._records], ensure_ascii=False, indent=2)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            logger.error("failed to write history file %s: %s", self._path, exc)
            raise VoiceCoderError(PERSISTENCE_FAILED, f"Could not save history: {exc}") from exc
