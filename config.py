"""Environment-driven settings and the JSON credential store."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

API_KEY_ENV = "DASHSCOPE_API_KEY"


def _default_home() -> Path:
    return Path.home() / ".config" / "voicecoder"


def _coerce_float(value: Optional[str], default: float) -> float:
    try:
        return float(value) if value is not None else default
    except ValueError:
        logger.warning("invalid number %r, using %s", value, default)
        return default


def _coerce_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        logger.warning("invalid integer %r, using %s", value, default)
        return default


@dataclass
class AppConfig:
    """Application configuration loaded from environment variables."""

    api_key: str = ""
    home: Path = _default_home()
    default_language: str = "swift"
    asr_model: str = "qwen3-asr-flash"
    code_model: str = "qwen-coder-plus"
    service_timeout_s: float = 60.0
    history_limit: int = 5
    log_level: str = "WARNING"
    log_file: str = ""

    @property
    def history_path(self) -> Path:
        return self.home / "history.json"

    @property
    def config_path(self) -> Path:
        return self.home / "config.json"

    @staticmethod
    def from_env() -> "AppConfig":
        """Load config from .env file and environment variables."""
        load_dotenv()
        home = os.getenv("VOICECODER_HOME", "").strip()
        return AppConfig(
            api_key=os.getenv(API_KEY_ENV, "").strip(),
            home=Path(home).expanduser() if home else _default_home(),
            default_language=os.getenv("VOICECODER_LANGUAGE", "swift"),
            asr_model=os.getenv("VOICECODER_ASR_MODEL", "qwen3-asr-flash"),
            code_model=os.getenv("VOICECODER_CODE_MODEL", "qwen-coder-plus"),
            service_timeout_s=_coerce_float(os.getenv("VOICECODER_TIMEOUT_S"), 60.0),
            history_limit=_coerce_int(os.getenv("VOICECODER_HISTORY_LIMIT"), 5),
            log_level=os.getenv("LOG_LEVEL", "WARNING").upper(),
            log_file=os.getenv("LOG_FILE", "").strip(),
        )


class JsonConfigStore:
    """Credential store backed by a user-only JSON file.

    A key saved with ``set_api_key`` wins over ``env_api_key``; an empty
    stored value counts as absent.
    """

    def __init__(self, path: Path | None = None, env_api_key: str = "") -> None:
        self._path = path or _default_home() / "config.json"
        self._env_api_key = env_api_key

    def get_api_key(self) -> Optional[str]:
        data = self._read_all()
        stored = data.get("api_key")
        if not isinstance(stored, str):
            stored = ""
        return stored.strip() or self._env_api_key or None

    def set_api_key(self, key: str) -> None:
        data = self._read_all()
        data["api_key"] = key.strip()
        self._write_all(data)

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        if hasattr(os, "fchmod"):
            os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(json.dumps(data, ensure_ascii=False, indent=2))
