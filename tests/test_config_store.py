from __future__ import annotations

import stat
from pathlib import Path

from config import AppConfig, JsonConfigStore


def test_api_key_read_write(tmp_path: Path) -> None:
    path = tmp_path / "voicecoder" / "config.json"
    store = JsonConfigStore(path=path)

    assert store.get_api_key() is None

    store.set_api_key("  abc ")

    reloaded = JsonConfigStore(path=path)
    assert reloaded.get_api_key() == "abc"
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_saved_key_wins_over_environment(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    store = JsonConfigStore(path=path, env_api_key="from-env")
    assert store.get_api_key() == "from-env"

    store.set_api_key("saved")
    assert store.get_api_key() == "saved"


def test_config_invalid_json_fallback(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{invalid", encoding="utf-8")

    store = JsonConfigStore(path=path, env_api_key="env")
    assert store.get_api_key() == "env"

    store.set_api_key("fresh")
    assert JsonConfigStore(path=path).get_api_key() == "fresh"


def test_app_config_from_env(monkeypatch, tmp_path: Path) -> None:  # noqa: ANN001
    monkeypatch.setattr("config.load_dotenv", lambda: False)
    monkeypatch.setenv("DASHSCOPE_API_KEY", " sk-env ")
    monkeypatch.setenv("VOICECODER_HOME", str(tmp_path))
    monkeypatch.setenv("VOICECODER_LANGUAGE", "rust")
    monkeypatch.setenv("VOICECODER_TIMEOUT_S", "not-a-number")
    monkeypatch.setenv("VOICECODER_HISTORY_LIMIT", "9")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = AppConfig.from_env()

    assert config.api_key == "sk-env"
    assert config.history_path == tmp_path / "history.json"
    assert config.config_path == tmp_path / "config.json"
    assert config.default_language == "rust"
    assert config.service_timeout_s == 60.0
    assert config.history_limit == 9
    assert config.log_level == "DEBUG"


def test_app_config_defaults(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr("config.load_dotenv", lambda: False)
    for name in ("DASHSCOPE_API_KEY", "VOICECODER_HOME", "VOICECODER_LANGUAGE", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    config = AppConfig.from_env()

    assert config.api_key == ""
    assert config.home == Path.home() / ".config" / "voicecoder"
    assert config.default_language == "swift"
    assert config.log_level == "WARNING"


def test_existing_world_readable_file_is_restricted(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{}", encoding="utf-8")
    path.chmod(0o644)

    JsonConfigStore(path=path).set_api_key("secret")

    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_non_string_stored_key_counts_as_absent(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text('{"api_key": null}', encoding="utf-8")

    assert JsonConfigStore(path=path).get_api_key() is None
    assert JsonConfigStore(path=path, env_api_key="env").get_api_key() == "env"
