from __future__ import annotations

from pathlib import Path

import main
from config import AppConfig
from demo_services import DemoTranscriber
from models import Language
from recorder import SoundDeviceRecorder
from transcriber import DashscopeTranscriber


def test_build_session_demo_wiring(tmp_path: Path) -> None:
    config = AppConfig(api_key="env-key", home=tmp_path, default_language="kot")

    session = main.build_session(config, demo=True)

    assert session.current_language == Language.KOTLIN
    assert isinstance(session._transcriber, DemoTranscriber)


def test_build_session_real_wiring_and_language_flag(tmp_path: Path) -> None:
    config = AppConfig(home=tmp_path, default_language="nonsense")

    session = main.build_session(config, language_name="ty")

    assert session.current_language == Language.TYPESCRIPT
    assert isinstance(session._transcriber, DashscopeTranscriber)
    assert isinstance(session._recorder, SoundDeviceRecorder)


def test_unknown_default_language_falls_back(tmp_path: Path) -> None:
    session = main.build_session(AppConfig(home=tmp_path, default_language="cobol"))
    assert session.current_language == Language.SWIFT


def test_main_demo_run_persists_history(monkeypatch, tmp_path: Path) -> None:  # noqa: ANN001
    monkeypatch.setattr("config.load_dotenv", lambda: False)
    monkeypatch.setenv("VOICECODER_HOME", str(tmp_path))
    monkeypatch.setenv("DASHSCOPE_API_KEY", "demo-key")
    monkeypatch.setattr("clipboard.pyperclip", None)
    commands = iter(["lang python", "record", "stop", "quit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(commands))

    assert main.main(["--demo"]) == 0

    reloaded = main.build_session(AppConfig(home=tmp_path), demo=True)
    assert len(reloaded._history) == 1
    assert reloaded._history.list()[0].language == Language.PYTHON


def test_main_demo_runs_without_api_key(monkeypatch, tmp_path: Path) -> None:  # noqa: ANN001
    monkeypatch.setattr("config.load_dotenv", lambda: False)
    monkeypatch.setenv("VOICECODER_HOME", str(tmp_path))
    monkeypatch.delenv("DASHSCOPE_API_KEY", raising=False)
    monkeypatch.setattr("clipboard.pyperclip", None)
    commands = iter(["record", "stop", "quit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(commands))

    assert main.main(["--demo"]) == 0

    reloaded = main.build_session(AppConfig(home=tmp_path), demo=True)
    assert len(reloaded._history) == 1
