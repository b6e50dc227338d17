"""Application entrypoint."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from clipboard import PyperclipClipboard
from codegen import DashscopeCodeGenerator
from config import AppConfig, JsonConfigStore
from demo_services import DemoCodeGenerator, DemoTranscriber, SilentRecorder
from history import HistoryStore
from languages import DEFAULT_LANGUAGE, match_language
from recorder import SoundDeviceRecorder
from session import Session
from transcriber import DashscopeTranscriber

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="voicecoder", description="Voice to code from the terminal")
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or WARNING)")
    parser.add_argument("--language", default=None, help="Initial target language")
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use canned transcription and code instead of the microphone and DashScope",
    )
    return parser


def _configure_logging(level_name: str, log_file: str = "") -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, str(level_name or "").upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=handlers,
    )


def build_session(config: AppConfig, demo: bool = False, language_name: str | None = None) -> Session:
    credentials = JsonConfigStore(path=config.config_path, env_api_key=config.api_key)
    history = HistoryStore(config.history_path)
    history.load()

    language = match_language(language_name or config.default_language)
    if language is None:
        logger.warning("unknown default language %r, using %s", language_name or config.default_language,
                       DEFAULT_LANGUAGE.value)
        language = DEFAULT_LANGUAGE

    if demo:
        recorder = SilentRecorder()
        transcriber = DemoTranscriber()
        code_generator = DemoCodeGenerator()
    else:
        recorder = SoundDeviceRecorder()
        transcriber = DashscopeTranscriber(credentials.get_api_key, model=config.asr_model)
        code_generator = DashscopeCodeGenerator(credentials.get_api_key, model=config.code_model)

    return Session(
        recorder=recorder,
        transcriber=transcriber,
        code_generator=code_generator,
        clipboard=PyperclipClipboard(),
        credentials=credentials,
        history=history,
        language=language,
        service_timeout_s=config.service_timeout_s,
        history_limit=config.history_limit,
        requires_credential=not demo,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(list(argv) if argv is not None else None)
    config = AppConfig.from_env()
    _configure_logging(args.log_level or config.log_level, config.log_file)
    logger.debug("config home %s", config.home)

    session = build_session(config, demo=args.demo, language_name=args.language)
    return session.run()


if __name__ == "__main__":
    raise SystemExit(main())
