"""Interactive command loop driving record -> transcribe -> generate."""

from __future__ import annotations

import logging
import threading
from queue import Queue
from typing import Callable, Optional

from errors import (
    ALREADY_RECORDING,
    CLIPBOARD_FAILED,
    ERROR_MESSAGES,
    GENERATION_FAILED,
    MISSING_CREDENTIAL,
    NOT_RECORDING,
    PERSISTENCE_FAILED,
    RECORD_NOT_FOUND,
    RECORDER_FAILED,
    TIMEOUT,
    TRANSCRIPTION_FAILED,
    VoiceCoderError,
)
from history import HistoryStore, format_record_line
from interfaces import Clipboard, CodeGenerator, CredentialStore, Recorder, Transcriber
from languages import DEFAULT_LANGUAGE, LanguageSelector
from models import AudioFrame, ConversionRecord, Language, ServiceResult, SessionState
from recorder import collect_audio

logger = logging.getLogger(__name__)

StateCallback = Callable[[SessionState, SessionState], None]
OutputCallback = Callable[[str], None]

COMMAND_ALIASES = {
    "record": "record",
    "r": "record",
    "stop": "stop",
    "s": "stop",
    "lang": "lang",
    "language": "lang",
    "l": "lang",
    "languages": "languages",
    "langs": "languages",
    "history": "history",
    "h": "history",
    "copy": "copy",
    "c": "copy",
    "clear": "clear",
    "api-key": "api_key",
    "help": "help",
    "?": "help",
    "quit": "quit",
    "q": "quit",
    "exit": "quit",
}

WARNING_CODES = {ALREADY_RECORDING, NOT_RECORDING}

HELP_TEXT = """Commands:
  record, r           Start voice recording
  stop, s             Stop, transcribe and generate code
  lang, l <language>  Set target language
  languages, langs    List supported languages
  history, h          Show recent conversions
  copy, c [id]        Copy code by id prefix, or the last result
  clear               Delete all history
  api-key <key>       Set the DashScope API key
  help, ?             Show help
  quit, q, exit       Exit"""

RULE = "━" * 50


def parse_command(line: str) -> tuple[str, str]:
    """Split a line into a case-folded command and the untouched remainder."""
    parts = line.strip().split(None, 1)
    if not parts:
        return "", ""
    command = parts[0].lower()
    argument = parts[1] if len(parts) > 1 else ""
    return command, argument


class Session:
    def __init__(
        self,
        recorder: Recorder,
        transcriber: Transcriber,
        code_generator: CodeGenerator,
        clipboard: Clipboard,
        credentials: CredentialStore,
        history: HistoryStore,
        language: Language = DEFAULT_LANGUAGE,
        service_timeout_s: float = 60.0,
        history_limit: int = 5,
        requires_credential: bool = True,
        output: OutputCallback = print,
        on_state_change: Optional[StateCallback] = None,
    ) -> None:
        self._recorder = recorder
        self._transcriber = transcriber
        self._code_generator = code_generator
        self._clipboard = clipboard
        self._credentials = credentials
        self._history = history
        self._languages = LanguageSelector(language)
        self._service_timeout_s = service_timeout_s
        self._history_limit = history_limit
        self._requires_credential = requires_credential
        self._output = output
        self._on_state_change = on_state_change

        self._state = SessionState.IDLE
        self._audio_queue: Queue[AudioFrame | None] = Queue()
        self._last_code: Optional[str] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_language(self) -> Language:
        return self._languages.current

    @property
    def last_generated_code(self) -> Optional[str]:
        return self._last_code

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run(self, read_line: Optional[Callable[[str], str]] = None) -> int:
        read_line = read_line or input
        self._say("🎤 VoiceCoder - Voice to Code\n")
        self._say(HELP_TEXT)
        self._say(f"\nCurrent language: {self.current_language.display_name}")
        self.warn_if_missing_credential()
        while True:
            try:
                line = read_line("> ")
            except (EOFError, KeyboardInterrupt):
                self._say("")
                line = "quit"
            if not self.handle_line(line):
                return 0

    def warn_if_missing_credential(self) -> None:
        if self._requires_credential and not self._credentials.get_api_key():
            self._say("⚠️  WARNING: No DASHSCOPE_API_KEY set")
            self._say("   Set the environment variable or use the 'api-key' command\n")

    def handle_line(self, line: str) -> bool:
        """Run one input line; returns False once the user quits."""
        command, argument = parse_command(line)
        name = COMMAND_ALIASES.get(command)
        if name is None:
            logger.debug("unknown command %r", command)
            self._say("Unknown command. Type 'help' for options.")
            return True
        if name == "quit":
            self.cancel()
            self._say("👋 Goodbye!")
            return False

        handler = getattr(self, f"_cmd_{name}")
        try:
            handler(argument)
        except VoiceCoderError as exc:
            self._report(exc)
        except KeyboardInterrupt:
            logger.info("%s interrupted", name)
            self.cancel()
            self._say("\n🚫 Cancelled")
        return True

    def cancel(self) -> None:
        """Abandon an in-progress recording without transcribing it."""
        if self._state != SessionState.RECORDING:
            return
        self._safe_stop_recorder()
        self._transition(SessionState.IDLE)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _cmd_record(self, argument: str) -> None:
        if self._state == SessionState.RECORDING:
            raise VoiceCoderError(ALREADY_RECORDING)
        self._audio_queue = Queue()
        try:
            self._recorder.start(self._audio_queue)
        except Exception as exc:
            logger.warning("recorder failed to start: %s", exc)
            raise VoiceCoderError(RECORDER_FAILED, f"Could not start recording: {exc}") from exc
        self._transition(SessionState.RECORDING)
        self._say("🎤 Recording... Speak your code request.")
        self._say("   Type 'stop' when finished.")

    def _cmd_stop(self, argument: str) -> None:
        if self._state != SessionState.RECORDING:
            raise VoiceCoderError(NOT_RECORDING)
        self._safe_stop_recorder()
        self._transition(SessionState.IDLE)
        self._say("🛑 Recording stopped")

        audio = collect_audio(self._audio_queue)
        if self._requires_credential and not self._credentials.get_api_key():
            raise VoiceCoderError(MISSING_CREDENTIAL)

        self._say("🤖 Transcribing...")
        result = self._call_service(
            lambda: self._transcriber.transcribe(audio), "transcription", TRANSCRIPTION_FAILED
        )
        self._raise_on_failure(result, TRANSCRIPTION_FAILED, "Transcription failed")
        transcript = result.text.strip()
        if not transcript:
            self._say("⚠️  No speech detected, nothing to generate.")
            return

        language = self.current_language
        self._say(f'📝 Transcription: "{transcript}"')
        self._say(f"💻 Generating {language.display_name} code...")
        result = self._call_service(
            lambda: self._code_generator.generate(transcript, language), "generation", GENERATION_FAILED
        )
        self._raise_on_failure(result, GENERATION_FAILED, "Code generation failed")
        code = result.text

        self._say("\n" + RULE)
        self._say(code)
        self._say(RULE)

        self._last_code = code
        record = ConversionRecord(transcription=transcript, code=code, language=language)
        try:
            self._history.append(record)
        except VoiceCoderError as exc:
            self._report(exc)
        logger.info("stored conversion %s (%s)", record.short_id, language.value)

        self._copy_to_clipboard(code)
        self._say("\n✅ Code copied to clipboard!")

    def _cmd_lang(self, argument: str) -> None:
        language = self._languages.set(argument)
        self._say(f"✅ Language set to {language.display_name}")

    def _cmd_languages(self, argument: str) -> None:
        self._say("Supported languages:")
        for language in Language:
            marker = "*" if language == self.current_language else " "
            self._say(f" {marker} {language.display_name}")

    def _cmd_history(self, argument: str) -> None:
        records = self._history.list(self._history_limit)
        if not records:
            self._say("📭 No history yet")
            return
        self._say("📜 Recent conversions:\n")
        for record in records:
            self._say(format_record_line(record))

    def _cmd_copy(self, argument: str) -> None:
        if argument.strip():
            code = self._history.find_by_id_prefix(argument).code
        elif self._last_code is not None:
            code = self._last_code
        elif len(self._history):
            code = self._history.list(1)[0].code
        else:
            raise VoiceCoderError(RECORD_NOT_FOUND, "Nothing to copy yet")
        self._copy_to_clipboard(code)
        self._say("✅ Copied to clipboard")

    def _cmd_clear(self, argument: str) -> None:
        self._history.clear()
        self._say("🗑️  History cleared")

    def _cmd_api_key(self, argument: str) -> None:
        key = argument.strip()
        if not key:
            raise VoiceCoderError(MISSING_CREDENTIAL, "Please specify an API key")
        try:
            self._credentials.set_api_key(key)
        except OSError as exc:
            raise VoiceCoderError(PERSISTENCE_FAILED, f"Could not save API key: {exc}") from exc
        self._say("✅ API key saved")

    def _cmd_help(self, argument: str) -> None:
        self._say(HELP_TEXT)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _call_service(
        self,
        call: Callable[[], ServiceResult],
        what: str,
        fallback_code: str,
    ) -> ServiceResult:
        """Run a collaborator call on a worker thread, bounded by the timeout."""
        outcome: list[ServiceResult] = []
        done = threading.Event()

        def _worker() -> None:
            try:
                outcome.append(call())
            except Exception as exc:
                logger.exception("%s raised", what)
                outcome.append(ServiceResult(success=False, code=fallback_code, message=str(exc)))
            finally:
                done.set()

        threading.Thread(target=_worker, name=f"voicecoder-{what}", daemon=True).start()
        if not done.wait(timeout=self._service_timeout_s):
            logger.warning("%s timed out after %.1fs", what, self._service_timeout_s)
            return ServiceResult(
                success=False,
                code=TIMEOUT,
                message=f"{what} timed out after {self._service_timeout_s:g}s",
                retryable=True,
            )
        return outcome[0]

    @staticmethod
    def _raise_on_failure(result: ServiceResult, fallback_code: str, prefix: str) -> None:
        if result.success:
            return
        code = result.code or fallback_code
        detail = result.message or ERROR_MESSAGES.get(code, code)
        raise VoiceCoderError(code, f"{prefix}: {detail}")

    def _copy_to_clipboard(self, text: str) -> None:
        try:
            result = self._clipboard.set_text(text)
        except Exception as exc:
            logger.warning("clipboard raised: %s", exc)
            raise VoiceCoderError(CLIPBOARD_FAILED, f"Could not copy to clipboard: {exc}") from exc
        if not result.success:
            raise VoiceCoderError(CLIPBOARD_FAILED, f"Could not copy to clipboard: {result.reason}")

    def _report(self, exc: VoiceCoderError) -> None:
        if exc.code in WARNING_CODES:
            self._say(f"⚠️  {exc.message}")
        else:
            self._say(f"❌ {exc.message}")

    def _say(self, text: str) -> None:
        self._output(text)

    def _safe_stop_recorder(self) -> None:
        try:
            self._recorder.stop()
        except Exception as exc:
            logger.warning("recorder failed to stop cleanly: %s", exc)

    def _transition(self, to_state: SessionState) -> None:
        from_state = self._state
        if from_state == to_state:
            return
        self._state = to_state
        logger.debug("state %s -> %s", from_state.value, to_state.value)
        if self._on_state_change:
            self._on_state_change(from_state, to_state)
