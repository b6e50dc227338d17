"""Microphone recorder adapter."""

from __future__ import annotations

import logging
import threading
from queue import Empty, Queue
from typing import Any

from models import AudioFrame, RecordedAudio

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)


def collect_audio(
    audio_queue: Queue[AudioFrame | None],
    sample_rate: int = 16000,
    channels: int = 1,
    timeout_s: float = 1.0,
) -> RecordedAudio:
    """Drain frames up to the stop sentinel into one recording.

    Stops early if no frame arrives within ``timeout_s``.
    """
    pcm = bytearray()
    while True:
        try:
            frame = audio_queue.get(timeout=timeout_s)
        except Empty:
            logger.warning("audio queue drained without sentinel")
            break
        if frame is None:  # Sentinel
            break
        pcm.extend(frame.pcm16_bytes)
        sample_rate = frame.sample_rate
        channels = frame.channels
    return RecordedAudio(pcm16_bytes=bytes(pcm), sample_rate=sample_rate, channels=channels)


class SoundDeviceRecorder:
    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        chunk_ms: int = 100,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_ms = chunk_ms
        self._stream: Any = None
        self._running = False
        self._lock = threading.Lock()
        self._audio_queue: Queue[AudioFrame | None] | None = None

    def start(self, audio_queue: Queue[AudioFrame | None]) -> None:
        with self._lock:
            if self._running:
                return
            if sd is None:
                raise RuntimeError("sounddevice is not installed")
            self._audio_queue = audio_queue
            blocksize = int(self.sample_rate * (self.chunk_ms / 1000.0))
            self._stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="int16",
                blocksize=blocksize,
                callback=self._on_audio,
            )
            self._stream.start()
            self._running = True
            logger.debug("input stream started at %d Hz", self.sample_rate)

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            if self._stream is not None:
                self._stream.stop()
                self._stream.close()
                self._stream = None
            self._emit_sentinel()

    def _on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        if not self._running or self._audio_queue is None:
            return
        if np is None:
            return
        if status:
            logger.debug("input stream status: %s", status)
        payload = np.asarray(indata, dtype=np.int16).tobytes()
        frame = AudioFrame(
            pcm16_bytes=payload,
            sample_rate=self.sample_rate,
            channels=self.channels,
        )
        self._audio_queue.put(frame)

    def _emit_sentinel(self) -> None:
        if self._audio_queue is None:
            return
        self._audio_queue.put(None)
