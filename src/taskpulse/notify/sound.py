# src/taskpulse/notify/sound.py

from __future__ import annotations

import logging
import queue
import threading
import wave
from pathlib import Path
from typing import Any, Optional

from ..tasks.task_models import Priority

logger = logging.getLogger(__name__)

# (primary, fallback) or None as the stop signal
_QueueItem = Optional[tuple[Path, Optional[Path]]]


class SoundNotifier:
    """
    Best-effort audio notifications (NotificationSink).

    Design goals:
    - Never raises to the caller and never blocks the reminder tick:
      playback happens in a worker thread fed by a queue.
    - Alarm: try the priority sound, then the default alarm once, then give up.
    - Warning: single attempt, no fallback.
    - If audio dependencies or the output device are unavailable, the notifier
      disables itself and only logs.

    Expected layout under sounds_dir:
      priorities/high.wav, priorities/medium.wav, priorities/low.wav
      alarm.wav     (fallback alarm)
      warning.wav
    """

    def __init__(self, enabled: bool, sounds_dir: str | Path = "sounds"):
        self.enabled = bool(enabled)
        self.sounds_dir = Path(sounds_dir)

        self._queue: Optional["queue.Queue[_QueueItem]"] = None
        self._worker: Optional[threading.Thread] = None
        self._stop_requested = False

        self._sd: Any = None  # sounddevice module (runtime import)
        self._np: Any = None  # numpy module (runtime import)

        if not self.enabled:
            logger.info("Sound notifications disabled.")
            return

        # sounddevice raises OSError at import time when PortAudio is missing.
        try:
            import numpy as np
            import sounddevice as sd
        except Exception as e:
            self.enabled = False
            logger.warning(
                "Sound notifications are enabled, but the audio backend failed to load. "
                "Install PortAudio to hear alarms. Error: %s",
                repr(e),
            )
            return

        self._np = np
        self._sd = sd
        self._queue = queue.Queue()

        self._worker = threading.Thread(target=self._audio_worker, name="taskpulse-sound", daemon=True)
        self._worker.start()

        logger.info("Sound notifications ready (sounds_dir=%s).", self.sounds_dir)

    # ---- paths ----

    def alarm_path(self, priority: Priority | str) -> Path:
        return self.sounds_dir / "priorities" / f"{str(priority).lower()}.wav"

    def fallback_alarm_path(self) -> Path:
        return self.sounds_dir / "alarm.wav"

    def warning_path(self) -> Path:
        return self.sounds_dir / "warning.wav"

    # ---- NotificationSink ----

    def play_alarm(self, priority: Priority | str = Priority.HIGH) -> None:
        """Queue the priority alarm (no-op if disabled)."""
        self._enqueue((self.alarm_path(priority), self.fallback_alarm_path()))

    def play_warning(self) -> None:
        """Queue the warning sound (no-op if disabled)."""
        self._enqueue((self.warning_path(), None))

    def _enqueue(self, item: tuple[Path, Optional[Path]]) -> None:
        if not self.enabled or self._queue is None or self._stop_requested:
            logger.debug("Sound skipped (disabled): %s", item[0])
            return
        self._queue.put(item)

    # ---- worker ----

    def _audio_worker(self) -> None:
        logger.debug("Sound worker thread started.")
        assert self._queue is not None

        while True:
            item = self._queue.get()
            try:
                if item is None:
                    logger.debug("Sound worker received stop signal.")
                    return

                primary, fallback = item
                try:
                    self._play_file(primary)
                    continue
                except Exception as e:
                    logger.error("Playback failed for %s: %s", primary, repr(e))

                if fallback is None:
                    continue

                try:
                    self._play_file(fallback)
                except Exception as e:
                    logger.error("Fallback playback failed for %s: %s", fallback, repr(e))

            finally:
                self._queue.task_done()

    def _play_file(self, path: Path) -> None:
        """Decode a PCM WAV file and play it (blocking, worker thread only)."""
        np = self._np
        with wave.open(str(path), "rb") as wf:
            channels = wf.getnchannels()
            sample_width = wf.getsampwidth()
            rate = wf.getframerate()
            raw = wf.readframes(wf.getnframes())

        if sample_width == 1:
            # 8-bit WAV is unsigned; recentre to int16.
            data = (np.frombuffer(raw, dtype=np.uint8).astype(np.int16) - 128) << 8
        elif sample_width == 2:
            data = np.frombuffer(raw, dtype=np.int16)
        elif sample_width == 4:
            data = np.frombuffer(raw, dtype=np.int32)
        else:
            raise ValueError(f"unsupported sample width: {sample_width} bytes")

        self._sd.play(data.reshape(-1, channels), rate)
        self._sd.wait()

    # ---- lifecycle ----

    def wait_all(self) -> None:
        """Block until all queued sounds are processed (no-op if disabled)."""
        if not self.enabled or self._queue is None:
            return
        self._queue.join()

    def shutdown(self) -> None:
        """Request a clean shutdown of the worker (no-op if disabled)."""
        if not self.enabled or self._queue is None:
            return
        if self._stop_requested:
            return
        self._stop_requested = True

        logger.info("Stopping sound worker...")
        self._queue.put(None)

        if self._worker is not None:
            self._worker.join(timeout=2.0)

        logger.info("Sound worker stopped.")
